"""FastAPI entrypoint: order pipeline API plus a small status dashboard."""

import logging
from datetime import datetime
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import get_settings
from .database import Base, engine, get_db
from .models import Order
from .routers import activities, dealers, notifications, orders, programs, simulations, users
from .services.orders import status_counts

settings = get_settings()
TEMPLATE_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.app_name, version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "ok", "environment": settings.environment}

    @app.get("/", response_class=HTMLResponse, tags=["Dashboard"])
    def dashboard(request: Request, db: Session = Depends(get_db)):
        counts = status_counts(db)
        latest_orders = db.scalars(select(Order).order_by(Order.updated_at.desc(), Order.id.desc()).limit(20)).all()

        context = {
            "request": request,
            "orders": [
                {
                    "id": item.id,
                    "nama_nasabah": item.nama_nasabah,
                    "type_unit": item.type_unit,
                    "dealer": item.dealer,
                    "sales_name": item.sales_name,
                    "cmo_name": item.cmo_name or "-",
                    "otr": f"Rp {item.otr:,.0f}".replace(",", "."),
                    "status": item.status,
                    "updated_at": item.updated_at.strftime("%Y-%m-%d %H:%M"),
                }
                for item in latest_orders
            ],
            "stats": {"total": sum(counts.values()), "by_status": counts},
            "now": datetime.now().strftime("%Y-%m-%d %H:%M"),
        }
        return templates.TemplateResponse(request, "dashboard.html", context)

    app.include_router(orders.router)
    app.include_router(programs.router)
    app.include_router(dealers.router)
    app.include_router(users.router)
    app.include_router(simulations.router)
    app.include_router(notifications.router)
    app.include_router(activities.router)

    return app


app = create_app()

# Create tables on import (fast path for demo; for production prefer Alembic)
Base.metadata.create_all(bind=engine)
