"""Order intake and tracking API."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..database import get_db
from ..deps import get_actor, get_notifier, get_optional_actor, http_error
from ..exceptions import OrderFlowError
from ..services import orders as order_service
from ..services.notifier import Notifier
from ..services.workflow import Actor, OrderStatus, SurveyReport, WorkflowAction, allowed_actions

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("/", response_model=schemas.PaginatedOrders)
def list_orders(
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=500),
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    sales_id: Optional[str] = Query(None),
    cmo_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, alias="q"),
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    total, items = order_service.list_orders(
        db,
        actor=actor,
        status=status_filter.value if status_filter else None,
        sales_id=sales_id,
        cmo_id=cmo_id,
        search=search,
        skip=skip,
        limit=limit,
    )
    return schemas.PaginatedOrders(total=total, items=items)


@router.get("/stats", response_model=schemas.OrderStats)
def order_stats(actor: Optional[Actor] = Depends(get_optional_actor), db: Session = Depends(get_db)):
    counts = order_service.status_counts(db, actor)
    return schemas.OrderStats(total=sum(counts.values()), by_status=counts)


@router.post("/", response_model=schemas.OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: schemas.OrderCreate,
    actor: Actor = Depends(get_actor),
    notifier: Notifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    try:
        return order_service.create_order(db, payload.model_dump(), actor, notifier)
    except OrderFlowError as exc:
        raise http_error(exc) from exc


@router.get("/{order_id}", response_model=schemas.OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    order = db.get(models.Order, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order tidak ditemukan")
    return order


@router.get("/{order_id}/actions", response_model=List[WorkflowAction])
def list_allowed_actions(order_id: int, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    order = db.get(models.Order, order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order tidak ditemukan")
    return allowed_actions(order.status, actor.role)


@router.post("/{order_id}/actions", response_model=schemas.OrderOut)
def run_action(
    order_id: int,
    payload: schemas.OrderActionIn,
    actor: Actor = Depends(get_actor),
    notifier: Notifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    survey = None
    if payload.action is WorkflowAction.SURVEY:
        survey = SurveyReport(
            tanggal_survey=payload.tanggal_survey,
            checklist=payload.checklist,
            foto_survey=payload.foto_survey,
        )
    try:
        return order_service.apply_action(
            db,
            order_id,
            actor,
            payload.action,
            payload.note,
            slik_result=payload.hasil_slik,
            survey=survey,
            notifier=notifier,
        )
    except OrderFlowError as exc:
        raise http_error(exc) from exc


@router.get("/{order_id}/notes", response_model=List[schemas.OrderNoteOut])
def list_notes(order_id: int, db: Session = Depends(get_db)):
    if db.get(models.Order, order_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order tidak ditemukan")
    return db.scalars(
        select(models.OrderNote).where(models.OrderNote.order_id == order_id).order_by(models.OrderNote.id)
    ).all()


@router.post("/{order_id}/notes", response_model=schemas.OrderOut, status_code=status.HTTP_201_CREATED)
def add_note(
    order_id: int,
    payload: schemas.OrderNoteIn,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    try:
        return order_service.apply_action(db, order_id, actor, WorkflowAction.ADD_NOTE, payload.note)
    except OrderFlowError as exc:
        raise http_error(exc) from exc
