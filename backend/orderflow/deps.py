"""Shared FastAPI dependencies."""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from .database import get_db
from .exceptions import (
    ActionNotAllowed,
    BelowMinimumDownPayment,
    IllegalTransition,
    OrderFlowError,
    OrderNotFound,
)
from .services.notifier import Notifier, RecordNotifier
from .services.workflow import Actor, UserRole


def get_optional_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_name: Optional[str] = Header(None),
    x_actor_role: Optional[str] = Header(None),
) -> Optional[Actor]:
    """Acting user taken from the X-Actor-* headers, if any were sent."""
    if not (x_actor_id or x_actor_role):
        return None
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Header X-Actor-Id dan X-Actor-Role wajib diisi")
    try:
        role = UserRole(x_actor_role.strip().lower())
    except ValueError as exc:
        raise HTTPException(
            status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Role tidak dikenal: {x_actor_role}"
        ) from exc
    return Actor(id=x_actor_id.strip(), name=(x_actor_name or x_actor_id).strip(), role=role)


def get_actor(actor: Optional[Actor] = Depends(get_optional_actor)) -> Actor:
    if actor is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="User tidak ditemukan. Silakan login ulang.")
    return actor


def require_admin(actor: Actor = Depends(get_actor)) -> Actor:
    if actor.role is not UserRole.ADMIN:
        raise http_error(ActionNotAllowed("Hanya admin yang dapat mengubah data master"))
    return actor


def get_notifier(db: Session = Depends(get_db)) -> Notifier:
    return RecordNotifier(db)


def http_error(exc: OrderFlowError) -> HTTPException:
    """Translate a domain error into the HTTP error the client sees."""
    if isinstance(exc, OrderNotFound):
        return HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ActionNotAllowed):
        return HTTPException(status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, IllegalTransition):
        return HTTPException(
            status.HTTP_409_CONFLICT,
            detail={
                "message": str(exc),
                "from_status": getattr(exc.from_status, "value", exc.from_status),
                "actor_role": getattr(exc.actor_role, "value", exc.actor_role),
                "action": getattr(exc.action, "value", exc.action),
            },
        )
    if isinstance(exc, BelowMinimumDownPayment):
        return HTTPException(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "TDP di bawah minimum", "minimum": exc.minimum, "results": []},
        )
    return HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
