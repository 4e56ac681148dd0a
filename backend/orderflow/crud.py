"""Record store for orders and their notes."""

from __future__ import annotations

from sqlalchemy.orm import Session

from .exceptions import OrderNotFound
from .models import Order, OrderNote
from .services.workflow import NoteDraft


class OrderRepository:
    """load/save/append_note over a SQLAlchemy session.

    Nothing here commits; the caller owns the unit of work.
    """

    def __init__(self, db: Session):
        self.db = db

    def load(self, order_id: int) -> Order:
        order = self.db.get(Order, order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def save(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order

    def append_note(self, order_id: int, draft: NoteDraft) -> OrderNote:
        note = OrderNote(
            order_id=order_id,
            user_id=draft.user_id,
            user_name=draft.user_name,
            role=draft.role.value,
            note=draft.note,
            status=draft.status.value,
            created_at=draft.created_at,
        )
        self.db.add(note)
        self.db.flush()
        return note
