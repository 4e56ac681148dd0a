"""Fire-and-forget notifications.

One ``NotificationEvent`` fans out into ``Notification`` rows for every
recipient. Failures are retried a few times and then logged; they are never
raised back into the workflow that emitted the event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models import Notification, User
from .workflow import OrderStatus, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationEvent:
    order_id: Optional[int]
    new_status: Optional[str]
    actor_id: str
    actor_name: str
    note: Optional[str] = None
    kind: str = "status_change"
    subject: Optional[str] = None  # customer name, or dealer for activities
    recipient_ids: tuple = ()
    reference_id: Optional[str] = None


class Notifier(Protocol):
    def notify(self, event: NotificationEvent) -> None: ...


def status_event(order, new_status, actor, note: Optional[str] = None, kind: str = "status_change") -> NotificationEvent:
    return NotificationEvent(
        order_id=order.id,
        new_status=getattr(new_status, "value", new_status),
        actor_id=str(actor.id),
        actor_name=actor.name,
        note=note,
        kind=kind,
        subject=order.nama_nasabah,
        recipient_ids=(order.sales_id,),
    )


def new_order_event(order, actor) -> NotificationEvent:
    return NotificationEvent(
        order_id=order.id,
        new_status=OrderStatus.BARU.value,
        actor_id=str(actor.id),
        actor_name=actor.name,
        kind="order_new",
        subject=order.nama_nasabah,
        recipient_ids=(order.cmo_id,) if order.cmo_id else (),
    )


def activity_event(aktivitas, actor) -> NotificationEvent:
    return NotificationEvent(
        order_id=None,
        new_status=None,
        actor_id=str(actor.id),
        actor_name=actor.name,
        kind="activity",
        subject=f"{aktivitas.jenis_aktivitas} di {aktivitas.dealer}",
        reference_id=str(aktivitas.id),
    )


def render(event: NotificationEvent) -> tuple[str, str, str]:
    """Return (type, title, message) for an event."""
    actor = event.actor_name
    subject = event.subject or f"#{event.order_id}"
    if event.kind == "order_new":
        return "order_new", "Order Baru", f"{actor} telah menginput order baru untuk {subject}"
    if event.kind == "activity":
        return "activity", "Aktivitas Baru", f"{actor} telah menginput aktivitas {subject}"

    note = event.note
    if event.kind == "slik_result":
        return "slik_result", "Hasil SLIK Diinput", f"{actor} telah mengisi hasil SLIK untuk order {subject}. {note}"
    if event.new_status == OrderStatus.APPROVE.value:
        message = f"{actor} telah menyetujui order {subject}"
        return "order_approve", "Order Disetujui", f"{message}. {note}" if note else message
    if event.new_status == OrderStatus.REJECT.value:
        message = f"{actor} telah menolak order {subject}"
        return "order_reject", "Order Ditolak", f"{message}. {note}" if note else message
    message = f"Order {subject} berpindah ke status {event.new_status} oleh {actor}"
    return "status_change", "Status Order Berubah", message


class RecordNotifier:
    """Writes notification rows through the request's session."""

    def __init__(self, db: Session, retries: Optional[int] = None):
        settings = get_settings()
        self.db = db
        self.retries = settings.notification_retries if retries is None else retries
        self.fanout_limit = settings.notification_fanout_limit

    def recipients(self, event: NotificationEvent) -> List[str]:
        cmh_ids = self.db.scalars(
            select(User.id)
            .where(User.role == UserRole.CMH.value, User.is_active.is_(True))
            .order_by(User.id)
            .limit(self.fanout_limit)
        ).all()
        ordered = [rid for rid in event.recipient_ids if rid] + [str(cid) for cid in cmh_ids]
        seen = set()
        result = []
        for rid in ordered:
            rid = str(rid)
            if rid == event.actor_id or rid in seen:
                continue
            seen.add(rid)
            result.append(rid)
        return result

    def notify(self, event: NotificationEvent) -> None:
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                self._write(event)
                return
            except SQLAlchemyError:
                self.db.rollback()
                if attempt == attempts:
                    logger.exception(
                        "Notification for order %s dropped after %d attempts", event.order_id, attempts
                    )
                else:
                    logger.warning("Notification write failed (attempt %d/%d), retrying", attempt, attempts)

    def _write(self, event: NotificationEvent) -> None:
        kind, title, message = render(event)
        reference = event.reference_id or (str(event.order_id) if event.order_id is not None else None)
        rows = _rows(self.recipients(event), kind, title, message, reference, event)
        self.db.add_all(rows)
        self.db.commit()
        logger.info("Sent %s notification to %d recipient(s)", kind, len(rows))


def _rows(recipients: Iterable[str], kind, title, message, reference, event) -> List[Notification]:
    return [
        Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=kind,
            reference_id=reference,
            is_read=False,
            created_by_id=event.actor_id,
            created_by_name=event.actor_name,
        )
        for user_id in recipients
    ]


def safe_notify(notifier: Notifier, event: NotificationEvent) -> None:
    """Deliver through any notifier without letting its failure escape."""
    try:
        notifier.notify(event)
    except Exception:  # noqa: BLE001 - delivery is best effort by contract
        logger.exception("Notifier %s failed for order %s", type(notifier).__name__, event.order_id)
