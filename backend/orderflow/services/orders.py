"""Order intake and workflow actions against the record store."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from .. import models
from ..crud import OrderRepository
from ..exceptions import ActionNotAllowed, IllegalTransition, InvalidInput
from .calculator import compute_installment
from .notifier import Notifier, new_order_event, safe_notify, status_event
from .workflow import (
    Actor,
    OrderStatus,
    SurveyReport,
    Transition,
    UserRole,
    WorkflowAction,
    attempt_transition,
)

logger = logging.getLogger(__name__)

ORDER_CREATOR_ROLES = frozenset({UserRole.SALES, UserRole.ADMIN})


def find_program(db: Session, nama_program: str) -> Optional[models.Program]:
    return db.scalar(select(models.Program).where(models.Program.nama_program == nama_program))


def installment_for(program: models.Program, otr: int, tdp: int, tenor: int) -> int:
    option = next(
        (tb for tb in program.tenor_bunga if tb.tenor == tenor and tb.is_active is not False),
        None,
    )
    if option is None:
        raise InvalidInput(f"Tenor {tenor} bulan tidak tersedia untuk program {program.nama_program}")
    return compute_installment(otr, tdp, tenor, option.bunga)


def create_order(db: Session, data: dict, actor: Actor, notifier: Optional[Notifier] = None) -> models.Order:
    """Create an order in status Baru.

    The minimum TDP of the program is not enforced here, only in simulations.
    """
    if actor.role not in ORDER_CREATOR_ROLES:
        raise ActionNotAllowed("Hanya sales yang dapat membuat order")

    program = find_program(db, data["nama_program"])
    if program is None:
        raise InvalidInput(f"Program {data['nama_program']!r} tidak ditemukan")
    angsuran = installment_for(program, data["otr"], data["tdp"], data["tenor"])

    order = models.Order(
        **data,
        sales_id=str(actor.id),
        sales_name=actor.name,
        angsuran=angsuran,
        status=OrderStatus.BARU.value,
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("Order %s created by %s (%s)", order.id, actor.name, actor.role.value)

    if notifier is not None:
        safe_notify(notifier, new_order_event(order, actor))
    return order


def apply_action(
    db: Session,
    order_id: int,
    actor: Actor,
    action,
    note: Optional[str] = None,
    *,
    slik_result=None,
    survey: Optional[SurveyReport] = None,
    notifier: Optional[Notifier] = None,
) -> models.Order:
    """Run one workflow action and persist its result.

    Exactly one note is appended per call. A status-changing action emits one
    notification after the commit; delivery failures do not undo the change.
    Concurrent actions on the same order are last write wins.
    """
    repo = OrderRepository(db)
    order = repo.load(order_id)
    try:
        transition = attempt_transition(order, actor, action, note, slik_result=slik_result, survey=survey)
    except IllegalTransition as exc:
        logger.warning("Rejected %s on order %s: %s", getattr(action, "value", action), order_id, exc)
        raise

    _apply(order, transition)
    repo.save(order)
    repo.append_note(order.id, transition.note)
    db.commit()
    db.refresh(order)
    logger.info(
        "Order %s: %s -> %s by %s (%s)",
        order.id,
        transition.from_status.value,
        transition.new_status.value,
        actor.name,
        actor.role.value,
    )

    if transition.status_changed and notifier is not None:
        kind = "slik_result" if transition.action is WorkflowAction.SUBMIT_SLIK else "status_change"
        safe_notify(notifier, status_event(order, transition.new_status, actor, transition.note.note, kind))
    return order


def _apply(order: models.Order, transition: Transition) -> None:
    for field, value in transition.fields.items():
        setattr(order, field, value)
    order.status = transition.new_status.value
    order.updated_at = transition.note.created_at


def visible_to(stmt, actor: Optional[Actor]):
    """Restrict a select() on orders to what the acting user may see."""
    if actor is None:
        return stmt
    if actor.role is UserRole.SALES:
        return stmt.where(models.Order.sales_id == actor.id)
    if actor.role is UserRole.CMO:
        return stmt.where(
            or_(
                models.Order.cmo_id == actor.id,
                models.Order.claimed_by == actor.id,
                models.Order.status == OrderStatus.BARU.value,
            )
        )
    return stmt


def list_orders(
    db: Session,
    *,
    actor: Optional[Actor] = None,
    status: Optional[str] = None,
    sales_id: Optional[str] = None,
    cmo_id: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 200,
) -> Tuple[int, List[models.Order]]:
    stmt = visible_to(select(models.Order), actor)
    if status:
        stmt = stmt.where(models.Order.status == status)
    if sales_id:
        stmt = stmt.where(models.Order.sales_id == sales_id)
    if cmo_id:
        stmt = stmt.where(models.Order.cmo_id == cmo_id)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(models.Order.nama_nasabah.ilike(pattern), models.Order.no_hp.ilike(pattern)))

    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    items = db.scalars(
        stmt.order_by(models.Order.created_at.desc(), models.Order.id.desc()).offset(skip).limit(limit)
    ).all()
    return total, list(items)


def status_counts(db: Session, actor: Optional[Actor] = None) -> Dict[str, int]:
    counts = {status.value: 0 for status in OrderStatus}
    stmt = visible_to(select(models.Order.status, func.count()).group_by(models.Order.status), actor)
    for status_value, count in db.execute(stmt).all():
        counts[status_value] = count
    return counts
