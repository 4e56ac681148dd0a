"""Order status state machine.

The engine only decides. It never touches the database; callers persist the
returned ``Transition`` and emit the notification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from ..exceptions import IllegalTransition, InvalidInput


class OrderStatus(str, Enum):
    BARU = "Baru"
    CLAIM = "Claim"
    CEK_SLIK = "Cek Slik"
    PROSES = "Proses"
    PERTIMBANGKAN = "Pertimbangkan"
    MAP_IN = "Map In"
    APPROVE = "Approve"
    REJECT = "Reject"


class UserRole(str, Enum):
    SALES = "sales"
    CMO = "cmo"
    CMH = "cmh"
    ADMIN = "admin"
    SPV = "spv"


class WorkflowAction(str, Enum):
    CLAIM = "claim"
    SUBMIT_SLIK = "submit_slik"
    SURVEY = "survey"
    MAP_IN = "map_in"
    APPROVE = "approve"
    REJECT = "reject"
    CONSIDER = "consider"
    ADD_NOTE = "add_note"


class SlikResult(str, Enum):
    CLEAR = "Clear"
    ADA_CATATAN = "Ada Catatan"
    TOLAK = "Tolak"


TERMINAL_STATUSES = frozenset({OrderStatus.APPROVE, OrderStatus.REJECT})
ORDER_STATUSES = [status.value for status in OrderStatus]

SLIK_OUTCOMES: Dict[SlikResult, OrderStatus] = {
    SlikResult.CLEAR: OrderStatus.PROSES,
    SlikResult.ADA_CATATAN: OrderStatus.PERTIMBANGKAN,
    SlikResult.TOLAK: OrderStatus.REJECT,
}

# (current status, role, action) -> resulting status. ``submit_slik`` maps to
# the SLIK outcome table instead of a single status.
TRANSITIONS: Dict[tuple, Union[OrderStatus, Mapping[SlikResult, OrderStatus]]] = {
    (OrderStatus.BARU, UserRole.CMO, WorkflowAction.CLAIM): OrderStatus.CLAIM,
    (OrderStatus.CLAIM, UserRole.CMO, WorkflowAction.SUBMIT_SLIK): SLIK_OUTCOMES,
    (OrderStatus.CEK_SLIK, UserRole.CMO, WorkflowAction.SURVEY): OrderStatus.PROSES,
    (OrderStatus.PROSES, UserRole.CMO, WorkflowAction.MAP_IN): OrderStatus.MAP_IN,
    (OrderStatus.PERTIMBANGKAN, UserRole.CMH, WorkflowAction.APPROVE): OrderStatus.APPROVE,
    (OrderStatus.PERTIMBANGKAN, UserRole.CMH, WorkflowAction.REJECT): OrderStatus.REJECT,
    (OrderStatus.MAP_IN, UserRole.CMH, WorkflowAction.APPROVE): OrderStatus.APPROVE,
    (OrderStatus.MAP_IN, UserRole.CMH, WorkflowAction.REJECT): OrderStatus.REJECT,
    (OrderStatus.MAP_IN, UserRole.CMH, WorkflowAction.CONSIDER): OrderStatus.PERTIMBANGKAN,
}

NOTE_ROLES = frozenset({UserRole.CMO, UserRole.CMH})


@dataclass(frozen=True)
class Actor:
    id: str
    name: str
    role: UserRole


@dataclass(frozen=True)
class SurveyReport:
    tanggal_survey: Optional[str] = None
    checklist: Optional[Dict[str, bool]] = None
    foto_survey: Optional[List[str]] = None


@dataclass(frozen=True)
class NoteDraft:
    user_id: str
    user_name: str
    role: UserRole
    note: str
    status: OrderStatus
    created_at: datetime


@dataclass(frozen=True)
class Transition:
    action: WorkflowAction
    from_status: OrderStatus
    new_status: OrderStatus
    note: NoteDraft
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def status_changed(self) -> bool:
        return self.action is not WorkflowAction.ADD_NOTE


def allowed_actions(status, role) -> List[WorkflowAction]:
    """Actions the role may take on an order in ``status``; used by the UI."""
    status = OrderStatus(status)
    role = UserRole(role)
    actions = [action for (st, rl, action) in TRANSITIONS if st is status and rl is role]
    if status not in TERMINAL_STATUSES and role in NOTE_ROLES:
        actions.append(WorkflowAction.ADD_NOTE)
    return actions


def attempt_transition(
    order,
    actor: Actor,
    action,
    note: Optional[str] = None,
    *,
    slik_result=None,
    survey: Optional[SurveyReport] = None,
    now: Optional[datetime] = None,
) -> Transition:
    """Validate ``action`` against the order's status and the actor's role.

    Raises ``IllegalTransition`` for any (status, role, action) triple that is
    not in the table and ``InvalidInput`` when the action is missing data it
    needs. Returns the mutation to apply otherwise.
    """
    current = _coerce(OrderStatus, order.status)
    role = _coerce(UserRole, actor.role)
    requested = _coerce(WorkflowAction, action)
    if current is None or role is None or requested is None:
        raise IllegalTransition(order.status, actor.role, action)

    note = (note or "").strip() or None
    _check_handler(order, actor, role, current, requested)

    if requested is WorkflowAction.ADD_NOTE:
        if current in TERMINAL_STATUSES or role not in NOTE_ROLES:
            raise IllegalTransition(current, role, requested)
        if not note:
            raise InvalidInput("Catatan tidak boleh kosong")
        return Transition(
            action=requested,
            from_status=current,
            new_status=current,
            note=_draft(actor, role, note, current, now),
        )

    target = TRANSITIONS.get((current, role, requested))
    if target is None:
        raise IllegalTransition(current, role, requested)

    fields: Dict[str, Any] = {}
    stamp = now or datetime.now(timezone.utc)

    if requested is WorkflowAction.CLAIM:
        fields["claimed_by"] = actor.id
        fields["claimed_at"] = stamp
        text = f"Order di-claim oleh {actor.name}"
        if note:
            text = f"{text}. Catatan: {note}"
    elif requested is WorkflowAction.SUBMIT_SLIK:
        result = _coerce(SlikResult, slik_result)
        if result is None:
            raise InvalidInput("Hasil SLIK wajib diisi (Clear, Ada Catatan, Tolak)")
        target = target[result]
        fields["hasil_slik"] = result.value
        text = f"Hasil SLIK: {result.value}"
        if note:
            text = f"{text}. Catatan: {note}"
    elif requested is WorkflowAction.SURVEY:
        survey = survey or SurveyReport()
        if survey.tanggal_survey:
            fields["tanggal_survey"] = survey.tanggal_survey
        if survey.checklist is not None:
            fields["checklist"] = dict(survey.checklist)
        if survey.foto_survey is not None:
            fields["foto_survey"] = list(survey.foto_survey)
        text = f"Survey selesai pada {survey.tanggal_survey}" if survey.tanggal_survey else "Survey selesai"
        if note:
            text = f"{text}. Catatan: {note}"
    elif requested is WorkflowAction.MAP_IN:
        text = f"Order masuk Map In. Catatan: {note}" if note else "Order masuk Map In"
    else:
        if note:
            fields["decision_reason"] = note
        prefix = "Keputusan Pertimbangan CMH" if current is OrderStatus.PERTIMBANGKAN else "Keputusan CMH"
        text = f"{prefix}: {target.value}"
        if note:
            text = f"{text}. Catatan: {note}"

    return Transition(
        action=requested,
        from_status=current,
        new_status=target,
        note=_draft(actor, role, text, target, stamp),
        fields=fields,
    )


def _draft(actor: Actor, role: UserRole, text: str, status: OrderStatus, now: Optional[datetime]) -> NoteDraft:
    return NoteDraft(
        user_id=actor.id,
        user_name=actor.name,
        role=role,
        note=text,
        status=status,
        created_at=now or datetime.now(timezone.utc),
    )


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _check_handler(order, actor: Actor, role: UserRole, current: OrderStatus, requested: WorkflowAction) -> None:
    """A CMO may only work on orders assigned to or claimed by them."""
    if role is not UserRole.CMO or requested is WorkflowAction.CLAIM:
        return
    handlers = {str(value) for value in (getattr(order, "claimed_by", None), getattr(order, "cmo_id", None)) if value}
    if handlers and str(actor.id) not in handlers:
        raise IllegalTransition(current, role, requested, reason="order ditangani CMO lain")
