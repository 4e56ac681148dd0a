from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from orderflow.exceptions import IllegalTransition, InvalidInput
from orderflow.services.workflow import (
    Actor,
    OrderStatus,
    SurveyReport,
    UserRole,
    WorkflowAction,
    allowed_actions,
    attempt_transition,
)

NOW = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)
CMO = Actor(id="cmo-1", name="Citra", role=UserRole.CMO)
CMH = Actor(id="cmh-1", name="Dewi", role=UserRole.CMH)
SALES = Actor(id="sales-1", name="Budi", role=UserRole.SALES)
ADMIN = Actor(id="admin-1", name="Admin", role=UserRole.ADMIN)


def order(status):
    return SimpleNamespace(status=status)


def test_cmo_claims_new_order():
    result = attempt_transition(order("Baru"), CMO, "claim", now=NOW)

    assert result.new_status is OrderStatus.CLAIM
    assert result.fields == {"claimed_by": "cmo-1", "claimed_at": NOW}
    assert result.note.status is OrderStatus.CLAIM
    assert result.note.note == "Order di-claim oleh Citra"
    assert result.note.created_at == NOW
    assert result.status_changed


def test_sales_cannot_claim():
    with pytest.raises(IllegalTransition) as excinfo:
        attempt_transition(order("Baru"), SALES, "claim")
    assert excinfo.value.from_status is OrderStatus.BARU
    assert excinfo.value.actor_role is UserRole.SALES
    assert excinfo.value.action is WorkflowAction.CLAIM


@pytest.mark.parametrize(
    "slik,expected",
    [("Clear", OrderStatus.PROSES), ("Ada Catatan", OrderStatus.PERTIMBANGKAN), ("Tolak", OrderStatus.REJECT)],
)
def test_slik_result_routes_order(slik, expected):
    result = attempt_transition(order("Claim"), CMO, "submit_slik", "skor baik", slik_result=slik)

    assert result.new_status is expected
    assert result.fields == {"hasil_slik": slik}
    assert result.note.status is expected
    assert result.note.note == f"Hasil SLIK: {slik}. Catatan: skor baik"


def test_slik_requires_result():
    with pytest.raises(InvalidInput):
        attempt_transition(order("Claim"), CMO, WorkflowAction.SUBMIT_SLIK)


def test_survey_moves_cek_slik_to_proses():
    survey = SurveyReport(tanggal_survey="2025-03-02", checklist={"npwp": True}, foto_survey=["a.jpg"])
    result = attempt_transition(order("Cek Slik"), CMO, "survey", survey=survey)

    assert result.new_status is OrderStatus.PROSES
    assert result.fields == {"tanggal_survey": "2025-03-02", "checklist": {"npwp": True}, "foto_survey": ["a.jpg"]}
    assert result.note.note == "Survey selesai pada 2025-03-02"


@pytest.mark.parametrize(
    "action,expected",
    [(WorkflowAction.APPROVE, OrderStatus.APPROVE), (WorkflowAction.REJECT, OrderStatus.REJECT)],
)
def test_cmh_decides_considered_order(action, expected):
    result = attempt_transition(order("Pertimbangkan"), CMH, action, "DP kuat")

    assert result.new_status is expected
    assert result.fields == {"decision_reason": "DP kuat"}
    assert result.note.note == f"Keputusan Pertimbangan CMH: {expected.value}. Catatan: DP kuat"


def test_cmo_cannot_decide():
    with pytest.raises(IllegalTransition):
        attempt_transition(order("Pertimbangkan"), CMO, "approve")


def test_map_in_hand_off():
    mapped = attempt_transition(order("Proses"), CMO, "map_in")
    assert mapped.new_status is OrderStatus.MAP_IN
    assert mapped.note.note == "Order masuk Map In"

    considered = attempt_transition(order("Map In"), CMH, "consider", "perlu data tambahan")
    assert considered.new_status is OrderStatus.PERTIMBANGKAN

    approved = attempt_transition(order("Map In"), CMH, "approve")
    assert approved.new_status is OrderStatus.APPROVE
    assert approved.note.note == "Keputusan CMH: Approve"


@pytest.mark.parametrize("status", ["Approve", "Reject"])
@pytest.mark.parametrize("actor", [CMO, CMH, SALES, ADMIN])
@pytest.mark.parametrize("action", list(WorkflowAction))
def test_terminal_states_are_absorbing(status, actor, action):
    with pytest.raises(IllegalTransition):
        attempt_transition(order(status), actor, action, "catatan", slik_result="Clear")


@pytest.mark.parametrize("status", ["Baru", "Claim", "Cek Slik", "Proses", "Pertimbangkan", "Map In"])
@pytest.mark.parametrize("actor", [CMO, CMH])
def test_add_note_keeps_status(status, actor):
    result = attempt_transition(order(status), actor, "add_note", "  sudah dihubungi  ")

    assert result.new_status.value == status
    assert result.note.status.value == status
    assert result.note.note == "sudah dihubungi"
    assert result.fields == {}
    assert not result.status_changed


def test_add_note_requires_text():
    with pytest.raises(InvalidInput):
        attempt_transition(order("Claim"), CMO, "add_note", "   ")


@pytest.mark.parametrize("actor", [SALES, ADMIN])
def test_add_note_is_for_reviewers_only(actor):
    with pytest.raises(IllegalTransition):
        attempt_transition(order("Claim"), actor, "add_note", "halo")


def test_unknown_action_or_status_is_illegal():
    with pytest.raises(IllegalTransition):
        attempt_transition(order("Baru"), CMO, "teleport")
    with pytest.raises(IllegalTransition):
        attempt_transition(order("Draft"), CMO, "claim")


def test_claim_twice_is_illegal():
    with pytest.raises(IllegalTransition):
        attempt_transition(order("Claim"), CMO, "claim")


def test_allowed_actions():
    assert allowed_actions("Baru", "cmo") == [WorkflowAction.CLAIM, WorkflowAction.ADD_NOTE]
    assert allowed_actions("Map In", "cmh") == [
        WorkflowAction.APPROVE,
        WorkflowAction.REJECT,
        WorkflowAction.CONSIDER,
        WorkflowAction.ADD_NOTE,
    ]
    assert allowed_actions("Approve", "cmh") == []
    assert allowed_actions("Baru", "sales") == []


def handled_order(status, claimed_by=None, cmo_id=None):
    return SimpleNamespace(status=status, claimed_by=claimed_by, cmo_id=cmo_id)


@pytest.mark.parametrize(
    "status,action,kwargs",
    [
        ("Claim", "submit_slik", {"slik_result": "Tolak"}),
        ("Proses", "map_in", {}),
        ("Claim", "add_note", {"note": "cek ulang"}),
    ],
)
def test_cmo_cannot_act_on_order_claimed_by_another(status, action, kwargs):
    other = Actor(id="cmo-2", name="Eka", role=UserRole.CMO)
    with pytest.raises(IllegalTransition) as excinfo:
        attempt_transition(handled_order(status, claimed_by="cmo-1"), other, action, **kwargs)
    assert excinfo.value.reason == "order ditangani CMO lain"


def test_assigned_or_claiming_cmo_may_act():
    claimed = attempt_transition(handled_order("Claim", claimed_by="cmo-1"), CMO, "submit_slik", slik_result="Clear")
    assert claimed.new_status is OrderStatus.PROSES

    assigned = attempt_transition(handled_order("Proses", claimed_by="cmo-9", cmo_id="cmo-1"), CMO, "map_in")
    assert assigned.new_status is OrderStatus.MAP_IN


def test_unhandled_new_order_is_open_to_any_cmo():
    other = Actor(id="cmo-2", name="Eka", role=UserRole.CMO)
    result = attempt_transition(handled_order("Baru", cmo_id="cmo-1"), other, "claim")
    assert result.fields["claimed_by"] == "cmo-2"


def test_cmh_is_not_bound_to_the_handling_cmo():
    result = attempt_transition(handled_order("Map In", claimed_by="cmo-1"), CMH, "approve", "lengkap")
    assert result.new_status is OrderStatus.APPROVE


def test_decision_without_note_keeps_earlier_reason():
    result = attempt_transition(order("Pertimbangkan"), CMH, "approve")
    assert result.new_status is OrderStatus.APPROVE
    assert "decision_reason" not in result.fields
