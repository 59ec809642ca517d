"""Testes da state machine — tabela de transições, replay e observações (sem banco)."""

from datetime import date

import pytest

from sibol.domain.events.maintenance_events import MaintenanceEventType
from sibol.domain.shared.exceptions import ConflictError, ForbiddenError, ValidationError
from sibol.domain.systems.accounts.entity import Actor, Role
from sibol.domain.systems.maintenance.entity import Ticket
from sibol.domain.systems.maintenance.workflow import (
    TRANSITIONS,
    TicketAction,
    TicketStatus,
    replay_status,
    resolve_transition,
)

STAFF = Actor(account_id=2, role=Role.STAFF)
ADMIN = Actor(account_id=1, role=Role.ADMIN)
OPERATOR_A = Actor(account_id=3, role=Role.OPERATOR)
OPERATOR_C = Actor(account_id=4, role=Role.OPERATOR)
HOUSEHOLD = Actor(account_id=5, role=Role.HOUSEHOLD)

DUE = date(2026, 12, 1)


def _ticket(created_by: int = 2, status: TicketStatus = TicketStatus.REQUESTED, assigned_to=None) -> Ticket:
    return Ticket(id=10, title="Broken drum", created_by=created_by, status=status, assigned_to=assigned_to)


def _event_types(ticket: Ticket) -> list[MaintenanceEventType]:
    return [e.event_type for e in ticket.collect_events()]


def test_terminal_statuses_have_no_outgoing_edges():
    for (source, _action) in TRANSITIONS:
        assert not source.is_terminal


@pytest.mark.parametrize("status", [TicketStatus.COMPLETED, TicketStatus.CANCELLED])
@pytest.mark.parametrize("action", list(TicketAction))
def test_terminal_status_rejects_every_action(status, action):
    with pytest.raises(ConflictError):
        resolve_transition(status, action)


def test_completion_override_only_when_enabled():
    with pytest.raises(ConflictError):
        resolve_transition(TicketStatus.ON_GOING, TicketAction.VERIFY_COMPLETION)
    transition = resolve_transition(
        TicketStatus.ON_GOING, TicketAction.VERIFY_COMPLETION, allow_completion_override=True,
    )
    assert transition.target is TicketStatus.COMPLETED


def test_happy_path_emits_events_in_order():
    ticket = _ticket()
    ticket.accept(STAFF, OPERATOR_A.account_id, DUE)
    ticket.mark_ongoing(OPERATOR_A)
    ticket.mark_for_verification(OPERATOR_A)
    ticket.verify_completion(ADMIN)

    assert ticket.status is TicketStatus.COMPLETED
    assert ticket.completed_at is not None
    assert ticket.updated_at == ticket.completed_at
    assert _event_types(ticket) == [
        MaintenanceEventType.ACCEPTED,
        MaintenanceEventType.ONGOING,
        MaintenanceEventType.FOR_VERIFICATION,
        MaintenanceEventType.COMPLETED,
    ]


def test_accept_requires_due_date_before_state_check():
    ticket = _ticket(status=TicketStatus.COMPLETED)
    # due_date ausente vence o conflito de estado
    with pytest.raises(ValidationError):
        ticket.accept(STAFF, OPERATOR_A.account_id, None)
    assert ticket.status is TicketStatus.COMPLETED
    assert ticket.collect_events() == []


def test_accept_on_completed_is_conflict():
    ticket = _ticket(status=TicketStatus.COMPLETED)
    with pytest.raises(ConflictError):
        ticket.accept(STAFF, OPERATOR_A.account_id, DUE)


def test_conflict_wins_over_forbidden():
    ticket = _ticket(status=TicketStatus.CANCELLED)
    with pytest.raises(ConflictError):
        ticket.accept(HOUSEHOLD, OPERATOR_A.account_id, DUE)


def test_operator_cannot_accept():
    ticket = _ticket()
    with pytest.raises(ForbiddenError):
        ticket.accept(OPERATOR_A, OPERATOR_A.account_id, DUE)
    assert ticket.status is TicketStatus.REQUESTED


def test_reassignment_emits_reassigned():
    ticket = _ticket()
    ticket.accept(STAFF, OPERATOR_A.account_id, DUE)
    ticket.accept(STAFF, OPERATOR_C.account_id, DUE)
    events = ticket.collect_events()
    assert [e.event_type for e in events] == [MaintenanceEventType.ACCEPTED, MaintenanceEventType.REASSIGNED]
    assert events[1].old_assignee == OPERATOR_A.account_id
    assert events[1].new_assignee == OPERATOR_C.account_id
    assert ticket.assigned_to == OPERATOR_C.account_id


def test_reaccept_same_operator_emits_accepted():
    ticket = _ticket()
    ticket.accept(STAFF, OPERATOR_A.account_id, DUE)
    ticket.accept(STAFF, OPERATOR_A.account_id, date(2026, 12, 15))
    assert _event_types(ticket) == [MaintenanceEventType.ACCEPTED, MaintenanceEventType.ACCEPTED]
    assert ticket.due_date == date(2026, 12, 15)


def test_only_assignee_operator_moves_work():
    ticket = _ticket(status=TicketStatus.ON_GOING, assigned_to=OPERATOR_A.account_id)
    with pytest.raises(ForbiddenError):
        ticket.mark_for_verification(OPERATOR_C)
    with pytest.raises(ForbiddenError):
        ticket.mark_ongoing(STAFF)
    ticket.mark_for_verification(OPERATOR_A)
    assert ticket.status is TicketStatus.FOR_VERIFICATION


def test_staff_verify_requires_for_verification_when_strict():
    ticket = _ticket(status=TicketStatus.ON_GOING, assigned_to=OPERATOR_A.account_id)
    with pytest.raises(ConflictError):
        ticket.verify_completion(STAFF)
    ticket.verify_completion(STAFF, allow_override=True)
    assert ticket.status is TicketStatus.COMPLETED


def test_cancel_by_operator_creator_but_not_other_operator():
    ticket = _ticket(created_by=OPERATOR_A.account_id)
    with pytest.raises(ForbiddenError):
        ticket.cancel(OPERATOR_C)
    event = ticket.cancel(OPERATOR_A)
    assert ticket.status is TicketStatus.CANCELLED
    assert event.previous_status == "Requested"


def test_remarks_append_and_keep_status():
    ticket = _ticket(status=TicketStatus.COMPLETED, assigned_to=OPERATOR_A.account_id)
    ticket.add_remark(OPERATOR_A, "Drum replaced")
    ticket.add_remark(STAFF, "Checked\non site")
    lines = ticket.remarks.split("\n")
    assert len(lines) == 2
    assert lines[0].endswith("] Drum replaced")
    assert lines[1].endswith("] Checked on site")
    assert ticket.status is TicketStatus.COMPLETED
    assert _event_types(ticket) == [MaintenanceEventType.REMARK_ADDED] * 2


def test_remark_rejected_for_unrelated_account():
    ticket = _ticket(assigned_to=OPERATOR_A.account_id)
    with pytest.raises(ForbiddenError):
        ticket.add_remark(OPERATOR_C, "not mine")
    with pytest.raises(ValidationError):
        ticket.add_remark(STAFF, "   ")


def test_replay_matches_live_status():
    ticket = _ticket()
    types = [ticket.record_creation().event_type]
    ticket.accept(STAFF, OPERATOR_A.account_id, DUE)
    ticket.accept(STAFF, OPERATOR_C.account_id, DUE)
    ticket.add_remark(STAFF, "swap")
    ticket.mark_for_verification(OPERATOR_C)
    types += [e.event_type for e in ticket.collect_events() if e.event_type is not MaintenanceEventType.REQUESTED]
    assert replay_status(types) is ticket.status is TicketStatus.FOR_VERIFICATION


def test_replay_skips_invalid_and_unknown_events():
    assert replay_status([]) is None
    assert replay_status(["ACCEPTED"]) is None
    assert replay_status(["REQUESTED", "FOR_VERIFICATION", "BOGUS", "CANCELLED", "ACCEPTED"]) is TicketStatus.CANCELLED
    assert replay_status(["REQUESTED", "ACCEPTED", "COMPLETED"]) is TicketStatus.COMPLETED
