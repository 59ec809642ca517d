"""Testes da projeção evento → notificação (funções puras)."""

from datetime import datetime, timezone

from sibol.domain.systems.notifications.projection import (
    EventFeedRow,
    NotificationType,
    build_message,
    build_title,
    project,
)

NOW = datetime(2026, 10, 1, 8, 30, tzinfo=timezone.utc)


def test_title_known_event_with_ticket_id():
    assert build_title("ACCEPTED", 12) == "Maintenance accepted: Request #12"
    assert build_title("ONGOING", 3) == "Maintenance started: Request #3"


def test_title_unknown_or_missing_event_falls_back():
    assert build_title("SOMETHING_NEW", 5) == "Maintenance update: Request #5"
    assert build_title(None) == "Maintenance update"


def test_message_full():
    msg = build_message("FOR_VERIFICATION", "Carlo Santos", "Broken drum")
    assert msg == "Carlo Santos sent a for_verification in Broken drum."


def test_message_fallbacks():
    assert build_message(None, None, None) == "Someone sent a update."
    assert build_message("REQUESTED", "   ", "Leak") == "Someone sent a requested in Leak."


def test_project_prefers_full_name_then_username():
    row = EventFeedRow(
        id=7, ticket_id=12, event_type="COMPLETED", created_at=NOW,
        ticket_title="Broken drum", status_name="Completed", priority_name="Urgent",
        actor_name=None, actor_username="staff_b", read=True,
    )
    n = project(row)
    assert n.type is NotificationType.MAINTENANCE
    assert n.title == "Maintenance completed: Request #12"
    assert n.message == "staff_b sent a completed in Broken drum."
    assert n.read is True
    assert (n.priority, n.status, n.event_type) == ("Urgent", "Completed", "COMPLETED")
    assert n.timestamp == NOW
