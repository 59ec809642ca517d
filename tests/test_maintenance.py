"""Testes de Manutenção — criação, state machine por papel, observações, filtros e trilha de eventos."""

from datetime import datetime

import pytest
from httpx import AsyncClient

from sibol.presentation.api.v1.endpoints import maintenance as maintenance_endpoints
from tests.conftest import accept_ticket, auth_header, create_ticket

BASE = "/api/v1/maintenance"


async def _put(client: AsyncClient, token: str, ticket_id: int, action: str, **kwargs):
    return await client.put(f"{BASE}/{ticket_id}/{action}", headers=auth_header(token), **kwargs)


async def _events(client: AsyncClient, token: str, ticket_id: int) -> dict:
    resp = await client.get(f"{BASE}/{ticket_id}/events", headers=auth_header(token))
    assert resp.status_code == 200
    return resp.json()


# ════════════════════════════════════════════════════════════════
# CRIAÇÃO
# ════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_create_ticket(client: AsyncClient, tokens, accounts):
    data = await create_ticket(client, tokens["staff"], details="Lid is cracked", priority="urgent")
    assert data["status"] == "Requested"
    assert data["priority"] == "Urgent"
    assert data["created_by"] == accounts["staff"]
    assert data["assigned_to"] is None
    assert data["attachment_count"] == 0

    history = await _events(client, tokens["staff"], data["id"])
    assert [e["event_type"] for e in history["events"]] == ["REQUESTED"]
    assert history["replayed_status"] == "Requested"


@pytest.mark.asyncio
async def test_household_cannot_create_ticket(client: AsyncClient, tokens):
    resp = await client.post(f"{BASE}/", data={"title": "Leak"}, headers=auth_header(tokens["household"]))
    assert resp.status_code == 403
    body = resp.json()
    assert body["error"] == "forbidden"
    assert body["request_id"]


@pytest.mark.asyncio
async def test_create_ticket_blank_title(client: AsyncClient, tokens):
    resp = await client.post(f"{BASE}/", data={"title": "   "}, headers=auth_header(tokens["staff"]))
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_ticket_unknown_priority(client: AsyncClient, tokens):
    resp = await client.post(
        f"{BASE}/", data={"title": "Leak", "priority": "Whenever"}, headers=auth_header(tokens["staff"]),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_requires_token(client: AsyncClient, accounts):
    resp = await client.get(f"{BASE}/")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_inactive_account_is_forbidden(client: AsyncClient, tokens):
    resp = await client.get(f"{BASE}/", headers=auth_header(tokens["inactive"]))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_get_ticket_not_found(client: AsyncClient, tokens):
    resp = await client.get(f"{BASE}/99999", headers=auth_header(tokens["staff"]))
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_list_priorities(client: AsyncClient, tokens):
    resp = await client.get(f"{BASE}/priorities", headers=auth_header(tokens["household"]))
    assert resp.status_code == 200
    assert [p["name"] for p in resp.json()] == ["Critical", "Urgent", "Mild"]


# ════════════════════════════════════════════════════════════════
# STATE MACHINE
# ════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_full_lifecycle(client: AsyncClient, tokens, accounts):
    ticket = await create_ticket(client, tokens["staff"])
    tid = ticket["id"]

    resp = await accept_ticket(client, tokens["staff"], tid, accounts["operator"], priority="Critical")
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["status"] == "On-going"
    assert data["assigned_to"] == accounts["operator"]
    assert data["due_date"] == "2026-12-01"
    assert data["priority"] == "Critical"

    resp = await _put(client, tokens["operator"], tid, "for-verification")
    assert resp.status_code == 200
    assert resp.json()["status"] == "For Verification"

    resp = await _put(client, tokens["admin"], tid, "verify")
    assert resp.status_code == 200
    done = resp.json()
    assert done["status"] == "Completed"
    assert done["completed_at"] is not None

    history = await _events(client, tokens["staff"], tid)
    assert [e["event_type"] for e in history["events"]] == [
        "REQUESTED", "ACCEPTED", "FOR_VERIFICATION", "COMPLETED",
    ]
    assert history["status"] == history["replayed_status"] == "Completed"
    actors = [e["actor_id"] for e in history["events"]]
    assert actors == [accounts["staff"], accounts["staff"], accounts["operator"], accounts["admin"]]

    stamps = [datetime.fromisoformat(e["created_at"]) for e in history["events"]]
    assert stamps == sorted(stamps)
    fresh = (await client.get(f"{BASE}/{tid}", headers=auth_header(tokens["staff"]))).json()
    assert datetime.fromisoformat(fresh["updated_at"]) == stamps[-1]


@pytest.mark.asyncio
async def test_accept_completed_ticket_is_conflict(client: AsyncClient, tokens, accounts):
    tid = (await create_ticket(client, tokens["staff"]))["id"]
    await accept_ticket(client, tokens["staff"], tid, accounts["operator"])
    await _put(client, tokens["operator"], tid, "for-verification")
    await _put(client, tokens["staff"], tid, "verify")

    resp = await accept_ticket(client, tokens["staff"], tid, accounts["operator_c"])
    assert resp.status_code == 409
    assert resp.json()["error"] == "conflict"

    fresh = (await client.get(f"{BASE}/{tid}", headers=auth_header(tokens["staff"]))).json()
    assert fresh["status"] == "Completed"
    assert fresh["assigned_to"] == accounts["operator"]
    history = await _events(client, tokens["staff"], tid)
    assert [e["event_type"] for e in history["events"]] == [
        "REQUESTED", "ACCEPTED", "FOR_VERIFICATION", "COMPLETED",
    ]


@pytest.mark.asyncio
async def test_non_assignee_for_verification_changes_nothing(client: AsyncClient, tokens, accounts):
    tid = (await create_ticket(client, tokens["operator"], "Leaking pipe"))["id"]
    await accept_ticket(client, tokens["staff"], tid, accounts["operator"])

    resp = await _put(client, tokens["operator_c"], tid, "for-verification")
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"

    fresh = (await client.get(f"{BASE}/{tid}", headers=auth_header(tokens["staff"]))).json()
    assert fresh["status"] == "On-going"
    assert fresh["assigned_to"] == accounts["operator"]
    history = await _events(client, tokens["staff"], tid)
    assert [e["event_type"] for e in history["events"]] == ["REQUESTED", "ACCEPTED"]
    assert history["replayed_status"] == "On-going"


@pytest.mark.asyncio
async def test_accept_without_due_date_changes_nothing(client: AsyncClient, tokens, accounts):
    tid = (await create_ticket(client, tokens["staff"]))["id"]

    resp = await accept_ticket(client, tokens["staff"], tid, accounts["operator"], due_date=None)
    assert resp.status_code == 400

    fresh = (await client.get(f"{BASE}/{tid}", headers=auth_header(tokens["staff"]))).json()
    assert fresh["status"] == "Requested"
    assert fresh["assigned_to"] is None
    history = await _events(client, tokens["staff"], tid)
    assert [e["event_type"] for e in history["events"]] == ["REQUESTED"]


@pytest.mark.asyncio
async def test_accept_rejects_non_operator_and_missing_assignee(client: AsyncClient, tokens, accounts):
    tid = (await create_ticket(client, tokens["staff"]))["id"]

    resp = await accept_ticket(client, tokens["staff"], tid, accounts["household"])
    assert resp.status_code == 400

    resp = await accept_ticket(client, tokens["staff"], tid, 99999)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_operator_cannot_accept(client: AsyncClient, tokens, accounts):
    tid = (await create_ticket(client, tokens["operator"]))["id"]
    resp = await accept_ticket(client, tokens["operator"], tid, accounts["operator"])
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_reassignment_emits_reassigned(client: AsyncClient, tokens, accounts):
    tid = (await create_ticket(client, tokens["staff"]))["id"]
    await accept_ticket(client, tokens["staff"], tid, accounts["operator"])

    resp = await accept_ticket(client, tokens["admin"], tid, accounts["operator_c"], due_date="2026-12-20")
    assert resp.status_code == 200
    assert resp.json()["assigned_to"] == accounts["operator_c"]

    history = await _events(client, tokens["staff"], tid)
    assert [e["event_type"] for e in history["events"]] == ["REQUESTED", "ACCEPTED", "REASSIGNED"]

    # O operador anterior perde o ticket
    resp = await _put(client, tokens["operator"], tid, "for-verification")
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_only_assignee_marks_ongoing(client: AsyncClient, tokens, accounts):
    tid = (await create_ticket(client, tokens["staff"]))["id"]

    # Ainda em Requested: estado inválido vence o papel
    resp = await _put(client, tokens["operator"], tid, "ongoing")
    assert resp.status_code == 409

    await accept_ticket(client, tokens["staff"], tid, accounts["operator"])
    resp = await _put(client, tokens["operator_c"], tid, "ongoing")
    assert resp.status_code == 403

    resp = await _put(client, tokens["operator"], tid, "ongoing")
    assert resp.status_code == 200
    assert resp.json()["status"] == "On-going"


@pytest.mark.asyncio
async def test_verify_requires_for_verification_when_strict(client: AsyncClient, tokens, accounts):
    tid = (await create_ticket(client, tokens["staff"]))["id"]
    await accept_ticket(client, tokens["staff"], tid, accounts["operator"])

    resp = await _put(client, tokens["staff"], tid, "verify")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_verify_override_when_not_strict(client: AsyncClient, tokens, accounts, monkeypatch):
    monkeypatch.setattr(maintenance_endpoints.settings, "STRICT_COMPLETION_VERIFICATION", False)
    tid = (await create_ticket(client, tokens["staff"]))["id"]
    await accept_ticket(client, tokens["staff"], tid, accounts["operator"])

    resp = await _put(client, tokens["staff"], tid, "verify")
    assert resp.status_code == 200
    assert resp.json()["status"] == "Completed"
    history = await _events(client, tokens["staff"], tid)
    assert history["replayed_status"] == "Completed"


@pytest.mark.asyncio
async def test_cancel_by_operator_creator_only(client: AsyncClient, tokens, accounts):
    tid = (await create_ticket(client, tokens["operator"]))["id"]

    resp = await _put(client, tokens["operator_c"], tid, "cancel")
    assert resp.status_code == 403

    resp = await _put(client, tokens["operator"], tid, "cancel")
    assert resp.status_code == 200
    assert resp.json()["status"] == "Cancelled"

    resp = await _put(client, tokens["staff"], tid, "cancel")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_action_on_missing_ticket(client: AsyncClient, tokens):
    resp = await _put(client, tokens["staff"], 424242, "cancel")
    assert resp.status_code == 404


# ════════════════════════════════════════════════════════════════
# OBSERVAÇÕES
# ════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_remarks_append_on_terminal_ticket(client: AsyncClient, tokens, accounts):
    tid = (await create_ticket(client, tokens["operator"]))["id"]
    await _put(client, tokens["operator"], tid, "cancel")

    resp = await _put(client, tokens["staff"], tid, "remarks", data={"remarks": "Duplicate of #1"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "Cancelled"
    assert data["remarks"].endswith("] Duplicate of #1")

    resp = await _put(client, tokens["operator"], tid, "remarks", data={"remarks": "Ok"})
    assert resp.status_code == 200
    assert len(resp.json()["remarks"].split("\n")) == 2

    history = await _events(client, tokens["staff"], tid)
    assert [e["event_type"] for e in history["events"]] == [
        "REQUESTED", "CANCELLED", "REMARK_ADDED", "REMARK_ADDED",
    ]
    assert history["replayed_status"] == "Cancelled"


@pytest.mark.asyncio
async def test_remarks_forbidden_for_unrelated_account(client: AsyncClient, tokens):
    tid = (await create_ticket(client, tokens["staff"]))["id"]
    resp = await _put(client, tokens["household"], tid, "remarks", data={"remarks": "hello"})
    assert resp.status_code == 403
    resp = await _put(client, tokens["staff"], tid, "remarks", data={"remarks": "  "})
    assert resp.status_code == 400


# ════════════════════════════════════════════════════════════════
# LISTAGEM
# ════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_list_filters(client: AsyncClient, tokens, accounts):
    first = (await create_ticket(client, tokens["staff"], title="First"))["id"]
    second = (await create_ticket(client, tokens["operator"], title="Second"))["id"]
    third = (await create_ticket(client, tokens["staff"], title="Third"))["id"]
    await accept_ticket(client, tokens["staff"], first, accounts["operator"])
    await _put(client, tokens["staff"], third, "cancel")

    headers = auth_header(tokens["staff"])

    resp = await client.get(f"{BASE}/", headers=headers)
    assert [t["id"] for t in resp.json()] == [third, second, first]

    resp = await client.get(f"{BASE}/", params={"status": "Requested,On-going"}, headers=headers)
    assert {t["id"] for t in resp.json()} == {first, second}

    resp = await client.get(f"{BASE}/", params={"assigned_to": accounts["operator"]}, headers=headers)
    assert [t["id"] for t in resp.json()] == [first]

    resp = await client.get(f"{BASE}/", params={"created_by": accounts["operator"]}, headers=headers)
    assert [t["id"] for t in resp.json()] == [second]

    resp = await client.get(f"{BASE}/", params={"status": "Requested,Lost"}, headers=headers)
    assert resp.status_code == 400
