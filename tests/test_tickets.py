import pytest


async def test_create_ticket_defaults(client, requester, create_ticket):
    user, headers = requester
    ticket = await create_ticket(headers)

    assert ticket["status"] == "OPEN"
    assert ticket["priority"] == "MEDIUM"
    assert ticket["category"] == "OTHER"
    assert ticket["creator"]["email"] == user.email
    assert ticket["assignee"] is None
    assert ticket["closed_at"] is None


async def test_create_ticket_requires_auth(client):
    response = await client.post("/api/tickets", json={"title": "x", "description": "y"})
    assert response.status_code == 401


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "   ", "description": "algo"},
        {"title": "algo", "description": ""},
        {"title": "algo", "description": "algo", "priority": "CRITICAL"},
        {"title": "x" * 201, "description": "algo"},
    ],
)
async def test_create_ticket_validation(client, requester, payload):
    _, headers = requester
    response = await client.post("/api/tickets", json=payload, headers=headers)
    assert response.status_code == 422


async def test_user_only_sees_own_tickets(client, requester, other_requester, create_ticket):
    _, headers = requester
    _, other_headers = other_requester
    mine = await create_ticket(headers, title="Mío")
    theirs = await create_ticket(other_headers, title="Ajeno")

    response = await client.get("/api/tickets", headers=headers)
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [mine["id"]]

    response = await client.get(f"/api/tickets/{theirs['id']}", headers=headers)
    assert response.status_code == 403


async def test_agent_sees_unassigned_and_own(
    client, requester, agent, other_agent, create_ticket
):
    _, user_headers = requester
    _, agent_headers = agent
    _, other_headers = other_agent

    free = await create_ticket(user_headers, title="Libre")
    taken_by_me = await create_ticket(user_headers, title="Mío")
    taken_by_other = await create_ticket(user_headers, title="De otro")

    await client.patch(f"/api/tickets/{taken_by_me['id']}/assign", headers=agent_headers)
    await client.patch(f"/api/tickets/{taken_by_other['id']}/assign", headers=other_headers)

    response = await client.get("/api/tickets", headers=agent_headers)
    ids = {t["id"] for t in response.json()}
    assert ids == {free["id"], taken_by_me["id"]}

    response = await client.get(f"/api/tickets/{taken_by_other['id']}", headers=agent_headers)
    assert response.status_code == 403


async def test_admin_sees_everything(client, requester, other_requester, admin, agent, create_ticket):
    _, h1 = requester
    _, h2 = other_requester
    _, admin_headers = admin
    _, agent_headers = agent

    t1 = await create_ticket(h1)
    t2 = await create_ticket(h2)
    await client.patch(f"/api/tickets/{t2['id']}/assign", headers=agent_headers)

    response = await client.get("/api/tickets", headers=admin_headers)
    assert {t["id"] for t in response.json()} == {t1["id"], t2["id"]}


async def test_list_filters(client, requester, admin, create_ticket):
    _, headers = requester
    _, admin_headers = admin
    await create_ticket(headers, title="Sin red en la oficina", category="NETWORK", priority="HIGH")
    await create_ticket(headers, title="Pedido de licencia", category="SOFTWARE", priority="LOW")

    response = await client.get("/api/tickets?category=NETWORK", headers=admin_headers)
    assert [t["title"] for t in response.json()] == ["Sin red en la oficina"]

    response = await client.get("/api/tickets?priority=LOW", headers=admin_headers)
    assert [t["title"] for t in response.json()] == ["Pedido de licencia"]

    response = await client.get("/api/tickets?search=licencia", headers=admin_headers)
    assert [t["title"] for t in response.json()] == ["Pedido de licencia"]

    response = await client.get("/api/tickets?status=OPEN", headers=admin_headers)
    assert len(response.json()) == 2


async def test_list_is_newest_first(client, requester, create_ticket):
    _, headers = requester
    first = await create_ticket(headers, title="Primero")
    second = await create_ticket(headers, title="Segundo")

    response = await client.get("/api/tickets", headers=headers)
    assert [t["id"] for t in response.json()] == [second["id"], first["id"]]


async def test_missing_ticket_is_404(client, admin):
    _, headers = admin
    response = await client.get("/api/tickets/9999", headers=headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Ticket no encontrado"


# --- Claiming ---

async def test_claim_assigns_to_caller(client, requester, agent, create_ticket):
    _, user_headers = requester
    agent_user, agent_headers = agent
    ticket = await create_ticket(user_headers)

    response = await client.patch(f"/api/tickets/{ticket['id']}/assign", headers=agent_headers)
    assert response.status_code == 200
    assert response.json()["assignee"]["id"] == str(agent_user.id)
    assert response.json()["status"] == "OPEN"


async def test_claim_taken_ticket_conflicts(client, requester, agent, other_agent, create_ticket):
    _, user_headers = requester
    _, agent_headers = agent
    _, other_headers = other_agent
    ticket = await create_ticket(user_headers)

    await client.patch(f"/api/tickets/{ticket['id']}/assign", headers=agent_headers)
    response = await client.patch(f"/api/tickets/{ticket['id']}/assign", headers=other_headers)
    assert response.status_code == 409


async def test_reclaim_by_same_agent_is_noop(client, requester, agent, create_ticket):
    _, user_headers = requester
    agent_user, agent_headers = agent
    ticket = await create_ticket(user_headers)

    await client.patch(f"/api/tickets/{ticket['id']}/assign", headers=agent_headers)
    response = await client.patch(f"/api/tickets/{ticket['id']}/assign", headers=agent_headers)
    assert response.status_code == 200
    assert response.json()["assignee"]["id"] == str(agent_user.id)


async def test_user_cannot_claim(client, requester, create_ticket):
    _, headers = requester
    ticket = await create_ticket(headers)
    response = await client.patch(f"/api/tickets/{ticket['id']}/assign", headers=headers)
    assert response.status_code == 403


# --- Status and priority edits ---

async def test_agent_updates_status_and_priority(client, requester, agent, create_ticket):
    _, user_headers = requester
    _, agent_headers = agent
    ticket = await create_ticket(user_headers)

    response = await client.patch(
        f"/api/tickets/{ticket['id']}",
        json={"status": "IN_PROGRESS", "priority": "URGENT"},
        headers=agent_headers,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "IN_PROGRESS"
    assert response.json()["priority"] == "URGENT"


async def test_user_cannot_edit(client, requester, create_ticket):
    _, headers = requester
    ticket = await create_ticket(headers)
    response = await client.patch(
        f"/api/tickets/{ticket['id']}", json={"status": "RESOLVED"}, headers=headers
    )
    assert response.status_code == 403


async def test_staff_cannot_set_closed(client, requester, admin, create_ticket):
    _, user_headers = requester
    _, admin_headers = admin
    ticket = await create_ticket(user_headers)

    response = await client.patch(
        f"/api/tickets/{ticket['id']}", json={"status": "CLOSED"}, headers=admin_headers
    )
    assert response.status_code == 403

    response = await client.get(f"/api/tickets/{ticket['id']}", headers=admin_headers)
    assert response.json()["status"] == "OPEN"


async def test_agent_cannot_edit_ticket_of_other_agent(
    client, requester, agent, other_agent, create_ticket
):
    _, user_headers = requester
    _, agent_headers = agent
    _, other_headers = other_agent
    ticket = await create_ticket(user_headers)
    await client.patch(f"/api/tickets/{ticket['id']}/assign", headers=other_headers)

    response = await client.patch(
        f"/api/tickets/{ticket['id']}", json={"priority": "LOW"}, headers=agent_headers
    )
    assert response.status_code == 403


async def test_empty_update_is_rejected(client, requester, agent, create_ticket):
    _, user_headers = requester
    _, agent_headers = agent
    ticket = await create_ticket(user_headers)

    response = await client.patch(f"/api/tickets/{ticket['id']}", json={}, headers=agent_headers)
    assert response.status_code == 400


# --- Closing ---

async def _resolve(client, ticket_id, headers):
    response = await client.patch(
        f"/api/tickets/{ticket_id}", json={"status": "RESOLVED"}, headers=headers
    )
    assert response.status_code == 200


async def test_creator_closes_resolved_ticket(client, requester, agent, create_ticket):
    _, user_headers = requester
    _, agent_headers = agent
    ticket = await create_ticket(user_headers)
    await _resolve(client, ticket["id"], agent_headers)

    response = await client.patch(f"/api/tickets/{ticket['id']}/close", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "CLOSED"
    assert response.json()["closed_at"] is not None

    # Closed tickets leave the active list
    response = await client.get("/api/tickets", headers=user_headers)
    assert response.json() == []


async def test_approve_alias_closes(client, requester, agent, create_ticket):
    _, user_headers = requester
    _, agent_headers = agent
    ticket = await create_ticket(user_headers)
    await _resolve(client, ticket["id"], agent_headers)

    response = await client.patch(f"/api/tickets/{ticket['id']}/approve", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "CLOSED"


async def test_cannot_close_unresolved_ticket(client, requester, create_ticket):
    _, headers = requester
    ticket = await create_ticket(headers)
    response = await client.patch(f"/api/tickets/{ticket['id']}/close", headers=headers)
    assert response.status_code == 400


async def test_only_creator_can_close(client, requester, agent, admin, create_ticket):
    _, user_headers = requester
    _, agent_headers = agent
    _, admin_headers = admin
    ticket = await create_ticket(user_headers)
    await _resolve(client, ticket["id"], agent_headers)

    for headers in (agent_headers, admin_headers):
        response = await client.patch(f"/api/tickets/{ticket['id']}/close", headers=headers)
        assert response.status_code == 403


async def test_closed_ticket_rejects_changes(client, requester, agent, create_ticket):
    _, user_headers = requester
    _, agent_headers = agent
    ticket = await create_ticket(user_headers)
    await _resolve(client, ticket["id"], agent_headers)
    await client.patch(f"/api/tickets/{ticket['id']}/close", headers=user_headers)

    response = await client.patch(
        f"/api/tickets/{ticket['id']}", json={"status": "OPEN"}, headers=agent_headers
    )
    assert response.status_code == 409

    response = await client.post(
        f"/api/tickets/{ticket['id']}/comments", json={"content": "¿Sigue?"}, headers=user_headers
    )
    assert response.status_code == 409

    response = await client.patch(f"/api/tickets/{ticket['id']}/close", headers=user_headers)
    assert response.status_code == 409

    response = await client.patch(f"/api/tickets/{ticket['id']}/assign", headers=agent_headers)
    assert response.status_code == 409

    # The creator can still read it
    response = await client.get(f"/api/tickets/{ticket['id']}", headers=user_headers)
    assert response.status_code == 200


async def test_history_lists_closed_tickets(client, requester, agent, create_ticket):
    _, user_headers = requester
    _, agent_headers = agent
    closed = await create_ticket(user_headers, title="Cerrado")
    await create_ticket(user_headers, title="Abierto")
    await _resolve(client, closed["id"], agent_headers)
    await client.patch(f"/api/tickets/{closed['id']}/close", headers=user_headers)

    response = await client.get("/api/portal/history", headers=user_headers)
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [closed["id"]]

    response = await client.get("/api/portal/history", headers=agent_headers)
    assert response.status_code == 403
