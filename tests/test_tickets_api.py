from tests.fakes import auth


def create(client, title="Printer jam", priority="high", token="customer-token"):
    r = client.post(
        "/api/tickets",
        json={"title": title, "description": "Paper everywhere", "priority": priority},
        headers=auth(token),
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_requires_authentication(client):
    r = client.get("/api/tickets")
    assert r.status_code == 401


def test_invalid_token(client):
    r = client.get("/api/tickets", headers=auth("bogus"))
    assert r.status_code == 401


def test_customer_creates_open_ticket(client):
    body = create(client)

    assert body["status"] == "open"
    assert body["agent_id"] is None
    assert body["customer_id"] == "customer-1"
    assert body["priority"] == "high"


def test_priority_defaults_to_medium(client):
    r = client.post(
        "/api/tickets",
        json={"title": "Laptop", "description": "Slow"},
        headers=auth("customer-token"),
    )
    assert r.status_code == 201
    assert r.json()["priority"] == "medium"


def test_create_rejects_blank_fields(client):
    r = client.post(
        "/api/tickets",
        json={"title": "  ", "description": "Slow", "priority": "low"},
        headers=auth("customer-token"),
    )
    assert r.status_code == 422


def test_agents_cannot_create_tickets(client):
    r = client.post(
        "/api/tickets",
        json={"title": "Laptop", "description": "Slow"},
        headers=auth("agent-a-token"),
    )
    assert r.status_code == 403


def test_customer_sees_only_own_tickets(client):
    mine = create(client, "Mine")
    create(client, "Theirs", token="other-customer-token")

    r = client.get("/api/tickets", headers=auth("customer-token"))
    assert r.status_code == 200
    assert [t["id"] for t in r.json()["tickets"]] == [mine["id"]]

    everything = client.get("/api/tickets", headers=auth("agent-a-token")).json()["tickets"]
    assert [t["title"] for t in everything] == ["Theirs", "Mine"]


def test_no_role_cannot_list(client):
    r = client.get("/api/tickets", headers=auth("newcomer-token"))
    assert r.status_code == 403


def test_printer_jam_scenario(client):
    ticket = create(client)

    own = client.get("/api/tickets", headers=auth("customer-token")).json()["tickets"]
    assert own[0]["id"] == ticket["id"]
    assert own[0]["status"] == "open"

    r = client.patch(
        f"/api/tickets/{ticket['id']}/status",
        json={"status": "resolved"},
        headers=auth("agent-a-token"),
    )
    assert r.status_code == 200
    listed = client.get("/api/tickets", headers=auth("agent-a-token")).json()["tickets"][0]
    assert (listed["status"], listed["agent_id"]) == ("resolved", "agent-a")

    r = client.patch(
        f"/api/tickets/{ticket['id']}/status",
        json={"status": "closed"},
        headers=auth("agent-b-token"),
    )
    assert r.status_code == 200
    listed = client.get("/api/tickets", headers=auth("agent-a-token")).json()["tickets"][0]
    assert (listed["status"], listed["agent_id"]) == ("closed", "agent-b")


def test_customers_cannot_change_status(client):
    ticket = create(client)

    r = client.patch(
        f"/api/tickets/{ticket['id']}/status",
        json={"status": "closed"},
        headers=auth("customer-token"),
    )
    assert r.status_code == 403


def test_update_unknown_ticket(client):
    r = client.patch(
        "/api/tickets/does-not-exist/status",
        json={"status": "closed"},
        headers=auth("agent-a-token"),
    )
    assert r.status_code == 404


def test_update_rejects_unknown_status(client):
    ticket = create(client)

    r = client.patch(
        f"/api/tickets/{ticket['id']}/status",
        json={"status": "escalated"},
        headers=auth("agent-a-token"),
    )
    assert r.status_code == 422


def test_status_filter_and_stats(client):
    first = create(client, "First")
    create(client, "Second")
    client.patch(
        f"/api/tickets/{first['id']}/status",
        json={"status": "closed"},
        headers=auth("agent-a-token"),
    )

    closed = client.get("/api/tickets?status=closed", headers=auth("agent-a-token")).json()["tickets"]
    assert [t["title"] for t in closed] == ["First"]

    stats = client.get("/api/tickets/stats", headers=auth("agent-a-token")).json()
    assert stats == {"total": 2, "open": 1, "in_progress": 0, "resolved": 0, "closed": 1}


def test_store_failure_is_one_line_error(client, db):
    db.failing_tables.add("tickets")

    r = client.get("/api/tickets", headers=auth("agent-a-token"))
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to load tickets"
