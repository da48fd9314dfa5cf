def _tech(client, first, last, email):
    r = client.post("/technicians", json={"first_name": first, "last_name": last, "email": email})
    assert r.status_code == 201, r.text
    return r.json()


def test_create_technician(client, technician):
    assert technician["is_active"] is True
    assert client.post("/technicians", json={"first_name": "A", "last_name": "B", "email": "sam@helpdesk.test"}).status_code == 400

    r = client.post("/technicians", json={"first_name": "A", "last_name": " ", "email": "a@helpdesk.test"})
    assert r.status_code == 400
    assert r.json()["error"] == "First name, last name, and email are required"


def test_list_technicians_hides_inactive_by_default(client, technician):
    other = _tech(client, "Ana", "Lopez", "ana@helpdesk.test")
    client.delete(f"/technicians/{other['id']}")

    body = client.get("/technicians").json()
    assert [t["id"] for t in body["technicians"]] == [technician["id"]]

    body = client.get("/technicians", params={"active_only": False}).json()
    assert body["pagination"]["total"] == 2


def test_technician_detail_orders_by_priority(client, technician, make_ticket):
    low = make_ticket(priority="Low")
    crit = make_ticket(priority="Critical")
    med = make_ticket()
    for t in (low, crit, med):
        client.put(f"/tickets/{t['id']}", json={"technician_id": technician["id"]})

    detail = client.get(f"/technicians/{technician['id']}").json()
    assert [t["id"] for t in detail["assigned_tickets"]] == [crit["id"], med["id"], low["id"]]
    assert detail["assigned_tickets"][0]["company_name"] == "Acme Corp"


def test_deactivation_blocked_by_active_tickets(client, technician, make_ticket):
    a, b = make_ticket(), make_ticket()
    for t in (a, b):
        client.put(f"/tickets/{t['id']}", json={"technician_id": technician["id"]})

    r = client.delete(f"/technicians/{technician['id']}")
    assert r.status_code == 400
    assert r.json()["active_tickets"] == 2

    client.put(f"/tickets/{a['id']}", json={"status": "Resolved"})
    client.put(f"/tickets/{b['id']}", json={"status": "Closed"})

    r = client.delete(f"/technicians/{technician['id']}")
    assert r.status_code == 200
    assert r.json()["message"] == "Technician deactivated successfully"
    assert r.json()["technician"]["is_active"] is False

    # Soft delete only; the row and its history stay readable
    detail = client.get(f"/technicians/{technician['id']}").json()
    assert detail["is_active"] is False
    assert len(detail["assigned_tickets"]) == 2


def test_put_deactivation_obeys_same_guard(client, technician, make_ticket):
    t = make_ticket()
    client.put(f"/tickets/{t['id']}", json={"technician_id": technician["id"]})
    body = {"first_name": "Sam", "last_name": "Rivera", "email": "sam@helpdesk.test", "is_active": False}

    r = client.put(f"/technicians/{technician['id']}", json=body)
    assert r.status_code == 400
    assert r.json()["active_tickets"] == 1
    assert client.get(f"/technicians/{technician['id']}").json()["is_active"] is True

    client.put(f"/tickets/{t['id']}", json={"technician_id": None})
    r = client.put(f"/technicians/{technician['id']}", json=body)
    assert r.status_code == 200
    assert r.json()["is_active"] is False


def test_unknown_technician(client):
    assert client.get("/technicians/404").status_code == 404
    assert client.delete("/technicians/404").json() == {"error": "Technician not found"}
