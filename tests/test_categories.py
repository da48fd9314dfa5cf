def test_create_category(client, category):
    assert category["is_active"] is True

    r = client.post("/categories", json={"name": "Network"})
    assert r.status_code == 400
    assert r.json() == {"error": "Category with this name already exists"}

    r = client.post("/categories", json={"name": ""})
    assert r.status_code == 400
    assert r.json()["error"] == "Category name is required"


def test_unreferenced_category_is_hard_deleted(client, category):
    r = client.delete(f"/categories/{category['id']}")
    assert r.status_code == 200
    assert r.json()["message"] == "Category deleted successfully"
    assert client.get(f"/categories/{category['id']}").status_code == 404


def test_referenced_category_is_soft_deleted(client, category, make_ticket):
    t = make_ticket(category_id=category["id"])

    r = client.delete(f"/categories/{category['id']}")
    assert r.status_code == 200
    assert r.json()["message"] == "Category deactivated successfully (cannot delete due to existing tickets)"
    assert r.json()["category"]["is_active"] is False

    assert client.get("/categories").json() == []
    assert [c["name"] for c in client.get("/categories", params={"active_only": False}).json()] == ["Network"]
    # Ticket keeps its reference
    assert client.get(f"/tickets/{t['id']}").json()["category_name"] == "Network"


def test_update_category(client, category):
    client.post("/categories", json={"name": "Hardware"})
    r = client.put(f"/categories/{category['id']}", json={"name": "Hardware"})
    assert r.status_code == 400

    r = client.put(f"/categories/{category['id']}", json={"name": "Networking", "is_active": False})
    assert r.status_code == 200
    assert r.json()["name"] == "Networking"
    assert r.json()["is_active"] is False


def test_category_detail_has_stats(client, category, make_ticket):
    make_ticket(category_id=category["id"])
    t = make_ticket(category_id=category["id"])
    client.put(f"/tickets/{t['id']}", json={"status": "In Progress"})

    detail = client.get(f"/categories/{category['id']}").json()
    stats = detail["ticket_stats"]
    assert stats["total_tickets"] == 2
    assert stats["new_tickets"] == 1
    assert stats["in_progress_tickets"] == 1
    assert stats["avg_resolution_time_hours"] is None


def test_stats_overview(client, category, make_ticket):
    hardware = client.post("/categories", json={"name": "Hardware"}).json()
    make_ticket(category_id=hardware["id"], priority="Critical")
    make_ticket(category_id=hardware["id"])
    make_ticket(category_id=category["id"], priority="High")
    client.post("/categories", json={"name": "Email"})

    rows = client.get("/categories/stats/overview").json()
    assert [r["category_name"] for r in rows] == ["Hardware", "Network", "Email"]
    assert rows[0]["total_tickets"] == 2
    assert rows[0]["critical_tickets"] == 1
    assert rows[1]["high_priority_tickets"] == 1
    assert rows[2]["total_tickets"] == 0
