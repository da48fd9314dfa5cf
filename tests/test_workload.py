from datetime import datetime, timedelta

import pytest
from sqlalchemy.dialects import mssql, mysql, postgresql, sqlite

from app.domain.errors import InfrastructureError
from app.domain.models import Ticket
from app.services.workload_service import resolution_hours


def _backdate(database, ticket_id, *, created, resolved=None, status=None):
    with database.session() as s:
        ticket = s.get(Ticket, ticket_id)
        ticket.created_at = created
        ticket.resolved_at = resolved
        if status:
            ticket.status = status
        s.add(ticket)
        s.commit()


def test_summary_ranks_busiest_first(client, technician, make_ticket):
    idle = client.post("/technicians", json={"first_name": "Ana", "last_name": "Lopez", "email": "ana@helpdesk.test"}).json()
    busy = client.post("/technicians", json={"first_name": "Bo", "last_name": "Chen", "email": "bo@helpdesk.test"}).json()
    retired = client.post("/technicians", json={"first_name": "Old", "last_name": "Timer", "email": "old@helpdesk.test"}).json()
    client.delete(f"/technicians/{retired['id']}")

    for priority in ("Critical", "Low"):
        t = make_ticket(priority=priority)
        client.put(f"/tickets/{t['id']}", json={"technician_id": busy["id"]})
    t = make_ticket(priority="High")
    client.put(f"/tickets/{t['id']}", json={"technician_id": technician["id"]})

    rows = client.get("/technicians/workload/summary").json()
    assert [r["technician_id"] for r in rows] == [busy["id"], technician["id"], idle["id"]]

    top = rows[0]
    assert top["technician_name"] == "Bo Chen"
    assert top["total_assigned_tickets"] == 2
    assert top["active_tickets"] == 2
    assert top["critical_tickets"] == 1
    assert top["avg_resolution_time_hours"] is None

    assert rows[-1]["total_assigned_tickets"] == 0
    assert rows[-1]["active_tickets"] == 0


def test_summary_breaks_active_ties_on_critical(client, technician, make_ticket):
    other = client.post("/technicians", json={"first_name": "Ana", "last_name": "Lopez", "email": "ana@helpdesk.test"}).json()
    t = make_ticket(priority="Low")
    client.put(f"/tickets/{t['id']}", json={"technician_id": technician["id"]})
    t = make_ticket(priority="Critical")
    client.put(f"/tickets/{t['id']}", json={"technician_id": other["id"]})

    rows = client.get("/technicians/workload/summary").json()
    assert [r["technician_id"] for r in rows] == [other["id"], technician["id"]]


def test_average_resolution_hours(client, database, technician, make_ticket):
    start = datetime(2026, 3, 2, 8, 0, 0)
    a, b, open_ = make_ticket(), make_ticket(), make_ticket()
    for t in (a, b, open_):
        client.put(f"/tickets/{t['id']}", json={"technician_id": technician["id"]})

    _backdate(database, a["id"], created=start, resolved=start + timedelta(hours=10), status="Resolved")
    _backdate(database, b["id"], created=start, resolved=start + timedelta(hours=5, minutes=30), status="Closed")

    workload = client.get(f"/technicians/{technician['id']}/workload").json()
    assert workload["total_assigned_tickets"] == 3
    assert workload["resolved_tickets"] == 1
    assert workload["closed_tickets"] == 1
    assert workload["new_tickets"] == 1
    assert workload["active_tickets"] == 1
    # The open ticket does not count towards the mean
    assert workload["avg_resolution_time_hours"] == 7.75

    row = client.get("/technicians/workload/summary").json()[0]
    assert row["avg_resolution_time_hours"] == 7.75


def test_single_resolution(client, database, category, make_ticket):
    t = make_ticket(category_id=category["id"])
    start = datetime(2026, 1, 5, 9, 0, 0)
    _backdate(database, t["id"], created=start, resolved=start + timedelta(hours=10), status="Resolved")

    stats = client.get(f"/categories/{category['id']}").json()["ticket_stats"]
    assert stats["avg_resolution_time_hours"] == 10.0

    row = client.get("/categories/stats/overview").json()[0]
    assert row["avg_resolution_time_hours"] == 10.0
    assert row["active_tickets"] == 0


def test_unknown_technician_workload_is_zeroed(client):
    r = client.get("/technicians/9999/workload")
    assert r.status_code == 200
    body = r.json()
    assert body["total_assigned_tickets"] == 0
    assert body["active_tickets"] == 0
    assert body["avg_resolution_time_hours"] is None


def test_empty_summary(client):
    assert client.get("/technicians/workload/summary").json() == []
    assert client.get("/categories/stats/overview").json() == []


@pytest.mark.parametrize(
    "dialect, expected",
    [
        (sqlite.dialect(), "julianday(ticket.resolved_at) - julianday(ticket.created_at)"),
        (postgresql.dialect(), "extract(epoch from ticket.resolved_at - ticket.created_at)"),
        (mssql.dialect(), "datediff(second, ticket.created_at, ticket.resolved_at)"),
        (mysql.dialect(), "timestampdiff(second, ticket.created_at, ticket.resolved_at)"),
    ],
)
def test_resolution_hours_per_dialect(dialect, expected):
    sql = str(resolution_hours(dialect.name).compile(dialect=dialect)).lower()
    assert expected in sql


def test_resolution_hours_unknown_dialect():
    with pytest.raises(InfrastructureError):
        resolution_hours("oracle")
