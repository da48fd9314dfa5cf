import pytest
from fastapi.testclient import TestClient

from app.api.app import create_app
from app.db.engine import Database


@pytest.fixture
def database():
    return Database("sqlite://")


@pytest.fixture
def client(database):
    with TestClient(create_app(database)) as c:
        yield c


@pytest.fixture
def customer(client):
    r = client.post("/customers", json={
        "company_name": "Acme Corp",
        "contact_name": "Jo Doe",
        "email": "it@acme.test",
        "phone": "555-0100",
    })
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def technician(client):
    r = client.post("/technicians", json={"first_name": "Sam", "last_name": "Rivera", "email": "sam@helpdesk.test"})
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def category(client):
    r = client.post("/categories", json={"name": "Network", "description": "Connectivity issues"})
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture
def make_ticket(client, customer):
    def _make(**overrides):
        body = {
            "customer_id": customer["id"],
            "title": "VPN drops every hour",
            "description": "Laptop loses VPN connection roughly every hour.",
            **overrides,
        }
        r = client.post("/tickets", json=body)
        assert r.status_code == 201, r.text
        return r.json()

    return _make
