"""
Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database, an admin, a client and a
pilot/editor pair with linked staff profiles.
"""
import pytest

from droneops.extensions import db
from droneops.main import create_app
from droneops.models.staff import Staff
from droneops.services.auth_service import register_user, generate_tokens_for_user


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _headers(user):
    access, _ = generate_tokens_for_user(user)
    return {"Authorization": f"Bearer {access}"}


@pytest.fixture
def admin(app):
    return register_user("admin@example.com", "admin-pass-123", "Asha Admin", role="admin")


@pytest.fixture
def client_user(app):
    return register_user("client@example.com", "client-pass-123", "Ravi Client", role="client", phone="+91 98765 43210")


@pytest.fixture
def other_client(app):
    return register_user("other@example.com", "client-pass-123", "Other Client", role="client")


def _staff_user(email, name, role, city, code):
    user = register_user(email, "staff-pass-123", name, role=role)
    staff = Staff(user_id=user.id, name=name, role=role, location=city, code=code, skills=[])
    db.session.add(staff)
    db.session.commit()
    return user, staff


@pytest.fixture
def pilot(app):
    return _staff_user("pilot@example.com", "Priya Pilot", "pilot", "Mumbai", "MUM101")


@pytest.fixture
def editor(app):
    return _staff_user("editor@example.com", "Eli Editor", "editor", "Pune", "ED202")


@pytest.fixture
def admin_headers(admin):
    return _headers(admin)


@pytest.fixture
def client_headers(client_user):
    return _headers(client_user)


@pytest.fixture
def other_client_headers(other_client):
    return _headers(other_client)


@pytest.fixture
def pilot_headers(pilot):
    return _headers(pilot[0])


@pytest.fixture
def editor_headers(editor):
    return _headers(editor[0])


@pytest.fixture
def order_payload():
    return {
        "client_name": "Ravi Client",
        "phone_number": "+91 98765 43210",
        "city": "Mumbai",
        "requirement_summary": "Aerial shots of the new office campus",
        "package_type": "premium",
        "amount": 25000,
        "order_date": "2026-11-02",
    }


@pytest.fixture
def make_order(client, client_headers, order_payload):
    """Create an order through the API and return its storage id."""
    def _make(**overrides):
        payload = {**order_payload, **overrides}
        resp = client.post("/api/v1/orders", json=payload, headers=client_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["id"]
    return _make


@pytest.fixture
def approved_order(client, admin_headers, make_order):
    order_id = make_order()
    resp = client.post(f"/api/v1/orders/{order_id}/approve", json={}, headers=admin_headers)
    assert resp.status_code == 200
    return order_id


@pytest.fixture
def assigned_order(client, admin_headers, approved_order, pilot, editor):
    resp = client.post(
        f"/api/v1/orders/{approved_order}/assign",
        json={"pilot_id": pilot[1].id, "editor_id": editor[1].id},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.get_json()
    return approved_order


def fresh(model, key):
    """Re-read a row, dropping anything cached in the session."""
    db.session.expire_all()
    return db.session.get(model, key)
