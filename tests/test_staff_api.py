import re

from droneops.extensions import db
from droneops.models.staff import Staff


def _create(client, headers, **body):
    payload = {"name": "Kiran Pilot", "role": "pilot", "location": "Bangalore", "phone": "+91 99887 76655"}
    payload.update(body)
    return client.post("/api/v1/admin/staff", json=payload, headers=headers)


def test_create_pilot_gets_city_code(client, admin_headers):
    resp = _create(client, admin_headers)
    assert resp.status_code == 201
    staff = resp.get_json()["staff"]
    assert re.fullmatch(r"BAN\d{3}", staff["code"])
    assert staff["status"] == "active"


def test_create_editor_gets_ed_code(client, admin_headers):
    resp = _create(client, admin_headers, name="Dev Editor", role="editor")
    assert re.fullmatch(r"ED\d{3}", resp.get_json()["staff"]["code"])


def test_invalid_staff_payload(client, admin_headers):
    resp = _create(client, admin_headers, name="", role="drone", phone="123")
    assert resp.status_code == 422
    fields = resp.get_json()["error"]["details"]["fields"]
    assert {"name", "role", "phone"} <= set(fields)


def test_link_requires_matching_role(client, admin_headers, client_user):
    resp = _create(client, admin_headers, user_id=client_user.id)
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "ROLE_MISMATCH"


def test_role_is_immutable_and_location_recodes(client, admin_headers):
    staff_id = _create(client, admin_headers).get_json()["staff"]["id"]

    resp = client.patch(f"/api/v1/admin/staff/{staff_id}", json={"role": "editor"}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "ROLE_IMMUTABLE"

    resp = client.patch(f"/api/v1/admin/staff/{staff_id}", json={"location": "Chennai"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json()["staff"]["code"].startswith("CHE")


def test_list_filters(client, admin_headers, pilot, editor):
    pilots = client.get("/api/v1/admin/staff?role=pilot", headers=admin_headers).get_json()["staff"]
    assert [s["name"] for s in pilots] == ["Priya Pilot"]

    found = client.get("/api/v1/admin/staff?search=ED202", headers=admin_headers).get_json()["staff"]
    assert [s["name"] for s in found] == ["Eli Editor"]


def test_staff_in_use_cannot_be_deleted(client, admin_headers, assigned_order, pilot):
    resp = client.delete(f"/api/v1/admin/staff/{pilot[1].id}", headers=admin_headers)
    assert resp.status_code == 409
    assert resp.get_json()["error"]["code"] == "STAFF_IN_USE"


def test_unused_staff_can_be_deleted(client, admin_headers):
    staff_id = _create(client, admin_headers).get_json()["staff"]["id"]
    resp = client.delete(f"/api/v1/admin/staff/{staff_id}", headers=admin_headers)
    assert resp.status_code == 200
    db.session.expire_all()
    assert db.session.get(Staff, staff_id) is None


def test_staff_routes_are_admin_only(client, pilot_headers):
    assert client.get("/api/v1/admin/staff", headers=pilot_headers).status_code == 403
