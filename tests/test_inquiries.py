import re

import pytest

from conftest import fresh
from droneops.models.comment import Comment
from droneops.models.inquiry import Inquiry
from droneops.models.order import Order

BASE = "/api/v1/admin/inquiries"


@pytest.fixture
def lead_payload():
    return {
        "client_name": "Anita Desai",
        "phone_number": "+91 91234 56789",
        "city": "Jaipur",
        "requirement_summary": "Wedding venue flyover",
        "source": "instagram",
    }


@pytest.fixture
def inquiry(client, admin_headers, lead_payload):
    resp = client.post(BASE, json=lead_payload, headers=admin_headers)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["inquiry"]["id"]


def test_create_inquiry(client, admin_headers, lead_payload):
    resp = client.post(BASE, json=lead_payload, headers=admin_headers)
    assert resp.status_code == 201
    body = resp.get_json()["inquiry"]
    assert body["status"] == "new"
    assert body["source"] == "instagram"
    assert re.fullmatch(r"INQ\d{6}", body["inquiry_ref"])


def test_invalid_inquiry(client, admin_headers, lead_payload):
    resp = client.post(BASE, json={**lead_payload, "source": "billboard", "phone_number": "12"}, headers=admin_headers)
    assert resp.status_code == 422
    assert {"source", "phone_number"} <= set(resp.get_json()["error"]["details"]["fields"])


def test_contact_then_follow_up(client, admin_headers, inquiry):
    resp = client.patch(f"{BASE}/{inquiry}/contacted", headers=admin_headers)
    assert resp.get_json()["inquiry"]["status"] == "contacted"

    resp = client.patch(f"{BASE}/{inquiry}/contacted", headers=admin_headers)
    assert resp.status_code == 409

    resp = client.patch(f"{BASE}/{inquiry}/follow-up", json={"follow_up_notes": "Call back Friday"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json()["inquiry"]["follow_up_notes"] == "Call back Friday"


def test_follow_up_marks_new_lead_contacted(client, admin_headers, inquiry):
    resp = client.patch(f"{BASE}/{inquiry}/follow-up", json={"follow_up_notes": "Sent price list"}, headers=admin_headers)
    assert resp.get_json()["inquiry"]["status"] == "contacted"


def test_follow_up_needs_notes(client, admin_headers, inquiry):
    resp = client.patch(f"{BASE}/{inquiry}/follow-up", json={"follow_up_notes": "  "}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "COMMENT_REQUIRED"
    assert fresh(Inquiry, inquiry).status == "new"


def test_convert_creates_new_order(client, admin_headers, inquiry):
    resp = client.post(f"{BASE}/{inquiry}/convert", json={"amount": 18000, "package_type": "standard"}, headers=admin_headers)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["inquiry"]["status"] == "converted"
    order = fresh(Order, body["order"]["id"])
    assert order.status == "new"
    assert order.client_name == "Anita Desai"
    assert order.city == "Jaipur"
    assert order.package_type == "standard"
    assert fresh(Inquiry, inquiry).order_id == order.id

    ref = fresh(Inquiry, inquiry).inquiry_ref
    texts = [c.comment_text for c in Comment.query.filter_by(order_id=order.id)]
    assert texts == [f"Created from inquiry {ref} (instagram)"]

    again = client.post(f"{BASE}/{inquiry}/convert", json={"amount": 18000}, headers=admin_headers)
    assert again.status_code == 409
    assert Order.query.count() == 1


def test_convert_needs_positive_amount(client, admin_headers, inquiry):
    resp = client.post(f"{BASE}/{inquiry}/convert", json={"amount": 0}, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.get_json()["error"]["details"]["fields"]["amount"] == ["Amount must be greater than 0"]
    assert fresh(Inquiry, inquiry).status == "new"
    assert Order.query.count() == 0


def test_rejected_lead_can_still_convert(client, admin_headers, inquiry):
    assert client.patch(f"{BASE}/{inquiry}/reject", headers=admin_headers).status_code == 200
    assert client.patch(f"{BASE}/{inquiry}/reject", headers=admin_headers).status_code == 409
    assert client.patch(f"{BASE}/{inquiry}/follow-up", json={"follow_up_notes": "x"}, headers=admin_headers).status_code == 409

    resp = client.post(f"{BASE}/{inquiry}/convert", json={"amount": 5000}, headers=admin_headers)
    assert resp.status_code == 201


def test_list_filters(client, admin_headers, inquiry, lead_payload):
    client.post(BASE, json={**lead_payload, "client_name": "Vikram Sethi", "source": "website"}, headers=admin_headers)
    client.patch(f"{BASE}/{inquiry}/contacted", headers=admin_headers)

    all_leads = client.get(BASE, headers=admin_headers).get_json()["inquiries"]
    assert len(all_leads) == 2

    contacted = client.get(f"{BASE}?status=contacted", headers=admin_headers).get_json()["inquiries"]
    assert [i["id"] for i in contacted] == [inquiry]

    web = client.get(f"{BASE}?source=website", headers=admin_headers).get_json()["inquiries"]
    assert [i["client_name"] for i in web] == ["Vikram Sethi"]

    found = client.get(f"{BASE}?search=vikram", headers=admin_headers).get_json()["inquiries"]
    assert len(found) == 1


def test_delete(client, admin_headers, inquiry, lead_payload):
    assert client.delete(f"{BASE}/{inquiry}", headers=admin_headers).status_code == 200
    assert fresh(Inquiry, inquiry) is None

    other = client.post(BASE, json=lead_payload, headers=admin_headers).get_json()["inquiry"]["id"]
    client.post(f"{BASE}/{other}/convert", json={"amount": 1000}, headers=admin_headers)
    resp = client.delete(f"{BASE}/{other}", headers=admin_headers)
    assert resp.status_code == 409
    assert resp.get_json()["error"]["code"] == "INQUIRY_CONVERTED"


def test_inquiries_are_admin_only(client, client_headers):
    assert client.get(BASE, headers=client_headers).status_code == 403
