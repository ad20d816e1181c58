import pytest

from conftest import fresh
from droneops.extensions import db
from droneops.models.cancellation import Cancellation
from droneops.models.comment import Comment
from droneops.models.order import Order


@pytest.fixture
def cancel(client, admin_headers):
    def _cancel(order_id, **body):
        body.setdefault("reason", "weather")
        return client.post(f"/api/v1/orders/{order_id}/cancel", json=body, headers=admin_headers)
    return _cancel


@pytest.fixture
def cancelled(cancel, assigned_order):
    resp = cancel(assigned_order, refund_amount=5000, admin_notes="Monsoon warning for the week")
    assert resp.status_code == 201
    return resp.get_json()["cancellation"]["id"]


def test_cancel_snapshots_the_order(cancel, assigned_order):
    resp = cancel(assigned_order, reason="pilot_unavailable", refund_amount=2500, admin_notes="Pilot is sick")
    assert resp.status_code == 201
    assert resp.get_json()["order"]["status"] == "cancelled"

    records = Cancellation.query.filter_by(order_id=assigned_order).all()
    assert len(records) == 1
    record = records[0]
    order = fresh(Order, assigned_order)
    assert record.order_ref == order.order_ref
    assert record.client_name == "Ravi Client"
    assert record.city == "Mumbai"
    assert record.assigned_pilot == "Priya Pilot"
    assert record.assigned_editor == "Eli Editor"
    assert record.previous_status == "assigned"
    assert record.status == "cancelled"
    assert float(record.refund_amount) == 2500
    assert order.status == "cancelled"

    texts = [c.comment_text for c in Comment.query.filter_by(order_id=assigned_order)]
    assert "Order cancelled (Pilot Unavailable): Pilot is sick" in texts


def test_cancel_pending_order_has_no_crew(cancel, make_order):
    order_id = make_order()
    resp = cancel(order_id, reason="client")
    assert resp.status_code == 201
    record = Cancellation.query.filter_by(order_id=order_id).one()
    assert record.assigned_pilot is None
    assert record.previous_status == "pending"


def test_reason_is_required(cancel, assigned_order):
    resp = cancel(assigned_order, reason="")
    assert resp.status_code == 422
    assert "reason" in resp.get_json()["error"]["details"]["fields"]
    assert fresh(Order, assigned_order).status == "assigned"
    assert Cancellation.query.count() == 0


def test_negative_refund_is_rejected(cancel, assigned_order):
    resp = cancel(assigned_order, refund_amount=-1)
    assert resp.status_code == 422
    assert Cancellation.query.count() == 0


def test_cancelled_order_cannot_be_cancelled_again(cancel, cancelled, assigned_order):
    resp = cancel(assigned_order)
    assert resp.status_code == 409
    assert resp.get_json()["error"]["code"] == "INVALID_TRANSITION"
    assert Cancellation.query.filter_by(order_id=assigned_order).count() == 1


def test_rejected_order_can_be_cancelled(client, admin_headers, cancel, make_order):
    order_id = make_order()
    client.post(f"/api/v1/orders/{order_id}/reject", json={"comment": "Out of area"}, headers=admin_headers)
    resp = cancel(order_id, reason="client")
    assert resp.status_code == 201
    assert fresh(Order, order_id).status == "cancelled"
    assert Cancellation.query.filter_by(order_id=order_id).one().previous_status == "rejected"


def test_completed_order_cannot_be_cancelled(cancel, make_order):
    order_id = make_order()
    order = fresh(Order, order_id)
    order.status = "completed"
    db.session.commit()

    resp = cancel(order_id)
    assert resp.status_code == 409
    assert resp.get_json()["error"]["code"] == "INVALID_TRANSITION"
    assert Cancellation.query.count() == 0


def test_sub_status_only_moves_forward(client, admin_headers, cancelled, assigned_order):
    base = f"/api/v1/admin/cancellations/{cancelled}"

    resp = client.patch(f"{base}/refund", json={"refund_amount": 4000, "admin_notes": "Partial refund"}, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.get_json()["cancellation"]
    assert body["status"] == "refund_initiated"
    assert body["refund_amount"] == 4000

    resp = client.patch(f"{base}/reassign", json={}, headers=admin_headers)
    assert resp.status_code == 409

    resp = client.patch(f"{base}/handled", json={}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json()["cancellation"]["status"] == "refund_completed"

    record = fresh(Cancellation, cancelled)
    assert record.admin_notes == "Monsoon warning for the week\nPartial refund"
    assert fresh(Order, assigned_order).status == "cancelled"


def test_reassign_does_not_revive_the_order(client, admin_headers, cancelled, assigned_order):
    resp = client.patch(f"/api/v1/admin/cancellations/{cancelled}/reassign", json={}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.get_json()["cancellation"]["status"] == "reassigned"
    assert fresh(Order, assigned_order).status == "cancelled"


def test_list_and_filter(client, admin_headers, cancel, cancelled, make_order):
    other = make_order(client_name="Neha Rao")
    cancel(other, reason="client")

    listed = client.get("/api/v1/admin/cancellations", headers=admin_headers).get_json()["cancellations"]
    assert len(listed) == 2

    weather = client.get("/api/v1/admin/cancellations?reason=weather", headers=admin_headers).get_json()["cancellations"]
    assert [c["id"] for c in weather] == [cancelled]

    found = client.get("/api/v1/admin/cancellations?search=neha", headers=admin_headers).get_json()["cancellations"]
    assert [c["client_name"] for c in found] == ["Neha Rao"]


def test_cancellation_shows_on_order_detail(client, admin_headers, cancelled, assigned_order):
    body = client.get(f"/api/v1/orders/{assigned_order}", headers=admin_headers).get_json()
    assert body["cancellation"]["id"] == cancelled
    assert body["allowed_next"] == []


def test_cancellations_are_admin_only(client, client_headers, cancelled):
    resp = client.get("/api/v1/admin/cancellations", headers=client_headers)
    assert resp.status_code == 403
