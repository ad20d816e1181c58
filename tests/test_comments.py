import pytest

from droneops.extensions import db
from droneops.models.comment import Comment


def test_comments_come_back_newest_first(client, admin_headers, approved_order):
    for text in ("first note", "second note", "third note"):
        resp = client.post(
            f"/api/v1/orders/{approved_order}/comments",
            json={"comment_text": text},
            headers=admin_headers,
        )
        assert resp.status_code == 201

    comments = client.get(f"/api/v1/orders/{approved_order}/comments", headers=admin_headers).get_json()["comments"]
    assert [c["comment_text"] for c in comments] == [
        "third note",
        "second note",
        "first note",
        "Order approved for assignment",
    ]


def test_client_comments_are_client_feedback(client, client_headers, make_order):
    order_id = make_order()
    resp = client.post(
        f"/api/v1/orders/{order_id}/comments",
        json={"comment_text": "Please include the rooftop", "comment_stage": "final_review"},
        headers=client_headers,
    )
    assert resp.status_code == 201
    comment = resp.get_json()["comment"]
    assert comment["comment_by"] == "client"
    assert comment["comment_stage"] == "client_feedback"
    assert comment["commenter_name"] == "Ravi Client"


def test_staff_comment_uses_staff_name(client, assigned_order, pilot_headers):
    resp = client.post(
        f"/api/v1/orders/{assigned_order}/comments",
        json={"comment_text": "Wind is picking up", "comment_stage": "pilot_submission"},
        headers=pilot_headers,
    )
    assert resp.status_code == 201
    comment = resp.get_json()["comment"]
    assert comment["comment_by"] == "pilot"
    assert comment["commenter_name"] == "Priya Pilot"


def test_blank_comment_is_refused(client, admin_headers, approved_order):
    resp = client.post(f"/api/v1/orders/{approved_order}/comments", json={"comment_text": " "}, headers=admin_headers)
    assert resp.status_code == 422


def test_outsiders_cannot_comment(client, other_client_headers, make_order):
    order_id = make_order()
    resp = client.post(f"/api/v1/orders/{order_id}/comments", json={"comment_text": "hi"}, headers=other_client_headers)
    assert resp.status_code == 403


def test_comments_cannot_be_edited_or_deleted(app, approved_order):
    comment = Comment.query.filter_by(order_id=approved_order).one()

    comment.comment_text = "rewritten"
    with pytest.raises(RuntimeError):
        db.session.commit()
    db.session.rollback()

    db.session.delete(comment)
    with pytest.raises(RuntimeError):
        db.session.commit()
    db.session.rollback()

    assert Comment.query.filter_by(order_id=approved_order).one().comment_text == "Order approved for assignment"


def test_admin_sees_all_comments(client, admin_headers, client_headers, approved_order):
    assert len(client.get("/api/v1/comments", headers=admin_headers).get_json()["comments"]) == 1
    assert client.get("/api/v1/comments", headers=client_headers).status_code == 403
