import logging
from datetime import datetime

from dateutil import parser
from sqlalchemy import or_

from droneops.extensions import db
from droneops.models.order import Order
from droneops.models.user import User
from droneops.services import order_workflow as wf
from droneops.services.comment_service import admin_comment
from droneops.utils.exceptions import NotFoundError, ServiceError, ValidationFailed
from droneops.utils.identifiers import generate_order_id

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {
    "client_name",
    "phone_number",
    "city",
    "location",
    "order_date",
    "package_type",
    "amount",
    "requirement_summary",
    "drive_link",
    "reference_links",
    "referral_code",
    "final_drive_link",
}

REJECTION_COMMENT_MESSAGE = "Please add a comment explaining the rejection reason."
MORE_INFO_COMMENT_MESSAGE = "Please add a comment describing the information needed."


def _linked_client_id(client_id):
    if not client_id:
        return None
    client = db.session.get(User, client_id)
    if not client or client.role != "client":
        raise ValidationFailed({"client_id": ["No client account with this id"]})
    return client.id


def build_order(data, status, client_id=None):
    """Add a new order to the session without committing."""
    order = Order(
        order_ref=generate_order_id(),
        client_id=client_id,
        client_name=data["client_name"],
        phone_number=data["phone_number"],
        city=data["city"],
        location=data.get("location"),
        order_date=data.get("order_date") or datetime.utcnow(),
        package_type=data.get("package_type") or "basic",
        amount=data["amount"],
        requirement_summary=data["requirement_summary"],
        drive_link=data.get("drive_link"),
        reference_links=data.get("reference_links") or [],
        referral_code=data.get("referral_code"),
        status=wf.OrderStatus(status).value,
        created_at=datetime.utcnow(),
    )
    db.session.add(order)
    return order


def create_order(user, data):
    """Persist a validated order. Clients start at ``pending``, admins at ``new``."""
    status = wf.OrderStatus.NEW if user.role == "admin" else wf.OrderStatus.PENDING
    if user.role == "client":
        client_id = user.id
    else:
        client_id = _linked_client_id(data.get("client_id"))

    order = build_order(data, status, client_id)
    db.session.commit()

    logger.info("[ORDER_CREATE] %s by %s (%s)", order.order_ref, user.id, order.status)
    return order


def get_order(order_id):
    """Fetch by storage id, falling back to the ``ORD...`` reference."""
    order = db.session.get(Order, order_id)
    if not order:
        order = Order.query.filter_by(order_ref=order_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def _assigned_order_ids(staff):
    from droneops.services.assignment_service import current_assignments_by_order

    column = "pilot_id" if staff.role == "pilot" else "editor_id"
    return [
        order_id
        for order_id, assignment in current_assignments_by_order().items()
        if getattr(assignment, column) == staff.id
    ]


def scoped_query(user):
    q = Order.query
    if user.role == "client":
        q = q.filter(Order.client_id == user.id)
    elif user.role in ("pilot", "editor"):
        staff = user.staff_profile
        if not staff:
            return q.filter(db.false())
        q = q.filter(Order.id.in_(_assigned_order_ids(staff)))
    return q


def can_view(order, user):
    if user.role == "admin":
        return True
    if user.role == "client":
        return order.client_id == user.id
    staff = user.staff_profile
    if not staff:
        return False
    return order.id in _assigned_order_ids(staff)


def ensure_visible(order, user):
    if not can_view(order, user):
        raise ServiceError("FORBIDDEN", "You do not have access to this order", status=403)
    return order


def filtered_orders(user, status=None, stage=None, city=None, search=None, date_from=None, date_to=None):
    q = scoped_query(user)

    if stage and stage in wf.STAGE_FILTERS:
        q = q.filter(Order.status.in_(wf.STAGE_FILTERS[stage]))
    elif stage:
        q = q.filter(Order.status == wf.parse_status(stage).value)

    if status and status != "all":
        q = q.filter(Order.status == wf.parse_status(status).value)

    if city and city != "all":
        q = q.filter(Order.city == city)

    if search:
        term = f"%{search}%"
        q = q.filter(
            or_(
                Order.client_name.ilike(term),
                Order.order_ref.ilike(term),
                Order.phone_number.ilike(term),
                Order.city.ilike(term),
            )
        )

    if date_from:
        try:
            q = q.filter(Order.created_at >= parser.parse(date_from))
        except (ValueError, OverflowError):
            raise ServiceError("VALIDATION_ERROR", "Invalid date_from", status=422)
    if date_to:
        try:
            q = q.filter(Order.created_at <= parser.parse(date_to))
        except (ValueError, OverflowError):
            raise ServiceError("VALIDATION_ERROR", "Invalid date_to", status=422)

    # id breaks created_at ties so repeated reads come back identical
    return q.order_by(Order.created_at.desc(), Order.id.desc())


def get_orders():
    return Order.query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def update_order_details(order, updates):
    """Edit descriptive fields. Status only changes through the named actions."""
    if wf.is_terminal_state(order.status):
        raise ServiceError(
            "ORDER_LOCKED",
            f"Order {order.order_ref} is {order.status} and can no longer be edited",
            status=409,
        )
    if "status" in updates:
        raise ServiceError(
            "STATUS_NOT_EDITABLE",
            "Order status changes only through workflow actions",
            status=400,
        )

    changed = []
    for field, value in updates.items():
        if field not in EDITABLE_FIELDS:
            continue
        setattr(order, field, value)
        changed.append(field)

    order.updated_at = datetime.utcnow()
    db.session.commit()
    logger.info("[ORDER_UPDATE] %s fields=%s", order.order_ref, ",".join(sorted(changed)))
    return order


def delete_order(order):
    # children (assignments, submissions, comments, cancellations) are left in place
    logger.warning("[ORDER_DELETE] %s (%s)", order.order_ref, order.status)
    db.session.delete(order)
    db.session.commit()


def _require_comment(comment, message):
    if not comment or not comment.strip():
        raise ServiceError("COMMENT_REQUIRED", message, {"field": "comment"}, status=400)
    return comment.strip()


def approve_order(order, actor, comment=None):
    wf.transition(order, wf.OrderStatus.APPROVED, "ORDER_APPROVE")
    admin_comment(order, actor, "general", (comment or "").strip() or "Order approved for assignment")
    db.session.commit()
    return order


def reject_order(order, actor, comment):
    text = _require_comment(comment, REJECTION_COMMENT_MESSAGE)
    wf.transition(order, wf.OrderStatus.REJECTED, "ORDER_REJECT")
    order.admin_comments = text
    admin_comment(order, actor, "general", text)
    db.session.commit()
    return order


def request_more_info(order, actor, comment):
    """Ask the client for details; the order stays where it is."""
    text = _require_comment(comment, MORE_INFO_COMMENT_MESSAGE)
    if wf.parse_status(order.status) not in wf.REVIEWABLE_STATES:
        raise ServiceError(
            "INVALID_TRANSITION",
            f"Order {order.order_ref} is {order.status}; more info can only be requested before approval",
            status=409,
        )
    order.admin_comments = text
    order.updated_at = datetime.utcnow()
    admin_comment(order, actor, "general", text)
    db.session.commit()
    logger.info("[ORDER_MORE_INFO] %s", order.order_ref)
    return order


def start_editing(order, actor, comment=None):
    wf.transition(order, wf.OrderStatus.EDITING, "ORDER_START_EDITING")
    admin_comment(order, actor, "general", (comment or "").strip() or "Footage handed to editor")
    db.session.commit()
    return order


def send_to_final_review(order, actor, comment=None):
    wf.transition(order, wf.OrderStatus.FINAL_REVIEW, "ORDER_FINAL_REVIEW")
    admin_comment(order, actor, "final_review", (comment or "").strip() or "Sent for final review")
    db.session.commit()
    return order


def complete_order(order, actor, final_drive_link=None, comment=None):
    wf.transition(order, wf.OrderStatus.COMPLETED, "ORDER_COMPLETE")
    if final_drive_link:
        order.final_drive_link = final_drive_link
    admin_comment(order, actor, "final_review", (comment or "").strip() or "Order completed")
    db.session.commit()
    return order


def order_timeline(order):
    from droneops.services.assignment_service import current_assignment
    from droneops.services.cancellation_service import cancellation_for_order
    from droneops.services.comment_service import list_comments
    from droneops.services.submission_service import list_submissions

    assignment = current_assignment(order.id)
    cancellation = cancellation_for_order(order.id)
    return {
        "order": order.to_dict(),
        "assignment": assignment.to_dict() if assignment else None,
        "submissions": [s.to_dict() for s in list_submissions(order.id)],
        "comments": [c.to_dict() for c in list_comments(order.id)],
        "cancellation": cancellation.to_dict() if cancellation else None,
        "allowed_next": wf.allowed_next(order.status),
    }
