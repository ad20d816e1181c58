import logging
from datetime import datetime

from sqlalchemy import or_

from droneops.extensions import db
from droneops.models.inquiry import Inquiry
from droneops.services import order_workflow as wf
from droneops.services.comment_service import admin_comment
from droneops.services.order_service import build_order
from droneops.utils.exceptions import NotFoundError, ServiceError
from droneops.utils.identifiers import generate_inquiry_id

logger = logging.getLogger(__name__)

# converted is final; a rejected lead can still come back and convert
INQUIRY_TRANSITIONS = {
    "new": ("contacted", "converted", "rejected"),
    "contacted": ("converted", "rejected"),
    "rejected": ("converted",),
    "converted": (),
}

FOLLOW_UP_MESSAGE = "Please add follow-up notes."


def _move(inquiry, to_status, action):
    if to_status not in INQUIRY_TRANSITIONS.get(inquiry.status, ()):
        raise ServiceError(
            "INVALID_TRANSITION",
            f"Inquiry {inquiry.inquiry_ref} is {inquiry.status} and cannot move to {to_status}",
            {"from": inquiry.status, "to": to_status},
            status=409,
        )
    previous = inquiry.status
    inquiry.status = to_status
    inquiry.updated_at = datetime.utcnow()
    logger.info("[%s] %s %s -> %s", action, inquiry.inquiry_ref, previous, to_status)


def create_inquiry(actor, data):
    inquiry = Inquiry(
        inquiry_ref=generate_inquiry_id(),
        client_name=data["client_name"],
        phone_number=data["phone_number"],
        city=data["city"],
        requirement_summary=data["requirement_summary"],
        source=data.get("source") or "website",
        follow_up_notes=data.get("follow_up_notes"),
        status="new",
        created_by=actor.id,
        created_at=datetime.utcnow(),
    )
    db.session.add(inquiry)
    db.session.commit()
    logger.info("[INQUIRY_CREATE] %s (%s)", inquiry.inquiry_ref, inquiry.source)
    return inquiry


def get_inquiry(inquiry_id):
    inquiry = db.session.get(Inquiry, inquiry_id)
    if not inquiry:
        inquiry = Inquiry.query.filter_by(inquiry_ref=inquiry_id).first()
    if not inquiry:
        raise NotFoundError("Inquiry not found")
    return inquiry


def list_inquiries(status=None, source=None, search=None):
    q = Inquiry.query
    if status and status != "all":
        q = q.filter(Inquiry.status == status)
    if source and source != "all":
        q = q.filter(Inquiry.source == source)
    if search:
        term = f"%{search}%"
        q = q.filter(
            or_(
                Inquiry.client_name.ilike(term),
                Inquiry.inquiry_ref.ilike(term),
                Inquiry.phone_number.ilike(term),
                Inquiry.city.ilike(term),
            )
        )
    return q.order_by(Inquiry.created_at.desc(), Inquiry.id.desc()).all()


def mark_contacted(inquiry):
    _move(inquiry, "contacted", "INQUIRY_CONTACTED")
    db.session.commit()
    return inquiry


def add_follow_up(inquiry, notes):
    """Record a follow-up; a ``new`` lead becomes ``contacted``."""
    notes = (notes or "").strip()
    if not notes:
        raise ServiceError("COMMENT_REQUIRED", FOLLOW_UP_MESSAGE, {"field": "follow_up_notes"}, status=400)
    if inquiry.status not in ("new", "contacted"):
        raise ServiceError(
            "INVALID_TRANSITION",
            f"Inquiry {inquiry.inquiry_ref} is {inquiry.status}; follow-ups are closed",
            status=409,
        )
    if inquiry.status == "new":
        _move(inquiry, "contacted", "INQUIRY_FOLLOW_UP")
    inquiry.follow_up_notes = notes
    inquiry.updated_at = datetime.utcnow()
    db.session.commit()
    return inquiry


def reject_inquiry(inquiry):
    _move(inquiry, "rejected", "INQUIRY_REJECT")
    db.session.commit()
    return inquiry


def convert_inquiry(inquiry, actor, data):
    """Turn the lead into a ``new`` order; both rows commit together."""
    _move(inquiry, "converted", "INQUIRY_CONVERT")

    order = build_order(
        {
            "client_name": inquiry.client_name,
            "phone_number": inquiry.phone_number,
            "city": inquiry.city,
            "requirement_summary": inquiry.requirement_summary,
            "amount": data["amount"],
            "package_type": data.get("package_type"),
            "order_date": data.get("order_date"),
            "location": data.get("location"),
        },
        wf.OrderStatus.NEW,
    )
    db.session.flush()
    inquiry.order_id = order.id
    admin_comment(order, actor, "general", f"Created from inquiry {inquiry.inquiry_ref} ({inquiry.source})")

    db.session.commit()
    logger.info("[ORDER_CREATE] %s from %s", order.order_ref, inquiry.inquiry_ref)
    return order


def delete_inquiry(inquiry):
    if inquiry.status == "converted":
        raise ServiceError(
            "INQUIRY_CONVERTED",
            f"Inquiry {inquiry.inquiry_ref} became order {inquiry.order_id} and is kept for reference",
            status=409,
        )
    logger.warning("[INQUIRY_DELETE] %s (%s)", inquiry.inquiry_ref, inquiry.status)
    db.session.delete(inquiry)
    db.session.commit()
