import logging
from datetime import datetime

from sqlalchemy import or_

from droneops.extensions import db
from droneops.models.cancellation import (
    Cancellation,
    CANCELLATION_REASONS,
    CANCELLATION_STATUSES,
)
from droneops.services import order_workflow as wf
from droneops.services.assignment_service import current_assignment
from droneops.services.comment_service import admin_comment
from droneops.utils.exceptions import NotFoundError, ServiceError

logger = logging.getLogger(__name__)

REASON_LABELS = {
    "client": "Client Request",
    "weather": "Weather Conditions",
    "gear_issue": "Equipment Issue",
    "pilot_unavailable": "Pilot Unavailable",
    "editor_unavailable": "Editor Unavailable",
    "other": "Other",
}


def cancel_order(order, actor, reason, refund_amount=None, admin_notes=""):
    """Move an in-flight order to ``cancelled`` and record why.

    The record keeps its own copy of client, city and crew so the history
    stays accurate if the order is edited later.
    """
    if reason not in CANCELLATION_REASONS:
        raise ServiceError(
            "VALIDATION_ERROR",
            "Cancellation reason is required",
            {"fields": {"reason": [f"Must be one of: {', '.join(CANCELLATION_REASONS)}"]}},
            status=422,
        )
    if refund_amount is not None and refund_amount < 0:
        raise ServiceError("VALIDATION_ERROR", "Refund amount cannot be negative", status=422)

    assignment = current_assignment(order.id)
    previous = wf.transition(order, wf.OrderStatus.CANCELLED, "ORDER_CANCEL")

    cancellation = Cancellation(
        order_id=order.id,
        order_ref=order.order_ref,
        client_name=order.client_name,
        city=order.city,
        assigned_pilot=assignment.pilot_name if assignment else order.pilot_name,
        assigned_editor=assignment.editor_name if assignment else order.editor_name,
        previous_status=previous,
        reason=reason,
        status="cancelled",
        refund_amount=refund_amount,
        admin_notes=admin_notes or "",
        cancelled_by=actor.id,
        cancellation_date=datetime.utcnow(),
    )
    db.session.add(cancellation)

    text = f"Order cancelled ({REASON_LABELS[reason]})"
    if admin_notes:
        text = f"{text}: {admin_notes}"
    admin_comment(order, actor, "general", text)

    db.session.commit()
    return cancellation


def get_cancellation(cancellation_id):
    cancellation = db.session.get(Cancellation, cancellation_id)
    if not cancellation:
        raise NotFoundError("Cancellation not found")
    return cancellation


def cancellation_for_order(order_id):
    return (
        Cancellation.query
        .filter_by(order_id=order_id)
        .order_by(Cancellation.cancellation_date.desc())
        .first()
    )


def list_cancellations(reason=None, status=None, search=None):
    q = Cancellation.query
    if reason and reason != "all":
        q = q.filter(Cancellation.reason == reason)
    if status and status != "all":
        q = q.filter(Cancellation.status == status)
    if search:
        term = f"%{search}%"
        q = q.filter(
            or_(
                Cancellation.client_name.ilike(term),
                Cancellation.order_ref.ilike(term),
            )
        )
    return q.order_by(Cancellation.cancellation_date.desc(), Cancellation.id).all()


def advance_cancellation(cancellation, to_status, actor, refund_amount=None, notes=None):
    """Move the cancellation sub-status forward. The order itself stays cancelled."""
    if to_status not in CANCELLATION_STATUSES:
        raise ServiceError("INVALID_STATUS", f"Unknown cancellation status '{to_status}'", status=400)

    current_rank = CANCELLATION_STATUSES.index(cancellation.status)
    target_rank = CANCELLATION_STATUSES.index(to_status)
    if target_rank <= current_rank:
        raise ServiceError(
            "INVALID_TRANSITION",
            f"Cancellation is already '{cancellation.status}' and cannot move to '{to_status}'",
            status=409,
        )

    if refund_amount is not None:
        if refund_amount < 0:
            raise ServiceError("VALIDATION_ERROR", "Refund amount cannot be negative", status=422)
        cancellation.refund_amount = refund_amount
    if notes:
        existing = cancellation.admin_notes or ""
        cancellation.admin_notes = f"{existing}\n{notes}".strip()

    previous = cancellation.status
    cancellation.status = to_status
    cancellation.updated_at = datetime.utcnow()
    db.session.commit()

    logger.info(
        "[CANCELLATION_%s] %s %s -> %s by %s",
        to_status.upper(),
        cancellation.order_ref,
        previous,
        to_status,
        actor.id,
    )
    return cancellation


def reassign(cancellation, actor, notes=None):
    return advance_cancellation(cancellation, "reassigned", actor, notes=notes)


def initiate_refund(cancellation, actor, refund_amount=None, notes=None):
    return advance_cancellation(cancellation, "refund_initiated", actor, refund_amount=refund_amount, notes=notes)


def mark_handled(cancellation, actor, notes=None):
    return advance_cancellation(cancellation, "refund_completed", actor, notes=notes)
