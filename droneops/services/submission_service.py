import logging
from datetime import datetime

from droneops.extensions import db
from droneops.models.submission import Submission, OPEN_STATUSES, RESUBMITTABLE_STATUSES
from droneops.services import order_workflow as wf
from droneops.services.assignment_service import current_assignment
from droneops.services.comment_service import admin_comment
from droneops.utils.exceptions import NotFoundError, ServiceError

logger = logging.getLogger(__name__)

CHANGES_COMMENT_MESSAGE = "Please add a comment explaining why this is being rejected."

STAGE_FOR_ROLE = {
    "pilot": "pilot_submission",
    "editor": "editor_submission",
}


def _check_submitter(order, staff):
    assignment = current_assignment(order.id)
    assigned_id = None
    if assignment:
        assigned_id = assignment.pilot_id if staff.role == "pilot" else assignment.editor_id
    if assigned_id != staff.id:
        raise ServiceError("FORBIDDEN", "You are not assigned to this order", status=403)
    return assignment


def _check_order_accepts(order, role, assignment):
    status = wf.parse_status(order.status)
    if status not in wf.SUBMITTABLE_STATES[role]:
        raise ServiceError(
            "INVALID_TRANSITION",
            f"Order {order.order_ref} is {order.status}; {role} footage cannot be submitted now",
            status=409,
        )
    # with a pilot on the job the editor waits for approved raw footage
    if role == "editor" and status == wf.OrderStatus.ASSIGNED and assignment.pilot_id:
        raise ServiceError(
            "INVALID_TRANSITION",
            f"Order {order.order_ref} is waiting on the pilot's footage",
            status=409,
        )


def create_submission(*, order, staff, drive_link, duration=None, hours_worked=None, comments=""):
    if not drive_link or not drive_link.strip():
        raise ServiceError("VALIDATION_ERROR", "Drive link is required", {"fields": {"drive_link": ["Drive link is required"]}}, status=422)

    role = staff.role
    assignment = _check_submitter(order, staff)
    _check_order_accepts(order, role, assignment)

    pending = Submission.query.filter(
        Submission.order_id == order.id,
        Submission.submitted_by == role,
        Submission.status.in_(OPEN_STATUSES),
    ).first()
    if pending:
        raise ServiceError(
            "SUBMISSION_PENDING",
            "A submission for this order is already awaiting review",
            {"submission_id": pending.id},
            status=409,
        )

    submission = Submission(
        order_id=order.id,
        submitted_by=role,
        submitter_id=staff.id,
        submitter_name=staff.name,
        drive_link=drive_link.strip(),
        duration=duration if role == "pilot" else None,
        hours_worked=hours_worked if role == "editor" else None,
        comments=comments or "",
        status="submitted",
        submitted_at=datetime.utcnow(),
    )
    db.session.add(submission)

    wf.transition(order, wf.SUBMITTED_STATUS_FOR_ROLE[role], f"{role.upper()}_SUBMIT")

    db.session.commit()
    return submission


def get_submission(submission_id):
    submission = db.session.get(Submission, submission_id)
    if not submission:
        raise NotFoundError("Submission not found")
    return submission


def _check_reviewable(submission, order):
    if wf.is_terminal_state(order.status):
        raise ServiceError(
            "ORDER_LOCKED",
            f"Order {order.order_ref} is {order.status}; its submissions can no longer be reviewed",
            status=409,
        )
    if submission.status not in OPEN_STATUSES:
        raise ServiceError(
            "ALREADY_REVIEWED",
            f"Submission was already {submission.status}",
            status=409,
        )


def _record_review(submission, actor, status, comment):
    submission.status = status
    submission.review_comments = comment or None
    submission.reviewed_by = actor.full_name or "Admin"
    submission.reviewed_at = datetime.utcnow()


def start_review(submission, order, actor):
    """Put a fresh submission in the review queue (``under_review``)."""
    _check_reviewable(submission, order)
    if submission.status != "submitted":
        raise ServiceError(
            "INVALID_TRANSITION",
            f"Submission is already {submission.status}",
            status=409,
        )
    submission.status = "under_review"
    submission.reviewed_by = actor.full_name or "Admin"
    db.session.commit()
    logger.info("[SUBMISSION_START_REVIEW] %s %s", order.order_ref, submission.id)
    return submission


def review_submission(submission, order, actor, approved, comment=""):
    """Approve or reject a deliverable; approval advances the order by role."""
    _check_reviewable(submission, order)

    comment = (comment or "").strip()
    _record_review(submission, actor, "approved" if approved else "rejected", comment)

    if approved:
        wf.transition(order, wf.REVIEWED_STATUS_FOR_ROLE[submission.submitted_by], "SUBMISSION_APPROVE")

    admin_comment(
        order,
        actor,
        STAGE_FOR_ROLE[submission.submitted_by],
        comment or ("Submission approved" if approved else "Submission rejected"),
    )

    db.session.commit()
    logger.info(
        "[SUBMISSION_REVIEW] %s %s %s",
        order.order_ref,
        submission.id,
        submission.status,
    )
    return submission


def request_changes(submission, order, actor, comment):
    """Send a deliverable back with notes. The order keeps its status."""
    _check_reviewable(submission, order)
    comment = (comment or "").strip()
    if not comment:
        raise ServiceError("COMMENT_REQUIRED", CHANGES_COMMENT_MESSAGE, {"field": "comment"}, status=400)

    _record_review(submission, actor, "needs_change", comment)
    admin_comment(order, actor, STAGE_FOR_ROLE[submission.submitted_by], f"Changes requested: {comment}")

    db.session.commit()
    logger.info("[SUBMISSION_NEEDS_CHANGE] %s %s", order.order_ref, submission.id)
    return submission


def list_submissions(order_id=None, role=None, submitter_id=None, status=None):
    q = Submission.query
    if order_id:
        q = q.filter_by(order_id=order_id)
    if role:
        q = q.filter_by(submitted_by=role)
    if submitter_id:
        q = q.filter_by(submitter_id=submitter_id)
    if status:
        q = q.filter_by(status=status)
    return q.order_by(Submission.submitted_at.desc(), Submission.id).all()


def resubmission_defaults(order_id, staff):
    """Link and notes from the latest sent-back submission, to prefill a resubmission."""
    last_returned = (
        Submission.query
        .filter(
            Submission.order_id == order_id,
            Submission.submitter_id == staff.id,
            Submission.status.in_(RESUBMITTABLE_STATUSES),
        )
        .order_by(Submission.submitted_at.desc())
        .first()
    )
    if not last_returned:
        return {"drive_link": "", "comments": "", "review_comments": None}
    return {
        "drive_link": last_returned.drive_link,
        "comments": last_returned.comments or "",
        "review_comments": last_returned.review_comments,
    }
