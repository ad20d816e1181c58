from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from droneops.schemas.submission_schema import (
    SubmissionChangesSchema,
    SubmissionCreateSchema,
    SubmissionReviewSchema,
)
from droneops.services import order_service
from droneops.services.staff_service import staff_for_user
from droneops.services.submission_service import (
    create_submission,
    get_submission,
    list_submissions,
    request_changes,
    resubmission_defaults,
    review_submission,
    start_review,
)
from droneops.utils.auth_utils import current_user, require_role
from droneops.utils.response_formatter import success_response
from droneops.utils.validation import load_or_raise

bp = Blueprint("submissions", __name__, url_prefix="/api/v1")


# ------------------------------------------------------------
# Pilot/editor hands in footage (drive link)
# ------------------------------------------------------------
@bp.route("/orders/<order_id>/submissions", methods=["POST"])
@jwt_required()
def submit_work(order_id):
    user = require_role(current_user(), "pilot", "editor")
    staff = staff_for_user(user)
    order = order_service.get_order(order_id)

    data = load_or_raise(SubmissionCreateSchema(), request.get_json(silent=True))
    submission = create_submission(
        order=order,
        staff=staff,
        drive_link=data["drive_link"],
        duration=data.get("duration"),
        hours_worked=data.get("hours_worked"),
        comments=data.get("comments") or "",
    )
    return success_response({
        "submission": submission.to_dict(),
        "order_status": order.status,
    }, status=201)


# ------------------------------------------------------------
# Submissions on one order (anyone who can see the order)
# ------------------------------------------------------------
@bp.route("/orders/<order_id>/submissions", methods=["GET"])
@jwt_required()
def get_order_submissions(order_id):
    user = current_user()
    order = order_service.ensure_visible(order_service.get_order(order_id), user)

    submissions = list_submissions(order.id)
    return success_response({
        "order_status": order.status,
        "submissions": [s.to_dict() for s in submissions],
    })


# ------------------------------------------------------------
# Prefill for a resubmission after rejection
# ------------------------------------------------------------
@bp.route("/orders/<order_id>/submissions/defaults", methods=["GET"])
@jwt_required()
def get_resubmission_defaults(order_id):
    user = require_role(current_user(), "pilot", "editor")
    staff = staff_for_user(user)
    order = order_service.ensure_visible(order_service.get_order(order_id), user)
    return success_response(resubmission_defaults(order.id, staff))


# ------------------------------------------------------------
# Admin: all submissions, optionally filtered
# ------------------------------------------------------------
@bp.route("/submissions", methods=["GET"])
@jwt_required()
def all_submissions():
    user = current_user()
    if user.role in ("pilot", "editor"):
        staff = staff_for_user(user)
        submissions = list_submissions(submitter_id=staff.id, status=request.args.get("status"))
    else:
        require_role(user, "admin")
        submissions = list_submissions(
            order_id=request.args.get("order_id"),
            role=request.args.get("role"),
            status=request.args.get("status"),
        )
    return success_response({"submissions": [s.to_dict() for s in submissions]})


# ------------------------------------------------------------
# Admin approves / rejects a submission
# ------------------------------------------------------------
@bp.route("/submissions/<submission_id>/review", methods=["POST"])
@jwt_required()
def review(submission_id):
    admin = require_role(current_user(), "admin")
    submission = get_submission(submission_id)
    order = order_service.get_order(submission.order_id)

    data = load_or_raise(SubmissionReviewSchema(), request.get_json(silent=True))

    submission = review_submission(
        submission,
        order,
        admin,
        approved=data["approved"],
        comment=data.get("comment") or "",
    )
    return success_response({
        "submission": submission.to_dict(),
        "order_status": order.status,
    })


# ------------------------------------------------------------
# Admin review queue: pick up a submission, or send it back
# ------------------------------------------------------------
@bp.route("/submissions/<submission_id>/start-review", methods=["POST"])
@jwt_required()
def begin_review(submission_id):
    admin = require_role(current_user(), "admin")
    submission = get_submission(submission_id)
    order = order_service.get_order(submission.order_id)

    submission = start_review(submission, order, admin)
    return success_response({"submission": submission.to_dict()})


@bp.route("/submissions/<submission_id>/request-changes", methods=["POST"])
@jwt_required()
def send_back(submission_id):
    admin = require_role(current_user(), "admin")
    submission = get_submission(submission_id)
    order = order_service.get_order(submission.order_id)

    data = load_or_raise(SubmissionChangesSchema(), request.get_json(silent=True))
    submission = request_changes(submission, order, admin, data.get("comment") or "")
    return success_response({
        "submission": submission.to_dict(),
        "order_status": order.status,
    }, message="Changes requested")
