from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from droneops.services.cancellation_service import (
    get_cancellation,
    initiate_refund,
    list_cancellations,
    mark_handled,
    reassign,
)
from droneops.utils.auth_utils import current_user, require_role
from droneops.utils.exceptions import ServiceError
from droneops.utils.response_formatter import success_response

bp = Blueprint("admin_cancellations", __name__, url_prefix="/api/v1/admin/cancellations")


def _admin():
    return require_role(current_user(), "admin")


def _notes():
    data = request.get_json(silent=True) or {}
    return (data.get("admin_notes") or data.get("notes") or "").strip() or None


@bp.route("", methods=["GET"])
@jwt_required()
def list_all():
    _admin()
    cancellations = list_cancellations(
        reason=request.args.get("reason"),
        status=request.args.get("status"),
        search=request.args.get("search", "").strip(),
    )
    return success_response({"cancellations": [c.to_dict() for c in cancellations]})


@bp.route("/<cancellation_id>", methods=["GET"])
@jwt_required()
def get_one(cancellation_id):
    _admin()
    return success_response({"cancellation": get_cancellation(cancellation_id).to_dict()})


# ------------------------------------------------------------
# Sub-status actions; the order stays cancelled in every case
# ------------------------------------------------------------
@bp.route("/<cancellation_id>/reassign", methods=["PATCH"])
@jwt_required()
def reassign_order(cancellation_id):
    admin = _admin()
    cancellation = reassign(get_cancellation(cancellation_id), admin, notes=_notes())
    return success_response({"cancellation": cancellation.to_dict()})


@bp.route("/<cancellation_id>/refund", methods=["PATCH"])
@jwt_required()
def start_refund(cancellation_id):
    admin = _admin()
    data = request.get_json(silent=True) or {}
    refund_amount = data.get("refund_amount")
    if refund_amount is not None:
        try:
            refund_amount = float(refund_amount)
        except (TypeError, ValueError):
            raise ServiceError("VALIDATION_ERROR", "Invalid refund amount", status=422)

    cancellation = initiate_refund(
        get_cancellation(cancellation_id),
        admin,
        refund_amount=refund_amount,
        notes=_notes(),
    )
    return success_response({"cancellation": cancellation.to_dict()})


@bp.route("/<cancellation_id>/handled", methods=["PATCH"])
@jwt_required()
def handled(cancellation_id):
    admin = _admin()
    cancellation = mark_handled(get_cancellation(cancellation_id), admin, notes=_notes())
    return success_response({"cancellation": cancellation.to_dict()})
