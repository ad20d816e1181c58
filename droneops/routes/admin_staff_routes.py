from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from droneops.schemas.staff_schema import StaffSchema
from droneops.services.assignment_service import get_assignment, list_assignments, update_assignment
from droneops.services.staff_service import (
    create_staff,
    delete_staff,
    get_staff,
    list_staff,
    update_staff,
)
from droneops.utils.auth_utils import current_user, require_role
from droneops.utils.response_formatter import success_response
from droneops.utils.validation import load_or_raise

bp = Blueprint("admin_staff", __name__, url_prefix="/api/v1/admin")


def _admin():
    return require_role(current_user(), "admin")


# ---- Pilots & editors ----
@bp.route("/staff", methods=["GET"])
@jwt_required()
def list_all_staff():
    _admin()
    staff = list_staff(
        role=request.args.get("role"),
        status=request.args.get("status"),
        search=request.args.get("search", "").strip(),
    )
    return success_response({"staff": [s.to_dict() for s in staff]})


@bp.route("/staff", methods=["POST"])
@jwt_required()
def add_staff():
    _admin()
    data = load_or_raise(StaffSchema(), request.get_json(silent=True))
    staff = create_staff(data)
    return success_response({"staff": staff.to_dict()}, status=201)


@bp.route("/staff/<staff_id>", methods=["GET"])
@jwt_required()
def staff_detail(staff_id):
    _admin()
    return success_response({"staff": get_staff(staff_id).to_dict()})


@bp.route("/staff/<staff_id>", methods=["PATCH"])
@jwt_required()
def edit_staff(staff_id):
    _admin()
    staff = get_staff(staff_id)
    updates = load_or_raise(StaffSchema(), request.get_json(silent=True), partial=True)
    staff = update_staff(staff, updates)
    return success_response({"staff": staff.to_dict()})


@bp.route("/staff/<staff_id>", methods=["DELETE"])
@jwt_required()
def remove_staff(staff_id):
    _admin()
    delete_staff(get_staff(staff_id))
    return success_response({"id": staff_id}, message="Staff member removed")


# ---- Assignment history ----
@bp.route("/assignments", methods=["GET"])
@jwt_required()
def all_assignments():
    _admin()
    assignments = list_assignments(order_id=request.args.get("order_id"))
    return success_response({"assignments": [a.to_dict() for a in assignments]})


@bp.route("/assignments/<assignment_id>", methods=["PATCH"])
@jwt_required()
def patch_assignment(assignment_id):
    _admin()
    data = request.get_json(silent=True) or {}
    assignment = update_assignment(get_assignment(assignment_id), data.get("status"))
    return success_response({"assignment": assignment.to_dict()})
