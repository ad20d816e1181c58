from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from droneops.extensions import db
from droneops.schemas.cancellation_schema import CancellationCreateSchema
from droneops.schemas.order_schema import (
    AssignSchema,
    CompleteOrderSchema,
    OrderCreateSchema,
    OrderListSchema,
    OrderUpdateSchema,
    ReviewCommentSchema,
)
from droneops.services import order_service
from droneops.services.assignment_service import assign_staff, list_assignments
from droneops.services.cancellation_service import cancel_order
from droneops.utils.auth_utils import current_user, require_role
from droneops.utils.pagination import page_args, paginate_query
from droneops.utils.response_formatter import success_response, error_response
from droneops.utils.validation import load_or_raise

bp = Blueprint("orders", __name__, url_prefix="/api/v1/orders")


def _admin():
    return require_role(current_user(), "admin")


def _comment_from_body():
    return load_or_raise(ReviewCommentSchema(), request.get_json(silent=True)).get("comment")


# ------------------------------------------------------------
#  GET /orders - List orders (clients: own; staff: assigned; admin: all)
# ------------------------------------------------------------
@bp.route("", methods=["GET"])
@jwt_required()
def list_orders():
    user = current_user()

    q = order_service.filtered_orders(
        user,
        status=request.args.get("status"),
        stage=request.args.get("stage"),
        city=request.args.get("city"),
        search=request.args.get("search"),
        date_from=request.args.get("date_from"),
        date_to=request.args.get("date_to"),
    )

    page, limit = page_args(request.args)
    items, pagination = paginate_query(q, page, limit)

    return success_response({
        "orders": OrderListSchema(many=True).dump(items),
        "pagination": pagination,
    })


# ------------------------------------------------------------
#  POST /orders - Create order (client portal or admin console)
# ------------------------------------------------------------
@bp.route("", methods=["POST"])
@jwt_required()
def create_new_order():
    user = require_role(current_user(), "client", "admin")
    data = load_or_raise(OrderCreateSchema(), request.get_json(silent=True))

    try:
        order = order_service.create_order(user, data)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error("[ORDER_CREATE_ERROR] %s", e)
        return error_response("ORDER_CREATE_ERROR", "Could not save the order", status=500)

    return success_response({
        "id": order.id,
        "order_ref": order.order_ref,
        "status": order.status,
        "created_at": order.created_at.isoformat() + "Z"
    }, status=201)


# ------------------------------------------------------------
#  GET /orders/<order_id> - Order with assignment, submissions, comments
# ------------------------------------------------------------
@bp.route("/<order_id>", methods=["GET"])
@jwt_required()
def get_order(order_id):
    user = current_user()
    order = order_service.ensure_visible(order_service.get_order(order_id), user)
    return success_response(order_service.order_timeline(order))


# ------------------------------------------------------------
#  PATCH /orders/<order_id> - Edit order details (admin; never status)
# ------------------------------------------------------------
@bp.route("/<order_id>", methods=["PATCH"])
@jwt_required()
def patch_order(order_id):
    _admin()
    order = order_service.get_order(order_id)

    payload = request.get_json(silent=True) or {}
    if "status" in payload:
        return error_response(
            "STATUS_NOT_EDITABLE",
            "Use the workflow actions (approve, reject, assign, ...) to change status",
            status=400,
        )

    updates = load_or_raise(OrderUpdateSchema(), payload, partial=True)
    order = order_service.update_order_details(order, updates)
    return success_response({"order": order.to_dict()}, message="Order updated successfully")


# ------------------------------------------------------------
#  DELETE /orders/<order_id> - Admin delete (children are not removed)
# ------------------------------------------------------------
@bp.route("/<order_id>", methods=["DELETE"])
@jwt_required()
def delete_order(order_id):
    _admin()
    order = order_service.get_order(order_id)
    order_service.delete_order(order)
    return success_response({"id": order_id}, message="Order deleted")


# ------------------------------------------------------------
#  Admin review actions
# ------------------------------------------------------------
@bp.route("/<order_id>/approve", methods=["POST"])
@jwt_required()
def approve_order(order_id):
    admin = _admin()
    order = order_service.get_order(order_id)
    order = order_service.approve_order(order, admin, _comment_from_body())
    return success_response({"order": order.to_dict()}, message="Order approved")


@bp.route("/<order_id>/reject", methods=["POST"])
@jwt_required()
def reject_order(order_id):
    admin = _admin()
    order = order_service.get_order(order_id)
    order = order_service.reject_order(order, admin, _comment_from_body())
    return success_response({"order": order.to_dict()}, message="Order rejected")


@bp.route("/<order_id>/request-info", methods=["POST"])
@jwt_required()
def request_info(order_id):
    admin = _admin()
    order = order_service.get_order(order_id)
    order = order_service.request_more_info(order, admin, _comment_from_body())
    return success_response({"order": order.to_dict()}, message="More information requested")


# ------------------------------------------------------------
#  POST /orders/<order_id>/assign - Bind pilot and/or editor
# ------------------------------------------------------------
@bp.route("/<order_id>/assign", methods=["POST"])
@jwt_required()
def assign_order(order_id):
    admin = _admin()
    order = order_service.get_order(order_id)
    data = load_or_raise(AssignSchema(), request.get_json(silent=True))

    assignment = assign_staff(
        order,
        admin,
        pilot_id=data.get("pilot_id"),
        editor_id=data.get("editor_id"),
        comment=data.get("comment"),
    )
    return success_response({
        "assignment": assignment.to_dict(),
        "order": order.to_dict(),
    }, status=201)


@bp.route("/<order_id>/assignments", methods=["GET"])
@jwt_required()
def order_assignments(order_id):
    _admin()
    order = order_service.get_order(order_id)
    return success_response({"assignments": [a.to_dict() for a in list_assignments(order.id)]})


# ------------------------------------------------------------
#  Production stage actions
# ------------------------------------------------------------
@bp.route("/<order_id>/start-editing", methods=["POST"])
@jwt_required()
def start_editing(order_id):
    admin = _admin()
    order = order_service.get_order(order_id)
    order = order_service.start_editing(order, admin, _comment_from_body())
    return success_response({"order": order.to_dict()})


@bp.route("/<order_id>/final-review", methods=["POST"])
@jwt_required()
def final_review(order_id):
    admin = _admin()
    order = order_service.get_order(order_id)
    order = order_service.send_to_final_review(order, admin, _comment_from_body())
    return success_response({"order": order.to_dict()})


@bp.route("/<order_id>/complete", methods=["POST"])
@jwt_required()
def complete_order(order_id):
    admin = _admin()
    order = order_service.get_order(order_id)
    data = load_or_raise(CompleteOrderSchema(), request.get_json(silent=True))
    order = order_service.complete_order(
        order,
        admin,
        final_drive_link=data.get("final_drive_link"),
        comment=data.get("comment"),
    )
    return success_response({"order": order.to_dict()}, message=f"Order {order.order_ref} marked as complete")


# ------------------------------------------------------------
#  POST /orders/<order_id>/cancel - Admin cancellation with reason/refund
# ------------------------------------------------------------
@bp.route("/<order_id>/cancel", methods=["POST"])
@jwt_required()
def cancel(order_id):
    admin = _admin()
    order = order_service.get_order(order_id)
    data = load_or_raise(CancellationCreateSchema(), request.get_json(silent=True))

    cancellation = cancel_order(
        order,
        admin,
        reason=data["reason"],
        refund_amount=data.get("refund_amount"),
        admin_notes=data.get("admin_notes") or "",
    )
    return success_response({
        "cancellation": cancellation.to_dict(),
        "order": order.to_dict(),
    }, message="Order cancelled successfully", status=201)
