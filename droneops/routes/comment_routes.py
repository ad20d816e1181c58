from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from droneops.schemas.comment_schema import CommentCreateSchema
from droneops.services import order_service
from droneops.services.comment_service import add_comment, list_comments
from droneops.utils.auth_utils import current_user, require_role
from droneops.utils.response_formatter import success_response
from droneops.utils.validation import load_or_raise

bp = Blueprint("comments", __name__, url_prefix="/api/v1")


@bp.route("/orders/<order_id>/comments", methods=["GET"])
@jwt_required()
def order_comments(order_id):
    user = current_user()
    order = order_service.ensure_visible(order_service.get_order(order_id), user)
    return success_response({"comments": [c.to_dict() for c in list_comments(order.id)]})


@bp.route("/orders/<order_id>/comments", methods=["POST"])
@jwt_required()
def post_comment(order_id):
    user = current_user()
    order = order_service.ensure_visible(order_service.get_order(order_id), user)
    data = load_or_raise(CommentCreateSchema(), request.get_json(silent=True))

    comment = add_comment(order, user, data["comment_text"], stage=data["comment_stage"])
    return success_response({"comment": comment.to_dict()}, status=201)


@bp.route("/comments", methods=["GET"])
@jwt_required()
def all_comments():
    require_role(current_user(), "admin")
    return success_response({"comments": [c.to_dict() for c in list_comments()]})
