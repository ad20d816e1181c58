from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from droneops.schemas.inquiry_schema import ConvertInquirySchema, FollowUpSchema, InquiryCreateSchema
from droneops.services.inquiry_service import (
    add_follow_up,
    convert_inquiry,
    create_inquiry,
    delete_inquiry,
    get_inquiry,
    list_inquiries,
    mark_contacted,
    reject_inquiry,
)
from droneops.utils.auth_utils import current_user, require_role
from droneops.utils.response_formatter import success_response
from droneops.utils.validation import load_or_raise

bp = Blueprint("admin_inquiries", __name__, url_prefix="/api/v1/admin/inquiries")


def _admin():
    return require_role(current_user(), "admin")


@bp.route("", methods=["GET"])
@jwt_required()
def list_all():
    _admin()
    inquiries = list_inquiries(
        status=request.args.get("status"),
        source=request.args.get("source"),
        search=request.args.get("search", "").strip(),
    )
    return success_response({"inquiries": [i.to_dict() for i in inquiries]})


@bp.route("", methods=["POST"])
@jwt_required()
def add_inquiry():
    admin = _admin()
    data = load_or_raise(InquiryCreateSchema(), request.get_json(silent=True))
    inquiry = create_inquiry(admin, data)
    return success_response({"inquiry": inquiry.to_dict()}, status=201)


@bp.route("/<inquiry_id>", methods=["GET"])
@jwt_required()
def get_one(inquiry_id):
    _admin()
    return success_response({"inquiry": get_inquiry(inquiry_id).to_dict()})


@bp.route("/<inquiry_id>", methods=["DELETE"])
@jwt_required()
def remove(inquiry_id):
    _admin()
    delete_inquiry(get_inquiry(inquiry_id))
    return success_response({"id": inquiry_id}, message="Inquiry deleted")


# ------------------------------------------------------------
# Lead handling: contacted / follow-up / reject / convert
# ------------------------------------------------------------
@bp.route("/<inquiry_id>/contacted", methods=["PATCH"])
@jwt_required()
def contacted(inquiry_id):
    _admin()
    inquiry = mark_contacted(get_inquiry(inquiry_id))
    return success_response({"inquiry": inquiry.to_dict()})


@bp.route("/<inquiry_id>/follow-up", methods=["PATCH"])
@jwt_required()
def follow_up(inquiry_id):
    _admin()
    data = load_or_raise(FollowUpSchema(), request.get_json(silent=True))
    inquiry = add_follow_up(get_inquiry(inquiry_id), data.get("follow_up_notes"))
    return success_response({"inquiry": inquiry.to_dict()})


@bp.route("/<inquiry_id>/reject", methods=["PATCH"])
@jwt_required()
def reject(inquiry_id):
    _admin()
    inquiry = reject_inquiry(get_inquiry(inquiry_id))
    return success_response({"inquiry": inquiry.to_dict()})


@bp.route("/<inquiry_id>/convert", methods=["POST"])
@jwt_required()
def convert(inquiry_id):
    admin = _admin()
    inquiry = get_inquiry(inquiry_id)
    data = load_or_raise(ConvertInquirySchema(), request.get_json(silent=True))

    order = convert_inquiry(inquiry, admin, data)
    return success_response({
        "inquiry": inquiry.to_dict(),
        "order": order.to_dict(),
    }, message=f"Inquiry converted to order {order.order_ref}", status=201)
