from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity, create_access_token

from droneops.schemas.user_schema import RegisterSchema, LoginSchema
from droneops.services.auth_service import register_user, authenticate_user, generate_tokens_for_user
from droneops.utils.auth_utils import current_user
from droneops.utils.response_formatter import success_response
from droneops.utils.validation import load_or_raise

bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")


@bp.route("/register", methods=["POST"])
def register():
    data = load_or_raise(RegisterSchema(), request.get_json(silent=True))

    user = register_user(
        data["email"],
        data["password"],
        data["full_name"],
        role=data["role"],
        phone=data.get("phone"),
    )
    access, refresh = generate_tokens_for_user(user)
    return success_response({
        "user": user.to_dict(),
        "access_token": access,
        "refresh_token": refresh
    }, status=201)


@bp.route("/login", methods=["POST"])
def login():
    data = load_or_raise(LoginSchema(), request.get_json(silent=True))
    user = authenticate_user(data["email"], data["password"])
    access, refresh = generate_tokens_for_user(user)
    return success_response({
        "user": user.to_dict(),
        "access_token": access,
        "refresh_token": refresh,
    })


@bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh():
    user = current_user()
    access = create_access_token(identity=get_jwt_identity(), additional_claims={"role": user.role})
    return success_response({"access_token": access})


@bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = current_user()
    payload = user.to_dict()
    if user.role in ("pilot", "editor") and user.staff_profile:
        payload["staff"] = user.staff_profile.to_dict()
    return success_response(payload)
