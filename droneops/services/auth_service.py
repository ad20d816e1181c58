from datetime import timedelta

from flask import current_app
from flask_jwt_extended import create_access_token, create_refresh_token

from droneops.extensions import db
from droneops.models.user import User
from droneops.utils.auth_utils import hash_password, check_password
from droneops.utils.exceptions import ServiceError


def register_user(email, password, full_name, role="client", phone=None):
    if User.query.filter_by(email=email.lower()).first():
        raise ServiceError(
            code="USER_EXISTS",
            message="User with that email already exists",
            details={"field": "email"},
            status=409,
        )

    user = User(
        email=email.lower(),
        password_hash=hash_password(password),
        full_name=full_name,
        role=role,
        phone=phone,
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate_user(email, password):
    user = User.query.filter_by(email=(email or "").lower()).first()
    if not user or not check_password(password, user.password_hash):
        raise ServiceError(code="AUTH_FAILED", message="Invalid credentials", status=401)
    if user.status != "active":
        raise ServiceError(code="ACCOUNT_INACTIVE", message="This account is inactive", status=403)
    return user


def generate_tokens_for_user(user):
    claims = {"role": user.role}
    access = create_access_token(
        identity=user.id,
        additional_claims=claims,
        expires_delta=timedelta(seconds=current_app.config.get("ACCESS_EXPIRES", 86400)),
    )
    refresh = create_refresh_token(
        identity=user.id,
        expires_delta=timedelta(seconds=current_app.config.get("REFRESH_EXPIRES", 86400)),
    )
    return access, refresh
