from flask_jwt_extended import get_jwt_identity

from droneops.extensions import bcrypt, db
from droneops.utils.exceptions import ServiceError


def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode("utf-8")


def check_password(password, hashed_password):
    return bcrypt.check_password_hash(hashed_password, password)


def current_user():
    """Load the user behind the JWT identity, or raise UNAUTHORIZED."""
    from droneops.models.user import User

    uid = get_jwt_identity()
    user = db.session.get(User, uid) if uid else None
    if not user or user.status != "active":
        raise ServiceError("UNAUTHORIZED", "User not found or inactive", status=401)
    return user


def require_role(user, *roles):
    if user.role not in roles:
        label = " or ".join(r.capitalize() for r in roles)
        raise ServiceError("FORBIDDEN", f"{label} access required", status=403)
    return user
