import logging

from sqlalchemy import or_

from droneops.extensions import db
from droneops.models.staff import Staff
from droneops.models.user import User
from droneops.utils.exceptions import NotFoundError, ServiceError
from droneops.utils.identifiers import generate_editor_code, generate_pilot_code

logger = logging.getLogger(__name__)


def staff_code_for(role, location):
    if role == "pilot":
        return generate_pilot_code(location)
    return generate_editor_code()


def create_staff(data):
    user_id = data.get("user_id")
    if user_id:
        user = db.session.get(User, user_id)
        if not user:
            raise NotFoundError("Linked user not found")
        if user.role != data["role"]:
            raise ServiceError(
                "ROLE_MISMATCH",
                f"User {user_id} is registered as '{user.role}', not '{data['role']}'",
                status=400,
            )
        if Staff.query.filter_by(user_id=user_id).first():
            raise ServiceError("STAFF_EXISTS", "This user already has a staff profile", status=409)

    staff = Staff(
        user_id=user_id,
        name=data["name"].strip(),
        role=data["role"],
        code=staff_code_for(data["role"], data["location"]),
        location=data["location"].strip(),
        phone=data.get("phone"),
        email=data.get("email"),
        skills=data.get("skills") or [],
        status=data.get("status") or "active",
    )
    db.session.add(staff)
    db.session.commit()
    logger.info("[STAFF_CREATE] %s %s (%s)", staff.role, staff.code, staff.name)
    return staff


def get_staff(staff_id):
    staff = db.session.get(Staff, staff_id)
    if not staff:
        raise NotFoundError("Staff member not found")
    return staff


def list_staff(role=None, status=None, search=None):
    q = Staff.query
    if role:
        q = q.filter(Staff.role == role)
    if status:
        q = q.filter(Staff.status == status)
    if search:
        term = f"%{search}%"
        q = q.filter(
            or_(
                Staff.name.ilike(term),
                Staff.code.ilike(term),
                Staff.location.ilike(term),
            )
        )
    return q.order_by(Staff.joined_at.desc(), Staff.id).all()


def update_staff(staff, updates):
    if "role" in updates and updates["role"] != staff.role:
        raise ServiceError("ROLE_IMMUTABLE", "A staff member's role cannot be changed", status=400)
    if "location" in updates and staff.role == "pilot" and updates["location"] != staff.location:
        # pilot codes carry the city prefix
        staff.code = generate_pilot_code(updates["location"])
    for field in ("name", "location", "phone", "email", "skills", "status"):
        if field in updates:
            setattr(staff, field, updates[field])
    db.session.commit()
    return staff


def delete_staff(staff):
    from droneops.models.assignment import Assignment
    from droneops.models.submission import Submission

    referenced = (
        Assignment.query.filter(or_(Assignment.pilot_id == staff.id, Assignment.editor_id == staff.id)).first()
        or Submission.query.filter_by(submitter_id=staff.id).first()
    )
    if referenced:
        raise ServiceError(
            "STAFF_IN_USE",
            "Staff member has assignments or submissions; set them inactive instead",
            status=409,
        )
    logger.info("[STAFF_DELETE] %s %s", staff.role, staff.code)
    db.session.delete(staff)
    db.session.commit()


def resolve_staff(staff_id, role):
    """Look up an active pilot/editor for assignment."""
    staff = db.session.get(Staff, staff_id)
    if not staff or staff.role != role:
        raise ServiceError(
            "STAFF_NOT_FOUND",
            f"No {role} with id '{staff_id}'",
            {"field": f"{role}_id"},
            status=404,
        )
    if staff.status != "active":
        raise ServiceError(
            "STAFF_INACTIVE",
            f"{staff.name} is inactive and cannot be assigned",
            {"field": f"{role}_id"},
            status=400,
        )
    return staff


def staff_for_user(user):
    staff = Staff.query.filter_by(user_id=user.id).first()
    if not staff:
        raise ServiceError("NO_STAFF_PROFILE", "No staff profile is linked to this account", status=403)
    return staff
