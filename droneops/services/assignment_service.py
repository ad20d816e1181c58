import logging
from datetime import datetime

from droneops.extensions import db
from droneops.models.assignment import Assignment, ASSIGNMENT_STATUSES
from droneops.services import order_workflow as wf
from droneops.services.comment_service import admin_comment
from droneops.services.staff_service import resolve_staff
from droneops.utils.exceptions import NotFoundError, ServiceError

logger = logging.getLogger(__name__)

NO_STAFF_MESSAGE = "Please select at least one staff member to assign."
NO_EDITOR_MESSAGE = "Please select an editor to assign."


def _check_editor_binding(previous, pilot_id, editor_id):
    """After pilot review only the editor slot is open."""
    if pilot_id and (previous is None or pilot_id != previous.pilot_id):
        raise ServiceError(
            "PILOT_LOCKED",
            "Pilot footage is already approved; only the editor can be changed now",
            {"field": "pilot_id"},
            status=409,
        )
    if not editor_id:
        raise ServiceError("STAFF_REQUIRED", NO_EDITOR_MESSAGE, {"fields": ["editor_id"]}, status=400)


def assign_staff(order, actor, pilot_id=None, editor_id=None, comment=None):
    """Bind a pilot and/or editor to an approved order.

    Once pilot footage is approved (``pilot_reviewed``/``editing``) the call
    only adds or swaps the editor; the pilot is carried over and the order
    keeps its status. Assignment row, order fields and the timeline entry
    are committed together.
    """
    if not pilot_id and not editor_id:
        raise ServiceError("STAFF_REQUIRED", NO_STAFF_MESSAGE, {"fields": ["pilot_id", "editor_id"]}, status=400)

    previous = current_assignment(order.id)
    binding_editor = wf.parse_status(order.status) in wf.EDITOR_BINDABLE_STATES

    if binding_editor:
        _check_editor_binding(previous, pilot_id, editor_id)
        editor = resolve_staff(editor_id, "editor")
        pilot_ref = (previous.pilot_id, previous.pilot_name) if previous else (None, None)
        order.updated_at = datetime.utcnow()
        logger.info("[ORDER_ASSIGN_EDITOR] %s %s (%s)", order.order_ref, editor.code, order.status)
    else:
        pilot = resolve_staff(pilot_id, "pilot") if pilot_id else None
        editor = resolve_staff(editor_id, "editor") if editor_id else None
        pilot_ref = (pilot.id, pilot.name) if pilot else (None, None)
        wf.transition(order, wf.OrderStatus.ASSIGNED, "ORDER_ASSIGN")

    assignment = Assignment(
        order_id=order.id,
        seq=previous.seq + 1 if previous else 1,
        pilot_id=pilot_ref[0],
        pilot_name=pilot_ref[1],
        editor_id=editor.id if editor else None,
        editor_name=editor.name if editor else None,
        status="assigned",
        assigned_by=actor.id,
        assigned_at=datetime.utcnow(),
    )
    db.session.add(assignment)

    order.pilot_name = assignment.pilot_name
    order.editor_name = assignment.editor_name

    text = (
        f"Assigned - Pilot: {assignment.pilot_name or 'None'}, "
        f"Editor: {assignment.editor_name or 'None'}"
    )
    if comment and comment.strip():
        text = f"{text}. {comment.strip()}"
    admin_comment(order, actor, "general", text)

    db.session.commit()
    return assignment


def list_assignments(order_id=None):
    q = Assignment.query
    if order_id:
        q = q.filter_by(order_id=order_id)
    return q.order_by(Assignment.assigned_at.desc(), Assignment.seq.desc()).all()


def current_assignment(order_id):
    """Latest assignment wins; earlier rows are history."""
    return (
        Assignment.query
        .filter_by(order_id=order_id)
        .order_by(Assignment.seq.desc())
        .first()
    )


def current_assignments_by_order():
    latest = {}
    for assignment in Assignment.query.order_by(Assignment.order_id, Assignment.seq).all():
        latest[assignment.order_id] = assignment
    return latest


def get_assignment(assignment_id):
    assignment = db.session.get(Assignment, assignment_id)
    if not assignment:
        raise NotFoundError("Assignment not found")
    return assignment


def update_assignment(assignment, status):
    if status not in ASSIGNMENT_STATUSES:
        raise ServiceError(
            "VALIDATION_ERROR",
            f"Assignment status must be one of: {', '.join(ASSIGNMENT_STATUSES)}",
            status=422,
        )
    assignment.status = status
    db.session.commit()
    logger.info("[ASSIGNMENT_UPDATE] %s -> %s", assignment.id, status)
    return assignment
