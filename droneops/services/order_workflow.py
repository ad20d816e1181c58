"""
Order workflow state machine.

Single source of truth for which order status may follow which. Every
service function that changes ``Order.status`` goes through
``transition()`` so illegal moves are refused in one place.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Dict, List, Set

from droneops.utils.exceptions import ServiceError

logger = logging.getLogger(__name__)


class OrderStatus(str, Enum):
    # Intake
    NEW = "new"                              # Created by admin
    PENDING = "pending"                      # Created by client, awaiting review
    APPROVED = "approved"
    REJECTED = "rejected"

    # Production
    ASSIGNED = "assigned"                    # Pilot and/or editor bound
    PILOT_SUBMITTED = "pilot_submitted"
    PILOT_REVIEWED = "pilot_reviewed"
    EDITING = "editing"
    EDITOR_SUBMITTED = "editor_submitted"
    EDITOR_REVIEWED = "editor_reviewed"
    FINAL_REVIEW = "final_review"

    # Terminal
    COMPLETED = "completed"
    CANCELLED = "cancelled"


S = OrderStatus

ALLOWED_TRANSITIONS: Dict[OrderStatus, List[OrderStatus]] = {
    S.NEW: [S.APPROVED, S.REJECTED, S.CANCELLED],
    S.PENDING: [S.APPROVED, S.REJECTED, S.CANCELLED],
    S.APPROVED: [S.ASSIGNED, S.CANCELLED],
    S.ASSIGNED: [
        S.ASSIGNED,            # Re-assignment
        S.PILOT_SUBMITTED,
        S.EDITOR_SUBMITTED,    # Editor-only assignment
        S.CANCELLED,
    ],
    S.PILOT_SUBMITTED: [S.PILOT_SUBMITTED, S.PILOT_REVIEWED, S.CANCELLED],
    S.PILOT_REVIEWED: [S.EDITING, S.EDITOR_SUBMITTED, S.CANCELLED],
    S.EDITING: [S.EDITOR_SUBMITTED, S.CANCELLED],
    S.EDITOR_SUBMITTED: [S.EDITOR_SUBMITTED, S.EDITOR_REVIEWED, S.CANCELLED],
    S.EDITOR_REVIEWED: [S.FINAL_REVIEW, S.COMPLETED, S.CANCELLED],
    S.FINAL_REVIEW: [S.COMPLETED, S.CANCELLED],
    S.REJECTED: [S.CANCELLED],
    # Terminal states
    S.COMPLETED: [],
    S.CANCELLED: [],
}

TERMINAL_STATES: Set[OrderStatus] = {S.COMPLETED, S.CANCELLED}

# Statuses an admin may still approve, reject or ask more info on
REVIEWABLE_STATES: Set[OrderStatus] = {S.NEW, S.PENDING}

# Pilot footage is approved; an editor can still be bound without rewinding status
EDITOR_BINDABLE_STATES: Set[OrderStatus] = {S.PILOT_REVIEWED, S.EDITING}

# Statuses in which the order can take a submission from each role
SUBMITTABLE_STATES: Dict[str, Set[OrderStatus]] = {
    "pilot": {S.ASSIGNED, S.PILOT_SUBMITTED},
    "editor": {S.ASSIGNED, S.PILOT_REVIEWED, S.EDITING, S.EDITOR_SUBMITTED},
}

# Status an approved submission moves the order to
REVIEWED_STATUS_FOR_ROLE: Dict[str, OrderStatus] = {
    "pilot": S.PILOT_REVIEWED,
    "editor": S.EDITOR_REVIEWED,
}

SUBMITTED_STATUS_FOR_ROLE: Dict[str, OrderStatus] = {
    "pilot": S.PILOT_SUBMITTED,
    "editor": S.EDITOR_SUBMITTED,
}

# Admin dashboard tabs; "completed" groups both finished states
STAGE_FILTERS: Dict[str, List[str]] = {
    "completed": [S.EDITOR_REVIEWED.value, S.COMPLETED.value],
}


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ServiceError(
            "INVALID_STATUS",
            f"Unknown order status '{value}'",
            {"allowed": [s.value for s in OrderStatus]},
        )


def is_valid_transition(from_status, to_status) -> bool:
    """Check if a state transition is valid"""
    from_status, to_status = OrderStatus(from_status), OrderStatus(to_status)
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


def is_terminal_state(status) -> bool:
    return OrderStatus(status) in TERMINAL_STATES


def allowed_next(status) -> List[str]:
    return [s.value for s in ALLOWED_TRANSITIONS.get(OrderStatus(status), [])]


def assert_transition(order, to_status):
    current = parse_status(order.status)
    target = OrderStatus(to_status)
    if not is_valid_transition(current, target):
        raise ServiceError(
            "INVALID_TRANSITION",
            f"Order {order.order_ref} cannot move from '{current.value}' to '{target.value}'",
            {"from": current.value, "to": target.value, "allowed": allowed_next(current)},
            status=409,
        )


def transition(order, to_status, action):
    """Validate and apply a status change on ``order`` (not committed)."""
    assert_transition(order, to_status)
    previous = order.status
    order.status = OrderStatus(to_status).value
    order.updated_at = datetime.utcnow()
    logger.info("[%s] %s %s -> %s", action, order.order_ref, previous, order.status)
    return previous
