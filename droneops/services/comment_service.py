import logging

from droneops.extensions import db
from droneops.models.comment import Comment, COMMENT_AUTHORS, COMMENT_STAGES
from droneops.utils.exceptions import ServiceError

logger = logging.getLogger(__name__)


def append_comment(order_id, author_role, author_id, author_name, stage, text):
    """Add one entry to an order's timeline (caller commits)."""
    if author_role not in COMMENT_AUTHORS:
        raise ServiceError("VALIDATION_ERROR", f"Unknown comment author role '{author_role}'", status=422)
    if stage not in COMMENT_STAGES:
        raise ServiceError("VALIDATION_ERROR", f"Unknown comment stage '{stage}'", status=422)
    if not text or not text.strip():
        raise ServiceError("COMMENT_REQUIRED", "Comment text is required", status=400)

    comment = Comment(
        order_id=order_id,
        comment_by=author_role,
        commenter_id=author_id,
        commenter_name=author_name,
        comment_stage=stage,
        comment_text=text.strip(),
    )
    db.session.add(comment)
    db.session.flush()
    return comment


def admin_comment(order, actor, stage, text):
    return append_comment(order.id, "admin", actor.id, actor.full_name or "Admin", stage, text)


def list_comments(order_id=None):
    """Newest first; same-instant entries fall back to insertion order."""
    q = Comment.query
    if order_id:
        q = q.filter_by(order_id=order_id)
    return q.order_by(Comment.created_at.desc(), Comment.id.desc()).all()


def add_comment(order, user, text, stage="general"):
    """Explicit "add comment" action from any role that can see the order."""
    if user.role == "client" and stage not in ("general", "client_feedback"):
        stage = "client_feedback"
    name = user.full_name
    if user.role in ("pilot", "editor") and user.staff_profile:
        name = user.staff_profile.name
    comment = append_comment(order.id, user.role, user.id, name, stage, text)
    db.session.commit()
    logger.info("[COMMENT_ADD] %s by %s (%s)", order.order_ref, user.id, stage)
    return comment
