from droneops.extensions import db
from datetime import datetime
from sqlalchemy import event

COMMENT_AUTHORS = ("admin", "pilot", "editor", "client")
COMMENT_STAGES = (
    "general",
    "pilot_submission",
    "editor_submission",
    "final_review",
    "client_feedback",
)


class Comment(db.Model):
    __tablename__ = "comments"

    __table_args__ = (
        db.Index("idx_comments_order_created", "order_id", "created_at"),
    )

    # integer key doubles as insertion order for same-timestamp entries
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    order_id = db.Column(db.String(50), nullable=False)

    comment_by = db.Column(db.String(20), nullable=False)
    commenter_id = db.Column(db.String(50))
    commenter_name = db.Column(db.String(255))
    comment_stage = db.Column(db.String(30), nullable=False, default="general")
    comment_text = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "comment_by": self.comment_by,
            "commenter_id": self.commenter_id,
            "commenter_name": self.commenter_name,
            "comment_stage": self.comment_stage,
            "comment_text": self.comment_text,
            "created_at": self.created_at.isoformat() + "Z" if self.created_at else None,
        }


@event.listens_for(Comment, "before_update")
def _comments_are_immutable(mapper, connection, target):
    raise RuntimeError(f"Comment {target.id} is append-only and cannot be updated")


@event.listens_for(Comment, "before_delete")
def _comments_are_permanent(mapper, connection, target):
    raise RuntimeError(f"Comment {target.id} is append-only and cannot be deleted")
