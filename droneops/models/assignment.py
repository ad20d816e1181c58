from droneops.extensions import db
from datetime import datetime
from droneops.utils.identifiers import gen_uuid

ASSIGNMENT_STATUSES = ("assigned", "in_progress", "completed")


class Assignment(db.Model):
    __tablename__ = "assignments"

    __table_args__ = (
        db.UniqueConstraint("order_id", "seq", name="uq_assignments_order_seq"),
    )

    id = db.Column(db.String(50), primary_key=True, default=lambda: gen_uuid("asg"))
    order_id = db.Column(db.String(50), nullable=False, index=True)
    # 1, 2, 3... per order; the highest is the current assignment
    seq = db.Column(db.Integer, nullable=False, default=1)

    pilot_id = db.Column(db.String(50), db.ForeignKey("staff.id"), nullable=True)
    pilot_name = db.Column(db.String(255))
    editor_id = db.Column(db.String(50), db.ForeignKey("staff.id"), nullable=True)
    editor_name = db.Column(db.String(255))

    status = db.Column(db.String(20), nullable=False, default="assigned")
    assigned_by = db.Column(db.String(50))
    assigned_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "seq": self.seq,
            "pilot_id": self.pilot_id,
            "pilot_name": self.pilot_name,
            "editor_id": self.editor_id,
            "editor_name": self.editor_name,
            "status": self.status,
            "assigned_by": self.assigned_by,
            "assigned_at": self.assigned_at.isoformat() + "Z" if self.assigned_at else None,
        }
