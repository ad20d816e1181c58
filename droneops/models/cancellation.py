from droneops.extensions import db
from datetime import datetime
from droneops.utils.identifiers import gen_uuid

CANCELLATION_REASONS = (
    "client",
    "weather",
    "gear_issue",
    "pilot_unavailable",
    "editor_unavailable",
    "other",
)

# sub-status only ever moves forward through this sequence
CANCELLATION_STATUSES = (
    "cancelled",
    "reassigned",
    "refund_initiated",
    "refund_completed",
)


class Cancellation(db.Model):
    __tablename__ = "cancellations"

    id = db.Column(db.String(50), primary_key=True, default=lambda: gen_uuid("cxl"))
    order_id = db.Column(db.String(50), nullable=False, index=True)

    # snapshot of the order at cancellation time
    order_ref = db.Column(db.String(20), nullable=False)
    client_name = db.Column(db.String(255))
    city = db.Column(db.String(120))
    assigned_pilot = db.Column(db.String(255))
    assigned_editor = db.Column(db.String(255))
    previous_status = db.Column(db.String(30))

    reason = db.Column(db.String(30), nullable=False)
    status = db.Column(db.String(30), nullable=False, default="cancelled")
    refund_amount = db.Column(db.Numeric(10, 2))
    admin_notes = db.Column(db.Text, default="")
    cancelled_by = db.Column(db.String(50))

    cancellation_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "order_ref": self.order_ref,
            "client_name": self.client_name,
            "city": self.city,
            "assigned_pilot": self.assigned_pilot,
            "assigned_editor": self.assigned_editor,
            "previous_status": self.previous_status,
            "reason": self.reason,
            "status": self.status,
            "refund_amount": float(self.refund_amount) if self.refund_amount is not None else None,
            "admin_notes": self.admin_notes,
            "cancelled_by": self.cancelled_by,
            "cancellation_date": self.cancellation_date.isoformat() + "Z" if self.cancellation_date else None,
            "updated_at": self.updated_at.isoformat() + "Z" if self.updated_at else None,
        }
