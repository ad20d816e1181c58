from droneops.extensions import db
from datetime import datetime
from droneops.utils.identifiers import gen_uuid

PACKAGE_TYPES = ("basic", "standard", "premium", "custom")


def gen_internal_id():
    return gen_uuid("ord")


class Order(db.Model):
    """A video-production order.

    ``id`` is the storage key; ``order_ref`` (``ORD########``) is what clients,
    staff and cancellation records quote. Child rows (assignments, submissions,
    comments, cancellations) reference ``id`` without a database foreign key,
    so deleting an order leaves them in place.
    """
    __tablename__ = "orders"

    __table_args__ = (
        db.Index("idx_orders_status", "status"),
        db.Index("idx_orders_created_at", "created_at"),
    )

    id = db.Column(db.String(50), primary_key=True, default=gen_internal_id)
    order_ref = db.Column(db.String(20), nullable=False, index=True)

    client_id = db.Column(db.String(50), db.ForeignKey("users.id"), nullable=True)
    client_name = db.Column(db.String(255), nullable=False)
    phone_number = db.Column(db.String(30), nullable=False)
    city = db.Column(db.String(120), nullable=False)
    location = db.Column(db.String(255))

    order_date = db.Column(db.DateTime)
    package_type = db.Column(db.String(20), nullable=False, default="basic")
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    requirement_summary = db.Column(db.Text, nullable=False)

    drive_link = db.Column(db.String(1024))
    reference_links = db.Column(db.JSON, nullable=False, default=list)
    referral_code = db.Column(db.String(50))

    status = db.Column(db.String(30), nullable=False, default="pending")
    admin_comments = db.Column(db.Text)

    # names from the current assignment, kept for list screens
    pilot_name = db.Column(db.String(255))
    editor_name = db.Column(db.String(255))
    final_drive_link = db.Column(db.String(1024))

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = db.relationship("User", foreign_keys=[client_id], backref="client_orders", lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "order_ref": self.order_ref,
            "client_id": self.client_id,
            "client_name": self.client_name,
            "phone_number": self.phone_number,
            "city": self.city,
            "location": self.location,
            "order_date": self.order_date.isoformat() + "Z" if self.order_date else None,
            "package_type": self.package_type,
            "amount": float(self.amount) if self.amount is not None else None,
            "requirement_summary": self.requirement_summary,
            "drive_link": self.drive_link,
            "reference_links": self.reference_links or [],
            "referral_code": self.referral_code,
            "status": self.status,
            "admin_comments": self.admin_comments,
            "pilot_name": self.pilot_name,
            "editor_name": self.editor_name,
            "final_drive_link": self.final_drive_link,
            "created_at": self.created_at.isoformat() + "Z" if self.created_at else None,
            "updated_at": self.updated_at.isoformat() + "Z" if self.updated_at else None,
        }
