from droneops.extensions import db
from datetime import datetime
from droneops.utils.identifiers import gen_uuid

INQUIRY_SOURCES = ("instagram", "website", "whatsapp", "referral")
INQUIRY_STATUSES = ("new", "contacted", "converted", "rejected")


class Inquiry(db.Model):
    """A sales lead taken before there is an order.

    Converting an inquiry creates a ``new`` order and stores its id here.
    """
    __tablename__ = "inquiries"

    __table_args__ = (
        db.Index("idx_inquiries_status", "status"),
    )

    id = db.Column(db.String(50), primary_key=True, default=lambda: gen_uuid("inq"))
    inquiry_ref = db.Column(db.String(20), nullable=False, index=True)

    client_name = db.Column(db.String(255), nullable=False)
    phone_number = db.Column(db.String(50), nullable=False)
    city = db.Column(db.String(120), nullable=False)
    requirement_summary = db.Column(db.Text, nullable=False)
    source = db.Column(db.String(20), nullable=False, default="website")

    status = db.Column(db.String(20), nullable=False, default="new")
    follow_up_notes = db.Column(db.Text)
    order_id = db.Column(db.String(50))

    created_by = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "inquiry_ref": self.inquiry_ref,
            "client_name": self.client_name,
            "phone_number": self.phone_number,
            "city": self.city,
            "requirement_summary": self.requirement_summary,
            "source": self.source,
            "status": self.status,
            "follow_up_notes": self.follow_up_notes,
            "order_id": self.order_id,
            "created_at": self.created_at.isoformat() + "Z" if self.created_at else None,
            "updated_at": self.updated_at.isoformat() + "Z" if self.updated_at else None,
        }
