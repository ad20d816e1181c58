from droneops.extensions import db
from datetime import datetime
from droneops.utils.identifiers import gen_uuid

STAFF_ROLES = ("pilot", "editor")
STAFF_STATUSES = ("active", "inactive")


class Staff(db.Model):
    __tablename__ = "staff"

    __table_args__ = (
        db.Index("idx_staff_role_status", "role", "status"),
    )

    id = db.Column(db.String(50), primary_key=True, default=lambda: gen_uuid("stf"))
    user_id = db.Column(db.String(50), db.ForeignKey("users.id"), nullable=True, unique=True)

    name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False)
    code = db.Column(db.String(20), nullable=False)
    location = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(30))
    email = db.Column(db.String(255))
    skills = db.Column(db.JSON, nullable=False, default=list)

    status = db.Column(db.String(20), nullable=False, default="active")
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship("User", backref=db.backref("staff_profile", uselist=False), lazy=True)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "role": self.role,
            "code": self.code,
            "location": self.location,
            "phone": self.phone,
            "email": self.email,
            "skills": self.skills or [],
            "status": self.status,
            "joined_at": self.joined_at.isoformat() + "Z" if self.joined_at else None,
        }
