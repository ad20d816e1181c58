from droneops.extensions import db
from datetime import datetime
from droneops.utils.identifiers import gen_uuid

SUBMISSION_STATUSES = ("submitted", "under_review", "approved", "rejected", "needs_change")
# still waiting on an admin decision
OPEN_STATUSES = ("submitted", "under_review")
# closed without approval; the submitter may hand in a new version
RESUBMITTABLE_STATUSES = ("rejected", "needs_change")


class Submission(db.Model):
    __tablename__ = "submissions"

    id = db.Column(db.String(50), primary_key=True, default=lambda: gen_uuid("sub"))
    order_id = db.Column(db.String(50), nullable=False, index=True)

    submitted_by = db.Column(db.String(20), nullable=False)  # pilot | editor
    submitter_id = db.Column(db.String(50), db.ForeignKey("staff.id"), nullable=False)
    submitter_name = db.Column(db.String(255))

    drive_link = db.Column(db.String(1024), nullable=False)
    duration = db.Column(db.Integer)          # minutes of footage, pilots
    hours_worked = db.Column(db.Float)        # editors
    comments = db.Column(db.Text, default="")

    status = db.Column(db.String(20), nullable=False, default="submitted")
    review_comments = db.Column(db.Text)
    reviewed_by = db.Column(db.String(255))
    reviewed_at = db.Column(db.DateTime)

    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "submitted_by": self.submitted_by,
            "submitter_id": self.submitter_id,
            "submitter_name": self.submitter_name,
            "drive_link": self.drive_link,
            "duration": self.duration,
            "hours_worked": self.hours_worked,
            "comments": self.comments,
            "status": self.status,
            "review_comments": self.review_comments,
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at.isoformat() + "Z" if self.reviewed_at else None,
            "submitted_at": self.submitted_at.isoformat() + "Z" if self.submitted_at else None,
        }
