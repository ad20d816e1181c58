from marshmallow import EXCLUDE, fields, pre_load, validate

from droneops.extensions import ma
from droneops.utils.validation import required_messages, strip_strings

DRIVE_LINK_MESSAGE = "Drive link is required"


class SubmissionCreateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    drive_link = fields.Url(
        required=True,
        schemes={"http", "https"},
        error_messages={**required_messages(DRIVE_LINK_MESSAGE), "invalid": "Drive link must be a valid URL"},
    )
    duration = fields.Int(allow_none=True, load_default=None, validate=validate.Range(min=0))
    hours_worked = fields.Float(allow_none=True, load_default=None, validate=validate.Range(min=0))
    comments = fields.Str(allow_none=True, load_default="")

    @pre_load
    def clean(self, data, **kwargs):
        return strip_strings(data)


class SubmissionReviewSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    approved = fields.Bool(required=True, error_messages=required_messages("approved must be true or false"))
    comment = fields.Str(allow_none=True, load_default="")


class SubmissionChangesSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    comment = fields.Str(allow_none=True, load_default="")
