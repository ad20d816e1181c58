from marshmallow import EXCLUDE, fields, pre_load, validate

from droneops.extensions import ma
from droneops.models.staff import STAFF_ROLES, STAFF_STATUSES
from droneops.utils.validation import PHONE_RE, not_blank, required_messages, strip_strings


class StaffSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.Str(
        required=True,
        error_messages=required_messages("Name is required"),
        validate=not_blank("Name is required"),
    )
    role = fields.Str(
        required=True,
        error_messages=required_messages("Role is required"),
        validate=validate.OneOf(STAFF_ROLES),
    )
    location = fields.Str(
        required=True,
        error_messages=required_messages("City is required"),
        validate=not_blank("City is required"),
    )
    phone = fields.Str(
        allow_none=True,
        validate=validate.Regexp(PHONE_RE, error="Please enter a valid phone number"),
    )
    email = fields.Email(allow_none=True, error_messages={"invalid": "Please enter a valid email address"})
    skills = fields.List(fields.Str())
    status = fields.Str(validate=validate.OneOf(STAFF_STATUSES))
    user_id = fields.Str(allow_none=True)

    @pre_load
    def clean(self, data, **kwargs):
        return strip_strings(data)
