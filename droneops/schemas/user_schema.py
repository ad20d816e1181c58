from marshmallow import EXCLUDE, fields, pre_load, validate

from droneops.extensions import ma
from droneops.utils.validation import PHONE_RE, not_blank, required_messages, strip_strings

SELF_REGISTER_ROLES = ("client", "pilot", "editor")


class RegisterSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.Str(
        required=True,
        error_messages=required_messages("Full name is required"),
        validate=not_blank("Full name is required"),
    )
    email = fields.Email(
        required=True,
        error_messages={**required_messages("Email is required"), "invalid": "Please enter a valid email address"},
    )
    password = fields.Str(
        required=True,
        error_messages=required_messages("Password is required"),
        validate=validate.Length(min=8, error="Password must be at least 8 characters"),
    )
    role = fields.Str(load_default="client", validate=validate.OneOf(SELF_REGISTER_ROLES))
    phone = fields.Str(
        allow_none=True,
        load_default=None,
        validate=validate.Regexp(PHONE_RE, error="Please enter a valid phone number"),
    )

    @pre_load
    def clean(self, data, **kwargs):
        return strip_strings(data, skip=("password",))


class LoginSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Str(required=True, error_messages=required_messages("Email is required"))
    password = fields.Str(required=True, error_messages=required_messages("Password is required"))
