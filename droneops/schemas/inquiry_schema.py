from marshmallow import EXCLUDE, fields, pre_load, validate

from droneops.extensions import ma
from droneops.models.inquiry import INQUIRY_SOURCES
from droneops.models.order import PACKAGE_TYPES
from droneops.schemas.order_schema import AMOUNT_MESSAGE
from droneops.utils.validation import (
    PHONE_RE,
    IsoDateTime,
    not_blank,
    required_messages,
    strip_strings,
)


class InquiryCreateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    client_name = fields.Str(
        required=True,
        error_messages=required_messages("Client name is required"),
        validate=not_blank("Client name is required"),
    )
    phone_number = fields.Str(
        required=True,
        error_messages=required_messages("Phone number is required"),
        validate=validate.Regexp(PHONE_RE, error="Please enter a valid phone number"),
    )
    city = fields.Str(
        required=True,
        error_messages=required_messages("City is required"),
        validate=not_blank("City is required"),
    )
    requirement_summary = fields.Str(
        required=True,
        error_messages=required_messages("Requirement summary is required"),
        validate=not_blank("Requirement summary is required"),
    )
    source = fields.Str(
        load_default="website",
        validate=validate.OneOf(INQUIRY_SOURCES, error="Source must be one of: {choices}"),
    )
    follow_up_notes = fields.Str(allow_none=True, load_default=None)

    @pre_load
    def clean(self, data, **kwargs):
        return strip_strings(data)


class FollowUpSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    follow_up_notes = fields.Str(allow_none=True, load_default="")


class ConvertInquirySchema(ma.Schema):
    """Order details the lead did not carry; the rest comes from the inquiry."""

    class Meta:
        unknown = EXCLUDE

    amount = fields.Float(
        required=True,
        error_messages={
            "required": AMOUNT_MESSAGE,
            "null": AMOUNT_MESSAGE,
            "invalid": AMOUNT_MESSAGE,
            "special": AMOUNT_MESSAGE,
        },
        validate=validate.Range(min=0, min_inclusive=False, error=AMOUNT_MESSAGE),
    )
    package_type = fields.Str(
        load_default="basic",
        validate=validate.OneOf(PACKAGE_TYPES, error="Package type must be one of: {choices}"),
    )
    order_date = IsoDateTime(allow_none=True, load_default=None)
    location = fields.Str(allow_none=True, load_default=None)

    @pre_load
    def clean(self, data, **kwargs):
        return strip_strings(data)
