from marshmallow import EXCLUDE, fields, pre_load, validate

from droneops.extensions import ma
from droneops.models.order import PACKAGE_TYPES
from droneops.utils.validation import (
    PHONE_RE,
    IsoDateTime,
    not_blank,
    required_messages,
    strip_strings,
)

AMOUNT_MESSAGE = "Amount must be greater than 0"


class OrderCreateSchema(ma.Schema):
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
    location = fields.Str(allow_none=True, load_default=None)
    order_date = IsoDateTime(allow_none=True, load_default=None)
    drive_link = fields.Url(allow_none=True, load_default=None, schemes={"http", "https"})
    reference_links = fields.List(fields.Url(schemes={"http", "https"}), load_default=list)
    referral_code = fields.Str(allow_none=True, load_default=None)
    # admin console only; client portal orders always belong to the caller
    client_id = fields.Str(allow_none=True, load_default=None)

    @pre_load
    def clean(self, data, **kwargs):
        return strip_strings(data)


class OrderUpdateSchema(OrderCreateSchema):
    """Same rules, every field optional; status is never editable here."""

    final_drive_link = fields.Url(allow_none=True, schemes={"http", "https"})


class OrderListSchema(ma.Schema):
    id = fields.Str()
    order_ref = fields.Str()
    client_name = fields.Str()
    phone_number = fields.Str()
    city = fields.Str()
    package_type = fields.Str()
    amount = fields.Float()
    status = fields.Str()
    pilot_name = fields.Str(allow_none=True)
    editor_name = fields.Str(allow_none=True)
    order_date = fields.DateTime(allow_none=True)
    created_at = fields.DateTime()


class ReviewCommentSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    comment = fields.Str(load_default="", allow_none=True)


class AssignSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    pilot_id = fields.Str(allow_none=True, load_default=None)
    editor_id = fields.Str(allow_none=True, load_default=None)
    comment = fields.Str(allow_none=True, load_default=None)

    @pre_load
    def clean(self, data, **kwargs):
        return strip_strings(data)


class CompleteOrderSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    final_drive_link = fields.Url(allow_none=True, load_default=None, schemes={"http", "https"})
    comment = fields.Str(allow_none=True, load_default=None)

    @pre_load
    def clean(self, data, **kwargs):
        return strip_strings(data)
