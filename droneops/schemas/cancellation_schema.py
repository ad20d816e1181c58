from marshmallow import EXCLUDE, fields, pre_load, validate

from droneops.extensions import ma
from droneops.models.cancellation import CANCELLATION_REASONS
from droneops.utils.validation import required_messages, strip_strings


class CancellationCreateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    reason = fields.Str(
        required=True,
        error_messages=required_messages("Cancellation reason is required"),
        validate=validate.OneOf(CANCELLATION_REASONS, error="Reason must be one of: {choices}"),
    )
    refund_amount = fields.Float(
        allow_none=True,
        load_default=None,
        validate=validate.Range(min=0, error="Refund amount cannot be negative"),
    )
    admin_notes = fields.Str(allow_none=True, load_default="")

    @pre_load
    def clean(self, data, **kwargs):
        return strip_strings(data)
