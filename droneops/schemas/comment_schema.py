from marshmallow import EXCLUDE, fields, validate

from droneops.extensions import ma
from droneops.models.comment import COMMENT_STAGES
from droneops.utils.validation import not_blank, required_messages


class CommentCreateSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    comment_text = fields.Str(
        required=True,
        error_messages=required_messages("Comment text is required"),
        validate=not_blank("Comment text is required"),
    )
    comment_stage = fields.Str(load_default="general", validate=validate.OneOf(COMMENT_STAGES))
