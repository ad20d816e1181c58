import re
from datetime import timezone

from dateutil import parser
from marshmallow import ValidationError, fields

from droneops.utils.exceptions import ValidationFailed

PHONE_RE = re.compile(r"^\+?[\d\s\-()]{10,}$")


def not_blank(message):
    def _check(value):
        if value is None or not str(value).strip():
            raise ValidationError(message)
    return _check


def required_messages(message):
    return {"required": message, "null": message}


def strip_strings(data, skip=()):
    """Trim string values and turn empty optional strings into None."""
    if not isinstance(data, dict):
        return data
    cleaned = {}
    for key, value in data.items():
        if isinstance(value, str) and key not in skip:
            value = value.strip()
            if value == "":
                value = None
        cleaned[key] = value
    return cleaned


def load_or_raise(schema, data, **kwargs):
    try:
        return schema.load(data or {}, **kwargs)
    except ValidationError as err:
        raise ValidationFailed(err.messages)


class IsoDateTime(fields.Field):
    """Accepts ``2026-05-01`` as well as full ISO-8601 timestamps."""

    default_error_messages = {"invalid": "Not a valid date."}

    def _serialize(self, value, attr, obj, **kwargs):
        return value.isoformat() if value else None

    def _deserialize(self, value, attr, data, **kwargs):
        try:
            parsed = parser.isoparse(str(value))
        except (ValueError, OverflowError):
            raise self.make_error("invalid")
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed
