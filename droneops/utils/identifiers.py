"""Human-readable identifiers shown in the dashboards.

None of these are checked against existing records; two calls within the
same millisecond can collide, which is acceptable at the volumes we run.
"""
import random
import time
import uuid


def gen_uuid(prefix=None):
    uid = str(uuid.uuid4())
    return f"{prefix}-{uid}" if prefix else uid


def generate_order_id(now_ms=None):
    """``ORD`` + 8 digits: last five of the millisecond clock + 3 random."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    stamp = str(now_ms)[-5:].rjust(5, "0")
    return f"ORD{stamp}{random.randint(0, 999):03d}"


def generate_inquiry_id(now_ms=None):
    """``INQ`` + last four of the millisecond clock + 2 random digits."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"INQ{str(now_ms)[-4:].rjust(4, '0')}{random.randint(0, 99):02d}"


def city_prefix(city):
    letters = "".join(ch for ch in (city or "") if ch.isalpha()).upper()
    return letters[:3].ljust(3, "X")


def generate_pilot_code(city):
    return f"{city_prefix(city)}{random.randint(0, 999):03d}"


def generate_editor_code():
    return f"ED{random.randint(0, 999):03d}"
