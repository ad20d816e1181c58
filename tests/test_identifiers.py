import re

from droneops.utils.identifiers import (
    city_prefix,
    generate_editor_code,
    generate_inquiry_id,
    generate_order_id,
    generate_pilot_code,
)


def test_order_id_is_ord_plus_eight_digits():
    for _ in range(50):
        assert re.fullmatch(r"ORD\d{8}", generate_order_id())


def test_order_id_uses_clock_tail():
    assert generate_order_id(now_ms=1700000012345).startswith("ORD12345")


def test_order_id_pads_short_clock_values():
    assert re.fullmatch(r"ORD00042\d{3}", generate_order_id(now_ms=42))


def test_pilot_code_is_city_prefix_and_three_digits():
    for _ in range(50):
        code = generate_pilot_code("Mumbai")
        assert re.fullmatch(r"MUM\d{3}", code)


def test_city_prefix_handles_short_and_spaced_names():
    assert city_prefix("Goa") == "GOA"
    assert city_prefix("Ky") == "KYX"
    assert city_prefix("new delhi") == "NEW"
    assert re.fullmatch(r"[A-Z]{3}\d{3}", generate_pilot_code(""))


def test_editor_code_format():
    assert re.fullmatch(r"ED\d{3}", generate_editor_code())


def test_inquiry_id_format():
    assert re.fullmatch(r"INQ\d{6}", generate_inquiry_id())
    assert generate_inquiry_id(now_ms=1700000001234).startswith("INQ1234")
