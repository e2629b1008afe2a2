import json
import re
from decimal import Decimal

import pytest

from storefront.common.errors import ValidationError
from storefront.common.services.logging import log_event, set_level
from storefront.common.utils.money import format_money, to_money
from storefront.common.utils.order_number import generate_order_number, to_base36
from storefront.common.utils.pagination import normalize_paging, total_pages
from storefront.common.utils.validators import ensure_positive_int, normalize_shipping_address


def test_money_rounds_half_up():
    assert to_money("2.675") == Decimal("2.68")
    assert to_money(0.1) == Decimal("0.10")
    assert format_money(14) == "14.00"
    assert format_money(None) == "0.00"
    with pytest.raises(ValueError):
        to_money("NaN")


def test_base36_and_order_number():
    assert [to_base36(n) for n in (0, 35, 36, 1295)] == ["0", "Z", "10", "ZZ"]
    number = generate_order_number(now_ms=36 ** 3)
    assert re.fullmatch(r"ORD-1000-[0-9A-Z]{6}", number)


def test_paging():
    assert normalize_paging(0, 0) == (1, 10)
    assert normalize_paging(3, 500) == (3, 50)
    assert normalize_paging(2, 12, default_limit=12) == (2, 12)
    assert (total_pages(0, 10), total_pages(10, 10), total_pages(11, 10)) == (0, 1, 2)


def test_positive_int_accepts_numeric_strings():
    assert ensure_positive_int("3", "quantity") == 3
    assert ensure_positive_int(2.0, "quantity") == 2
    with pytest.raises(ValidationError):
        ensure_positive_int("--3", "quantity")


def test_shipping_address_normalization():
    address = normalize_shipping_address(
        {"name": " Ada ", "email": "a@b.c", "address": "1 Road", "city": "X", "postalCode": "1", "country": "UK"}
    )
    assert address["name"] == "Ada"
    assert address["street"] == "1 Road"
    assert address["phone"] is None and address["state"] is None


def test_log_event_respects_threshold(capsys):
    try:
        set_level("warning")
        log_event("info", "quiet.event")
        log_event("error", "loud.event", order_id="o-1")
        lines = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        assert [line["event"] for line in lines] == ["loud.event"]
        assert lines[0]["order_id"] == "o-1"
        assert lines[0]["level"] == "error"
    finally:
        set_level("info")
    with pytest.raises(ValueError):
        set_level("verbose")
