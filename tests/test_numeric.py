from datetime import date, datetime
from decimal import Decimal

import pytest

from siscont.services.numeric import format_money, parse_numeric_value, round_money, sum_displayed


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("S/ 1,234.56", "1234.56"),
        ("", "0"),
        (None, "0"),
        (42, "42"),
        (10.0, "10"),
        (12.5, "12.5"),
        ("10%", "10"),
        ("-3.5", "-3.5"),
        ("abc", "0"),
        ("1.2.3", "0"),
        (True, "0"),
        (Decimal("7.25"), "7.25"),
        (1e-05, "0.00001"),
        (0.1, "0.1"),
        (1e16, "10000000000000000"),
        (Decimal("1E+2"), "100"),
    ],
)
def test_parse_numeric_value(raw, expected):
    assert parse_numeric_value(raw) == expected


def test_dates_coerce_to_zero():
    assert parse_numeric_value(date(2024, 1, 31)) == "0"
    assert parse_numeric_value(datetime(2024, 1, 31, 10, 0)) == "0"


def test_round_money_is_half_up():
    assert round_money("100.005") == Decimal("100.01")
    assert round_money("2.675") == Decimal("2.68")
    assert format_money("0") == "0.00"


def test_totals_use_displayed_values():
    # 100.01 + 200.00 shown on screen, so the total must read 300.01
    assert sum_displayed(["100.005", "200.004"]) == Decimal("300.01")
