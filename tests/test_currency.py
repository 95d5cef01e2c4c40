"""Tests for currency precision and base conversion."""

import pytest
from decimal import Decimal

from ledgerkit.domain.currency import (
    minor_units,
    normalize_currency,
    quantum,
    round_amount,
    to_base_amount,
)


def test_normalize_currency():
    assert normalize_currency(" usd ") == "USD"
    for code in ("", "US", "USDT", "U5D", None):
        with pytest.raises(ValueError):
            normalize_currency(code)


def test_minor_units():
    assert minor_units("USD") == 2
    assert minor_units("jpy") == 0
    assert minor_units("KWD") == 3
    assert quantum("EUR") == Decimal("0.01")
    assert quantum("JPY") == Decimal("1")


@pytest.mark.parametrize(
    "amount,currency,expected",
    [
        ("1.005", "USD", "1.01"),
        ("1.004", "USD", "1.00"),
        ("2.5", "JPY", "3"),
        ("3.0755", "KWD", "3.076"),
        ("-1.005", "USD", "-1.01"),
    ],
)
def test_round_amount_half_up(amount, currency, expected):
    assert round_amount(Decimal(amount), currency) == Decimal(expected)


def test_to_base_amount():
    assert to_base_amount(Decimal("100.00"), Decimal("1.0825"), "USD") == Decimal("108.25")
    assert to_base_amount(Decimal("33.33"), Decimal("0.333333"), "USD") == Decimal("11.11")
    assert to_base_amount(Decimal("1000"), Decimal("0.0067"), "JPY") == Decimal("7")
