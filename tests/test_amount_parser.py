"""Tests for amount and exchange rate parsing."""

import pytest
from decimal import Decimal

from ledgerkit.utils.amount_parser import parse_amount, parse_exchange_rate


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("$123.45", Decimal("123.45")),
        ("1,234.56", Decimal("1234.56")),
        ("(123.45)", Decimal("-123.45")),
        ("-7", Decimal("-7")),
        (" €10 ", Decimal("10")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "1.2.3", "NaN", "Infinity"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_parse_exchange_rate():
    assert parse_exchange_rate("1.0825") == Decimal("1.0825")
    assert parse_exchange_rate("1,550.5") == Decimal("1550.5")


@pytest.mark.parametrize("text", ["0", "-1.5", "(2)"])
def test_parse_exchange_rate_must_be_positive(text):
    with pytest.raises(ValueError, match="greater than zero"):
        parse_exchange_rate(text)
