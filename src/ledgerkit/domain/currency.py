"""Currency precision and conversion to the base currency."""

from decimal import Decimal, ROUND_HALF_UP

DEFAULT_MINOR_UNITS = 2

# ISO 4217 currencies whose minor unit differs from two decimal places.
MINOR_UNITS = {
    "BHD": 3,
    "CLP": 0,
    "IQD": 3,
    "ISK": 0,
    "JOD": 3,
    "JPY": 0,
    "KRW": 0,
    "KWD": 3,
    "LYD": 3,
    "OMR": 3,
    "TND": 3,
    "UGX": 0,
    "VND": 0,
    "XAF": 0,
    "XOF": 0,
}


def normalize_currency(code: str) -> str:
    """Return an upper-case three letter currency code.

    Raises:
        ValueError: If the code is not three letters
    """
    code = (code or "").strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValueError(f"Invalid currency code '{code}'")
    return code


def minor_units(currency: str) -> int:
    return MINOR_UNITS.get(currency.upper(), DEFAULT_MINOR_UNITS)


def quantum(currency: str) -> Decimal:
    """Smallest representable amount in ``currency`` (e.g. Decimal('0.01'))."""
    return Decimal(1).scaleb(-minor_units(currency))


def round_amount(amount: Decimal, currency: str) -> Decimal:
    """Round half-up to the currency's minor unit."""
    return Decimal(amount).quantize(quantum(currency), rounding=ROUND_HALF_UP)


def to_base_amount(amount: Decimal, exchange_rate: Decimal, base_currency: str) -> Decimal:
    """Convert a transaction amount to the base currency.

    Applied once per transaction at posting time; the result is stored and
    never recomputed on read.
    """
    return round_amount(Decimal(amount) * Decimal(exchange_rate), base_currency)
