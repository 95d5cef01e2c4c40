"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = (
    "this-month",
    "last-month",
    "this-quarter",
    "last-quarter",
    "this-year",
    "last-year",
)


def _quarter_start(day: date) -> date:
    return day.replace(month=3 * ((day.month - 1) // 3) + 1, day=1)


def _period_bounds(period: str, today: date) -> tuple[date, date]:
    """First and last day of a named period relative to ``today``."""
    if period == "this-month":
        start = today.replace(day=1)
        return start, start + relativedelta(months=1) - timedelta(days=1)
    if period == "last-month":
        start = (today - relativedelta(months=1)).replace(day=1)
        return start, today.replace(day=1) - timedelta(days=1)
    if period == "this-quarter":
        start = _quarter_start(today)
        return start, start + relativedelta(months=3) - timedelta(days=1)
    if period == "last-quarter":
        end = _quarter_start(today) - timedelta(days=1)
        return _quarter_start(end), end
    if period == "this-year":
        return today.replace(month=1, day=1), today.replace(month=12, day=31)
    if period == "last-year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and relative
    phrases used for closing dates:
    - "today", "yesterday", "tomorrow"
    - "start of <period>" / "end of <period>" where period is one of
      "this month", "last month", "this quarter", "last quarter",
      "this year", "last year"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    for prefix, index in (("start of ", 0), ("end of ", 1)):
        if date_str.startswith(prefix):
            period = date_str[len(prefix):].strip().replace(" ", "-")
            return _period_bounds(period, today)[index]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get the first and last day of a named period.

    Args:
        period: One of this-month, last-month, this-quarter, last-quarter,
            this-year, last-year

    Returns:
        Tuple of (first_day, last_day), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    return _period_bounds(period.strip().lower(), date.today())
