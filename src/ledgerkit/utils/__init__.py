"""Utility functions for ledgerkit."""

from ledgerkit.utils.date_parser import parse_date, get_date_range
from ledgerkit.utils.amount_parser import parse_amount, parse_exchange_rate
from ledgerkit.utils.account_resolver import resolve_account

__all__ = ["parse_date", "get_date_range", "parse_amount", "parse_exchange_rate", "resolve_account"]
