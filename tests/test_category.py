"""Tests for the account category registry."""

import pytest
from datetime import date

from ledgerkit.domain.category import DEFAULT_CATEGORIES, normal_balance_side
from ledgerkit.domain.entities import LedgerGroup, LedgerState
from ledgerkit.domain.errors import ConflictError, NotFoundError, ValidationError


@pytest.mark.parametrize(
    "group, side",
    [
        (LedgerGroup.ASSET, LedgerState.DEBIT),
        (LedgerGroup.EXPENSE, LedgerState.DEBIT),
        (LedgerGroup.DIVIDENDS, LedgerState.DEBIT),
        (LedgerGroup.LIABILITY, LedgerState.CREDIT),
        (LedgerGroup.EQUITY, LedgerState.CREDIT),
        (LedgerGroup.INCOME, LedgerState.CREDIT),
        (LedgerGroup.SHARES, LedgerState.CREDIT),
    ],
)
def test_normal_balance_side(group, side):
    assert normal_balance_side(group) == side


def test_normal_balance_side_accepts_string():
    assert normal_balance_side("LIABILITY") == LedgerState.CREDIT


def test_create_and_get_category(category_service):
    category_id = category_service.create_category(
        "Prepaid Expenses", LedgerGroup.ASSET, ledger_sub_group="Current Assets"
    )

    category = category_service.get_category(category_id)
    assert category.name == "Prepaid Expenses"
    assert category.ledger_group == LedgerGroup.ASSET
    assert category.ledger_sub_group == "Current Assets"
    assert category_service.get_category_by_name("Prepaid Expenses").id == category_id


def test_create_category_requires_name(category_service):
    with pytest.raises(ValidationError):
        category_service.create_category("  ", LedgerGroup.ASSET)


def test_create_duplicate_category(category_service):
    category_service.create_category("Rent", LedgerGroup.EXPENSE)

    with pytest.raises(ConflictError, match="already exists"):
        category_service.create_category("Rent", LedgerGroup.EXPENSE)


def test_require_missing_category(category_service):
    with pytest.raises(NotFoundError):
        category_service.require_category(999)


def test_change_ledger_group_without_postings(category_service, account_service):
    category_id = category_service.create_category("Deposits", LedgerGroup.ASSET)
    account_service.create_account("Landlord deposit", category_id)

    category_service.change_ledger_group(category_id, LedgerGroup.EXPENSE)

    assert category_service.get_category(category_id).ledger_group == LedgerGroup.EXPENSE


def test_change_ledger_group_blocked_by_postings(
    category_service, transaction_service, sample_categories, sample_accounts
):
    transaction_service.post_double_entry(
        sample_accounts["cash"], sample_accounts["sales"], "100", transaction_date=date(2024, 1, 5)
    )

    with pytest.raises(ConflictError, match="reference its accounts"):
        category_service.change_ledger_group(sample_categories[LedgerGroup.ASSET], LedgerGroup.EXPENSE)

    category = category_service.get_category(sample_categories[LedgerGroup.ASSET])
    assert category.ledger_group == LedgerGroup.ASSET


def test_delete_unused_category(category_service):
    category_id = category_service.create_category("Unused", LedgerGroup.INCOME)

    category_service.delete_category(category_id)

    assert category_service.get_category(category_id) is None


def test_delete_category_in_use(category_service, sample_categories, sample_accounts):
    with pytest.raises(ConflictError, match="used by"):
        category_service.delete_category(sample_categories[LedgerGroup.ASSET])


def test_initialize_default_categories_is_idempotent(category_service):
    assert category_service.initialize_default_categories() == len(DEFAULT_CATEGORIES)
    assert category_service.initialize_default_categories() == 0
    assert len(category_service.list_categories()) == len(DEFAULT_CATEGORIES)
