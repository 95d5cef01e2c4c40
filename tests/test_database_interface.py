"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain import entities
from ledgerkit.domain.errors import ConflictError
from ledgerkit.domain.transaction import TransactionService


@pytest.fixture
def other_tenant_db(temp_db):
    """Second handle on the same database file, scoped to another tenant."""
    db = create_sqlite_database(database_path=temp_db.database_path, tenant_id="other")
    yield db
    db.disconnect()


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_get_category_returns_domain_model(self, temp_db):
        category_id = temp_db.create_category("Current Assets", entities.LedgerGroup.ASSET)

        category = temp_db.get_category(category_id)

        assert isinstance(category, entities.LedgerAccountCategory)
        assert category.ledger_group == entities.LedgerGroup.ASSET
        assert isinstance(category.created_at, datetime)

    def test_duplicate_category_name(self, temp_db):
        temp_db.create_category("Current Assets", entities.LedgerGroup.ASSET)
        with pytest.raises(ConflictError):
            temp_db.create_category("Current Assets", entities.LedgerGroup.EXPENSE)

    def test_get_account_returns_domain_model(self, temp_db, sample_accounts):
        account = temp_db.get_account(sample_accounts["cash"])

        assert isinstance(account, entities.LedgerAccount)
        assert account.name == "Cash"
        assert account.number == "1000"
        assert account.currency == "USD"
        assert account.archived is False

    def test_transaction_round_trips_exact_amounts(self, temp_db, sample_accounts):
        service = TransactionService(temp_db)
        posted = service.post_double_entry(
            sample_accounts["cash"],
            sample_accounts["sales"],
            "1234567.89",
            currency="EUR",
            exchange_rate="1.08251234",
            transaction_date=date(2024, 5, 1),
        )

        txn = temp_db.get_transaction(posted.id)

        assert isinstance(txn, entities.LedgerTransaction)
        assert txn.entry_mode == entities.EntryMode.DOUBLE_ENTRY
        assert txn.amount == Decimal("1234567.89")
        assert str(txn.amount) == "1234567.89"
        assert txn.exchange_rate == Decimal("1.08251234")
        assert txn.base_amount == Decimal("1336434.98")

    def test_sum_account_postings_window(self, temp_db, sample_accounts):
        service = TransactionService(temp_db)
        for day, amount in ((1, "0.10"), (2, "0.20"), (3, "0.30")):
            service.post_double_entry(
                sample_accounts["cash"],
                sample_accounts["sales"],
                amount,
                transaction_date=date(2024, 1, day),
            )

        assert temp_db.sum_account_postings(sample_accounts["cash"]) == (Decimal("0.6"), Decimal("0"))
        assert temp_db.sum_account_postings(
            sample_accounts["cash"], start_date=date(2024, 1, 1), end_date=date(2024, 1, 2)
        ) == (Decimal("0.2"), Decimal("0"))
        assert temp_db.sum_account_postings(
            sample_accounts["sales"], end_date=date(2024, 1, 2)
        ) == (Decimal("0"), Decimal("0.3"))

    def test_ledger_halt_markers(self, temp_db):
        assert temp_db.get_ledger_halt() is None

        temp_db.halt_ledger("first")
        temp_db.halt_ledger("second")
        halt = temp_db.get_ledger_halt()

        assert isinstance(halt, entities.LedgerHalt)
        assert halt.reason == "first"
        temp_db.clear_ledger_halt()
        assert temp_db.get_ledger_halt() is None


class TestTenantScoping:
    """Every read and write is confined to the database handle's tenant."""

    def test_accounts_invisible_across_tenants(self, temp_db, other_tenant_db, sample_accounts):
        assert other_tenant_db.list_accounts() == []
        assert other_tenant_db.list_categories() == []
        assert other_tenant_db.get_account(sample_accounts["cash"]) is None

    def test_same_names_in_two_tenants(self, temp_db, other_tenant_db):
        temp_db.create_category("Current Assets", entities.LedgerGroup.ASSET)
        other_id = other_tenant_db.create_category("Current Assets", entities.LedgerGroup.ASSET)

        assert other_tenant_db.get_category(other_id).name == "Current Assets"
        assert len(temp_db.list_categories()) == 1

    def test_balances_and_halts_are_per_tenant(self, temp_db, other_tenant_db, sample_accounts):
        TransactionService(temp_db).post_double_entry(
            sample_accounts["cash"], sample_accounts["sales"], "100.00", transaction_date=date(2024, 1, 1)
        )
        temp_db.halt_ledger("broken")

        assert other_tenant_db.sum_postings_by_account(end_date=date(2024, 12, 31)) == {}
        assert other_tenant_db.list_transactions() == []
        assert other_tenant_db.get_ledger_halt() is None
