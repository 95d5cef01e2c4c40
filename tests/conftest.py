"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.balance import BalanceService
from ledgerkit.domain.category import CategoryService
from ledgerkit.domain.entities import LedgerGroup
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.domain.voucher import VoucherService


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep LEDGERKIT_* settings of the developer's shell out of tests."""
    for name in (
        "LEDGERKIT_DB_PATH",
        "LEDGERKIT_DATABASE_URL",
        "LEDGERKIT_TENANT",
        "LEDGERKIT_BASE_CURRENCY",
        "LEDGERKIT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def journal_service(temp_db):
    """Create a JournalService with a temporary database."""
    return JournalService(temp_db)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceService with a temporary database."""
    return BalanceService(temp_db)


@pytest.fixture
def voucher_service(temp_db):
    """Create a VoucherService with a temporary database."""
    return VoucherService(temp_db)


@pytest.fixture
def sample_categories(category_service):
    """Create one category per ledger group and return their IDs by group."""
    return {
        group: category_service.create_category(name=f"{group.value.title()} Accounts", ledger_group=group)
        for group in LedgerGroup
    }


@pytest.fixture
def sample_accounts(account_service, sample_categories):
    """Create a small chart of accounts and return account IDs by short name."""
    return {
        "cash": account_service.create_account(
            "Cash", sample_categories[LedgerGroup.ASSET], number="1000"
        ),
        "bank": account_service.create_account(
            "Bank", sample_categories[LedgerGroup.ASSET], number="1010"
        ),
        "payable": account_service.create_account(
            "Accounts Payable", sample_categories[LedgerGroup.LIABILITY], number="2000"
        ),
        "equity": account_service.create_account(
            "Owner Capital", sample_categories[LedgerGroup.EQUITY], number="3000"
        ),
        "sales": account_service.create_account(
            "Sales", sample_categories[LedgerGroup.INCOME], number="4000"
        ),
        "rent": account_service.create_account(
            "Rent", sample_categories[LedgerGroup.EXPENSE], number="5000"
        ),
    }


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
