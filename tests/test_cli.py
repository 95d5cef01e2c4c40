"""Tests for the command line interface."""

import pytest
from ledgerkit.cli.main import cli


@pytest.fixture
def invoke(cli_runner, temp_db):
    """Run the CLI against the temporary database."""

    def run(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    return run


@pytest.fixture
def chart(invoke):
    """Standard categories plus a checking, payable and sales account."""
    assert invoke("init-chart").exit_code == 0
    for name, category, number in (
        ("Checking", "Cash and Bank", "1010"),
        ("Trade Payables", "Accounts Payable", "2000"),
        ("Product Sales", "Sales Revenue", "4000"),
    ):
        result = invoke("account", "create", name, "--category", category, "--number", number)
        assert result.exit_code == 0, result.output


def test_init_chart_is_idempotent(invoke):
    result = invoke("init-chart")
    assert result.exit_code == 0
    assert "Successfully created 15 categories." in result.output

    result = invoke("init-chart", "--with-default-accounts")
    assert result.exit_code == 0
    assert "Standard categories already exist." in result.output
    assert "PAYABLE" in result.output


def test_category_commands(invoke):
    result = invoke("category", "create", "Prepaid Expenses", "asset", "--sub-group", "Current Assets")
    assert result.exit_code == 0
    assert "Created category 'Prepaid Expenses'" in result.output

    result = invoke("category", "list")
    assert "Prepaid Expenses" in result.output
    assert "DEBIT" in result.output

    result = invoke("category", "set-group", "Prepaid Expenses", "EXPENSE")
    assert result.exit_code == 0
    assert "is now EXPENSE" in result.output

    result = invoke("category", "create", "Prepaid Expenses", "ASSET")
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_account_create_and_list(invoke, chart):
    result = invoke("account", "create", "Petty Cash", "--category", "Cash and Bank", "--parent", "1010")
    assert result.exit_code == 0

    result = invoke("account", "list")
    assert result.exit_code == 0
    assert "Checking" in result.output
    assert "  Petty Cash" in result.output

    result = invoke("account", "create", "Other", "--category", "Nope")
    assert result.exit_code == 1
    assert "Category 'Nope' not found" in result.output


def test_post_and_balance(invoke, chart):
    result = invoke("post", "double", "1010", "4000", "$1,250.00", "--date", "2024-01-15")
    assert result.exit_code == 0, result.output
    assert "Posted transaction 1" in result.output

    result = invoke("post", "single", "Checking", "credit", "50", "--date", "2024-02-01")
    assert result.exit_code == 0, result.output

    result = invoke("balance", "1010", "--as-of", "2024-01-31")
    assert result.exit_code == 0
    assert "1,250.00 USD as of 2024-01-31" in result.output

    result = invoke("balance", "1010", "--start-date", "2024-01-31", "--end-date", "2024-02-29")
    assert result.exit_code == 0
    assert "-50.00 USD movement" in result.output

    result = invoke("balance", "Product Sales", "--running", "--end-date", "2024-12-31")
    assert result.exit_code == 0
    assert "Dr Checking / Cr Product Sales" in result.output


def test_post_validation_errors(invoke, chart):
    result = invoke("post", "double", "1010", "9999", "10")
    assert result.exit_code == 1
    assert "not found" in result.output

    result = invoke("post", "double", "1010", "4000", "abc")
    assert result.exit_code == 1
    assert "Could not parse amount" in result.output

    result = invoke("post", "double", "1010", "4000", "-5")
    assert result.exit_code == 1
    assert "Error:" in result.output

    result = invoke("post", "double", "1010", "4000", "5", "--related-to", "INVOICE")
    assert result.exit_code == 1
    assert "Invalid document reference" in result.output


def test_trial_balance(invoke, chart):
    invoke("post", "double", "1010", "4000", "300", "--date", "2024-03-01")
    invoke("post", "double", "2000", "1010", "120", "--date", "2024-03-02")

    result = invoke("trial-balance", "--as-of", "2024-03-31", "--check")
    assert result.exit_code == 0, result.output
    assert "180.00" in result.output
    assert "TOTAL" in result.output
    assert "Warning" not in result.output


def test_trial_balance_check_halts_unbalanced_ledger(invoke, chart):
    invoke("post", "single", "1010", "DEBIT", "10", "--date", "2024-03-01")

    result = invoke("trial-balance", "--check")
    assert result.exit_code == 1
    assert "is off" in result.output

    result = invoke("post", "single", "4000", "CREDIT", "10")
    assert result.exit_code == 1
    assert "halted" in result.output


def test_journal_workflow(invoke, chart):
    result = invoke(
        "journal", "create",
        "--line", "1010:DEBIT:100",
        "--line", "Product Sales:CREDIT:100",
        "--date", "2024-04-01",
        "--description", "Cash sale",
    )
    assert result.exit_code == 0, result.output
    assert "Created journal entry 1 (BALANCED)" in result.output

    result = invoke("journal", "post", "1", "--approver", "dana")
    assert result.exit_code == 0
    assert "Posted journal entry 1" in result.output

    result = invoke("journal", "show", "1")
    assert "Journal entry 1 (POSTED)" in result.output
    assert "Cash sale" in result.output

    result = invoke("journal", "reverse", "1")
    assert result.exit_code == 0
    assert "Reversed journal entry 1 with entry 2" in result.output

    result = invoke("journal", "show", "--status", "REVERSED")
    assert result.exit_code == 0
    assert "REVERSED" in result.output

    result = invoke("journal", "reverse", "1")
    assert result.exit_code == 1
    assert "already reversed" in result.output


def test_journal_rejects_unbalanced_lines(invoke, chart):
    result = invoke("journal", "create", "--line", "1010:DEBIT:100", "--line", "4000:CREDIT:99.99")
    assert result.exit_code == 1
    assert "Error:" in result.output

    result = invoke("journal", "create", "--line", "1010-DEBIT-100")
    assert result.exit_code == 1
    assert "expected ACCOUNT:DEBIT|CREDIT:AMOUNT" in result.output

    assert "No journal entries found." in invoke("journal", "show").output


def test_voucher_workflow(invoke, chart):
    result = invoke(
        "voucher", "create", "payment", "2000", "1010", "450",
        "--to", "vendor", "--beneficiary", "Acme Ltd", "--date", "2024-05-01",
    )
    assert result.exit_code == 0, result.output
    assert "Created voucher 1" in result.output

    result = invoke("voucher", "list", "--status", "PENDING")
    assert "Acme Ltd" in result.output
    assert "450.00" in result.output

    result = invoke("voucher", "approve", "1", "--approver", "carol")
    assert result.exit_code == 0
    assert "Voucher 1 approved" in result.output

    result = invoke("voucher", "approve", "1")
    assert result.exit_code == 1
    assert "APPROVED" in result.output

    result = invoke("voucher", "reject", "1")
    assert result.exit_code == 1


def test_transaction_commands(invoke, chart):
    invoke("post", "double", "1010", "4000", "75", "--date", "2024-06-01")

    result = invoke("transaction", "verify", "1", "--approver", "erin")
    assert result.exit_code == 0

    result = invoke("transaction", "reverse", "1", "--date", "2024-06-02")
    assert result.exit_code == 0
    assert "Reversed transaction 1 with transaction 2" in result.output

    result = invoke("transaction", "list", "--account", "1010")
    assert "Found 2 transaction(s)" in result.output
    assert "reversed by 2" in result.output
    assert "reverses 1" in result.output

    result = invoke("transaction", "list", "--start-date", "2024-06-01", "--end-date", "2024-06-30")
    assert "Found 1 transaction(s)" in result.output

    result = invoke("transaction", "list", "--period", "this-month", "--start-date", "2024-01-01")
    assert result.exit_code == 1
    assert "--period cannot be combined" in result.output


def test_invalid_global_options(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "--base-currency", "DOLLARS", "category", "list"]
    )
    assert result.exit_code == 1
    assert "Invalid currency code" in result.output


def test_tenants_are_isolated(cli_runner, temp_db, invoke, chart):
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "--tenant", "acme", "account", "list"]
    )
    assert result.exit_code == 0
    assert "No accounts found." in result.output
