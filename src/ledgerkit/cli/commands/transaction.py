"""Transaction management commands."""

import click
from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.date_filters import parse_date_or_exit, resolve_cli_window
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import LedgerState, LedgerTransaction
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.utils.date_parser import PERIODS


def format_legs(txn: LedgerTransaction, accounts: dict[int, str]) -> str:
    """Render a transaction's legs as 'Dr Cash / Cr Sales'."""
    parts = []
    for account_id, side in txn.legs():
        prefix = "Dr" if side == LedgerState.DEBIT else "Cr"
        parts.append(f"{prefix} {accounts.get(account_id, f'#{account_id}')}")
    return " / ".join(parts)


def echo_transactions(transactions: list[LedgerTransaction], accounts: dict[int, str]) -> None:
    click.echo("-" * 100)
    click.echo(f"{'ID':<6} {'Date':<12} {'Amount':>14} {'Cur':<4} {'Legs':<40} {'Flags':<20}")
    click.echo("-" * 100)
    for txn in transactions:
        flags = []
        if txn.verified:
            flags.append("verified")
        if txn.archived:
            flags.append("archived")
        if txn.reversal_of_id is not None:
            flags.append(f"reverses {txn.reversal_of_id}")
        if txn.reversed_by_id is not None:
            flags.append(f"reversed by {txn.reversed_by_id}")
        click.echo(
            f"{txn.id:<6} {str(txn.transaction_date):<12} {txn.amount:>14,} {txn.currency:<4} "
            f"{format_legs(txn, accounts)[:40]:<40} {', '.join(flags):<20}"
        )


@click.group()
def transaction_group():
    """Inspect and correct transactions."""
    pass


@transaction_group.command("list")
@click.option("--account", help="Account number, name or ID")
@click.option("--start-date", help="Exclusive start date (YYYY-MM-DD or relative like 'end of last month')")
@click.option("--end-date", help="Inclusive end date (YYYY-MM-DD or relative like 'today')")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of explicit dates")
@click.option("--all", "include_archived", is_flag=True, help="Include archived transactions")
@click.option("--limit", type=int, help="Maximum number of rows")
@click.option("--offset", type=int, default=0, help="Rows to skip")
@click.pass_context
def list_transactions(ctx, account, start_date, end_date, period, include_archived, limit, offset):
    """List transactions in posting order (date, then ID)."""
    db = ctx.obj["db"]
    service = TransactionService(db, base_currency=ctx.obj["base_currency"])
    account_service = AccountService(db, base_currency=ctx.obj["base_currency"])

    start, end = resolve_cli_window(ctx, start_date=start_date, end_date=end_date, period=period)
    account_id = resolve_account_or_exit(ctx, account_service, account) if account else None

    transactions = service.list_transactions(
        account_id=account_id,
        start_date=start,
        end_date=end,
        include_archived=include_archived,
        limit=limit,
        offset=offset,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts(include_archived=True)}
    click.echo(f"\nFound {len(transactions)} transaction(s):")
    echo_transactions(transactions, accounts)


@transaction_group.command("reverse")
@click.argument("transaction_id", type=int)
@click.option("--date", "reversal_date", help="Reversal date (defaults to the original date)")
@click.option("--description", help="Description of the reversing entry")
@click.pass_context
def reverse_transaction(ctx, transaction_id: int, reversal_date: str | None, description: str | None):
    """Post the mirror image of a transaction.

    Examples:
        ledgerkit transaction reverse 12
        ledgerkit transaction reverse 12 --date today
    """
    service = TransactionService(ctx.obj["db"], base_currency=ctx.obj["base_currency"])
    try:
        reversal = service.reverse_transaction(
            transaction_id,
            reversal_date=parse_date_or_exit(ctx, reversal_date, "date"),
            description=description,
        )
        click.echo(f"Reversed transaction {transaction_id} with transaction {reversal.id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("verify")
@click.argument("transaction_id", type=int)
@click.option("--approver", help="Who verified the transaction")
@click.pass_context
def verify_transaction(ctx, transaction_id: int, approver: str | None):
    """Mark a transaction verified. Verifying twice is harmless."""
    service = TransactionService(ctx.obj["db"], base_currency=ctx.obj["base_currency"])
    try:
        service.verify_transaction(transaction_id, approver=approver)
        click.echo(f"Transaction {transaction_id} verified")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
