"""Journal entry commands."""

import click
from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.commands.transaction import format_legs
from ledgerkit.cli.date_filters import parse_date_or_exit
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import GroupStatus, JournalLine, LedgerState
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.journal import JournalService
from ledgerkit.utils.amount_parser import parse_amount, parse_exchange_rate


def parse_line(ctx, account_service: AccountService, text: str) -> JournalLine:
    """Parse 'ACCOUNT:SIDE:AMOUNT' into a JournalLine."""
    parts = text.rsplit(":", 2)
    if len(parts) != 3:
        click.echo(f"Error: Invalid line '{text}': expected ACCOUNT:DEBIT|CREDIT:AMOUNT", err=True)
        ctx.exit(1)
    account, side, amount = parts
    try:
        state = LedgerState(side.strip().upper())
        value = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid line '{text}': {e}", err=True)
        ctx.exit(1)
    return JournalLine(resolve_account_or_exit(ctx, account_service, account), state, value)


@click.group()
def journal_group():
    """Manage multi-line journal entries."""
    pass


@journal_group.command("create")
@click.option(
    "--line",
    "lines",
    multiple=True,
    required=True,
    help="Journal line as ACCOUNT:DEBIT|CREDIT:AMOUNT (repeatable)",
)
@click.option("--date", "entry_date", default="today", show_default=True, help="Entry date")
@click.option("--currency", help="Currency of all lines (defaults to base currency)")
@click.option("--rate", default="1", show_default=True, help="Exchange rate to base currency")
@click.option("--description", help="Entry description")
@click.option("--reference", help="External reference")
@click.option("--post", "post_now", is_flag=True, help="Post the entry immediately")
@click.option("--approver", help="Who posts the entry (with --post)")
@click.pass_context
def create_entry(ctx, lines, entry_date, currency, rate, description, reference, post_now, approver):
    """Create a balanced journal entry.

    Debits must equal credits; nothing is stored otherwise.

    Examples:
        ledgerkit journal create --line "Rent:DEBIT:1200" --line "Checking:CREDIT:1200"
        ledgerkit journal create --line 5000:DEBIT:80 --line 2100:DEBIT:20 \\
            --line 1010:CREDIT:100 --description "Supplies with tax" --post
    """
    db = ctx.obj["db"]
    service = JournalService(db, base_currency=ctx.obj["base_currency"])
    account_service = AccountService(db, base_currency=ctx.obj["base_currency"])

    journal_lines = [parse_line(ctx, account_service, text) for text in lines]
    try:
        exchange_rate = parse_exchange_rate(rate)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        group = service.create_group(
            transaction_date=parse_date_or_exit(ctx, entry_date, "date"),
            currency=currency,
            lines=journal_lines,
            exchange_rate=exchange_rate,
            description=description,
            reference=reference,
            post=post_now,
            approver=approver,
        )
        click.echo(f"Created journal entry {group.id} ({group.status.value})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@journal_group.command("post")
@click.argument("group_id", type=int)
@click.option("--approver", help="Who posts the entry")
@click.pass_context
def post_entry(ctx, group_id: int, approver: str | None):
    """Post a BALANCED journal entry."""
    service = JournalService(ctx.obj["db"], base_currency=ctx.obj["base_currency"])
    try:
        service.post_group(group_id, approver=approver)
        click.echo(f"Posted journal entry {group_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@journal_group.command("reverse")
@click.argument("group_id", type=int)
@click.option("--date", "reversal_date", help="Reversal date (defaults to the original date)")
@click.option("--approver", help="Who posts the reversal")
@click.pass_context
def reverse_entry(ctx, group_id: int, reversal_date: str | None, approver: str | None):
    """Reverse a POSTED journal entry with a mirror entry."""
    service = JournalService(ctx.obj["db"], base_currency=ctx.obj["base_currency"])
    try:
        mirror = service.reverse_group(
            group_id,
            reversal_date=parse_date_or_exit(ctx, reversal_date, "date"),
            approver=approver,
        )
        click.echo(f"Reversed journal entry {group_id} with entry {mirror.id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@journal_group.command("show")
@click.argument("group_id", type=int, required=False)
@click.option(
    "--status",
    type=click.Choice([s.value for s in GroupStatus], case_sensitive=False),
    help="List entries with this status instead of showing one",
)
@click.pass_context
def show_entry(ctx, group_id: int | None, status: str | None):
    """Show one journal entry, or list entries when no ID is given."""
    db = ctx.obj["db"]
    service = JournalService(db, base_currency=ctx.obj["base_currency"])
    accounts = {
        acc.id: acc.name
        for acc in AccountService(db, ctx.obj["base_currency"]).list_accounts(include_archived=True)
    }

    if group_id is None:
        groups = service.list_groups(status=GroupStatus(status.upper()) if status else None)
        if not groups:
            click.echo("No journal entries found.")
            return
        click.echo(f"{'ID':<6} {'Date':<12} {'Status':<10} {'Debit':>14} {'Credit':>14}  Description")
        click.echo("-" * 90)
        for group in groups:
            click.echo(
                f"{group.id:<6} {str(group.transaction_date):<12} {group.status.value:<10} "
                f"{group.total_debit:>14,} {group.total_credit:>14,}  {group.description or ''}"
            )
        return

    try:
        group = service.require_group(group_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nJournal entry {group.id} ({group.status.value})")
    click.echo(f"  Date: {group.transaction_date}")
    click.echo(f"  Currency: {group.currency}")
    if group.description:
        click.echo(f"  Description: {group.description}")
    if group.reference:
        click.echo(f"  Reference: {group.reference}")
    if group.reversal_of_id is not None:
        click.echo(f"  Reverses entry: {group.reversal_of_id}")
    if group.reversed_by_id is not None:
        click.echo(f"  Reversed by entry: {group.reversed_by_id}")
    click.echo("-" * 60)
    for txn in group.transactions:
        click.echo(f"  {format_legs(txn, accounts):<40} {txn.amount:>14,}")
    click.echo("-" * 60)
    click.echo(f"  {'Total debit':<40} {group.total_debit:>14,}")
    click.echo(f"  {'Total credit':<40} {group.total_credit:>14,}")


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
