"""Balance and trial balance commands."""

import click
from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.commands.transaction import format_legs
from ledgerkit.cli.date_filters import parse_date_or_exit, resolve_cli_window
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.balance import BalanceService
from ledgerkit.domain.errors import DomainError
from ledgerkit.utils.date_parser import PERIODS


@click.command("balance")
@click.argument("account", metavar="ACCOUNT")
@click.option("--as-of", help="Balance including this date (defaults to today)")
@click.option("--start-date", help="Exclusive start of a movement window")
@click.option("--end-date", help="Inclusive end of a movement window")
@click.option("--period", type=click.Choice(PERIODS), help="Named movement window")
@click.option("--running", is_flag=True, help="Show every posting with a running total")
@click.pass_context
def balance(ctx, account, as_of, start_date, end_date, period, running):
    """Show an account's balance in base currency.

    Positive figures sit on the account's normal side (debit for assets and
    expenses, credit for liabilities, equity and income).

    Examples:
        ledgerkit balance 1010
        ledgerkit balance 1010 --as-of "end of last month"
        ledgerkit balance 4000 --period this-quarter
        ledgerkit balance "Checking" --running --period last-month
    """
    db = ctx.obj["db"]
    base_currency = ctx.obj["base_currency"]
    service = BalanceService(db, base_currency=base_currency)
    account_service = AccountService(db, base_currency=base_currency)
    account_id = resolve_account_or_exit(ctx, account_service, account)
    name = account_service.format_account_path(account_id)

    windowed = bool(period or start_date or end_date)
    if as_of and windowed:
        click.echo("Error: --as-of cannot be combined with a date window.", err=True)
        ctx.exit(1)
    start, end = resolve_cli_window(ctx, start_date=start_date, end_date=end_date, period=period)
    if windowed and end is None:
        end = parse_date_or_exit(ctx, "today", "end date")

    try:
        if running:
            lines = service.running_balance(account_id, start=start, end=end)
            accounts = {a.id: a.name for a in account_service.list_accounts(include_archived=True)}
            click.echo(f"\n{name} ({base_currency})")
            click.echo("-" * 96)
            for line in lines:
                txn = line.transaction
                click.echo(
                    f"{txn.id:<6} {str(txn.transaction_date):<12} {format_legs(txn, accounts)[:40]:<40} "
                    f"{line.delta:>+16,} {line.balance:>16,}"
                )
            if not lines:
                click.echo("No postings.")
            return

        if windowed and start is not None:
            value = service.balance_between(account_id, start, end)
            click.echo(f"{name}: {value:,} {base_currency} movement after {start} through {end}")
        else:
            as_of_date = parse_date_or_exit(ctx, as_of, "as-of date") or end
            value = service.balance_as_of(account_id, as_of_date)
            click.echo(f"{name}: {value:,} {base_currency} as of {as_of_date or 'today'}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@click.command("trial-balance")
@click.option("--as-of", help="Cut-off date (defaults to today)")
@click.option("--check", is_flag=True, help="Fail (and halt posting) if debits and credits differ")
@click.pass_context
def trial_balance(ctx, as_of: str | None, check: bool):
    """Show the trial balance.

    Examples:
        ledgerkit trial-balance
        ledgerkit trial-balance --as-of "end of last year" --check
    """
    db = ctx.obj["db"]
    service = BalanceService(db, base_currency=ctx.obj["base_currency"])
    as_of_date = parse_date_or_exit(ctx, as_of, "as-of date")

    try:
        if check:
            report = service.assert_trial_balance(as_of_date)
        else:
            report = service.trial_balance(as_of_date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nTrial balance as of {report.as_of} ({ctx.obj['base_currency']})")
    click.echo("-" * 80)
    click.echo(f"{'ID':<5} {'Account':<32} {'Group':<10} {'Debit':>15} {'Credit':>15}")
    click.echo("-" * 80)
    for line in report.lines:
        group = line.ledger_group.value if line.ledger_group else ""
        click.echo(
            f"{line.account_id:<5} {line.account_name[:32]:<32} {group:<10} "
            f"{line.debit:>15,} {line.credit:>15,}"
        )
    click.echo("-" * 80)
    click.echo(f"{'TOTAL':<5} {'':<32} {'':<10} {report.total_debit:>15,} {report.total_credit:>15,}")
    if not report.balanced:
        click.echo("Warning: trial balance does not balance.", err=True)


def register_commands(cli):
    """Register balance commands with main CLI."""
    cli.add_command(balance)
    cli.add_command(trial_balance)
