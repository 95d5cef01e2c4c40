"""Posting commands."""

import click
from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.date_filters import parse_date_or_exit
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import DocumentRef, DocumentType, LedgerState
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.transaction import TransactionService
from ledgerkit.utils.amount_parser import parse_amount, parse_exchange_rate


def _parse_money(ctx, amount: str, rate: str):
    try:
        return parse_amount(amount), parse_exchange_rate(rate)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def _parse_related(ctx, related: str | None) -> DocumentRef | None:
    """Parse TYPE:ID, e.g. INVOICE:42."""
    if not related:
        return None
    doc_type, sep, doc_id = related.partition(":")
    try:
        if not sep or not doc_id:
            raise ValueError("expected TYPE:ID")
        return DocumentRef(DocumentType(doc_type.upper()), doc_id)
    except ValueError as e:
        click.echo(f"Error: Invalid document reference '{related}': {e}", err=True)
        ctx.exit(1)


def posting_options(func):
    """Options shared by both posting modes."""
    func = click.option("--related-to", help="Owning document as TYPE:ID, e.g. INVOICE:42")(func)
    func = click.option("--description", help="Transaction description")(func)
    func = click.option("--date", "txn_date", help="Transaction date (YYYY-MM-DD or 'today')")(func)
    func = click.option("--rate", default="1", show_default=True, help="Exchange rate to base currency")(func)
    func = click.option("--currency", help="Transaction currency (defaults to base currency)")(func)
    return func


@click.group()
def post_group():
    """Post ledger transactions."""
    pass


@post_group.command("single")
@click.argument("account", metavar="ACCOUNT")
@click.argument("side", metavar="SIDE", type=click.Choice(["DEBIT", "CREDIT"], case_sensitive=False))
@click.argument("amount", metavar="AMOUNT")
@posting_options
@click.pass_context
def post_single(ctx, account, side, amount, currency, rate, txn_date, description, related_to):
    """Record one account on one side, with no counter-leg.

    Examples:
        ledgerkit post single 1010 DEBIT 100
    """
    db = ctx.obj["db"]
    service = TransactionService(db, base_currency=ctx.obj["base_currency"])
    account_id = resolve_account_or_exit(ctx, AccountService(db, ctx.obj["base_currency"]), account)
    value, exchange_rate = _parse_money(ctx, amount, rate)

    try:
        txn = service.post_single_entry(
            account_id,
            LedgerState(side.upper()),
            value,
            currency=currency,
            exchange_rate=exchange_rate,
            transaction_date=parse_date_or_exit(ctx, txn_date, "date"),
            description=description,
            related_to=_parse_related(ctx, related_to),
        )
        click.echo(f"Posted transaction {txn.id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@post_group.command("double")
@click.argument("debit_account", metavar="DEBIT_ACCOUNT")
@click.argument("credit_account", metavar="CREDIT_ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@posting_options
@click.pass_context
def post_double(ctx, debit_account, credit_account, amount, currency, rate, txn_date, description, related_to):
    """Record a debit and a credit leg of the same amount.

    Examples:
        ledgerkit post double "Checking" "Sales Income" 250.00 --related-to INVOICE:17
        ledgerkit post double 1010 4000 90 --currency EUR --rate 1.08
    """
    db = ctx.obj["db"]
    service = TransactionService(db, base_currency=ctx.obj["base_currency"])
    accounts = AccountService(db, ctx.obj["base_currency"])
    debit_id = resolve_account_or_exit(ctx, accounts, debit_account)
    credit_id = resolve_account_or_exit(ctx, accounts, credit_account)
    value, exchange_rate = _parse_money(ctx, amount, rate)

    try:
        txn = service.post_double_entry(
            debit_id,
            credit_id,
            value,
            currency=currency,
            exchange_rate=exchange_rate,
            transaction_date=parse_date_or_exit(ctx, txn_date, "date"),
            description=description,
            related_to=_parse_related(ctx, related_to),
        )
        click.echo(f"Posted transaction {txn.id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register posting commands with main CLI."""
    cli.add_command(post_group, name="post")
