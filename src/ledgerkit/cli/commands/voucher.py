"""Voucher workflow commands."""

import click
from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.date_filters import parse_date_or_exit
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import VoucherStatus, VoucherTo, VoucherType
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.voucher import VoucherService
from ledgerkit.utils.amount_parser import parse_amount, parse_exchange_rate


@click.group()
def voucher_group():
    """Manage payment, receipt and deposit vouchers."""
    pass


@voucher_group.command("create")
@click.argument(
    "voucher_type",
    metavar="TYPE",
    type=click.Choice([t.value for t in VoucherType], case_sensitive=False),
)
@click.argument("debit_account", metavar="DEBIT_ACCOUNT")
@click.argument("credit_account", metavar="CREDIT_ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.option(
    "--to",
    "voucher_to",
    type=click.Choice([t.value for t in VoucherTo], case_sensitive=False),
    default=VoucherTo.OTHER.value,
    show_default=True,
    help="Kind of counterparty",
)
@click.option("--beneficiary", help="Beneficiary name")
@click.option("--reference", help="Cheque number, transfer ID, ...")
@click.option("--currency", help="Currency (defaults to base currency)")
@click.option("--rate", default="1", show_default=True, help="Exchange rate to base currency")
@click.option("--date", "txn_date", help="Transaction date (defaults to today)")
@click.option("--description", help="Description")
@click.option("--method", "payment_method", help="Payment method, e.g. 'bank transfer'")
@click.pass_context
def create_voucher(
    ctx,
    voucher_type,
    debit_account,
    credit_account,
    amount,
    voucher_to,
    beneficiary,
    reference,
    currency,
    rate,
    txn_date,
    description,
    payment_method,
):
    """Create a PENDING voucher.

    Examples:
        ledgerkit voucher create PAYMENT 2000 1010 450 --to VENDOR --beneficiary "Acme Ltd"
    """
    db = ctx.obj["db"]
    service = VoucherService(db, base_currency=ctx.obj["base_currency"])
    accounts = AccountService(db, base_currency=ctx.obj["base_currency"])
    debit_id = resolve_account_or_exit(ctx, accounts, debit_account)
    credit_id = resolve_account_or_exit(ctx, accounts, credit_account)
    try:
        value = parse_amount(amount)
        exchange_rate = parse_exchange_rate(rate)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        voucher = service.create_voucher(
            VoucherType(voucher_type.upper()),
            VoucherTo(voucher_to.upper()),
            debit_id,
            credit_id,
            value,
            currency=currency,
            exchange_rate=exchange_rate,
            transaction_date=parse_date_or_exit(ctx, txn_date, "date"),
            beneficiary_name=beneficiary,
            reference=reference,
            description=description,
            payment_method=payment_method,
        )
        click.echo(f"Created voucher {voucher.id} (transaction {voucher.transaction_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@voucher_group.command("approve")
@click.argument("voucher_id", type=int)
@click.option("--approver", help="Who approves the voucher")
@click.pass_context
def approve_voucher(ctx, voucher_id: int, approver: str | None):
    """Approve a PENDING voucher."""
    service = VoucherService(ctx.obj["db"], base_currency=ctx.obj["base_currency"])
    try:
        service.approve_voucher(voucher_id, approver=approver)
        click.echo(f"Voucher {voucher_id} approved")
    except DomainError as e:
        handle_domain_error(ctx, e)


@voucher_group.command("reject")
@click.argument("voucher_id", type=int)
@click.option("--approver", help="Who rejects the voucher")
@click.pass_context
def reject_voucher(ctx, voucher_id: int, approver: str | None):
    """Reject a PENDING voucher and archive its transaction."""
    service = VoucherService(ctx.obj["db"], base_currency=ctx.obj["base_currency"])
    try:
        service.reject_voucher(voucher_id, approver=approver)
        click.echo(f"Voucher {voucher_id} rejected")
    except DomainError as e:
        handle_domain_error(ctx, e)


@voucher_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in VoucherStatus], case_sensitive=False),
    help="Only vouchers with this status",
)
@click.pass_context
def list_vouchers(ctx, status: str | None):
    """List vouchers."""
    service = VoucherService(ctx.obj["db"], base_currency=ctx.obj["base_currency"])
    vouchers = service.list_vouchers(status=VoucherStatus(status.upper()) if status else None)
    if not vouchers:
        click.echo("No vouchers found.")
        return

    click.echo(f"{'ID':<6} {'Type':<8} {'To':<7} {'Status':<9} {'Amount':>14} {'Cur':<4} Beneficiary")
    click.echo("-" * 80)
    for v in vouchers:
        click.echo(
            f"{v.id:<6} {v.voucher_type.value:<8} {v.voucher_to.value:<7} {v.status.value:<9} "
            f"{v.amount:>14,} {v.transaction.currency:<4} {v.beneficiary_name or ''}"
        )


def register_commands(cli):
    """Register voucher commands with main CLI."""
    cli.add_command(voucher_group, name="voucher")
