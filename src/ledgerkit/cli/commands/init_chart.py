"""Initialize the standard chart of accounts."""

import click
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.category import CategoryService
from ledgerkit.domain.entities import AccountPurpose


@click.command("init-chart")
@click.option(
    "--with-default-accounts",
    is_flag=True,
    help="Also create the well-known system accounts (cash, bank, receivable, ...)",
)
@click.pass_context
def init_chart(ctx, with_default_accounts: bool):
    """Initialize the database with the standard category set.

    Existing categories are kept; running the command twice is safe.

    Examples:
        ledgerkit init-chart
        ledgerkit init-chart --with-default-accounts
    """
    db = ctx.obj["db"]
    service = CategoryService(db)

    created = service.initialize_default_categories()
    if created == 0:
        click.echo("Standard categories already exist.")
    else:
        click.echo(f"Successfully created {created} categories.")

    if with_default_accounts:
        account_service = AccountService(db, base_currency=ctx.obj["base_currency"])
        for purpose in AccountPurpose:
            acc = account_service.get_or_create_default_account(purpose)
            click.echo(f"{purpose.value:<20} -> {acc.name} (ID: {acc.id})")


def register_commands(cli):
    """Register init-chart command with main CLI."""
    cli.add_command(init_chart)
