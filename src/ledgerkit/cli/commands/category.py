"""Category management commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.category import CategoryService, normal_balance_side
from ledgerkit.domain.entities import LedgerGroup
from ledgerkit.domain.errors import DomainError

LEDGER_GROUP_CHOICE = click.Choice([g.value for g in LedgerGroup], case_sensitive=False)


@click.group()
def category_group():
    """Manage account categories."""
    pass


@category_group.command("create")
@click.argument("name", metavar="CATEGORY_NAME")
@click.argument("ledger_group", metavar="LEDGER_GROUP", type=LEDGER_GROUP_CHOICE)
@click.option("--sub-group", help="Finer classification, e.g. 'Current Assets'")
@click.pass_context
def create_category(ctx, name: str, ledger_group: str, sub_group: str | None):
    """Create a new category.

    LEDGER_GROUP is one of ASSET, LIABILITY, EQUITY, INCOME, EXPENSE, SHARES
    or DIVIDENDS and decides the normal-balance side of its accounts.

    Examples:
        ledgerkit category create "Prepaid Expenses" ASSET --sub-group "Current Assets"
        ledgerkit category create "Consulting Revenue" INCOME
    """
    service = CategoryService(ctx.obj["db"])
    try:
        category_id = service.create_category(
            name=name, ledger_group=LedgerGroup(ledger_group.upper()), ledger_sub_group=sub_group
        )
        click.echo(f"Created category '{name}' (ID: {category_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories."""
    service = CategoryService(ctx.obj["db"])

    categories = service.list_categories()
    if not categories:
        click.echo("No categories found. Run 'ledgerkit init-chart' to create the standard set.")
        return

    click.echo("\nCategories:")
    click.echo("-" * 80)
    click.echo(f"{'ID':<5} {'Name':<28} {'Ledger group':<12} {'Normal':<7} {'Sub group':<25}")
    click.echo("-" * 80)
    for cat in categories:
        click.echo(
            f"{cat.id:<5} {cat.name:<28} {cat.ledger_group.value:<12} "
            f"{normal_balance_side(cat.ledger_group).value:<7} {cat.ledger_sub_group or '':<25}"
        )


@category_group.command("set-group")
@click.argument("name", metavar="CATEGORY_NAME")
@click.argument("ledger_group", metavar="LEDGER_GROUP", type=LEDGER_GROUP_CHOICE)
@click.pass_context
def set_group(ctx, name: str, ledger_group: str):
    """Change the ledger group of a category.

    Refused once any transaction posts to an account of the category.

    Examples:
        ledgerkit category set-group "Prepaid Expenses" EXPENSE
    """
    service = CategoryService(ctx.obj["db"])

    cat = service.get_category_by_name(name)
    if cat is None:
        click.echo(f"Error: Category '{name}' not found", err=True)
        ctx.exit(1)

    try:
        service.change_ledger_group(cat.id, LedgerGroup(ledger_group.upper()))
        click.echo(f"Category '{name}' is now {ledger_group.upper()}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
