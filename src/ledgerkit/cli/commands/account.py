"""Account management commands."""

import click
from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.category import CategoryService
from ledgerkit.domain.entities import AccountPurpose
from ledgerkit.domain.errors import DomainError


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--category", "category_name", required=True, help="Category name")
@click.option("--number", help="Account code, unique within the tenant (e.g. 1010)")
@click.option("--parent", help="Parent account number, name or ID")
@click.option("--currency", help="Account currency (defaults to the base currency)")
@click.option("--system", "system_account", is_flag=True, help="Mark as a system account")
@click.option("--hidden", is_flag=True, help="Hide the account from pickers")
@click.pass_context
def create_account(
    ctx,
    name: str,
    category_name: str,
    number: str | None,
    parent: str | None,
    currency: str | None,
    system_account: bool,
    hidden: bool,
):
    """Create a new account.

    Examples:
        ledgerkit account create "Checking" --category "Cash and Bank" --number 1010
        ledgerkit account create "Petty Cash" --category "Cash and Bank" --parent 1000
    """
    db = ctx.obj["db"]
    service = AccountService(db, base_currency=ctx.obj["base_currency"])
    category_service = CategoryService(db)

    cat = category_service.get_category_by_name(category_name)
    if cat is None:
        click.echo(f"Error: Category '{category_name}' not found", err=True)
        ctx.exit(1)

    parent_id = None
    if parent is not None:
        parent_id = resolve_account_or_exit(ctx, service, parent)

    try:
        account_id = service.create_account(
            name=name,
            category_id=cat.id,
            parent_id=parent_id,
            currency=currency,
            number=number,
            system_account=system_account,
            hidden=hidden,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--all", "include_archived", is_flag=True, help="Include archived accounts")
@click.pass_context
def list_accounts(ctx, include_archived: bool):
    """List the chart of accounts as a tree."""
    db = ctx.obj["db"]
    service = AccountService(db, base_currency=ctx.obj["base_currency"])
    categories = {c.id: c for c in CategoryService(db).list_categories()}

    tree = service.get_account_tree(include_archived=include_archived)
    if not tree:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)

    def show(nodes, indent=0):
        for node in nodes:
            acc = node["account"]
            cat = categories.get(acc.category_id)
            flags = []
            if acc.system_account:
                flags.append("system")
            if acc.archived:
                flags.append("archived")
            label = f"{'  ' * indent}{acc.name}"
            click.echo(
                f"ID: {acc.id:3d} | {acc.number or '':<8} | {label:<32} | "
                f"{cat.ledger_group.value if cat else '?':<10} | {acc.currency}"
                + (f" ({', '.join(flags)})" if flags else "")
            )
            show(node["children"], indent + 1)

    show(tree)


@account_group.command("archive")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def archive_account(ctx, account: str):
    """Archive an account so it accepts no new postings.

    ACCOUNT can be an account number, name or ID.

    Examples:
        ledgerkit account archive 1010
    """
    service = AccountService(ctx.obj["db"], base_currency=ctx.obj["base_currency"])
    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        service.archive_account(account_id)
        click.echo(f"Archived account {account_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("default")
@click.argument(
    "purpose",
    metavar="PURPOSE",
    type=click.Choice([p.value for p in AccountPurpose], case_sensitive=False),
)
@click.pass_context
def default_account(ctx, purpose: str):
    """Show (creating if needed) the default account for a purpose.

    Examples:
        ledgerkit account default PAYABLE
    """
    service = AccountService(ctx.obj["db"], base_currency=ctx.obj["base_currency"])
    acc = service.get_or_create_default_account(AccountPurpose(purpose.upper()))
    click.echo(f"{acc.name} (ID: {acc.id})")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
