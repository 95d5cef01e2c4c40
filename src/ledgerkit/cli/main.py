"""Main CLI entry point."""

import click
from ledgerkit.config import load_settings
from ledgerkit.database.factories import create_database
from ledgerkit.logging_config import configure_logging

# Import and register all commands at module level
from ledgerkit.cli.commands import (
    init_chart,
    category,
    account,
    post,
    transaction,
    journal,
    voucher,
    balance,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option(
    "--tenant",
    help="Tenant ID (overrides LEDGERKIT_TENANT environment variable)",
    envvar="LEDGERKIT_TENANT",
)
@click.option(
    "--base-currency",
    help="Base currency code (overrides LEDGERKIT_BASE_CURRENCY environment variable)",
    envvar="LEDGERKIT_BASE_CURRENCY",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (overrides LEDGERKIT_LOG_LEVEL environment variable)",
    envvar="LEDGERKIT_LOG_LEVEL",
)
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    tenant: str | None,
    base_currency: str | None,
    log_level: str | None,
):
    """Ledgerkit - Double-entry ledger engine.

    Keep a tenant's chart of accounts, post single and double entries and
    balanced journal entries, approve vouchers and report balances.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            settings = load_settings(
                database_path=db_path,
                tenant_id=tenant,
                base_currency=base_currency,
                log_level=log_level,
            )
            configure_logging(settings.log_level)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

        db = create_database(settings)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["settings"] = settings
        ctx.obj["base_currency"] = settings.base_currency


# Register all commands
init_chart.register_commands(cli)
category.register_commands(cli)
account.register_commands(cli)
post.register_commands(cli)
transaction.register_commands(cli)
journal.register_commands(cli)
voucher.register_commands(cli)
balance.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
