"""CLI helpers for date options."""

from datetime import date, timedelta

import click

from ledgerkit.utils.date_parser import get_date_range, parse_date


def parse_date_or_exit(ctx: click.Context, value: str | None, label: str) -> date | None:
    """Parse an optional date option, or exit with a CLI error."""
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_cli_window(
    ctx: click.Context,
    *,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
) -> tuple[date | None, date | None]:
    """Resolve a (start, end] reporting window from --period or explicit dates.

    A period covers its first day, so the exclusive start is the day before.
    """
    if period and (start_date or end_date):
        click.echo(
            "Error: --period cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if period:
        try:
            first_day, last_day = get_date_range(period)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        return first_day - timedelta(days=1), last_day

    return (
        parse_date_or_exit(ctx, start_date, "start date"),
        parse_date_or_exit(ctx, end_date, "end date"),
    )
