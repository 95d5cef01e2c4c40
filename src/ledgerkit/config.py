"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ledgerkit.domain.currency import normalize_currency

DEFAULT_TENANT = "default"
DEFAULT_BASE_CURRENCY = "USD"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """Settings shared by the CLI and library callers.

    Attributes:
        database_url: SQLAlchemy URL of the ledger database
        tenant_id: Tenant all operations are scoped to
        base_currency: Currency balances and reports are expressed in
        log_level: Name of the root logging level
    """

    database_url: str
    tenant_id: str = DEFAULT_TENANT
    base_currency: str = DEFAULT_BASE_CURRENCY
    log_level: str = DEFAULT_LOG_LEVEL


def default_database_path() -> str:
    """Return ~/.ledgerkit/ledgerkit.db, creating the directory."""
    db_dir = Path.home() / ".ledgerkit"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "ledgerkit.db")


def load_settings(
    database_path: Optional[str] = None,
    tenant_id: Optional[str] = None,
    base_currency: Optional[str] = None,
    log_level: Optional[str] = None,
) -> Settings:
    """Build settings from explicit values, then environment, then defaults.

    Environment variables:
        LEDGERKIT_DATABASE_URL: Full SQLAlchemy URL (wins over the path)
        LEDGERKIT_DB_PATH: SQLite database file
        LEDGERKIT_TENANT: Tenant ID
        LEDGERKIT_BASE_CURRENCY: Base currency code
        LEDGERKIT_LOG_LEVEL: Logging level name

    Raises:
        ValueError: If the base currency is not a valid code
    """
    if database_path is not None:
        database_url = f"sqlite:///{database_path}"
    elif os.environ.get("LEDGERKIT_DATABASE_URL"):
        database_url = os.environ["LEDGERKIT_DATABASE_URL"]
    else:
        path = os.environ.get("LEDGERKIT_DB_PATH") or default_database_path()
        database_url = f"sqlite:///{path}"

    return Settings(
        database_url=database_url,
        tenant_id=tenant_id or os.environ.get("LEDGERKIT_TENANT") or DEFAULT_TENANT,
        base_currency=normalize_currency(
            base_currency or os.environ.get("LEDGERKIT_BASE_CURRENCY") or DEFAULT_BASE_CURRENCY
        ),
        log_level=(log_level or os.environ.get("LEDGERKIT_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )
