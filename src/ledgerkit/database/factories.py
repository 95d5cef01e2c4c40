"""Database factory functions for creating database instances."""

from typing import Optional

from ledgerkit.config import Settings, load_settings
from ledgerkit.database.sqlalchemy_db import SQLAlchemyDatabase


def create_database(settings: Settings) -> SQLAlchemyDatabase:
    """Create a database instance for the configured URL and tenant."""
    return SQLAlchemyDatabase(settings.database_url, tenant_id=settings.tenant_id)


def create_sqlite_database(
    database_path: Optional[str] = None, tenant_id: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks
            LEDGERKIT_DATABASE_URL and LEDGERKIT_DB_PATH environment variables,
            then defaults to ~/.ledgerkit/ledgerkit.db
        tenant_id: Tenant ID. If None, checks LEDGERKIT_TENANT, then "default"

    Returns:
        SQLAlchemyDatabase instance scoped to the tenant
    """
    return create_database(load_settings(database_path=database_path, tenant_id=tenant_id))
