"""Tests for settings and logging configuration."""

import logging
import pytest

from ledgerkit.config import DEFAULT_BASE_CURRENCY, DEFAULT_TENANT, load_settings
from ledgerkit.logging_config import configure_logging


def test_explicit_values_win(monkeypatch):
    monkeypatch.setenv("LEDGERKIT_DB_PATH", "/tmp/env.db")
    monkeypatch.setenv("LEDGERKIT_TENANT", "env-tenant")
    settings = load_settings(
        database_path="/tmp/explicit.db", tenant_id="acme", base_currency="eur", log_level="debug"
    )
    assert settings.database_url == "sqlite:////tmp/explicit.db"
    assert settings.tenant_id == "acme"
    assert settings.base_currency == "EUR"
    assert settings.log_level == "DEBUG"


def test_environment(monkeypatch):
    monkeypatch.setenv("LEDGERKIT_DB_PATH", "/tmp/env.db")
    monkeypatch.setenv("LEDGERKIT_TENANT", "env-tenant")
    monkeypatch.setenv("LEDGERKIT_BASE_CURRENCY", "kwd")
    settings = load_settings()
    assert settings.database_url == "sqlite:////tmp/env.db"
    assert settings.tenant_id == "env-tenant"
    assert settings.base_currency == "KWD"


def test_database_url_wins_over_path(monkeypatch):
    monkeypatch.setenv("LEDGERKIT_DB_PATH", "/tmp/env.db")
    monkeypatch.setenv("LEDGERKIT_DATABASE_URL", "sqlite:///:memory:")
    assert load_settings().database_url == "sqlite:///:memory:"


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    settings = load_settings()
    assert settings.tenant_id == DEFAULT_TENANT
    assert settings.base_currency == DEFAULT_BASE_CURRENCY
    assert settings.database_url.endswith("ledgerkit.db")


def test_invalid_base_currency():
    with pytest.raises(ValueError):
        load_settings(database_path="/tmp/x.db", base_currency="DOLLARS")


def test_configure_logging_sets_level_once():
    logger = logging.getLogger("ledgerkit")
    configure_logging("info")
    configure_logging("DEBUG")
    assert logger.level == logging.DEBUG
    assert sum(1 for h in logger.handlers if getattr(h, "_ledgerkit", False)) == 1


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("chatty")
