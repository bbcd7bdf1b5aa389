"""Configuration loading from YAML with environment-variable overrides."""

from __future__ import annotations

import logging
import os
import secrets

import yaml
from sqlalchemy.engine import make_url

from config_models import AppConfig, DatabaseConfig

logger = logging.getLogger(__name__)


def load_config():
    """Load configuration from *config.yaml* with env-var overrides.

    Environment variables take precedence over config.yaml values.
    Connection parameters the backup command needs default to the parts of
    the database URI.
    Returns (AppConfig, DatabaseConfig).
    """
    config_path = os.environ.get("CONFIG_PATH", "config.yaml")
    raw: dict = {}
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}

    app_cfg = raw.get("app", {})
    db_cfg = raw.get("database", {})

    secret_key = os.environ.get("APP_SECRET_KEY", app_cfg.get("secret_key", ""))
    if not secret_key or secret_key == "change-me":
        secret_key = secrets.token_hex(32)
        logger.warning(
            "Using auto-generated secret key. Set APP_SECRET_KEY env var "
            "or app.secret_key in config.yaml."
        )

    uri = os.environ.get("DATABASE_URI", db_cfg.get("uri", "sqlite:///console.db"))
    url = make_url(uri)
    port = os.environ.get("DB_PORT", db_cfg.get("port", url.port))

    return (
        AppConfig(
            name=app_cfg.get("name", "Console Tools"),
            secret_key=secret_key,
            default_locale=os.environ.get(
                "APP_DEFAULT_LOCALE", app_cfg.get("default_locale", "en")
            ),
        ),
        DatabaseConfig(
            uri=uri,
            host=os.environ.get("DB_HOST", db_cfg.get("host", url.host or "localhost")),
            port=int(port) if port else None,
            name=os.environ.get("DB_DATABASE", db_cfg.get("name", url.database or "")),
            user=os.environ.get("DB_USERNAME", db_cfg.get("user", url.username)),
            password=os.environ.get("DB_PASSWORD", db_cfg.get("password", url.password)),
        ),
    )


def enable_sqlite_fks(dbapi_conn, _connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
