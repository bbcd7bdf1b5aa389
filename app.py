"""Application factory for the Flask app the console tools run against."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from flask import Flask
from sqlalchemy import event

from config import enable_sqlite_fks, load_config
from console_tools.cli import register_flask_commands
from console_tools.config import BACKUP_DIR, MIGRATION_DIR, SEED_DIR, SEED_TABLES
from console_tools.core.caches import init_caches
from extensions import db
from models import Category, MigrationRecord, Post, Translation

load_dotenv()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app():
    """Create and configure the Flask application."""
    app_cfg, db_cfg = load_config()

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = db_cfg.uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.secret_key = app_cfg.secret_key
    app.config["APP_CONFIG"] = app_cfg
    app.config["DATABASE_CONFIG"] = db_cfg
    app.config["DEFAULT_LOCALE"] = app_cfg.default_locale

    # Console tool locations (relative paths resolve against the CWD)
    app.config["SEED_DIR"] = str(SEED_DIR)
    app.config["MIGRATION_DIR"] = str(MIGRATION_DIR)
    app.config["BACKUP_DIR"] = str(BACKUP_DIR)
    app.config["SEED_TABLES"] = list(SEED_TABLES)

    db.init_app(app)

    # SQLite foreign key enforcement
    if "sqlite" in db_cfg.uri:
        with app.app_context():
            event.listen(db.engine, "connect", enable_sqlite_fks)

    with app.app_context():
        db.create_all()

    init_caches(app)
    register_flask_commands(app)

    logger.info("Application %s ready (database: %s)", app_cfg.name, db_cfg.name or "memory")
    return app


__all__ = [
    "Category",
    "MigrationRecord",
    "Post",
    "Translation",
    "create_app",
    "db",
]
