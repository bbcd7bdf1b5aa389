"""Configuration for console tools."""

from __future__ import annotations

import os
from pathlib import Path

# Output locations
SEED_DIR = Path(os.environ.get("CONSOLE_SEED_DIR", "./seeders"))
MIGRATION_DIR = Path(os.environ.get("CONSOLE_MIGRATION_DIR", "./migrations"))
BACKUP_DIR = Path(os.environ.get("CONSOLE_BACKUP_DIR", "./storage/backups"))

# Static table list for seed export (comma separated). Empty means the
# tables are discovered from the database.
SEED_TABLES = [
    name.strip()
    for name in os.environ.get("CONSOLE_SEED_TABLES", "").split(",")
    if name.strip()
]

# Migration bookkeeping table, never exported as a seeder
MIGRATIONS_TABLE = "migrations"

# Key/value store the translation converter reads from
TRANSLATIONS_TABLE = "translations"

# Cache stores in clearing order: (name, progress label)
CACHE_STORES = [
    ("application", "application cache"),
    ("route", "route cache"),
    ("config", "configuration cache"),
    ("view", "compiled view files"),
    ("event", "event cache"),
]

# Cache store name -> directory under <instance>/cache
CACHE_DIRECTORIES = {
    "application": "data",
    "route": "routes",
    "config": "config",
    "view": "views",
    "event": "events",
}

# Error codes reported by drivers when a value exceeds its column
VALUE_TOO_LONG_SQLSTATE = "22001"
VALUE_TOO_LONG_MYSQL_CODE = 1406
