"""CLI commands for console tools.

Provides both Flask CLI integration and standalone CLI functionality.
"""

from __future__ import annotations

import sys
from contextlib import nullcontext
from pathlib import Path
from typing import Optional, Tuple

import click
from flask import current_app, has_app_context


def get_app_context():
    """Get a Flask application context, reusing the active one if any."""
    if has_app_context():
        return nullcontext()
    from app import create_app
    app = create_app()
    return app.app_context()


def _config_path(key: str, override: Optional[str] = None) -> Path:
    return Path(override or current_app.config[key])


# ---------------------------------------------------------------------------
# Click CLI Group
# ---------------------------------------------------------------------------

@click.group()
def cli():
    """Console tools for the application database and caches."""
    pass


# ---------------------------------------------------------------------------
# Seed Commands
# ---------------------------------------------------------------------------

@cli.command("export-seeds")
@click.option("--table", "-t", "tables", multiple=True,
              help="Table to export (repeatable); default: all tables")
@click.option("--output", "-o", type=click.Path(), help="Seeder directory")
def export_seeds(tables: Tuple[str, ...], output: Optional[str]):
    """Export the database tables to seed files."""
    with get_app_context():
        from tabulate import tabulate

        from console_tools.operations.export_seeds import (
            IntrospectedTables,
            SeedExporter,
            StaticTables,
        )

        table_list = list(tables) or current_app.config.get("SEED_TABLES") or []
        source = StaticTables(table_list) if table_list else IntrospectedTables()
        exporter = SeedExporter(_config_path("SEED_DIR", output), source=source)

        def progress(table, path):
            if path is None:
                click.echo(f"No data found in table: {table}")
            else:
                click.echo(f"Seed file created for table: {table}")

        exporter.set_progress_callback(progress)

        try:
            result = exporter.export()
        except Exception as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        if result.written:
            rows = [
                (table, result.row_counts[table], path.name)
                for table, path in result.written.items()
            ]
            click.echo(tabulate(rows, headers=["table", "rows", "seeder"], tablefmt="simple"))
        click.echo("Database tables exported to seed files successfully.")


@cli.command()
@click.option("--class", "-c", "classes", multiple=True,
              help="Seeder class to run (repeatable); default: all seeders")
@click.option("--path", "-p", type=click.Path(), help="Seeder directory")
def seed(classes: Tuple[str, ...], path: Optional[str]):
    """Run exported seeders against the database."""
    with get_app_context():
        from console_tools.seeding import run_seeders

        try:
            ran = run_seeders(_config_path("SEED_DIR", path), classes or None)
        except Exception as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        if not ran:
            click.echo("No seeders found.")
            return
        for name in ran:
            click.echo(f"Seeded: {name}")
        click.echo("Database seeding completed successfully.")


# ---------------------------------------------------------------------------
# Backup Command
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--path", "-p", type=click.Path(), help="The location to store the backup")
def backup(path: Optional[str]):
    """Backup the database and save the dump to a specified location."""
    with get_app_context():
        from console_tools.core.backup import BackupManager, ConnectionParams

        db_cfg = current_app.config["DATABASE_CONFIG"]
        manager = BackupManager(
            db_cfg.uri,
            backup_dir=_config_path("BACKUP_DIR", path),
            params=ConnectionParams(
                host=db_cfg.host,
                port=db_cfg.port,
                database=db_cfg.name,
                user=db_cfg.user,
                password=db_cfg.password,
            ),
            app_root=current_app.root_path,
        )

        try:
            backup_path = manager.create_backup()
        except Exception as e:
            click.echo(f"Database backup failed: {e}", err=True)
            sys.exit(1)

        click.echo(
            f"Database backup was successful. Saved as {backup_path.name} "
            f"in {backup_path.parent}"
        )


# ---------------------------------------------------------------------------
# Cache Command
# ---------------------------------------------------------------------------

@cli.command("clear-all-caches")
def clear_all_caches():
    """Clear application, route, config, view and event caches."""
    with get_app_context():
        from console_tools.core.caches import EXTENSION_KEY
        from console_tools.operations.clear_caches import CacheClearer

        clearer = CacheClearer(current_app.extensions[EXTENSION_KEY])
        clearer.set_progress_callback(lambda label: click.echo(f"Clearing {label}..."))

        try:
            clearer.clear_all()
        except Exception as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        click.echo("All caches have been cleared successfully.")


# ---------------------------------------------------------------------------
# Translation Command
# ---------------------------------------------------------------------------

@cli.command("convert-translations")
@click.argument("model")
def convert_translations(model: str):
    """Convert a model's translations table rows to JSON columns."""
    with get_app_context():
        from console_tools.errors import NotFoundError
        from console_tools.operations.convert_translations import TranslationConverter

        converter = TranslationConverter()

        try:
            result = converter.convert(model)
        except NotFoundError as e:
            click.echo(str(e), err=True)
            sys.exit(1)
        except Exception as e:
            click.echo(str(e), err=True)
            click.echo("Operation failed!", err=True)
            sys.exit(1)

        click.echo(
            f"All rows converted successfully. {result.rows_converted} "
            f"{result.entity} rows, languages: {', '.join(result.languages)}"
        )


# ---------------------------------------------------------------------------
# Migration Commands
# ---------------------------------------------------------------------------

@cli.command("add-column-migration")
@click.argument("table")
@click.argument("column")
@click.argument("column_type", metavar="TYPE")
@click.option("--path", "-p", type=click.Path(), help="Migration directory")
def add_column_migration(table: str, column: str, column_type: str, path: Optional[str]):
    """Create a migration to add a column to a specified table."""
    with get_app_context():
        from console_tools.operations.make_migration import MigrationScaffolder

        scaffolder = MigrationScaffolder(_config_path("MIGRATION_DIR", path))

        try:
            migration_path = scaffolder.create(table, column, column_type)
        except Exception as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        click.echo(f"Migration created: {migration_path.name}")


@cli.command()
@click.option("--path", "-p", type=click.Path(), help="Migration directory")
def migrate(path: Optional[str]):
    """Run pending migrations."""
    with get_app_context():
        from console_tools.operations.migrate import Migrator

        migrator = Migrator(_config_path("MIGRATION_DIR", path))

        try:
            applied = migrator.migrate()
        except Exception as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        if not applied:
            click.echo("Nothing to migrate.")
            return
        for name in applied:
            click.echo(f"Migrated: {name}")


@cli.command("migrate-rollback")
@click.option("--path", "-p", type=click.Path(), help="Migration directory")
def migrate_rollback(path: Optional[str]):
    """Revert the last batch of migrations."""
    with get_app_context():
        from console_tools.operations.migrate import Migrator

        migrator = Migrator(_config_path("MIGRATION_DIR", path))

        try:
            reverted = migrator.rollback()
        except Exception as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        if not reverted:
            click.echo("Nothing to rollback.")
            return
        for name in reverted:
            click.echo(f"Rolled back: {name}")


# ---------------------------------------------------------------------------
# Flask CLI Registration
# ---------------------------------------------------------------------------

def register_flask_commands(app):
    """Register CLI commands with Flask application."""

    @app.cli.group("console")
    def console_cli():
        """Console tools."""
        pass

    @console_cli.command("export-seeds")
    @click.option("--table", "-t", "tables", multiple=True)
    @click.option("--output", "-o", type=click.Path())
    def flask_export_seeds(tables, output):
        """Export the database tables to seed files."""
        ctx = click.get_current_context()
        ctx.invoke(export_seeds, tables=tables, output=output)

    @console_cli.command("seed")
    @click.option("--class", "-c", "classes", multiple=True)
    @click.option("--path", "-p", type=click.Path())
    def flask_seed(classes, path):
        """Run exported seeders."""
        ctx = click.get_current_context()
        ctx.invoke(seed, classes=classes, path=path)

    @console_cli.command("backup")
    @click.option("--path", "-p", type=click.Path())
    def flask_backup(path):
        """Backup the database."""
        ctx = click.get_current_context()
        ctx.invoke(backup, path=path)

    @console_cli.command("clear-all-caches")
    def flask_clear_all_caches():
        """Clear all caches."""
        ctx = click.get_current_context()
        ctx.invoke(clear_all_caches)

    @console_cli.command("convert-translations")
    @click.argument("model")
    def flask_convert_translations(model):
        """Convert a model's translations to JSON columns."""
        ctx = click.get_current_context()
        ctx.invoke(convert_translations, model=model)

    @console_cli.command("add-column-migration")
    @click.argument("table")
    @click.argument("column")
    @click.argument("column_type", metavar="TYPE")
    @click.option("--path", "-p", type=click.Path())
    def flask_add_column_migration(table, column, column_type, path):
        """Create an add-column migration."""
        ctx = click.get_current_context()
        ctx.invoke(add_column_migration, table=table, column=column,
                   column_type=column_type, path=path)

    @console_cli.command("migrate")
    @click.option("--path", "-p", type=click.Path())
    def flask_migrate(path):
        """Run pending migrations."""
        ctx = click.get_current_context()
        ctx.invoke(migrate, path=path)

    @console_cli.command("migrate-rollback")
    @click.option("--path", "-p", type=click.Path())
    def flask_migrate_rollback(path):
        """Revert the last batch of migrations."""
        ctx = click.get_current_context()
        ctx.invoke(migrate_rollback, path=path)


if __name__ == "__main__":
    cli()
