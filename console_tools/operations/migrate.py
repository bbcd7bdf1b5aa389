"""Apply and revert scaffolded migrations.

Applied migrations are recorded in the ``migrations`` table together with the
batch they ran in, so the last batch can be reverted as a unit.
"""

from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from typing import List, Optional

from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from console_tools.config import MIGRATION_DIR
from console_tools.errors import NotFoundError, StoreError

logger = logging.getLogger(__name__)


class Migration:
    """Base class of migration modules."""

    def __init__(self, session=None):
        self.session = session or db.session

    def up(self) -> None:
        raise NotImplementedError

    def down(self) -> None:
        raise NotImplementedError

    def quote(self, name: str) -> str:
        """Quote an identifier for the connected dialect."""
        return self.session.get_bind().dialect.identifier_preparer.quote(name)

    def execute(self, sql: str, params: Optional[dict] = None) -> None:
        self.session.execute(text(sql), params or {})

    def add_column(self, table: str, column: str, column_type: str) -> None:
        # Quote table name to handle SQL keywords like "order"
        self.execute(
            f"ALTER TABLE {self.quote(table)} ADD COLUMN {self.quote(column)} {column_type}"
        )

    def drop_column(self, table: str, column: str) -> None:
        self.execute(f"ALTER TABLE {self.quote(table)} DROP COLUMN {self.quote(column)}")


def load_migration(path: Path) -> type:
    """Import a migration module and return its Migration subclass."""
    spec = importlib.util.spec_from_file_location(f"migrations.m{path.stem}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for value in vars(module).values():
        if (
            isinstance(value, type)
            and issubclass(value, Migration)
            and value is not Migration
        ):
            return value
    raise NotFoundError(f"{path.name} does not define a migration.")


class Migrator:
    """Runs migration files found in the migration directory."""

    def __init__(self, migration_dir: Optional[Path] = None, session=None):
        self.migration_dir = Path(migration_dir) if migration_dir else MIGRATION_DIR
        self.session = session or db.session

    def migration_files(self) -> List[Path]:
        """Migration files sorted by name, i.e. by creation time."""
        if not self.migration_dir.exists():
            return []
        return sorted(
            path for path in self.migration_dir.glob("*.py")
            if not path.name.startswith("_")
        )

    def ran(self) -> List[str]:
        """Names of applied migrations in the order they ran."""
        from models import MigrationRecord

        return list(
            self.session.execute(
                select(MigrationRecord.migration).order_by(MigrationRecord.id)
            ).scalars()
        )

    def pending(self) -> List[Path]:
        done = set(self.ran())
        return [path for path in self.migration_files() if path.stem not in done]

    def migrate(self) -> List[str]:
        """Apply every pending migration under a new batch number.

        Returns:
            Names of the applied migrations

        Raises:
            StoreError: If a migration fails; earlier ones stay applied
        """
        from models import MigrationRecord

        pending = self.pending()
        if not pending:
            return []

        last_batch = self.session.execute(
            select(func.max(MigrationRecord.batch))
        ).scalar()
        batch = (last_batch or 0) + 1

        applied = []
        for path in pending:
            migration = load_migration(path)(self.session)
            try:
                migration.up()
                self.session.add(MigrationRecord(migration=path.stem, batch=batch))
                self.session.commit()
            except SQLAlchemyError as exc:
                self.session.rollback()
                raise StoreError(f"{path.stem}: {getattr(exc, 'orig', None) or exc}") from exc
            except Exception:
                self.session.rollback()
                raise
            logger.info("Migrated: %s", path.stem)
            applied.append(path.stem)

        return applied

    def rollback(self) -> List[str]:
        """Revert the most recent batch, newest migration first.

        Returns:
            Names of the reverted migrations

        Raises:
            NotFoundError: If a recorded migration file is missing
            StoreError: If a migration fails to revert
        """
        from models import MigrationRecord

        last_batch = self.session.execute(
            select(func.max(MigrationRecord.batch))
        ).scalar()
        if last_batch is None:
            return []

        records = list(
            self.session.execute(
                select(MigrationRecord)
                .filter_by(batch=last_batch)
                .order_by(MigrationRecord.id.desc())
            ).scalars()
        )

        reverted = []
        for record in records:
            path = self.migration_dir / f"{record.migration}.py"
            if not path.exists():
                raise NotFoundError(f"Migration {record.migration} does not exist.")
            migration = load_migration(path)(self.session)
            try:
                migration.down()
                self.session.delete(record)
                self.session.commit()
            except SQLAlchemyError as exc:
                self.session.rollback()
                raise StoreError(f"{record.migration}: {getattr(exc, 'orig', None) or exc}") from exc
            except Exception:
                self.session.rollback()
                raise
            logger.info("Rolled back: %s", record.migration)
            reverted.append(record.migration)

        return reverted
