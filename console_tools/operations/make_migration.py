"""Scaffold migrations that add a single column to a table."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Environment

from console_tools.config import MIGRATION_DIR
from console_tools.core.naming import migration_class_name, migration_slug, timestamp

logger = logging.getLogger(__name__)

_MIGRATION_TEMPLATE = '''"""Add the ``{{ column }}`` column to the ``{{ table }}`` table."""

from console_tools.operations.migrate import Migration


class {{ class_name }}(Migration):
    def up(self):
        self.add_column({{ table_literal }}, {{ column_literal }}, {{ type_literal }})

    def down(self):
        self.drop_column({{ table_literal }}, {{ column_literal }})
'''

_env = Environment(keep_trailing_newline=True)


class MigrationScaffolder:
    """Writes add-column migration modules.

    The column type is copied into the migration as given and is used as the
    SQL type of the new column; it is not checked against known types.
    """

    def __init__(self, migration_dir: Optional[Path] = None):
        self.migration_dir = Path(migration_dir) if migration_dir else MIGRATION_DIR

    def file_name(self, table: str, column: str, now: Optional[datetime] = None) -> str:
        return f"{timestamp(now)}_{migration_slug(table, column)}.py"

    def render(self, table: str, column: str, column_type: str) -> str:
        return _env.from_string(_MIGRATION_TEMPLATE).render(
            table=table,
            column=column,
            class_name=migration_class_name(table, column),
            table_literal=repr(table),
            column_literal=repr(column),
            type_literal=repr(column_type),
        )

    def create(
        self,
        table: str,
        column: str,
        column_type: str,
        now: Optional[datetime] = None,
    ) -> Path:
        """Write the migration file and return its path."""
        self.migration_dir.mkdir(parents=True, exist_ok=True)
        path = self.migration_dir / self.file_name(table, column, now)
        path.write_text(self.render(table, column, column_type), encoding="utf-8")
        logger.info("Migration created: %s", path.name)
        return path
