"""Database inspection utilities for console operations."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import MetaData, Table, inspect, select
from sqlalchemy.orm import Session

from extensions import db
from console_tools.errors import NotFoundError


class DatabaseInspector:
    """Inspects database structure and reads raw table contents."""

    def __init__(self, session: Optional[Session] = None):
        """Initialize inspector.

        Args:
            session: SQLAlchemy session (uses db.session if not provided)
        """
        self.session = session or db.session
        self._tables: Dict[str, Table] = {}

    @property
    def bind(self):
        # Reflect on the session's connection so pending inserts survive
        return self.session.connection()

    def get_table_names(self) -> List[str]:
        """List every table in the connected database.

        Returns:
            Table names as reported by the dialect
        """
        return inspect(self.bind).get_table_names()

    def has_table(self, table_name: str) -> bool:
        """Check whether *table_name* exists in the connected database."""
        return inspect(self.bind).has_table(table_name)

    def get_sorted_table_names(self) -> List[str]:
        """List tables so that referenced tables come before their dependents.

        Foreign keys that form a cycle are ignored for the ordering.
        """
        return [
            name
            for name, _ in inspect(self.bind).get_sorted_table_and_fkc_names()
            if name is not None
        ]

    def get_table(self, table_name: str) -> Table:
        """Reflect a table from the database.

        Args:
            table_name: Name of the table to reflect

        Returns:
            The reflected Table

        Raises:
            NotFoundError: If the table does not exist
        """
        if table_name in self._tables:
            return self._tables[table_name]

        if not self.has_table(table_name):
            raise NotFoundError(f"Table {table_name} does not exist.")

        table = Table(table_name, MetaData(), autoload_with=self.bind)
        self._tables[table_name] = table
        return table

    def fetch_rows(self, table_name: str) -> List[Dict[str, Any]]:
        """Read every row of a table in storage order.

        Returns:
            List of column -> value dicts
        """
        table = self.get_table(table_name)
        result = self.session.execute(select(table))
        return [dict(row) for row in result.mappings()]

