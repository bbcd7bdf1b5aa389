"""Export table contents to seeder modules."""

from __future__ import annotations

import datetime
import logging
import math
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from jinja2 import Environment

from console_tools.config import MIGRATIONS_TABLE, SEED_DIR
from console_tools.core.database_inspector import DatabaseInspector
from console_tools.core.naming import seeder_class_name
from console_tools.errors import NotFoundError

logger = logging.getLogger(__name__)

_SEEDER_TEMPLATE = '''"""Seeder for the ``{{ table }}`` table, exported {{ generated_at }}."""
{% if imports %}

{% for line in imports %}
{{ line }}
{% endfor %}
{% endif %}

from console_tools.seeding import Seeder


class {{ class_name }}(Seeder):
    table = {{ table_literal }}

    def run(self):
        self.insert([
{% for record in records %}
{{ record }},
{% endfor %}
        ])
'''

_env = Environment(trim_blocks=True, lstrip_blocks=True, keep_trailing_newline=True)

# Value type -> import line the generated module needs to rebuild it
_TYPE_IMPORTS = [
    ((datetime.date, datetime.time, datetime.timedelta), "import datetime"),
    ((Decimal,), "from decimal import Decimal"),
    ((uuid.UUID,), "from uuid import UUID"),
]


# ---------------------------------------------------------------------------
# Table enumeration strategies
# ---------------------------------------------------------------------------


class TableSource:
    """Decides which tables an export covers."""

    def table_names(self, inspector: DatabaseInspector) -> List[str]:
        raise NotImplementedError


class IntrospectedTables(TableSource):
    """Every table of the database except the migration bookkeeping table."""

    def __init__(self, exclude: Iterable[str] = (MIGRATIONS_TABLE,)):
        self.exclude = frozenset(exclude)

    def table_names(self, inspector: DatabaseInspector) -> List[str]:
        return [
            name for name in inspector.get_table_names()
            if name not in self.exclude
        ]


class StaticTables(TableSource):
    """A fixed list of tables, exported as given."""

    def __init__(self, tables: Sequence[str]):
        self.tables = list(tables)

    def table_names(self, inspector: DatabaseInspector) -> List[str]:
        missing = [name for name in self.tables if not inspector.has_table(name)]
        if missing:
            raise NotFoundError(f"Tables do not exist: {', '.join(missing)}")
        return list(self.tables)


# ---------------------------------------------------------------------------
# Literal rendering
# ---------------------------------------------------------------------------


def render_literal(value: Any) -> str:
    """Render *value* as Python source that evaluates back to it."""
    if isinstance(value, float) and not math.isfinite(value):
        return f"float({str(value)!r})"
    if isinstance(value, (memoryview, bytearray)):
        return repr(bytes(value))
    return repr(value)


def format_record(row: Dict[str, Any], indent: int = 12) -> str:
    """Render one row as a multi-line dict literal."""
    pad = " " * indent
    inner = " " * (indent + 4)
    lines = [pad + "{"]
    for column, value in row.items():
        lines.append(f"{inner}{column!r}: {render_literal(value)},")
    lines.append(pad + "}")
    return "\n".join(lines)


def required_imports(rows: Iterable[Dict[str, Any]]) -> List[str]:
    """Import lines needed to evaluate the literals of *rows*."""
    needed = set()
    for row in rows:
        for value in row.values():
            for types, line in _TYPE_IMPORTS:
                if isinstance(value, types):
                    needed.add(line)
    return [line for _, line in _TYPE_IMPORTS if line in needed]


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------


@dataclass
class ExportResult:
    """Result of an export run."""

    written: Dict[str, Path] = field(default_factory=dict)
    row_counts: Dict[str, int] = field(default_factory=dict)
    empty: List[str] = field(default_factory=list)


class SeedExporter:
    """Writes one seeder module per non-empty table."""

    def __init__(
        self,
        output_dir: Optional[Path] = None,
        source: Optional[TableSource] = None,
        inspector: Optional[DatabaseInspector] = None,
    ):
        """Initialize exporter.

        Args:
            output_dir: Directory for seeder files (default: ./seeders)
            source: Table enumeration strategy (default: introspection)
            inspector: DatabaseInspector instance
        """
        self.output_dir = Path(output_dir) if output_dir else SEED_DIR
        self.source = source or IntrospectedTables()
        self.inspector = inspector or DatabaseInspector()
        self._progress_callback: Optional[Callable[[str, Optional[Path]], None]] = None

    def set_progress_callback(
        self, callback: Callable[[str, Optional[Path]], None]
    ) -> None:
        """Set a callback for progress updates.

        Args:
            callback: Function(table_name, seeder_path) called per table;
                seeder_path is None when the table had no data
        """
        self._progress_callback = callback

    def _report_progress(self, table_name: str, path: Optional[Path]) -> None:
        if self._progress_callback:
            self._progress_callback(table_name, path)

    def export(self) -> ExportResult:
        """Export every table chosen by the table source.

        Raises:
            NotFoundError: If a listed table does not exist
        """
        result = ExportResult()
        for table_name in self.source.table_names(self.inspector):
            rows = self.inspector.fetch_rows(table_name)
            if not rows:
                logger.info("No data found in table: %s", table_name)
                result.empty.append(table_name)
                self._report_progress(table_name, None)
                continue

            path = self.write_seeder(table_name, rows)
            result.written[table_name] = path
            result.row_counts[table_name] = len(rows)
            self._report_progress(table_name, path)

        return result

    def write_seeder(self, table_name: str, rows: List[Dict[str, Any]]) -> Path:
        """Render and save the seeder for *table_name*, replacing any old file."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{seeder_class_name(table_name)}.py"
        path.write_text(self.render_seeder(table_name, rows), encoding="utf-8")
        logger.info("Seed file created for table: %s (%d rows)", table_name, len(rows))
        return path

    def render_seeder(
        self,
        table_name: str,
        rows: List[Dict[str, Any]],
        generated_at: Optional[datetime.datetime] = None,
    ) -> str:
        """Return the source of the seeder module for *rows*."""
        stamp = (generated_at or datetime.datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
        return _env.from_string(_SEEDER_TEMPLATE).render(
            table=table_name,
            table_literal=repr(table_name),
            class_name=seeder_class_name(table_name),
            generated_at=stamp,
            imports=required_imports(rows),
            records=[format_record(row) for row in rows],
        )
