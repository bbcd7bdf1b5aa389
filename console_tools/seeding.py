"""Runtime for seeder modules written by ``export-seeds``.

A seeder module defines one :class:`Seeder` subclass named after its file::

    class BlogPostsSeeder(Seeder):
        table = "blog_posts"

        def run(self):
            self.insert([{"id": 1, "title": "Hello"}])
"""

from __future__ import annotations

import importlib.util
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from extensions import db
from console_tools.core.database_inspector import DatabaseInspector
from console_tools.errors import NotFoundError

logger = logging.getLogger(__name__)


class Seeder:
    """Base class of generated seeders."""

    table: str = ""

    def __init__(self, inspector: Optional[DatabaseInspector] = None):
        self.inspector = inspector or DatabaseInspector()

    def run(self) -> None:
        raise NotImplementedError

    def insert(self, rows: List[Dict[str, Any]]) -> None:
        """Insert *rows* into this seeder's table. Does NOT commit."""
        if not rows:
            return
        table = self.inspector.get_table(self.table)
        self.inspector.session.execute(table.insert(), rows)
        logger.info("Seeded %d rows into %s", len(rows), self.table)


def load_seeder(path: Path) -> type:
    """Import a seeder module and return the class named after the file."""
    spec = importlib.util.spec_from_file_location(f"seeders.{path.stem}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    seeder_class = getattr(module, path.stem, None)
    if not isinstance(seeder_class, type) or not issubclass(seeder_class, Seeder):
        raise NotFoundError(f"{path.name} does not define {path.stem}.")
    return seeder_class


def order_by_dependency(
    seeder_classes: List[type], inspector: DatabaseInspector
) -> List[type]:
    """Sort seeders so parent tables are filled before the tables referencing them.

    Seeders whose table is unknown to the database keep their relative order
    and run last.
    """
    position = {name: i for i, name in enumerate(inspector.get_sorted_table_names())}
    unknown = len(position)
    return sorted(seeder_classes, key=lambda cls: position.get(cls.table, unknown))


def run_seeders(seed_dir: Path, names: Optional[Iterable[str]] = None) -> List[str]:
    """Run seeders from *seed_dir* and commit once at the end.

    Seeders run in foreign key dependency order of their tables.

    Args:
        seed_dir: Directory holding ``*Seeder.py`` modules
        names: Seeder class names to run (default: all)

    Returns:
        Names of the seeders that ran

    Raises:
        NotFoundError: If a requested seeder file does not exist
    """
    seed_dir = Path(seed_dir)
    if names:
        paths = []
        for name in names:
            path = seed_dir / f"{name}.py"
            if not path.exists():
                raise NotFoundError(f"Seeder {name} does not exist.")
            paths.append(path)
    else:
        paths = sorted(seed_dir.glob("*Seeder.py")) if seed_dir.exists() else []

    inspector = DatabaseInspector()
    ran = []
    try:
        seeder_classes = order_by_dependency([load_seeder(path) for path in paths], inspector)
        for seeder_class in seeder_classes:
            seeder_class(inspector).run()
            ran.append(seeder_class.__name__)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return ran
