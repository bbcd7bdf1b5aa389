"""Console operations."""

from console_tools.operations.export_seeds import SeedExporter
from console_tools.operations.convert_translations import TranslationConverter
from console_tools.operations.clear_caches import CacheClearer
from console_tools.operations.make_migration import MigrationScaffolder
from console_tools.operations.migrate import Migrator

__all__ = [
    "SeedExporter",
    "TranslationConverter",
    "CacheClearer",
    "MigrationScaffolder",
    "Migrator",
]
