"""Core utilities for console tools."""

from console_tools.core.naming import studly
from console_tools.core.backup import BackupManager
from console_tools.core.database_inspector import DatabaseInspector

__all__ = ["studly", "BackupManager", "DatabaseInspector"]
