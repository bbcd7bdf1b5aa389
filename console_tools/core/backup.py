"""Database dump utilities for the backup command."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from sqlalchemy.engine import make_url

from console_tools.config import BACKUP_DIR
from console_tools.core.naming import timestamp
from console_tools.errors import SubprocessFailure

logger = logging.getLogger(__name__)


@dataclass
class ConnectionParams:
    """The five connection parameters handed to the dump utility."""

    host: str
    port: Optional[int]
    database: str
    user: Optional[str]
    password: Optional[str]


class BackupManager:
    """Dumps the database to a timestamped file."""

    def __init__(
        self,
        database_uri: str,
        backup_dir: Optional[Path] = None,
        params: Optional[ConnectionParams] = None,
        app_root: Optional[str] = None,
    ):
        """Initialize backup manager.

        Args:
            database_uri: SQLAlchemy database URI
            backup_dir: Directory to store backups (default: ./storage/backups)
            params: Explicit connection parameters (default: taken from the URI)
            app_root: Flask app root path for resolving relative SQLite URIs
        """
        self.database_uri = database_uri
        self.backup_dir = Path(backup_dir) if backup_dir else BACKUP_DIR
        self.app_root = app_root
        self._url = make_url(database_uri)
        self.params = params or ConnectionParams(
            host=self._url.host or "localhost",
            port=self._url.port,
            database=self._url.database or "",
            user=self._url.username,
            password=self._url.password,
        )

    @property
    def db_type(self) -> str:
        """Get database type from URI."""
        backend = self._url.get_backend_name()
        if backend in ("mysql", "mariadb"):
            return "mysql"
        return backend

    @property
    def is_sqlite(self) -> bool:
        return self.db_type == "sqlite"

    def _ensure_backup_dir(self) -> None:
        """Create backup directory if it doesn't exist."""
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def _generate_backup_filename(self, now: Optional[datetime] = None) -> str:
        """Generate a timestamped backup filename."""
        suffix = "db" if self.is_sqlite else "sql"
        return f"backup_{timestamp(now)}.{suffix}"

    def create_backup(self, now: Optional[datetime] = None) -> Path:
        """Create a database backup.

        Returns:
            Path to the created backup file

        Raises:
            SubprocessFailure: If the dump utility fails or is missing
        """
        self._ensure_backup_dir()
        backup_path = self.backup_dir / self._generate_backup_filename(now)

        if self.is_sqlite:
            return self._backup_sqlite(backup_path)

        if self.db_type == "mysql":
            program = "mysqldump"
            cmd = self.build_mysqldump_command(backup_path)
            env_key = "MYSQL_PWD"
        elif self.db_type == "postgresql":
            program = "pg_dump"
            cmd = self.build_pg_dump_command(backup_path)
            env_key = "PGPASSWORD"
        else:
            raise SubprocessFailure(f"Unsupported database type: {self.db_type}")

        env = os.environ.copy()
        if self.params.password:
            env[env_key] = self.params.password

        self._run(program, cmd, env)
        logger.info("Database dumped to %s", backup_path)
        return backup_path

    def build_mysqldump_command(self, backup_path: Path) -> List[str]:
        """Build the mysqldump argument list (password goes through MYSQL_PWD)."""
        cmd = ["mysqldump", f"--host={self.params.host}"]
        if self.params.port:
            cmd.append(f"--port={self.params.port}")
        if self.params.user:
            cmd.append(f"--user={self.params.user}")
        cmd += [f"--result-file={backup_path}", self.params.database]
        return cmd

    def build_pg_dump_command(self, backup_path: Path) -> List[str]:
        """Build the pg_dump argument list (password goes through PGPASSWORD)."""
        cmd = [
            "pg_dump",
            "-h", self.params.host,
            "-p", str(self.params.port or 5432),
        ]
        if self.params.user:
            cmd += ["-U", self.params.user]
        cmd += [
            "-d", self.params.database,
            "-f", str(backup_path),
            "--format=plain",
        ]
        return cmd

    def _run(self, program: str, cmd: List[str], env: dict) -> None:
        try:
            subprocess.run(
                cmd,
                env=env,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            message = (e.stderr or "").strip() or str(e)
            raise SubprocessFailure(f"{program} failed: {message}") from e
        except FileNotFoundError as e:
            raise SubprocessFailure(
                f"{program} not found. Is the database client installed?"
            ) from e

    def _resolve_sqlite_path(self) -> str:
        """Resolve the SQLite database file path from the URI.

        Relative paths are looked up in the Flask app root, the CWD and the
        instance/ directory, in that order.
        """
        relative = self._url.database or ""
        if not relative or os.path.isabs(relative):
            return relative

        if self.app_root:
            app_root_path = os.path.join(self.app_root, relative)
            if os.path.exists(app_root_path):
                return os.path.abspath(app_root_path)

        if os.path.exists(relative):
            return os.path.abspath(relative)

        instance = os.path.join("instance", relative)
        if os.path.exists(instance):
            return os.path.abspath(instance)

        return relative

    def _backup_sqlite(self, backup_path: Path) -> Path:
        """Create SQLite backup by copying the database file."""
        db_path = self._resolve_sqlite_path()

        if not db_path or not os.path.exists(db_path):
            raise SubprocessFailure(f"SQLite database file not found: {db_path or ':memory:'}")

        shutil.copy2(db_path, backup_path)
        logger.info("SQLite database copied to %s", backup_path)
        return backup_path
