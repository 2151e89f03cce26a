# ==============================================
# Migrator
# ==============================================
#
# PURPOSE:
#   Bring a database up to the latest schema by applying the
#   pending *.sql files of a migrations directory, in filename
#   order, and remembering which ones already ran.
#
# CLASS: Migrator
# ---------------
#   Bound to one Database.
#
#   Constructor:
#   ------------
#   - __init__(database, directory="./migrations",
#              table_name="schema_migrations")
#
#   Methods:
#   --------
#   - latest() -> list[str]
#       Apply every pending migration. Returns the applied file
#       names (empty when already up to date).
#
#   - list_completed() -> list[str]
#   - list_pending() -> list[str]
#
# FILES:
# ------
#   migrations/
#   ├── 001_create_users.sql
#   └── 002_add_user_email.sql
#
#   Each file may hold several statements separated by ";".
#
# ==============================================

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from ..errors import MigrationError

logger = logging.getLogger(__name__)


class Migrator:
    """Applies pending SQL migration files to one database."""

    def __init__(self, database, directory: str = "./migrations", table_name: str = "schema_migrations"):
        self.database = database
        self.directory = Path(directory)
        self.table_name = table_name

    def _table(self) -> str:
        # Bookkeeping names skip the user's identifier hooks
        return self.database.driver.wrap(self.table_name)

    def _ensure_table(self) -> None:
        wrap = self.database.driver.wrap
        self.database.execute(
            f"CREATE TABLE IF NOT EXISTS {self._table()} ("
            f"{wrap('name')} VARCHAR(255) NOT NULL PRIMARY KEY, "
            f"{wrap('migrated_at')} VARCHAR(32) NOT NULL)"
        )

    def _migration_files(self) -> List[Path]:
        if not self.directory.is_dir():
            raise MigrationError(f"Migrations directory not found: {self.directory}")
        return sorted(self.directory.glob("*.sql"), key=lambda path: path.name)

    def list_completed(self) -> List[str]:
        self._ensure_table()
        name = self.database.driver.wrap("name")
        rows = self.database.fetch_all(f"SELECT {name} FROM {self._table()} ORDER BY {name}")
        return [row["name"] for row in rows]

    def list_pending(self) -> List[str]:
        completed = set(self.list_completed())
        return [path.name for path in self._migration_files() if path.name not in completed]

    def latest(self) -> List[str]:
        """
        Apply every pending migration in filename order.

        Returns:
            Names of the files applied by this call

        Raises:
            MigrationError: directory missing, or a migration failed.
                Migrations applied before the failing one stay applied.
        """
        pending = set(self.list_pending())
        wrap = self.database.driver.wrap
        placeholder = self.database.driver.placeholder
        record_query = (
            f"INSERT INTO {self._table()} ({wrap('name')}, {wrap('migrated_at')}) "
            f"VALUES ({placeholder}, {placeholder})"
        )

        applied = []
        for path in self._migration_files():
            if path.name not in pending:
                continue
            try:
                self.database.execute_script(path.read_text(encoding="utf-8"))
                self.database.execute(
                    record_query,
                    (path.name, datetime.now(timezone.utc).isoformat(timespec="seconds"))
                )
            except Exception as e:
                raise MigrationError(f"Migration {path.name} failed: {e}") from e
            logger.info("Applied migration %s", path.name)
            applied.append(path.name)

        return applied
