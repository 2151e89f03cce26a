# ==============================================
# Database
# ==============================================
#
# PURPOSE:
#   The connection handle the registry stores. One instance per
#   provisioned connection, shared by all of its alias names.
#
# CLASS: Database
# ---------------
#   Stateful: holds the driver, the pool and the hook chain.
#
#   Constructor:
#   ------------
#   - __init__(settings: dict, hooks: HookChain = None)
#       settings is a validated, normalized connection config.
#       Nothing connects until the first query.
#
#   Methods:
#   --------
#   - wrap_identifier(name, query_context=None) -> str
#       Quote a (possibly dotted) identifier through the hook chain.
#
#   - raw(query, params=None, query_context=None) -> list[dict]
#       Run a query, return rows after response hooks.
#
#   - select(table, columns=("*",), where=None) -> list[dict]
#   - insert(table, rows) -> int
#       Small builders; every identifier goes through wrap_identifier.
#
#   - fetch_all(query, params=None) -> list[dict]
#   - execute(query, params=None) -> int
#   - execute_script(script) -> None
#       Bypass the hooks. Used for bookkeeping such as migrations.
#
#   - ping() -> None      (async)
#       Run the probe query off the event loop.
#
#   - close() -> None
#
#   Attributes:
#   -----------
#   - migrate: Migrator bound to this database
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with Database(...) as db:` usage.
#
# ==============================================

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .drivers import get_driver
from .hooks import HookChain
from .migrator import Migrator
from .pool import Pool

logger = logging.getLogger(__name__)

PING_QUERY = "/* ping */ SELECT 1"


class Database:
    def __init__(self, settings: Dict[str, Any], hooks: Optional[HookChain] = None):
        self.settings = settings
        self.client = settings["client"]
        self.driver = get_driver(self.client)(settings.get("connection") or {})
        self.hooks = hooks or HookChain()
        self.use_null_as_default = bool(settings.get("use_null_as_default"))

        pool_settings = settings.get("pool") or {}
        acquire_timeout = (
            settings.get("acquire_connection_timeout")
            or pool_settings.get("acquire_timeout_millis")
            or 60000
        )
        self.pool = Pool(
            self.driver.connect,
            min=pool_settings.get("min") or 0,
            max=pool_settings.get("max") or 10,
            acquire_timeout_millis=acquire_timeout
        )

        migrations = settings.get("migrations") or {}
        self.migrate = Migrator(
            self,
            directory=migrations.get("directory") or "./migrations",
            table_name=migrations.get("table_name") or "schema_migrations"
        )

    def wrap_identifier(self, name: str, query_context: Any = None) -> str:
        # users.firstName -> `users`.`first_name`
        return ".".join(
            self.hooks.wrap_identifier(part, self.driver.wrap, query_context)
            for part in name.split(".")
        )

    def _rollback(self, conn) -> bool:
        try:
            conn.rollback()
        except Exception as e:
            logger.warning(
                "Rollback failed, discarding %s connection: %s",
                self.client, self.driver.error_message(e)
            )
            return False
        return True

    @contextmanager
    def _transaction(self):
        conn = self.pool.acquire()
        healthy = True
        try:
            yield conn
            conn.commit()
        except Exception:
            # A connection that cannot roll back is not handed out again
            healthy = self._rollback(conn)
            raise
        finally:
            if healthy:
                self.pool.release(conn)
            else:
                self.pool.discard(conn)

    def _run(self, query: str, params: Optional[Sequence] = None) -> Tuple[List[Dict[str, Any]], int]:
        with self._transaction() as conn:
            cursor = conn.cursor()
            try:
                if params is not None:
                    cursor.execute(query, params)
                else:
                    cursor.execute(query)
                rows = self.driver.fetch(cursor) if cursor.description else []
                rowcount = cursor.rowcount
            finally:
                cursor.close()
        return rows, rowcount

    def fetch_all(self, query: str, params: Optional[Sequence] = None) -> List[Dict[str, Any]]:
        rows, _ = self._run(query, params)
        return rows

    def execute(self, query: str, params: Optional[Sequence] = None) -> int:
        _, rowcount = self._run(query, params)
        return rowcount

    def execute_script(self, script: str) -> None:
        with self._transaction() as conn:
            self.driver.execute_script(conn, script)

    def raw(self, query: str, params: Optional[Sequence] = None, query_context: Any = None) -> Any:
        rows = self.fetch_all(query, params)
        return self.hooks.post_process_response(rows, query_context)

    def select(
        self,
        table: str,
        columns: Iterable[str] = ("*",),
        where: Optional[Mapping[str, Any]] = None,
        query_context: Any = None
    ) -> Any:
        column_sql = ", ".join(self.wrap_identifier(c, query_context) for c in columns)
        query = f"SELECT {column_sql} FROM {self.wrap_identifier(table, query_context)}"
        params = None
        if where:
            conditions = [
                f"{self.wrap_identifier(column, query_context)} = {self.driver.placeholder}"
                for column in where
            ]
            query = f"{query} WHERE {' AND '.join(conditions)}"
            params = tuple(where.values())
        return self.raw(query, params, query_context)

    def insert(
        self,
        table: str,
        rows: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
        query_context: Any = None
    ) -> int:
        """
        Insert one row or a batch of rows, return the affected count.

        Rows may have different keys. A key missing from a row is sent
        as DEFAULT, or as NULL when use_null_as_default is set.

        Raises:
            ValueError: A row is missing a key and the driver has no
                DEFAULT keyword for inserts (sqlite) while
                use_null_as_default is off.
        """
        if isinstance(rows, Mapping):
            rows = [rows]
        if not rows:
            return 0

        columns: List[str] = []
        for row in rows:
            for column in row:
                if column not in columns:
                    columns.append(column)

        placeholder = self.driver.placeholder
        values_sql = []
        params: List[Any] = []
        for row in rows:
            parts = []
            for column in columns:
                if column in row:
                    parts.append(placeholder)
                    params.append(row[column])
                elif self.use_null_as_default:
                    parts.append(placeholder)
                    params.append(None)
                elif self.driver.supports_default_values:
                    parts.append("DEFAULT")
                else:
                    raise ValueError(
                        f'Row is missing "{column}" and {self.client} cannot insert '
                        "DEFAULT values; set use_null_as_default"
                    )
            values_sql.append(f"({', '.join(parts)})")

        column_sql = ", ".join(self.wrap_identifier(c, query_context) for c in columns)
        query = (
            f"INSERT INTO {self.wrap_identifier(table, query_context)} ({column_sql}) "
            f"VALUES {', '.join(values_sql)}"
        )
        return self.execute(query, tuple(params))

    async def ping(self) -> None:
        await asyncio.to_thread(self.fetch_all, PING_QUERY)

    def close(self) -> None:
        self.pool.destroy()
        logger.debug("Closed %s database", self.client)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        return f"Database(client={self.client!r})"
