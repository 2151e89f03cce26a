# ==============================================
# Drivers
# ==============================================
#
# PURPOSE:
#   Everything that differs between database kinds lives here,
#   keyed by the `client` string of a connection config:
#     - how to open a DB-API connection
#     - how to quote an identifier
#     - how to turn a cursor into a list of dict rows
#     - which defaults to fill in before the client is built
#
# TABLES:
# -------
#   DRIVERS      client -> driver class
#   NORMALIZERS  client -> function(settings) -> settings
#
#   | client                    | driver       | library |
#   |---------------------------|--------------|---------|
#   | mysql, mysql2, pymysql    | MySQLDriver  | pymysql |
#   | sqlite3, sqlite           | SQLiteDriver | sqlite3 |
#
# ADDING A DRIVER:
#   register_driver("postgres", PostgresDriver, normalize_postgres)
#
# ==============================================

import sqlite3
from typing import Any, Callable, Dict, List, Optional

import pymysql
import pymysql.err
from pymysql.constants import FIELD_TYPE

from ..errors import ConfigError

# CHAR and INTERVAL share codes with TINY and ENUM
_FIELD_TYPE_NAMES = {
    getattr(FIELD_TYPE, attr): attr
    for attr in dir(FIELD_TYPE)
    if attr.isupper() and attr not in ("CHAR", "INTERVAL")
}


class Field:
    """One column value handed to a type_cast rule."""

    def __init__(self, name: str, type: str, length: Optional[int], value: Any):
        self.name = name
        self.type = type
        self.length = length
        self.value = value

    def string(self) -> Optional[str]:
        if self.value is None:
            return None
        if isinstance(self.value, (bytes, bytearray)):
            return self.value.decode()
        return str(self.value)

    def __repr__(self):
        return f"Field(name={self.name!r}, type={self.type!r}, length={self.length!r})"


def tinyint_to_bool(field: Field, next_: Callable[[], Any]) -> Any:
    # TINYINT(1) -> bool, everything else untouched
    if field.type == "TINY" and field.length == 1:
        value = field.string()
        return None if value is None else value == "1"
    return next_()


class BaseDriver:
    """Common DB-API behaviour. Subclasses set the quoting and connect()."""

    name = "base"
    quote_char = '"'
    placeholder = "?"
    supports_default_values = True

    def __init__(self, connection: Dict[str, Any]):
        self.connection = dict(connection)

    def connect(self):
        raise NotImplementedError

    def wrap(self, value: str) -> str:
        if value == "*":
            return value
        q = self.quote_char
        return q + value.replace(q, q + q) + q

    def fetch(self, cursor) -> List[Dict[str, Any]]:
        columns = [column[0] for column in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def execute_script(self, conn, script: str) -> None:
        cursor = conn.cursor()
        try:
            for statement in split_statements(script):
                cursor.execute(statement)
        finally:
            cursor.close()

    def error_message(self, error: Exception) -> str:
        return str(error)


class MySQLDriver(BaseDriver):
    name = "mysql"
    quote_char = "`"
    placeholder = "%s"

    def __init__(self, connection: Dict[str, Any]):
        super().__init__(connection)
        self.type_cast = self.connection.pop("type_cast", None)
        self.timezone = self.connection.pop("timezone", None)

    def connect(self):
        params = dict(self.connection)
        if self.timezone and "init_command" not in params:
            params["init_command"] = f"SET time_zone = '{mysql_time_zone(self.timezone)}'"
        return pymysql.connect(**params)

    def fetch(self, cursor) -> List[Dict[str, Any]]:
        if not self.type_cast:
            return super().fetch(cursor)

        # description: (name, type_code, display_size, internal_size, ...)
        description = cursor.description
        rows = []
        for row in cursor.fetchall():
            out = {}
            for column, value in zip(description, row):
                field = Field(column[0], _FIELD_TYPE_NAMES.get(column[1], str(column[1])), column[3], value)
                out[field.name] = self.type_cast(field, lambda field=field: field.value)
            rows.append(out)
        return rows

    def error_message(self, error: Exception) -> str:
        # pymysql errors carry (code, message)
        if isinstance(error, pymysql.err.MySQLError) and len(error.args) >= 2:
            return str(error.args[1])
        return str(error)


class SQLiteDriver(BaseDriver):
    name = "sqlite3"
    quote_char = '"'
    placeholder = "?"
    supports_default_values = False

    def connect(self):
        params = dict(self.connection)
        filename = params.pop("filename", ":memory:")
        # Probes and queries run in worker threads
        params.setdefault("check_same_thread", False)
        return sqlite3.connect(filename, **params)

    def execute_script(self, conn, script: str) -> None:
        conn.executescript(script)


def mysql_time_zone(timezone: str) -> str:
    if timezone.upper() in ("UTC", "Z"):
        return "+00:00"
    return timezone


def split_statements(script: str) -> List[str]:
    """Split a SQL script on semicolons, dropping blank statements."""
    return [statement.strip() for statement in script.split(";") if statement.strip()]


# ==============================================
# Normalizers: fill in driver defaults
# ==============================================

def drop_empty_connection_values(settings: Dict[str, Any]) -> Dict[str, Any]:
    connection = settings.get("connection") or {}
    settings["connection"] = {k: v for k, v in connection.items() if v is not None}
    return settings


def normalize_mysql(settings: Dict[str, Any]) -> Dict[str, Any]:
    connection = settings["connection"]
    connection["timezone"] = connection.get("timezone") or "UTC"
    # Only when the caller has no rule of their own; False switches it off
    if connection.get("type_cast") is None:
        connection["type_cast"] = tinyint_to_bool
    return settings


def normalize_sqlite(settings: Dict[str, Any]) -> Dict[str, Any]:
    # Every sqlite connection is its own database, so share just one
    pool = dict(settings.get("pool") or {})
    pool["min"] = 1
    pool["max"] = 1
    settings["pool"] = pool
    return settings


DRIVERS: Dict[str, type] = {
    "mysql": MySQLDriver,
    "mysql2": MySQLDriver,
    "pymysql": MySQLDriver,
    "sqlite3": SQLiteDriver,
    "sqlite": SQLiteDriver,
}

NORMALIZERS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    "mysql": normalize_mysql,
    "mysql2": normalize_mysql,
    "pymysql": normalize_mysql,
    "sqlite3": normalize_sqlite,
    "sqlite": normalize_sqlite,
}


def register_driver(
    client: str,
    driver_cls: type,
    normalizer: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None
) -> None:
    DRIVERS[client] = driver_cls
    if normalizer is not None:
        NORMALIZERS[client] = normalizer


def get_driver(client: str) -> type:
    try:
        return DRIVERS[client]
    except KeyError:
        raise ConfigError("Invalid database config", f'unknown client "{client}"') from None


def normalize(settings: Dict[str, Any]) -> Dict[str, Any]:
    """Apply the generic cleanup, then the client's own defaults."""
    settings = drop_empty_connection_values(settings)
    normalizer = NORMALIZERS.get(settings["client"])
    if normalizer is not None:
        settings = normalizer(settings)
    return settings
