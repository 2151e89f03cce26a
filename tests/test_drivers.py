# ==============================================
# Tests for drivers and driver normalizers
# ==============================================

from unittest.mock import MagicMock, patch

import pymysql.err
import pytest
from pymysql.constants import FIELD_TYPE

from dbregistry.errors import ConfigError
from dbregistry.storage import (
    Field,
    MySQLDriver,
    SQLiteDriver,
    get_driver,
    normalize,
    register_driver,
    tinyint_to_bool
)
from dbregistry.storage.drivers import DRIVERS, NORMALIZERS, split_statements


class TestNormalize:
    def test_drops_none_connection_values(self):
        settings = normalize({"client": "sqlite3", "connection": {"filename": "a.db", "timeout": None}})
        assert settings["connection"] == {"filename": "a.db"}

    def test_mysql_defaults(self):
        settings = normalize({"client": "mysql", "connection": {"host": "db"}})
        assert settings["connection"]["timezone"] == "UTC"
        assert settings["connection"]["type_cast"] is tinyint_to_bool

    def test_mysql_keeps_caller_values(self):
        def cast(field, next_):
            return next_()

        settings = normalize({
            "client": "mysql2",
            "connection": {"timezone": "+02:00", "type_cast": cast}
        })
        assert settings["connection"]["timezone"] == "+02:00"
        assert settings["connection"]["type_cast"] is cast

    def test_mysql_type_cast_can_be_switched_off(self):
        settings = normalize({"client": "pymysql", "connection": {"type_cast": False}})
        assert settings["connection"]["type_cast"] is False

    def test_sqlite_shares_one_connection(self):
        settings = normalize({"client": "sqlite3", "connection": {}, "pool": {"min": 0, "max": 5}})
        assert settings["pool"] == {"min": 1, "max": 1}

    def test_unknown_client_has_no_defaults(self):
        settings = normalize({"client": "somedb", "connection": {"a": 1}})
        assert settings["connection"] == {"a": 1}

    def test_does_not_mutate_caller_connection(self):
        connection = {"host": "db"}
        normalize({"client": "mysql", "connection": connection})
        assert connection == {"host": "db"}


class TestDriverTable:
    def test_known_clients(self):
        assert get_driver("mysql") is MySQLDriver
        assert get_driver("mysql2") is MySQLDriver
        assert get_driver("sqlite3") is SQLiteDriver

    def test_unknown_client(self):
        with pytest.raises(ConfigError, match="oracle"):
            get_driver("oracle")

    def test_register_driver(self):
        class FakeDriver(SQLiteDriver):
            name = "fake"

        def normalize_fake(settings):
            settings["connection"]["flag"] = True
            return settings

        register_driver("fake", FakeDriver, normalize_fake)
        try:
            assert get_driver("fake") is FakeDriver
            assert normalize({"client": "fake", "connection": {}})["connection"] == {"flag": True}
        finally:
            DRIVERS.pop("fake")
            NORMALIZERS.pop("fake")


class TestQuoting:
    def test_mysql_backticks(self):
        driver = MySQLDriver({})
        assert driver.wrap("users") == "`users`"
        assert driver.wrap("we`ird") == "`we``ird`"

    def test_sqlite_double_quotes(self):
        driver = SQLiteDriver({})
        assert driver.wrap("users") == '"users"'
        assert driver.wrap('we"ird') == '"we""ird"'

    def test_star_is_not_quoted(self):
        assert MySQLDriver({}).wrap("*") == "*"


class TestMySQLDriver:
    def test_connect_translates_timezone(self):
        driver = MySQLDriver({"host": "db", "user": "app", "timezone": "UTC", "type_cast": tinyint_to_bool})
        with patch("pymysql.connect") as connect:
            driver.connect()
        connect.assert_called_once_with(host="db", user="app", init_command="SET time_zone = '+00:00'")

    def test_connect_keeps_explicit_init_command(self):
        driver = MySQLDriver({"timezone": "UTC", "init_command": "SET NAMES utf8mb4"})
        with patch("pymysql.connect") as connect:
            driver.connect()
        connect.assert_called_once_with(init_command="SET NAMES utf8mb4")

    def test_fetch_applies_type_cast(self):
        cursor = MagicMock()
        cursor.description = (
            ("active", FIELD_TYPE.TINY, None, 1, 1, 0, True),
            ("level", FIELD_TYPE.TINY, None, 4, 4, 0, True),
            ("name", FIELD_TYPE.VAR_STRING, None, 255, 255, 0, True),
        )
        cursor.fetchall.return_value = ((1, 3, "a"), (0, 1, "b"), (None, 2, "c"))

        rows = MySQLDriver({"type_cast": tinyint_to_bool}).fetch(cursor)
        assert rows == [
            {"active": True, "level": 3, "name": "a"},
            {"active": False, "level": 1, "name": "b"},
            {"active": None, "level": 2, "name": "c"},
        ]

    def test_fetch_without_type_cast(self):
        cursor = MagicMock()
        cursor.description = (("active", FIELD_TYPE.TINY, None, 1, 1, 0, True),)
        cursor.fetchall.return_value = ((1,),)
        assert MySQLDriver({"type_cast": False}).fetch(cursor) == [{"active": 1}]

    def test_custom_type_cast_sees_field(self):
        seen = []

        def cast(field, next_):
            seen.append((field.name, field.type, field.length))
            return next_()

        cursor = MagicMock()
        cursor.description = (("created", FIELD_TYPE.DATETIME, None, 19, 19, 0, True),)
        cursor.fetchall.return_value = (("2024-01-01",),)

        assert MySQLDriver({"type_cast": cast}).fetch(cursor) == [{"created": "2024-01-01"}]
        assert seen == [("created", "DATETIME", 19)]

    def test_error_message_uses_server_text(self):
        error = pymysql.err.OperationalError(2003, "Can't connect to MySQL server")
        assert MySQLDriver({}).error_message(error) == "Can't connect to MySQL server"

    def test_error_message_fallback(self):
        assert MySQLDriver({}).error_message(RuntimeError("boom")) == "boom"


class TestField:
    def test_string(self):
        assert Field("a", "TINY", 1, 1).string() == "1"
        assert Field("a", "BLOB", 3, b"abc").string() == "abc"
        assert Field("a", "TINY", 1, None).string() is None

    def test_tinyint_to_bool_ignores_other_columns(self):
        assert tinyint_to_bool(Field("a", "LONG", 11, 5), lambda: "next") == "next"


def test_split_statements():
    script = "CREATE TABLE a (id INT);\n\n CREATE TABLE b (id INT);  \n"
    assert split_statements(script) == ["CREATE TABLE a (id INT)", "CREATE TABLE b (id INT)"]
