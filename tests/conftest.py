# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests. No live database is needed:
# sqlite3 runs in memory (or in tmp_path), pymysql is patched.
#
# FIXTURES:
# ---------
# - server            fresh Server host
# - registry          ConnectionRegistry bound to `server`
# - sqlite_config     factory for sqlite connection configs
# - mysql_connect     patched pymysql.connect returning a fake connection
#
# ==============================================

from unittest.mock import MagicMock, patch

import pytest
from pymysql.constants import FIELD_TYPE

from dbregistry.config import reset_config
from dbregistry.registry import ConnectionRegistry
from dbregistry.server import Server


@pytest.fixture
def server():
    return Server()


@pytest.fixture
def registry(server):
    registry = ConnectionRegistry(host=server)
    yield registry
    registry.close()


@pytest.fixture
def sqlite_config():
    """Return a factory for in-memory sqlite configs."""
    def make(**overrides):
        config = {"client": "sqlite3", "connection": {"filename": ":memory:"}}
        config.update(overrides)
        return config
    return make


@pytest.fixture
def mysql_connect():
    """
    Patch pymysql.connect. Every connection's cursor answers the
    probe query with a single LONGLONG column.
    """
    def make_connection(**kwargs):
        cursor = MagicMock()
        cursor.description = (("1", FIELD_TYPE.LONGLONG, None, 1, 1, 0, False),)
        cursor.fetchall.return_value = ((1,),)
        cursor.rowcount = 1
        conn = MagicMock()
        conn.cursor.return_value = cursor
        return conn

    with patch("pymysql.connect", side_effect=make_connection) as connect:
        yield connect


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()
