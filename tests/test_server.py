# ==============================================
# Tests for the host surface and register()
# ==============================================

import logging

import pytest

from dbregistry.registry import ConnectionRegistry
from dbregistry.server import Server, register


class TestServer:
    def test_unsupported_extension_point(self, server):
        with pytest.raises(ValueError):
            server.ext("on_post_stop", lambda: None)

    def test_log_routes_tags_to_logging(self, server, caplog):
        caplog.set_level(logging.DEBUG, logger="dbregistry")
        server.log(["db", "migration", "info"], "migrated")
        server.log(["db", "error"], "boom")

        records = [(r.name, r.levelno, r.getMessage()) for r in caplog.records]
        assert ("dbregistry.db.migration", logging.INFO, "migrated") in records
        assert ("dbregistry.db", logging.ERROR, "boom") in records

    def test_log_without_level_tag_is_info(self, server, caplog):
        caplog.set_level(logging.INFO, logger="dbregistry")
        server.log(["db"], "hello")
        assert caplog.records[-1].levelno == logging.INFO

    @pytest.mark.asyncio
    async def test_start_runs_pre_start_actions_in_order(self, server):
        order = []

        async def first():
            order.append("first")

        server.ext("on_pre_start", first)
        server.ext("on_pre_start", lambda: order.append("second"))
        await server.start()
        assert order == ["first", "second"]
        assert server.started

    @pytest.mark.asyncio
    async def test_no_pre_start_actions_after_start(self, server):
        await server.start()
        with pytest.raises(RuntimeError):
            server.ext("on_pre_start", lambda: None)

    def test_decorate_twice(self, server):
        server.decorate("db", 1)
        with pytest.raises(ValueError):
            server.decorate("db", 2)


class TestRegister:
    @pytest.mark.asyncio
    async def test_decorates_server(self, server):
        registry = await register(server)
        assert isinstance(registry, ConnectionRegistry)
        assert server.db is registry
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_provisions_single_config(self, server, sqlite_config):
        await register(server, {"db": sqlite_config(alias="main")})
        assert server.db() is server.db("main")
        server.db.close()

    @pytest.mark.asyncio
    async def test_provisions_list(self, server, sqlite_config):
        await register(server, {"db": [sqlite_config(name="a"), sqlite_config(name="b")]})
        assert server.db.has("a") and server.db.has("b")
        server.db.close()


class TestAutoMigration:
    @pytest.fixture
    def migrations_dir(self, tmp_path):
        directory = tmp_path / "migrations"
        directory.mkdir()
        (directory / "001_create_users.sql").write_text(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, first_name TEXT);"
        )
        return directory

    @pytest.mark.asyncio
    async def test_migrates_before_start(self, server, registry, sqlite_config, migrations_dir, caplog):
        caplog.set_level(logging.INFO, logger="dbregistry")
        db = await registry.provision(sqlite_config(
            migrations={"auto": "yes", "directory": str(migrations_dir)}
        ))
        tables = "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'users'"
        assert db.fetch_all(tables) == []

        await server.start()

        assert db.fetch_all(tables) == [{"name": "users"}]
        assert any(
            r.name == "dbregistry.db.migration"
            and r.getMessage() == "Database successful migrated to the latest version"
            for r in caplog.records
        )

    @pytest.mark.asyncio
    async def test_auto_off_schedules_nothing(self, server, registry, sqlite_config, migrations_dir):
        await registry.provision(sqlite_config(migrations={"auto": False, "directory": str(migrations_dir)}))
        assert server._pre_start == []

    @pytest.mark.asyncio
    async def test_failed_probe_schedules_nothing(self, server, registry, sqlite_config, migrations_dir, tmp_path):
        with pytest.raises(Exception):
            await registry.provision(sqlite_config(
                connection={"filename": str(tmp_path / "missing" / "x.db")},
                migrations={"auto": True, "directory": str(migrations_dir)}
            ))
        assert server._pre_start == []
