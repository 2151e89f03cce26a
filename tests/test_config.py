# ==============================================
# Tests for environment configuration
# ==============================================

import os

import pytest

from dbregistry.config import DatabaseSettings, get_config

ENV_KEYS = [
    "DB_NAME", "DB_ALIAS", "DB_CLIENT", "DB_HOST", "DB_PORT", "DB_USER",
    "DB_PASSWORD", "DB_DATABASE", "DB_FILENAME", "DB_SNAKE_CASE_MAPPING",
    "DB_MIGRATIONS_AUTO", "DB_MIGRATIONS_DIRECTORY", "DB_MIGRATIONS_TABLE",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # Keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("dbregistry.config.load_dotenv", lambda **kwargs: False)
    return monkeypatch


def test_defaults(clean_env):
    config = get_config()
    assert config.database == DatabaseSettings()
    assert config.log_level == "INFO"


def test_reads_environment(clean_env):
    clean_env.setenv("DB_NAME", "main")
    clean_env.setenv("DB_ALIAS", "primary, writer")
    clean_env.setenv("DB_CLIENT", "mysql2")
    clean_env.setenv("DB_PORT", "3307")
    clean_env.setenv("DB_SNAKE_CASE_MAPPING", "true")
    clean_env.setenv("DB_MIGRATIONS_AUTO", "yes")
    clean_env.setenv("LOG_LEVEL", "debug")

    config = get_config()
    assert config.database.name == "main"
    assert config.database.alias == ["primary", "writer"]
    assert config.database.client == "mysql2"
    assert config.database.port == 3307
    assert config.database.snake_case_mapping is True
    assert config.database.migrations_auto is True
    assert config.log_level == "DEBUG"


def test_singleton(clean_env):
    assert get_config() is get_config()


def test_loads_dotenv_file(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("DB_CLIENT=sqlite3\nDB_FILENAME=app.db\n")

    try:
        config = get_config()
        assert config.database.client == "sqlite3"
        assert config.database.filename == "app.db"
    finally:
        # load_dotenv writes straight into os.environ
        os.environ.pop("DB_CLIENT", None)
        os.environ.pop("DB_FILENAME", None)


class TestToProvisionConfig:
    def test_mysql(self):
        settings = DatabaseSettings(name="main", alias=["rw"], database="app", password="pw")
        config = settings.to_provision_config()
        assert config["client"] == "mysql"
        assert config["alias"] == ["rw"]
        assert config["connection"] == {
            "host": "localhost",
            "port": 3306,
            "user": "root",
            "password": "pw",
            "database": "app",
        }
        assert config["migrations"] == {
            "auto": False,
            "directory": "./migrations",
            "table_name": "schema_migrations",
        }

    def test_sqlite(self):
        config = DatabaseSettings(client="sqlite3").to_provision_config()
        assert config["connection"] == {"filename": ":memory:"}

    @pytest.mark.asyncio
    async def test_result_is_provisionable(self, registry):
        config = DatabaseSettings(client="sqlite3", snake_case_mapping=True).to_provision_config()
        db = await registry.provision(config)
        assert registry.get("default") is db
