# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load connection settings from environment variables / .env
#   file, for the CLI and for hosts that configure their default
#   connection from the environment.
#
# CLASSES:
# --------
# - DatabaseSettings (dataclass)
#     name: str                    (default "default")
#     alias: list[str]             (default [])
#     client: str                  (default "mysql")
#     host: str                    (default "localhost")
#     port: int                    (default 3306)
#     user: str                    (default "root")
#     password: str                (default "")
#     database: str | None         (default None)
#     filename: str | None         (sqlite only)
#     snake_case_mapping: bool     (default False)
#     migrations_auto: bool        (default False)
#     migrations_directory: str    (default "./migrations")
#     migrations_table: str        (default "schema_migrations")
#
# - AppConfig (dataclass)
#     database: DatabaseSettings
#     log_level: str               (default "INFO")
#
# FUNCTIONS:
# ----------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# - configure_logging(level) -> None
#
# ENVIRONMENT:
# ------------
#   DB_NAME, DB_ALIAS (comma separated), DB_CLIENT, DB_HOST, DB_PORT,
#   DB_USER, DB_PASSWORD, DB_DATABASE, DB_FILENAME,
#   DB_SNAKE_CASE_MAPPING, DB_MIGRATIONS_AUTO,
#   DB_MIGRATIONS_DIRECTORY, DB_MIGRATIONS_TABLE, LOG_LEVEL
#
# ==============================================

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

SQLITE_CLIENTS = ("sqlite3", "sqlite")


def _env_bool(key: str, default: bool = False) -> bool:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(key: str) -> List[str]:
    value = os.getenv(key) or ""
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class DatabaseSettings:
    """Settings for the connection provisioned from the environment."""
    name: str = "default"
    alias: List[str] = field(default_factory=list)
    client: str = "mysql"
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: Optional[str] = None
    filename: Optional[str] = None
    snake_case_mapping: bool = False
    migrations_auto: bool = False
    migrations_directory: str = "./migrations"
    migrations_table: str = "schema_migrations"

    def to_provision_config(self) -> Dict[str, Any]:
        if self.client in SQLITE_CLIENTS:
            connection: Dict[str, Any] = {"filename": self.filename or ":memory:"}
        else:
            connection = {
                "host": self.host,
                "port": self.port,
                "user": self.user,
                "password": self.password,
                "database": self.database,
            }
        return {
            "name": self.name,
            "alias": list(self.alias),
            "client": self.client,
            "connection": connection,
            "snake_case_mapping": self.snake_case_mapping,
            "migrations": {
                "auto": self.migrations_auto,
                "directory": self.migrations_directory,
                "table_name": self.migrations_table,
            },
        }


@dataclass
class AppConfig:
    """Main application configuration."""
    database: DatabaseSettings
    log_level: str = "INFO"


# Singleton instance
_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # .env in the current working directory wins over the project root
    load_dotenv(dotenv_path=Path.cwd() / ".env")
    load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env")

    database = DatabaseSettings(
        name=os.getenv("DB_NAME", "default"),
        alias=_env_list("DB_ALIAS"),
        client=os.getenv("DB_CLIENT", "mysql"),
        host=os.getenv("DB_HOST", "localhost"),
        port=int(os.getenv("DB_PORT", "3306")),
        user=os.getenv("DB_USER", "root"),
        password=os.getenv("DB_PASSWORD", ""),
        database=os.getenv("DB_DATABASE") or None,
        filename=os.getenv("DB_FILENAME") or None,
        snake_case_mapping=_env_bool("DB_SNAKE_CASE_MAPPING"),
        migrations_auto=_env_bool("DB_MIGRATIONS_AUTO"),
        migrations_directory=os.getenv("DB_MIGRATIONS_DIRECTORY", "./migrations"),
        migrations_table=os.getenv("DB_MIGRATIONS_TABLE", "schema_migrations")
    )

    _config_instance = AppConfig(
        database=database,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper()
    )

    return _config_instance


def reset_config() -> None:
    """Forget the cached singleton (tests, reloads)."""
    global _config_instance
    _config_instance = None


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
