# ==============================================
# dbregistry
# ==============================================
#
# Named database connections for a host process, with optional
# camelCase <-> snake_case identifier mapping.
#
# Package Structure:
#
# dbregistry/
# ├── naming/       # case conversion, memoize, identifier mapping
# ├── storage/      # Database handle, drivers, pool, migrations
# ├── registry/     # config schema, provisioning, ConnectionRegistry
# ├── errors.py     # exception hierarchy
# ├── server.py     # minimal host surface + register()
# ├── config.py     # environment configuration
# └── cli.py        # command line entry point
#
# ==============================================

from .errors import (
    ConfigError,
    ConnectionError,
    DuplicateNameError,
    MigrationError,
    NotFoundError,
    PoolTimeoutError,
    RegistryError
)
from .naming import IdentifierMapper, memoize, snake_case_mappers, to_camel, to_snake
from .registry import ConnectionRegistry, ProvisionConfig
from .server import Server, register
from .storage import Database

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "ConnectionError",
    "DuplicateNameError",
    "MigrationError",
    "NotFoundError",
    "PoolTimeoutError",
    "RegistryError",
    "IdentifierMapper",
    "memoize",
    "snake_case_mappers",
    "to_camel",
    "to_snake",
    "ConnectionRegistry",
    "ProvisionConfig",
    "Server",
    "register",
    "Database"
]
