# ==============================================
# STORAGE: database handles
# ==============================================
#
# Modules:
# --------
# - client.py    → Database, the handle the registry stores
# - drivers.py   → per-client connect/quote/fetch + default normalizers
# - hooks.py     → ordered identifier / response hook chains
# - pool.py      → connection pool shared by a handle's queries
# - migrator.py  → applies pending SQL migration files
#
# ==============================================

from .client import Database, PING_QUERY
from .drivers import (
    DRIVERS,
    NORMALIZERS,
    Field,
    MySQLDriver,
    SQLiteDriver,
    get_driver,
    normalize,
    register_driver,
    tinyint_to_bool
)
from .hooks import HookChain
from .migrator import Migrator
from .pool import Pool

__all__ = [
    "Database",
    "PING_QUERY",
    "DRIVERS",
    "NORMALIZERS",
    "Field",
    "MySQLDriver",
    "SQLiteDriver",
    "get_driver",
    "normalize",
    "register_driver",
    "tinyint_to_bool",
    "HookChain",
    "Migrator",
    "Pool"
]
