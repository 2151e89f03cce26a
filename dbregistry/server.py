# ==============================================
# Server: minimal host surface
# ==============================================
#
# PURPOSE:
#   The registry needs three things from the process it lives in:
#     - somewhere to run work once before serving starts
#       (automatic migrations)
#     - a tagged log sink
#     - a place to hang the registry (server.db)
#   Server provides exactly those. Any host object with the same
#   ext()/log() methods can be used instead.
#
# CLASS: Server
# -------------
#   - ext(event, method)        only "on_pre_start" is supported
#   - log(tags, message)        routed to stdlib logging
#   - decorate(name, value)     attach e.g. the registry as server.db
#   - start()                   async, runs pre-start actions in order
#
# FUNCTION:
# ---------
# - register(server, options=None) -> ConnectionRegistry   (async)
#     Create the registry, decorate server.db, provision options["db"]
#     (one config or a list).
#
# ==============================================

import inspect
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .registry import ConnectionRegistry

_LEVEL_TAGS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


class Server:
    def __init__(self):
        self._pre_start: List[Callable[[], Any]] = []
        self.started = False

    def ext(self, event: str, method: Callable[[], Any]) -> None:
        if event != "on_pre_start":
            raise ValueError(f"Unsupported server extension point: {event}")
        if self.started:
            raise RuntimeError("Cannot add pre-start actions after the server started")
        self._pre_start.append(method)

    def log(self, tags: Iterable[str], message: str) -> None:
        tags = list(tags)
        level = logging.INFO
        for tag in tags:
            if tag in _LEVEL_TAGS:
                level = _LEVEL_TAGS[tag]
        # ["db", "migration", "info"] -> logger "dbregistry.db.migration"
        category = ".".join(tag for tag in tags if tag not in _LEVEL_TAGS)
        name = f"dbregistry.{category}" if category else "dbregistry"
        logging.getLogger(name).log(level, message)

    def decorate(self, name: str, value: Any) -> None:
        if hasattr(self, name):
            raise ValueError(f"Server decoration already defined: {name}")
        setattr(self, name, value)

    async def start(self) -> None:
        for method in self._pre_start:
            result = method()
            if inspect.isawaitable(result):
                await result
        self.started = True


async def register(server, options: Optional[Dict[str, Any]] = None) -> ConnectionRegistry:
    registry = ConnectionRegistry(host=server)
    server.decorate("db", registry)

    db_options = (options or {}).get("db")
    if db_options:
        await registry.provision(db_options)

    return registry
