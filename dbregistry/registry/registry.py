# ==============================================
# ConnectionRegistry
# ==============================================
#
# PURPOSE:
#   Named database handles for one host process. Created once at
#   startup and handed to whoever needs a connection; there is no
#   module-level registry.
#
# CLASS: ConnectionRegistry
# -------------------------
#   Constructor:
#   ------------
#   - __init__(host=None, validator=None)
#       host:      object with ext(event, method) and log(tags, message)
#       validator: replaces the default pydantic validation step
#
#   Methods:
#   --------
#   - has(name) -> bool
#   - get(name) -> Database              NotFoundError if missing
#   - set(name, database) -> None        unconditional overwrite
#   - registry(name="default")           same as get, via __call__
#   - provision(config | [configs])      async, see provisioning.py
#   - set_default(name) -> None          point "default" at `name`
#   - close() -> None                    close every distinct handle
#
# USAGE:
# ------
#   registry = ConnectionRegistry(host=server)
#   await registry.provision({"client": "sqlite3",
#                             "connection": {"filename": "app.db"},
#                             "alias": ["main"]})
#   registry("main").raw("SELECT 1")
#
# ==============================================

import asyncio
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from ..errors import DuplicateNameError, NotFoundError
from ..storage import Database
from .provisioning import ProvisioningPipeline


class ConnectionRegistry:
    def __init__(
        self,
        host=None,
        validator: Optional[Callable[[Mapping[str, Any]], Dict[str, Any]]] = None
    ):
        self._instances: Dict[str, Database] = {}
        # Names whose provisioning is in flight
        self._reserved: Set[str] = set()
        self._pipeline = ProvisioningPipeline(self, host=host, validator=validator)

    def has(self, name: str) -> bool:
        return name in self._instances

    def get(self, name: str) -> Database:
        try:
            return self._instances[name]
        except KeyError:
            raise NotFoundError(name) from None

    def set(self, name: str, database: Database) -> None:
        self._instances[name] = database

    def names(self) -> List[str]:
        return list(self._instances)

    def is_available(self, name: str) -> bool:
        return name not in self._instances and name not in self._reserved

    @contextmanager
    def reserve(self, name: str):
        """
        Hold `name` while it is being provisioned. Check and insert
        happen without yielding to the event loop.
        """
        if not self.is_available(name):
            raise DuplicateNameError(name)
        self._reserved.add(name)
        try:
            yield
        finally:
            self._reserved.discard(name)

    async def provision(self, config):
        """
        Provision one connection, or several concurrently.

        Args:
            config: a config mapping / ProvisionConfig, or a list of them

        Returns:
            The Database, or a list of them in input order
        """
        if isinstance(config, (list, tuple)):
            return list(await asyncio.gather(*(self._pipeline.run(c) for c in config)))
        return await self._pipeline.run(config)

    def set_default(self, name: str) -> None:
        self.set("default", self.get(name))

    def close(self) -> None:
        seen = set()
        for database in self._instances.values():
            if id(database) not in seen:
                seen.add(id(database))
                database.close()

    def __call__(self, name: str = "default") -> Database:
        return self.get(name)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return len(self._instances)

    def __repr__(self):
        return f"ConnectionRegistry(names={self.names()!r})"
