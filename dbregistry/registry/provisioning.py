# ==============================================
# ProvisioningPipeline
# ==============================================
#
# PURPOSE:
#   Turn one connection config into a live, registered Database.
#
# STEPS:
# ------
#   1. merge          config over DEFAULTS
#   2. validate       ConfigError on a bad shape
#   3. reserve name   DuplicateNameError if registered or in flight
#   4. normalize      per-client defaults (drivers.NORMALIZERS)
#   5. hooks          user hooks + optional snake_case mapping
#   6. build          Database(settings, hooks)
#   7. probe          "/* ping */ SELECT 1", ConnectionError on failure
#   8. migrations     if migrations.auto, run migrate.latest() before
#                     the host starts serving
#   9. register       name + every alias not taken yet
#
#   Nothing is visible through registry.has()/get() until step 9.
#   A failed probe closes the handle and leaves the registry as it was.
#
# ==============================================

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from ..errors import ConnectionError
from ..naming import snake_case_mappers
from ..storage import Database, HookChain, normalize
from .schema import merge_with_defaults, validate_config

logger = logging.getLogger(__name__)

MIGRATED_MESSAGE = "Database successful migrated to the latest version"


class ProvisioningPipeline:
    def __init__(
        self,
        registry,
        host=None,
        validator: Optional[Callable[[Mapping[str, Any]], Dict[str, Any]]] = None
    ):
        self.registry = registry
        self.host = host
        self.validator = validator or validate_config

    def _log(self, tags: Iterable[str], message: str) -> None:
        if self.host is not None:
            self.host.log(list(tags), message)
        elif "error" in tags:
            logger.error(message)
        else:
            logger.info(message)

    def build_hooks(self, settings: Dict[str, Any]) -> HookChain:
        mapper = snake_case_mappers() if settings.get("snake_case_mapping") else None
        return HookChain.compose(
            wrap_identifier=settings.get("wrap_identifier"),
            post_process_response=settings.get("post_process_response"),
            mapper=mapper
        )

    def schedule_migration(self, database: Database) -> None:
        if self.host is None:
            logger.warning("migrations.auto is set but there is no host to run them before start")
            return

        async def migrate_to_latest():
            applied = await asyncio.to_thread(database.migrate.latest)
            logger.debug("Applied migrations: %s", applied)
            self._log(["db", "migration", "info"], MIGRATED_MESSAGE)

        self.host.ext("on_pre_start", migrate_to_latest)

    async def probe(self, database: Database) -> None:
        try:
            await database.ping()
        except Exception as e:
            message = database.driver.error_message(e)
            self._log(["db", "error"], message)
            database.close()
            raise ConnectionError(f"Database error: {message}") from e
        except BaseException:
            # Cancelled while waiting on the probe
            database.close()
            raise

    async def run(self, config: Any) -> Database:
        settings = self.validator(merge_with_defaults(config))
        name = settings["name"]

        with self.registry.reserve(name):
            settings = normalize(settings)
            database = Database(settings, self.build_hooks(settings))

            await self.probe(database)

            migrations = settings.get("migrations") or {}
            if migrations.get("auto"):
                self.schedule_migration(database)

            self.registry.set(name, database)
            for alias in settings.get("alias") or []:
                if self.registry.is_available(alias):
                    self.registry.set(alias, database)

        logger.info('Provisioned %s connection "%s"', settings["client"], name)
        return database
