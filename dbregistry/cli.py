# ==============================================
# CLI: Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Check and migrate the connection described by the
#   environment / .env file (see config.py).
#
# COMMANDS:
# ---------
# 1. Provision the connection and run the probe:
#    python -m dbregistry.cli ping
#
# 2. Apply pending migrations:
#    python -m dbregistry.cli migrate
#
# 3. Show the resolved settings (password masked):
#    python -m dbregistry.cli show
#
# Exit code is 1 when provisioning or migrating fails.
#
# ==============================================

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from .config import AppConfig, configure_logging, get_config
from .errors import RegistryError
from .registry import ConnectionRegistry
from .server import Server

logger = logging.getLogger(__name__)


async def _provision(config: AppConfig):
    registry = ConnectionRegistry(host=Server())
    database = await registry.provision(config.database.to_provision_config())
    return registry, database


def cmd_ping(config: AppConfig) -> int:
    registry, _ = asyncio.run(_provision(config))
    registry.close()
    print(f'✓ Connection "{config.database.name}" ({config.database.client}) is reachable')
    return 0


def cmd_migrate(config: AppConfig) -> int:
    registry, database = asyncio.run(_provision(config))
    try:
        applied = database.migrate.latest()
    finally:
        registry.close()
    if not applied:
        print("Already up to date")
    for name in applied:
        print(f"✓ {name}")
    return 0


def cmd_show(config: AppConfig) -> int:
    settings = asdict(config.database)
    if settings.get("password"):
        settings["password"] = "****"
    print(json.dumps(settings, indent=2))
    return 0


COMMANDS = {
    "ping": cmd_ping,
    "migrate": cmd_migrate,
    "show": cmd_show,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dbregistry", description="Named database connections")
    parser.add_argument("command", choices=sorted(COMMANDS))
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    configure_logging(args.log_level or config.log_level)

    try:
        return COMMANDS[args.command](config)
    except RegistryError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"✗ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
