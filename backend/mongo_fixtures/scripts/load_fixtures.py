#!/usr/bin/env python3
"""
Load fixture files into a MongoDB database.

Usage:
    mongo-fixtures fixtures/ --db myapp_test                 # Clear all, then load
    mongo-fixtures fixtures/users.json --db myapp_test --append
    mongo-fixtures fixtures/ --db mongodb://db:27017/myapp_test --clear-matching

Connection defaults come from MONGODB_* environment variables.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from mongo_fixtures.config import settings
from mongo_fixtures.exceptions import FixtureError
from mongo_fixtures.schemas.loader import ClearStrategy, LoaderConfig
from mongo_fixtures.services.loader import Loader

logger = logging.getLogger(__name__)

MODE_LOAD = "load"
MODE_CLEAR_MATCHING = "clear_and_load"
MODE_CLEAR_ALL = "clear_all_and_load"


async def load_fixtures(fixtures_path: Path, config: LoaderConfig, mode: str = MODE_CLEAR_ALL) -> None:
    """
    Run one load operation and always close the connection afterwards.

    Args:
        fixtures_path: Fixture file or directory.
        config: Target database settings.
        mode: One of "load", "clear_and_load", "clear_all_and_load".
    """
    loader = Loader(config)
    async with loader:
        operation = getattr(loader, mode)
        await operation(fixtures_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mongo-fixtures",
        description="Load fixture files into a MongoDB database",
    )
    parser.add_argument("path", type=Path, help="Fixture file or directory")
    parser.add_argument(
        "--db",
        default=settings.mongodb_database or None,
        help="Database name or mongodb:// locator (default: $MONGODB_DATABASE)",
    )
    parser.add_argument("--host", default=None, help=f"Server host (default: {settings.mongodb_host})")
    parser.add_argument("--port", type=int, default=None, help=f"Server port (default: {settings.mongodb_port})")
    parser.add_argument("--username", default=None, help="Username for authentication")
    parser.add_argument("--password", default=None, help="Password for authentication")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in ClearStrategy],
        default=None,
        help=f"How collections are cleared (default: {settings.fixtures_clear_strategy})",
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--append",
        dest="mode",
        action="store_const",
        const=MODE_LOAD,
        help="Insert without clearing anything",
    )
    mode.add_argument(
        "--clear-matching",
        dest="mode",
        action="store_const",
        const=MODE_CLEAR_MATCHING,
        help="Clear only the collections present in the fixtures",
    )
    parser.set_defaults(mode=MODE_CLEAR_ALL)

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the fixture loading script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.db:
        parser.error("a database is required (--db or MONGODB_DATABASE)")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        # Flags left unset fall back to the environment
        overrides = {
            "host": args.host,
            "port": args.port,
            "username": args.username,
            "password": args.password,
            "clear_strategy": args.strategy,
        }
        config = LoaderConfig.from_settings(
            database=args.db,
            **{k: v for k, v in overrides.items() if v is not None},
        )
    except ValidationError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        asyncio.run(load_fixtures(args.path, config, args.mode))
    except FixtureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Loaded fixtures from {args.path} into '{config.database_name}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
