#!/usr/bin/env python3
"""CLI for Estate API management tasks.

Usage:
    python -m cli <command>

Commands:
    create-tables  Create missing tables from the SQLAlchemy models
    check-db       Verify the configured database is reachable
"""

import argparse
import asyncio
import logging
import sys

from core.config import get_settings
from core.database import check_db_connection, create_engine, create_tables, dispose_engine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def _create_tables() -> None:
    engine = create_engine(get_settings())
    try:
        await create_tables(engine)
    finally:
        await dispose_engine(engine)


async def _check_db() -> None:
    engine = create_engine(get_settings())
    try:
        await check_db_connection(engine)
    finally:
        await dispose_engine(engine)


def cmd_create_tables() -> int:
    """Create database tables from the models.

    create_all() only creates missing tables - it won't modify existing ones.
    """
    logger.info("Creating database tables...")
    asyncio.run(_create_tables())
    logger.info("Tables created successfully")
    return 0


def cmd_check_db() -> int:
    try:
        asyncio.run(_check_db())
    except Exception as e:
        logger.error(f"Database unreachable: {e}")
        return 1
    logger.info("Database reachable")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Estate API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "create-tables",
        help="Create missing tables from the SQLAlchemy models",
    )
    subparsers.add_parser(
        "check-db",
        help="Verify the configured database is reachable",
    )

    args = parser.parse_args(argv)

    if args.command == "create-tables":
        return cmd_create_tables()
    elif args.command == "check-db":
        return cmd_check_db()
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
