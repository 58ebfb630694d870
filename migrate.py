#!/usr/bin/env python3
"""
Database maintenance script.
Creates or drops the schema.
"""

import asyncio
import sys
import argparse
import logging

from realty.config import settings
from realty.database import create_tables, drop_tables, close_db_connection

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run_command(command: str) -> None:
    try:
        if command == "create":
            await create_tables()
        elif command == "drop":
            await drop_tables()
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for database maintenance."""
    parser = argparse.ArgumentParser(description="Database maintenance for the Realty Booking API")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")

    drop_parser = subparsers.add_parser("drop", help="Drop all tables (development/testing only)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping every table")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == "drop" and not args.confirm:
        print("Dropping tables requires --confirm flag")
        return

    logger.info(f"Running '{args.command}' against {settings.environment} database")

    try:
        asyncio.run(run_command(args.command))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
