"""Marketplace database management CLI.

Creates and drops the relational schema for the configured environment.
With the default in-memory provider both commands are no-ops.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db   # Create all tables
    PROTEAN_ENV=production python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys

import structlog

from marketplace.domain import marketplace
from marketplace.utils.db import drop_db, setup_db
from marketplace.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


def setup_database():
    marketplace.init()
    providers = setup_db(marketplace)
    logger.info("database_schema_created", providers=providers)
    return providers


def drop_database():
    marketplace.init()
    providers = drop_db(marketplace)
    logger.info("database_schema_dropped", providers=providers)
    return providers


def main(argv=None):
    parser = argparse.ArgumentParser(description="Marketplace database management")
    parser.add_argument("command", choices=["setup-db", "drop-db"])
    args = parser.parse_args(argv)

    configure_logging()
    if args.command == "setup-db":
        setup_database()
    else:
        drop_database()
    return 0


if __name__ == "__main__":
    sys.exit(main())
