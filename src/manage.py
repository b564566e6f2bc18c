"""Storefront database management CLI.

Creates and drops the relational schema for the providers configured in
``domain.toml``.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys

from storefront.domain import storefront
from storefront.utils.db import drop_db, setup_db


def setup_databases():
    print("Initializing storefront domain...")
    storefront.init()
    print("Creating database schema...")
    touched = setup_db(storefront)
    print(f"  Schema ready for: {', '.join(touched) or 'no relational providers'}.")
    print("Done.")


def drop_databases():
    print("Initializing storefront domain...")
    storefront.init()
    print("Dropping database schema...")
    touched = drop_db(storefront)
    print(f"  Schema dropped for: {', '.join(touched) or 'no relational providers'}.")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
