"""Studio database management CLI.

Creates and drops the relational schema for the studio domain using the
setup_db/drop_db utilities. Only providers backed by sqlite or postgresql
are touched; the in-memory provider needs no schema.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    from studio.domain import studio
    from studio.utils.db import setup_db

    print("Initializing studio domain...")
    studio.init()
    print("Creating studio database schema...")
    setup_db(studio)
    print("Done.")


def drop_database():
    from studio.domain import studio
    from studio.utils.db import drop_db

    print("Initializing studio domain...")
    studio.init()
    print("Dropping studio database schema...")
    drop_db(studio)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Studio database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
