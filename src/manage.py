"""FreightDesk database management CLI.

Usage:
    python src/manage.py setup-db   # Create shipping tables
    python src/manage.py drop-db    # Drop shipping tables
"""

import argparse
import sys


def setup_database():
    """Create the shipping schema on every SQL provider."""
    from shipping.domain import shipping
    from shipping.utils.db import setup_db

    print("Initializing shipping domain...")
    shipping.init()
    print("Creating shipping database schema...")
    setup_db(shipping)
    print("Done.")


def drop_database():
    from shipping.domain import shipping
    from shipping.utils.db import drop_db

    print("Initializing shipping domain...")
    shipping.init()
    print("Dropping shipping database schema...")
    drop_db(shipping)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="FreightDesk database management")
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
