"""Nepify database and user management CLI.

Usage:
    python src/manage.py setup-db     # Create all tables
    python src/manage.py drop-db      # Drop all tables
    python src/manage.py sync-user --external-id user_123 --email a@b.c [--role vendor]
"""

import argparse
import sys


def _database():
    # Model modules register their tables on Base.metadata at import time
    import catalogue.product.product  # noqa: F401
    import catalogue.shop.shop  # noqa: F401
    import identity.user.user  # noqa: F401
    import ordering.address.address  # noqa: F401
    import ordering.cart.cart  # noqa: F401
    import ordering.order.order  # noqa: F401
    from shared.config import Settings
    from shared.database import Database

    settings = Settings.from_env()
    return Database(settings.database_url)


def setup_database():
    """Create every table known to the ORM metadata."""
    database = _database()
    print(f"Creating schema at {database.engine.url.render_as_string(hide_password=True)}...")
    database.create_all()
    print("Done.")


def drop_database():
    """Drop every table known to the ORM metadata."""
    database = _database()
    print(f"Dropping schema at {database.engine.url.render_as_string(hide_password=True)}...")
    database.drop_all()
    print("Done.")


def sync_user_account(external_id, email, first_name=None, last_name=None, role="customer"):
    """Create or refresh a user mapped to an identity-provider id."""
    from identity.user.registration import SyncUser, sync_user
    from identity.user.user import UserRole

    database = _database()
    command = SyncUser(
        external_id=external_id,
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=UserRole(role),
    )
    with database.transaction() as session:
        user = sync_user(session, command)
        print(f"User {user.id} ({user.email}) synced with role {user.role}.")


def main():
    parser = argparse.ArgumentParser(description="Nepify management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    sync_parser = subparsers.add_parser("sync-user", help="Create or update a user")
    sync_parser.add_argument("--external-id", required=True, help="Identity provider user id (token 'sub')")
    sync_parser.add_argument("--email", required=True)
    sync_parser.add_argument("--first-name")
    sync_parser.add_argument("--last-name")
    sync_parser.add_argument("--role", choices=["customer", "vendor", "admin"], default="customer")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "sync-user":
        sync_user_account(args.external_id, args.email, args.first_name, args.last_name, args.role)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
