#!/usr/bin/env python3
"""
Database management script for the storefront backend.
Handles schema reset, migrations and demo seeding.
"""

import logging
import sys
from pathlib import Path

# Add the project root to the path
sys.path.insert(0, str(Path(__file__).parent))

from alembic.config import Config
from alembic import command
from app.config import settings
from app.infrastructure.db.database import get_engine, get_session_factory
from app.infrastructure.db.maintenance import reset_public_schema, seed_demo_products
from app.infrastructure.db.models import create_all_tables


ALEMBIC_INI = Path(__file__).parent / "app" / "infrastructure" / "db" / "migrations" / "alembic.ini"


def _alembic_config() -> Config:
    return Config(str(ALEMBIC_INI))


def require_database_url() -> None:
    """Exit with status 1 when DATABASE_URL is not configured."""
    if not settings.database_url:
        print("DATABASE_URL is missing: please set it in .env.local / .env", file=sys.stderr)
        sys.exit(1)


def run_migrations():
    """Run pending migrations."""
    print("Running migrations...")
    command.upgrade(_alembic_config(), "head")


def rollback_migration():
    """Rollback last migration."""
    print("Rolling back migration...")
    command.downgrade(_alembic_config(), "-1")


def show_current_revision():
    """Show current database revision."""
    command.current(_alembic_config())


def show_history():
    """Show migration history."""
    command.history(_alembic_config())


def create_tables():
    """Create tables straight from the models, without Alembic."""
    create_all_tables(get_engine())
    print("Tables created")


def reset_database(assume_yes: bool = False):
    """Reset database - WARNING: This will drop all data!"""
    if not assume_yes:
        response = input("This will drop the public schema and ALL its data. Type 'yes' to continue: ")
        if response.lower() != 'yes':
            print("Database reset cancelled.")
            return
    reset_public_schema(get_engine())
    print("Reset schema public")


def seed_database():
    """Insert demo products."""
    session = get_session_factory()()
    try:
        created = seed_demo_products(session)
    finally:
        session.close()
    print(f"Seeded {len(created)} product(s)")


def print_usage():
    print("Usage: python manage_db.py [command]")
    print("Commands:")
    print("  reset [--yes]  - Drop and recreate the public schema (WARNING: drops all data)")
    print("  seed           - Insert demo products")
    print("  create-tables  - Create tables from the models")
    print("  migrate        - Run pending migrations")
    print("  rollback       - Rollback last migration")
    print("  current        - Show current revision")
    print("  history        - Show migration history")


def main(argv=None) -> int:
    """Main CLI function."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print_usage()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    command_name = argv[0]
    commands = {
        "seed": seed_database,
        "create-tables": create_tables,
        "migrate": run_migrations,
        "rollback": rollback_migration,
        "current": show_current_revision,
        "history": show_history,
    }

    if command_name == "reset":
        require_database_url()
        reset_database(assume_yes="--yes" in argv[1:])
    elif command_name in commands:
        require_database_url()
        commands[command_name]()
    else:
        print(f"Unknown command: {command_name}")
        print_usage()
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
