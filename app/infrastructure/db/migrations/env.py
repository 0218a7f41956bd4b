"""
Alembic migration environment.
auth.users belongs to the auth provider and is never migrated from here.
"""

import logging
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy import engine_from_config

from app.config import settings
from app.infrastructure.db.database import Base, DatabaseConfigurationError, normalize_database_url
from app.infrastructure.db.models import AUTH_SCHEMA  # also registers the models on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def _database_url() -> str:
    if not settings.database_url:
        raise DatabaseConfigurationError("DATABASE_URL is missing: please set it in .env.local / .env")
    return normalize_database_url(settings.database_url)


def include_object(obj, name, type_, reflected, compare_to):
    """Skip tables owned by the auth provider."""
    if type_ == "table" and getattr(obj, "schema", None) == AUTH_SCHEMA:
        return False
    return True


def run_migrations_offline() -> None:
    """Emit SQL without a database connection."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        include_object=include_object,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against the configured database."""
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _database_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_object=include_object,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
