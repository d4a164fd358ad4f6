"""
Alembic environment for the StageVault document store.

Schema is a single `documents` table; documents themselves are schemaless
JSONB, so there is no model metadata to autogenerate from.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine

from stagevault.config import settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

if settings.STORE_BACKEND != "postgres":
    raise RuntimeError(f"Migrations only apply to the postgres store, not {settings.STORE_BACKEND!r}")
if not settings.DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required for migrations")

config.set_main_option("sqlalchemy.url", settings.MIGRATION_DATABASE_URL)


def run_migrations_offline() -> None:
    context.configure(
        url=settings.MIGRATION_DATABASE_URL,
        target_metadata=None,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(settings.MIGRATION_DATABASE_URL)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=None)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
