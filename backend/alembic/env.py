"""
PURPOSE: Alembic migration environment configuration.

Configures Alembic to work with async SQLAlchemy. The database URL comes from
the same Settings the application uses.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from alembic import context

# Import Base and all models so Alembic detects them
from paylink.config.settings import get_settings
from paylink.db.base import Base
from paylink.models import Transaction  # noqa: F401

# Alembic config object for logging
config = context.config

# Interpret the config file for logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Target metadata for auto-generate support
target_metadata = Base.metadata

settings = get_settings()


def run_migrations_offline() -> None:
    """
    PURPOSE: Run migrations in 'offline' mode, emitting SQL to the script output.
    """
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """
    PURPOSE: Execute migrations using async connection.

    Args:
        connection: SQLAlchemy connection object
    """
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """
    PURPOSE: Create an async engine and run migrations.
    """
    engine: AsyncEngine = create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        poolclass=pool.NullPool,
    )

    async with engine.begin() as connection:
        await connection.run_sync(do_run_migrations)

    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
