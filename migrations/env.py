"""Alembic environment for the async marketplace schema.

The database URL always comes from ``Settings``; importing ``b2bvendas.domain``
registers every model on ``Base.metadata`` for autogenerate.
"""

import asyncio
import logging

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

import b2bvendas.domain  # noqa: F401 - registers the models
from b2bvendas.core.config import get_settings
from b2bvendas.infrastructure.database import Base

config = context.config
logger = logging.getLogger(__name__)

target_metadata = Base.metadata


def _configure(**options: object) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=get_settings().database_config.database_url.startswith(
            "sqlite"
        ),
        **options,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL to the script output without connecting."""
    logger.info("Running migrations in offline mode")
    _configure(
        url=get_settings().database_config.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure(connection=connection)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    logger.info("Running migrations in online mode with async engine")
    db_config = get_settings().database_config

    connectable = async_engine_from_config(
        {"sqlalchemy.url": db_config.database_url, "sqlalchemy.echo": db_config.echo},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
