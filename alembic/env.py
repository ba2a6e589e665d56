"""Alembic environment for the exam-service schema.

DATABASE_URL comes from exam_service.core.config, the same source the
running service reads, so migrations and the app never disagree about
which database they talk to.  Migrations run synchronously (psycopg2);
the app itself uses asyncpg.
"""

from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context
from exam_service.core.config import SETTINGS
from exam_service.db.engine import Base

config = context.config

if SETTINGS.database_url:
    config.set_main_option(
        "sqlalchemy.url",
        SETTINGS.database_url.replace("postgresql+asyncpg", "postgresql"),
    )
elif not config.get_main_option("sqlalchemy.url"):
    raise RuntimeError("DATABASE_URL must be set to run migrations")

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Registers questions, exam_schedules, submissions and class_memberships
# on Base.metadata for autogenerate.
import exam_service.db.tables  # noqa: E402, F401

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL without a live database (``alembic upgrade head --sql``)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
