"""Alembic environment for the homeboard database.

The database URL comes from application settings (DATABASE_URL), unless
sqlalchemy.url is set in alembic.ini or passed with -x.
"""

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context

from homeboard.core.config import settings
from homeboard.db.base import Base
from homeboard.models import calendar_credential  # noqa: F401  registers the table

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def get_url() -> str:
    """Resolve the database URL from alembic config or settings."""
    return config.get_main_option("sqlalchemy.url") or settings.DATABASE_URL


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations against a live connection."""
    connectable = create_engine(get_url(), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
