# alembic/env.py
"""
Alembic environment for the salon booking engine.

The target database is sqlalchemy.url when one is configured (tests pass
one explicitly), otherwise the application's DATABASE_URL setting.
"""

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context
from salonbook.core.config import settings
from salonbook.database import Base
import salonbook.models  # noqa: F401  registers every table on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def get_url() -> str:
    return config.get_main_option("sqlalchemy.url") or settings.get_database_url()


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    url = get_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = get_url()
    connectable = create_engine(url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
