"""
Alembic environment for the Business Nexus schema.

Migrations run synchronously, so any async driver in the configured URL is
swapped for its blocking counterpart.
"""
import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import engine_from_config, pool

from alembic import context

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Make the nexus package importable when alembic is run from backend/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from nexus.core.config import settings  # noqa: E402
from nexus.db.models import Base  # noqa: E402  registers users, requests, messages

target_metadata = Base.metadata

# Same resolution as the app (DATABASE_URL or DB_*, .env included), minus the async driver
config.set_main_option("sqlalchemy.url", settings.sync_database_url.replace("%", "%%"))


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
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
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
