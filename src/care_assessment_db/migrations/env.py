"""Alembic environment.

Uses the synchronous ``get_sync_url()`` helper because Alembic's migration
runner is synchronous.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from care_assessment_db.config import get_sync_url
from care_assessment_db.models.base import Base

# Register every table on Base.metadata for autogenerate
import care_assessment_db.models.assessment  # noqa: F401
import care_assessment_db.models.draft  # noqa: F401

config = context.config
config.set_main_option("sqlalchemy.url", get_sync_url())

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL without connecting."""
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
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
