"""Alembic environment for the vendorsync catalog schema."""

from __future__ import annotations

from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool

from vendorsync.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from vendorsync.config import get_database_config

config = context.config

if config.config_file_name is not None and Path(config.config_file_name).suffix == ".ini":
    fileConfig(config.config_file_name)

start_mappers()

target_metadata = mapper_registry.metadata
# SQLite cannot ALTER constraints in place
_COMPARE_OPTIONS = {"render_as_batch": True, "compare_type": True}


def _migrate(**configure_args: object) -> None:
    context.configure(target_metadata=target_metadata, **_COMPARE_OPTIONS, **configure_args)
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    _migrate(
        url=config.get_main_option("sqlalchemy.url") or get_database_config().uri,
        literal_binds=True,
    )
elif (shared := config.attributes.get("connection")) is not None:
    # upgrade_head(engine=...) hands over an open connection
    _migrate(connection=shared)
else:
    url = config.get_main_option("sqlalchemy.url") or get_database_config().uri
    engine = create_engine(url, poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as connection:
            _migrate(connection=connection)
    finally:
        engine.dispose()
