"""
alembic/env.py

Migration environment for the rollup report and mapping preset tables.

URL priority: ``-x db_url=...``, then ALEMBIC_DATABASE_URL, then the
application's own database settings.
"""

from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from db.base import Base
from db.config import load_env_files, normalize_postgres_url, resolve_database_url
from db.models import (  # noqa: F401 - imports trigger Base.metadata registration
    MappingPresetEntry,
    RollupReportRecord,
)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Only tables owned by this project take part in autogenerate.
OWNED_TABLES = frozenset(target_metadata.tables)


def _migration_url() -> str:
    load_env_files()

    override = context.get_x_argument(as_dictionary=True).get("db_url")
    url = override or os.getenv("ALEMBIC_DATABASE_URL") or resolve_database_url()
    url = normalize_postgres_url(url)
    if not url.startswith("postgresql"):
        raise RuntimeError("Migrations support PostgreSQL URLs only.")
    return url


def _include_object(obj, name, type_, reflected, compare_to) -> bool:
    if type_ == "table":
        return name in OWNED_TABLES
    return True


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        include_object=_include_object,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(
        url=_migration_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _migration_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
