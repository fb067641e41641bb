"""Alembic environment for the fittrack schema."""

from __future__ import annotations

import os

from alembic import context
from sqlalchemy import engine_from_config, pool

from fittrack.db import models  # noqa: F401
from fittrack.db.base import Base

config = context.config
target_metadata = Base.metadata


def _database_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if not url or url == "%(FITTRACK_DATABASE_URL)s":
        url = os.getenv("FITTRACK_DATABASE_URL", "")
    if not url:
        raise RuntimeError("FITTRACK_DATABASE_URL must be set before running migrations.")
    return url


def run_migrations_offline() -> None:
    context.configure(url=_database_url(), target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = _database_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
