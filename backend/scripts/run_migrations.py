"""Upgrade the key-value schema once the configured database answers a probe.

Only needed for the ``database`` and ``hybrid`` persistence modes; the JSON
file store has no schema.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from fittrack.config import get_settings
from fittrack.logging_config import configure_logging

LOGGER = logging.getLogger("fittrack.migrations")
BACKEND_ROOT = Path(__file__).resolve().parent.parent
PLACEHOLDER_URL = "%(FITTRACK_DATABASE_URL)s"


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply fittrack database migrations.")
    parser.add_argument("--revision", default="head", help="Target revision (default: head).")
    parser.add_argument("--timeout", type=int, default=60, help="Seconds to wait for the database.")
    parser.add_argument("--poll-interval", type=float, default=2.0, help="Seconds between probes.")
    parser.add_argument(
        "--sql",
        action="store_true",
        help="Print the migration SQL instead of applying it.",
    )
    return parser.parse_args(argv)


def build_config(database_url: str) -> Config:
    config = Config(str(BACKEND_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(BACKEND_ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def resolve_database_url(explicit: Optional[str] = None) -> str:
    url = explicit or get_settings().database_url
    if not url or url == PLACEHOLDER_URL:
        raise RuntimeError("FITTRACK_DATABASE_URL must be set before running migrations.")
    return url


def wait_for_database(database_url: str, *, timeout: int, poll_interval: float) -> None:
    """Retry ``SELECT 1`` until it succeeds or ``timeout`` seconds have passed."""
    deadline = time.monotonic() + timeout
    engine = create_engine(database_url, pool_pre_ping=True)
    last_error: Optional[Exception] = None
    try:
        while time.monotonic() < deadline:
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                LOGGER.info("Database is reachable.")
                return
            except OperationalError as exc:
                last_error = exc
                LOGGER.warning("Database not ready yet: %s", exc)
            except SQLAlchemyError as exc:
                last_error = exc
                LOGGER.error("Database probe failed: %s", exc)
                break
            time.sleep(poll_interval)
    finally:
        engine.dispose()
    raise RuntimeError("Database did not become ready in time.") from last_error


def main(argv: Optional[list[str]] = None) -> int:
    configure_logging()
    args = parse_args(argv)
    try:
        database_url = resolve_database_url()
        config = build_config(database_url)
        if args.sql:
            command.upgrade(config, args.revision, sql=True)
            return 0
        wait_for_database(database_url, timeout=args.timeout, poll_interval=args.poll_interval)
        command.upgrade(config, args.revision)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Migration run failed: %s", exc)
        return 1
    LOGGER.info("Migrations applied up to %s.", args.revision)
    return 0


if __name__ == "__main__":
    sys.exit(main())
