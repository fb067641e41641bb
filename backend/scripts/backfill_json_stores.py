"""Copy the on-device JSON key-value file into the configured database."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Optional

from fittrack.config import get_settings
from fittrack.db.session import create_schema, session_scope
from fittrack.kv_store import LEGACY_FILENAME
from fittrack.logging_config import configure_logging
from fittrack.repositories.key_values import key_values

logger = logging.getLogger("fittrack.backfill")


def _load_entries(path: Path) -> Dict[str, str]:
    with path.open(encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return {key: value for key, value in payload.items() if isinstance(value, str)}


def backfill_key_values(path: Path, *, overwrite: bool = False) -> int:
    if not path.exists():
        logger.info("No legacy key-value file found at %s", path)
        return 0
    entries = _load_entries(path)
    create_schema()
    imported = 0
    with session_scope() as session:
        for key, value in entries.items():
            if not overwrite and key_values.get(session, key) is not None:
                logger.info("Skipping %s; already present in the database", key)
                continue
            key_values.set(session, key, value)
            imported += 1
    logger.info("Imported %d key-value entries from %s", imported, path)
    return imported


def main(argv: Optional[list[str]] = None) -> int:
    configure_logging()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--path", type=Path, default=None, help="Legacy JSON file to import.")
    parser.add_argument("--overwrite", action="store_true", help="Replace keys that already exist.")
    args = parser.parse_args(argv)
    path = args.path or get_settings().data_dir / LEGACY_FILENAME
    try:
        backfill_key_values(path, overwrite=args.overwrite)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Backfill failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
