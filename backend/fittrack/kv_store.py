"""Namespaced string key-value persistence with JSON-file and database backends."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from .config import get_settings
from .db.session import create_schema, session_scope
from .repositories.key_values import key_values

logger = logging.getLogger(__name__)

LEGACY_FILENAME = "key_value_store.json"


class _LegacyKeyValueStore:
    """JSON-file store kept on the local device; the default offline mode."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def _load_unlocked(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except (OSError, ValueError):
            logger.exception("Failed to read key-value file %s; treating it as empty", self._path)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring key-value file %s with non-object payload", self._path)
            return {}
        return {str(key): value for key, value in raw.items() if isinstance(value, str)}

    def _write_unlocked(self, entries: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as handle:
            json.dump(entries, handle, indent=2, ensure_ascii=False)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load_unlocked().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            entries = self._load_unlocked()
            entries[key] = value
            self._write_unlocked(entries)

    def remove(self, key: str) -> bool:
        with self._lock:
            entries = self._load_unlocked()
            if key not in entries:
                return False
            del entries[key]
            self._write_unlocked(entries)
            return True

    def items(self) -> Dict[str, str]:
        with self._lock:
            return self._load_unlocked()


class _DatabaseKeyValueStore:
    """SQLAlchemy-backed store mirroring the JSON-file API."""

    def __init__(self) -> None:
        self._schema_ready = False

    def _ensure_schema(self) -> None:
        if not self._schema_ready:
            create_schema()
            self._schema_ready = True

    def get(self, key: str) -> Optional[str]:
        self._ensure_schema()
        with session_scope(commit=False) as session:
            return key_values.get(session, key)

    def set(self, key: str, value: str) -> None:
        self._ensure_schema()
        with session_scope() as session:
            key_values.set(session, key, value)

    def remove(self, key: str) -> bool:
        self._ensure_schema()
        with session_scope() as session:
            return key_values.remove(session, key)

    def items(self) -> Dict[str, str]:
        self._ensure_schema()
        with session_scope(commit=False) as session:
            return key_values.items(session)


class KeyValueStore:
    """Facade that delegates to database or JSON-file persistence based on configuration."""

    def __init__(self, legacy_path: Path | None = None, mode: str | None = None) -> None:
        settings = get_settings()
        self._mode = mode or settings.persistence_mode
        self._namespace = settings.storage_namespace
        self._db_store = _DatabaseKeyValueStore()
        self._legacy_store = _LegacyKeyValueStore(legacy_path or settings.data_dir / LEGACY_FILENAME)

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def namespace(self) -> str:
        return self._namespace

    def _call(self, method: str, *args: Any) -> Any:
        if self._mode == "legacy":
            return getattr(self._legacy_store, method)(*args)
        try:
            return getattr(self._db_store, method)(*args)
        except Exception as exc:  # noqa: BLE001
            if self._mode == "hybrid":
                logger.warning(
                    "Database persistence error during %s; falling back to legacy store: %s",
                    method,
                    exc,
                )
                return getattr(self._legacy_store, method)(*args)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._call("get", key)

    def set(self, key: str, value: str) -> None:
        self._call("set", key, value)

    def remove(self, key: str) -> bool:
        return bool(self._call("remove", key))

    def items(self) -> Dict[str, str]:
        return self._call("items")

    # ------------------------------------------------------------------
    # Key layout
    # ------------------------------------------------------------------

    def active_profile_key(self) -> str:
        return f"{self._namespace}_active_user"

    def registry_key(self) -> str:
        return f"{self._namespace}_users_list"

    def progress_key(self, profile_name: str) -> str:
        return f"{self._namespace}_progress_{profile_name}"


__all__ = ["KeyValueStore", "LEGACY_FILENAME"]
