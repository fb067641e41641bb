from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator, List, Optional

import pytest

from fittrack.cache import guide_cache
from fittrack.config import get_settings
from fittrack.db.session import dispose_engine
from fittrack.dependencies import reset_dependencies
from fittrack.telemetry import TelemetryEvent, clear_listeners, register_listener


class MemoryKeyValueStore:
    """In-memory stand-in for the device key-value store."""

    def __init__(self, namespace: str = "fitness") -> None:
        self.namespace = namespace
        self.entries: Dict[str, str] = {}
        self.fail_writes = False
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.writes += 1
        self.entries[key] = value

    def remove(self, key: str) -> bool:
        if self.fail_writes:
            raise OSError("disk full")
        return self.entries.pop(key, None) is not None

    def active_profile_key(self) -> str:
        return f"{self.namespace}_active_user"

    def registry_key(self) -> str:
        return f"{self.namespace}_users_list"

    def progress_key(self, profile_name: str) -> str:
        return f"{self.namespace}_progress_{profile_name}"


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("FITTRACK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("FITTRACK_PERSISTENCE_MODE", "legacy")
    monkeypatch.delenv("FITTRACK_DATABASE_URL", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    get_settings.cache_clear()
    reset_dependencies()
    guide_cache.clear()
    clear_listeners()
    dispose_engine()
    yield
    dispose_engine()
    clear_listeners()
    guide_cache.clear()
    reset_dependencies()
    get_settings.cache_clear()


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def events() -> List[TelemetryEvent]:
    captured: List[TelemetryEvent] = []
    register_listener(captured.append)
    return captured
