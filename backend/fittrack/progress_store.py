"""Per-profile completion record and its persistence hooks."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Dict, Iterator, Optional, Tuple

from pydantic import Field, RootModel, ValidationError

from .telemetry import emit_event

if TYPE_CHECKING:
    from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

WeekProgress = Dict[str, bool]


class ProgressRecord(RootModel[Dict[str, Dict[str, bool]]]):
    """Mapping of week id -> task id -> completed flag."""

    root: Dict[str, Dict[str, bool]] = Field(default_factory=dict)

    def week(self, week_id: str) -> WeekProgress:
        return dict(self.root.get(week_id, {}))

    def flags(self) -> Iterator[Tuple[str, str, bool]]:
        for week_id, tasks in self.root.items():
            for task_id, done in tasks.items():
                yield week_id, task_id, done


def parse_progress(raw: Optional[str]) -> ProgressRecord:
    """Decode a persisted progress blob, recovering to an empty record when malformed."""
    if raw is None or not raw.strip():
        return ProgressRecord()
    try:
        return ProgressRecord.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as exc:
        logger.warning("Discarding malformed progress payload: %s", exc)
        return ProgressRecord()


def serialize_progress(record: ProgressRecord) -> str:
    return json.dumps(record.model_dump(), sort_keys=True, separators=(",", ":"))


class ProgressStore:
    """Completion flags for one profile, written through to the key-value store on toggle."""

    def __init__(
        self,
        profile_name: str,
        storage_key: str,
        kv_store: "KeyValueStore",
        record: Optional[ProgressRecord] = None,
    ) -> None:
        self._profile_name = profile_name
        self._storage_key = storage_key
        self._kv_store = kv_store
        self._record = record.model_copy(deep=True) if record is not None else ProgressRecord()

    @classmethod
    def open(cls, profile_name: str, storage_key: str, kv_store: "KeyValueStore") -> "ProgressStore":
        try:
            raw = kv_store.get(storage_key)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to read progress for %s; starting empty", profile_name)
            raw = None
        return cls(profile_name, storage_key, kv_store, parse_progress(raw))

    @staticmethod
    def load(raw: Optional[str]) -> ProgressRecord:
        return parse_progress(raw)

    @property
    def profile_name(self) -> str:
        return self._profile_name

    @property
    def record(self) -> ProgressRecord:
        return self._record.model_copy(deep=True)

    def is_complete(self, week_id: str, task_id: str) -> bool:
        return bool(self._record.root.get(week_id, {}).get(task_id, False))

    def week(self, week_id: str) -> WeekProgress:
        return self._record.week(week_id)

    def toggle(self, week_id: str, task_id: str) -> bool:
        """Flip one flag and persist; returns the new value."""
        week = self._record.root.setdefault(week_id, {})
        value = not week.get(task_id, False)
        week[task_id] = value
        self._persist()
        return value

    def serialize(self) -> str:
        return serialize_progress(self._record)

    def _persist(self) -> None:
        try:
            self._kv_store.set(self._storage_key, self.serialize())
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to persist progress for %s: %s", self._profile_name, exc)
            emit_event("progress_persist_failed", profile=self._profile_name, error=str(exc))


__all__ = [
    "ProgressRecord",
    "ProgressStore",
    "WeekProgress",
    "parse_progress",
    "serialize_progress",
]
