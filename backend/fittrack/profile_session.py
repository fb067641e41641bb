"""Profile registry and the logged-in/logged-out session state machine."""

from __future__ import annotations

import json
import logging
import threading
from typing import List, Literal, Optional

from pydantic import BaseModel

from .achievements import AchievementStatus, evaluate_achievements
from .aggregator import lifetime_total
from .kv_store import KeyValueStore
from .progress_store import ProgressStore, parse_progress
from .telemetry import emit_event

logger = logging.getLogger(__name__)


class NotLoggedInError(RuntimeError):
    """Raised when progress is requested while no profile is active."""


class SessionState(BaseModel):
    state: Literal["logged_out", "logged_in"]
    active_profile: Optional[str] = None
    show_profile_creation: bool = False


class ProfileSummary(BaseModel):
    name: str
    xp: int


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Profile name cannot be empty.")
    return cleaned


def _parse_registry(raw: Optional[str]) -> List[str]:
    if raw is None:
        return []
    try:
        payload = json.loads(raw)
    except ValueError:
        logger.warning("Discarding malformed profile registry payload")
        return []
    if not isinstance(payload, list):
        logger.warning("Discarding profile registry payload that is not a list")
        return []
    names: List[str] = []
    for entry in payload:
        if isinstance(entry, str) and entry.strip() and entry.strip() not in names:
            names.append(entry.strip())
    return names


class ProfileSessionManager:
    """Owns the profile registry, the active-profile pointer and the active progress store.

    Exactly one progress store is live at a time and it always belongs to the
    active profile; switching profiles builds a fresh store from persistence.
    """

    def __init__(self, kv_store: KeyValueStore) -> None:
        self._kv = kv_store
        self._lock = threading.RLock()
        self._registry: List[str] = _parse_registry(self._read(kv_store.registry_key()))
        self._active: Optional[str] = None
        self._progress: Optional[ProgressStore] = None

        pointer = self._read(kv_store.active_profile_key())
        if pointer and pointer in self._registry:
            self._activate(pointer)
        elif pointer:
            logger.info("Ignoring active profile pointer %r; profile is not registered", pointer)

    # ------------------------------------------------------------------
    # Persistence helpers (best effort, never raise)
    # ------------------------------------------------------------------

    def _read(self, key: str) -> Optional[str]:
        try:
            return self._kv.get(key)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to read %s", key)
            return None

    def _write(self, key: str, value: str) -> None:
        try:
            self._kv.set(key, value)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to persist %s: %s", key, exc)

    def _remove(self, key: str) -> None:
        try:
            self._kv.remove(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to remove %s: %s", key, exc)

    def _activate(self, name: str) -> None:
        self._active = name
        self._progress = ProgressStore.open(name, self._kv.progress_key(name), self._kv)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def registry(self) -> List[str]:
        return list(self._registry)

    @property
    def active_profile(self) -> Optional[str]:
        return self._active

    @property
    def is_logged_in(self) -> bool:
        return self._active is not None

    def state(self) -> SessionState:
        if self._active is None:
            return SessionState(state="logged_out", show_profile_creation=not self._registry)
        return SessionState(state="logged_in", active_profile=self._active)

    @property
    def progress(self) -> ProgressStore:
        if self._progress is None:
            raise NotLoggedInError("No profile is logged in.")
        return self._progress

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def login(self, name: str) -> ProgressStore:
        cleaned = _clean_name(name)
        with self._lock:
            if cleaned not in self._registry:
                self._registry.append(cleaned)
                self._write(self._kv.registry_key(), json.dumps(self._registry, ensure_ascii=False))
                emit_event("profile_created", profile=cleaned)
            self._write(self._kv.active_profile_key(), cleaned)
            self._activate(cleaned)
            emit_event("profile_login", profile=cleaned)
            return self.progress

    def logout(self) -> None:
        with self._lock:
            if self._active is None:
                return
            previous = self._active
            self._active = None
            self._progress = None
            self._remove(self._kv.active_profile_key())
            emit_event("profile_logout", profile=previous)

    def delete_profile(self, name: str) -> bool:
        """Remove a profile and its progress; logs out first when it is the active one."""
        cleaned = _clean_name(name)
        with self._lock:
            if cleaned == self._active:
                self.logout()
            registered = cleaned in self._registry
            if registered:
                self._registry.remove(cleaned)
                self._write(self._kv.registry_key(), json.dumps(self._registry, ensure_ascii=False))
            self._remove(self._kv.progress_key(cleaned))
            emit_event("profile_deleted", profile=cleaned, registered=registered)
            return registered

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def toggle(self, week_id: str, task_id: str) -> bool:
        """Flip one flag; the write completes before another mutation can start."""
        with self._lock:
            store = self.progress
            before = evaluate_achievements(lifetime_total(store.record)).current
            value = store.toggle(week_id, task_id)
            total = lifetime_total(store.record)
        emit_event(
            "task_toggled",
            profile=store.profile_name,
            week_id=week_id,
            task_id=task_id,
            completed=value,
            total=total,
        )
        after = evaluate_achievements(total).current
        if after.threshold > before.threshold:
            emit_event("tier_unlocked", profile=store.profile_name, tier=after.title, total=total)
        return value

    def lifetime_total(self) -> int:
        return lifetime_total(self.progress.record)

    def achievements(self) -> AchievementStatus:
        return evaluate_achievements(self.lifetime_total())

    def profile_xp(self, name: str) -> int:
        """Lifetime total read straight from persistence, for the profile picker."""
        if name == self._active and self._progress is not None:
            return lifetime_total(self._progress.record)
        return lifetime_total(parse_progress(self._read(self._kv.progress_key(name))))

    def list_profiles(self) -> List[ProfileSummary]:
        return [ProfileSummary(name=name, xp=self.profile_xp(name)) for name in self._registry]


__all__ = [
    "NotLoggedInError",
    "ProfileSessionManager",
    "ProfileSummary",
    "SessionState",
]
