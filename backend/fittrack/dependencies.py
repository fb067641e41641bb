"""Process-wide collaborators shared by the API routers."""

from __future__ import annotations

from typing import Optional

from .exercise_guide import ExerciseGuideProvider
from .kv_store import KeyValueStore
from .profile_session import ProfileSessionManager

_kv_store: Optional[KeyValueStore] = None
_session_manager: Optional[ProfileSessionManager] = None
_guide_provider: Optional[ExerciseGuideProvider] = None


def get_kv_store() -> KeyValueStore:
    global _kv_store
    if _kv_store is None:
        _kv_store = KeyValueStore()
    return _kv_store


def get_session_manager() -> ProfileSessionManager:
    """Session state resolved once per process from the persisted active-profile pointer."""
    global _session_manager
    if _session_manager is None:
        _session_manager = ProfileSessionManager(get_kv_store())
    return _session_manager


def get_guide_provider() -> ExerciseGuideProvider:
    global _guide_provider
    if _guide_provider is None:
        _guide_provider = ExerciseGuideProvider()
    return _guide_provider


def reset_dependencies() -> None:
    global _kv_store, _session_manager, _guide_provider
    _kv_store = None
    _session_manager = None
    _guide_provider = None


__all__ = [
    "get_guide_provider",
    "get_kv_store",
    "get_session_manager",
    "reset_dependencies",
]
