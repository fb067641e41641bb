"""Simple in-memory cache for exercise guides."""

from __future__ import annotations

from typing import Any, Dict, Optional


def _normalize_exercise(name: str) -> str:
    normalized = " ".join(name.split()).lower()
    if not normalized:
        raise ValueError("Exercise name cannot be empty when caching guides.")
    return normalized


class GuideCache:
    """Process-local cache of provider answers keyed by exercise name."""

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def get(self, exercise_name: str) -> Optional[Any]:
        guide = self._entries.get(_normalize_exercise(exercise_name))
        if guide is None:
            return None
        return guide.model_copy(deep=True)

    def set(self, exercise_name: str, guide: Any) -> None:
        self._entries[_normalize_exercise(exercise_name)] = guide.model_copy(deep=True)

    def clear(self) -> None:
        self._entries.clear()


guide_cache = GuideCache()

__all__ = ["GuideCache", "guide_cache"]
