"""Exercise instruction lookup backed by an OpenAI chat model.

The provider never raises: a missing credential, a malformed answer or a
transport error all turn into a fallback guide. ``ExerciseDetailLookup`` ties
one in-flight lookup to the task currently on screen and drops results that
arrive after the view moved on.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, List, Optional
from urllib.parse import quote

from openai import AsyncOpenAI
from pydantic import BaseModel, Field, ValidationError, computed_field

from .cache import guide_cache
from .cache.guide_cache import GuideCache
from .config import Settings, get_settings
from .schedule_catalog import ActionTask
from .telemetry import emit_event

logger = logging.getLogger(__name__)

YOUTUBE_SEARCH_URL = "https://www.youtube.com/results?search_query="

EXERCISE_GUIDE_INSTRUCTIONS = (
    "You are a concise strength and mobility coach. Given an exercise name, return a short, "
    "beginner-friendly guide as a JSON object with keys: description (1-2 sentence summary of the "
    "movement), tips (array of three strings, the last one a common mistake to avoid) and "
    "searchQuery (the best YouTube search query for the exercise). Output only JSON."
)


class ExerciseGuide(BaseModel):
    description: str
    tips: List[str] = Field(default_factory=list)
    search_query: str
    is_fallback: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def video_search_url(self) -> str:
        return YOUTUBE_SEARCH_URL + quote(self.search_query, safe="")


class ExerciseGuidePayload(BaseModel):
    description: Optional[str] = None
    tips: Optional[List[str]] = None
    searchQuery: Optional[str] = None


def missing_credential_guide(exercise_name: str) -> ExerciseGuide:
    return ExerciseGuide(
        description="API key not configured. Please add your OpenAI API key to view details.",
        tips=["Check your environment variables."],
        search_query=exercise_name,
        is_fallback=True,
    )


def unavailable_guide(exercise_name: str) -> ExerciseGuide:
    return ExerciseGuide(
        description="Could not retrieve AI instructions at this time.",
        tips=["Try searching manually below."],
        search_query=f"{exercise_name} exercise tutorial",
        is_fallback=True,
    )


def _coerce_payload(content: Any) -> ExerciseGuidePayload:
    if isinstance(content, ExerciseGuidePayload):
        return content
    if isinstance(content, dict):
        return ExerciseGuidePayload.model_validate(content)
    if isinstance(content, str):
        if not content.strip():
            raise ValueError("Empty response from the exercise guide model.")
        return ExerciseGuidePayload.model_validate(json.loads(content))
    raise TypeError(f"Unsupported exercise guide payload type: {type(content).__name__}")


def _guide_from_payload(exercise_name: str, payload: ExerciseGuidePayload) -> ExerciseGuide:
    tips = [tip.strip() for tip in payload.tips or [] if isinstance(tip, str) and tip.strip()]
    return ExerciseGuide(
        description=(payload.description or "").strip() or f"Perform {exercise_name} with proper form.",
        tips=tips,
        search_query=(payload.searchQuery or "").strip() or f"{exercise_name} exercise tutorial",
    )


class ExerciseGuideProvider:
    """Fetches exercise guides from the chat completions API with caching and fallbacks."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        client: Any = None,
        cache: Optional[GuideCache] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client
        self._cache = cache if cache is not None else guide_cache

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._settings.openai_api_key,
                timeout=self._settings.exercise_timeout,
            )
        return self._client

    async def fetch(self, exercise_name: str) -> ExerciseGuide:
        name = exercise_name.strip()
        if not name:
            return unavailable_guide(exercise_name)

        cached = self._cache.get(name)
        if cached is not None:
            return cached

        if not self._settings.openai_api_key and self._client is None:
            emit_event("exercise_guide_fallback", exercise=name, reason="missing_credential")
            return missing_credential_guide(name)

        try:
            response = await self._get_client().chat.completions.create(
                model=self._settings.exercise_model,
                messages=[
                    {"role": "system", "content": EXERCISE_GUIDE_INSTRUCTIONS},
                    {"role": "user", "content": f'Provide a brief instructional guide for the exercise: "{name}".'},
                ],
                response_format={"type": "json_object"},
                temperature=0,
            )
            payload = _coerce_payload(response.choices[0].message.content)
            guide = _guide_from_payload(name, payload)
            self._cache.set(name, guide)
            return guide
        except asyncio.CancelledError:
            raise
        except (ValidationError, ValueError, TypeError, IndexError, AttributeError) as exc:
            logger.warning("Exercise guide model returned an invalid payload for %s: %s", name, exc)
            reason = "invalid_payload"
        except Exception as exc:  # noqa: BLE001
            logger.exception("Exercise guide lookup failed for %s", name, exc_info=exc)
            reason = "provider_error"

        emit_event("exercise_guide_fallback", exercise=name, reason=reason)
        return unavailable_guide(name)


def opens_guide(task: ActionTask) -> bool:
    return task.category == "workout" and bool(task.exercise_ref)


class ExerciseDetailLookup:
    """Single-slot lookup bound to the task whose details are on screen."""

    def __init__(self, provider: ExerciseGuideProvider) -> None:
        self._provider = provider
        self._current_key: Optional[str] = None
        self._generation = 0
        self._pending: Optional[asyncio.Task[Optional[ExerciseGuide]]] = None
        self._result: Optional[ExerciseGuide] = None

    @property
    def current_key(self) -> Optional[str]:
        return self._current_key

    @property
    def result(self) -> Optional[ExerciseGuide]:
        return self._result

    def open(self, task: ActionTask) -> Optional[asyncio.Task[Optional[ExerciseGuide]]]:
        """Start a lookup for ``task``; must be called from a running event loop."""
        if not opens_guide(task):
            return None
        self.close()
        self._current_key = task.id
        self._pending = asyncio.create_task(
            self._run(task.id, self._generation, task.exercise_ref or "")
        )
        return self._pending

    def close(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        self._current_key = None
        self._result = None
        self._generation += 1

    async def _run(self, key: str, generation: int, exercise_name: str) -> Optional[ExerciseGuide]:
        guide = await self._provider.fetch(exercise_name)
        if generation != self._generation or key != self._current_key:
            logger.debug("Discarding stale exercise guide for %s", key)
            return None
        self._result = guide
        return guide


__all__ = [
    "ExerciseDetailLookup",
    "ExerciseGuide",
    "ExerciseGuideProvider",
    "missing_credential_guide",
    "opens_guide",
    "unavailable_guide",
]
