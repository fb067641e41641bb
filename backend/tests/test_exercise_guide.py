from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

from fittrack.cache.guide_cache import GuideCache
from fittrack.config import get_settings
from fittrack.exercise_guide import (
    ExerciseDetailLookup,
    ExerciseGuide,
    ExerciseGuideProvider,
    opens_guide,
)
from fittrack.schedule_catalog import ActionTask, find_task


class FakeCompletions:
    def __init__(self, content: Any = None, error: Optional[Exception] = None) -> None:
        self.content = content
        self.error = error
        self.calls: List[dict] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClient:
    def __init__(self, completions: FakeCompletions) -> None:
        self.chat = SimpleNamespace(completions=completions)


def _provider(completions: FakeCompletions) -> ExerciseGuideProvider:
    return ExerciseGuideProvider(client=FakeClient(completions), cache=GuideCache())


def _workout_task(task_id: str = "w-w-5") -> ActionTask:
    task = find_task(task_id)
    assert isinstance(task, ActionTask)
    return task


def test_successful_lookup_is_parsed_and_cached() -> None:
    completions = FakeCompletions(
        json.dumps(
            {
                "description": "Lift the hips off the floor by squeezing the glutes.",
                "tips": ["Drive through the heels", "Keep ribs down", "Avoid arching the lower back"],
                "searchQuery": "glute bridge form",
            }
        )
    )
    provider = _provider(completions)

    guide = asyncio.run(provider.fetch("Glute Bridge"))
    again = asyncio.run(provider.fetch("  glute bridge "))

    assert guide.is_fallback is False
    assert guide.tips[0] == "Drive through the heels"
    assert guide.video_search_url == "https://www.youtube.com/results?search_query=glute%20bridge%20form"
    assert again == guide
    assert len(completions.calls) == 1
    assert completions.calls[0]["response_format"] == {"type": "json_object"}
    assert completions.calls[0]["model"] == get_settings().exercise_model


def test_missing_credential_returns_configuration_fallback(events) -> None:
    provider = ExerciseGuideProvider(cache=GuideCache())
    guide = asyncio.run(provider.fetch("Plank"))

    assert guide.is_fallback is True
    assert guide.description.startswith("API key not configured")
    assert guide.tips == ["Check your environment variables."]
    assert guide.search_query == "Plank"
    assert events[-1].name == "exercise_guide_fallback"
    assert events[-1].payload["reason"] == "missing_credential"


def test_malformed_answer_returns_unavailable_fallback(events) -> None:
    provider = _provider(FakeCompletions("this is not json"))
    guide = asyncio.run(provider.fetch("Crunch"))

    assert guide.is_fallback is True
    assert guide.description == "Could not retrieve AI instructions at this time."
    assert guide.tips == ["Try searching manually below."]
    assert guide.search_query == "Crunch exercise tutorial"
    assert events[-1].payload["reason"] == "invalid_payload"


@pytest.mark.parametrize("content", [None, "", "[]", '{"tips": "not a list"}'])
def test_unusable_payloads_fall_back(content: Any) -> None:
    guide = asyncio.run(_provider(FakeCompletions(content)).fetch("Crunch"))
    assert guide.is_fallback is True


def test_transport_error_returns_unavailable_fallback(events) -> None:
    provider = _provider(FakeCompletions(error=ConnectionError("network down")))
    guide = asyncio.run(provider.fetch("Resistance Band Row"))

    assert guide.is_fallback is True
    assert guide.search_query == "Resistance Band Row exercise tutorial"
    assert events[-1].payload["reason"] == "provider_error"


def test_fallbacks_are_not_cached() -> None:
    completions = FakeCompletions(error=ConnectionError("network down"))
    provider = _provider(completions)
    asyncio.run(provider.fetch("Plank"))
    asyncio.run(provider.fetch("Plank"))
    assert len(completions.calls) == 2


def test_partial_payload_gets_defaults() -> None:
    guide = asyncio.run(_provider(FakeCompletions("{}")).fetch("Plank"))

    assert guide.is_fallback is False
    assert guide.description == "Perform Plank with proper form."
    assert guide.tips == []
    assert guide.search_query == "Plank exercise tutorial"


def test_video_search_url_escapes_the_query() -> None:
    guide = ExerciseGuide(description="", search_query="squat & press / 3x10")
    assert guide.video_search_url == (
        "https://www.youtube.com/results?search_query=squat%20%26%20press%20%2F%203x10"
    )
    assert "video_search_url" in guide.model_dump()


def test_only_workout_tasks_with_an_exercise_open_a_guide() -> None:
    assert opens_guide(_workout_task()) is True
    assert opens_guide(_workout_task("su-w-1")) is False
    diet = find_task("m-l-1")
    assert isinstance(diet, ActionTask)
    assert opens_guide(diet) is False


class SlowProvider:
    """Provider double that ignores cancellation so late results can be observed."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.requested: List[str] = []

    async def fetch(self, exercise_name: str) -> ExerciseGuide:
        self.requested.append(exercise_name)
        try:
            await self.release.wait()
        except asyncio.CancelledError:
            pass
        return ExerciseGuide(description=f"{exercise_name} guide", search_query=exercise_name)


def test_lookup_publishes_result_for_the_open_task() -> None:
    async def scenario() -> None:
        provider = SlowProvider()
        lookup = ExerciseDetailLookup(provider)  # type: ignore[arg-type]
        pending = lookup.open(_workout_task())
        assert pending is not None
        assert lookup.current_key == "w-w-5"
        provider.release.set()
        guide = await pending
        assert guide is not None and guide.description == "Glute Bridge guide"
        assert lookup.result == guide

    asyncio.run(scenario())


def test_closing_discards_a_late_result() -> None:
    async def scenario() -> None:
        provider = SlowProvider()
        lookup = ExerciseDetailLookup(provider)  # type: ignore[arg-type]
        pending = lookup.open(_workout_task())
        assert pending is not None
        await asyncio.sleep(0)
        lookup.close()
        assert await pending is None
        assert lookup.result is None
        assert lookup.current_key is None

    asyncio.run(scenario())


def test_switching_tasks_keeps_only_the_latest_result() -> None:
    async def scenario() -> None:
        provider = SlowProvider()
        lookup = ExerciseDetailLookup(provider)  # type: ignore[arg-type]
        first = lookup.open(_workout_task("w-w-5"))
        await asyncio.sleep(0)
        second = lookup.open(_workout_task("th-w-5"))
        assert first is not None and second is not None
        provider.release.set()
        assert await first is None
        latest = await second
        assert latest is not None and latest.description == "Plank guide"
        assert lookup.result == latest
        assert provider.requested == ["Glute Bridge", "Plank"]

    asyncio.run(scenario())


def test_non_guide_task_does_not_start_a_lookup() -> None:
    async def scenario() -> None:
        lookup = ExerciseDetailLookup(SlowProvider())  # type: ignore[arg-type]
        diet = find_task("m-l-1")
        assert isinstance(diet, ActionTask)
        assert lookup.open(diet) is None
        assert lookup.current_key is None

    asyncio.run(scenario())


def test_guide_cache_normalizes_names_and_returns_copies() -> None:
    cache = GuideCache()
    guide = ExerciseGuide(description="Hold a straight line.", tips=["Brace"], search_query="plank")
    cache.set("  Plank ", guide)

    cached = cache.get("plank")
    assert cached == guide
    assert cached is not None
    cached.tips.append("mutated")
    assert cache.get("PLANK").tips == ["Brace"]

    cache.clear()
    assert cache.get("plank") is None
    with pytest.raises(ValueError):
        cache.get("   ")
