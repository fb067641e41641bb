from __future__ import annotations

import pytest

from fittrack.schedule_catalog import (
    ActionTask,
    HeaderTask,
    find_month,
    find_task,
    find_week,
    get_calendar,
    get_weekly_template,
    iter_action_tasks,
    month_for_week,
)


def test_weekly_template_covers_seven_days_with_unique_task_ids() -> None:
    template = get_weekly_template()
    assert [day.id for day in template] == ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]

    ids = [task.id for day in template for task in day.tasks()]
    assert len(ids) == len(set(ids))


def test_headers_are_never_countable() -> None:
    monday = get_weekly_template()[0]
    countable = list(iter_action_tasks(monday))
    assert len(countable) == 10
    assert all(isinstance(task, ActionTask) for task in countable)
    assert isinstance(monday.workout[0], HeaderTask)
    assert "m-w-header" not in {task.id for task in countable}


def test_calendar_spans_thirteen_contiguous_months() -> None:
    months = get_calendar()
    assert len(months) == 13
    assert months[0].id == "2025-12"
    assert months[0].title == "December 2025"
    assert months[1].id == "2026-01"
    assert months[-1].id == "2026-12"
    assert months[-1].title == "December 2026"


def test_every_month_has_four_fixed_weeks() -> None:
    for month in get_calendar():
        assert [week.id for week in month.weeks] == [f"{month.id}-w{n}" for n in range(1, 5)]

    march = find_month("2026-03")
    assert [week.date_range for week in march.weeks] == [
        "3/1 – 3/7",
        "3/8 – 3/14",
        "3/15 – 3/21",
        "3/22 – 3/28",
    ]
    assert march.weeks[2].title == "Week 3"


def test_week_lookup_helpers() -> None:
    week = find_week("2026-02-w2")
    assert week.title == "Week 2"
    month = month_for_week("2026-02-w2")
    assert month is not None and month.title == "February 2026"
    assert month_for_week("2031-01-w1") is None

    with pytest.raises(LookupError):
        find_week("2026-02-w5")
    with pytest.raises(LookupError):
        find_month("2024-01")


def test_find_task_returns_exercise_reference() -> None:
    task = find_task("w-w-5")
    assert isinstance(task, ActionTask)
    assert task.category == "workout"
    assert task.exercise_ref == "Glute Bridge"
    assert find_task("not-a-task") is None
