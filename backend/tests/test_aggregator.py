from __future__ import annotations

from fittrack.aggregator import (
    day_percentage,
    lifetime_total,
    month_summary,
    total_countable_tasks,
    week_percentage,
)
from fittrack.progress_store import ProgressRecord
from fittrack.schedule_catalog import (
    ActionTask,
    DayTemplate,
    HeaderTask,
    find_month,
    get_weekly_template,
    iter_action_tasks,
)

WEEK = "2025-12-w1"


def _all_task_ids() -> list[str]:
    return [task.id for day in get_weekly_template() for task in iter_action_tasks(day)]


def _record(week_id: str, task_ids, done: bool = True) -> ProgressRecord:
    return ProgressRecord.model_validate({week_id: {task_id: done for task_id in task_ids}})


def test_weekly_template_has_thirty_five_countable_tasks() -> None:
    assert total_countable_tasks() == 35
    per_day = {day.id: len(list(iter_action_tasks(day))) for day in get_weekly_template()}
    assert per_day == {"mon": 10, "tue": 1, "wed": 8, "thu": 7, "fri": 1, "sat": 5, "sun": 3}


def test_empty_week_is_zero_percent() -> None:
    assert week_percentage(WEEK, ProgressRecord()) == 0


def test_full_week_is_exactly_one_hundred() -> None:
    record = _record(WEEK, _all_task_ids())
    assert week_percentage(WEEK, record) == 100


def test_one_missing_task_rounds_normally() -> None:
    ids = _all_task_ids()
    record = _record(WEEK, ids[:-1])
    # 34 of 35 is 97.14%
    assert week_percentage(WEEK, record) == 97


def test_large_partial_week_is_capped_below_one_hundred() -> None:
    tasks = tuple(ActionTask(id=f"t-{n}", text=f"Task {n}", category="other") for n in range(200))
    big_day = (DayTemplate(id="big", day_name="Monday", title="Everything", workout=tasks),)
    # 199 of 200 is 99.5%, which would round up to 100
    record = _record(WEEK, [task.id for task in tasks[:-1]])
    assert week_percentage(WEEK, record, big_day) == 99
    assert day_percentage(big_day[0], record.week(WEEK)) == 99

    record = _record(WEEK, [task.id for task in tasks])
    assert week_percentage(WEEK, record, big_day) == 100


def test_partial_week_rounds_half_up() -> None:
    # 7 of 35 is exactly 20%
    assert week_percentage(WEEK, _record(WEEK, _all_task_ids()[:7])) == 20
    # 1 of 35 is 2.857%
    assert week_percentage(WEEK, _record(WEEK, _all_task_ids()[:1])) == 3


def test_header_and_unknown_ids_do_not_count() -> None:
    record = _record(WEEK, ["m-w-header", "retired-task", "m-l-1"])
    assert week_percentage(WEEK, record) == 3


def test_false_flags_do_not_count() -> None:
    record = _record(WEEK, _all_task_ids(), done=False)
    assert week_percentage(WEEK, record) == 0


def test_other_weeks_do_not_leak_into_a_week() -> None:
    record = _record("2025-12-w2", _all_task_ids())
    assert week_percentage(WEEK, record) == 0
    assert week_percentage("2025-12-w2", record) == 100


def test_template_with_no_countable_tasks_is_zero() -> None:
    rest_only = (DayTemplate(id="rest", day_name="Monday", title="Rest", workout=(HeaderTask(id="h", label="Rest"),)),)
    record = _record(WEEK, ["h"])
    assert total_countable_tasks(rest_only) == 0
    assert week_percentage(WEEK, record, rest_only) == 0


def test_day_percentage() -> None:
    monday = get_weekly_template()[0]
    assert day_percentage(monday, {}) == 0
    assert day_percentage(monday, {"m-l-1": True, "m-l-2": True, "m-w-header": True}) == 20
    done = {task.id: True for task in iter_action_tasks(monday)}
    assert day_percentage(monday, done) == 100


def test_lifetime_total_counts_every_true_flag() -> None:
    record = ProgressRecord.model_validate(
        {
            "2025-12-w1": {"m-l-1": True, "m-l-2": False, "retired-task": True},
            "1999-01-w1": {"x": True},
            "2026-03-w2": {"t-w-1": True},
        }
    )
    assert lifetime_total(record) == 4
    assert lifetime_total(ProgressRecord()) == 0


def test_month_summary_lists_four_weeks() -> None:
    month = find_month("2025-12")
    record = _record("2025-12-w3", _all_task_ids())
    summaries = month_summary(month, record)
    assert [summary.week_id for summary in summaries] == [f"2025-12-w{n}" for n in range(1, 5)]
    assert [summary.percent for summary in summaries] == [0, 0, 100, 0]
    assert [summary.complete for summary in summaries] == [False, False, True, False]
    assert summaries[0].date_range == "12/1 – 12/7"
