"""Completion percentages and lifetime totals derived from a progress record.

Everything here is recomputed from the record on each call; nothing is cached,
so totals can never drift from the underlying toggle state.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

from pydantic import BaseModel

from .progress_store import ProgressRecord
from .schedule_catalog import (
    ActionTask,
    DayTemplate,
    MonthInstance,
    get_weekly_template,
    iter_action_tasks,
)


class WeekSummary(BaseModel):
    week_id: str
    title: str
    date_range: str
    percent: int
    complete: bool


def _percent(completed: int, total: int) -> int:
    if total == 0:
        return 0
    # half-up in integer arithmetic, 12.5 -> 13
    percent = (completed * 200 + total) // (2 * total)
    if completed < total:
        # 100 is reserved for a fully completed set
        return min(percent, 99)
    return percent


def _countable(template: Sequence[DayTemplate]) -> List[ActionTask]:
    return [task for day in template for task in iter_action_tasks(day)]


def week_percentage(
    week_id: str,
    record: ProgressRecord,
    template: Optional[Sequence[DayTemplate]] = None,
) -> int:
    """Share of the template's countable tasks marked done for ``week_id``, 0-100."""
    tasks = _countable(template if template is not None else get_weekly_template())
    week = record.root.get(week_id, {})
    completed = sum(1 for task in tasks if week.get(task.id, False))
    return _percent(completed, len(tasks))


def day_percentage(day: DayTemplate, week_progress: Mapping[str, bool]) -> int:
    tasks = list(iter_action_tasks(day))
    completed = sum(1 for task in tasks if week_progress.get(task.id, False))
    return _percent(completed, len(tasks))


def lifetime_total(record: ProgressRecord) -> int:
    """Raw count of true flags across every stored week, known to the catalog or not."""
    return sum(1 for _, _, done in record.flags() if done)


def total_countable_tasks(template: Optional[Sequence[DayTemplate]] = None) -> int:
    return len(_countable(template if template is not None else get_weekly_template()))


def month_summary(month: MonthInstance, record: ProgressRecord) -> List[WeekSummary]:
    summaries: List[WeekSummary] = []
    for week in month.weeks:
        percent = week_percentage(week.id, record)
        summaries.append(
            WeekSummary(
                week_id=week.id,
                title=week.title,
                date_range=week.date_range,
                percent=percent,
                complete=percent == 100,
            )
        )
    return summaries


__all__ = [
    "WeekSummary",
    "day_percentage",
    "lifetime_total",
    "month_summary",
    "total_countable_tasks",
    "week_percentage",
]
