"""Static weekly diet/workout template and the tracked calendar."""

from __future__ import annotations

import calendar
from functools import lru_cache
from typing import Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

CALENDAR_START: Tuple[int, int] = (2025, 12)
CALENDAR_MONTHS = 13
WEEK_DAY_RANGES: Tuple[Tuple[int, int], ...] = ((1, 7), (8, 14), (15, 21), (22, 28))


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ActionTask(_Frozen):
    """A checkable diet or workout item."""

    kind: Literal["action"] = "action"
    id: str
    text: str
    category: Literal["diet", "workout", "other"]
    exercise_ref: Optional[str] = None


class HeaderTask(_Frozen):
    """Display-only label grouping the tasks that follow it; never counted."""

    kind: Literal["header"] = "header"
    id: str
    label: str


ScheduleTask = Union[ActionTask, HeaderTask]


class DayTemplate(_Frozen):
    id: str
    day_name: str
    title: str
    lunch: Tuple[ActionTask, ...] = ()
    dinner: Tuple[ActionTask, ...] = ()
    workout: Tuple[Union[ActionTask, HeaderTask], ...] = Field(default=())
    protein_goal: str = "-"

    def tasks(self) -> Tuple[ScheduleTask, ...]:
        return (*self.lunch, *self.dinner, *self.workout)


class WeekInstance(_Frozen):
    id: str
    title: str
    date_range: str


class MonthInstance(_Frozen):
    id: str
    title: str
    weeks: Tuple[WeekInstance, ...]


def _diet(task_id: str, text: str) -> ActionTask:
    return ActionTask(id=task_id, text=text, category="diet")


def _workout(task_id: str, text: str, exercise: Optional[str] = None) -> ActionTask:
    return ActionTask(id=task_id, text=text, category="workout", exercise_ref=exercise)


WEEKLY_TEMPLATE: Tuple[DayTemplate, ...] = (
    DayTemplate(
        id="mon",
        day_name="Monday",
        title="Upper Body Strength",
        lunch=(
            _diet("m-l-1", "High-protein main (chicken thigh or breast)"),
            _diet("m-l-2", "At least half a bowl of rice"),
            _diet("m-l-3", "Extra egg or dried tofu if needed"),
        ),
        dinner=(
            _diet("m-d-1", "High-protein main, 30-35g"),
            _diet("m-d-2", "At least one serving of starch"),
        ),
        protein_goal="90-100g",
        workout=(
            HeaderTask(id="m-w-header", label="Resistance band upper body (20-25 min)"),
            _workout("m-w-1", "Row 3x12-15", "Resistance Band Row"),
            _workout("m-w-2", "Chest Press 3x12-15", "Resistance Band Chest Press"),
            _workout("m-w-3", "Shoulder Press 2-3x10-12", "Resistance Band Shoulder Press"),
            _workout("m-w-4", "Bicep Curl 2x12-15", "Resistance Band Bicep Curl"),
            _workout("m-w-5", "Tricep Extension 2x12-15", "Resistance Band Tricep Extension"),
        ),
    ),
    DayTemplate(
        id="tue",
        day_name="Tuesday",
        title="Rest / Walk",
        workout=(_workout("t-w-1", "Stretch for 5 minutes (optional)", "Full Body Stretching"),),
    ),
    DayTemplate(
        id="wed",
        day_name="Wednesday",
        title="Lower Body Strength",
        lunch=(
            _diet("w-l-1", "High-protein lunch box (target 30g)"),
            _diet("w-l-2", "At least half a bowl of rice"),
        ),
        dinner=(_diet("w-d-1", "High-protein main plus starch"),),
        protein_goal="90-100g",
        workout=(
            HeaderTask(id="w-w-header", label="Resistance band lower body (20-25 min)"),
            _workout("w-w-1", "Squat 3x15", "Resistance Band Squat"),
            _workout("w-w-2", "Lunge 3x12 per side", "Resistance Band Lunge"),
            _workout("w-w-3", "Side Walk 3x20 steps", "Resistance Band Side Walk"),
            _workout("w-w-4", "Deadlift 3x12-15", "Resistance Band Deadlift"),
            _workout("w-w-5", "Glute Bridge 3x15", "Glute Bridge"),
        ),
    ),
    DayTemplate(
        id="thu",
        day_name="Thursday",
        title="Full Body",
        lunch=(_diet("th-l-1", "High-protein lunch box"),),
        dinner=(_diet("th-d-1", "High-protein main plus starch"),),
        protein_goal="90-100g",
        workout=(
            HeaderTask(id="th-w-header", label="Resistance band full body (20-25 min)"),
            _workout("th-w-1", "Lat Pulldown 3x12-15", "Resistance Band Lat Pulldown"),
            _workout("th-w-2", "Chest Fly 3x12-15", "Resistance Band Chest Fly"),
            _workout("th-w-3", "Squat to Press (Thruster) 3x10-12", "Resistance Band Thruster"),
            _workout("th-w-4", "Crunch 3x12", "Crunch"),
            _workout("th-w-5", "Plank 30-45s x2", "Plank"),
        ),
    ),
    DayTemplate(
        id="fri",
        day_name="Friday",
        title="Rest / Walk",
        workout=(_workout("f-w-1", "Stretch for 5 minutes (optional)", "Stretching"),),
    ),
    DayTemplate(
        id="sat",
        day_name="Saturday",
        title="Recovery",
        lunch=(_diet("sa-l-1", "High-protein lunch box"),),
        dinner=(_diet("sa-d-1", "High-protein main"),),
        protein_goal="90g",
        workout=(
            HeaderTask(id="sa-w-header", label="Recovery session (pick one, 10-15 min)"),
            _workout("sa-w-1", "Basic yoga, 10 min", "Basic Yoga Flow"),
            _workout("sa-w-2", "Resistance band stretching, 10 min", "Resistance Band Stretching"),
            _workout("sa-w-3", "Light bodyweight circuit", "Light Bodyweight Circuit"),
        ),
    ),
    DayTemplate(
        id="sun",
        day_name="Sunday",
        title="Free / Recovery",
        lunch=(_diet("su-l-1", "High-protein lunch box"),),
        dinner=(_diet("su-d-1", "High-protein main"),),
        protein_goal="90g",
        workout=(
            HeaderTask(id="su-w-header", label="Easy day"),
            _workout("su-w-1", "Walk / stretch / rest"),
        ),
    ),
)


def _month_weeks(year: int, month: int) -> Tuple[WeekInstance, ...]:
    month_id = f"{year}-{month:02d}"
    return tuple(
        WeekInstance(
            id=f"{month_id}-w{ordinal}",
            title=f"Week {ordinal}",
            date_range=f"{month}/{first} – {month}/{last}",
        )
        for ordinal, (first, last) in enumerate(WEEK_DAY_RANGES, start=1)
    )


def _build_calendar(start: Tuple[int, int], count: int) -> Tuple[MonthInstance, ...]:
    year, month = start
    months: List[MonthInstance] = []
    for _ in range(count):
        months.append(
            MonthInstance(
                id=f"{year}-{month:02d}",
                title=f"{calendar.month_name[month]} {year}",
                weeks=_month_weeks(year, month),
            )
        )
        month += 1
        if month > 12:
            month = 1
            year += 1
    return tuple(months)


def get_weekly_template() -> Tuple[DayTemplate, ...]:
    return WEEKLY_TEMPLATE


@lru_cache(maxsize=1)
def get_calendar() -> Tuple[MonthInstance, ...]:
    return _build_calendar(CALENDAR_START, CALENDAR_MONTHS)


def iter_action_tasks(day: DayTemplate) -> Iterator[ActionTask]:
    """Yield the countable tasks of a day across its diet and workout buckets."""
    for task in day.tasks():
        if isinstance(task, ActionTask):
            yield task


def find_month(month_id: str) -> MonthInstance:
    for month in get_calendar():
        if month.id == month_id:
            return month
    raise LookupError(f"Month '{month_id}' is not part of the calendar.")


def month_for_week(week_id: str) -> Optional[MonthInstance]:
    for month in get_calendar():
        if any(week.id == week_id for week in month.weeks):
            return month
    return None


def find_week(week_id: str) -> WeekInstance:
    month = month_for_week(week_id)
    if month is None:
        raise LookupError(f"Week '{week_id}' is not part of the calendar.")
    return next(week for week in month.weeks if week.id == week_id)


def find_task(task_id: str) -> Optional[ScheduleTask]:
    for day in WEEKLY_TEMPLATE:
        for task in day.tasks():
            if task.id == task_id:
                return task
    return None


__all__ = [
    "ActionTask",
    "DayTemplate",
    "HeaderTask",
    "MonthInstance",
    "ScheduleTask",
    "WeekInstance",
    "WEEKLY_TEMPLATE",
    "find_month",
    "find_task",
    "find_week",
    "get_calendar",
    "get_weekly_template",
    "iter_action_tasks",
    "month_for_week",
]
