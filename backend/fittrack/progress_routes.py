"""Schedule, progress and achievement endpoints consumed by the tracker views."""

from __future__ import annotations

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from .achievements import AchievementStatus, RoadmapEntry, achievement_roadmap, evaluate_achievements
from .aggregator import WeekSummary, day_percentage, lifetime_total, month_summary, week_percentage
from .dependencies import get_guide_provider, get_session_manager
from .exercise_guide import ExerciseGuide, ExerciseGuideProvider, opens_guide
from .profile_session import NotLoggedInError, ProfileSessionManager
from .progress_store import ProgressStore, WeekProgress
from .schedule_catalog import (
    ActionTask,
    DayTemplate,
    HeaderTask,
    MonthInstance,
    WeekInstance,
    find_month,
    find_task,
    find_week,
    get_calendar,
    get_weekly_template,
    iter_action_tasks,
    month_for_week,
)

router = APIRouter(prefix="/api", tags=["progress"])
logger = logging.getLogger(__name__)


class TaskPayload(BaseModel):
    id: str
    kind: Literal["action", "header"]
    text: str
    category: Optional[str] = None
    exercise_ref: Optional[str] = None
    checked: bool = False
    opens_guide: bool = False


class DayPayload(BaseModel):
    id: str
    day_name: str
    title: str
    protein_goal: str
    lunch: List[TaskPayload]
    dinner: List[TaskPayload]
    workout: List[TaskPayload]
    percent: Optional[int] = None


class MonthOverviewPayload(BaseModel):
    profile: str
    month: MonthInstance
    weeks: List[WeekSummary]
    achievements: AchievementStatus


class WeekDetailPayload(BaseModel):
    profile: str
    week: WeekInstance
    month_title: str
    percent: int
    days: List[DayPayload]
    achievements: AchievementStatus


class ToggleResponse(BaseModel):
    week_id: str
    task_id: str
    completed: bool
    week_percent: int
    achievements: AchievementStatus


class AchievementsPayload(BaseModel):
    status: AchievementStatus
    roadmap: List[RoadmapEntry]


def _require_progress(manager: ProfileSessionManager) -> ProgressStore:
    try:
        return manager.progress
    except NotLoggedInError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc


def _task_payload(task: ActionTask | HeaderTask, week: WeekProgress) -> TaskPayload:
    if isinstance(task, HeaderTask):
        return TaskPayload(id=task.id, kind="header", text=task.label)
    return TaskPayload(
        id=task.id,
        kind="action",
        text=task.text,
        category=task.category,
        exercise_ref=task.exercise_ref,
        checked=bool(week.get(task.id, False)),
        opens_guide=opens_guide(task),
    )


def _day_payload(day: DayTemplate, week: WeekProgress) -> DayPayload:
    has_countable = any(True for _ in iter_action_tasks(day))
    return DayPayload(
        id=day.id,
        day_name=day.day_name,
        title=day.title,
        protein_goal=day.protein_goal,
        lunch=[_task_payload(task, week) for task in day.lunch],
        dinner=[_task_payload(task, week) for task in day.dinner],
        workout=[_task_payload(task, week) for task in day.workout],
        percent=day_percentage(day, week) if has_countable else None,
    )


@router.get("/schedule/template", response_model=List[DayTemplate])
def get_template() -> List[DayTemplate]:
    return list(get_weekly_template())


@router.get("/schedule/calendar", response_model=List[MonthInstance])
def get_months() -> List[MonthInstance]:
    return list(get_calendar())


@router.get("/progress/months/{month_id}", response_model=MonthOverviewPayload)
def get_month_overview(
    month_id: str,
    manager: ProfileSessionManager = Depends(get_session_manager),
) -> MonthOverviewPayload:
    store = _require_progress(manager)
    try:
        month = find_month(month_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    record = store.record
    return MonthOverviewPayload(
        profile=store.profile_name,
        month=month,
        weeks=month_summary(month, record),
        achievements=evaluate_achievements(lifetime_total(record)),
    )


@router.get("/progress/weeks/{week_id}", response_model=WeekDetailPayload)
def get_week_detail(
    week_id: str,
    manager: ProfileSessionManager = Depends(get_session_manager),
) -> WeekDetailPayload:
    store = _require_progress(manager)
    try:
        week = find_week(week_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    record = store.record
    week_progress = record.week(week_id)
    month = month_for_week(week_id)
    return WeekDetailPayload(
        profile=store.profile_name,
        week=week,
        month_title=month.title if month else "Calendar",
        percent=week_percentage(week_id, record),
        days=[_day_payload(day, week_progress) for day in get_weekly_template()],
        achievements=evaluate_achievements(lifetime_total(record)),
    )


@router.post("/progress/weeks/{week_id}/tasks/{task_id}/toggle", response_model=ToggleResponse)
def toggle_task(
    week_id: str,
    task_id: str,
    manager: ProfileSessionManager = Depends(get_session_manager),
) -> ToggleResponse:
    store = _require_progress(manager)
    completed = manager.toggle(week_id, task_id)
    record = store.record
    return ToggleResponse(
        week_id=week_id,
        task_id=task_id,
        completed=completed,
        week_percent=week_percentage(week_id, record),
        achievements=evaluate_achievements(lifetime_total(record)),
    )


@router.get("/progress/achievements", response_model=AchievementsPayload)
def get_achievements(manager: ProfileSessionManager = Depends(get_session_manager)) -> AchievementsPayload:
    store = _require_progress(manager)
    total = lifetime_total(store.record)
    return AchievementsPayload(
        status=evaluate_achievements(total),
        roadmap=achievement_roadmap(total),
    )


@router.get("/exercises/{task_id}/guide", response_model=ExerciseGuide)
async def get_exercise_guide(
    task_id: str,
    provider: ExerciseGuideProvider = Depends(get_guide_provider),
) -> ExerciseGuide:
    task = find_task(task_id)
    if not isinstance(task, ActionTask) or not opens_guide(task):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task '{task_id}' has no exercise guide.",
        )
    logger.debug("Fetching exercise guide for %s (%s)", task_id, task.exercise_ref)
    return await provider.fetch(task.exercise_ref or "")
