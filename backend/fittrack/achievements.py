"""Achievement tiers unlocked by the lifetime count of completed tasks."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field


class AchievementTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    threshold: int = Field(ge=0)
    title: str
    icon: str
    message: str
    insight: str
    color_from: str
    color_to: str


class AchievementStatus(BaseModel):
    total: int
    current: AchievementTier
    next: Optional[AchievementTier] = None
    progress_to_next_percent: float = Field(ge=0.0, le=100.0)
    xp_to_next: int = 0


class RoadmapEntry(BaseModel):
    tier: AchievementTier
    unlocked: bool


ACHIEVEMENT_TIERS: Tuple[AchievementTier, ...] = (
    AchievementTier(
        threshold=0,
        title="Novice Starter",
        icon="🌱",
        message="Every journey begins with a single step.",
        insight="The starting line. 100% intention set.",
        color_from="from-emerald-400",
        color_to="to-emerald-600",
    ),
    AchievementTier(
        threshold=15,
        title="Momentum Builder",
        icon="🔥",
        message="You are heating up! Keep the streak alive.",
        insight="Approx. 2 weeks consistent. Nervous system is adapting; you feel stronger.",
        color_from="from-orange-400",
        color_to="to-red-500",
    ),
    AchievementTier(
        threshold=40,
        title="Routine Ranger",
        icon="🧭",
        message="Fitness is becoming your second nature.",
        insight="Approx. 1 month. Posture improving, early metabolism boost.",
        color_from="from-blue-400",
        color_to="to-indigo-500",
    ),
    AchievementTier(
        threshold=80,
        title="Iron Discipline",
        icon="🛡️",
        message="Your consistency is your strongest armor.",
        insight="Approx. 2-3 months. Visible muscle definition starting to appear.",
        color_from="from-indigo-500",
        color_to="to-purple-600",
    ),
    AchievementTier(
        threshold=150,
        title="Fitness Warrior",
        icon="⚔️",
        message="Crushing goals like a true warrior.",
        insight="Approx. 4-5 months. Est. 0.5kg+ lean muscle gained. Clothes fit better.",
        color_from="from-purple-500",
        color_to="to-pink-600",
    ),
    AchievementTier(
        threshold=300,
        title="Titan",
        icon="⚡",
        message="You have reached godlike performance.",
        insight="Approx. 8-10 months. Significant strength gains above average.",
        color_from="from-yellow-400",
        color_to="to-amber-600",
    ),
    AchievementTier(
        threshold=500,
        title="Legendary",
        icon="👑",
        message="Simply unmatched. A true legend.",
        insight="1+ Year. Complete lifestyle transformation. Elite consistency.",
        color_from="from-rose-500",
        color_to="to-red-700",
    ),
)


def _validate_tiers(tiers: Sequence[AchievementTier]) -> None:
    if not tiers:
        raise ValueError("At least one achievement tier is required.")
    if tiers[0].threshold != 0:
        raise ValueError("The first achievement tier must start at threshold 0.")
    for previous, following in zip(tiers, tiers[1:]):
        if following.threshold <= previous.threshold:
            raise ValueError("Achievement thresholds must be strictly increasing.")


_validate_tiers(ACHIEVEMENT_TIERS)


def evaluate_achievements(
    total: int,
    tiers: Sequence[AchievementTier] = ACHIEVEMENT_TIERS,
) -> AchievementStatus:
    """Resolve the current and next tier for a lifetime total."""
    total = max(int(total), 0)
    current = tiers[0]
    upcoming: Optional[AchievementTier] = None
    for tier in tiers:
        if tier.threshold <= total:
            current = tier
        else:
            upcoming = tier
            break

    if upcoming is None:
        return AchievementStatus(total=total, current=current, progress_to_next_percent=100.0)

    span = upcoming.threshold - current.threshold
    progress = (total - current.threshold) / span * 100
    return AchievementStatus(
        total=total,
        current=current,
        next=upcoming,
        progress_to_next_percent=min(100.0, max(0.0, progress)),
        xp_to_next=upcoming.threshold - total,
    )


def achievement_roadmap(
    total: int,
    tiers: Sequence[AchievementTier] = ACHIEVEMENT_TIERS,
) -> List[RoadmapEntry]:
    return [RoadmapEntry(tier=tier, unlocked=total >= tier.threshold) for tier in tiers]


__all__ = [
    "ACHIEVEMENT_TIERS",
    "AchievementStatus",
    "AchievementTier",
    "RoadmapEntry",
    "achievement_roadmap",
    "evaluate_achievements",
]
