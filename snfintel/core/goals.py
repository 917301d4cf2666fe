# snfintel/core/goals.py

from dataclasses import dataclass
from typing import Literal, Optional

from .models import GoalRecord


GoalStatus = Literal["achieved", "on_track", "at_risk", "behind", "pending"]

ACHIEVED_AT = 100.0
ON_TRACK_AT = 80.0
AT_RISK_AT = 50.0


@dataclass(frozen=True)
class GoalProgress:
    progress: float
    status: str


def _raw_progress(current: float, target: float, higher_is_better: bool) -> float:
    if higher_is_better:
        if target == 0:
            return 100.0 if current >= 0 else 0.0
        return (current / target) * 100

    # Lower is better: hitting target scores 100, double the target scores 0.
    if target > 0:
        return ((2 * target - current) / target) * 100
    return 0.0


def classify_progress(progress: float) -> GoalStatus:
    if progress >= ACHIEVED_AT:
        return "achieved"
    if progress >= ON_TRACK_AT:
        return "on_track"
    if progress >= AT_RISK_AT:
        return "at_risk"
    return "behind"


def evaluate_goal(
    current_value: Optional[float],
    target_value: float,
    higher_is_better: bool,
    fallback_status: str = "pending",
) -> GoalProgress:
    """
    Normalise a KPI reading against its target on a 0-100 scale.

    A missing reading keeps the fallback status (the stored status when
    called through evaluate_goal_record) with zero progress.
    """
    if current_value is None:
        return GoalProgress(progress=0.0, status=fallback_status)

    progress = _raw_progress(current_value, target_value, higher_is_better)
    progress = max(0.0, min(100.0, progress))

    return GoalProgress(progress=progress, status=classify_progress(progress))


def evaluate_goal_record(goal: GoalRecord) -> GoalProgress:
    return evaluate_goal(
        goal.current_value,
        goal.target_value,
        goal.higher_is_better,
        fallback_status=goal.status or "pending",
    )
