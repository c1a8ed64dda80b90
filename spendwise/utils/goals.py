"""
Goal progress derivations.

Everything here is pure: it reads the amounts and dates it is given and
returns new values. Persisting a contribution is the store's job, see
``ExpenseStore.add_goal_progress``.
"""
from __future__ import annotations

import math
from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, List, Union

from spendwise.core.exceptions import InvalidAmountError
from spendwise.models.goal import GoalProgress, SavingGoalInDB

GOAL_STATUSES = ("ongoing", "completed", "all")


class ProgressTier(str, Enum):
    STARTED = "started"
    UNDERWAY = "underway"
    HALFWAY = "halfway"
    CLOSING_IN = "closing_in"
    FINAL_STRETCH = "final_stretch"
    COMPLETE = "complete"


# Inclusive lower bounds, highest first
TIER_THRESHOLDS = (
    (100.0, ProgressTier.COMPLETE),
    (90.0, ProgressTier.FINAL_STRETCH),
    (75.0, ProgressTier.CLOSING_IN),
    (50.0, ProgressTier.HALFWAY),
    (25.0, ProgressTier.UNDERWAY),
)

TIER_EMOJI: Dict[ProgressTier, str] = {
    ProgressTier.COMPLETE: "🎉",
    ProgressTier.FINAL_STRETCH: "🚀",
    ProgressTier.CLOSING_IN: "🚀",
    ProgressTier.HALFWAY: "💪",
    ProgressTier.UNDERWAY: "👍",
    ProgressTier.STARTED: "🎯",
}

TIER_COLOR: Dict[ProgressTier, str] = {
    ProgressTier.COMPLETE: "green",
    ProgressTier.FINAL_STRETCH: "green",
    ProgressTier.CLOSING_IN: "blue",
    ProgressTier.HALFWAY: "blue",
    ProgressTier.UNDERWAY: "yellow",
    ProgressTier.STARTED: "indigo",
}


def progress_percent(current: float, target: float) -> float:
    """
    Percentage of ``target`` reached by ``current``, capped at 100.

    Raises:
        InvalidAmountError: if an amount is not finite, ``target`` is not
            positive or ``current`` is negative
    """
    if not (math.isfinite(target) and math.isfinite(current)):
        raise InvalidAmountError(f"Amounts must be finite, got {current} of {target}")
    if target <= 0:
        raise InvalidAmountError(f"Target amount must be positive, got {target}")
    if current < 0:
        raise InvalidAmountError(f"Current amount cannot be negative, got {current}")
    return min(current / target * 100, 100.0)


def is_completed(goal: SavingGoalInDB) -> bool:
    return goal.current_amount >= goal.target_amount


def days_remaining(deadline: Union[date, datetime], today: Union[date, datetime]) -> int:
    """Whole calendar days from ``today`` until ``deadline``, never below 0."""
    # datetime is a date subclass; drop the time of day before subtracting
    if isinstance(deadline, datetime):
        deadline = deadline.date()
    if isinstance(today, datetime):
        today = today.date()
    return max((deadline - today).days, 0)


def progress_tier(percent: float) -> ProgressTier:
    for lower_bound, tier in TIER_THRESHOLDS:
        if percent >= lower_bound:
            return tier
    return ProgressTier.STARTED


def apply_progress_contribution(goal: SavingGoalInDB, amount: float) -> SavingGoalInDB:
    """Return a copy of ``goal`` with ``amount`` added to its current amount."""
    if not math.isfinite(amount) or amount < 0:
        raise InvalidAmountError(f"Contribution must be a finite non-negative amount, got {amount}")
    updated = goal.current_amount + amount
    if not math.isfinite(updated):
        raise InvalidAmountError(f"Contribution overflows the goal amount: {goal.current_amount} + {amount}")
    return goal.model_copy(update={"current_amount": updated})


def goal_progress(goal: SavingGoalInDB, today: Union[date, datetime]) -> GoalProgress:
    percent = progress_percent(goal.current_amount, goal.target_amount)
    tier = progress_tier(percent)
    return GoalProgress(
        percent=round(percent, 1),
        completed=is_completed(goal),
        remaining_amount=round(max(goal.target_amount - goal.current_amount, 0.0), 2),
        days_remaining=days_remaining(goal.deadline, today),
        tier=tier.value,
        emoji=TIER_EMOJI[tier],
        color=TIER_COLOR[tier],
    )


def filter_goals(goals: Iterable[SavingGoalInDB], status: str = "all") -> List[SavingGoalInDB]:
    if status not in GOAL_STATUSES:
        raise ValueError(f"Unknown goal status: {status}")
    if status == "all":
        return list(goals)
    want_completed = status == "completed"
    return [goal for goal in goals if is_completed(goal) == want_completed]
