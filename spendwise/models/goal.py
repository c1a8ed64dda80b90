from datetime import date, datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from spendwise.models.expense import MAX_AMOUNT


class SavingGoalCreate(BaseModel):
    name: str = Field(..., min_length=1)
    target_amount: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    deadline: date


class SavingGoalUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    target_amount: Optional[float] = Field(default=None, gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    deadline: Optional[date] = None


class ProgressContribution(BaseModel):
    amount: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False)


class SavingGoalInDB(BaseModel):
    user_id: str
    goal_id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    target_amount: float = Field(..., allow_inf_nan=False)
    current_amount: float = Field(default=0.0, allow_inf_nan=False)
    deadline: date
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())


class GoalProgress(BaseModel):
    """Display state derived from a goal's stored amounts and deadline."""

    percent: float
    completed: bool
    remaining_amount: float
    days_remaining: int
    tier: str
    emoji: str
    color: str


class SavingGoalPublic(BaseModel):
    goal_id: str
    name: str
    target_amount: float
    current_amount: float
    deadline: date
    created_at: str
    progress: GoalProgress
