"""
Saving Goals Router
Create goals, record progress contributions and report derived progress
"""
import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from spendwise.db.interface import ExpenseStore
from spendwise.models.goal import (
    ProgressContribution,
    SavingGoalCreate,
    SavingGoalInDB,
    SavingGoalPublic,
    SavingGoalUpdate,
)
from spendwise.routers.deps import get_current_user_id, get_store, get_today
from spendwise.utils.goals import GOAL_STATUSES, filter_goals, goal_progress

router = APIRouter()
logger = logging.getLogger(__name__)


def to_public(goal: SavingGoalInDB, today: date) -> SavingGoalPublic:
    return SavingGoalPublic(
        goal_id=goal.goal_id,
        name=goal.name,
        target_amount=goal.target_amount,
        current_amount=goal.current_amount,
        deadline=goal.deadline,
        created_at=goal.created_at,
        progress=goal_progress(goal, today),
    )


@router.post("/", response_model=SavingGoalPublic, status_code=status.HTTP_201_CREATED)
def create_goal(
    goal: SavingGoalCreate,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
    today: date = Depends(get_today),
):
    goal_db = SavingGoalInDB(user_id=user_id, current_amount=0.0, **goal.model_dump())
    store.put_goal(goal_db)
    logger.info(f"Created saving goal {goal_db.goal_id} for user {user_id}")
    return to_public(goal_db, today)


@router.get("/", response_model=List[SavingGoalPublic])
def list_goals(
    goal_status: str = Query(default="all", alias="status"),
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
    today: date = Depends(get_today),
):
    """
    status: "ongoing", "completed" or "all"
    """
    if goal_status not in GOAL_STATUSES:
        raise HTTPException(status_code=400, detail=f"Status must be one of {', '.join(GOAL_STATUSES)}")

    goals = filter_goals(store.list_goals(user_id), goal_status)
    return [to_public(goal, today) for goal in goals]


@router.get("/{goal_id}", response_model=SavingGoalPublic)
def get_goal(
    goal_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
    today: date = Depends(get_today),
):
    goal = store.get_goal(user_id, goal_id)
    if not goal:
        raise HTTPException(status_code=404, detail="Saving goal not found")
    return to_public(goal, today)


@router.put("/{goal_id}", response_model=SavingGoalPublic)
def update_goal(
    goal_id: str,
    goal_update: SavingGoalUpdate,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
    today: date = Depends(get_today),
):
    mutable_fields = {
        k: v for k, v in goal_update.model_dump(exclude_unset=True).items() if v is not None
    }
    if not mutable_fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = store.update_goal(user_id, goal_id, mutable_fields)
    if not updated:
        raise HTTPException(status_code=404, detail="Saving goal not found")
    return to_public(updated, today)


@router.post("/{goal_id}/progress", response_model=SavingGoalPublic)
def add_progress(
    goal_id: str,
    contribution: ProgressContribution,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
    today: date = Depends(get_today),
):
    updated = store.add_goal_progress(user_id, goal_id, contribution.amount)
    if not updated:
        raise HTTPException(status_code=404, detail="Saving goal not found")
    logger.info(f"Added {contribution.amount} to goal {goal_id} for user {user_id}")
    return to_public(updated, today)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(
    goal_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
):
    deleted = store.delete_goal(user_id, goal_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Saving goal not found")
    return None
