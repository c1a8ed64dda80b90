import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from spendwise.db.interface import ExpenseStore
from spendwise.models.expense import ExpenseCategory, ExpenseCreate, ExpenseInDB, ExpensePublic, ExpenseUpdate
from spendwise.routers.deps import get_ai_client, get_current_user_id, get_store
from spendwise.services.ai import InsightClient
from spendwise.utils.analyzer import ALL_CATEGORIES, distinct_categories, filter_expenses, summarize

router = APIRouter()
logger = logging.getLogger(__name__)

VALID_FILTERS = {ALL_CATEGORIES} | {category.value for category in ExpenseCategory}


@router.post("/", response_model=ExpensePublic, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense: ExpenseCreate,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
    ai_client: InsightClient = Depends(get_ai_client),
):
    category = ai_client.categorize_expense(expense.description, expense.amount)
    expense_db = ExpenseInDB(user_id=user_id, category=category, **expense.model_dump())
    store.put_expense(expense_db)
    logger.info(f"Created expense {expense_db.expense_id} for user {user_id} as {category.value}")
    return ExpensePublic(**expense_db.model_dump())


@router.get("/")
def list_expenses(
    category: str = Query(default=ALL_CATEGORIES),
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
):
    """
    List the user's expenses, newest first, optionally filtered by category.
    The summary carries the filtered total and the categories available to filter on.
    """
    if category not in VALID_FILTERS:
        raise HTTPException(status_code=400, detail=f"Unknown category: {category}")

    expenses = store.list_expenses(user_id)
    selected = filter_expenses(expenses, category)

    return {
        "expenses": [ExpensePublic(**exp.model_dump()) for exp in selected],
        "summary": summarize(expenses, category),
    }


@router.get("/categories", response_model=List[str])
def list_categories(user_id: str = Depends(get_current_user_id), store: ExpenseStore = Depends(get_store)):
    return distinct_categories(store.list_expenses(user_id))


@router.get("/insights")
def get_insights(
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
    ai_client: InsightClient = Depends(get_ai_client),
):
    expenses = store.list_expenses(user_id)
    insights, cached = ai_client.insights_for_user(user_id, expenses)
    return {"insights": insights, "cached": cached, "expense_count": len(expenses)}


@router.put("/{expense_id}", response_model=ExpensePublic)
def update_expense(
    expense_id: str,
    expense_update: ExpenseUpdate,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
):
    mutable_fields = {
        k: v for k, v in expense_update.model_dump(exclude_unset=True).items() if v is not None
    }
    if not mutable_fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = store.update_expense(user_id, expense_id, mutable_fields)
    if not updated:
        raise HTTPException(status_code=404, detail="Expense not found")

    return ExpensePublic(**updated.model_dump())


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ExpenseStore = Depends(get_store),
):
    deleted = store.delete_expense(user_id, expense_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Expense not found")
    return None
