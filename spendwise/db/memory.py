import threading
from typing import Any, Dict, List, Optional, Tuple

from spendwise.db.interface import ExpenseStore, sort_expenses, sort_goals
from spendwise.models.expense import ExpenseInDB
from spendwise.models.goal import SavingGoalInDB
from spendwise.models.user import UserInDB
from spendwise.utils.goals import apply_progress_contribution


class MemoryStore(ExpenseStore):
    """In-process store for local development and tests. Not persistent."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, UserInDB] = {}
        self._expenses: Dict[Tuple[str, str], ExpenseInDB] = {}
        self._goals: Dict[Tuple[str, str], SavingGoalInDB] = {}

    # Users

    def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user
        return None

    def get_user_by_id(self, user_id: str) -> Optional[UserInDB]:
        with self._lock:
            return self._users.get(user_id)

    def put_user(self, user: UserInDB) -> None:
        with self._lock:
            self._users[user.user_id] = user

    # Expenses

    def put_expense(self, expense: ExpenseInDB) -> None:
        with self._lock:
            self._expenses[(expense.user_id, expense.expense_id)] = expense

    def get_expense(self, user_id: str, expense_id: str) -> Optional[ExpenseInDB]:
        with self._lock:
            return self._expenses.get((user_id, expense_id))

    def list_expenses(self, user_id: str) -> List[ExpenseInDB]:
        with self._lock:
            owned = [e for (owner, _), e in self._expenses.items() if owner == user_id]
        return sort_expenses(owned)

    def update_expense(self, user_id: str, expense_id: str, updates: Dict[str, Any]) -> Optional[ExpenseInDB]:
        if not updates:
            return None
        with self._lock:
            existing = self._expenses.get((user_id, expense_id))
            if existing is None:
                return None
            updated = ExpenseInDB.model_validate({**existing.model_dump(), **updates})
            self._expenses[(user_id, expense_id)] = updated
            return updated

    def delete_expense(self, user_id: str, expense_id: str) -> bool:
        with self._lock:
            return self._expenses.pop((user_id, expense_id), None) is not None

    # Saving goals

    def put_goal(self, goal: SavingGoalInDB) -> None:
        with self._lock:
            self._goals[(goal.user_id, goal.goal_id)] = goal

    def get_goal(self, user_id: str, goal_id: str) -> Optional[SavingGoalInDB]:
        with self._lock:
            return self._goals.get((user_id, goal_id))

    def list_goals(self, user_id: str) -> List[SavingGoalInDB]:
        with self._lock:
            owned = [g for (owner, _), g in self._goals.items() if owner == user_id]
        return sort_goals(owned)

    def update_goal(self, user_id: str, goal_id: str, updates: Dict[str, Any]) -> Optional[SavingGoalInDB]:
        if not updates:
            return None
        with self._lock:
            existing = self._goals.get((user_id, goal_id))
            if existing is None:
                return None
            updated = SavingGoalInDB.model_validate({**existing.model_dump(), **updates})
            self._goals[(user_id, goal_id)] = updated
            return updated

    def delete_goal(self, user_id: str, goal_id: str) -> bool:
        with self._lock:
            return self._goals.pop((user_id, goal_id), None) is not None

    def add_goal_progress(self, user_id: str, goal_id: str, amount: float) -> Optional[SavingGoalInDB]:
        # Read and write under one lock hold so no contribution is lost
        with self._lock:
            existing = self._goals.get((user_id, goal_id))
            if existing is None:
                return None
            updated = apply_progress_contribution(existing, amount)
            self._goals[(user_id, goal_id)] = updated
            return updated

    def status(self) -> Dict[str, Any]:
        with self._lock:
            counts = {"users": len(self._users), "expenses": len(self._expenses), "goals": len(self._goals)}
        return {"backend": "memory", "connected": True, "counts": counts}
