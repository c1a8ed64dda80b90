"""
Abstract store interface.

Every expense and goal operation takes the owning ``user_id``; an
implementation must never return or touch another user's records.
Lookups of missing records return ``None`` (or ``False`` for deletes);
backend failures raise ``StoreError``.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from spendwise.models.expense import ExpenseInDB
from spendwise.models.goal import SavingGoalInDB
from spendwise.models.user import UserInDB


class ExpenseStore(ABC):
    """Persistence for users, expenses and saving goals."""

    # Users

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        pass

    @abstractmethod
    def get_user_by_id(self, user_id: str) -> Optional[UserInDB]:
        pass

    @abstractmethod
    def put_user(self, user: UserInDB) -> None:
        pass

    # Expenses

    @abstractmethod
    def put_expense(self, expense: ExpenseInDB) -> None:
        pass

    @abstractmethod
    def get_expense(self, user_id: str, expense_id: str) -> Optional[ExpenseInDB]:
        pass

    @abstractmethod
    def list_expenses(self, user_id: str) -> List[ExpenseInDB]:
        """All of the user's expenses, newest date first, then newest created."""
        pass

    @abstractmethod
    def update_expense(self, user_id: str, expense_id: str, updates: Dict[str, Any]) -> Optional[ExpenseInDB]:
        pass

    @abstractmethod
    def delete_expense(self, user_id: str, expense_id: str) -> bool:
        pass

    # Saving goals

    @abstractmethod
    def put_goal(self, goal: SavingGoalInDB) -> None:
        pass

    @abstractmethod
    def get_goal(self, user_id: str, goal_id: str) -> Optional[SavingGoalInDB]:
        pass

    @abstractmethod
    def list_goals(self, user_id: str) -> List[SavingGoalInDB]:
        """All of the user's goals, most recently created first."""
        pass

    @abstractmethod
    def update_goal(self, user_id: str, goal_id: str, updates: Dict[str, Any]) -> Optional[SavingGoalInDB]:
        pass

    @abstractmethod
    def delete_goal(self, user_id: str, goal_id: str) -> bool:
        pass

    @abstractmethod
    def add_goal_progress(self, user_id: str, goal_id: str, amount: float) -> Optional[SavingGoalInDB]:
        """
        Atomically add ``amount`` to the goal's current amount.

        Implementations must apply the increment in a single store
        operation; concurrent contributions must all be kept.

        Returns:
            The updated goal, or None if the goal does not exist
        """
        pass

    def status(self) -> Dict[str, Any]:
        """Reachability report used by the status endpoint."""
        return {"backend": type(self).__name__, "connected": True}


def sort_expenses(expenses: List[ExpenseInDB]) -> List[ExpenseInDB]:
    return sorted(expenses, key=lambda e: (e.date, e.created_at), reverse=True)


def sort_goals(goals: List[SavingGoalInDB]) -> List[SavingGoalInDB]:
    return sorted(goals, key=lambda g: g.created_at, reverse=True)
