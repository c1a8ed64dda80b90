import datetime as dt
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

# Upper bound for any single amount sent by a client
MAX_AMOUNT = 1_000_000_000.0


class ExpenseCategory(str, Enum):
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    BILLS = "Bills"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    OTHER = "Other"


class ExpenseCreate(BaseModel):
    amount: float = Field(..., ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    description: str = ""
    date: dt.date


class ExpenseUpdate(BaseModel):
    amount: Optional[float] = Field(default=None, ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    description: Optional[str] = None
    date: Optional[dt.date] = None


class ExpenseInDB(BaseModel):
    user_id: str
    expense_id: str = Field(default_factory=lambda: str(uuid4()))
    amount: float = Field(..., allow_inf_nan=False)
    description: str = ""
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: dt.date
    created_at: str = Field(default_factory=lambda: dt.datetime.utcnow().isoformat())


class ExpensePublic(BaseModel):
    expense_id: str
    amount: float
    description: str = ""
    category: ExpenseCategory
    date: dt.date
    created_at: str
