from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence

from spendwise.models.expense import ExpenseCategory, ExpenseInDB

ALL_CATEGORIES = "all"


@dataclass
class CategoryInsight:
    """Represents calculated figures for a single expense category."""

    category: str
    total: float
    average: float
    transaction_count: int
    share_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _category_name(category: Any) -> str:
    if isinstance(category, ExpenseCategory):
        return category.value
    return str(category)


def filter_expenses(
    expenses: Iterable[ExpenseInDB],
    category_filter: str = ALL_CATEGORIES,
) -> List[ExpenseInDB]:
    """Return the expenses matching ``category_filter``; ``"all"`` keeps every one."""
    if category_filter == ALL_CATEGORIES:
        return list(expenses)
    wanted = _category_name(category_filter)
    return [exp for exp in expenses if _category_name(exp.category) == wanted]


def _money(amount: Any) -> Decimal:
    return Decimal(str(amount))


def _cents(amount: Decimal) -> float:
    return float(round(amount, 2))


def total_amount(
    expenses: Iterable[ExpenseInDB],
    category_filter: str = ALL_CATEGORIES,
) -> Decimal:
    """
    Exact sum of the matching amounts.

    Summed as ``Decimal`` and left unrounded, so per-category totals add up
    to the overall total. Rounding to cents happens in ``summarize``.
    """
    return sum((_money(exp.amount) for exp in filter_expenses(expenses, category_filter)), Decimal(0))


def distinct_categories(expenses: Iterable[ExpenseInDB]) -> List[str]:
    """
    Categories present in ``expenses`` in order of first occurrence,
    preceded by the synthetic ``"all"`` entry.
    """
    categories = [ALL_CATEGORIES]
    for exp in expenses:
        name = _category_name(exp.category)
        if name not in categories:
            categories.append(name)
    return categories


def category_totals(expenses: Iterable[ExpenseInDB]) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for exp in expenses:
        totals[_category_name(exp.category)] += _money(exp.amount)
    return dict(totals)


def summarize(
    expenses: Sequence[ExpenseInDB],
    category_filter: str = ALL_CATEGORIES,
) -> Dict[str, Any]:
    """
    Build the summary returned alongside an expense listing.

    ``categories`` always reflects the unfiltered input so a client can
    switch filters; the totals and insights cover the filtered subset.
    """
    selected = filter_expenses(expenses, category_filter)
    if not selected:
        return {
            "filter": category_filter,
            "total": 0.0,
            "categories": distinct_categories(expenses),
            "category_totals": {},
            "insights": [],
        }

    category_map: Dict[str, List[ExpenseInDB]] = defaultdict(list)
    for exp in selected:
        category_map[_category_name(exp.category)].append(exp)

    totals = category_totals(selected)
    overall = total_amount(selected)

    insights = [
        CategoryInsight(
            category=category,
            total=_cents(totals[category]),
            average=_cents(totals[category] / len(items)),
            transaction_count=len(items),
            share_percent=_cents(totals[category] / overall * 100) if overall > 0 else 0.0,
        ).to_dict()
        for category, items in category_map.items()
    ]

    return {
        "filter": category_filter,
        "total": _cents(overall),
        "categories": distinct_categories(expenses),
        "category_totals": {cat: _cents(total) for cat, total in totals.items()},
        "insights": insights,
    }
