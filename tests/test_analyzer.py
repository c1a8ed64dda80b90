from datetime import date
from decimal import Decimal

from spendwise.models.expense import ExpenseCategory, ExpenseInDB
from spendwise.utils.analyzer import (
    category_totals,
    distinct_categories,
    filter_expenses,
    summarize,
    total_amount,
)


def make_expense(amount, category, day=1, description=""):
    return ExpenseInDB(
        user_id="user-1",
        amount=amount,
        category=category,
        date=date(2025, 11, day),
        description=description,
    )


sample_expenses = [
    make_expense(20.0, ExpenseCategory.FOOD, 1, "Groceries"),
    make_expense(30.0, ExpenseCategory.FOOD, 2, "Lunch"),
    make_expense(50.0, ExpenseCategory.BILLS, 3, "Electricity"),
]


def test_total_of_empty_list_is_zero():
    assert total_amount([], "all") == 0


def test_total_with_and_without_filter():
    assert total_amount(sample_expenses, "all") == 100.0
    assert total_amount(sample_expenses, "Food") == 50.0
    assert total_amount(sample_expenses, ExpenseCategory.BILLS) == 50.0
    assert total_amount(sample_expenses, "Shopping") == 0


def test_totals_partition_by_category():
    expenses = sample_expenses + [
        make_expense(12.5, ExpenseCategory.SHOPPING, 4),
        make_expense(7.25, ExpenseCategory.HEALTHCARE, 5),
        make_expense(0.0, ExpenseCategory.OTHER, 6),
    ]
    categories = distinct_categories(expenses)[1:]
    assert total_amount(expenses, "all") == sum(total_amount(expenses, c) for c in categories)


def test_totals_partition_with_sub_cent_amounts():
    expenses = [
        make_expense(0.004, ExpenseCategory.FOOD, 1),
        make_expense(0.004, ExpenseCategory.BILLS, 2),
    ]
    parts = [total_amount(expenses, c) for c in distinct_categories(expenses)[1:]]
    assert total_amount(expenses, "all") == sum(parts)
    assert total_amount(expenses, "all") == Decimal("0.008")


def test_summarize_rounds_to_cents_for_display():
    expenses = [
        make_expense(0.004, ExpenseCategory.FOOD, 1),
        make_expense(0.004, ExpenseCategory.BILLS, 2),
        make_expense(10.0 / 3, ExpenseCategory.FOOD, 3),
    ]
    summary = summarize(expenses)
    assert summary["total"] == 3.34
    assert summary["category_totals"] == {"Food": 3.34, "Bills": 0.0}
    assert isinstance(summary["total"], float)


def test_distinct_categories_keeps_first_occurrence_order():
    assert distinct_categories(sample_expenses) == ["all", "Food", "Bills"]
    assert distinct_categories([]) == ["all"]


def test_derivations_do_not_mutate_input():
    expenses = list(sample_expenses)
    total_amount(expenses, "Food")
    filter_expenses(expenses, "Bills")
    summarize(expenses, "Food")
    assert expenses == sample_expenses


def test_category_totals():
    assert category_totals(sample_expenses) == {"Food": 50.0, "Bills": 50.0}


def test_summarize_all():
    summary = summarize(sample_expenses)
    assert summary["total"] == 100.0
    assert summary["categories"] == ["all", "Food", "Bills"]
    food = next(i for i in summary["insights"] if i["category"] == "Food")
    assert food == {
        "category": "Food",
        "total": 50.0,
        "average": 25.0,
        "transaction_count": 2,
        "share_percent": 50.0,
    }


def test_summarize_filtered_keeps_all_categories_for_filter_choices():
    summary = summarize(sample_expenses, "Bills")
    assert summary["total"] == 50.0
    assert summary["categories"] == ["all", "Food", "Bills"]
    assert summary["category_totals"] == {"Bills": 50.0}


def test_summarize_empty():
    summary = summarize([])
    assert summary["total"] == 0.0
    assert summary["categories"] == ["all"]
    assert summary["insights"] == []
