from datetime import date
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from spendwise.core.exceptions import AIServiceError
from spendwise.models.expense import ExpenseCategory, ExpenseInDB
from spendwise.services.ai import (
    NO_EXPENSES_PLACEHOLDER,
    NO_INSIGHTS_PLACEHOLDER,
    InsightCache,
    InsightClient,
    parse_category,
)


def chat_reply(content):
    response = MagicMock()
    response.choices[0].message.content = content
    return response


def make_client(*replies):
    openai_client = MagicMock()
    openai_client.chat.completions.create.side_effect = list(replies)
    return openai_client


expenses = [
    ExpenseInDB(
        user_id="user-1",
        expense_id="e1",
        amount=42.0,
        description="Dinner",
        category=ExpenseCategory.FOOD,
        date=date(2025, 11, 1),
    ),
]


@pytest.mark.parametrize(
    "reply, expected",
    [
        ("Food", ExpenseCategory.FOOD),
        ("  healthcare.\n", ExpenseCategory.HEALTHCARE),
        ("Category: Bills", ExpenseCategory.BILLS),
        ("Groceries", ExpenseCategory.OTHER),
        ("", ExpenseCategory.OTHER),
        (None, ExpenseCategory.OTHER),
    ],
)
def test_parse_category(reply, expected):
    assert parse_category(reply) == expected


def test_categorize_expense_sends_prompt():
    openai_client = make_client(chat_reply("Transportation"))
    client = InsightClient(openai_client, model="gpt-test")

    assert client.categorize_expense("Uber to airport", 35.0) == ExpenseCategory.TRANSPORTATION

    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-test"
    assert kwargs["temperature"] == 0.3
    assert kwargs["max_tokens"] == 10
    assert "Uber to airport for $35.0" in kwargs["messages"][1]["content"]


def test_categorize_falls_back_to_other_on_api_error():
    client = InsightClient(make_client(OpenAIError("rate limited")))
    assert client.categorize_expense("Something", 1.0) == ExpenseCategory.OTHER


def test_disabled_client_never_calls_out():
    client = InsightClient(None)
    assert not client.enabled
    assert client.categorize_expense("Coffee", 3.0) == ExpenseCategory.OTHER
    assert client.generate_insights(expenses) == NO_INSIGHTS_PLACEHOLDER


def test_generate_insights():
    openai_client = make_client(chat_reply("  1. Eat out less.  "))
    client = InsightClient(openai_client)

    assert client.generate_insights(expenses) == "1. Eat out less."
    prompt = openai_client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
    assert "Dinner: $42.0 (Food) on 2025-11-01" in prompt


def test_generate_insights_placeholders():
    client = InsightClient(make_client(chat_reply("")))
    assert client.generate_insights([]) == NO_EXPENSES_PLACEHOLDER
    assert client.generate_insights(expenses) == NO_INSIGHTS_PLACEHOLDER


def test_generate_insights_raises_on_api_error():
    client = InsightClient(make_client(OpenAIError("down")))
    with pytest.raises(AIServiceError):
        client.generate_insights(expenses)


def test_insights_are_cached_until_expiry():
    now = [1000.0]
    cache = InsightCache(ttl_seconds=300, clock=lambda: now[0])
    openai_client = make_client(chat_reply("first"), chat_reply("second"))
    client = InsightClient(openai_client, cache=cache)

    assert client.insights_for_user("user-1", expenses) == ("first", False)
    now[0] += 299
    assert client.insights_for_user("user-1", expenses) == ("first", True)
    now[0] += 2
    assert client.insights_for_user("user-1", expenses) == ("second", False)
    assert openai_client.chat.completions.create.call_count == 2


def test_cache_invalidated_when_expenses_change():
    openai_client = make_client(chat_reply("first"), chat_reply("second"))
    client = InsightClient(openai_client)
    client.insights_for_user("user-1", expenses)

    changed = expenses + [
        ExpenseInDB(user_id="user-1", expense_id="e2", amount=5.0, date=date(2025, 11, 2)),
    ]
    assert client.insights_for_user("user-1", changed) == ("second", False)


def test_cache_is_per_user():
    openai_client = make_client(chat_reply("for one"), chat_reply("for two"))
    client = InsightClient(openai_client)
    assert client.insights_for_user("user-1", expenses)[0] == "for one"
    assert client.insights_for_user("user-2", expenses)[0] == "for two"
