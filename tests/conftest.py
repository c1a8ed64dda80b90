from datetime import date

import pytest
from fastapi.testclient import TestClient

from spendwise.db.memory import MemoryStore
from spendwise.main import create_app
from spendwise.models.expense import ExpenseCategory
from spendwise.routers.deps import get_today

FIXED_TODAY = date(2025, 11, 15)


class FakeInsightClient:
    """Stands in for InsightClient without any network access."""

    model = "fake-model"
    enabled = True

    def __init__(self):
        self.categories = {}
        self.insight_calls = 0

    def categorize_expense(self, description, amount):
        return self.categories.get(description, ExpenseCategory.OTHER)

    def insights_for_user(self, user_id, expenses):
        self.insight_calls += 1
        return f"{len(expenses)} expenses reviewed", False


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ai_client():
    return FakeInsightClient()


@pytest.fixture
def app(store, ai_client):
    application = create_app(store=store, ai_client=ai_client)
    application.dependency_overrides[get_today] = lambda: FIXED_TODAY
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def register_and_login(client, email="ana@example.com", password="s3cret-pass"):
    response = client.post("/api/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)


@pytest.fixture
def other_user_headers(client):
    return register_and_login(client, email="ben@example.com")
