"""
Language-model client for expense categorization and spending insights.

The OpenAI client is created server side from configuration and handed
in; nothing here reads credentials from module globals.
"""
import hashlib
import logging
import threading
import time
from typing import Callable, Dict, Optional, Sequence, Tuple

from openai import OpenAI, OpenAIError

from spendwise.core.exceptions import AIServiceError
from spendwise.models.expense import ExpenseCategory, ExpenseInDB

logger = logging.getLogger(__name__)

NO_INSIGHTS_PLACEHOLDER = "No insights available."
NO_EXPENSES_PLACEHOLDER = "Add some expenses to get AI-powered insights!"

CATEGORY_SYSTEM_PROMPT = "You are a helpful assistant that categorizes expenses. Respond with only the category name."
INSIGHTS_SYSTEM_PROMPT = (
    "You are a financial advisor analyzing expense patterns. Provide concise, actionable insights."
)


def parse_category(text: Optional[str]) -> ExpenseCategory:
    """Match a model reply to a category, falling back to Other."""
    if not text:
        return ExpenseCategory.OTHER
    cleaned = text.strip().strip(".\"'").lower()
    for category in ExpenseCategory:
        if category.value.lower() == cleaned:
            return category
    # Replies like "Category: Food"
    for category in ExpenseCategory:
        if category.value.lower() in cleaned:
            return category
    return ExpenseCategory.OTHER


class InsightCache:
    """
    Per-user cache of generated insights.

    An entry is reused while it is younger than ``ttl_seconds`` and the
    user's expense list has not changed.
    """

    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[float, str, str]] = {}

    @staticmethod
    def fingerprint(expenses: Sequence[ExpenseInDB]) -> str:
        digest = hashlib.sha256()
        for exp in expenses:
            digest.update(f"{exp.expense_id}|{exp.amount}|{exp.category}|{exp.date}|{exp.description}\n".encode("utf-8"))
        return digest.hexdigest()

    def get(self, user_id: str, fingerprint: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return None
            stored_at, stored_fingerprint, text = entry
            if stored_fingerprint != fingerprint or self._clock() - stored_at > self.ttl_seconds:
                del self._entries[user_id]
                return None
            return text

    def put(self, user_id: str, fingerprint: str, text: str) -> None:
        with self._lock:
            self._entries[user_id] = (self._clock(), fingerprint, text)


class InsightClient:
    """Categorizes expenses and writes spending insights with a chat model."""

    def __init__(
        self,
        client: Optional[OpenAI],
        model: str = "gpt-3.5-turbo",
        cache: Optional[InsightCache] = None,
    ):
        self.client = client
        self.model = model
        self.cache = cache or InsightCache()

    @classmethod
    def from_settings(cls, settings) -> "InsightClient":
        client = OpenAI(api_key=settings.OPENAI_API_KEY) if settings.OPENAI_API_KEY else None
        if client is None:
            logger.warning("OPENAI_API_KEY not set; categorization falls back to 'Other'")
        return cls(client, model=settings.OPENAI_MODEL, cache=InsightCache(settings.INSIGHTS_CACHE_SECONDS))

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def categorize_expense(self, description: str, amount: float) -> ExpenseCategory:
        if not self.enabled:
            return ExpenseCategory.OTHER

        options = ", ".join(category.value for category in ExpenseCategory)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": CATEGORY_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": (
                            f"Categorize this expense: {description} for ${amount}. "
                            f"Respond with one of these categories only: {options}"
                        ),
                    },
                ],
                temperature=0.3,
                max_tokens=10,
            )
        except OpenAIError as e:
            logger.warning(f"Categorization failed, using Other: {e}")
            return ExpenseCategory.OTHER

        category = parse_category(response.choices[0].message.content)
        logger.debug(f"Categorized '{description}' as {category.value}")
        return category

    def generate_insights(self, expenses: Sequence[ExpenseInDB]) -> str:
        """
        Ask the model for three insights about ``expenses``.

        Raises:
            AIServiceError: if the API call fails
        """
        if not expenses:
            return NO_EXPENSES_PLACEHOLDER
        if not self.enabled:
            return NO_INSIGHTS_PLACEHOLDER

        expenses_summary = "\n".join(
            f"{exp.description}: ${exp.amount} ({_category_value(exp.category)}) on {exp.date.isoformat()}"
            for exp in expenses
        )
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": INSIGHTS_SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": f"Analyze these expenses and provide 3 key insights and recommendations:\n{expenses_summary}",
                    },
                ],
                temperature=0.7,
                max_tokens=250,
            )
        except OpenAIError as e:
            logger.error(f"Insight generation failed: {e}")
            raise AIServiceError(f"Insight generation failed: {e}") from e

        content = response.choices[0].message.content
        return content.strip() if content and content.strip() else NO_INSIGHTS_PLACEHOLDER

    def insights_for_user(self, user_id: str, expenses: Sequence[ExpenseInDB]) -> Tuple[str, bool]:
        """
        Cached variant of ``generate_insights``.

        Returns:
            (insights text, whether it came from the cache)
        """
        fingerprint = self.cache.fingerprint(expenses)
        cached = self.cache.get(user_id, fingerprint)
        if cached is not None:
            return cached, True

        text = self.generate_insights(expenses)
        if expenses:
            self.cache.put(user_id, fingerprint, text)
        return text, False


def _category_value(category) -> str:
    return category.value if isinstance(category, ExpenseCategory) else str(category)
