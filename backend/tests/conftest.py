"""Pytest configuration and fixtures."""

import os
import sys

import pytest

# Add backend directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("LISTING_SOURCE", "json")

from concierge.config import Settings  # noqa: E402
from concierge.data.store import ListingRecord  # noqa: E402
from concierge.errors import DataUnavailable  # noqa: E402


LAKE_VIEW_VILLA = {
    "id": "1001",
    "title": "Lake View Villa",
    "type": "House",
    "price": 4500000,
    "location": "Pune",
    "description": "Spacious villa near the lake.",
    "created_at": "2025-01-18T10:24:00+00:00",
}


class FakeStore:
    """In-memory listing store that records how it was called."""

    def __init__(self, rows=None, error: Exception | None = None):
        self.records = [ListingRecord.from_row(row) for row in rows or []]
        self.error = error
        self.calls: list[int] = []

    async def list_active_listings(self, limit: int) -> list[ListingRecord]:
        self.calls.append(limit)
        if self.error is not None:
            raise self.error
        return self.records[:limit]


class FakeGenerator:
    """Generation client stand-in; replies with a fixed text or a callable of the prompt."""

    def __init__(self, reply="- **Lake View Villa** - **₹4500000**: Spacious villa near the lake.", error=None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply(prompt) if callable(self.reply) else self.reply


@pytest.fixture
def settings():
    """Settings with a credential and no external store."""
    return Settings(openai_api_key="test-key", listing_source="json")


@pytest.fixture
def settings_without_key():
    return Settings(openai_api_key=None, listing_source="json")


@pytest.fixture
def villa_store():
    return FakeStore([LAKE_VIEW_VILLA])


@pytest.fixture
def failing_store():
    return FakeStore(error=DataUnavailable("store down"))
