"""Read-only access to the listing store."""

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Protocol

from supabase import create_client

from ..config import Settings
from ..errors import DataUnavailable
from ..utils.logging import logger
from ..utils.normalizers import coerce_price, coerce_string

LISTING_COLUMNS = "id, title, type, price, location, description, created_at"


@dataclass(frozen=True)
class ListingRecord:
    """A listing row as the assistant sees it."""

    id: str
    title: str
    type: str
    price: int | float | str
    location: str
    description: str
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: Any) -> "ListingRecord":
        """Coerce a loosely-typed store row, filling explicit defaults."""
        if not isinstance(row, Mapping):
            raise DataUnavailable(f"Listing row is not a mapping: {type(row).__name__}")

        return cls(
            id=coerce_string(row.get("id")) or "",
            title=coerce_string(row.get("title")) or "Untitled property",
            type=coerce_string(row.get("type")) or "Property",
            price=coerce_price(row.get("price")),
            location=coerce_string(row.get("location")) or "",
            description=coerce_string(row.get("description")) or "",
            created_at=coerce_string(row.get("created_at")),
        )


class ListingStore(Protocol):
    """Anything that can hand out a bounded, newest-first page of listings."""

    async def list_active_listings(self, limit: int) -> list[ListingRecord]:
        ...


def _records_from_rows(rows: Any, limit: int) -> list[ListingRecord]:
    if not isinstance(rows, list):
        raise DataUnavailable(f"Listing store returned {type(rows).__name__}, expected a list")
    return [ListingRecord.from_row(row) for row in rows[:limit]]


class JsonListingStore:
    """Listings read from a local JSON file, reloaded on every call."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load_rows(self) -> Any:
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    async def list_active_listings(self, limit: int) -> list[ListingRecord]:
        try:
            rows = await asyncio.to_thread(self._load_rows)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read listings from %s: %s", self.path, exc)
            raise DataUnavailable(f"Cannot read {self.path}") from exc

        if not isinstance(rows, list):
            raise DataUnavailable(f"{self.path} does not contain a list of listings")

        # Newest first; rows without a timestamp sink to the end
        ordered = sorted(
            rows,
            key=lambda row: str(row.get("created_at") or "") if isinstance(row, Mapping) else "",
            reverse=True,
        )
        return _records_from_rows(ordered, limit)


class SupabaseListingStore:
    """Listings read from the hosted Supabase ``properties`` table."""

    def __init__(self, url: str | None, key: str | None, table: str = "properties"):
        self.url = url
        self.key = key
        self.table = table
        self._client = None

    def _get_client(self):
        if self._client is None:
            if not self.url or not self.key:
                raise DataUnavailable("SUPABASE_URL / SUPABASE_KEY are not configured")
            self._client = create_client(self.url, self.key)
        return self._client

    def _fetch_rows(self, limit: int) -> Any:
        response = (
            self._get_client()
            .table(self.table)
            .select(LISTING_COLUMNS)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data

    async def list_active_listings(self, limit: int) -> list[ListingRecord]:
        try:
            rows = await asyncio.to_thread(self._fetch_rows, limit)
        except DataUnavailable:
            raise
        except Exception as exc:
            logger.error("Supabase listing query failed: %s", exc)
            raise DataUnavailable("Listing store query failed") from exc

        return _records_from_rows(rows, limit)


def create_listing_store(settings: Settings) -> ListingStore:
    """Build the store selected by LISTING_SOURCE."""
    if settings.listing_source == "json":
        return JsonListingStore(settings.listings_path)
    return SupabaseListingStore(
        settings.supabase_url,
        settings.supabase_key,
        settings.supabase_table,
    )
