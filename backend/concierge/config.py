"""Runtime settings for the listing concierge."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationMissing
from .utils.normalizers import coerce_bool, coerce_string

DEFAULT_LISTINGS_PATH = str(Path(__file__).parent / "data" / "listings.json")

LISTING_SOURCES = ("supabase", "json")


def _int_env(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Explicit configuration passed to the store, prompt builder and generation client."""

    openai_api_key: str | None = None
    model: str = "gpt-4o"
    temperature: float = 0.0

    business_name: str = "Real Estate Broker"
    contact_channel: str = "WhatsApp (+91 86682 14431)"
    currency_symbol: str = "₹"
    currency_name: str = "Indian Rupees"

    snapshot_limit: int = 50
    description_budget: int = 100
    pipeline_timeout: float = 30.0
    strict_grounding: bool = False

    listing_source: str = "supabase"
    supabase_url: str | None = None
    supabase_key: str | None = field(default=None, repr=False)
    supabase_table: str = "properties"
    listings_path: str = DEFAULT_LISTINGS_PATH

    def __post_init__(self) -> None:
        if self.listing_source not in LISTING_SOURCES:
            raise ValueError(
                f"LISTING_SOURCE must be one of {', '.join(LISTING_SOURCES)}, got {self.listing_source!r}"
            )

    def __repr__(self) -> str:
        key_state = "set" if self.has_credential else "missing"
        return (
            f"Settings(model={self.model!r}, openai_api_key={key_state}, "
            f"listing_source={self.listing_source!r}, snapshot_limit={self.snapshot_limit})"
        )

    @property
    def has_credential(self) -> bool:
        return bool(self.openai_api_key and self.openai_api_key.strip())

    def require_credential(self) -> str:
        """Return the backend credential or raise ConfigurationMissing."""
        if not self.has_credential:
            raise ConfigurationMissing("OPENAI_API_KEY is not configured")
        return self.openai_api_key.strip()

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and a .env file if present)."""
        load_dotenv()

        return cls(
            openai_api_key=coerce_string(os.getenv("OPENAI_API_KEY")),
            model=os.getenv("OPENAI_MODEL", "gpt-4o"),
            temperature=_float_env("OPENAI_TEMPERATURE", 0.0),
            business_name=os.getenv("BUSINESS_NAME", "Real Estate Broker"),
            contact_channel=os.getenv("CONTACT_CHANNEL", "WhatsApp (+91 86682 14431)"),
            currency_symbol=os.getenv("CURRENCY_SYMBOL", "₹"),
            currency_name=os.getenv("CURRENCY_NAME", "Indian Rupees"),
            snapshot_limit=_int_env("SNAPSHOT_LIMIT", 50),
            description_budget=_int_env("DESCRIPTION_BUDGET", 100),
            pipeline_timeout=_float_env("PIPELINE_TIMEOUT_SECONDS", 30.0),
            strict_grounding=bool(coerce_bool(os.getenv("STRICT_GROUNDING", "false"))),
            listing_source=os.getenv("LISTING_SOURCE", "supabase").strip().lower(),
            supabase_url=coerce_string(os.getenv("SUPABASE_URL")),
            supabase_key=coerce_string(os.getenv("SUPABASE_KEY")),
            supabase_table=os.getenv("SUPABASE_TABLE", "properties"),
            listings_path=os.getenv("LISTINGS_PATH", DEFAULT_LISTINGS_PATH),
        )
