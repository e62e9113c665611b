"""Compile an inventory snapshot into the textual ledger the assistant is grounded on."""

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from .data.store import ListingRecord
from .utils.normalizers import normalize_price

EMPTY_LEDGER = "No properties currently listed."
DEFAULT_DESCRIPTION_BUDGET = 100

_BOLD_SPAN = re.compile(r"\*\*(.+?)\*\*")
# Bold spans made only of currency marks, digits, separators and amount words
_PRICE_LIKE = re.compile(
    r"^[\s₹$€£Rs.,:/\-\d]*(\d[\d,.]*)\s*(lakh|lakhs|lac|crore|crores|cr|k|l)?[\s.]*$",
    re.IGNORECASE,
)
# Field labels the model bolds in structured answers
FIELD_LABELS = {
    "price",
    "location",
    "type",
    "property type",
    "description",
    "details",
    "contact",
    "note",
}


def single_line(value: str) -> str:
    """Collapse all whitespace, newlines included, to single spaces."""
    return " ".join(value.split())


@dataclass(frozen=True)
class LedgerEntry:
    """One listing as rendered into the grounding context."""

    title: str
    type: str
    display_price: str
    location: str
    normalized_price: int
    description: str


def compile_ledger(
    records: Iterable[ListingRecord],
    description_budget: int = DEFAULT_DESCRIPTION_BUDGET,
) -> list[LedgerEntry]:
    """Build ledger entries in input order, each field flattened to one line."""
    return [
        LedgerEntry(
            title=single_line(record.title),
            type=single_line(record.type),
            display_price=single_line(str(record.price)),
            location=single_line(record.location),
            normalized_price=normalize_price(record.price),
            description=single_line(record.description)[:description_budget],
        )
        for record in records
    ]


def format_price(display_price: str, currency_symbol: str = "₹") -> str:
    """Prefix the currency symbol unless the stored value already carries it."""
    if not currency_symbol or display_price.lstrip().startswith(currency_symbol):
        return display_price
    return f"{currency_symbol}{display_price}"


def format_ledger_line(entry: LedgerEntry, currency_symbol: str = "₹") -> str:
    return (
        f"- {entry.title} ({entry.type}): {format_price(entry.display_price, currency_symbol)}, "
        f"Location: {entry.location}. (RawValue: {entry.normalized_price}). "
        f"Desc: {entry.description}..."
    )


def render_ledger(entries: Sequence[LedgerEntry], currency_symbol: str = "₹") -> str:
    """Render entries one per line, or the empty-inventory sentinel."""
    if not entries:
        return EMPTY_LEDGER
    return "\n".join(format_ledger_line(entry, currency_symbol) for entry in entries)


def audit_grounding(text: str, entries: Sequence[LedgerEntry]) -> list[str]:
    """
    Return bolded phrases in a reply that match neither a ledger title nor a price.

    The rules block asks the model to bold property titles and prices, so any
    other bold span is a candidate invented listing. Matching is
    case-insensitive and tolerates the title being embedded in a longer span
    (e.g. "**Lake View Villa - ₹4500000**").
    """
    titles = [entry.title.casefold() for entry in entries if entry.title]
    prices = {entry.display_price.casefold() for entry in entries}

    ungrounded = []
    for span in _BOLD_SPAN.findall(text or ""):
        phrase = span.strip().rstrip(":").strip()
        if not phrase:
            continue
        folded = phrase.casefold()
        if folded in FIELD_LABELS:
            continue
        if folded in prices or _PRICE_LIKE.match(phrase):
            continue
        if any(title in folded or folded in title for title in titles):
            continue
        ungrounded.append(phrase)

    return ungrounded
