"""
Marathon Scoreboard - Scoring Service
Point values, book-data normalization and per-team stats
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union

# Points awarded per book, by category
BOOK_VALUES: Dict[str, float] = {
    "Bhagavatam": 72,
    "CC": 36,
    "MBB": 2,
    "BB": 1,
    "MB": 0.5,
    "SB": 0.25,
}

# "Total books" expressed in MBB-equivalents
BOOK_EQUIV: Dict[str, float] = {
    "Bhagavatam": 18,  # 1 Bhagavatam == 18 MBB
    "CC": 9,           # 1 CC == 9 MBB
    "MBB": 1,
    "BB": 1,
    "MB": 1,
    "SB": 1,
}

BOOK_CATEGORIES: List[str] = list(BOOK_VALUES)


def point_value(category: str) -> float:
    """Weight for a category; unknown codes are worth nothing"""
    return BOOK_VALUES.get(category, 0)


def empty_counts() -> Dict[str, int]:
    return {category: 0 for category in BOOK_CATEGORIES}


def coerce_count(value) -> int:
    """Turn a stored count into a non-negative int (blank/None -> 0)"""
    if value is None or value == "":
        return 0
    try:
        count = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(0, count)


def clean_counts(raw: Optional[Mapping]) -> Dict[str, int]:
    """Keep only known categories, every one present, all non-negative ints"""
    counts = empty_counts()
    if not raw:
        return counts
    for category in BOOK_CATEGORIES:
        counts[category] = coerce_count(raw.get(category))
    return counts


# ================== BOOK DATA SHAPES ==================

@dataclass(frozen=True)
class DatedEntry:
    """Book counts recorded for one calendar day (YYYY-MM-DD)"""
    date: str
    counts: Dict[str, int] = field(default_factory=empty_counts)

    def to_document(self) -> Dict:
        return {"date": self.date, **self.counts}

    @classmethod
    def from_document(cls, raw: Mapping) -> "DatedEntry":
        return cls(date=str(raw.get("date", "")), counts=clean_counts(raw))


@dataclass(frozen=True)
class FlatBooks:
    """Legacy shape: one undated count mapping"""
    counts: Dict[str, int]


@dataclass(frozen=True)
class BookHistory:
    """History shape: dated entries, at most one per date"""
    entries: List[DatedEntry]


BookData = Union[FlatBooks, BookHistory]


@dataclass
class NormalizedBooks:
    """Computation-ready view of a team's books"""
    current: Dict[str, int]
    history: List[DatedEntry]


def detect_book_data(raw) -> BookData:
    """Classify a persisted books value as legacy (flat) or history"""
    if isinstance(raw, (list, tuple)):
        return BookHistory([DatedEntry.from_document(entry) for entry in raw if isinstance(entry, Mapping)])
    if isinstance(raw, Mapping):
        if raw.get("date"):
            # A lone dated entry rather than a flat snapshot
            return BookHistory([DatedEntry.from_document(raw)])
        return FlatBooks(clean_counts(raw))
    return FlatBooks(empty_counts())


def read_book_data(document: Mapping) -> BookData:
    """Pick the field scoring should use: history when present, else flat books"""
    history = document.get("booksHistory")
    if history:
        return detect_book_data(history)
    return detect_book_data(document.get("books") or {})


def normalize_book_data(raw: BookData, current_date: str,
                        current: Optional[Mapping] = None) -> NormalizedBooks:
    """
    Reconcile both shapes into a dated history plus a flat snapshot.
    Legacy counts become a single entry tagged with current_date.
    """
    if isinstance(raw, FlatBooks):
        snapshot = clean_counts(current) if current is not None else dict(raw.counts)
        return NormalizedBooks(
            current=snapshot,
            history=[DatedEntry(date=current_date, counts=dict(raw.counts))],
        )

    return NormalizedBooks(
        current=clean_counts(current),
        history=list(raw.entries),
    )


def entries_for_date(history: Sequence[DatedEntry], date_filter: Optional[str]) -> List[DatedEntry]:
    """Entries recorded on exactly date_filter; all entries when no filter"""
    if not date_filter:
        return list(history)
    return [entry for entry in history if entry.date == date_filter]


def upsert_history_entry(history: Sequence[DatedEntry], date: str,
                         counts: Mapping) -> List[DatedEntry]:
    """Replace the entry for date in place, or append a new one"""
    updated = list(history)
    new_entry = DatedEntry(date=date, counts=clean_counts(counts))
    for index, entry in enumerate(updated):
        if entry.date == date:
            updated[index] = new_entry
            return updated
    updated.append(new_entry)
    return updated


# ================== STATS ==================

@dataclass(frozen=True)
class DerivedStats:
    total_books: float = 0
    total_points: float = 0


def sum_counts(entries: Sequence[DatedEntry]) -> Dict[str, int]:
    """Per-category totals across entries"""
    totals = empty_counts()
    for entry in entries:
        for category in BOOK_CATEGORIES:
            totals[category] += entry.counts.get(category, 0)
    return totals


def calculate_stats(entries: Sequence[Union[DatedEntry, Mapping]],
                    equivalence: Optional[Mapping[str, float]] = None) -> DerivedStats:
    """
    Total books and points across entries.

    Each entry may be a DatedEntry or a plain count mapping. Only the fixed
    categories are counted; anything else in the input is ignored. With an
    equivalence table, books are counted as count x factor.
    """
    total_books = 0
    total_points = 0
    for entry in entries:
        counts = entry.counts if isinstance(entry, DatedEntry) else entry
        for category in BOOK_CATEGORIES:
            count = coerce_count(counts.get(category))
            total_points += count * point_value(category)
            if equivalence is None:
                total_books += count
            else:
                total_books += count * equivalence.get(category, 0)
    return DerivedStats(total_books=total_books, total_points=total_points)


def format_points(points: float) -> str:
    return f"{points:.2f}"


def format_books(books: float) -> str:
    """Whole numbers without a trailing .0"""
    if float(books).is_integer():
        return str(int(books))
    return f"{books:.2f}"
