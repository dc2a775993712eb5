"""
Roster query engine — filter, sort, paginate and count the registrations
shown in the admin panel.

Everything here is a pure function of its inputs. The view for one admin
chat is the tuple (records, filters, sort field, sort direction, page);
build_roster_page() memoises on exactly that key, so re-rendering an
unchanged panel costs one cache lookup.

Rules
-----
Filtering  : case-insensitive substring on str(value), AND across fields,
             empty patterns ignored
Sorting    : one field; None first when ascending, last when descending,
             otherwise plain case-sensitive string comparison (numeric-looking
             fields such as FIDE IDs are NOT compared as numbers); stable
Paging     : 12 rows per page, at least one page, out-of-range pages clamp
Aggregates : always over the unfiltered roster
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Tuple

from chessreg.models.models import Player, PaymentStatus

PAGE_SIZE = 12

ASC  = "asc"
DESC = "desc"


@dataclass(frozen=True)
class PlayerRecord:
    """Immutable, hashable snapshot of one `registrations` row."""
    id:                 str
    created_at:         Optional[datetime]
    full_name:          str
    name_with_initials: str
    fide_id:            Optional[str]
    date_of_birth:      Optional[date]
    gender:             str
    contact_number:     str
    age_category:       str
    payment_status:     str
    reference_number:   str

    @classmethod
    def from_model(cls, p: Player) -> "PlayerRecord":
        return cls(**{f.name: getattr(p, f.name) for f in fields(cls)})

    def value(self, field_name: str) -> Any:
        return getattr(self, field_name)


RECORD_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(PlayerRecord))

# Every column except the opaque id can be sorted and filtered on
SORTABLE_FIELDS: Tuple[str, ...] = tuple(f for f in RECORD_FIELDS if f != "id")

FIELD_LABELS: Dict[str, str] = {
    "full_name":          "Full Name",
    "name_with_initials": "Name with Initials",
    "fide_id":            "FIDE ID",
    "date_of_birth":      "Date of Birth",
    "gender":             "Gender",
    "contact_number":     "Contact",
    "age_category":       "Age Category",
    "payment_status":     "Payment Status",
    "reference_number":   "Reference",
    "created_at":         "Registered",
}


def _check_field(field_name: str) -> None:
    if field_name not in SORTABLE_FIELDS:
        raise ValueError(f"Unknown roster field: {field_name}")


# ── Filtering ─────────────────────────────────────────────────────────────────

def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def matches(record: PlayerRecord, filters: Dict[str, str]) -> bool:
    for field_name, pattern in filters.items():
        if not pattern:
            continue
        if pattern.lower() not in _as_text(record.value(field_name)).lower():
            return False
    return True


def filter_records(
    records: Iterable[PlayerRecord],
    filters: Dict[str, str],
) -> Tuple[PlayerRecord, ...]:
    for field_name in filters:
        _check_field(field_name)
    return tuple(r for r in records if matches(r, filters))


# ── Sorting ───────────────────────────────────────────────────────────────────

def sort_records(
    records: Iterable[PlayerRecord],
    field_name: str,
    direction: str = ASC,
) -> Tuple[PlayerRecord, ...]:
    _check_field(field_name)

    def key(r: PlayerRecord) -> Tuple[bool, str]:
        v = r.value(field_name)
        return (v is not None, _as_text(v))

    # sorted() stays stable with reverse=True, so equal keys keep input order
    return tuple(sorted(records, key=key, reverse=(direction == DESC)))


# ── Paging ────────────────────────────────────────────────────────────────────

def total_pages_for(count: int, page_size: int = PAGE_SIZE) -> int:
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(page, 1), total_pages)


def paginate(
    records: Tuple[PlayerRecord, ...],
    page: int,
    page_size: int = PAGE_SIZE,
) -> Tuple[Tuple[PlayerRecord, ...], int, int]:
    """Return (rows, clamped page, total pages). Never raises on bad pages."""
    total = total_pages_for(len(records), page_size)
    page = clamp_page(page, total)
    start = (page - 1) * page_size
    return records[start:start + page_size], page, total


# ── Aggregates ────────────────────────────────────────────────────────────────

def percent(part: int, whole: int) -> int:
    """Whole-number percentage, rounded half up; 0 when whole is 0."""
    if whole == 0:
        return 0
    return math.floor(part * 100 / whole + 0.5)


@dataclass(frozen=True)
class RosterStats:
    total_registered: int = 0
    total_paid:       int = 0
    paid_to_a:        int = 0
    paid_to_b:        int = 0

    @property
    def paid_pct_of_total(self) -> int:
        return percent(self.total_paid, self.total_registered)

    @property
    def a_pct_of_paid(self) -> int:
        return percent(self.paid_to_a, self.total_paid)

    @property
    def b_pct_of_paid(self) -> int:
        return percent(self.paid_to_b, self.total_paid)


def compute_stats(records: Iterable[PlayerRecord]) -> RosterStats:
    records = list(records)
    return RosterStats(
        total_registered=len(records),
        total_paid=sum(1 for r in records if r.payment_status != PaymentStatus.UNPAID),
        paid_to_a=sum(1 for r in records if r.payment_status == PaymentStatus.PAID_TO_A),
        paid_to_b=sum(1 for r in records if r.payment_status == PaymentStatus.PAID_TO_B),
    )


def unique_values(records: Iterable[PlayerRecord], field_name: str) -> List[str]:
    """Sorted distinct non-empty values of a field (filter picker options)."""
    _check_field(field_name)
    values = {_as_text(r.value(field_name)) for r in records}
    values.discard("")
    return sorted(values)


# ── View state ────────────────────────────────────────────────────────────────

@dataclass
class RosterView:
    """
    Filter / sort / page state of one admin chat.

    Changing a filter or the sort always returns to page 1.
    Stored in FSM data via to_dict() / from_dict().
    """
    filters:        Dict[str, str] = field(default_factory=dict)
    sort_field:     str = "created_at"
    sort_direction: str = DESC
    page:           int = 1

    def set_filter(self, field_name: str, pattern: str) -> None:
        _check_field(field_name)
        pattern = (pattern or "").strip()
        if pattern:
            self.filters[field_name] = pattern
        else:
            self.filters.pop(field_name, None)
        self.page = 1

    def clear_filters(self) -> None:
        self.filters = {}
        self.page = 1

    def toggle_sort(self, field_name: str) -> None:
        """Same field flips the direction; a new field starts ascending."""
        _check_field(field_name)
        if field_name == self.sort_field:
            self.sort_direction = ASC if self.sort_direction == DESC else DESC
        else:
            self.sort_field = field_name
            self.sort_direction = ASC
        self.page = 1

    def go_to_page(self, page: int, total_pages: int) -> None:
        self.page = clamp_page(page, total_pages)

    def filters_key(self) -> Tuple[Tuple[str, str], ...]:
        return tuple(sorted((k, v) for k, v in self.filters.items() if v))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filters": dict(self.filters),
            "sort_field": self.sort_field,
            "sort_direction": self.sort_direction,
            "page": self.page,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RosterView":
        if not data:
            return cls()
        return cls(
            filters=dict(data.get("filters") or {}),
            sort_field=data.get("sort_field", "created_at"),
            sort_direction=data.get("sort_direction", DESC),
            page=int(data.get("page", 1)),
        )


@dataclass(frozen=True)
class RosterPage:
    """One rendered page of the roster plus everything the panel shows."""
    rows:        Tuple[PlayerRecord, ...]
    visible:     Tuple[PlayerRecord, ...]   # filtered + sorted, not paginated
    page:        int
    total_pages: int
    stats:       RosterStats

    @property
    def first_index(self) -> int:
        return (self.page - 1) * PAGE_SIZE + 1


@lru_cache(maxsize=32)
def _build(
    records: Tuple[PlayerRecord, ...],
    filters: Tuple[Tuple[str, str], ...],
    sort_field: str,
    sort_direction: str,
    page: int,
) -> RosterPage:
    visible = sort_records(filter_records(records, dict(filters)), sort_field, sort_direction)
    rows, page, total = paginate(visible, page)
    return RosterPage(
        rows=rows,
        visible=visible,
        page=page,
        total_pages=total,
        stats=compute_stats(records),
    )


def build_roster_page(records: Iterable[PlayerRecord], view: RosterView) -> RosterPage:
    """Memoised on (records, filters, sort field, sort direction, page)."""
    return _build(
        tuple(records),
        view.filters_key(),
        view.sort_field,
        view.sort_direction,
        view.page,
    )


# ── In-memory roster ──────────────────────────────────────────────────────────

class Roster:
    """
    The admin's copy of the registrations.

    Only ever replaced wholesale after a fetch, or patched at one id after the
    store has confirmed a payment-status update.
    """

    def __init__(self, records: Iterable[PlayerRecord] = ()) -> None:
        self.records: Tuple[PlayerRecord, ...] = tuple(records)

    @classmethod
    def from_players(cls, players: Iterable[Player]) -> "Roster":
        return cls(PlayerRecord.from_model(p) for p in players)

    def replace(self, records: Iterable[PlayerRecord]) -> None:
        self.records = tuple(records)

    def get(self, player_id: str) -> Optional[PlayerRecord]:
        return next((r for r in self.records if r.id == player_id), None)

    def patch_status(self, player_id: str, status: str) -> bool:
        """Swap in a copy of one record with the new status. False if absent."""
        patched = False
        new_records = []
        for r in self.records:
            if r.id == player_id:
                r = replace(r, payment_status=status)
                patched = True
            new_records.append(r)
        self.records = tuple(new_records)
        return patched
