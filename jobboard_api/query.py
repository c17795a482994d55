"""Typed job queries.

A ``JobQuery`` is a plain value: a conjunction of predicates, an ordered list
of sort keys and an optional zero-based inclusive row range. Backends
translate it into their own dialect (SQLAlchemy statements, PostgREST
parameters); composing one never touches the network and never fails.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .filters import FilterState

LISTING_PAGE_SIZE = 12
FEATURED_LIMIT = 3
RECENT_LIMIT = 6

# URL filter key -> jobs column for exact-match filters
EQUALITY_FILTERS = (
    ("category", "category"),
    ("type", "type"),
    ("experience", "experience_level"),
)
SEARCH_COLUMNS = ("title", "company", "description")


@dataclass(frozen=True)
class Eq:
    column: str
    value: object


@dataclass(frozen=True)
class ILike:
    """Case-insensitive substring match."""
    column: str
    term: str

    @property
    def pattern(self) -> str:
        return f"%{self.term}%"


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of substring matches."""
    options: Tuple[ILike, ...]


Predicate = Union[Eq, ILike, AnyOf]


@dataclass(frozen=True)
class SortKey:
    column: str
    descending: bool = True


@dataclass(frozen=True)
class RowRange:
    start: int
    end: int  # inclusive

    @property
    def limit(self) -> int:
        return self.end - self.start + 1

    @classmethod
    def for_page(cls, page: int, page_size: int) -> "RowRange":
        start = (page - 1) * page_size
        return cls(start=start, end=start + page_size - 1)


@dataclass(frozen=True)
class JobQuery:
    predicates: Tuple[Predicate, ...] = ()
    order: Tuple[SortKey, ...] = ()
    range: Optional[RowRange] = None
    count_total: bool = False

    def describe(self) -> str:
        """Short human-readable form, used in log lines."""
        preds = " AND ".join(_describe(p) for p in self.predicates) or "TRUE"
        order = ", ".join(f"{k.column} {'desc' if k.descending else 'asc'}" for k in self.order)
        rng = f" range={self.range.start}..{self.range.end}" if self.range else ""
        return f"WHERE {preds} ORDER BY {order or '-'}{rng}"


def _describe(pred: Predicate) -> str:
    if isinstance(pred, Eq):
        return f"{pred.column}={pred.value!r}"
    if isinstance(pred, ILike):
        return f"{pred.column} ILIKE {pred.pattern!r}"
    return "(" + " OR ".join(_describe(o) for o in pred.options) + ")"


ACTIVE = Eq("status", "active")
LISTING_ORDER = (SortKey("featured"), SortKey("created_at"))
NEWEST_FIRST = (SortKey("created_at"),)


def compose_listing_query(state: FilterState, page_size: int = LISTING_PAGE_SIZE) -> JobQuery:
    predicates: list[Predicate] = [ACTIVE]
    if state.search:
        predicates.append(AnyOf(tuple(ILike(col, state.search) for col in SEARCH_COLUMNS)))
    if state.location:
        predicates.append(ILike("location", state.location))
    for key, column in EQUALITY_FILTERS:
        value = getattr(state, key)
        if value:
            predicates.append(Eq(column, value))
    return JobQuery(
        predicates=tuple(predicates),
        order=LISTING_ORDER,
        range=RowRange.for_page(state.page, page_size),
        count_total=True,
    )


def compose_featured_query(limit: int = FEATURED_LIMIT) -> JobQuery:
    return JobQuery(
        predicates=(ACTIVE, Eq("featured", True)),
        order=NEWEST_FIRST,
        range=RowRange(0, limit - 1),
    )


def compose_recent_query(limit: int = RECENT_LIMIT) -> JobQuery:
    return JobQuery(predicates=(ACTIVE,), order=NEWEST_FIRST, range=RowRange(0, limit - 1))
