"""Listing filter state and its URL query-parameter form.

The five criteria are plain strings; an empty string means "no constraint"
and is never written to the URL. Any filter change sends the user back to
the first page.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Mapping, Optional
from urllib.parse import urlencode

FILTER_KEYS = ("search", "location", "category", "type", "experience")


@dataclass(frozen=True)
class FilterState:
    search: str = ""
    location: str = ""
    category: str = ""
    type: str = ""
    experience: str = ""
    page: int = 1

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> "FilterState":
        """Build the initial state from URL query parameters.

        Missing parameters become "", unknown keys are ignored and a missing
        or malformed ``page`` falls back to 1.
        """
        values = {key: params.get(key) or "" for key in FILTER_KEYS}
        return cls(page=_parse_page(params.get("page")), **values)

    def with_filter(self, key: str, value: str) -> "FilterState":
        if key not in FILTER_KEYS:
            raise ValueError(f"unknown filter: {key!r}")
        return replace(self, page=1, **{key: value or ""})

    def with_page(self, page: int) -> "FilterState":
        return replace(self, page=max(1, page))

    def cleared(self) -> "FilterState":
        return FilterState()

    def criteria(self) -> dict[str, str]:
        return {key: getattr(self, key) for key in FILTER_KEYS}

    @property
    def is_empty(self) -> bool:
        return not any(self.criteria().values())

    def to_query_params(self) -> dict[str, str]:
        """Exactly the non-empty filter fields, in field order."""
        return {k: v for k, v in self.criteria().items() if v}

    def to_query_string(self) -> str:
        return urlencode(self.to_query_params())

    def page_url(self, base: str, page: int) -> str:
        """Link for a pagination control; page 1 is left implicit."""
        params = self.to_query_params()
        if page > 1:
            params["page"] = str(page)
        query = urlencode(params)
        return f"{base}?{query}" if query else base


def _parse_page(raw: Optional[str]) -> int:
    try:
        page = int(raw) if raw else 1
    except ValueError:
        return 1
    return page if page >= 1 else 1


def search_redirect(term: str, base: str = "/jobs") -> Optional[str]:
    """URL the home page search box submits to, or None for a blank term."""
    term = (term or "").strip()
    if not term:
        return None
    return f"{base}?{urlencode({'search': term})}"
