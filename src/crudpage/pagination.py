"""Pagination state and page-link descriptors for list views."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Mapping

from .request import add_query_args

PAGE_PARAM = "crud_page"
PER_PAGE_PARAM = "crud_per_page"
DEFAULT_PER_PAGE = 50
DEFAULT_MAX_PER_PAGE = 500

_NON_NUMERIC = re.compile(r"[^0-9+\-]")


def _parse_int(value: Any) -> int:
    if value is None:
        return 0
    try:
        return int(_NON_NUMERIC.sub("", str(value)) or 0)
    except ValueError:
        return 0


def parse_pagination(
    query: Mapping[str, Any],
    per_page: int = DEFAULT_PER_PAGE,
    max_per_page: int = DEFAULT_MAX_PER_PAGE,
) -> tuple[int, int]:
    """Read ``crud_page``/``crud_per_page``; out-of-range values keep the defaults."""
    page = 1
    requested_page = _parse_int(query.get(PAGE_PARAM))
    requested_per_page = _parse_int(query.get(PER_PAGE_PARAM))
    if requested_page >= 1:
        page = requested_page
    if 1 < requested_per_page <= max_per_page:
        per_page = requested_per_page
    return page, per_page


@dataclass
class Pagination:
    page: int
    per_page: int
    total_items: int
    base_url: str = ""

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0 or self.total_items <= 0:
            return 0
        return math.ceil(self.total_items / self.per_page)

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * self.per_page

    @property
    def has_previous(self) -> bool:
        return 1 < self.page <= self.total_pages + 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def url_for(self, page: int) -> str:
        return add_query_args(self.base_url, {PAGE_PARAM: page, PER_PAGE_PARAM: self.per_page})

    def links(self, end_size: int = 5, mid_size: int = 5, prev_next: bool = True) -> list[dict]:
        """Link entries for a page navigator.

        Entries are ``{"kind": "page", "page", "url", "current"}``,
        ``{"kind": "dots"}``, or ``{"kind": "prev"|"next", "page", "url"}``.
        Nothing is produced for a single page of results.
        """
        total = self.total_pages
        if total < 2:
            return []
        end_size = max(end_size, 1)
        mid_size = max(mid_size, 0)
        links: list[dict] = []
        if prev_next and self.has_previous:
            links.append({"kind": "prev", "page": self.page - 1, "url": self.url_for(self.page - 1)})
        shown = set(range(1, min(end_size, total) + 1))
        shown.update(range(max(total - end_size + 1, 1), total + 1))
        shown.update(range(max(self.page - mid_size, 1), min(self.page + mid_size, total) + 1))
        previous = 0
        for n in sorted(shown):
            if n - previous > 1:
                links.append({"kind": "dots"})
            links.append({"kind": "page", "page": n, "url": self.url_for(n), "current": n == self.page})
            previous = n
        if prev_next and self.has_next:
            links.append({"kind": "next", "page": self.page + 1, "url": self.url_for(self.page + 1)})
        return links
