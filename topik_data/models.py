# topik_data/models.py
"""
View models returned by the services and handlers.

Records themselves stay plain dicts exactly as they appear in the JSON files.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence


@dataclass(frozen=True)
class Page:
    """One page of a filtered record list."""
    items: Sequence[Mapping[str, Any]]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        """Number of pages (at least 1, so an empty result is still "page 1 of 1")."""
        return max(1, -(-self.total // self.limit))

    @classmethod
    def from_items(cls, items: Sequence[Mapping[str, Any]], page: int, limit: int) -> "Page":
        """
        Slice `items` into a 1-based page.

        page is clamped to >= 1 and limit to >= 1; a page past the end is empty.
        """
        page = max(1, page)
        limit = max(1, limit)
        start = (page - 1) * limit
        return cls(items=list(items[start:start + limit]), page=page, limit=limit, total=len(items))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": list(self.items),
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class WarmupReport:
    """Result of warming every cache slot."""
    counts: Mapping[str, int]
    stats: Mapping[str, Dict[str, Any]]
