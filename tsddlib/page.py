"""Paged query results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class PageResult:
    """One page of a larger result set."""

    page_index: int
    page_size: int
    total: int
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping with the wire field names."""
        return {
            "page_index": self.page_index,
            "page_size": self.page_size,
            "total": self.total,
            "data": self.data,
        }