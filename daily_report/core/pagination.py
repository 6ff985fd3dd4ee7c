"""
Pagination arithmetic shared by the list endpoints.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Pagination:
    total: int
    page: int
    limit: int
    total_pages: int
    offset: int

    def to_dict(self) -> Dict[str, Any]:
        """Wire form of the pagination block."""
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }


def calc_pagination(total: int, page: int = 1, limit: int = 20) -> Pagination:
    """
    Compute page bounds for `total` rows.

    The requested page is clamped into [1, total_pages]; an empty result
    set reports page 1 of 0.
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")

    total_pages = math.ceil(total / limit) if total > 0 else 0
    current = max(1, min(page, total_pages or 1))

    return Pagination(
        total=total,
        page=current,
        limit=limit,
        total_pages=total_pages,
        offset=(current - 1) * limit,
    )
