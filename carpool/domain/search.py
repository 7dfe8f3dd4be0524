"""Ride search criteria and pagination arithmetic."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .enums import GenderPreference


@dataclass(frozen=True)
class RideSearch:
    destination: Optional[str] = None
    day: Optional[date] = None
    gender_preference: Optional[GenderPreference] = None
    max_cost: Optional[float] = None
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def narrows_gender(self) -> bool:
        return (
            self.gender_preference is not None
            and self.gender_preference != GenderPreference.ANY
        )


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total / limit)


def like_pattern(term: str) -> str:
    """Substring LIKE pattern with ``%``/``_`` in *term* matched literally."""
    escaped = (
        term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )
    return f"%{escaped}%"
