"""Per-request query criteria for profile scans."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class CreatedWindow(str, Enum):
    RECENT = "recent"
    WEEK = "week"
    MONTH = "month"


@dataclass(slots=True)
class ProfileCriteria:
    """
    Filter, sort and pagination inputs for a single scan.

    Text filters are matched as case-insensitive substrings; ``location``
    matches city, state or country. Birth-date bounds are inclusive.
    """

    exclude_id: Optional[str] = None
    gender: Optional[str] = None
    location: Optional[str] = None
    religion: Optional[str] = None
    born_on_or_after: Optional[date] = None
    born_on_or_before: Optional[date] = None
    created_since: Optional[datetime] = None
    skip: int = 0
    limit: int = 10


@dataclass(slots=True)
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
