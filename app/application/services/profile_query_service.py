from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from ...domain.models import CreatedWindow, Page, ProfileCriteria, User
from ...domain.ports.persistence import UserRepository

logger = logging.getLogger(__name__)

SEARCH_DEFAULT_LIMIT = 10
PUBLIC_LIST_DEFAULT_LIMIT = 10
ADMIN_LIST_DEFAULT_LIMIT = 9
MAX_PAGE_SIZE = 100


@dataclass(slots=True)
class SearchFilters:
    gender: Optional[str] = None
    min_age: Optional[int] = None
    max_age: Optional[int] = None
    location: Optional[str] = None
    religion: Optional[str] = None
    page: int = 1
    limit: int = SEARCH_DEFAULT_LIMIT


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # 29 February in a non-leap target year.
        return day.replace(year=day.year - years, day=28)


def birth_date_bounds(
    min_age: Optional[int],
    max_age: Optional[int],
    today: date,
) -> Tuple[Optional[date], Optional[date]]:
    """Translate inclusive age bounds into inclusive date-of-birth bounds."""
    born_on_or_before = _years_before(today, min_age) if min_age is not None else None
    born_on_or_after = None
    if max_age is not None:
        born_on_or_after = _years_before(today, max_age + 1) + timedelta(days=1)
    return born_on_or_after, born_on_or_before


def created_since(window: CreatedWindow, now: datetime) -> Optional[datetime]:
    """Lower creation bound for the admin listing, measured from local midnight."""
    local_now = now.astimezone()
    if window is CreatedWindow.WEEK:
        midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        return midnight - timedelta(days=7)
    if window is CreatedWindow.MONTH:
        return local_now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return None


class ProfileQueryService:
    """Builds per-request criteria and runs bounded, newest-first scans."""

    def __init__(self, persistence: UserRepository) -> None:
        self._persistence = persistence

    def search(
        self,
        filters: SearchFilters,
        *,
        exclude_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Page[User]:
        born_after, born_before = birth_date_bounds(
            filters.min_age, filters.max_age, today or date.today()
        )
        criteria = ProfileCriteria(
            exclude_id=exclude_id,
            gender=filters.gender or None,
            location=filters.location or None,
            religion=filters.religion or None,
            born_on_or_after=born_after,
            born_on_or_before=born_before,
        )
        return self._run(criteria, filters.page, filters.limit)

    def list_public(self, page: int = 1, limit: int = PUBLIC_LIST_DEFAULT_LIMIT) -> Page[User]:
        return self._run(ProfileCriteria(), page, limit)

    def list_for_admin(
        self,
        page: int = 1,
        limit: int = ADMIN_LIST_DEFAULT_LIMIT,
        window: CreatedWindow = CreatedWindow.RECENT,
        *,
        now: Optional[datetime] = None,
    ) -> Page[User]:
        since = created_since(window, now or datetime.now().astimezone())
        return self._run(ProfileCriteria(created_since=since), page, limit)

    def total_users(self) -> int:
        return self._persistence.count_users()

    def _run(self, criteria: ProfileCriteria, page: int, limit: int) -> Page[User]:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        criteria.skip = (page - 1) * limit
        criteria.limit = limit
        items = self._persistence.find_users(criteria)
        total = self._persistence.count_users(criteria)
        logger.debug("Profile scan page=%d limit=%d matched=%d", page, limit, total)
        return Page(items=items, total=total, page=page, limit=limit)
