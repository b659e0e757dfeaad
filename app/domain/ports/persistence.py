from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from ..models import ProfileCriteria, User


class UserRepository(Protocol):
    """Document store holding user records, reachable by key lookup and filtered scan."""

    def insert_user(self, user: User) -> User:
        """Persist a new record; raises ``Conflict`` on a duplicate email or mobile number."""
        ...

    def get_user(self, user_id: str) -> Optional[User]:
        ...

    def find_by_email_or_mobile(self, email: str, mobile_number: str) -> Optional[User]:
        ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Optional[User]:
        """Apply attribute changes; returns ``None`` when the record is absent."""
        ...

    def delete_user(self, user_id: str) -> Optional[User]:
        ...

    def find_users(self, criteria: ProfileCriteria) -> List[User]:
        ...

    def count_users(self, criteria: Optional[ProfileCriteria] = None) -> int:
        ...


class PersistenceGateway(UserRepository, Protocol):
    """Composite gateway combining every persistence concern used by the app."""

    def close(self) -> None:
        ...
