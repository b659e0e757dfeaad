from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional, Tuple

from ...domain.errors import AuthInvalid, Conflict, MalformedIdentifier, NotFound
from ...domain.models import ROLE_USER, StoredFile, User
from ...domain.ports.persistence import UserRepository
from .passwords import hash_password, verify_password
from .token_service import TokenService

logger = logging.getLogger(__name__)

_RECORD_ID = re.compile(r"^[0-9a-f]{24}$")


def parse_record_id(value: Optional[str]) -> str:
    """Normalise a record key, raising ``MalformedIdentifier`` when it cannot be one."""
    candidate = (value or "").strip().lower()
    if not _RECORD_ID.match(candidate):
        raise MalformedIdentifier()
    return candidate


class AccountService:
    """Owns the user-record lifecycle: registration, login, updates and removal."""

    def __init__(self, persistence: UserRepository, tokens: TokenService) -> None:
        self._persistence = persistence
        self._tokens = tokens

    # ------------------------------------------------------------------
    def register(
        self,
        attributes: Dict[str, Any],
        picture: Optional[StoredFile] = None,
    ) -> Tuple[User, str]:
        self._ensure_available(
            attributes["email"],
            attributes["mobile_number"],
            email_message="An account with this email already exists.",
            mobile_message="An account with this mobile number already exists.",
        )
        user = self._build_user(attributes)
        if picture is not None:
            user.profile_picture = picture.public_path
        saved = self._persistence.insert_user(user)
        logger.info("Registered user %s", saved.id)
        return saved, self._tokens.issue(saved)

    def create_offline_user(self, attributes: Dict[str, Any]) -> User:
        self._ensure_available(
            attributes["email"],
            attributes["mobile_number"],
            email_message="User with this email already exists",
            mobile_message="User with this mobile number already exists",
        )
        user = self._build_user(attributes)
        user.role = ROLE_USER
        user.is_verified = True
        user.is_active = True
        saved = self._persistence.insert_user(user)
        logger.info("Administrator created user %s", saved.id)
        return saved

    def authenticate(self, email: str, password: str) -> Tuple[User, str]:
        user = self._persistence.get_user_by_email(email.strip().lower())
        if not user or not verify_password(password, user.password_hash):
            raise AuthInvalid("Invalid email or password.")
        return user, self._tokens.issue(user)

    # ------------------------------------------------------------------
    def get_user(self, user_id: str) -> User:
        user = self._persistence.get_user(parse_record_id(user_id))
        if not user:
            raise NotFound()
        return user

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> User:
        record_id = parse_record_id(user_id)
        prepared = dict(changes)
        if "password" in prepared:
            prepared["password_hash"] = hash_password(prepared.pop("password"))
        if not prepared:
            return self.get_user(record_id)
        user = self._persistence.update_user(record_id, prepared)
        if not user:
            raise NotFound()
        return user

    def set_profile_picture(self, user_id: str, picture: StoredFile) -> Tuple[User, str]:
        """Point the record at a new picture; returns the user and the replaced path."""
        record_id = parse_record_id(user_id)
        current = self._persistence.get_user(record_id)
        if not current:
            raise NotFound("User not found for picture update")
        user = self._persistence.update_user(record_id, {"profile_picture": picture.public_path})
        if not user:
            raise NotFound("User not found for picture update")
        return user, current.profile_picture

    def delete_user(self, user_id: str) -> User:
        user = self._persistence.delete_user(parse_record_id(user_id))
        if not user:
            raise NotFound()
        logger.info("Deleted user %s", user.id)
        return user

    # ------------------------------------------------------------------
    def _ensure_available(
        self,
        email: str,
        mobile_number: str,
        *,
        email_message: str,
        mobile_message: str,
    ) -> None:
        # Fast path only; the store's unique indexes settle concurrent races.
        existing = self._persistence.find_by_email_or_mobile(email, mobile_number)
        if not existing:
            return
        if existing.email == email.lower():
            raise Conflict(email_message, {"email": email_message})
        raise Conflict(mobile_message, {"mobileNumber": mobile_message})

    @staticmethod
    def _build_user(attributes: Dict[str, Any]) -> User:
        values = dict(attributes)
        password = values.pop("password")
        values["email"] = values["email"].lower()
        return User(id="", password_hash=hash_password(password), **values)
