"""Outcomes of the request admission gates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True, slots=True)
class Identity:
    """Decoded identity token claims attached to an admitted request."""

    subject_id: str
    role: str
    issued_at: datetime
    expires_at: datetime


class AccessOutcome(str, Enum):
    ADMIN = "admin"
    USER = "user"
    DENIED = "denied"


class DenialReason(str, Enum):
    AUTH_REQUIRED = "auth_required"
    AUTH_INVALID = "auth_invalid"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True, slots=True)
class AccessDecision:
    outcome: AccessOutcome
    identity: Optional[Identity] = None
    reason: Optional[DenialReason] = None

    @classmethod
    def admin(cls) -> "AccessDecision":
        return cls(AccessOutcome.ADMIN)

    @classmethod
    def user(cls, identity: Identity) -> "AccessDecision":
        return cls(AccessOutcome.USER, identity=identity)

    @classmethod
    def denied(cls, reason: DenialReason) -> "AccessDecision":
        return cls(AccessOutcome.DENIED, reason=reason)

    @property
    def is_admin(self) -> bool:
        return self.outcome is AccessOutcome.ADMIN

    @property
    def is_denied(self) -> bool:
        return self.outcome is AccessOutcome.DENIED
