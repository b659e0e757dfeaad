"""Domain models for the profile directory."""

from .access import AccessDecision, AccessOutcome, DenialReason, Identity
from .attachment import StoredFile
from .criteria import CreatedWindow, Page, ProfileCriteria
from .user import ROLE_USER, User

__all__ = [
    "AccessDecision",
    "AccessOutcome",
    "CreatedWindow",
    "DenialReason",
    "Identity",
    "Page",
    "ProfileCriteria",
    "ROLE_USER",
    "StoredFile",
    "User",
]
