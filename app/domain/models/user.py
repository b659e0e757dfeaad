"""User record domain model for the matchmaking profile directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

ROLE_USER = "user"

# Attributes kept in the record's JSON document rather than in indexed columns.
PROFILE_DOCUMENT_FIELDS = (
    "height_cm",
    "weight_kg",
    "marital_status",
    "mother_tongue",
    "physical_status",
    "body_type",
    "complexion",
    "profile_created_by",
    "caste",
    "sub_caste",
    "gothra",
    "manglik",
    "education_level",
    "education_field",
    "occupation",
    "annual_income",
    "father_status",
    "mother_status",
    "number_of_siblings",
    "siblings_married",
    "family_type",
    "family_values",
    "diet",
    "smoking_habits",
    "drinking_habits",
    "bio",
    "photos",
    "partner_preferences",
)


@dataclass(slots=True)
class User:
    """
    User entity holding account state and the demographic profile.

    Attributes:
        id: 24-character hex record key
        email: Lower-cased e-mail address (unique)
        mobile_number: Contact number (unique)
        password_hash: One-way bcrypt hash, never serialized to clients
        role: ``user`` or ``admin``
        is_verified: Whether the account has been verified
        is_active: Whether the account is enabled by an administrator
        created_at: Record creation timestamp (UTC)
        updated_at: Last update timestamp (UTC)
    """

    id: str
    email: str
    mobile_number: str
    password_hash: str
    name: str
    gender: str
    date_of_birth: date
    city: str
    state: str
    country: str = "India"
    role: str = ROLE_USER
    is_verified: bool = False
    is_active: bool = True
    religion: Optional[str] = None
    profile_picture: str = ""
    height_cm: Optional[int] = None
    weight_kg: Optional[int] = None
    marital_status: Optional[str] = None
    mother_tongue: Optional[str] = None
    physical_status: Optional[str] = "Normal"
    body_type: Optional[str] = "Average"
    complexion: Optional[str] = None
    profile_created_by: Optional[str] = "Self"
    caste: Optional[str] = None
    sub_caste: Optional[str] = None
    gothra: Optional[str] = None
    manglik: Optional[str] = None
    education_level: Optional[str] = None
    education_field: Optional[str] = None
    occupation: Optional[str] = None
    annual_income: Optional[str] = None
    father_status: Optional[str] = None
    mother_status: Optional[str] = None
    number_of_siblings: int = 0
    siblings_married: int = 0
    family_type: Optional[str] = None
    family_values: Optional[str] = None
    diet: Optional[str] = None
    smoking_habits: Optional[str] = "Non-smoker"
    drinking_habits: Optional[str] = "Non-drinker"
    bio: Optional[str] = None
    photos: List[str] = field(default_factory=list)
    partner_preferences: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def age(self) -> int:
        return age_on(self.date_of_birth, date.today())

    def profile_document(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in PROFILE_DOCUMENT_FIELDS}

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role} active={self.is_active}>"


def age_on(born: date, today: date) -> int:
    """Whole years elapsed between ``born`` and ``today``."""
    years = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        years -= 1
    return years
