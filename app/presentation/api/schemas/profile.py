"""Validated input structs for user records."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Gender = Literal["Male", "Female", "Other"]
MaritalStatus = Literal["Never Married", "Divorced", "Widowed", "Awaiting Divorce", "Annulled"]
PhysicalStatus = Literal["Normal", "Physically Challenged"]
BodyType = Literal["Slim", "Average", "Athletic", "Heavy"]
Complexion = Literal["Very Fair", "Fair", "Wheatish", "Wheatish Brown", "Dark"]
ProfileCreatedBy = Literal["Self", "Parent", "Sibling", "Friend", "Other"]
Manglik = Literal["Yes", "No", "Don't Know"]
FamilyType = Literal["Joint", "Nuclear"]
FamilyValues = Literal["Traditional", "Moderate", "Liberal"]
Diet = Literal["Vegetarian", "Non-Vegetarian", "Eggetarian", "Jain", "Vegan"]
SmokingHabits = Literal["Non-smoker", "Occasional Smoker", "Smoker"]
DrinkingHabits = Literal["Non-drinker", "Occasional Drinker", "Drinker"]
Role = Literal["user", "admin"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    def to_attributes(self) -> Dict[str, Any]:
        """Snake-case attribute map of the fields the caller actually supplied."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class Range(CamelModel):
    min: Optional[int] = None
    max: Optional[int] = None


class PartnerPreferences(CamelModel):
    age_range: Optional[Range] = None
    height_range_cm: Optional[Range] = None
    religion: List[str] = Field(default_factory=list)
    caste: List[str] = Field(default_factory=list)
    marital_status: List[str] = Field(default_factory=list)
    education_level: List[str] = Field(default_factory=list)
    occupation: List[str] = Field(default_factory=list)
    location: List[str] = Field(default_factory=list)
    manglik: Optional[Literal["Yes", "No", "Doesn't Matter"]] = None
    diet: List[str] = Field(default_factory=list)


class ProfileAttributes(CamelModel):
    """Optional demographic attributes shared by every write path."""

    height_cm: Optional[int] = Field(default=None, ge=120, le=240)
    weight_kg: Optional[int] = Field(default=None, ge=30, le=200)
    marital_status: Optional[MaritalStatus] = None
    mother_tongue: Optional[str] = None
    physical_status: Optional[PhysicalStatus] = None
    body_type: Optional[BodyType] = None
    complexion: Optional[Complexion] = None
    profile_created_by: Optional[ProfileCreatedBy] = None
    religion: Optional[str] = None
    caste: Optional[str] = None
    sub_caste: Optional[str] = None
    gothra: Optional[str] = None
    manglik: Optional[Manglik] = None
    education_level: Optional[str] = None
    education_field: Optional[str] = None
    occupation: Optional[str] = None
    annual_income: Optional[str] = None
    father_status: Optional[str] = None
    mother_status: Optional[str] = None
    number_of_siblings: Optional[int] = Field(default=None, ge=0)
    siblings_married: Optional[int] = Field(default=None, ge=0)
    family_type: Optional[FamilyType] = None
    family_values: Optional[FamilyValues] = None
    diet: Optional[Diet] = None
    smoking_habits: Optional[SmokingHabits] = None
    drinking_habits: Optional[DrinkingHabits] = None
    bio: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, values: Any) -> Any:
        # Multipart forms submit untouched inputs as empty strings.
        if isinstance(values, dict):
            return {key: value for key, value in values.items() if value != ""}
        return values


def _check_password(value: str) -> str:
    if len(value) < 6:
        raise ValueError("Password must be at least 6 characters long")
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes long")
    return value


class RegistrationInput(ProfileAttributes):
    email: EmailStr
    password: str
    mobile_number: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    gender: Gender
    date_of_birth: date
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    country: str = Field(default="India", min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        return _check_password(value)

    def to_attributes(self) -> Dict[str, Any]:
        # Defaults such as the country are part of a new record.
        return self.model_dump(exclude_none=True)


class AdminUserCreate(RegistrationInput):
    """Offline user creation by an administrator (JSON body)."""


class ProfileUpdate(ProfileAttributes):
    """Self-service update of the caller's own profile."""

    name: Optional[str] = Field(default=None, min_length=1)
    gender: Optional[Gender] = None
    date_of_birth: Optional[date] = None
    city: Optional[str] = Field(default=None, min_length=1)
    state: Optional[str] = Field(default=None, min_length=1)
    country: Optional[str] = Field(default=None, min_length=1)
    photos: Optional[List[str]] = None
    partner_preferences: Optional[PartnerPreferences] = None

    def to_attributes(self) -> Dict[str, Any]:
        attributes = super().to_attributes()
        if self.partner_preferences is not None:
            attributes["partner_preferences"] = self.partner_preferences.model_dump(
                by_alias=True, exclude_none=True
            )
        return attributes


class ProfilePatch(ProfileUpdate):
    """
    Record-level patch applied by ``PUT /api/profiles/{id}``.

    Account fields, including ``role`` and the verification/active flags,
    are writable here. This mirrors the existing contract of the route and
    is pending review before a field allow-list is introduced. The picture
    path is only set by an upload, never by a patch.
    """

    email: Optional[EmailStr] = None
    password: Optional[str] = None
    mobile_number: Optional[str] = Field(default=None, min_length=1)
    role: Optional[Role] = None
    is_verified: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value

    @field_validator("password")
    @classmethod
    def check_password(cls, value: Optional[str]) -> Optional[str]:
        return _check_password(value) if value is not None else value


class LoginInput(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()
