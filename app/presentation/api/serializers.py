from typing import Any, Dict, Optional

from pydantic.alias_generators import to_camel

from ...domain.models import User
from ...domain.models.user import PROFILE_DOCUMENT_FIELDS

_ACCOUNT_FIELDS = (
    "email",
    "mobile_number",
    "role",
    "is_verified",
    "is_active",
    "name",
    "gender",
    "city",
    "state",
    "country",
    "religion",
    "profile_picture",
)


def _isoformat(value: Optional[Any]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def serialize_user(user: User) -> Dict[str, Any]:
    """Client representation of a user record; the password hash never leaves the server."""
    data: Dict[str, Any] = {"_id": user.id}
    for name in (*_ACCOUNT_FIELDS, *PROFILE_DOCUMENT_FIELDS):
        data[to_camel(name)] = getattr(user, name)
    data["dateOfBirth"] = _isoformat(user.date_of_birth)
    data["age"] = user.age
    data["createdAt"] = _isoformat(user.created_at)
    data["updatedAt"] = _isoformat(user.updated_at)
    return data
