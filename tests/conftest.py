from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from app.application.services.account_service import AccountService
from app.application.services.passwords import hash_password
from app.application.services.profile_query_service import ProfileQueryService
from app.application.services.token_service import TokenService
from app.application.services.upload_service import UploadAdmissionPipeline
from app.core.app_factory import PROFILE_PICTURES_PUBLIC_PREFIX, create_application
from app.core.config import Settings
from app.domain.models import User
from app.infrastructure.persistence.sqlite import SQLitePersistence

JWT_SECRET = "test-secret"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 128

# Hashing is slow on purpose; seeded records share one precomputed hash.
SEEDED_PASSWORD = "secret123"
SEEDED_HASH = hash_password(SEEDED_PASSWORD)


def build_user(index: int, **overrides: Any) -> User:
    values: Dict[str, Any] = {
        "id": "",
        "email": f"user{index}@example.com",
        "mobile_number": f"9{index:09d}",
        "password_hash": SEEDED_HASH,
        "name": f"User {index}",
        "gender": "Female" if index % 2 else "Male",
        "date_of_birth": date(1995, 1, 1),
        "city": "Pune",
        "state": "Maharashtra",
        "country": "India",
    }
    values.update(overrides)
    return User(**values)


def registration_fields(index: int = 1, **overrides: str) -> Dict[str, str]:
    fields = {
        "email": f"member{index}@example.com",
        "password": "secret123",
        "mobileNumber": f"8{index:09d}",
        "name": f"Member {index}",
        "gender": "Female",
        "dateOfBirth": "1994-06-15",
        "city": "Bengaluru",
        "state": "Karnataka",
        "country": "India",
        "religion": "Hindu",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def persistence(tmp_path: Path) -> Iterator[SQLitePersistence]:
    store = SQLitePersistence(tmp_path / "profiles.db")
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(JWT_SECRET, token_exp_minutes=60)


@pytest.fixture
def accounts(persistence: SQLitePersistence, token_service: TokenService) -> AccountService:
    return AccountService(persistence, token_service)


@pytest.fixture
def queries(persistence: SQLitePersistence) -> ProfileQueryService:
    return ProfileQueryService(persistence)


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads" / "profile-pictures"


@pytest.fixture
def pipeline(upload_dir: Path) -> UploadAdmissionPipeline:
    return UploadAdmissionPipeline(upload_dir, PROFILE_PICTURES_PUBLIC_PREFIX)


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("JWT_EXPIRES_MINUTES", "60")
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "api.db"))
    monkeypatch.setenv("UPLOAD_ROOT", str(tmp_path / "uploads"))
    monkeypatch.delenv("MAX_UPLOAD_BYTES", raising=False)
    return Settings()


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_application(settings)) as test_client:
        yield test_client


@pytest.fixture
def stored_pictures(settings: Settings):
    def _list():
        directory = settings.profile_picture_dir
        return sorted(path.name for path in directory.iterdir()) if directory.exists() else []

    return _list
