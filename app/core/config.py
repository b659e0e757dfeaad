import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "https://spontaneous-kelpie-84bc47.netlify.app",
    "https://slvnk-frontend.vercel.app",
]


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.jwt_secret = self._get("JWT_SECRET")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.jwt_exp_minutes = self._get_int("JWT_EXPIRES_MINUTES", default=60 * 24)
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/profiles.db")).resolve()
        self.upload_root = Path(os.getenv("UPLOAD_ROOT", "uploads")).resolve()
        self.max_upload_bytes = self._get_int("MAX_UPLOAD_BYTES", default=5 * 1024 * 1024)
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.cors_allow_origins = self._get_list("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS)

    @property
    def profile_picture_dir(self) -> Path:
        return self.upload_root / "profile-pictures"

    @staticmethod
    def _get(key: str) -> str:
        value = os.getenv(key)
        if not value:
            raise RuntimeError(f"Missing required environment variable: {key}")
        return value

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc

    @staticmethod
    def _get_list(key: str, default: List[str]) -> List[str]:
        value = os.getenv(key)
        if not value:
            return list(default)
        return [item.strip() for item in value.split(",") if item.strip()]
