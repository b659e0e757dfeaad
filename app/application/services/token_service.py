"""Issuing and verifying signed identity tokens."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ...domain.models import Identity, User

logger = logging.getLogger(__name__)


class TokenService:
    """Mints and decodes stateless, time-limited JWT identity tokens."""

    def __init__(
        self,
        secret_key: str,
        token_exp_minutes: int = 1440,
        algorithm: str = "HS256",
    ) -> None:
        if not secret_key:
            raise RuntimeError("JWT_SECRET is not configured.")
        self._secret_key = secret_key
        self._token_exp_minutes = token_exp_minutes
        self._algorithm = algorithm

    def issue(self, user: User, *, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(tz=timezone.utc)
        payload = {
            "sub": user.id,
            "role": user.role,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self._token_exp_minutes),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode(self, token: str) -> Optional[Identity]:
        """
        Verify signature and expiry of a token.

        Returns:
            The decoded identity, or ``None`` for any malformed, forged or
            expired token. Callers never learn which check failed.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected identity token: %s", exc.__class__.__name__)
            return None
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            return None
        return Identity(
            subject_id=subject,
            role=str(payload.get("role") or "user"),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
