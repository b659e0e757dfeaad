"""
Request admission decisions.

Two independent gates exist:

* ``evaluate_access`` admits either an admin-bypass request or a request
  carrying a valid bearer token.
* ``evaluate_admin_header`` guards admin-only routes and looks at the admin
  header alone; bearer tokens are ignored there.

Both take the raw header mapping so they can be exercised without a live
request object.

SECURITY: the admin bypass is a bare header check (``X-Admin-Request: true``)
with no proof of identity behind it. It is kept for compatibility with the
existing admin tooling and is scheduled to be replaced by role-bearing
tokens in a hardening pass.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from ...domain.models import AccessDecision, DenialReason
from .token_service import TokenService

logger = logging.getLogger(__name__)

ADMIN_HEADER = "X-Admin-Request"
ADMIN_HEADER_VALUE = "true"
AUTHORIZATION_HEADER = "Authorization"


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value
    wanted = name.lower()
    for key, candidate in headers.items():
        if key.lower() == wanted:
            return candidate
    return None


def has_admin_header(headers: Mapping[str, str]) -> bool:
    # Header names are case-insensitive, the value is matched exactly.
    return _header(headers, ADMIN_HEADER) == ADMIN_HEADER_VALUE


def bearer_token(headers: Mapping[str, str]) -> Optional[str]:
    value = _header(headers, AUTHORIZATION_HEADER)
    if not value:
        return None
    scheme, _, token = value.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def evaluate_access(headers: Mapping[str, str], tokens: TokenService) -> AccessDecision:
    if has_admin_header(headers):
        logger.info("Admin request detected, bypassing token check.")
        return AccessDecision.admin()

    token = bearer_token(headers)
    if token is None:
        return AccessDecision.denied(DenialReason.AUTH_REQUIRED)

    identity = tokens.decode(token)
    if identity is None:
        return AccessDecision.denied(DenialReason.AUTH_INVALID)
    return AccessDecision.user(identity)


def evaluate_admin_header(headers: Mapping[str, str]) -> AccessDecision:
    if not has_admin_header(headers):
        logger.warning("Denying admin access: missing or invalid %s header.", ADMIN_HEADER)
        return AccessDecision.denied(DenialReason.FORBIDDEN)
    logger.info("Admin access granted via %s header.", ADMIN_HEADER)
    return AccessDecision.admin()
