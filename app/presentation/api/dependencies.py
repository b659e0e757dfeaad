from fastapi import Depends, Request

from ...application.services.access_gate import evaluate_access, evaluate_admin_header
from ...application.services.token_service import TokenService
from ...core.dependencies import get_token_service
from ...domain.errors import AuthInvalid, AuthRequired, Forbidden
from ...domain.models import AccessDecision, DenialReason, Identity

_DENIALS = {
    DenialReason.AUTH_REQUIRED: AuthRequired,
    DenialReason.AUTH_INVALID: AuthInvalid,
    DenialReason.FORBIDDEN: Forbidden,
}


def _raise_denial(decision: AccessDecision) -> None:
    raise _DENIALS[decision.reason]()


def require_access(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> AccessDecision:
    """Access gate: admin bypass header or a valid bearer token."""
    decision = evaluate_access(request.headers, tokens)
    if decision.is_denied:
        _raise_denial(decision)
    return decision


def require_user_identity(decision: AccessDecision = Depends(require_access)) -> Identity:
    """Routes acting on "the caller" need a token subject, not an admin bypass."""
    if decision.identity is None:
        raise AuthRequired("This action requires a user token")
    return decision.identity


def require_admin_header(request: Request) -> AccessDecision:
    """Admin-only gate: the admin header alone decides, bearer tokens are ignored."""
    decision = evaluate_admin_header(request.headers)
    if decision.is_denied:
        _raise_denial(decision)
    return decision
