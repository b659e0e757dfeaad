from datetime import datetime, timedelta, timezone

import pytest

from app.application.services.access_gate import (
    bearer_token,
    evaluate_access,
    evaluate_admin_header,
)
from app.application.services.token_service import TokenService
from app.domain.models import AccessOutcome, DenialReason

from .conftest import build_user


@pytest.fixture
def member_token(token_service: TokenService) -> str:
    return token_service.issue(build_user(1, id="a" * 24))


def test_missing_credentials_require_authentication(token_service):
    decision = evaluate_access({}, token_service)
    assert decision.outcome is AccessOutcome.DENIED
    assert decision.reason is DenialReason.AUTH_REQUIRED


def test_admin_header_bypasses_token_check(token_service):
    decision = evaluate_access({"X-Admin-Request": "true"}, token_service)
    assert decision.is_admin
    assert decision.identity is None


@pytest.mark.parametrize("authorization", ["Bearer not-a-token", "Bearer ", None])
def test_admin_header_takes_precedence_over_any_token(token_service, authorization):
    headers = {"x-admin-request": "true"}
    if authorization is not None:
        headers["Authorization"] = authorization
    assert evaluate_access(headers, token_service).is_admin


@pytest.mark.parametrize("value", ["TRUE", "True", "1", "yes", " true"])
def test_admin_header_value_is_matched_exactly(token_service, value):
    decision = evaluate_access({"X-Admin-Request": value}, token_service)
    assert decision.reason is DenialReason.AUTH_REQUIRED


def test_valid_token_admits_user_identity(token_service, member_token):
    decision = evaluate_access({"Authorization": f"Bearer {member_token}"}, token_service)
    assert decision.outcome is AccessOutcome.USER
    assert decision.identity.subject_id == "a" * 24
    assert decision.identity.role == "user"


def test_expired_and_forged_tokens_are_indistinguishable(token_service):
    user = build_user(2, id="b" * 24)
    expired = token_service.issue(user, now=datetime.now(timezone.utc) - timedelta(days=2))
    forged = TokenService("another-secret").issue(user)

    expired_decision = evaluate_access({"Authorization": f"Bearer {expired}"}, token_service)
    forged_decision = evaluate_access({"Authorization": f"Bearer {forged}"}, token_service)

    assert expired_decision == forged_decision
    assert expired_decision.reason is DenialReason.AUTH_INVALID


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Bearer abc.def", "abc.def"),
        ("bearer abc.def", "abc.def"),
        ("Basic dXNlcjpwYXNz", None),
        ("Bearer", None),
        ("", None),
    ],
)
def test_bearer_token_parsing(value, expected):
    assert bearer_token({"Authorization": value}) == expected


def test_admin_gate_ignores_user_tokens(member_token):
    decision = evaluate_admin_header({"Authorization": f"Bearer {member_token}"})
    assert decision.reason is DenialReason.FORBIDDEN


def test_admin_gate_accepts_header_alone():
    assert evaluate_admin_header({"X-Admin-Request": "true"}).is_admin
    assert evaluate_admin_header({"X-Admin-Request": "false"}).is_denied
