"""Token service: issue/verify round trip, expiry and tampering."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from daily_report.auth.jwt import Claim, TokenService
from daily_report.models.user import Role

SECRET = "unit-test-secret"


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret=SECRET)


@pytest.fixture
def claim() -> Claim:
    return Claim(user_id=7, email="sato@example.com", role=Role.SALES)


def test_round_trip_returns_equal_claim(tokens, claim):
    token = tokens.issue(claim)
    assert tokens.verify(token) == claim


@pytest.mark.parametrize("role", [Role.SALES, Role.MANAGER])
def test_round_trip_preserves_role(tokens, role):
    claim = Claim(user_id=1, email="a@example.com", role=role)
    assert tokens.verify(tokens.issue(claim)).role == role


def test_issue_is_deterministic_for_fixed_time(tokens, claim):
    now = datetime(2024, 12, 1, 9, 0, tzinfo=timezone.utc)
    assert tokens.issue(claim, now=now) == tokens.issue(claim, now=now)


def test_payload_carries_identity_and_24h_expiry(tokens, claim):
    now = datetime.now(timezone.utc).replace(microsecond=0)
    payload = jwt.decode(tokens.issue(claim, now=now), SECRET, algorithms=["HS256"])

    assert payload["sub"] == "7"
    assert payload["email"] == "sato@example.com"
    assert payload["role"] == "SALES"
    assert payload["exp"] - payload["iat"] == 24 * 60 * 60


def test_expired_token_is_invalid(tokens, claim):
    issued = datetime.now(timezone.utc) - timedelta(hours=25)
    assert tokens.verify(tokens.issue(claim, now=issued)) is None


def test_token_within_window_is_valid(tokens, claim):
    issued = datetime.now(timezone.utc) - timedelta(hours=23)
    assert tokens.verify(tokens.issue(claim, now=issued)) == claim


def test_wrong_secret_is_invalid(tokens, claim):
    other = TokenService(secret="another-secret")
    assert other.verify(tokens.issue(claim)) is None


def test_tampered_token_is_invalid(tokens, claim):
    header, payload, signature = tokens.issue(claim).split(".")
    forged = jwt.encode(
        {"sub": "7", "email": "sato@example.com", "role": "MANAGER"}, "guess", algorithm="HS256"
    ).split(".")[1]
    assert tokens.verify(".".join([header, forged, signature])) is None


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token_is_invalid(tokens, token):
    assert tokens.verify(token) is None


def test_token_missing_claims_is_invalid(tokens):
    exp = datetime.now(timezone.utc) + timedelta(hours=1)
    token = jwt.encode({"sub": "7", "exp": exp}, SECRET, algorithm="HS256")
    assert tokens.verify(token) is None


def test_token_with_unknown_role_is_invalid(tokens):
    exp = datetime.now(timezone.utc) + timedelta(hours=1)
    token = jwt.encode(
        {"sub": "7", "email": "x@example.com", "role": "ADMIN", "exp": exp}, SECRET, algorithm="HS256"
    )
    assert tokens.verify(token) is None


def test_expires_in_seconds():
    assert TokenService(secret=SECRET, expires_in=timedelta(hours=2)).expires_in_seconds == 7200
