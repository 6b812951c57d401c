from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from ecoride.services.token_service import InvalidTokenError, TokenService

ACCESS_SECRET = "unit-access-secret-0123456789abcdef0123"
REFRESH_SECRET = "unit-refresh-secret-fedcba9876543210fedc"
OTHER_SECRET = "some-other-secret-that-is-long-enough-123"


@pytest.fixture()
def tokens(repo) -> TokenService:
    return TokenService(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl_seconds=900,
        refresh_ttl_seconds=3600,
        repository=repo,
    )


def test_secrets_must_differ(repo):
    with pytest.raises(ValueError):
        TokenService(
            access_secret=ACCESS_SECRET,
            refresh_secret=ACCESS_SECRET,
            access_ttl_seconds=60,
            refresh_ttl_seconds=60,
            repository=repo,
        )


def test_issue_embeds_account_id_and_expiry(tokens, make_account):
    account = make_account()
    pair = tokens.issue(account.id)

    access = jwt.decode(pair.access_token, ACCESS_SECRET, algorithms=["HS256"])
    refresh = jwt.decode(pair.refresh_token, REFRESH_SECRET, algorithms=["HS256"])
    assert access["id"] == refresh["id"] == account.id
    assert access["exp"] < refresh["exp"]
    assert tokens.verify_access(pair.access_token) == account.id
    assert tokens.verify_refresh(pair.refresh_token) == account.id


def test_token_kinds_are_not_interchangeable(tokens, make_account):
    pair = tokens.issue(make_account().id)
    with pytest.raises(InvalidTokenError):
        tokens.verify_refresh(pair.access_token)
    with pytest.raises(InvalidTokenError):
        tokens.verify_access(pair.refresh_token)


def test_rotation_yields_new_pair_and_consumes_old_refresh(tokens, make_account):
    account = make_account()
    first = tokens.issue(account.id)

    account_id, second = tokens.rotate(first.refresh_token)

    assert account_id == account.id
    assert second.access_token != first.access_token
    assert second.refresh_token != first.refresh_token
    with pytest.raises(InvalidTokenError):
        tokens.rotate(first.refresh_token)
    assert tokens.verify_refresh(second.refresh_token) == account.id


def test_reuse_allowed_when_single_use_disabled(repo, make_account):
    tokens = TokenService(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_ttl_seconds=900,
        refresh_ttl_seconds=3600,
        repository=repo,
        single_use_refresh=False,
    )
    pair = tokens.issue(make_account().id)
    tokens.rotate(pair.refresh_token)
    _, again = tokens.rotate(pair.refresh_token)
    assert again.refresh_token != pair.refresh_token


def test_expired_refresh_token_is_rejected(tokens, make_account):
    account = make_account()
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    expired = jwt.encode(
        {"id": account.id, "iat": past, "exp": past + timedelta(minutes=1), "jti": "old"},
        REFRESH_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        tokens.verify_refresh(expired)


def test_tampered_and_malformed_tokens_are_rejected(tokens, make_account):
    pair = tokens.issue(make_account().id)
    header, payload, signature = pair.refresh_token.split(".")
    forged = ".".join([header, payload, signature[::-1]])
    for bad in (forged, "not-a-jwt", ""):
        with pytest.raises(InvalidTokenError):
            tokens.verify_refresh(bad)


def test_refresh_token_signed_with_wrong_secret_is_rejected(tokens, make_account):
    account = make_account()
    now = datetime.now(timezone.utc)
    foreign = jwt.encode(
        {"id": account.id, "iat": now, "exp": now + timedelta(hours=1), "jti": "x"},
        OTHER_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        tokens.verify_refresh(foreign)
