"""Access/refresh token issuance, verification and rotation."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ecoride.core.config import Settings
from ecoride.repositories.account_repository import AccountRepository

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class InvalidTokenError(Exception):
    """Raised when a token is malformed, expired, forged or already consumed."""


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """Signs tokens that carry the account id, with separate secrets per token kind."""

    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str,
        access_ttl_seconds: int,
        refresh_ttl_seconds: int,
        repository: Optional[AccountRepository] = None,
        single_use_refresh: bool = True,
    ):
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens must be signed with different secrets")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_ttl = timedelta(seconds=max(1, access_ttl_seconds))
        self._refresh_ttl = timedelta(seconds=max(1, refresh_ttl_seconds))
        self._repository = repository or AccountRepository()
        self._single_use = single_use_refresh

    @classmethod
    def from_settings(cls, settings: Settings, repository: Optional[AccountRepository] = None) -> "TokenService":
        return cls(
            access_secret=settings.access_token_secret,
            refresh_secret=settings.refresh_token_secret,
            access_ttl_seconds=settings.access_token_ttl_seconds,
            refresh_ttl_seconds=settings.refresh_token_ttl_seconds,
            repository=repository,
            single_use_refresh=settings.refresh_token_single_use,
        )

    # -------------------------------------- signing --------------------------------------
    def _encode(self, account_id: str, secret: str, ttl: timedelta) -> tuple[str, str, datetime]:
        now = datetime.now(timezone.utc)
        expires_at = now + ttl
        jti = uuid.uuid4().hex
        payload = {"id": account_id, "iat": now, "exp": expires_at, "jti": jti}
        return jwt.encode(payload, secret, algorithm=ALGORITHM), jti, expires_at

    def _decode(self, token: str, secret: str) -> dict:
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token is required")
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat", "jti"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError("Not a valid token") from exc
        account_id = payload.get("id")
        if not account_id or not isinstance(account_id, str):
            raise InvalidTokenError("Token carries no account id")
        return payload

    # -------------------------------------- public API --------------------------------------
    def issue(self, account_id: str) -> TokenPair:
        access_token, _, _ = self._encode(account_id, self._access_secret, self._access_ttl)
        refresh_token, jti, expires_at = self._encode(account_id, self._refresh_secret, self._refresh_ttl)
        if self._single_use:
            self._repository.add_refresh_token(jti, account_id, expires_at)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def verify_access(self, token: str) -> str:
        return self._decode(token, self._access_secret)["id"]

    def _refresh_payload(self, token: str) -> dict:
        payload = self._decode(token, self._refresh_secret)
        if self._single_use:
            record = self._repository.get_refresh_token(payload["jti"])
            if not record or record.revoked_at is not None or record.account_id != payload["id"]:
                raise InvalidTokenError("Refresh token was revoked or never issued")
        return payload

    def verify_refresh(self, token: str) -> str:
        return self._refresh_payload(token)["id"]

    def rotate(self, token: str) -> tuple[str, TokenPair]:
        """Consume a refresh token and mint a brand new access/refresh pair."""
        payload = self._refresh_payload(token)
        account_id = payload["id"]
        if self._single_use:
            if not self._repository.revoke_refresh_token(payload["jti"]):
                logger.warning("Refresh token reused for account %s", account_id)
                raise InvalidTokenError("Refresh token already used")
        return account_id, self.issue(account_id)
