"""
Authentication and identity related use cases.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from ecoride.core.config import Settings, get_settings
from ecoride.core.errors import BadRequestError, UnauthenticatedError
from ecoride.core.security import hash_password, verify_password
from ecoride.db.models import Account
from ecoride.domain.accounts import (
    LOGIN_ROLES,
    ROLE_ADMIN,
    SELF_SERVICE_ROLES,
    STATUS_PENDING,
    license_id_for_role,
)
from ecoride.repositories.account_repository import AccountRepository
from ecoride.services.approval import ApprovalDenied, check_approval
from ecoride.services.token_service import InvalidTokenError, TokenPair, TokenService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"


@dataclass
class AuthSuccess:
    account: Account
    tokens: TokenPair


@dataclass
class LegacyAccountCreated:
    """First contact on the phone path: the account exists but stays pending, no tokens."""

    account: Account


LoginResult = Union[AuthSuccess, ApprovalDenied]
LegacyAuthResult = Union[AuthSuccess, ApprovalDenied, LegacyAccountCreated]


@dataclass
class AuthService:
    """Handles login, registration, legacy phone auth, token refresh and profile flows."""

    repository: AccountRepository = field(default_factory=AccountRepository)
    tokens: Optional[TokenService] = None
    settings: Optional[Settings] = None

    def __post_init__(self):
        self.settings = self.settings or get_settings()
        if self.tokens is None:
            self.tokens = TokenService.from_settings(self.settings, self.repository)

    # -------------------------------------- helpers --------------------------------------
    def _authenticate(self, email: Optional[str], password: Optional[str], role: str) -> Account:
        account = self.repository.find_by_credentials(email or "", role)
        # Unknown account and wrong password must be indistinguishable to the caller.
        if not account or not verify_password(password or "", account.password_hash):
            raise UnauthenticatedError(INVALID_CREDENTIALS)
        return account

    def _grant(self, account: Account, role: str) -> LoginResult:
        denied = check_approval(account, role)
        if denied:
            logger.info("Account %s refused by approval gate (%s)", account.id, denied.status)
            return denied
        return AuthSuccess(account=account, tokens=self.tokens.issue(account.id))

    # -------------------------------------- login --------------------------------------
    def login(self, email: Optional[str], password: Optional[str], role: Optional[str]) -> LoginResult:
        logger.info("Login attempt email=%s role=%s", email, role)
        if not email or not password:
            raise BadRequestError("Please provide email and password")
        if not role or role not in LOGIN_ROLES:
            raise BadRequestError("Valid role is required (customer, rider, or admin)")
        account = self._authenticate(email, password, role)
        return self._grant(account, role)

    def admin_login(self, email: Optional[str], password: Optional[str]) -> AuthSuccess:
        logger.info("Admin login attempt email=%s", email)
        account = self._authenticate(email, password, ROLE_ADMIN)
        return AuthSuccess(account=account, tokens=self.tokens.issue(account.id))

    # -------------------------------------- registration --------------------------------------
    def register(
        self,
        email: Optional[str],
        password: Optional[str],
        role: Optional[str],
        profile: Optional[Mapping[str, Any]] = None,
    ) -> AuthSuccess:
        if not email or not password:
            raise BadRequestError("Please provide email and password")
        if not role or role not in SELF_SERVICE_ROLES:
            raise BadRequestError("Valid role is required (customer or rider)")
        if self.repository.find_by_email(email):
            raise BadRequestError("Email already in use")

        profile = dict(profile or {})
        license_id = license_id_for_role(role, profile.get("license_id"))
        account = self.repository.create(
            email=email,
            password_hash=hash_password(password),
            role=role,
            first_name=profile.get("first_name"),
            middle_name=profile.get("middle_name"),
            last_name=profile.get("last_name"),
            phone=profile.get("phone") or None,
            school_id=profile.get("school_id"),
            license_id=license_id,
            sex=profile.get("sex"),
            approved=False,
            status=STATUS_PENDING,
        )
        logger.info("Registered %s account %s (pending approval)", role, account.id)
        # Tokens are issued even though the gate would refuse a login right now.
        return AuthSuccess(account=account, tokens=self.tokens.issue(account.id))

    # -------------------------------------- legacy phone auth --------------------------------------
    def legacy_auth(self, phone: Optional[str], role: Optional[str]) -> LegacyAuthResult:
        if not phone:
            raise BadRequestError("Phone number is required")
        if not role or role not in SELF_SERVICE_ROLES:
            raise BadRequestError("Valid role is required (customer or rider)")

        account = self.repository.find_by_phone(phone)
        if account:
            if account.role != role:
                raise BadRequestError("Phone number and role do not match")
            return self._grant(account, role)

        account = self.repository.create(
            phone=phone,
            role=role,
            email=f"{phone}@{self.settings.legacy_email_domain}",
            password_hash=hash_password(secrets.token_urlsafe(16)),
            approved=False,
            status=STATUS_PENDING,
        )
        logger.info("Created legacy %s account %s from phone sign-in", role, account.id)
        return LegacyAccountCreated(account=account)

    # -------------------------------------- tokens --------------------------------------
    def refresh(self, refresh_token: Optional[str]) -> TokenPair:
        if not refresh_token:
            raise BadRequestError("Refresh token is required")
        try:
            account_id = self.tokens.verify_refresh(refresh_token)
            if not self.repository.get_by_id(account_id):
                raise InvalidTokenError("Account no longer exists")
            _, pair = self.tokens.rotate(refresh_token)
        except InvalidTokenError as exc:
            logger.info("Refresh rejected: %s", exc)
            raise UnauthenticatedError(INVALID_REFRESH_TOKEN) from exc
        return pair

    # -------------------------------------- profile --------------------------------------
    def get_profile(self, account_id: str) -> Account:
        account = self.repository.get_by_id(account_id)
        if not account:
            raise UnauthenticatedError("User not found")
        return account

    def update_profile(self, account_id: str, fields: Mapping[str, Any]) -> Account:
        account = self.get_profile(account_id)

        # Falsy values are ignored for these...
        for name in ("first_name", "last_name", "phone", "sex"):
            if fields.get(name):
                setattr(account, name, fields[name])
        # ...while these are applied whenever the key was sent.
        for name in ("middle_name", "school_id"):
            if name in fields:
                setattr(account, name, fields[name])
        if "license_id" in fields:
            account.license_id = license_id_for_role(account.role, fields["license_id"])

        email = fields.get("email")
        if email:
            if self.repository.find_by_email(email, exclude_id=account.id):
                raise BadRequestError("Email already in use")
            account.email = email

        return self.repository.save(account)
