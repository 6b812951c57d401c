"""Request dependencies: service wiring and bearer-token authentication."""
from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ecoride.core.config import get_settings
from ecoride.core.errors import ForbiddenError, UnauthenticatedError
from ecoride.db.models import Account
from ecoride.domain.accounts import ROLE_ADMIN
from ecoride.repositories.account_repository import AccountRepository
from ecoride.services.admin_service import AdminService
from ecoride.services.auth_service import AuthService
from ecoride.services.token_service import InvalidTokenError, TokenService

_bearer = HTTPBearer(auto_error=False)


def get_repository() -> AccountRepository:
    return AccountRepository()


def get_token_service(repository: AccountRepository = Depends(get_repository)) -> TokenService:
    return TokenService.from_settings(get_settings(), repository)


def get_auth_service(
    repository: AccountRepository = Depends(get_repository),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(repository=repository, tokens=tokens, settings=get_settings())


def get_admin_service(repository: AccountRepository = Depends(get_repository)) -> AdminService:
    return AdminService(repository=repository)


def current_account_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """Resolve the account id carried by a valid access token."""
    if not credentials or not credentials.credentials:
        raise UnauthenticatedError("Authentication invalid")
    try:
        return tokens.verify_access(credentials.credentials)
    except InvalidTokenError as exc:
        raise UnauthenticatedError("Authentication invalid") from exc


def require_admin(
    account_id: str = Depends(current_account_id),
    repository: AccountRepository = Depends(get_repository),
) -> Account:
    account = repository.get_by_id(account_id)
    if not account:
        raise UnauthenticatedError("Authentication invalid")
    if account.role != ROLE_ADMIN:
        raise ForbiddenError("Admin access required")
    return account
