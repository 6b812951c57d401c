from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ecoride.core.errors import UnauthenticatedError
from ecoride.schemas import (
    AdminLoginRequest,
    LegacyAuthRequest,
    LoginRequest,
    ProfileUpdate,
    RefreshTokenRequest,
    RegisterRequest,
    serialize_account,
    serialize_legacy_identity,
)
from ecoride.services.approval import ApprovalDenied
from ecoride.services.auth_service import AuthService, AuthSuccess, LegacyAccountCreated
from ecoride.routers.deps import current_account_id, get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

PROFILE_FIELDS = {"first_name", "middle_name", "last_name", "phone", "school_id", "license_id", "sex"}


def _logged_in(result: AuthSuccess, message: str = "User logged in successfully") -> dict:
    return {
        "message": message,
        "user": serialize_account(result.account),
        "access_token": result.tokens.access_token,
        "refresh_token": result.tokens.refresh_token,
    }


def _denied(result: ApprovalDenied) -> JSONResponse:
    return JSONResponse(status_code=403, content=result.to_payload())


@router.get("/")
def test_auth():
    return {"message": "Auth endpoint is working"}


@router.post("/login")
def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    result = service.login(body.email, body.password, body.role)
    if isinstance(result, ApprovalDenied):
        return _denied(result)
    return _logged_in(result)


@router.post("/register", status_code=201)
def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    profile = body.model_dump(include=PROFILE_FIELDS)
    result = service.register(body.email, body.password, body.role, profile)
    payload = _logged_in(result, "User registered successfully. Your account is pending approval.")
    payload.update({"isApproved": False, "status": "pending"})
    return payload


@router.post("/signin")
def legacy_signin(body: LegacyAuthRequest, service: AuthService = Depends(get_auth_service)):
    result = service.legacy_auth(body.phone, body.role)
    if isinstance(result, ApprovalDenied):
        return _denied(result)
    if isinstance(result, LegacyAccountCreated):
        return JSONResponse(
            status_code=403,
            content={
                "message": "Account pending approval",
                "status": result.account.status,
                "isApproved": False,
                "user": serialize_legacy_identity(result.account),
            },
        )
    return _logged_in(result)


@router.post("/refresh-token")
def refresh_token(body: RefreshTokenRequest, service: AuthService = Depends(get_auth_service)):
    pair = service.refresh(body.refresh_token)
    return {"access_token": pair.access_token, "refresh_token": pair.refresh_token}


@router.get("/profile")
def get_profile(
    account_id: str = Depends(current_account_id),
    service: AuthService = Depends(get_auth_service),
):
    return {"user": serialize_account(service.get_profile(account_id))}


@router.put("/profile")
def update_profile(
    body: ProfileUpdate,
    account_id: str = Depends(current_account_id),
    service: AuthService = Depends(get_auth_service),
):
    account = service.update_profile(account_id, body.model_dump(exclude_unset=True))
    return {"message": "Profile updated successfully", "user": serialize_account(account)}


@router.post("/admin-login")
def admin_login(body: AdminLoginRequest, service: AuthService = Depends(get_auth_service)):
    try:
        result = service.admin_login(body.email, body.password)
    except UnauthenticatedError as exc:
        return JSONResponse(status_code=401, content={"message": exc.message})
    except Exception as exc:
        logger.exception("Admin login error")
        return JSONResponse(status_code=500, content={"message": "Error during admin login", "error": str(exc)})
    return _logged_in(result, "Admin logged in successfully")
