"""Request bodies and the public account representation."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ecoride.db.models import Account


class _Body(BaseModel):
    # Every field is optional so missing values surface as 400s from the services.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ProfileFields(_Body):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    middle_name: Optional[str] = Field(default=None, alias="middleName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    phone: Optional[str] = None
    school_id: Optional[str] = Field(default=None, alias="schoolId")
    license_id: Optional[str] = Field(default=None, alias="licenseId")
    sex: Optional[str] = None


class LoginRequest(_Body):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class AdminLoginRequest(_Body):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(ProfileFields):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LegacyAuthRequest(_Body):
    phone: Optional[str] = None
    role: Optional[str] = None


class RefreshTokenRequest(_Body):
    refresh_token: Optional[str] = None


class ProfileUpdate(ProfileFields):
    email: Optional[str] = None


class AdminUserUpdate(ProfileUpdate):
    role: Optional[str] = None
    approved: Optional[bool] = None


class DisapproveRequest(_Body):
    reason: Optional[str] = None


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_account(account: Account) -> dict:
    """Public view of an account; the password hash never leaves this module."""
    return {
        "id": account.id,
        "email": account.email,
        "phone": account.phone,
        "role": account.role,
        "firstName": account.first_name,
        "middleName": account.middle_name,
        "lastName": account.last_name,
        "sex": account.sex,
        "schoolId": account.school_id,
        "licenseId": account.license_id,
        "status": account.status,
        "disapprovalReason": account.disapproval_reason,
        "approved": bool(account.approved),
        "createdAt": _iso(account.created_at),
        "updatedAt": _iso(account.updated_at),
    }


def serialize_legacy_identity(account: Account) -> dict:
    return {"id": account.id, "phone": account.phone, "role": account.role}
