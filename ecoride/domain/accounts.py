"""Domain rules for accounts: roles, approval states and licence ids."""
from __future__ import annotations

from typing import Optional

from ecoride.core.errors import BadRequestError

ROLE_CUSTOMER = "customer"
ROLE_RIDER = "rider"
ROLE_ADMIN = "admin"

LOGIN_ROLES = (ROLE_CUSTOMER, ROLE_RIDER, ROLE_ADMIN)
SELF_SERVICE_ROLES = (ROLE_CUSTOMER, ROLE_RIDER)

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_DISAPPROVED = "disapproved"

STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_DISAPPROVED)

LICENSE_ID_MIN_LENGTH = 4


def normalize_license_id(value: str) -> str:
    """Trim and uppercase a rider licence id, rejecting values shorter than 4 characters."""
    formatted = (value or "").strip().upper()
    if len(formatted) < LICENSE_ID_MIN_LENGTH:
        raise BadRequestError("License ID must be at least 4 characters")
    return formatted


def license_id_for_role(role: str, value: Optional[str]) -> Optional[str]:
    """Normalize only when the account is a rider and a value was given."""
    if role == ROLE_RIDER and value:
        return normalize_license_id(value)
    return value
