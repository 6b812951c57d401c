"""
Approval gate over account status.

The gate runs after credentials are verified and before tokens are issued.
Administrators bypass it. Moderation may move an account between any of the
three states.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ecoride.db.models import Account
from ecoride.domain.accounts import (
    ROLE_ADMIN,
    STATUS_APPROVED,
    STATUS_DISAPPROVED,
    STATUS_PENDING,
)

DEFAULT_DISAPPROVAL_REASON = "No reason provided"

_DENIAL_MESSAGES = {
    STATUS_DISAPPROVED: "Your account has been disapproved. Please contact support for assistance.",
    STATUS_PENDING: "Your account is pending approval. Please wait for an administrator to approve your account.",
}


@dataclass
class ApprovalDenied:
    status: str
    message: str
    is_approved: bool = False

    def to_payload(self) -> dict:
        return {"message": self.message, "status": self.status, "isApproved": self.is_approved}


def check_approval(account: Account, role: str) -> Optional[ApprovalDenied]:
    """Return None when the account may receive tokens, else the denial to report."""
    if role == ROLE_ADMIN:
        return None
    status = account.status or STATUS_PENDING
    if status == STATUS_APPROVED:
        return None
    if status not in _DENIAL_MESSAGES:
        status = STATUS_PENDING
    return ApprovalDenied(status=status, message=_DENIAL_MESSAGES[status])


def approve(account: Account) -> Account:
    account.status = STATUS_APPROVED
    return account


def disapprove(account: Account, reason: Optional[str] = None) -> Account:
    account.status = STATUS_DISAPPROVED
    account.disapproval_reason = reason or DEFAULT_DISAPPROVAL_REASON
    return account
