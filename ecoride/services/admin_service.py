"""Administrative moderation: listing, approval transitions, edits and deletion."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ecoride.core.errors import BadRequestError, NotFoundError
from ecoride.db.models import Account
from ecoride.domain.accounts import SELF_SERVICE_ROLES, license_id_for_role
from ecoride.repositories.account_repository import AccountRepository
from ecoride.services import approval

logger = logging.getLogger(__name__)

# Applied whenever the key is present in the update, empty values included.
_DIRECT_FIELDS = ("first_name", "middle_name", "last_name", "school_id", "sex")


def parse_approved_filter(value: Optional[str]) -> Optional[bool]:
    """Only the literal strings "true"/"false" filter; anything else is ignored."""
    if value == "true":
        return True
    if value == "false":
        return False
    return None


@dataclass
class AdminService:
    repository: AccountRepository = field(default_factory=AccountRepository)

    def list_users(
        self,
        role: Optional[str] = None,
        approved: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Account]:
        accounts = self.repository.search(
            role=role or None,
            approved=parse_approved_filter(approved),
            text=search or None,
        )
        logger.info("Listed %d users (role=%s approved=%s search=%s)", len(accounts), role, approved, search)
        return accounts

    def get_user(self, account_id: str) -> Account:
        account = self.repository.get_by_id(account_id)
        if not account:
            raise NotFoundError(f"No user found with id {account_id}")
        return account

    def approve_user(self, account_id: str) -> Account:
        account = approval.approve(self.get_user(account_id))
        logger.info("Approved user %s", account_id)
        return self.repository.save(account)

    def disapprove_user(self, account_id: str, reason: Optional[str] = None) -> Account:
        account = approval.disapprove(self.get_user(account_id), reason)
        logger.info("Disapproved user %s: %s", account_id, account.disapproval_reason)
        return self.repository.save(account)

    def update_user(self, account_id: str, fields: Mapping[str, Any]) -> Account:
        account = self.get_user(account_id)

        for name in _DIRECT_FIELDS:
            if name in fields:
                setattr(account, name, fields[name])
        if "phone" in fields:
            account.phone = fields["phone"] or None
        if fields.get("approved") is not None:
            account.approved = bool(fields["approved"])

        email = fields.get("email")
        if "email" in fields and email != account.email:
            if not email:
                raise BadRequestError("Email cannot be empty")
            if self.repository.find_by_email(email, exclude_id=account.id):
                raise BadRequestError("Email already in use")
            account.email = email

        role = fields.get("role")
        if "role" in fields and role != account.role:
            if role not in SELF_SERVICE_ROLES:
                raise BadRequestError("Invalid role. Must be customer or rider")
            account.role = role

        if "license_id" in fields:
            account.license_id = license_id_for_role(account.role, fields["license_id"])

        logger.info("Updated user %s fields=%s", account_id, sorted(fields))
        return self.repository.save(account)

    def delete_user(self, account_id: str) -> str:
        self.get_user(account_id)
        self.repository.delete(account_id)
        logger.info("Deleted user %s", account_id)
        return account_id
