"""Account persistence backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError

from ecoride.core.errors import BadRequestError
from ecoride.db.models import Account, RefreshToken
from ecoride.db.session import get_session
from ecoride.domain.accounts import ROLE_ADMIN


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


# Column or constraint names as reported by SQLite ("accounts.phone") and PostgreSQL.
_PHONE_CONSTRAINT_MARKERS = ("accounts.phone", "accounts_phone_key", "(phone)")


def _unique_violation(exc: IntegrityError) -> BadRequestError:
    detail = str(getattr(exc, "orig", exc)).lower()
    if any(marker in detail for marker in _PHONE_CONSTRAINT_MARKERS):
        return BadRequestError("Phone number already in use")
    return BadRequestError("Email already in use")


class AccountRepository:
    """CRUD and query helpers for accounts and their refresh tokens."""

    # -------------------------- lookups --------------------------
    def get_by_id(self, account_id: str) -> Optional[Account]:
        if not account_id:
            return None
        with get_session() as session:
            return session.get(Account, account_id)

    def find_by_email(self, email: str, *, exclude_id: str | None = None) -> Optional[Account]:
        stmt = select(Account).where(Account.email == email)
        if exclude_id:
            stmt = stmt.where(Account.id != exclude_id)
        with get_session() as session:
            return session.execute(stmt.limit(1)).scalar_one_or_none()

    def find_by_credentials(self, email: str, role: str) -> Optional[Account]:
        """Exact (email, role) match; an email registered under another role is simply absent."""
        stmt = select(Account).where(Account.email == email, Account.role == role).limit(1)
        with get_session() as session:
            return session.execute(stmt).scalar_one_or_none()

    def find_by_phone(self, phone: str) -> Optional[Account]:
        stmt = select(Account).where(Account.phone == phone).limit(1)
        with get_session() as session:
            return session.execute(stmt).scalar_one_or_none()

    def search(
        self,
        *,
        role: str | None = None,
        approved: bool | None = None,
        text: str | None = None,
    ) -> list[Account]:
        """Non-admin accounts matching every given filter, newest first."""
        stmt = select(Account).where(Account.role != ROLE_ADMIN)
        if role:
            stmt = stmt.where(Account.role == role)
        if approved is not None:
            stmt = stmt.where(Account.approved == approved)
        if text:
            pattern = _like_pattern(text)
            stmt = stmt.where(
                or_(
                    Account.first_name.ilike(pattern, escape="\\"),
                    Account.last_name.ilike(pattern, escape="\\"),
                    Account.email.ilike(pattern, escape="\\"),
                    Account.phone.ilike(pattern, escape="\\"),
                )
            )
        stmt = stmt.order_by(Account.created_at.desc(), Account.id.desc())
        with get_session() as session:
            return list(session.execute(stmt).scalars().all())

    # -------------------------- mutations --------------------------
    def create(self, **fields) -> Account:
        now = datetime.now(timezone.utc)
        fields.setdefault("created_at", now)
        fields.setdefault("updated_at", now)
        entity = Account(**fields)
        with get_session() as session:
            session.add(entity)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise _unique_violation(exc) from exc
            session.refresh(entity)
            return entity

    def save(self, account: Account) -> Account:
        account.updated_at = datetime.now(timezone.utc)
        with get_session() as session:
            merged = session.merge(account)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise _unique_violation(exc) from exc
            session.refresh(merged)
            return merged

    def delete(self, account_id: str) -> bool:
        with get_session() as session:
            session.execute(delete(RefreshToken).where(RefreshToken.account_id == account_id))
            result = session.execute(delete(Account).where(Account.id == account_id))
            session.commit()
            return result.rowcount > 0

    # -------------------------- refresh tokens --------------------------
    def add_refresh_token(self, jti: str, account_id: str, expires_at: datetime) -> None:
        with get_session() as session:
            session.add(RefreshToken(jti=jti, account_id=account_id, expires_at=expires_at))
            session.commit()

    def get_refresh_token(self, jti: str) -> Optional[RefreshToken]:
        with get_session() as session:
            return session.get(RefreshToken, jti)

    def revoke_refresh_token(self, jti: str) -> bool:
        """Mark a refresh token as consumed; False when it was already revoked or unknown."""
        with get_session() as session:
            stmt = (
                update(RefreshToken)
                .where(RefreshToken.jti == jti, RefreshToken.revoked_at.is_(None))
                .values(revoked_at=datetime.now(timezone.utc))
            )
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0
