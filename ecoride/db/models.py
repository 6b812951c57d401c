"""SQLAlchemy models for accounts and issued refresh tokens."""
from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    func,
)

from .session import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(32), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    phone = Column(String(32), unique=True, nullable=True)
    role = Column(String(16), nullable=False, index=True)
    first_name = Column(String(120), nullable=True)
    middle_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    sex = Column(String(16), nullable=True)
    school_id = Column(String(64), nullable=True)
    license_id = Column(String(64), nullable=True)
    status = Column(String(16), default="pending", nullable=False)
    disapproval_reason = Column(Text, nullable=True)
    approved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    jti = Column(String(64), primary_key=True)
    account_id = Column(String(32), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
