from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the ecoride package importable when running from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ecoride.core import config as core_config  # noqa: E402
from ecoride.core.security import hash_password  # noqa: E402
from ecoride.db import models  # noqa: E402
from ecoride.db import session as db_session  # noqa: E402
from ecoride.repositories.account_repository import AccountRepository  # noqa: E402

ACCESS_SECRET = "test-access-secret-0123456789abcdef0123"
REFRESH_SECRET = "test-refresh-secret-fedcba9876543210fedc"


def _clear_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Point the app at a temporary SQLite database and reset cached settings/engine."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("ACCESS_TOKEN_SECRET", ACCESS_SECRET)
    monkeypatch.setenv("REFRESH_TOKEN_SECRET", REFRESH_SECRET)
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.delenv("REFRESH_TOKEN_SINGLE_USE", raising=False)
    monkeypatch.delenv("LEGACY_EMAIL_DOMAIN", raising=False)
    _clear_caches()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    _clear_caches()


@pytest.fixture()
def repo(db_env) -> AccountRepository:
    return AccountRepository()


@pytest.fixture()
def make_account(repo):
    """Insert an account directly, bypassing the registration flow."""

    def _make(
        email: str = "user@example.com",
        password: str = "secret-pass",
        role: str = "customer",
        status: str = "pending",
        **fields,
    ) -> models.Account:
        return repo.create(
            email=email,
            password_hash=hash_password(password),
            role=role,
            status=status,
            **fields,
        )

    return _make
