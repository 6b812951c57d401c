"""
Configuration helpers for the EcoRide backend.

Routers and services receive a Settings object instead of reading os.environ
directly, so secrets and TTLs are resolved once at startup.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

_DEV_ACCESS_SECRET = "dev-access-token-secret-change-me-0123456789"
_DEV_REFRESH_SECRET = "dev-refresh-token-secret-change-me-9876543210"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    database_url: str
    access_token_secret: str
    refresh_token_secret: str
    access_token_ttl_seconds: int
    refresh_token_ttl_seconds: int
    refresh_token_single_use: bool
    legacy_email_domain: str
    cors_origins: tuple[str, ...]
    log_level: str


def _validate(settings: Settings) -> None:
    if settings.access_token_secret == settings.refresh_token_secret:
        raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ.")
    if settings.app_env == "prod":
        if settings.access_token_secret == _DEV_ACCESS_SECRET or settings.refresh_token_secret == _DEV_REFRESH_SECRET:
            raise RuntimeError("Token secrets must be configured in production.")


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _bool(value: str | None, default: bool = False) -> bool:
        if value is None:
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}

    origins = tuple(o.strip() for o in (os.getenv("CORS_ORIGINS") or "*").split(",") if o.strip())
    settings = Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./ecoride.db"),
        access_token_secret=os.getenv("ACCESS_TOKEN_SECRET") or _DEV_ACCESS_SECRET,
        refresh_token_secret=os.getenv("REFRESH_TOKEN_SECRET") or _DEV_REFRESH_SECRET,
        access_token_ttl_seconds=_int(os.getenv("ACCESS_TOKEN_TTL_SECONDS", "86400"), 86400),
        refresh_token_ttl_seconds=_int(os.getenv("REFRESH_TOKEN_TTL_SECONDS", "2592000"), 2592000),
        refresh_token_single_use=_bool(os.getenv("REFRESH_TOKEN_SINGLE_USE"), True),
        legacy_email_domain=(os.getenv("LEGACY_EMAIL_DOMAIN") or "temp.ecoride.com").strip(),
        cors_origins=origins or ("*",),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
    _validate(settings)
    return settings
