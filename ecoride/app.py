from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ecoride.core.config import get_settings
from ecoride.core.errors import EcoRideError
from ecoride.core.log import configure_logging
from ecoride.db import create_all
from ecoride.routers import admin as admin_router
from ecoride.routers import auth as auth_router

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers for a JSON API."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cache-Control", "no-store")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


async def _handle_app_error(request: Request, exc: EcoRideError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _handle_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"message": detail})


async def _handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Something went wrong, try again later"})


@asynccontextmanager
async def _lifespan(app: FastAPI):
    create_all()
    yield


def create_app() -> FastAPI:
    """Build the API; compatible with uvicorn/gunicorn factories."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="EcoRide API", lifespan=_lifespan)

    allow_all = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else list(settings.cors_origins),
        allow_credentials=not allow_all,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.add_exception_handler(EcoRideError, _handle_app_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected)

    app.include_router(auth_router.router)
    app.include_router(admin_router.router)

    @app.get("/", tags=["root"])
    def read_root():
        return {"message": "EcoRide API is running"}

    logger.info("EcoRide API configured (env=%s)", settings.app_env)
    return app
