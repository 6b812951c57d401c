"""Error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations


class EcoRideError(Exception):
    """Base class for errors that map to a client-facing status code."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(EcoRideError):
    status_code = 400


class UnauthenticatedError(EcoRideError):
    status_code = 401


class NotFoundError(EcoRideError):
    status_code = 404


class ForbiddenError(EcoRideError):
    status_code = 403
