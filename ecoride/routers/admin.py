"""Moderation endpoints. Errors are mapped here rather than by the app-wide handlers."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from ecoride.core.errors import BadRequestError, NotFoundError
from ecoride.schemas import AdminUserUpdate, DisapproveRequest, serialize_account
from ecoride.services.admin_service import AdminService
from ecoride.routers.deps import get_admin_service, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _failure(action: str, exc: Exception) -> JSONResponse:
    if isinstance(exc, NotFoundError):
        return JSONResponse(status_code=404, content={"message": exc.message})
    if isinstance(exc, BadRequestError):
        return JSONResponse(status_code=400, content={"message": exc.message})
    logger.exception("Error %s", action)
    return JSONResponse(status_code=500, content={"message": f"Error {action}", "error": str(exc)})


@router.get("/users")
def list_users(
    role: Optional[str] = None,
    approved: Optional[str] = None,
    search: Optional[str] = None,
    service: AdminService = Depends(get_admin_service),
):
    try:
        accounts = service.list_users(role=role, approved=approved, search=search)
    except Exception as exc:
        return _failure("fetching users", exc)
    return {"count": len(accounts), "users": [serialize_account(a) for a in accounts]}


@router.get("/users/{user_id}")
def get_user(user_id: str, service: AdminService = Depends(get_admin_service)):
    try:
        account = service.get_user(user_id)
    except Exception as exc:
        return _failure("fetching user", exc)
    return {"user": serialize_account(account)}


@router.patch("/users/{user_id}/approve")
def approve_user(user_id: str, service: AdminService = Depends(get_admin_service)):
    try:
        account = service.approve_user(user_id)
    except Exception as exc:
        return _failure("approving user", exc)
    return {"message": "User approved successfully", "user": serialize_account(account)}


@router.patch("/users/{user_id}/disapprove")
def disapprove_user(
    user_id: str,
    body: Optional[DisapproveRequest] = Body(default=None),
    service: AdminService = Depends(get_admin_service),
):
    try:
        account = service.disapprove_user(user_id, body.reason if body else None)
    except Exception as exc:
        return _failure("disapproving user", exc)
    return {"message": "User disapproved successfully", "user": serialize_account(account)}


@router.put("/users/{user_id}")
def update_user(
    user_id: str,
    body: AdminUserUpdate,
    service: AdminService = Depends(get_admin_service),
):
    try:
        account = service.update_user(user_id, body.model_dump(exclude_unset=True))
    except Exception as exc:
        return _failure("updating user", exc)
    return {"message": "User updated successfully", "user": serialize_account(account)}


@router.delete("/users/{user_id}")
def delete_user(user_id: str, service: AdminService = Depends(get_admin_service)):
    try:
        deleted_id = service.delete_user(user_id)
    except Exception as exc:
        return _failure("deleting user", exc)
    return {"message": "User deleted successfully", "userId": deleted_id}
