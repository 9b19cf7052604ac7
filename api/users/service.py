"""
User administration: list, read, update, deactivate, delete.

Admins and superadmins manage accounts; only a superadmin deletes them.
Superadmin accounts are protected: nobody can delete or deactivate one, change
its role, or assign the superadmin role through this path (that is what the
bootstrap endpoint is for), and only a superadmin can edit one.
"""

from __future__ import annotations

import logging
from typing import Any

from access import service as access_service
from access.policy import ADMIN_ROLES, Principal, Role
from assistant import cache as script_cache
from auth import repository as user_repository
from auth import security
from auth.schemas import UserResponse
from auth.service import to_user_response
from core.errors import AccessDenied, Conflict, NotFound
from core.ids import parse_id

from . import repository, schemas

logger = logging.getLogger(__name__)


async def _load(user_id: str) -> dict[str, Any]:
    user_id = parse_id(user_id, label="user ID")
    user_row = await user_repository.get_user_by_id(user_id)
    if user_row is None:
        raise NotFound("User not found.")
    return user_row


def _is_superadmin(user_row: dict[str, Any]) -> bool:
    return str(user_row["role"]) == Role.SUPERADMIN.value


async def list_users(principal: Principal) -> list[UserResponse]:
    access_service.require_role(principal, ADMIN_ROLES)
    rows = await repository.list_users()
    return [to_user_response(row) for row in rows]


async def get_user(principal: Principal, user_id: str) -> UserResponse:
    access_service.require_role(principal, ADMIN_ROLES)
    return to_user_response(await _load(user_id))


async def update_user(principal: Principal, user_id: str, payload: schemas.UpdateUserRequest) -> UserResponse:
    access_service.require_role(principal, ADMIN_ROLES)
    target = await _load(user_id)
    user_id = str(target["id"])

    if _is_superadmin(target) and not principal.is_superadmin:
        raise AccessDenied("Cannot modify superadmin user.")

    requested = payload.model_dump(exclude_unset=True, exclude_none=True)
    if requested.get("role") == Role.SUPERADMIN:
        raise AccessDenied("The superadmin role cannot be assigned.")
    if _is_superadmin(target) and ("role" in requested or requested.get("is_active") is False):
        raise AccessDenied("Cannot change the role or status of a superadmin user.")

    fields: dict[str, Any] = {}
    for name in ("email", "first_name", "last_name"):
        if name in requested:
            fields[name] = requested[name].strip()
    if "password" in requested:
        fields["password_hash"] = security.hash_password(requested["password"])
    if "role" in requested:
        fields["role"] = Role(requested["role"]).value
    if "is_active" in requested:
        fields["is_active"] = bool(requested["is_active"])

    if not fields:
        return to_user_response(target)

    if "email" in fields:
        existing = await user_repository.get_user_by_email(fields["email"])
        if existing is not None and str(existing["id"]) != user_id:
            raise Conflict("User with this email already exists.")

    try:
        row = await repository.update_user(user_id, fields=fields)
    except user_repository.DuplicateEmailError as exc:
        raise Conflict("User with this email already exists.") from exc
    if row is None:
        raise NotFound("User not found.")
    logger.info(
        "user_updated user_id=%s fields=%s subject_id=%s",
        user_id,
        ",".join(sorted(fields)),
        principal.subject_id,
    )
    return to_user_response(row)


async def deactivate_user(principal: Principal, user_id: str) -> UserResponse:
    access_service.require_role(principal, ADMIN_ROLES)
    target = await _load(user_id)
    if _is_superadmin(target):
        raise AccessDenied("Cannot deactivate superadmin user.")

    row = await repository.update_user(str(target["id"]), fields={"is_active": False})
    if row is None:
        raise NotFound("User not found.")
    logger.info("user_deactivated user_id=%s subject_id=%s", target["id"], principal.subject_id)
    return to_user_response(row)


async def delete_user(principal: Principal, user_id: str) -> None:
    access_service.require_role(principal, (Role.SUPERADMIN,))
    target = await _load(user_id)
    if _is_superadmin(target):
        raise AccessDenied("Cannot delete superadmin user.")

    try:
        released = await repository.delete_user(str(target["id"]))
    except repository.UserOwnsCompaniesError as exc:
        raise Conflict("User still owns companies. Delete them first.") from exc
    if released is None:
        raise NotFound("User not found.")

    for company_id in released:
        await script_cache.invalidate(company_id)
    logger.info(
        "user_deleted user_id=%s released_memberships=%s subject_id=%s",
        target["id"],
        len(released),
        principal.subject_id,
    )
