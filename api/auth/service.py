"""
Auth business logic: account creation, login, and principal resolution.
"""

from __future__ import annotations

import logging

from access.policy import Principal, Role
from core.errors import AccessDenied, AuthenticationRequired, Conflict
from core.ids import is_valid_id

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=str(user_row["id"]),
        email=str(user_row["email"]),
        first_name=str(user_row["first_name"]),
        last_name=str(user_row["last_name"]),
        role=str(user_row["role"]),
        is_active=bool(user_row["is_active"]),
        created_at=user_row["created_at"],
    )


def _auth_response(user_row: dict) -> schemas.AuthResponse:
    access_token = security.build_access_token(
        user_id=str(user_row["id"]),
        email=str(user_row["email"]),
    )
    return schemas.AuthResponse(user=to_user_response(user_row), access_token=access_token)


async def _create_user(payload: schemas.RegisterRequest, *, role: Role) -> dict:
    existing = await repository.get_user_by_email(payload.email)
    if existing is not None:
        raise Conflict("User with this email already exists.")

    try:
        return await repository.create_user(
            email=payload.email,
            password_hash=security.hash_password(payload.password),
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            role=role.value,
        )
    except repository.DuplicateEmailError as exc:
        raise Conflict("User with this email already exists.") from exc


async def register(payload: schemas.RegisterRequest) -> schemas.AuthResponse:
    user_row = await _create_user(payload, role=Role.USER)
    logger.info("user_registered user_id=%s", user_row["id"])
    return _auth_response(user_row)


async def login(payload: schemas.LoginRequest) -> schemas.AuthResponse:
    user_row = await repository.get_user_by_email(payload.email)
    if user_row is None:
        raise AuthenticationRequired("Invalid credentials.")

    is_valid = security.verify_password(payload.password, str(user_row.get("password_hash") or ""))
    if not is_valid:
        raise AuthenticationRequired("Invalid credentials.")

    if not bool(user_row.get("is_active", False)):
        raise AuthenticationRequired("User account is inactive.")

    return _auth_response(user_row)


async def create_superadmin(payload: schemas.CreateSuperadminRequest) -> schemas.UserResponse:
    """
    One-time bootstrap of the single superadmin account.
    """
    if not security.superadmin_secret_key():
        raise AccessDenied("Superadmin secret key not configured. Cannot create superadmin.")
    if not security.superadmin_secret_matches(payload.secret_key):
        raise AccessDenied("Invalid secret key.")

    if await repository.role_exists(Role.SUPERADMIN.value):
        raise Conflict("Superadmin already exists.")

    user_row = await _create_user(payload, role=Role.SUPERADMIN)
    logger.info("superadmin_created user_id=%s", user_row["id"])
    return to_user_response(user_row)


async def get_user_from_access_token(access_token: str) -> dict:
    try:
        payload = security.decode_access_token(access_token)
    except security.AuthSecurityError as exc:
        raise AuthenticationRequired(str(exc)) from exc

    subject = str(payload.get("sub") or "").strip()
    if not is_valid_id(subject):
        raise AuthenticationRequired("Invalid access token subject.")

    user_row = await repository.get_user_by_id(subject)
    if user_row is None:
        raise AuthenticationRequired("User not found.")
    if not bool(user_row.get("is_active", False)):
        raise AccessDenied("User is inactive.")
    return user_row


def principal_from_user(user_row: dict) -> Principal:
    # Role comes from the stored row; tokens do not carry one.
    return Principal(subject_id=str(user_row["id"]), role=Role(str(user_row["role"])))


async def resolve_principal(access_token: str) -> Principal:
    user_row = await get_user_from_access_token(access_token)
    return principal_from_user(user_row)


async def me(access_token: str) -> schemas.UserResponse:
    user_row = await get_user_from_access_token(access_token)
    return to_user_response(user_row)
