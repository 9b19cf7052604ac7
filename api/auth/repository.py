"""
User persistence helpers.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

USER_COLUMNS = "id, email, password_hash, first_name, last_name, role, is_active, created_at, updated_at"


class DuplicateEmailError(RuntimeError):
    pass


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(
    *,
    email: str,
    password_hash: str,
    first_name: str,
    last_name: str,
    role: str = "user",
    is_active: bool = True,
) -> dict[str, Any]:
    try:
        row = await db.fetch_one(
            f"""
            INSERT INTO users (email, password_hash, first_name, last_name, role, is_active)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING {USER_COLUMNS}
            """,
            normalize_email(email),
            password_hash,
            first_name,
            last_name,
            role,
            is_active,
        )
    except asyncpg.UniqueViolationError as exc:
        raise DuplicateEmailError(normalize_email(email)) from exc
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )


async def get_user_by_id(user_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def role_exists(role: str) -> bool:
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM users
        WHERE role = $1
        LIMIT 1
        """,
        role,
    )
    return row is not None
