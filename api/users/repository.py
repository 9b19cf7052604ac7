"""
User administration persistence (raw SQL).

Lookups by id and email live in `auth/repository.py`; this module adds the
admin-side writes.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from auth.repository import USER_COLUMNS, DuplicateEmailError, normalize_email
from core import db

UPDATABLE_FIELDS = ("email", "password_hash", "first_name", "last_name", "role", "is_active")


class UserOwnsCompaniesError(RuntimeError):
    pass


async def list_users() -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        ORDER BY created_at DESC, id DESC
        """
    )


async def update_user(user_id: str, *, fields: dict[str, Any]) -> dict[str, Any] | None:
    values = dict(fields)
    if "email" in values:
        values["email"] = normalize_email(values["email"])
    columns = [name for name in UPDATABLE_FIELDS if name in values]
    if not columns:
        return await db.fetch_one(f"SELECT {USER_COLUMNS} FROM users WHERE id = $1", user_id)

    assignments = ", ".join(f"{name} = ${i}" for i, name in enumerate(columns, start=2))
    try:
        return await db.fetch_one(
            f"""
            UPDATE users
            SET {assignments},
                updated_at = now()
            WHERE id = $1
            RETURNING {USER_COLUMNS}
            """,
            user_id,
            *(values[name] for name in columns),
        )
    except asyncpg.UniqueViolationError as exc:
        raise DuplicateEmailError(values.get("email", "")) from exc


async def delete_user(user_id: str) -> list[str] | None:
    """
    Delete a user and drop them from every company's `members`.

    Returns the ids of companies the user was removed from, or None when no
    such user exists. Raises `UserOwnsCompaniesError` while the user still
    owns a company.
    """
    try:
        async with db.transaction() as conn:
            released = await conn.fetch(
                """
                UPDATE companies
                SET members = array_remove(members, $1::uuid),
                    updated_at = now()
                WHERE $1::uuid = ANY(members)
                RETURNING id
                """,
                user_id,
            )
            row = await conn.fetchrow(
                """
                DELETE FROM users
                WHERE id = $1
                RETURNING id
                """,
                user_id,
            )
            if row is None:
                return None
    except asyncpg.ForeignKeyViolationError as exc:
        raise UserOwnsCompaniesError(user_id) from exc
    return [str(r["id"]) for r in released]
