"""
Company persistence (raw SQL).

`members`, `product_ids`, `project_ids` and `offer_ids` are uuid[] columns.
Membership changes use add-if-absent / remove array updates so concurrent
requests cannot duplicate an entry.
"""

from __future__ import annotations

from typing import Any

from core import db

COMPANY_COLUMNS = """
    id, name, website_url, phone_number, owner_id, members,
    product_ids, project_ids, offer_ids, created_at, updated_at
"""

UPDATABLE_FIELDS = ("name", "website_url", "phone_number")


async def create_company(*, owner_id: str, name: str, website_url: str, phone_number: str) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO companies (owner_id, name, website_url, phone_number)
        VALUES ($1, $2, $3, $4)
        RETURNING {COMPANY_COLUMNS}
        """,
        owner_id,
        name,
        website_url,
        phone_number,
    )
    if row is None:
        raise RuntimeError("Failed to create company.")
    return row


async def get_company(company_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {COMPANY_COLUMNS}
        FROM companies
        WHERE id = $1
        """,
        company_id,
    )


async def list_companies(*, owner_id: str | None = None, member_id: str | None = None) -> list[dict[str, Any]]:
    """
    No filter lists everything. With both ids the match is owner OR member.
    """
    return await db.fetch_all(
        f"""
        SELECT {COMPANY_COLUMNS}
        FROM companies
        WHERE ($1::uuid IS NULL AND $2::uuid IS NULL)
           OR owner_id = $1::uuid
           OR $2::uuid = ANY(members)
        ORDER BY created_at DESC, id DESC
        """,
        owner_id,
        member_id,
    )


async def update_company(company_id: str, *, fields: dict[str, Any]) -> dict[str, Any] | None:
    columns = [name for name in UPDATABLE_FIELDS if name in fields]
    if not columns:
        return await get_company(company_id)

    assignments = ", ".join(f"{name} = ${i}" for i, name in enumerate(columns, start=2))
    return await db.fetch_one(
        f"""
        UPDATE companies
        SET {assignments},
            updated_at = now()
        WHERE id = $1
        RETURNING {COMPANY_COLUMNS}
        """,
        company_id,
        *(fields[name] for name in columns),
    )


async def delete_company(company_id: str) -> bool:
    # Scoped resources go with it (ON DELETE CASCADE).
    row = await db.fetch_one(
        """
        DELETE FROM companies
        WHERE id = $1
        RETURNING id
        """,
        company_id,
    )
    return row is not None


async def add_member(company_id: str, user_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        UPDATE companies
        SET members = CASE
                WHEN $2::uuid = ANY(members) THEN members
                ELSE array_append(members, $2::uuid)
            END,
            updated_at = now()
        WHERE id = $1
        RETURNING {COMPANY_COLUMNS}
        """,
        company_id,
        user_id,
    )


async def remove_member(company_id: str, user_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        UPDATE companies
        SET members = array_remove(members, $2::uuid),
            updated_at = now()
        WHERE id = $1
        RETURNING {COMPANY_COLUMNS}
        """,
        company_id,
        user_id,
    )
