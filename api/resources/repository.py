"""
Scoped resource persistence (raw SQL), shared by products, projects and offers.

Table and column names come only from `ResourceKind` definitions, never from
request input. Every query is filtered by `company_id`.
"""

from __future__ import annotations

from typing import Any

from core import db

from .kinds import ResourceKind


def _check_fields(kind: ResourceKind, names: tuple[str, ...] | list[str]) -> None:
    unknown = [n for n in names if n not in kind.fields]
    if unknown:
        raise ValueError(f"Unknown {kind.name} field(s): {', '.join(unknown)}")


async def create_resource(kind: ResourceKind, company_id: str, values: dict[str, Any]) -> dict[str, Any]:
    """
    Insert a resource and add its id to the company's index in one transaction.
    """
    columns = [name for name in kind.fields if name in values]
    placeholders = ", ".join(f"${i}" for i in range(2, len(columns) + 2))
    column_list = ", ".join(("company_id", *columns))

    async with db.transaction() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO {kind.table} ({column_list})
            VALUES ($1, {placeholders})
            RETURNING {kind.columns}
            """,
            company_id,
            *(values[name] for name in columns),
        )
        if row is None:
            raise RuntimeError(f"Failed to create {kind.name}.")
        await conn.execute(
            f"""
            UPDATE companies
            SET {kind.index_column} = array_append({kind.index_column}, $2::uuid),
                updated_at = now()
            WHERE id = $1
              AND NOT ($2::uuid = ANY({kind.index_column}))
            """,
            company_id,
            row["id"],
        )
    return db.record_to_dict(row)


async def list_resources(
    kind: ResourceKind,
    company_id: str,
    *,
    limit: int | None = None,
    order_by: str = "created_at",
) -> list[dict[str, Any]]:
    """
    Newest first by default; `order_by` picks another descending sort key.
    """
    if order_by not in kind.sortable:
        raise ValueError(f"Cannot sort {kind.plural} by {order_by!r}.")
    return await db.fetch_all(
        f"""
        SELECT {kind.columns}
        FROM {kind.table}
        WHERE company_id = $1
        ORDER BY {order_by} DESC, created_at DESC, id DESC
        LIMIT $2
        """,
        company_id,
        limit,
    )


async def search_resources(
    kind: ResourceKind,
    company_id: str,
    needle: str,
    *,
    fields: tuple[str, ...],
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """
    Case-insensitive substring match on any of `fields`, oldest first.

    `strpos` keeps user input literal (no LIKE wildcards, no regex).
    """
    _check_fields(kind, fields)
    if not fields:
        return []
    conditions = " OR ".join(f"strpos(lower({name}::text), lower($2)) > 0" for name in fields)
    return await db.fetch_all(
        f"""
        SELECT {kind.columns}
        FROM {kind.table}
        WHERE company_id = $1
          AND ({conditions})
        ORDER BY created_at ASC, id ASC
        LIMIT $3
        """,
        company_id,
        needle,
        limit,
    )


async def get_resource(kind: ResourceKind, company_id: str, resource_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {kind.columns}
        FROM {kind.table}
        WHERE id = $1
          AND company_id = $2
        """,
        resource_id,
        company_id,
    )


async def update_resource(
    kind: ResourceKind,
    company_id: str,
    resource_id: str,
    values: dict[str, Any],
) -> dict[str, Any] | None:
    columns = [name for name in kind.fields if name in values]
    if not columns:
        return await get_resource(kind, company_id, resource_id)

    assignments = ", ".join(f"{name} = ${i}" for i, name in enumerate(columns, start=3))
    return await db.fetch_one(
        f"""
        UPDATE {kind.table}
        SET {assignments},
            updated_at = now()
        WHERE id = $1
          AND company_id = $2
        RETURNING {kind.columns}
        """,
        resource_id,
        company_id,
        *(values[name] for name in columns),
    )


async def delete_resource(kind: ResourceKind, company_id: str, resource_id: str) -> bool:
    """
    Delete a resource and drop its id from the company's index in one transaction.
    """
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            f"""
            DELETE FROM {kind.table}
            WHERE id = $1
              AND company_id = $2
            RETURNING id
            """,
            resource_id,
            company_id,
        )
        if row is None:
            return False
        await conn.execute(
            f"""
            UPDATE companies
            SET {kind.index_column} = array_remove({kind.index_column}, $2::uuid),
                updated_at = now()
            WHERE id = $1
            """,
            company_id,
            row["id"],
        )
    return True
