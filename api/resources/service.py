"""
Scoped resource business logic.

Every operation is authorized against the company first. Writes follow
write-then-invalidate: the row (and the company's id index) is committed,
then the company's cached assistant script is dropped, then the caller
gets its result.
"""

from __future__ import annotations

import logging
from typing import Any

from access import service as access_service
from access.policy import Action, Principal
from assistant import cache as script_cache
from core.errors import NotFound
from core.ids import parse_id

from . import repository
from .kinds import ResourceKind

logger = logging.getLogger(__name__)


def _not_found(kind: ResourceKind) -> NotFound:
    return NotFound(f"{kind.label} not found or does not belong to this company.")


async def create(
    principal: Principal,
    kind: ResourceKind,
    company_id: str,
    values: dict[str, Any],
) -> dict[str, Any]:
    company = await access_service.authorize(principal, company_id, Action.CREATE_SCOPED_RESOURCE)
    company_id = str(company["id"])

    row = await repository.create_resource(kind, company_id, values)
    await script_cache.invalidate(company_id)
    logger.info("%s_created company_id=%s id=%s subject_id=%s", kind.name, company_id, row["id"], principal.subject_id)
    return row


async def list_all(principal: Principal, kind: ResourceKind, company_id: str) -> list[dict[str, Any]]:
    company = await access_service.authorize(principal, company_id, Action.READ_SCOPED_RESOURCE)
    return await repository.list_resources(kind, str(company["id"]))


async def get_one(
    principal: Principal,
    kind: ResourceKind,
    company_id: str,
    resource_id: str,
) -> dict[str, Any]:
    company = await access_service.authorize(principal, company_id, Action.READ_SCOPED_RESOURCE)
    resource_id = parse_id(resource_id, label=f"{kind.name} ID")

    row = await repository.get_resource(kind, str(company["id"]), resource_id)
    if row is None:
        raise _not_found(kind)
    return row


async def update(
    principal: Principal,
    kind: ResourceKind,
    company_id: str,
    resource_id: str,
    values: dict[str, Any],
) -> dict[str, Any]:
    company = await access_service.authorize(principal, company_id, Action.UPDATE_SCOPED_RESOURCE)
    company_id = str(company["id"])
    resource_id = parse_id(resource_id, label=f"{kind.name} ID")

    if not values:
        row = await repository.get_resource(kind, company_id, resource_id)
        if row is None:
            raise _not_found(kind)
        return row

    row = await repository.update_resource(kind, company_id, resource_id, values)
    if row is None:
        raise _not_found(kind)
    await script_cache.invalidate(company_id)
    logger.info("%s_updated company_id=%s id=%s subject_id=%s", kind.name, company_id, resource_id, principal.subject_id)
    return row


async def delete(
    principal: Principal,
    kind: ResourceKind,
    company_id: str,
    resource_id: str,
) -> None:
    company = await access_service.authorize(principal, company_id, Action.DELETE_SCOPED_RESOURCE)
    company_id = str(company["id"])
    resource_id = parse_id(resource_id, label=f"{kind.name} ID")

    deleted = await repository.delete_resource(kind, company_id, resource_id)
    if not deleted:
        raise _not_found(kind)
    await script_cache.invalidate(company_id)
    logger.info("%s_deleted company_id=%s id=%s subject_id=%s", kind.name, company_id, resource_id, principal.subject_id)
