"""
Company management: create, list, read, update, delete, and membership.

Company-level writes and membership changes drop the company's cached
assistant script after the write commits.
"""

from __future__ import annotations

import logging
from typing import Any

from access import service as access_service
from access.policy import Action, Principal
from assistant import cache as script_cache
from auth import repository as user_repository
from core.errors import NotFound, ValidationFailure
from core.ids import parse_id

from . import repository, schemas

logger = logging.getLogger(__name__)


def to_company_response(row: dict[str, Any]) -> schemas.CompanyResponse:
    return schemas.CompanyResponse(
        id=str(row["id"]),
        name=str(row["name"]),
        website_url=str(row["website_url"]),
        phone_number=str(row["phone_number"]),
        owner_id=str(row["owner_id"]),
        members=[str(m) for m in row.get("members") or []],
        product_ids=[str(i) for i in row.get("product_ids") or []],
        project_ids=[str(i) for i in row.get("project_ids") or []],
        offer_ids=[str(i) for i in row.get("offer_ids") or []],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


async def create_company(principal: Principal, payload: schemas.CreateCompanyRequest) -> schemas.CompanyResponse:
    row = await repository.create_company(
        owner_id=principal.subject_id,
        name=payload.name.strip(),
        website_url=payload.website_url.strip(),
        phone_number=payload.phone_number.strip(),
    )
    logger.info("company_created company_id=%s owner_id=%s", row["id"], principal.subject_id)
    return to_company_response(row)


async def list_companies(principal: Principal, *, owner_id: str | None = None) -> list[schemas.CompanyResponse]:
    company_filter = access_service.company_filter_for(principal, owner_id=owner_id)
    rows = await repository.list_companies(
        owner_id=company_filter.owner_id,
        member_id=company_filter.member_id,
    )
    return [to_company_response(row) for row in rows]


async def get_company(principal: Principal, company_id: str) -> schemas.CompanyResponse:
    company = await access_service.authorize(principal, company_id, Action.READ_COMPANY)
    return to_company_response(company)


async def update_company(
    principal: Principal,
    company_id: str,
    payload: schemas.UpdateCompanyRequest,
) -> schemas.CompanyResponse:
    company = await access_service.authorize(principal, company_id, Action.UPDATE_COMPANY)
    company_id = str(company["id"])

    fields = {k: v.strip() for k, v in payload.model_dump(exclude_unset=True, exclude_none=True).items()}
    if not fields:
        return to_company_response(company)

    row = await repository.update_company(company_id, fields=fields)
    if row is None:
        raise NotFound("Company not found.")
    await script_cache.invalidate(company_id)
    logger.info("company_updated company_id=%s subject_id=%s", company_id, principal.subject_id)
    return to_company_response(row)


async def delete_company(principal: Principal, company_id: str) -> None:
    company = await access_service.authorize(principal, company_id, Action.DELETE_COMPANY)
    company_id = str(company["id"])

    deleted = await repository.delete_company(company_id)
    if not deleted:
        raise NotFound("Company not found.")
    await script_cache.invalidate(company_id)
    script_cache.forget(company_id)
    logger.info("company_deleted company_id=%s subject_id=%s", company_id, principal.subject_id)


async def add_member(principal: Principal, company_id: str, user_id: str) -> schemas.CompanyResponse:
    company = await access_service.authorize(principal, company_id, Action.ADD_MEMBER)
    company_id = str(company["id"])
    user_id = parse_id(user_id, label="user ID")

    if user_id == str(company["owner_id"]):
        raise ValidationFailure("The company owner cannot be added as a member.")
    if await user_repository.get_user_by_id(user_id) is None:
        raise NotFound("User not found.")

    row = await repository.add_member(company_id, user_id)
    if row is None:
        raise NotFound("Company not found.")
    await script_cache.invalidate(company_id)
    logger.info("member_added company_id=%s user_id=%s subject_id=%s", company_id, user_id, principal.subject_id)
    return to_company_response(row)


async def remove_member(principal: Principal, company_id: str, user_id: str) -> schemas.CompanyResponse:
    company = await access_service.authorize(principal, company_id, Action.REMOVE_MEMBER)
    company_id = str(company["id"])
    user_id = parse_id(user_id, label="user ID")

    if user_id not in {str(m) for m in company.get("members") or []}:
        raise NotFound("User is not a member of this company.")

    row = await repository.remove_member(company_id, user_id)
    if row is None:
        raise NotFound("Company not found.")
    await script_cache.invalidate(company_id)
    logger.info("member_removed company_id=%s user_id=%s subject_id=%s", company_id, user_id, principal.subject_id)
    return to_company_response(row)
