"""
Company-scoped authorization against stored companies.

Order of checks: id format (400), existence (404), policy (403).
Existence is not hidden from principals that are denied.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Iterable

from companies import repository as company_repository
from core.errors import AccessDenied, NotFound
from core.ids import parse_id

from .policy import Action, CompanyFilter, Principal, Role, decide, has_role, listing_filter

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def list_includes_memberships() -> bool:
    return _env_bool("COMPANY_LIST_INCLUDES_MEMBERSHIPS", False)


def require(principal: Principal, company: dict[str, Any], action: Action) -> None:
    decision = decide(principal, company, action)
    if not decision.allowed:
        logger.info(
            "access_denied subject_id=%s role=%s company_id=%s action=%s",
            principal.subject_id,
            principal.role.value,
            company.get("id"),
            action.value,
        )
        raise AccessDenied(decision.reason)


def require_role(principal: Principal, roles: Iterable[Role]) -> None:
    allowed = frozenset(roles)
    if not has_role(principal, allowed):
        logger.info(
            "access_denied subject_id=%s role=%s required=%s",
            principal.subject_id,
            principal.role.value,
            ",".join(sorted(r.value for r in allowed)),
        )
        raise AccessDenied("You do not have the role required for this action.")


async def authorize(principal: Principal, company_id: str, action: Action) -> dict[str, Any]:
    """
    Load a company and check `action` on it. Returns the company row.
    """
    company_id = parse_id(company_id, label="company ID")
    company = await company_repository.get_company(company_id)
    if company is None:
        raise NotFound("Company not found.")
    require(principal, company, action)
    return company


def company_filter_for(principal: Principal, *, owner_id: str | None = None) -> CompanyFilter:
    if owner_id is not None:
        owner_id = parse_id(owner_id, label="owner ID")
    return listing_filter(
        principal,
        include_memberships=list_includes_memberships(),
        owner_id=owner_id,
    )
