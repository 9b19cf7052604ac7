"""
Tenant access policy.

`decide()` is a pure function of
(principal.role, principal.subject_id, company.owner_id, company.members, action).
It never reads request context, the database, or the id-array indexes on the
company row; ownership of a scoped resource is always its `company_id`.

Rule order (first match wins):
1. superadmin -> allow
2. delete company -> allow for admin, deny for anyone else
3. update company / manage members by a non-owner -> deny
4. owner -> allow for company reads, updates, membership and scoped resources
5. member -> allow for company reads and scoped resources
6. deny
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class Action(str, Enum):
    READ_COMPANY = "read_company"
    UPDATE_COMPANY = "update_company"
    DELETE_COMPANY = "delete_company"
    ADD_MEMBER = "add_member"
    REMOVE_MEMBER = "remove_member"
    READ_SCOPED_RESOURCE = "read_scoped_resource"
    CREATE_SCOPED_RESOURCE = "create_scoped_resource"
    UPDATE_SCOPED_RESOURCE = "update_scoped_resource"
    DELETE_SCOPED_RESOURCE = "delete_scoped_resource"


OWNER_ONLY_ACTIONS = frozenset({Action.UPDATE_COMPANY, Action.ADD_MEMBER, Action.REMOVE_MEMBER})

MEMBER_ACTIONS = frozenset(
    {
        Action.READ_COMPANY,
        Action.READ_SCOPED_RESOURCE,
        Action.CREATE_SCOPED_RESOURCE,
        Action.UPDATE_SCOPED_RESOURCE,
        Action.DELETE_SCOPED_RESOURCE,
    }
)

OWNER_ACTIONS = MEMBER_ACTIONS | OWNER_ONLY_ACTIONS

ADMIN_ROLES = frozenset({Role.ADMIN, Role.SUPERADMIN})


@dataclass(frozen=True)
class Principal:
    subject_id: str
    role: Role = Role.USER

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


ALLOW = Decision(allowed=True)


def deny(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


def _members_of(company: Mapping[str, Any]) -> set[str]:
    members: Iterable[Any] = company.get("members") or ()
    return {str(m) for m in members}


def is_owner(principal: Principal, company: Mapping[str, Any]) -> bool:
    return str(company.get("owner_id") or "") == principal.subject_id


def is_member(principal: Principal, company: Mapping[str, Any]) -> bool:
    return principal.subject_id in _members_of(company)


def decide(principal: Principal, company: Mapping[str, Any], action: Action) -> Decision:
    if principal.is_superadmin:
        return ALLOW

    if action == Action.DELETE_COMPANY:
        if principal.role == Role.ADMIN:
            return ALLOW
        return deny("Only administrators can delete companies.")

    owner = is_owner(principal, company)
    if action in OWNER_ONLY_ACTIONS and not owner:
        return deny("Only the company owner can perform this action.")

    if action in OWNER_ACTIONS and owner:
        return ALLOW

    if action in MEMBER_ACTIONS and is_member(principal, company):
        return ALLOW

    return deny("Access denied: You do not have permission to access this company.")


@dataclass(frozen=True)
class CompanyFilter:
    """
    Listing filter. Empty means "every company".

    When both ids are set the match is owner OR member.
    """

    owner_id: str | None = None
    member_id: str | None = None

    @property
    def unrestricted(self) -> bool:
        return self.owner_id is None and self.member_id is None


def listing_filter(
    principal: Principal,
    *,
    include_memberships: bool = False,
    owner_id: str | None = None,
) -> CompanyFilter:
    """
    Companies a principal may list.

    Superadmins see everything (optionally narrowed to one owner). Users and
    admins see only what they own; membership widens the listing only when
    `include_memberships` is on, even though it always grants per-company access.
    """
    if principal.is_superadmin:
        return CompanyFilter(owner_id=owner_id)
    if include_memberships:
        return CompanyFilter(owner_id=principal.subject_id, member_id=principal.subject_id)
    return CompanyFilter(owner_id=principal.subject_id)


def has_role(principal: Principal, roles: Iterable[Role]) -> bool:
    """
    Role gate for user administration; company ownership plays no part here.
    """
    return principal.role in frozenset(roles)
