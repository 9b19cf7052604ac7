"""
Company management API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from access.policy import Principal
from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter(prefix="/companies")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: schemas.CreateCompanyRequest,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> schemas.CompanyResponse:
    return await service.create_company(principal, payload)


@router.get("")
async def list_companies(
    owner_id: str | None = Query(default=None),
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> list[schemas.CompanyResponse]:
    """
    Superadmins see every company (optionally one owner's); everyone else
    sees the companies they own.
    """
    return await service.list_companies(principal, owner_id=owner_id)


@router.get("/{company_id}")
async def get_company(
    company_id: str,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> schemas.CompanyResponse:
    return await service.get_company(principal, company_id)


@router.put("/{company_id}")
async def update_company(
    company_id: str,
    payload: schemas.UpdateCompanyRequest,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> schemas.CompanyResponse:
    return await service.update_company(principal, company_id, payload)


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(
    company_id: str,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> Response:
    await service.delete_company(principal, company_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{company_id}/members/{user_id}")
async def add_member(
    company_id: str,
    user_id: str,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> schemas.CompanyResponse:
    return await service.add_member(principal, company_id, user_id)


@router.delete("/{company_id}/members/{user_id}")
async def remove_member(
    company_id: str,
    user_id: str,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> schemas.CompanyResponse:
    return await service.remove_member(principal, company_id, user_id)
