"""
FastAPI routers for company-scoped resources.

One router per kind, all built from the same factory:
  /companies/{company_id}/{plural}
  /companies/{company_id}/{plural}/{resource_id}
"""

from typing import Type

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from access.policy import Principal
from auth import dependencies as auth_dependencies

from . import schemas, service
from .kinds import OFFERS, PRODUCTS, PROJECTS, ResourceKind


def build_router(
    kind: ResourceKind,
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
    response_model: Type[BaseModel],
) -> APIRouter:
    router = APIRouter(prefix=f"/companies/{{company_id}}/{kind.plural}")

    @router.post("", status_code=status.HTTP_201_CREATED, response_model=response_model)
    async def create_resource(
        company_id: str,
        payload: create_model,  # type: ignore[valid-type]
        principal: Principal = Depends(auth_dependencies.get_current_principal),
    ) -> dict:
        return await service.create(principal, kind, company_id, payload.model_dump())

    @router.get("", response_model=list[response_model])  # type: ignore[valid-type]
    async def list_resources(
        company_id: str,
        principal: Principal = Depends(auth_dependencies.get_current_principal),
    ) -> list[dict]:
        return await service.list_all(principal, kind, company_id)

    @router.get("/{resource_id}", response_model=response_model)
    async def get_resource(
        company_id: str,
        resource_id: str,
        principal: Principal = Depends(auth_dependencies.get_current_principal),
    ) -> dict:
        return await service.get_one(principal, kind, company_id, resource_id)

    @router.patch("/{resource_id}", response_model=response_model)
    async def update_resource(
        company_id: str,
        resource_id: str,
        payload: update_model,  # type: ignore[valid-type]
        principal: Principal = Depends(auth_dependencies.get_current_principal),
    ) -> dict:
        values = payload.model_dump(exclude_unset=True, exclude_none=True)
        return await service.update(principal, kind, company_id, resource_id, values)

    @router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_resource(
        company_id: str,
        resource_id: str,
        principal: Principal = Depends(auth_dependencies.get_current_principal),
    ) -> Response:
        await service.delete(principal, kind, company_id, resource_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


products_router = build_router(PRODUCTS, schemas.ProductCreate, schemas.ProductUpdate, schemas.ProductResponse)
projects_router = build_router(PROJECTS, schemas.ProjectCreate, schemas.ProjectUpdate, schemas.ProjectResponse)
offers_router = build_router(OFFERS, schemas.OfferCreate, schemas.OfferUpdate, schemas.OfferResponse)
