"""
User administration API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from access.policy import Principal
from auth import dependencies as auth_dependencies
from auth.schemas import UserResponse

from . import schemas, service

router = APIRouter(prefix="/users")


@router.get("")
async def list_users(
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> list[UserResponse]:
    return await service.list_users(principal)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> UserResponse:
    return await service.get_user(principal, user_id)


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: schemas.UpdateUserRequest,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> UserResponse:
    return await service.update_user(principal, user_id, payload)


@router.put("/{user_id}/deactivate")
async def deactivate_user(
    user_id: str,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> UserResponse:
    return await service.deactivate_user(principal, user_id)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> Response:
    await service.delete_user(principal, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
