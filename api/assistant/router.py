"""
Assistant endpoints: cached/uncached script for authenticated principals and
the public webhook for the conversational agent.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from access import service as access_service
from access.policy import Action, Principal
from auth import dependencies as auth_dependencies

from . import intents, schemas, script

router = APIRouter()


@router.get("/companies/{company_id}/assistant/script", response_model=schemas.ScriptResponse)
async def get_script(
    company_id: str,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> dict:
    """
    Script built from the company's data, cached until the next change to it
    (or the TTL).
    """
    company = await access_service.authorize(principal, company_id, Action.READ_SCOPED_RESOURCE)
    return await script.cached_script(str(company["id"]))


@router.get("/companies/{company_id}/assistant/preview", response_model=schemas.ScriptResponse)
async def preview_script(
    company_id: str,
    principal: Principal = Depends(auth_dependencies.get_current_principal),
) -> dict:
    """
    Same as /script but always rebuilt; the cache is neither read nor written.
    """
    company = await access_service.authorize(principal, company_id, Action.READ_SCOPED_RESOURCE)
    return await script.build_script(str(company["id"]))


@router.post("/assistant/webhook", response_model=schemas.WebhookResponse)
async def webhook(request: schemas.WebhookRequest) -> dict:
    return await intents.handle(request.intent, request.company_id, request.parameters)
