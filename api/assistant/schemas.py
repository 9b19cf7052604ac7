"""
Assistant webhook and script schemas.

The webhook body uses the agent platform's camelCase keys (`companyId`,
`userId`); snake_case is accepted too.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WebhookRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    intent: str = Field(..., min_length=1, max_length=100)
    company_id: str = Field(..., alias="companyId", min_length=1)
    parameters: dict[str, Any] | None = None
    user_id: str | None = Field(default=None, alias="userId")


class WebhookResponse(BaseModel):
    success: bool
    intent: str
    data: dict[str, Any]
    message: str
    timestamp: str


class ScriptVariables(BaseModel):
    company_name: str
    company_website: str
    company_phone: str
    products: list[dict[str, Any]]
    projects: list[dict[str, Any]]
    offers: list[dict[str, Any]]
    total_products: int
    total_projects: int
    total_offers: int


class ScriptResponse(BaseModel):
    variables: ScriptVariables
    responses: list[str]
    generated_at: str
    company_id: str
    version: str
