"""
Company API schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CreateCompanyRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    website_url: str = Field(..., min_length=1, max_length=500)
    phone_number: str = Field(..., min_length=1, max_length=50)


class UpdateCompanyRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    website_url: str | None = Field(default=None, min_length=1, max_length=500)
    phone_number: str | None = Field(default=None, min_length=1, max_length=50)


class CompanyResponse(BaseModel):
    id: str
    name: str
    website_url: str
    phone_number: str
    owner_id: str
    members: list[str] = Field(default_factory=list)
    product_ids: list[str] = Field(default_factory=list)
    project_ids: list[str] = Field(default_factory=list)
    offer_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
