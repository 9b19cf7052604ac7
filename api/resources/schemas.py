"""
Pydantic schemas for scoped resource endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    price: float = Field(..., ge=0)


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    price: float | None = Field(default=None, ge=0)


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    goal: str = Field(..., min_length=1, max_length=2000)


class ProjectUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    goal: str | None = Field(default=None, min_length=1, max_length=2000)


class OfferCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    discount: float = Field(..., ge=0, le=100)


class OfferUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    discount: float | None = Field(default=None, ge=0, le=100)


class ScopedResponse(BaseModel):
    id: str
    company_id: str
    created_at: datetime
    updated_at: datetime


class ProductResponse(ScopedResponse):
    name: str
    description: str
    price: float


class ProjectResponse(ScopedResponse):
    title: str
    goal: str


class OfferResponse(ScopedResponse):
    title: str
    discount: float
