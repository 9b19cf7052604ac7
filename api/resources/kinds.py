"""
Company-scoped resource kinds.

A scoped resource belongs to exactly one company through its `company_id`
column. The company row also keeps a uuid[] index per kind
(`product_ids`, ...); that index is maintained on writes but is never used
to decide ownership.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ResourceKind:
    name: str
    plural: str
    label: str
    table: str
    index_column: str
    fields: tuple[str, ...]
    sortable: tuple[str, ...] = ("created_at",)

    @property
    def columns(self) -> str:
        return ", ".join(("id", "company_id", *self.fields, "created_at", "updated_at"))


PRODUCTS = ResourceKind(
    name="product",
    plural="products",
    label="Product",
    table="products",
    index_column="product_ids",
    fields=("name", "description", "price"),
)

PROJECTS = ResourceKind(
    name="project",
    plural="projects",
    label="Project",
    table="projects",
    index_column="project_ids",
    fields=("title", "goal"),
)

OFFERS = ResourceKind(
    name="offer",
    plural="offers",
    label="Offer",
    table="offers",
    index_column="offer_ids",
    fields=("title", "discount"),
    sortable=("created_at", "discount"),
)

ALL_KINDS = (PRODUCTS, PROJECTS, OFFERS)
