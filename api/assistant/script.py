"""
Assistant script builder.

Turns a company and its products, projects and offers into the script a
conversational agent consumes: a `variables` block plus an ordered list of
response templates. Templates keep their `{{placeholder}}` markers; the agent
platform substitutes them, not this service.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

from companies import repository as company_repository
from core.errors import NotFound
from core.ids import parse_id
from resources import repository as resource_repository
from resources.kinds import OFFERS, PRODUCTS, PROJECTS

from . import cache

SCRIPT_VERSION = "v1"

PRODUCT_FIELDS = ("name", "description", "price")
PROJECT_FIELDS = ("title", "goal")
OFFER_FIELDS = ("title", "discount")


def _pick(rows: list[dict[str, Any]], fields: tuple[str, ...]) -> list[dict[str, Any]]:
    return [{name: row.get(name) for name in fields} for row in rows]


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


def best_deals_first(offers: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(offers, key=lambda o: float(o.get("discount") or 0), reverse=True)


def build_responses(
    products: list[dict[str, Any]],
    projects: list[dict[str, Any]],
    offers: list[dict[str, Any]],
) -> list[str]:
    responses = [
        "Welcome to {{company_name}}! How can I assist you today?",
        "You can reach us at {{company_phone}} or visit our website at {{company_website}}.",
    ]

    if products:
        responses.append(f"We currently have {{{{total_products}}}} product{_plural(len(products))} available.")
        responses.append(
            "Our featured product is {{products[0].name}} - {{products[0].description}}. "
            "It is priced at ${{products[0].price}}."
        )
        if len(products) > 1:
            responses.append("We also offer {{products[1].name}} for ${{products[1].price}}.")
        responses.append("Would you like to know more about any of our products?")
    else:
        responses.append("We're currently updating our product catalog. Please check back soon!")

    if projects:
        responses.append(f"We're working on {{{{total_projects}}}} exciting project{_plural(len(projects))}.")
        responses.append("Our current project is {{projects[0].title}} with the goal: {{projects[0].goal}}.")

    if offers:
        responses.append(f"Great news! We have {{{{total_offers}}}} special offer{_plural(len(offers))} for you!")
        responses.append("Check out our {{offers[0].title}} - Save {{offers[0].discount}}% on select items!")
        if len(offers) > 1:
            responses.append("We also have {{offers[1].title}} with {{offers[1].discount}}% off!")
        responses.append("Don't miss out on these limited-time deals!")

    responses.append("Is there anything specific I can help you with regarding {{company_name}}?")
    return responses


def map_company_to_script(
    company: dict[str, Any],
    products: list[dict[str, Any]],
    projects: list[dict[str, Any]],
    offers: list[dict[str, Any]],
) -> dict[str, Any]:
    offers = best_deals_first(offers)
    variables = {
        "company_name": company["name"],
        "company_website": company["website_url"],
        "company_phone": company["phone_number"],
        "products": _pick(products, PRODUCT_FIELDS),
        "projects": _pick(projects, PROJECT_FIELDS),
        "offers": _pick(offers, OFFER_FIELDS),
        "total_products": len(products),
        "total_projects": len(projects),
        "total_offers": len(offers),
    }
    return {
        "variables": variables,
        "responses": build_responses(products, projects, offers),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "company_id": str(company["id"]),
        "version": SCRIPT_VERSION,
    }


async def build_script(company_id: str) -> dict[str, Any]:
    """
    Build the script from current data. The three list reads run concurrently
    and are not a snapshot of one instant.
    """
    company_id = parse_id(company_id, label="company ID")
    company = await company_repository.get_company(company_id)
    if company is None:
        raise NotFound("Company not found.")

    products, projects, offers = await asyncio.gather(
        resource_repository.list_resources(PRODUCTS, company_id),
        resource_repository.list_resources(PROJECTS, company_id),
        resource_repository.list_resources(OFFERS, company_id),
    )
    return map_company_to_script(company, products, projects, offers)


async def cached_script(company_id: str) -> dict[str, Any]:
    """
    Serve from cache, building and storing on a miss.
    """
    company_id = parse_id(company_id, label="company ID")
    hit = await cache.lookup(company_id)
    if hit is not None:
        return hit

    built_at = cache.generation(company_id)
    script = await build_script(company_id)
    await cache.store(company_id, script, built_at_generation=built_at)
    return script
