"""
Webhook intent router for the conversational agent.

Public by design: the caller is an agent, not an authenticated principal, so
the access policy is not consulted. The company id is still validated
(malformed -> 400, unknown -> 404) before any intent runs.

Dispatch is two fixed tables: accepted spellings -> canonical intent, and
canonical intent -> handler. The reply messages are part of the webhook
contract; agent flows match on them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable

from companies import repository as company_repository
from core.errors import NotFound, UnknownIntent, ValidationFailure
from core.ids import parse_id
from resources import repository as resource_repository
from resources.kinds import OFFERS, PRODUCTS, PROJECTS

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 10
SEARCH_LIMIT = 5
MAX_LIST_LIMIT = 100


class Intent(str, Enum):
    GET_PRODUCTS = "GET_PRODUCTS"
    GET_PRODUCT_DETAILS = "GET_PRODUCT_DETAILS"
    GET_PROJECTS = "GET_PROJECTS"
    GET_OFFERS = "GET_OFFERS"
    GET_COMPANY_INFO = "GET_COMPANY_INFO"
    SEARCH_PRODUCTS = "SEARCH_PRODUCTS"


INTENT_ALIASES: dict[str, Intent] = {
    "get_products": Intent.GET_PRODUCTS,
    "list_products": Intent.GET_PRODUCTS,
    "show_products": Intent.GET_PRODUCTS,
    "get_product_details": Intent.GET_PRODUCT_DETAILS,
    "product_info": Intent.GET_PRODUCT_DETAILS,
    "get_projects": Intent.GET_PROJECTS,
    "list_projects": Intent.GET_PROJECTS,
    "get_offers": Intent.GET_OFFERS,
    "list_offers": Intent.GET_OFFERS,
    "show_deals": Intent.GET_OFFERS,
    "get_company_info": Intent.GET_COMPANY_INFO,
    "company_details": Intent.GET_COMPANY_INFO,
    "search_products": Intent.SEARCH_PRODUCTS,
}

Reply = tuple[dict[str, Any], str]
Handler = Callable[[dict[str, Any], dict[str, Any]], Awaitable[Reply]]


def resolve_intent(raw: str) -> Intent:
    intent = INTENT_ALIASES.get((raw or "").strip().lower())
    if intent is None:
        raise UnknownIntent(f"Unknown intent: {raw}")
    return intent


def format_number(value: Any) -> str:
    """
    Render prices and discounts the way a JSON client would print them:
    `100` rather than `100.0`, `149.99` unchanged.
    """
    if isinstance(value, bool) or value is None:
        return str(value)
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


def _limit_param(parameters: dict[str, Any], default: int = DEFAULT_LIST_LIMIT) -> int:
    raw = parameters.get("limit")
    if raw is None or raw == "" or raw == 0:
        return default
    if isinstance(raw, bool):
        raise ValidationFailure("limit must be a positive integer.")
    try:
        limit = int(raw)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValidationFailure("limit must be a positive integer.") from exc
    if limit == 0:
        return default
    if limit < 0:
        raise ValidationFailure("limit must be a positive integer.")
    return min(limit, MAX_LIST_LIMIT)


def _text_param(parameters: dict[str, Any], *names: str) -> str:
    for name in names:
        value = parameters.get(name)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def _product_view(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "description": row["description"],
        "price": row["price"],
    }


async def handle_get_products(company: dict[str, Any], parameters: dict[str, Any]) -> Reply:
    limit = _limit_param(parameters)
    rows = await resource_repository.list_resources(PRODUCTS, str(company["id"]), limit=limit)

    data = {"products": [_product_view(r) for r in rows], "total": len(rows), "limit": limit}
    if rows:
        first = rows[0]
        message = (
            f"I found {len(rows)} product{_plural(len(rows))} for you. "
            f"{first['name']} is priced at ${format_number(first['price'])}."
        )
    else:
        message = "We don't have any products available right now. Please check back soon!"
    return data, message


async def handle_get_product_details(company: dict[str, Any], parameters: dict[str, Any]) -> Reply:
    product_name = _text_param(parameters, "productName", "name")
    if not product_name:
        raise ValidationFailure("Product name is required.")

    rows = await resource_repository.search_resources(
        PRODUCTS,
        str(company["id"]),
        product_name,
        fields=("name",),
        limit=1,
    )
    if not rows:
        return {"found": False}, f'Sorry, I couldn\'t find a product called "{product_name}".'

    product = rows[0]
    data = {"found": True, "product": _product_view(product)}
    message = f"{product['name']} - {product['description']}. It's priced at ${format_number(product['price'])}."
    return data, message


async def handle_search_products(company: dict[str, Any], parameters: dict[str, Any]) -> Reply:
    query = _text_param(parameters, "query", "search")
    if not query:
        raise ValidationFailure("Search query is required.")

    rows = await resource_repository.search_resources(
        PRODUCTS,
        str(company["id"]),
        query,
        fields=("name", "description"),
        limit=SEARCH_LIMIT,
    )
    data = {"query": query, "products": [_product_view(r) for r in rows], "total": len(rows)}
    if rows:
        message = f'I found {len(rows)} product{_plural(len(rows))} matching "{query}".'
    else:
        message = f'Sorry, I couldn\'t find any products matching "{query}".'
    return data, message


async def handle_get_projects(company: dict[str, Any], parameters: dict[str, Any]) -> Reply:
    limit = _limit_param(parameters)
    rows = await resource_repository.list_resources(PROJECTS, str(company["id"]), limit=limit)

    data = {
        "projects": [{"id": str(r["id"]), "title": r["title"], "goal": r["goal"]} for r in rows],
        "total": len(rows),
    }
    if rows:
        message = (
            f"We're currently working on {len(rows)} project{_plural(len(rows))}. "
            f"Our main focus is {rows[0]['title']}."
        )
    else:
        message = "We don't have any active projects at the moment."
    return data, message


async def handle_get_offers(company: dict[str, Any], parameters: dict[str, Any]) -> Reply:
    # Best deals first.
    rows = await resource_repository.list_resources(OFFERS, str(company["id"]), order_by="discount")

    data = {
        "offers": [{"id": str(r["id"]), "title": r["title"], "discount": r["discount"]} for r in rows],
        "total": len(rows),
    }
    if rows:
        top = rows[0]
        message = (
            f"Great news! We have {len(rows)} special offer{_plural(len(rows))} available. "
            f"{top['title']} gives you {format_number(top['discount'])}% off!"
        )
    else:
        message = "We don't have any special offers right now, but check back soon for great deals!"
    return data, message


async def handle_get_company_info(company: dict[str, Any], parameters: dict[str, Any]) -> Reply:
    data = {
        "company": {
            "name": company["name"],
            "website": company["website_url"],
            "phone": company["phone_number"],
        }
    }
    message = (
        f"We are {company['name']}. You can visit us at {company['website_url']} "
        f"or call us at {company['phone_number']}."
    )
    return data, message


INTENT_HANDLERS: dict[Intent, Handler] = {
    Intent.GET_PRODUCTS: handle_get_products,
    Intent.GET_PRODUCT_DETAILS: handle_get_product_details,
    Intent.GET_PROJECTS: handle_get_projects,
    Intent.GET_OFFERS: handle_get_offers,
    Intent.GET_COMPANY_INFO: handle_get_company_info,
    Intent.SEARCH_PRODUCTS: handle_search_products,
}


async def handle(intent: str, company_id: str, parameters: dict[str, Any] | None = None) -> dict[str, Any]:
    company_id = parse_id(company_id, label="company ID")
    company = await company_repository.get_company(company_id)
    if company is None:
        raise NotFound("Company not found.")

    canonical = resolve_intent(intent)
    data, message = await INTENT_HANDLERS[canonical](company, dict(parameters or {}))
    logger.info("webhook_handled intent=%s company_id=%s", canonical.value, company_id)

    return {
        "success": True,
        "intent": intent,
        "data": data,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
