"""Webhook intent dispatch: alias resolution, handler messages, and error ordering."""

import pytest

from assistant import intents
from assistant.intents import Intent
from core.errors import MalformedIdentifier, NotFound, UnknownIntent, ValidationFailure
from resources.kinds import OFFERS, PRODUCTS, PROJECTS

MISSING_ID = "9b2e4f60-0000-4000-8000-000000000000"


@pytest.fixture
async def company(store):
    owner = await store.seed_user("owner@example.com")
    return await store.seed_company(owner)


async def add_products(store, company):
    await store.create_resource(
        PRODUCTS,
        company["id"],
        {"name": "Basic Plan", "description": "Entry tier", "price": 49.5},
    )
    await store.create_resource(
        PRODUCTS,
        company["id"],
        {"name": "Pro Plan", "description": "Everything included", "price": 100.0},
    )


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("get_products", Intent.GET_PRODUCTS),
        ("LIST_PRODUCTS", Intent.GET_PRODUCTS),
        ("show_products", Intent.GET_PRODUCTS),
        ("product_info", Intent.GET_PRODUCT_DETAILS),
        ("list_projects", Intent.GET_PROJECTS),
        ("show_deals", Intent.GET_OFFERS),
        ("company_details", Intent.GET_COMPANY_INFO),
        (" search_products ", Intent.SEARCH_PRODUCTS),
    ],
)
def test_resolve_intent_aliases(raw, expected):
    assert intents.resolve_intent(raw) is expected


def test_every_canonical_intent_has_a_handler():
    assert set(intents.INTENT_HANDLERS) == set(Intent)
    assert set(intents.INTENT_ALIASES.values()) == set(Intent)


@pytest.mark.parametrize("value, expected", [(100.0, "100"), (149.99, "149.99"), (15, "15"), (0.5, "0.5")])
def test_format_number(value, expected):
    assert intents.format_number(value) == expected


async def test_get_products_respects_limit(store, company):
    await add_products(store, company)

    result = await intents.handle("get_products", company["id"], {"limit": 1})

    assert result["success"] is True
    assert result["intent"] == "get_products"
    assert len(result["data"]["products"]) == 1
    assert result["data"]["limit"] == 1
    assert result["message"] == "I found 1 product for you. Pro Plan is priced at $100."
    assert result["timestamp"]


async def test_get_products_default_limit_and_plural(store, company):
    await add_products(store, company)

    result = await intents.handle("list_products", company["id"])

    assert result["data"]["limit"] == 10
    assert result["data"]["total"] == 2
    assert result["message"].startswith("I found 2 products for you.")


async def test_get_products_empty(company):
    result = await intents.handle("get_products", company["id"], {})
    assert result["data"]["products"] == []
    assert result["message"] == "We don't have any products available right now. Please check back soon!"


@pytest.mark.parametrize("limit", [10**30, "99999999999999999999999"])
async def test_get_products_clamps_huge_limit(store, company, limit):
    await add_products(store, company)
    result = await intents.handle("get_products", company["id"], {"limit": limit})
    assert result["data"]["limit"] == intents.MAX_LIST_LIMIT
    assert result["data"]["total"] == 2


@pytest.mark.parametrize("limit", ["abc", -3, True, float("inf")])
async def test_get_products_rejects_bad_limit(company, limit):
    with pytest.raises(ValidationFailure):
        await intents.handle("get_products", company["id"], {"limit": limit})


async def test_get_products_accepts_numeric_string_limit(store, company):
    await add_products(store, company)
    result = await intents.handle("get_products", company["id"], {"limit": "1"})
    assert result["data"]["limit"] == 1


async def test_product_details_found(store, company):
    await add_products(store, company)

    result = await intents.handle("get_product_details", company["id"], {"productName": "basic"})

    assert result["data"]["found"] is True
    assert result["data"]["product"]["name"] == "Basic Plan"
    assert result["message"] == "Basic Plan - Entry tier. It's priced at $49.5."


async def test_product_details_picks_oldest_of_several_matches(store, company):
    await add_products(store, company)

    result = await intents.handle("get_product_details", company["id"], {"productName": "plan"})

    assert result["data"]["product"]["name"] == "Basic Plan"


async def test_search_products_returns_matches_oldest_first(store, company):
    await add_products(store, company)

    result = await intents.handle("search_products", company["id"], {"query": "plan"})

    assert [p["name"] for p in result["data"]["products"]] == ["Basic Plan", "Pro Plan"]
    assert result["message"] == 'I found 2 products matching "plan".'


async def test_product_details_not_found(store, company):
    await add_products(store, company)

    result = await intents.handle("get_product_details", company["id"], {"productName": "Ultra"})

    assert result["success"] is True
    assert result["data"] == {"found": False}
    assert result["message"] == 'Sorry, I couldn\'t find a product called "Ultra".'


async def test_product_details_requires_name(company):
    with pytest.raises(ValidationFailure):
        await intents.handle("get_product_details", company["id"], {})


async def test_search_products_matches_description(store, company):
    await add_products(store, company)

    result = await intents.handle("search_products", company["id"], {"query": "everything"})

    assert [p["name"] for p in result["data"]["products"]] == ["Pro Plan"]
    assert result["message"] == 'I found 1 product matching "everything".'


async def test_search_products_no_match(store, company):
    await add_products(store, company)

    result = await intents.handle("search_products", company["id"], {"query": "zzz"})

    assert result["success"] is True
    assert result["data"]["products"] == []
    assert "couldn't find" in result["message"]


async def test_search_products_treats_query_literally(store, company):
    await add_products(store, company)
    result = await intents.handle("search_products", company["id"], {"query": ".*"})
    assert result["data"]["total"] == 0


async def test_search_products_requires_query(company):
    with pytest.raises(ValidationFailure):
        await intents.handle("search_products", company["id"], {"query": "   "})


async def test_get_projects(store, company):
    empty = await intents.handle("get_projects", company["id"])
    assert empty["message"] == "We don't have any active projects at the moment."

    await store.create_resource(PROJECTS, company["id"], {"title": "Rebrand", "goal": "New look"})
    result = await intents.handle("get_projects", company["id"])
    assert result["data"]["projects"][0]["title"] == "Rebrand"
    assert result["message"] == "We're currently working on 1 project. Our main focus is Rebrand."


async def test_get_offers_leads_with_best_deal(store, company):
    empty = await intents.handle("get_offers", company["id"])
    assert empty["message"] == "We don't have any special offers right now, but check back soon for great deals!"

    await store.create_resource(OFFERS, company["id"], {"title": "Big Sale", "discount": 40.0})
    await store.create_resource(OFFERS, company["id"], {"title": "Small Sale", "discount": 10.0})
    result = await intents.handle("show_deals", company["id"])

    assert [o["title"] for o in result["data"]["offers"]] == ["Big Sale", "Small Sale"]
    assert result["message"] == "Great news! We have 2 special offers available. Big Sale gives you 40% off!"


async def test_get_company_info(company):
    result = await intents.handle("get_company_info", company["id"])
    assert result["data"]["company"] == {
        "name": "Acme",
        "website": "https://acme.example",
        "phone": "+1-555-0100",
    }
    assert result["message"] == "We are Acme. You can visit us at https://acme.example or call us at +1-555-0100."


async def test_unknown_intent_mutates_nothing(store, company):
    await add_products(store, company)
    calls_before = list(store.calls)
    companies_before = dict(store.companies)

    with pytest.raises(UnknownIntent) as exc_info:
        await intents.handle("foo_bar", company["id"])

    assert exc_info.value.status_code == 400
    assert "foo_bar" in exc_info.value.message
    assert store.calls == calls_before
    assert store.companies == companies_before


async def test_malformed_company_id_checked_before_intent(store):
    with pytest.raises(MalformedIdentifier):
        await intents.handle("foo_bar", "not-a-uuid")


async def test_unknown_company_checked_before_intent(store):
    with pytest.raises(NotFound):
        await intents.handle("foo_bar", MISSING_ID)
