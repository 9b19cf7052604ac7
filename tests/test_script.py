"""Assistant script builder and its read-through cache."""

import pytest

from assistant import cache as script_cache
from assistant import script
from conftest import principal_of
from core.errors import MalformedIdentifier, NotFound
from resources import service as resource_service
from resources.kinds import OFFERS, PRODUCTS, PROJECTS

MISSING_ID = "9b2e4f60-0000-4000-8000-000000000000"


def test_empty_company_gets_catalog_updating_line():
    responses = script.build_responses([], [], [])
    assert responses == [
        "Welcome to {{company_name}}! How can I assist you today?",
        "You can reach us at {{company_phone}} or visit our website at {{company_website}}.",
        "We're currently updating our product catalog. Please check back soon!",
        "Is there anything specific I can help you with regarding {{company_name}}?",
    ]


def test_single_product_uses_singular_and_no_second_line():
    product = {"name": "Widget", "description": "A widget", "price": 9.5}
    responses = script.build_responses([product], [], [])
    assert "We currently have {{total_products}} product available." in responses
    assert not any("products[1]" in line for line in responses)
    assert "Would you like to know more about any of our products?" in responses


def test_second_item_lines_only_when_present():
    products = [{"name": "A"}, {"name": "B"}]
    offers = [{"title": "X", "discount": 10}, {"title": "Y", "discount": 5}]
    responses = script.build_responses(products, [{"title": "P", "goal": "G"}], offers)

    assert "We currently have {{total_products}} products available." in responses
    assert "We also offer {{products[1].name}} for ${{products[1].price}}." in responses
    assert "We're working on {{total_projects}} exciting project." in responses
    assert "We also have {{offers[1].title}} with {{offers[1].discount}}% off!" in responses
    assert responses[-2] == "Don't miss out on these limited-time deals!"
    assert responses[-1] == "Is there anything specific I can help you with regarding {{company_name}}?"


def test_map_company_sorts_offers_and_counts_everything():
    company = {
        "id": MISSING_ID,
        "name": "Acme",
        "website_url": "https://acme.example",
        "phone_number": "+1-555-0100",
    }
    offers = [
        {"id": "1", "title": "Small", "discount": 5.0, "company_id": MISSING_ID},
        {"id": "2", "title": "Big", "discount": 40.0, "company_id": MISSING_ID},
        {"id": "3", "title": "Medium", "discount": 15.0, "company_id": MISSING_ID},
    ]
    result = script.map_company_to_script(company, [], [], offers)

    variables = result["variables"]
    assert [o["title"] for o in variables["offers"]] == ["Big", "Medium", "Small"]
    assert variables["offers"][0] == {"title": "Big", "discount": 40.0}
    assert variables["total_offers"] == 3
    assert variables["total_products"] == 0
    assert variables["company_website"] == "https://acme.example"
    assert result["company_id"] == MISSING_ID
    assert result["version"] == "v1"
    assert result["generated_at"]


async def test_build_script_reads_current_data(store):
    owner = await store.seed_user("owner@example.com")
    company = await store.seed_company(owner)
    await store.create_resource(PRODUCTS, company["id"], {"name": "Old", "description": "d", "price": 1.0})
    await store.create_resource(PRODUCTS, company["id"], {"name": "New", "description": "d", "price": 2.0})
    await store.create_resource(PROJECTS, company["id"], {"title": "Launch", "goal": "Ship"})

    result = await script.build_script(company["id"])

    variables = result["variables"]
    assert variables["company_name"] == "Acme"
    assert [p["name"] for p in variables["products"]] == ["New", "Old"]
    assert variables["projects"] == [{"title": "Launch", "goal": "Ship"}]
    assert variables["total_offers"] == 0
    assert not any("offers[0]" in line for line in result["responses"])


async def test_build_script_unknown_company(store):
    with pytest.raises(NotFound):
        await script.build_script(MISSING_ID)


async def test_build_script_malformed_id(store):
    with pytest.raises(MalformedIdentifier):
        await script.build_script("not-a-uuid")


async def test_cached_script_serves_hits_until_invalidated(store):
    owner = await store.seed_user("owner@example.com")
    company = await store.seed_company(owner)

    first = await script.cached_script(company["id"])
    await store.create_resource(PRODUCTS, company["id"], {"name": "Sneaky", "description": "d", "price": 3.0})
    second = await script.cached_script(company["id"])
    assert second == first

    await script_cache.invalidate(company["id"])
    third = await script.cached_script(company["id"])
    assert third["variables"]["total_products"] == 1


async def test_product_create_through_service_refreshes_script(store):
    owner = await store.seed_user("owner@example.com")
    company = await store.seed_company(owner)
    principal = principal_of(owner)

    before = await script.cached_script(company["id"])
    await resource_service.create(
        principal,
        PRODUCTS,
        company["id"],
        {"name": "Gadget", "description": "Shiny", "price": 25.0},
    )
    after = await script.cached_script(company["id"])

    assert after["variables"]["total_products"] == before["variables"]["total_products"] + 1
    assert after["variables"]["products"][0]["name"] == "Gadget"


async def test_offer_delete_through_service_refreshes_script(store):
    owner = await store.seed_user("owner@example.com")
    company = await store.seed_company(owner)
    principal = principal_of(owner)
    offer = await store.create_resource(OFFERS, company["id"], {"title": "Spring", "discount": 20.0})

    assert (await script.cached_script(company["id"]))["variables"]["total_offers"] == 1
    await resource_service.delete(principal, OFFERS, company["id"], offer["id"])
    assert (await script.cached_script(company["id"]))["variables"]["total_offers"] == 0
