"""Repository SQL against a real Postgres.

Runs only when TEST_DATABASE_URL points at a disposable database; every test
starts from empty tables.
"""

import os
from pathlib import Path

import pytest

from auth import repository as user_repository
from companies import repository as company_repository
from core import db
from resources import repository as resource_repository
from resources.kinds import OFFERS, PRODUCTS
from users import repository as admin_repository

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "").strip()
SCHEMA = Path(__file__).resolve().parents[1] / "db" / "schema.sql"

pytestmark = pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL is not set")


@pytest.fixture
async def pg(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", TEST_DATABASE_URL)
    await db.close_pool()
    await db.init_pool()
    async with db.pool().acquire() as conn:
        await conn.execute(SCHEMA.read_text(encoding="utf-8"))
        await conn.execute("TRUNCATE offers, projects, products, companies, users CASCADE")
    yield db.pool()
    await db.close_pool()


async def _user(email: str, role: str = "user") -> dict:
    return await user_repository.create_user(
        email=email,
        password_hash="x",
        first_name="Test",
        last_name="User",
        role=role,
    )


async def _company(owner: dict, name: str = "Acme") -> dict:
    return await company_repository.create_company(
        owner_id=owner["id"],
        name=name,
        website_url=f"https://{name.lower()}.example",
        phone_number="+1-555-0100",
    )


async def test_user_email_is_case_insensitive_unique(pg):
    created = await _user("Jane@Example.com")
    assert created["email"] == "jane@example.com"
    assert (await user_repository.get_user_by_email("JANE@example.COM"))["id"] == created["id"]

    with pytest.raises(user_repository.DuplicateEmailError):
        await _user("jane@EXAMPLE.com")


async def test_list_companies_filters(pg):
    alice = await _user("alice@example.com")
    bob = await _user("bob@example.com")
    first = await _company(alice, "First")
    second = await _company(bob, "Second")
    await company_repository.add_member(second["id"], alice["id"])

    everything = await company_repository.list_companies()
    assert {c["id"] for c in everything} == {first["id"], second["id"]}

    owned = await company_repository.list_companies(owner_id=alice["id"])
    assert [c["id"] for c in owned] == [first["id"]]

    owned_or_member = await company_repository.list_companies(owner_id=alice["id"], member_id=alice["id"])
    assert {c["id"] for c in owned_or_member} == {first["id"], second["id"]}

    assert await company_repository.list_companies(owner_id=bob["id"], member_id=bob["id"]) == [
        await company_repository.get_company(second["id"])
    ]


async def test_add_member_is_idempotent(pg):
    owner = await _user("owner@example.com")
    member = await _user("member@example.com")
    company = await _company(owner)

    await company_repository.add_member(company["id"], member["id"])
    again = await company_repository.add_member(company["id"], member["id"])
    assert again["members"] == [member["id"]]

    removed = await company_repository.remove_member(company["id"], member["id"])
    assert removed["members"] == []


async def test_resource_writes_maintain_company_index(pg):
    owner = await _user("owner@example.com")
    company = await _company(owner)

    product = await resource_repository.create_resource(
        PRODUCTS, company["id"], {"name": "Basic", "description": "d", "price": 5.0}
    )
    assert (await company_repository.get_company(company["id"]))["product_ids"] == [product["id"]]

    assert await resource_repository.delete_resource(PRODUCTS, company["id"], product["id"])
    assert (await company_repository.get_company(company["id"]))["product_ids"] == []
    assert not await resource_repository.delete_resource(PRODUCTS, company["id"], product["id"])


async def test_resources_are_scoped_to_their_company(pg):
    owner = await _user("owner@example.com")
    mine = await _company(owner, "Mine")
    theirs = await _company(owner, "Theirs")
    offer = await resource_repository.create_resource(OFFERS, mine["id"], {"title": "Spring", "discount": 10.0})

    assert await resource_repository.get_resource(OFFERS, theirs["id"], offer["id"]) is None
    assert await resource_repository.update_resource(OFFERS, theirs["id"], offer["id"], {"discount": 50.0}) is None
    assert await resource_repository.list_resources(OFFERS, theirs["id"]) == []


async def test_search_is_literal_and_oldest_first(pg):
    owner = await _user("owner@example.com")
    company = await _company(owner)
    for name in ("Pro Plan", "Basic Plan", "100% Cotton"):
        await resource_repository.create_resource(PRODUCTS, company["id"], {"name": name, "description": "d", "price": 1.0})
    # Spread creation times so ordering does not depend on clock resolution.
    await pg.execute(
        """
        UPDATE products
        SET created_at = CASE name
            WHEN 'Basic Plan' THEN now() - interval '3 hours'
            WHEN 'Pro Plan' THEN now() - interval '2 hours'
            ELSE now() - interval '1 hour'
        END
        """
    )

    plans = await resource_repository.search_resources(PRODUCTS, company["id"], "PLAN", fields=("name",))
    assert [p["name"] for p in plans] == ["Basic Plan", "Pro Plan"]

    literal = await resource_repository.search_resources(PRODUCTS, company["id"], "0%", fields=("name",))
    assert [p["name"] for p in literal] == ["100% Cotton"]
    assert await resource_repository.search_resources(PRODUCTS, company["id"], "_", fields=("name",)) == []

    newest = await resource_repository.list_resources(PRODUCTS, company["id"], limit=1)
    assert [p["name"] for p in newest] == ["100% Cotton"]


async def test_company_delete_cascades_to_resources(pg):
    owner = await _user("owner@example.com")
    company = await _company(owner)
    product = await resource_repository.create_resource(
        PRODUCTS, company["id"], {"name": "Basic", "description": "d", "price": 5.0}
    )

    assert await company_repository.delete_company(company["id"])
    assert await resource_repository.get_resource(PRODUCTS, company["id"], product["id"]) is None
    assert not await company_repository.delete_company(company["id"])


async def test_delete_user_releases_memberships_and_protects_owners(pg):
    owner = await _user("owner@example.com")
    member = await _user("member@example.com")
    company = await _company(owner)
    await company_repository.add_member(company["id"], member["id"])

    with pytest.raises(admin_repository.UserOwnsCompaniesError):
        await admin_repository.delete_user(owner["id"])
    assert await user_repository.get_user_by_id(owner["id"]) is not None

    assert await admin_repository.delete_user(member["id"]) == [company["id"]]
    assert (await company_repository.get_company(company["id"]))["members"] == []
    assert await admin_repository.delete_user(member["id"]) is None


async def test_update_user_rejects_taken_email(pg):
    await _user("taken@example.com")
    user = await _user("free@example.com")

    updated = await admin_repository.update_user(user["id"], fields={"role": "admin", "is_active": False})
    assert (updated["role"], updated["is_active"]) == ("admin", False)

    with pytest.raises(user_repository.DuplicateEmailError):
        await admin_repository.update_user(user["id"], fields={"email": "TAKEN@example.com"})
