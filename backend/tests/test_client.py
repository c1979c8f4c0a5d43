"""
Cart API — Client and Smoke Run Tests
======================================

What:  Runs the smoke sequence through CartApiClient against the app in-process.
"""

import pytest
from httpx import ASGITransport

from cartapi.client import CartApiClient, run_smoke


@pytest.fixture
def api_client(app, test_settings):
    return CartApiClient(
        base_url="http://test",
        user=test_settings.api_user,
        password=test_settings.api_password,
        transport=ASGITransport(app=app),
    )


@pytest.mark.asyncio
async def test_smoke_run(api_client, memory_store):
    async with api_client as client:
        steps = await run_smoke(client, "memory")

    sku = steps["product_created"]
    assert steps["product_read"]["sku"] == sku
    assert steps["product_updated"] == {"sku": sku}
    assert steps["user_updated"] == {"userID": steps["user_created"]}

    cart_id = steps["cart_created"]
    assert steps["cart_read"]["cartID"] == cart_id
    added = steps["cart_item_added"]["items"]
    assert len(added) == 2
    assert added[-1]["quantity"] == 1
    assert steps["cart_item_changed"]["items"][-1]["quantity"] == 7
    assert steps["cart_item_removed"]["items"] == steps["cart_read"]["items"]

    assert steps["cart_deleted"] == {"cartID": cart_id}
    assert steps["product_deleted"] == {"sku": sku}
    assert memory_store.documents == {}


@pytest.mark.asyncio
async def test_error_bodies_are_returned(api_client):
    async with api_client as client:
        body = await client.read_cart("memory", "ghost")
        unknown = await client.read_product("nosuchdb", "p1")

    assert body["error"] == "Cart ghost not found"
    assert unknown["error"] == "Unknown DB Type"
