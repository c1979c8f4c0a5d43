"""
Cart API — RedisJSON Command Semantics Tests
=============================================

What:  Runs the Redis session and the repositories against fakeredis, which
       implements the JSON.* commands, WATCH and MULTI/EXEC in-process.
How:   Every session gets its own fakeredis client bound to one shared
       FakeServer, the way pooled clients share one Redis server.

What we test:
    ✅ JSON.SET replies are acknowledged as True (directly and inside MULTI)
    ✅ Legacy paths address the root and members
    ✅ WATCH / MULTI / EXEC update writes the merged items
    ✅ Repository scenario end to end on RedisJSON replies
"""

import pytest
from fakeredis import FakeServer, aioredis

from cartapi.exceptions import NotFoundError
from cartapi.services.cart_service import MergeOutcome, cart_repository
from cartapi.services.documents import product_repository
from cartapi.store.redis_store import RedisDocumentSession, RedisDocumentStore


class FakeRedisDocumentStore(RedisDocumentStore):
    def __init__(self, server: FakeServer):
        super().__init__(url="redis://fake")
        self.server = server

    async def connect(self):
        return RedisDocumentSession(aioredis.FakeRedis(server=self.server))


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def fake_store(server):
    return FakeRedisDocumentStore(server)


class TestCommandReplies:
    @pytest.mark.asyncio
    async def test_set_get_delete(self, fake_store, sample_product):
        async with fake_store.session() as session:
            assert await session.set_document("product:p1", ".", sample_product) is True
            assert await session.get_document("product:p1") == sample_product
            assert await session.get_document("product:p1", ".price") == 9.99
            assert await session.document_exists("product:p1") is True
            assert await session.delete_document("product:p1") == 1
            assert await session.get_document("product:p1") is None
            assert await session.document_exists("product:p1") is False

    @pytest.mark.asyncio
    async def test_batch_replies_acknowledged(self, fake_store, sample_product):
        async with fake_store.session() as session:
            await session.set_document("product:p1", ".", sample_product)
            batch = session.begin_batch()
            batch.set_document("product:p1", ".price", 12.5)
            batch.set_document("product:p1", ".color", "red")

            assert await session.execute_batch(batch) == [True, True]
            assert await session.get_document("product:p1") == {
                **sample_product,
                "price": 12.5,
                "color": "red",
            }

    @pytest.mark.asyncio
    async def test_watched_update(self, fake_store, sample_cart):
        async with fake_store.session() as session:
            await session.set_document("cart:c1", ".", sample_cart)

            acknowledged = await session.update_document(
                "cart:c1", ".items", lambda items: items[1:], attempts=2
            )

            assert acknowledged is True
            assert await session.get_document("cart:c1", ".items") == sample_cart["items"][1:]


class TestRepositoriesOnRedisJson:
    @pytest.mark.asyncio
    async def test_product_scenario(self, fake_store, sample_product):
        await product_repository.create(fake_store, sample_product)
        await product_repository.update_fields(fake_store, "p1", {"price": 12.5})

        assert await product_repository.get(fake_store, "p1") == {
            "sku": "p1",
            "description": "Widget",
            "price": 12.5,
        }

        await product_repository.delete(fake_store, "p1")
        with pytest.raises(NotFoundError):
            await product_repository.get(fake_store, "p1")

    @pytest.mark.asyncio
    async def test_update_missing_product_not_found(self, fake_store):
        with pytest.raises(NotFoundError):
            await product_repository.update_fields(fake_store, "ghost", {"price": 1})

    @pytest.mark.asyncio
    async def test_cart_merge(self, fake_store, sample_cart):
        await cart_repository.create(fake_store, sample_cart)

        outcome = await cart_repository.update_item(fake_store, "c1", {"sku": "b", "quantity": 0})

        assert outcome is MergeOutcome.REMOVED
        cart = await cart_repository.get(fake_store, "c1")
        assert [item["sku"] for item in cart["items"]] == ["a", "c"]
