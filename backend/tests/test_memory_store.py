"""
Cart API — In-Memory Store Unit Tests
======================================

What:  Tests for MemoryDocumentStore path handling and session semantics.
"""

import pytest

from cartapi.store.memory_store import MemoryDocumentStore, split_path


class TestSplitPath:
    @pytest.mark.parametrize("path", [".", "", "$"])
    def test_root(self, path):
        assert split_path(path) == []

    def test_nested(self):
        assert split_path(".a.b") == ["a", "b"]
        assert split_path("$.items") == ["items"]


class TestMemorySession:
    @pytest.mark.asyncio
    async def test_get_missing_key_is_none(self, memory_store):
        async with memory_store.session() as session:
            assert await session.get_document("cart:none") is None

    @pytest.mark.asyncio
    async def test_get_subpath(self, memory_store):
        async with memory_store.session() as session:
            await session.set_document("cart:1", ".", {"items": [{"sku": "a", "quantity": 1}]})
            assert await session.get_document("cart:1", ".items") == [{"sku": "a", "quantity": 1}]
            assert await session.get_document("cart:1", ".missing") is None

    @pytest.mark.asyncio
    async def test_non_root_write_to_missing_key_refused(self, memory_store):
        async with memory_store.session() as session:
            assert await session.set_document("product:x", ".price", 1) is False
        assert memory_store.documents == {}

    @pytest.mark.asyncio
    async def test_values_are_copied(self, memory_store):
        document = {"sku": "p", "tags": ["a"]}
        async with memory_store.session() as session:
            await session.set_document("product:p", ".", document)
            document["tags"].append("b")
            fetched = await session.get_document("product:p")
            fetched["tags"].append("c")

        assert memory_store.documents["product:p"]["tags"] == ["a"]

    @pytest.mark.asyncio
    async def test_delete_counts(self, memory_store):
        async with memory_store.session() as session:
            await session.set_document("user:u", ".", {"userID": "u"})
            assert await session.delete_document("user:u") == 1
            assert await session.delete_document("user:u") == 0

    @pytest.mark.asyncio
    async def test_document_exists(self, memory_store):
        async with memory_store.session() as session:
            await session.set_document("user:empty", ".", {})
            assert await session.document_exists("user:empty") is True
            assert await session.document_exists("user:none") is False

    @pytest.mark.asyncio
    async def test_batch_reports_each_outcome(self, memory_store):
        async with memory_store.session() as session:
            await session.set_document("product:p", ".", {"sku": "p"})
            batch = session.begin_batch()
            batch.set_document("product:p", ".price", 3)
            batch.set_document("product:missing", ".price", 3)
            batch.set_document("product:p", ".color", "red")
            assert len(batch) == 3

            outcomes = await session.execute_batch(batch)

        assert outcomes == [True, False, True]
        assert memory_store.documents["product:p"] == {"sku": "p", "price": 3, "color": "red"}

    @pytest.mark.asyncio
    async def test_empty_batch(self, memory_store):
        async with memory_store.session() as session:
            assert await session.execute_batch(session.begin_batch()) == []

    @pytest.mark.asyncio
    async def test_update_document_passes_none_for_missing(self, memory_store):
        seen = []

        def mutate(current):
            seen.append(current)
            return current

        async with memory_store.session() as session:
            assert await session.update_document("cart:none", ".items", mutate) is False

        assert seen == [None]

    @pytest.mark.asyncio
    async def test_session_unusable_after_close(self, memory_store):
        async with memory_store.session() as session:
            pass

        with pytest.raises(RuntimeError):
            await session.get_document("cart:1")
        # Closing twice is harmless
        await session.close()

    @pytest.mark.asyncio
    async def test_ping(self):
        assert await MemoryDocumentStore().ping() is True
