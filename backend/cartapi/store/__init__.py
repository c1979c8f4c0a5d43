"""
Cart API — Document Store Package
==================================

What:  Backend-neutral document store interface plus its implementations.
How:   StoreRegistry maps each configured `dbType` path segment to one
       DocumentStore instance, built from settings when the app is created.

Available backends:
    - redis:  RedisDocumentStore (RedisJSON)
    - memory: MemoryDocumentStore (process-local)
"""

import logging
from typing import Callable, Dict, Iterator, Tuple

from cartapi.config import Settings
from cartapi.exceptions import UnknownBackendError
from cartapi.store.base import (
    ROOT_PATH,
    DocumentBatch,
    DocumentSession,
    DocumentStore,
)
from cartapi.store.memory_store import MemoryDocumentStore
from cartapi.store.redis_store import RedisDocumentStore

logger = logging.getLogger(__name__)

BACKEND_FACTORIES: Dict[str, Callable[[Settings], DocumentStore]] = {
    "redis": RedisDocumentStore.from_settings,
    "memory": lambda settings: MemoryDocumentStore(),
}


class StoreRegistry:
    """Resolves `dbType` path segments to configured stores."""

    def __init__(self, stores: Dict[str, DocumentStore]):
        self._stores = dict(stores)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreRegistry":
        """
        Build one store per name in STORE_BACKENDS.

        Raises:
            ValueError: a configured name has no backend implementation.
        """
        stores: Dict[str, DocumentStore] = {}
        for name in settings.store_backends_list:
            factory = BACKEND_FACTORIES.get(name)
            if factory is None:
                raise ValueError(
                    f"Unknown store backend '{name}'. Available: {sorted(BACKEND_FACTORIES)}"
                )
            stores[name] = factory(settings)
        return cls(stores)

    def get(self, db_type: str) -> DocumentStore:
        """
        Raises:
            UnknownBackendError: `db_type` is not a configured backend.
        """
        store = self._stores.get(db_type)
        if store is None:
            raise UnknownBackendError(db_type)
        return store

    def __iter__(self) -> Iterator[Tuple[str, DocumentStore]]:
        return iter(self._stores.items())

    def __len__(self) -> int:
        return len(self._stores)

    async def dispose(self) -> None:
        for name, store in self._stores.items():
            logger.info("Disposing store '%s'", name)
            await store.dispose()


__all__ = [
    "ROOT_PATH",
    "BACKEND_FACTORIES",
    "DocumentBatch",
    "DocumentSession",
    "DocumentStore",
    "MemoryDocumentStore",
    "RedisDocumentStore",
    "StoreRegistry",
]
