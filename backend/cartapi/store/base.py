"""
Cart API — Abstract Document Store Interface
=============================================

What:  Contract every document-store backend implements.
How:   A DocumentStore hands out scoped DocumentSessions; a session reads,
       writes and deletes JSON values addressed by (key, path) and can queue
       several path-sets into one DocumentBatch round trip.
Who:   Used by the repositories in cartapi.services; concrete backends live
       next to this module (redis_store, memory_store).

Paths use the legacy RedisJSON notation: "." is the document root and
".field" / ".a.b" address members below it.

Implementations:
    - RedisDocumentStore: RedisJSON over redis.asyncio with a connection pool
    - MemoryDocumentStore: process-local dict, for development and tests
"""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, List, Optional

logger = logging.getLogger(__name__)

ROOT_PATH = "."

# Receives the current value at a path (None when absent) and returns the
# value to write back. May raise to abort the update.
Mutator = Callable[[Any], Any]


class DocumentBatch(ABC):
    """
    A queue of path-set operations executed as one round trip.

    No atomicity across operations: each queued set reports its own outcome,
    and a failed set does not undo the others.
    """

    @abstractmethod
    def set_document(self, key: str, path: str, value: Any) -> None:
        """Queue a write of `value` at `path` inside document `key`."""
        ...

    @abstractmethod
    async def execute(self) -> List[bool]:
        """
        Run every queued operation.

        Returns:
            One entry per queued operation, in queue order: True when the store
            acknowledged the write, False otherwise. An empty batch returns [].
        """
        ...

    @abstractmethod
    def __len__(self) -> int:
        ...


class DocumentSession(ABC):
    """One request's view of the store. Must be closed on every exit path."""

    @abstractmethod
    async def get_document(self, key: str, path: str = ROOT_PATH) -> Optional[Any]:
        """
        Return the value at `path`, or None when the key or path does not exist.

        An existing empty document ({} or []) is returned as-is, never as None.
        """
        ...

    @abstractmethod
    async def set_document(self, key: str, path: str, value: Any) -> bool:
        """Write `value` at `path`. Returns True only when the store acknowledged it."""
        ...

    @abstractmethod
    async def delete_document(self, key: str) -> int:
        """Remove the whole document. Returns the number of documents removed (0 or 1)."""
        ...

    @abstractmethod
    async def document_exists(self, key: str) -> bool:
        """True when a document is stored under `key`, without fetching it."""
        ...

    @abstractmethod
    def begin_batch(self) -> DocumentBatch:
        """Start a new batch bound to this session."""
        ...

    async def execute_batch(self, batch: DocumentBatch) -> List[bool]:
        return await batch.execute()

    @abstractmethod
    async def update_document(
        self,
        key: str,
        path: str,
        mutate: Mutator,
        attempts: int = 1,
    ) -> bool:
        """
        Optimistic read-modify-write of the value at `path`.

        The value is read, passed to `mutate`, and the result written back only
        if `key` was not modified in between. A lost race recomputes the update,
        up to `attempts` times in total.

        Returns:
            True when the final write was acknowledged.

        Raises:
            WriteConflictError: every attempt lost to a concurrent writer.
            Anything raised by `mutate` propagates unchanged.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the session. Safe to call more than once."""
        ...


class DocumentStore(ABC):
    """A configured backend, shared by all requests of the application."""

    name: str = "abstract"

    @abstractmethod
    async def connect(self) -> DocumentSession:
        """
        Acquire a session.

        Raises:
            StoreUnavailableError: the backend could not be reached.
        """
        ...

    @asynccontextmanager
    async def session(self) -> AsyncIterator[DocumentSession]:
        """
        Scoped session: closed on normal return, error, or exception.

        If connect() itself fails there is nothing to close, and the original
        error propagates alone.
        """
        session: Optional[DocumentSession] = None
        try:
            session = await self.connect()
            yield session
        finally:
            if session is not None:
                await session.close()

    @abstractmethod
    async def ping(self) -> bool:
        """Lightweight reachability check used by the health endpoint."""
        ...

    async def dispose(self) -> None:
        """Release backend-wide resources (connection pools). Called at shutdown."""
        logger.debug("Store '%s' has nothing to dispose", self.name)
