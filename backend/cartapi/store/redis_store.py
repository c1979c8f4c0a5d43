"""
Cart API — RedisJSON Document Store
====================================

What:  DocumentStore backed by RedisJSON, using the redis.asyncio client.
How:   One ConnectionPool per application; each request checks out a client
       bound to that pool and returns its connection when the session closes.
Who:   Selected with STORE_BACKENDS=redis (the default).

Connection Pooling Strategy:
    The pool is created lazily on first use and disposed at shutdown.
    Sessions never open sockets of their own, so a burst of requests is
    bounded by redis_max_connections instead of opening one socket each.

Command mapping:
    get_document     → JSON.GET key path
    set_document     → JSON.SET key path value
    document_exists  → EXISTS key
    delete_document  → JSON.DEL key
    batch            → MULTI / JSON.SET ... / EXEC (per-command replies)
    update_document  → WATCH key / JSON.GET / MULTI / JSON.SET / EXEC

Error translation:
    redis ConnectionError / TimeoutError → StoreUnavailableError
    ResponseError "path does not exist"  → None
    other ResponseError on a read        → StoreBackendError
    ResponseError on a write             → False (write not acknowledged)
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    RedisError,
    ResponseError,
    TimeoutError as RedisTimeoutError,
    WatchError,
)

from cartapi.config import Settings
from cartapi.exceptions import StoreBackendError, StoreUnavailableError, WriteConflictError
from cartapi.store.base import (
    ROOT_PATH,
    DocumentBatch,
    DocumentSession,
    DocumentStore,
    Mutator,
)

logger = logging.getLogger(__name__)

# RedisJSON reply for a path absent from an existing document
MISSING_PATH_MARKER = "does not exist"


@contextmanager
def translate_errors(operation: str, key: Optional[str] = None) -> Iterator[None]:
    """Turn transport failures into StoreUnavailableError."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        logger.error("Redis %s failed for key %s: %s", operation, key, str(e))
        raise StoreUnavailableError(
            context={
                "operation": operation,
                "key": key,
                "original_error": type(e).__name__,
            }
        ) from e


def read_error(error: ResponseError, key: str, path: str) -> None:
    """
    Decide what a ResponseError on JSON.GET means.

    A missing path reads as absent (the caller gets None). Anything else,
    such as an unknown command or a key of the wrong type, raises.
    """
    if MISSING_PATH_MARKER in str(error).lower():
        logger.debug("Path %s missing in %s: %s", path, key, str(error))
        return
    logger.error("JSON.GET %s %s failed: %s", key, path, str(error))
    raise StoreBackendError(
        context={"key": key, "path": path, "original_error": str(error)}
    ) from error


class RedisDocumentBatch(DocumentBatch):
    """Queued JSON.SET commands sent inside one MULTI/EXEC."""

    def __init__(self, client: Redis):
        self._pipe = client.pipeline(transaction=True)
        self._size = 0

    def set_document(self, key: str, path: str, value: Any) -> None:
        self._pipe.json().set(key, path, value)
        self._size += 1

    async def execute(self) -> List[bool]:
        if not self._size:
            return []
        try:
            with translate_errors("batch"):
                # raise_on_error=False: a rejected command comes back as an
                # exception instance in its slot instead of aborting the rest
                replies = await self._pipe.execute(raise_on_error=False)
        finally:
            self._size = 0
            await self._pipe.reset()
        for index, reply in enumerate(replies):
            if isinstance(reply, Exception):
                logger.warning("Batch operation %d rejected: %s", index, str(reply))
        return [reply is True for reply in replies]

    def __len__(self) -> int:
        return self._size


class RedisDocumentSession(DocumentSession):
    def __init__(self, client: Redis):
        self._client: Optional[Redis] = client

    @property
    def client(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Session is closed")
        return self._client

    async def get_document(self, key: str, path: str = ROOT_PATH) -> Optional[Any]:
        with translate_errors("get", key):
            try:
                return await self.client.json().get(key, path)
            except ResponseError as e:
                read_error(e, key, path)
                return None

    async def set_document(self, key: str, path: str, value: Any) -> bool:
        with translate_errors("set", key):
            try:
                reply = await self.client.json().set(key, path, value)
            except ResponseError as e:
                logger.warning("JSON.SET %s %s rejected: %s", key, path, str(e))
                return False
        return reply is True

    async def document_exists(self, key: str) -> bool:
        with translate_errors("exists", key):
            return await self.client.exists(key) > 0

    async def delete_document(self, key: str) -> int:
        with translate_errors("delete", key):
            return int(await self.client.json().delete(key))

    def begin_batch(self) -> DocumentBatch:
        return RedisDocumentBatch(self.client)

    async def update_document(
        self,
        key: str,
        path: str,
        mutate: Mutator,
        attempts: int = 1,
    ) -> bool:
        for attempt in range(1, attempts + 1):
            with translate_errors("update", key):
                async with self.client.pipeline(transaction=True) as pipe:
                    try:
                        await pipe.watch(key)
                        # While watching, commands run immediately
                        try:
                            current = await pipe.json().get(key, path)
                        except ResponseError as e:
                            read_error(e, key, path)
                            current = None
                        updated = mutate(current)
                        pipe.multi()
                        pipe.json().set(key, path, updated)
                        replies = await pipe.execute(raise_on_error=False)
                    except WatchError:
                        logger.info(
                            "Concurrent write to %s, retrying update (attempt %d/%d)",
                            key, attempt, attempts,
                        )
                        continue
            if isinstance(replies[0], Exception):
                logger.warning("JSON.SET %s %s rejected: %s", key, path, str(replies[0]))
            return replies[0] is True

        raise WriteConflictError(
            message=f"{key} was modified concurrently; update abandoned",
            attempts=attempts,
            context={"key": key},
        )

    async def close(self) -> None:
        if self._client is None:
            return
        client, self._client = self._client, None
        try:
            # Returns the connection to the pool; the pool itself stays open
            await client.aclose()
        except RedisError as e:
            logger.warning("Error releasing Redis connection: %s", str(e))


class RedisDocumentStore(DocumentStore):
    """RedisJSON backend sharing one connection pool across requests."""

    name = "redis"

    def __init__(
        self,
        url: str,
        max_connections: int = 50,
        socket_timeout: Optional[float] = None,
    ):
        self.url = url
        self.max_connections = max_connections
        self.socket_timeout = socket_timeout
        self._pool: Optional[ConnectionPool] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisDocumentStore":
        return cls(
            url=settings.redis_url,
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.redis_socket_timeout,
        )

    @property
    def pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = ConnectionPool.from_url(
                self.url,
                max_connections=self.max_connections,
                socket_timeout=self.socket_timeout,
            )
        return self._pool

    async def connect(self) -> DocumentSession:
        try:
            client = Redis(connection_pool=self.pool)
        except (RedisError, ValueError) as e:
            logger.error("Could not create Redis client for %s: %s", self.url, str(e))
            raise StoreUnavailableError(context={"original_error": type(e).__name__}) from e
        return RedisDocumentSession(client)

    async def ping(self) -> bool:
        try:
            async with self.session() as session:
                return bool(await session.client.ping())
        except (RedisError, StoreUnavailableError) as e:
            logger.warning("Redis ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        if self._pool is not None:
            await self._pool.aclose()
            self._pool = None
