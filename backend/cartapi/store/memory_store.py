"""
Cart API — In-Memory Document Store
====================================

What:  Process-local DocumentStore keeping JSON documents in a dict.
Who:   Enabled with STORE_BACKENDS=memory; used by the test suite.

Mirrors the RedisJSON behaviours the repositories depend on:
    - non-root writes to a missing key are refused (not acknowledged)
    - a missing key or path reads as None
    - values are deep-copied in and out, so callers never share state
    - batches report one outcome per queued set, without rollback

Documents live only as long as the process; nothing is shared between
workers.
"""

import asyncio
import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from cartapi.store.base import (
    ROOT_PATH,
    DocumentBatch,
    DocumentSession,
    DocumentStore,
    Mutator,
)

logger = logging.getLogger(__name__)

_MISSING = object()


def split_path(path: str) -> List[str]:
    """
    Split a legacy RedisJSON path into member names.

    ".", "" and "$" address the root; ".a.b" → ["a", "b"].
    """
    if path in (ROOT_PATH, "", "$"):
        return []
    return [segment for segment in path.lstrip("$").strip(".").split(".") if segment]


def _resolve(document: Any, segments: List[str]) -> Any:
    value = document
    for segment in segments:
        if not isinstance(value, dict) or segment not in value:
            return _MISSING
        value = value[segment]
    return value


class MemoryDocumentBatch(DocumentBatch):
    def __init__(self, store: "MemoryDocumentStore"):
        self._store = store
        self._operations: List[Tuple[str, str, Any]] = []

    def set_document(self, key: str, path: str, value: Any) -> None:
        self._operations.append((key, path, copy.deepcopy(value)))

    async def execute(self) -> List[bool]:
        operations, self._operations = self._operations, []
        async with self._store.lock:
            return [self._store.write(key, path, value) for key, path, value in operations]

    def __len__(self) -> int:
        return len(self._operations)


class MemoryDocumentSession(DocumentSession):
    def __init__(self, store: "MemoryDocumentStore"):
        self._store: Optional["MemoryDocumentStore"] = store

    @property
    def store(self) -> "MemoryDocumentStore":
        if self._store is None:
            raise RuntimeError("Session is closed")
        return self._store

    async def get_document(self, key: str, path: str = ROOT_PATH) -> Optional[Any]:
        return self.store.read(key, path)

    async def set_document(self, key: str, path: str, value: Any) -> bool:
        async with self.store.lock:
            return self.store.write(key, path, copy.deepcopy(value))

    async def delete_document(self, key: str) -> int:
        async with self.store.lock:
            return 1 if self.store.documents.pop(key, _MISSING) is not _MISSING else 0

    async def document_exists(self, key: str) -> bool:
        return key in self.store.documents

    def begin_batch(self) -> DocumentBatch:
        return MemoryDocumentBatch(self.store)

    async def update_document(
        self,
        key: str,
        path: str,
        mutate: Mutator,
        attempts: int = 1,
    ) -> bool:
        # The lock spans read, mutate and write, so no attempt can lose a race
        async with self.store.lock:
            current = self.store.read(key, path)
            return self.store.write(key, path, copy.deepcopy(mutate(current)))

    async def close(self) -> None:
        self._store = None


class MemoryDocumentStore(DocumentStore):
    """Dict-backed store; one instance per application."""

    name = "memory"

    def __init__(self, name: str = "memory"):
        self.name = name
        self.documents: Dict[str, Any] = {}
        self.lock = asyncio.Lock()

    async def connect(self) -> DocumentSession:
        return MemoryDocumentSession(self)

    async def ping(self) -> bool:
        return True

    def read(self, key: str, path: str) -> Optional[Any]:
        value = _resolve(self.documents.get(key, _MISSING), split_path(path))
        if value is _MISSING:
            return None
        return copy.deepcopy(value)

    def write(self, key: str, path: str, value: Any) -> bool:
        segments = split_path(path)
        if not segments:
            self.documents[key] = value
            return True
        if key not in self.documents:
            logger.debug("Refusing non-root write to missing key %s at %s", key, path)
            return False
        parent = _resolve(self.documents[key], segments[:-1])
        if not isinstance(parent, dict):
            logger.debug("Refusing write to %s at %s: parent is not an object", key, path)
            return False
        parent[segments[-1]] = value
        return True
