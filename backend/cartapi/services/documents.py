"""
Cart API — Document Repositories
=================================

What:  Create / read / delete / partial-update for one resource kind.
How:   Each repository knows its key prefix and identifier field; every call
       opens a scoped session on the store it is given and closes it before
       returning.
Who:   Called by the route handlers; CartRepository (cart_service.py)
       extends this with the item merge.

Partial update (products, users):
    Every (field, value) pair becomes one `set_document(key, ".field", value)`
    in a single batch. The update succeeds only if every queued set was
    acknowledged. There is no rollback: when one set fails the others may
    already be written. The batch saves round trips; it does not isolate.
    An empty field map queues nothing and succeeds vacuously. The document
    must exist either way: a missing target is NotFound, not a failed write.
"""

import logging
from typing import Any, Dict, Mapping

from cartapi.exceptions import NotFoundError, ValidationError, WriteIncompleteError
from cartapi.store import ROOT_PATH, DocumentStore

logger = logging.getLogger(__name__)


class DocumentRepository:
    """
    Stateless repository for one resource kind.

    Attributes:
        kind:      Name used in log lines ("Product")
        label:     Name used in client-facing messages ("SKU")
        prefix:    Key prefix in the store ("product")
        id_field:  Identifier field inside the document ("sku")
    """

    def __init__(self, kind: str, prefix: str, id_field: str, label: str | None = None):
        self.kind = kind
        self.prefix = prefix
        self.id_field = id_field
        self.label = label or kind

    def key_for(self, resource_id: str) -> str:
        return f"{self.prefix}:{resource_id}"

    def identifier_of(self, document: Mapping[str, Any]) -> str:
        """
        Extract the identifier from a full document.

        Raises:
            ValidationError: identifier missing, null, or empty.
        """
        value = document.get(self.id_field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(
                message=f"{self.kind} document must include '{self.id_field}'",
                field=self.id_field,
            )
        if not isinstance(value, (str, int)) or isinstance(value, bool):
            raise ValidationError(
                message=f"'{self.id_field}' must be a string or integer",
                field=self.id_field,
            )
        return str(value)

    async def create(self, store: DocumentStore, document: Dict[str, Any]) -> str:
        """
        Write the whole document at the root, replacing any previous one.

        Returns:
            The document's identifier.
        """
        resource_id = self.identifier_of(document)
        async with store.session() as session:
            acknowledged = await session.set_document(
                self.key_for(resource_id), ROOT_PATH, document
            )
        if not acknowledged:
            raise WriteIncompleteError(
                message=f"{self.label} {resource_id} not added",
                context={"key": self.key_for(resource_id)},
            )
        logger.info("201: %s %s added", self.kind, resource_id)
        return resource_id

    async def get(self, store: DocumentStore, resource_id: str) -> Any:
        """
        Raises:
            NotFoundError: no document at this key. An empty document is returned.
        """
        async with store.session() as session:
            document = await session.get_document(self.key_for(resource_id), ROOT_PATH)
        if document is None:
            raise NotFoundError(resource=self.label, resource_id=resource_id)
        logger.info("200: %s %s found", self.kind, resource_id)
        return document

    async def delete(self, store: DocumentStore, resource_id: str) -> str:
        """
        Raises:
            NotFoundError: nothing was removed (including a repeated delete).
        """
        async with store.session() as session:
            count = await session.delete_document(self.key_for(resource_id))
        if count < 1:
            raise NotFoundError(resource=self.label, resource_id=resource_id)
        logger.info("200: %s %s deleted", self.kind, resource_id)
        return resource_id

    async def update_fields(
        self,
        store: DocumentStore,
        resource_id: str,
        fields: Mapping[str, Any],
    ) -> str:
        """
        Set each given top-level field in one batched round trip.

        Raises:
            NotFoundError: no document at this key (checked before queuing).
            WriteIncompleteError: at least one field-set was not acknowledged.
                Fields whose set succeeded stay written.
        """
        key = self.key_for(resource_id)
        async with store.session() as session:
            if not await session.document_exists(key):
                raise NotFoundError(resource=self.label, resource_id=resource_id)
            batch = session.begin_batch()
            for field, value in fields.items():
                batch.set_document(key, f".{field}", value)
            outcomes = await session.execute_batch(batch)

        # all() of an empty batch is True: an empty field map is a no-op success
        if not all(outcomes):
            failed = [field for field, ok in zip(fields, outcomes) if not ok]
            raise WriteIncompleteError(
                message=f"{self.label} {resource_id} not fully updated",
                context={"key": key, "failed_fields": failed},
            )
        logger.info("200: %s %s updated", self.kind, resource_id)
        return resource_id


product_repository = DocumentRepository(kind="Product", prefix="product", id_field="sku", label="SKU")
user_repository = DocumentRepository(kind="User", prefix="user", id_field="userID")
