"""
Cart API — Cart Repository and Item Merge
==========================================

What:  Cart documents plus the merge-by-sku PATCH algorithm.
How:   The merge is a pure function over the stored items list; the
       repository runs it inside the store's optimistic read-modify-write so
       two concurrent PATCHes on one cart cannot silently overwrite each other.

Merge-by-sku, given a candidate item {sku, quantity}:
    1. Walk the stored items in order.
       Entries that are not objects are carried over untouched.
    2. On the FIRST item with the same sku:
         quantity == 0 → drop it
         otherwise     → put the candidate in its place
       then copy the rest of the list untouched (later duplicates included).
    3. No item matched → append the candidate, even with quantity 0.

State machine per call:
    Start → Fetched → {Replaced | Removed | Appended} → Written → {Success | Failure}
"""

import enum
import logging
from typing import Any, Dict, List, Mapping, Tuple

from cartapi.config import settings
from cartapi.exceptions import NotFoundError, WriteIncompleteError
from cartapi.services.documents import DocumentRepository
from cartapi.store import DocumentStore

logger = logging.getLogger(__name__)

ITEMS_PATH = ".items"


class MergeOutcome(str, enum.Enum):
    REPLACED = "replaced"
    REMOVED = "removed"
    APPENDED = "appended"


def merge_cart_item(
    items: List[Dict[str, Any]],
    candidate: Mapping[str, Any],
) -> Tuple[List[Dict[str, Any]], MergeOutcome]:
    """
    Merge one candidate item into a cart's items list.

    Only the first item whose sku matches is acted on. A zero quantity removes
    a matching item but is appended as-is when nothing matches.
    Entries that are not objects never match and are kept in place.

    Args:
        items: Current items, in cart order. Not modified.
        candidate: {"sku": ..., "quantity": ...}

    Returns:
        (new items list, what happened)
    """
    merged: List[Dict[str, Any]] = []
    for index, item in enumerate(items):
        if isinstance(item, dict) and item.get("sku") == candidate["sku"]:
            if candidate["quantity"] == 0:
                outcome = MergeOutcome.REMOVED
            else:
                merged.append(dict(candidate))
                outcome = MergeOutcome.REPLACED
            merged.extend(items[index + 1:])
            return merged, outcome
        merged.append(item)

    merged.append(dict(candidate))
    return merged, MergeOutcome.APPENDED


class CartRepository(DocumentRepository):
    """Cart documents keyed as cart:{cartID}, items at .items."""

    def __init__(self):
        super().__init__(kind="Cart", prefix="cart", id_field="cartID")

    async def update_item(
        self,
        store: DocumentStore,
        cart_id: str,
        candidate: Mapping[str, Any],
        attempts: int | None = None,
    ) -> MergeOutcome:
        """
        Add, replace, or remove one item of a cart.

        `attempts` bounds how often the merge is recomputed after losing a
        race; defaults to CART_UPDATE_ATTEMPTS.

        Raises:
            NotFoundError: the cart (or its items list) does not exist.
            WriteIncompleteError: the new items list was not acknowledged.
            WriteConflictError: concurrent writers won every attempt.
        """
        outcomes: List[MergeOutcome] = []

        def apply(items: Any) -> List[Dict[str, Any]]:
            if items is None:
                raise NotFoundError(resource=self.label, resource_id=cart_id)
            if not isinstance(items, list):
                raise WriteIncompleteError(
                    message=f"Cart {cart_id} items are not a list",
                    context={"key": self.key_for(cart_id)},
                )
            merged, outcome = merge_cart_item(items, candidate)
            # Keeps only the latest attempt's outcome
            outcomes[:] = [outcome]
            return merged

        async with store.session() as session:
            acknowledged = await session.update_document(
                self.key_for(cart_id),
                ITEMS_PATH,
                apply,
                attempts=attempts or settings.cart_update_attempts,
            )
        if not acknowledged:
            raise WriteIncompleteError(
                message=f"Cart {cart_id} not fully updated",
                context={"key": self.key_for(cart_id)},
            )
        logger.info("200: Cart %s updated (%s sku %s)", cart_id, outcomes[0].value, candidate["sku"])
        return outcomes[0]


cart_repository = CartRepository()
