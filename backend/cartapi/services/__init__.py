# Services package init
"""
Cart API — Repository Layer
============================

What:  Business logic between the route handlers (HTTP) and the document store.
How:   Repositories are stateless; the store to use is passed on every call,
       and each call opens and closes its own store session.

Repository Inventory:
    - DocumentRepository: create / get / delete / batched field update
    - product_repository, user_repository: DocumentRepository instances
    - CartRepository: DocumentRepository plus the merge-by-sku item update
"""

from cartapi.services.cart_service import CartRepository, MergeOutcome, cart_repository, merge_cart_item
from cartapi.services.documents import DocumentRepository, product_repository, user_repository

__all__ = [
    "CartRepository",
    "DocumentRepository",
    "MergeOutcome",
    "cart_repository",
    "merge_cart_item",
    "product_repository",
    "user_repository",
]
