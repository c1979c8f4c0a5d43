"""
Cart API — Application Package
===============================

REST façade over a JSON document store for carts, products and users.

    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← HTTP concerns, auth, dbType
    ├─────────────────────────────────────┤
    │     Services (Repositories)         │  ← create/get/delete, PATCH merge
    ├─────────────────────────────────────┤
    │     Store (Document Adapters)       │  ← RedisJSON / in-memory sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
