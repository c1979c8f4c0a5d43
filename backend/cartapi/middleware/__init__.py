# Middleware package init
"""
Cart API — Middleware Package
==============================

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler (auth dependency first)

    1. Request ID: correlation ID for logs and error bodies
    2. Logging: one access line per request, with the ID from step 1

Authentication is a router dependency rather than middleware, so /health
and the OpenAPI docs stay reachable without credentials.
"""
