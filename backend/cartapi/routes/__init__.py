# Routes package init
"""
Cart API — Route Handlers Package
==================================

Route Inventory:
    - carts.py:    POST /{db_type}/cart, GET/PATCH/DELETE /{db_type}/cart/{cartID}
    - products.py: POST /{db_type}/product, GET/PATCH/DELETE /{db_type}/product/{sku}
    - users.py:    POST /{db_type}/user, GET/PATCH/DELETE /{db_type}/user/{userID}
    - health.py:   GET /health

Routes stay thin: pull the identifier and body out of the request, call a
repository, pick the status code. Business logic lives in cartapi.services.
"""
