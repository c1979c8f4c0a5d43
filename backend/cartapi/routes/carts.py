"""
Cart API — Cart Route Handlers
===============================

What:  POST/GET/PATCH/DELETE under /{db_type}/cart.
How:   Extract identifier and body, delegate to cart_repository, echo the
       cartID. Failures are raised as CartApiError subclasses and rendered by
       the global exception handlers.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from cartapi.config import Settings
from cartapi.routes.deps import get_app_settings, get_store, require_credentials
from cartapi.schemas.documents import CartItem, CartRef, ErrorResponse
from cartapi.services.cart_service import cart_repository
from cartapi.store import DocumentStore

router = APIRouter(
    prefix="/{db_type}/cart",
    tags=["Carts"],
    dependencies=[Depends(require_credentials)],
    responses={
        400: {"description": "Unknown DB Type or invalid document", "model": ErrorResponse},
        401: {"description": "Missing or invalid credentials"},
        502: {"description": "Document store rejected the command", "model": ErrorResponse},
        503: {"description": "Document store unavailable", "model": ErrorResponse},
    },
)


@router.post(
    "",
    status_code=201,
    response_model=CartRef,
    summary="Create or replace a cart",
)
async def create_cart(
    document: Dict[str, Any] = Body(..., description="Full cart document including cartID"),
    store: DocumentStore = Depends(get_store),
) -> CartRef:
    cart_id = await cart_repository.create(store, document)
    return CartRef(cartID=cart_id)


@router.get(
    "/{cart_id}",
    response_model=None,
    responses={404: {"description": "Cart not found", "model": ErrorResponse}},
    summary="Fetch a cart",
)
async def read_cart(cart_id: str, store: DocumentStore = Depends(get_store)) -> Any:
    return await cart_repository.get(store, cart_id)


@router.patch(
    "/{cart_id}",
    response_model=CartRef,
    responses={
        404: {"description": "Cart not found", "model": ErrorResponse},
        409: {"description": "Concurrent updates kept conflicting", "model": ErrorResponse},
        422: {"description": "Items write not acknowledged", "model": ErrorResponse},
    },
    summary="Add, change, or remove one cart item",
    description=(
        "Merges one item by sku: a matching item is replaced, or removed when "
        "quantity is 0; an unknown sku is appended."
    ),
)
async def update_cart(
    cart_id: str,
    item: CartItem,
    store: DocumentStore = Depends(get_store),
    app_settings: Settings = Depends(get_app_settings),
) -> CartRef:
    await cart_repository.update_item(
        store,
        cart_id,
        item.model_dump(),
        attempts=app_settings.cart_update_attempts,
    )
    return CartRef(cartID=cart_id)


@router.delete(
    "/{cart_id}",
    response_model=CartRef,
    responses={404: {"description": "Cart not found", "model": ErrorResponse}},
    summary="Delete a cart",
)
async def delete_cart(cart_id: str, store: DocumentStore = Depends(get_store)) -> CartRef:
    await cart_repository.delete(store, cart_id)
    return CartRef(cartID=cart_id)
