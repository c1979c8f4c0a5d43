"""
Cart API — Product Route Handlers
==================================

What:  POST/GET/PATCH/DELETE under /{db_type}/product.
How:   PATCH takes a field map and sets every field in one batched round
       trip; it reports failure if any single field-set was rejected.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from cartapi.routes.deps import get_store, require_credentials
from cartapi.schemas.documents import ErrorResponse, ProductRef
from cartapi.services.documents import product_repository
from cartapi.store import DocumentStore

router = APIRouter(
    prefix="/{db_type}/product",
    tags=["Products"],
    dependencies=[Depends(require_credentials)],
    responses={
        400: {"description": "Unknown DB Type or invalid document", "model": ErrorResponse},
        401: {"description": "Missing or invalid credentials"},
        502: {"description": "Document store rejected the command", "model": ErrorResponse},
        503: {"description": "Document store unavailable", "model": ErrorResponse},
    },
)


@router.post("", status_code=201, response_model=ProductRef, summary="Create or replace a product")
async def create_product(
    document: Dict[str, Any] = Body(..., description="Full product document including sku"),
    store: DocumentStore = Depends(get_store),
) -> ProductRef:
    sku = await product_repository.create(store, document)
    return ProductRef(sku=sku)


@router.get(
    "/{sku}",
    response_model=None,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Fetch a product",
)
async def read_product(sku: str, store: DocumentStore = Depends(get_store)) -> Any:
    return await product_repository.get(store, sku)


@router.patch(
    "/{sku}",
    response_model=ProductRef,
    responses={
        404: {"description": "Product not found", "model": ErrorResponse},
        422: {"description": "Product not fully updated", "model": ErrorResponse},
    },
    summary="Partially update a product",
    description=(
        "Sets each given field. Not atomic across fields: on failure some "
        "fields may already be written. An empty map is a successful no-op."
    ),
)
async def update_product(
    sku: str,
    fields: Dict[str, Any] = Body(..., description="Field name → new value"),
    store: DocumentStore = Depends(get_store),
) -> ProductRef:
    await product_repository.update_fields(store, sku, fields)
    return ProductRef(sku=sku)


@router.delete(
    "/{sku}",
    response_model=ProductRef,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Delete a product",
)
async def delete_product(sku: str, store: DocumentStore = Depends(get_store)) -> ProductRef:
    await product_repository.delete(store, sku)
    return ProductRef(sku=sku)
