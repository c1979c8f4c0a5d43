"""
Cart API — User Route Handlers
===============================

What:  POST/GET/PATCH/DELETE under /{db_type}/user. Same semantics as products.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from cartapi.routes.deps import get_store, require_credentials
from cartapi.schemas.documents import ErrorResponse, UserRef
from cartapi.services.documents import user_repository
from cartapi.store import DocumentStore

router = APIRouter(
    prefix="/{db_type}/user",
    tags=["Users"],
    dependencies=[Depends(require_credentials)],
    responses={
        400: {"description": "Unknown DB Type or invalid document", "model": ErrorResponse},
        401: {"description": "Missing or invalid credentials"},
        502: {"description": "Document store rejected the command", "model": ErrorResponse},
        503: {"description": "Document store unavailable", "model": ErrorResponse},
    },
)


@router.post("", status_code=201, response_model=UserRef, summary="Create or replace a user")
async def create_user(
    document: Dict[str, Any] = Body(..., description="Full user document including userID"),
    store: DocumentStore = Depends(get_store),
) -> UserRef:
    user_id = await user_repository.create(store, document)
    return UserRef(userID=user_id)


@router.get(
    "/{user_id}",
    response_model=None,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Fetch a user",
)
async def read_user(user_id: str, store: DocumentStore = Depends(get_store)) -> Any:
    return await user_repository.get(store, user_id)


@router.patch(
    "/{user_id}",
    response_model=UserRef,
    responses={
        404: {"description": "User not found", "model": ErrorResponse},
        422: {"description": "User not fully updated", "model": ErrorResponse},
    },
    summary="Partially update a user",
)
async def update_user(
    user_id: str,
    fields: Dict[str, Any] = Body(..., description="Field name → new value"),
    store: DocumentStore = Depends(get_store),
) -> UserRef:
    await user_repository.update_fields(store, user_id, fields)
    return UserRef(userID=user_id)


@router.delete(
    "/{user_id}",
    response_model=UserRef,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Delete a user",
)
async def delete_user(user_id: str, store: DocumentStore = Depends(get_store)) -> UserRef:
    await user_repository.delete(store, user_id)
    return UserRef(userID=user_id)
