"""
Cart API — Pydantic Request/Response Schemas
=============================================

What:  The small fixed parts of the API contract.
How:   Stored documents are free-form JSON and pass through as plain dicts;
       only the cart item used by the merge, the identifier echoes, and the
       error/health envelopes are modelled here.

Field names follow the wire format (cartID, userID) rather than snake_case.
"""

from typing import Dict

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CartItem(BaseModel):
    """
    What:  Candidate item for PATCH /{dbType}/cart/{cartID}.
    How:   quantity 0 removes a matching item (or appends a zero line on a miss).
    """
    sku: str = Field(min_length=1, description="Product SKU; the item's identity within a cart")
    quantity: int = Field(ge=0, description="New quantity; 0 removes the item")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CartRef(BaseModel):
    cartID: str


class ProductRef(BaseModel):
    sku: str


class UserRef(BaseModel):
    userID: str


class ErrorResponse(BaseModel):
    """
    What:  Body of every application error response.
    Who:   Built by the exception handlers in main.py.
    """
    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Error kind: not_found, write_incomplete, ...")
    request_id: str = Field(default="", description="Correlation ID, also in X-Request-ID")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    version: str
    stores: Dict[str, str] = Field(description="Backend name → connected / disconnected")
    uptime_seconds: float
