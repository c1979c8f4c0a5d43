"""
Cart API — Custom Exception Hierarchy
======================================

What:  Application-specific exceptions for each failure kind.
How:   Each exception class carries a message, an optional context dict and
       the HTTP status it maps to. Global exception handlers (registered in
       main.py) catch these and return `{"error": message, ...}` bodies.
Who:   Raised by the store adapters and repositories; caught by global handlers.

Exception Hierarchy:
    CartApiError (base)
    ├── ValidationError         → 400 Bad Request
    ├── UnknownBackendError     → 400 Bad Request
    ├── NotFoundError           → 404 Not Found
    ├── WriteConflictError      → 409 Conflict
    ├── WriteIncompleteError    → 422 Unprocessable Entity
    ├── StoreBackendError       → 502 Bad Gateway
    └── StoreUnavailableError   → 503 Service Unavailable

With `UNIFORM_ERROR_STATUS=true` every one of them is answered with 400.
"""

from typing import Any, Dict, Optional


class CartApiError(Exception):
    """
    Base exception for all Cart API application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged but NOT returned to client)
        status_code: HTTP status used when error kinds are differentiated
        code: Machine-readable error kind
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CartApiError):
    """
    Raised when client input fails validation.

    When:    Document body without its identifier field, non-object bodies.
    HTTP:    400 Bad Request
    """

    status_code = 400
    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnknownBackendError(CartApiError):
    """Raised when the `dbType` path segment names no configured backend."""

    status_code = 400
    code = "unknown_db_type"

    def __init__(self, db_type: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["db_type"] = db_type
        super().__init__(message="Unknown DB Type", context=ctx)
        self.db_type = db_type


class NotFoundError(CartApiError):
    """
    Raised when a requested document does not exist.

    When:    GET / DELETE / cart PATCH against a key the store does not hold.
    HTTP:    404 Not Found

    The store signals absence with None (or a zero delete count); the
    repository converts that into this exception.
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class WriteIncompleteError(CartApiError):
    """
    Raised when the store did not acknowledge one or more writes.

    When:    Create not acknowledged, any field-set of a batched partial
             update rejected, cart items write not acknowledged.
    HTTP:    422 Unprocessable Entity

    Batched updates have no rollback: some fields of the batch may have
    been written even though this error is raised.
    """

    status_code = 422
    code = "write_incomplete"

    def __init__(
        self,
        message: str = "Write was not acknowledged by the store",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class WriteConflictError(CartApiError):
    """
    Raised when an optimistic read-modify-write kept losing to concurrent writers.

    When:    The cart key changed between fetch and write on every attempt.
    HTTP:    409 Conflict (client may resubmit)
    """

    status_code = 409
    code = "write_conflict"

    def __init__(
        self,
        message: str = "Document was modified concurrently",
        attempts: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if attempts:
            ctx["attempts"] = attempts
        super().__init__(message=message, context=ctx)
        self.attempts = attempts


class StoreUnavailableError(CartApiError):
    """
    Raised when the document store connection could not be established or dropped.

    HTTP:    503 Service Unavailable

    The message returned to the client stays generic; the driver error is
    kept in `context` for the server log.
    """

    status_code = 503
    code = "store_unavailable"

    def __init__(
        self,
        message: str = "Document store is unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreBackendError(CartApiError):
    """
    Raised when the store answered a read with an error other than "no such path".

    When:    RedisJSON module not loaded, key holds a non-JSON type, malformed path.
    HTTP:    502 Bad Gateway
    """

    status_code = 502
    code = "store_error"

    def __init__(
        self,
        message: str = "Document store rejected the request.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
