"""
Cart API — Route Dependencies
==============================

What:  FastAPI dependencies shared by the resource routers.
How:   `require_credentials` is attached to every resource router, so auth
       runs before any handler; `get_store` resolves the `{db_type}` path
       segment to a configured DocumentStore.
"""

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from cartapi.config import Settings
from cartapi.store import DocumentStore

logger = logging.getLogger(__name__)

# auto_error=True: a missing Authorization header is answered with 401
security = HTTPBasic(realm="cartapi")


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was created with (see create_app)."""
    return request.app.state.settings


def require_credentials(
    credentials: HTTPBasicCredentials = Depends(security),
    app_settings: Settings = Depends(get_app_settings),
) -> str:
    """
    Check HTTP Basic credentials against the configured pair.

    compare_digest keeps the comparison time independent of where the
    strings differ.
    """
    user_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), app_settings.api_user.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), app_settings.api_password.encode("utf-8")
    )
    if not (user_ok and password_ok):
        logger.warning("401: Rejected credentials for user '%s'", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username


def get_store(db_type: str, request: Request) -> DocumentStore:
    """
    Raises:
        UnknownBackendError: `db_type` is not among STORE_BACKENDS (→ 400).
    """
    return request.app.state.stores.get(db_type)
