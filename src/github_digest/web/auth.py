"""Shared-secret authorization for privileged endpoints."""

import logging
import secrets

from fastapi import Header, HTTPException, Query, Request

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
API_KEY_QUERY = "key"


def verify_api_key(provided: str | None, expected: str | None) -> bool:
    """Check a caller-supplied key against the configured secret.

    An unset secret denies every caller.
    """
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided.encode(), expected.encode())


async def require_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias=API_KEY_HEADER),
    key: str | None = Query(default=None, alias=API_KEY_QUERY),
):
    """FastAPI dependency that rejects requests without the shared secret."""
    expected = request.app.state.config.backend_secret
    if not verify_api_key(x_api_key or key, expected):
        logger.warning(f"Rejected unauthorized request to {request.url.path}")
        raise HTTPException(status_code=401, detail="Unauthorized")
