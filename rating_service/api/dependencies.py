"""Shared dependencies for API endpoints."""
import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, Response

from rating_service.config import settings
from rating_service.core.dependencies import find_session_store, get_session_store_for
from rating_service.domain.repositories.session_store import SessionStore


async def verify_admin_key(x_admin_key: str = Header(..., alias="X-Admin-Key")):
    """Verify admin key for protected endpoints.

    Args:
        x_admin_key: Admin key from X-Admin-Key header

    Raises:
        HTTPException: 403 if admin key is invalid

    Returns:
        bool: True if key is valid
    """
    expected_key = settings.ADMIN_KEY

    if not expected_key:
        raise HTTPException(
            status_code=500,
            detail="Admin key not configured on server"
        )

    if not secrets.compare_digest(x_admin_key, expected_key):
        raise HTTPException(
            status_code=403,
            detail="Invalid admin key"
        )

    return True


def get_session_id(request: Request, response: Response) -> str:
    """Read the actor's session id from its cookie, issuing a new one if absent."""
    session_id: Optional[str] = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_id:
        session_id = secrets.token_urlsafe(24)
        response.set_cookie(
            settings.SESSION_COOKIE_NAME,
            session_id,
            max_age=settings.SESSION_TTL_SECONDS,
            httponly=True,
            samesite="lax",
        )
    return session_id


def get_session_store(session_id: str = Depends(get_session_id)) -> SessionStore:
    """Session store of the calling actor."""
    return get_session_store_for(session_id)


def get_existing_session_store(request: Request) -> Optional[SessionStore]:
    """Session store of the calling actor if it already has one.

    Never issues a cookie or allocates a store, for read-only routes.
    """
    return find_session_store(request.cookies.get(settings.SESSION_COOKIE_NAME))
