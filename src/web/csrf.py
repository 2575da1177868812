"""
CSRF protection for wizard form posts.

The token lives in the HTTP session. Every mutating request must echo it in
the X-CSRF-Token header; any mismatch ends the request with 400.
"""

import hmac
import secrets
from typing import Optional

from fastapi import Depends, Request

from database.session_store import HttpSession
from domain.errors import CsrfTokenMismatch
from services.logging_config import get_logger
from web.dependencies import get_http_session

logger = get_logger(__name__)

CSRF_SESSION_KEY = "csrf-token"
CSRF_HEADER = "X-CSRF-Token"


async def get_or_create_csrf_token(session: HttpSession) -> str:
    stored = await session.get(CSRF_SESSION_KEY)
    if stored is not None:
        return stored.decode("utf-8")
    token = secrets.token_urlsafe(32)
    await session.set(CSRF_SESSION_KEY, token.encode("utf-8"))
    return token


async def check_csrf_token(session: HttpSession, submitted: Optional[str]) -> None:
    """
    Raises:
        CsrfTokenMismatch: no token was submitted, none is held, or they differ
    """
    stored = await session.get(CSRF_SESSION_KEY)
    if not submitted or stored is None:
        logger.warning("CSRF token missing")
        raise CsrfTokenMismatch("CSRF token missing")
    if not hmac.compare_digest(stored, submitted.encode("utf-8")):
        logger.warning("CSRF token mismatch")
        raise CsrfTokenMismatch("CSRF token mismatch")


async def verify_csrf(request: Request, session: HttpSession = Depends(get_http_session)) -> None:
    """Route dependency for every mutating wizard endpoint."""
    await check_csrf_token(session, request.headers.get(CSRF_HEADER))
