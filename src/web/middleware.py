"""
Middleware for the wizard's FastAPI application

Provides:
- Request ID injection
- HTTP session cookie
"""

import secrets
import uuid
from typing import Any, Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from services.logging_config import flow_id_var, get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


# =============================================================================
# Request ID Middleware
# =============================================================================

class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an id for log correlation.

    An incoming X-Request-ID header is reused; otherwise one is generated.
    The id is echoed back on the response.
    """

    def __init__(self, app, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request_token = request_id_var.set(request_id)
        flow_token = flow_id_var.set(None)
        try:
            response = await call_next(request)
        finally:
            flow_id_var.reset(flow_token)
            request_id_var.reset(request_token)

        response.headers[self.header_name] = request_id
        return response


# =============================================================================
# Session Cookie Middleware
# =============================================================================

class SessionCookieMiddleware(BaseHTTPMiddleware):
    """
    Assign each browser an HTTP session id.

    The id is read from the session cookie, or generated on the first
    request, and exposed to endpoints as request.state.session_id.
    """

    def __init__(
        self,
        app,
        cookie_name: str = "wizard_session",
        max_age: int = 3600,
        secure: bool = False,
    ):
        super().__init__(app)
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure

    def _session_id(self, request: Request) -> Optional[str]:
        value = request.cookies.get(self.cookie_name)
        if value and value.isalnum() and len(value) <= 128:
            return value
        return None

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        session_id = self._session_id(request)
        is_new = session_id is None
        if is_new:
            session_id = secrets.token_hex(16)
            logger.debug("New HTTP session issued")

        request.state.session_id = session_id
        response = await call_next(request)

        # Refreshing the cookie keeps its lifetime aligned with the store TTL
        response.set_cookie(
            self.cookie_name,
            session_id,
            max_age=self.max_age,
            httponly=True,
            samesite="lax",
            secure=self.secure,
        )
        return response
