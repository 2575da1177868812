"""
FastAPI application for the dental benefits wizard.

Routes:
- GET  /api/health                  : liveness probe
- GET  /api/csrf-token              : CSRF token for the current session
- /api/apply/...                    : new applications (web.apply_api)
- /api/renew/...                    : public renewals (web.renew_api)
- /api/protected/renew/...          : signed-in renewals (web.protected_renew_api)
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from config.settings import Settings, get_settings
from database.session_store import HttpSession
from domain.errors import (
    BenefitApiError,
    CsrfTokenMismatch,
    FlowRestartRequired,
    MalformedUpstreamData,
    SubmittedStateImmutable,
)
from services.logging_config import configure_logging, get_logger
from web.apply_api import router as apply_router
from web.csrf import get_or_create_csrf_token
from web.dependencies import get_http_session
from web.middleware import RequestIdMiddleware, SessionCookieMiddleware
from web.protected_renew_api import router as protected_renew_router
from web.renew_api import router as renew_router
from web.routes import DEFAULT_LANG, normalize_lang

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    CSRF_MISMATCH = "CSRF_MISMATCH"
    ALREADY_SUBMITTED = "ALREADY_SUBMITTED"
    UPSTREAM_MALFORMED = "UPSTREAM_MALFORMED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"


def create_error_response(
    code: ErrorCode,
    message: str,
    status_code: int = 400,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": True,
            "code": code.value,
            "message": message,
            "details": details or {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


def restart_url(settings: Settings, path: str, lang: str) -> str:
    """Start page of the flow a request belongs to."""
    if path.startswith("/api/protected/renew"):
        url = settings.protected_renew_start_url
    elif path.startswith("/api/renew"):
        url = settings.renew_start_url
    else:
        url = settings.start_url
    return url.format(lang=lang)


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(FlowRestartRequired)
    async def flow_restart_handler(request: Request, exc: FlowRestartRequired):
        """Invalid, missing and expired flows start over at their own first page."""
        logger.warning(f"Flow restart required: {exc} (key: {exc.session_key})")
        lang = normalize_lang(request.query_params.get("lang", DEFAULT_LANG))
        return RedirectResponse(restart_url(settings, request.url.path, lang), status_code=status.HTTP_302_FOUND)

    @app.exception_handler(CsrfTokenMismatch)
    async def csrf_handler(request: Request, exc: CsrfTokenMismatch):
        return create_error_response(ErrorCode.CSRF_MISMATCH, "Invalid CSRF token", status_code=400)

    @app.exception_handler(SubmittedStateImmutable)
    async def submitted_handler(request: Request, exc: SubmittedStateImmutable):
        return create_error_response(ErrorCode.ALREADY_SUBMITTED, "Application already submitted", status_code=409)

    @app.exception_handler(MalformedUpstreamData)
    async def malformed_upstream_handler(request: Request, exc: MalformedUpstreamData):
        logger.error(f"Malformed upstream data: {exc.path} (tag: {exc.tag})")
        return create_error_response(
            ErrorCode.UPSTREAM_MALFORMED,
            "The benefits system returned incomplete data",
            status_code=502,
            details={"path": exc.path, "tag": exc.tag},
        )

    @app.exception_handler(BenefitApiError)
    async def benefit_api_handler(request: Request, exc: BenefitApiError):
        logger.error(f"Benefit API error: {exc} (status: {exc.status_code})")
        return create_error_response(
            ErrorCode.UPSTREAM_UNAVAILABLE,
            "The benefits system is unavailable. Please try again.",
            status_code=502,
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the wizard application."""
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_output=settings.json_logs)

    app = FastAPI(title=settings.name, version=settings.version, debug=settings.debug)

    # Last added = first executed
    session_settings = settings.session_store
    app.add_middleware(
        SessionCookieMiddleware,
        cookie_name=session_settings.cookie_name,
        max_age=session_settings.ttl_seconds,
        secure=settings.is_production,
    )
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app, settings)

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "version": settings.version}

    @app.get("/api/csrf-token")
    async def csrf_token(session: HttpSession = Depends(get_http_session)):
        return {"csrfToken": await get_or_create_csrf_token(session)}

    app.include_router(apply_router)
    app.include_router(renew_router)
    app.include_router(protected_renew_router)

    logger.info(f"{settings.name} started ({settings.environment})")
    return app
