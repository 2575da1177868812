"""
FastAPI dependency injection for the wizard endpoints.

Provides:
- The HTTP session view over the configured session store
- Wizard settings and lifecycle managers per flow
- Outbound services
- The authenticated identity for protected flows

Tests swap any of these through app.dependency_overrides.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from config.settings import SessionStoreSettings, WizardSettings, get_wizard_settings
from database.session_store import HttpSession, SessionStore, get_session_store
from database.state_lifecycle import (
    APPLY_FLOW_KEY_PREFIX,
    PROTECTED_RENEW_FLOW_KEY_PREFIX,
    RENEW_FLOW_KEY_PREFIX,
    StateLifecycleManager,
)
from domain.state import ApplyState, ProtectedRenewState, RenewState
from services.benefit_application_service import BenefitApplicationService
from services.client_application_service import ClientApplicationService
from validation.field_validators import normalize_sin, validate_sin

# Set by the identity provider in front of the protected routes
IDENTITY_SIN_HEADER = "X-Authenticated-SIN"


@lru_cache(maxsize=1)
def get_session_store_settings() -> SessionStoreSettings:
    return SessionStoreSettings()


def get_store() -> SessionStore:
    return get_session_store(get_session_store_settings())


def get_http_session(request: Request, store: SessionStore = Depends(get_store)) -> HttpSession:
    """The current browser's session, keyed by the session cookie."""
    return HttpSession(store, request.state.session_id, get_session_store_settings().key_prefix)


def get_settings_for_wizard() -> WizardSettings:
    return get_wizard_settings()


# Lifecycle managers
def get_apply_manager(settings: WizardSettings = Depends(get_settings_for_wizard)) -> StateLifecycleManager[ApplyState]:
    return StateLifecycleManager(ApplyState, APPLY_FLOW_KEY_PREFIX, settings)


def get_renew_manager(settings: WizardSettings = Depends(get_settings_for_wizard)) -> StateLifecycleManager[RenewState]:
    return StateLifecycleManager(RenewState, RENEW_FLOW_KEY_PREFIX, settings)


def get_protected_renew_manager(
    settings: WizardSettings = Depends(get_settings_for_wizard),
) -> StateLifecycleManager[ProtectedRenewState]:
    return StateLifecycleManager(ProtectedRenewState, PROTECTED_RENEW_FLOW_KEY_PREFIX, settings)


# Outbound services
@lru_cache(maxsize=1)
def get_benefit_application_service() -> BenefitApplicationService:
    return BenefitApplicationService.from_settings()


@lru_cache(maxsize=1)
def get_client_application_service() -> ClientApplicationService:
    return ClientApplicationService.from_settings()


# Identity
def get_identity_sin(sin: Optional[str] = Header(default=None, alias=IDENTITY_SIN_HEADER)) -> str:
    """
    The SIN claim of the authenticated user.

    Raises:
        HTTPException: 401 when the claim is absent or not a valid SIN
    """
    if not sin or not validate_sin(sin)[0]:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return normalize_sin(sin)
