"""Pytest configuration and fixtures for test suite."""

import os
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Set test environment BEFORE any other imports
# Pinning the date keeps age bands stable
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("SESSION_BACKEND", "memory")
os.environ.setdefault("WIZARD_CURRENT_DATE", "2024-06-01")

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from fixtures.wizard_states import NOW  # noqa: E402


class FakeClock:
    """Deterministic clock for the lifecycle manager."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wizard_settings():
    from config.settings import WizardSettings
    return WizardSettings()


@pytest.fixture
def memory_store():
    from database.session_store import InMemorySessionStore
    return InMemorySessionStore()


@pytest.fixture
def http_session(memory_store):
    from database.session_store import HttpSession
    return HttpSession(memory_store, "session-1")


@pytest.fixture
def apply_manager(wizard_settings, clock):
    from database.state_lifecycle import APPLY_FLOW_KEY_PREFIX, StateLifecycleManager
    from domain.state import ApplyState
    return StateLifecycleManager(ApplyState, APPLY_FLOW_KEY_PREFIX, wizard_settings, clock)


@pytest.fixture
def renew_manager(wizard_settings, clock):
    from database.state_lifecycle import RENEW_FLOW_KEY_PREFIX, StateLifecycleManager
    from domain.state import RenewState
    return StateLifecycleManager(RenewState, RENEW_FLOW_KEY_PREFIX, wizard_settings, clock)


@pytest.fixture
def mock_redis_client():
    """Provide a mock Redis client for testing."""
    from unittest.mock import AsyncMock, MagicMock

    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.aclose = AsyncMock()
    return client


# =============================================================================
# Web fixtures
# =============================================================================

@pytest.fixture
def mock_benefit_service():
    from unittest.mock import AsyncMock, MagicMock
    service = MagicMock()
    service.submit = AsyncMock(return_value="CONF-123")
    return service


@pytest.fixture
def mock_client_service():
    from unittest.mock import AsyncMock, MagicMock
    from fixtures.wizard_states import client_application_dto

    service = MagicMock()
    service.find_by_sin = AsyncMock(return_value=client_application_dto())
    service.find_by_basic_info = AsyncMock(return_value=client_application_dto())
    return service


@pytest.fixture
def app(mock_benefit_service, mock_client_service):
    """Wizard app with outbound services replaced by mocks."""
    from unittest.mock import patch
    from web.app import create_app
    from web.dependencies import get_benefit_application_service, get_client_application_service

    # Leave pytest's log capture handlers in place
    with patch("web.app.configure_logging"):
        application = create_app()
    application.dependency_overrides[get_benefit_application_service] = lambda: mock_benefit_service
    application.dependency_overrides[get_client_application_service] = lambda: mock_client_service
    return application


@pytest.fixture
def client(app):
    """
    Test client that never follows redirects.

    Usage:
        def test_my_endpoint(client, csrf_headers):
            response = client.post("/api/apply/start", headers=csrf_headers)
    """
    from fastapi.testclient import TestClient

    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def csrf_headers(client):
    """Headers carrying the CSRF token issued to the test client's session."""
    token = client.get("/api/csrf-token").json()["csrfToken"]
    return {"X-CSRF-Token": token}
