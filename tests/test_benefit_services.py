"""Tests for the outbound benefits API client and services."""

import json

import httpx
import pytest

from config.settings import BenefitApiSettings
from domain.dtos import ClientApplicationBasicInfoRequestDto, ClientApplicationSinRequestDto
from domain.errors import BenefitApiError, MalformedUpstreamData
from fixtures.wizard_states import (
    APPLICANT_SIN,
    CLIENT_NUMBER,
    SENIOR_BIRTH_DATE,
    apply_state,
    client_application_dto,
    client_application_payload,
)
from mappers.state_mapper import apply_state_to_dto
from services.benefit_api_client import SUBSCRIPTION_KEY_HEADER, BenefitApiClient
from services.benefit_application_service import BENEFIT_APPLICATION_PATH, BenefitApplicationService
from services.client_application_service import CLIENT_APPLICATION_PATH, ClientApplicationService
from validation.apply_review import review_apply_state
from validation.review_rules import ReviewContext


@pytest.fixture
def api_settings():
    return BenefitApiSettings(
        base_uri="http://benefits.test/api",
        subscription_key="secret-key",
        retry_max_attempts=3,
        retry_base_delay=0.0,
    )


class RecordingTransport:
    """Serves canned responses and records the requests it received."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def benefit_application_dto(wizard_settings):
    outcome = review_apply_state(apply_state(), context=ReviewContext(settings=wizard_settings))
    return apply_state_to_dto(outcome.state)


class TestBenefitApiClient:

    @pytest.mark.asyncio
    async def test_posts_json_with_subscription_key(self, api_settings):
        recorder = RecordingTransport(httpx.Response(200, json={"ok": True}))
        client = BenefitApiClient(api_settings, transport=recorder.transport)

        assert await client.post_json("/path", {"a": 1}) == {"ok": True}

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "http://benefits.test/api/path"
        assert request.headers[SUBSCRIPTION_KEY_HEADER] == "secret-key"
        assert json.loads(request.content) == {"a": 1}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [204, 404])
    async def test_nothing_on_file(self, api_settings, status_code):
        recorder = RecordingTransport(httpx.Response(status_code))
        client = BenefitApiClient(api_settings, transport=recorder.transport)

        assert await client.post_json("/path", {}) is None

    @pytest.mark.asyncio
    async def test_server_errors_retried(self, api_settings):
        recorder = RecordingTransport(httpx.Response(503), httpx.Response(200, json={"ok": True}))
        client = BenefitApiClient(api_settings, transport=recorder.transport)

        assert await client.post_json("/path", {}) == {"ok": True}
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_retries_exhausted(self, api_settings):
        recorder = RecordingTransport(httpx.Response(500))
        client = BenefitApiClient(api_settings, transport=recorder.transport)

        with pytest.raises(BenefitApiError) as exc_info:
            await client.post_json("/path", {})

        assert exc_info.value.status_code == 500
        assert len(recorder.requests) == 3

    @pytest.mark.asyncio
    async def test_transport_errors_retried(self, api_settings):
        recorder = RecordingTransport(httpx.ConnectError("refused"), httpx.Response(200, json={}))
        client = BenefitApiClient(api_settings, transport=recorder.transport)

        assert await client.post_json("/path", {}) == {}
        assert len(recorder.requests) == 2

    @pytest.mark.asyncio
    async def test_client_errors_not_retried(self, api_settings):
        recorder = RecordingTransport(httpx.Response(400, json={"error": "bad"}))
        client = BenefitApiClient(api_settings, transport=recorder.transport)

        with pytest.raises(BenefitApiError) as exc_info:
            await client.post_json("/path", {})

        assert exc_info.value.status_code == 400
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_non_json_body(self, api_settings):
        recorder = RecordingTransport(httpx.Response(200, text="<html>"))
        client = BenefitApiClient(api_settings, transport=recorder.transport)

        with pytest.raises(BenefitApiError):
            await client.post_json("/path", {})


class TestBenefitApplicationService:

    @pytest.mark.asyncio
    async def test_submit_returns_confirmation_code(self, api_settings, wizard_settings):
        recorder = RecordingTransport(httpx.Response(200, json={
            "BenefitApplication": {"BenefitApplicationIdentification": [{"IdentificationID": "CONF-42"}]}
        }))
        service = BenefitApplicationService.from_settings(api_settings, transport=recorder.transport)

        code = await service.submit(benefit_application_dto(wizard_settings))

        assert code == "CONF-42"
        request = recorder.requests[0]
        assert request.url.path == f"/api{BENEFIT_APPLICATION_PATH}"
        body = json.loads(request.content)
        assert body["BenefitApplication"]["Applicant"]["PersonSINIdentification"] == {"IdentificationID": APPLICANT_SIN}

    @pytest.mark.asyncio
    async def test_no_content(self, api_settings, wizard_settings):
        recorder = RecordingTransport(httpx.Response(204))
        service = BenefitApplicationService.from_settings(api_settings, transport=recorder.transport)

        with pytest.raises(BenefitApiError):
            await service.submit(benefit_application_dto(wizard_settings))

    @pytest.mark.asyncio
    async def test_missing_confirmation_code(self, api_settings, wizard_settings):
        recorder = RecordingTransport(httpx.Response(200, json={"BenefitApplication": {}}))
        service = BenefitApplicationService.from_settings(api_settings, transport=recorder.transport)

        with pytest.raises(MalformedUpstreamData):
            await service.submit(benefit_application_dto(wizard_settings))


class TestClientApplicationService:

    @pytest.mark.asyncio
    async def test_find_by_sin(self, api_settings):
        recorder = RecordingTransport(httpx.Response(200, json=client_application_payload()))
        service = ClientApplicationService.from_settings(api_settings, transport=recorder.transport)

        dto = await service.find_by_sin(ClientApplicationSinRequestDto(sin=APPLICANT_SIN))

        assert dto == client_application_dto()
        request = recorder.requests[0]
        assert request.url.path == f"/api{CLIENT_APPLICATION_PATH}"
        assert json.loads(request.content) == {
            "Applicant": {"PersonSINIdentification": {"IdentificationID": APPLICANT_SIN}}
        }

    @pytest.mark.asyncio
    async def test_find_by_basic_info_not_found(self, api_settings):
        recorder = RecordingTransport(httpx.Response(404))
        service = ClientApplicationService.from_settings(api_settings, transport=recorder.transport)

        request = ClientApplicationBasicInfoRequestDto(
            first_name="Jane",
            last_name="Doe",
            date_of_birth=SENIOR_BIRTH_DATE,
            client_number=CLIENT_NUMBER,
        )

        assert await service.find_by_basic_info(request) is None

    @pytest.mark.asyncio
    async def test_unparseable_body(self, api_settings):
        recorder = RecordingTransport(httpx.Response(200, json={"BenefitApplication": {}}))
        service = ClientApplicationService.from_settings(api_settings, transport=recorder.transport)

        with pytest.raises(MalformedUpstreamData):
            await service.find_by_sin(ClientApplicationSinRequestDto(sin=APPLICANT_SIN))
