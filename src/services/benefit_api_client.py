"""
HTTP client for the benefits system's interop API.

All calls are JSON POSTs authenticated with the Ocp-Apim-Subscription-Key
header. Transport failures and 5xx responses are retried with exponential
backoff; any other non-success status fails immediately.
"""

from typing import Any, Dict, Optional

import httpx

from config.settings import BenefitApiSettings
from domain.errors import BenefitApiError
from resilience.retry import RetryConfig, RetryExhausted, retry_call
from services.logging_config import get_logger

logger = get_logger(__name__)

SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"

# Statuses that mean "nothing on file" rather than failure
NOT_FOUND_STATUSES = (204, 404)


class TransientApiError(BenefitApiError):
    """A 5xx response worth retrying."""


class BenefitApiClient:
    """
    Thin async JSON client with retries.

    Usage:
        client = BenefitApiClient(BenefitApiSettings())
        body = await client.post_json("/benefit-application", payload)
    """

    def __init__(
        self,
        settings: BenefitApiSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.transport = transport
        self.retry_config = RetryConfig.from_settings(
            settings,
            retryable_exceptions=(httpx.TransportError, TransientApiError),
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.base_uri,
            headers={SUBSCRIPTION_KEY_HEADER: self.settings.subscription_key},
            timeout=httpx.Timeout(self.settings.timeout_seconds, connect=10.0),
            transport=self.transport,
        )

    async def _post_once(self, path: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        async with self._client() as client:
            response = await client.post(path, json=payload)

        if response.status_code in NOT_FOUND_STATUSES:
            return None
        if response.status_code >= 500:
            raise TransientApiError(
                f"POST {path} failed with status {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            logger.error(f"POST {path} rejected: {response.status_code} {response.text}")
            raise BenefitApiError(
                f"POST {path} failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise BenefitApiError(f"POST {path} returned a non-JSON body") from e

    async def post_json(self, path: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        POST payload and return the decoded body.

        Returns:
            The JSON body, or None when the API reports no content / not found

        Raises:
            BenefitApiError: non-retryable failure or retries exhausted
        """
        try:
            return await retry_call(self._post_once, self.retry_config, path, payload)
        except RetryExhausted as e:
            last = e.last_exception
            logger.error(f"POST {path} failed after {e.attempts} attempts: {last}")
            raise BenefitApiError(
                f"POST {path} failed after {e.attempts} attempts",
                status_code=getattr(last, "status_code", None),
            ) from last
