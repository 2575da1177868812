"""
Benefit application submission.

Maps a BenefitApplicationDto to the request entity, posts it and returns
the confirmation code assigned by the benefits system.
"""

from typing import Optional

import httpx

from config.settings import BenefitApiSettings
from domain.dtos import BenefitApplicationDto
from domain.entities import BenefitApplicationResponseEntity
from domain.errors import BenefitApiError, MalformedUpstreamData
from mappers.benefit_application_mapper import BenefitApplicationMapper
from services.benefit_api_client import BenefitApiClient
from services.logging_config import get_logger, log_performance

logger = get_logger(__name__)

BENEFIT_APPLICATION_PATH = "/dental-care/applicant-information/dts/v1/benefit-application"


class BenefitApplicationService:
    """Submits new and renewed benefit applications."""

    def __init__(
        self,
        client: BenefitApiClient,
        mapper: Optional[BenefitApplicationMapper] = None,
    ):
        self.client = client
        self.mapper = mapper or BenefitApplicationMapper()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[BenefitApiSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "BenefitApplicationService":
        return cls(BenefitApiClient(settings or BenefitApiSettings(), transport=transport))

    @log_performance("benefit_application.submit")
    async def submit(self, dto: BenefitApplicationDto) -> str:
        """
        Submit an application.

        Returns:
            The confirmation code

        Raises:
            BenefitApiError: the API failed or answered with no content
            MalformedUpstreamData: the response carries no confirmation code
        """
        entity = self.mapper.to_request_entity(dto)
        body = await self.client.post_json(BENEFIT_APPLICATION_PATH, entity.to_wire())
        if body is None:
            raise BenefitApiError("Benefit application submission returned no content")

        try:
            response = BenefitApplicationResponseEntity.model_validate(body)
        except ValueError as e:
            raise MalformedUpstreamData("BenefitApplication") from e

        confirmation_code = self.mapper.to_confirmation_code(response)
        logger.info(f"Benefit application submitted; type: [{dto.type_of_application}]")
        return confirmation_code
