"""
Client application lookup.

Finds the application an existing client already has on file, either by
SIN (authenticated renewal) or by name, birth date and client number
(public renewal).
"""

from typing import Any, Dict, Optional

import httpx

from config.settings import BenefitApiSettings
from domain.dtos import (
    ClientApplicationBasicInfoRequestDto,
    ClientApplicationDto,
    ClientApplicationSinRequestDto,
)
from domain.entities import ClientApplicationEntity
from domain.errors import MalformedUpstreamData
from mappers.client_application_mapper import ClientApplicationMapper
from services.benefit_api_client import BenefitApiClient
from services.logging_config import get_logger, log_performance

logger = get_logger(__name__)

CLIENT_APPLICATION_PATH = "/dental-care/applicant-information/dts/v1/client-application"


class ClientApplicationService:
    """Looks up existing client applications."""

    def __init__(
        self,
        client: BenefitApiClient,
        mapper: Optional[ClientApplicationMapper] = None,
    ):
        self.client = client
        self.mapper = mapper or ClientApplicationMapper()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[BenefitApiSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ClientApplicationService":
        return cls(BenefitApiClient(settings or BenefitApiSettings(), transport=transport))

    async def _find(self, payload: Dict[str, Any]) -> Optional[ClientApplicationDto]:
        body = await self.client.post_json(CLIENT_APPLICATION_PATH, payload)
        if body is None:
            logger.info("No client application found")
            return None

        try:
            entity = ClientApplicationEntity.model_validate(body)
        except ValueError as e:
            raise MalformedUpstreamData("BenefitApplication") from e
        return self.mapper.to_dto(entity)

    @log_performance("client_application.find_by_sin")
    async def find_by_sin(self, request: ClientApplicationSinRequestDto) -> Optional[ClientApplicationDto]:
        entity = self.mapper.to_sin_request_entity(request)
        return await self._find(entity.to_wire())

    @log_performance("client_application.find_by_basic_info")
    async def find_by_basic_info(self, request: ClientApplicationBasicInfoRequestDto) -> Optional[ClientApplicationDto]:
        entity = self.mapper.to_basic_info_request_entity(request)
        return await self._find(entity.to_wire())
