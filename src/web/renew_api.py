"""
Renew flow API.

Public renewals: the applicant identifies themselves by name, birth date
and client number, then confirms or updates what is on file.
"""

from uuid import uuid4

from fastapi import APIRouter, Depends, Query, Request

from database.session_store import HttpSession
from database.state_lifecycle import StateLifecycleManager
from domain.state import RenewChildState, RenewState
from mappers.state_mapper import renew_state_to_dto
from services.client_application_service import ClientApplicationService
from services.logging_config import get_logger
from validation.renew_review import (
    ADULT,
    children_index_route,
    confirmation_route,
    renew_route,
    review_renew_state,
    review_route,
)
from validation.step_schemas import (
    FORM_ERROR_KEY,
    CommunicationPreferencesForm,
    ConfirmAddressForm,
    ConfirmDentalBenefitsForm,
    ConfirmEmailForm,
    ConfirmMaritalStatusForm,
    ConfirmPhoneForm,
    DentalInsuranceChildForm,
    DentalInsuranceForm,
    RenewApplicantInformationForm,
    RenewChildInformationForm,
    TypeOfRenewalForm,
    UpdateAddressForm,
    UpdateDentalBenefitsForm,
)
from web.csrf import verify_csrf
from web.dependencies import get_client_application_service, get_http_session, get_renew_manager
from web.flow_api import FlowApi, FlowDefinition, read_form_data, start_target
from web.routes import DEFAULT_LANG, redirect_to

logger = get_logger(__name__)

FIRST_ROUTE = renew_route("type-renewal")
APPLICANT_INFORMATION_STEP = "applicant-information"
NO_APPLICATION_MESSAGE = "We could not find an application matching the information provided"


def _flow(state: RenewState) -> str:
    return state.type_of_renewal or ADULT


def _applicant_sin(state: RenewState):
    if state.client_application is None:
        return None
    return state.client_application.applicant_information.social_insurance_number


RENEW_STEPS = {
    "type-renewal": TypeOfRenewalForm,
    APPLICANT_INFORMATION_STEP: RenewApplicantInformationForm,
    "confirm-marital-status": ConfirmMaritalStatusForm,
    "confirm-address": ConfirmAddressForm,
    "update-address": UpdateAddressForm,
    "confirm-phone": ConfirmPhoneForm,
    "confirm-email": ConfirmEmailForm,
    "communication-preference": CommunicationPreferencesForm,
    "dental-insurance": DentalInsuranceForm,
    "confirm-federal-provincial-territorial-benefits": ConfirmDentalBenefitsForm,
    "update-federal-provincial-territorial-benefits": UpdateDentalBenefitsForm,
}

RENEW_CHILD_STEPS = {
    "information": RenewChildInformationForm,
    "dental-insurance": DentalInsuranceChildForm,
    "confirm-federal-provincial-territorial-benefits": ConfirmDentalBenefitsForm,
    "update-federal-provincial-territorial-benefits": UpdateDentalBenefitsForm,
}

renew_flow = FlowApi(FlowDefinition(
    name="renew",
    manager_dependency=get_renew_manager,
    validator=review_renew_state,
    review_route=lambda state: review_route(_flow(state)),
    confirmation_route=lambda state: confirmation_route(_flow(state)),
    first_route=lambda state: FIRST_ROUTE,
    to_dto=renew_state_to_dto,
    steps=RENEW_STEPS,
    child_steps=RENEW_CHILD_STEPS,
    children_index_route=lambda state: children_index_route(_flow(state)),
    child_entry_route=lambda state: renew_route(f"{_flow(state)}/children/$childId/information"),
    child_model=RenewChildState,
    applicant_sin=_applicant_sin,
))

router = APIRouter(prefix="/api/renew", tags=["renew"])


@router.post("/start", dependencies=[Depends(verify_csrf)])
async def start_renewal(
    lang: str = Query(DEFAULT_LANG),
    session: HttpSession = Depends(get_http_session),
    manager: StateLifecycleManager[RenewState] = Depends(get_renew_manager),
):
    flow_id = uuid4()
    await manager.start(flow_id, session)
    return redirect_to(start_target(FIRST_ROUTE, flow_id), lang)


@router.post(f"/{{flow_id}}/steps/{APPLICANT_INFORMATION_STEP}", dependencies=[Depends(verify_csrf)])
async def submit_applicant_information(
    flow_id: str,
    request: Request,
    lang: str = Query(DEFAULT_LANG),
    session: HttpSession = Depends(get_http_session),
    manager: StateLifecycleManager[RenewState] = Depends(get_renew_manager),
    client_service: ClientApplicationService = Depends(get_client_application_service),
):
    """Identify the applicant and attach the client application on file."""

    async def find_client_application(form: RenewApplicantInformationForm, state):
        client_application = await client_service.find_by_basic_info(form.to_basic_info_request())
        if client_application is None:
            logger.info("Renewal applicant not matched to a client application")
            return {}, {FORM_ERROR_KEY: [NO_APPLICATION_MESSAGE]}
        return {"client_application": client_application}, {}

    data = await read_form_data(request)
    return await renew_flow.handle_step(
        flow_id, APPLICANT_INFORMATION_STEP, data, session, manager, lang, enrich=find_client_application,
    )


renew_flow.register(router)
