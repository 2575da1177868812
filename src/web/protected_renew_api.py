"""
Protected renew flow API.

Renewals for signed-in clients. The client application is found from the
authenticated identity's SIN when the flow starts; its children become
renewal candidates the user selects one by one.
"""

from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, status

from database.session_store import HttpSession
from database.state_lifecycle import StateLifecycleManager
from domain.dtos import ClientApplicationSinRequestDto
from domain.results import ReviewRedirect, RouteTarget
from domain.state import ProtectedChildState, ProtectedRenewState
from mappers.state_mapper import protected_renew_state_to_dto
from services.client_application_service import ClientApplicationService
from services.logging_config import get_logger
from validation.navigation import get_single_child
from validation.renew_review import (
    PROTECTED_CONFIRMATION_ROUTE,
    PROTECTED_MEMBER_SELECTION_ROUTE,
    PROTECTED_REVIEW_ROUTE,
    protected_renew_route,
    review_protected_renew_state,
)
from validation.review_rules import flow_params
from validation.step_schemas import (
    ConfirmAddressForm,
    ConfirmDentalBenefitsForm,
    ConfirmEmailForm,
    ConfirmPhoneForm,
    DemographicSurveyForm,
    DentalInsuranceChildForm,
    DentalInsuranceForm,
    MaritalStatusForm,
    UpdateAddressForm,
    UpdateDentalBenefitsForm,
    child_state_update,
)
from web.csrf import verify_csrf
from web.dependencies import (
    get_client_application_service,
    get_http_session,
    get_identity_sin,
    get_protected_renew_manager,
)
from web.flow_api import FlowApi, FlowDefinition, start_target
from web.routes import DEFAULT_LANG, redirect_to

logger = get_logger(__name__)

PROTECTED_STEPS = {
    "dental-insurance": DentalInsuranceForm,
    "confirm-federal-provincial-territorial-benefits": ConfirmDentalBenefitsForm,
    "update-federal-provincial-territorial-benefits": UpdateDentalBenefitsForm,
    "confirm-marital-status": MaritalStatusForm,
    "confirm-address": ConfirmAddressForm,
    "update-address": UpdateAddressForm,
    "confirm-phone": ConfirmPhoneForm,
    "confirm-email": ConfirmEmailForm,
    "demographic-survey": DemographicSurveyForm,
}

PROTECTED_CHILD_STEPS = {
    "dental-insurance": DentalInsuranceChildForm,
    "demographic-survey": DemographicSurveyForm,
}

protected_renew_flow = FlowApi(FlowDefinition(
    name="protected-renew",
    manager_dependency=get_protected_renew_manager,
    validator=review_protected_renew_state,
    review_route=lambda state: PROTECTED_REVIEW_ROUTE,
    confirmation_route=lambda state: PROTECTED_CONFIRMATION_ROUTE,
    first_route=lambda state: PROTECTED_MEMBER_SELECTION_ROUTE,
    to_dto=protected_renew_state_to_dto,
    steps=PROTECTED_STEPS,
    child_steps=PROTECTED_CHILD_STEPS,
    children_index_route=lambda state: PROTECTED_MEMBER_SELECTION_ROUTE,
    child_entry_route=lambda state: protected_renew_route("$childId/dental-insurance"),
    applicant_sin=lambda state: state.client_application.applicant_information.social_insurance_number,
))

# Every protected endpoint requires the authenticated identity
router = APIRouter(
    prefix="/api/protected/renew",
    tags=["protected-renew"],
    dependencies=[Depends(get_identity_sin)],
)


@router.post("/start", dependencies=[Depends(verify_csrf)])
async def start_protected_renewal(
    lang: str = Query(DEFAULT_LANG),
    sin: str = Depends(get_identity_sin),
    session: HttpSession = Depends(get_http_session),
    manager: StateLifecycleManager[ProtectedRenewState] = Depends(get_protected_renew_manager),
    client_service: ClientApplicationService = Depends(get_client_application_service),
):
    """Find the signed-in client's application and start a renewal from it."""
    client_application = await client_service.find_by_sin(ClientApplicationSinRequestDto(sin=sin))
    if client_application is None:
        logger.info("Protected renewal requested without a client application on file")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No client application on file")

    children = [
        ProtectedChildState(
            id=uuid4(),
            first_name=child.information.first_name,
            last_name=child.information.last_name,
            client_number=child.information.client_number,
        )
        for child in client_application.children
    ]

    flow_id = uuid4()
    await manager.start(flow_id, session, client_application=client_application, children=children)
    return redirect_to(start_target(PROTECTED_MEMBER_SELECTION_ROUTE, flow_id), lang)


@router.post("/{flow_id}/children/{child_id}/deselect", dependencies=[Depends(verify_csrf)])
async def deselect_child(
    flow_id: str,
    child_id: str,
    lang: str = Query(DEFAULT_LANG),
    session: HttpSession = Depends(get_http_session),
    manager: StateLifecycleManager[ProtectedRenewState] = Depends(get_protected_renew_manager),
):
    """Leave a child out of this renewal."""
    state = await manager.load(flow_id, session)
    params = flow_params(state.id)
    blocked = protected_renew_flow.guard(state, "protected-renew/children/deselect")
    if blocked is not None:
        return redirect_to(blocked, lang)

    single = get_single_child(state, child_id, PROTECTED_MEMBER_SELECTION_ROUTE, params)
    if isinstance(single, ReviewRedirect):
        return redirect_to(single.target, lang)

    update = child_state_update(
        state.children, single.child.id, {"dental_insurance": None, "demographic_survey": None},
    )
    await manager.save(flow_id, session, update.partial)
    return redirect_to(RouteTarget(PROTECTED_MEMBER_SELECTION_ROUTE, params), lang)


protected_renew_flow.register(router)
