"""
Apply flow API.

New applications for adults, families and children. Every endpoint lives
under /api/apply; see web.flow_api for the shared step, child, review,
submit, confirmation and clear endpoints.
"""

from uuid import uuid4

from fastapi import APIRouter, Depends, Query

from database.session_store import HttpSession
from database.state_lifecycle import StateLifecycleManager
from domain.results import RouteTarget
from domain.state import ApplyChildState, ApplyState
from mappers.state_mapper import apply_state_to_dto
from services.age_category import eligibility_by_age
from services.logging_config import get_logger
from validation.apply_review import (
    ADULT,
    apply_route,
    children_index_route,
    confirmation_route,
    review_apply_state,
    review_route,
)
from validation.review_rules import flow_params
from validation.step_schemas import (
    ApplicantInformationForm,
    ChildInformationForm,
    CommunicationPreferencesForm,
    ContactInformationForm,
    DateOfBirthForm,
    DentalInsuranceChildForm,
    DentalInsuranceForm,
    DisabilityTaxCreditForm,
    FederalProvincialTerritorialBenefitsForm,
    LivingIndependentlyForm,
    MaritalStatusForm,
    TaxFilingForm,
    TermsAndConditionsForm,
    TypeOfApplicationForm,
)
from web.csrf import verify_csrf
from web.dependencies import get_apply_manager, get_http_session
from web.flow_api import FlowApi, FlowDefinition, start_target
from web.routes import DEFAULT_LANG, redirect_to

logger = get_logger(__name__)

FIRST_ROUTE = apply_route("terms-and-conditions")


def _flow(state: ApplyState) -> str:
    return state.type_of_application or ADULT


def _applicant_sin(state: ApplyState):
    return state.applicant_information.social_insurance_number if state.applicant_information else None


APPLY_STEPS = {
    "terms-and-conditions": TermsAndConditionsForm,
    "type-application": TypeOfApplicationForm,
    "tax-filing": TaxFilingForm,
    "date-of-birth": DateOfBirthForm,
    "living-independently": LivingIndependentlyForm,
    "disability-tax-credit": DisabilityTaxCreditForm,
    "applicant-information": ApplicantInformationForm,
    "marital-status": MaritalStatusForm,
    "contact-information": ContactInformationForm,
    "communication-preference": CommunicationPreferencesForm,
    "dental-insurance": DentalInsuranceForm,
    "confirm-federal-provincial-territorial-benefits": FederalProvincialTerritorialBenefitsForm,
}

APPLY_CHILD_STEPS = {
    "information": ChildInformationForm,
    "dental-insurance": DentalInsuranceChildForm,
    "confirm-federal-provincial-territorial-benefits": FederalProvincialTerritorialBenefitsForm,
}

apply_flow = FlowApi(FlowDefinition(
    name="apply",
    manager_dependency=get_apply_manager,
    validator=review_apply_state,
    review_route=lambda state: review_route(_flow(state)),
    confirmation_route=lambda state: confirmation_route(_flow(state)),
    first_route=lambda state: FIRST_ROUTE,
    to_dto=apply_state_to_dto,
    steps=APPLY_STEPS,
    child_steps=APPLY_CHILD_STEPS,
    children_index_route=lambda state: children_index_route(_flow(state)),
    child_entry_route=lambda state: apply_route(f"{_flow(state)}/children/$childId/information"),
    child_model=ApplyChildState,
    applicant_sin=_applicant_sin,
))

router = APIRouter(prefix="/api/apply", tags=["apply"])


@router.post("/start", dependencies=[Depends(verify_csrf)])
async def start_application(
    lang: str = Query(DEFAULT_LANG),
    session: HttpSession = Depends(get_http_session),
    manager: StateLifecycleManager[ApplyState] = Depends(get_apply_manager),
):
    """Start a new application and send the user to the terms page."""
    flow_id = uuid4()
    await manager.start(flow_id, session)
    return redirect_to(start_target(FIRST_ROUTE, flow_id), lang)


@router.get("/{flow_id}/dob-eligibility")
async def dob_eligibility(
    flow_id: str,
    lang: str = Query(DEFAULT_LANG),
    session: HttpSession = Depends(get_http_session),
    manager: StateLifecycleManager[ApplyState] = Depends(get_apply_manager),
):
    """Whether coverage is open yet for the applicant's age group."""
    state = await manager.load(flow_id, session)
    if state.date_of_birth is None:
        target = RouteTarget(apply_route(f"{_flow(state)}/date-of-birth"), flow_params(state.id))
        return redirect_to(target, lang)

    result = eligibility_by_age(state.date_of_birth, manager.settings)
    return {
        "eligible": result.eligible,
        "startDate": result.start_date.isoformat() if result.start_date else None,
    }


apply_flow.register(router)
