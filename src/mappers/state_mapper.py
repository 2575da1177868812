"""
Reviewable state to BenefitApplicationDto.

The apply flow collects every field itself. The renew flows start from the
client application already on file and overlay only what the applicant
reported as changed.
"""

from typing import List, Optional, Sequence

from domain.dtos import (
    ApplicantInformationDto,
    BenefitApplicationDto,
    ChildDto,
    ChildInformationDto,
    ClientApplicationDto,
    CommunicationPreferencesDto,
    ContactInformationDto,
    DemographicSurveyDto,
    PartnerInformationDto,
)
from domain.errors import MalformedUpstreamData
from domain.reviewable import (
    ReviewableApplyChild,
    ReviewableApplyState,
    ReviewableProtectedChild,
    ReviewableProtectedRenewState,
    ReviewableRenewChild,
    ReviewableRenewState,
)
from domain.state import (
    AddressInformationState,
    ConfirmDentalBenefitsState,
    DemographicSurveyState,
    DentalBenefitsState,
    PartnerInformationState,
    RenewContactInformationState,
)
from services.logging_config import get_logger

logger = get_logger(__name__)


def dental_benefit_ids(benefits: Optional[DentalBenefitsState]) -> List[str]:
    """Selected federal and provincial/territorial program ids."""
    if benefits is None:
        return []
    ids = []
    if benefits.has_federal_benefits and benefits.federal_social_program:
        ids.append(benefits.federal_social_program)
    if benefits.has_provincial_territorial_benefits and benefits.provincial_territorial_social_program:
        ids.append(benefits.provincial_territorial_social_program)
    return ids


def _partner_dto(partner: Optional[PartnerInformationState]) -> Optional[PartnerInformationDto]:
    if partner is None:
        return None
    return PartnerInformationDto(
        confirm=partner.confirm,
        date_of_birth=partner.date_of_birth,
        first_name=partner.first_name,
        last_name=partner.last_name,
        social_insurance_number=partner.social_insurance_number,
    )


# =============================================================================
# APPLY
# =============================================================================

def _apply_child_dto(child: ReviewableApplyChild) -> ChildDto:
    information = child.information
    return ChildDto(
        information=ChildInformationDto(
            first_name=information.first_name,
            last_name=information.last_name,
            date_of_birth=information.date_of_birth,
            is_parent=information.is_parent,
            social_insurance_number=information.social_insurance_number if information.has_social_insurance_number else None,
        ),
        dental_insurance=child.dental_insurance,
        dental_benefits=dental_benefit_ids(child.dental_benefits),
    )


def apply_state_to_dto(state: ReviewableApplyState) -> BenefitApplicationDto:
    applicant = state.applicant_information
    return BenefitApplicationDto(
        applicant_information=ApplicantInformationDto(
            first_name=applicant.first_name,
            last_name=applicant.last_name,
            marital_status=state.marital_status,
            social_insurance_number=applicant.social_insurance_number,
        ),
        children=[_apply_child_dto(child) for child in state.children],
        communication_preferences=CommunicationPreferencesDto(**state.communication_preferences.model_dump()),
        contact_information=ContactInformationDto(**state.contact_information.model_dump()),
        date_of_birth=state.date_of_birth,
        dental_benefits=dental_benefit_ids(state.dental_benefits),
        # The child type only covers the dependants
        dental_insurance=bool(state.dental_insurance),
        disability_tax_credit=state.disability_tax_credit,
        living_independently=state.living_independently,
        partner_information=_partner_dto(state.partner_information),
        type_of_application=state.type_of_application,
    )


# =============================================================================
# RENEW
# =============================================================================

def _benefits_or_existing(
    confirm: Optional[ConfirmDentalBenefitsState],
    renewed: Optional[DentalBenefitsState],
    existing: Sequence[str],
) -> List[str]:
    if confirm is not None and confirm.any_changed:
        return dental_benefit_ids(renewed)
    return list(existing)


def _phone_changed(contact: Optional[RenewContactInformationState]) -> bool:
    if contact is None:
        return False
    if contact.is_new_or_updated_phone_number is not None:
        return contact.is_new_or_updated_phone_number
    return contact.phone_number is not None


def _email_changed(contact: Optional[RenewContactInformationState]) -> bool:
    if contact is None:
        return False
    if contact.is_new_or_updated_email is not None:
        return contact.is_new_or_updated_email
    return contact.email is not None


def _merge_contact(
    existing: ContactInformationDto,
    address: Optional[AddressInformationState],
    contact: Optional[RenewContactInformationState],
) -> ContactInformationDto:
    update = {}
    if address is not None:
        update.update(address.model_dump())
    if _phone_changed(contact):
        update.update(phone_number=contact.phone_number, phone_number_alt=contact.phone_number_alt)
    if _email_changed(contact):
        update.update(email=contact.email)
    return existing.model_copy(update=update)


def _merge_preferences(
    existing: ClientApplicationDto,
    preferences,
    contact: Optional[RenewContactInformationState],
) -> CommunicationPreferencesDto:
    merged = existing.communication_preferences
    if preferences is not None:
        merged = CommunicationPreferencesDto(**preferences.model_dump())
    if _email_changed(contact):
        merged = merged.model_copy(update={"email": contact.email})
    return merged


def _merge_applicant(
    existing: ClientApplicationDto,
    marital_status: Optional[str],
) -> ApplicantInformationDto:
    if marital_status is None:
        return existing.applicant_information
    return existing.applicant_information.model_copy(update={"marital_status": marital_status})


def _existing_child(existing: ClientApplicationDto, client_number: Optional[str]) -> Optional[ChildDto]:
    if client_number is None:
        return None
    return next(
        (child for child in existing.children if child.information.client_number == client_number),
        None,
    )


def _renew_child_dto(existing: ClientApplicationDto, child: ReviewableRenewChild) -> ChildDto:
    information = child.information
    on_file = _existing_child(existing, information.client_number)
    if on_file is None:
        logger.warning(f"Renewed child has no match in the client application; childId: [{child.id}]")
    return ChildDto(
        information=ChildInformationDto(
            first_name=information.first_name,
            last_name=information.last_name,
            date_of_birth=information.date_of_birth,
            is_parent=information.is_parent,
            social_insurance_number=on_file.information.social_insurance_number if on_file else None,
            client_number=information.client_number,
        ),
        dental_insurance=child.dental_insurance,
        dental_benefits=_benefits_or_existing(
            child.confirm_dental_benefits,
            child.dental_benefits,
            on_file.dental_benefits if on_file else (),
        ),
    )


def renew_state_to_dto(state: ReviewableRenewState) -> BenefitApplicationDto:
    existing = state.client_application
    children = [_renew_child_dto(existing, child) for child in state.children]

    type_of_application = state.type_of_renewal
    if type_of_application == "adult-child" and not children:
        type_of_application = "adult"

    dental_insurance = state.dental_insurance
    if dental_insurance is None:
        dental_insurance = bool(existing.dental_insurance)

    return BenefitApplicationDto(
        applicant_information=_merge_applicant(
            existing, state.marital_status if state.has_marital_status_changed else None
        ),
        children=children,
        communication_preferences=_merge_preferences(existing, state.communication_preferences, state.contact_information),
        contact_information=_merge_contact(
            existing.contact_information,
            state.address_information if state.has_address_changed else None,
            state.contact_information,
        ),
        date_of_birth=existing.date_of_birth,
        dental_benefits=_benefits_or_existing(state.confirm_dental_benefits, state.dental_benefits, existing.dental_benefits),
        dental_insurance=dental_insurance,
        disability_tax_credit=existing.disability_tax_credit,
        living_independently=existing.living_independently,
        partner_information=(
            _partner_dto(state.partner_information)
            if state.has_marital_status_changed
            else existing.partner_information
        ),
        type_of_application=type_of_application,
    )


# =============================================================================
# PROTECTED RENEW
# =============================================================================

def _survey_dto(survey: Optional[DemographicSurveyState]) -> Optional[DemographicSurveyDto]:
    if survey is None:
        return None
    return DemographicSurveyDto(**survey.model_dump())


def _protected_child_dto(existing: ClientApplicationDto, child: ReviewableProtectedChild) -> ChildDto:
    on_file = _existing_child(existing, child.client_number)
    if on_file is None:
        logger.warning(f"Selected child has no match in the client application; childId: [{child.id}]")
        raise MalformedUpstreamData(
            "BenefitApplication.Applicant.RelatedPerson[Dependant].ClientIdentification", "Client Number",
        )
    return ChildDto(
        information=on_file.information.model_copy(
            update={"first_name": child.first_name, "last_name": child.last_name}
        ),
        dental_insurance=child.dental_insurance,
        dental_benefits=list(on_file.dental_benefits),
        demographic_survey=_survey_dto(child.demographic_survey),
    )


def protected_renew_state_to_dto(state: ReviewableProtectedRenewState) -> BenefitApplicationDto:
    existing = state.client_application
    children = [_protected_child_dto(existing, child) for child in state.children]
    marital_status_changed = state.marital_status is not None

    return BenefitApplicationDto(
        applicant_information=_merge_applicant(existing, state.marital_status),
        children=children,
        communication_preferences=_merge_preferences(existing, None, state.contact_information),
        contact_information=_merge_contact(
            existing.contact_information,
            state.address_information if state.has_address_changed else None,
            state.contact_information,
        ),
        date_of_birth=existing.date_of_birth,
        dental_benefits=_benefits_or_existing(state.confirm_dental_benefits, state.dental_benefits, existing.dental_benefits),
        dental_insurance=state.dental_insurance,
        demographic_survey=_survey_dto(state.demographic_survey),
        disability_tax_credit=existing.disability_tax_credit,
        living_independently=existing.living_independently,
        partner_information=(
            _partner_dto(state.partner_information) if marital_status_changed else existing.partner_information
        ),
        type_of_application="adult-child" if children else "adult",
    )
