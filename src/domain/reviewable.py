"""
Reviewable projections.

A reviewable state is what a review validator returns once every
prerequisite holds. Fields the submission needs are non-optional here, so
the state mapper never has to re-check presence.
"""

from datetime import date
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import Field

from domain.dtos import ClientApplicationDto
from domain.state import (
    AddressInformationState,
    ApplicantInformationState,
    ApplicationYearState,
    ChildInformationState,
    CommunicationPreferencesState,
    ConfirmDentalBenefitsState,
    ContactInformationState,
    DemographicSurveyState,
    DentalBenefitsState,
    PartnerInformationState,
    RenewApplicantInformationState,
    RenewChildInformationState,
    RenewContactInformationState,
    StateModel,
    SubmissionInfoState,
    TermsAndConditionsState,
)

AgeCategoryName = Literal["children", "youth", "adults", "seniors"]
SubmittableType = Literal["adult", "adult-child", "child"]


class ReviewableApplyChild(StateModel):
    id: UUID
    age_category: AgeCategoryName
    information: ChildInformationState
    dental_insurance: bool
    has_federal_provincial_territorial_benefits: bool
    dental_benefits: Optional[DentalBenefitsState] = None


class ReviewableApplyState(StateModel):
    id: UUID
    edit_mode: bool
    submission_info: Optional[SubmissionInfoState] = None
    type_of_application: SubmittableType
    application_year: Optional[ApplicationYearState] = None
    terms_and_conditions: TermsAndConditionsState
    has_filed_taxes: bool
    date_of_birth: date
    age_category: AgeCategoryName
    all_children_under_18: Optional[bool] = None
    disability_tax_credit: Optional[bool] = None
    living_independently: Optional[bool] = None
    applicant_information: ApplicantInformationState
    marital_status: str
    partner_information: Optional[PartnerInformationState] = None
    contact_information: ContactInformationState
    communication_preferences: CommunicationPreferencesState
    # Absent for the child type, where the applicant is only the guardian
    dental_insurance: Optional[bool] = None
    has_federal_provincial_territorial_benefits: Optional[bool] = None
    dental_benefits: Optional[DentalBenefitsState] = None
    children: List[ReviewableApplyChild] = Field(default_factory=list)


class ReviewableRenewChild(StateModel):
    id: UUID
    information: RenewChildInformationState
    dental_insurance: bool
    confirm_dental_benefits: ConfirmDentalBenefitsState
    dental_benefits: Optional[DentalBenefitsState] = None


class ReviewableRenewState(StateModel):
    id: UUID
    edit_mode: bool
    submission_info: Optional[SubmissionInfoState] = None
    type_of_renewal: SubmittableType
    applicant_information: RenewApplicantInformationState
    client_application: ClientApplicationDto
    has_marital_status_changed: bool
    marital_status: Optional[str] = None
    partner_information: Optional[PartnerInformationState] = None
    has_address_changed: bool
    address_information: Optional[AddressInformationState] = None
    contact_information: RenewContactInformationState
    communication_preferences: Optional[CommunicationPreferencesState] = None
    dental_insurance: Optional[bool] = None
    confirm_dental_benefits: Optional[ConfirmDentalBenefitsState] = None
    dental_benefits: Optional[DentalBenefitsState] = None
    children: List[ReviewableRenewChild] = Field(default_factory=list)


class ReviewableProtectedChild(StateModel):
    id: UUID
    first_name: str
    last_name: str
    client_number: Optional[str] = None
    dental_insurance: bool
    demographic_survey: DemographicSurveyState


class ReviewableProtectedRenewState(StateModel):
    id: UUID
    edit_mode: bool
    submission_info: Optional[SubmissionInfoState] = None
    client_application: ClientApplicationDto
    dental_insurance: bool
    confirm_dental_benefits: ConfirmDentalBenefitsState
    dental_benefits: Optional[DentalBenefitsState] = None
    demographic_survey: DemographicSurveyState
    marital_status: Optional[str] = None
    partner_information: Optional[PartnerInformationState] = None
    has_address_changed: Optional[bool] = None
    address_information: Optional[AddressInformationState] = None
    contact_information: Optional[RenewContactInformationState] = None
    children: List[ReviewableProtectedChild] = Field(default_factory=list)
