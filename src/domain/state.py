"""
Wizard state records.

One record per in-progress flow instance. Every sub-record is optional and
is present only once its step has been completed; the step schemas guarantee
that a present sub-record is internally complete. Records are frozen: the
lifecycle manager returns new snapshots instead of mutating shared ones.
"""

from datetime import date, datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.dtos import ClientApplicationDto

TypeOfApplication = Literal["adult", "adult-child", "child", "delegate"]


class StateModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# =============================================================================
# SHARED SUB-RECORDS
# =============================================================================

class SubmissionInfoState(StateModel):
    confirmation_code: Optional[str] = None
    submitted_on: datetime


class TermsAndConditionsState(StateModel):
    acknowledge_terms: bool
    acknowledge_privacy: bool
    share_data: bool


class PartnerInformationState(StateModel):
    confirm: bool
    first_name: str
    last_name: str
    date_of_birth: date
    social_insurance_number: str


class DentalBenefitsState(StateModel):
    has_federal_benefits: bool
    federal_social_program: Optional[str] = None
    has_provincial_territorial_benefits: bool
    provincial_territorial_social_program: Optional[str] = None
    province: Optional[str] = None


class CommunicationPreferencesState(StateModel):
    preferred_language: str
    preferred_method: str
    email: Optional[str] = None


class AddressInformationState(StateModel):
    copy_mailing_address: bool
    home_address: Optional[str] = None
    home_apartment: Optional[str] = None
    home_city: Optional[str] = None
    home_country: Optional[str] = None
    home_postal_code: Optional[str] = None
    home_province: Optional[str] = None
    mailing_address: str
    mailing_apartment: Optional[str] = None
    mailing_city: str
    mailing_country: str
    mailing_postal_code: Optional[str] = None
    mailing_province: Optional[str] = None


class WizardState(StateModel):
    """Fields every flow carries."""

    id: UUID
    last_updated_on: datetime
    edit_mode: bool = False
    submission_info: Optional[SubmissionInfoState] = None

    @property
    def is_submitted(self) -> bool:
        return self.submission_info is not None


# =============================================================================
# APPLY FLOW
# =============================================================================

class ApplicationYearState(StateModel):
    application_year_id: str
    tax_year: str
    dependent_eligibility_end_date: Optional[date] = None


class ApplicantInformationState(StateModel):
    first_name: str
    last_name: str
    social_insurance_number: str


class ContactInformationState(AddressInformationState):
    phone_number: Optional[str] = None
    phone_number_alt: Optional[str] = None
    email: Optional[str] = None


class ChildInformationState(StateModel):
    first_name: str
    last_name: str
    date_of_birth: date
    is_parent: bool
    has_social_insurance_number: bool
    social_insurance_number: Optional[str] = None


class ApplyChildState(StateModel):
    id: UUID
    information: Optional[ChildInformationState] = None
    dental_insurance: Optional[bool] = None
    has_federal_provincial_territorial_benefits: Optional[bool] = None
    dental_benefits: Optional[DentalBenefitsState] = None

    @property
    def is_new(self) -> bool:
        return (
            self.information is None
            or self.dental_insurance is None
            or self.has_federal_provincial_territorial_benefits is None
        )


class ApplyState(WizardState):
    application_year: Optional[ApplicationYearState] = None
    terms_and_conditions: Optional[TermsAndConditionsState] = None
    type_of_application: Optional[TypeOfApplication] = None
    has_filed_taxes: Optional[bool] = None
    date_of_birth: Optional[date] = None
    all_children_under_18: Optional[bool] = None
    disability_tax_credit: Optional[bool] = None
    living_independently: Optional[bool] = None
    applicant_information: Optional[ApplicantInformationState] = None
    marital_status: Optional[str] = None
    partner_information: Optional[PartnerInformationState] = None
    contact_information: Optional[ContactInformationState] = None
    communication_preferences: Optional[CommunicationPreferencesState] = None
    dental_insurance: Optional[bool] = None
    has_federal_provincial_territorial_benefits: Optional[bool] = None
    dental_benefits: Optional[DentalBenefitsState] = None
    children: List[ApplyChildState] = Field(default_factory=list)


# =============================================================================
# RENEW FLOW
# =============================================================================

class RenewApplicantInformationState(StateModel):
    first_name: str
    last_name: str
    date_of_birth: date
    client_number: str


class RenewContactInformationState(StateModel):
    is_new_or_updated_phone_number: Optional[bool] = None
    is_new_or_updated_email: Optional[bool] = None
    phone_number: Optional[str] = None
    phone_number_alt: Optional[str] = None
    email: Optional[str] = None


class ConfirmDentalBenefitsState(StateModel):
    federal_benefits_changed: bool
    provincial_territorial_benefits_changed: bool

    @property
    def any_changed(self) -> bool:
        return self.federal_benefits_changed or self.provincial_territorial_benefits_changed


class RenewChildInformationState(StateModel):
    first_name: str
    last_name: str
    date_of_birth: date
    is_parent: bool
    client_number: Optional[str] = None


class RenewChildState(StateModel):
    id: UUID
    information: Optional[RenewChildInformationState] = None
    dental_insurance: Optional[bool] = None
    confirm_dental_benefits: Optional[ConfirmDentalBenefitsState] = None
    dental_benefits: Optional[DentalBenefitsState] = None

    @property
    def is_new(self) -> bool:
        return (
            self.information is None
            or self.dental_insurance is None
            or self.confirm_dental_benefits is None
        )


class RenewState(WizardState):
    type_of_renewal: Optional[TypeOfApplication] = None
    applicant_information: Optional[RenewApplicantInformationState] = None
    # Found by the applicant-information step from name, birth date and client number
    client_application: Optional[ClientApplicationDto] = None
    has_marital_status_changed: Optional[bool] = None
    marital_status: Optional[str] = None
    partner_information: Optional[PartnerInformationState] = None
    has_address_changed: Optional[bool] = None
    address_information: Optional[AddressInformationState] = None
    contact_information: Optional[RenewContactInformationState] = None
    communication_preferences: Optional[CommunicationPreferencesState] = None
    dental_insurance: Optional[bool] = None
    confirm_dental_benefits: Optional[ConfirmDentalBenefitsState] = None
    dental_benefits: Optional[DentalBenefitsState] = None
    children: List[RenewChildState] = Field(default_factory=list)


# =============================================================================
# PROTECTED RENEW FLOW
# =============================================================================

class DemographicSurveyState(StateModel):
    indigenous_status: Optional[str] = None
    first_nations: List[str] = Field(default_factory=list)
    disability_status: Optional[str] = None
    ethnic_groups: List[str] = Field(default_factory=list)
    another_ethnic_group: Optional[str] = None
    location_born_status: Optional[str] = None
    gender_status: Optional[str] = None


class ProtectedChildState(StateModel):
    id: UUID
    first_name: str
    last_name: str
    client_number: Optional[str] = None
    dental_insurance: Optional[bool] = None
    demographic_survey: Optional[DemographicSurveyState] = None

    @property
    def is_new(self) -> bool:
        # Children start out unselected; answering dental insurance selects them
        return self.dental_insurance is None


class ProtectedRenewState(WizardState):
    client_application: ClientApplicationDto
    dental_insurance: Optional[bool] = None
    confirm_dental_benefits: Optional[ConfirmDentalBenefitsState] = None
    dental_benefits: Optional[DentalBenefitsState] = None
    demographic_survey: Optional[DemographicSurveyState] = None
    marital_status: Optional[str] = None
    partner_information: Optional[PartnerInformationState] = None
    has_address_changed: Optional[bool] = None
    address_information: Optional[AddressInformationState] = None
    contact_information: Optional[RenewContactInformationState] = None
    children: List[ProtectedChildState] = Field(default_factory=list)
