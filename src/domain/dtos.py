"""
Data transfer objects exchanged between the wizard and the mapping layer.

DTOs are flat, named-field projections of a completed applicant record. They
enforce the required shape, so mapping them to wire entities is total.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TypeOfApplicationDto = Literal["adult", "adult-child", "child"]


class DtoModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class ApplicantInformationDto(DtoModel):
    first_name: str
    last_name: str
    marital_status: Optional[str] = None
    social_insurance_number: str
    client_id: Optional[str] = None
    client_number: Optional[str] = None


class PartnerInformationDto(DtoModel):
    confirm: bool
    date_of_birth: date
    first_name: str
    last_name: str
    social_insurance_number: str


class ContactInformationDto(DtoModel):
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
    phone_number: Optional[str] = None
    phone_number_alt: Optional[str] = None
    email: Optional[str] = None


class CommunicationPreferencesDto(DtoModel):
    preferred_language: str
    preferred_method: str
    email: Optional[str] = None


class DemographicSurveyDto(DtoModel):
    indigenous_status: Optional[str] = None
    first_nations: List[str] = Field(default_factory=list)
    disability_status: Optional[str] = None
    ethnic_groups: List[str] = Field(default_factory=list)
    another_ethnic_group: Optional[str] = None
    location_born_status: Optional[str] = None
    gender_status: Optional[str] = None


class ChildInformationDto(DtoModel):
    first_name: str
    last_name: str
    date_of_birth: date
    is_parent: bool
    social_insurance_number: Optional[str] = None
    client_number: Optional[str] = None


class ChildDto(DtoModel):
    information: ChildInformationDto
    dental_insurance: bool
    dental_benefits: List[str] = Field(default_factory=list)
    demographic_survey: Optional[DemographicSurveyDto] = None


class ClientApplicationDto(DtoModel):
    """An existing client's application as known by the benefits system."""

    applicant_information: ApplicantInformationDto
    children: List[ChildDto] = Field(default_factory=list)
    communication_preferences: CommunicationPreferencesDto
    contact_information: ContactInformationDto
    date_of_birth: date
    dental_benefits: List[str] = Field(default_factory=list)
    dental_insurance: Optional[bool] = None
    disability_tax_credit: Optional[bool] = None
    has_applied_before_april_30_2024: bool
    has_filed_taxes: bool
    living_independently: Optional[bool] = None
    partner_information: Optional[PartnerInformationDto] = None
    type_of_application: TypeOfApplicationDto


class BenefitApplicationDto(DtoModel):
    """A new or renewed application ready for submission."""

    applicant_information: ApplicantInformationDto
    children: List[ChildDto] = Field(default_factory=list)
    communication_preferences: CommunicationPreferencesDto
    contact_information: ContactInformationDto
    date_of_birth: date
    dental_benefits: List[str] = Field(default_factory=list)
    dental_insurance: bool
    demographic_survey: Optional[DemographicSurveyDto] = None
    disability_tax_credit: Optional[bool] = None
    living_independently: Optional[bool] = None
    partner_information: Optional[PartnerInformationDto] = None
    type_of_application: TypeOfApplicationDto


class ClientApplicationBasicInfoRequestDto(DtoModel):
    first_name: str
    last_name: str
    date_of_birth: date
    client_number: str


class ClientApplicationSinRequestDto(DtoModel):
    sin: str
