"""
Benefit application mapping.

Builds the submission request entity from a BenefitApplicationDto and reads
the confirmation code back out of the response entity.
"""

from typing import Optional

from config.settings import WizardSettings, get_wizard_settings
from domain.dtos import BenefitApplicationDto
from domain.entities import (
    Applicant,
    ApplicantDetail,
    BenefitApplication,
    BenefitApplicationRequestEntity,
    BenefitApplicationResponseEntity,
    Identification,
    PersonContactInformation,
    PersonLanguage,
    PersonMaritalStatus,
    ReferenceData,
)
from domain.errors import MalformedUpstreamData
from mappers import wire_parts as wire
from mappers.client_application_mapper import to_category_code


class BenefitApplicationMapper:
    """Maps benefit applications to the submission API's entities."""

    def __init__(self, settings: Optional[WizardSettings] = None):
        self.settings = settings or get_wizard_settings()

    def to_request_entity(self, dto: BenefitApplicationDto) -> BenefitApplicationRequestEntity:
        info = dto.applicant_information
        contact = dto.contact_information
        preferences = dto.communication_preferences

        related = []
        if dto.partner_information:
            related.append(wire.to_partner_entity(dto.partner_information))
        related.extend(wire.to_child_entity(child) for child in dto.children)

        applicant = Applicant(
            ApplicantDetail=ApplicantDetail(
                DisabilityTaxCreditIndicator=dto.disability_tax_credit,
                InsurancePlan=wire.to_insurance_plan(dto.dental_benefits),
                LivingIndependentlyIndicator=dto.living_independently,
                PrivateDentalInsuranceIndicator=dto.dental_insurance,
            ),
            ClientIdentification=wire.to_client_identifications(info.client_id, info.client_number) or None,
            MailingSameAsHomeIndicator=contact.copy_mailing_address,
            PersonBirthDate=wire.to_date_entity(dto.date_of_birth),
            PersonContactInformation=[
                PersonContactInformation(
                    Address=wire.to_addresses(contact),
                    EmailAddress=wire.to_email_addresses(preferences.email, contact.email),
                    TelephoneNumber=wire.to_telephone_numbers(contact.phone_number, contact.phone_number_alt),
                )
            ],
            PersonLanguage=[
                PersonLanguage(
                    CommunicationCategoryCode=ReferenceData(ReferenceDataID=preferences.preferred_language),
                    PreferredIndicator=True,
                )
            ],
            PersonMaritalStatus=(
                PersonMaritalStatus(StatusCode=ReferenceData(ReferenceDataID=info.marital_status))
                if info.marital_status else None
            ),
            PersonName=wire.to_person_name(info.first_name, info.last_name),
            PersonSINIdentification=Identification(IdentificationID=info.social_insurance_number),
            PreferredMethodCommunicationCode=ReferenceData(ReferenceDataID=preferences.preferred_method),
            RelatedPerson=related,
        )

        return BenefitApplicationRequestEntity(
            BenefitApplication=BenefitApplication(
                Applicant=applicant,
                BenefitApplicationCategoryCode=ReferenceData(
                    ReferenceDataID=to_category_code(dto.type_of_application, self.settings)
                ),
                BenefitApplicationChannelCode=ReferenceData(ReferenceDataID=self.settings.application_channel_code),
            )
        )

    @staticmethod
    def to_confirmation_code(response: BenefitApplicationResponseEntity) -> str:
        """
        Raises:
            MalformedUpstreamData: the response carries no identification
        """
        identifications = response.BenefitApplication.BenefitApplicationIdentification
        if not identifications or not identifications[0].IdentificationID:
            raise MalformedUpstreamData("BenefitApplication.BenefitApplicationIdentification")
        return identifications[0].IdentificationID
