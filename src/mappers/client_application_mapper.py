"""
Client application mapping.

Translates the benefits system's client application entity into the flat
ClientApplicationDto and back, and builds the lookup request entities.
Entity to DTO is fallible: a structurally required tagged element that is
missing raises MalformedUpstreamData. DTO to entity is total.
"""

import logging
from typing import List, Optional, Union

from config.settings import WizardSettings, get_wizard_settings
from domain.dtos import (
    ApplicantInformationDto,
    ChildDto,
    ChildInformationDto,
    ClientApplicationBasicInfoRequestDto,
    ClientApplicationDto,
    ClientApplicationSinRequestDto,
    CommunicationPreferencesDto,
    ContactInformationDto,
    PartnerInformationDto,
    TypeOfApplicationDto,
)
from domain.entities import (
    Applicant,
    ApplicantDetail,
    BasicInfoApplicant,
    BenefitApplication,
    ClientApplicationBasicInfoRequestEntity,
    ClientApplicationEntity,
    ClientApplicationSinRequestEntity,
    Flag,
    Identification,
    PersonContactInformation,
    PersonLanguage,
    PersonMaritalStatus,
    ReferenceData,
    RelatedPerson,
    SinApplicant,
)
from domain.errors import MalformedUpstreamData
from mappers import wire_parts as wire
from mappers.category_lookup import (
    address_category,
    find_by_category,
    flag_category,
    identification_category,
    relationship_category,
    require_by_category,
    telephone_category,
)

logger = logging.getLogger(__name__)

IS_CRA_ASSESSED = "isCraAssessed"
APPLIED_BEFORE_APRIL_30_2024 = "appliedBeforeApril302024"

APPLICANT_PATH = "BenefitApplication.Applicant"


def to_type_of_application(
    category_code: Union[int, str, None],
    settings: Optional[WizardSettings] = None,
) -> TypeOfApplicationDto:
    """
    Classify a raw applicant category code.

    The individual code means "adult" and the dependent-only code "child".
    Every other value, the family code included, is treated as
    "adult-child".
    """
    settings = settings or get_wizard_settings()
    try:
        code = int(category_code)
    except (TypeError, ValueError):
        code = None

    if code == settings.applicant_category_code_individual:
        return "adult"
    if code == settings.applicant_category_code_dependent_only:
        return "child"
    if code != settings.applicant_category_code_family:
        # TODO: confirm with the benefits team whether unknown codes should be rejected
        logger.warning(f"Unrecognized applicant category code {category_code!r}; classified as adult-child")
    return "adult-child"


def to_category_code(type_of_application: TypeOfApplicationDto, settings: Optional[WizardSettings] = None) -> str:
    settings = settings or get_wizard_settings()
    if type_of_application == "adult":
        return str(settings.applicant_category_code_individual)
    if type_of_application == "adult-child":
        return str(settings.applicant_category_code_family)
    return str(settings.applicant_category_code_dependent_only)


class ClientApplicationMapper:
    """
    Maps client application entities to DTOs and back.

    Usage:
        mapper = ClientApplicationMapper()
        dto = mapper.to_dto(ClientApplicationEntity.model_validate(payload))
    """

    def __init__(self, settings: Optional[WizardSettings] = None):
        self.settings = settings or get_wizard_settings()

    # -------------------------------------------------------------------------
    # Entity -> DTO
    # -------------------------------------------------------------------------

    def to_dto(self, entity: ClientApplicationEntity) -> ClientApplicationDto:
        applicant = entity.BenefitApplication.Applicant
        if not applicant.PersonContactInformation:
            raise MalformedUpstreamData(f"{APPLICANT_PATH}.PersonContactInformation")
        contact = applicant.PersonContactInformation[0]
        contact_information = self._to_contact_information(applicant, contact)

        first_name, last_name = wire.read_person_name(applicant.PersonName, f"{APPLICANT_PATH}.PersonName")
        client_id = require_by_category(
            applicant.ClientIdentification, wire.CLIENT_ID, identification_category,
            f"{APPLICANT_PATH}.ClientIdentification",
        )
        client_number = find_by_category(applicant.ClientIdentification, wire.CLIENT_NUMBER, identification_category)
        marital_status = applicant.PersonMaritalStatus.StatusCode.ReferenceDataID if applicant.PersonMaritalStatus else None

        flags_path = f"{APPLICANT_PATH}.Flags"
        is_cra_assessed = require_by_category(applicant.Flags, IS_CRA_ASSESSED, flag_category, flags_path)
        applied_before = require_by_category(applicant.Flags, APPLIED_BEFORE_APRIL_30_2024, flag_category, flags_path)

        spouse = find_by_category(applicant.RelatedPerson, wire.SPOUSE, relationship_category)
        dependants = [person for person in applicant.RelatedPerson if relationship_category(person) == wire.DEPENDANT]

        detail = applicant.ApplicantDetail
        return ClientApplicationDto(
            applicant_information=ApplicantInformationDto(
                first_name=first_name,
                last_name=last_name,
                marital_status=marital_status,
                social_insurance_number=applicant.PersonSINIdentification.IdentificationID,
                client_id=client_id.IdentificationID,
                client_number=client_number.IdentificationID if client_number else None,
            ),
            children=[self._to_child(person, index) for index, person in enumerate(dependants)],
            communication_preferences=CommunicationPreferencesDto(
                preferred_language=self._preferred_language(applicant.PersonLanguage),
                preferred_method=applicant.PreferredMethodCommunicationCode.ReferenceDataID or "",
                email=contact_information.email,
            ),
            contact_information=contact_information,
            date_of_birth=wire.parse_date_entity(applicant.PersonBirthDate, f"{APPLICANT_PATH}.PersonBirthDate"),
            dental_benefits=wire.read_insurance_plan(detail.InsurancePlan),
            dental_insurance=detail.PrivateDentalInsuranceIndicator,
            disability_tax_credit=detail.DisabilityTaxCreditIndicator,
            has_applied_before_april_30_2024=applied_before.Flag,
            has_filed_taxes=is_cra_assessed.Flag,
            living_independently=detail.LivingIndependentlyIndicator,
            partner_information=self._to_partner(spouse) if spouse else None,
            type_of_application=to_type_of_application(
                entity.BenefitApplication.BenefitApplicationCategoryCode.ReferenceDataID, self.settings
            ),
        )

    def _to_contact_information(self, applicant: Applicant, contact: PersonContactInformation) -> ContactInformationDto:
        addresses_path = f"{APPLICANT_PATH}.PersonContactInformation.Address"
        mailing = require_by_category(contact.Address, wire.MAILING, address_category, addresses_path)
        home = find_by_category(contact.Address, wire.HOME, address_category)
        primary = find_by_category(contact.TelephoneNumber, wire.PRIMARY, telephone_category)
        alternate = find_by_category(contact.TelephoneNumber, wire.ALTERNATE, telephone_category)

        return ContactInformationDto(
            copy_mailing_address=applicant.MailingSameAsHomeIndicator,
            **(wire.read_address(home, "home") if home else {}),
            **wire.read_address(mailing, "mailing"),
            phone_number=primary.FullTelephoneNumber.TelephoneNumberFullID if primary else None,
            phone_number_alt=alternate.FullTelephoneNumber.TelephoneNumberFullID if alternate else None,
            email=contact.EmailAddress[0].EmailAddressID if contact.EmailAddress else None,
        )

    @staticmethod
    def _preferred_language(languages: List[PersonLanguage]) -> str:
        preferred = next((language for language in languages if language.PreferredIndicator), None)
        chosen = preferred or (languages[0] if languages else None)
        if chosen is None:
            raise MalformedUpstreamData(f"{APPLICANT_PATH}.PersonLanguage")
        return chosen.CommunicationCategoryCode.ReferenceDataID or ""

    def _to_partner(self, spouse: RelatedPerson) -> PartnerInformationDto:
        path = f"{APPLICANT_PATH}.RelatedPerson[Spouse]"
        first_name, last_name = wire.read_person_name(spouse.PersonName, f"{path}.PersonName")
        return PartnerInformationDto(
            confirm=bool(spouse.ApplicantDetail.ConsentToSharePersonalInformationIndicator),
            date_of_birth=wire.parse_date_entity(spouse.PersonBirthDate, f"{path}.PersonBirthDate"),
            first_name=first_name,
            last_name=last_name,
            social_insurance_number=spouse.PersonSINIdentification.IdentificationID,
        )

    def _to_child(self, person: RelatedPerson, index: int) -> ChildDto:
        path = f"{APPLICANT_PATH}.RelatedPerson[Dependant][{index}]"
        first_name, last_name = wire.read_person_name(person.PersonName, f"{path}.PersonName")
        client_number = find_by_category(person.ClientIdentification, wire.CLIENT_NUMBER, identification_category)
        detail = person.ApplicantDetail
        return ChildDto(
            information=ChildInformationDto(
                first_name=first_name,
                last_name=last_name,
                date_of_birth=wire.parse_date_entity(person.PersonBirthDate, f"{path}.PersonBirthDate"),
                is_parent=bool(detail.AttestParentOrGuardianIndicator),
                social_insurance_number=person.PersonSINIdentification.IdentificationID or None,
                client_number=client_number.IdentificationID if client_number else None,
            ),
            dental_insurance=bool(detail.PrivateDentalInsuranceIndicator),
            dental_benefits=wire.read_insurance_plan(detail.InsurancePlan),
        )

    # -------------------------------------------------------------------------
    # DTO -> Entity
    # -------------------------------------------------------------------------

    def to_entity(self, dto: ClientApplicationDto) -> ClientApplicationEntity:
        info = dto.applicant_information
        contact = dto.contact_information

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
            ClientIdentification=wire.to_client_identifications(info.client_id, info.client_number),
            Flags=[
                Flag(Flag=dto.has_filed_taxes, FlagCategoryText=IS_CRA_ASSESSED),
                Flag(Flag=dto.has_applied_before_april_30_2024, FlagCategoryText=APPLIED_BEFORE_APRIL_30_2024),
            ],
            MailingSameAsHomeIndicator=contact.copy_mailing_address,
            PersonBirthDate=wire.to_date_entity(dto.date_of_birth),
            PersonContactInformation=[
                PersonContactInformation(
                    Address=wire.to_addresses(contact),
                    EmailAddress=wire.to_email_addresses(contact.email, dto.communication_preferences.email),
                    TelephoneNumber=wire.to_telephone_numbers(contact.phone_number, contact.phone_number_alt),
                )
            ],
            PersonLanguage=[
                PersonLanguage(
                    CommunicationCategoryCode=ReferenceData(ReferenceDataID=dto.communication_preferences.preferred_language),
                    PreferredIndicator=True,
                )
            ],
            PersonMaritalStatus=(
                PersonMaritalStatus(StatusCode=ReferenceData(ReferenceDataID=info.marital_status))
                if info.marital_status else None
            ),
            PersonName=wire.to_person_name(info.first_name, info.last_name),
            PersonSINIdentification=Identification(IdentificationID=info.social_insurance_number),
            PreferredMethodCommunicationCode=ReferenceData(ReferenceDataID=dto.communication_preferences.preferred_method),
            RelatedPerson=related,
        )

        return ClientApplicationEntity(
            BenefitApplication=BenefitApplication(
                Applicant=applicant,
                BenefitApplicationCategoryCode=ReferenceData(
                    ReferenceDataID=to_category_code(dto.type_of_application, self.settings)
                ),
                BenefitApplicationChannelCode=ReferenceData(ReferenceDataID=self.settings.application_channel_code),
            )
        )

    # -------------------------------------------------------------------------
    # Lookup requests
    # -------------------------------------------------------------------------

    @staticmethod
    def to_basic_info_request_entity(dto: ClientApplicationBasicInfoRequestDto) -> ClientApplicationBasicInfoRequestEntity:
        return ClientApplicationBasicInfoRequestEntity(
            Applicant=BasicInfoApplicant(
                PersonName=wire.to_person_name(dto.first_name, dto.last_name),
                PersonBirthDate=wire.to_date_entity(dto.date_of_birth),
                ClientIdentification=[Identification(IdentificationID=dto.client_number)],
            )
        )

    @staticmethod
    def to_sin_request_entity(dto: ClientApplicationSinRequestDto) -> ClientApplicationSinRequestEntity:
        return ClientApplicationSinRequestEntity(
            Applicant=SinApplicant(PersonSINIdentification=Identification(IdentificationID=dto.sin))
        )
