"""
Wire entities of the downstream benefits system.

Field names follow the external contract verbatim. Arrays are keyed by
category tags rather than by field name: an address is Home or Mailing via
AddressCategoryCode, an identification is disambiguated by
IdentificationCategoryText. Keep these models bit-compatible with the
upstream payloads; look tagged items up through mappers.category_lookup.

Most field names repeat the name of their type. Inside a class body a field
binding shadows the module-level class, so annotations go through the
underscore aliases defined after each type.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(exclude_none=True)


class ReferenceData(WireModel):
    ReferenceDataID: Optional[str] = None
    ReferenceDataName: Optional[str] = None


class Identification(WireModel):
    IdentificationID: str
    IdentificationCategoryText: Optional[str] = None


class DateEntity(WireModel):
    date: str


class AddressCountry(WireModel):
    CountryCode: ReferenceData


_AddressCountry = AddressCountry


class AddressProvince(WireModel):
    ProvinceCode: ReferenceData


_AddressProvince = AddressProvince


class AddressStreet(WireModel):
    StreetName: str


_AddressStreet = AddressStreet


class Address(WireModel):
    AddressCategoryCode: Optional[ReferenceData] = None
    AddressCityName: str
    AddressCountry: _AddressCountry
    AddressPostalCode: Optional[str] = None
    AddressProvince: Optional[_AddressProvince] = None
    AddressSecondaryUnitText: Optional[str] = None
    AddressStreet: _AddressStreet


_Address = Address


class EmailAddress(WireModel):
    EmailAddressID: str


_EmailAddress = EmailAddress


class FullTelephoneNumber(WireModel):
    TelephoneNumberFullID: str


_FullTelephoneNumber = FullTelephoneNumber


class TelephoneNumber(WireModel):
    FullTelephoneNumber: _FullTelephoneNumber
    TelephoneNumberCategoryCode: ReferenceData


_TelephoneNumber = TelephoneNumber


class PersonContactInformation(WireModel):
    Address: List[_Address] = Field(default_factory=list)
    EmailAddress: List[_EmailAddress] = Field(default_factory=list)
    TelephoneNumber: List[_TelephoneNumber] = Field(default_factory=list)


_PersonContactInformation = PersonContactInformation


class PersonLanguage(WireModel):
    CommunicationCategoryCode: ReferenceData
    PreferredIndicator: bool = False


_PersonLanguage = PersonLanguage


class PersonName(WireModel):
    PersonGivenName: List[str]
    PersonSurName: str


_PersonName = PersonName


class PersonMaritalStatus(WireModel):
    StatusCode: ReferenceData


_PersonMaritalStatus = PersonMaritalStatus


class InsurancePlan(WireModel):
    InsurancePlanIdentification: List[Identification] = Field(default_factory=list)


_InsurancePlan = InsurancePlan


class ApplicantDetail(WireModel):
    AttestParentOrGuardianIndicator: Optional[bool] = None
    ConsentToSharePersonalInformationIndicator: Optional[bool] = None
    DisabilityTaxCreditIndicator: Optional[bool] = None
    FederalDentalCoverageIndicator: Optional[bool] = None
    InsurancePlan: Optional[List[_InsurancePlan]] = None
    LivingIndependentlyIndicator: Optional[bool] = None
    PrivateDentalInsuranceIndicator: Optional[bool] = None
    ProvincialDentalCoverageIndicator: Optional[bool] = None


_ApplicantDetail = ApplicantDetail


class Flag(WireModel):
    Flag: bool
    FlagCategoryText: str


class RelatedPerson(WireModel):
    ApplicantDetail: _ApplicantDetail = Field(default_factory=_ApplicantDetail)
    ClientIdentification: Optional[List[Identification]] = None
    PersonBirthDate: DateEntity
    PersonName: List[_PersonName]
    PersonRelationshipCode: ReferenceData
    PersonSINIdentification: Identification


_RelatedPerson = RelatedPerson


class Applicant(WireModel):
    ApplicantDetail: _ApplicantDetail = Field(default_factory=_ApplicantDetail)
    ClientIdentification: Optional[List[Identification]] = None
    Flags: Optional[List[Flag]] = None
    MailingSameAsHomeIndicator: bool = False
    PersonBirthDate: DateEntity
    PersonContactInformation: List[_PersonContactInformation] = Field(default_factory=list)
    PersonLanguage: List[_PersonLanguage] = Field(default_factory=list)
    PersonMaritalStatus: Optional[_PersonMaritalStatus] = None
    PersonName: List[_PersonName] = Field(default_factory=list)
    PersonSINIdentification: Identification
    PreferredMethodCommunicationCode: ReferenceData
    RelatedPerson: List[_RelatedPerson] = Field(default_factory=list)


_Applicant = Applicant


class BenefitApplicationYear(WireModel):
    BenefitApplicationYearIdentification: List[Identification] = Field(default_factory=list)


_BenefitApplicationYear = BenefitApplicationYear


class BenefitApplication(WireModel):
    Applicant: _Applicant
    BenefitApplicationCategoryCode: ReferenceData
    BenefitApplicationChannelCode: ReferenceData
    BenefitApplicationIdentification: Optional[List[Identification]] = None
    BenefitApplicationYear: Optional[_BenefitApplicationYear] = None


_BenefitApplication = BenefitApplication


class ClientApplicationEntity(WireModel):
    BenefitApplication: _BenefitApplication


class BenefitApplicationRequestEntity(WireModel):
    BenefitApplication: _BenefitApplication


class BenefitApplicationResponseBody(WireModel):
    BenefitApplicationIdentification: List[Identification] = Field(default_factory=list)


class BenefitApplicationResponseEntity(WireModel):
    BenefitApplication: BenefitApplicationResponseBody


class BasicInfoApplicant(WireModel):
    PersonName: List[_PersonName]
    PersonBirthDate: DateEntity
    ClientIdentification: List[Identification]


class ClientApplicationBasicInfoRequestEntity(WireModel):
    Applicant: BasicInfoApplicant


class SinApplicant(WireModel):
    PersonSINIdentification: Identification


class ClientApplicationSinRequestEntity(WireModel):
    Applicant: SinApplicant
