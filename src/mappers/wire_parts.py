"""
Builders and readers for the recurring pieces of the wire entities.

Addresses, phone numbers, names, dates and insurance plans appear in both
the client application and the benefit application payloads.
"""

from datetime import date
from typing import List, Optional, Sequence

from domain.dtos import ChildDto, ContactInformationDto, PartnerInformationDto
from domain.entities import (
    Address,
    AddressCountry,
    AddressProvince,
    AddressStreet,
    ApplicantDetail,
    DateEntity,
    EmailAddress,
    FullTelephoneNumber,
    Identification,
    InsurancePlan,
    PersonName,
    ReferenceData,
    RelatedPerson,
    TelephoneNumber,
)
from domain.errors import MalformedUpstreamData

# Category tags
HOME = "Home"
MAILING = "Mailing"
PRIMARY = "Primary"
ALTERNATE = "Alternate"
CLIENT_ID = "Client ID"
CLIENT_NUMBER = "Client Number"
SPOUSE = "Spouse"
DEPENDANT = "Dependant"


def to_date_entity(value: date) -> DateEntity:
    return DateEntity(date=value.isoformat())


def parse_date_entity(entity: DateEntity, path: str) -> date:
    try:
        return date.fromisoformat(entity.date[:10])
    except ValueError:
        raise MalformedUpstreamData(path)


def to_person_name(first_name: str, last_name: str) -> List[PersonName]:
    return [PersonName(PersonGivenName=[first_name], PersonSurName=last_name)]


def read_person_name(names: Sequence[PersonName], path: str) -> tuple:
    if not names:
        raise MalformedUpstreamData(path)
    name = names[0]
    return " ".join(name.PersonGivenName), name.PersonSurName


def to_address(
    category: str,
    street: str,
    apartment: Optional[str],
    city: str,
    country: str,
    postal_code: Optional[str],
    province: Optional[str],
) -> Address:
    return Address(
        AddressCategoryCode=ReferenceData(ReferenceDataName=category),
        AddressCityName=city,
        AddressCountry=AddressCountry(CountryCode=ReferenceData(ReferenceDataID=country)),
        AddressPostalCode=postal_code or "",
        AddressProvince=AddressProvince(ProvinceCode=ReferenceData(ReferenceDataID=province or "")),
        AddressSecondaryUnitText=apartment or "",
        AddressStreet=AddressStreet(StreetName=street),
    )


def to_addresses(contact: ContactInformationDto) -> List[Address]:
    addresses = [
        to_address(
            MAILING,
            contact.mailing_address,
            contact.mailing_apartment,
            contact.mailing_city,
            contact.mailing_country,
            contact.mailing_postal_code,
            contact.mailing_province,
        )
    ]
    if contact.home_address and contact.home_city and contact.home_country:
        addresses.append(to_address(
            HOME,
            contact.home_address,
            contact.home_apartment,
            contact.home_city,
            contact.home_country,
            contact.home_postal_code,
            contact.home_province,
        ))
    return addresses


def read_address(address: Address, prefix: str) -> dict:
    """Flatten an address into {prefix}_address, {prefix}_city, ... fields."""
    province = address.AddressProvince.ProvinceCode.ReferenceDataID if address.AddressProvince else None
    return {
        f"{prefix}_address": address.AddressStreet.StreetName,
        f"{prefix}_apartment": address.AddressSecondaryUnitText or None,
        f"{prefix}_city": address.AddressCityName,
        f"{prefix}_country": address.AddressCountry.CountryCode.ReferenceDataID,
        f"{prefix}_postal_code": address.AddressPostalCode or None,
        f"{prefix}_province": province or None,
    }


def to_telephone_numbers(phone_number: Optional[str], phone_number_alt: Optional[str]) -> List[TelephoneNumber]:
    numbers = []
    for category, value in ((PRIMARY, phone_number), (ALTERNATE, phone_number_alt)):
        if value and value.strip():
            numbers.append(TelephoneNumber(
                FullTelephoneNumber=FullTelephoneNumber(TelephoneNumberFullID=value),
                TelephoneNumberCategoryCode=ReferenceData(ReferenceDataName=category),
            ))
    return numbers


def to_email_addresses(*candidates: Optional[str]) -> List[EmailAddress]:
    """The first non-blank candidate becomes the single email address."""
    for email in candidates:
        if email and email.strip():
            return [EmailAddress(EmailAddressID=email)]
    return []


def to_partner_entity(partner: PartnerInformationDto) -> RelatedPerson:
    return RelatedPerson(
        ApplicantDetail=ApplicantDetail(ConsentToSharePersonalInformationIndicator=partner.confirm),
        PersonBirthDate=to_date_entity(partner.date_of_birth),
        PersonName=to_person_name(partner.first_name, partner.last_name),
        PersonRelationshipCode=ReferenceData(ReferenceDataName=SPOUSE),
        PersonSINIdentification=Identification(IdentificationID=partner.social_insurance_number),
    )


def to_child_entity(child: ChildDto) -> RelatedPerson:
    information = child.information
    return RelatedPerson(
        ApplicantDetail=ApplicantDetail(
            AttestParentOrGuardianIndicator=information.is_parent,
            InsurancePlan=to_insurance_plan(child.dental_benefits),
            PrivateDentalInsuranceIndicator=child.dental_insurance,
        ),
        ClientIdentification=(
            [Identification(IdentificationID=information.client_number, IdentificationCategoryText=CLIENT_NUMBER)]
            if information.client_number else None
        ),
        PersonBirthDate=to_date_entity(information.date_of_birth),
        PersonName=to_person_name(information.first_name, information.last_name),
        PersonRelationshipCode=ReferenceData(ReferenceDataName=DEPENDANT),
        PersonSINIdentification=Identification(IdentificationID=information.social_insurance_number or ""),
    )


def to_client_identifications(client_id: Optional[str], client_number: Optional[str]) -> List[Identification]:
    identifications = []
    if client_id:
        identifications.append(Identification(IdentificationID=client_id, IdentificationCategoryText=CLIENT_ID))
    if client_number:
        identifications.append(Identification(IdentificationID=client_number, IdentificationCategoryText=CLIENT_NUMBER))
    return identifications


def to_insurance_plan(dental_benefits: Sequence[str]) -> List[InsurancePlan]:
    return [
        InsurancePlan(
            InsurancePlanIdentification=[Identification(IdentificationID=benefit) for benefit in dental_benefits]
        )
    ]


def read_insurance_plan(plans: Optional[Sequence[InsurancePlan]]) -> List[str]:
    return [
        identification.IdentificationID
        for plan in plans or ()
        for identification in plan.InsurancePlanIdentification
    ]
