"""
Step schemas.

One pydantic form per wizard step. Form fields arrive camelCased from the
browser; shape problems are reported by pydantic, business rules that span
several fields by cross_field_errors(). validate_step() folds both into a
field-keyed error dict and never raises on user input.

A valid form turns itself into a StateUpdate: the partial state to merge
and the top-level fields an earlier answer made inapplicable.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Generic, List, Literal, Mapping, Optional, Sequence, Tuple, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from config.settings import WizardSettings, get_wizard_settings
from domain.dtos import ClientApplicationBasicInfoRequestDto
from domain.state import (
    AddressInformationState,
    ApplicantInformationState,
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
    TermsAndConditionsState,
    WizardState,
)
from validation import field_validators as fv

StepErrors = Dict[str, List[str]]

FORM_ERROR_KEY = "form"
REQUIRED_MESSAGE = "This field is required"
COMMUNICATION_METHOD_EMAIL = "email"

F = TypeVar("F", bound="StepForm")


@dataclass(frozen=True)
class StepContext:
    """What a form needs to know beyond its own fields."""

    settings: WizardSettings = field(default_factory=get_wizard_settings)
    today: Optional[date] = None
    applicant_sin: Optional[str] = None

    @property
    def current_date(self) -> date:
        return self.today or self.settings.current_date or date.today()


@dataclass(frozen=True)
class StateUpdate:
    partial: Dict[str, Any]
    fields_to_remove: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StepResult(Generic[F]):
    value: Optional[F] = None
    errors: StepErrors = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors


def _add(errors: StepErrors, name: str, message: str) -> None:
    errors.setdefault(to_camel(name), []).append(message)


def _check(errors: StepErrors, name: str, result: Tuple[bool, Optional[str]]) -> None:
    is_valid, message = result
    if not is_valid:
        _add(errors, name, message)


def _errors_from(exc: ValidationError) -> StepErrors:
    errors: StepErrors = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        key = str(loc[0]) if loc else FORM_ERROR_KEY
        if error["type"] == "missing" or error.get("input") is None:
            message = REQUIRED_MESSAGE
        else:
            message = error["msg"]
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
        errors.setdefault(key, []).append(message)
    return errors


def validate_step(
    schema: Type[F],
    data: Mapping[str, Any],
    context: Optional[StepContext] = None,
) -> StepResult[F]:
    """
    Validate submitted form data against a step schema.

    Returns:
        StepResult with either the parsed form or field-keyed errors
    """
    try:
        form = schema.model_validate(dict(data))
    except ValidationError as e:
        return StepResult(errors=_errors_from(e))

    errors = form.cross_field_errors(context or StepContext())
    if errors:
        return StepResult(errors=errors)
    return StepResult(value=form)


class StepForm(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        return {}

    def to_state_update(
        self, state: Optional[WizardState] = None, context: Optional[StepContext] = None
    ) -> StateUpdate:
        raise NotImplementedError


# =============================================================================
# SHARED BUILDING BLOCKS
# =============================================================================

class _PartnerFields(StepForm):
    """Partner details, required only when the marital status implies a partner."""

    partner_confirm: Optional[bool] = None
    partner_first_name: Optional[str] = None
    partner_last_name: Optional[str] = None
    partner_date_of_birth: Optional[date] = None
    partner_social_insurance_number: Optional[str] = None

    def _expects_partner(self, context: StepContext) -> bool:
        return context.settings.has_partner(getattr(self, "marital_status", None))

    def _partner_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        if not self._expects_partner(context):
            return errors

        for name in ("partner_first_name", "partner_last_name", "partner_date_of_birth", "partner_social_insurance_number"):
            if getattr(self, name) is None:
                _add(errors, name, REQUIRED_MESSAGE)
        if self.partner_confirm is not True:
            _add(errors, "partner_confirm", "Partner consent is required")

        if self.partner_first_name:
            _check(errors, "partner_first_name", fv.validate_name(self.partner_first_name, "First name"))
        if self.partner_last_name:
            _check(errors, "partner_last_name", fv.validate_name(self.partner_last_name, "Last name"))
        if self.partner_date_of_birth:
            _check(errors, "partner_date_of_birth", fv.validate_date_of_birth(self.partner_date_of_birth, context.current_date))
        if self.partner_social_insurance_number:
            is_valid, message = fv.validate_sin(self.partner_social_insurance_number)
            if is_valid and context.applicant_sin:
                is_valid, message = fv.validate_sins_differ(self.partner_social_insurance_number, context.applicant_sin)
            if not is_valid:
                _add(errors, "partner_social_insurance_number", message)
        return errors

    def partner_state(self, context: Optional[StepContext] = None) -> Optional[PartnerInformationState]:
        if not self._expects_partner(context or StepContext()):
            return None
        return PartnerInformationState(
            confirm=bool(self.partner_confirm),
            first_name=self.partner_first_name,
            last_name=self.partner_last_name,
            date_of_birth=self.partner_date_of_birth,
            social_insurance_number=fv.normalize_sin(self.partner_social_insurance_number),
        )


class _AddressFields(StepForm):
    copy_mailing_address: bool = False
    mailing_address: str
    mailing_apartment: Optional[str] = None
    mailing_city: str
    mailing_country: str
    mailing_postal_code: Optional[str] = None
    mailing_province: Optional[str] = None
    home_address: Optional[str] = None
    home_apartment: Optional[str] = None
    home_city: Optional[str] = None
    home_country: Optional[str] = None
    home_postal_code: Optional[str] = None
    home_province: Optional[str] = None

    def _address_errors(self) -> StepErrors:
        errors: StepErrors = {}
        _check(errors, "mailing_postal_code", fv.validate_postal_code(self.mailing_postal_code, self.mailing_country))
        _check(errors, "mailing_province", fv.validate_province(self.mailing_province, self.mailing_country))

        if not self.copy_mailing_address:
            for name in ("home_address", "home_city", "home_country"):
                if getattr(self, name) is None:
                    _add(errors, name, REQUIRED_MESSAGE)
            if self.home_country:
                _check(errors, "home_postal_code", fv.validate_postal_code(self.home_postal_code, self.home_country))
                _check(errors, "home_province", fv.validate_province(self.home_province, self.home_country))
        return errors

    def _address_fields(self) -> Dict[str, Any]:
        mailing = {
            "mailing_address": self.mailing_address,
            "mailing_apartment": self.mailing_apartment,
            "mailing_city": self.mailing_city,
            "mailing_country": self.mailing_country,
            "mailing_postal_code": fv.normalize_postal_code(self.mailing_postal_code) if self.mailing_postal_code else None,
            "mailing_province": self.mailing_province,
        }
        if self.copy_mailing_address:
            home = {f"home_{name[len('mailing_'):]}": value for name, value in mailing.items()}
        else:
            home = {
                "home_address": self.home_address,
                "home_apartment": self.home_apartment,
                "home_city": self.home_city,
                "home_country": self.home_country,
                "home_postal_code": fv.normalize_postal_code(self.home_postal_code) if self.home_postal_code else None,
                "home_province": self.home_province,
            }
        return {"copy_mailing_address": self.copy_mailing_address, **mailing, **home}


class _DentalBenefitsFields(StepForm):
    has_federal_benefits: Optional[bool] = None
    federal_social_program: Optional[str] = None
    has_provincial_territorial_benefits: Optional[bool] = None
    province: Optional[str] = None
    provincial_territorial_social_program: Optional[str] = None

    def _benefits_errors(self) -> StepErrors:
        errors: StepErrors = {}
        if self.has_federal_benefits is None:
            _add(errors, "has_federal_benefits", REQUIRED_MESSAGE)
        elif self.has_federal_benefits and not self.federal_social_program:
            _add(errors, "federal_social_program", "Select a federal program")

        if self.has_provincial_territorial_benefits is None:
            _add(errors, "has_provincial_territorial_benefits", REQUIRED_MESSAGE)
        elif self.has_provincial_territorial_benefits:
            if not self.province:
                _add(errors, "province", "Select a province or territory")
            if not self.provincial_territorial_social_program:
                _add(errors, "provincial_territorial_social_program", "Select a provincial or territorial program")
        return errors

    def dental_benefits_state(self) -> DentalBenefitsState:
        return DentalBenefitsState(
            has_federal_benefits=bool(self.has_federal_benefits),
            federal_social_program=self.federal_social_program if self.has_federal_benefits else None,
            has_provincial_territorial_benefits=bool(self.has_provincial_territorial_benefits),
            provincial_territorial_social_program=(
                self.provincial_territorial_social_program if self.has_provincial_territorial_benefits else None
            ),
            province=self.province if self.has_provincial_territorial_benefits else None,
        )


# =============================================================================
# APPLY STEPS
# =============================================================================

class TermsAndConditionsForm(StepForm):
    acknowledge_terms: bool = False
    acknowledge_privacy: bool = False
    share_data: bool = False

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        for name in ("acknowledge_terms", "acknowledge_privacy", "share_data"):
            if not getattr(self, name):
                _add(errors, name, "You must agree to continue")
        return errors

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"terms_and_conditions": TermsAndConditionsState(**self.model_dump())})


class TypeOfApplicationForm(StepForm):
    type_of_application: Literal["adult", "adult-child", "child", "delegate"]

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"type_of_application": self.type_of_application})


class TaxFilingForm(StepForm):
    has_filed_taxes: bool

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"has_filed_taxes": self.has_filed_taxes})


class DateOfBirthForm(StepForm):
    date_of_birth: date
    all_children_under_18: Optional[bool] = None

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        _check(errors, "date_of_birth", fv.validate_date_of_birth(self.date_of_birth, context.current_date))
        return errors

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        partial: Dict[str, Any] = {"date_of_birth": self.date_of_birth}
        if self.all_children_under_18 is not None:
            partial["all_children_under_18"] = self.all_children_under_18
        # Answers tied to the previous age band no longer apply
        return StateUpdate(partial, ("disability_tax_credit", "living_independently"))


class LivingIndependentlyForm(StepForm):
    living_independently: bool

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"living_independently": self.living_independently})


class DisabilityTaxCreditForm(StepForm):
    disability_tax_credit: bool

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"disability_tax_credit": self.disability_tax_credit})


class ApplicantInformationForm(StepForm):
    first_name: str
    last_name: str
    social_insurance_number: str

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        _check(errors, "first_name", fv.validate_name(self.first_name, "First name"))
        _check(errors, "last_name", fv.validate_name(self.last_name, "Last name"))
        _check(errors, "social_insurance_number", fv.validate_sin(self.social_insurance_number))
        return errors

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({
            "applicant_information": ApplicantInformationState(
                first_name=self.first_name,
                last_name=self.last_name,
                social_insurance_number=fv.normalize_sin(self.social_insurance_number),
            )
        })


class MaritalStatusForm(_PartnerFields):
    marital_status: str

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        return self._partner_errors(context)

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        partner = self.partner_state(context)
        if partner is None:
            return StateUpdate({"marital_status": self.marital_status}, ("partner_information",))
        return StateUpdate({"marital_status": self.marital_status, "partner_information": partner})

    def _expects_partner(self, context: StepContext) -> bool:
        return context.settings.has_partner(self.marital_status)


class ContactInformationForm(_AddressFields):
    phone_number: Optional[str] = None
    phone_number_alt: Optional[str] = None
    email: Optional[str] = None
    confirm_email: Optional[str] = None

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors = self._address_errors()
        if self.phone_number:
            _check(errors, "phone_number", fv.validate_phone_number(self.phone_number))
        if self.phone_number_alt:
            _check(errors, "phone_number_alt", fv.validate_phone_number(self.phone_number_alt))
        if self.email:
            _check(errors, "email", fv.validate_email(self.email))
            if self.confirm_email is not None and self.confirm_email.lower() != self.email.lower():
                _add(errors, "confirm_email", "Email addresses do not match")
        return errors

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({
            "contact_information": ContactInformationState(
                **self._address_fields(),
                phone_number=self.phone_number,
                phone_number_alt=self.phone_number_alt,
                email=self.email,
            )
        })


class CommunicationPreferencesForm(StepForm):
    preferred_language: str
    preferred_method: str
    email: Optional[str] = None

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        if self.preferred_method.lower() == COMMUNICATION_METHOD_EMAIL and not self.email:
            _add(errors, "email", "Email is required for email communication")
        elif self.email:
            _check(errors, "email", fv.validate_email(self.email))
        return errors

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"communication_preferences": CommunicationPreferencesState(**self.model_dump())})


class DentalInsuranceForm(StepForm):
    dental_insurance: bool

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"dental_insurance": self.dental_insurance})


class FederalProvincialTerritorialBenefitsForm(_DentalBenefitsFields):
    has_federal_provincial_territorial_benefits: bool

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        if not self.has_federal_provincial_territorial_benefits:
            return {}
        errors = self._benefits_errors()
        if not errors and not (self.has_federal_benefits or self.has_provincial_territorial_benefits):
            _add(errors, "has_federal_provincial_territorial_benefits", "Select at least one federal, provincial or territorial benefit")
        return errors

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        if not self.has_federal_provincial_territorial_benefits:
            return StateUpdate({"has_federal_provincial_territorial_benefits": False}, ("dental_benefits",))
        return StateUpdate({
            "has_federal_provincial_territorial_benefits": True,
            "dental_benefits": self.dental_benefits_state(),
        })

    def to_child_fields(self) -> Dict[str, Any]:
        return {
            "has_federal_provincial_territorial_benefits": self.has_federal_provincial_territorial_benefits,
            "dental_benefits": self.dental_benefits_state() if self.has_federal_provincial_territorial_benefits else None,
        }


class ChildInformationForm(StepForm):
    first_name: str
    last_name: str
    date_of_birth: date
    is_parent: bool
    has_social_insurance_number: bool = False
    social_insurance_number: Optional[str] = None

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        _check(errors, "first_name", fv.validate_name(self.first_name, "First name"))
        _check(errors, "last_name", fv.validate_name(self.last_name, "Last name"))
        _check(errors, "date_of_birth", fv.validate_date_of_birth(self.date_of_birth, context.current_date))
        if self.has_social_insurance_number:
            if not self.social_insurance_number:
                _add(errors, "social_insurance_number", REQUIRED_MESSAGE)
            else:
                is_valid, message = fv.validate_sin(self.social_insurance_number)
                if is_valid and context.applicant_sin:
                    is_valid, message = fv.validate_sins_differ(self.social_insurance_number, context.applicant_sin)
                if not is_valid:
                    _add(errors, "social_insurance_number", message)
        return errors

    def to_child_fields(self) -> Dict[str, Any]:
        return {
            "information": ChildInformationState(
                first_name=self.first_name,
                last_name=self.last_name,
                date_of_birth=self.date_of_birth,
                is_parent=self.is_parent,
                has_social_insurance_number=self.has_social_insurance_number,
                social_insurance_number=(
                    fv.normalize_sin(self.social_insurance_number) if self.has_social_insurance_number else None
                ),
            )
        }


# =============================================================================
# RENEW STEPS
# =============================================================================

class TypeOfRenewalForm(StepForm):
    type_of_renewal: Literal["adult", "adult-child", "child", "delegate"]

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"type_of_renewal": self.type_of_renewal})


class RenewApplicantInformationForm(StepForm):
    first_name: str
    last_name: str
    date_of_birth: date
    client_number: str

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        _check(errors, "first_name", fv.validate_name(self.first_name, "First name"))
        _check(errors, "last_name", fv.validate_name(self.last_name, "Last name"))
        _check(errors, "date_of_birth", fv.validate_date_of_birth(self.date_of_birth, context.current_date))
        if not self.client_number.replace(" ", "").isdigit():
            _add(errors, "client_number", "Invalid client number")
        return errors

    def to_basic_info_request(self) -> ClientApplicationBasicInfoRequestDto:
        return ClientApplicationBasicInfoRequestDto(
            first_name=self.first_name,
            last_name=self.last_name,
            date_of_birth=self.date_of_birth,
            client_number=self.client_number.replace(" ", ""),
        )

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({
            "applicant_information": RenewApplicantInformationState(
                first_name=self.first_name,
                last_name=self.last_name,
                date_of_birth=self.date_of_birth,
                client_number=self.client_number.replace(" ", ""),
            )
        })


class ConfirmMaritalStatusForm(_PartnerFields):
    has_marital_status_changed: bool
    marital_status: Optional[str] = None

    def _expects_partner(self, context: StepContext) -> bool:
        return self.has_marital_status_changed and context.settings.has_partner(self.marital_status)

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        if self.has_marital_status_changed and not self.marital_status:
            _add(errors, "marital_status", REQUIRED_MESSAGE)
        for key, messages in self._partner_errors(context).items():
            errors.setdefault(key, []).extend(messages)
        return errors

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        if not self.has_marital_status_changed:
            return StateUpdate({"has_marital_status_changed": False}, ("marital_status", "partner_information"))
        partial: Dict[str, Any] = {"has_marital_status_changed": True, "marital_status": self.marital_status}
        partner = self.partner_state(context)
        if partner is None:
            return StateUpdate(partial, ("partner_information",))
        partial["partner_information"] = partner
        return StateUpdate(partial)


class ConfirmAddressForm(StepForm):
    has_address_changed: bool

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        if not self.has_address_changed:
            return StateUpdate({"has_address_changed": False}, ("address_information",))
        return StateUpdate({"has_address_changed": True})


class UpdateAddressForm(_AddressFields):
    def cross_field_errors(self, context: StepContext) -> StepErrors:
        return self._address_errors()

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"address_information": AddressInformationState(**self._address_fields())})


def _current_contact(state: Optional[WizardState]) -> RenewContactInformationState:
    contact = getattr(state, "contact_information", None)
    return contact if contact is not None else RenewContactInformationState()


class ConfirmPhoneForm(StepForm):
    is_new_or_updated_phone_number: bool
    phone_number: Optional[str] = None
    phone_number_alt: Optional[str] = None

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        if self.is_new_or_updated_phone_number:
            if not self.phone_number:
                _add(errors, "phone_number", REQUIRED_MESSAGE)
            else:
                _check(errors, "phone_number", fv.validate_phone_number(self.phone_number))
            if self.phone_number_alt:
                _check(errors, "phone_number_alt", fv.validate_phone_number(self.phone_number_alt))
        return errors

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        changed = self.is_new_or_updated_phone_number
        contact = _current_contact(state).model_copy(update={
            "is_new_or_updated_phone_number": changed,
            "phone_number": self.phone_number if changed else None,
            "phone_number_alt": self.phone_number_alt if changed else None,
        })
        return StateUpdate({"contact_information": contact})


class ConfirmEmailForm(StepForm):
    is_new_or_updated_email: bool
    email: Optional[str] = None

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        if self.is_new_or_updated_email:
            if not self.email:
                _add(errors, "email", REQUIRED_MESSAGE)
            else:
                _check(errors, "email", fv.validate_email(self.email))
        return errors

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        changed = self.is_new_or_updated_email
        contact = _current_contact(state).model_copy(update={
            "is_new_or_updated_email": changed,
            "email": self.email if changed else None,
        })
        return StateUpdate({"contact_information": contact})


class ConfirmDentalBenefitsForm(StepForm):
    federal_benefits_changed: bool
    provincial_territorial_benefits_changed: bool

    def to_confirmation(self) -> ConfirmDentalBenefitsState:
        return ConfirmDentalBenefitsState(**self.model_dump())

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        confirmation = self.to_confirmation()
        if not confirmation.any_changed:
            return StateUpdate({"confirm_dental_benefits": confirmation}, ("dental_benefits",))
        return StateUpdate({"confirm_dental_benefits": confirmation})

    def to_child_fields(self) -> Dict[str, Any]:
        confirmation = self.to_confirmation()
        fields: Dict[str, Any] = {"confirm_dental_benefits": confirmation}
        if not confirmation.any_changed:
            fields["dental_benefits"] = None
        return fields


class UpdateDentalBenefitsForm(_DentalBenefitsFields):
    def cross_field_errors(self, context: StepContext) -> StepErrors:
        return self._benefits_errors()

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"dental_benefits": self.dental_benefits_state()})

    def to_child_fields(self) -> Dict[str, Any]:
        return {"dental_benefits": self.dental_benefits_state()}


class RenewChildInformationForm(StepForm):
    first_name: str
    last_name: str
    date_of_birth: date
    is_parent: bool
    client_number: Optional[str] = None

    def cross_field_errors(self, context: StepContext) -> StepErrors:
        errors: StepErrors = {}
        _check(errors, "first_name", fv.validate_name(self.first_name, "First name"))
        _check(errors, "last_name", fv.validate_name(self.last_name, "Last name"))
        _check(errors, "date_of_birth", fv.validate_date_of_birth(self.date_of_birth, context.current_date))
        return errors

    def to_child_fields(self) -> Dict[str, Any]:
        return {"information": RenewChildInformationState(**self.model_dump())}


class DemographicSurveyForm(StepForm):
    indigenous_status: Optional[str] = None
    first_nations: List[str] = []
    disability_status: Optional[str] = None
    ethnic_groups: List[str] = []
    another_ethnic_group: Optional[str] = None
    location_born_status: Optional[str] = None
    gender_status: Optional[str] = None

    @field_validator("first_nations", "ethnic_groups", mode="before")
    @classmethod
    def single_value_to_list(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    def to_survey(self) -> DemographicSurveyState:
        return DemographicSurveyState(**self.model_dump())

    def to_state_update(self, state=None, context=None) -> StateUpdate:
        return StateUpdate({"demographic_survey": self.to_survey()})

    def to_child_fields(self) -> Dict[str, Any]:
        return {"demographic_survey": self.to_survey()}


class DentalInsuranceChildForm(DentalInsuranceForm):
    def to_child_fields(self) -> Dict[str, Any]:
        return {"dental_insurance": self.dental_insurance}


# =============================================================================
# CHILD UPDATES
# =============================================================================

def child_state_update(
    children: Sequence[BaseModel],
    child_id: UUID,
    fields: Mapping[str, Any],
) -> StateUpdate:
    """Replace one child's fields, keeping every other child as it was."""
    updated = [
        child.model_copy(update=dict(fields)) if child.id == child_id else child
        for child in children
    ]
    return StateUpdate({"children": updated})
