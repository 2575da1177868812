"""Tests for mapping reviewed wizard state to benefit applications."""

import pytest

from domain.entities import BenefitApplicationResponseEntity
from domain.errors import MalformedUpstreamData
from domain.state import (
    AddressInformationState,
    DemographicSurveyState,
    RenewContactInformationState,
)
from fixtures.wizard_states import (
    APPLICANT_SIN,
    CHILD_CLIENT_NUMBER,
    CHILD_SIN,
    apply_child,
    apply_family_state,
    apply_state,
    changed_benefits,
    client_application_dto,
    dental_benefits,
    partner_information,
    protected_child,
    protected_renew_state,
    renew_child,
    renew_state,
)
from mappers.benefit_application_mapper import BenefitApplicationMapper
from mappers.state_mapper import (
    apply_state_to_dto,
    dental_benefit_ids,
    protected_renew_state_to_dto,
    renew_state_to_dto,
)
from validation.apply_review import review_apply_state
from validation.renew_review import review_protected_renew_state, review_renew_state
from validation.review_rules import ReviewContext


@pytest.fixture
def context(wizard_settings):
    return ReviewContext(settings=wizard_settings)


def reviewed(outcome):
    assert outcome.kind == "ok", f"expected a reviewable state, got {outcome!r}"
    return outcome.state


class TestDentalBenefitIds:

    def test_both_programs(self):
        assert dental_benefit_ids(dental_benefits()) == ["federal-program", "provincial-program"]

    def test_only_selected_programs(self):
        benefits = dental_benefits(has_provincial_territorial_benefits=False)
        assert dental_benefit_ids(benefits) == ["federal-program"]

    def test_none(self):
        assert dental_benefit_ids(None) == []


class TestApplyStateToDto:

    def test_adult_application(self, context):
        dto = apply_state_to_dto(reviewed(review_apply_state(apply_state(), context=context)))

        assert dto.type_of_application == "adult"
        assert dto.applicant_information.social_insurance_number == APPLICANT_SIN
        assert dto.applicant_information.marital_status == "single"
        assert dto.contact_information.mailing_city == "Ottawa"
        assert dto.dental_insurance is False
        assert dto.dental_benefits == []
        assert dto.partner_information is None

    def test_partner_and_benefits(self, context):
        state = apply_state(
            marital_status="married",
            partner_information=partner_information(),
            has_federal_provincial_territorial_benefits=True,
            dental_benefits=dental_benefits(),
        )
        dto = apply_state_to_dto(reviewed(review_apply_state(state, context=context)))

        assert dto.partner_information.first_name == "John"
        assert dto.dental_benefits == ["federal-program", "provincial-program"]

    def test_child_sin_only_when_declared(self, context):
        with_sin = apply_child()
        with_sin = with_sin.model_copy(update={"information": with_sin.information.model_copy(
            update={"has_social_insurance_number": True, "social_insurance_number": CHILD_SIN}
        )})
        without_sin = apply_child()
        without_sin = without_sin.model_copy(update={"information": without_sin.information.model_copy(
            update={"social_insurance_number": CHILD_SIN}
        )})

        state = apply_family_state(children=[with_sin, without_sin])
        dto = apply_state_to_dto(reviewed(review_apply_state(state, context=context)))

        assert [child.information.social_insurance_number for child in dto.children] == [CHILD_SIN, None]


class TestRenewStateToDto:

    def test_nothing_changed_keeps_client_application(self, context):
        state = renew_state()
        dto = renew_state_to_dto(reviewed(review_renew_state(state, context=context)))
        existing = state.client_application

        assert dto.applicant_information == existing.applicant_information
        assert dto.contact_information == existing.contact_information
        assert dto.communication_preferences == existing.communication_preferences
        assert dto.dental_benefits == existing.dental_benefits
        assert dto.dental_insurance is True
        assert dto.type_of_application == "adult"

    def test_changes_overlay_client_application(self, context):
        state = renew_state(
            has_marital_status_changed=True,
            marital_status="married",
            partner_information=partner_information(),
            has_address_changed=True,
            address_information=AddressInformationState(
                copy_mailing_address=True,
                mailing_address="2 New St",
                mailing_city="Toronto",
                mailing_country="CAN",
                mailing_postal_code="M5V 2T6",
                mailing_province="ON",
            ),
            contact_information=RenewContactInformationState(
                is_new_or_updated_phone_number=True,
                phone_number="416-555-0100",
                is_new_or_updated_email=True,
                email="new@example.com",
            ),
            confirm_dental_benefits=changed_benefits(),
            dental_benefits=dental_benefits(has_provincial_territorial_benefits=False),
        )
        dto = renew_state_to_dto(reviewed(review_renew_state(state, context=context)))

        assert dto.applicant_information.marital_status == "married"
        assert dto.partner_information.social_insurance_number == partner_information().social_insurance_number
        assert dto.contact_information.mailing_address == "2 New St"
        assert dto.contact_information.phone_number == "416-555-0100"
        assert dto.contact_information.email == "new@example.com"
        assert dto.communication_preferences.email == "new@example.com"
        assert dto.dental_benefits == ["federal-program"]

    def test_present_phone_without_flag_counts_as_change(self, context):
        contact = RenewContactInformationState(is_new_or_updated_email=False, phone_number="416-555-0100")
        projected = reviewed(review_renew_state(renew_state(), context=context)).model_copy(
            update={"contact_information": contact}
        )

        assert renew_state_to_dto(projected).contact_information.phone_number == "416-555-0100"

    def test_explicit_flag_wins(self, context):
        contact = RenewContactInformationState(
            is_new_or_updated_phone_number=False,
            is_new_or_updated_email=False,
            phone_number="416-555-0100",
        )
        dto = renew_state_to_dto(reviewed(review_renew_state(renew_state(contact_information=contact), context=context)))

        assert dto.contact_information.phone_number == "613-555-0100"

    def test_children_matched_by_client_number(self, context):
        state = renew_state(type_of_renewal="adult-child", children=[renew_child()])
        dto = renew_state_to_dto(reviewed(review_renew_state(state, context=context)))

        assert dto.type_of_application == "adult-child"
        child = dto.children[0]
        assert child.information.client_number == CHILD_CLIENT_NUMBER
        assert child.information.social_insurance_number == CHILD_SIN
        assert child.dental_benefits == ["child-program"]
        assert child.dental_insurance is True

    def test_family_without_children_becomes_adult(self, context):
        projected = reviewed(review_renew_state(renew_state(), context=context))
        dto = renew_state_to_dto(projected.model_copy(update={"type_of_renewal": "adult-child"}))

        assert dto.type_of_application == "adult"


class TestProtectedRenewStateToDto:

    def test_without_children(self, context):
        dto = protected_renew_state_to_dto(reviewed(review_protected_renew_state(protected_renew_state(), context=context)))

        assert dto.type_of_application == "adult"
        assert dto.children == []
        assert dto.dental_benefits == ["federal-program"]

    def test_selected_child(self, context):
        child = protected_child(dental_insurance=False, demographic_survey=DemographicSurveyState())
        state = protected_renew_state(children=[child])
        dto = protected_renew_state_to_dto(reviewed(review_protected_renew_state(state, context=context)))

        assert dto.type_of_application == "adult-child"
        assert dto.children[0].information.social_insurance_number == CHILD_SIN
        assert dto.children[0].dental_insurance is False

    def test_unknown_child_is_malformed_upstream(self, context):
        child = protected_child(client_number="99999999999", dental_insurance=True, demographic_survey=DemographicSurveyState())
        state = protected_renew_state(children=[child])

        with pytest.raises(MalformedUpstreamData) as exc_info:
            protected_renew_state_to_dto(reviewed(review_protected_renew_state(state, context=context)))

        assert exc_info.value.tag == "Client Number"

    def test_dependant_without_client_number(self, context):
        on_file = client_application_dto().children[0]
        unnumbered = on_file.model_copy(
            update={"information": on_file.information.model_copy(update={"client_number": None})}
        )
        child = protected_child(client_number=None, dental_insurance=True, demographic_survey=DemographicSurveyState())
        state = protected_renew_state(
            client_application=client_application_dto(children=[unnumbered]),
            children=[child],
        )

        with pytest.raises(MalformedUpstreamData) as exc_info:
            protected_renew_state_to_dto(reviewed(review_protected_renew_state(state, context=context)))

        assert exc_info.value.path == "BenefitApplication.Applicant.RelatedPerson[Dependant].ClientIdentification"
        assert exc_info.value.tag == "Client Number"

    def test_demographic_surveys_carried(self, context):
        child_survey = DemographicSurveyState(gender_status="girl", ethnic_groups=["group-a"])
        child = protected_child(dental_insurance=True, demographic_survey=child_survey)
        state = protected_renew_state(
            demographic_survey=DemographicSurveyState(indigenous_status="no", disability_status="yes"),
            children=[child],
        )

        dto = protected_renew_state_to_dto(reviewed(review_protected_renew_state(state, context=context)))

        assert dto.demographic_survey.indigenous_status == "no"
        assert dto.demographic_survey.disability_status == "yes"
        assert dto.children[0].demographic_survey.gender_status == "girl"
        assert dto.children[0].demographic_survey.ethnic_groups == ["group-a"]

    def test_unselected_child_survey_not_submitted(self, context):
        state = protected_renew_state(children=[protected_child(demographic_survey=DemographicSurveyState(gender_status="boy"))])

        dto = protected_renew_state_to_dto(reviewed(review_protected_renew_state(state, context=context)))

        assert dto.children == []
        assert dto.demographic_survey is not None


class TestBenefitApplicationMapper:

    def test_request_entity(self, context, wizard_settings):
        dto = apply_state_to_dto(reviewed(review_apply_state(apply_family_state(), context=context)))
        wire = BenefitApplicationMapper(wizard_settings).to_request_entity(dto).to_wire()
        application = wire["BenefitApplication"]
        applicant = application["Applicant"]

        assert application["BenefitApplicationCategoryCode"] == {"ReferenceDataID": "775170001"}
        assert application["BenefitApplicationChannelCode"] == {"ReferenceDataID": "775170001"}
        assert "ClientIdentification" not in applicant
        assert applicant["PersonSINIdentification"] == {"IdentificationID": APPLICANT_SIN}
        assert applicant["PersonContactInformation"][0]["EmailAddress"] == [{"EmailAddressID": "jane@example.com"}]
        assert applicant["PersonContactInformation"][0]["TelephoneNumber"] == [{
            "FullTelephoneNumber": {"TelephoneNumberFullID": "613-555-0100"},
            "TelephoneNumberCategoryCode": {"ReferenceDataName": "Primary"},
        }]
        assert [person["PersonRelationshipCode"]["ReferenceDataName"] for person in applicant["RelatedPerson"]] == [
            "Dependant"
        ]

    def test_confirmation_code(self):
        response = BenefitApplicationResponseEntity.model_validate({
            "BenefitApplication": {"BenefitApplicationIdentification": [{"IdentificationID": "CONF-42"}]}
        })
        assert BenefitApplicationMapper.to_confirmation_code(response) == "CONF-42"

    def test_missing_confirmation_code(self):
        response = BenefitApplicationResponseEntity.model_validate({"BenefitApplication": {}})

        with pytest.raises(MalformedUpstreamData):
            BenefitApplicationMapper.to_confirmation_code(response)
