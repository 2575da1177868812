"""
Review rules for the apply flow.

Each type of application has its own ordered rule list. The lists share a
common head (terms, type, tax filing) and the applicant and benefit steps;
what differs is the age routing in the middle and whether dependants are
required at the end.
"""

from typing import Dict, List, Mapping, Optional

from domain.results import ReviewOk, ReviewOutcome
from domain.reviewable import ReviewableApplyChild, ReviewableApplyState
from domain.state import ApplyChildState, ApplyState
from services.age_category import ADULTS, CHILDREN, SENIORS, YOUTH
from validation.children_review import review_children
from validation.review_rules import (
    ReviewContext,
    Rule,
    differs,
    equals,
    first_failing_rule,
    flow_params,
    is_true,
    never,
    present,
)

APPLY_ROUTE_PREFIX = "public/apply/$id"

ADULT = "adult"
ADULT_CHILD = "adult-child"
CHILD = "child"
DELEGATE = "delegate"

FLOWS_WITH_CHILDREN = (ADULT_CHILD, CHILD)


def apply_route(path: str) -> str:
    return f"{APPLY_ROUTE_PREFIX}/{path}"


def review_route(flow: str) -> str:
    return apply_route(f"{flow}/review-information")


def confirmation_route(flow: str) -> str:
    return apply_route(f"{flow}/confirmation")


def children_index_route(flow: str) -> str:
    return apply_route(f"{flow}/children/index")


def _age(state, ctx: ReviewContext) -> str:
    return ctx.age_category(state.date_of_birth)


# =============================================================================
# RULE BUILDERS
# =============================================================================

def _head_rules(flow: str) -> List[Rule[ApplyState]]:
    return [
        Rule("terms-and-conditions", present("terms_and_conditions"), apply_route("terms-and-conditions")),
        Rule("type-of-application", present("type_of_application"), apply_route("type-application")),
        Rule("not-delegate", differs("type_of_application", DELEGATE), apply_route("application-delegate")),
        Rule("type-matches-flow", equals("type_of_application", flow), apply_route("type-application")),
        Rule("tax-filing", present("has_filed_taxes"), apply_route("tax-filing")),
        Rule("filed-taxes", is_true("has_filed_taxes"), apply_route("file-taxes")),
    ]


def _applicant_rules(flow: str) -> List[Rule[ApplyState]]:
    return [
        Rule(
            "applicant-information",
            present("applicant_information"),
            apply_route(f"{flow}/applicant-information"),
        ),
        # Married without a partner and single with one both go back to the same step
        Rule(
            "marital-status",
            lambda s, ctx: s.marital_status is not None and ctx.partner_consistent(s.marital_status, s.partner_information),
            apply_route(f"{flow}/marital-status"),
        ),
        Rule("contact-information", present("contact_information"), apply_route(f"{flow}/contact-information")),
        Rule(
            "communication-preferences",
            present("communication_preferences"),
            apply_route(f"{flow}/communication-preference"),
        ),
    ]


def _benefit_rules(flow: str) -> List[Rule[ApplyState]]:
    return [
        Rule("dental-insurance", present("dental_insurance"), apply_route(f"{flow}/dental-insurance")),
        Rule(
            "federal-provincial-territorial-benefits",
            lambda s, ctx: (
                s.has_federal_provincial_territorial_benefits is False
                or (s.has_federal_provincial_territorial_benefits is True and s.dental_benefits is not None)
            ),
            apply_route(f"{flow}/confirm-federal-provincial-territorial-benefits"),
        ),
    ]


def _adult_rules() -> List[Rule[ApplyState]]:
    flow = ADULT
    return [
        *_head_rules(flow),
        Rule("date-of-birth", present("date_of_birth"), apply_route(f"{flow}/date-of-birth")),
        Rule("applicant-not-child", lambda s, ctx: _age(s, ctx) != CHILDREN, apply_route(f"{flow}/parent-or-guardian")),
        Rule(
            "youth-living-independently-answered",
            lambda s, ctx: _age(s, ctx) != YOUTH or s.living_independently is not None,
            apply_route(f"{flow}/living-independently"),
        ),
        Rule(
            "youth-living-independently",
            lambda s, ctx: _age(s, ctx) != YOUTH or s.living_independently is True,
            apply_route(f"{flow}/parent-or-guardian"),
        ),
        Rule(
            "disability-tax-credit-answered",
            lambda s, ctx: _age(s, ctx) != ADULTS or s.disability_tax_credit is not None,
            apply_route(f"{flow}/disability-tax-credit"),
        ),
        Rule(
            "disability-tax-credit",
            lambda s, ctx: _age(s, ctx) != ADULTS or s.disability_tax_credit is True,
            apply_route(f"{flow}/dob-eligibility"),
        ),
        *_applicant_rules(flow),
        *_benefit_rules(flow),
    ]


def _adult_child_rules() -> List[Rule[ApplyState]]:
    flow = ADULT_CHILD

    def age_is(category, s, ctx):
        return _age(s, ctx) == category

    return [
        *_head_rules(flow),
        Rule(
            "date-of-birth",
            lambda s, ctx: s.date_of_birth is not None and s.all_children_under_18 is not None,
            apply_route(f"{flow}/date-of-birth"),
        ),
        Rule(
            "child-applicant-with-children-under-18",
            lambda s, ctx: not (age_is(CHILDREN, s, ctx) and s.all_children_under_18),
            apply_route(f"{flow}/contact-apply-child"),
        ),
        Rule(
            "child-applicant",
            lambda s, ctx: not (age_is(CHILDREN, s, ctx) and not s.all_children_under_18),
            apply_route(f"{flow}/parent-or-guardian"),
        ),
        Rule(
            "youth-with-children-over-18",
            lambda s, ctx: not (age_is(YOUTH, s, ctx) and not s.all_children_under_18),
            apply_route(f"{flow}/parent-or-guardian"),
        ),
        Rule(
            "youth-living-independently-answered",
            lambda s, ctx: not (age_is(YOUTH, s, ctx) and s.living_independently is None),
            apply_route(f"{flow}/living-independently"),
        ),
        Rule(
            "disability-tax-credit-answered",
            lambda s, ctx: not (age_is(ADULTS, s, ctx) and s.disability_tax_credit is None),
            apply_route(f"{flow}/disability-tax-credit"),
        ),
        Rule(
            "adult-with-credit-and-children-over-18",
            lambda s, ctx: not (age_is(ADULTS, s, ctx) and s.disability_tax_credit is True and not s.all_children_under_18),
            apply_route(f"{flow}/apply-yourself"),
        ),
        Rule(
            "adult-without-credit-children-only",
            lambda s, ctx: not (age_is(ADULTS, s, ctx) and s.disability_tax_credit is False and s.all_children_under_18),
            apply_route(f"{flow}/apply-children"),
        ),
        Rule(
            "adult-without-credit",
            lambda s, ctx: not (age_is(ADULTS, s, ctx) and s.disability_tax_credit is False and not s.all_children_under_18),
            apply_route(f"{flow}/dob-eligibility"),
        ),
        Rule(
            "senior-with-children-over-18",
            lambda s, ctx: not (age_is(SENIORS, s, ctx) and not s.all_children_under_18),
            apply_route(f"{flow}/apply-yourself"),
        ),
        *_applicant_rules(flow),
        *_benefit_rules(flow),
    ]


def _child_rules() -> List[Rule[ApplyState]]:
    flow = CHILD
    applicant_rules = _applicant_rules(flow)
    return [
        *_head_rules(flow),
        Rule(
            "applicant-information",
            lambda s, ctx: s.applicant_information is not None and s.date_of_birth is not None,
            apply_route(f"{flow}/applicant-information"),
        ),
        Rule("applicant-not-child", lambda s, ctx: _age(s, ctx) != CHILDREN, apply_route(f"{flow}/contact-apply-child")),
        *applicant_rules[1:],
    ]


def _delegate_rules() -> List[Rule[ApplyState]]:
    return [
        Rule("terms-and-conditions", present("terms_and_conditions"), apply_route("terms-and-conditions")),
        Rule("type-of-application", present("type_of_application"), apply_route("type-application")),
        Rule("delegate", never(), apply_route("application-delegate")),
    ]


def _dependant_rules(flow: str) -> List[Rule[ApplyChildState]]:
    base = f"{flow}/children/$childId"
    return [
        Rule("child-information", present("information"), apply_route(f"{base}/information")),
        Rule("child-parent-or-guardian", lambda c, ctx: c.information.is_parent, apply_route(f"{base}/parent-or-guardian")),
        Rule(
            "child-age",
            lambda c, ctx: ctx.age_category(c.information.date_of_birth) not in (ADULTS, SENIORS),
            apply_route(f"{base}/cannot-apply-child"),
        ),
        Rule("child-dental-insurance", present("dental_insurance"), apply_route(f"{base}/dental-insurance")),
        Rule(
            "child-federal-provincial-territorial-benefits",
            lambda c, ctx: (
                c.has_federal_provincial_territorial_benefits is False
                or (c.has_federal_provincial_territorial_benefits is True and c.dental_benefits is not None)
            ),
            apply_route(f"{base}/confirm-federal-provincial-territorial-benefits"),
        ),
    ]


APPLY_RULES: Dict[str, List[Rule[ApplyState]]] = {
    ADULT: _adult_rules(),
    ADULT_CHILD: _adult_child_rules(),
    CHILD: _child_rules(),
    DELEGATE: _delegate_rules(),
}

APPLY_CHILD_RULES: Dict[str, List[Rule[ApplyChildState]]] = {
    flow: _dependant_rules(flow) for flow in FLOWS_WITH_CHILDREN
}


# =============================================================================
# PROJECTIONS
# =============================================================================

def _project_child(child: ApplyChildState, ctx: ReviewContext) -> ReviewableApplyChild:
    has_benefits = child.has_federal_provincial_territorial_benefits
    return ReviewableApplyChild(
        id=child.id,
        age_category=ctx.age_category(child.information.date_of_birth),
        information=child.information,
        dental_insurance=child.dental_insurance,
        has_federal_provincial_territorial_benefits=has_benefits,
        dental_benefits=child.dental_benefits if has_benefits else None,
    )


def _project(state: ApplyState, ctx: ReviewContext, children: List[ReviewableApplyChild]) -> ReviewableApplyState:
    has_benefits = state.has_federal_provincial_territorial_benefits
    return ReviewableApplyState(
        id=state.id,
        edit_mode=state.edit_mode,
        submission_info=state.submission_info,
        type_of_application=state.type_of_application,
        application_year=state.application_year,
        terms_and_conditions=state.terms_and_conditions,
        has_filed_taxes=state.has_filed_taxes,
        date_of_birth=state.date_of_birth,
        age_category=_age(state, ctx),
        all_children_under_18=state.all_children_under_18,
        disability_tax_credit=state.disability_tax_credit,
        living_independently=state.living_independently,
        applicant_information=state.applicant_information,
        marital_status=state.marital_status,
        partner_information=state.partner_information,
        contact_information=state.contact_information,
        communication_preferences=state.communication_preferences,
        dental_insurance=state.dental_insurance,
        has_federal_provincial_territorial_benefits=has_benefits,
        # A "no" answer makes any stale benefit selection irrelevant
        dental_benefits=state.dental_benefits if has_benefits else None,
        children=children,
    )


# =============================================================================
# VALIDATOR
# =============================================================================

def review_apply_state(
    state: ApplyState,
    flow: Optional[str] = None,
    params: Optional[Mapping[str, str]] = None,
    context: Optional[ReviewContext] = None,
) -> ReviewOutcome:
    """
    Validate an apply state for review.

    Args:
        state: the stored apply state
        flow: the flow whose pages are being served; defaults to the state's
            own type of application
        params: route parameters; defaults to the flow id

    Returns:
        ReviewOk(ReviewableApplyState) or the first failing step's redirect
    """
    context = context or ReviewContext()
    params = dict(params) if params is not None else flow_params(state.id)
    flow = flow or state.type_of_application or ADULT

    failing = first_failing_rule(APPLY_RULES[flow], state, context)
    if failing is not None:
        return failing.redirect(params)

    children: List[ReviewableApplyChild] = []
    if flow in FLOWS_WITH_CHILDREN:
        outcome = review_children(
            state.children,
            APPLY_CHILD_RULES[flow],
            params,
            context,
            _project_child,
            index_route=children_index_route(flow),
            required=True,
        )
        if not isinstance(outcome, ReviewOk):
            return outcome
        children = outcome.state

    return ReviewOk(_project(state, context, children))
