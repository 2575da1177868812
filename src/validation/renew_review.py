"""
Review rules for the renew and protected renew flows.

Renewals confirm what the benefits system already knows: each "confirm"
step records whether something changed, and the matching "update" step is
required only when it did.
"""

from typing import Dict, List, Mapping, Optional

from domain.results import ReviewOk, ReviewOutcome
from domain.reviewable import (
    ReviewableProtectedChild,
    ReviewableProtectedRenewState,
    ReviewableRenewChild,
    ReviewableRenewState,
)
from domain.state import ProtectedChildState, ProtectedRenewState, RenewChildState, RenewState
from validation.children_review import review_children
from validation.review_rules import (
    ReviewContext,
    Rule,
    differs,
    equals,
    first_failing_rule,
    flow_params,
    never,
    present,
    required_when,
)

RENEW_ROUTE_PREFIX = "public/renew/$id"
PROTECTED_RENEW_ROUTE_PREFIX = "protected/renew/$id"

ADULT = "adult"
ADULT_CHILD = "adult-child"
CHILD = "child"
DELEGATE = "delegate"

FLOWS_WITH_CHILDREN = (ADULT_CHILD, CHILD)
# A guardian renewing for children only does not renew their own coverage
FLOWS_WITH_APPLICANT_COVERAGE = (ADULT, ADULT_CHILD)


def renew_route(path: str) -> str:
    return f"{RENEW_ROUTE_PREFIX}/{path}"


def protected_renew_route(path: str) -> str:
    return f"{PROTECTED_RENEW_ROUTE_PREFIX}/{path}"


def review_route(flow: str) -> str:
    return renew_route(f"{flow}/review-information")


def confirmation_route(flow: str) -> str:
    return renew_route(f"{flow}/confirmation")


def children_index_route(flow: str) -> str:
    return renew_route(f"{flow}/children/index")


PROTECTED_REVIEW_ROUTE = protected_renew_route("review-information")
PROTECTED_CONFIRMATION_ROUTE = protected_renew_route("confirmation")
PROTECTED_MEMBER_SELECTION_ROUTE = protected_renew_route("member-selection")


def _benefits_confirmed(s, ctx) -> bool:
    return s.confirm_dental_benefits is not None


def _benefits_updated(s, ctx) -> bool:
    return not s.confirm_dental_benefits.any_changed or s.dental_benefits is not None


def _marital_status_consistent(s, ctx) -> bool:
    if not s.has_marital_status_changed:
        return True
    return s.marital_status is not None and ctx.partner_consistent(s.marital_status, s.partner_information)


# =============================================================================
# RENEW RULES
# =============================================================================

def _renew_rules(flow: str) -> List[Rule[RenewState]]:
    rules: List[Rule[RenewState]] = [
        Rule("type-of-renewal", present("type_of_renewal"), renew_route("type-renewal")),
        Rule("not-delegate", differs("type_of_renewal", DELEGATE), renew_route("renewal-delegate")),
        Rule("type-matches-flow", equals("type_of_renewal", flow), renew_route("type-renewal")),
        Rule("applicant-information", present("applicant_information"), renew_route("applicant-information")),
        Rule("client-application", present("client_application"), renew_route("applicant-information")),
        Rule("marital-status-confirmed", present("has_marital_status_changed"), renew_route(f"{flow}/confirm-marital-status")),
        Rule("marital-status", _marital_status_consistent, renew_route(f"{flow}/confirm-marital-status")),
        Rule("address-confirmed", present("has_address_changed"), renew_route(f"{flow}/confirm-address")),
        Rule(
            "address-updated",
            required_when(lambda s, ctx: s.has_address_changed, present("address_information")),
            renew_route(f"{flow}/update-address"),
        ),
        Rule(
            "phone-confirmed",
            lambda s, ctx: s.contact_information is not None and s.contact_information.is_new_or_updated_phone_number is not None,
            renew_route(f"{flow}/confirm-phone"),
        ),
        Rule(
            "email-confirmed",
            lambda s, ctx: s.contact_information.is_new_or_updated_email is not None,
            renew_route(f"{flow}/confirm-email"),
        ),
    ]
    if flow in FLOWS_WITH_APPLICANT_COVERAGE:
        rules += [
            Rule("dental-insurance", present("dental_insurance"), renew_route(f"{flow}/dental-insurance")),
            Rule(
                "federal-provincial-territorial-benefits-confirmed",
                _benefits_confirmed,
                renew_route(f"{flow}/confirm-federal-provincial-territorial-benefits"),
            ),
            Rule(
                "federal-provincial-territorial-benefits-updated",
                _benefits_updated,
                renew_route(f"{flow}/update-federal-provincial-territorial-benefits"),
            ),
        ]
    return rules


def _renew_delegate_rules() -> List[Rule[RenewState]]:
    return [
        Rule("type-of-renewal", present("type_of_renewal"), renew_route("type-renewal")),
        Rule("delegate", never(), renew_route("renewal-delegate")),
    ]


def _renew_child_rules(flow: str) -> List[Rule[RenewChildState]]:
    base = f"{flow}/children/$childId"
    return [
        Rule("child-information", present("information"), renew_route(f"{base}/information")),
        Rule("child-parent-or-guardian", lambda c, ctx: c.information.is_parent, renew_route(f"{base}/parent-or-guardian")),
        Rule("child-dental-insurance", present("dental_insurance"), renew_route(f"{base}/dental-insurance")),
        Rule(
            "child-federal-provincial-territorial-benefits-confirmed",
            _benefits_confirmed,
            renew_route(f"{base}/confirm-federal-provincial-territorial-benefits"),
        ),
        Rule(
            "child-federal-provincial-territorial-benefits-updated",
            _benefits_updated,
            renew_route(f"{base}/update-federal-provincial-territorial-benefits"),
        ),
    ]


RENEW_RULES: Dict[str, List[Rule[RenewState]]] = {
    ADULT: _renew_rules(ADULT),
    ADULT_CHILD: _renew_rules(ADULT_CHILD),
    CHILD: _renew_rules(CHILD),
    DELEGATE: _renew_delegate_rules(),
}

RENEW_CHILD_RULES: Dict[str, List[Rule[RenewChildState]]] = {
    flow: _renew_child_rules(flow) for flow in FLOWS_WITH_CHILDREN
}


def _project_renew_child(child: RenewChildState, ctx: ReviewContext) -> ReviewableRenewChild:
    return ReviewableRenewChild(
        id=child.id,
        information=child.information,
        dental_insurance=child.dental_insurance,
        confirm_dental_benefits=child.confirm_dental_benefits,
        dental_benefits=child.dental_benefits if child.confirm_dental_benefits.any_changed else None,
    )


def _project_renew(state: RenewState, flow: str, children: List[ReviewableRenewChild]) -> ReviewableRenewState:
    benefits_changed = state.confirm_dental_benefits is not None and state.confirm_dental_benefits.any_changed
    return ReviewableRenewState(
        id=state.id,
        edit_mode=state.edit_mode,
        submission_info=state.submission_info,
        type_of_renewal=flow,
        applicant_information=state.applicant_information,
        client_application=state.client_application,
        has_marital_status_changed=state.has_marital_status_changed,
        marital_status=state.marital_status if state.has_marital_status_changed else None,
        partner_information=state.partner_information if state.has_marital_status_changed else None,
        has_address_changed=state.has_address_changed,
        address_information=state.address_information if state.has_address_changed else None,
        contact_information=state.contact_information,
        communication_preferences=state.communication_preferences,
        dental_insurance=state.dental_insurance,
        confirm_dental_benefits=state.confirm_dental_benefits,
        dental_benefits=state.dental_benefits if benefits_changed else None,
        children=children,
    )


def review_renew_state(
    state: RenewState,
    flow: Optional[str] = None,
    params: Optional[Mapping[str, str]] = None,
    context: Optional[ReviewContext] = None,
) -> ReviewOutcome:
    """
    Validate a renew state for review.

    Returns:
        ReviewOk(ReviewableRenewState) or the first failing step's redirect
    """
    context = context or ReviewContext()
    params = dict(params) if params is not None else flow_params(state.id)
    flow = flow or state.type_of_renewal or ADULT

    failing = first_failing_rule(RENEW_RULES[flow], state, context)
    if failing is not None:
        return failing.redirect(params)

    children: List[ReviewableRenewChild] = []
    if flow in FLOWS_WITH_CHILDREN:
        outcome = review_children(
            state.children,
            RENEW_CHILD_RULES[flow],
            params,
            context,
            _project_renew_child,
            index_route=children_index_route(flow),
            required=True,
        )
        if not isinstance(outcome, ReviewOk):
            return outcome
        children = outcome.state

    return ReviewOk(_project_renew(state, flow, children))


# =============================================================================
# PROTECTED RENEW RULES
# =============================================================================

PROTECTED_RENEW_RULES: List[Rule[ProtectedRenewState]] = [
    Rule("dental-insurance", present("dental_insurance"), protected_renew_route("dental-insurance")),
    Rule(
        "federal-provincial-territorial-benefits-confirmed",
        _benefits_confirmed,
        protected_renew_route("confirm-federal-provincial-territorial-benefits"),
    ),
    Rule(
        "federal-provincial-territorial-benefits-updated",
        _benefits_updated,
        protected_renew_route("update-federal-provincial-territorial-benefits"),
    ),
    Rule(
        "marital-status",
        lambda s, ctx: s.marital_status is None or ctx.partner_consistent(s.marital_status, s.partner_information),
        protected_renew_route("confirm-marital-status"),
    ),
    Rule(
        "address-updated",
        required_when(lambda s, ctx: s.has_address_changed is True, present("address_information")),
        protected_renew_route("update-address"),
    ),
    Rule("demographic-survey", present("demographic_survey"), protected_renew_route("demographic-survey")),
]

PROTECTED_CHILD_RULES: List[Rule[ProtectedChildState]] = [
    Rule("child-dental-insurance", present("dental_insurance"), protected_renew_route("$childId/dental-insurance")),
    Rule("child-demographic-survey", present("demographic_survey"), protected_renew_route("$childId/demographic-survey")),
]


def _project_protected_child(child: ProtectedChildState, ctx: ReviewContext) -> ReviewableProtectedChild:
    return ReviewableProtectedChild(
        id=child.id,
        first_name=child.first_name,
        last_name=child.last_name,
        client_number=child.client_number,
        dental_insurance=child.dental_insurance,
        demographic_survey=child.demographic_survey,
    )


def review_protected_renew_state(
    state: ProtectedRenewState,
    params: Optional[Mapping[str, str]] = None,
    context: Optional[ReviewContext] = None,
) -> ReviewOutcome:
    """
    Validate a protected renew state for review.

    Children the user did not select for renewal are left out of the
    projection; renewing without any child is allowed.
    """
    context = context or ReviewContext()
    params = dict(params) if params is not None else flow_params(state.id)

    failing = first_failing_rule(PROTECTED_RENEW_RULES, state, context)
    if failing is not None:
        return failing.redirect(params)

    outcome = review_children(
        state.children,
        PROTECTED_CHILD_RULES,
        params,
        context,
        _project_protected_child,
        index_route=PROTECTED_MEMBER_SELECTION_ROUTE,
        required=False,
        include_new=False,
    )
    if not isinstance(outcome, ReviewOk):
        return outcome

    benefits_changed = state.confirm_dental_benefits.any_changed
    return ReviewOk(ReviewableProtectedRenewState(
        id=state.id,
        edit_mode=state.edit_mode,
        submission_info=state.submission_info,
        client_application=state.client_application,
        dental_insurance=state.dental_insurance,
        confirm_dental_benefits=state.confirm_dental_benefits,
        dental_benefits=state.dental_benefits if benefits_changed else None,
        demographic_survey=state.demographic_survey,
        marital_status=state.marital_status,
        partner_information=state.partner_information,
        has_address_changed=state.has_address_changed,
        address_information=state.address_information if state.has_address_changed else None,
        contact_information=state.contact_information,
        children=outcome.state,
    ))
