"""
Ordered review rules.

A flow's prerequisites are an ordered list of Rule(name, predicate, target).
evaluate_rules() walks the list and stops at the first rule whose predicate
is not satisfied, returning a redirect to that rule's step. Only a state
that satisfies every rule is projected into its reviewable form.

Route ids use "$id" and "$childId" placeholders; the parameters needed to
resolve them travel with the RouteTarget.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, Generic, Mapping, Optional, Sequence, TypeVar

from config.settings import WizardSettings, get_wizard_settings
from domain.results import ReviewOk, ReviewOutcome, ReviewRedirect, RouteTarget
from services.age_category import AgeCategory, age_category, today

S = TypeVar("S")
R = TypeVar("R")


@dataclass(frozen=True)
class ReviewContext:
    """Configuration and clock shared by every predicate of one review."""

    settings: WizardSettings = field(default_factory=get_wizard_settings)
    as_of: Optional[date] = None

    @property
    def current_date(self) -> date:
        return self.as_of or today(self.settings)

    def age_category(self, date_of_birth: date) -> AgeCategory:
        return age_category(date_of_birth, self.current_date)

    def has_partner(self, marital_status: Optional[str]) -> bool:
        return self.settings.has_partner(marital_status)

    def partner_consistent(self, marital_status: Optional[str], partner) -> bool:
        """A partner is present exactly when the marital status implies one."""
        return self.has_partner(marital_status) == (partner is not None)


Predicate = Callable[[S, ReviewContext], bool]


@dataclass(frozen=True)
class Rule(Generic[S]):
    """
    One prerequisite.

    predicate returns True when the requirement holds; target is the route id
    of the step that fixes it.
    """

    name: str
    predicate: Predicate
    target: str

    def redirect(self, params: Mapping[str, str]) -> ReviewRedirect:
        return ReviewRedirect(RouteTarget(self.target, dict(params)), rule=self.name)


def first_failing_rule(
    rules: Sequence[Rule[S]],
    state: S,
    context: ReviewContext,
) -> Optional[Rule[S]]:
    for rule in rules:
        if not rule.predicate(state, context):
            return rule
    return None


def evaluate_rules(
    rules: Sequence[Rule[S]],
    state: S,
    params: Mapping[str, str],
    context: Optional[ReviewContext] = None,
    project: Optional[Callable[[S, ReviewContext], R]] = None,
) -> ReviewOutcome:
    """
    Evaluate rules in order; the first failing rule wins.

    Returns:
        ReviewRedirect for the first failing rule, otherwise ReviewOk carrying
        project(state, context), or the state itself when no projection is given
    """
    context = context or ReviewContext()
    failing = first_failing_rule(rules, state, context)
    if failing is not None:
        return failing.redirect(params)
    return ReviewOk(project(state, context) if project else state)


def flow_params(flow_id, **extra: str) -> Dict[str, str]:
    return {"id": str(flow_id), **{key: str(value) for key, value in extra.items()}}


# =============================================================================
# PREDICATE BUILDERS
# =============================================================================

def present(name: str) -> Predicate:
    """The named attribute has been answered."""
    return lambda state, ctx: getattr(state, name) is not None


def equals(name: str, expected) -> Predicate:
    return lambda state, ctx: getattr(state, name) == expected


def differs(name: str, excluded) -> Predicate:
    return lambda state, ctx: getattr(state, name) != excluded


def is_true(name: str) -> Predicate:
    return lambda state, ctx: getattr(state, name) is True


def required_when(condition: Predicate, requirement: Predicate) -> Predicate:
    """requirement must hold whenever condition holds."""
    return lambda state, ctx: not condition(state, ctx) or requirement(state, ctx)


def never() -> Predicate:
    return lambda state, ctx: False
