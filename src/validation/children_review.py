"""
Per-child review.

Every child is checked against its own ordered rule list, keyed by the
child's id rather than its position. A failing child produces a redirect
carrying that child's id so the user lands on the right child's step.
"""

from typing import Callable, List, Mapping, Optional, Sequence, TypeVar

from domain.results import ReviewOk, ReviewOutcome, ReviewRedirect, RouteTarget
from validation.review_rules import ReviewContext, Rule, first_failing_rule

C = TypeVar("C")
R = TypeVar("R")


def child_params(params: Mapping[str, str], child) -> dict:
    return {**params, "childId": str(child.id)}


def review_children(
    children: Sequence[C],
    rules: Sequence[Rule[C]],
    params: Mapping[str, str],
    context: ReviewContext,
    project: Callable[[C, ReviewContext], R],
    index_route: str,
    required: bool = True,
    include_new: bool = True,
) -> ReviewOutcome:
    """
    Review a list of children in order.

    Args:
        children: child records as stored
        rules: ordered per-child rules; targets use the $childId placeholder
        params: flow route parameters (id)
        project: builds the reviewable child once all rules pass
        index_route: children list step, used when a child is required but none exist
        required: the application type needs at least one dependant
        include_new: review incomplete children too; when False they are
            left out of the projection instead

    Returns:
        ReviewOk with the projected children, or the first child redirect
    """
    selected = [child for child in children if include_new or not child.is_new]

    if required and not selected:
        return ReviewRedirect(RouteTarget(index_route, dict(params)), rule="children-required")

    reviewed: List[R] = []
    for child in selected:
        failing: Optional[Rule[C]] = first_failing_rule(rules, child, context)
        if failing is not None:
            return failing.redirect(child_params(params, child))
        reviewed.append(project(child, context))

    return ReviewOk(reviewed)
