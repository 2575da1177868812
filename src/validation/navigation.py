"""
Wizard navigation helpers.

Glue between the lifecycle manager and the review validators: which step
comes next after a save, what a submitted flow may still show, and how a
single child is looked up from its route parameter.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Optional, Tuple, TypeVar, Union
from uuid import UUID, uuid4

from database.session_store import HttpSession
from database.state_lifecycle import StateLifecycleManager
from domain.results import ReviewOutcome, ReviewRedirect, RouteTarget, is_redirect
from domain.state import WizardState
from services.logging_config import get_logger

logger = get_logger(__name__)

S = TypeVar("S", bound=WizardState)
C = TypeVar("C")

Validator = Callable[[Any], ReviewOutcome]


@dataclass(frozen=True)
class SingleChild(Generic[C]):
    child: C
    child_number: int
    is_new: bool
    edit_mode: bool


async def load_for_review(
    manager: StateLifecycleManager[S],
    flow_id: Any,
    session: HttpSession,
    validator: Validator,
) -> ReviewOutcome:
    """
    Load a flow and run its review validator.

    A redirect ends edit mode: the user is sent back into the regular step
    sequence and must not bounce straight back to the review page.
    """
    state = await manager.load(flow_id, session)
    outcome = validator(state)

    if is_redirect(outcome) and state.edit_mode and not state.is_submitted:
        await manager.save(flow_id, session, {"edit_mode": False})
        logger.info(f"Edit mode cleared; review redirected to {outcome.target.route_id} ({outcome.rule})")

    return outcome


def next_step_target(state: WizardState, validator: Validator, review_target: RouteTarget) -> RouteTarget:
    """
    Where to go after a successful step save.

    In edit mode the user returns to the review page. Otherwise the first
    step the validator still finds incomplete comes next, or the review page
    once nothing is missing.
    """
    if state.edit_mode:
        return review_target

    outcome = validator(state)
    if is_redirect(outcome):
        return outcome.target
    return review_target


def guard_submitted(
    state: WizardState,
    current_route: str,
    confirmation_route: str,
    first_route: str,
    params: Mapping[str, str],
) -> Optional[RouteTarget]:
    """
    Keep submitted and unsubmitted flows on their side of the confirmation page.

    Returns:
        The target to redirect to, or None when current_route may be shown
    """
    on_confirmation = current_route == confirmation_route

    if state.is_submitted and not on_confirmation:
        logger.warning(f"Flow already submitted; redirecting {current_route} to confirmation")
        return RouteTarget(confirmation_route, dict(params))

    if not state.is_submitted and on_confirmation:
        logger.warning(f"Flow not submitted; redirecting confirmation to {first_route}")
        return RouteTarget(first_route, dict(params))

    return None


def get_single_child(
    state: WizardState,
    child_id: Any,
    index_route: str,
    params: Mapping[str, str],
) -> Union[SingleChild, ReviewRedirect]:
    """
    Look a child up by id.

    Unknown or malformed ids send the user back to the children list. Edit
    mode only applies to children that are already complete.
    """
    try:
        parsed = child_id if isinstance(child_id, UUID) else UUID(str(child_id))
    except ValueError:
        logger.warning(f"Invalid childId param format; childId: [{child_id}]")
        return ReviewRedirect(RouteTarget(index_route, dict(params)), rule="child-id-format")

    for index, child in enumerate(state.children):
        if child.id == parsed:
            is_new = child.is_new
            return SingleChild(
                child=child,
                child_number=index + 1,
                is_new=is_new,
                edit_mode=state.edit_mode and not is_new,
            )

    logger.warning(f"Single child has not been found; childId: [{parsed}]")
    return ReviewRedirect(RouteTarget(index_route, dict(params)), rule="child-not-found")


async def add_child(
    manager: StateLifecycleManager[S],
    flow_id: Any,
    session: HttpSession,
    child_model: type,
    **fields: Any,
) -> Tuple[S, UUID]:
    """Append a new, empty child record and return its id."""
    state = await manager.load(flow_id, session)
    child = child_model(id=uuid4(), **fields)
    state = await manager.save(flow_id, session, {"children": [*state.children, child]})
    return state, child.id


async def remove_child(
    manager: StateLifecycleManager[S],
    flow_id: Any,
    session: HttpSession,
    child_id: UUID,
) -> S:
    """Drop one child record; an unknown id leaves the list unchanged."""
    state = await manager.load(flow_id, session)
    children = [child for child in state.children if child.id != child_id]
    return await manager.save(flow_id, session, {"children": children})
