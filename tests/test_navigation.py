"""Tests for wizard navigation helpers."""

from uuid import uuid4

import pytest

from domain.results import ReviewOk, ReviewRedirect, RouteTarget
from domain.state import ApplyChildState, SubmissionInfoState
from fixtures.wizard_states import FLOW_ID, NOW, apply_child, apply_family_state, apply_state
from validation.apply_review import review_apply_state
from validation.navigation import (
    SingleChild,
    add_child,
    get_single_child,
    guard_submitted,
    load_for_review,
    next_step_target,
    remove_child,
)
from validation.review_rules import ReviewContext

PARAMS = {"id": str(FLOW_ID)}
REVIEW = RouteTarget("public/apply/$id/adult/review-information", PARAMS)
INDEX = "public/apply/$id/adult-child/children/index"


async def seed(manager, session, state):
    """Store a prepared state under FLOW_ID."""
    return await manager.start(FLOW_ID, session, **state.model_dump(exclude={"id", "last_updated_on"}))


@pytest.fixture
def validator(wizard_settings):
    context = ReviewContext(settings=wizard_settings)
    return lambda state: review_apply_state(state, context=context)


class TestLoadForReview:

    @pytest.mark.asyncio
    async def test_complete_state(self, apply_manager, http_session, validator):
        await seed(apply_manager, http_session, apply_state(edit_mode=True))

        outcome = await load_for_review(apply_manager, FLOW_ID, http_session, validator)

        assert isinstance(outcome, ReviewOk)
        assert (await apply_manager.load(FLOW_ID, http_session)).edit_mode is True

    @pytest.mark.asyncio
    async def test_redirect_clears_edit_mode(self, apply_manager, http_session, validator):
        await seed(apply_manager, http_session, apply_state(edit_mode=True, contact_information=None))

        outcome = await load_for_review(apply_manager, FLOW_ID, http_session, validator)

        assert outcome.target.route_id == "public/apply/$id/adult/contact-information"
        assert (await apply_manager.load(FLOW_ID, http_session)).edit_mode is False

    @pytest.mark.asyncio
    async def test_submitted_state_left_alone(self, apply_manager, http_session, validator):
        submitted = SubmissionInfoState(confirmation_code="CONF-1", submitted_on=NOW)
        await seed(apply_manager, http_session, apply_state(
            edit_mode=True,
            contact_information=None,
            submission_info=submitted,
        ))

        outcome = await load_for_review(apply_manager, FLOW_ID, http_session, validator)

        assert isinstance(outcome, ReviewRedirect)
        assert (await apply_manager.load(FLOW_ID, http_session)).edit_mode is True


class TestNextStepTarget:

    def test_first_incomplete_step(self, validator):
        target = next_step_target(apply_state(marital_status=None), validator, REVIEW)
        assert target.route_id == "public/apply/$id/adult/marital-status"

    def test_review_when_complete(self, validator):
        assert next_step_target(apply_state(), validator, REVIEW) == REVIEW

    def test_edit_mode_returns_to_review(self, validator):
        state = apply_state(edit_mode=True, marital_status=None)
        assert next_step_target(state, validator, REVIEW) == REVIEW


class TestGuardSubmitted:
    CONFIRMATION = "public/apply/$id/adult/confirmation"
    FIRST = "public/apply/$id/terms-and-conditions"

    def guard(self, state, current):
        return guard_submitted(state, current, self.CONFIRMATION, self.FIRST, PARAMS)

    def test_submitted_flow_goes_to_confirmation(self):
        state = apply_state(submission_info=SubmissionInfoState(confirmation_code="C", submitted_on=NOW))

        assert self.guard(state, REVIEW.route_id) == RouteTarget(self.CONFIRMATION, PARAMS)
        assert self.guard(state, self.CONFIRMATION) is None

    def test_unsubmitted_flow_cannot_see_confirmation(self):
        state = apply_state()

        assert self.guard(state, self.CONFIRMATION) == RouteTarget(self.FIRST, PARAMS)
        assert self.guard(state, REVIEW.route_id) is None


class TestGetSingleChild:

    def test_found(self):
        first, second = apply_child(), apply_child()
        state = apply_family_state(children=[first, second])

        found = get_single_child(state, str(second.id), INDEX, PARAMS)

        assert found == SingleChild(child=second, child_number=2, is_new=False, edit_mode=False)

    def test_edit_mode_only_for_complete_children(self):
        incomplete = apply_child(dental_insurance=None)
        complete = apply_child()
        state = apply_family_state(edit_mode=True, children=[incomplete, complete])

        assert get_single_child(state, incomplete.id, INDEX, PARAMS).edit_mode is False
        assert get_single_child(state, complete.id, INDEX, PARAMS).edit_mode is True

    def test_malformed_id(self):
        outcome = get_single_child(apply_family_state(), "child-1", INDEX, PARAMS)

        assert outcome == ReviewRedirect(RouteTarget(INDEX, PARAMS), rule="child-id-format")

    def test_unknown_id(self):
        outcome = get_single_child(apply_family_state(), uuid4(), INDEX, PARAMS)
        assert outcome.rule == "child-not-found"


class TestChildrenList:

    @pytest.mark.asyncio
    async def test_add_child(self, apply_manager, http_session):
        await seed(apply_manager, http_session, apply_family_state(children=[]))

        state, child_id = await add_child(apply_manager, FLOW_ID, http_session, ApplyChildState)

        assert [child.id for child in state.children] == [child_id]
        assert state.children[0].is_new

    @pytest.mark.asyncio
    async def test_remove_child(self, apply_manager, http_session):
        kept, removed = apply_child(), apply_child()
        await seed(apply_manager, http_session, apply_family_state(children=[kept, removed]))

        state = await remove_child(apply_manager, FLOW_ID, http_session, removed.id)

        assert [child.id for child in state.children] == [kept.id]

    @pytest.mark.asyncio
    async def test_remove_unknown_child(self, apply_manager, http_session):
        await seed(apply_manager, http_session, apply_family_state())

        state = await remove_child(apply_manager, FLOW_ID, http_session, uuid4())

        assert len(state.children) == 1
