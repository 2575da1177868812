"""Tests for the ordered rule interpreter and per-child review."""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from domain.results import ReviewOk, ReviewRedirect, RouteTarget, is_redirect
from validation.children_review import review_children
from validation.review_rules import (
    ReviewContext,
    Rule,
    differs,
    equals,
    evaluate_rules,
    first_failing_rule,
    flow_params,
    is_true,
    never,
    present,
    required_when,
)

RULES = [
    Rule("first", present("a"), "flow/$id/a"),
    Rule("second", present("b"), "flow/$id/b"),
    Rule("third", is_true("c"), "flow/$id/c"),
]


def record(**fields):
    values = dict(a=None, b=None, c=None)
    values.update(fields)
    return SimpleNamespace(**values)


@pytest.fixture
def context(wizard_settings):
    return ReviewContext(settings=wizard_settings)


class TestEvaluateRules:

    def test_first_failing_rule_wins(self, context):
        outcome = evaluate_rules(RULES, record(), {"id": "x"}, context)

        assert outcome == ReviewRedirect(RouteTarget("flow/$id/a", {"id": "x"}), rule="first")
        assert is_redirect(outcome)

    def test_later_rule_only_after_earlier_pass(self, context):
        outcome = evaluate_rules(RULES, record(a=1, c=False), {"id": "x"}, context)
        assert outcome.rule == "second"

    def test_all_pass(self, context):
        state = record(a=1, b=2, c=True)
        outcome = evaluate_rules(RULES, state, {"id": "x"}, context)

        assert isinstance(outcome, ReviewOk)
        assert outcome.state is state
        assert not is_redirect(outcome)

    def test_projection(self, context):
        outcome = evaluate_rules(RULES, record(a=1, b=2, c=True), {}, context, project=lambda s, ctx: s.a + s.b)
        assert outcome.state == 3

    def test_redirect_params_are_copied(self, context):
        params = {"id": "x"}
        outcome = evaluate_rules(RULES, record(), params, context)
        params["id"] = "y"

        assert outcome.target.params == {"id": "x"}

    def test_first_failing_rule_none(self, context):
        assert first_failing_rule(RULES, record(a=1, b=1, c=True), context) is None


class TestPredicates:

    def test_present(self, context):
        assert present("a")(record(a=False), context) is True
        assert present("a")(record(), context) is False

    def test_equals_and_differs(self, context):
        assert equals("a", "adult")(record(a="adult"), context) is True
        assert differs("a", "delegate")(record(a="delegate"), context) is False

    def test_is_true_requires_true(self, context):
        assert is_true("c")(record(c=1), context) is False
        assert is_true("c")(record(c=True), context) is True

    def test_required_when(self, context):
        predicate = required_when(is_true("c"), present("a"))

        assert predicate(record(c=False), context) is True
        assert predicate(record(c=True), context) is False
        assert predicate(record(c=True, a=1), context) is True

    def test_never(self, context):
        assert never()(record(), context) is False

    def test_partner_consistency(self, context):
        assert context.partner_consistent("married", object()) is True
        assert context.partner_consistent("married", None) is False
        assert context.partner_consistent("single", object()) is False
        assert context.partner_consistent("single", None) is True


class TestRouteTarget:

    def test_flow_params(self):
        flow_id = uuid4()
        assert flow_params(flow_id, childId=5) == {"id": str(flow_id), "childId": "5"}

    def test_with_params(self):
        target = RouteTarget("r", {"id": "1"}).with_params(childId="2")
        assert target.params == {"id": "1", "childId": "2"}
        assert target.child_id == "2"


CHILD_RULES = [
    Rule("child-a", present("a"), "flow/$id/children/$childId/a"),
    Rule("child-b", present("b"), "flow/$id/children/$childId/b"),
]


def child(**fields):
    values = dict(id=uuid4(), a=1, b=1, is_new=False)
    values.update(fields)
    return SimpleNamespace(**values)


class TestReviewChildren:

    def review(self, children, context, **kwargs):
        return review_children(
            children,
            CHILD_RULES,
            {"id": "x"},
            context,
            project=lambda c, ctx: c.id,
            index_route="flow/$id/children/index",
            **kwargs,
        )

    def test_all_children_valid(self, context):
        children = [child(), child()]
        outcome = self.review(children, context)

        assert outcome.state == [c.id for c in children]

    def test_redirect_names_the_failing_child(self, context):
        valid, invalid = child(), child(b=None)
        outcome = self.review([valid, invalid], context)

        assert outcome.target == RouteTarget(
            "flow/$id/children/$childId/b",
            {"id": "x", "childId": str(invalid.id)},
        )
        assert outcome.rule == "child-b"

    def test_children_checked_in_order(self, context):
        first, second = child(a=None), child(a=None)
        outcome = self.review([first, second], context)
        assert outcome.target.child_id == str(first.id)

    def test_required_without_children(self, context):
        outcome = self.review([], context, required=True)

        assert outcome.target == RouteTarget("flow/$id/children/index", {"id": "x"})
        assert outcome.rule == "children-required"

    def test_optional_without_children(self, context):
        assert self.review([], context, required=False).state == []

    def test_new_children_left_out(self, context):
        kept, unselected = child(), child(a=None, is_new=True)
        outcome = self.review([kept, unselected], context, required=False, include_new=False)

        assert outcome.state == [kept.id]
