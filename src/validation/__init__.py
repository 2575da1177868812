"""Wizard validation: step forms, ordered review rules and navigation."""

from .review_rules import (
    ReviewContext,
    Rule,
    evaluate_rules,
    first_failing_rule,
    flow_params,
)

from .children_review import review_children

from .apply_review import APPLY_RULES, APPLY_CHILD_RULES, review_apply_state

from .renew_review import (
    PROTECTED_CHILD_RULES,
    PROTECTED_RENEW_RULES,
    RENEW_CHILD_RULES,
    RENEW_RULES,
    review_protected_renew_state,
    review_renew_state,
)

from .step_schemas import (
    StateUpdate,
    StepContext,
    StepErrors,
    StepResult,
    child_state_update,
    validate_step,
)

__all__ = [
    # Rule interpreter
    'ReviewContext',
    'Rule',
    'evaluate_rules',
    'first_failing_rule',
    'flow_params',
    'review_children',
    # Flow validators
    'APPLY_RULES',
    'APPLY_CHILD_RULES',
    'review_apply_state',
    'PROTECTED_CHILD_RULES',
    'PROTECTED_RENEW_RULES',
    'RENEW_CHILD_RULES',
    'RENEW_RULES',
    'review_protected_renew_state',
    'review_renew_state',
    # Step forms
    'StateUpdate',
    'StepContext',
    'StepErrors',
    'StepResult',
    'child_state_update',
    'validate_step',
]
