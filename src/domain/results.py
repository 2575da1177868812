"""
Navigation outcome types.

A review either yields a fully-typed reviewable projection or names the step
the user has to go back to. Both are ordinary return values.
"""

from dataclasses import dataclass, field
from typing import Dict, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class RouteTarget:
    """Abstract route id plus its substitution parameters."""

    route_id: str
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def child_id(self) -> Optional[str]:
        return self.params.get("childId")

    def with_params(self, **params: str) -> "RouteTarget":
        return RouteTarget(self.route_id, {**self.params, **params})


@dataclass(frozen=True)
class ReviewOk(Generic[T]):
    """Every prerequisite passed."""

    state: T
    kind: str = "ok"


@dataclass(frozen=True)
class ReviewRedirect:
    """A prerequisite failed; navigate to its step."""

    target: RouteTarget
    rule: str = ""
    kind: str = "redirect"


ReviewOutcome = Union[ReviewOk[T], ReviewRedirect]


def is_redirect(outcome: "ReviewOutcome") -> bool:
    return isinstance(outcome, ReviewRedirect)
