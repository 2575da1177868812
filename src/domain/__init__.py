"""
Domain layer for the benefits wizard.

This module contains the wizard state records, the DTOs exchanged with the
mapping layer, the wire entities of the downstream benefits system, the
navigation outcome types and the error taxonomy.
"""

from .errors import (
    BenefitApiError,
    CsrfTokenMismatch,
    FlowRestartRequired,
    InvalidIdentifier,
    MalformedUpstreamData,
    SessionExpired,
    SessionMissing,
    SubmittedStateImmutable,
    WizardError,
)
from .results import (
    ReviewOk,
    ReviewOutcome,
    ReviewRedirect,
    RouteTarget,
    is_redirect,
)

__all__ = [
    # Errors
    "BenefitApiError",
    "CsrfTokenMismatch",
    "FlowRestartRequired",
    "InvalidIdentifier",
    "MalformedUpstreamData",
    "SessionExpired",
    "SessionMissing",
    "SubmittedStateImmutable",
    "WizardError",
    # Navigation outcomes
    "ReviewOk",
    "ReviewOutcome",
    "ReviewRedirect",
    "RouteTarget",
    "is_redirect",
]
