"""
Wizard error taxonomy.

Navigation outcomes are not errors and never appear here; they are returned
as ReviewRedirect values. Step input problems are returned as StepErrors.
What remains are conditions that end the current request.
"""

from typing import Optional


class WizardError(Exception):
    """Base class for wizard errors."""


class FlowRestartRequired(WizardError):
    """The flow cannot continue and the user must start over."""

    def __init__(self, message: str, session_key: Optional[str] = None):
        super().__init__(message)
        self.session_key = session_key


class InvalidIdentifier(FlowRestartRequired):
    """The flow id is not a valid UUID."""


class SessionMissing(FlowRestartRequired):
    """No state exists under the derived session key."""


class SessionExpired(FlowRestartRequired):
    """The state exceeded the inactivity window and was deleted."""


class SubmittedStateImmutable(WizardError):
    """A save was attempted on a flow that has already been submitted."""


class MalformedUpstreamData(WizardError):
    """
    An upstream entity is missing a structurally required element.

    This is a contract violation by the external system, not a user error.
    """

    def __init__(self, path: str, tag: Optional[str] = None):
        detail = f"{path} (tag={tag!r})" if tag is not None else path
        super().__init__(f"Malformed upstream data: missing {detail}")
        self.path = path
        self.tag = tag


class CsrfTokenMismatch(WizardError):
    """Submitted CSRF token does not match the session token."""


class BenefitApiError(WizardError):
    """The outbound benefits API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
