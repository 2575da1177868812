"""
Services for the benefits wizard.

Domain services:
- age_category: applicant age bands and coverage eligibility

Infrastructure services:
- BenefitApplicationService: submits applications to the benefits system
- ClientApplicationService: looks up existing client applications
- Logging and observability
"""

from .logging_config import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
