"""Configuration module for the benefits wizard."""

from .settings import (
    BenefitApiSettings,
    EligibilityRule,
    SessionStoreSettings,
    Settings,
    WizardSettings,
    get_settings,
    get_wizard_settings,
)

__all__ = [
    "BenefitApiSettings",
    "EligibilityRule",
    "SessionStoreSettings",
    "Settings",
    "WizardSettings",
    "get_settings",
    "get_wizard_settings",
]
