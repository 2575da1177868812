"""Application settings using Pydantic Settings.

Centralized configuration for the benefits wizard.

Nested settings are loaded from their own environment prefixes:
- WIZARD_*: session timeout, marital status and category code tables
- SESSION_*: session store backend
- BENEFIT_API_*: outbound benefit-application API
"""

import json
import logging
from datetime import date
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class EligibilityRule(BaseModel):
    """Age band and the date coverage opens for it."""

    model_config = ConfigDict(populate_by_name=True)

    min_age: int = Field(alias="minAge")
    max_age: int = Field(alias="maxAge")
    start_date: date = Field(alias="startDate")


class WizardSettings(BaseSettings):
    """Wizard flow configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WIZARD_",
        extra="ignore",
    )

    session_timeout_minutes: int = Field(default=20, description="Inactivity window before a flow expires")

    # Marital statuses that imply a partner
    partner_marital_statuses: List[str] = Field(
        default=["married", "commonlaw"],
        description="Marital status codes that require partner information",
    )

    # Power Platform applicant category codes
    applicant_category_code_individual: int = Field(default=775170000)
    applicant_category_code_family: int = Field(default=775170001)
    applicant_category_code_dependent_only: int = Field(default=775170002)

    application_channel_code: str = Field(default="775170001", description="Static channel code for online submissions")

    current_date: Optional[date] = Field(
        default=None,
        description="Overrides today's date for age computation (testing only)",
    )

    eligibility_rules: List[EligibilityRule] = Field(default_factory=list)

    @field_validator("eligibility_rules", mode="before")
    @classmethod
    def parse_eligibility_rules(cls, v):
        if isinstance(v, str):
            return json.loads(v) if v.strip() else []
        return v

    def has_partner(self, marital_status: Optional[str]) -> bool:
        """Check whether a marital status implies partner information."""
        if marital_status is None:
            return False
        allowed = {status.lower() for status in self.partner_marital_statuses}
        return marital_status.lower() in allowed


class SessionStoreSettings(BaseSettings):
    """Session store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        extra="ignore",
    )

    backend: str = Field(default="memory", description="Session store backend: memory or redis")
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis URL for the redis backend")
    key_prefix: str = Field(default="wizard:", description="Prefix for all session keys")
    ttl_seconds: int = Field(default=3600, description="TTL of a whole HTTP session in seconds")
    cookie_name: str = Field(default="wizard_session", description="Name of the session id cookie")

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        if v not in ("memory", "redis"):
            raise ValueError(f"Unsupported session backend: {v}")
        return v


class BenefitApiSettings(BaseSettings):
    """Outbound benefit-application API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BENEFIT_API_",
        extra="ignore",
    )

    base_uri: str = Field(default="http://localhost:8080/api", description="Benefit application API base URI")
    subscription_key: str = Field(default="", description="Ocp-Apim-Subscription-Key header value")
    timeout_seconds: float = Field(default=30.0, description="Request timeout in seconds")

    # Retry settings
    retry_max_attempts: int = Field(default=3, description="Max attempts including the first")
    retry_base_delay: float = Field(default=0.5, description="Initial delay in seconds")
    retry_backoff_multiplier: float = Field(default=2.0, description="Backoff multiplier")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application info
    name: str = Field(default="Dental Benefits Wizard", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: str = Field(default="development", description="Environment name")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    json_logs: bool = Field(default=False, description="Emit JSON formatted logs")

    # Where users are sent when a flow has to restart
    start_url: str = Field(default="/{lang}/apply", description="Landing page for restarted apply flows")
    renew_start_url: str = Field(default="/{lang}/renew", description="Landing page for restarted renewals")
    protected_renew_start_url: str = Field(
        default="/{lang}/protected/renew", description="Landing page for restarted signed-in renewals"
    )

    # Nested settings (loaded separately)
    @property
    def wizard(self) -> WizardSettings:
        return WizardSettings()

    @property
    def session_store(self) -> SessionStoreSettings:
        return SessionStoreSettings()

    @property
    def benefit_api(self) -> BenefitApiSettings:
        return BenefitApiSettings()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment in ("production", "prod", "staging")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Returns:
        Settings: Cached settings loaded from environment.
    """
    return Settings()


@lru_cache
def get_wizard_settings() -> WizardSettings:
    """Get cached wizard settings."""
    return WizardSettings()
