"""Application configuration using Pydantic settings."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # BigQuery
    google_application_credentials: Optional[str] = None  # Service account JSON; ADC when unset
    child_job_concurrency: int = 8  # Max concurrent child job fetches

    # Rendering
    identifier_quote: str = "`"
    sql_check_dialect: str = "bigquery"

    # Application
    environment: str = "development"
    log_level: str = "WARNING"
    debug: bool = False

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def validate_for_startup(self) -> list[str]:
        """
        Validate configuration before talking to BigQuery.

        Returns a list of warnings/errors. Empty list means all validations passed.
        """
        issues: list[str] = []

        if self.google_application_credentials:
            if not Path(self.google_application_credentials).exists():
                issues.append(
                    "CRITICAL: Credentials file does not exist: "
                    f"{self.google_application_credentials}"
                )

        if self.child_job_concurrency < 1:
            issues.append("CRITICAL: child_job_concurrency must be at least 1.")

        if len(self.identifier_quote) != 1:
            issues.append(
                "CRITICAL: identifier_quote must be a single character. "
                f"Current: {self.identifier_quote!r}"
            )

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            issues.append(
                f"WARNING: Unknown log level {self.log_level!r}, falling back to INFO."
            )

        if self.identifier_quote != "`" and self.sql_check_dialect == "bigquery":
            issues.append(
                "WARNING: BigQuery only accepts backtick-quoted identifiers. "
                "Rewritten queries may not run as-is."
            )

        return issues


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, issues: list[str]):
        self.issues = issues
        message = "Configuration validation failed:\n" + "\n".join(f"  - {i}" for i in issues)
        super().__init__(message)


def validate_config(settings: Settings, strict: bool = False) -> None:
    """
    Validate configuration and log/raise issues.

    Args:
        settings: Settings instance to validate
        strict: If True, raise ConfigurationError on any critical issues

    Raises:
        ConfigurationError: If strict=True and critical issues found
    """
    logger = logging.getLogger(__name__)

    issues = settings.validate_for_startup()

    critical_issues = [i for i in issues if i.startswith("CRITICAL")]
    warnings = [i for i in issues if i.startswith("WARNING")]

    for warning in warnings:
        logger.warning(warning.replace("WARNING: ", ""))

    for critical in critical_issues:
        logger.error(critical.replace("CRITICAL: ", ""))

    if strict and critical_issues:
        raise ConfigurationError(critical_issues)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
