"""Unit tests for configuration validation."""

import logging

import pytest

from bq_query_viewer.config import ConfigurationError, Settings, validate_config


class TestSettingsValidation:
    """Tests for Settings validation methods."""

    def test_defaults_pass(self):
        settings = Settings(google_application_credentials=None)
        assert settings.validate_for_startup() == []

    def test_missing_credentials_file_is_critical(self, tmp_path):
        settings = Settings(google_application_credentials=str(tmp_path / "missing.json"))

        issues = settings.validate_for_startup()

        assert any(i.startswith("CRITICAL") and "Credentials file" in i for i in issues)

    def test_existing_credentials_file_passes(self, tmp_path):
        key_file = tmp_path / "sa.json"
        key_file.write_text("{}")
        settings = Settings(google_application_credentials=str(key_file))

        assert settings.validate_for_startup() == []

    def test_concurrency_must_be_positive(self):
        settings = Settings(google_application_credentials=None, child_job_concurrency=0)
        assert any("child_job_concurrency" in i for i in settings.validate_for_startup())

    def test_quote_must_be_single_character(self):
        settings = Settings(google_application_credentials=None, identifier_quote="``")
        assert any("identifier_quote" in i for i in settings.validate_for_startup())

    def test_non_backtick_quote_warns_for_bigquery(self):
        settings = Settings(google_application_credentials=None, identifier_quote='"')

        issues = settings.validate_for_startup()

        assert issues and all(i.startswith("WARNING") for i in issues)

    def test_unknown_log_level_warns(self):
        settings = Settings(google_application_credentials=None, log_level="chatty")
        assert any("log level" in i for i in settings.validate_for_startup())

    def test_environment_flags(self):
        assert Settings(environment="production").is_production
        assert Settings(environment="development").is_development


class TestValidateConfig:
    """Tests for validate_config."""

    def test_strict_raises_on_critical(self):
        settings = Settings(google_application_credentials=None, child_job_concurrency=0)

        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(settings, strict=True)

        assert len(exc_info.value.issues) == 1
        assert "Configuration validation failed" in str(exc_info.value)

    def test_non_strict_logs_only(self, caplog):
        settings = Settings(google_application_credentials=None, child_job_concurrency=0)

        with caplog.at_level(logging.ERROR):
            validate_config(settings, strict=False)

        assert "child_job_concurrency" in caplog.text

    def test_warnings_do_not_raise(self):
        settings = Settings(google_application_credentials=None, log_level="chatty")
        validate_config(settings, strict=True)

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CHILD_JOB_CONCURRENCY", "2")
        monkeypatch.setenv("IDENTIFIER_QUOTE", '"')
        settings = Settings()
        assert settings.child_job_concurrency == 2
        assert settings.identifier_quote == '"'
