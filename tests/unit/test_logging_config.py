"""Unit tests for logging configuration."""

import structlog

from bq_query_viewer.config import Settings
from bq_query_viewer.logging_config import configure_logging, get_logger


class TestConfigureLogging:
    """Tests for structlog setup."""

    def teardown_method(self):
        structlog.reset_defaults()

    def test_production_renders_json(self):
        configure_logging(Settings(environment="production", log_level="INFO"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_development_renders_console(self):
        configure_logging(Settings(environment="development", log_level="INFO"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_get_logger_binds(self):
        configure_logging(Settings(environment="test", log_level="WARNING"))

        logger = get_logger("bq_query_viewer.test")
        assert logger.bind(job="proj.us.job1") is not None
