"""Tests for engine settings, error types and logging setup."""

import json
import logging

import pytest

from src.config import (
    DEFAULT_INSTALLMENT_TOLERANCE,
    DEFAULT_MIN_TERM_MONTHS,
    EngineSettings,
)
from src.errors import ComputationError, MortgageError, Result, ValidationError
from src.logging_config import (
    LOGGER_NAMESPACE,
    StructuredFormatter,
    configure_logging,
    disable_logging,
    get_logger,
)


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_defaults(self):
        settings = EngineSettings()

        assert settings.installment_tolerance == DEFAULT_INSTALLMENT_TOLERANCE == 30.0
        assert settings.min_term_months == DEFAULT_MIN_TERM_MONTHS == 12

    @pytest.mark.parametrize("kwargs", [
        {"installment_tolerance": -1.0},
        {"installment_tolerance": float("nan")},
        {"min_term_months": 0},
        {"iteration_margin": -1},
        {"rounding_tolerance": -0.01},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            EngineSettings(**kwargs)

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MORTGAGE_INSTALLMENT_TOLERANCE", "0")
        monkeypatch.setenv("MORTGAGE_MIN_TERM_MONTHS", "24")
        monkeypatch.delenv("MORTGAGE_ITERATION_MARGIN", raising=False)

        settings = EngineSettings.from_env()

        assert settings.installment_tolerance == 0.0
        assert settings.min_term_months == 24
        assert settings.iteration_margin == 12

    def test_from_env_invalid(self, monkeypatch):
        monkeypatch.setenv("MORTGAGE_MIN_TERM_MONTHS", "twelve")

        with pytest.raises(ValidationError, match="MORTGAGE_MIN_TERM_MONTHS"):
            EngineSettings.from_env()


class TestErrors:
    """Tests for error types and Result."""

    def test_hierarchy(self):
        assert issubclass(ValidationError, MortgageError)
        assert issubclass(ValidationError, ValueError)
        assert issubclass(ComputationError, MortgageError)

    def test_str_without_context(self):
        assert str(ValidationError("Bad input")) == "Bad input"

    def test_result(self):
        assert Result(value=3).unwrap() == 3
        failed = Result(error=ValidationError("Bad input"))
        assert not failed.ok
        with pytest.raises(ValidationError, match="Bad input"):
            failed.unwrap()


@pytest.fixture
def package_logger():
    logger = logging.getLogger(LOGGER_NAMESPACE)
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


class TestLogging:
    """Tests for logging setup."""

    def test_get_logger_namespace(self):
        assert get_logger("refinance").name == "mortgage_planning.refinance"
        assert get_logger("mortgage_planning.schedule").name == "mortgage_planning.schedule"

    def test_structured_formatter(self):
        record = logging.LogRecord("mortgage_planning.test", logging.INFO, __file__, 1, "Term found", (), None)
        record.term_months = 180

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "Term found"
        assert data["level"] == "INFO"
        assert data["term_months"] == 180

    def test_configure_logging_to_file(self, tmp_path, package_logger):
        log_file = tmp_path / "logs" / "engine.log"
        configure_logging(level="DEBUG", log_file=str(log_file), console=False, structured=True)

        get_logger("test").debug("Hello", extra={"loan_amount": 1000})
        for handler in package_logger.handlers:
            handler.flush()

        line = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert line["message"] == "Hello"
        assert line["loan_amount"] == 1000

    def test_level_from_env(self, monkeypatch, package_logger):
        monkeypatch.setenv("MORTGAGE_LOG_LEVEL", "warning")
        configure_logging(console=False)

        assert package_logger.level == logging.WARNING

    def test_disable_logging(self, package_logger):
        disable_logging()

        assert len(package_logger.handlers) == 1
        assert isinstance(package_logger.handlers[0], logging.NullHandler)
