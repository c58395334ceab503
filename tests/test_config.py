"""
Unit tests for the config and exceptions modules.

Covers logger setup and the error hierarchy raised by the calculators.
"""

import logging

import pytest

from valuation_engine.config import (
    LOGGER,
    MIN_DENOMINATOR,
    VALIDATION_CONFIG,
    DDMModelType,
    WarningSeverity,
    setup_logger,
)
from valuation_engine.exceptions import (
    DataQualityWarning,
    DomainError,
    ValidationError,
    ValuationError,
)


class TestSetupLogger:
    """Tests for setup_logger."""

    def test_engine_logger_name(self):
        """The shared engine logger is named after the engine."""
        assert LOGGER.name == "ValuationEngine"
        assert LOGGER.propagate is False

    def test_repeated_setup_does_not_duplicate_handlers(self):
        """Calling setup twice keeps a single handler."""
        logger = setup_logger("valuation_engine.tests.repeat")
        setup_logger("valuation_engine.tests.repeat")

        assert len(logger.handlers) == 1

    def test_level_is_applied(self):
        """The requested level is set on the logger."""
        logger = setup_logger("valuation_engine.tests.level", level=logging.DEBUG)

        assert logger.level == logging.DEBUG


class TestConfiguration:
    """Tests for shared configuration values."""

    def test_min_denominator(self):
        assert MIN_DENOMINATOR == 1e-9

    def test_validation_thresholds(self):
        """Validation thresholds match the documented policy values."""
        assert VALIDATION_CONFIG.max_sustainable_growth == 0.15
        assert VALIDATION_CONFIG.min_earnings_years == 5
        assert VALIDATION_CONFIG.unrealistic_growth_rate == 0.50

    def test_ddm_model_type_values(self):
        """Model types round-trip from their wire names."""
        assert DDMModelType("two-stage") is DDMModelType.TWO_STAGE
        assert DDMModelType("multi-stage") is DDMModelType.MULTI_STAGE


class TestExceptions:
    """Tests for the valuation error hierarchy."""

    def test_validation_error_message(self):
        """Errors are joined into a single message prefixed with the model."""
        error = ValidationError(["first problem", "second problem"], ["a warning"], model="DDM")

        assert str(error) == "Invalid DDM inputs: first problem, second problem"
        assert error.errors == ["first problem", "second problem"]
        assert error.warnings == ["a warning"]
        assert error.error_code == "VALIDATION_FAILED"
        assert error.details["model"] == "DDM"

    def test_validation_error_without_model(self):
        error = ValidationError(["bad"])

        assert error.message == "Invalid inputs: bad"
        assert error.warnings == []

    def test_domain_error(self):
        """Domain errors carry their details and code."""
        error = DomainError("spread is not positive", {"spread": 0.0})

        assert isinstance(error, ValuationError)
        assert error.error_code == "DOMAIN_ERROR"
        assert error.details == {"spread": 0.0}

    def test_errors_share_base_class(self):
        with pytest.raises(ValuationError):
            raise ValidationError(["bad"], model="NAV")

    def test_data_quality_warning_to_dict(self):
        """Warnings serialize with the severity value."""
        warning = DataQualityWarning(
            warning_type="warning",
            category="data_quality",
            message="Short history",
            severity=WarningSeverity.MEDIUM,
        )

        assert warning.to_dict() == {
            "type": "warning",
            "category": "data_quality",
            "message": "Short history",
            "severity": "medium",
            "suggestion": "",
        }
