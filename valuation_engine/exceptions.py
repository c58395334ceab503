"""
Valuation Engine Exceptions

Typed failures raised by the calculators. Validation problems and
undefined formula regions are exceptions; data-quality advisories are not,
they travel with the result as DataQualityWarning records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import WarningSeverity


class ValuationError(Exception):
    """
    Base exception for all valuation engine errors.

    Carries a machine-readable error code and structured details next to the
    human-readable message.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(ValuationError):
    """Raised when caller input violates an invariant; nothing is computed."""

    def __init__(
        self,
        errors: List[str],
        warnings: Optional[List[str]] = None,
        model: str = "",
    ):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        prefix = f"Invalid {model} inputs" if model else "Invalid inputs"
        super().__init__(
            message=f"{prefix}: {', '.join(self.errors)}",
            error_code="VALIDATION_FAILED",
            details={"model": model, "errors": self.errors, "warnings": self.warnings},
        )


class DomainError(ValuationError):
    """Raised when a formula is evaluated outside its mathematical domain."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="DOMAIN_ERROR", details=details)


@dataclass(frozen=True)
class DataQualityWarning:
    """Non-blocking advisory attached to a calculation result."""

    warning_type: str
    category: str
    message: str
    severity: WarningSeverity
    suggestion: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.warning_type,
            "category": self.category,
            "message": self.message,
            "severity": self.severity.value,
            "suggestion": self.suggestion,
        }
