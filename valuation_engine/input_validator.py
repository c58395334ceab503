"""
Input Validation Module - Pre-Calculation Sanity Checks
Valuation Calculation Engine

Per-model input checks run before any calculator executes:
- Errors block the calculation (the engine raises ValidationError)
- Warnings are informational and are attached to the final result

Validators are total over every representable input: they never raise,
and non-finite numbers are reported as errors instead of propagating.

Version: 1.0.0
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from .config import (
    AdjustmentCategory,
    BusinessStability,
    CompetitivePosition,
    CostOfCapitalMethod,
    DDMModelType,
    EarningsQuality,
    MaintenanceCapexMethod,
    NormalizationMethod,
    VALIDATION_CONFIG,
)

if TYPE_CHECKING:
    from .dcf_valuator import DCFInputs
    from .ddm_valuator import DDMInputs
    from .epv_valuator import EPVInputs
    from .nav_valuator import NAVInputs


__version__ = "1.0.0"


# =============================================================================
# DATA CONTAINERS
# =============================================================================

@dataclass
class ValidationResult:
    """Outcome of an input validation pass."""

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "warnings": self.warnings,
        }


# =============================================================================
# HELPERS
# =============================================================================

def is_finite_number(value: Any) -> bool:
    """True for real, finite numbers (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def clamp_normalization_period(period: Any, available: int) -> int:
    """Clamp a requested normalization window to [1, available]."""
    if available <= 0:
        return 0
    if not is_finite_number(period):
        return available
    return max(1, min(int(period), available))


def _coerce_enum(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


# =============================================================================
# DDM VALIDATOR
# =============================================================================

class DDMInputValidator:
    """
    Validates dividend discount model inputs.

    Common checks cover the dividend, share count and required return;
    model-specific checks enforce growth < required return for every
    perpetuity that the chosen variant evaluates.
    """

    def validate(self, inputs: "DDMInputs") -> ValidationResult:
        result = ValidationResult()
        config = VALIDATION_CONFIG

        dividend = inputs.current_dividend
        if not is_finite_number(dividend):
            result.add_error("Current dividend must be a finite number")
        elif dividend < 0:
            result.add_error("Current dividend cannot be negative")
        elif dividend == 0:
            result.add_warning("Current dividend is zero - company may not be suitable for DDM")

        if not is_finite_number(inputs.shares_outstanding) or inputs.shares_outstanding <= 0:
            result.add_error("Shares outstanding must be positive")

        required_return = inputs.required_return
        return_ok = is_finite_number(required_return) and required_return > 0
        if not return_ok:
            result.add_error("Required return must be positive")
        elif required_return > config.max_reasonable_required_return:
            result.add_warning("Required return seems very high (>50%)")

        model_type = _coerce_enum(DDMModelType, inputs.model_type)
        if model_type is None:
            result.add_error(f"Unknown DDM model type: {inputs.model_type}")
            return result

        if model_type == DDMModelType.GORDON:
            self._validate_gordon(inputs, result, required_return if return_ok else None)
        elif model_type == DDMModelType.TWO_STAGE:
            self._validate_two_stage(inputs, result, required_return if return_ok else None)
        elif model_type == DDMModelType.MULTI_STAGE:
            self._validate_multi_stage(inputs, result, required_return if return_ok else None)

        if inputs.current_price is not None and (
            not is_finite_number(inputs.current_price) or inputs.current_price <= 0
        ):
            result.add_warning("Current price is not positive; upside is not reported")

        return result

    def _validate_gordon(
        self,
        inputs: "DDMInputs",
        result: ValidationResult,
        required_return: Optional[float],
    ) -> None:
        config = VALIDATION_CONFIG
        growth = inputs.gordon_growth_rate

        if not is_finite_number(growth):
            result.add_error("Gordon growth rate must be a finite number")
            return

        if required_return is not None and growth >= required_return:
            result.add_error("Growth rate must be less than required return for Gordon model")

        if growth > config.max_sustainable_growth:
            result.add_warning("Growth rate >15% may not be sustainable long-term")
        if growth < config.min_non_distressed_growth:
            result.add_warning("Negative growth rate <-10% may indicate distressed company")

    def _validate_two_stage(
        self,
        inputs: "DDMInputs",
        result: ValidationResult,
        required_return: Optional[float],
    ) -> None:
        config = VALIDATION_CONFIG
        high_growth = inputs.high_growth_rate
        stable_growth = inputs.stable_growth_rate
        years = inputs.high_growth_years

        errors_before = len(result.errors)
        if not is_finite_number(high_growth):
            result.add_error("High growth rate must be a finite number")
        if not is_finite_number(stable_growth):
            result.add_error("Stable growth rate must be a finite number")
        if not is_finite_number(years) or years < 0:
            result.add_error("High growth years cannot be negative")
        elif years != int(years):
            result.add_error("High growth years must be a whole number")
        if len(result.errors) > errors_before:
            return

        if required_return is not None and stable_growth >= required_return:
            result.add_error("Stable growth rate must be less than required return")

        if high_growth < stable_growth:
            result.add_warning("High growth rate is less than stable rate - consider using Gordon model")

        if years > config.max_high_growth_years:
            result.add_warning("High growth period >10 years may be unrealistic")

    def _validate_multi_stage(
        self,
        inputs: "DDMInputs",
        result: ValidationResult,
        required_return: Optional[float],
    ) -> None:
        phases = list(inputs.growth_phases or [])

        if len(phases) < 2:
            result.add_error("Multi-stage DDM requires at least 2 growth phases")
            return

        for index, phase in enumerate(phases, start=1):
            if not is_finite_number(phase.growth_rate):
                result.add_error(f"Growth phase {index} rate must be a finite number")
            if index == len(phases):
                continue
            if not is_finite_number(phase.years) or phase.years < 0:
                result.add_error(f"Growth phase {index} years cannot be negative")
            elif phase.years != int(phase.years):
                result.add_error(f"Growth phase {index} years must be a whole number")

        terminal_growth = phases[-1].growth_rate
        if (
            required_return is not None
            and is_finite_number(terminal_growth)
            and terminal_growth >= required_return
        ):
            result.add_error("Terminal growth rate must be less than required return")


# =============================================================================
# EPV VALIDATOR
# =============================================================================

class EPVInputValidator:
    """Validates earnings power value inputs."""

    def validate(self, inputs: "EPVInputs") -> ValidationResult:
        result = ValidationResult()
        config = VALIDATION_CONFIG
        earnings = list(inputs.historical_earnings or [])

        if not earnings:
            result.add_error("Historical earnings data is required")
        else:
            if any(not is_finite_number(e.net_income) for e in earnings):
                result.add_error("Historical earnings contain non-finite net income")
            if len(earnings) < config.min_earnings_years:
                result.add_warning(
                    "Less than 5 years of earnings data may reduce calculation reliability"
                )

            period = inputs.normalization_period
            clamped = clamp_normalization_period(period, len(earnings))
            if not is_finite_number(period) or period != clamped:
                result.add_warning(
                    f"Normalization period {period} is outside 1-{len(earnings)}; "
                    f"using {clamped} years"
                )

        if not is_finite_number(inputs.shares_outstanding) or inputs.shares_outstanding <= 0:
            result.add_error("Shares outstanding must be positive")

        method = _coerce_enum(NormalizationMethod, inputs.normalization_method)
        if method is None:
            result.add_error(f"Unknown normalization method: {inputs.normalization_method}")
        elif method == NormalizationMethod.MANUAL and not is_finite_number(
            inputs.manual_normalized_earnings
        ):
            result.add_error("Manual normalized earnings are required when manual method is selected")

        for adjustment in inputs.earnings_adjustments or []:
            if not is_finite_number(adjustment.amount):
                result.add_error(f"Adjustment '{adjustment.description}' has a non-finite amount")
            if _coerce_enum(AdjustmentCategory, adjustment.category) is None:
                result.add_error(
                    f"Adjustment '{adjustment.description}' has unknown category: {adjustment.category}"
                )

        capex_method = getattr(inputs.maintenance_capex, "method", None)
        if _coerce_enum(MaintenanceCapexMethod, capex_method) is None:
            result.add_error(f"Unknown maintenance capex method: {capex_method}")

        for label, enum_cls, value in (
            ("earnings quality", EarningsQuality, inputs.earnings_quality),
            ("business stability", BusinessStability, inputs.business_stability),
            ("competitive position", CompetitivePosition, inputs.competitive_position),
        ):
            if _coerce_enum(enum_cls, value) is None:
                result.add_error(f"Unknown {label}: {value}")

        coc_method = _coerce_enum(CostOfCapitalMethod, inputs.cost_of_capital_method)
        if coc_method is None:
            result.add_error(f"Unknown cost of capital method: {inputs.cost_of_capital_method}")
        elif coc_method == CostOfCapitalMethod.MANUAL:
            manual = inputs.manual_cost_of_capital
            if not is_finite_number(manual) or manual <= 0:
                result.add_error("Manual cost of capital must be positive when manual method is selected")
            elif manual > config.max_reasonable_cost_of_capital:
                result.add_warning("Cost of capital >50% is unusually high")
        else:
            components = inputs.cost_of_capital_components
            values = [
                components.risk_free_rate,
                components.market_risk_premium,
                components.beta,
                components.cost_of_debt,
                components.weight_of_equity,
                components.weight_of_debt,
                components.tax_rate,
            ]
            if not all(is_finite_number(v) for v in values):
                result.add_error("Cost of capital components must be finite numbers")

        return result


# =============================================================================
# DCF VALIDATOR
# =============================================================================

class DCFInputValidator:
    """Validates discounted cash flow inputs and the growth pattern."""

    def validate(self, inputs: "DCFInputs") -> ValidationResult:
        result = ValidationResult()
        config = VALIDATION_CONFIG
        rates = list(inputs.fcf_growth_rates or [])

        if not is_finite_number(inputs.base_fcf) or inputs.base_fcf <= 0:
            result.add_error("Base FCF must be positive")
        if not is_finite_number(inputs.discount_rate) or inputs.discount_rate <= 0:
            result.add_error("Discount rate must be positive")
        if not is_finite_number(inputs.shares_outstanding) or inputs.shares_outstanding <= 0:
            result.add_error("Shares outstanding must be positive")
        if not is_finite_number(inputs.projection_years) or inputs.projection_years <= 0:
            result.add_error("Projection years must be positive")
        elif inputs.projection_years != int(inputs.projection_years):
            result.add_error("Projection years must be a whole number")
        elif len(rates) != inputs.projection_years:
            result.add_error("Growth rates array length must match projection years")
        if not all(is_finite_number(rate) for rate in rates):
            result.add_error("Growth rates must be finite numbers")
            return result
        if not is_finite_number(inputs.terminal_growth_rate):
            result.add_error("Terminal growth rate must be a finite number")
            return result
        if is_finite_number(inputs.discount_rate) and inputs.terminal_growth_rate >= inputs.discount_rate:
            result.add_error("Terminal growth rate must be less than discount rate")

        for year, rate in enumerate(rates, start=1):
            if rate > config.unrealistic_growth_rate:
                result.add_error(f"Year {year}: Growth rate {rate:.1%} is unrealistic")
            elif rate > config.high_growth_rate_warning:
                result.add_warning(f"Year {year}: Growth rate {rate:.1%} is very high")

        if rates:
            final_rate = rates[-1]
            if abs(final_rate - inputs.terminal_growth_rate) > config.terminal_alignment_tolerance:
                result.add_warning(
                    f"Final year growth ({final_rate:.1%}) differs significantly from "
                    f"terminal growth ({inputs.terminal_growth_rate:.1%})"
                )

        return result


# =============================================================================
# NAV VALIDATOR
# =============================================================================

class NAVInputValidator:
    """Validates net asset value inputs against the balance sheet."""

    def validate(self, inputs: "NAVInputs") -> ValidationResult:
        result = ValidationResult()
        config = VALIDATION_CONFIG
        balance_sheet = inputs.balance_sheet

        shares = inputs.shares_outstanding
        if not is_finite_number(shares) or shares <= 0:
            result.add_error("Shares outstanding must be positive")
        elif shares > config.max_shares_outstanding:
            result.add_warning("Unusually high shares outstanding count")

        if balance_sheet is None:
            result.add_error("Balance sheet data is required for NAV calculation")
        else:
            assets = balance_sheet.total_assets
            liabilities = balance_sheet.total_liabilities
            if not is_finite_number(assets) or assets <= 0:
                result.add_error("Total assets must be positive")
            if not is_finite_number(liabilities) or liabilities < 0:
                result.add_error("Total liabilities cannot be negative")
            if (
                is_finite_number(assets)
                and is_finite_number(liabilities)
                and assets < liabilities
            ):
                result.add_warning("Company has negative equity (assets < liabilities)")

        for adjustment in inputs.asset_adjustments:
            if not is_finite_number(adjustment.adjusted_value) or not is_finite_number(
                adjustment.book_value
            ):
                result.add_error(f"Adjustment '{adjustment.description}' has non-finite values")
                continue
            if adjustment.adjusted_value < 0:
                result.add_warning(f"Negative adjusted value for {adjustment.description}")
            if adjustment.book_value > 0:
                ratio = abs(adjustment.adjusted_value - adjustment.book_value) / adjustment.book_value
                if ratio > config.max_adjustment_ratio:
                    result.add_warning(
                        f"Large adjustment ({ratio:.0%}) for {adjustment.description}"
                    )

        for adjustment in inputs.liability_adjustments:
            if not is_finite_number(adjustment.adjusted_value) or not is_finite_number(
                adjustment.book_value
            ):
                result.add_error(f"Adjustment '{adjustment.description}' has non-finite values")

        discount = inputs.custom_liquidation_discount
        if discount is not None:
            if not is_finite_number(discount) or discount < 0 or discount > 1:
                result.add_error("Custom liquidation discount must be between 0 and 1")
            elif discount > config.max_custom_liquidation_discount:
                result.add_warning("Very high liquidation discount (>80%) applied")

        return result


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def validate_ddm_inputs(inputs: "DDMInputs") -> ValidationResult:
    """Validate dividend discount model inputs."""
    return DDMInputValidator().validate(inputs)


def validate_epv_inputs(inputs: "EPVInputs") -> ValidationResult:
    """Validate earnings power value inputs."""
    return EPVInputValidator().validate(inputs)


def validate_dcf_inputs(inputs: "DCFInputs") -> ValidationResult:
    """Validate discounted cash flow inputs."""
    return DCFInputValidator().validate(inputs)


def validate_nav_inputs(inputs: "NAVInputs") -> ValidationResult:
    """Validate net asset value inputs."""
    return NAVInputValidator().validate(inputs)


__all__ = [
    "ValidationResult",
    "DDMInputValidator",
    "EPVInputValidator",
    "DCFInputValidator",
    "NAVInputValidator",
    "is_finite_number",
    "clamp_normalization_period",
    "validate_ddm_inputs",
    "validate_epv_inputs",
    "validate_dcf_inputs",
    "validate_nav_inputs",
]
