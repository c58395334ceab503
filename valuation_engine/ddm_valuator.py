"""
DDM Valuation Module - Dividend Discount Model
Valuation Calculation Engine

Values equity as the present value of expected future dividends using one of
four growth-model variants.

Methodology:
    Gordon Growth:  Value = D0 * (1 + g) / (r - g)
    Zero Growth:    Value = D0 / r
    Two-Stage:      Sum of PV(D_t) for t = 1..N at the high growth rate
                    + PV(D_N * (1 + g2) / (r - g2)) discounted N years
    Multi-Stage:    Compounding through each finite phase, with the final
                    phase treated as a Gordon perpetuity

    Intrinsic Value = Intrinsic Value per Share * Shares Outstanding

Every variant also emits a 10 to 15 year dividend projection for display.
These display years do not alter the perpetuity formulas.

Inputs: DDMInputs (model type plus variant-specific growth assumptions)
Outputs: DDMResult

Version: 1.0.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Any, Sequence

from .config import (
    LOGGER,
    MIN_DENOMINATOR,
    DDMModelType,
)
from .exceptions import DomainError, ValidationError
from .input_validator import validate_ddm_inputs


__version__ = "1.0.0"


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

class DDMConfig:
    """Configuration parameters for DDM valuation."""

    # Display projection horizon for the perpetuity models
    PERPETUITY_DISPLAY_YEARS: int = 10

    # Stable/terminal years shown after the explicit growth stages
    TERMINAL_DISPLAY_YEARS: int = 5

    # Two-stage default when the caller leaves the period unset
    DEFAULT_HIGH_GROWTH_YEARS: int = 5


# =============================================================================
# DATA CONTAINERS - INPUTS
# =============================================================================

@dataclass(frozen=True)
class GrowthPhase:
    """One phase of a multi-stage dividend growth path."""

    growth_rate: float
    years: int = 0
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "growth_rate": self.growth_rate,
            "years": self.years,
            "description": self.description,
        }


@dataclass(frozen=True)
class DDMInputs:
    """
    Dividend discount model inputs.

    Only the fields of the selected ``model_type`` are read:
    gordon -> gordon_growth_rate; two-stage -> high_growth_rate,
    high_growth_years, stable_growth_rate; multi-stage -> growth_phases
    (the last phase is the perpetual one and its ``years`` is ignored).
    """

    current_dividend: float
    shares_outstanding: float
    required_return: float
    model_type: DDMModelType = DDMModelType.GORDON
    gordon_growth_rate: float = 0.0
    high_growth_rate: float = 0.0
    high_growth_years: int = DDMConfig.DEFAULT_HIGH_GROWTH_YEARS
    stable_growth_rate: float = 0.0
    growth_phases: Sequence[GrowthPhase] = field(default_factory=tuple)
    current_price: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_dividend": self.current_dividend,
            "shares_outstanding": self.shares_outstanding,
            "required_return": self.required_return,
            "model_type": self.model_type.value,
            "gordon_growth_rate": self.gordon_growth_rate,
            "high_growth_rate": self.high_growth_rate,
            "high_growth_years": self.high_growth_years,
            "stable_growth_rate": self.stable_growth_rate,
            "growth_phases": [p.to_dict() for p in self.growth_phases],
            "current_price": self.current_price,
        }


# =============================================================================
# DATA CONTAINERS - PROJECTION
# =============================================================================

@dataclass
class DividendProjection:
    """Single year dividend projection."""

    year: int
    dividend: float
    present_value: float
    growth_rate: float
    discount_factor: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "dividend": self.dividend,
            "present_value": self.present_value,
            "growth_rate": self.growth_rate,
            "discount_factor": self.discount_factor,
        }


@dataclass
class DDMTerminalValue:
    """Terminal value of the perpetual growth stage."""

    final_dividend: float = 0.0
    growth_rate: float = 0.0
    required_return: float = 0.0
    discount_years: int = 0

    terminal_dividend: float = 0.0
    terminal_value: float = 0.0
    discount_factor: float = 0.0
    present_value: float = 0.0

    def calculate(self) -> float:
        """Terminal value as of year N, discounted back N years."""
        spread = _require_positive_spread(
            self.required_return,
            self.growth_rate,
            "Terminal growth rate must be less than required return",
        )
        self.terminal_dividend = self.final_dividend * (1 + self.growth_rate)
        self.terminal_value = self.terminal_dividend / spread
        self.discount_factor = _discount_factor(self.required_return, self.discount_years)
        self.present_value = self.terminal_value * self.discount_factor
        return self.present_value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "final_dividend": self.final_dividend,
            "growth_rate": self.growth_rate,
            "required_return": self.required_return,
            "discount_years": self.discount_years,
            "terminal_dividend": self.terminal_dividend,
            "terminal_value": self.terminal_value,
            "discount_factor": self.discount_factor,
            "present_value": self.present_value,
            "formula": "D_N * (1+g) / (r - g)",
        }


# =============================================================================
# DATA CONTAINERS - FINAL RESULT
# =============================================================================

@dataclass
class DDMResult:
    """Complete DDM valuation output."""

    model_type: DDMModelType
    required_return: float
    intrinsic_value: float
    intrinsic_value_per_share: float
    total_pv_of_dividends: float
    dividend_projections: List[DividendProjection] = field(default_factory=list)

    # Perpetuity models project forever; years_projected is None for them
    years_projected: Optional[int] = None

    terminal_value: Optional[float] = None
    terminal_value_pv: Optional[float] = None

    # Yields are undefined when the intrinsic value is not positive
    current_dividend_yield: Optional[float] = None
    forward_dividend_yield: Optional[float] = None

    current_price: Optional[float] = None
    upside_downside_pct: Optional[float] = None

    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model_type": self.model_type.value,
            "required_return": self.required_return,
            "intrinsic_value": self.intrinsic_value,
            "intrinsic_value_per_share": self.intrinsic_value_per_share,
            "total_pv_of_dividends": self.total_pv_of_dividends,
            "dividend_projections": [p.to_dict() for p in self.dividend_projections],
            "years_projected": self.years_projected,
            "terminal_value": self.terminal_value,
            "terminal_value_pv": self.terminal_value_pv,
            "current_dividend_yield": self.current_dividend_yield,
            "forward_dividend_yield": self.forward_dividend_yield,
            "current_price": self.current_price,
            "upside_downside_pct": self.upside_downside_pct,
            "warnings": self.warnings,
        }


# =============================================================================
# HELPERS
# =============================================================================

def _require_positive_spread(required_return: float, growth_rate: float, message: str) -> float:
    """r - g, refusing spreads at or below zero."""
    spread = required_return - growth_rate
    if spread <= MIN_DENOMINATOR:
        raise DomainError(
            message,
            {"required_return": required_return, "growth_rate": growth_rate},
        )
    return spread


def _discount_factor(required_return: float, year: int) -> float:
    """1 / (1 + r)^t, refusing a non-positive compounding base."""
    if 1 + required_return <= MIN_DENOMINATOR:
        raise DomainError(
            "Required return must be greater than -100%",
            {"required_return": required_return},
        )
    return 1 / ((1 + required_return) ** year)


def _projection(year: int, dividend: float, growth_rate: float, required_return: float) -> DividendProjection:
    discount_factor = _discount_factor(required_return, year)
    return DividendProjection(
        year=year,
        dividend=dividend,
        present_value=dividend * discount_factor,
        growth_rate=growth_rate,
        discount_factor=discount_factor,
    )


def _yield(dividend: float, value_per_share: float) -> Optional[float]:
    if value_per_share <= MIN_DENOMINATOR:
        return None
    return dividend / value_per_share


# =============================================================================
# DDM CALCULATOR
# =============================================================================

class DDMCalculator:
    """
    Evaluates one DDM variant per call.

    The variants are mutually exclusive branches selected through a lookup
    table keyed by model type; each branch is a single terminal evaluation.
    """

    def __init__(self):
        self._models: Dict[DDMModelType, Callable[[DDMInputs], DDMResult]] = {
            DDMModelType.GORDON: self.gordon_growth,
            DDMModelType.ZERO: self.zero_growth,
            DDMModelType.TWO_STAGE: self.two_stage,
            DDMModelType.MULTI_STAGE: self.multi_stage,
        }

    def calculate(self, inputs: DDMInputs) -> DDMResult:
        model_type = DDMModelType(inputs.model_type)
        return self._models[model_type](inputs)

    def gordon_growth(self, inputs: DDMInputs) -> DDMResult:
        d0 = inputs.current_dividend
        r = inputs.required_return
        g = inputs.gordon_growth_rate

        spread = _require_positive_spread(
            r, g, "Growth rate must be less than required return for Gordon model"
        )
        d1 = d0 * (1 + g)
        value_per_share = d1 / spread

        projections = [
            _projection(year, d0 * (1 + g) ** year, g, r)
            for year in range(1, DDMConfig.PERPETUITY_DISPLAY_YEARS + 1)
        ]

        return self._build_result(
            inputs,
            DDMModelType.GORDON,
            value_per_share=value_per_share,
            total_pv=value_per_share,
            projections=projections,
            forward_dividend=d1,
        )

    def zero_growth(self, inputs: DDMInputs) -> DDMResult:
        d0 = inputs.current_dividend
        r = inputs.required_return

        if r <= MIN_DENOMINATOR:
            raise DomainError("Required return must be positive", {"required_return": r})
        value_per_share = d0 / r

        projections = [
            _projection(year, d0, 0.0, r)
            for year in range(1, DDMConfig.PERPETUITY_DISPLAY_YEARS + 1)
        ]

        return self._build_result(
            inputs,
            DDMModelType.ZERO,
            value_per_share=value_per_share,
            total_pv=value_per_share,
            projections=projections,
            forward_dividend=d0,
        )

    def two_stage(self, inputs: DDMInputs) -> DDMResult:
        d0 = inputs.current_dividend
        r = inputs.required_return
        high_growth = inputs.high_growth_rate
        stable_growth = inputs.stable_growth_rate
        years = int(inputs.high_growth_years)

        projections = [
            _projection(year, d0 * (1 + high_growth) ** year, high_growth, r)
            for year in range(1, years + 1)
        ]
        stage_one_pv = sum(p.present_value for p in projections)

        last_high_dividend = d0 * (1 + high_growth) ** years
        terminal = DDMTerminalValue(
            final_dividend=last_high_dividend,
            growth_rate=stable_growth,
            required_return=r,
            discount_years=years,
        )
        terminal.calculate()

        for offset in range(1, DDMConfig.TERMINAL_DISPLAY_YEARS + 1):
            dividend = last_high_dividend * (1 + stable_growth) ** offset
            projections.append(_projection(years + offset, dividend, stable_growth, r))

        return self._build_result(
            inputs,
            DDMModelType.TWO_STAGE,
            value_per_share=stage_one_pv + terminal.present_value,
            total_pv=stage_one_pv,
            projections=projections,
            forward_dividend=d0 * (1 + high_growth),
            terminal=terminal,
            years_projected=years,
        )

    def multi_stage(self, inputs: DDMInputs) -> DDMResult:
        phases = list(inputs.growth_phases or [])
        if len(phases) < 2:
            raise ValidationError(["Multi-stage DDM requires at least 2 growth phases"], model="DDM")

        d0 = inputs.current_dividend
        r = inputs.required_return

        projections = []
        dividend = d0
        current_year = 0
        for phase in phases[:-1]:
            for _ in range(int(phase.years)):
                current_year += 1
                dividend *= 1 + phase.growth_rate
                projections.append(_projection(current_year, dividend, phase.growth_rate, r))
        finite_pv = sum(p.present_value for p in projections)

        terminal_phase = phases[-1]
        terminal = DDMTerminalValue(
            final_dividend=dividend,
            growth_rate=terminal_phase.growth_rate,
            required_return=r,
            discount_years=current_year,
        )
        terminal.calculate()

        for offset in range(1, DDMConfig.TERMINAL_DISPLAY_YEARS + 1):
            display_dividend = dividend * (1 + terminal_phase.growth_rate) ** offset
            projections.append(
                _projection(current_year + offset, display_dividend, terminal_phase.growth_rate, r)
            )

        return self._build_result(
            inputs,
            DDMModelType.MULTI_STAGE,
            value_per_share=finite_pv + terminal.present_value,
            total_pv=finite_pv,
            projections=projections,
            forward_dividend=d0 * (1 + phases[0].growth_rate),
            terminal=terminal,
            years_projected=current_year,
        )

    def _build_result(
        self,
        inputs: DDMInputs,
        model_type: DDMModelType,
        value_per_share: float,
        total_pv: float,
        projections: List[DividendProjection],
        forward_dividend: float,
        terminal: Optional[DDMTerminalValue] = None,
        years_projected: Optional[int] = None,
    ) -> DDMResult:
        if not math.isfinite(value_per_share):
            raise DomainError(
                "DDM produced a non-finite intrinsic value",
                {"model_type": model_type.value},
            )

        result = DDMResult(
            model_type=model_type,
            required_return=inputs.required_return,
            intrinsic_value=value_per_share * inputs.shares_outstanding,
            intrinsic_value_per_share=value_per_share,
            total_pv_of_dividends=total_pv,
            dividend_projections=projections,
            years_projected=years_projected,
            current_dividend_yield=_yield(inputs.current_dividend, value_per_share),
            forward_dividend_yield=_yield(forward_dividend, value_per_share),
        )

        if terminal is not None:
            result.terminal_value = terminal.terminal_value
            result.terminal_value_pv = terminal.present_value

        price = inputs.current_price
        if price is not None and math.isfinite(price) and price > 0:
            result.current_price = price
            result.upside_downside_pct = (value_per_share - price) / price

        return result


# =============================================================================
# DIVIDEND HISTORY HELPERS
# =============================================================================

@dataclass(frozen=True)
class DividendRecord:
    """Annual dividend per share."""

    year: int
    dividend: float


def calculate_implied_growth_rate(
    current_price: float,
    current_dividend: float,
    required_return: float,
) -> float:
    """Growth rate implied by the market price under Gordon: g = r - D / P."""
    if current_price <= MIN_DENOMINATOR:
        raise DomainError("Current price must be positive", {"current_price": current_price})
    return required_return - current_dividend / current_price


def calculate_historical_dividend_growth(dividends: Sequence[DividendRecord]) -> float:
    """
    Dividend CAGR between the earliest and latest year.

    Returns 0 when there are fewer than 2 records or either endpoint is not
    positive.
    """
    if len(dividends) < 2:
        return 0.0

    ordered = sorted(dividends, key=lambda d: d.year)
    first, last = ordered[0], ordered[-1]
    years = last.year - first.year

    if first.dividend <= 0 or last.dividend <= 0 or years <= 0:
        return 0.0

    return (last.dividend / first.dividend) ** (1 / years) - 1


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def calculate_ddm(inputs: DDMInputs) -> DDMResult:
    """
    Validate and evaluate a DDM.

    Raises:
        ValidationError: inputs fail validation; nothing is computed
        DomainError: the formula is undefined for the given inputs
    """
    validation = validate_ddm_inputs(inputs)
    if not validation.is_valid:
        raise ValidationError(validation.errors, validation.warnings, model="DDM")

    result = DDMCalculator().calculate(inputs)
    result.warnings = list(validation.warnings)

    LOGGER.info(
        f"DDM ({result.model_type.value}): intrinsic value per share "
        f"${result.intrinsic_value_per_share:.2f}"
    )
    return result


def calculate_gordon_growth_ddm(inputs: DDMInputs) -> DDMResult:
    return DDMCalculator().gordon_growth(inputs)


def calculate_zero_growth_ddm(inputs: DDMInputs) -> DDMResult:
    return DDMCalculator().zero_growth(inputs)


def calculate_two_stage_ddm(inputs: DDMInputs) -> DDMResult:
    return DDMCalculator().two_stage(inputs)


def calculate_multi_stage_ddm(inputs: DDMInputs) -> DDMResult:
    return DDMCalculator().multi_stage(inputs)


# =============================================================================
# MODULE EXPORTS
# =============================================================================

__all__ = [
    "__version__",
    "DDMConfig",
    "GrowthPhase",
    "DDMInputs",
    "DividendProjection",
    "DDMTerminalValue",
    "DDMResult",
    "DDMCalculator",
    "DividendRecord",
    "calculate_ddm",
    "calculate_gordon_growth_ddm",
    "calculate_zero_growth_ddm",
    "calculate_two_stage_ddm",
    "calculate_multi_stage_ddm",
    "calculate_implied_growth_rate",
    "calculate_historical_dividend_growth",
]
