"""
DCF Valuation Module - Discounted Cash Flow
Valuation Calculation Engine

Values the firm as the present value of projected free cash flows plus a
Gordon Growth terminal value.

Methodology:
    FCF_t           = FCF_(t-1) * (1 + g_t)          for t = 1..N
    PV(FCF_t)       = FCF_t / (1 + r)^t
    Terminal Value  = FCF_N * (1 + g_terminal) / (r - g_terminal)
    Equity Value    = Sum of PV(FCF_t) + PV(Terminal Value)
    Value per Share = Equity Value / Shares Outstanding

Year-by-year growth rates are supplied explicitly; generate_growth_pattern
and generate_decay_pattern build common decaying schedules.

Inputs: DCFInputs
Outputs: DCFResult

Version: 1.0.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any, Sequence

from .config import LOGGER, MIN_DENOMINATOR
from .exceptions import DomainError, ValidationError
from .input_validator import validate_dcf_inputs


__version__ = "1.0.0"


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

class DCFConfig:
    """Configuration parameters for DCF valuation."""

    DEFAULT_PROJECTION_YEARS: int = 5

    # Scenario growth schedules: (start rate, end rate)
    SCENARIO_PATTERNS: Dict[str, tuple] = {
        "bull": (0.20, 0.05),
        "base": (0.075, 0.05),
        "bear": (0.05, 0.02),
    }

    # Front-loading exponents for generate_decay_pattern
    FRONT_LOAD_INTENSITY: Dict[str, float] = {
        "light": 1.5,
        "medium": 2.0,
        "heavy": 3.0,
        "extreme": 5.0,
    }

    # Growth patterns are rounded to 0.1%
    PATTERN_PRECISION: int = 3


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ScenarioType(Enum):
    """Valuation scenario types."""
    BEAR = "bear"
    BASE = "base"
    BULL = "bull"


class GrowthDistribution(Enum):
    """Shape of a decaying growth schedule."""
    BALANCED = "balanced"
    FRONT_LOADED = "front-loaded"


# =============================================================================
# DATA CONTAINERS
# =============================================================================

@dataclass(frozen=True)
class DCFInputs:
    """Discounted cash flow inputs; one growth rate per projection year."""

    base_fcf: float
    fcf_growth_rates: Sequence[float]
    terminal_growth_rate: float
    discount_rate: float
    shares_outstanding: float
    projection_years: int = DCFConfig.DEFAULT_PROJECTION_YEARS
    scenario: ScenarioType = ScenarioType.BASE
    current_price: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_fcf": self.base_fcf,
            "fcf_growth_rates": list(self.fcf_growth_rates),
            "terminal_growth_rate": self.terminal_growth_rate,
            "discount_rate": self.discount_rate,
            "shares_outstanding": self.shares_outstanding,
            "projection_years": self.projection_years,
            "scenario": ScenarioType(self.scenario).value,
            "current_price": self.current_price,
        }


@dataclass
class FCFProjection:
    """Single year FCF projection."""

    year: int
    free_cash_flow: float
    growth_rate: float
    discount_factor: float = 0.0
    present_value: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "free_cash_flow": self.free_cash_flow,
            "growth_rate": self.growth_rate,
            "discount_factor": self.discount_factor,
            "present_value": self.present_value,
        }


@dataclass
class DCFResult:
    """Complete DCF valuation output."""

    scenario: ScenarioType
    discount_rate: float
    terminal_growth_rate: float
    projections: List[FCFProjection] = field(default_factory=list)

    sum_of_pv_fcf: float = 0.0
    terminal_value: float = 0.0
    terminal_value_pv: float = 0.0
    total_present_value: float = 0.0

    # Share of total value coming from the terminal value
    terminal_value_pct: Optional[float] = None

    intrinsic_value: float = 0.0
    intrinsic_value_per_share: float = 0.0
    shares_outstanding: float = 0.0

    current_price: Optional[float] = None
    upside_downside_pct: Optional[float] = None

    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": "DCF",
            "scenario": self.scenario.value,
            "discount_rate": self.discount_rate,
            "terminal_growth_rate": self.terminal_growth_rate,
            "projections": [p.to_dict() for p in self.projections],
            "sum_of_pv_fcf": self.sum_of_pv_fcf,
            "terminal_value": self.terminal_value,
            "terminal_value_pv": self.terminal_value_pv,
            "total_present_value": self.total_present_value,
            "terminal_value_pct": self.terminal_value_pct,
            "intrinsic_value": self.intrinsic_value,
            "intrinsic_value_per_share": self.intrinsic_value_per_share,
            "shares_outstanding": self.shares_outstanding,
            "current_price": self.current_price,
            "upside_downside_pct": self.upside_downside_pct,
            "warnings": self.warnings,
        }


# =============================================================================
# CORE FORMULAS
# =============================================================================

def calculate_discount_factor(discount_rate: float, year: int) -> float:
    """1 / (1 + r)^n; undefined when 1 + r is not positive."""
    if 1 + discount_rate <= MIN_DENOMINATOR:
        raise DomainError(
            "Discount rate must be greater than -100%",
            {"discount_rate": discount_rate},
        )
    return 1 / ((1 + discount_rate) ** year)


def calculate_present_value(future_value: float, discount_rate: float, year: int) -> float:
    """PV = FV / (1 + r)^n; a zero rate leaves the value undiscounted."""
    if discount_rate == 0:
        return future_value
    return future_value * calculate_discount_factor(discount_rate, year)


def calculate_terminal_value(
    final_year_fcf: float,
    terminal_growth_rate: float,
    discount_rate: float,
) -> float:
    """Gordon Growth terminal value: FCF_N * (1 + g) / (r - g)."""
    spread = discount_rate - terminal_growth_rate
    if spread <= MIN_DENOMINATOR:
        raise DomainError(
            "Terminal growth rate must be less than discount rate",
            {"terminal_growth_rate": terminal_growth_rate, "discount_rate": discount_rate},
        )
    return final_year_fcf * (1 + terminal_growth_rate) / spread


def project_free_cash_flows(base_fcf: float, growth_rates: Sequence[float]) -> List[FCFProjection]:
    """Compound base FCF through the yearly growth rates (undiscounted)."""
    projections = []
    current_fcf = base_fcf
    for index, rate in enumerate(growth_rates):
        current_fcf = current_fcf * (1 + rate)
        projections.append(FCFProjection(
            year=index + 1,
            free_cash_flow=current_fcf,
            growth_rate=rate,
        ))
    return projections


# =============================================================================
# DCF PROJECTOR
# =============================================================================

class DCFProjector:
    """
    Projects free cash flows and sums their present values.

    Methodology:
        1. Project FCF for Years 1-N using the yearly growth rates
        2. Calculate Terminal Value using Gordon Growth Model
        3. Discount all cash flows to present value
        4. Divide by shares outstanding
    """

    def project(self, inputs: DCFInputs) -> DCFResult:
        rate = inputs.discount_rate
        years = int(inputs.projection_years)

        projections = project_free_cash_flows(inputs.base_fcf, list(inputs.fcf_growth_rates)[:years])
        for projection in projections:
            projection.discount_factor = calculate_discount_factor(rate, projection.year)
            projection.present_value = calculate_present_value(
                projection.free_cash_flow, rate, projection.year
            )

        final_fcf = projections[-1].free_cash_flow if projections else inputs.base_fcf
        terminal_value = calculate_terminal_value(final_fcf, inputs.terminal_growth_rate, rate)
        terminal_pv = calculate_present_value(terminal_value, rate, years)

        sum_pv = sum(p.present_value for p in projections)
        total = sum_pv + terminal_pv

        result = DCFResult(
            scenario=ScenarioType(inputs.scenario),
            discount_rate=rate,
            terminal_growth_rate=inputs.terminal_growth_rate,
            projections=projections,
            sum_of_pv_fcf=sum_pv,
            terminal_value=terminal_value,
            terminal_value_pv=terminal_pv,
            total_present_value=total,
            intrinsic_value=total,
            intrinsic_value_per_share=total / inputs.shares_outstanding,
            shares_outstanding=inputs.shares_outstanding,
        )

        if total > 0:
            result.terminal_value_pct = terminal_pv / total

        price = inputs.current_price
        if price is not None and math.isfinite(price) and price > 0:
            result.current_price = price
            result.upside_downside_pct = (result.intrinsic_value_per_share - price) / price

        return result


# =============================================================================
# GROWTH PATTERNS
# =============================================================================

def generate_decay_pattern(
    start: float,
    end: float,
    years: int,
    distribution: GrowthDistribution = GrowthDistribution.BALANCED,
    intensity: str = "medium",
) -> List[float]:
    """
    Growth rates moving from ``start`` to ``end`` over ``years``.

    Balanced schedules interpolate linearly; front-loaded ones raise the
    progress to the intensity exponent so growth stays high for longer.
    """
    distribution = GrowthDistribution(distribution)
    exponent = DCFConfig.FRONT_LOAD_INTENSITY.get(intensity, DCFConfig.FRONT_LOAD_INTENSITY["medium"])

    rates = []
    for i in range(years):
        progress = i / max(years - 1, 1)
        if distribution == GrowthDistribution.FRONT_LOADED:
            progress = progress ** exponent
        rate = start - (start - end) * progress
        rates.append(round(rate, DCFConfig.PATTERN_PRECISION))
    return rates


def generate_growth_pattern(scenario: ScenarioType, years: int) -> List[float]:
    """Default decaying schedule for a bull, base or bear scenario."""
    start, end = DCFConfig.SCENARIO_PATTERNS[ScenarioType(scenario).value]
    return generate_decay_pattern(start, end, years)


def describe_growth_pattern(rates: Sequence[float]) -> str:
    if not rates:
        return "No pattern"
    start, end = rates[0], rates[-1]
    if abs(start - end) < 0.001:
        return f"Constant {start:.1%}"
    return f"Decaying from {start:.1%} to {end:.1%}"


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def calculate_dcf_intrinsic_value(inputs: DCFInputs) -> DCFResult:
    """
    Validate and evaluate a DCF.

    Raises:
        ValidationError: inputs fail validation; nothing is computed
        DomainError: terminal growth is not below the discount rate
    """
    validation = validate_dcf_inputs(inputs)
    if not validation.is_valid:
        raise ValidationError(validation.errors, validation.warnings, model="DCF")

    result = DCFProjector().project(inputs)
    result.warnings = list(validation.warnings)

    LOGGER.info(
        f"DCF ({result.scenario.value}): ${result.intrinsic_value_per_share:.2f} per share, "
        f"terminal value {result.terminal_value_pct or 0:.0%} of total"
    )
    return result


# =============================================================================
# MODULE EXPORTS
# =============================================================================

__all__ = [
    "__version__",
    "DCFConfig",
    "ScenarioType",
    "GrowthDistribution",
    "DCFInputs",
    "FCFProjection",
    "DCFResult",
    "DCFProjector",
    "calculate_discount_factor",
    "calculate_present_value",
    "calculate_terminal_value",
    "project_free_cash_flows",
    "generate_decay_pattern",
    "generate_growth_pattern",
    "describe_growth_pattern",
    "calculate_dcf_intrinsic_value",
]
