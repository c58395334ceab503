"""
Sensitivity Analysis Module - Parameter Sweeps for Every Calculator
Valuation Calculation Engine

Re-evaluates a calculator around its base case:
- One-dimensional sweeps over growth rate and discount rate
- A growth x discount matrix evaluated combinatorially
- Model-specific sweeps (EPV earnings and capex levels, NAV asset values,
  liquidation discounts and intangible inclusion)

A perturbed case that falls outside the calculator's domain (for example
growth >= discount rate) is recorded as None instead of raising, so every
matrix is fully populated. Cells are never NaN or infinite.

Version: 1.0.0
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Any, Sequence

from .config import LOGGER, MIN_DENOMINATOR, DDMModelType
from .dcf_valuator import DCFInputs, DCFProjector, calculate_dcf_intrinsic_value
from .ddm_valuator import DDMCalculator, DDMInputs, calculate_ddm
from .epv_valuator import EPVResult
from .exceptions import ValidationError, ValuationError
from .input_validator import validate_dcf_inputs, validate_ddm_inputs
from .nav_valuator import (
    NAVCalculator,
    NAVInputs,
    calculate_liquidation_value,
    calculate_nav,
    scale_asset_values,
)


__version__ = "1.0.0"


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

class SensitivityConfig:
    """Default offset grids."""

    GROWTH_OFFSETS: List[float] = [-0.02, -0.01, 0.0, 0.01, 0.02]
    DISCOUNT_OFFSETS: List[float] = [-0.02, -0.01, 0.0, 0.01, 0.02]

    # EPV
    COST_OF_CAPITAL_OFFSETS: List[float] = [-0.02, -0.01, -0.005, 0.0, 0.005, 0.01, 0.02]
    MIN_COST_OF_CAPITAL: float = 0.01
    EARNINGS_CHANGES: List[float] = [-0.3, -0.2, -0.1, 0.0, 0.1, 0.2, 0.3]
    CAPEX_SHARES: List[float] = [0.0, 0.02, 0.05, 0.10, 0.15, 0.20]

    # NAV
    ASSET_VALUE_CHANGES: List[float] = [-0.3, -0.2, -0.1, 0.0, 0.1, 0.2, 0.3]
    LIQUIDATION_DISCOUNTS: List[float] = [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7]


# =============================================================================
# DATA CONTAINERS
# =============================================================================

@dataclass
class SensitivityPoint:
    """One re-evaluation; value is None when not computable."""

    parameter_value: float
    value: Optional[float]
    percent_change: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameter_value": self.parameter_value,
            "value": self.value,
            "percent_change": self.percent_change,
        }


@dataclass
class SensitivityMatrix:
    """Two-parameter sensitivity grid."""

    # values[i][j] = value at row_values[i] and column_values[j]
    row_parameter: str = "growth_rate"
    column_parameter: str = "discount_rate"
    row_values: List[float] = field(default_factory=list)
    column_values: List[float] = field(default_factory=list)
    values: List[List[Optional[float]]] = field(default_factory=list)

    base_row_idx: int = 0
    base_column_idx: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row_parameter": self.row_parameter,
            "column_parameter": self.column_parameter,
            "row_values": self.row_values,
            "column_values": self.column_values,
            "values": self.values,
            "base_row_idx": self.base_row_idx,
            "base_column_idx": self.base_column_idx,
        }


@dataclass
class DDMSensitivity:
    model_type: DDMModelType
    base_value: float
    growth_sensitivity: List[SensitivityPoint] = field(default_factory=list)
    discount_sensitivity: List[SensitivityPoint] = field(default_factory=list)
    matrix: SensitivityMatrix = field(default_factory=SensitivityMatrix)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model_type": self.model_type.value,
            "base_value": self.base_value,
            "growth_sensitivity": [p.to_dict() for p in self.growth_sensitivity],
            "discount_sensitivity": [p.to_dict() for p in self.discount_sensitivity],
            "matrix": self.matrix.to_dict(),
        }


@dataclass
class DCFSensitivity:
    base_value: float
    terminal_growth_sensitivity: List[SensitivityPoint] = field(default_factory=list)
    discount_sensitivity: List[SensitivityPoint] = field(default_factory=list)
    matrix: SensitivityMatrix = field(default_factory=SensitivityMatrix)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_value": self.base_value,
            "terminal_growth_sensitivity": [p.to_dict() for p in self.terminal_growth_sensitivity],
            "discount_sensitivity": [p.to_dict() for p in self.discount_sensitivity],
            "matrix": self.matrix.to_dict(),
        }


@dataclass
class EPVSensitivity:
    base_epv: float
    cost_of_capital_sensitivity: List[SensitivityPoint] = field(default_factory=list)
    earnings_sensitivity: List[SensitivityPoint] = field(default_factory=list)
    maintenance_capex_sensitivity: List[SensitivityPoint] = field(default_factory=list)
    matrix: SensitivityMatrix = field(default_factory=SensitivityMatrix)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_epv": self.base_epv,
            "cost_of_capital_sensitivity": [p.to_dict() for p in self.cost_of_capital_sensitivity],
            "earnings_sensitivity": [p.to_dict() for p in self.earnings_sensitivity],
            "maintenance_capex_sensitivity": [p.to_dict() for p in self.maintenance_capex_sensitivity],
            "matrix": self.matrix.to_dict(),
        }


@dataclass
class IntangibleSensitivity:
    with_intangibles: float
    without_intangibles: float
    difference: float
    percent_impact: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "with_intangibles": self.with_intangibles,
            "without_intangibles": self.without_intangibles,
            "difference": self.difference,
            "percent_impact": self.percent_impact,
        }


@dataclass
class NAVSensitivity:
    base_nav: float
    asset_value_sensitivity: List[SensitivityPoint] = field(default_factory=list)
    liquidation_sensitivity: List[SensitivityPoint] = field(default_factory=list)
    intangible_sensitivity: Optional[IntangibleSensitivity] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_nav": self.base_nav,
            "asset_value_sensitivity": [p.to_dict() for p in self.asset_value_sensitivity],
            "liquidation_sensitivity": [p.to_dict() for p in self.liquidation_sensitivity],
            "intangible_sensitivity": (
                self.intangible_sensitivity.to_dict() if self.intangible_sensitivity else None
            ),
        }


# =============================================================================
# HELPERS
# =============================================================================

def percent_change(value: Optional[float], base: float) -> Optional[float]:
    """(value - base) / base in percent; None when either side is unusable."""
    if value is None or abs(base) < MIN_DENOMINATOR:
        return None
    return (value - base) / base * 100


def safe_evaluate(evaluate: Callable[[], float]) -> Optional[float]:
    """Run one perturbed evaluation, mapping domain failures to None."""
    try:
        value = evaluate()
    except ValuationError as exc:
        LOGGER.debug(f"Sensitivity case not computable: {exc.message}")
        return None
    if value is None or not math.isfinite(value):
        return None
    return value


def _base_index(offsets: Sequence[float]) -> int:
    if not offsets:
        return 0
    return min(range(len(offsets)), key=lambda i: abs(offsets[i]))


def build_matrix(
    row_values: Sequence[float],
    column_values: Sequence[float],
    evaluate: Callable[[float, float], float],
    base_row_idx: int,
    base_column_idx: int,
    row_parameter: str = "growth_rate",
    column_parameter: str = "discount_rate",
) -> SensitivityMatrix:
    """Evaluate every (row, column) combination."""
    values = [
        [safe_evaluate(lambda r=r, c=c: evaluate(r, c)) for c in column_values]
        for r in row_values
    ]
    return SensitivityMatrix(
        row_parameter=row_parameter,
        column_parameter=column_parameter,
        row_values=list(row_values),
        column_values=list(column_values),
        values=values,
        base_row_idx=base_row_idx,
        base_column_idx=base_column_idx,
    )


def _sweep(parameters: Sequence[float], evaluate: Callable[[float], float], base: float):
    points = []
    for parameter in parameters:
        value = safe_evaluate(lambda p=parameter: evaluate(p))
        points.append(SensitivityPoint(parameter, value, percent_change(value, base)))
    return points


# =============================================================================
# DDM SENSITIVITY
# =============================================================================

def ddm_growth_rate(inputs: DDMInputs) -> float:
    """The perpetual growth rate the sensitivity grid perturbs."""
    model_type = DDMModelType(inputs.model_type)
    if model_type == DDMModelType.GORDON:
        return inputs.gordon_growth_rate
    if model_type == DDMModelType.TWO_STAGE:
        return inputs.stable_growth_rate
    if model_type == DDMModelType.MULTI_STAGE:
        return inputs.growth_phases[-1].growth_rate
    return 0.0


def with_ddm_growth(inputs: DDMInputs, growth: float) -> DDMInputs:
    """
    Copy of the inputs with the perpetual growth rate replaced.

    Zero-growth inputs become a Gordon model at the new rate.
    """
    model_type = DDMModelType(inputs.model_type)
    if model_type == DDMModelType.TWO_STAGE:
        return dataclasses.replace(inputs, stable_growth_rate=growth)
    if model_type == DDMModelType.MULTI_STAGE:
        phases = list(inputs.growth_phases)
        phases[-1] = dataclasses.replace(phases[-1], growth_rate=growth)
        return dataclasses.replace(inputs, growth_phases=tuple(phases))
    return dataclasses.replace(inputs, model_type=DDMModelType.GORDON, gordon_growth_rate=growth)


def calculate_ddm_sensitivity(
    inputs: DDMInputs,
    growth_offsets: Optional[Sequence[float]] = None,
    discount_offsets: Optional[Sequence[float]] = None,
) -> DDMSensitivity:
    """
    Growth and required-return sweeps around a DDM base case.

    The base case must be valid; perturbed cases that are not computable
    are None.
    """
    growth_offsets = list(SensitivityConfig.GROWTH_OFFSETS if growth_offsets is None else growth_offsets)
    discount_offsets = list(SensitivityConfig.DISCOUNT_OFFSETS if discount_offsets is None else discount_offsets)

    base = calculate_ddm(inputs).intrinsic_value_per_share
    calculator = DDMCalculator()
    base_growth = ddm_growth_rate(inputs)
    base_return = inputs.required_return

    growth_values = [base_growth + d for d in growth_offsets]
    discount_values = [base_return + d for d in discount_offsets]

    def evaluate(growth: float, required_return: float) -> float:
        perturbed = dataclasses.replace(with_ddm_growth(inputs, growth), required_return=required_return)
        validation = validate_ddm_inputs(perturbed)
        if not validation.is_valid:
            raise ValidationError(validation.errors, validation.warnings, model="DDM")
        return calculator.calculate(perturbed).intrinsic_value_per_share

    return DDMSensitivity(
        model_type=DDMModelType(inputs.model_type),
        base_value=base,
        growth_sensitivity=_sweep(growth_values, lambda g: evaluate(g, base_return), base),
        discount_sensitivity=_sweep(discount_values, lambda r: evaluate(base_growth, r), base),
        matrix=build_matrix(
            growth_values,
            discount_values,
            evaluate,
            _base_index(growth_offsets),
            _base_index(discount_offsets),
        ),
    )


# =============================================================================
# DCF SENSITIVITY
# =============================================================================

def calculate_dcf_sensitivity(
    inputs: DCFInputs,
    growth_offsets: Optional[Sequence[float]] = None,
    discount_offsets: Optional[Sequence[float]] = None,
) -> DCFSensitivity:
    """Terminal growth and discount rate sweeps around a DCF base case."""
    growth_offsets = list(SensitivityConfig.GROWTH_OFFSETS if growth_offsets is None else growth_offsets)
    discount_offsets = list(SensitivityConfig.DISCOUNT_OFFSETS if discount_offsets is None else discount_offsets)

    base = calculate_dcf_intrinsic_value(inputs).intrinsic_value_per_share
    projector = DCFProjector()

    growth_values = [inputs.terminal_growth_rate + d for d in growth_offsets]
    discount_values = [inputs.discount_rate + d for d in discount_offsets]

    def evaluate(terminal_growth: float, discount_rate: float) -> float:
        perturbed = dataclasses.replace(
            inputs,
            terminal_growth_rate=terminal_growth,
            discount_rate=discount_rate,
        )
        validation = validate_dcf_inputs(perturbed)
        if not validation.is_valid:
            raise ValidationError(validation.errors, validation.warnings, model="DCF")
        return projector.project(perturbed).intrinsic_value_per_share

    return DCFSensitivity(
        base_value=base,
        terminal_growth_sensitivity=_sweep(
            growth_values, lambda g: evaluate(g, inputs.discount_rate), base
        ),
        discount_sensitivity=_sweep(
            discount_values, lambda r: evaluate(inputs.terminal_growth_rate, r), base
        ),
        matrix=build_matrix(
            growth_values,
            discount_values,
            evaluate,
            _base_index(growth_offsets),
            _base_index(discount_offsets),
        ),
    )


# =============================================================================
# EPV SENSITIVITY
# =============================================================================

def calculate_epv_sensitivity(
    result: EPVResult,
    cost_of_capital_offsets: Optional[Sequence[float]] = None,
    earnings_changes: Optional[Sequence[float]] = None,
    capex_shares: Optional[Sequence[float]] = None,
) -> EPVSensitivity:
    """
    Sweeps around a computed EPV result.

    Cost of capital is floored at 1%. Maintenance capex levels are shares of
    normalized earnings and replace the base deduction.
    """
    config = SensitivityConfig
    coc_offsets = list(config.COST_OF_CAPITAL_OFFSETS if cost_of_capital_offsets is None else cost_of_capital_offsets)
    earnings_changes = list(config.EARNINGS_CHANGES if earnings_changes is None else earnings_changes)
    capex_shares = list(config.CAPEX_SHARES if capex_shares is None else capex_shares)

    normalized = result.normalized_earnings
    capex = normalized - result.adjusted_earnings
    base_coc = result.cost_of_capital
    shares = result.shares_outstanding

    def epv_per_share(adjusted_earnings: float, cost_of_capital: float) -> float:
        return adjusted_earnings / cost_of_capital / shares

    base = epv_per_share(result.adjusted_earnings, base_coc)
    coc_values = [max(config.MIN_COST_OF_CAPITAL, base_coc + d) for d in coc_offsets]

    return EPVSensitivity(
        base_epv=base,
        cost_of_capital_sensitivity=_sweep(
            coc_values, lambda c: epv_per_share(result.adjusted_earnings, c), base
        ),
        earnings_sensitivity=_sweep(
            earnings_changes, lambda e: epv_per_share(normalized * (1 + e) - capex, base_coc), base
        ),
        maintenance_capex_sensitivity=_sweep(
            capex_shares, lambda s: epv_per_share(normalized - normalized * s, base_coc), base
        ),
        matrix=build_matrix(
            earnings_changes,
            coc_values,
            lambda e, c: epv_per_share(normalized * (1 + e) - capex, c),
            _base_index(earnings_changes),
            _base_index(coc_offsets),
            row_parameter="earnings_change",
            column_parameter="cost_of_capital",
        ),
    )


# =============================================================================
# NAV SENSITIVITY
# =============================================================================

def calculate_nav_sensitivity(
    inputs: NAVInputs,
    asset_value_changes: Optional[Sequence[float]] = None,
    liquidation_discounts: Optional[Sequence[float]] = None,
) -> NAVSensitivity:
    """Asset value, liquidation discount and intangible inclusion sweeps."""
    config = SensitivityConfig
    asset_value_changes = list(config.ASSET_VALUE_CHANGES if asset_value_changes is None else asset_value_changes)
    liquidation_discounts = list(config.LIQUIDATION_DISCOUNTS if liquidation_discounts is None else liquidation_discounts)

    base_result = calculate_nav(inputs)
    base = base_result.nav_per_share
    calculator = NAVCalculator()

    def nav_for_change(change: float) -> float:
        return calculator.calculate(scale_asset_values(inputs, 1 + change)).nav_per_share

    def liquidation_for_discount(discount: float) -> float:
        analysis = calculate_liquidation_value(base_result.asset_breakdown, custom_discount=discount)
        return (analysis.total_liquidation_value - base_result.total_adjusted_liabilities) / inputs.shares_outstanding

    with_intangibles = calculator.calculate(
        dataclasses.replace(inputs, include_intangibles=True)
    ).nav_per_share
    without_intangibles = calculator.calculate(
        dataclasses.replace(inputs, include_intangibles=False)
    ).nav_per_share
    difference = with_intangibles - without_intangibles

    return NAVSensitivity(
        base_nav=base,
        asset_value_sensitivity=_sweep(asset_value_changes, nav_for_change, base),
        liquidation_sensitivity=_sweep(liquidation_discounts, liquidation_for_discount, base),
        intangible_sensitivity=IntangibleSensitivity(
            with_intangibles=with_intangibles,
            without_intangibles=without_intangibles,
            difference=difference,
            percent_impact=percent_change(with_intangibles, without_intangibles),
        ),
    )


# =============================================================================
# MODULE EXPORTS
# =============================================================================

__all__ = [
    "__version__",
    "SensitivityConfig",
    "SensitivityPoint",
    "SensitivityMatrix",
    "DDMSensitivity",
    "DCFSensitivity",
    "EPVSensitivity",
    "IntangibleSensitivity",
    "NAVSensitivity",
    "percent_change",
    "safe_evaluate",
    "build_matrix",
    "ddm_growth_rate",
    "with_ddm_growth",
    "calculate_ddm_sensitivity",
    "calculate_dcf_sensitivity",
    "calculate_epv_sensitivity",
    "calculate_nav_sensitivity",
]
