"""
Calculator Registry Module - Typed Dispatch Table
Valuation Calculation Engine

Maps each CalculatorKind to its validate / calculate / sensitivity
functions so callers can run any model through a single entry point.

Version: 1.0.0
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict

from .config import LOGGER
from .dcf_valuator import calculate_dcf_intrinsic_value
from .ddm_valuator import calculate_ddm
from .epv_valuator import calculate_epv_intrinsic_value
from .input_validator import (
    ValidationResult,
    validate_dcf_inputs,
    validate_ddm_inputs,
    validate_epv_inputs,
    validate_nav_inputs,
)
from .nav_valuator import calculate_nav
from .sensitivity_analyzer import (
    calculate_dcf_sensitivity,
    calculate_ddm_sensitivity,
    calculate_epv_sensitivity,
    calculate_nav_sensitivity,
)


__version__ = "1.0.0"


class CalculatorKind(Enum):
    """Valuation models available in the engine."""
    DCF = "dcf"
    DDM = "ddm"
    EPV = "epv"
    NAV = "nav"


@dataclass(frozen=True)
class CalculatorSpec:
    """
    Functions and labels for one calculator.

    ``sensitivity`` takes the calculator inputs, except for EPV where it
    takes the computed result.
    """

    label: str
    full_name: str
    description: str
    validate: Callable[[Any], ValidationResult]
    calculate: Callable[[Any], Any]
    sensitivity: Callable[[Any], Any]


CALCULATOR_REGISTRY: Dict[CalculatorKind, CalculatorSpec] = {
    CalculatorKind.DCF: CalculatorSpec(
        label="DCF",
        full_name="Discounted Cash Flow",
        description="Present value of projected free cash flows plus a terminal value",
        validate=validate_dcf_inputs,
        calculate=calculate_dcf_intrinsic_value,
        sensitivity=calculate_dcf_sensitivity,
    ),
    CalculatorKind.DDM: CalculatorSpec(
        label="DDM",
        full_name="Dividend Discount Model",
        description="Present value of expected future dividends",
        validate=validate_ddm_inputs,
        calculate=calculate_ddm,
        sensitivity=calculate_ddm_sensitivity,
    ),
    CalculatorKind.EPV: CalculatorSpec(
        label="EPV",
        full_name="Earnings Power Value",
        description="Normalized sustainable earnings capitalized at the cost of capital, assuming no growth",
        validate=validate_epv_inputs,
        calculate=calculate_epv_intrinsic_value,
        sensitivity=calculate_epv_sensitivity,
    ),
    CalculatorKind.NAV: CalculatorSpec(
        label="NAV",
        full_name="Net Asset Value",
        description="Adjusted balance-sheet value and liquidation value of equity",
        validate=validate_nav_inputs,
        calculate=calculate_nav,
        sensitivity=calculate_nav_sensitivity,
    ),
}


def get_calculator(kind: CalculatorKind) -> CalculatorSpec:
    return CALCULATOR_REGISTRY[CalculatorKind(kind)]


def run_calculator(kind: CalculatorKind, inputs: Any) -> Any:
    """
    Validate and evaluate one model.

    Raises:
        ValidationError: inputs fail validation
    """
    spec = get_calculator(kind)
    LOGGER.debug(f"Running {spec.full_name} calculator")
    return spec.calculate(inputs)


__all__ = [
    "__version__",
    "CalculatorKind",
    "CalculatorSpec",
    "CALCULATOR_REGISTRY",
    "get_calculator",
    "run_calculator",
]
