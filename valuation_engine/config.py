"""
Configuration Module - Shared Settings for the Valuation Engine
Valuation Calculation Engine

Centralizes logging setup, shared enumerations, validation thresholds,
ROIC/WACC policy constants and the economic-moat heuristic thresholds used
by every calculator in the engine.

The engine is a pure function layer: nothing in this module touches the
filesystem, the network or the process environment.

Version: 1.0.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Tuple
from enum import Enum


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Configure and return a logger instance with professional formatting."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


LOGGER = setup_logger("ValuationEngine")


# =============================================================================
# ENUMERATIONS
# =============================================================================

class TrendDirection(Enum):
    """Direction of a multi-period metric."""
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class MoatStrength(Enum):
    """Economic moat classification."""
    NONE = "none"
    NARROW = "narrow"
    WIDE = "wide"


class MoatSource(Enum):
    """Source of a sustainable competitive advantage."""
    BRAND = "brand"
    PATENTS = "patents"
    NETWORK_EFFECTS = "network_effects"
    SWITCHING_COSTS = "switching_costs"
    SCALE = "scale"
    LOCATION = "location"


class MoatSustainability(Enum):
    """Expected evolution of the moat."""
    DECLINING = "declining"
    STABLE = "stable"
    STRENGTHENING = "strengthening"


class CompetitivePressure(Enum):
    """Intensity of competition faced by the business."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BusinessStability(Enum):
    """Stability of revenue and margins."""
    VERY_STABLE = "very_stable"
    STABLE = "stable"
    MODERATE = "moderate"
    VOLATILE = "volatile"
    VERY_VOLATILE = "very_volatile"


class CompetitivePosition(Enum):
    """Market position of the business."""
    DOMINANT = "dominant"
    STRONG = "strong"
    AVERAGE = "average"
    WEAK = "weak"
    POOR = "poor"


class EarningsQuality(Enum):
    """Analyst assessment of reported earnings quality."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    VERY_POOR = "very_poor"


class ConfidenceLevel(Enum):
    """Confidence attached to a valuation result."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WarningSeverity(Enum):
    """Severity of a data-quality warning."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class DDMModelType(Enum):
    """Dividend discount model variants."""
    GORDON = "gordon"
    ZERO = "zero"
    TWO_STAGE = "two-stage"
    MULTI_STAGE = "multi-stage"


class NormalizationMethod(Enum):
    """How historical earnings are condensed into one figure."""
    AVERAGE = "average"
    MEDIAN = "median"
    LATEST = "latest"
    MANUAL = "manual"


class CostOfCapitalMethod(Enum):
    """Discount rate used to capitalize earnings."""
    WACC = "wacc"
    CAPM = "capm"
    MANUAL = "manual"


class AdjustmentCategory(Enum):
    """Nature of a one-off earnings adjustment."""
    OPERATIONAL = "operational"
    NON_RECURRING = "non_recurring"
    ACCOUNTING = "accounting"
    OTHER = "other"


class MaintenanceCapexMethod(Enum):
    """How sustaining capital expenditure is estimated."""
    MANUAL = "manual"
    DEPRECIATION_PROXY = "depreciation_proxy"
    HISTORICAL_AVERAGE = "historical_average"
    REVENUE_PERCENTAGE = "revenue_percentage"


class LiquidationScenario(Enum):
    """Speed of an asset liquidation."""
    ORDERLY = "orderly"
    QUICK = "quick"
    FORCED = "forced"


# =============================================================================
# NUMERICAL CONFIGURATION
# =============================================================================

# Denominators with an absolute value below this are treated as zero
MIN_DENOMINATOR: float = 1e-9


# =============================================================================
# VALIDATION CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class ValidationConfig:
    """Input sanity thresholds shared by the validators."""

    # Dividend discount model
    max_reasonable_required_return: float = 0.50
    max_sustainable_growth: float = 0.15
    min_non_distressed_growth: float = -0.10
    max_high_growth_years: int = 10

    # Earnings power value
    min_earnings_years: int = 5
    max_reasonable_cost_of_capital: float = 0.50

    # Net asset value
    max_shares_outstanding: float = 100_000_000_000
    max_custom_liquidation_discount: float = 0.80
    max_adjustment_ratio: float = 2.0

    # Discounted cash flow
    high_growth_rate_warning: float = 0.30
    unrealistic_growth_rate: float = 0.50
    terminal_alignment_tolerance: float = 0.05


VALIDATION_CONFIG = ValidationConfig()


# =============================================================================
# ROIC / WACC CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class ROICConfig:
    """Policy constants for ROIC and WACC analysis."""

    default_tax_rate: float = 0.21
    max_estimated_tax_rate: float = 0.40

    # Trend: recent half average vs older half average
    min_periods_for_trend: int = 3
    trend_threshold: float = 0.10

    # Spread-based moat classification (ROIC - WACC)
    wide_moat_spread: float = 0.08
    wide_moat_consistency: float = 0.70
    narrow_moat_spread: float = 0.02
    narrow_moat_consistency: float = 0.50

    # Absolute ROIC fallback when WACC is unavailable
    wide_moat_roic: float = 0.20
    narrow_moat_roic: float = 0.12

    # Market assumptions for get_default_wacc_inputs
    default_risk_free_rate: float = 0.045
    default_market_risk_premium: float = 0.06
    default_beta: float = 1.0
    default_cost_of_debt: float = 0.05
    default_debt_to_equity: float = 0.5


ROIC_CONFIG = ROICConfig()


# =============================================================================
# MOAT HEURISTIC THRESHOLDS
# =============================================================================

@dataclass(frozen=True)
class MoatThresholds:
    """
    Thresholds for the economic-moat heuristics.

    These are calibration policy: changing a value recalibrates a signal
    without touching the signal -> source mapping in moat_analyzer.
    """

    # Input inference defaults
    default_revenue_consistency: float = 0.5
    default_gross_margin_stability: float = 0.5
    default_margin_stability: float = 0.5
    min_statements_for_trends: int = 3

    # Dispersion multipliers (stability = 1 - multiplier * std)
    revenue_consistency_multiplier: float = 2.0
    gross_margin_stability_multiplier: float = 3.0
    net_margin_stability_multiplier: float = 5.0

    # SG&A efficiency and profitability trend thresholds
    sga_trend_threshold: float = 0.05
    profitability_trend_threshold: float = 0.10

    # Business stability from combined (revenue consistency + margin stability) / 2
    very_stable_score: float = 0.8
    stable_score: float = 0.6
    moderate_score: float = 0.4
    volatile_score: float = 0.2

    # Competitive position: (net margin floor, revenue floor)
    dominant_position: Tuple[float, float] = (0.15, 10_000_000_000)
    strong_position: Tuple[float, float] = (0.10, 5_000_000_000)
    average_position: Tuple[float, float] = (0.05, 1_000_000_000)
    weak_position: Tuple[float, float] = (0.0, 100_000_000)

    # Brand power
    brand_gross_margin: float = 0.60
    brand_gross_margin_stability: float = 0.70
    brand_margin_stability: float = 0.70

    # Scale advantages
    scale_asset_turnover: float = 1.5
    scale_average_roic: float = 0.15

    # Switching costs
    switching_revenue_consistency: float = 0.80
    switching_deferred_revenue_growth: float = 0.10

    # Patents / intellectual property
    patents_rd_intensity: float = 0.05
    patents_gross_margin: float = 0.60
    patents_gross_margin_stability: float = 0.50


MOAT_THRESHOLDS = MoatThresholds()


# =============================================================================
# EPV CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class EPVConfig:
    """Earnings power value policy constants."""

    # Earnings quality score
    base_quality_score: float = 100.0
    high_volatility: float = 0.30
    moderate_volatility: float = 0.15
    high_volatility_penalty: float = 30.0
    moderate_volatility_penalty: float = 15.0
    declining_trend_penalty: float = 20.0
    improving_trend_bonus: float = 10.0
    min_points_without_penalty: int = 5
    missing_point_penalty: float = 5.0
    trend_threshold: float = 0.05

    # Confidence
    high_confidence_quality: float = 80.0
    high_confidence_years: int = 7
    high_confidence_roic_consistency: float = 0.50
    medium_confidence_quality: float = 60.0
    medium_confidence_years: int = 5

    # Warnings
    high_cost_of_capital: float = 0.20

    # Default capital-market assumptions
    default_risk_free_rate: float = 0.045
    default_market_risk_premium: float = 0.065

    # Maintenance capex benchmarks (share of revenue)
    industry_capex_benchmarks: Dict[str, float] = field(default_factory=lambda: {
        "utilities": 0.06,
        "railroads": 0.12,
        "airlines": 0.08,
        "manufacturing": 0.04,
        "retail": 0.02,
        "software": 0.01,
        "default": 0.03,
    })

    # Capex / depreciation ratios for the depreciation proxy
    capex_to_depreciation_ratios: Dict[str, float] = field(default_factory=lambda: {
        "mature_stable": 1.0,
        "growing_moderately": 1.2,
        "high_growth": 1.5,
        "declining": 0.8,
    })


EPV_CONFIG = EPVConfig()
