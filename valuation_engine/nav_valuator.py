"""
NAV Valuation Module - Net Asset Value
Valuation Calculation Engine

Values equity from the balance sheet: book value, fair-value adjusted value
and liquidation value under three disposal speeds.

Methodology:
    Book NAV        = Total Assets - Total Liabilities
    Adjusted NAV    = Sum(adjusted asset categories) - Sum(adjusted liability categories)
    Liquidation     = Sum(adjusted asset x (1 - discount)) - adjusted liabilities

Category book values come from the reported balance-sheet line items when
the statement carries them. Otherwise they are estimated as fixed shares of
total assets / total liabilities.

Inputs: NAVInputs
Outputs: NAVResult

Version: 1.0.0
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any, Sequence

from .config import (
    LOGGER,
    MIN_DENOMINATOR,
    ConfidenceLevel,
    LiquidationScenario,
    WarningSeverity,
)
from .exceptions import DataQualityWarning, ValidationError
from .financials import BalanceSheet
from .input_validator import validate_nav_inputs


__version__ = "1.0.0"


# =============================================================================
# ENUMERATIONS
# =============================================================================

class AssetCategory(Enum):
    """Balance-sheet asset categories."""
    CASH_AND_EQUIVALENTS = "cash_and_equivalents"
    MARKETABLE_SECURITIES = "marketable_securities"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    INVENTORY = "inventory"
    PREPAID_EXPENSES = "prepaid_expenses"
    PROPERTY_PLANT_EQUIPMENT = "property_plant_equipment"
    INTANGIBLE_ASSETS = "intangible_assets"
    GOODWILL = "goodwill"
    INVESTMENTS = "investments"
    OTHER_ASSETS = "other_assets"


class LiabilityCategory(Enum):
    """Balance-sheet liability categories."""
    ACCOUNTS_PAYABLE = "accounts_payable"
    ACCRUED_EXPENSES = "accrued_expenses"
    SHORT_TERM_DEBT = "short_term_debt"
    LONG_TERM_DEBT = "long_term_debt"
    PENSION_OBLIGATIONS = "pension_obligations"
    DEFERRED_TAX_LIABILITIES = "deferred_tax_liabilities"
    CONTINGENT_LIABILITIES = "contingent_liabilities"
    OTHER_LIABILITIES = "other_liabilities"


class AssetQualityCategory(Enum):
    """Banded asset quality score."""
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    VERY_POOR = "very_poor"


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

A = AssetCategory
L = LiabilityCategory


class NAVConfig:
    """Configuration parameters for NAV valuation."""

    # Estimated share of total assets when line items are not reported
    DEFAULT_ASSET_SHARES: Dict[AssetCategory, float] = {
        A.CASH_AND_EQUIVALENTS: 0.10,
        A.MARKETABLE_SECURITIES: 0.05,
        A.ACCOUNTS_RECEIVABLE: 0.15,
        A.INVENTORY: 0.20,
        A.PREPAID_EXPENSES: 0.02,
        A.PROPERTY_PLANT_EQUIPMENT: 0.35,
        A.INTANGIBLE_ASSETS: 0.08,
        A.GOODWILL: 0.03,
        A.INVESTMENTS: 0.02,
        A.OTHER_ASSETS: 0.00,
    }

    DEFAULT_LIABILITY_SHARES: Dict[LiabilityCategory, float] = {
        L.ACCOUNTS_PAYABLE: 0.25,
        L.ACCRUED_EXPENSES: 0.15,
        L.SHORT_TERM_DEBT: 0.20,
        L.LONG_TERM_DEBT: 0.30,
        L.PENSION_OBLIGATIONS: 0.05,
        L.DEFERRED_TAX_LIABILITIES: 0.03,
        L.CONTINGENT_LIABILITIES: 0.02,
        L.OTHER_LIABILITIES: 0.00,
    }

    # Reported balance-sheet fields per category (first non-None wins)
    ASSET_LINE_ITEMS: Dict[AssetCategory, tuple] = {
        A.CASH_AND_EQUIVALENTS: ("cash_and_equivalents", "cash"),
        A.MARKETABLE_SECURITIES: ("marketable_securities",),
        A.ACCOUNTS_RECEIVABLE: ("accounts_receivable",),
        A.INVENTORY: ("inventory",),
        A.PREPAID_EXPENSES: ("prepaid_expenses",),
        A.PROPERTY_PLANT_EQUIPMENT: ("property_plant_equipment",),
        A.INTANGIBLE_ASSETS: ("intangible_assets",),
        A.GOODWILL: ("goodwill",),
        A.INVESTMENTS: ("investments",),
    }

    LIABILITY_LINE_ITEMS: Dict[LiabilityCategory, tuple] = {
        L.ACCOUNTS_PAYABLE: ("accounts_payable",),
        L.ACCRUED_EXPENSES: ("accrued_expenses",),
        L.SHORT_TERM_DEBT: ("short_term_debt",),
        L.LONG_TERM_DEBT: ("long_term_debt",),
        L.PENSION_OBLIGATIONS: ("pension_obligations",),
        L.DEFERRED_TAX_LIABILITIES: ("deferred_tax_liabilities",),
    }

    LIQUIDATION_DISCOUNTS: Dict[LiquidationScenario, Dict[AssetCategory, float]] = {
        LiquidationScenario.ORDERLY: {
            A.CASH_AND_EQUIVALENTS: 0.00,
            A.MARKETABLE_SECURITIES: 0.05,
            A.ACCOUNTS_RECEIVABLE: 0.10,
            A.INVENTORY: 0.20,
            A.PREPAID_EXPENSES: 0.50,
            A.PROPERTY_PLANT_EQUIPMENT: 0.15,
            A.INTANGIBLE_ASSETS: 0.60,
            A.GOODWILL: 1.00,
            A.INVESTMENTS: 0.10,
            A.OTHER_ASSETS: 0.30,
        },
        LiquidationScenario.QUICK: {
            A.CASH_AND_EQUIVALENTS: 0.00,
            A.MARKETABLE_SECURITIES: 0.15,
            A.ACCOUNTS_RECEIVABLE: 0.25,
            A.INVENTORY: 0.40,
            A.PREPAID_EXPENSES: 0.70,
            A.PROPERTY_PLANT_EQUIPMENT: 0.30,
            A.INTANGIBLE_ASSETS: 0.80,
            A.GOODWILL: 1.00,
            A.INVESTMENTS: 0.25,
            A.OTHER_ASSETS: 0.50,
        },
        LiquidationScenario.FORCED: {
            A.CASH_AND_EQUIVALENTS: 0.00,
            A.MARKETABLE_SECURITIES: 0.25,
            A.ACCOUNTS_RECEIVABLE: 0.40,
            A.INVENTORY: 0.60,
            A.PREPAID_EXPENSES: 0.90,
            A.PROPERTY_PLANT_EQUIPMENT: 0.50,
            A.INTANGIBLE_ASSETS: 0.95,
            A.GOODWILL: 1.00,
            A.INVESTMENTS: 0.40,
            A.OTHER_ASSETS: 0.70,
        },
    }

    LIQUIDATION_TIME_FRAMES: Dict[LiquidationScenario, str] = {
        LiquidationScenario.ORDERLY: "12-24 months",
        LiquidationScenario.QUICK: "3-6 months",
        LiquidationScenario.FORCED: "1-3 months",
    }

    # Relative reliability of each category's carrying value
    ASSET_QUALITY_WEIGHTS: Dict[AssetCategory, float] = {
        A.CASH_AND_EQUIVALENTS: 1.0,
        A.MARKETABLE_SECURITIES: 0.9,
        A.ACCOUNTS_RECEIVABLE: 0.7,
        A.INVENTORY: 0.6,
        A.PREPAID_EXPENSES: 0.3,
        A.PROPERTY_PLANT_EQUIPMENT: 0.8,
        A.INTANGIBLE_ASSETS: 0.4,
        A.GOODWILL: 0.1,
        A.INVESTMENTS: 0.7,
        A.OTHER_ASSETS: 0.5,
    }

    MARKETABILITY: Dict[AssetCategory, str] = {
        A.CASH_AND_EQUIVALENTS: "high",
        A.MARKETABLE_SECURITIES: "high",
        A.ACCOUNTS_RECEIVABLE: "medium",
        A.INVENTORY: "medium",
        A.PREPAID_EXPENSES: "low",
        A.PROPERTY_PLANT_EQUIPMENT: "medium",
        A.INTANGIBLE_ASSETS: "low",
        A.GOODWILL: "low",
        A.INVESTMENTS: "medium",
        A.OTHER_ASSETS: "low",
    }

    ADJUSTMENT_CONFIDENCE_SCORES: Dict[ConfidenceLevel, float] = {
        ConfidenceLevel.HIGH: 1.0,
        ConfidenceLevel.MEDIUM: 0.8,
        ConfidenceLevel.LOW: 0.6,
    }

    # Score bands: (floor, category)
    SCORE_BANDS = (
        (80.0, AssetQualityCategory.EXCELLENT),
        (65.0, AssetQualityCategory.GOOD),
        (50.0, AssetQualityCategory.FAIR),
        (30.0, AssetQualityCategory.POOR),
    )

    # Quality indicators
    EXCESS_CASH_RATIO: float = 0.20
    HEAVY_INTANGIBLES_RATIO: float = 0.30
    SIGNIFICANT_GOODWILL_RATIO: float = 0.10

    # Warnings
    HIGH_INTANGIBLES_WARNING: float = 0.50
    LOW_QUALITY_WARNING: float = 40.0
    LARGE_ADJUSTMENT_WARNING: float = 0.25

    # Confidence: (min quality score, max validation warnings)
    HIGH_CONFIDENCE = (70.0, 2)
    MEDIUM_CONFIDENCE = (50.0, 5)


del A, L


# =============================================================================
# DATA CONTAINERS - INPUTS
# =============================================================================

@dataclass(frozen=True)
class AssetAdjustment:
    """Fair-value restatement of part of an asset category."""

    category: AssetCategory
    description: str
    book_value: float
    adjusted_value: float
    reason: str = ""
    confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM


@dataclass(frozen=True)
class LiabilityAdjustment:
    """Fair-value restatement of part of a liability category."""

    category: LiabilityCategory
    description: str
    book_value: float
    adjusted_value: float
    reason: str = ""
    confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM


@dataclass(frozen=True)
class NAVInputs:
    """
    Net asset value inputs.

    Adjustments restate part of a category: the category moves by
    ``adjusted_value - book_value`` of each adjustment.
    """

    balance_sheet: BalanceSheet
    shares_outstanding: float
    asset_adjustments: Sequence[AssetAdjustment] = field(default_factory=tuple)
    liability_adjustments: Sequence[LiabilityAdjustment] = field(default_factory=tuple)
    include_intangibles: bool = True
    include_goodwill: bool = True
    liquidation_scenario: Optional[LiquidationScenario] = None
    custom_liquidation_discount: Optional[float] = None
    current_price: Optional[float] = None


# =============================================================================
# DATA CONTAINERS - BREAKDOWNS
# =============================================================================

@dataclass
class AssetBreakdown:
    """One asset category after adjustments."""

    category: AssetCategory
    book_value: float
    adjusted_value: float
    quality_score: float
    liquidation_discount: float
    liquidation_value: float
    reported: bool = False

    @property
    def adjustment_amount(self) -> float:
        return self.adjusted_value - self.book_value

    @property
    def adjustment_percentage(self) -> float:
        if self.book_value <= 0:
            return 0.0
        return self.adjustment_amount / self.book_value * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "book_value": self.book_value,
            "adjusted_value": self.adjusted_value,
            "adjustment_amount": self.adjustment_amount,
            "adjustment_percentage": self.adjustment_percentage,
            "quality_score": self.quality_score,
            "liquidation_discount": self.liquidation_discount,
            "liquidation_value": self.liquidation_value,
            "reported": self.reported,
        }


@dataclass
class LiabilityBreakdown:
    """One liability category after adjustments."""

    category: LiabilityCategory
    book_value: float
    adjusted_value: float
    reported: bool = False

    @property
    def adjustment_amount(self) -> float:
        return self.adjusted_value - self.book_value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "book_value": self.book_value,
            "adjusted_value": self.adjusted_value,
            "adjustment_amount": self.adjustment_amount,
            "reported": self.reported,
        }


@dataclass
class AssetQualityAnalysis:
    """Value-weighted reliability of the asset base."""

    overall_score: float = 0.0
    score_category: AssetQualityCategory = AssetQualityCategory.VERY_POOR
    tangible_asset_ratio: float = 0.0
    liquid_asset_ratio: float = 0.0
    intangible_asset_ratio: float = 0.0
    has_excess_cash: bool = False
    has_marketable_securities: bool = False
    heavy_intangibles: bool = False
    significant_goodwill: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "score_category": self.score_category.value,
            "tangible_asset_ratio": self.tangible_asset_ratio,
            "liquid_asset_ratio": self.liquid_asset_ratio,
            "intangible_asset_ratio": self.intangible_asset_ratio,
            "has_excess_cash": self.has_excess_cash,
            "has_marketable_securities": self.has_marketable_securities,
            "heavy_intangibles": self.heavy_intangibles,
            "significant_goodwill": self.significant_goodwill,
        }


@dataclass
class AssetLiquidationValue:
    """Liquidation proceeds of one asset category."""

    book_value: float
    liquidation_value: float
    discount: float
    marketability: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "book_value": self.book_value,
            "liquidation_value": self.liquidation_value,
            "discount": self.discount,
            "marketability": self.marketability,
        }


@dataclass
class LiquidationAnalysis:
    """Liquidation value under one scenario."""

    scenario: LiquidationScenario
    total_liquidation_value: float
    average_discount: float
    time_frame: str
    asset_values: Dict[AssetCategory, AssetLiquidationValue] = field(default_factory=dict)
    liquidation_value_per_share: float = 0.0
    custom_discount: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenario": self.scenario.value,
            "total_liquidation_value": self.total_liquidation_value,
            "liquidation_value_per_share": self.liquidation_value_per_share,
            "average_discount": self.average_discount,
            "time_frame": self.time_frame,
            "custom_discount": self.custom_discount,
            "asset_values": {k.value: v.to_dict() for k, v in self.asset_values.items()},
        }


# =============================================================================
# DATA CONTAINERS - FINAL RESULT
# =============================================================================

@dataclass
class NAVResult:
    """Complete NAV valuation output."""

    book_value_nav: float
    adjusted_nav: float
    nav_per_share: float
    book_value_per_share: float
    total_adjusted_assets: float
    total_adjusted_liabilities: float
    net_adjustments: float
    shares_outstanding: float

    asset_breakdown: List[AssetBreakdown] = field(default_factory=list)
    liability_breakdown: List[LiabilityBreakdown] = field(default_factory=list)
    asset_quality: AssetQualityAnalysis = field(default_factory=AssetQualityAnalysis)
    liquidation_analysis: List[LiquidationAnalysis] = field(default_factory=list)

    confidence_level: ConfidenceLevel = ConfidenceLevel.LOW
    warnings: List[DataQualityWarning] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)

    current_price: Optional[float] = None
    price_to_nav: Optional[float] = None
    upside_downside_pct: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "book_value_nav": self.book_value_nav,
            "adjusted_nav": self.adjusted_nav,
            "nav_per_share": self.nav_per_share,
            "book_value_per_share": self.book_value_per_share,
            "total_adjusted_assets": self.total_adjusted_assets,
            "total_adjusted_liabilities": self.total_adjusted_liabilities,
            "net_adjustments": self.net_adjustments,
            "shares_outstanding": self.shares_outstanding,
            "asset_breakdown": [a.to_dict() for a in self.asset_breakdown],
            "liability_breakdown": [l.to_dict() for l in self.liability_breakdown],
            "asset_quality": self.asset_quality.to_dict(),
            "liquidation_analysis": [l.to_dict() for l in self.liquidation_analysis],
            "confidence_level": self.confidence_level.value,
            "warnings": [w.to_dict() for w in self.warnings],
            "validation_warnings": self.validation_warnings,
            "current_price": self.current_price,
            "price_to_nav": self.price_to_nav,
            "upside_downside_pct": self.upside_downside_pct,
        }


# =============================================================================
# BOOK VALUES
# =============================================================================

def calculate_book_value_nav(balance_sheet: BalanceSheet) -> float:
    """Total assets minus total liabilities."""
    return balance_sheet.total_assets - balance_sheet.total_liabilities


def _reported(balance_sheet: BalanceSheet, fields: tuple) -> Optional[float]:
    for name in fields:
        value = getattr(balance_sheet, name, None)
        if value is not None:
            return float(value)
    return None


def _category_book_values(total: float, shares: Dict, line_items: Dict, balance_sheet, other):
    """
    Book value per category and whether it was reported.

    With any reported line item, unreported categories are zero and the
    unexplained remainder of the total goes to the ``other`` category.
    """
    reported = {
        category: _reported(balance_sheet, fields)
        for category, fields in line_items.items()
    }
    if all(value is None for value in reported.values()):
        return {category: (total * share, False) for category, share in shares.items()}

    values = {}
    for category in shares:
        value = reported.get(category)
        values[category] = (value if value is not None else 0.0, value is not None)
    explained = sum(value for value, _ in values.values())
    values[other] = (max(0.0, total - explained), False)
    return values


# =============================================================================
# NAV CALCULATOR
# =============================================================================

class NAVCalculator:
    """
    Builds adjusted asset and liability breakdowns, the asset quality
    analysis and the liquidation scenarios.
    """

    def __init__(self):
        self.logger = LOGGER

    def calculate(self, inputs: NAVInputs, validation_warning_count: int = 0) -> NAVResult:
        balance_sheet = inputs.balance_sheet
        shares = inputs.shares_outstanding

        book_nav = calculate_book_value_nav(balance_sheet)

        self.logger.debug("  Applying asset and liability adjustments")
        assets = self.apply_asset_adjustments(inputs)
        liabilities = self.apply_liability_adjustments(inputs)

        total_assets = sum(a.adjusted_value for a in assets)
        total_liabilities = sum(l.adjusted_value for l in liabilities)
        adjusted_nav = total_assets - total_liabilities

        self.logger.debug("  Analyzing asset quality")
        quality = analyze_asset_quality(assets, balance_sheet.total_assets)

        self.logger.debug("  Calculating liquidation scenarios")
        scenarios = [
            calculate_liquidation_value(assets, scenario)
            for scenario in (
                LiquidationScenario.ORDERLY,
                LiquidationScenario.QUICK,
                LiquidationScenario.FORCED,
            )
        ]
        if inputs.custom_liquidation_discount is not None:
            scenarios.append(calculate_liquidation_value(
                assets,
                LiquidationScenario(inputs.liquidation_scenario or LiquidationScenario.ORDERLY),
                inputs.custom_liquidation_discount,
            ))
        for scenario in scenarios:
            scenario.liquidation_value_per_share = (
                scenario.total_liquidation_value - total_liabilities
            ) / shares

        result = NAVResult(
            book_value_nav=book_nav,
            adjusted_nav=adjusted_nav,
            nav_per_share=adjusted_nav / shares,
            book_value_per_share=book_nav / shares,
            total_adjusted_assets=total_assets,
            total_adjusted_liabilities=total_liabilities,
            net_adjustments=adjusted_nav - book_nav,
            shares_outstanding=shares,
            asset_breakdown=assets,
            liability_breakdown=liabilities,
            asset_quality=quality,
            liquidation_analysis=scenarios,
            confidence_level=determine_confidence_level(quality, validation_warning_count),
        )
        result.warnings = generate_nav_warnings(inputs, result)

        price = inputs.current_price
        if price is not None and math.isfinite(price) and price > 0:
            result.current_price = price
            result.upside_downside_pct = (result.nav_per_share - price) / price
            if result.nav_per_share > MIN_DENOMINATOR:
                result.price_to_nav = price / result.nav_per_share

        return result

    def apply_asset_adjustments(self, inputs: NAVInputs) -> List[AssetBreakdown]:
        balance_sheet = inputs.balance_sheet
        book_values = _category_book_values(
            balance_sheet.total_assets,
            NAVConfig.DEFAULT_ASSET_SHARES,
            NAVConfig.ASSET_LINE_ITEMS,
            balance_sheet,
            AssetCategory.OTHER_ASSETS,
        )
        discounts = NAVConfig.LIQUIDATION_DISCOUNTS[LiquidationScenario.ORDERLY]

        breakdown = []
        for category, (book_value, reported) in book_values.items():
            adjustments = [
                adj for adj in inputs.asset_adjustments
                if AssetCategory(adj.category) == category
            ]
            adjusted = book_value + sum(adj.adjusted_value - adj.book_value for adj in adjustments)

            excluded = (
                (category == AssetCategory.INTANGIBLE_ASSETS and not inputs.include_intangibles)
                or (category == AssetCategory.GOODWILL and not inputs.include_goodwill)
            )
            if excluded:
                adjusted = 0.0

            breakdown.append(AssetBreakdown(
                category=category,
                book_value=book_value,
                adjusted_value=adjusted,
                quality_score=category_quality_score(category, adjustments),
                liquidation_discount=discounts[category],
                liquidation_value=adjusted * (1 - discounts[category]),
                reported=reported,
            ))
        return breakdown

    def apply_liability_adjustments(self, inputs: NAVInputs) -> List[LiabilityBreakdown]:
        balance_sheet = inputs.balance_sheet
        book_values = _category_book_values(
            balance_sheet.total_liabilities,
            NAVConfig.DEFAULT_LIABILITY_SHARES,
            NAVConfig.LIABILITY_LINE_ITEMS,
            balance_sheet,
            LiabilityCategory.OTHER_LIABILITIES,
        )

        breakdown = []
        for category, (book_value, reported) in book_values.items():
            delta = sum(
                adj.adjusted_value - adj.book_value
                for adj in inputs.liability_adjustments
                if LiabilityCategory(adj.category) == category
            )
            breakdown.append(LiabilityBreakdown(
                category=category,
                book_value=book_value,
                adjusted_value=book_value + delta,
                reported=reported,
            ))
        return breakdown


# =============================================================================
# QUALITY, LIQUIDATION, CONFIDENCE
# =============================================================================

def category_quality_score(category: AssetCategory, adjustments: Sequence[AssetAdjustment]) -> float:
    """Category weight x 100, scaled by the average confidence of its adjustments."""
    score = NAVConfig.ASSET_QUALITY_WEIGHTS[category] * 100
    if adjustments:
        scores = NAVConfig.ADJUSTMENT_CONFIDENCE_SCORES
        average = sum(scores[ConfidenceLevel(a.confidence)] for a in adjustments) / len(adjustments)
        score *= average
    return max(0.0, min(100.0, score))


def analyze_asset_quality(assets: Sequence[AssetBreakdown], total_assets: float) -> AssetQualityAnalysis:
    """Value-weighted quality score plus liquidity and intangibles ratios."""
    analysis = AssetQualityAnalysis()
    if total_assets <= MIN_DENOMINATOR:
        return analysis

    weighted = 0.0
    total_weight = 0.0
    by_category = {a.category: a.adjusted_value for a in assets}
    for asset in assets:
        weight = NAVConfig.ASSET_QUALITY_WEIGHTS[asset.category]
        share = asset.adjusted_value / total_assets
        weighted += share * asset.quality_score * weight
        total_weight += share * weight
    if abs(total_weight) > MIN_DENOMINATOR:
        analysis.overall_score = weighted / total_weight

    intangible = by_category[AssetCategory.INTANGIBLE_ASSETS] + by_category[AssetCategory.GOODWILL]
    liquid = by_category[AssetCategory.CASH_AND_EQUIVALENTS] + by_category[AssetCategory.MARKETABLE_SECURITIES]
    tangible = sum(by_category.values()) - intangible

    analysis.score_category = score_category(analysis.overall_score)
    analysis.tangible_asset_ratio = tangible / total_assets
    analysis.liquid_asset_ratio = liquid / total_assets
    analysis.intangible_asset_ratio = intangible / total_assets
    analysis.has_excess_cash = liquid > total_assets * NAVConfig.EXCESS_CASH_RATIO
    analysis.has_marketable_securities = by_category[AssetCategory.MARKETABLE_SECURITIES] > 0
    analysis.heavy_intangibles = analysis.intangible_asset_ratio > NAVConfig.HEAVY_INTANGIBLES_RATIO
    analysis.significant_goodwill = (
        by_category[AssetCategory.GOODWILL] > total_assets * NAVConfig.SIGNIFICANT_GOODWILL_RATIO
    )
    return analysis


def score_category(score: float) -> AssetQualityCategory:
    for floor, category in NAVConfig.SCORE_BANDS:
        if score >= floor:
            return category
    return AssetQualityCategory.VERY_POOR


def calculate_liquidation_value(
    assets: Sequence[AssetBreakdown],
    scenario: LiquidationScenario = LiquidationScenario.ORDERLY,
    custom_discount: Optional[float] = None,
) -> LiquidationAnalysis:
    """Sum of adjusted asset values net of the scenario (or custom) discount."""
    scenario = LiquidationScenario(scenario)
    discounts = NAVConfig.LIQUIDATION_DISCOUNTS[scenario]

    values = {}
    total_liquidation = 0.0
    total_book = 0.0
    for asset in assets:
        discount = custom_discount if custom_discount is not None else discounts[asset.category]
        liquidation = asset.adjusted_value * (1 - discount)
        total_liquidation += liquidation
        total_book += asset.book_value
        values[asset.category] = AssetLiquidationValue(
            book_value=asset.book_value,
            liquidation_value=liquidation,
            discount=discount,
            marketability=NAVConfig.MARKETABILITY[asset.category],
        )

    return LiquidationAnalysis(
        scenario=scenario,
        total_liquidation_value=total_liquidation,
        average_discount=1 - total_liquidation / total_book if total_book > 0 else 0.0,
        time_frame=NAVConfig.LIQUIDATION_TIME_FRAMES[scenario],
        asset_values=values,
        custom_discount=custom_discount,
    )


def determine_confidence_level(quality: AssetQualityAnalysis, warning_count: int) -> ConfidenceLevel:
    high_score, high_warnings = NAVConfig.HIGH_CONFIDENCE
    medium_score, medium_warnings = NAVConfig.MEDIUM_CONFIDENCE
    if quality.overall_score >= high_score and warning_count <= high_warnings:
        return ConfidenceLevel.HIGH
    if quality.overall_score >= medium_score and warning_count <= medium_warnings:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def generate_nav_warnings(inputs: NAVInputs, result: NAVResult) -> List[DataQualityWarning]:
    """Advisories attached to a NAV result, in a fixed order."""
    warnings = []

    if result.book_value_nav < 0:
        warnings.append(DataQualityWarning(
            warning_type="error",
            category="data_quality",
            message="Company has negative book value (liabilities exceed assets)",
            severity=WarningSeverity.HIGH,
            suggestion="Verify balance sheet data accuracy and consider debt restructuring analysis",
        ))

    if result.asset_quality.intangible_asset_ratio > NAVConfig.HIGH_INTANGIBLES_WARNING:
        warnings.append(DataQualityWarning(
            warning_type="warning",
            category="calculation",
            message="Intangible assets represent >50% of total assets",
            severity=WarningSeverity.MEDIUM,
            suggestion="Consider excluding intangibles for conservative NAV estimate",
        ))

    if result.asset_quality.overall_score < NAVConfig.LOW_QUALITY_WARNING:
        warnings.append(DataQualityWarning(
            warning_type="warning",
            category="data_quality",
            message="Low asset quality score indicates potentially unreliable asset values",
            severity=WarningSeverity.MEDIUM,
            suggestion="Apply higher liquidation discounts and verify asset valuations",
        ))

    if abs(result.net_adjustments) > inputs.balance_sheet.total_assets * NAVConfig.LARGE_ADJUSTMENT_WARNING:
        warnings.append(DataQualityWarning(
            warning_type="info",
            category="calculation",
            message="Large adjustments (>25% of assets) applied to book values",
            severity=WarningSeverity.LOW,
            suggestion="Document and validate significant adjustment assumptions",
        ))

    return warnings


# =============================================================================
# INPUT TRANSFORMS
# =============================================================================

_ASSET_FIELDS = (
    "total_assets", "cash", "cash_and_equivalents", "marketable_securities",
    "accounts_receivable", "inventory", "prepaid_expenses",
    "property_plant_equipment", "intangible_assets", "goodwill", "investments",
)


def scale_asset_values(inputs: NAVInputs, factor: float) -> NAVInputs:
    """Copy of the inputs with every asset figure and asset adjustment scaled."""
    balance_sheet = inputs.balance_sheet
    scaled = {
        name: getattr(balance_sheet, name) * factor
        for name in _ASSET_FIELDS
        if getattr(balance_sheet, name) is not None
    }
    adjustments = tuple(
        dataclasses.replace(
            adj,
            book_value=adj.book_value * factor,
            adjusted_value=adj.adjusted_value * factor,
        )
        for adj in inputs.asset_adjustments
    )
    return dataclasses.replace(
        inputs,
        balance_sheet=dataclasses.replace(balance_sheet, **scaled),
        asset_adjustments=adjustments,
    )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def calculate_nav(inputs: NAVInputs) -> NAVResult:
    """
    Validate and evaluate a NAV.

    Raises:
        ValidationError: inputs fail validation; nothing is computed
    """
    validation = validate_nav_inputs(inputs)
    if not validation.is_valid:
        raise ValidationError(validation.errors, validation.warnings, model="NAV")

    result = NAVCalculator().calculate(inputs, len(validation.warnings))
    result.validation_warnings = list(validation.warnings)

    LOGGER.info(
        f"NAV: ${result.nav_per_share:.2f} per share "
        f"(book ${result.book_value_per_share:.2f}, quality {result.asset_quality.overall_score:.0f})"
    )
    return result


# =============================================================================
# MODULE EXPORTS
# =============================================================================

__all__ = [
    "__version__",
    "AssetCategory",
    "LiabilityCategory",
    "AssetQualityCategory",
    "NAVConfig",
    "AssetAdjustment",
    "LiabilityAdjustment",
    "NAVInputs",
    "AssetBreakdown",
    "LiabilityBreakdown",
    "AssetQualityAnalysis",
    "AssetLiquidationValue",
    "LiquidationAnalysis",
    "NAVResult",
    "NAVCalculator",
    "calculate_book_value_nav",
    "category_quality_score",
    "analyze_asset_quality",
    "score_category",
    "calculate_liquidation_value",
    "determine_confidence_level",
    "generate_nav_warnings",
    "scale_asset_values",
    "calculate_nav",
]
