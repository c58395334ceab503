"""
EPV Valuation Module - Earnings Power Value
Valuation Calculation Engine

Values a business on its current, sustainable earnings assuming no growth.

Methodology:
    Normalized Earnings = method(newest N years of net income) + adjustments
    Adjusted Earnings   = Normalized Earnings - Maintenance Capex
    EPV                 = Adjusted Earnings / Cost of Capital
    EPV per Share       = EPV / Shares Outstanding

Pipeline:
    1. Earnings normalization (average, median, latest or manual)
    2. Maintenance capex estimation
    3. Cost of capital (WACC, CAPM or manual)
    4. Valuation
    5. Moat integration and confidence level
    6. Data-quality warnings

Each stage is a separate class and can be exercised on its own.

Inputs: EPVInputs
Outputs: EPVResult

Version: 1.0.0
"""

from __future__ import annotations

import math
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Sequence

from .config import (
    EPV_CONFIG,
    LOGGER,
    MIN_DENOMINATOR,
    AdjustmentCategory,
    BusinessStability,
    CompetitivePosition,
    ConfidenceLevel,
    CostOfCapitalMethod,
    EarningsQuality,
    MaintenanceCapexMethod,
    NormalizationMethod,
    TrendDirection,
    WarningSeverity,
)
from .exceptions import DataQualityWarning, DomainError, ValidationError
from .financials import CompanyFinancials, sort_by_date
from .input_validator import clamp_normalization_period, validate_epv_inputs
from .moat_analyzer import (
    MoatAnalysis,
    MoatAnalysisInputs,
    analyze_moat,
    calculate_moat_from_financials,
)
from .roic_analyzer import ROICAnalysis, analyze_roic, get_default_wacc_inputs


__version__ = "1.0.0"


# =============================================================================
# DATA CONTAINERS - INPUTS
# =============================================================================

@dataclass(frozen=True)
class HistoricalEarnings:
    """One year of reported earnings."""

    year: int
    net_income: float
    operating_income: Optional[float] = None
    revenue: Optional[float] = None
    date: str = ""


@dataclass(frozen=True)
class EarningsAdjustment:
    """Signed adjustment applied to normalized earnings."""

    description: str
    amount: float
    reason: str = ""
    category: AdjustmentCategory = AdjustmentCategory.OTHER
    confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "amount": self.amount,
            "reason": self.reason,
            "category": self.category.value,
            "confidence": self.confidence.value,
        }


@dataclass(frozen=True)
class MaintenanceCapexInputs:
    """
    Maintenance capex assumptions.

    Capex amounts are read as magnitudes; cash-flow statements that report
    capex as a negative outflow can be passed through unchanged.
    """

    method: MaintenanceCapexMethod = MaintenanceCapexMethod.MANUAL
    manual_amount: float = 0.0
    historical_capex: Sequence[float] = field(default_factory=tuple)
    historical_depreciation: Sequence[float] = field(default_factory=tuple)
    capex_profile: str = "mature_stable"
    industry: str = "default"

    @classmethod
    def from_financials(
        cls,
        financials: CompanyFinancials,
        method: MaintenanceCapexMethod = MaintenanceCapexMethod.DEPRECIATION_PROXY,
        **kwargs: Any,
    ) -> "MaintenanceCapexInputs":
        """Capex and depreciation history taken from the cash-flow statements."""
        cash_flows = sort_by_date(financials.cash_flow_statement)
        return cls(
            method=method,
            historical_capex=tuple(cf.capital_expenditure for cf in cash_flows),
            historical_depreciation=tuple(
                cf.depreciation for cf in cash_flows if cf.depreciation is not None
            ),
            **kwargs,
        )


@dataclass(frozen=True)
class CostOfCapitalComponents:
    """Market and capital-structure inputs for WACC / CAPM."""

    risk_free_rate: float = EPV_CONFIG.default_risk_free_rate
    market_risk_premium: float = EPV_CONFIG.default_market_risk_premium
    beta: float = 1.0
    cost_of_debt: float = 0.05
    weight_of_equity: float = 0.7
    weight_of_debt: float = 0.3
    tax_rate: float = 0.21


@dataclass(frozen=True)
class EPVInputs:
    """
    Earnings power value inputs.

    ``historical_earnings`` may arrive in any order; the engine re-sorts it
    by date, newest first. Supplying ``financials`` switches moat analysis
    from the position / stability table to the ROIC-based assessment.
    """

    historical_earnings: Sequence[HistoricalEarnings]
    shares_outstanding: float
    symbol: str = ""
    normalization_method: NormalizationMethod = NormalizationMethod.AVERAGE
    normalization_period: int = 5
    manual_normalized_earnings: Optional[float] = None
    earnings_adjustments: Sequence[EarningsAdjustment] = field(default_factory=tuple)
    maintenance_capex: MaintenanceCapexInputs = field(default_factory=MaintenanceCapexInputs)
    include_maintenance_capex: bool = True
    cost_of_capital_method: CostOfCapitalMethod = CostOfCapitalMethod.WACC
    manual_cost_of_capital: Optional[float] = None
    cost_of_capital_components: CostOfCapitalComponents = field(
        default_factory=CostOfCapitalComponents
    )
    earnings_quality: EarningsQuality = EarningsQuality.GOOD
    business_stability: BusinessStability = BusinessStability.MODERATE
    competitive_position: CompetitivePosition = CompetitivePosition.AVERAGE
    financials: Optional[CompanyFinancials] = None
    current_price: Optional[float] = None


# =============================================================================
# DATA CONTAINERS - STAGE RESULTS
# =============================================================================

@dataclass
class EarningsNormalization:
    """Normalized earnings with quality diagnostics."""

    raw_earnings: List[float] = field(default_factory=list)
    adjusted_earnings: List[float] = field(default_factory=list)
    normalized_earnings: float = 0.0
    period_used: int = 0

    total_adjustments: float = 0.0
    adjustments_by_category: Dict[str, float] = field(default_factory=dict)
    net_impact: Optional[float] = None

    quality_score: float = 0.0
    volatility: float = 0.0
    trend: TrendDirection = TrendDirection.STABLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raw_earnings": self.raw_earnings,
            "adjusted_earnings": self.adjusted_earnings,
            "normalized_earnings": self.normalized_earnings,
            "period_used": self.period_used,
            "adjustments_summary": {
                "total_adjustments": self.total_adjustments,
                "adjustments_by_category": self.adjustments_by_category,
                "net_impact": self.net_impact,
            },
            "quality_score": self.quality_score,
            "volatility": self.volatility,
            "trend": self.trend.value,
        }


@dataclass
class MaintenanceCapexAnalysis:
    """Estimated sustaining capex and its split from growth capex."""

    method: MaintenanceCapexMethod
    historical_capex: List[float] = field(default_factory=list)
    historical_depreciation: List[float] = field(default_factory=list)
    average_capex: float = 0.0
    average_depreciation: float = 0.0
    maintenance_capex: float = 0.0
    growth_capex: float = 0.0
    capex_as_percent_of_sales: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method.value,
            "historical_capex": self.historical_capex,
            "historical_depreciation": self.historical_depreciation,
            "average_capex": self.average_capex,
            "average_depreciation": self.average_depreciation,
            "maintenance_capex": self.maintenance_capex,
            "growth_capex": self.growth_capex,
            "capex_as_percent_of_sales": self.capex_as_percent_of_sales,
        }


@dataclass
class CostOfCapitalBreakdown:
    """Discount rate actually used, with its building blocks."""

    method: CostOfCapitalMethod
    components: CostOfCapitalComponents
    cost_of_equity: float = 0.0
    after_tax_cost_of_debt: float = 0.0
    cost_of_capital: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        c = self.components
        return {
            "method": self.method.value,
            "risk_free_rate": c.risk_free_rate,
            "market_risk_premium": c.market_risk_premium,
            "beta": c.beta,
            "cost_of_debt": c.cost_of_debt,
            "weight_of_equity": c.weight_of_equity,
            "weight_of_debt": c.weight_of_debt,
            "tax_rate": c.tax_rate,
            "cost_of_equity": self.cost_of_equity,
            "after_tax_cost_of_debt": self.after_tax_cost_of_debt,
            "cost_of_capital": self.cost_of_capital,
        }


# =============================================================================
# DATA CONTAINERS - FINAL RESULT
# =============================================================================

@dataclass
class EPVResult:
    """Complete EPV valuation output."""

    symbol: str
    normalized_earnings: float
    maintenance_capex: float
    adjusted_earnings: float
    cost_of_capital: float
    epv_total_value: float
    epv_per_share: float
    shares_outstanding: float

    earnings_normalization: EarningsNormalization
    maintenance_capex_analysis: MaintenanceCapexAnalysis
    cost_of_capital_breakdown: CostOfCapitalBreakdown

    moat_analysis: MoatAnalysis
    roic_analysis: Optional[ROICAnalysis] = None
    confidence_level: ConfidenceLevel = ConfidenceLevel.LOW
    warnings: List[DataQualityWarning] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)

    earnings_yield: Optional[float] = None
    current_price: Optional[float] = None
    upside: Optional[float] = None
    price_to_epv: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "normalized_earnings": self.normalized_earnings,
            "maintenance_capex": self.maintenance_capex,
            "adjusted_earnings": self.adjusted_earnings,
            "cost_of_capital": self.cost_of_capital,
            "epv_total_value": self.epv_total_value,
            "epv_per_share": self.epv_per_share,
            "shares_outstanding": self.shares_outstanding,
            "earnings_normalization": self.earnings_normalization.to_dict(),
            "maintenance_capex_analysis": self.maintenance_capex_analysis.to_dict(),
            "cost_of_capital_breakdown": self.cost_of_capital_breakdown.to_dict(),
            "moat_analysis": self.moat_analysis.to_dict(),
            "roic_analysis": self.roic_analysis.to_dict() if self.roic_analysis else None,
            "confidence_level": self.confidence_level.value,
            "warnings": [w.to_dict() for w in self.warnings],
            "validation_warnings": self.validation_warnings,
            "earnings_yield": self.earnings_yield,
            "current_price": self.current_price,
            "upside": self.upside,
            "price_to_epv": self.price_to_epv,
        }


# =============================================================================
# STAGE 1: EARNINGS NORMALIZATION
# =============================================================================

class EarningsNormalizer:
    """
    Condenses the newest ``normalization_period`` years into one figure.

    Adjustments are added in full to the normalized figure and spread
    evenly across the window for the volatility and trend diagnostics.
    """

    def normalize(self, inputs: EPVInputs) -> EarningsNormalization:
        ordered = sort_by_date(inputs.historical_earnings)
        period = clamp_normalization_period(inputs.normalization_period, len(ordered))
        if period != inputs.normalization_period:
            LOGGER.warning(
                f"Normalization period {inputs.normalization_period} clamped to {period}"
            )

        window = [float(e.net_income) for e in ordered[:period]]
        base = self._base_earnings(window, inputs)

        by_category: Dict[str, float] = {}
        total_adjustments = 0.0
        for adjustment in inputs.earnings_adjustments:
            key = AdjustmentCategory(adjustment.category).value
            by_category[key] = by_category.get(key, 0.0) + adjustment.amount
            total_adjustments += adjustment.amount

        per_year = total_adjustments / period if period else 0.0
        adjusted = [value + per_year for value in window]
        normalized = base + total_adjustments

        volatility = self._volatility(adjusted)
        trend = self._trend(adjusted)

        return EarningsNormalization(
            raw_earnings=window,
            adjusted_earnings=adjusted,
            normalized_earnings=normalized,
            period_used=period,
            total_adjustments=total_adjustments,
            adjustments_by_category=by_category,
            net_impact=(
                total_adjustments / normalized if abs(normalized) > MIN_DENOMINATOR else None
            ),
            quality_score=self._quality_score(volatility, trend, len(window)),
            volatility=volatility,
            trend=trend,
        )

    def _base_earnings(self, window: List[float], inputs: EPVInputs) -> float:
        method = NormalizationMethod(inputs.normalization_method)
        if method == NormalizationMethod.MANUAL:
            return float(inputs.manual_normalized_earnings)
        if not window:
            return 0.0
        if method == NormalizationMethod.MEDIAN:
            return float(np.median(window))
        if method == NormalizationMethod.LATEST:
            return window[0]
        return float(np.mean(window))

    def _volatility(self, values: List[float]) -> float:
        """Coefficient of variation (population standard deviation / |mean|)."""
        if not values:
            return 0.0
        mean = float(np.mean(values))
        std = float(np.std(values))
        if abs(mean) < MIN_DENOMINATOR:
            return 0.0 if std == 0 else 1.0
        return std / abs(mean)

    def _trend(self, values: List[float]) -> TrendDirection:
        """Newest half average vs older half average, values newest first."""
        if len(values) < 2:
            return TrendDirection.STABLE

        split = math.ceil(len(values) / 2)
        recent_avg = float(np.mean(values[:split]))
        older_avg = float(np.mean(values[split:]))
        threshold = EPV_CONFIG.trend_threshold

        if abs(older_avg) > MIN_DENOMINATOR and (recent_avg - older_avg) / abs(older_avg) > threshold:
            return TrendDirection.IMPROVING
        if abs(recent_avg) > MIN_DENOMINATOR and (older_avg - recent_avg) / abs(recent_avg) > threshold:
            return TrendDirection.DECLINING
        return TrendDirection.STABLE

    def _quality_score(self, volatility: float, trend: TrendDirection, points: int) -> float:
        config = EPV_CONFIG
        score = config.base_quality_score

        if volatility > config.high_volatility:
            score -= config.high_volatility_penalty
        elif volatility > config.moderate_volatility:
            score -= config.moderate_volatility_penalty

        if trend == TrendDirection.DECLINING:
            score -= config.declining_trend_penalty
        elif trend == TrendDirection.IMPROVING:
            score += config.improving_trend_bonus

        missing = config.min_points_without_penalty - points
        if missing > 0:
            score -= missing * config.missing_point_penalty

        return max(0.0, min(100.0, score))


# =============================================================================
# STAGE 2: MAINTENANCE CAPEX
# =============================================================================

class MaintenanceCapexEstimator:
    """Estimates the capex needed to sustain current earnings power."""

    def estimate(
        self,
        capex_inputs: MaintenanceCapexInputs,
        latest_revenue: Optional[float],
    ) -> MaintenanceCapexAnalysis:
        config = EPV_CONFIG
        method = MaintenanceCapexMethod(capex_inputs.method)

        capex = [abs(float(c)) for c in capex_inputs.historical_capex]
        depreciation = [abs(float(d)) for d in capex_inputs.historical_depreciation]
        average_capex = float(np.mean(capex)) if capex else 0.0
        average_depreciation = float(np.mean(depreciation)) if depreciation else 0.0

        if method == MaintenanceCapexMethod.DEPRECIATION_PROXY:
            ratio = config.capex_to_depreciation_ratios.get(
                capex_inputs.capex_profile,
                config.capex_to_depreciation_ratios["mature_stable"],
            )
            maintenance = average_depreciation * ratio
        elif method == MaintenanceCapexMethod.HISTORICAL_AVERAGE:
            maintenance = average_capex
        elif method == MaintenanceCapexMethod.REVENUE_PERCENTAGE:
            benchmark = config.industry_capex_benchmarks.get(
                capex_inputs.industry,
                config.industry_capex_benchmarks["default"],
            )
            maintenance = (latest_revenue or 0.0) * benchmark
        else:
            maintenance = float(capex_inputs.manual_amount or 0.0)

        has_revenue = latest_revenue is not None and latest_revenue > MIN_DENOMINATOR

        return MaintenanceCapexAnalysis(
            method=method,
            historical_capex=capex,
            historical_depreciation=depreciation,
            average_capex=average_capex,
            average_depreciation=average_depreciation,
            maintenance_capex=maintenance,
            growth_capex=max(0.0, average_capex - maintenance),
            capex_as_percent_of_sales=maintenance / latest_revenue if has_revenue else None,
        )


# =============================================================================
# STAGE 3: COST OF CAPITAL
# =============================================================================

class CostOfCapitalCalculator:
    """WACC, CAPM cost of equity, or a manual rate."""

    def calculate(self, inputs: EPVInputs) -> CostOfCapitalBreakdown:
        method = CostOfCapitalMethod(inputs.cost_of_capital_method)
        c = inputs.cost_of_capital_components

        cost_of_equity = c.risk_free_rate + c.beta * c.market_risk_premium
        after_tax_cost_of_debt = c.cost_of_debt * (1 - c.tax_rate)

        if method == CostOfCapitalMethod.MANUAL:
            rate = float(inputs.manual_cost_of_capital)
        elif method == CostOfCapitalMethod.CAPM:
            rate = cost_of_equity
        else:
            rate = c.weight_of_equity * cost_of_equity + c.weight_of_debt * after_tax_cost_of_debt

        return CostOfCapitalBreakdown(
            method=method,
            components=c,
            cost_of_equity=cost_of_equity,
            after_tax_cost_of_debt=after_tax_cost_of_debt,
            cost_of_capital=rate,
        )


# =============================================================================
# STAGE 5-6: CONFIDENCE AND WARNINGS
# =============================================================================

def assess_confidence(
    quality_score: float,
    moat: MoatAnalysis,
    years_of_data: int,
    roic_analysis: Optional[ROICAnalysis] = None,
) -> ConfidenceLevel:
    """
    High: quality >= 80, an economic moat, 7+ years and, when an ROIC
    history exists, ROIC consistency >= 0.5. Medium: quality >= 60 and 5+
    years. Low otherwise.
    """
    config = EPV_CONFIG

    roic_consistent = True
    if roic_analysis is not None and roic_analysis.historical_roic:
        roic_consistent = roic_analysis.consistency >= config.high_confidence_roic_consistency

    if (
        quality_score >= config.high_confidence_quality
        and moat.has_economic_moat
        and years_of_data >= config.high_confidence_years
        and roic_consistent
    ):
        return ConfidenceLevel.HIGH
    if quality_score >= config.medium_confidence_quality and years_of_data >= config.medium_confidence_years:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def generate_epv_warnings(
    inputs: EPVInputs,
    normalization: EarningsNormalization,
    cost_of_capital: float,
) -> List[DataQualityWarning]:
    """Advisories attached to an EPV result, in a fixed order."""
    config = EPV_CONFIG
    warnings = []
    years = len(inputs.historical_earnings)

    if years < config.min_points_without_penalty:
        warnings.append(DataQualityWarning(
            warning_type="warning",
            category="data_quality",
            message=(
                f"Only {years} years of earnings data available. "
                "EPV is more reliable with 5+ years of data."
            ),
            severity=WarningSeverity.MEDIUM,
            suggestion="Consider using additional data sources or extending the historical period.",
        ))

    if normalization.volatility > config.high_volatility:
        warnings.append(DataQualityWarning(
            warning_type="warning",
            category="earnings_quality",
            message="High earnings volatility detected. EPV may not be appropriate for highly cyclical businesses.",
            severity=WarningSeverity.HIGH,
            suggestion="Consider using a longer normalization period or cyclical adjustments.",
        ))

    if normalization.trend == TrendDirection.DECLINING:
        warnings.append(DataQualityWarning(
            warning_type="warning",
            category="earnings_quality",
            message="Declining earnings trend detected. Current earnings may not be sustainable.",
            severity=WarningSeverity.HIGH,
            suggestion="Investigate causes of decline and consider if normalization is appropriate.",
        ))

    if EarningsQuality(inputs.earnings_quality) in (EarningsQuality.POOR, EarningsQuality.VERY_POOR):
        warnings.append(DataQualityWarning(
            warning_type="warning",
            category="earnings_quality",
            message="Poor earnings quality assessment. EPV results should be interpreted with caution.",
            severity=WarningSeverity.HIGH,
            suggestion="Review earnings adjustments and consider alternative valuation methods.",
        ))

    if BusinessStability(inputs.business_stability) in (
        BusinessStability.VOLATILE,
        BusinessStability.VERY_VOLATILE,
    ):
        warnings.append(DataQualityWarning(
            warning_type="info",
            category="business_model",
            message=(
                "EPV assumes no growth. This may be overly conservative for "
                "businesses with significant growth potential."
            ),
            severity=WarningSeverity.MEDIUM,
            suggestion="Consider using EPV as a floor value alongside growth-based valuation methods.",
        ))

    if cost_of_capital > config.high_cost_of_capital:
        warnings.append(DataQualityWarning(
            warning_type="warning",
            category="business_model",
            message="Very high cost of capital (>20%) may indicate excessive business risk.",
            severity=WarningSeverity.MEDIUM,
            suggestion="Review cost of capital assumptions and business risk assessment.",
        ))

    return warnings


# =============================================================================
# MAIN ORCHESTRATOR
# =============================================================================

class EPVValuator:
    """
    Runs the EPV pipeline on validated inputs.

    Usage:
        valuator = EPVValuator()
        result = valuator.value(inputs)
    """

    def __init__(self):
        self.normalizer = EarningsNormalizer()
        self.capex_estimator = MaintenanceCapexEstimator()
        self.coc_calculator = CostOfCapitalCalculator()
        self.logger = LOGGER

    def value(self, inputs: EPVInputs) -> EPVResult:
        symbol = inputs.symbol or (inputs.financials.symbol if inputs.financials else "")

        # Step 1: Normalize earnings
        self.logger.debug("  Normalizing earnings")
        normalization = self.normalizer.normalize(inputs)

        # Step 2: Maintenance capex
        self.logger.debug("  Estimating maintenance capex")
        capex = self.capex_estimator.estimate(inputs.maintenance_capex, self._latest_revenue(inputs))

        adjusted_earnings = normalization.normalized_earnings
        if inputs.include_maintenance_capex:
            adjusted_earnings -= capex.maintenance_capex

        # Step 3: Cost of capital
        self.logger.debug("  Calculating cost of capital")
        breakdown = self.coc_calculator.calculate(inputs)
        cost_of_capital = breakdown.cost_of_capital

        # Step 4: Valuation
        if not math.isfinite(cost_of_capital) or cost_of_capital <= MIN_DENOMINATOR:
            raise DomainError(
                "Cost of capital must be positive",
                {"cost_of_capital": cost_of_capital, "method": breakdown.method.value},
            )
        epv_total = adjusted_earnings / cost_of_capital
        epv_per_share = epv_total / inputs.shares_outstanding

        # Step 5: Moat and confidence
        self.logger.debug("  Assessing economic moat")
        moat, roic_analysis = self._analyze_moat(inputs)
        confidence = assess_confidence(
            normalization.quality_score,
            moat,
            len(inputs.historical_earnings),
            roic_analysis,
        )

        result = EPVResult(
            symbol=symbol,
            normalized_earnings=normalization.normalized_earnings,
            maintenance_capex=capex.maintenance_capex,
            adjusted_earnings=adjusted_earnings,
            cost_of_capital=cost_of_capital,
            epv_total_value=epv_total,
            epv_per_share=epv_per_share,
            shares_outstanding=inputs.shares_outstanding,
            earnings_normalization=normalization,
            maintenance_capex_analysis=capex,
            cost_of_capital_breakdown=breakdown,
            moat_analysis=moat,
            roic_analysis=roic_analysis,
            confidence_level=confidence,
        )

        # Step 6: Warnings
        result.warnings = generate_epv_warnings(inputs, normalization, cost_of_capital)

        self._market_comparison(result, inputs.current_price)
        return result

    def _latest_revenue(self, inputs: EPVInputs) -> Optional[float]:
        for record in sort_by_date(inputs.historical_earnings):
            if record.revenue is not None:
                return float(record.revenue)
        return None

    def _analyze_moat(self, inputs: EPVInputs):
        financials = inputs.financials
        if financials is not None and financials.income_statement and financials.balance_sheet:
            roic_analysis = analyze_roic(financials, get_default_wacc_inputs())
            moat = calculate_moat_from_financials(financials, {
                "business_stability": BusinessStability(inputs.business_stability),
                "competitive_position": CompetitivePosition(inputs.competitive_position),
                "roic_analysis": roic_analysis,
            })
            return moat, roic_analysis

        moat = analyze_moat(MoatAnalysisInputs(
            business_stability=BusinessStability(inputs.business_stability),
            competitive_position=CompetitivePosition(inputs.competitive_position),
        ))
        return moat, None

    def _market_comparison(self, result: EPVResult, price: Optional[float]) -> None:
        if price is not None and math.isfinite(price) and price > 0:
            result.current_price = price
            result.upside = (result.epv_per_share - price) / price
            if result.epv_per_share > MIN_DENOMINATOR:
                result.price_to_epv = price / result.epv_per_share
            market_cap = price * result.shares_outstanding
            result.earnings_yield = result.adjusted_earnings / market_cap
        elif abs(result.epv_total_value) > MIN_DENOMINATOR:
            result.earnings_yield = result.adjusted_earnings / result.epv_total_value


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def calculate_epv_intrinsic_value(inputs: EPVInputs) -> EPVResult:
    """
    Validate and evaluate an EPV.

    Raises:
        ValidationError: inputs fail validation; nothing is computed
        DomainError: the cost of capital is not positive
    """
    validation = validate_epv_inputs(inputs)
    if not validation.is_valid:
        raise ValidationError(validation.errors, validation.warnings, model="EPV")

    result = EPVValuator().value(inputs)
    result.validation_warnings = list(validation.warnings)

    LOGGER.info(
        f"EPV {result.symbol or ''}: ${result.epv_per_share:.2f} per share "
        f"(cost of capital {result.cost_of_capital:.2%}, confidence {result.confidence_level.value})"
    )
    return result


def normalize_earnings(inputs: EPVInputs) -> EarningsNormalization:
    return EarningsNormalizer().normalize(inputs)


def calculate_cost_of_capital(inputs: EPVInputs) -> CostOfCapitalBreakdown:
    return CostOfCapitalCalculator().calculate(inputs)


def estimate_maintenance_capex(
    capex_inputs: MaintenanceCapexInputs,
    latest_revenue: Optional[float] = None,
) -> MaintenanceCapexAnalysis:
    return MaintenanceCapexEstimator().estimate(capex_inputs, latest_revenue)


# =============================================================================
# MODULE EXPORTS
# =============================================================================

__all__ = [
    "__version__",
    "AdjustmentCategory",
    "MaintenanceCapexMethod",
    "HistoricalEarnings",
    "EarningsAdjustment",
    "MaintenanceCapexInputs",
    "CostOfCapitalComponents",
    "EPVInputs",
    "EarningsNormalization",
    "MaintenanceCapexAnalysis",
    "CostOfCapitalBreakdown",
    "EPVResult",
    "EarningsNormalizer",
    "MaintenanceCapexEstimator",
    "CostOfCapitalCalculator",
    "EPVValuator",
    "assess_confidence",
    "generate_epv_warnings",
    "calculate_epv_intrinsic_value",
    "normalize_earnings",
    "calculate_cost_of_capital",
    "estimate_maintenance_capex",
]
