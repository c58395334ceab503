"""
Moat Analysis Module - Economic Moat Heuristics
Valuation Calculation Engine

Infers sustainable competitive advantages from financial-ratio patterns and
combines them with the ROIC analysis into a moat classification.

Signal -> Source mapping:
    - Brand power:      gross margin level/stability + SG&A efficiency or net margin stability
    - Scale:            dominant/strong position + asset turnover or average ROIC
    - Switching costs:  revenue growth consistency or deferred revenue growth
    - Patents / IP:     R&D intensity or gross margin, with stable gross margins

The thresholds behind each gate live in config.MOAT_THRESHOLDS. They are
calibration policy and can be retuned without touching the mapping.

Network effects and location advantages cannot be read from statements
alone and are never inferred.

Version: 1.0.0
"""

from __future__ import annotations

import dataclasses
import numpy as np
import pandas as pd
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .config import (
    LOGGER,
    MIN_DENOMINATOR,
    MOAT_THRESHOLDS,
    BusinessStability,
    CompetitivePosition,
    CompetitivePressure,
    MoatSource,
    MoatStrength,
    MoatSustainability,
    TrendDirection,
)
from .exceptions import ValidationError
from .financials import CompanyFinancials, sort_by_date, statements_to_frame
from .roic_analyzer import ROICAnalysis, analyze_roic, get_default_wacc_inputs


__version__ = "1.0.0"


# =============================================================================
# DATA CONTAINERS
# =============================================================================

@dataclass(frozen=True)
class MoatAnalysisInputs:
    """Signals feeding the moat heuristics (inferred or supplied)."""

    revenue_growth_consistency: float = MOAT_THRESHOLDS.default_revenue_consistency
    profitability_trend: TrendDirection = TrendDirection.STABLE
    margin_stability: float = MOAT_THRESHOLDS.default_margin_stability
    gross_margin_level: float = 0.0
    gross_margin_stability: float = MOAT_THRESHOLDS.default_gross_margin_stability
    sga_efficiency_trend: TrendDirection = TrendDirection.STABLE
    rd_intensity: float = 0.0
    deferred_revenue_growth: float = 0.0
    asset_turnover: float = 0.0
    roic_analysis: Optional[ROICAnalysis] = None
    business_stability: BusinessStability = BusinessStability.MODERATE
    competitive_position: CompetitivePosition = CompetitivePosition.AVERAGE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "revenue_growth_consistency": self.revenue_growth_consistency,
            "profitability_trend": self.profitability_trend.value,
            "margin_stability": self.margin_stability,
            "gross_margin_level": self.gross_margin_level,
            "gross_margin_stability": self.gross_margin_stability,
            "sga_efficiency_trend": self.sga_efficiency_trend.value,
            "rd_intensity": self.rd_intensity,
            "deferred_revenue_growth": self.deferred_revenue_growth,
            "asset_turnover": self.asset_turnover,
            "roic_analysis": self.roic_analysis.to_dict() if self.roic_analysis else None,
            "business_stability": self.business_stability.value,
            "competitive_position": self.competitive_position.value,
        }


@dataclass
class MoatAnalysis:
    """Economic moat assessment."""

    has_economic_moat: bool = False
    moat_strength: MoatStrength = MoatStrength.NONE
    moat_sources: List[MoatSource] = field(default_factory=list)
    moat_sustainability: MoatSustainability = MoatSustainability.STABLE
    competitive_pressure: CompetitivePressure = CompetitivePressure.MEDIUM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_economic_moat": self.has_economic_moat,
            "moat_strength": self.moat_strength.value,
            "moat_sources": [s.value for s in self.moat_sources],
            "moat_sustainability": self.moat_sustainability.value,
            "competitive_pressure": self.competitive_pressure.value,
        }


# =============================================================================
# INPUT INFERENCE
# =============================================================================

class MoatInputInferrer:
    """
    Derives moat signals from historical statements.

    Statements are re-ordered newest first before any signal is computed.
    Signals that need a minimum history keep their neutral default when the
    history is shorter.
    """

    def infer(self, financials: CompanyFinancials) -> MoatAnalysisInputs:
        t = MOAT_THRESHOLDS
        income = statements_to_frame(financials.income_statement)
        balances = sort_by_date(financials.balance_sheet)

        revenue = self._column(income, "revenue")
        net_income = self._column(income, "net_income")
        has_history = len(income) >= t.min_statements_for_trends

        revenue_consistency = t.default_revenue_consistency
        margin_stability = t.default_margin_stability
        sga_trend = TrendDirection.STABLE
        profitability_trend = TrendDirection.STABLE

        if has_history:
            revenue_consistency = self._revenue_growth_consistency(revenue)
            margin_stability = self._net_margin_stability(revenue, net_income)
            sga_trend = self._sga_efficiency_trend(income, revenue)
            profitability_trend = self._profitability_trend(revenue, net_income)

        gross_level, gross_stability = self._gross_margin_metrics(income, revenue)

        combined = (revenue_consistency + margin_stability) / 2

        return MoatAnalysisInputs(
            revenue_growth_consistency=revenue_consistency,
            profitability_trend=profitability_trend,
            margin_stability=margin_stability,
            gross_margin_level=gross_level,
            gross_margin_stability=gross_stability,
            sga_efficiency_trend=sga_trend,
            rd_intensity=self._rd_intensity(income),
            deferred_revenue_growth=self._deferred_revenue_growth(balances),
            asset_turnover=self._asset_turnover(income, balances),
            business_stability=classify_business_stability(combined),
            competitive_position=self._competitive_position(income),
        )

    # -------------------------------------------------------------------------
    # Signal helpers
    # -------------------------------------------------------------------------

    def _column(self, frame: pd.DataFrame, name: str) -> pd.Series:
        if frame.empty or name not in frame.columns:
            return pd.Series(dtype=float)
        return pd.to_numeric(frame[name], errors="coerce").astype(float)

    def _revenue_growth_consistency(self, revenue: pd.Series) -> float:
        t = MOAT_THRESHOLDS
        previous = revenue.shift(-1)
        growth = ((revenue - previous) / previous.where(previous != 0)).dropna()
        if growth.empty:
            return t.default_revenue_consistency
        std = float(np.std(growth.to_numpy()))
        return max(0.0, 1 - std * t.revenue_consistency_multiplier)

    def _gross_margin_metrics(self, income: pd.DataFrame, revenue: pd.Series):
        t = MOAT_THRESHOLDS
        if income.empty:
            return 0.0, t.default_gross_margin_stability

        gross_profit = self._column(income, "gross_profit")
        reported_margin = self._column(income, "gross_margin")
        margins = (gross_profit / revenue.where(revenue != 0)).fillna(reported_margin).dropna()

        if margins.empty:
            return 0.0, t.default_gross_margin_stability

        values = margins.to_numpy()
        level = float(np.mean(values))
        stability = max(0.0, 1 - float(np.std(values)) * t.gross_margin_stability_multiplier)
        return level, stability

    def _sga_efficiency_trend(self, income: pd.DataFrame, revenue: pd.Series) -> TrendDirection:
        t = MOAT_THRESHOLDS
        sga = self._column(income, "selling_general_and_administrative")
        ratios = (sga / revenue.where(revenue != 0)).dropna().to_numpy()
        if len(ratios) < t.min_statements_for_trends:
            return TrendDirection.STABLE

        recent_avg = float(np.mean(ratios[:2]))
        older_avg = float(np.mean(ratios[-2:]))

        # Lower SG&A share of revenue is more efficient
        if recent_avg < older_avg * (1 - t.sga_trend_threshold):
            return TrendDirection.IMPROVING
        if recent_avg > older_avg * (1 + t.sga_trend_threshold):
            return TrendDirection.DECLINING
        return TrendDirection.STABLE

    def _net_margin_stability(self, revenue: pd.Series, net_income: pd.Series) -> float:
        t = MOAT_THRESHOLDS
        margins = (net_income / revenue.where(revenue != 0)).dropna()
        if margins.empty:
            return t.default_margin_stability
        std = float(np.std(margins.to_numpy()))
        return max(0.0, 1 - std * t.net_margin_stability_multiplier)

    def _profitability_trend(self, revenue: pd.Series, net_income: pd.Series) -> TrendDirection:
        t = MOAT_THRESHOLDS
        margins = (net_income / revenue.where(revenue != 0)).fillna(0.0).to_numpy()

        recent_avg = float(np.mean(margins[:2]))
        older_avg = float(np.mean(margins[-2:]))
        if abs(older_avg) < MIN_DENOMINATOR:
            return TrendDirection.STABLE

        improvement = (recent_avg - older_avg) / abs(older_avg)
        if improvement > t.profitability_trend_threshold:
            return TrendDirection.IMPROVING
        if improvement < -t.profitability_trend_threshold:
            return TrendDirection.DECLINING
        return TrendDirection.STABLE

    def _rd_intensity(self, income: pd.DataFrame) -> float:
        if income.empty:
            return 0.0
        latest_rd = self._column(income, "research_and_development").iloc[0]
        latest_revenue = self._column(income, "revenue").iloc[0]
        if pd.isna(latest_rd) or pd.isna(latest_revenue) or latest_revenue == 0:
            return 0.0
        return float(latest_rd / latest_revenue)

    def _deferred_revenue_growth(self, balances: List[Any]) -> float:
        if len(balances) < 2:
            return 0.0
        current = balances[0].deferred_revenue or 0
        previous = balances[1].deferred_revenue or 0
        if previous <= 0:
            return 0.0
        return (current - previous) / previous

    def _asset_turnover(self, income: pd.DataFrame, balances: List[Any]) -> float:
        if income.empty or not balances:
            return 0.0
        latest_revenue = self._column(income, "revenue").iloc[0]
        total_assets = balances[0].total_assets
        if pd.isna(latest_revenue) or not total_assets or total_assets <= 0:
            return 0.0
        return float(latest_revenue / total_assets)

    def _competitive_position(self, income: pd.DataFrame) -> CompetitivePosition:
        if income.empty:
            return CompetitivePosition.AVERAGE

        revenue = self._column(income, "revenue").iloc[0]
        net_income = self._column(income, "net_income").iloc[0]
        revenue = 0.0 if pd.isna(revenue) else float(revenue)
        net_margin = float(net_income / revenue) if revenue and not pd.isna(net_income) else 0.0
        return classify_competitive_position(net_margin, revenue)


# =============================================================================
# CLASSIFIERS
# =============================================================================

def classify_business_stability(combined_score: float) -> BusinessStability:
    """Business stability from the mean of revenue consistency and margin stability."""
    t = MOAT_THRESHOLDS
    if combined_score > t.very_stable_score:
        return BusinessStability.VERY_STABLE
    if combined_score > t.stable_score:
        return BusinessStability.STABLE
    if combined_score > t.moderate_score:
        return BusinessStability.MODERATE
    if combined_score > t.volatile_score:
        return BusinessStability.VOLATILE
    return BusinessStability.VERY_VOLATILE


def classify_competitive_position(net_margin: float, revenue: float) -> CompetitivePosition:
    """Competitive position from profitability and revenue scale."""
    t = MOAT_THRESHOLDS
    tiers = [
        (t.dominant_position, CompetitivePosition.DOMINANT),
        (t.strong_position, CompetitivePosition.STRONG),
        (t.average_position, CompetitivePosition.AVERAGE),
        (t.weak_position, CompetitivePosition.WEAK),
    ]
    for (margin_floor, revenue_floor), position in tiers:
        if net_margin > margin_floor and revenue > revenue_floor:
            return position
    return CompetitivePosition.POOR


# =============================================================================
# MOAT ANALYZER
# =============================================================================

class MoatAnalyzer:
    """
    Classifies the moat and identifies its sources.

    With an ROIC analysis the ROIC - WACC classification is primary and a
    dominant, very stable business is upgraded from no moat to narrow.
    Without one, the competitive position / business stability table is used.
    """

    def analyze(self, inputs: MoatAnalysisInputs) -> MoatAnalysis:
        strength = self._classify_strength(inputs)

        return MoatAnalysis(
            has_economic_moat=strength != MoatStrength.NONE,
            moat_strength=strength,
            moat_sources=self._identify_sources(inputs),
            moat_sustainability=self._assess_sustainability(inputs),
            competitive_pressure=self._assess_pressure(inputs.business_stability),
        )

    def _classify_strength(self, inputs: MoatAnalysisInputs) -> MoatStrength:
        position = inputs.competitive_position
        stability = inputs.business_stability

        if inputs.roic_analysis is not None:
            strength = inputs.roic_analysis.moat_classification
            if (
                strength == MoatStrength.NONE
                and position == CompetitivePosition.DOMINANT
                and stability == BusinessStability.VERY_STABLE
            ):
                return MoatStrength.NARROW
            return strength

        if position == CompetitivePosition.DOMINANT and stability == BusinessStability.VERY_STABLE:
            return MoatStrength.WIDE
        if position == CompetitivePosition.STRONG and stability in (
            BusinessStability.VERY_STABLE,
            BusinessStability.STABLE,
        ):
            return MoatStrength.NARROW
        if position == CompetitivePosition.AVERAGE and stability == BusinessStability.VERY_STABLE:
            return MoatStrength.NARROW
        return MoatStrength.NONE

    def _identify_sources(self, inputs: MoatAnalysisInputs) -> List[MoatSource]:
        t = MOAT_THRESHOLDS
        sources = []

        has_brand = (
            inputs.gross_margin_level > t.brand_gross_margin
            or inputs.gross_margin_stability > t.brand_gross_margin_stability
        ) and (
            inputs.sga_efficiency_trend == TrendDirection.IMPROVING
            or inputs.margin_stability > t.brand_margin_stability
        )
        if has_brand:
            sources.append(MoatSource.BRAND)

        roic = inputs.roic_analysis
        has_scale = inputs.competitive_position in (
            CompetitivePosition.DOMINANT,
            CompetitivePosition.STRONG,
        ) and (
            inputs.asset_turnover > t.scale_asset_turnover
            or (roic is not None and roic.average_roic > t.scale_average_roic)
        )
        if has_scale:
            sources.append(MoatSource.SCALE)

        has_switching_costs = (
            inputs.revenue_growth_consistency > t.switching_revenue_consistency
            or inputs.deferred_revenue_growth > t.switching_deferred_revenue_growth
        )
        if has_switching_costs:
            sources.append(MoatSource.SWITCHING_COSTS)

        has_patents = (
            inputs.rd_intensity > t.patents_rd_intensity
            or inputs.gross_margin_level > t.patents_gross_margin
        ) and inputs.gross_margin_stability > t.patents_gross_margin_stability
        if has_patents:
            sources.append(MoatSource.PATENTS)

        return sources

    def _assess_sustainability(self, inputs: MoatAnalysisInputs) -> MoatSustainability:
        position = inputs.competitive_position
        if inputs.profitability_trend == TrendDirection.IMPROVING and position in (
            CompetitivePosition.DOMINANT,
            CompetitivePosition.STRONG,
        ):
            return MoatSustainability.STRENGTHENING
        if inputs.profitability_trend == TrendDirection.DECLINING or position in (
            CompetitivePosition.WEAK,
            CompetitivePosition.POOR,
        ):
            return MoatSustainability.DECLINING
        return MoatSustainability.STABLE

    def _assess_pressure(self, stability: BusinessStability) -> CompetitivePressure:
        if stability in (BusinessStability.VERY_VOLATILE, BusinessStability.VOLATILE):
            return CompetitivePressure.HIGH
        if stability == BusinessStability.MODERATE:
            return CompetitivePressure.MEDIUM
        return CompetitivePressure.LOW


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def infer_moat_inputs_from_financials(
    financials: CompanyFinancials,
    overrides: Optional[Mapping[str, Any]] = None,
) -> MoatAnalysisInputs:
    """Moat signals inferred from statements, with caller overrides applied last."""
    inferred = MoatInputInferrer().infer(financials)
    if not overrides:
        return inferred

    known = {f.name for f in dataclasses.fields(MoatAnalysisInputs)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValidationError([f"Unknown moat input: {name}" for name in unknown], model="moat")

    return dataclasses.replace(inferred, **dict(overrides))


def analyze_moat(inputs: MoatAnalysisInputs) -> MoatAnalysis:
    """Classify the moat from prepared signals."""
    return MoatAnalyzer().analyze(inputs)


def calculate_moat_from_financials(
    financials: CompanyFinancials,
    overrides: Optional[Mapping[str, Any]] = None,
) -> MoatAnalysis:
    """
    Full moat assessment from historical statements.

    Runs the ROIC analysis against default market WACC assumptions unless an
    ``roic_analysis`` override is supplied.
    """
    overrides = dict(overrides or {})
    if overrides.get("roic_analysis") is None:
        overrides["roic_analysis"] = analyze_roic(financials, get_default_wacc_inputs())

    inputs = infer_moat_inputs_from_financials(financials, overrides)
    analysis = analyze_moat(inputs)

    LOGGER.debug(
        f"Moat for {financials.symbol or 'company'}: {analysis.moat_strength.value} "
        f"({', '.join(s.value for s in analysis.moat_sources) or 'no sources'})"
    )
    return analysis


def get_default_moat_analysis() -> MoatAnalysis:
    """Neutral assessment used when financial data is insufficient."""
    return MoatAnalysis()


__all__ = [
    "MoatAnalysisInputs",
    "MoatAnalysis",
    "MoatInputInferrer",
    "MoatAnalyzer",
    "classify_business_stability",
    "classify_competitive_position",
    "infer_moat_inputs_from_financials",
    "analyze_moat",
    "calculate_moat_from_financials",
    "get_default_moat_analysis",
]
