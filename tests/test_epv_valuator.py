"""
Unit tests for epv_valuator module.

Tests earnings normalization, maintenance capex, cost of capital,
confidence and the full EPV pipeline.
"""

import dataclasses

import pytest

from valuation_engine.config import (
    BusinessStability,
    CompetitivePosition,
    ConfidenceLevel,
    CostOfCapitalMethod,
    EarningsQuality,
    MoatStrength,
    NormalizationMethod,
    TrendDirection,
)
from valuation_engine.epv_valuator import (
    AdjustmentCategory,
    CostOfCapitalComponents,
    EarningsAdjustment,
    MaintenanceCapexInputs,
    MaintenanceCapexMethod,
    calculate_cost_of_capital,
    calculate_epv_intrinsic_value,
    estimate_maintenance_capex,
    normalize_earnings,
)
from valuation_engine.exceptions import DomainError, ValidationError


class TestEarningsNormalization:
    """Tests for EarningsNormalizer."""

    @pytest.mark.parametrize("method,expected", [
        (NormalizationMethod.AVERAGE, 110.0),
        (NormalizationMethod.MEDIAN, 110.0),
        (NormalizationMethod.LATEST, 120.0),
    ])
    def test_methods(self, epv_inputs, method, expected):
        normalization = normalize_earnings(dataclasses.replace(epv_inputs, normalization_method=method))

        assert normalization.normalized_earnings == pytest.approx(expected)

    def test_manual_method(self, epv_inputs):
        inputs = dataclasses.replace(
            epv_inputs,
            normalization_method=NormalizationMethod.MANUAL,
            manual_normalized_earnings=200.0,
        )

        assert normalize_earnings(inputs).normalized_earnings == 200.0

    def test_input_order_is_irrelevant(self, epv_inputs):
        """Earnings are re-sorted by date before the window is taken."""
        shuffled = dataclasses.replace(
            epv_inputs,
            historical_earnings=list(reversed(epv_inputs.historical_earnings)),
            normalization_method=NormalizationMethod.LATEST,
        )

        normalization = normalize_earnings(shuffled)

        assert normalization.normalized_earnings == 120.0
        assert normalization.raw_earnings == [120.0, 115.0, 110.0, 105.0, 100.0]

    def test_window_uses_newest_years(self, epv_inputs):
        normalization = normalize_earnings(dataclasses.replace(epv_inputs, normalization_period=3))

        assert normalization.period_used == 3
        assert normalization.normalized_earnings == pytest.approx(115.0)

    def test_period_is_clamped(self, epv_inputs):
        normalization = normalize_earnings(dataclasses.replace(epv_inputs, normalization_period=10))

        assert normalization.period_used == 5

    def test_improving_trend_and_quality(self, epv_inputs):
        """Rising, low-volatility earnings score the maximum quality."""
        normalization = normalize_earnings(epv_inputs)

        assert normalization.trend == TrendDirection.IMPROVING
        assert normalization.volatility == pytest.approx(50 ** 0.5 / 110)
        assert normalization.quality_score == 100.0

    def test_declining_trend_penalized(self, epv_inputs, make_earnings):
        inputs = dataclasses.replace(epv_inputs, historical_earnings=make_earnings([140, 130, 120, 110, 100]))

        normalization = normalize_earnings(inputs)

        assert normalization.trend == TrendDirection.DECLINING
        assert normalization.quality_score == pytest.approx(80.0)

    def test_high_volatility_penalized(self, epv_inputs, make_earnings):
        inputs = dataclasses.replace(epv_inputs, historical_earnings=make_earnings([100, 200, 50, 150, 60]))

        normalization = normalize_earnings(inputs)

        assert normalization.volatility > 0.30
        assert normalization.quality_score <= 70.0

    def test_short_history_penalized(self, epv_inputs, make_earnings):
        """Each missing point below five costs five points."""
        inputs = dataclasses.replace(epv_inputs, historical_earnings=make_earnings([100, 100, 100]))

        normalization = normalize_earnings(inputs)

        assert normalization.trend == TrendDirection.STABLE
        assert normalization.volatility == 0.0
        assert normalization.quality_score == pytest.approx(90.0)

    def test_zero_mean_volatility(self, epv_inputs, make_earnings):
        flat = normalize_earnings(dataclasses.replace(epv_inputs, historical_earnings=make_earnings([0, 0, 0, 0, 0])))
        mixed = normalize_earnings(dataclasses.replace(epv_inputs, historical_earnings=make_earnings([-10, 10, -10, 10, 0])))

        assert flat.volatility == 0.0
        assert mixed.volatility == 1.0

    def test_adjustments(self, epv_inputs):
        """Adjustments add to normalized earnings and are summarized by category."""
        adjustments = (
            EarningsAdjustment("Litigation settlement", 10.0, category=AdjustmentCategory.NON_RECURRING),
            EarningsAdjustment("Restructuring", 5.0, category=AdjustmentCategory.NON_RECURRING),
            EarningsAdjustment("Lease accounting", -3.0, category=AdjustmentCategory.ACCOUNTING),
        )

        normalization = normalize_earnings(dataclasses.replace(epv_inputs, earnings_adjustments=adjustments))

        assert normalization.total_adjustments == pytest.approx(12.0)
        assert normalization.normalized_earnings == pytest.approx(122.0)
        assert normalization.adjustments_by_category == {"non_recurring": 15.0, "accounting": -3.0}
        assert normalization.net_impact == pytest.approx(12.0 / 122.0)
        assert normalization.adjusted_earnings[0] == pytest.approx(120.0 + 12.0 / 5)


class TestMaintenanceCapex:
    """Tests for maintenance capex estimation."""

    def test_depreciation_proxy(self):
        capex_inputs = MaintenanceCapexInputs(
            method=MaintenanceCapexMethod.DEPRECIATION_PROXY,
            historical_capex=(-15.0, -25.0),
            historical_depreciation=(10.0, 14.0),
            capex_profile="growing_moderately",
        )

        analysis = estimate_maintenance_capex(capex_inputs, 1000.0)

        assert analysis.historical_capex == [15.0, 25.0]
        assert analysis.maintenance_capex == pytest.approx(14.4)
        assert analysis.growth_capex == pytest.approx(5.6)
        assert analysis.capex_as_percent_of_sales == pytest.approx(0.0144)

    def test_historical_average(self):
        capex_inputs = MaintenanceCapexInputs(
            method=MaintenanceCapexMethod.HISTORICAL_AVERAGE,
            historical_capex=(-15.0, -25.0),
        )

        analysis = estimate_maintenance_capex(capex_inputs)

        assert analysis.maintenance_capex == pytest.approx(20.0)
        assert analysis.growth_capex == 0.0
        assert analysis.capex_as_percent_of_sales is None

    @pytest.mark.parametrize("industry,expected", [
        ("retail", 20.0),
        ("utilities", 60.0),
        ("unknown", 30.0),
    ])
    def test_revenue_percentage(self, industry, expected):
        capex_inputs = MaintenanceCapexInputs(
            method=MaintenanceCapexMethod.REVENUE_PERCENTAGE,
            industry=industry,
        )

        assert estimate_maintenance_capex(capex_inputs, 1000.0).maintenance_capex == pytest.approx(expected)

    def test_from_financials(self, sample_financials):
        capex_inputs = MaintenanceCapexInputs.from_financials(sample_financials)
        analysis = estimate_maintenance_capex(capex_inputs)

        assert capex_inputs.method == MaintenanceCapexMethod.DEPRECIATION_PROXY
        assert analysis.average_capex == pytest.approx(8e9)
        assert analysis.maintenance_capex == pytest.approx(6e9)
        assert analysis.growth_capex == pytest.approx(2e9)


class TestCostOfCapital:
    """Tests for CostOfCapitalCalculator."""

    def test_wacc(self, epv_inputs):
        """0.7 x 11% equity + 0.3 x 3.95% after-tax debt."""
        inputs = dataclasses.replace(epv_inputs, cost_of_capital_method=CostOfCapitalMethod.WACC)

        breakdown = calculate_cost_of_capital(inputs)

        assert breakdown.cost_of_equity == pytest.approx(0.11)
        assert breakdown.after_tax_cost_of_debt == pytest.approx(0.0395)
        assert breakdown.cost_of_capital == pytest.approx(0.08885)

    def test_capm(self, epv_inputs):
        inputs = dataclasses.replace(epv_inputs, cost_of_capital_method=CostOfCapitalMethod.CAPM)

        assert calculate_cost_of_capital(inputs).cost_of_capital == pytest.approx(0.11)

    def test_manual(self, epv_inputs):
        assert calculate_cost_of_capital(epv_inputs).cost_of_capital == 0.10


class TestEPVValuation:
    """Tests for the full EPV pipeline."""

    def test_basic_value(self, epv_inputs):
        """110 normalized earnings capitalized at 10% over 10 shares."""
        result = calculate_epv_intrinsic_value(epv_inputs)

        assert result.symbol == "EPVT"
        assert result.epv_total_value == pytest.approx(1100.0)
        assert result.epv_per_share == pytest.approx(110.0)
        assert result.earnings_yield == pytest.approx(0.10)
        assert result.upside is None

    def test_maintenance_capex_deducted(self, epv_inputs):
        capex = MaintenanceCapexInputs(manual_amount=20.0)

        included = calculate_epv_intrinsic_value(dataclasses.replace(epv_inputs, maintenance_capex=capex))
        excluded = calculate_epv_intrinsic_value(dataclasses.replace(
            epv_inputs, maintenance_capex=capex, include_maintenance_capex=False
        ))

        assert included.adjusted_earnings == pytest.approx(90.0)
        assert included.epv_per_share == pytest.approx(90.0)
        assert excluded.adjusted_earnings == pytest.approx(110.0)

    def test_value_falls_as_cost_of_capital_rises(self, epv_inputs):
        low = calculate_epv_intrinsic_value(dataclasses.replace(epv_inputs, manual_cost_of_capital=0.08))
        high = calculate_epv_intrinsic_value(dataclasses.replace(epv_inputs, manual_cost_of_capital=0.12))

        assert low.epv_per_share > high.epv_per_share

    def test_value_rises_with_earnings(self, epv_inputs, make_earnings):
        richer = dataclasses.replace(epv_inputs, historical_earnings=make_earnings([200, 205, 210, 215, 220]))

        assert calculate_epv_intrinsic_value(richer).epv_per_share > calculate_epv_intrinsic_value(epv_inputs).epv_per_share

    def test_market_comparison(self, epv_inputs):
        result = calculate_epv_intrinsic_value(dataclasses.replace(epv_inputs, current_price=100.0))

        assert result.upside == pytest.approx(0.10)
        assert result.price_to_epv == pytest.approx(100.0 / 110.0)
        assert result.earnings_yield == pytest.approx(0.11)

    def test_invalid_inputs_raise(self, epv_inputs):
        with pytest.raises(ValidationError) as exc_info:
            calculate_epv_intrinsic_value(dataclasses.replace(epv_inputs, historical_earnings=[]))

        assert "Historical earnings data is required" in exc_info.value.errors

    def test_non_positive_cost_of_capital_is_domain_error(self, epv_inputs):
        """A CAPM rate below zero cannot capitalize earnings."""
        inputs = dataclasses.replace(
            epv_inputs,
            cost_of_capital_method=CostOfCapitalMethod.CAPM,
            cost_of_capital_components=CostOfCapitalComponents(risk_free_rate=-0.20),
        )

        with pytest.raises(DomainError):
            calculate_epv_intrinsic_value(inputs)

    def test_clamped_period_reported(self, epv_inputs):
        result = calculate_epv_intrinsic_value(dataclasses.replace(epv_inputs, normalization_period=10))

        assert result.earnings_normalization.period_used == 5
        assert "Normalization period 10 is outside 1-5; using 5 years" in result.validation_warnings

    def test_idempotent(self, epv_inputs):
        first = calculate_epv_intrinsic_value(epv_inputs).to_dict()
        second = calculate_epv_intrinsic_value(epv_inputs).to_dict()

        assert first == second


class TestConfidenceAndWarnings:
    """Tests for EPV confidence and data-quality warnings."""

    def test_medium_confidence_without_moat(self, epv_inputs):
        result = calculate_epv_intrinsic_value(epv_inputs)

        assert result.moat_analysis.moat_strength == MoatStrength.NONE
        assert result.confidence_level == ConfidenceLevel.MEDIUM
        assert result.warnings == []

    def test_high_confidence(self, epv_inputs, make_earnings):
        """Seven years, top quality and a wide moat."""
        inputs = dataclasses.replace(
            epv_inputs,
            historical_earnings=make_earnings([90, 95, 100, 105, 110, 115, 120], start_year=2018),
            competitive_position=CompetitivePosition.DOMINANT,
            business_stability=BusinessStability.VERY_STABLE,
        )

        result = calculate_epv_intrinsic_value(inputs)

        assert result.moat_analysis.moat_strength == MoatStrength.WIDE
        assert result.confidence_level == ConfidenceLevel.HIGH

    def test_low_confidence_with_short_history(self, epv_inputs, make_earnings):
        inputs = dataclasses.replace(epv_inputs, historical_earnings=make_earnings([100, 110, 120]))

        result = calculate_epv_intrinsic_value(inputs)

        assert result.confidence_level == ConfidenceLevel.LOW
        assert result.warnings[0].message == (
            "Only 3 years of earnings data available. EPV is more reliable with 5+ years of data."
        )

    def test_warning_set(self, epv_inputs, make_earnings):
        """Declining earnings, poor quality, volatile business and a 25% rate."""
        inputs = dataclasses.replace(
            epv_inputs,
            historical_earnings=make_earnings([140, 130, 120, 110, 100]),
            earnings_quality=EarningsQuality.POOR,
            business_stability=BusinessStability.VOLATILE,
            manual_cost_of_capital=0.25,
        )

        result = calculate_epv_intrinsic_value(inputs)
        messages = [w.message for w in result.warnings]

        assert messages == [
            "Declining earnings trend detected. Current earnings may not be sustainable.",
            "Poor earnings quality assessment. EPV results should be interpreted with caution.",
            "EPV assumes no growth. This may be overly conservative for businesses with significant growth potential.",
            "Very high cost of capital (>20%) may indicate excessive business risk.",
        ]

    def test_roic_based_moat_with_financials(self, epv_inputs, sample_financials):
        """Supplying statements switches to the ROIC-based moat assessment."""
        result = calculate_epv_intrinsic_value(dataclasses.replace(epv_inputs, financials=sample_financials))

        assert result.roic_analysis is not None
        assert len(result.roic_analysis.historical_roic) == 5
        assert result.moat_analysis.moat_strength == MoatStrength.NARROW
