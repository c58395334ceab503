"""
Unit tests for nav_valuator module.

Tests adjusted book value, asset quality, liquidation scenarios and
NAV warnings.
"""

import dataclasses

import pytest

from valuation_engine.config import ConfidenceLevel, LiquidationScenario
from valuation_engine.exceptions import ValidationError
from valuation_engine.financials import BalanceSheet
from valuation_engine.nav_valuator import (
    AssetAdjustment,
    AssetCategory,
    AssetQualityCategory,
    LiabilityAdjustment,
    LiabilityCategory,
    calculate_book_value_nav,
    calculate_liquidation_value,
    calculate_nav,
    scale_asset_values,
)


class TestBookValue:
    """Tests for unadjusted NAV."""

    def test_book_value(self, nav_balance_sheet):
        assert calculate_book_value_nav(nav_balance_sheet) == 600.0

    def test_unadjusted_nav_equals_book(self, nav_inputs):
        result = calculate_nav(nav_inputs)

        assert result.book_value_nav == 600.0
        assert result.adjusted_nav == pytest.approx(600.0)
        assert result.nav_per_share == pytest.approx(6.0)
        assert result.book_value_per_share == pytest.approx(6.0)
        assert result.net_adjustments == pytest.approx(0.0)

    def test_default_category_shares(self, nav_inputs):
        """Totals-only balance sheets are split with the default shares."""
        result = calculate_nav(nav_inputs)
        assets = {a.category: a for a in result.asset_breakdown}

        assert assets[AssetCategory.PROPERTY_PLANT_EQUIPMENT].book_value == pytest.approx(350.0)
        assert assets[AssetCategory.CASH_AND_EQUIVALENTS].book_value == pytest.approx(100.0)
        assert not any(a.reported for a in result.asset_breakdown)
        assert result.total_adjusted_liabilities == pytest.approx(400.0)

    def test_reported_line_items(self, nav_inputs):
        """Reported items are used as-is and the remainder goes to other assets."""
        sheet = BalanceSheet(
            date="2024-12-31",
            total_assets=1000.0,
            total_liabilities=400.0,
            cash=200.0,
            property_plant_equipment=500.0,
            long_term_debt=300.0,
        )

        result = calculate_nav(dataclasses.replace(nav_inputs, balance_sheet=sheet))
        assets = {a.category: a for a in result.asset_breakdown}
        liabilities = {l.category: l for l in result.liability_breakdown}

        assert assets[AssetCategory.CASH_AND_EQUIVALENTS].reported
        assert assets[AssetCategory.INVENTORY].book_value == 0.0
        assert assets[AssetCategory.OTHER_ASSETS].book_value == pytest.approx(300.0)
        assert liabilities[LiabilityCategory.OTHER_LIABILITIES].book_value == pytest.approx(100.0)
        assert result.adjusted_nav == pytest.approx(600.0)


class TestAdjustments:
    """Tests for asset and liability adjustments."""

    def test_asset_adjustment_is_a_delta(self, nav_inputs):
        """Restating 100 of PP&E to 150 adds 50 to NAV."""
        adjustment = AssetAdjustment(
            AssetCategory.PROPERTY_PLANT_EQUIPMENT, "Land at market", 100.0, 150.0
        )

        result = calculate_nav(dataclasses.replace(nav_inputs, asset_adjustments=(adjustment,)))
        ppe = next(a for a in result.asset_breakdown if a.category == AssetCategory.PROPERTY_PLANT_EQUIPMENT)

        assert result.adjusted_nav == pytest.approx(650.0)
        assert result.net_adjustments == pytest.approx(50.0)
        assert ppe.adjustment_amount == pytest.approx(50.0)
        assert ppe.adjustment_percentage == pytest.approx(50.0 / 350.0 * 100)

    def test_liability_adjustment(self, nav_inputs):
        adjustment = LiabilityAdjustment(
            LiabilityCategory.PENSION_OBLIGATIONS, "Underfunded plan", 20.0, 40.0
        )

        result = calculate_nav(dataclasses.replace(nav_inputs, liability_adjustments=(adjustment,)))

        assert result.adjusted_nav == pytest.approx(580.0)

    def test_excluding_intangibles_and_goodwill(self, nav_inputs):
        result = calculate_nav(dataclasses.replace(
            nav_inputs, include_intangibles=False, include_goodwill=False
        ))

        assert result.adjusted_nav == pytest.approx(490.0)

    def test_adjustment_confidence_scales_quality(self, nav_inputs):
        adjustment = AssetAdjustment(
            AssetCategory.INVENTORY, "Write-down", 50.0, 40.0, confidence=ConfidenceLevel.LOW
        )

        result = calculate_nav(dataclasses.replace(nav_inputs, asset_adjustments=(adjustment,)))
        inventory = next(a for a in result.asset_breakdown if a.category == AssetCategory.INVENTORY)

        assert inventory.quality_score == pytest.approx(60.0 * 0.6)


class TestQualityAndLiquidation:
    """Tests for asset quality and liquidation scenarios."""

    def test_asset_quality(self, nav_inputs):
        result = calculate_nav(nav_inputs)
        quality = result.asset_quality

        assert quality.overall_score == pytest.approx(53.47 / 0.705)
        assert quality.score_category == AssetQualityCategory.GOOD
        assert quality.intangible_asset_ratio == pytest.approx(0.11)
        assert quality.liquid_asset_ratio == pytest.approx(0.15)
        assert result.confidence_level == ConfidenceLevel.HIGH

    def test_three_standard_scenarios(self, nav_inputs):
        result = calculate_nav(nav_inputs)
        scenarios = [s.scenario for s in result.liquidation_analysis]

        assert scenarios == [
            LiquidationScenario.ORDERLY,
            LiquidationScenario.QUICK,
            LiquidationScenario.FORCED,
        ]

    def test_orderly_liquidation(self, nav_inputs):
        orderly = calculate_nav(nav_inputs).liquidation_analysis[0]

        assert orderly.total_liquidation_value == pytest.approx(800.0)
        assert orderly.average_discount == pytest.approx(0.20)
        assert orderly.liquidation_value_per_share == pytest.approx(4.0)
        assert orderly.time_frame == "12-24 months"

    def test_faster_liquidation_recovers_less(self, nav_inputs):
        orderly, quick, forced = calculate_nav(nav_inputs).liquidation_analysis

        assert orderly.total_liquidation_value > quick.total_liquidation_value > forced.total_liquidation_value

    def test_custom_discount_scenario(self, nav_inputs):
        result = calculate_nav(dataclasses.replace(nav_inputs, custom_liquidation_discount=0.3))
        custom = result.liquidation_analysis[-1]

        assert len(result.liquidation_analysis) == 4
        assert custom.custom_discount == 0.3
        assert custom.total_liquidation_value == pytest.approx(700.0)
        assert custom.liquidation_value_per_share == pytest.approx(3.0)

    def test_liquidation_value_helper(self, nav_inputs):
        assets = calculate_nav(nav_inputs).asset_breakdown

        analysis = calculate_liquidation_value(assets, LiquidationScenario.FORCED, custom_discount=0.0)

        assert analysis.total_liquidation_value == pytest.approx(1000.0)


class TestWarningsAndMarket:
    """Tests for NAV warnings and market comparison."""

    def test_negative_book_value(self, nav_inputs, nav_balance_sheet):
        sheet = dataclasses.replace(nav_balance_sheet, total_liabilities=1500.0)

        result = calculate_nav(dataclasses.replace(nav_inputs, balance_sheet=sheet))

        assert result.book_value_nav < 0
        assert result.warnings[0].message == "Company has negative book value (liabilities exceed assets)"
        assert "Company has negative equity (assets < liabilities)" in result.validation_warnings

    def test_heavy_intangibles(self, nav_inputs):
        sheet = BalanceSheet(
            date="2024-12-31",
            total_assets=1000.0,
            total_liabilities=400.0,
            intangible_assets=600.0,
            cash=400.0,
        )

        result = calculate_nav(dataclasses.replace(nav_inputs, balance_sheet=sheet))
        messages = [w.message for w in result.warnings]

        assert "Intangible assets represent >50% of total assets" in messages

    def test_large_adjustments(self, nav_inputs):
        adjustment = AssetAdjustment(
            AssetCategory.PROPERTY_PLANT_EQUIPMENT, "Revaluation", 350.0, 700.0
        )

        result = calculate_nav(dataclasses.replace(nav_inputs, asset_adjustments=(adjustment,)))
        messages = [w.message for w in result.warnings]

        assert "Large adjustments (>25% of assets) applied to book values" in messages

    def test_market_comparison(self, nav_inputs):
        result = calculate_nav(dataclasses.replace(nav_inputs, current_price=5.0))

        assert result.upside_downside_pct == pytest.approx(0.20)
        assert result.price_to_nav == pytest.approx(5.0 / 6.0)

    def test_invalid_inputs_raise(self, nav_inputs):
        with pytest.raises(ValidationError):
            calculate_nav(dataclasses.replace(nav_inputs, shares_outstanding=0))


class TestScaleAssetValues:
    """Tests for scale_asset_values."""

    def test_scales_assets_only(self, nav_inputs):
        scaled = scale_asset_values(nav_inputs, 1.1)

        assert scaled.balance_sheet.total_assets == pytest.approx(1100.0)
        assert scaled.balance_sheet.total_liabilities == 400.0
        assert calculate_nav(scaled).nav_per_share == pytest.approx(7.0)
        assert nav_inputs.balance_sheet.total_assets == 1000.0
