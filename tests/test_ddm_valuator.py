"""
Unit tests for ddm_valuator module.

Tests the Gordon, zero-growth, two-stage and multi-stage dividend
discount models and the dividend history helpers.
"""

import dataclasses

import pytest

from valuation_engine.config import DDMModelType
from valuation_engine.ddm_valuator import (
    DDMCalculator,
    DDMInputs,
    DDMTerminalValue,
    DividendRecord,
    GrowthPhase,
    calculate_ddm,
    calculate_gordon_growth_ddm,
    calculate_historical_dividend_growth,
    calculate_implied_growth_rate,
    calculate_multi_stage_ddm,
    calculate_zero_growth_ddm,
)
from valuation_engine.exceptions import DomainError, ValidationError


class TestGordonGrowth:
    """Tests for the Gordon growth model."""

    def test_reference_value(self, gordon_inputs):
        """D0 = 2.00, r = 10%, g = 5% -> 2.10 / 0.05 = 42.00."""
        result = calculate_ddm(gordon_inputs)

        assert result.intrinsic_value_per_share == pytest.approx(42.0)
        assert result.intrinsic_value == pytest.approx(42_000.0)
        assert result.total_pv_of_dividends == pytest.approx(42.0)
        assert result.years_projected is None
        assert result.terminal_value is None

    def test_display_projections(self, gordon_inputs):
        """Ten years of D0 * (1 + g)^t, discounted at r."""
        result = calculate_ddm(gordon_inputs)
        projections = result.dividend_projections

        assert len(projections) == 10
        assert projections[0].dividend == pytest.approx(2.1)
        assert projections[0].present_value == pytest.approx(2.1 / 1.1)
        assert projections[-1].dividend == pytest.approx(2.0 * 1.05 ** 10)
        for projection in projections:
            assert projection.discount_factor == pytest.approx(1 / 1.1 ** projection.year)
            assert projection.growth_rate == 0.05

    def test_yields(self, gordon_inputs):
        """The forward yield of a Gordon value equals r - g."""
        result = calculate_ddm(gordon_inputs)

        assert result.current_dividend_yield == pytest.approx(2.0 / 42.0)
        assert result.forward_dividend_yield == pytest.approx(0.05)

    def test_upside_against_price(self, gordon_inputs):
        result = calculate_ddm(dataclasses.replace(gordon_inputs, current_price=40.0))

        assert result.current_price == 40.0
        assert result.upside_downside_pct == pytest.approx(0.05)

    def test_growth_at_required_return_fails_validation(self, gordon_inputs):
        with pytest.raises(ValidationError) as exc_info:
            calculate_ddm(dataclasses.replace(gordon_inputs, gordon_growth_rate=0.10))

        assert "Growth rate must be less than required return for Gordon model" in exc_info.value.errors

    def test_direct_formula_refuses_non_positive_spread(self, gordon_inputs):
        """The unvalidated formula raises a domain error instead of dividing by zero."""
        with pytest.raises(DomainError):
            calculate_gordon_growth_ddm(dataclasses.replace(gordon_inputs, gordon_growth_rate=0.10))

    def test_zero_dividend_gives_no_yield(self, gordon_inputs):
        result = calculate_ddm(dataclasses.replace(gordon_inputs, current_dividend=0.0))

        assert result.intrinsic_value_per_share == 0.0
        assert result.current_dividend_yield is None
        assert result.warnings == ["Current dividend is zero - company may not be suitable for DDM"]

    def test_idempotent(self, gordon_inputs):
        """Identical inputs give identical results."""
        assert calculate_ddm(gordon_inputs).to_dict() == calculate_ddm(gordon_inputs).to_dict()


class TestZeroGrowth:
    """Tests for the zero-growth model."""

    @pytest.fixture
    def zero_inputs(self):
        """D = 4.00 at r = 8% -> 50.00 per share."""
        return DDMInputs(
            current_dividend=4.0,
            shares_outstanding=100,
            required_return=0.08,
            model_type=DDMModelType.ZERO,
        )

    def test_reference_value(self, zero_inputs):
        result = calculate_ddm(zero_inputs)

        assert result.intrinsic_value_per_share == pytest.approx(50.0)
        assert result.intrinsic_value == pytest.approx(5000.0)
        assert result.current_dividend_yield == pytest.approx(0.08)

    def test_flat_projections(self, zero_inputs):
        result = calculate_ddm(zero_inputs)

        assert len(result.dividend_projections) == 10
        assert all(p.dividend == 4.0 and p.growth_rate == 0.0 for p in result.dividend_projections)

    def test_zero_return_is_domain_error(self, zero_inputs):
        with pytest.raises(DomainError):
            calculate_zero_growth_ddm(dataclasses.replace(zero_inputs, required_return=0.0))


class TestTwoStage:
    """Tests for the two-stage model."""

    @pytest.fixture
    def two_stage_inputs(self):
        """Five years at 8% then 4% forever, discounted at 10%."""
        return DDMInputs(
            current_dividend=2.0,
            shares_outstanding=1000,
            required_return=0.10,
            model_type=DDMModelType.TWO_STAGE,
            high_growth_rate=0.08,
            high_growth_years=5,
            stable_growth_rate=0.04,
        )

    def test_value_components(self, two_stage_inputs):
        """Value = PV of stage-one dividends + PV of the terminal value."""
        result = calculate_ddm(two_stage_inputs)

        stage_one = sum(2.0 * 1.08 ** t / 1.1 ** t for t in range(1, 6))
        terminal = 2.0 * 1.08 ** 5 * 1.04 / 0.06

        assert result.total_pv_of_dividends == pytest.approx(stage_one)
        assert result.terminal_value == pytest.approx(terminal)
        assert result.terminal_value_pv == pytest.approx(terminal / 1.1 ** 5)
        assert result.intrinsic_value_per_share == pytest.approx(stage_one + terminal / 1.1 ** 5)
        assert result.years_projected == 5

    def test_bounded_by_zero_and_high_growth_gordon(self, two_stage_inputs):
        """Between the zero-growth value and a Gordon value at the high rate."""
        value = calculate_ddm(two_stage_inputs).intrinsic_value_per_share

        zero_value = 2.0 / 0.10
        high_gordon = 2.0 * 1.08 / (0.10 - 0.08)

        assert zero_value < value < high_gordon

    def test_projections_span_both_stages(self, two_stage_inputs):
        result = calculate_ddm(two_stage_inputs)
        projections = result.dividend_projections

        assert len(projections) == 10
        assert [p.growth_rate for p in projections] == [0.08] * 5 + [0.04] * 5
        assert result.forward_dividend_yield == pytest.approx(2.16 / result.intrinsic_value_per_share)

    def test_matches_equivalent_multi_stage(self, two_stage_inputs):
        """A two-phase multi-stage model reproduces the two-stage value."""
        multi = dataclasses.replace(
            two_stage_inputs,
            model_type=DDMModelType.MULTI_STAGE,
            growth_phases=(GrowthPhase(0.08, 5), GrowthPhase(0.04)),
        )

        assert calculate_ddm(multi).intrinsic_value_per_share == pytest.approx(
            calculate_ddm(two_stage_inputs).intrinsic_value_per_share
        )


class TestMultiStage:
    """Tests for the multi-stage model."""

    @pytest.fixture
    def multi_inputs(self):
        return DDMInputs(
            current_dividend=1.0,
            shares_outstanding=500,
            required_return=0.09,
            model_type=DDMModelType.MULTI_STAGE,
            growth_phases=(
                GrowthPhase(0.12, 3, "Expansion"),
                GrowthPhase(0.06, 2, "Transition"),
                GrowthPhase(0.03, 0, "Mature"),
            ),
        )

    def test_phases_compound_in_order(self, multi_inputs):
        result = calculate_ddm(multi_inputs)
        projections = result.dividend_projections

        assert result.years_projected == 5
        assert len(projections) == 10
        assert projections[2].dividend == pytest.approx(1.12 ** 3)
        assert projections[4].dividend == pytest.approx(1.12 ** 3 * 1.06 ** 2)
        assert projections[5].growth_rate == 0.03

    def test_value_components_add_up(self, multi_inputs):
        result = calculate_ddm(multi_inputs)

        assert result.intrinsic_value_per_share == pytest.approx(
            result.total_pv_of_dividends + result.terminal_value_pv
        )

    def test_fewer_than_two_phases_fails(self, multi_inputs):
        single = dataclasses.replace(multi_inputs, growth_phases=(GrowthPhase(0.03),))

        with pytest.raises(ValidationError):
            calculate_ddm(single)
        with pytest.raises(ValidationError):
            calculate_multi_stage_ddm(single)


class TestDividendHelpers:
    """Tests for implied and historical dividend growth."""

    def test_implied_growth(self):
        """g = r - D / P."""
        assert calculate_implied_growth_rate(50.0, 2.0, 0.10) == pytest.approx(0.06)

    def test_implied_growth_needs_price(self):
        with pytest.raises(DomainError):
            calculate_implied_growth_rate(0.0, 2.0, 0.10)

    def test_historical_growth(self):
        records = [DividendRecord(2022, 1.21), DividendRecord(2020, 1.0)]

        assert calculate_historical_dividend_growth(records) == pytest.approx(0.10)

    @pytest.mark.parametrize("records", [
        [],
        [DividendRecord(2024, 1.0)],
        [DividendRecord(2020, 0.0), DividendRecord(2024, 1.0)],
    ])
    def test_historical_growth_insufficient_data(self, records):
        assert calculate_historical_dividend_growth(records) == 0.0


class TestDiscounting:
    """Tests for discount factor guards."""

    def test_terminal_value_refuses_total_loss_return(self):
        terminal = DDMTerminalValue(
            final_dividend=1.0,
            growth_rate=-1.5,
            required_return=-1.0,
            discount_years=2,
        )

        with pytest.raises(DomainError):
            terminal.calculate()

    def test_projection_refuses_total_loss_return(self):
        """Called without validation, a -100% return is a DomainError."""
        inputs = DDMInputs(
            current_dividend=2.0,
            shares_outstanding=1000,
            required_return=-1.0,
            gordon_growth_rate=-1.5,
        )

        with pytest.raises(DomainError):
            DDMCalculator().calculate(inputs)
