"""
Unit tests for roic_analyzer module.

Tests per-period ROIC, WACC and the historical ROIC aggregation.
"""

import dataclasses

import pytest

from valuation_engine.config import MoatStrength, TrendDirection
from valuation_engine.exceptions import DomainError
from valuation_engine.financials import BalanceSheet, CompanyFinancials, IncomeStatement
from valuation_engine.roic_analyzer import (
    WACCInputs,
    analyze_roic,
    calculate_invested_capital,
    calculate_nopat,
    calculate_roic,
    calculate_wacc,
    get_default_wacc_inputs,
)


class TestPrimitives:
    """Tests for NOPAT and invested capital."""

    def test_nopat(self):
        assert calculate_nopat(100.0, 0.21) == pytest.approx(79.0)

    def test_invested_capital(self):
        """Total assets - cash - current liabilities + short-term debt."""
        assert calculate_invested_capital(200.0, 20.0, 30.0, 5.0) == pytest.approx(155.0)


class TestCalculateROIC:
    """Tests for single-period ROIC."""

    @pytest.fixture
    def balance_sheet(self):
        """Balance sheet with 750 of invested capital."""
        return BalanceSheet(
            date="2024-12-31",
            total_assets=1000.0,
            total_liabilities=400.0,
            cash=100.0,
            current_liabilities=200.0,
            short_term_debt=50.0,
        )

    def test_estimated_tax_rate_is_capped(self, balance_sheet):
        """Tax estimated from expense / operating income is capped at 40%."""
        income = IncomeStatement(
            date="2024-12-31",
            revenue=1000.0,
            net_income=50.0,
            operating_income=100.0,
            income_tax_expense=50.0,
        )

        result = calculate_roic(income, balance_sheet)

        assert result.tax_rate == pytest.approx(0.40)
        assert result.nopat == pytest.approx(60.0)
        assert result.invested_capital == pytest.approx(750.0)
        assert result.roic == pytest.approx(0.08)

    def test_statutory_default_tax_rate(self, balance_sheet):
        income = IncomeStatement(date="2024-12-31", revenue=1000.0, net_income=50.0, operating_income=100.0)

        result = calculate_roic(income, balance_sheet)

        assert result.tax_rate == pytest.approx(0.21)

    def test_precomputed_invested_capital(self, balance_sheet):
        """A reported invested capital figure takes precedence."""
        income = IncomeStatement(
            date="2024-12-31",
            revenue=1000.0,
            net_income=50.0,
            operating_income=100.0,
            effective_tax_rate=0.25,
        )
        sheet = dataclasses.replace(balance_sheet, invested_capital=600.0)

        result = calculate_roic(income, sheet)

        assert result.roic == pytest.approx(0.125)

    def test_period_skipped_without_operating_income(self, balance_sheet):
        income = IncomeStatement(date="2024-12-31", revenue=1000.0, net_income=50.0)

        assert calculate_roic(income, balance_sheet) is None

    def test_period_skipped_with_non_positive_capital(self, balance_sheet):
        income = IncomeStatement(date="2024-12-31", revenue=1000.0, net_income=50.0, operating_income=100.0)
        sheet = dataclasses.replace(balance_sheet, total_assets=250.0)

        assert calculate_roic(income, sheet) is None


class TestWACC:
    """Tests for WACC."""

    def test_wacc(self):
        """Equal debt and equity weights with a 25% tax shield."""
        inputs = WACCInputs(
            risk_free_rate=0.04,
            market_risk_premium=0.06,
            beta=1.0,
            cost_of_debt=0.06,
            tax_rate=0.25,
            debt_to_equity=1.0,
        )

        assert calculate_wacc(inputs) == pytest.approx(0.0725)

    def test_degenerate_leverage(self):
        inputs = dataclasses.replace(get_default_wacc_inputs(), debt_to_equity=-1.0)

        with pytest.raises(DomainError):
            calculate_wacc(inputs)

    def test_default_inputs(self):
        inputs = get_default_wacc_inputs(debt_to_equity=0.8)

        assert inputs.debt_to_equity == 0.8
        assert get_default_wacc_inputs().debt_to_equity == 0.5


class TestAnalyzeROIC:
    """Tests for historical ROIC analysis."""

    def test_history_is_newest_first(self, sample_financials):
        analysis = analyze_roic(sample_financials)

        assert len(analysis.historical_roic) == 5
        assert analysis.historical_roic[0].year == "2024-12-31"
        assert analysis.historical_roic[-1].year == "2020-12-31"

    def test_growing_roic_trend_and_moat(self, sample_financials):
        """ROIC rising from ~10% to ~15% against an ~8.3% WACC."""
        analysis = analyze_roic(sample_financials, get_default_wacc_inputs())

        assert analysis.trend == TrendDirection.IMPROVING
        assert 0.0 <= analysis.consistency <= 1.0
        assert analysis.current_wacc == pytest.approx(0.0832, abs=1e-4)
        assert analysis.average_spread == pytest.approx(analysis.average_roic - analysis.current_wacc)
        assert analysis.moat_classification == MoatStrength.NARROW

    def test_identical_periods_are_fully_consistent(self, sample_financials):
        income = [
            dataclasses.replace(statement, operating_income=30e9)
            for statement in sample_financials.income_statement
        ]
        financials = dataclasses.replace(sample_financials, income_statement=income)

        analysis = analyze_roic(financials)

        assert analysis.consistency == 1.0
        assert analysis.trend == TrendDirection.STABLE

    def test_consistency_is_bounded_for_erratic_history(self, sample_financials):
        operating = [1e9, 60e9, -5e9, 40e9, 2e9]
        income = [
            dataclasses.replace(statement, operating_income=value)
            for statement, value in zip(sample_financials.income_statement, operating)
        ]
        financials = dataclasses.replace(sample_financials, income_statement=income)

        analysis = analyze_roic(financials)

        assert 0.0 <= analysis.consistency <= 1.0

    def test_unmatched_periods_are_skipped(self, sample_financials):
        """Income statements without a same-date balance sheet are ignored."""
        financials = dataclasses.replace(sample_financials, balance_sheet=sample_financials.balance_sheet[:2])

        analysis = analyze_roic(financials)

        assert [r.year for r in analysis.historical_roic] == ["2021-12-31", "2020-12-31"]

    def test_no_data(self):
        analysis = analyze_roic(CompanyFinancials(symbol="EMPTY"))

        assert analysis.historical_roic == []
        assert analysis.moat_classification == MoatStrength.NONE
