"""
Shared fixtures for the valuation engine test suite.
"""

import pytest

from valuation_engine.config import CostOfCapitalMethod, DDMModelType
from valuation_engine.dcf_valuator import DCFInputs
from valuation_engine.ddm_valuator import DDMInputs
from valuation_engine.epv_valuator import EPVInputs, HistoricalEarnings
from valuation_engine.financials import (
    BalanceSheet,
    CashFlowStatement,
    CompanyFinancials,
    IncomeStatement,
)
from valuation_engine.nav_valuator import NAVInputs


REVENUES = {
    2020: 100e9,
    2021: 110e9,
    2022: 121e9,
    2023: 133.1e9,
    2024: 146.41e9,
}


@pytest.fixture
def sample_financials():
    """Five years of steadily growing, highly profitable statements (oldest first)."""
    income = [
        IncomeStatement(
            date=f"{year}-12-31",
            revenue=revenue,
            net_income=revenue * 0.18,
            operating_income=revenue * 0.20,
            gross_profit=revenue * 0.65,
            selling_general_and_administrative=revenue * 0.20,
            research_and_development=revenue * 0.06,
            effective_tax_rate=0.21,
        )
        for year, revenue in REVENUES.items()
    ]
    balances = [
        BalanceSheet(
            date=f"{year}-12-31",
            total_assets=200e9,
            total_liabilities=80e9,
            cash=20e9,
            current_liabilities=30e9,
            short_term_debt=5e9,
        )
        for year in REVENUES
    ]
    cash_flows = [
        CashFlowStatement(
            date=f"{year}-12-31",
            operating_cash_flow=revenue * 0.22,
            capital_expenditure=-8e9,
            free_cash_flow=revenue * 0.22 - 8e9,
            dividends_paid=-3e9,
            depreciation=6e9,
        )
        for year, revenue in REVENUES.items()
    ]
    return CompanyFinancials(
        symbol="TEST",
        name="Test Corp",
        income_statement=income,
        balance_sheet=balances,
        cash_flow_statement=cash_flows,
        current_price=150.0,
        shares_outstanding=1e9,
    )


@pytest.fixture
def make_earnings():
    """Factory for dated earnings histories, values given oldest first."""
    def _make(values, start_year=2020, revenue=1000.0):
        return [
            HistoricalEarnings(
                year=start_year + i,
                net_income=value,
                revenue=revenue,
                date=f"{start_year + i}-12-31",
            )
            for i, value in enumerate(values)
        ]
    return _make


@pytest.fixture
def gordon_inputs():
    """Gordon growth case: D0 = 2.00, r = 10%, g = 5% -> 42.00 per share."""
    return DDMInputs(
        current_dividend=2.0,
        shares_outstanding=1000,
        required_return=0.10,
        model_type=DDMModelType.GORDON,
        gordon_growth_rate=0.05,
    )


@pytest.fixture
def epv_inputs(make_earnings):
    """Rising earnings 100 -> 120, manual 10% cost of capital, 10 shares."""
    return EPVInputs(
        historical_earnings=make_earnings([100, 105, 110, 115, 120]),
        shares_outstanding=10,
        symbol="EPVT",
        cost_of_capital_method=CostOfCapitalMethod.MANUAL,
        manual_cost_of_capital=0.10,
    )


@pytest.fixture
def dcf_inputs():
    """Five-year decaying growth path into a 3% terminal rate at 10%."""
    return DCFInputs(
        base_fcf=100.0,
        fcf_growth_rates=(0.10, 0.08, 0.06, 0.05, 0.04),
        terminal_growth_rate=0.03,
        discount_rate=0.10,
        shares_outstanding=10,
    )


@pytest.fixture
def nav_balance_sheet():
    """Balance sheet with totals only; categories use default shares."""
    return BalanceSheet(date="2024-12-31", total_assets=1000.0, total_liabilities=400.0)


@pytest.fixture
def nav_inputs(nav_balance_sheet):
    return NAVInputs(balance_sheet=nav_balance_sheet, shares_outstanding=100)
