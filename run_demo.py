#!/usr/bin/env python3
"""
Valuation Engine - Calculator Demo
==================================

Runs every intrinsic value calculator against an in-memory sample company
and prints the results:

DCF Valuation
- Decaying 5-year FCF growth path with Gordon Growth terminal value
- Terminal growth x discount rate sensitivity matrix

DDM Valuation
- Gordon, zero-growth, two-stage and multi-stage variants
- Growth x required return sensitivity matrix

EPV Valuation
- Earnings normalization and quality scoring
- Maintenance capex, WACC and ROIC-based moat assessment

NAV Valuation
- Adjusted book value and asset quality
- Orderly, quick and forced liquidation scenarios

Usage:
    python run_demo.py                  # All models
    python run_demo.py --model epv      # A single model
    python run_demo.py --no-sensitivity # Skip sensitivity matrices
    python run_demo.py --quiet          # Suppress engine log lines

Nothing is read from or written to disk and no network access is made.

Version: 1.0.0
"""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from valuation_engine import (
    LOGGER,
    __version__,
    AssetAdjustment,
    AssetCategory,
    BalanceSheet,
    CalculatorKind,
    CashFlowStatement,
    CompanyFinancials,
    DCFInputs,
    DDMInputs,
    DDMModelType,
    EPVInputs,
    GrowthPhase,
    HistoricalEarnings,
    IncomeStatement,
    LiabilityAdjustment,
    LiabilityCategory,
    NAVInputs,
    ValuationError,
    calculate_revenue_growth_rate,
    generate_growth_pattern,
    get_calculator,
    latest,
    run_calculator,
)
from valuation_engine.dcf_valuator import ScenarioType, describe_growth_pattern
from valuation_engine.epv_valuator import MaintenanceCapexInputs


# =============================================================================
# SAMPLE COMPANY
# =============================================================================

SAMPLE_YEARS = {
    # year: (revenue, operating income, net income)
    2020: (52.0e9, 9.1e9, 6.6e9),
    2021: (57.5e9, 10.4e9, 7.7e9),
    2022: (61.2e9, 11.0e9, 8.1e9),
    2023: (64.9e9, 12.1e9, 8.9e9),
    2024: (70.3e9, 13.4e9, 9.9e9),
}

SAMPLE_SHARES = 1.8e9
SAMPLE_PRICE = 62.50


def build_sample_financials() -> CompanyFinancials:
    """Five years of statements for a fictional consumer staples company."""
    income = []
    balances = []
    cash_flows = []
    for year, (revenue, operating, net) in SAMPLE_YEARS.items():
        date = f"{year}-12-31"
        income.append(IncomeStatement(
            date=date,
            revenue=revenue,
            net_income=net,
            operating_income=operating,
            gross_profit=revenue * 0.62,
            selling_general_and_administrative=revenue * 0.24,
            research_and_development=revenue * 0.02,
            effective_tax_rate=0.22,
        ))
        balances.append(BalanceSheet(
            date=date,
            total_assets=revenue * 1.4,
            total_liabilities=revenue * 0.8,
            cash=revenue * 0.12,
            accounts_receivable=revenue * 0.15,
            inventory=revenue * 0.18,
            property_plant_equipment=revenue * 0.55,
            intangible_assets=revenue * 0.10,
            goodwill=revenue * 0.20,
            current_liabilities=revenue * 0.30,
            accounts_payable=revenue * 0.14,
            short_term_debt=revenue * 0.05,
            long_term_debt=revenue * 0.40,
        ))
        cash_flows.append(CashFlowStatement(
            date=date,
            operating_cash_flow=net * 1.25,
            capital_expenditure=-revenue * 0.045,
            free_cash_flow=net * 1.25 - revenue * 0.045,
            dividends_paid=-net * 0.45,
            depreciation=revenue * 0.035,
        ))

    return CompanyFinancials(
        symbol="SMPL",
        name="Sample Staples Co.",
        income_statement=income,
        balance_sheet=balances,
        cash_flow_statement=cash_flows,
        current_price=SAMPLE_PRICE,
        shares_outstanding=SAMPLE_SHARES,
    )


# =============================================================================
# FORMATTING UTILITIES
# =============================================================================

def format_currency(value, scale=1e9, suffix="B"):
    """Format value as currency with scale."""
    if value is None:
        return "N/A"
    return f"${value/scale:,.2f}{suffix}"


def format_percent(value, decimals=2):
    """Format value as percentage."""
    if value is None:
        return "N/A"
    return f"{value*100:.{decimals}f}%"


def format_price(value):
    if value is None:
        return "N/A"
    return f"${value:,.2f}"


def print_line(char="=", length=80):
    """Print separator line."""
    print(char * length)


def print_header(title):
    """Print section header."""
    print()
    print_line("=")
    print(f"  {title}")
    print_line("=")


def print_subheader(title):
    """Print subsection header."""
    print()
    print(f"  {title}")
    print_line("-", 50)


def print_banner(financials: CompanyFinancials):
    """Print application banner."""
    print()
    print_line()
    print("  VALUATION ENGINE")
    print("  DCF, DDM, EPV and NAV intrinsic value calculators")
    print_line()
    print(f"  Company: {financials.name} ({financials.symbol})")
    print(f"  Price:   {format_price(financials.current_price)}")
    print(f"  Version: {__version__}")
    print_line()


def print_market_comparison(price, upside):
    if price is None:
        print("  Current price not available")
        return
    print(f"  Current Market Price:     {format_price(price)}")
    print(f"  Upside/(Downside):        {format_percent(upside)}")


def print_warnings(warnings):
    if not warnings:
        return
    print_subheader("Warnings")
    for warning in warnings:
        message = getattr(warning, "message", warning)
        print(f"  - {message}")


def print_matrix(matrix, row_label, column_label):
    """Print a sensitivity matrix; undefined cells show as N/A."""
    print_subheader(f"Sensitivity: {row_label} (rows) x {column_label} (columns)")
    header = f"  {'':>10}" + "".join(f"{format_percent(c, 1):>10}" for c in matrix.column_values)
    print(header)
    for index, (row_value, row) in enumerate(zip(matrix.row_values, matrix.values)):
        marker = "*" if index == matrix.base_row_idx else " "
        cells = "".join(
            f"{format_price(v) if v is not None else 'N/A':>10}" for v in row
        )
        print(f" {marker}{format_percent(row_value, 1):>10}{cells}")


# =============================================================================
# MODEL SECTIONS
# =============================================================================

def run_dcf(financials: CompanyFinancials, show_sensitivity: bool):
    print_header("DCF VALUATION")

    latest_cash_flow = latest(financials.cash_flow_statement)
    growth = calculate_revenue_growth_rate(financials.income_statement)
    rates = generate_growth_pattern(ScenarioType.BASE, 5)

    print(f"  Base FCF:                 {format_currency(latest_cash_flow.free_cash_flow)}")
    print(f"  Latest Revenue Growth:    {format_percent(growth.rate)}"
          f"{' (default)' if growth.used_default else ''}")
    print(f"  Growth Pattern:           {describe_growth_pattern(rates)}")

    inputs = DCFInputs(
        base_fcf=latest_cash_flow.free_cash_flow,
        fcf_growth_rates=rates,
        terminal_growth_rate=0.025,
        discount_rate=0.085,
        shares_outstanding=financials.shares_outstanding,
        current_price=financials.current_price,
    )
    result = run_calculator(CalculatorKind.DCF, inputs)

    print_subheader("Projected Free Cash Flows")
    print(f"  {'Year':<6} {'FCF':>14} {'Growth':>10} {'Discount':>10} {'PV':>14}")
    print_line("-", 60)
    for p in result.projections:
        print(f"  {p.year:<6} {format_currency(p.free_cash_flow):>14} {format_percent(p.growth_rate):>10} "
              f"{p.discount_factor:>10.4f} {format_currency(p.present_value):>14}")

    print_subheader("Valuation")
    print(f"  Sum of PV (FCF):          {format_currency(result.sum_of_pv_fcf)}")
    print(f"  PV of Terminal Value:     {format_currency(result.terminal_value_pv)}")
    print(f"  Terminal Value % of Total:{format_percent(result.terminal_value_pct):>9}")
    print(f"  Intrinsic Value/Share:    {format_price(result.intrinsic_value_per_share)}")
    print_market_comparison(result.current_price, result.upside_downside_pct)
    print_warnings(result.warnings)

    if show_sensitivity:
        sensitivity = get_calculator(CalculatorKind.DCF).sensitivity(inputs)
        print_matrix(sensitivity.matrix, "terminal growth", "discount rate")


def run_ddm(financials: CompanyFinancials, show_sensitivity: bool):
    print_header("DDM VALUATION")

    latest_cash_flow = latest(financials.cash_flow_statement)
    dividend = abs(latest_cash_flow.dividends_paid) / financials.shares_outstanding
    print(f"  Dividend per Share:       {format_price(dividend)}")

    base = DDMInputs(
        current_dividend=dividend,
        shares_outstanding=financials.shares_outstanding,
        required_return=0.08,
        gordon_growth_rate=0.04,
        high_growth_rate=0.07,
        high_growth_years=5,
        stable_growth_rate=0.03,
        growth_phases=(
            GrowthPhase(0.08, 3, "Expansion"),
            GrowthPhase(0.05, 4, "Transition"),
            GrowthPhase(0.03, 0, "Mature"),
        ),
        current_price=financials.current_price,
    )

    print_subheader("Model Variants")
    print(f"  {'Model':<14} {'Value/Share':>12} {'Fwd Yield':>10} {'Upside':>10}")
    print_line("-", 50)
    for model_type in DDMModelType:
        inputs = dataclasses.replace(base, model_type=model_type)
        result = run_calculator(CalculatorKind.DDM, inputs)
        print(f"  {model_type.value:<14} {format_price(result.intrinsic_value_per_share):>12} "
              f"{format_percent(result.forward_dividend_yield):>10} "
              f"{format_percent(result.upside_downside_pct):>10}")

    if show_sensitivity:
        sensitivity = get_calculator(CalculatorKind.DDM).sensitivity(base)
        print_matrix(sensitivity.matrix, "growth", "required return")


def run_epv(financials: CompanyFinancials, show_sensitivity: bool):
    print_header("EPV VALUATION")

    earnings = [
        HistoricalEarnings(
            year=year,
            net_income=net,
            operating_income=operating,
            revenue=revenue,
            date=f"{year}-12-31",
        )
        for year, (revenue, operating, net) in SAMPLE_YEARS.items()
    ]
    inputs = EPVInputs(
        historical_earnings=earnings,
        shares_outstanding=financials.shares_outstanding,
        symbol=financials.symbol,
        maintenance_capex=MaintenanceCapexInputs.from_financials(financials),
        financials=financials,
        current_price=financials.current_price,
    )
    result = run_calculator(CalculatorKind.EPV, inputs)
    normalization = result.earnings_normalization

    print_subheader("Earnings Normalization")
    print(f"  Normalized Earnings:      {format_currency(result.normalized_earnings)}")
    print(f"  Volatility:               {normalization.volatility:.3f}")
    print(f"  Trend:                    {normalization.trend.value.upper()}")
    print(f"  Quality Score:            {normalization.quality_score:.0f}/100")

    print_subheader("Earnings Power")
    print(f"  Maintenance Capex:        {format_currency(result.maintenance_capex)}")
    print(f"  Adjusted Earnings:        {format_currency(result.adjusted_earnings)}")
    print(f"  Cost of Capital:          {format_percent(result.cost_of_capital)}")
    print(f"  EPV per Share:            {format_price(result.epv_per_share)}")
    print_market_comparison(result.current_price, result.upside)

    print_subheader("Moat and Confidence")
    moat = result.moat_analysis
    sources = ", ".join(s.value for s in moat.moat_sources) or "none identified"
    print(f"  Moat:                     {moat.moat_strength.value.upper()} ({sources})")
    if result.roic_analysis is not None:
        print(f"  Average ROIC:             {format_percent(result.roic_analysis.average_roic)}")
        print(f"  ROIC Consistency:         {result.roic_analysis.consistency:.2f}")
    print(f"  Confidence:               {result.confidence_level.value.upper()}")
    print_warnings(result.warnings)

    if show_sensitivity:
        sensitivity = get_calculator(CalculatorKind.EPV).sensitivity(result)
        print_matrix(sensitivity.matrix, "earnings change", "cost of capital")


def run_nav(financials: CompanyFinancials, show_sensitivity: bool):
    print_header("NAV VALUATION")

    balance_sheet = latest(financials.balance_sheet)
    inputs = NAVInputs(
        balance_sheet=balance_sheet,
        shares_outstanding=financials.shares_outstanding,
        asset_adjustments=(
            AssetAdjustment(
                AssetCategory.PROPERTY_PLANT_EQUIPMENT,
                "Distribution centers at appraised value",
                book_value=8.0e9,
                adjusted_value=11.0e9,
                reason="Third-party appraisal",
            ),
            AssetAdjustment(
                AssetCategory.INVENTORY,
                "Slow-moving stock",
                book_value=1.5e9,
                adjusted_value=1.0e9,
            ),
        ),
        liability_adjustments=(
            LiabilityAdjustment(
                LiabilityCategory.PENSION_OBLIGATIONS,
                "Unfunded pension",
                book_value=0.0,
                adjusted_value=0.8e9,
            ),
        ),
        current_price=financials.current_price,
    )
    result = run_calculator(CalculatorKind.NAV, inputs)

    print_subheader("Book vs Adjusted")
    print(f"  Book NAV:                 {format_currency(result.book_value_nav)}")
    print(f"  Adjusted NAV:             {format_currency(result.adjusted_nav)}")
    print(f"  NAV per Share:            {format_price(result.nav_per_share)}")
    print_market_comparison(result.current_price, result.upside_downside_pct)

    print_subheader("Asset Quality")
    quality = result.asset_quality
    print(f"  Score:                    {quality.overall_score:.1f} ({quality.score_category.value})")
    print(f"  Intangible Ratio:         {format_percent(quality.intangible_asset_ratio)}")
    print(f"  Confidence:               {result.confidence_level.value.upper()}")

    print_subheader("Liquidation Scenarios")
    for scenario in result.liquidation_analysis:
        print(f"  {scenario.scenario.value:<10} {scenario.time_frame:<14} "
              f"{format_price(scenario.liquidation_value_per_share):>10} per share")
    print_warnings(result.warnings)

    if show_sensitivity:
        sensitivity = get_calculator(CalculatorKind.NAV).sensitivity(inputs)
        impact = sensitivity.intangible_sensitivity
        print_subheader("Intangible Sensitivity")
        print(f"  With Intangibles:         {format_price(impact.with_intangibles)}")
        print(f"  Without Intangibles:      {format_price(impact.without_intangibles)}")


SECTIONS = {
    "dcf": run_dcf,
    "ddm": run_ddm,
    "epv": run_epv,
    "nav": run_nav,
}


# =============================================================================
# MAIN
# =============================================================================

def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Valuation Engine - DCF, DDM, EPV and NAV calculators"
    )
    parser.add_argument(
        "--model",
        choices=["all"] + list(SECTIONS),
        default="all",
        help="Calculator to run (default: all)"
    )
    parser.add_argument(
        "--no-sensitivity",
        action="store_true",
        help="Skip sensitivity analysis"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress engine log output"
    )
    args = parser.parse_args()

    if args.quiet:
        LOGGER.setLevel(logging.WARNING)

    financials = build_sample_financials()
    print_banner(financials)

    models = list(SECTIONS) if args.model == "all" else [args.model]
    for model in models:
        try:
            SECTIONS[model](financials, not args.no_sensitivity)
        except ValuationError as exc:
            print(f"\n  {model.upper()} failed: {exc.message}")
            return 1

    print()
    print_line()
    print("  Done.")
    print_line()
    return 0


if __name__ == "__main__":
    sys.exit(main())
