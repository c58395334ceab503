"""
ROIC Analysis Module - Return on Invested Capital and Cost of Capital
Valuation Calculation Engine

Measures how efficiently a company turns invested capital into operating
profit and compares that return with its cost of capital.

Methodology:
    NOPAT = Operating Income * (1 - Tax Rate)
    Invested Capital = Total Assets - Cash - Current Liabilities + Short-term Debt
    ROIC = NOPAT / Invested Capital
    WACC = E/V * (Rf + Beta * MRP) + D/V * Rd * (1 - Tc)

Key Components:
    - Per-period ROIC with a tax-rate fallback chain
    - Historical aggregation: mean, median, trend and consistency
    - Moat classification from the ROIC - WACC spread, or from absolute
      ROIC levels when no WACC is supplied

Inputs: CompanyFinancials (income statements matched to balance sheets by date)
Outputs: ROICAnalysis

Version: 1.0.0
"""

from __future__ import annotations

import math
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from .config import (
    LOGGER,
    MIN_DENOMINATOR,
    ROIC_CONFIG,
    MoatStrength,
    TrendDirection,
)
from .exceptions import DomainError
from .financials import (
    BalanceSheet,
    CompanyFinancials,
    IncomeStatement,
    parse_date,
    sort_by_date,
)


__version__ = "1.0.0"


# =============================================================================
# DATA CONTAINERS
# =============================================================================

@dataclass(frozen=True)
class WACCInputs:
    """Capital-market assumptions for a WACC estimate."""

    risk_free_rate: float
    market_risk_premium: float
    beta: float
    cost_of_debt: float
    tax_rate: float
    debt_to_equity: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk_free_rate": self.risk_free_rate,
            "market_risk_premium": self.market_risk_premium,
            "beta": self.beta,
            "cost_of_debt": self.cost_of_debt,
            "tax_rate": self.tax_rate,
            "debt_to_equity": self.debt_to_equity,
        }


@dataclass
class ROICResult:
    """ROIC for a single reporting period."""

    roic: float
    nopat: float
    invested_capital: float
    year: str
    tax_rate: float = ROIC_CONFIG.default_tax_rate
    wacc: Optional[float] = None
    spread: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roic": self.roic,
            "nopat": self.nopat,
            "invested_capital": self.invested_capital,
            "year": self.year,
            "tax_rate": self.tax_rate,
            "wacc": self.wacc,
            "spread": self.spread,
        }


@dataclass
class ROICAnalysis:
    """Historical ROIC aggregation and moat classification."""

    historical_roic: List[ROICResult] = field(default_factory=list)
    average_roic: float = 0.0
    median_roic: float = 0.0
    trend: TrendDirection = TrendDirection.STABLE
    consistency: float = 0.0
    moat_classification: MoatStrength = MoatStrength.NONE
    current_wacc: Optional[float] = None
    average_spread: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "historical_roic": [r.to_dict() for r in self.historical_roic],
            "average_roic": self.average_roic,
            "median_roic": self.median_roic,
            "trend": self.trend.value,
            "consistency": self.consistency,
            "moat_classification": self.moat_classification.value,
            "current_wacc": self.current_wacc,
            "average_spread": self.average_spread,
        }


# =============================================================================
# PRIMITIVES
# =============================================================================

def calculate_nopat(operating_income: float, tax_rate: float) -> float:
    """NOPAT = Operating Income * (1 - Tax Rate)."""
    return operating_income * (1 - tax_rate)


def calculate_invested_capital(
    total_assets: float,
    cash: float,
    current_liabilities: float,
    short_term_debt: float,
) -> float:
    """Invested Capital = Total Assets - Cash - Current Liabilities + Short-term Debt."""
    return total_assets - cash - current_liabilities + short_term_debt


# =============================================================================
# ROIC CALCULATOR
# =============================================================================

class ROICCalculator:
    """
    Calculates ROIC for one income statement / balance sheet pair.

    Tax rate resolution:
        1. Reported effective tax rate
        2. Income tax expense / operating income, capped at 40%
        3. 21% statutory default
    """

    def calculate(
        self,
        income_statement: IncomeStatement,
        balance_sheet: BalanceSheet,
    ) -> Optional[ROICResult]:
        """ROIC for the period, or None when it is not meaningful."""
        operating_income = income_statement.operating_income
        if not operating_income:
            return None

        tax_rate = self._resolve_tax_rate(income_statement)
        nopat = calculate_nopat(operating_income, tax_rate)

        if balance_sheet.invested_capital:
            invested_capital = balance_sheet.invested_capital
        else:
            invested_capital = calculate_invested_capital(
                balance_sheet.total_assets,
                balance_sheet.cash or balance_sheet.cash_and_equivalents or 0,
                balance_sheet.current_liabilities or 0,
                balance_sheet.short_term_debt or 0,
            )

        # Non-positive capital makes the ratio meaningless; the period is skipped
        if invested_capital <= MIN_DENOMINATOR:
            return None

        return ROICResult(
            roic=nopat / invested_capital,
            nopat=nopat,
            invested_capital=invested_capital,
            year=income_statement.date,
            tax_rate=tax_rate,
        )

    def _resolve_tax_rate(self, income_statement: IncomeStatement) -> float:
        if income_statement.effective_tax_rate is not None:
            return income_statement.effective_tax_rate
        if income_statement.income_tax_expense and income_statement.operating_income:
            estimated = income_statement.income_tax_expense / income_statement.operating_income
            return min(estimated, ROIC_CONFIG.max_estimated_tax_rate)
        return ROIC_CONFIG.default_tax_rate


# =============================================================================
# WACC CALCULATOR
# =============================================================================

class WACCCalculator:
    """WACC from CAPM cost of equity and after-tax cost of debt."""

    def cost_of_equity(self, inputs: WACCInputs) -> float:
        """CAPM: Rf + Beta * MRP."""
        return inputs.risk_free_rate + inputs.beta * inputs.market_risk_premium

    def calculate(self, inputs: WACCInputs) -> float:
        total_capital = 1 + inputs.debt_to_equity
        if abs(total_capital) < MIN_DENOMINATOR:
            raise DomainError(
                "Debt-to-equity of -1 leaves no capital to weight",
                {"debt_to_equity": inputs.debt_to_equity},
            )

        debt_weight = inputs.debt_to_equity / total_capital
        equity_weight = 1 / total_capital
        after_tax_cost_of_debt = inputs.cost_of_debt * (1 - inputs.tax_rate)

        return equity_weight * self.cost_of_equity(inputs) + debt_weight * after_tax_cost_of_debt


# =============================================================================
# HISTORICAL ROIC ANALYZER
# =============================================================================

class ROICAnalyzer:
    """
    Aggregates per-period ROIC into trend, consistency and moat signals.

    Periods are matched by statement date and reported newest first.
    Periods without operating income or with non-positive invested
    capital are skipped, never zero-filled.
    """

    def __init__(self):
        self.roic_calculator = ROICCalculator()
        self.wacc_calculator = WACCCalculator()

    def analyze(
        self,
        financials: CompanyFinancials,
        wacc_inputs: Optional[WACCInputs] = None,
    ) -> ROICAnalysis:
        wacc = self.wacc_calculator.calculate(wacc_inputs) if wacc_inputs else None
        historical = self._historical_roic(financials, wacc)

        if not historical:
            LOGGER.debug(f"No ROIC periods available for {financials.symbol or 'company'}")
            return ROICAnalysis()

        values = np.array([r.roic for r in historical], dtype=float)
        average_roic = float(np.mean(values))
        median_roic = float(np.median(values))
        consistency = self._calculate_consistency(values)
        trend = self._classify_trend(values)

        average_spread = None
        if wacc is not None:
            average_spread = float(np.mean([r.spread for r in historical]))

        moat = self._classify_moat(average_roic, consistency, wacc, average_spread)

        return ROICAnalysis(
            historical_roic=historical,
            average_roic=average_roic,
            median_roic=median_roic,
            trend=trend,
            consistency=consistency,
            moat_classification=moat,
            current_wacc=wacc,
            average_spread=average_spread,
        )

    def _historical_roic(
        self,
        financials: CompanyFinancials,
        wacc: Optional[float],
    ) -> List[ROICResult]:
        balances = {}
        for balance in financials.balance_sheet:
            key = parse_date(balance.date)
            if key is not None and key not in balances:
                balances[key] = balance

        results = []
        for income in sort_by_date(financials.income_statement):
            balance = balances.get(parse_date(income.date))
            if balance is None:
                continue
            result = self.roic_calculator.calculate(income, balance)
            if result is None:
                continue
            if wacc is not None:
                result.wacc = wacc
                result.spread = result.roic - wacc
            results.append(result)
        return results

    def _calculate_consistency(self, values: np.ndarray) -> float:
        """1 - coefficient of variation, floored at 0; identical values score 1."""
        if values.max() == values.min():
            return 1.0
        mean = float(np.mean(values))
        if abs(mean) < MIN_DENOMINATOR:
            return 0.0
        std = float(np.std(values))
        consistency = max(0.0, 1 - std / abs(mean))
        if not math.isfinite(consistency):
            return 0.0
        return min(consistency, 1.0)

    def _classify_trend(self, values: np.ndarray) -> TrendDirection:
        """Recent half average vs older half average, newest values first."""
        if len(values) < ROIC_CONFIG.min_periods_for_trend:
            return TrendDirection.STABLE

        split = math.ceil(len(values) / 2)
        recent_avg = float(np.mean(values[:split]))
        older_avg = float(np.mean(values[split:]))
        threshold = ROIC_CONFIG.trend_threshold

        if recent_avg > older_avg * (1 + threshold):
            return TrendDirection.IMPROVING
        if recent_avg < older_avg * (1 - threshold):
            return TrendDirection.DECLINING
        return TrendDirection.STABLE

    def _classify_moat(
        self,
        average_roic: float,
        consistency: float,
        wacc: Optional[float],
        average_spread: Optional[float],
    ) -> MoatStrength:
        config = ROIC_CONFIG

        if wacc is not None and average_spread is not None:
            if average_spread > config.wide_moat_spread and consistency > config.wide_moat_consistency:
                return MoatStrength.WIDE
            if average_spread > config.narrow_moat_spread and consistency > config.narrow_moat_consistency:
                return MoatStrength.NARROW
            return MoatStrength.NONE

        if average_roic > config.wide_moat_roic and consistency > config.wide_moat_consistency:
            return MoatStrength.WIDE
        if average_roic > config.narrow_moat_roic and consistency > config.narrow_moat_consistency:
            return MoatStrength.NARROW
        return MoatStrength.NONE


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def calculate_roic(
    income_statement: IncomeStatement,
    balance_sheet: BalanceSheet,
) -> Optional[ROICResult]:
    """ROIC for a single period, or None when not meaningful."""
    return ROICCalculator().calculate(income_statement, balance_sheet)


def calculate_wacc(inputs: WACCInputs) -> float:
    """Weighted average cost of capital."""
    return WACCCalculator().calculate(inputs)


def analyze_roic(
    financials: CompanyFinancials,
    wacc_inputs: Optional[WACCInputs] = None,
) -> ROICAnalysis:
    """Historical ROIC analysis with optional ROIC - WACC spread."""
    return ROICAnalyzer().analyze(financials, wacc_inputs)


def get_default_wacc_inputs(debt_to_equity: Optional[float] = None) -> WACCInputs:
    """Market-average assumptions, with optional company leverage."""
    config = ROIC_CONFIG
    return WACCInputs(
        risk_free_rate=config.default_risk_free_rate,
        market_risk_premium=config.default_market_risk_premium,
        beta=config.default_beta,
        cost_of_debt=config.default_cost_of_debt,
        tax_rate=config.default_tax_rate,
        debt_to_equity=debt_to_equity if debt_to_equity else config.default_debt_to_equity,
    )


__all__ = [
    "WACCInputs",
    "ROICResult",
    "ROICAnalysis",
    "ROICCalculator",
    "WACCCalculator",
    "ROICAnalyzer",
    "calculate_nopat",
    "calculate_invested_capital",
    "calculate_roic",
    "calculate_wacc",
    "analyze_roic",
    "get_default_wacc_inputs",
]
