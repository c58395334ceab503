"""
Financial Statement Records - Inputs Shared by Every Calculator
Valuation Calculation Engine

Plain records for the historical income statements, balance sheets and cash
flow statements supplied by the data layer, together with the ordering and
growth helpers the analyzers build on.

Callers may supply statements in any order: every consumer re-derives the
newest-first ordering from the statement date.

Version: 1.0.0
"""

from __future__ import annotations

import math
import pandas as pd
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any, Sequence, TypeVar

from .config import LOGGER
from .exceptions import DomainError


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

class GrowthHelperConfig:
    """Fallback policy for the revenue growth helper."""

    DEFAULT_REVENUE_GROWTH: float = 0.10
    MIN_REVENUE_GROWTH: float = -0.5
    MAX_REVENUE_GROWTH: float = 1.0
    ROUNDING_DECIMALS: int = 4


# =============================================================================
# DATA CONTAINERS - STATEMENTS
# =============================================================================

@dataclass(frozen=True)
class IncomeStatement:
    """Single-period income statement."""

    date: str
    revenue: float
    net_income: float
    operating_income: Optional[float] = None
    gross_profit: Optional[float] = None
    gross_margin: Optional[float] = None
    selling_general_and_administrative: Optional[float] = None
    research_and_development: Optional[float] = None
    income_tax_expense: Optional[float] = None
    effective_tax_rate: Optional[float] = None
    interest_expense: Optional[float] = None
    depreciation_and_amortization: Optional[float] = None
    eps: Optional[float] = None
    shares_outstanding: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BalanceSheet:
    """Single-period balance sheet."""

    date: str
    total_assets: float
    total_liabilities: float
    total_equity: Optional[float] = None

    # Assets
    cash: Optional[float] = None
    cash_and_equivalents: Optional[float] = None
    marketable_securities: Optional[float] = None
    accounts_receivable: Optional[float] = None
    inventory: Optional[float] = None
    prepaid_expenses: Optional[float] = None
    property_plant_equipment: Optional[float] = None
    intangible_assets: Optional[float] = None
    goodwill: Optional[float] = None
    investments: Optional[float] = None

    # Liabilities
    current_liabilities: Optional[float] = None
    accounts_payable: Optional[float] = None
    accrued_expenses: Optional[float] = None
    short_term_debt: Optional[float] = None
    long_term_debt: Optional[float] = None
    pension_obligations: Optional[float] = None
    deferred_tax_liabilities: Optional[float] = None
    deferred_revenue: Optional[float] = None

    # Pre-computed invested capital, when the data source provides it
    invested_capital: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CashFlowStatement:
    """Single-period cash flow statement."""

    date: str
    operating_cash_flow: float = 0.0
    capital_expenditure: float = 0.0
    free_cash_flow: float = 0.0
    dividends_paid: float = 0.0
    depreciation: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CompanyFinancials:
    """Historical statements for one company."""

    symbol: str = ""
    name: str = ""
    income_statement: List[IncomeStatement] = field(default_factory=list)
    balance_sheet: List[BalanceSheet] = field(default_factory=list)
    cash_flow_statement: List[CashFlowStatement] = field(default_factory=list)
    current_price: Optional[float] = None
    shares_outstanding: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "income_statement": [s.to_dict() for s in self.income_statement],
            "balance_sheet": [s.to_dict() for s in self.balance_sheet],
            "cash_flow_statement": [s.to_dict() for s in self.cash_flow_statement],
            "current_price": self.current_price,
            "shares_outstanding": self.shares_outstanding,
        }


@dataclass(frozen=True)
class GrowthRateEstimate:
    """Growth rate with an explicit marker for the fallback value."""

    rate: float
    used_default: bool = False
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rate": self.rate,
            "used_default": self.used_default,
            "reason": self.reason,
        }


# =============================================================================
# DATE ORDERING
# =============================================================================

Dated = TypeVar("Dated")


def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """Parse a statement date; unparseable values return None."""
    if value is None:
        return None
    timestamp = pd.to_datetime(value, errors="coerce")
    if pd.isna(timestamp):
        return None
    return timestamp


def sort_by_date(records: Sequence[Dated]) -> List[Dated]:
    """
    Return records ordered newest first.

    Records sharing a date keep their relative order; records with an
    unparseable date are placed last.
    """
    dated = []
    undated = []
    for record in records:
        timestamp = parse_date(getattr(record, "date", None))
        if timestamp is None:
            undated.append(record)
        else:
            dated.append((timestamp, record))

    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [record for _, record in dated] + undated


def latest(records: Sequence[Dated]) -> Optional[Dated]:
    """Most recent record, or None for an empty sequence."""
    ordered = sort_by_date(records)
    return ordered[0] if ordered else None


def statements_to_frame(records: Sequence[Any]) -> pd.DataFrame:
    """Statements as a DataFrame, newest first, one row per period."""
    ordered = sort_by_date(records)
    if not ordered:
        return pd.DataFrame()
    frame = pd.DataFrame([asdict(record) for record in ordered])
    return frame.reset_index(drop=True)


# =============================================================================
# GROWTH HELPERS
# =============================================================================

def calculate_growth_rate(first_value: float, last_value: float, years: float) -> float:
    """Compound annual growth rate between two positive values."""
    if years <= 0:
        raise DomainError("Growth period must be positive", {"years": years})
    if first_value <= 0 or last_value <= 0:
        raise DomainError(
            "CAGR requires positive start and end values",
            {"first_value": first_value, "last_value": last_value},
        )
    return (last_value / first_value) ** (1 / years) - 1


def calculate_revenue_growth_rate(
    income_statements: Sequence[IncomeStatement],
) -> GrowthRateEstimate:
    """
    Year-over-year revenue growth between the two most recent statements.

    Falls back to a 10% growth assumption when the history is too short,
    revenue is not positive or the dates are not strictly ordered. The
    fallback is intentional and flagged through ``used_default``.
    """
    default = GrowthHelperConfig.DEFAULT_REVENUE_GROWTH

    if len(income_statements) < 2:
        return GrowthRateEstimate(default, True, "Fewer than 2 income statements")

    ordered = sort_by_date(income_statements)
    current, previous = ordered[0], ordered[1]

    current_revenue = current.revenue or 0
    previous_revenue = previous.revenue or 0
    if not (math.isfinite(current_revenue) and math.isfinite(previous_revenue)):
        return GrowthRateEstimate(default, True, "Non-finite revenue")
    if current_revenue <= 0 or previous_revenue <= 0:
        return GrowthRateEstimate(default, True, "Non-positive revenue")

    current_date = parse_date(current.date)
    previous_date = parse_date(previous.date)
    if current_date is None or previous_date is None or current_date <= previous_date:
        return GrowthRateEstimate(default, True, "Statement dates are missing or out of order")

    growth = (current_revenue - previous_revenue) / previous_revenue
    rounded = round(growth, GrowthHelperConfig.ROUNDING_DECIMALS)
    capped = max(
        GrowthHelperConfig.MIN_REVENUE_GROWTH,
        min(GrowthHelperConfig.MAX_REVENUE_GROWTH, rounded),
    )

    if capped != rounded:
        LOGGER.debug(f"Revenue growth {rounded:.2%} capped to {capped:.2%}")

    return GrowthRateEstimate(capped, False, "")


def has_dividends(cash_flows: Sequence[CashFlowStatement]) -> bool:
    """True if any period reports a dividend payment."""
    return any(cf.dividends_paid for cf in cash_flows)
