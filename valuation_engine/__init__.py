"""
Valuation Engine - Intrinsic Value Calculators
==============================================

Pure, stateless financial mathematics that turns historical financial
statements into per-share intrinsic values.

Validation Layer
- Per-model input sanity checks (blocking errors, non-blocking warnings)

ROIC / WACC Analysis
- Per-period NOPAT, invested capital and ROIC
- CAPM cost of equity and WACC
- Trend, consistency and ROIC - WACC moat classification

Moat Analysis
- Brand, scale, switching-cost and patent signals from margin patterns
- Moat sustainability and competitive pressure

Dividend Discount Model
- Gordon growth, zero growth, two-stage and multi-stage variants
- Year-by-year dividend projections

Earnings Power Value
- Earnings normalization and quality scoring
- Maintenance capex, cost of capital, moat-aware confidence

Discounted Cash Flow / Net Asset Value
- Explicit-growth FCF projection with Gordon terminal value
- Adjusted book value, asset quality and liquidation scenarios

Sensitivity Analysis
- Growth x discount matrices with a None sentinel for undefined cells

Version: 1.0.0
"""

from .config import (
    LOGGER,
    setup_logger,
    MIN_DENOMINATOR,
    VALIDATION_CONFIG,
    ROIC_CONFIG,
    MOAT_THRESHOLDS,
    EPV_CONFIG,
    TrendDirection,
    MoatStrength,
    MoatSource,
    MoatSustainability,
    CompetitivePressure,
    BusinessStability,
    CompetitivePosition,
    EarningsQuality,
    ConfidenceLevel,
    WarningSeverity,
    DDMModelType,
    NormalizationMethod,
    CostOfCapitalMethod,
    LiquidationScenario,
)

from .exceptions import (
    ValuationError,
    ValidationError,
    DomainError,
    DataQualityWarning,
)

from .financials import (
    IncomeStatement,
    BalanceSheet,
    CashFlowStatement,
    CompanyFinancials,
    GrowthRateEstimate,
    sort_by_date,
    latest,
    statements_to_frame,
    calculate_growth_rate,
    calculate_revenue_growth_rate,
    has_dividends,
)

from .input_validator import (
    ValidationResult,
    validate_ddm_inputs,
    validate_epv_inputs,
    validate_dcf_inputs,
    validate_nav_inputs,
)

from .roic_analyzer import (
    WACCInputs,
    ROICResult,
    ROICAnalysis,
    calculate_nopat,
    calculate_invested_capital,
    calculate_roic,
    calculate_wacc,
    analyze_roic,
    get_default_wacc_inputs,
)

from .moat_analyzer import (
    MoatAnalysisInputs,
    MoatAnalysis,
    infer_moat_inputs_from_financials,
    analyze_moat,
    calculate_moat_from_financials,
    get_default_moat_analysis,
)

from .ddm_valuator import (
    GrowthPhase,
    DDMInputs,
    DividendProjection,
    DDMResult,
    DividendRecord,
    calculate_ddm,
    calculate_implied_growth_rate,
    calculate_historical_dividend_growth,
)

from .epv_valuator import (
    AdjustmentCategory,
    MaintenanceCapexMethod,
    HistoricalEarnings,
    EarningsAdjustment,
    MaintenanceCapexInputs,
    CostOfCapitalComponents,
    EPVInputs,
    EarningsNormalization,
    MaintenanceCapexAnalysis,
    EPVResult,
    calculate_epv_intrinsic_value,
)

from .dcf_valuator import (
    ScenarioType,
    GrowthDistribution,
    DCFInputs,
    FCFProjection,
    DCFResult,
    calculate_present_value,
    calculate_terminal_value,
    project_free_cash_flows,
    generate_decay_pattern,
    generate_growth_pattern,
    calculate_dcf_intrinsic_value,
)

from .nav_valuator import (
    AssetCategory,
    LiabilityCategory,
    AssetAdjustment,
    LiabilityAdjustment,
    NAVInputs,
    NAVResult,
    calculate_book_value_nav,
    calculate_nav,
)

from .sensitivity_analyzer import (
    SensitivityPoint,
    SensitivityMatrix,
    DDMSensitivity,
    DCFSensitivity,
    EPVSensitivity,
    NAVSensitivity,
    calculate_ddm_sensitivity,
    calculate_dcf_sensitivity,
    calculate_epv_sensitivity,
    calculate_nav_sensitivity,
)

from .calculator_registry import (
    CalculatorKind,
    CalculatorSpec,
    CALCULATOR_REGISTRY,
    get_calculator,
    run_calculator,
)

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "LOGGER",
    "setup_logger",
    "MIN_DENOMINATOR",
    "VALIDATION_CONFIG",
    "ROIC_CONFIG",
    "MOAT_THRESHOLDS",
    "EPV_CONFIG",

    # Enums
    "TrendDirection",
    "MoatStrength",
    "MoatSource",
    "MoatSustainability",
    "CompetitivePressure",
    "BusinessStability",
    "CompetitivePosition",
    "EarningsQuality",
    "ConfidenceLevel",
    "WarningSeverity",
    "DDMModelType",
    "NormalizationMethod",
    "CostOfCapitalMethod",
    "LiquidationScenario",
    "AdjustmentCategory",
    "MaintenanceCapexMethod",
    "ScenarioType",
    "GrowthDistribution",
    "AssetCategory",
    "LiabilityCategory",
    "CalculatorKind",

    # Errors
    "ValuationError",
    "ValidationError",
    "DomainError",
    "DataQualityWarning",

    # Financial statements
    "IncomeStatement",
    "BalanceSheet",
    "CashFlowStatement",
    "CompanyFinancials",
    "GrowthRateEstimate",
    "sort_by_date",
    "latest",
    "statements_to_frame",
    "calculate_growth_rate",
    "calculate_revenue_growth_rate",
    "has_dividends",

    # Validation
    "ValidationResult",
    "validate_ddm_inputs",
    "validate_epv_inputs",
    "validate_dcf_inputs",
    "validate_nav_inputs",

    # ROIC / WACC
    "WACCInputs",
    "ROICResult",
    "ROICAnalysis",
    "calculate_nopat",
    "calculate_invested_capital",
    "calculate_roic",
    "calculate_wacc",
    "analyze_roic",
    "get_default_wacc_inputs",

    # Moat
    "MoatAnalysisInputs",
    "MoatAnalysis",
    "infer_moat_inputs_from_financials",
    "analyze_moat",
    "calculate_moat_from_financials",
    "get_default_moat_analysis",

    # DDM
    "GrowthPhase",
    "DDMInputs",
    "DividendProjection",
    "DDMResult",
    "DividendRecord",
    "calculate_ddm",
    "calculate_implied_growth_rate",
    "calculate_historical_dividend_growth",

    # EPV
    "HistoricalEarnings",
    "EarningsAdjustment",
    "MaintenanceCapexInputs",
    "CostOfCapitalComponents",
    "EPVInputs",
    "EarningsNormalization",
    "MaintenanceCapexAnalysis",
    "EPVResult",
    "calculate_epv_intrinsic_value",

    # DCF
    "DCFInputs",
    "FCFProjection",
    "DCFResult",
    "calculate_present_value",
    "calculate_terminal_value",
    "project_free_cash_flows",
    "generate_decay_pattern",
    "generate_growth_pattern",
    "calculate_dcf_intrinsic_value",

    # NAV
    "AssetAdjustment",
    "LiabilityAdjustment",
    "NAVInputs",
    "NAVResult",
    "calculate_book_value_nav",
    "calculate_nav",

    # Sensitivity
    "SensitivityPoint",
    "SensitivityMatrix",
    "DDMSensitivity",
    "DCFSensitivity",
    "EPVSensitivity",
    "NAVSensitivity",
    "calculate_ddm_sensitivity",
    "calculate_dcf_sensitivity",
    "calculate_epv_sensitivity",
    "calculate_nav_sensitivity",

    # Registry
    "CalculatorSpec",
    "CALCULATOR_REGISTRY",
    "get_calculator",
    "run_calculator",

    # Version
    "__version__",
]
