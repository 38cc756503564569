"""
Wholesale Comp & ARV Engine - Core Valuation Logic

Pipeline:
1. Comp scoring (weighted feature scorers)
2. Comp validation and admissibility filtering
3. Wholesaling-weighted ARV
4. Condition-based repair cost estimation
5. Market analytics (micro-market health, historical trends)
6. Deal tracking, performance aggregation and recommendations
"""

from .errors import (
    EmptyCompSetError,
    InvalidDealInput,
    InvalidStatusTransition,
    ValuationError,
)

from .comp_engine import (
    ARVCalculator,
    ARVResult,
    CompFilter,
    CompQualityMetrics,
    CompScore,
    CompScoringEngine,
    CompValidator,
    Condition,
    DomTrend,
    InventoryLevel,
    MarketCondition,
    PaymentMethod,
    Property,
    ScoreBreakdown,
    TransactionType,
    ValidationResult,
)

from .repair import (
    NeutralPhotoAssessor,
    PhotoRepairAssessor,
    RepairAdjustment,
    RepairCostEstimator,
    RepairEstimate,
    RepairMethod,
)

from .market import (
    CyclePhase,
    LocationAnalysis,
    MarketTrend,
    MarketTrendAnalyzer,
    MicroMarketAnalyzer,
    MicroMarketData,
    TrendDirection,
)

from .performance import (
    DealPerformance,
    DealPerformanceTracker,
    DealStatus,
    PerformanceAggregator,
    PerformanceMetrics,
    RecommendationEngine,
)

from .deal_analyzer import DealAnalysis, DealAnalyzer

__all__ = [
    # Errors
    "EmptyCompSetError",
    "InvalidDealInput",
    "InvalidStatusTransition",
    "ValuationError",
    # Comp Engine
    "ARVCalculator",
    "ARVResult",
    "CompFilter",
    "CompQualityMetrics",
    "CompScore",
    "CompScoringEngine",
    "CompValidator",
    "Condition",
    "DomTrend",
    "InventoryLevel",
    "MarketCondition",
    "PaymentMethod",
    "Property",
    "ScoreBreakdown",
    "TransactionType",
    "ValidationResult",
    # Repair
    "NeutralPhotoAssessor",
    "PhotoRepairAssessor",
    "RepairAdjustment",
    "RepairCostEstimator",
    "RepairEstimate",
    "RepairMethod",
    # Market
    "CyclePhase",
    "LocationAnalysis",
    "MarketTrend",
    "MarketTrendAnalyzer",
    "MicroMarketAnalyzer",
    "MicroMarketData",
    "TrendDirection",
    # Performance
    "DealPerformance",
    "DealPerformanceTracker",
    "DealStatus",
    "PerformanceAggregator",
    "PerformanceMetrics",
    "RecommendationEngine",
    # Facade
    "DealAnalysis",
    "DealAnalyzer",
]

__version__ = "1.0"
