"""
Comp Engine

Comparable sales scoring, validation, admissibility filtering and
wholesaling-weighted ARV calculation for distressed properties.
"""

from .models import (
    ARVResult,
    CompQualityMetrics,
    CompScore,
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
from .scoring import CompScoringEngine
from .validation import CompValidator
from .filters import CompFilter
from .valuation import ARVCalculator

__all__ = [
    # Models
    "ARVResult",
    "CompQualityMetrics",
    "CompScore",
    "Condition",
    "DomTrend",
    "InventoryLevel",
    "MarketCondition",
    "PaymentMethod",
    "Property",
    "ScoreBreakdown",
    "TransactionType",
    "ValidationResult",
    # Engines
    "CompScoringEngine",
    "CompValidator",
    "CompFilter",
    "ARVCalculator",
]
