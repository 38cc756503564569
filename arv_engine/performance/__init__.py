"""
Deal performance: tracking, aggregation and margin recommendations.
"""

from .models import DealPerformance, DealStatus, PerformanceMetrics
from .tracker import DealPerformanceTracker, calculate_margin
from .aggregator import PerformanceAggregator
from .recommendations import RecommendationEngine

__all__ = [
    "DealPerformance",
    "DealStatus",
    "PerformanceMetrics",
    "DealPerformanceTracker",
    "calculate_margin",
    "PerformanceAggregator",
    "RecommendationEngine",
]
