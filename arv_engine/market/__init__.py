"""
Market analytics: micro-market health snapshots and historical price trends.
"""

from .models import (
    CyclePhase,
    LocationAnalysis,
    MarketTrend,
    MicroMarketData,
    TrendDirection,
)
from .micro_market import MicroMarketAnalyzer, zip_derived_health
from .trends import MarketTrendAnalyzer

__all__ = [
    "CyclePhase",
    "LocationAnalysis",
    "MarketTrend",
    "MicroMarketData",
    "TrendDirection",
    "MicroMarketAnalyzer",
    "MarketTrendAnalyzer",
    "zip_derived_health",
]
