"""
Data models for market analysis.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ..comp_engine.models import DomTrend, InventoryLevel, MarketCondition


class TrendDirection(Enum):
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class CyclePhase(Enum):
    """Position in the market cycle."""
    EXPANSION = "expansion"
    PEAK = "peak"
    CONTRACTION = "contraction"
    TROUGH = "trough"


@dataclass
class MicroMarketData:
    """
    Market-health snapshot for a zip code.

    Ephemeral: regenerated on every call.
    """
    zip_code: str
    market_health_score: float
    inventory_level: InventoryLevel
    dom_trend: DomTrend
    market_condition: MarketCondition
    price_trend: TrendDirection
    seasonal_factor: float
    school_district_rating: float
    neighborhood_desirability: float


@dataclass
class LocationAnalysis:
    """Subject-level location assessment combining comps and micro-market."""
    micro_market: MicroMarketData
    boundary_penalties: float
    school_district_impact: float
    market_trend_adjustment: float
    seasonal_adjustment: float
    final_location_score: float


@dataclass
class MarketTrend:
    """
    Price trend for a zip code over a window of historical sales.

    momentum_score is signed: negative for falling prices.
    """
    zip_code: str
    trend_period: int
    price_trend: TrendDirection
    trend_strength: float
    trend_confidence: float
    volatility_index: float
    momentum_score: float
    market_cycle_phase: CyclePhase
    sample_size: int
    last_updated: datetime

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "zip_code": self.zip_code,
            "trend_period": self.trend_period,
            "price_trend": self.price_trend.value,
            "trend_strength": self.trend_strength,
            "trend_confidence": self.trend_confidence,
            "volatility_index": self.volatility_index,
            "momentum_score": self.momentum_score,
            "market_cycle_phase": self.market_cycle_phase.value,
            "sample_size": self.sample_size,
            "last_updated": self.last_updated.isoformat(),
        }
