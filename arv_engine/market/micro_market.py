"""
Micro-Market Analysis

Derives inventory, DOM trend, market condition and price trend from a single
market-health figure, plus a seasonal factor for the reference month.

The health figure comes from a pluggable source. The default derives a stable
value from the zip code so results are reproducible. In production it would
come from an MLS or market-data feed.
"""

import hashlib
from datetime import date
from typing import Callable, List, Optional

from utils.logging import get_logger

from ..comp_engine.models import DomTrend, InventoryLevel, MarketCondition, Property
from ..comp_engine.scoring import location_score
from .models import LocationAnalysis, MicroMarketData, TrendDirection

LOGGER = get_logger("market.micro_market")


# =============================================================================
# Configuration Constants
# =============================================================================

HOT_HEALTH_THRESHOLD = 0.8
STABLE_HEALTH_THRESHOLD = 0.6

# Derived figures fall in [0.6, 1.0]
DERIVED_FLOOR = 0.6
DERIVED_SPAN = 0.4

PEAK_SEASON_MONTHS = range(3, 9)  # March through August
PEAK_SEASON_FACTOR = 1.05
OFF_SEASON_FACTOR = 0.95

SCHOOL_RATING_BASELINE = 0.8
SCHOOL_IMPACT_WEIGHT = 0.1

MARKET_TREND_ADJUSTMENTS = {
    MarketCondition.HOT: 0.02,
    MarketCondition.STABLE: 0.0,
    MarketCondition.COLD: -0.02,
}

HealthSource = Callable[[str, str], float]


def _stable_fraction(salt: str, zip_code: str) -> float:
    """Map (salt, zip) to a reproducible value in [0.6, 1.0]."""
    digest = hashlib.sha256(f"{salt}:{zip_code}".encode("utf-8")).hexdigest()
    unit = int(digest[:8], 16) / 0xFFFFFFFF
    return DERIVED_FLOOR + unit * DERIVED_SPAN


def zip_derived_health(zip_code: str, address: str) -> float:
    """Default health source: a stable figure per zip code."""
    return _stable_fraction("health", zip_code)


class MicroMarketAnalyzer:
    """
    Produces market-health snapshots for a geographic area.
    """

    def __init__(
        self,
        health_source: Optional[HealthSource] = None,
        reference_date: date = None,
    ):
        """
        Initialize analyzer.

        Args:
            health_source: Callable (zip_code, address) -> health in [0, 1]
            reference_date: Date used for the seasonal factor (default: today)
        """
        self._health_source = health_source or zip_derived_health
        self._reference_date = reference_date or date.today()

    def analyze(self, zip_code: str, address: str = "") -> MicroMarketData:
        """
        Build a micro-market snapshot.

        Args:
            zip_code: Area to analyse
            address: Subject address, passed through to the health source

        Returns:
            MicroMarketData for the area
        """
        health = self._health_source(zip_code, address)

        if health > HOT_HEALTH_THRESHOLD:
            inventory = InventoryLevel.LOW
            dom_trend = DomTrend.DECREASING
            condition = MarketCondition.HOT
            price_trend = TrendDirection.INCREASING
        elif health > STABLE_HEALTH_THRESHOLD:
            inventory = InventoryLevel.MEDIUM
            dom_trend = DomTrend.STABLE
            condition = MarketCondition.STABLE
            price_trend = TrendDirection.STABLE
        else:
            inventory = InventoryLevel.HIGH
            dom_trend = DomTrend.INCREASING
            condition = MarketCondition.COLD
            price_trend = TrendDirection.DECREASING

        LOGGER.debug("micro-market zip=%s health=%.3f condition=%s", zip_code, health, condition.value)

        return MicroMarketData(
            zip_code=zip_code,
            market_health_score=health,
            inventory_level=inventory,
            dom_trend=dom_trend,
            market_condition=condition,
            price_trend=price_trend,
            seasonal_factor=self.seasonal_factor(),
            school_district_rating=_stable_fraction("school", zip_code),
            neighborhood_desirability=_stable_fraction("neighborhood", zip_code),
        )

    def seasonal_factor(self) -> float:
        """Spring/summer premium, fall/winter discount."""
        if self._reference_date.month in PEAK_SEASON_MONTHS:
            return PEAK_SEASON_FACTOR
        return OFF_SEASON_FACTOR

    def analyze_location(
        self,
        subject: Property,
        comps: List[Property],
    ) -> LocationAnalysis:
        """
        Combine comp boundary compatibility with the subject's micro-market.

        Args:
            subject: The property being valued (zip_code drives the snapshot)
            comps: Comps whose location scores are averaged

        Returns:
            LocationAnalysis with a final score clamped to [0, 1]
        """
        micro = self.analyze(subject.zip_code, subject.address)

        if comps:
            average_location = sum(location_score(subject, c) for c in comps) / len(comps)
        else:
            average_location = 1.0

        school_impact = (micro.school_district_rating - SCHOOL_RATING_BASELINE) * SCHOOL_IMPACT_WEIGHT
        trend_adjustment = MARKET_TREND_ADJUSTMENTS[micro.market_condition]
        seasonal_adjustment = micro.seasonal_factor - 1.0

        final = average_location + school_impact + trend_adjustment + seasonal_adjustment

        return LocationAnalysis(
            micro_market=micro,
            boundary_penalties=1.0 - average_location,
            school_district_impact=school_impact,
            market_trend_adjustment=trend_adjustment,
            seasonal_adjustment=seasonal_adjustment,
            final_location_score=max(0.0, min(1.0, final)),
        )
