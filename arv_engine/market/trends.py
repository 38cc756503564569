"""
Market Trend Analysis

Compares the mean of the most recent sales against the earliest sales to
classify direction, then derives strength, momentum, volatility, cycle phase
and confidence. Only priced sales dated within the trend window ending on the
reference date are considered. Fewer than three such sales yields a fixed
low-confidence stable trend.
"""

import statistics
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from utils.logging import get_logger

from ..comp_engine.models import Property
from .models import CyclePhase, MarketTrend, TrendDirection

LOGGER = get_logger("market.trends")


# =============================================================================
# Configuration Constants
# =============================================================================

MIN_SALES_FOR_TREND = 3
TREND_SAMPLE_SIZE = 5  # recent / earliest window size
TREND_THRESHOLD = 0.05

STRENGTH_SCALE = 10.0  # a 10% move is full strength
MOMENTUM_SCALE = 2.0
STABLE_TREND_STRENGTH = 0.1

CONFIDENCE_FULL_SAMPLE = 10
VOLATILITY_CONFIDENCE_DRAG = 0.5

EXPANSION_MOMENTUM = 0.2
CONTRACTION_MOMENTUM = -0.2

DEFAULT_CONFIDENCE = 0.1


class MarketTrendAnalyzer:
    """
    Trend direction, strength, volatility and cycle phase from sale history.
    """

    def __init__(
        self,
        now: Optional[datetime] = None,
        reference_date: date = None,
    ):
        """
        Initialize analyzer.

        Args:
            now: Timestamp stamped on results (default: current UTC time)
            reference_date: Last day of the trend window (default: the date of
                ``now``, else today)
        """
        self._now = now
        if reference_date is None:
            reference_date = now.date() if now is not None else date.today()
        self._reference_date = reference_date

    def analyze(
        self,
        zip_code: str,
        history: List[Property],
        window_days: int = 90,
    ) -> MarketTrend:
        """
        Analyse a historical sales series.

        Sales without a price or a sale date are ignored, as are sales dated
        outside the window. Remaining sales are ordered by sale date.

        Args:
            zip_code: Area the history belongs to
            history: Historical sales
            window_days: Days of history, ending on the reference date

        Returns:
            MarketTrend for the area
        """
        window_start = self._reference_date - timedelta(days=window_days)
        priced = [
            p for p in history
            if p.sale_price
            and p.sale_date is not None
            and window_start <= p.sale_date <= self._reference_date
        ]
        priced.sort(key=lambda p: p.sale_date)

        if len(priced) < MIN_SALES_FOR_TREND:
            LOGGER.warning(
                "insufficient history for trend zip=%s sales=%d window=%dd (need %d)",
                zip_code, len(priced), window_days, MIN_SALES_FOR_TREND,
            )
            return self._default_trend(zip_code, window_days, len(priced))

        prices = [p.sale_price for p in priced]
        recent = prices[-TREND_SAMPLE_SIZE:]
        earliest = prices[:TREND_SAMPLE_SIZE]

        recent_mean = statistics.mean(recent)
        earliest_mean = statistics.mean(earliest)
        delta = (recent_mean - earliest_mean) / earliest_mean

        if delta > TREND_THRESHOLD:
            direction = TrendDirection.INCREASING
            strength = min(1.0, delta * STRENGTH_SCALE)
            momentum = min(1.0, delta * MOMENTUM_SCALE)
        elif delta < -TREND_THRESHOLD:
            direction = TrendDirection.DECREASING
            strength = min(1.0, abs(delta) * STRENGTH_SCALE)
            momentum = max(-1.0, delta * MOMENTUM_SCALE)
        else:
            direction = TrendDirection.STABLE
            strength = STABLE_TREND_STRENGTH
            momentum = delta * MOMENTUM_SCALE

        volatility = self._volatility(prices)
        confidence = min(1.0, len(prices) / CONFIDENCE_FULL_SAMPLE) * (
            1 - volatility * VOLATILITY_CONFIDENCE_DRAG
        )

        trend = MarketTrend(
            zip_code=zip_code,
            trend_period=window_days,
            price_trend=direction,
            trend_strength=strength,
            trend_confidence=confidence,
            volatility_index=volatility,
            momentum_score=momentum,
            market_cycle_phase=self.cycle_phase(direction, momentum),
            sample_size=len(prices),
            last_updated=self._timestamp(),
        )
        LOGGER.debug(
            "trend zip=%s direction=%s delta=%.4f volatility=%.4f",
            zip_code, direction.value, delta, volatility,
        )
        return trend

    @staticmethod
    def cycle_phase(direction: TrendDirection, momentum: float) -> CyclePhase:
        """
        Place a trend in the market cycle.

        Rising with strong momentum is expansion, rising but flattening is a
        peak. Falling hard is contraction, falling but flattening is a trough.
        A stable market reads as peak or trough by the sign of its momentum.
        """
        if direction is TrendDirection.INCREASING:
            return CyclePhase.EXPANSION if momentum > EXPANSION_MOMENTUM else CyclePhase.PEAK
        if direction is TrendDirection.DECREASING:
            return CyclePhase.CONTRACTION if momentum < CONTRACTION_MOMENTUM else CyclePhase.TROUGH
        return CyclePhase.PEAK if momentum >= 0 else CyclePhase.TROUGH

    @staticmethod
    def _volatility(prices: List[float]) -> float:
        """Coefficient of variation (population), capped at 1.0."""
        mean = statistics.mean(prices)
        if mean <= 0:
            return 0.0
        return min(1.0, statistics.pstdev(prices) / mean)

    def _default_trend(self, zip_code: str, window_days: int, sample_size: int) -> MarketTrend:
        return MarketTrend(
            zip_code=zip_code,
            trend_period=window_days,
            price_trend=TrendDirection.STABLE,
            trend_strength=0.0,
            trend_confidence=DEFAULT_CONFIDENCE,
            volatility_index=0.0,
            momentum_score=0.0,
            market_cycle_phase=CyclePhase.PEAK,
            sample_size=sample_size,
            last_updated=self._timestamp(),
        )

    def _timestamp(self) -> datetime:
        return self._now or datetime.now(timezone.utc)
