"""
Performance Aggregation

Rolls tracked deals and trend snapshots up into accuracy, velocity and return
metrics. An empty deal list yields all-zero metrics rather than an error.
"""

import statistics
from typing import List, Optional, Sequence, Tuple

from utils.logging import get_logger

from ..market.models import MarketTrend
from .models import DealPerformance, PerformanceMetrics, as_utc

LOGGER = get_logger("performance.aggregator")


# =============================================================================
# Configuration Constants
# =============================================================================

TREND_WINDOW = 10  # deals compared at each end of the history
SECONDS_PER_DAY = 86400


def _accuracy(pairs: Sequence[Tuple[float, float]]) -> float:
    """1 - mean relative error of estimate vs actual, floored at 0."""
    errors = [abs(est - act) / abs(act) for est, act in pairs if act]
    if not errors:
        return 0.0
    return max(0.0, 1.0 - statistics.mean(errors))


def _window_trend(values: List[float]) -> float:
    """Average of the latest window minus average of the earliest window."""
    if not values:
        return 0.0
    return statistics.mean(values[-TREND_WINDOW:]) - statistics.mean(values[:TREND_WINDOW])


class PerformanceAggregator:
    """
    Computes PerformanceMetrics over a collection of deals.
    """

    def aggregate(
        self,
        deals: List[DealPerformance],
        trends: Optional[List[MarketTrend]] = None,
    ) -> PerformanceMetrics:
        """
        Aggregate deal performance.

        Args:
            deals: Tracked deals in any status
            trends: Market trend snapshots covering the deals' markets

        Returns:
            PerformanceMetrics (all zeros when there are no deals)
        """
        if not deals:
            return PerformanceMetrics()

        trends = trends or []
        ordered = sorted(deals, key=lambda d: as_utc(d.created_date))
        closed = [d for d in ordered if d.deal_status.is_complete]

        margin_pairs = [
            (d.estimated_margin, d.actual_margin)
            for d in closed if d.actual_margin is not None
        ]
        arv_pairs = [
            (d.estimated_arv, d.actual_arv)
            for d in closed if d.actual_arv is not None
        ]
        repair_pairs = [
            (d.estimated_repair_costs, d.actual_repair_costs)
            for d in closed if d.actual_repair_costs is not None
        ]

        durations = [
            (as_utc(d.closed_date) - as_utc(d.created_date)).total_seconds()
            / SECONDS_PER_DAY
            for d in closed if d.closed_date is not None
        ]
        returns = [d.roi_percentage / 100 for d in closed if d.roi_percentage is not None]
        realised_margins = [m for _, m in margin_pairs]

        average_volatility = (
            statistics.mean(t.volatility_index for t in trends) if trends else 0.0
        )
        risk_adjusted = (
            statistics.mean(realised_margins) * (1 - average_volatility)
            if realised_margins else 0.0
        )

        metrics = PerformanceMetrics(
            total_deals=len(deals),
            closed_deals=len(closed),
            average_margin=statistics.mean(d.estimated_margin for d in deals),
            margin_accuracy=_accuracy(margin_pairs),
            arv_accuracy=_accuracy(arv_pairs),
            repair_cost_accuracy=_accuracy(repair_pairs),
            comp_quality_trend=_window_trend([d.comp_quality_score for d in ordered]),
            deal_velocity=statistics.mean(durations) if durations else 0.0,
            market_trend_accuracy=(
                statistics.mean(t.trend_confidence for t in trends) if trends else 0.0
            ),
            roi_trend=_window_trend(returns),
            risk_adjusted_return=risk_adjusted,
        )
        LOGGER.debug(
            "aggregated deals=%d closed=%d velocity=%.1f",
            metrics.total_deals, metrics.closed_deals, metrics.deal_velocity,
        )
        return metrics
