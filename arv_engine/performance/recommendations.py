"""
Margin Recommendations

Rule-based advisory text. Each rule fires independently. The two margin
thresholds are tiers of one rule, so at most one margin message is emitted.
"""

from typing import List, Optional

from utils.formatting import format_percent

from ..market.models import MarketTrend, TrendDirection
from ..comp_engine.models import Property
from .models import DealPerformance


# =============================================================================
# Configuration Constants
# =============================================================================

TARGET_MARGIN = 0.25
PREFERRED_MARGIN = 0.35
MIN_COMP_QUALITY = 0.7
MAX_VOLATILITY = 0.3
MIN_MARGIN_CONFIDENCE = 0.6


class RecommendationEngine:
    """
    Generates advisory strings for a tracked deal.
    """

    def __init__(
        self,
        target_margin: float = TARGET_MARGIN,
        preferred_margin: float = PREFERRED_MARGIN,
    ):
        self._target_margin = target_margin
        self._preferred_margin = preferred_margin

    def recommend(
        self,
        deal: DealPerformance,
        trend: Optional[MarketTrend],
        comps: List[Property],
    ) -> List[str]:
        """
        Build recommendations for a deal.

        Args:
            deal: The tracked deal
            trend: Market trend for the subject's area (market rules skipped if None)
            comps: Comps behind the valuation

        Returns:
            List of recommendation strings (empty if the deal looks sound)
        """
        recommendations = []
        margin = deal.estimated_margin

        # One margin trigger: below target, or else below preferred
        if margin < self._target_margin:
            recommendations.append(
                f"Estimated margin {format_percent(margin)} is below the "
                f"{format_percent(self._target_margin, 0)} target - renegotiate the "
                "acquisition price or reduce repair scope"
            )
        elif margin < self._preferred_margin:
            recommendations.append(
                f"Estimated margin {format_percent(margin)} is below the preferred "
                f"{format_percent(self._preferred_margin, 0)} - look for additional value-add"
            )

        if deal.comp_quality_score < MIN_COMP_QUALITY:
            recommendations.append(
                f"Comp quality {format_percent(deal.comp_quality_score)} across "
                f"{len(comps)} comps is weak - source closer, more recent, "
                "condition-matched sales"
            )

        if trend is not None:
            if trend.price_trend is TrendDirection.DECREASING:
                recommendations.append(
                    "Market trend is decreasing - use a more conservative ARV"
                )
            if trend.volatility_index > MAX_VOLATILITY:
                recommendations.append(
                    f"Market volatility {format_percent(trend.volatility_index)} is high - "
                    "widen the safety margin"
                )

        if deal.margin_confidence < MIN_MARGIN_CONFIDENCE:
            recommendations.append(
                f"Margin confidence {format_percent(deal.margin_confidence)} is low - "
                "verify ARV and repair estimates before committing"
            )

        return recommendations
