"""
ARV Calculator for the Comp Engine

Implements the wholesaling-weighted ARV:
- Sort admissible comps by valuation price
- Weight lowest 40%, median (index n // 2) 35%, highest 25%
- Apply a 5% safety margin
- Adjust for subject market temperature
- Derive the range from comp extremes and a +/-8% band
"""

from typing import List, Optional

from utils.logging import get_logger

from ..errors import EmptyCompSetError
from .models import ARVResult, MarketCondition, Property

LOGGER = get_logger("comp_engine.valuation")


# =============================================================================
# Configuration Constants
# =============================================================================

WEIGHT_LOWEST = 0.40
WEIGHT_MEDIAN = 0.35
WEIGHT_HIGHEST = 0.25

SAFETY_MARGIN = 0.95

# Hot markets mean more buyer competition, so ARV is shaded down
MARKET_ADJUSTMENTS = {
    MarketCondition.HOT: 0.98,
    MarketCondition.COLD: 1.02,
    MarketCondition.STABLE: 1.00,
}

RANGE_LOW_FACTOR = 0.92
RANGE_HIGH_FACTOR = 1.08

# ARV moves 2% per unit of trend momentum
TREND_MOMENTUM_SENSITIVITY = 0.02

METHOD_LABEL = "wholesaling_weighted_median"


class ARVCalculator:
    """
    Weighted-percentile ARV from an admissible comp set.

    Pipeline order:
    1. SORT - by adjusted price, ascending
    2. WEIGHT - lowest / median / highest
    3. DISCOUNT - safety margin
    4. ADJUST - subject market condition
    5. RANGE - comp extremes vs +/-8% band
    """

    def estimate(
        self,
        comps: List[Property],
        subject: Optional[Property] = None,
    ) -> ARVResult:
        """
        Estimate ARV for a subject from its admissible comps.

        Args:
            comps: Admissible comparable sales (must be non-empty)
            subject: Optional subject, used for market adjustment

        Returns:
            ARVResult with value, range and weights applied

        Raises:
            EmptyCompSetError: If no comps are supplied
        """
        if not comps:
            raise EmptyCompSetError()

        prices = sorted(c.valuation_price for c in comps)
        lowest = prices[0]
        median = prices[len(prices) // 2]
        highest = prices[-1]

        weighted = (
            lowest * WEIGHT_LOWEST
            + median * WEIGHT_MEDIAN
            + highest * WEIGHT_HIGHEST
        )
        value = weighted * SAFETY_MARGIN

        if subject is not None and subject.market_condition is not None:
            value *= MARKET_ADJUSTMENTS[subject.market_condition]

        range_low = min(lowest, value * RANGE_LOW_FACTOR)
        range_high = max(highest, value * RANGE_HIGH_FACTOR)

        LOGGER.debug(
            "arv comps=%d value=%.0f range=%.0f-%.0f",
            len(prices), value, range_low, range_high,
        )

        return ARVResult(
            value=round(value),
            range_low=round(range_low),
            range_high=round(range_high),
            method=METHOD_LABEL,
            weights_applied={
                "lowest": WEIGHT_LOWEST,
                "median": WEIGHT_MEDIAN,
                "highest": WEIGHT_HIGHEST,
            },
            safety_margin=SAFETY_MARGIN,
        )

    @staticmethod
    def trend_adjusted_value(result: ARVResult, momentum_score: float) -> int:
        """Shift an ARV by market-trend momentum (2% per unit of momentum)."""
        return round(result.value * (1 + momentum_score * TREND_MOMENTUM_SENSITIVITY))
