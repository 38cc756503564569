"""
Deal Performance Tracking

Opens a tracked deal with a projected margin and confidence, then moves it
through its lifecycle and reconciles it against actual outcomes.
"""

from datetime import datetime, timezone
from typing import List, Optional

from utils.logging import get_logger

from ..comp_engine.models import MarketCondition, Property
from ..comp_engine.scoring import CompScoringEngine
from ..errors import InvalidDealInput, InvalidStatusTransition
from .models import DealPerformance, DealStatus, as_utc

LOGGER = get_logger("performance.tracker")


# =============================================================================
# Configuration Constants
# =============================================================================

BASE_CONFIDENCE = 0.7
HIGH_COMP_QUALITY = 0.8
HIGH_COMP_QUALITY_BONUS = 0.2
MIN_COMPS_FOR_BONUS = 5
COMP_COUNT_BONUS = 0.1
STABLE_MARKET_BONUS = 0.1
HOT_MARKET_PENALTY = 0.1
MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 1.0

ALLOWED_TRANSITIONS = {
    DealStatus.ANALYZING: {DealStatus.UNDER_CONTRACT},
    DealStatus.UNDER_CONTRACT: {DealStatus.CLOSED, DealStatus.FLIPPED},
    DealStatus.CLOSED: set(),
    DealStatus.FLIPPED: set(),
}


def calculate_margin(arv: float, acquisition_price: float, repair_costs: float) -> float:
    """Margin = (ARV - acquisition - repairs) / acquisition."""
    if acquisition_price <= 0:
        raise InvalidDealInput("acquisition_price must be positive")
    return (arv - acquisition_price - repair_costs) / acquisition_price


class DealPerformanceTracker:
    """
    Creates and updates DealPerformance records.

    Holds no deal state of its own: records are owned by the caller.
    """

    def __init__(
        self,
        scoring_engine: Optional[CompScoringEngine] = None,
        now: Optional[datetime] = None,
    ):
        """
        Initialize tracker.

        Args:
            scoring_engine: Used to score comp quality (default: CompScoringEngine())
            now: Fixed timestamp for created/closed dates (default: current UTC time)
        """
        self._scoring = scoring_engine or CompScoringEngine()
        self._now = now

    def track_deal(
        self,
        deal_id: str,
        subject: Property,
        acquisition_price: float,
        arv: float,
        repair_cost: float,
        comps: List[Property],
    ) -> DealPerformance:
        """
        Open a tracked deal.

        Args:
            deal_id: Caller-assigned identifier
            subject: The property being acquired
            acquisition_price: Purchase price (must be positive)
            arv: Estimated after-repair value
            repair_cost: Estimated repair cost
            comps: Comps behind the ARV, used for the quality score

        Returns:
            DealPerformance in ANALYZING status
        """
        margin = calculate_margin(arv, acquisition_price, repair_cost)
        quality = self._scoring.quality_metrics(comps, subject).average_score
        confidence = self.margin_confidence(quality, len(comps), subject.market_condition)

        deal = DealPerformance(
            deal_id=deal_id,
            subject_address=subject.address,
            acquisition_price=acquisition_price,
            estimated_arv=arv,
            estimated_repair_costs=repair_cost,
            estimated_margin=margin,
            margin_confidence=confidence,
            comp_quality_score=quality,
            market_condition=subject.market_condition,
            deal_status=DealStatus.ANALYZING,
            created_date=self._timestamp(),
            comps_used=len(comps),
        )
        LOGGER.info(
            "tracking deal id=%s margin=%.3f confidence=%.2f comps=%d",
            deal_id, margin, confidence, len(comps),
        )
        return deal

    @staticmethod
    def margin_confidence(
        comp_quality: float,
        comp_count: int,
        market_condition: Optional[MarketCondition],
    ) -> float:
        """Confidence in the projected margin, clamped to [0.3, 1.0]."""
        confidence = BASE_CONFIDENCE
        if comp_quality > HIGH_COMP_QUALITY:
            confidence += HIGH_COMP_QUALITY_BONUS
        if comp_count >= MIN_COMPS_FOR_BONUS:
            confidence += COMP_COUNT_BONUS
        if market_condition is MarketCondition.STABLE:
            confidence += STABLE_MARKET_BONUS
        elif market_condition is MarketCondition.HOT:
            confidence -= HOT_MARKET_PENALTY
        return round(max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence)), 4)

    def update_status(self, deal: DealPerformance, status: DealStatus) -> DealPerformance:
        """
        Move a deal to a new lifecycle status.

        Raises:
            InvalidStatusTransition: If the move skips or reverses a stage
        """
        if status not in ALLOWED_TRANSITIONS[deal.deal_status]:
            raise InvalidStatusTransition(deal.deal_id, deal.deal_status.value, status.value)

        LOGGER.info("deal id=%s %s -> %s", deal.deal_id, deal.deal_status.value, status.value)
        deal.deal_status = status
        if status.is_complete and deal.closed_date is None:
            deal.closed_date = self._timestamp()
        return deal

    def close_deal(
        self,
        deal: DealPerformance,
        actual_arv: float,
        actual_repair_costs: float,
        status: DealStatus = DealStatus.CLOSED,
        closed_date: Optional[datetime] = None,
    ) -> DealPerformance:
        """
        Reconcile a deal against its realised outcome.

        Args:
            deal: A deal that is under contract
            actual_arv: Realised resale value
            actual_repair_costs: Realised repair spend
            status: CLOSED or FLIPPED
            closed_date: Close timestamp, naive values read as UTC (default: now)

        Returns:
            The updated deal, with actual margin and ROI
        """
        if not status.is_complete:
            raise InvalidStatusTransition(deal.deal_id, deal.deal_status.value, status.value)

        self.update_status(deal, status)
        if closed_date is not None:
            deal.closed_date = as_utc(closed_date)

        deal.actual_arv = actual_arv
        deal.actual_repair_costs = actual_repair_costs
        deal.actual_margin = calculate_margin(actual_arv, deal.acquisition_price, actual_repair_costs)
        deal.roi_percentage = deal.actual_margin * 100
        return deal

    def _timestamp(self) -> datetime:
        return as_utc(self._now) if self._now is not None else datetime.now(timezone.utc)
