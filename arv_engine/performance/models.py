"""
Data models for deal performance tracking.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..comp_engine.models import MarketCondition


def as_utc(moment: datetime) -> datetime:
    """Timezone-aware UTC view of a timestamp. Naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class DealStatus(Enum):
    """
    Deal lifecycle.

    analyzing -> under_contract -> closed | flipped
    """
    ANALYZING = "analyzing"
    UNDER_CONTRACT = "under_contract"
    CLOSED = "closed"
    FLIPPED = "flipped"

    @property
    def is_complete(self) -> bool:
        return self in (DealStatus.CLOSED, DealStatus.FLIPPED)


@dataclass
class DealPerformance:
    """
    A tracked acquisition.

    Mutable through DealPerformanceTracker status calls. Persistence and
    retention belong to the caller.
    """
    deal_id: str
    subject_address: str
    acquisition_price: float
    estimated_arv: float
    estimated_repair_costs: float
    estimated_margin: float
    margin_confidence: float
    comp_quality_score: float
    market_condition: Optional[MarketCondition]
    deal_status: DealStatus
    created_date: datetime
    comps_used: int = 0
    closed_date: Optional[datetime] = None
    actual_arv: Optional[float] = None
    actual_repair_costs: Optional[float] = None
    actual_margin: Optional[float] = None
    roi_percentage: Optional[float] = None

    @property
    def estimated_profit(self) -> float:
        return self.estimated_arv - self.acquisition_price - self.estimated_repair_costs

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "deal_id": self.deal_id,
            "subject_address": self.subject_address,
            "acquisition_price": self.acquisition_price,
            "estimated_arv": self.estimated_arv,
            "estimated_repair_costs": self.estimated_repair_costs,
            "estimated_margin": self.estimated_margin,
            "margin_confidence": self.margin_confidence,
            "comp_quality_score": self.comp_quality_score,
            "market_condition": self.market_condition.value if self.market_condition else None,
            "deal_status": self.deal_status.value,
            "created_date": self.created_date.isoformat(),
            "comps_used": self.comps_used,
            "closed_date": self.closed_date.isoformat() if self.closed_date else None,
            "actual_arv": self.actual_arv,
            "actual_repair_costs": self.actual_repair_costs,
            "actual_margin": self.actual_margin,
            "roi_percentage": self.roi_percentage,
        }


@dataclass
class PerformanceMetrics:
    """
    Roll-up over tracked deals.

    Accuracy figures only consider closed/flipped deals with recorded actuals.
    Trend figures are recent-minus-earliest averages.
    """
    total_deals: int = 0
    closed_deals: int = 0
    average_margin: float = 0.0
    margin_accuracy: float = 0.0
    arv_accuracy: float = 0.0
    repair_cost_accuracy: float = 0.0
    comp_quality_trend: float = 0.0
    deal_velocity: float = 0.0
    market_trend_accuracy: float = 0.0
    roi_trend: float = 0.0
    risk_adjusted_return: float = 0.0
