"""
Repair Cost Estimation

Condition-indexed per-square-foot ranges scaled by GLA, with an inflation buffer
and a regional multiplier. A user-supplied estimate is averaged into the
condition-based figure. Photo evidence goes through a pluggable assessor whose
default is a neutral stub.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from utils.formatting import format_currency
from utils.logging import get_logger

from .comp_engine.models import Condition, Property

LOGGER = get_logger("repair")


# =============================================================================
# Configuration Constants
# =============================================================================

# Dollars per square foot (low, high)
CONDITION_COST_RANGES = {
    Condition.POOR: (40, 80),
    Condition.FAIR: (25, 50),
    Condition.AVERAGE: (15, 35),
    Condition.RENOVATED: (5, 15),
    Condition.LIKE_NEW: (0, 10),
}

INFLATION_FACTOR = 1.15
DEFAULT_REGIONAL_MULTIPLIER = 1.0

CONFIDENCE_CONDITION_BASED = 0.7
CONFIDENCE_USER_PROVIDED = 0.9
PHOTO_CONFIDENCE_BOOST = 0.1
MAX_CONFIDENCE = 0.95

BREAKDOWN_SHARES = {
    "structural": 0.40,
    "cosmetic": 0.30,
    "mechanical": 0.20,
    "other": 0.10,
}


class RepairMethod(Enum):
    """How a repair estimate was arrived at."""
    CONDITION_BASED = "condition_based"
    PHOTO_INFERRED = "photo_inferred"
    USER_PROVIDED = "user_provided"
    HYBRID = "hybrid"


@dataclass
class RepairAdjustment:
    """Output of a photo assessment: a cost multiplier plus notes."""
    multiplier: float = 1.0
    notes: List[str] = field(default_factory=list)


class PhotoRepairAssessor:
    """
    Boundary for photo-based repair inference.

    Implementations receive opaque photo evidence and return a
    RepairAdjustment. Subclass this to plug in a vision model.
    """

    def assess(self, photos: Sequence[object]) -> RepairAdjustment:
        raise NotImplementedError


class NeutralPhotoAssessor(PhotoRepairAssessor):
    """Stub assessor: acknowledges photos but never changes the estimate."""

    def assess(self, photos: Sequence[object]) -> RepairAdjustment:
        return RepairAdjustment(
            multiplier=1.0,
            notes=[f"{len(photos)} photo(s) received; no automated damage inference applied"],
        )


@dataclass
class RepairEstimate:
    """Repair cost estimate for a subject property."""
    estimate: int
    range_low: int
    range_high: int
    method: RepairMethod
    confidence: float
    breakdown: Dict[str, int]
    assumptions: List[str] = field(default_factory=list)
    market_adjustments: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "estimate": self.estimate,
            "range_low": self.range_low,
            "range_high": self.range_high,
            "method": self.method.value,
            "confidence": self.confidence,
            "breakdown": dict(self.breakdown),
            "assumptions": list(self.assumptions),
            "market_adjustments": dict(self.market_adjustments),
        }


class RepairCostEstimator:
    """
    Estimates renovation cost from subject condition and size.

    Method and confidence:
    - condition_based: 0.7
    - user_provided: 0.9, value averaged with the condition-based figure
    - hybrid (photos supplied): +0.1, capped at 0.95
    """

    def __init__(
        self,
        regional_multiplier: float = DEFAULT_REGIONAL_MULTIPLIER,
        photo_assessor: Optional[PhotoRepairAssessor] = None,
    ):
        """
        Initialize estimator.

        Args:
            regional_multiplier: Local labour/material cost multiplier
            photo_assessor: Photo evidence boundary (default: NeutralPhotoAssessor)
        """
        if regional_multiplier <= 0:
            raise ValueError("regional_multiplier must be positive")
        self._regional_multiplier = regional_multiplier
        self._photo_assessor = photo_assessor or NeutralPhotoAssessor()

    def estimate(
        self,
        subject: Property,
        user_estimate: Optional[float] = None,
        photos: Optional[Sequence[object]] = None,
    ) -> RepairEstimate:
        """
        Estimate repair costs for a subject.

        Args:
            subject: The property being renovated
            user_estimate: Optional analyst/contractor estimate in dollars
            photos: Optional photo evidence, passed to the photo assessor

        Returns:
            RepairEstimate with point value, range and breakdown
        """
        low_rate, high_rate = CONDITION_COST_RANGES[subject.condition]
        gla = subject.gla_sqft or 0.0

        base_low = low_rate * gla
        base_high = high_rate * gla
        base_estimate = (base_low + base_high) / 2

        final_adjustment = INFLATION_FACTOR * self._regional_multiplier
        final_low = base_low * final_adjustment
        final_high = base_high * final_adjustment
        final_estimate = base_estimate * final_adjustment

        method = RepairMethod.CONDITION_BASED
        confidence = CONFIDENCE_CONDITION_BASED
        assumptions = [
            f"Based on {subject.condition.value} condition assessment",
            f"Includes {round((INFLATION_FACTOR - 1) * 100)}% inflation buffer",
            "Assumes standard market conditions",
            "May vary based on specific property issues",
        ]

        if user_estimate is not None:
            method = RepairMethod.USER_PROVIDED
            confidence = CONFIDENCE_USER_PROVIDED
            final_estimate = (final_estimate + user_estimate) / 2
            final_low = min(final_low, user_estimate)
            final_high = max(final_high, user_estimate)
            assumptions.append(
                f"User-provided estimate of {format_currency(user_estimate)} "
                "averaged with condition-based estimate"
            )

        if photos:
            adjustment = self._photo_assessor.assess(photos)
            method = RepairMethod.HYBRID
            confidence = min(MAX_CONFIDENCE, confidence + PHOTO_CONFIDENCE_BOOST)
            final_estimate *= adjustment.multiplier
            final_low *= adjustment.multiplier
            final_high *= adjustment.multiplier
            assumptions.append("Photo analysis considered in estimate")
            assumptions.extend(adjustment.notes)

        breakdown = {
            category: round(final_estimate * share)
            for category, share in BREAKDOWN_SHARES.items()
        }

        LOGGER.debug(
            "repair estimate address=%s method=%s estimate=%.0f",
            subject.address, method.value, final_estimate,
        )

        return RepairEstimate(
            estimate=round(final_estimate),
            range_low=round(final_low),
            range_high=round(final_high),
            method=method,
            confidence=confidence,
            breakdown=breakdown,
            assumptions=assumptions,
            market_adjustments={
                "inflation_factor": INFLATION_FACTOR,
                "regional_multiplier": self._regional_multiplier,
                "final_adjustment": final_adjustment,
            },
        )
