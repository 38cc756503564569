"""
Comp Scoring for the Comp Engine

Feature scorers each return a normalised sub-score in [0, 1]:
- Distance (miles from subject)
- Recency (30-day months since sale)
- GLA similarity
- Condition match
- Property type match
- Location / boundary compatibility
- Wholesale potential (condition-direction preference)

CompScoringEngine combines them into one weighted composite per comp.
Condition carries the highest weight so valuations lean on condition-matched
comps for distressed subjects.
"""

from datetime import date
from typing import List, Optional

from utils.logging import get_logger

from .models import (
    CompQualityMetrics,
    CompScore,
    Condition,
    MarketCondition,
    Property,
    ScoreBreakdown,
)

LOGGER = get_logger("comp_engine.scoring")


# =============================================================================
# Configuration Constants
# =============================================================================

# Composite weights (sum to 1.00 including the fixed style placeholder)
WEIGHT_DISTANCE = 0.20
WEIGHT_RECENCY = 0.20
WEIGHT_GLA = 0.15
WEIGHT_CONDITION = 0.25
WEIGHT_LOCATION = 0.10
WEIGHT_PROPERTY_TYPE = 0.05
STYLE_MATCH_PLACEHOLDER = 0.03
WEIGHT_WHOLESALE_POTENTIAL = 0.02

# Step functions: (upper bound inclusive, score)
DISTANCE_STEPS = [(0.5, 1.0), (1.0, 0.8), (2.0, 0.6), (3.0, 0.4)]
RECENCY_STEPS = [(3, 1.0), (6, 0.8), (9, 0.6), (12, 0.4)]
GLA_STEPS = [(0.10, 1.0), (0.20, 0.8), (0.30, 0.6), (0.40, 0.4)]
STEP_FLOOR = 0.2

DAYS_PER_MONTH = 30
GLA_NEUTRAL_SCORE = 0.5

# Condition-match score by absolute rank distance
CONDITION_MATCH_SCORES = {0: 1.0, 1: 0.7, 2: 0.4, 3: 0.2}
CONDITION_MATCH_FLOOR = 0.1

SIMILAR_PROPERTY_TYPES = {frozenset({"single_family", "townhouse"})}

# Location boundary penalties (applied only when both sides provide the field)
ZIP_MISMATCH_PENALTY = 0.02
CITY_MISMATCH_PENALTY = 0.04
COUNTY_MISMATCH_PENALTY = 0.10
SCHOOL_DISTRICT_MISMATCH_PENALTY = 0.05
NEIGHBORHOOD_MISMATCH_PENALTY = 0.03
SAME_MARKET_BONUS = 0.05
COMPATIBLE_MARKET_BONUS = 0.02
INCOMPATIBLE_MARKET_PENALTY = 0.03


# =============================================================================
# Feature Scorers
# =============================================================================

def _step_score(value: float, steps) -> float:
    for upper, score in steps:
        if value <= upper:
            return score
    return STEP_FLOOR


def distance_score(distance_miles: Optional[float]) -> float:
    """Score proximity to the subject. Missing distance counts as zero miles."""
    return _step_score(distance_miles or 0.0, DISTANCE_STEPS)


def recency_score(sale_date: Optional[date], reference_date: Optional[date] = None) -> float:
    """Score how recently the comp sold. An undated sale gets the floor score."""
    if sale_date is None:
        return STEP_FLOOR
    reference_date = reference_date or date.today()
    months = (reference_date - sale_date).days / DAYS_PER_MONTH
    return _step_score(months, RECENCY_STEPS)


def gla_score(subject: Property, comp: Property) -> float:
    """Score living-area similarity relative to the subject's GLA."""
    if not subject.gla_sqft or not comp.gla_sqft:
        return GLA_NEUTRAL_SCORE
    percent_difference = abs(subject.gla_sqft - comp.gla_sqft) / subject.gla_sqft
    return _step_score(percent_difference, GLA_STEPS)


def condition_match_score(subject: Condition, comp: Condition) -> float:
    """Score condition agreement. Symmetric in its arguments."""
    return CONDITION_MATCH_SCORES.get(subject.distance(comp), CONDITION_MATCH_FLOOR)


def property_type_score(subject: Property, comp: Property) -> float:
    if subject.property_type == comp.property_type:
        return 1.0
    if frozenset({subject.property_type, comp.property_type}) in SIMILAR_PROPERTY_TYPES:
        return 0.7
    return 0.3


def wholesale_potential_score(subject: Property, comp: Property) -> float:
    """
    Prefer comps that do not inflate ARV beyond what a distressed subject
    will realistically fetch.
    """
    if comp.condition is Condition.RENOVATED and subject.condition is Condition.FAIR:
        return 0.3
    if comp.condition is Condition.LIKE_NEW and subject.condition is Condition.POOR:
        return 0.2
    if comp.condition.rank <= subject.condition.rank:
        return 1.0
    return 0.6


def location_score(subject: Property, comp: Property) -> float:
    """Boundary-aware location compatibility, clamped to [0, 1]."""
    score = 1.0

    boundaries = [
        ("zip_code", ZIP_MISMATCH_PENALTY),
        ("city", CITY_MISMATCH_PENALTY),
        ("county", COUNTY_MISMATCH_PENALTY),
        ("school_district", SCHOOL_DISTRICT_MISMATCH_PENALTY),
        ("neighborhood", NEIGHBORHOOD_MISMATCH_PENALTY),
    ]
    for attr, penalty in boundaries:
        subject_value = getattr(subject, attr)
        comp_value = getattr(comp, attr)
        if subject_value and comp_value and subject_value != comp_value:
            score -= penalty

    if subject.market_condition and comp.market_condition:
        pair = {subject.market_condition, comp.market_condition}
        if subject.market_condition is comp.market_condition:
            score += SAME_MARKET_BONUS
        elif pair == {MarketCondition.HOT, MarketCondition.STABLE}:
            score += COMPATIBLE_MARKET_BONUS
        else:
            score -= INCOMPATIBLE_MARKET_PENALTY

    return max(0.0, min(1.0, score))


# =============================================================================
# Composite Engine
# =============================================================================

class CompScoringEngine:
    """
    Weighted composite scoring of comps against a subject.

    Stateless apart from the reference date used for recency.
    """

    def __init__(self, reference_date: date = None):
        """
        Initialize scoring engine.

        Args:
            reference_date: Date to calculate sale age from (default: today)
        """
        self._reference_date = reference_date or date.today()

    def score(self, comp: Property, subject: Property) -> CompScore:
        """
        Score one comp against the subject.

        Args:
            comp: The comparable sale
            subject: The property being valued

        Returns:
            CompScore with composite score and per-factor breakdown
        """
        breakdown = ScoreBreakdown(
            distance=distance_score(comp.distance_miles),
            recency=recency_score(comp.sale_date, self._reference_date),
            gla=gla_score(subject, comp),
            condition=condition_match_score(subject.condition, comp.condition),
            location=location_score(subject, comp),
            property_type=property_type_score(subject, comp),
            style=STYLE_MATCH_PLACEHOLDER,
            wholesale_potential=wholesale_potential_score(subject, comp),
        )

        total = (
            breakdown.distance * WEIGHT_DISTANCE
            + breakdown.recency * WEIGHT_RECENCY
            + breakdown.gla * WEIGHT_GLA
            + breakdown.condition * WEIGHT_CONDITION
            + breakdown.location * WEIGHT_LOCATION
            + breakdown.property_type * WEIGHT_PROPERTY_TYPE
            + STYLE_MATCH_PLACEHOLDER
            + breakdown.wholesale_potential * WEIGHT_WHOLESALE_POTENTIAL
        )
        # Float accumulation can land a hair above 1.0
        total = max(0.0, min(1.0, total))

        LOGGER.debug("scored comp address=%s score=%.4f", comp.address, total)
        return CompScore(comp=comp, score=total, breakdown=breakdown)

    def rank(self, comps: List[Property], subject: Property) -> List[CompScore]:
        """Score all comps and sort highest first (stable for ties)."""
        scored = [self.score(comp, subject) for comp in comps]
        return sorted(scored, key=lambda s: s.score, reverse=True)

    def quality_metrics(self, comps: List[Property], subject: Property) -> CompQualityMetrics:
        """Summarise comp-set quality. An empty set yields all zeros."""
        if not comps:
            return CompQualityMetrics(
                total_comps=0,
                average_score=0.0,
                average_condition_score=0.0,
                top_comp_score=0.0,
                bottom_comp_score=0.0,
            )

        scored = [self.score(comp, subject) for comp in comps]
        scores = [s.score for s in scored]
        condition_scores = [s.breakdown.condition for s in scored]

        return CompQualityMetrics(
            total_comps=len(comps),
            average_score=sum(scores) / len(scores),
            average_condition_score=sum(condition_scores) / len(condition_scores),
            top_comp_score=max(scores),
            bottom_comp_score=min(scores),
        )
