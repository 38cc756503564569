"""
Deal Analyzer - Integrated Valuation Pipeline

Runs a subject and its candidate comps through the full engine:
filter -> rank -> ARV -> repair -> track -> trend -> recommend.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence

from utils.config import Config
from utils.logging import configure_logging, get_logger

from .comp_engine import (
    ARVCalculator,
    ARVResult,
    CompFilter,
    CompQualityMetrics,
    CompScore,
    CompScoringEngine,
    Property,
)
from .market import MarketTrend, MarketTrendAnalyzer
from .performance import DealPerformance, DealPerformanceTracker, RecommendationEngine
from .repair import RepairCostEstimator, RepairEstimate

LOGGER = get_logger("deal_analyzer")


@dataclass
class DealAnalysis:
    """
    Everything the engine knows about one prospective deal.
    """
    subject: Property
    comps: List[Property]
    ranked_comps: List[CompScore]
    comp_quality: CompQualityMetrics
    arv: ARVResult
    repair: RepairEstimate
    deal: DealPerformance
    trend: Optional[MarketTrend] = None
    recommendations: List[str] = field(default_factory=list)

    @property
    def trend_adjusted_arv(self) -> int:
        """ARV shifted by trend momentum (unchanged without a trend)."""
        if self.trend is None:
            return self.arv.value
        return ARVCalculator.trend_adjusted_value(self.arv, self.trend.momentum_score)

    @property
    def estimated_margin(self) -> float:
        return self.deal.estimated_margin

    @property
    def comps_used(self) -> int:
        return len(self.comps)


class DealAnalyzer:
    """
    Wires the engines together using a single Config.

    Engines are built per analyzer instance. Nothing is shared between
    instances and no state carries across calls.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        reference_date: date = None,
        now: Optional[datetime] = None,
    ):
        """
        Initialize the deal analyzer.

        Args:
            config: Engine configuration (default: Config.load())
            reference_date: Reference date for recency scoring (default: today)
            now: Fixed timestamp for deal and trend records (default: current time)
        """
        self._config = config or Config.load()
        self._reference_date = reference_date or date.today()
        configure_logging(level=self._config.log_level)

        self._scoring = CompScoringEngine(reference_date=self._reference_date)
        self._filter = CompFilter()
        self._arv = ARVCalculator()
        self._repair = RepairCostEstimator(
            regional_multiplier=self._config.regional_multiplier,
        )
        self._tracker = DealPerformanceTracker(scoring_engine=self._scoring, now=now)
        self._trends = MarketTrendAnalyzer(now=now, reference_date=self._reference_date)
        self._recommender = RecommendationEngine(
            target_margin=self._config.target_margin,
            preferred_margin=self._config.preferred_margin,
        )

    def analyze(
        self,
        deal_id: str,
        subject: Property,
        candidates: List[Property],
        acquisition_price: float,
        user_repair_estimate: Optional[float] = None,
        photos: Optional[Sequence[object]] = None,
        history: Optional[List[Property]] = None,
    ) -> DealAnalysis:
        """
        Analyze a single prospective deal.

        Args:
            deal_id: Caller-assigned deal identifier
            subject: The property being valued
            candidates: Candidate comparable sales
            acquisition_price: Proposed purchase price
            user_repair_estimate: Optional analyst repair estimate
            photos: Optional photo evidence for the repair estimate
            history: Optional historical sales for trend analysis

        Returns:
            DealAnalysis bundle

        Raises:
            EmptyCompSetError: If no candidate survives filtering
        """
        comps = self._filter.filter_for_valuation(candidates, subject)
        if len(comps) < len(candidates):
            LOGGER.info(
                "deal id=%s kept %d of %d candidate comps",
                deal_id, len(comps), len(candidates),
            )

        arv = self._arv.estimate(comps, subject)
        repair = self._repair.estimate(subject, user_repair_estimate, photos)

        deal = self._tracker.track_deal(
            deal_id,
            subject,
            acquisition_price,
            arv.value,
            repair.estimate,
            comps,
        )

        trend = None
        if history is not None:
            trend = self._trends.analyze(
                subject.zip_code, history, self._config.trend_window_days
            )

        recommendations = self._recommender.recommend(deal, trend, comps)

        return DealAnalysis(
            subject=subject,
            comps=comps,
            ranked_comps=self._scoring.rank(comps, subject),
            comp_quality=self._scoring.quality_metrics(comps, subject),
            arv=arv,
            repair=repair,
            deal=deal,
            trend=trend,
            recommendations=recommendations,
        )
