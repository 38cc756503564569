"""
Integration Tests for Deal Analyzer with Comp Engine

Tests the full pipeline from candidate comps through to recommendations.
Ensures:
- Inadmissible comps never reach the ARV
- Zero-comp handling
- Trend analysis only when history is supplied
- Configuration flows through to the engines
- Deterministic results
"""

import logging

import pytest
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from arv_engine import (
    ARVCalculator,
    DealAnalyzer,
    DealStatus,
    EmptyCompSetError,
    Property,
    RepairCostEstimator,
    TrendDirection,
)
from utils import Config, format_currency, format_percent, get_logger


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def reference_date():
    """Fixed reference date for deterministic tests."""
    return date(2024, 6, 1)


@pytest.fixture
def now():
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    return Config(
        log_level="INFO",
        regional_multiplier=1.0,
        target_margin=0.25,
        preferred_margin=0.35,
        trend_window_days=90,
    )


@pytest.fixture
def analyzer(config, reference_date, now):
    return DealAnalyzer(config=config, reference_date=reference_date, now=now)


@pytest.fixture
def subject():
    return Property(
        address="42 Wholesale Way",
        condition="fair",
        gla_sqft=1500,
        beds=3,
        baths=2,
        zip_code="75001",
        city="Test City",
        county="Test County",
        market_condition="stable",
    )


@pytest.fixture
def create_comp(reference_date):
    """Factory fixture for comparable sales."""
    def _create(address, condition, price, **overrides) -> Property:
        fields = dict(
            address=address,
            condition=condition,
            gla_sqft=1500,
            zip_code="75001",
            city="Test City",
            county="Test County",
            market_condition="stable",
            distance_miles=0.5,
            sale_date=reference_date - timedelta(days=45),
            adjusted_price=price,
        )
        fields.update(overrides)
        return Property(**fields)
    return _create


@pytest.fixture
def candidates(create_comp):
    return [
        create_comp("1 Fair St", "fair", 180000),
        create_comp("2 Average St", "average", 200000),
        create_comp("3 Fair St", "fair", 210000),
        create_comp("4 Renovated St", "renovated", 260000),
        create_comp("5 Short St", "fair", 150000, transaction_type="short_sale"),
    ]


@pytest.fixture
def rising_history(reference_date):
    return [
        Property(
            address=f"{i} History Ln",
            condition="average",
            zip_code="75001",
            sale_price=100000 if i < 5 else 120000,
            sale_date=reference_date - timedelta(weeks=10 - i),
        )
        for i in range(10)
    ]


# =============================================================================
# Test: Full Pipeline
# =============================================================================

class TestDealAnalyzerPipeline:
    """Tests for the integrated valuation pipeline."""

    def test_inadmissible_comps_are_excluded(self, analyzer, subject, candidates):
        analysis = analyzer.analyze("D-1", subject, candidates, acquisition_price=100000)

        assert [c.address for c in analysis.comps] == ["1 Fair St", "2 Average St", "3 Fair St"]
        assert analysis.comps_used == 3

    def test_arv_uses_only_admissible_comps(self, analyzer, subject, candidates):
        analysis = analyzer.analyze("D-1", subject, candidates, acquisition_price=100000)

        assert analysis.arv.value == 184775
        assert analysis.arv.range_high == 210000

    def test_repair_and_margin(self, analyzer, subject, candidates):
        analysis = analyzer.analyze("D-1", subject, candidates, acquisition_price=100000)

        expected_repair = RepairCostEstimator().estimate(subject).estimate
        assert analysis.repair.estimate == expected_repair
        assert analysis.estimated_margin == pytest.approx(
            (analysis.arv.value - 100000 - expected_repair) / 100000
        )

    def test_deal_is_tracked(self, analyzer, subject, candidates, now):
        analysis = analyzer.analyze("D-1", subject, candidates, acquisition_price=100000)

        assert analysis.deal.deal_id == "D-1"
        assert analysis.deal.deal_status is DealStatus.ANALYZING
        assert analysis.deal.created_date == now
        assert analysis.deal.comps_used == 3
        assert analysis.deal.estimated_arv == analysis.arv.value

    def test_ranked_comps_sorted(self, analyzer, subject, candidates):
        analysis = analyzer.analyze("D-1", subject, candidates, acquisition_price=100000)

        scores = [s.score for s in analysis.ranked_comps]
        assert scores == sorted(scores, reverse=True)
        assert analysis.comp_quality.total_comps == 3
        assert analysis.deal.comp_quality_score == pytest.approx(analysis.comp_quality.average_score)

    def test_thin_margin_recommendation(self, analyzer, subject, candidates):
        analysis = analyzer.analyze("D-1", subject, candidates, acquisition_price=100000)

        assert analysis.estimated_margin < 0.25
        assert any("below the 25% target" in r for r in analysis.recommendations)

    def test_no_trend_without_history(self, analyzer, subject, candidates):
        analysis = analyzer.analyze("D-1", subject, candidates, acquisition_price=100000)

        assert analysis.trend is None
        assert analysis.trend_adjusted_arv == analysis.arv.value

    def test_trend_with_history(self, analyzer, subject, candidates, rising_history):
        analysis = analyzer.analyze(
            "D-1", subject, candidates, acquisition_price=100000, history=rising_history
        )

        assert analysis.trend.price_trend is TrendDirection.INCREASING
        assert analysis.trend.trend_period == 90
        assert analysis.trend_adjusted_arv == ARVCalculator.trend_adjusted_value(
            analysis.arv, analysis.trend.momentum_score
        )
        assert analysis.trend_adjusted_arv > analysis.arv.value

    def test_trend_window_from_config(self, subject, candidates, rising_history, reference_date, now):
        config = Config(
            log_level="INFO",
            regional_multiplier=1.0,
            target_margin=0.25,
            preferred_margin=0.35,
            trend_window_days=30,
        )
        analyzer = DealAnalyzer(config=config, reference_date=reference_date, now=now)

        analysis = analyzer.analyze(
            "D-1", subject, candidates, acquisition_price=100000, history=rising_history
        )

        # Only the last four weekly sales, all at 120k, fall inside 30 days
        assert analysis.trend.sample_size == 4
        assert analysis.trend.price_trend is TrendDirection.STABLE
        assert analysis.trend_adjusted_arv == analysis.arv.value

    def test_user_repair_estimate(self, analyzer, subject, candidates):
        analysis = analyzer.analyze(
            "D-1", subject, candidates, acquisition_price=100000, user_repair_estimate=40000
        )

        assert analysis.repair.method.value == "user_provided"
        assert analysis.repair.range_low == 40000

    def test_no_admissible_comps_raises(self, analyzer, subject, create_comp):
        candidates = [create_comp("4 Renovated St", "renovated", 260000)]

        with pytest.raises(EmptyCompSetError):
            analyzer.analyze("D-2", subject, candidates, acquisition_price=100000)

    def test_no_candidates_raises(self, analyzer, subject):
        with pytest.raises(EmptyCompSetError):
            analyzer.analyze("D-3", subject, [], acquisition_price=100000)

    def test_regional_multiplier_from_config(self, subject, candidates, reference_date, now):
        config = Config(
            log_level="INFO",
            regional_multiplier=1.2,
            target_margin=0.25,
            preferred_margin=0.35,
            trend_window_days=90,
        )
        analyzer = DealAnalyzer(config=config, reference_date=reference_date, now=now)

        analysis = analyzer.analyze("D-4", subject, candidates, acquisition_price=100000)

        expected = RepairCostEstimator(regional_multiplier=1.2).estimate(subject).estimate
        assert analysis.repair.estimate == expected

    def test_log_level_from_config(self, reference_date, now):
        logger = logging.getLogger("arv_engine")
        previous = logger.level
        config = Config(
            log_level="ERROR",
            regional_multiplier=1.0,
            target_margin=0.25,
            preferred_margin=0.35,
            trend_window_days=90,
        )
        try:
            DealAnalyzer(config=config, reference_date=reference_date, now=now)
            assert logger.level == logging.ERROR
        finally:
            logger.setLevel(previous)

    def test_deterministic(self, analyzer, subject, candidates, rising_history):
        first = analyzer.analyze("D-5", subject, candidates, 100000, history=rising_history)
        second = analyzer.analyze("D-5", subject, candidates, 100000, history=rising_history)

        assert first.arv == second.arv
        assert first.repair == second.repair
        assert first.recommendations == second.recommendations


# =============================================================================
# Test: Configuration & Utilities
# =============================================================================

class TestConfig:
    """Tests for environment-backed configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("LOG_LEVEL", "REGIONAL_MULTIPLIER", "TARGET_MARGIN",
                     "PREFERRED_MARGIN", "TREND_WINDOW_DAYS"):
            monkeypatch.delenv(name, raising=False)

        config = Config.load()

        assert config.to_dict() == {
            "log_level": "INFO",
            "regional_multiplier": 1.0,
            "target_margin": 0.25,
            "preferred_margin": 0.35,
            "trend_window_days": 90,
        }

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("REGIONAL_MULTIPLIER", "1.3")
        monkeypatch.setenv("TREND_WINDOW_DAYS", "180")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = Config.load()

        assert config.regional_multiplier == 1.3
        assert config.trend_window_days == 180
        assert config.log_level == "DEBUG"

    def test_invalid_margins_rejected(self):
        with pytest.raises(ValueError):
            Config(
                log_level="INFO",
                regional_multiplier=1.0,
                target_margin=0.4,
                preferred_margin=0.3,
                trend_window_days=90,
            )

    def test_invalid_multiplier_rejected(self):
        with pytest.raises(ValueError):
            Config(
                log_level="INFO",
                regional_multiplier=0,
                target_margin=0.25,
                preferred_margin=0.35,
                trend_window_days=90,
            )


class TestFormatting:
    """Tests for display helpers."""

    def test_currency(self):
        assert format_currency(12500) == "$12,500"
        assert format_currency(1234.6) == "$1,235"
        assert format_currency(100, "EUR") == "€100"

    def test_percent(self):
        assert format_percent(0.25) == "25.0%"
        assert format_percent(0.35, 0) == "35%"

    def test_logger_namespace(self):
        assert get_logger("market").name == "arv_engine.market"
