"""
Tests for Market Analysis

Covers:
- Micro-market classification from market health
- Seasonal factor
- Location analysis
- Trend direction, momentum, volatility and confidence
- Market cycle phase
"""

import logging

import pytest
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from arv_engine.comp_engine import DomTrend, InventoryLevel, MarketCondition, Property
from arv_engine.market import (
    CyclePhase,
    MarketTrendAnalyzer,
    MicroMarketAnalyzer,
    TrendDirection,
)
from arv_engine.market.micro_market import zip_derived_health


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
def fixed_health():
    """Health source returning a constant."""
    def _make(value: float):
        return lambda zip_code, address: value
    return _make


@pytest.fixture
def create_history(reference_date):
    """Build a weekly sales series from a list of prices, oldest first."""
    def _create(prices):
        start = reference_date - timedelta(weeks=len(prices))
        return [
            Property(
                address=f"{i} History Ln",
                condition="average",
                sale_price=price,
                sale_date=start + timedelta(weeks=i),
                zip_code="75001",
            )
            for i, price in enumerate(prices)
        ]
    return _create


@pytest.fixture
def trend_analyzer(now):
    return MarketTrendAnalyzer(now=now)


@pytest.fixture
def trend_log(caplog):
    """Capture trend-analyzer records. The engine namespace does not propagate."""
    logger = logging.getLogger("arv_engine.market.trends")
    # Newer pytest already attaches caplog.handler to non-propagating loggers.
    attach = caplog.handler not in logging.getLogger("arv_engine").handlers
    if attach:
        logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="arv_engine.market.trends")
    yield caplog
    if attach:
        logger.removeHandler(caplog.handler)


# =============================================================================
# Test: Micro-Market
# =============================================================================

class TestMicroMarketAnalyzer:
    """Tests for health-driven market classification."""

    def test_hot_market(self, fixed_health, reference_date):
        analyzer = MicroMarketAnalyzer(fixed_health(0.9), reference_date)

        data = analyzer.analyze("75001")

        assert data.market_condition is MarketCondition.HOT
        assert data.inventory_level is InventoryLevel.LOW
        assert data.dom_trend is DomTrend.DECREASING
        assert data.price_trend is TrendDirection.INCREASING
        assert data.market_health_score == 0.9

    def test_stable_market(self, fixed_health, reference_date):
        data = MicroMarketAnalyzer(fixed_health(0.7), reference_date).analyze("75001")

        assert data.market_condition is MarketCondition.STABLE
        assert data.inventory_level is InventoryLevel.MEDIUM
        assert data.dom_trend is DomTrend.STABLE
        assert data.price_trend is TrendDirection.STABLE

    def test_cold_market(self, fixed_health, reference_date):
        data = MicroMarketAnalyzer(fixed_health(0.5), reference_date).analyze("75001")

        assert data.market_condition is MarketCondition.COLD
        assert data.inventory_level is InventoryLevel.HIGH
        assert data.dom_trend is DomTrend.INCREASING
        assert data.price_trend is TrendDirection.DECREASING

    def test_thresholds_are_exclusive(self, fixed_health, reference_date):
        assert MicroMarketAnalyzer(fixed_health(0.8), reference_date).analyze(
            "75001").market_condition is MarketCondition.STABLE
        assert MicroMarketAnalyzer(fixed_health(0.6), reference_date).analyze(
            "75001").market_condition is MarketCondition.COLD

    def test_health_source_receives_address(self, reference_date):
        seen = []

        def source(zip_code, address):
            seen.append((zip_code, address))
            return 0.7

        MicroMarketAnalyzer(source, reference_date).analyze("75001", "1 Elm St")

        assert seen == [("75001", "1 Elm St")]

    def test_default_health_is_reproducible(self):
        first = zip_derived_health("75001", "")
        second = zip_derived_health("75001", "other address")

        assert first == second
        assert 0.6 <= first <= 1.0

    def test_default_snapshot_is_reproducible(self, reference_date):
        analyzer = MicroMarketAnalyzer(reference_date=reference_date)
        assert analyzer.analyze("75001") == analyzer.analyze("75001")

    @pytest.mark.parametrize("month,expected", [
        (3, 1.05), (6, 1.05), (8, 1.05), (2, 0.95), (9, 0.95), (12, 0.95),
    ])
    def test_seasonal_factor(self, fixed_health, month, expected):
        analyzer = MicroMarketAnalyzer(fixed_health(0.7), date(2024, month, 15))
        assert analyzer.seasonal_factor() == expected


class TestLocationAnalysis:
    """Tests for combined location scoring."""

    @pytest.fixture
    def subject(self):
        return Property(address="1 Subject St", condition="fair", zip_code="75001", city="Test City")

    def test_winter_stable_market(self, fixed_health, subject):
        analyzer = MicroMarketAnalyzer(fixed_health(0.7), date(2024, 12, 1))
        comps = [Property(address="2 Comp St", condition="fair", zip_code="75001", city="Test City")]

        analysis = analyzer.analyze_location(subject, comps)

        assert analysis.boundary_penalties == 0.0
        assert analysis.market_trend_adjustment == 0.0
        assert analysis.seasonal_adjustment == pytest.approx(-0.05)
        assert -0.02 <= analysis.school_district_impact <= 0.02
        assert 0.93 <= analysis.final_location_score <= 0.97

    def test_cross_boundary_comps_lower_score(self, fixed_health, subject):
        analyzer = MicroMarketAnalyzer(fixed_health(0.7), date(2024, 12, 1))
        near = Property(address="2 Comp St", condition="fair", zip_code="75001", city="Test City")
        far = Property(address="3 Comp St", condition="fair", zip_code="75002", city="Other City")

        local = analyzer.analyze_location(subject, [near])
        mixed = analyzer.analyze_location(subject, [near, far])

        assert mixed.boundary_penalties == pytest.approx(0.03)
        assert mixed.final_location_score < local.final_location_score

    def test_score_is_clamped(self, fixed_health, subject):
        analyzer = MicroMarketAnalyzer(fixed_health(0.9), date(2024, 6, 1))

        analysis = analyzer.analyze_location(subject, [])

        assert analysis.market_trend_adjustment == 0.02
        assert analysis.final_location_score == 1.0


# =============================================================================
# Test: Market Trends
# =============================================================================

class TestMarketTrendAnalyzer:
    """Tests for trend direction and derived signals."""

    def test_insufficient_history_returns_default(self, trend_analyzer, create_history, now):
        trend = trend_analyzer.analyze("75001", create_history([100000, 120000]))

        assert trend.price_trend is TrendDirection.STABLE
        assert trend.trend_strength == 0.0
        assert trend.trend_confidence == 0.1
        assert trend.volatility_index == 0.0
        assert trend.momentum_score == 0.0
        assert trend.sample_size == 2
        assert trend.last_updated == now

    def test_unpriced_sales_are_ignored(self, trend_analyzer, create_history):
        history = create_history([100000, 110000]) + [
            Property(address="9 Unsold St", condition="average", zip_code="75001")
        ]

        trend = trend_analyzer.analyze("75001", history)

        assert trend.sample_size == 2
        assert trend.trend_confidence == 0.1

    def test_increasing_trend(self, trend_analyzer, create_history):
        trend = trend_analyzer.analyze("75001", create_history([100000] * 5 + [120000] * 5))

        assert trend.price_trend is TrendDirection.INCREASING
        assert trend.trend_strength == 1.0
        assert trend.momentum_score == pytest.approx(0.4)
        assert trend.market_cycle_phase is CyclePhase.EXPANSION
        assert trend.volatility_index == pytest.approx(10000 / 110000)
        assert trend.trend_confidence == pytest.approx(1 - (10000 / 110000) * 0.5)
        assert trend.sample_size == 10

    def test_decreasing_trend(self, trend_analyzer, create_history):
        trend = trend_analyzer.analyze("75001", create_history([120000] * 5 + [100000] * 5))

        assert trend.price_trend is TrendDirection.DECREASING
        assert trend.trend_strength == 1.0
        assert trend.momentum_score == pytest.approx(-1 / 3)
        assert trend.market_cycle_phase is CyclePhase.CONTRACTION

    def test_mild_rise_is_peak(self, trend_analyzer, create_history):
        trend = trend_analyzer.analyze("75001", create_history([100000] * 5 + [107000] * 5))

        assert trend.price_trend is TrendDirection.INCREASING
        assert trend.trend_strength == pytest.approx(0.7)
        assert trend.momentum_score == pytest.approx(0.14)
        assert trend.market_cycle_phase is CyclePhase.PEAK

    def test_small_move_is_stable(self, trend_analyzer, create_history):
        trend = trend_analyzer.analyze("75001", create_history([100000] * 5 + [104000] * 5))

        assert trend.price_trend is TrendDirection.STABLE
        assert trend.trend_strength == 0.1
        assert trend.momentum_score == pytest.approx(0.08)
        assert trend.market_cycle_phase is CyclePhase.PEAK

    def test_short_history_compares_overlapping_windows(self, trend_analyzer, create_history):
        # With five or fewer sales both windows cover the same sales
        trend = trend_analyzer.analyze("75001", create_history([100000, 150000, 200000]))

        assert trend.price_trend is TrendDirection.STABLE
        assert trend.momentum_score == 0.0

    def test_sales_ordered_by_date(self, trend_analyzer, create_history):
        history = create_history([100000] * 5 + [120000] * 5)

        trend = trend_analyzer.analyze("75001", list(reversed(history)))

        assert trend.price_trend is TrendDirection.INCREASING

    def test_volatility_capped(self, trend_analyzer, create_history):
        trend = trend_analyzer.analyze("75001", create_history([1, 1, 1000000]))

        assert trend.volatility_index == 1.0
        assert trend.trend_confidence == pytest.approx(0.3 * 0.5)

    def test_confidence_scales_with_sample_size(self, trend_analyzer, create_history):
        small = trend_analyzer.analyze("75001", create_history([100000] * 4))
        large = trend_analyzer.analyze("75001", create_history([100000] * 12))

        assert small.trend_confidence == pytest.approx(0.4)
        assert large.trend_confidence == pytest.approx(1.0)

    def test_window_recorded(self, trend_analyzer, create_history):
        trend = trend_analyzer.analyze("75001", create_history([100000] * 4), window_days=180)
        assert trend.trend_period == 180

    def test_insufficient_history_logs_warning(self, trend_analyzer, create_history, trend_log):
        trend_analyzer.analyze("75001", create_history([100000, 120000]))

        warnings = [r for r in trend_log.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "insufficient history" in warnings[0].getMessage()
        assert "zip=75001" in warnings[0].getMessage()


class TestTrendWindow:
    """Tests for restricting history to the trend window."""

    @pytest.fixture
    def split_history(self, reference_date):
        """Five 2020 sales at 100k, then five sales in the last week at 200k."""
        old = [
            Property(
                address=f"{i} Old Ln",
                condition="average",
                sale_price=100000,
                sale_date=date(2020, 1, 1) + timedelta(days=i),
            )
            for i in range(5)
        ]
        recent = [
            Property(
                address=f"{i} New Ln",
                condition="average",
                sale_price=200000,
                sale_date=reference_date - timedelta(days=i + 1),
            )
            for i in range(5)
        ]
        return old + recent

    def test_window_changes_trend(self, trend_analyzer, split_history):
        short = trend_analyzer.analyze("75001", split_history, window_days=30)
        long = trend_analyzer.analyze("75001", split_history, window_days=3650)

        assert short.price_trend is TrendDirection.STABLE
        assert short.sample_size == 5
        assert long.price_trend is TrendDirection.INCREASING
        assert long.sample_size == 10
        assert long.momentum_score == 1.0

    def test_thin_window_falls_back_to_default(self, trend_analyzer, split_history, trend_log):
        trend = trend_analyzer.analyze("75001", split_history[:5], window_days=30)

        assert trend.sample_size == 0
        assert trend.trend_confidence == 0.1
        assert any(r.levelno == logging.WARNING for r in trend_log.records)

    def test_sales_after_reference_date_excluded(self, now, split_history):
        analyzer = MarketTrendAnalyzer(now=now, reference_date=date(2020, 1, 31))

        trend = analyzer.analyze("75001", split_history, window_days=90)

        assert trend.sample_size == 5
        assert trend.price_trend is TrendDirection.STABLE

    def test_undated_sales_excluded(self, trend_analyzer, create_history):
        undated = [
            Property(address=f"{i} Undated Ln", condition="average", sale_price=500000)
            for i in range(3)
        ]

        trend = trend_analyzer.analyze("75001", create_history([100000] * 3) + undated)

        assert trend.sample_size == 3
        assert trend.volatility_index == 0.0

    def test_reference_date_defaults_to_now(self, split_history):
        analyzer = MarketTrendAnalyzer(now=datetime(2020, 1, 20, tzinfo=timezone.utc))

        trend = analyzer.analyze("75001", split_history, window_days=30)

        assert trend.sample_size == 5
        assert trend.last_updated == datetime(2020, 1, 20, tzinfo=timezone.utc)

    def test_to_dict(self, trend_analyzer, create_history):
        data = trend_analyzer.analyze("75001", create_history([100000] * 4)).to_dict()

        assert data["price_trend"] == "stable"
        assert data["market_cycle_phase"] == "peak"


class TestCyclePhase:
    """Tests for cycle phase placement."""

    @pytest.mark.parametrize("direction,momentum,expected", [
        (TrendDirection.INCREASING, 0.5, CyclePhase.EXPANSION),
        (TrendDirection.INCREASING, 0.1, CyclePhase.PEAK),
        (TrendDirection.DECREASING, -0.5, CyclePhase.CONTRACTION),
        (TrendDirection.DECREASING, -0.1, CyclePhase.TROUGH),
        (TrendDirection.STABLE, 0.05, CyclePhase.PEAK),
        (TrendDirection.STABLE, -0.05, CyclePhase.TROUGH),
    ])
    def test_phase(self, direction, momentum, expected):
        assert MarketTrendAnalyzer.cycle_phase(direction, momentum) is expected
