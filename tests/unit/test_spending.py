"""
Unit tests for spending analysis.
"""

import math

import pytest
from sc2_analytics.analysis.models import SQRating
from sc2_analytics.analysis.spending import SpendingAnalyzer, calculate_sq, rate_sq
from tests.fixtures.sample_timelines import make_timeline, stats_event


@pytest.fixture
def analyzer():
    return SpendingAnalyzer()


class TestCalculateSQ:
    """Tests for the Spending Quotient formula"""

    def test_formula(self):
        """Test SQ for a typical income and bank"""
        expected = 35 * (0.00137 * 1000 - math.log(500 + 1)) + 240
        assert calculate_sq(1000, 500) == pytest.approx(expected)

    def test_zero_income(self):
        """Test SQ is 0 without income"""
        assert calculate_sq(0, 0) == 0
        assert calculate_sq(-5, 100) == 0

    def test_clamped_low(self):
        """Test a huge bank clamps at 0"""
        assert calculate_sq(10, 1_000_000) == 0

    def test_clamped_high(self):
        """Test a huge income clamps at 200"""
        assert calculate_sq(100_000, 0) == 200

    def test_negative_bank(self):
        """Test a negative bank counts as empty instead of failing"""
        assert calculate_sq(1000, -5) == pytest.approx(calculate_sq(1000, 0))
        assert calculate_sq(1000, -1) == pytest.approx(calculate_sq(1000, 0))

    def test_bounds(self):
        """Test SQ stays within 0-200 across a grid of inputs"""
        for income in (0, 1, 250, 1000, 3000, 50_000):
            for unspent in (0, 10, 500, 5000, 1e7):
                assert 0 <= calculate_sq(income, unspent) <= 200


class TestRateSQ:
    """Tests for rating buckets"""

    def test_buckets(self):
        """Test bucket boundaries"""
        assert rate_sq(0) is SQRating.POOR
        assert rate_sq(69.9) is SQRating.POOR
        assert rate_sq(70) is SQRating.BELOW_AVERAGE
        assert rate_sq(90) is SQRating.AVERAGE
        assert rate_sq(110) is SQRating.GOOD
        assert rate_sq(130) is SQRating.EXCELLENT
        assert rate_sq(200) is SQRating.EXCELLENT


class TestSpendingAnalyzer:
    """Tests for the spending pass"""

    def test_averages(self, analyzer):
        """Test averages over all samples"""
        timeline = make_timeline([
            stats_event(0, 1, minerals=100, gas=0, mineral_rate=500, gas_rate=100),
            stats_event(10, 1, minerals=300, gas=100, mineral_rate=700, gas_rate=300),
        ])

        analysis = analyzer.analyze(timeline, player_id=1, duration=20.0)

        assert analysis.average_unspent.minerals == pytest.approx(200)
        assert analysis.average_unspent.gas == pytest.approx(50)
        # Combined income 800/min split 70/30
        assert analysis.average_income.minerals == pytest.approx(560)
        assert analysis.average_income.gas == pytest.approx(240)
        assert analysis.spending_quotient == pytest.approx(calculate_sq(800, 250))

    def test_resource_timeline(self, analyzer):
        """Test one point per sample with that sample's rates"""
        timeline = make_timeline([
            stats_event(0, 1, minerals=50.7, gas=0, mineral_rate=500, gas_rate=0),
            stats_event(10, 1, minerals=300, gas=120, mineral_rate=700, gas_rate=250),
        ])

        analysis = analyzer.analyze(timeline, player_id=1, duration=20.0)

        assert len(analysis.resource_timeline) == 2
        first, second = analysis.resource_timeline
        assert first.minerals == 50
        assert second.gas == 120
        assert second.income.minerals == pytest.approx(700)
        assert second.income.gas == pytest.approx(250)

    def test_zero_income_rates_poor(self, analyzer):
        """Test no income gives SQ 0 and a poor rating"""
        timeline = make_timeline([stats_event(0, 1, minerals=50)])

        analysis = analyzer.analyze(timeline, player_id=1, duration=10.0)

        assert analysis.spending_quotient == 0
        assert analysis.rating is SQRating.POOR

    def test_other_players_ignored(self, analyzer):
        """Test only the requested player's samples count"""
        timeline = make_timeline([
            stats_event(0, 1, minerals=100, mineral_rate=600),
            stats_event(0, 2, minerals=5000, mineral_rate=10),
        ])

        analysis = analyzer.analyze(timeline, player_id=1, duration=10.0)

        assert analysis.average_unspent.minerals == pytest.approx(100)
        assert len(analysis.resource_timeline) == 1

    def test_no_events_no_result(self, analyzer):
        """Test a player without stats gets no result"""
        timeline = make_timeline([stats_event(0, 2)])

        assert analyzer.analyze(timeline, player_id=1, duration=10.0) is None
        assert analyzer.analyze(None, player_id=1, duration=10.0) is None

    def test_negative_minerals(self, analyzer):
        """Test malformed negative banks still give an SQ within bounds"""
        timeline = make_timeline([
            stats_event(0, 1, minerals=-50, gas=-20, mineral_rate=800, gas_rate=200),
            stats_event(10, 1, minerals=-50, gas=0, mineral_rate=800, gas_rate=200),
        ])

        analysis = analyzer.analyze(timeline, player_id=1, duration=20.0)

        assert analysis.spending_quotient == pytest.approx(calculate_sq(1000, 0))
        assert 0 <= analysis.spending_quotient <= 200
        assert analysis.average_unspent.minerals == pytest.approx(-50)
