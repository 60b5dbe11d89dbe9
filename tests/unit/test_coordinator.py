"""
Unit tests for the analysis coordinator.
"""

import json
import threading

import pytest
from sc2_analytics.analysis.base import Analyzer
from sc2_analytics.analysis.coordinator import AnalysisCoordinator, default_analyzers
from sc2_analytics.analysis.models import AnalysisResult
from sc2_analytics.config import AnalysisConfig
from sc2_analytics.exceptions import InvalidTimelineError, PlayerAnalysisError, ValidationError
from sc2_analytics.logging_config import LogContext, get_correlation_id
from sc2_analytics.timeline import Timeline
from tests.fixtures.sample_timelines import make_timeline, stats_event


class RecordingAnalyzer(Analyzer):
    """Records the correlation id each call runs under"""

    name = "recording"

    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def analyze(self, timeline, player_id, duration, race=None):
        with self._lock:
            self.calls.append((player_id, get_correlation_id()))
        return None


class FailingAnalyzer(Analyzer):
    """Blows up for one player"""

    name = "failing"

    def __init__(self, bad_player):
        self.bad_player = bad_player

    def analyze(self, timeline, player_id, duration, race=None):
        if player_id == self.bad_player:
            raise RuntimeError("decoder garbage")
        return None


class CancellingAnalyzer(Analyzer):
    """Requests cancellation while the first player runs"""

    name = "cancelling"

    def __init__(self, event):
        self.event = event

    def analyze(self, timeline, player_id, duration, race=None):
        self.event.set()
        return None


@pytest.fixture
def coordinator(sequential_config):
    return AnalysisCoordinator(config=sequential_config)


class TestAnalyzePlayer:
    """Tests for single player analysis"""

    def test_sample_zerg(self, coordinator, sample_game):
        """Test every analyzer contributes for the sample Zerg"""
        result = coordinator.analyze_player(sample_game, player_id=1)

        assert result.player_id == 1
        assert result.race == "zerg"
        assert result.supply_analysis is not None
        assert result.spending_analysis is not None
        assert result.apm_analysis is not None
        assert result.inject_analysis is not None
        assert result.army_analysis is not None
        assert len(result.build_order) == 6
        assert len(result.suggestions) == 7
        assert not result.is_empty

    def test_sample_terran(self, coordinator, sample_game):
        """Test the Terran gets no inject analysis and no suggestions"""
        result = coordinator.analyze_player(sample_game, player_id=2)

        assert result.race == "terran"
        assert result.inject_analysis is None
        assert result.army_analysis.peak_army_value == 650
        assert result.suggestions == ()

    def test_explicit_race_wins(self, coordinator, sample_game):
        """Test a given race overrides the replay details"""
        result = coordinator.analyze_player(sample_game, player_id=1, race="Terran")

        assert result.race == "terran"
        assert result.inject_analysis is None

    def test_unknown_race_normalized(self, coordinator, sample_game):
        """Test an unrecognized race becomes unknown"""
        result = coordinator.analyze_player(sample_game, player_id=1, race="Tauren")

        assert result.race == "unknown"

    def test_player_without_events(self, coordinator):
        """Test a player with no events gets an empty result"""
        timeline = make_timeline([], duration=60.0)

        result = coordinator.analyze_player(timeline, player_id=1, race="zerg")

        assert result.is_empty
        assert result.build_order is None
        assert result.suggestions == ()

    def test_duration_override(self, coordinator, sample_game):
        """Test an explicit duration replaces the timeline's"""
        result = coordinator.analyze_player(sample_game, player_id=1, duration=600.0)

        assert result.supply_analysis.block_percentage == pytest.approx(20 / 600 * 100, abs=0.1)

    def test_missing_timeline(self, coordinator):
        """Test no timeline is rejected"""
        with pytest.raises(InvalidTimelineError):
            coordinator.analyze_player(None, player_id=1)

    @pytest.mark.parametrize("player_id", [0, 17, -1, "1", True, None])
    def test_invalid_player_id(self, coordinator, sample_game, player_id):
        """Test out-of-range or non-integer ids are rejected"""
        with pytest.raises(ValidationError):
            coordinator.analyze_player(sample_game, player_id=player_id)

    def test_invalid_duration(self, coordinator, sample_game):
        """Test a negative or NaN duration is rejected"""
        with pytest.raises(ValidationError):
            coordinator.analyze_player(sample_game, player_id=1, duration=-1)
        with pytest.raises(ValidationError):
            coordinator.analyze_player(sample_game, player_id=1, duration=float("nan"))

    def test_analyzer_failure_wrapped(self, sequential_config, sample_game):
        """Test an analyzer crash surfaces as a player analysis error"""
        coordinator = AnalysisCoordinator(
            config=sequential_config,
            analyzers=(FailingAnalyzer(bad_player=1),),
        )

        with pytest.raises(PlayerAnalysisError) as exc_info:
            coordinator.analyze_player(sample_game, player_id=1)

        assert exc_info.value.player_id == 1
        assert "decoder garbage" in exc_info.value.reason
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert coordinator.player_metrics(sample_game, player_id=1) == (0.0, 0.0)

    def test_negative_bank_not_fatal(self, coordinator):
        """Test malformed negative minerals do not lose the player"""
        timeline = make_timeline([
            stats_event(0, 1, used=12, made=14, minerals=-50, mineral_rate=500),
            stats_event(10, 1, used=13, made=14, minerals=-50, mineral_rate=600),
        ], duration=20.0)

        result = coordinator.analyze_player(timeline, player_id=1, race="terran")

        assert 0 <= result.spending_analysis.spending_quotient <= 200

    def test_parallel_matches_sequential(self, sequential_config, parallel_config, sample_game):
        """Test concurrent analyzers give exactly the sequential result"""
        sequential = AnalysisCoordinator(config=sequential_config)
        parallel = AnalysisCoordinator(config=parallel_config)

        for player_id in (1, 2):
            expected = sequential.analyze_player(sample_game, player_id)
            actual = parallel.analyze_player(sample_game, player_id)

            assert actual == expected
            assert actual.to_json() == expected.to_json()

    def test_default_analyzers(self):
        """Test one instance of each analysis pass"""
        names = [a.name for a in default_analyzers()]

        assert sorted(names) == ["apm", "army", "build_order", "inject", "spending", "supply"]

    def test_uses_global_config_by_default(self, monkeypatch):
        """Test the coordinator reads the environment when given no config"""
        monkeypatch.setenv("ANALYSIS_PARALLEL", "false")
        monkeypatch.setenv("ANALYSIS_MAX_WORKERS", "3")

        coordinator = AnalysisCoordinator()

        assert coordinator.config.parallel is False
        assert coordinator.config.max_workers == 3


class TestAnalyzePlayers:
    """Tests for batch analysis"""

    def test_all_players(self, coordinator, sample_game):
        """Test every listed player is analyzed"""
        results = coordinator.analyze_players(sample_game)

        assert sorted(results) == [1, 2]
        assert results[1].race == "zerg"
        assert results[2].race == "terran"

    def test_humans_only(self, sample_document):
        """Test computer players are skipped unless configured otherwise"""
        timeline = Timeline.from_dict(sample_document)

        humans = AnalysisCoordinator(config=AnalysisConfig(parallel=False, humans_only=True))
        everyone = AnalysisCoordinator(config=AnalysisConfig(parallel=False, humans_only=False))

        assert list(humans.analyze_players(timeline)) == [1]
        assert sorted(everyone.analyze_players(timeline)) == [1, 2]

    def test_explicit_players(self, coordinator, sample_game):
        """Test an explicit player list is used as given"""
        results = coordinator.analyze_players(sample_game, players=[2])

        assert list(results) == [2]

    def test_failing_player_skipped(self, sequential_config, sample_game):
        """Test one player's failure does not stop the batch"""
        coordinator = AnalysisCoordinator(
            config=sequential_config,
            analyzers=default_analyzers() + (FailingAnalyzer(bad_player=1),),
        )

        results = coordinator.analyze_players(sample_game)

        assert list(results) == [2]

    def test_invalid_player_skipped(self, coordinator, sample_game):
        """Test an invalid id in the list is skipped"""
        results = coordinator.analyze_players(sample_game, players=[99, 1])

        assert list(results) == [1]

    def test_cancel_before_start(self, coordinator, sample_game):
        """Test a cancelled batch returns nothing"""
        cancel = threading.Event()
        cancel.set()

        assert coordinator.analyze_players(sample_game, cancel_event=cancel) == {}

    def test_cancel_returns_partial_results(self, sequential_config, sample_game):
        """Test cancellation keeps players already finished"""
        cancel = threading.Event()
        coordinator = AnalysisCoordinator(
            config=sequential_config,
            analyzers=(CancellingAnalyzer(cancel),),
        )

        results = coordinator.analyze_players(sample_game, cancel_event=cancel)

        assert list(results) == [1]

    def test_missing_timeline(self, coordinator):
        """Test no timeline is rejected"""
        with pytest.raises(InvalidTimelineError):
            coordinator.analyze_players(None)

    def test_batch_shares_correlation_id(self, parallel_config, sample_game):
        """Test every analyzer call of one batch logs under one id"""
        recorder = RecordingAnalyzer()
        coordinator = AnalysisCoordinator(
            config=parallel_config,
            analyzers=default_analyzers() + (recorder,),
        )

        coordinator.analyze_players(sample_game)

        ids = {corr_id for _, corr_id in recorder.calls}
        assert len(recorder.calls) == 2
        assert len(ids) == 1
        assert None not in ids
        assert get_correlation_id() is None

    def test_existing_correlation_id_kept(self, sequential_config, sample_game):
        """Test a caller's correlation id is reused"""
        recorder = RecordingAnalyzer()
        coordinator = AnalysisCoordinator(config=sequential_config, analyzers=(recorder,))

        with LogContext(correlation_id="replay-42"):
            coordinator.analyze_players(sample_game)

        assert {corr_id for _, corr_id in recorder.calls} == {"replay-42"}


class TestSerializationAndMetrics:
    """Tests for JSON output and summary metrics"""

    def test_analyze_and_serialize(self, coordinator, sample_game):
        """Test each player's result is valid JSON that loads back"""
        payloads = coordinator.analyze_and_serialize(sample_game)

        assert sorted(payloads) == [1, 2]
        data = json.loads(payloads[1])
        assert data["player_id"] == 1
        assert data["inject_analysis"]["total_injects"] == 4

        restored = AnalysisResult.from_json(payloads[1])
        assert restored == coordinator.analyze_player(sample_game, player_id=1)

    def test_player_metrics(self, coordinator, sample_game):
        """Test APM and SQ for summary columns"""
        apm, sq = coordinator.player_metrics(sample_game, player_id=2)

        assert apm == pytest.approx(72.0)
        assert 110 <= sq < 130

    def test_player_metrics_fallback(self, coordinator, sample_game):
        """Test unanalyzable players give zeros"""
        assert coordinator.player_metrics(sample_game, player_id=0) == (0.0, 0.0)
        assert coordinator.player_metrics(None, player_id=1) == (0.0, 0.0)

    def test_player_metrics_without_events(self, coordinator):
        """Test a player without events gives zeros"""
        timeline = make_timeline([], duration=60.0)

        assert coordinator.player_metrics(timeline, player_id=1) == (0.0, 0.0)
