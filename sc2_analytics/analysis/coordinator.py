"""
Analysis Coordinator

Runs every analyzer for a player and assembles the AnalysisResult.

Analyzers are independent read-only passes over the same immutable timeline,
so they run concurrently on a thread pool when parallel analysis is enabled.
Suggestions are built only after all of them have finished, in a fixed order,
so the result is identical in parallel and sequential mode.
"""

import contextvars
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Iterable

from .apm import APMAggregator
from .army import ArmySampler
from .base import Analyzer
from .build_order import BuildOrderExtractor
from .inject import InjectTracker
from .models import AnalysisResult
from .spending import SpendingAnalyzer
from .suggestions import build_suggestions
from .supply import SupplyBlockDetector
from ..config import AnalysisConfig, get_config
from ..exceptions import InvalidTimelineError, PlayerAnalysisError, SC2AnalyticsError
from ..logging_config import LogContext, get_correlation_id, get_logger
from ..timeline import Timeline
from ..validation import normalize_race, validate_duration, validate_player_id

logger = get_logger(__name__)


def default_analyzers() -> tuple[Analyzer, ...]:
    return (
        SupplyBlockDetector(),
        SpendingAnalyzer(),
        APMAggregator(),
        BuildOrderExtractor(),
        InjectTracker(),
        ArmySampler(),
    )


class AnalysisCoordinator:
    """
    Entry point of the engine.

    Usage:
        coordinator = AnalysisCoordinator()
        result = coordinator.analyze_player(timeline, player_id=1, race="Zerg")
        payload = result.to_json()
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        analyzers: Optional[Iterable[Analyzer]] = None,
    ):
        self.config = config or get_config().analysis
        self.analyzers = tuple(analyzers) if analyzers is not None else default_analyzers()

    # ============================================================
    # Single Player
    # ============================================================

    def analyze_player(
        self,
        timeline: Optional[Timeline],
        player_id: int,
        race: Optional[str] = None,
        duration: Optional[float] = None,
    ) -> AnalysisResult:
        """
        Run every analyzer for one player.

        Args:
            timeline: Decoded replay
            player_id: Player slot
            race: Player race; defaults to the race in the replay details
            duration: Match length in real seconds; defaults to the timeline's

        Raises:
            InvalidTimelineError: If no timeline is given
            ValidationError: If player id, race or duration are invalid
            PlayerAnalysisError: If an analyzer fails
        """
        if timeline is None:
            raise InvalidTimelineError("no timeline given")

        player_id = validate_player_id(player_id)
        duration = validate_duration(timeline.duration if duration is None else duration)

        if race is None:
            info = timeline.player(player_id)
            race = info.race if info else "unknown"
        race = normalize_race(race)

        try:
            results = self._run_analyzers(timeline, player_id, duration, race)
        except Exception as e:
            raise PlayerAnalysisError(player_id, f"{type(e).__name__}: {e}") from e

        result = AnalysisResult(
            player_id=player_id,
            race=race,
            supply_analysis=results.get("supply"),
            spending_analysis=results.get("spending"),
            apm_analysis=results.get("apm"),
            build_order=results.get("build_order"),
            inject_analysis=results.get("inject"),
            army_analysis=results.get("army"),
            suggestions=build_suggestions(
                supply=results.get("supply"),
                spending=results.get("spending"),
                apm=results.get("apm"),
                inject=results.get("inject"),
                army=results.get("army"),
            ),
        )

        logger.info(
            f"Analyzed player {player_id} ({race}): "
            f"{len(result.suggestions)} suggestions"
        )
        return result

    def _run_analyzers(
        self,
        timeline: Timeline,
        player_id: int,
        duration: float,
        race: str,
    ) -> dict:
        if not self.config.parallel or len(self.analyzers) < 2:
            return {
                analyzer.name: analyzer.analyze(timeline, player_id, duration, race)
                for analyzer in self.analyzers
            }

        workers = max(1, min(self.config.max_workers, len(self.analyzers)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sc2-analysis") as pool:
            # Each worker gets a copy of the caller's context so log lines keep
            # the replay correlation id
            futures = {
                analyzer.name: pool.submit(
                    contextvars.copy_context().run,
                    analyzer.analyze, timeline, player_id, duration, race,
                )
                for analyzer in self.analyzers
            }
            return {name: future.result() for name, future in futures.items()}

    # ============================================================
    # Batch
    # ============================================================

    def analyze_players(
        self,
        timeline: Optional[Timeline],
        players: Optional[Iterable[int]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> dict[int, AnalysisResult]:
        """
        Analyze several players of one replay.

        A player whose analysis fails is logged and skipped. Setting
        cancel_event stops the batch before the next player; results
        finished so far are returned.

        Args:
            timeline: Decoded replay
            players: Player ids; defaults to the replay's (human) players
            cancel_event: Optional cancellation flag

        Raises:
            InvalidTimelineError: If no timeline is given
        """
        if timeline is None:
            raise InvalidTimelineError("no timeline given")

        if players is None:
            player_ids = [
                p.player_id for p in timeline.players
                if p.is_human or not self.config.humans_only
            ]
        else:
            player_ids = list(players)

        results: dict[int, AnalysisResult] = {}

        with LogContext(correlation_id=get_correlation_id() or str(uuid.uuid4())):
            logger.info(f"Analyzing {len(player_ids)} players")

            for player_id in player_ids:
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning(
                        f"Analysis cancelled after {len(results)} of {len(player_ids)} players"
                    )
                    break

                info = timeline.player(player_id) if isinstance(player_id, int) else None
                try:
                    results[player_id] = self.analyze_player(
                        timeline,
                        player_id,
                        race=info.race if info else None,
                    )
                except SC2AnalyticsError as e:
                    logger.warning(f"Skipping player {player_id}: {e}", exc_info=True)

        return results

    def analyze_and_serialize(
        self,
        timeline: Optional[Timeline],
        players: Optional[Iterable[int]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> dict[int, str]:
        """
        Analyze players and serialize each result to JSON, ready for storage.

        Raises:
            AnalysisSerializationError: If a finished result cannot be serialized
        """
        results = self.analyze_players(timeline, players, cancel_event)

        serialized = {}
        for player_id, result in results.items():
            serialized[player_id] = result.to_json()

        return serialized

    # ============================================================
    # Summary Metrics
    # ============================================================

    def player_metrics(self, timeline: Optional[Timeline], player_id: int) -> tuple[float, float]:
        """
        (average APM, spending quotient) for summary columns.

        Returns (0, 0) when the player cannot be analyzed.
        """
        try:
            result = self.analyze_player(timeline, player_id)
        except SC2AnalyticsError as e:
            logger.debug(f"No metrics for player {player_id}: {e}")
            return 0.0, 0.0

        apm = result.apm_analysis.average_apm if result.apm_analysis else 0.0
        sq = result.spending_analysis.spending_quotient if result.spending_analysis else 0.0
        return apm, sq

