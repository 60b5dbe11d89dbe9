"""
APM Aggregation

Actions per minute over the whole match, per 30 second window, and an
"effective" variant (EAPM) that drops actions issued within half a game
second of the previous one (spam clicks, repeated selections).
"""

from collections import Counter
from typing import Optional

from .base import Analyzer
from .models import APMAnalysis, APMPoint
from ..logging_config import get_logger
from ..timeline import EventKind, Timeline, seconds_to_ticks

logger = get_logger(__name__)


WINDOW_SECONDS = 30.0
WINDOW_TICKS = seconds_to_ticks(WINDOW_SECONDS)

# 8 loops is half a game second
MIN_EFFECTIVE_GAP_TICKS = 8

# Camera moves and command-queue bookkeeping are not player decisions
COUNTABLE_KINDS = frozenset({
    EventKind.CMD,
    EventKind.CMD_UPDATE_TARGET_POINT,
    EventKind.CMD_UPDATE_TARGET_UNIT,
    EventKind.SELECTION_DELTA,
    EventKind.CONTROL_GROUP_UPDATE,
})


class APMAggregator(Analyzer[APMAnalysis]):
    """Average APM, EAPM, peak window APM and the per-window timeline."""

    name = "apm"

    def analyze(
        self,
        timeline: Optional[Timeline],
        player_id: int,
        duration: float,
        race: Optional[str] = None,
    ) -> Optional[APMAnalysis]:
        if timeline is None or duration <= 0:
            return None

        windows: Counter[int] = Counter()
        total = 0
        effective = 0
        last_tick = 0
        seen_any = False

        for event in timeline.game_events:
            if event.player_id != player_id:
                continue
            seen_any = True
            if event.kind not in COUNTABLE_KINDS:
                continue

            total += 1
            if event.tick - last_tick >= MIN_EFFECTIVE_GAP_TICKS:
                effective += 1
            last_tick = event.tick

            windows[event.tick // WINDOW_TICKS] += 1

        if not seen_any:
            return None

        minutes = duration / 60.0
        per_window = 60.0 / WINDOW_SECONDS

        points = tuple(
            APMPoint(time=index * WINDOW_SECONDS, apm=count * per_window, actions=count)
            for index, count in sorted(windows.items())
        )
        peak = max((p.apm for p in points), default=0.0)

        analysis = APMAnalysis(
            average_apm=total / minutes,
            eapm=effective / minutes,
            peak_apm=peak,
            total_actions=total,
            effective_actions=effective,
            apm_timeline=points,
        )

        logger.debug(
            f"Player {player_id}: {total} actions, APM {analysis.average_apm:.0f}, "
            f"EAPM {analysis.eapm:.0f}, peak {peak:.0f}"
        )
        return analysis
