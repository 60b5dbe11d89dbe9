"""
Supply Block Detection

A player is supply blocked while used supply sits at or above the current
cap: no new units can be queued until more supply is built. The detector
walks the player's PlayerStats snapshots with a two-state machine
(unblocked / blocked) and records each blocked interval.
"""

from typing import Optional

from .base import Analyzer
from .models import Severity, SupplyAnalysis, SupplyBlock, SupplyPoint
from ..logging_config import get_logger
from ..timeline import EventKind, StatsPayload, Timeline

logger = get_logger(__name__)


# Severity thresholds in seconds
LOW_SEVERITY_MAX = 5.0
MEDIUM_SEVERITY_MAX = 15.0


def classify_block(duration: float) -> Severity:
    """Severity of a supply block by its length."""
    if duration < LOW_SEVERITY_MAX:
        return Severity.LOW
    if duration < MEDIUM_SEVERITY_MAX:
        return Severity.MEDIUM
    return Severity.HIGH


def is_blocked(supply_used: int, supply_max: int) -> bool:
    # A zero cap is the decoder's "no data yet", never a block
    return supply_max > 0 and supply_used >= supply_max


class SupplyBlockDetector(Analyzer[SupplyAnalysis]):
    """Finds intervals where the player was capped on supply."""

    name = "supply"

    def analyze(
        self,
        timeline: Optional[Timeline],
        player_id: int,
        duration: float,
        race: Optional[str] = None,
    ) -> Optional[SupplyAnalysis]:
        if timeline is None:
            return None

        blocks: list[SupplyBlock] = []
        points: list[SupplyPoint] = []

        # Open block: (start_time, supply_used, supply_max) or None
        open_block: Optional[tuple[float, int, int]] = None

        for event in timeline.tracker_events:
            if event.kind is not EventKind.PLAYER_STATS or event.player_id != player_id:
                continue
            if not isinstance(event.payload, StatsPayload):
                continue

            t = event.seconds
            used = event.payload.supply_used
            cap = event.payload.supply_max
            blocked = is_blocked(used, cap)

            if blocked and open_block is None:
                open_block = (t, used, cap)
            elif not blocked and open_block is not None:
                blocks.append(self._close(open_block, t))
                open_block = None

            points.append(SupplyPoint(time=t, supply_used=used, supply_max=cap, is_blocked=blocked))

        if not points:
            return None

        if open_block is not None:
            # Still capped when the replay ended
            blocks.append(self._close(open_block, max(duration, open_block[0])))

        total = sum(b.duration for b in blocks)
        percentage = 0.0
        if duration > 0:
            percentage = min(100.0, max(0.0, total / duration * 100))

        logger.debug(
            f"Player {player_id}: {len(blocks)} supply blocks, "
            f"{total:.1f}s blocked ({percentage:.1f}%)"
        )

        return SupplyAnalysis(
            blocks=tuple(blocks),
            total_block_time=total,
            block_percentage=percentage,
            supply_timeline=tuple(points),
        )

    @staticmethod
    def _close(open_block: tuple[float, int, int], end_time: float) -> SupplyBlock:
        start, used, cap = open_block
        length = end_time - start
        return SupplyBlock(
            start_time=start,
            end_time=end_time,
            duration=length,
            severity=classify_block(length),
            supply_used=used,
            supply_max=cap,
        )
