"""
Inject Tracking (Zerg)

A queen's Spawn Larva ("inject") on a Hatchery, Lair or Hive takes about 29
seconds. Good Zerg players re-inject each town hall as soon as the previous
inject pops.

The replay does not record which structure a cast targeted. Each cast is
credited to the tracked town hall whose inject expired first, which is what
a player cycling through their hatcheries would do. Efficiency numbers are
therefore an approximation.
"""

from dataclasses import dataclass
from typing import Optional

from .base import Analyzer
from .models import InjectAnalysis, InjectPoint
from .units import INJECT_ABILITY_IDS, is_town_hall
from ..logging_config import get_logger
from ..timeline import ActionPayload, EventKind, Timeline, TimelineEvent, UnitPayload

logger = get_logger(__name__)


INJECT_DURATION_SECONDS = 29.0


@dataclass
class TownHall:
    """Inject state of one Hatchery, Lair or Hive."""
    tag: int
    last_inject_time: float
    inject_end_time: float
    total_injects: int = 0
    missed_injects: int = 0


def _merged_events(timeline: Timeline) -> list[TimelineEvent]:
    """Lifecycle and command events in time order, lifecycle first on equal ticks."""
    tagged = [(e.tick, 0, i, e) for i, e in enumerate(timeline.tracker_events)]
    tagged += [(e.tick, 1, i, e) for i, e in enumerate(timeline.game_events)]
    tagged.sort(key=lambda item: item[:3])
    return [item[3] for item in tagged]


def calculate_efficiency(performed: int, missed: int) -> float:
    """Share of inject opportunities taken, 0 when there were none."""
    opportunities = performed + missed
    if opportunities <= 0:
        return 0.0
    return performed / opportunities * 100


class InjectTracker(Analyzer[InjectAnalysis]):
    """Counts performed and missed injects per town hall."""

    name = "inject"

    def analyze(
        self,
        timeline: Optional[Timeline],
        player_id: int,
        duration: float,
        race: Optional[str] = None,
    ) -> Optional[InjectAnalysis]:
        if timeline is None or not race or race.lower() != "zerg":
            return None

        town_halls: dict[int, TownHall] = {}
        points: list[InjectPoint] = []
        performed = 0
        missed = 0
        seen_any = False

        for event in _merged_events(timeline):
            t = event.seconds
            payload = event.payload

            if isinstance(payload, UnitPayload):
                if event.kind in (EventKind.UNIT_BORN, EventKind.UNIT_DONE):
                    if payload.owner_id != player_id:
                        continue
                    seen_any = True
                    if is_town_hall(payload.unit_type_name) and payload.unit_tag not in town_halls:
                        # Start primed so the first minutes are not counted as missed
                        town_halls[payload.unit_tag] = TownHall(
                            tag=payload.unit_tag,
                            last_inject_time=t,
                            inject_end_time=t,
                        )
                elif event.kind is EventKind.UNIT_DIED:
                    town_halls.pop(payload.unit_tag, None)
                continue

            if event.player_id != player_id or not event.kind.is_action:
                continue
            seen_any = True

            if event.kind is not EventKind.CMD or not isinstance(payload, ActionPayload):
                continue
            if payload.ability_id not in INJECT_ABILITY_IDS:
                continue

            target = self._pick_target(town_halls)
            if target is None:
                continue

            if t > target.inject_end_time + INJECT_DURATION_SECONDS:
                skipped = int((t - target.inject_end_time) / INJECT_DURATION_SECONDS)
                target.missed_injects += skipped
                missed += skipped

            target.last_inject_time = t
            target.inject_end_time = t + INJECT_DURATION_SECONDS
            target.total_injects += 1
            performed += 1
            points.append(InjectPoint(time=t, hatchery_id=target.tag, injected=True))

        if not seen_any:
            return None

        efficiency = calculate_efficiency(performed, missed)

        logger.debug(
            f"Player {player_id}: {performed} injects, ~{missed} missed "
            f"({efficiency:.0f}% efficiency) across {len(town_halls)} town halls"
        )

        return InjectAnalysis(
            total_injects=performed,
            missed_injects=missed,
            efficiency=efficiency,
            inject_timeline=tuple(points),
        )

    @staticmethod
    def _pick_target(town_halls: dict[int, TownHall]) -> Optional[TownHall]:
        """Town hall whose inject ran out first; ties go to the earliest tracked."""
        target = None
        for hall in town_halls.values():
            if target is None or hall.inject_end_time < target.inject_end_time:
                target = hall
        return target
