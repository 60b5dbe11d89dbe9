"""
Army Sampling

Tracks the resource value of a player's living combat units and samples it
every 30 seconds of game time.

The sample clock runs on the shared tracker stream (every player's events),
not on the analyzed player's own events, so two players of the same replay
are sampled at identical times. Critical-moment detection in the strategic
comparison relies on that alignment.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Optional

from .base import Analyzer
from .models import ArmyAnalysis, ArmyPoint, UnitCount
from .units import is_army_unit, unit_cost, unit_value
from ..logging_config import get_logger
from ..timeline import EventKind, Timeline, UnitPayload, seconds_to_ticks

logger = get_logger(__name__)


SAMPLE_INTERVAL_SECONDS = 30.0

# The clock runs on loops so sample times never drift with float rounding
SAMPLE_INTERVAL_TICKS = seconds_to_ticks(SAMPLE_INTERVAL_SECONDS)


@dataclass(frozen=True)
class LiveUnit:
    unit_type: str
    mineral_cost: int
    gas_cost: int

    @property
    def value(self) -> int:
        return self.mineral_cost + self.gas_cost


def final_composition(counts: Counter) -> tuple[UnitCount, ...]:
    """
    Surviving units per type, most valuable first.

    Types whose count dropped to zero or below are left out.
    """
    entries = [
        UnitCount(unit_type=unit_type, count=count, value=count * unit_value(unit_type))
        for unit_type, count in counts.items()
        if count > 0
    ]
    entries.sort(key=lambda u: (-u.value, u.unit_type))
    return tuple(entries)


class ArmySampler(Analyzer[ArmyAnalysis]):
    """Army value over time, peak army value and final composition."""

    name = "army"

    def analyze(
        self,
        timeline: Optional[Timeline],
        player_id: int,
        duration: float,
        race: Optional[str] = None,
    ) -> Optional[ArmyAnalysis]:
        if timeline is None:
            return None

        living: dict[int, LiveUnit] = {}
        counts: Counter = Counter()
        points: list[ArmyPoint] = []
        peak = 0
        last_sample_tick = 0
        owns_units = False

        for event in timeline.tracker_events:
            t = event.seconds
            payload = event.payload

            if isinstance(payload, UnitPayload):
                if event.kind in (EventKind.UNIT_BORN, EventKind.UNIT_DONE):
                    if payload.owner_id == player_id:
                        owns_units = True
                        if is_army_unit(payload.unit_type_name):
                            minerals, gas = unit_cost(payload.unit_type_name)
                            living[payload.unit_tag] = LiveUnit(payload.unit_type_name, minerals, gas)
                            counts[payload.unit_type_name] += 1

                elif event.kind is EventKind.UNIT_DIED:
                    # Tags are unique per replay, the killer's owner does not matter
                    unit = living.pop(payload.unit_tag, None)
                    if unit is not None:
                        counts[unit.unit_type] -= 1

            if event.tick >= last_sample_tick + SAMPLE_INTERVAL_TICKS:
                value = sum(u.value for u in living.values())
                peak = max(peak, value)
                points.append(ArmyPoint(time=t, value=value, unit_count=len(living)))
                last_sample_tick = event.tick

        if not owns_units:
            return None

        composition = final_composition(counts)

        logger.debug(
            f"Player {player_id}: {len(points)} army samples, peak value {peak}, "
            f"{sum(u.count for u in composition)} units alive at end"
        )

        return ArmyAnalysis(
            peak_army_value=peak,
            army_timeline=tuple(points),
            unit_composition=composition,
        )
