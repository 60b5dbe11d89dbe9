"""
Build Order Extraction

Reconstructs the opening (first 8 minutes) from structure placements, key
unit births and completed upgrades, each stamped with the player's supply at
that moment.
"""

from typing import Optional

from .base import Analyzer
from .models import BuildOrderItem
from .units import (
    format_unit_name,
    format_upgrade_name,
    is_build_order_structure,
    is_build_order_unit,
    is_cosmetic_upgrade,
    is_worker,
)
from ..logging_config import get_logger
from ..timeline import (
    EventKind,
    StatsPayload,
    Timeline,
    UnitPayload,
    UpgradePayload,
    seconds_to_ticks,
)

logger = get_logger(__name__)


BUILD_ORDER_HORIZON_SECONDS = 480.0
BUILD_ORDER_HORIZON_TICKS = seconds_to_ticks(BUILD_ORDER_HORIZON_SECONDS)

ACTION_BUILD = "Build"
ACTION_TRAIN = "Train"
ACTION_TRAIN_WORKER = "Train Worker"
ACTION_UPGRADE = "Upgrade"


class BuildOrderExtractor(Analyzer[tuple[BuildOrderItem, ...]]):
    """Opening build order for one player."""

    name = "build_order"

    def analyze(
        self,
        timeline: Optional[Timeline],
        player_id: int,
        duration: float,
        race: Optional[str] = None,
    ) -> Optional[tuple[BuildOrderItem, ...]]:
        if timeline is None:
            return None

        items: list[tuple[int, BuildOrderItem]] = []
        supply = 0
        seen_any = False

        for event in timeline.tracker_events:
            payload = event.payload

            if isinstance(payload, StatsPayload):
                if event.player_id == player_id:
                    supply = payload.supply_used
                    seen_any = True
                continue

            entry = None
            if isinstance(payload, UnitPayload) and payload.owner_id == player_id:
                seen_any = True
                entry = self._unit_entry(event.kind, payload.unit_type_name)
            elif isinstance(payload, UpgradePayload) and event.player_id == player_id:
                seen_any = True
                entry = self._upgrade_entry(payload.upgrade_type_name)

            if entry is not None:
                action, name = entry
                items.append((event.tick, BuildOrderItem(
                    time=event.seconds,
                    supply=supply,
                    action=action,
                    unit_or_building=name,
                )))

        if not seen_any:
            return None

        # Horizon is compared in game loops (8:00 is loop 10752)
        items.sort(key=lambda entry: entry[0])
        opening = tuple(item for tick, item in items if tick <= BUILD_ORDER_HORIZON_TICKS)

        logger.debug(f"Player {player_id}: {len(opening)} build order entries")
        return opening

    @staticmethod
    def _unit_entry(kind: EventKind, unit_type: str) -> Optional[tuple[str, str]]:
        if not unit_type:
            return None

        if kind is EventKind.UNIT_INIT and is_build_order_structure(unit_type):
            return ACTION_BUILD, format_unit_name(unit_type)

        if kind is EventKind.UNIT_BORN and is_build_order_unit(unit_type):
            action = ACTION_TRAIN_WORKER if is_worker(unit_type) else ACTION_TRAIN
            return action, format_unit_name(unit_type)

        return None

    @staticmethod
    def _upgrade_entry(upgrade_name: str) -> Optional[tuple[str, str]]:
        if not upgrade_name or is_cosmetic_upgrade(upgrade_name):
            return None
        return ACTION_UPGRADE, format_upgrade_name(upgrade_name)
