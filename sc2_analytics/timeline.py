"""
Replay Timeline Model

Normalized, immutable view of a decoded replay that every analyzer scans.

The decoder hands over loosely typed key/value maps. Each event kind is
mapped to a typed payload (a small tagged union) so analyzers read named
fields instead of digging through nested dicts. The original map is kept on
every payload as a fallback bag, so unknown keys and new event kinds pass
through untouched.

Two streams matter:
- tracker stream: periodic PlayerStats snapshots plus unit lifecycle and
  upgrade events
- game stream: discrete player commands (APM, ability casts)
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Optional, Any, Iterable, Mapping, Union

from .exceptions import InvalidTimelineError, ValidationError
from .logging_config import get_logger
from .validation import validate_result

logger = get_logger(__name__)


# ============================================================
# Time Conversion
# ============================================================

# "Faster" game speed: 16 loops per game second, game time runs 1.4x real time
TICKS_PER_GAME_SECOND = 16
GAME_SPEED_FACTOR = 1.4

# Collection rates and food values are fixed point
FIXED_POINT_SCALE = 4096


def ticks_to_seconds(ticks: int) -> float:
    """Convert game loops to real seconds."""
    return ticks / TICKS_PER_GAME_SECOND / GAME_SPEED_FACTOR


def seconds_to_ticks(seconds: float) -> int:
    """Convert real seconds to the nearest game loop."""
    return int(round(seconds * TICKS_PER_GAME_SECOND * GAME_SPEED_FACTOR))


# ============================================================
# Event Kinds
# ============================================================

class EventStream(Enum):
    """Decoder stream an event kind belongs to."""
    TRACKER = "tracker"
    GAME = "game"


class EventKind(Enum):
    """Event types as named by the replay decoder."""
    # State
    PLAYER_STATS = "PlayerStats"

    # Lifecycle
    UNIT_BORN = "UnitBorn"
    UNIT_DONE = "UnitDone"
    UNIT_INIT = "UnitInit"
    UNIT_DIED = "UnitDied"
    UNIT_TYPE_CHANGE = "UnitTypeChange"
    UPGRADE = "Upgrade"

    # Actions
    CMD = "Cmd"
    CMD_UPDATE_TARGET_POINT = "CmdUpdateTargetPoint"
    CMD_UPDATE_TARGET_UNIT = "CmdUpdateTargetUnit"
    SELECTION_DELTA = "SelectionDelta"
    CONTROL_GROUP_UPDATE = "ControlGroupUpdate"
    CAMERA_UPDATE = "CameraUpdate"
    COMMAND_MANAGER_STATE = "CommandManagerState"

    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: Any) -> "EventKind":
        """Map a decoder event name to a kind; unknown names become UNKNOWN."""
        if isinstance(value, EventKind):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def stream(self) -> EventStream:
        if self in ACTION_KINDS:
            return EventStream.GAME
        return EventStream.TRACKER

    @property
    def is_action(self) -> bool:
        return self in ACTION_KINDS


UNIT_KINDS = frozenset({
    EventKind.UNIT_BORN,
    EventKind.UNIT_DONE,
    EventKind.UNIT_INIT,
    EventKind.UNIT_DIED,
    EventKind.UNIT_TYPE_CHANGE,
})

ACTION_KINDS = frozenset({
    EventKind.CMD,
    EventKind.CMD_UPDATE_TARGET_POINT,
    EventKind.CMD_UPDATE_TARGET_UNIT,
    EventKind.SELECTION_DELTA,
    EventKind.CONTROL_GROUP_UPDATE,
    EventKind.CAMERA_UPDATE,
    EventKind.COMMAND_MANAGER_STATE,
})


# ============================================================
# Value Coercion
# ============================================================

def as_int(value: Any, default: int = 0) -> int:
    """Integer view of a decoder value; floats truncate, anything else is default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return default
        return int(value)
    return default


def as_float(value: Any, default: float = 0.0) -> float:
    """Float view of a decoder value."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return float(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return default
        return value
    return default


def as_str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _first_int(data: Mapping[str, Any], keys: Iterable[str]) -> int:
    """First numeric value among alternate key names, 0 when none is usable."""
    for key in keys:
        value = data.get(key)
        if _is_number(value):
            return as_int(value)
    return 0


def _freeze(data: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(data))


# ============================================================
# Payloads
# ============================================================

# Alternate owner keys on unit events, in lookup order
OWNER_KEYS = ("controlPlayerId", "upkeepPlayerId")


@dataclass(frozen=True)
class StatsPayload:
    """PlayerStats snapshot (values from the nested "stats" map)."""
    food_used: int = 0
    food_made: int = 0
    minerals_current: float = 0.0
    vespene_current: float = 0.0
    minerals_collection_rate: float = 0.0
    vespene_collection_rate: float = 0.0
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StatsPayload":
        stats = as_mapping(data.get("stats"))
        return cls(
            food_used=as_int(stats.get("scoreValueFoodUsed")),
            food_made=as_int(stats.get("scoreValueFoodMade")),
            minerals_current=as_float(stats.get("scoreValueMineralsCurrent")),
            vespene_current=as_float(stats.get("scoreValueVespeneCurrent")),
            minerals_collection_rate=as_float(stats.get("scoreValueMineralsCollectionRate")),
            vespene_collection_rate=as_float(stats.get("scoreValueVespeneCollectionRate")),
            extra=_freeze(data),
        )

    @property
    def supply_used(self) -> int:
        return self.food_used // FIXED_POINT_SCALE

    @property
    def supply_max(self) -> int:
        return self.food_made // FIXED_POINT_SCALE

    @property
    def income_rate(self) -> float:
        """Combined mineral + gas collection rate per minute."""
        return (self.minerals_collection_rate + self.vespene_collection_rate) / FIXED_POINT_SCALE


@dataclass(frozen=True)
class UnitPayload:
    """Unit birth, completion, death or morph."""
    owner_id: int = 0
    unit_type_name: str = ""
    unit_tag: int = 0
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UnitPayload":
        return cls(
            owner_id=_first_int(data, OWNER_KEYS),
            unit_type_name=as_str(data.get("unitTypeName")),
            unit_tag=as_int(data.get("unitTagIndex")),
            extra=_freeze(data),
        )


@dataclass(frozen=True)
class UpgradePayload:
    """Completed upgrade."""
    upgrade_type_name: str = ""
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UpgradePayload":
        return cls(
            upgrade_type_name=as_str(data.get("upgradeTypeName")),
            extra=_freeze(data),
        )


@dataclass(frozen=True)
class ActionPayload:
    """Player command; only the ability link is interpreted."""
    ability_id: int = 0
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ActionPayload":
        abil = as_mapping(data.get("abil"))
        return cls(
            ability_id=as_int(abil.get("abilLink")),
            extra=_freeze(data),
        )


@dataclass(frozen=True)
class GenericPayload:
    """Any event kind the engine does not interpret."""
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GenericPayload":
        return cls(extra=_freeze(data))


Payload = Union[StatsPayload, UnitPayload, UpgradePayload, ActionPayload, GenericPayload]


def parse_payload(kind: EventKind, data: Optional[Mapping[str, Any]]) -> Payload:
    """Build the typed payload for an event kind from the raw decoder map."""
    data = as_mapping(data)

    if kind is EventKind.PLAYER_STATS:
        return StatsPayload.from_mapping(data)
    if kind in UNIT_KINDS:
        return UnitPayload.from_mapping(data)
    if kind is EventKind.UPGRADE:
        return UpgradePayload.from_mapping(data)
    if kind in ACTION_KINDS:
        return ActionPayload.from_mapping(data)
    return GenericPayload.from_mapping(data)


# ============================================================
# Events and Timeline
# ============================================================

@dataclass(frozen=True)
class TimelineEvent:
    """A single decoded event."""
    tick: int
    kind: EventKind
    player_id: Optional[int] = None
    payload: Payload = field(default_factory=GenericPayload)

    @property
    def seconds(self) -> float:
        return ticks_to_seconds(self.tick)

    @classmethod
    def create(
        cls,
        tick: int,
        kind: Union[EventKind, str],
        player_id: Optional[int] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> "TimelineEvent":
        """Build an event from a kind and a raw payload map."""
        kind = EventKind.parse(kind)
        return cls(tick=tick, kind=kind, player_id=player_id, payload=parse_payload(kind, data))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TimelineEvent":
        """
        Build an event from a decoder record.

        Accepts both the engine's own field names (tick, kind, player_id,
        payload) and the decoder's (loop, eventType, playerId, data).
        """
        payload = as_mapping(data.get("payload", data.get("data")))

        raw_player = data.get("playerId", data.get("player_id"))
        if raw_player is None:
            raw_player = payload.get("playerId")
        player_id = as_int(raw_player) if _is_number(raw_player) else None

        return cls.create(
            tick=as_int(data.get("tick", data.get("loop"))),
            kind=data.get("kind", data.get("eventType")),
            player_id=player_id,
            data=payload,
        )


def _parse_result(value: Any) -> str:
    try:
        return validate_result(value)
    except ValidationError:
        return "Undecided"


@dataclass(frozen=True)
class PlayerInfo:
    """Replay participant as reported by the replay details."""
    player_id: int
    name: str = ""
    race: str = "Unknown"
    result: str = "Undecided"
    is_human: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlayerInfo":
        is_human = data.get("isHuman", data.get("is_human", True))
        return cls(
            player_id=as_int(data.get("playerId", data.get("player_id", data.get("slot")))),
            name=as_str(data.get("name")),
            race=as_str(data.get("race"), "Unknown"),
            result=_parse_result(data.get("result")),
            is_human=is_human if isinstance(is_human, bool) else True,
        )


@dataclass(frozen=True)
class Timeline:
    """
    Complete decoded replay: events in decoder order, the authoritative match
    duration in real seconds, and the participants.
    """
    events: tuple[TimelineEvent, ...] = ()
    duration: float = 0.0
    players: tuple[PlayerInfo, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "events", tuple(self.events))
        object.__setattr__(self, "players", tuple(self.players))

    @cached_property
    def tracker_events(self) -> tuple[TimelineEvent, ...]:
        """State and lifecycle events, decoder order preserved."""
        return tuple(e for e in self.events if e.kind.stream is EventStream.TRACKER)

    @cached_property
    def game_events(self) -> tuple[TimelineEvent, ...]:
        """Player command events, decoder order preserved."""
        return tuple(e for e in self.events if e.kind.stream is EventStream.GAME)

    def player(self, player_id: int) -> Optional[PlayerInfo]:
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def __len__(self) -> int:
        return len(self.events)

    @classmethod
    def from_events(
        cls,
        events: Iterable[TimelineEvent],
        duration: Optional[float] = None,
        players: Iterable[PlayerInfo] = (),
    ) -> "Timeline":
        """Build a timeline; duration defaults to the last event's time."""
        events = tuple(events)
        if duration is None:
            last_tick = max((e.tick for e in events), default=0)
            duration = float(int(ticks_to_seconds(last_tick)))
        return cls(events=events, duration=float(duration), players=tuple(players))

    @classmethod
    def from_dict(cls, document: Any) -> "Timeline":
        """
        Build a timeline from a decoder document.

        Expected shape:
            {
                "duration": 612,              # real seconds (optional)
                "loops": 13708,               # used when duration is absent
                "players": [{"playerId": 1, "name": ..., "race": ...}],
                "events": [{"loop": 0, "eventType": "PlayerStats", ...}],
            }

        Raises:
            InvalidTimelineError: If the document or its event list is not usable
        """
        if not isinstance(document, Mapping):
            raise InvalidTimelineError(
                f"expected a mapping, got {type(document).__name__}"
            )

        raw_events = document.get("events", [])
        if not isinstance(raw_events, (list, tuple)):
            raise InvalidTimelineError("'events' must be a list")

        events = []
        skipped = 0
        for raw in raw_events:
            if not isinstance(raw, Mapping):
                skipped += 1
                continue
            events.append(TimelineEvent.from_dict(raw))

        if skipped:
            logger.debug(f"Skipped {skipped} malformed events while loading timeline")

        players = [
            PlayerInfo.from_dict(p)
            for p in document.get("players", []) or []
            if isinstance(p, Mapping)
        ]

        duration: Optional[float] = None
        if _is_number(document.get("duration")):
            duration = as_float(document["duration"])
        elif _is_number(document.get("loops")):
            duration = float(int(ticks_to_seconds(as_int(document["loops"]))))

        timeline = cls.from_events(events, duration=duration, players=players)
        logger.debug(
            f"Loaded timeline: {len(timeline.events)} events, "
            f"{len(timeline.players)} players, {timeline.duration:.0f}s"
        )
        return timeline
