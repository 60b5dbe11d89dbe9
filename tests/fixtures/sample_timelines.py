"""
Timeline builders for testing.

Event payloads follow the decoder's key names (playerId, stats,
unitTypeName, unitTagIndex, abil.abilLink...). Times are given in real
seconds and converted to game loops, so a round trip through the timeline
may shift a time by up to ~0.03s.
"""

from sc2_analytics.timeline import (
    PlayerInfo,
    Timeline,
    TimelineEvent,
    seconds_to_ticks,
)

FIXED = 4096


def stats_event(
    t: float,
    player_id: int,
    used: int = 0,
    made: int = 0,
    minerals: float = 0,
    gas: float = 0,
    mineral_rate: float = 0,
    gas_rate: float = 0,
) -> TimelineEvent:
    """PlayerStats snapshot; supply and rates are given in display units."""
    return TimelineEvent.create(
        tick=seconds_to_ticks(t),
        kind="PlayerStats",
        player_id=player_id,
        data={
            "playerId": player_id,
            "stats": {
                "scoreValueFoodUsed": used * FIXED,
                "scoreValueFoodMade": made * FIXED,
                "scoreValueMineralsCurrent": minerals,
                "scoreValueVespeneCurrent": gas,
                "scoreValueMineralsCollectionRate": mineral_rate * FIXED,
                "scoreValueVespeneCollectionRate": gas_rate * FIXED,
            },
        },
    )


def unit_event(kind: str, t: float, owner: int, unit_type: str, tag: int) -> TimelineEvent:
    return TimelineEvent.create(
        tick=seconds_to_ticks(t),
        kind=kind,
        data={
            "controlPlayerId": owner,
            "upkeepPlayerId": owner,
            "unitTypeName": unit_type,
            "unitTagIndex": tag,
        },
    )


def born(t: float, owner: int, unit_type: str, tag: int) -> TimelineEvent:
    return unit_event("UnitBorn", t, owner, unit_type, tag)


def init(t: float, owner: int, unit_type: str, tag: int) -> TimelineEvent:
    return unit_event("UnitInit", t, owner, unit_type, tag)


def done(t: float, owner: int, unit_type: str, tag: int) -> TimelineEvent:
    return unit_event("UnitDone", t, owner, unit_type, tag)


def died(t: float, tag: int) -> TimelineEvent:
    return TimelineEvent.create(
        tick=seconds_to_ticks(t),
        kind="UnitDied",
        data={"unitTagIndex": tag, "killerPlayerId": 0},
    )


def upgrade(t: float, player_id: int, name: str) -> TimelineEvent:
    return TimelineEvent.create(
        tick=seconds_to_ticks(t),
        kind="Upgrade",
        player_id=player_id,
        data={"playerId": player_id, "upgradeTypeName": name, "count": 1},
    )


def action(tick: int, player_id: int, kind: str = "Cmd", ability_id: int = 0) -> TimelineEvent:
    """Game event at an exact loop."""
    data = {"abil": {"abilLink": ability_id, "abilCmdIndex": 0}} if kind == "Cmd" else {}
    return TimelineEvent.create(tick=tick, kind=kind, player_id=player_id, data=data)


def inject_cast(t: float, player_id: int, ability_id: int = 183) -> TimelineEvent:
    return action(seconds_to_ticks(t), player_id, "Cmd", ability_id)


def make_timeline(events, duration=None, players=()) -> Timeline:
    return Timeline.from_events(events, duration=duration, players=players)


def army_ticks(until: float, step: float = 10.0, player_id: int = 1):
    """Bare stats events that only drive the army sample clock."""
    t = 0.0
    events = []
    while t <= until:
        events.append(stats_event(t, player_id))
        t += step
    return events


# ============================================================
# A small but complete ZvT game
# ============================================================

ZERG_ID = 1
TERRAN_ID = 2

SAMPLE_PLAYERS = (
    PlayerInfo(player_id=ZERG_ID, name="LarvaLord", race="Zerg", result="Loss", is_human=True),
    PlayerInfo(player_id=TERRAN_ID, name="MarineKing", race="Terran", result="Win", is_human=True),
)


def build_sample_game() -> Timeline:
    """
    Five minute ZvT.

    Zerg (player 1) banks heavily, gets supply blocked once for 20s,
    injects irregularly and loses most of an army at 4:00. Terran
    (player 2) macros cleanly.
    """
    events = []

    # Tracker stream
    for t in range(0, 301, 10):
        # Zerg: capped at 30/30 from 100s to 120s
        if 100 <= t < 120:
            zerg_used, zerg_made = 30, 30
        else:
            zerg_used, zerg_made = min(12 + t // 10, 60), min(14 + t // 8, 70)
        events.append(stats_event(
            t, ZERG_ID,
            used=zerg_used, made=zerg_made,
            minerals=900 + t, gas=300,
            mineral_rate=600, gas_rate=100,
        ))
        events.append(stats_event(
            t, TERRAN_ID,
            used=min(12 + t // 8, 80), made=min(15 + t // 6, 100),
            minerals=150, gas=50,
            mineral_rate=900, gas_rate=300,
        ))

    events += [
        born(0, ZERG_ID, "Hatchery", 100),
        born(0, ZERG_ID, "Drone", 101),
        born(0, TERRAN_ID, "CommandCenter", 200),
        born(0, TERRAN_ID, "SCV", 201),
        born(12, ZERG_ID, "Drone", 102),
        born(12, TERRAN_ID, "SCV", 202),
        born(18, ZERG_ID, "Overlord", 103),
        init(20, TERRAN_ID, "SupplyDepot", 203),
        init(45, ZERG_ID, "SpawningPool", 104),
        init(50, TERRAN_ID, "Barracks", 204),
        init(60, ZERG_ID, "Hatchery", 105),
        done(130, ZERG_ID, "Hatchery", 105),
        born(110, ZERG_ID, "Queen", 106),
        born(120, TERRAN_ID, "Marine", 205),
        born(125, TERRAN_ID, "Marine", 206),
        born(130, TERRAN_ID, "Marine", 207),
        upgrade(140, TERRAN_ID, "Stimpack"),
        upgrade(140, TERRAN_ID, "SprayTerran"),
    ]

    # Zerg army: 12 roaches (75/25 each) by 200s
    for i in range(12):
        events.append(born(150 + i * 4, ZERG_ID, "Roach", 300 + i))
    # Terran army: 10 more marines
    for i in range(10):
        events.append(born(150 + i * 4, TERRAN_ID, "Marine", 400 + i))

    # Fight at ~235s: zerg loses 10 roaches, terran loses 2 marines
    for i in range(10):
        events.append(died(232 + i * 0.5, 300 + i))
    events.append(died(233, 400))
    events.append(died(234, 401))

    events.sort(key=lambda e: e.tick)

    # Game stream
    game_events = []
    for player_id, actions_per_10s in ((ZERG_ID, 5), (TERRAN_ID, 12)):
        for second in range(0, 300, 10):
            for k in range(actions_per_10s):
                game_events.append(action(seconds_to_ticks(second) + k * 10, player_id, "Cmd"))
            game_events.append(action(seconds_to_ticks(second) + 5, player_id, "CameraUpdate"))

    # Zerg injects: on time at first, then a long gap
    for t in (115, 144, 173, 280):
        game_events.append(inject_cast(t, ZERG_ID))

    game_events.sort(key=lambda e: e.tick)

    return make_timeline(events + game_events, duration=300.0, players=SAMPLE_PLAYERS)


SAMPLE_REPLAY_DOCUMENT = {
    "duration": 42,
    "players": [
        {"playerId": 1, "name": "LarvaLord", "race": "Zerg", "result": "Loss", "isHuman": True},
        {"playerId": 2, "name": "A.I. 1 (Elite)", "race": "Terran", "result": "Win", "isHuman": False},
    ],
    "events": [
        {
            "loop": 0,
            "eventType": "PlayerStats",
            "playerId": 1,
            "data": {"playerId": 1, "stats": {"scoreValueFoodUsed": 12 * FIXED, "scoreValueFoodMade": 14 * FIXED}},
        },
        {
            "loop": 0,
            "eventType": "UnitBorn",
            "data": {"controlPlayerId": 1, "upkeepPlayerId": 1, "unitTypeName": "Hatchery", "unitTagIndex": 5},
        },
        {
            "loop": 224,
            "eventType": "Cmd",
            "playerId": 1,
            "data": {"abil": {"abilLink": 183}},
        },
        {
            "loop": 300,
            "eventType": "SomethingNew",
            "data": {"answer": 42},
        },
        "not an event",
    ],
}
