"""
Unit Reference Tables

Static lookup data for unit costs and classification. Decoder unit type
names vary across patches and morph states (SiegeTankSieged, VikingAssault,
HatcheryUpgradeToLair...), so every lookup is a case-insensitive substring
match against lowercase keys.

All tables are immutable and built at import time.
"""

import re
from types import MappingProxyType
from typing import Mapping


# ============================================================
# Unit Costs
# ============================================================

DEFAULT_MINERAL_COST = 50
DEFAULT_GAS_COST = 25

_UNIT_COSTS: dict[str, tuple[int, int]] = {
    # Terran
    "marine": (50, 0),
    "marauder": (100, 25),
    "reaper": (50, 50),
    "ghost": (150, 125),
    "hellion": (100, 0),
    "hellbat": (100, 0),
    "widowmine": (75, 25),
    "siegetank": (150, 125),
    "cyclone": (150, 100),
    "thor": (300, 200),
    "viking": (150, 75),
    "medivac": (100, 100),
    "liberator": (150, 150),
    "banshee": (150, 100),
    "raven": (100, 200),
    "battlecruiser": (400, 300),
    # Protoss
    "zealot": (100, 0),
    "stalker": (125, 50),
    "sentry": (50, 100),
    "adept": (100, 25),
    "hightemplar": (50, 150),
    "darktemplar": (125, 125),
    "archon": (0, 0),
    "observer": (25, 75),
    "immortal": (275, 100),
    "colossus": (300, 200),
    "disruptor": (150, 150),
    "warpprism": (200, 0),
    "phoenix": (150, 100),
    "voidray": (250, 150),
    "oracle": (150, 150),
    "tempest": (250, 175),
    "carrier": (350, 250),
    "mothership": (400, 300),
    # Zerg
    "zergling": (25, 0),
    "baneling": (25, 25),
    "roach": (75, 25),
    "ravager": (75, 75),
    "hydralisk": (100, 50),
    "lurker": (100, 100),
    "infestor": (100, 150),
    "swarmhost": (100, 75),
    "ultralisk": (300, 200),
    "mutalisk": (100, 100),
    "corruptor": (150, 100),
    "broodlord": (150, 150),
    "viper": (100, 200),
    "queen": (150, 0),
    "overseer": (50, 50),
}

# Longest keys first so the most specific name wins a substring match
UNIT_COSTS: tuple[tuple[str, int, int], ...] = tuple(
    (key, minerals, gas)
    for key, (minerals, gas) in sorted(_UNIT_COSTS.items(), key=lambda kv: (-len(kv[0]), kv[0]))
)


def unit_cost(unit_type: str) -> tuple[int, int]:
    """(minerals, gas) for a unit type, defaulting to 50/25 for unknown types."""
    lower = unit_type.lower()
    for key, minerals, gas in UNIT_COSTS:
        if key in lower:
            return minerals, gas
    return DEFAULT_MINERAL_COST, DEFAULT_GAS_COST


def unit_value(unit_type: str) -> int:
    minerals, gas = unit_cost(unit_type)
    return minerals + gas


# ============================================================
# Classification
# ============================================================

WORKER_TYPES = ("scv", "probe", "drone")

STRUCTURE_TYPES = (
    # Terran
    "commandcenter", "orbitalcommand", "planetaryfortress",
    "supplydepot", "barracks", "factory", "starport",
    "engineeringbay", "armory", "ghostacademy", "fusioncore",
    "bunker", "missileturret", "sensortower", "refinery",
    # Protoss
    "nexus", "pylon", "gateway", "forge", "cyberneticscore",
    "roboticsfacility", "roboticsbay", "stargate", "fleetbeacon",
    "twilightcouncil", "templararchive", "darkshrine",
    "photoncannon", "shieldbattery", "assimilator", "warpgate",
    # Zerg
    "hatchery", "lair", "hive", "spawningpool", "evolutionchamber",
    "roachwarren", "banelingnest", "hydraliskden", "lurkerden",
    "spire", "greaterspire", "infestationpit", "ultraliscavern",
    "nydusnetwork", "nyduscanal", "spinecrawler", "sporecrawler",
    "extractor", "creeptumor",
)

# Opening structures; add-ons included, creep tumors and nydus worms are not
BUILD_ORDER_STRUCTURE_TYPES = (
    # Terran
    "commandcenter", "orbitalcommand", "planetaryfortress",
    "supplydepot", "barracks", "factory", "starport",
    "engineeringbay", "armory", "ghostacademy", "fusioncore",
    "bunker", "missileturret", "sensortower", "refinery",
    "techlab", "reactor",
    # Protoss
    "nexus", "pylon", "gateway", "forge", "cyberneticscore",
    "roboticsfacility", "roboticsbay", "stargate", "fleetbeacon",
    "twilightcouncil", "templararchive", "darkshrine",
    "photoncannon", "shieldbattery", "assimilator",
    # Zerg
    "hatchery", "lair", "hive", "spawningpool", "evolutionchamber",
    "roachwarren", "banelingnest", "hydraliskden", "lurkerden",
    "spire", "greaterspire", "infestationpit", "ultraliscavern",
    "nydusnetwork", "spinecrawler", "sporecrawler", "extractor",
)

# Never army value: production intermediates and timed summons
NON_ARMY_TYPES = ("larva", "egg", "cocoon", "locust", "broodling", "interceptor")

TOWN_HALL_TYPES = ("hatchery", "lair", "hive")

BUILD_ORDER_UNIT_TYPES = (
    "scv", "probe", "drone",
    "queen", "zergling", "marine", "zealot",
    "overlord", "overseer",
)

BUILD_ORDER_EXCLUDED_TYPES = (
    "larva", "locust", "broodling", "interceptor", "autoturret",
    "creeptumor", "mule", "changeling", "infested",
)

COSMETIC_UPGRADE_MARKERS = ("reward", "dance", "skin", "spray", "voice", "emote")

# Queen "Spawn Larva" ability links; the id moved between patches
INJECT_ABILITY_IDS = frozenset({183, 184, 185, 2731, 2732, 2733})


def _matches(unit_type: str, keys: tuple[str, ...]) -> bool:
    lower = unit_type.lower()
    return any(key in lower for key in keys)


def is_worker(unit_type: str) -> bool:
    return _matches(unit_type, WORKER_TYPES)


def is_structure(unit_type: str) -> bool:
    return _matches(unit_type, STRUCTURE_TYPES)


def is_town_hall(unit_type: str) -> bool:
    """Hatchery, Lair or Hive (the structures a queen injects)."""
    return _matches(unit_type, TOWN_HALL_TYPES)


def is_army_unit(unit_type: str) -> bool:
    """True for anything that is not a worker, structure, larva/egg or summon."""
    if not unit_type:
        return False
    return not (
        is_worker(unit_type)
        or is_structure(unit_type)
        or _matches(unit_type, NON_ARMY_TYPES)
    )


def is_build_order_structure(unit_type: str) -> bool:
    return _matches(unit_type, BUILD_ORDER_STRUCTURE_TYPES)


def is_build_order_unit(unit_type: str) -> bool:
    """Units worth listing in an opening: workers, queens, overlords and core units."""
    if _matches(unit_type, BUILD_ORDER_EXCLUDED_TYPES):
        return False
    return _matches(unit_type, BUILD_ORDER_UNIT_TYPES)


def is_cosmetic_upgrade(upgrade_name: str) -> bool:
    """Rewards, sprays, skins and the like show up as upgrades in replays."""
    return _matches(upgrade_name, COSMETIC_UPGRADE_MARKERS)


# ============================================================
# Display Names
# ============================================================

RACE_PREFIXES = ("Terran", "Protoss", "Zerg")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

# Lowercase race words embedded in upgrade names (e.g. "zerggroundarmorslevel1")
_UPGRADE_RACE_WORDS = re.compile(r"terran|protoss|zerg")


def format_unit_name(name: str) -> str:
    """
    Human readable unit or structure name.

    "TerranSupplyDepot" -> "Supply Depot", "SCV" -> "SCV".
    A race prefix is only stripped when a capitalized word follows it, so
    "Zergling" stays "Zergling".
    """
    for prefix in RACE_PREFIXES:
        rest = name[len(prefix):]
        if name.startswith(prefix) and rest[:1].isupper():
            name = rest
            break

    return _CAMEL_BOUNDARY.sub(" ", name).strip()


def format_upgrade_name(name: str) -> str:
    """Upgrade display name with lowercase race words removed."""
    return format_unit_name(_UPGRADE_RACE_WORDS.sub("", name))


# Read-only views for callers that want to inspect the tables
UNIT_COST_TABLE: Mapping[str, tuple[int, int]] = MappingProxyType(_UNIT_COSTS)
