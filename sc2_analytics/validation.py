"""
Input Validation and Normalization

Validates caller-supplied arguments before an analysis runs. Decoder payload
data is never rejected here: noisy event fields degrade to neutral values
inside the analyzers instead.
"""

import math
from typing import Any

from .exceptions import (
    InvalidPlayerIDError,
    InvalidRaceError,
    InvalidDurationError,
    ValidationError,
)


# Races as reported by the replay details
VALID_RACES = [
    "terran",
    "protoss",
    "zerg",
    "random",   # Only before the game resolves the pick
    "unknown",  # Observers, decoder fallback
]

# Game results as reported by the decoder
VALID_RESULTS = ["Win", "Loss", "Undecided"]

# Player slots in a lobby are 1-based; 16 covers observers and referees
MIN_PLAYER_ID = 1
MAX_PLAYER_ID = 16


def validate_player_id(player_id: Any) -> int:
    """
    Validate a player slot id.

    Args:
        player_id: Raw slot id

    Returns:
        The player id as int

    Raises:
        InvalidPlayerIDError: If not an integer in the slot range
    """
    if isinstance(player_id, bool) or not isinstance(player_id, int):
        raise InvalidPlayerIDError(player_id, MIN_PLAYER_ID, MAX_PLAYER_ID)

    if not (MIN_PLAYER_ID <= player_id <= MAX_PLAYER_ID):
        raise InvalidPlayerIDError(player_id, MIN_PLAYER_ID, MAX_PLAYER_ID)

    return player_id


def validate_race(race: Any) -> str:
    """
    Validate and normalize a race name.

    Args:
        race: Race name in any casing (e.g., "Zerg", " protoss ")

    Returns:
        Lowercase race name

    Raises:
        InvalidRaceError: If the race is unknown
    """
    if not isinstance(race, str):
        raise InvalidRaceError(race, VALID_RACES)

    normalized = race.strip().lower()
    if normalized not in VALID_RACES:
        raise InvalidRaceError(race, VALID_RACES)

    return normalized


def normalize_race(race: Any) -> str:
    """Lowercase race name, or "unknown" for anything unrecognized."""
    try:
        return validate_race(race)
    except InvalidRaceError:
        return "unknown"


def validate_duration(duration: Any) -> float:
    """
    Validate a match duration in real seconds.

    Raises:
        InvalidDurationError: If negative, NaN, infinite or not a number
    """
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise InvalidDurationError(duration)

    duration = float(duration)
    if math.isnan(duration) or math.isinf(duration) or duration < 0:
        raise InvalidDurationError(duration)

    return duration


def validate_result(result: Any) -> str:
    """
    Validate a game result string.

    Returns:
        The canonical result ("Win", "Loss" or "Undecided")

    Raises:
        ValidationError: If the result is not recognized
    """
    if isinstance(result, str):
        for valid in VALID_RESULTS:
            if result.strip().lower() == valid.lower():
                return valid

    raise ValidationError(
        field="result",
        message=f"Invalid game result: {result!r}. Valid results: {', '.join(VALID_RESULTS)}",
        value=result,
    )
