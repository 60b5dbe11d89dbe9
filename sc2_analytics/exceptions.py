"""
Application Exception Hierarchy

Provides structured exceptions for:
- Validation errors
- Configuration errors
- Timeline decoding errors
- Analysis failures (per player, serialization)
"""

from typing import Optional, Any


class SC2AnalyticsError(Exception):
    """Base exception for all SC2 Analytics errors"""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        return self.message


# ==================== Validation Errors ====================

class ValidationError(SC2AnalyticsError):
    """Input validation error"""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.value = value
        details = {"field": field}
        if value is not None:
            details["value"] = str(value)[:100]  # Truncate for safety
        super().__init__(message, details)


class InvalidPlayerIDError(ValidationError):
    """Player id outside the replay's slot range"""

    def __init__(self, player_id: Any, min_id: int = 1, max_id: int = 16):
        msg = f"Player id must be an integer between {min_id} and {max_id}, got {player_id!r}"
        super().__init__(field="player_id", message=msg, value=player_id)


class InvalidRaceError(ValidationError):
    """Unknown race name"""

    def __init__(self, race: Any, valid_races: list[str]):
        msg = f"Invalid race: {race!r}. Valid races: {', '.join(valid_races)}"
        super().__init__(field="race", message=msg, value=race)
        self.valid_races = valid_races


class InvalidDurationError(ValidationError):
    """Match duration is negative or not a finite number"""

    def __init__(self, duration: Any):
        msg = f"Match duration must be a finite, non-negative number of seconds, got {duration!r}"
        super().__init__(field="duration", message=msg, value=duration)


# ==================== Configuration Errors ====================

class ConfigurationError(SC2AnalyticsError):
    """Configuration error"""
    pass


# ==================== Timeline Errors ====================

class TimelineError(SC2AnalyticsError):
    """Error reading a decoded replay timeline"""
    pass


class InvalidTimelineError(TimelineError):
    """Timeline document is missing or structurally unusable"""

    def __init__(self, reason: str):
        super().__init__(f"Invalid timeline: {reason}", {"reason": reason})
        self.reason = reason


# ==================== Analysis Errors ====================

class AnalysisError(SC2AnalyticsError):
    """Error while analyzing a replay"""
    pass


class PlayerAnalysisError(AnalysisError):
    """Analysis of a single player failed"""

    def __init__(self, player_id: int, reason: str):
        super().__init__(
            f"Analysis failed for player {player_id}: {reason}",
            {"player_id": player_id, "reason": reason}
        )
        self.player_id = player_id
        self.reason = reason


class AnalysisSerializationError(AnalysisError):
    """A completed analysis result could not be serialized"""

    def __init__(self, reason: str, player_id: Optional[int] = None):
        msg = "Could not serialize analysis result"
        if player_id is not None:
            msg += f" for player {player_id}"
        super().__init__(f"{msg}: {reason}", {"player_id": player_id, "reason": reason})
        self.player_id = player_id
        self.reason = reason
