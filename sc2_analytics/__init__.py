"""
SC2 Analytics

Telemetry analysis engine for StarCraft II replays: turns a decoded replay
timeline into per-player performance metrics and coaching suggestions.
"""

from .timeline import Timeline, TimelineEvent, PlayerInfo, EventKind
from .analysis import AnalysisCoordinator, AnalysisResult, StrategicComparator

__version__ = "0.1.0"

__all__ = [
    "Timeline",
    "TimelineEvent",
    "PlayerInfo",
    "EventKind",
    "AnalysisCoordinator",
    "AnalysisResult",
    "StrategicComparator",
]
