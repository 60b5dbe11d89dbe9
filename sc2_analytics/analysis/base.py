"""
Analyzer Interface

Every analysis pass is an independent, stateless scan over an immutable
Timeline. Instances hold no per-scan state, so one instance can be shared
by all worker threads of the coordinator.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from ..timeline import Timeline

ResultT = TypeVar("ResultT")


class Analyzer(ABC, Generic[ResultT]):
    """Base class for a single-player analysis pass."""

    #: Short name used in logs and by the coordinator
    name: str = "analyzer"

    @abstractmethod
    def analyze(
        self,
        timeline: Optional[Timeline],
        player_id: int,
        duration: float,
        race: Optional[str] = None,
    ) -> Optional[ResultT]:
        """
        Analyze one player.

        Args:
            timeline: Decoded replay; None yields no result
            player_id: Player slot to analyze
            duration: Authoritative match duration in real seconds
            race: Player race, only consulted by race-specific passes

        Returns:
            The analyzer's result, or None when the player has no events of
            the kind this pass reads
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
