"""
Analysis Result Models

Immutable value objects produced by the analyzers, plus their dict/JSON
serialization. A full per-player result is an AnalysisResult; every
sub-result is optional because each analyzer may have nothing to report.

Timelines are stored as tuples so results stay hashable and safe to share
across threads. to_dict() emits plain lists/dicts for JSON.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any

from ..exceptions import AnalysisSerializationError


class Severity(Enum):
    """Supply block severity by duration."""
    LOW = "low"          # < 5s
    MEDIUM = "medium"    # 5-15s
    HIGH = "high"        # >= 15s


class SQRating(Enum):
    """Spending Quotient buckets."""
    POOR = "poor"                    # < 70
    BELOW_AVERAGE = "below_average"  # 70-90
    AVERAGE = "average"              # 90-110
    GOOD = "good"                    # 110-130
    EXCELLENT = "excellent"          # >= 130


class Priority(Enum):
    """Suggestion priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


def _optional(cls, data: Optional[dict]):
    return cls.from_dict(data) if data is not None else None


# ============================================================
# Supply
# ============================================================

@dataclass(frozen=True)
class SupplyBlock:
    """A closed interval during which the player sat at the supply cap."""
    start_time: float
    end_time: float
    duration: float
    severity: Severity
    supply_used: int
    supply_max: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "severity": self.severity.value,
            "supply_used": self.supply_used,
            "supply_max": self.supply_max,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SupplyBlock":
        return cls(
            start_time=data["start_time"],
            end_time=data["end_time"],
            duration=data["duration"],
            severity=Severity(data["severity"]),
            supply_used=data["supply_used"],
            supply_max=data["supply_max"],
        )


@dataclass(frozen=True)
class SupplyPoint:
    time: float
    supply_used: int
    supply_max: int
    is_blocked: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "supply_used": self.supply_used,
            "supply_max": self.supply_max,
            "is_blocked": self.is_blocked,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SupplyPoint":
        return cls(
            time=data["time"],
            supply_used=data["supply_used"],
            supply_max=data["supply_max"],
            is_blocked=data["is_blocked"],
        )


@dataclass(frozen=True)
class SupplyAnalysis:
    blocks: tuple[SupplyBlock, ...] = ()
    total_block_time: float = 0.0
    block_percentage: float = 0.0
    supply_timeline: tuple[SupplyPoint, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "blocks": [b.to_dict() for b in self.blocks],
            "total_block_time": self.total_block_time,
            "block_percentage": self.block_percentage,
            "supply_timeline": [p.to_dict() for p in self.supply_timeline],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SupplyAnalysis":
        return cls(
            blocks=tuple(SupplyBlock.from_dict(b) for b in data.get("blocks", [])),
            total_block_time=data.get("total_block_time", 0.0),
            block_percentage=data.get("block_percentage", 0.0),
            supply_timeline=tuple(SupplyPoint.from_dict(p) for p in data.get("supply_timeline", [])),
        )


# ============================================================
# Spending
# ============================================================

@dataclass(frozen=True)
class ResourceValue:
    minerals: float = 0.0
    gas: float = 0.0

    @property
    def total(self) -> float:
        return self.minerals + self.gas

    def to_dict(self) -> dict[str, Any]:
        return {"minerals": self.minerals, "gas": self.gas}

    @classmethod
    def from_dict(cls, data: dict) -> "ResourceValue":
        return cls(minerals=data.get("minerals", 0.0), gas=data.get("gas", 0.0))


@dataclass(frozen=True)
class ResourcePoint:
    """Bank and collection rate at one PlayerStats sample."""
    time: float
    minerals: int
    gas: int
    income: ResourceValue = field(default_factory=ResourceValue)

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "minerals": self.minerals,
            "gas": self.gas,
            "income": self.income.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResourcePoint":
        return cls(
            time=data["time"],
            minerals=data["minerals"],
            gas=data["gas"],
            income=ResourceValue.from_dict(data.get("income", {})),
        )


@dataclass(frozen=True)
class SpendingAnalysis:
    spending_quotient: float
    rating: SQRating
    average_unspent: ResourceValue = field(default_factory=ResourceValue)
    average_income: ResourceValue = field(default_factory=ResourceValue)
    resource_timeline: tuple[ResourcePoint, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "spending_quotient": self.spending_quotient,
            "rating": self.rating.value,
            "average_unspent": self.average_unspent.to_dict(),
            "average_income": self.average_income.to_dict(),
            "resource_timeline": [p.to_dict() for p in self.resource_timeline],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SpendingAnalysis":
        return cls(
            spending_quotient=data["spending_quotient"],
            rating=SQRating(data["rating"]),
            average_unspent=ResourceValue.from_dict(data.get("average_unspent", {})),
            average_income=ResourceValue.from_dict(data.get("average_income", {})),
            resource_timeline=tuple(
                ResourcePoint.from_dict(p) for p in data.get("resource_timeline", [])
            ),
        )


# ============================================================
# APM
# ============================================================

@dataclass(frozen=True)
class APMPoint:
    """One 30 second window: start time, APM rate and raw action count."""
    time: float
    apm: float
    actions: int

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time, "apm": self.apm, "actions": self.actions}

    @classmethod
    def from_dict(cls, data: dict) -> "APMPoint":
        return cls(time=data["time"], apm=data["apm"], actions=data.get("actions", 0))


@dataclass(frozen=True)
class APMAnalysis:
    average_apm: float
    eapm: float
    peak_apm: float
    total_actions: int = 0
    effective_actions: int = 0
    apm_timeline: tuple[APMPoint, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_apm": self.average_apm,
            "eapm": self.eapm,
            "peak_apm": self.peak_apm,
            "total_actions": self.total_actions,
            "effective_actions": self.effective_actions,
            "apm_timeline": [p.to_dict() for p in self.apm_timeline],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "APMAnalysis":
        return cls(
            average_apm=data["average_apm"],
            eapm=data["eapm"],
            peak_apm=data["peak_apm"],
            total_actions=data.get("total_actions", 0),
            effective_actions=data.get("effective_actions", 0),
            apm_timeline=tuple(APMPoint.from_dict(p) for p in data.get("apm_timeline", [])),
        )


# ============================================================
# Army
# ============================================================

@dataclass(frozen=True)
class ArmyPoint:
    time: float
    value: int
    unit_count: int

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time, "value": self.value, "unit_count": self.unit_count}

    @classmethod
    def from_dict(cls, data: dict) -> "ArmyPoint":
        return cls(time=data["time"], value=data["value"], unit_count=data["unit_count"])


@dataclass(frozen=True)
class UnitCount:
    """Surviving units of one type at the end of the match."""
    unit_type: str
    count: int
    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"unit_type": self.unit_type, "count": self.count, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict) -> "UnitCount":
        return cls(unit_type=data["unit_type"], count=data["count"], value=data["value"])


@dataclass(frozen=True)
class ArmyAnalysis:
    peak_army_value: int = 0
    army_timeline: tuple[ArmyPoint, ...] = ()
    unit_composition: tuple[UnitCount, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "peak_army_value": self.peak_army_value,
            "army_timeline": [p.to_dict() for p in self.army_timeline],
            "unit_composition": [u.to_dict() for u in self.unit_composition],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ArmyAnalysis":
        return cls(
            peak_army_value=data.get("peak_army_value", 0),
            army_timeline=tuple(ArmyPoint.from_dict(p) for p in data.get("army_timeline", [])),
            unit_composition=tuple(UnitCount.from_dict(u) for u in data.get("unit_composition", [])),
        )


# ============================================================
# Inject
# ============================================================

@dataclass(frozen=True)
class InjectPoint:
    time: float
    hatchery_id: int
    injected: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time, "hatchery_id": self.hatchery_id, "injected": self.injected}

    @classmethod
    def from_dict(cls, data: dict) -> "InjectPoint":
        return cls(
            time=data["time"],
            hatchery_id=data["hatchery_id"],
            injected=data.get("injected", True),
        )


@dataclass(frozen=True)
class InjectAnalysis:
    total_injects: int = 0
    missed_injects: int = 0
    efficiency: float = 0.0
    inject_timeline: tuple[InjectPoint, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_injects": self.total_injects,
            "missed_injects": self.missed_injects,
            "efficiency": self.efficiency,
            "inject_timeline": [p.to_dict() for p in self.inject_timeline],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InjectAnalysis":
        return cls(
            total_injects=data.get("total_injects", 0),
            missed_injects=data.get("missed_injects", 0),
            efficiency=data.get("efficiency", 0.0),
            inject_timeline=tuple(InjectPoint.from_dict(p) for p in data.get("inject_timeline", [])),
        )


# ============================================================
# Build Order
# ============================================================

@dataclass(frozen=True)
class BuildOrderItem:
    time: float
    supply: int
    action: str              # "Build", "Train", "Train Worker", "Upgrade"
    unit_or_building: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "supply": self.supply,
            "action": self.action,
            "unit_or_building": self.unit_or_building,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BuildOrderItem":
        return cls(
            time=data["time"],
            supply=data["supply"],
            action=data["action"],
            unit_or_building=data["unit_or_building"],
        )


# ============================================================
# Suggestions
# ============================================================

@dataclass(frozen=True)
class Suggestion:
    """A prioritized coaching tip."""
    priority: Priority
    category: str            # "macro" or "micro"
    title: str
    description: str
    timestamp: Optional[float] = None
    target_value: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "priority": self.priority.value,
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "timestamp": self.timestamp,
            "target_value": self.target_value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Suggestion":
        return cls(
            priority=Priority(data["priority"]),
            category=data["category"],
            title=data["title"],
            description=data["description"],
            timestamp=data.get("timestamp"),
            target_value=data.get("target_value"),
        )


# ============================================================
# Full Result
# ============================================================

@dataclass(frozen=True)
class AnalysisResult:
    """Everything the engine derived for one player of one replay."""
    player_id: int
    race: str = "unknown"
    supply_analysis: Optional[SupplyAnalysis] = None
    spending_analysis: Optional[SpendingAnalysis] = None
    apm_analysis: Optional[APMAnalysis] = None
    build_order: Optional[tuple[BuildOrderItem, ...]] = None
    inject_analysis: Optional[InjectAnalysis] = None
    army_analysis: Optional[ArmyAnalysis] = None
    suggestions: tuple[Suggestion, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when no analyzer produced a result."""
        return all(
            part is None
            for part in (
                self.supply_analysis,
                self.spending_analysis,
                self.apm_analysis,
                self.build_order,
                self.inject_analysis,
                self.army_analysis,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "race": self.race,
            "supply_analysis": self.supply_analysis.to_dict() if self.supply_analysis else None,
            "spending_analysis": self.spending_analysis.to_dict() if self.spending_analysis else None,
            "apm_analysis": self.apm_analysis.to_dict() if self.apm_analysis else None,
            "build_order": (
                [item.to_dict() for item in self.build_order]
                if self.build_order is not None else None
            ),
            "inject_analysis": self.inject_analysis.to_dict() if self.inject_analysis else None,
            "army_analysis": self.army_analysis.to_dict() if self.army_analysis else None,
            "suggestions": [s.to_dict() for s in self.suggestions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AnalysisResult":
        build_order = data.get("build_order")
        return cls(
            player_id=data["player_id"],
            race=data.get("race", "unknown"),
            supply_analysis=_optional(SupplyAnalysis, data.get("supply_analysis")),
            spending_analysis=_optional(SpendingAnalysis, data.get("spending_analysis")),
            apm_analysis=_optional(APMAnalysis, data.get("apm_analysis")),
            build_order=(
                tuple(BuildOrderItem.from_dict(item) for item in build_order)
                if build_order is not None else None
            ),
            inject_analysis=_optional(InjectAnalysis, data.get("inject_analysis")),
            army_analysis=_optional(ArmyAnalysis, data.get("army_analysis")),
            suggestions=tuple(Suggestion.from_dict(s) for s in data.get("suggestions", [])),
        )

    def to_json(self, indent: Optional[int] = None) -> str:
        """
        Serialize to JSON.

        Raises:
            AnalysisSerializationError: If a value is not JSON serializable
                (including NaN and infinity)
        """
        try:
            return json.dumps(self.to_dict(), indent=indent, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise AnalysisSerializationError(str(e), player_id=self.player_id) from e

    @classmethod
    def from_json(cls, payload: str) -> "AnalysisResult":
        """
        Deserialize from JSON produced by to_json().

        Raises:
            AnalysisSerializationError: If the payload is malformed
        """
        try:
            return cls.from_dict(json.loads(payload))
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise AnalysisSerializationError(f"malformed payload: {e}") from e
