"""
Analysis Module for SC2 Analytics

Provides:
- Supply block detection
- Spending Quotient and resource analysis
- APM / EAPM aggregation
- Army value sampling
- Zerg inject tracking
- Build order extraction
- Coaching suggestions and strategic comparison
"""

from .models import (
    Severity,
    SQRating,
    Priority,
    SupplyBlock,
    SupplyPoint,
    SupplyAnalysis,
    ResourceValue,
    ResourcePoint,
    SpendingAnalysis,
    APMPoint,
    APMAnalysis,
    ArmyPoint,
    UnitCount,
    ArmyAnalysis,
    InjectPoint,
    InjectAnalysis,
    BuildOrderItem,
    Suggestion,
    AnalysisResult,
)
from .base import Analyzer
from .supply import SupplyBlockDetector
from .spending import SpendingAnalyzer
from .apm import APMAggregator
from .army import ArmySampler
from .inject import InjectTracker
from .build_order import BuildOrderExtractor
from .suggestions import build_suggestions
from .coordinator import AnalysisCoordinator
from .strategic import StrategicComparator, StrategicAnalysis

__all__ = [
    "Severity",
    "SQRating",
    "Priority",
    "SupplyBlock",
    "SupplyPoint",
    "SupplyAnalysis",
    "ResourceValue",
    "ResourcePoint",
    "SpendingAnalysis",
    "APMPoint",
    "APMAnalysis",
    "ArmyPoint",
    "UnitCount",
    "ArmyAnalysis",
    "InjectPoint",
    "InjectAnalysis",
    "BuildOrderItem",
    "Suggestion",
    "AnalysisResult",
    "Analyzer",
    "SupplyBlockDetector",
    "SpendingAnalyzer",
    "APMAggregator",
    "ArmySampler",
    "InjectTracker",
    "BuildOrderExtractor",
    "build_suggestions",
    "AnalysisCoordinator",
    "StrategicComparator",
    "StrategicAnalysis",
]
