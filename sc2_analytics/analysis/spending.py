"""
Spending Analysis

Computes the Spending Quotient (SQ): a logarithmic score that rewards a high
collection rate and punishes a large bank.

    SQ = 35 * (0.00137 * avg_income - ln(avg_unspent + 1)) + 240

clamped to [0, 200]. Around 100 is typical ladder play; pros sit well
above it.
"""

import math
from typing import Optional

from .base import Analyzer
from .models import ResourcePoint, ResourceValue, SQRating, SpendingAnalysis
from ..logging_config import get_logger
from ..timeline import FIXED_POINT_SCALE, EventKind, StatsPayload, Timeline

logger = get_logger(__name__)


SQ_MIN = 0.0
SQ_MAX = 200.0

# The stats stream only reports a combined rate, the split is an estimate
MINERAL_INCOME_SHARE = 0.7
GAS_INCOME_SHARE = 0.3


def calculate_sq(avg_income: float, avg_unspent: float) -> float:
    """Spending Quotient for average income per minute and average bank."""
    if avg_income <= 0:
        return 0.0

    # A negative bank only comes from malformed stats
    bank = max(avg_unspent, 0.0)
    sq = 35 * (0.00137 * avg_income - math.log(bank + 1)) + 240
    return min(SQ_MAX, max(SQ_MIN, sq))


def rate_sq(sq: float) -> SQRating:
    if sq < 70:
        return SQRating.POOR
    if sq < 90:
        return SQRating.BELOW_AVERAGE
    if sq < 110:
        return SQRating.AVERAGE
    if sq < 130:
        return SQRating.GOOD
    return SQRating.EXCELLENT


class SpendingAnalyzer(Analyzer[SpendingAnalysis]):
    """Average bank, average income and SQ from PlayerStats snapshots."""

    name = "spending"

    def analyze(
        self,
        timeline: Optional[Timeline],
        player_id: int,
        duration: float,
        race: Optional[str] = None,
    ) -> Optional[SpendingAnalysis]:
        if timeline is None:
            return None

        total_minerals = 0.0
        total_gas = 0.0
        total_income = 0.0
        points: list[ResourcePoint] = []

        for event in timeline.tracker_events:
            if event.kind is not EventKind.PLAYER_STATS or event.player_id != player_id:
                continue
            stats = event.payload
            if not isinstance(stats, StatsPayload):
                continue

            mineral_rate = stats.minerals_collection_rate / FIXED_POINT_SCALE
            gas_rate = stats.vespene_collection_rate / FIXED_POINT_SCALE

            total_minerals += stats.minerals_current
            total_gas += stats.vespene_current
            total_income += mineral_rate + gas_rate

            points.append(ResourcePoint(
                time=event.seconds,
                minerals=int(stats.minerals_current),
                gas=int(stats.vespene_current),
                income=ResourceValue(minerals=mineral_rate, gas=gas_rate),
            ))

        if not points:
            return None

        samples = len(points)
        avg_minerals = total_minerals / samples
        avg_gas = total_gas / samples
        avg_income = total_income / samples

        average_unspent = ResourceValue(minerals=avg_minerals, gas=avg_gas)
        sq = calculate_sq(avg_income, average_unspent.total)
        rating = rate_sq(sq)

        logger.debug(
            f"Player {player_id}: SQ {sq:.0f} ({rating.value}) from {samples} samples, "
            f"avg bank {avg_minerals:.0f}/{avg_gas:.0f}, avg income {avg_income:.0f}"
        )

        return SpendingAnalysis(
            spending_quotient=sq,
            rating=rating,
            average_unspent=average_unspent,
            average_income=ResourceValue(
                minerals=avg_income * MINERAL_INCOME_SHARE,
                gas=avg_income * GAS_INCOME_SHARE,
            ),
            resource_timeline=tuple(points),
        )
