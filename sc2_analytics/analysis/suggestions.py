"""
Suggestion Engine

Turns analyzer results into prioritized coaching tips. Each rule set is a
pure function of one sub-result; build_suggestions() runs them in a fixed
order (supply, spending, APM, inject, army) and stable-sorts by priority, so
tips of equal priority keep their generation order.
"""

from typing import Optional

from .models import (
    APMAnalysis,
    ArmyAnalysis,
    InjectAnalysis,
    Priority,
    Severity,
    SpendingAnalysis,
    SQRating,
    Suggestion,
    SupplyAnalysis,
)


CATEGORY_MACRO = "macro"
CATEGORY_MICRO = "micro"

# Supply
BLOCK_PERCENT_HIGH = 10.0
BLOCK_PERCENT_MEDIUM = 5.0

# Spending
UNSPENT_MINERALS_HIGH = 1000.0
UNSPENT_GAS_MEDIUM = 500.0

# APM
LOW_APM = 50.0
LOW_EAPM_RATIO = 0.6
APM_DROP_RATIO = 0.3
APM_DROP_IGNORE_BEFORE = 120.0

# Inject
INJECT_EFFICIENCY_HIGH = 50.0
INJECT_EFFICIENCY_MEDIUM = 70.0
MISSED_INJECTS_HIGH = 10

# Army
BIG_LOSS_MIN_VALUE = 500
BIG_LOSS_RATIO = 0.5


def format_game_time(seconds: float) -> str:
    """m:ss clock as shown in the game UI."""
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"


def supply_suggestions(analysis: Optional[SupplyAnalysis]) -> list[Suggestion]:
    if analysis is None:
        return []

    suggestions = []

    if analysis.block_percentage > BLOCK_PERCENT_HIGH:
        suggestions.append(Suggestion(
            priority=Priority.HIGH,
            category=CATEGORY_MACRO,
            title="Too many supply blocks",
            description=(
                f"You were supply blocked for {analysis.block_percentage:.1f}% of the game. "
                f"Build supply ahead of time."
            ),
            target_value="< 5% block time",
        ))
    elif analysis.block_percentage > BLOCK_PERCENT_MEDIUM:
        suggestions.append(Suggestion(
            priority=Priority.MEDIUM,
            category=CATEGORY_MACRO,
            title="Reduce supply blocks",
            description=(
                f"You were supply blocked for {analysis.block_percentage:.1f}% of the game. "
                f"Some of these blocks could be avoided by watching your supply cap."
            ),
            target_value="< 5% block time",
        ))

    for block in analysis.blocks:
        if block.severity is Severity.HIGH:
            suggestions.append(Suggestion(
                priority=Priority.HIGH,
                category=CATEGORY_MACRO,
                title="Severe supply block",
                description=(
                    f"Supply blocked for {block.duration:.0f} seconds "
                    f"at {format_game_time(block.start_time)}."
                ),
                timestamp=block.start_time,
                target_value="< 5s",
            ))

    return suggestions


def spending_suggestions(analysis: Optional[SpendingAnalysis]) -> list[Suggestion]:
    if analysis is None:
        return []

    suggestions = []

    if analysis.rating is SQRating.POOR:
        suggestions.append(Suggestion(
            priority=Priority.HIGH,
            category=CATEGORY_MACRO,
            title="Spend your resources",
            description=(
                f"Your spending quotient of {analysis.spending_quotient:.0f} is low. "
                f"Add production structures or make more units."
            ),
            target_value="> 90 SQ",
        ))
    elif analysis.rating is SQRating.BELOW_AVERAGE:
        suggestions.append(Suggestion(
            priority=Priority.MEDIUM,
            category=CATEGORY_MACRO,
            title="Improve spending",
            description=(
                f"Your spending quotient of {analysis.spending_quotient:.0f} shows resources "
                f"piling up. Keep production running constantly."
            ),
            target_value="> 100 SQ",
        ))

    if analysis.average_unspent.minerals > UNSPENT_MINERALS_HIGH:
        suggestions.append(Suggestion(
            priority=Priority.HIGH,
            category=CATEGORY_MACRO,
            title="Too many unspent minerals",
            description=(
                f"You banked {analysis.average_unspent.minerals:.0f} minerals on average. "
                f"Build more production structures."
            ),
            target_value="< 500 minerals",
        ))

    if analysis.average_unspent.gas > UNSPENT_GAS_MEDIUM:
        suggestions.append(Suggestion(
            priority=Priority.MEDIUM,
            category=CATEGORY_MACRO,
            title="Too much unspent gas",
            description=(
                f"You banked {analysis.average_unspent.gas:.0f} gas on average. "
                f"Build more gas-heavy units or start upgrades."
            ),
            target_value="< 300 gas",
        ))

    return suggestions


def apm_suggestions(analysis: Optional[APMAnalysis]) -> list[Suggestion]:
    if analysis is None:
        return []

    suggestions = []

    if analysis.average_apm < LOW_APM:
        suggestions.append(Suggestion(
            priority=Priority.MEDIUM,
            category=CATEGORY_MICRO,
            title="Raise your APM",
            description=(
                f"Your APM of {analysis.average_apm:.0f} is low. "
                f"Practice faster inputs and hotkey usage."
            ),
            target_value="> 80 APM",
        ))

    if analysis.average_apm > 0 and analysis.eapm / analysis.average_apm < LOW_EAPM_RATIO:
        suggestions.append(Suggestion(
            priority=Priority.LOW,
            category=CATEGORY_MICRO,
            title="Fewer spam actions",
            description=(
                f"Only {analysis.eapm / analysis.average_apm:.0%} of your actions were "
                f"effective. Focus on meaningful commands."
            ),
            target_value="> 70% EAPM/APM",
        ))

    if len(analysis.apm_timeline) > 2:
        threshold = analysis.average_apm * APM_DROP_RATIO
        for point in analysis.apm_timeline:
            if point.time > APM_DROP_IGNORE_BEFORE and point.apm < threshold:
                suggestions.append(Suggestion(
                    priority=Priority.LOW,
                    category=CATEGORY_MICRO,
                    title="APM drop detected",
                    description=(
                        f"Your APM dropped to {point.apm:.0f} at {format_game_time(point.time)}. "
                        f"Try to stay consistently active."
                    ),
                    timestamp=point.time,
                ))
                break

    return suggestions


def inject_suggestions(analysis: Optional[InjectAnalysis]) -> list[Suggestion]:
    if analysis is None:
        return []

    suggestions = []

    if analysis.efficiency < INJECT_EFFICIENCY_HIGH:
        suggestions.append(Suggestion(
            priority=Priority.HIGH,
            category=CATEGORY_MACRO,
            title="Improve inject efficiency",
            description=(
                f"Your inject efficiency was only {analysis.efficiency:.0f}%. "
                f"Use hotkeys and a regular inject cycle."
            ),
            target_value="> 80% efficiency",
        ))
    elif analysis.efficiency < INJECT_EFFICIENCY_MEDIUM:
        suggestions.append(Suggestion(
            priority=Priority.MEDIUM,
            category=CATEGORY_MACRO,
            title="Tighten your injects",
            description=(
                f"Your inject efficiency of {analysis.efficiency:.0f}% can be improved. "
                f"Practice the inject rhythm."
            ),
            target_value="> 85% efficiency",
        ))

    if analysis.missed_injects > MISSED_INJECTS_HIGH:
        suggestions.append(Suggestion(
            priority=Priority.HIGH,
            category=CATEGORY_MACRO,
            title="Too many missed injects",
            description=(
                f"You missed about {analysis.missed_injects} injects. "
                f"Set a timer or use an inject hotkey routine."
            ),
            target_value="< 5 missed injects",
        ))

    return suggestions


def army_suggestions(analysis: Optional[ArmyAnalysis]) -> list[Suggestion]:
    if analysis is None or len(analysis.army_timeline) < 2:
        return []

    timeline = analysis.army_timeline
    for previous, current in zip(timeline, timeline[1:]):
        if previous.value <= BIG_LOSS_MIN_VALUE:
            continue
        loss_ratio = (previous.value - current.value) / previous.value
        if loss_ratio > BIG_LOSS_RATIO:
            return [Suggestion(
                priority=Priority.HIGH,
                category=CATEGORY_MICRO,
                title="Big army loss",
                description=(
                    f"You lost {loss_ratio:.0%} of your army value by "
                    f"{format_game_time(current.time)}. Pick better engagements."
                ),
                timestamp=current.time,
            )]

    return []


def build_suggestions(
    supply: Optional[SupplyAnalysis] = None,
    spending: Optional[SpendingAnalysis] = None,
    apm: Optional[APMAnalysis] = None,
    inject: Optional[InjectAnalysis] = None,
    army: Optional[ArmyAnalysis] = None,
) -> tuple[Suggestion, ...]:
    """All suggestions for one player, high priority first."""
    suggestions = (
        supply_suggestions(supply)
        + spending_suggestions(spending)
        + apm_suggestions(apm)
        + inject_suggestions(inject)
        + army_suggestions(army)
    )
    return tuple(sorted(suggestions, key=lambda s: s.priority.rank))
