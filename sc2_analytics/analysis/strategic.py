"""
Strategic Comparison

Post-game review for the losing player of a 1v1: how their metrics compare
to the winner's, where the big army trades happened, what went wrong and
what to practice next.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional, Any

from .models import AnalysisResult, Priority, SQRating
from .suggestions import BLOCK_PERCENT_HIGH, INJECT_EFFICIENCY_HIGH
from ..logging_config import get_logger

logger = get_logger(__name__)


# Comparative thresholds
APM_WORSE_RATIO = 0.8
SQ_WORSE_MARGIN = 20.0
UNSPENT_WORSE_RATIO = 1.5
BLOCK_PERCENT_WORSE_RATIO = 1.5
BLOCK_COUNT_WORSE_MARGIN = 2
APM_PROBLEM_RATIO = 0.7

CRITICAL_LOSS_THRESHOLD = 2
MAX_CRITICAL_MOMENTS = 10


class ProblemKind:
    SUPPLY = "supply"
    SPENDING = "spending"
    INJECT = "inject"
    APM = "apm"
    ARMY = "army"


# ============================================================
# Data Classes
# ============================================================

@dataclass(frozen=True)
class MetricComparison:
    metric: str
    player_value: float
    enemy_value: float
    is_worse: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "player_value": self.player_value,
            "enemy_value": self.enemy_value,
            "is_worse": self.is_worse,
        }


@dataclass(frozen=True)
class SupplyBlockSummary:
    time: float
    duration: float
    severity: str

    def to_dict(self) -> dict[str, Any]:
        return {"time": self.time, "duration": self.duration, "severity": self.severity}


@dataclass(frozen=True)
class CriticalMoment:
    """A sample interval in which at least one side lost several units."""
    time: float
    player_loss: int
    enemy_loss: int
    assessment: str
    is_positive: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "player_loss": self.player_loss,
            "enemy_loss": self.enemy_loss,
            "assessment": self.assessment,
            "is_positive": self.is_positive,
        }


@dataclass(frozen=True)
class IdentifiedProblem:
    kind: str
    title: str
    description: str
    priority: Priority

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
        }


@dataclass(frozen=True)
class ImprovementStep:
    category: str
    title: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "title": self.title, "description": self.description}


@dataclass(frozen=True)
class MatchupTips:
    opening: tuple[str, ...] = ()
    mid_game: tuple[str, ...] = ()
    timing: tuple[str, ...] = ()
    late_game: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "opening": list(self.opening),
            "mid_game": list(self.mid_game),
            "timing": list(self.timing),
            "late_game": list(self.late_game),
        }


@dataclass(frozen=True)
class StrategicAnalysis:
    winner: str
    loser: str
    winner_race: str
    loser_race: str
    matchup: str
    metrics_comparison: tuple[MetricComparison, ...] = ()
    supply_blocks: tuple[SupplyBlockSummary, ...] = ()
    critical_moments: tuple[CriticalMoment, ...] = ()
    problems: tuple[IdentifiedProblem, ...] = ()
    matchup_tips: MatchupTips = field(default_factory=MatchupTips)
    improvement_steps: tuple[ImprovementStep, ...] = ()
    summary: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "winner": self.winner,
            "loser": self.loser,
            "winner_race": self.winner_race,
            "loser_race": self.loser_race,
            "matchup": self.matchup,
            "metrics_comparison": [m.to_dict() for m in self.metrics_comparison],
            "supply_blocks": [b.to_dict() for b in self.supply_blocks],
            "critical_moments": [m.to_dict() for m in self.critical_moments],
            "problems": [p.to_dict() for p in self.problems],
            "matchup_tips": self.matchup_tips.to_dict(),
            "improvement_steps": [s.to_dict() for s in self.improvement_steps],
            "summary": self.summary,
        }


# ============================================================
# Static Tables
# ============================================================

GENERIC_TIPS = MatchupTips(
    opening=(
        "Use a standard opening for your race",
        "Scout early to spot cheese",
    ),
    mid_game=(
        "Focus on solid macro",
        "Keep producing units constantly",
    ),
    timing=(
        "Attack when you have an advantage",
        "Hit timings when your opponent switches tech",
    ),
    late_game=(
        "Upgrades decide late games",
        "Control the map",
    ),
)

# Keyed by (loser race, winner race)
MATCHUP_TIPS = MappingProxyType({
    ("protoss", "zerg"): MatchupTips(
        opening=(
            "Standard: Gate, Nexus, Cyber, then Stargate or Robo",
            "Scout with an Adept shade or the first Stalker",
            "Wall off early against Zerglings",
        ),
        mid_game=(
            "Against Roach/Ravager: Immortals and Chargelots",
            "Against Hydras: Storm is essential",
            "Against Mutas: Phoenix or fast Archons",
        ),
        timing=(
            "2-base Immortal/Archon all-in around 7:30",
            "Or an 8-gate Chargelot timing around 6:00",
            "Attack before Hive tech finishes",
        ),
        late_game=(
            "Carrier/Tempest with Storm and Archons",
            "Needs good upgrades (3/3)",
            "Avoid big fights without Storm",
        ),
    ),
    ("zerg", "protoss"): MatchupTips(
        opening=(
            "Hatch first is standard against Protoss",
            "Speedlings can apply early pressure",
            "Overlord scout at 3:00-3:30",
        ),
        mid_game=(
            "Roach/Ravager against Immortal/Archon",
            "Lurkers against ground armies",
            "Mutas when Protoss has little anti-air",
        ),
        timing=(
            "Roach/Ravager timing around 5:00",
            "Ling/Bane all-in against greedy builds",
        ),
        late_game=(
            "Brood Lord/Corruptor/Viper deathball",
            "Infestors against Carriers",
            "Always watch for splash damage",
        ),
    ),
    ("terran", "zerg"): MatchupTips(
        opening=(
            "Reaper scout into CC first is common",
            "Hellion harass to kill drones",
            "Wall off against Zerglings",
        ),
        mid_game=(
            "Marine/Tank against Roach/Hydra",
            "Liberators against Mutas",
            "Hellbats against Ling/Bane",
        ),
        timing=(
            "2-1-1 push with Medivacs around 5:30",
            "Or a 3 CC macro game",
        ),
        late_game=(
            "Ghost/Liberator/Thor composition",
            "Vikings and Thors against Brood Lords",
        ),
    ),
    ("zerg", "terran"): MatchupTips(
        opening=(
            "3 hatch before pool is often good",
            "Ling/Bane against Hellions",
            "Scout for Banshees and Liberators",
        ),
        mid_game=(
            "Classic Ling/Bane/Muta",
            "Or Roach/Ravager/Hydra",
        ),
        timing=(
            "2-base Ling/Bane timing is possible",
            "Roach/Ravager all-in around 4:30",
        ),
        late_game=(
            "Ultras and Vipers against Mech",
            "Infestors against Bio",
        ),
    ),
    ("protoss", "terran"): MatchupTips(
        opening=(
            "Gate expand is standard",
            "Robo or Stargate tech",
            "Scout for proxy Barracks",
        ),
        mid_game=(
            "Chargelot/Archon/Immortal core",
            "Add Colossus or Disruptors",
            "Storm against Bio",
        ),
        timing=(
            "Blink Stalker timing around 5:00",
            "Chargelot all-in against Mech",
        ),
        late_game=(
            "Carrier/Tempest with a strong economy",
            "Feedback against Ghosts",
        ),
    ),
    ("terran", "protoss"): MatchupTips(
        opening=(
            "Reaper expand is common",
            "Factory for Cyclone/Tank",
            "Scout for Dark Templar and Oracles",
        ),
        mid_game=(
            "Bio with Medivacs and Ghosts",
            "Widow Mines against Chargelots",
            "Liberators for zone control",
        ),
        timing=(
            "Stim timing around 5:30",
            "Liberator harass",
        ),
        late_game=(
            "Ghosts are essential",
            "Vikings against Carriers",
        ),
    ),
})

IMPROVEMENT_STEPS = MappingProxyType({
    ProblemKind.SUPPLY: ImprovementStep(
        category="MACRO",
        title="Build supply earlier",
        description=(
            "Build Pylons, Depots or Overlords before you need them. "
            "Rule of thumb: at 75% of your cap, start the next supply structure."
        ),
    ),
    ProblemKind.SPENDING: ImprovementStep(
        category="MACRO",
        title="Spend resources faster",
        description=(
            "Add production structures or start upgrades. "
            "Resources in the bank do not win games."
        ),
    ),
    ProblemKind.INJECT: ImprovementStep(
        category="MACRO",
        title="Keep an inject rhythm",
        description=(
            "Put your Queens on a hotkey and inject every Hatchery each time "
            "the larva pop. A 29 second timer helps at first."
        ),
    ),
    ProblemKind.APM: ImprovementStep(
        category="MECHANICS",
        title="Practice hotkeys and camera shortcuts",
        description=(
            "Use control groups for your army and production structures. "
            "Practice camera location hotkeys."
        ),
    ),
    ProblemKind.ARMY: ImprovementStep(
        category="PRODUCTION",
        title="Produce units constantly",
        description=(
            "Keep your production structures busy. Add Barracks, Gateways or "
            "Hatcheries when resources pile up."
        ),
    ),
})

GENERAL_STEPS = (
    ImprovementStep(
        category="BUILD ORDER",
        title="Practice a standard build",
        description=(
            "Pick one build and practice it in custom games until you can "
            "execute it without thinking. Use spawningtool.com for reference builds."
        ),
    ),
    ImprovementStep(
        category="SCOUTING",
        title="Scout regularly",
        description=(
            "Scout at 3:30-4:00 for tech structures. React to what you see "
            "instead of playing blind."
        ),
    ),
)

# Summary line per high-priority problem kind
SUMMARY_REASONS = MappingProxyType({
    ProblemKind.SUPPLY: "Too many supply blocks, so fewer units were produced",
    ProblemKind.SPENDING: "Resources went unspent, so the army was weaker",
    ProblemKind.INJECT: "Missed injects, so fewer larva for production",
    ProblemKind.APM: "Lower APM, so slower reactions",
    ProblemKind.ARMY: "Too little army produced, so defending was impossible",
})


# ============================================================
# Comparator
# ============================================================

def race_initial(race: str) -> str:
    return race[:1].upper() if race else "?"


def matchup_code(loser_race: str, winner_race: str) -> str:
    """Matchup from the loser's perspective, e.g. "PvZ"."""
    return f"{race_initial(loser_race)}v{race_initial(winner_race)}"


def classify_trade(player_loss: int, enemy_loss: int) -> tuple[str, bool]:
    """(assessment, is_positive) for a pair of unit losses."""
    if player_loss > 0 and enemy_loss == 0:
        return "Lopsided loss", False
    if player_loss > enemy_loss * 2:
        return "Bad trade", False
    if player_loss < enemy_loss:
        return "Good trade", True
    if player_loss > enemy_loss:
        return "Slight disadvantage", False
    return "Slight advantage", True


class StrategicComparator:
    """Compares the loser's analysis against the winner's."""

    def compare(
        self,
        winner: Optional[AnalysisResult],
        loser: Optional[AnalysisResult],
        winner_name: str = "",
        loser_name: str = "",
        winner_race: str = "",
        loser_race: str = "",
    ) -> Optional[StrategicAnalysis]:
        """
        Build the strategic review for the losing player.

        Races default to the ones stored on the results.

        Returns:
            StrategicAnalysis, or None if either result is missing
        """
        if winner is None or loser is None:
            return None

        winner_race = winner_race or winner.race
        loser_race = loser_race or loser.race

        problems = self.identify_problems(loser, winner)

        analysis = StrategicAnalysis(
            winner=winner_name,
            loser=loser_name,
            winner_race=winner_race,
            loser_race=loser_race,
            matchup=matchup_code(loser_race, winner_race),
            metrics_comparison=self.compare_metrics(loser, winner),
            supply_blocks=self.supply_block_summary(loser),
            critical_moments=self.find_critical_moments(loser, winner),
            problems=problems,
            matchup_tips=self.matchup_tips(loser_race, winner_race),
            improvement_steps=self.improvement_steps(problems),
            summary=self.summarize(loser_race, winner_race, problems),
        )

        logger.debug(
            f"{analysis.matchup}: {len(problems)} problems, "
            f"{len(analysis.critical_moments)} critical moments"
        )
        return analysis

    # ==================== Metrics ====================

    def compare_metrics(
        self,
        loser: AnalysisResult,
        winner: AnalysisResult,
    ) -> tuple[MetricComparison, ...]:
        comparisons = []

        if loser.apm_analysis and winner.apm_analysis:
            mine, theirs = loser.apm_analysis, winner.apm_analysis
            comparisons.append(MetricComparison(
                metric="APM (average)",
                player_value=mine.average_apm,
                enemy_value=theirs.average_apm,
                is_worse=mine.average_apm < theirs.average_apm * APM_WORSE_RATIO,
            ))
            comparisons.append(MetricComparison(
                metric="EAPM (effective)",
                player_value=mine.eapm,
                enemy_value=theirs.eapm,
                is_worse=mine.eapm < theirs.eapm * APM_WORSE_RATIO,
            ))

        if loser.spending_analysis and winner.spending_analysis:
            mine, theirs = loser.spending_analysis, winner.spending_analysis
            comparisons.append(MetricComparison(
                metric="Spending Quotient",
                player_value=mine.spending_quotient,
                enemy_value=theirs.spending_quotient,
                is_worse=mine.spending_quotient < theirs.spending_quotient - SQ_WORSE_MARGIN,
            ))
            comparisons.append(MetricComparison(
                metric="Avg unspent minerals",
                player_value=mine.average_unspent.minerals,
                enemy_value=theirs.average_unspent.minerals,
                is_worse=(
                    mine.average_unspent.minerals
                    > theirs.average_unspent.minerals * UNSPENT_WORSE_RATIO
                ),
            ))

        if loser.supply_analysis and winner.supply_analysis:
            mine, theirs = loser.supply_analysis, winner.supply_analysis
            comparisons.append(MetricComparison(
                metric="Supply block time",
                player_value=mine.block_percentage,
                enemy_value=theirs.block_percentage,
                is_worse=mine.block_percentage > theirs.block_percentage * BLOCK_PERCENT_WORSE_RATIO,
            ))
            comparisons.append(MetricComparison(
                metric="Supply block count",
                player_value=float(len(mine.blocks)),
                enemy_value=float(len(theirs.blocks)),
                is_worse=len(mine.blocks) > len(theirs.blocks) + BLOCK_COUNT_WORSE_MARGIN,
            ))

        if loser.army_analysis and winner.army_analysis:
            mine, theirs = loser.army_analysis, winner.army_analysis
            comparisons.append(MetricComparison(
                metric="Peak army value",
                player_value=float(mine.peak_army_value),
                enemy_value=float(theirs.peak_army_value),
                is_worse=mine.peak_army_value < theirs.peak_army_value // 2,
            ))

        return tuple(comparisons)

    def supply_block_summary(self, loser: AnalysisResult) -> tuple[SupplyBlockSummary, ...]:
        if loser.supply_analysis is None:
            return ()
        return tuple(
            SupplyBlockSummary(time=b.start_time, duration=b.duration, severity=b.severity.value)
            for b in loser.supply_analysis.blocks
        )

    # ==================== Critical Moments ====================

    def find_critical_moments(
        self,
        loser: AnalysisResult,
        winner: AnalysisResult,
    ) -> tuple[CriticalMoment, ...]:
        """
        Intervals where either side lost more than two units.

        Both army timelines are sampled on the same clock, so the winner's
        count is looked up by the loser's sample time. The ten largest
        exchanges are kept, in chronological order.
        """
        if loser.army_analysis is None or winner.army_analysis is None:
            return ()

        loser_points = loser.army_analysis.army_timeline
        if not loser_points:
            return ()

        winner_counts = {p.time: p.unit_count for p in winner.army_analysis.army_timeline}

        moments = []
        last_loser = loser_points[0].unit_count
        last_winner = winner_counts.get(loser_points[0].time, 0)

        for point in loser_points[1:]:
            player_loss = last_loser - point.unit_count
            enemy_loss = 0
            if point.time in winner_counts:
                enemy_loss = last_winner - winner_counts[point.time]
                last_winner = winner_counts[point.time]
            last_loser = point.unit_count

            if player_loss <= CRITICAL_LOSS_THRESHOLD and enemy_loss <= CRITICAL_LOSS_THRESHOLD:
                continue

            assessment, positive = classify_trade(player_loss, enemy_loss)
            moments.append(CriticalMoment(
                time=point.time,
                player_loss=player_loss,
                enemy_loss=enemy_loss,
                assessment=assessment,
                is_positive=positive,
            ))

        if len(moments) > MAX_CRITICAL_MOMENTS:
            biggest = sorted(
                moments,
                key=lambda m: max(m.player_loss, 0) + max(m.enemy_loss, 0),
                reverse=True,
            )[:MAX_CRITICAL_MOMENTS]
            moments = sorted(biggest, key=lambda m: m.time)

        return tuple(moments)

    # ==================== Problems ====================

    def identify_problems(
        self,
        loser: AnalysisResult,
        winner: AnalysisResult,
    ) -> tuple[IdentifiedProblem, ...]:
        problems = []

        supply = loser.supply_analysis
        if supply and supply.block_percentage > BLOCK_PERCENT_HIGH:
            problems.append(IdentifiedProblem(
                kind=ProblemKind.SUPPLY,
                title=f"Supply blocks ({supply.block_percentage:.1f}% of the game)",
                description="You were supply blocked too often and could not produce units.",
                priority=Priority.HIGH,
            ))

        spending = loser.spending_analysis
        if spending and spending.rating is SQRating.POOR:
            problems.append(IdentifiedProblem(
                kind=ProblemKind.SPENDING,
                title=f"Low spending quotient ({int(spending.spending_quotient)})",
                description="You let resources pile up instead of spending them.",
                priority=Priority.HIGH,
            ))

        inject = loser.inject_analysis
        if inject and inject.efficiency < INJECT_EFFICIENCY_HIGH:
            problems.append(IdentifiedProblem(
                kind=ProblemKind.INJECT,
                title=f"Low inject efficiency ({inject.efficiency:.0f}%)",
                description=f"About {inject.missed_injects} injects were missed, costing larva.",
                priority=Priority.HIGH,
            ))

        if loser.apm_analysis and winner.apm_analysis:
            mine = loser.apm_analysis.average_apm
            theirs = winner.apm_analysis.average_apm
            if mine < theirs * APM_PROBLEM_RATIO:
                problems.append(IdentifiedProblem(
                    kind=ProblemKind.APM,
                    title="Much lower APM than your opponent",
                    description=f"Your APM ({mine:.0f}) was far below your opponent's ({theirs:.0f}).",
                    priority=Priority.MEDIUM,
                ))

        if loser.army_analysis and winner.army_analysis:
            mine = loser.army_analysis.peak_army_value
            theirs = winner.army_analysis.peak_army_value
            if mine < theirs // 2:
                problems.append(IdentifiedProblem(
                    kind=ProblemKind.ARMY,
                    title="Not enough army produced",
                    description=f"Your peak army value ({mine}) was far below your opponent's ({theirs}).",
                    priority=Priority.HIGH,
                ))

        return tuple(problems)

    # ==================== Advice ====================

    def matchup_tips(self, loser_race: str, winner_race: str) -> MatchupTips:
        key = ((loser_race or "").lower(), (winner_race or "").lower())
        return MATCHUP_TIPS.get(key, GENERIC_TIPS)

    def improvement_steps(
        self,
        problems: tuple[IdentifiedProblem, ...],
    ) -> tuple[ImprovementStep, ...]:
        steps = [IMPROVEMENT_STEPS[p.kind] for p in problems if p.kind in IMPROVEMENT_STEPS]
        return tuple(steps) + GENERAL_STEPS

    def summarize(
        self,
        loser_race: str,
        winner_race: str,
        problems: tuple[IdentifiedProblem, ...],
    ) -> str:
        reasons = [SUMMARY_REASONS[p.kind] for p in problems if p.priority is Priority.HIGH]
        if not reasons:
            reasons = [p.title for p in problems if p.priority is Priority.MEDIUM]

        lines = [f"You lost as {loser_race} against {winner_race}."]
        if reasons:
            lines.append("")
            lines.append("The main reasons were probably:")
            lines.extend(f"- {reason}" for reason in reasons)
        return "\n".join(lines)
