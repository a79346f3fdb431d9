"""Near-Tie Detector - Phase 4 of the Scoring Engine.

Classifies ranked architecture scores as a clear winner, a two-way tie or
a three-way tie, and produces tie-aware guidance that steers the reader
toward qualitative trade-offs instead of small numeric differences.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from .config import NearTieConfig, RefereeConfig
from .schema import (
    ARCHITECTURE_ORDER,
    ArchitectureScore,
    ConfidenceLevel,
    NearTieDetectionResult,
    NearTieMessaging,
    TieType,
    ranking_key,
)


@dataclass(frozen=True)
class ScoreGaps:
    """Differences between the ranked scores."""
    top_difference: float
    second_difference: float
    total_range: float
    score_count: int


def _gap(a: float, b: float) -> float:
    # Scores carry two decimals; keep float noise out of threshold comparisons
    return round(a - b, 2)


class NearTieDetector:
    """Detects near-ties among ranked architecture scores.

    Comparisons are inclusive: a gap equal to the threshold is a tie.
    A three-way tie requires every pairwise gap to be within the threshold.
    """

    def __init__(self, config: Optional[RefereeConfig] = None):
        self.config: NearTieConfig = (config or RefereeConfig()).near_tie

    @property
    def threshold(self) -> float:
        return self.config.near_tie_threshold

    def detect(self, scores: Sequence[ArchitectureScore]) -> NearTieDetectionResult:
        """Classify the scores.

        Input order does not matter. Equal scores rank in declaration order.
        """
        if len(scores) < 2:
            return self._no_comparison_result()

        ranked = sorted(scores, key=ranking_key)
        gaps = self._gaps(ranked)
        tie_type = self._tie_type(gaps)

        if tie_type == TieType.THREE_WAY_TIE:
            tied = [s.architecture_type for s in ranked[:3]]
        elif tie_type == TieType.TWO_WAY_TIE:
            tied = [s.architecture_type for s in ranked[:2]]
        else:
            tied = []

        return NearTieDetectionResult(
            is_near_tie=tie_type != TieType.NO_TIE,
            tie_type=tie_type,
            tied_architectures=tied,
            score_difference=gaps.top_difference,
            threshold_used=self.threshold,
            clear_winner=ranked[0].architecture_type if tie_type == TieType.NO_TIE else None,
            detection_confidence=self._detection_confidence(gaps, ranked),
            messaging=self._messaging(tie_type),
        )

    def _gaps(self, ranked: Sequence[ArchitectureScore]) -> ScoreGaps:
        values = [s.weighted_score for s in ranked]
        return ScoreGaps(
            top_difference=_gap(values[0], values[1]),
            second_difference=_gap(values[1], values[2]) if len(values) >= 3 else 0.0,
            total_range=_gap(values[0], values[-1]),
            score_count=len(values),
        )

    def _tie_type(self, gaps: ScoreGaps) -> TieType:
        t = self.threshold
        if gaps.top_difference > t:
            return TieType.NO_TIE
        if gaps.score_count >= 3 and gaps.second_difference <= t and gaps.total_range <= t:
            return TieType.THREE_WAY_TIE
        return TieType.TWO_WAY_TIE

    def _detection_confidence(
        self,
        gaps: ScoreGaps,
        ranked: Sequence[ArchitectureScore],
    ) -> ConfidenceLevel:
        points = 100

        if any(s.confidence_level == ConfidenceLevel.LOW for s in ranked):
            points -= 30

        # Harder to distinguish very close scores
        if gaps.top_difference <= self.config.minimum_difference_threshold:
            points -= 20

        if gaps.total_range <= self.threshold:
            points -= 15

        if points >= 70:
            return ConfidenceLevel.HIGH
        if points >= 50:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW

    def _messaging(self, tie_type: TieType) -> NearTieMessaging:
        t = self.threshold

        if tie_type == TieType.THREE_WAY_TIE:
            return NearTieMessaging(
                primary_message="Three-way near-tie detected: All architecture options show similar suitability.",
                explanation=(
                    f"All three architectures scored within {t} points of each other, "
                    "indicating no clear quantitative winner."
                ),
                decision_guidance=[
                    "Focus on qualitative trade-offs rather than numeric scores",
                    "Consider organizational readiness and implementation complexity",
                    "Evaluate team capabilities and training requirements",
                    "Assess integration complexity with existing systems",
                    "Consider vendor relationships and support requirements",
                ],
                tradeoff_emphasis=(
                    "With scores this close, trade-off analysis and organizational factors "
                    "should be the primary decision drivers."
                ),
                numeric_score_warning=(
                    "Numeric score differences are too small to be meaningful - "
                    "avoid over-interpreting small variations."
                ),
            )

        if tie_type == TieType.TWO_WAY_TIE:
            return NearTieMessaging(
                primary_message="Two-way near-tie detected: Top architectures show similar suitability.",
                explanation=(
                    f"The top two architectures scored within {t} points of each other, "
                    "indicating no clear quantitative preference."
                ),
                decision_guidance=[
                    "Compare trade-offs between the tied architectures",
                    "Consider implementation timeline and complexity",
                    "Evaluate organizational change management requirements",
                    "Assess team expertise and training needs",
                    "Consider proof-of-concept validation",
                ],
                tradeoff_emphasis=(
                    "Since numeric scores are essentially tied, focus on the specific "
                    "trade-offs that matter most to your organization."
                ),
                numeric_score_warning=(
                    "Small score differences between tied options should not drive the "
                    "decision - focus on qualitative factors."
                ),
            )

        return NearTieMessaging(
            primary_message="Clear differentiation: One architecture shows meaningful advantage.",
            explanation=(
                f"Score differences exceed the near-tie threshold ({t} points), "
                "indicating quantitative differentiation."
            ),
            decision_guidance=[
                "Review the specific advantages of the leading architecture",
                "Validate that trade-offs align with organizational priorities",
                "Consider implementation feasibility and organizational readiness",
                "Assess whether the advantage justifies any trade-offs",
                "Plan validation and proof-of-concept activities",
            ],
            tradeoff_emphasis=(
                "While scores show differentiation, carefully evaluate whether the "
                "trade-offs align with your organizational priorities."
            ),
            numeric_score_warning=(
                "Even with clear numeric differences, consider the full trade-off "
                "implications before making final decisions."
            ),
        )

    def _no_comparison_result(self) -> NearTieDetectionResult:
        return NearTieDetectionResult(
            is_near_tie=False,
            tie_type=TieType.NO_TIE,
            tied_architectures=[],
            score_difference=0.0,
            threshold_used=self.threshold,
            detection_confidence=ConfidenceLevel.LOW,
            messaging=NearTieMessaging(
                primary_message="Insufficient architectures for comparison.",
                explanation="At least two architecture options are required for near-tie detection.",
                decision_guidance=[
                    "Ensure multiple architecture options are evaluated for meaningful comparison.",
                ],
                tradeoff_emphasis="Multiple architecture options are needed to perform trade-off analysis.",
                numeric_score_warning="Single architecture evaluation provides no comparative context.",
            ),
        )

    def manual_evaluation_result(self) -> NearTieDetectionResult:
        """Result used when scores could not be computed reliably.

        Treats every architecture as tied so nothing downstream presents a
        winner.
        """
        return NearTieDetectionResult(
            is_near_tie=True,
            tie_type=TieType.THREE_WAY_TIE,
            tied_architectures=list(ARCHITECTURE_ORDER),
            score_difference=0.0,
            threshold_used=self.threshold,
            detection_confidence=ConfidenceLevel.LOW,
            messaging=NearTieMessaging(
                primary_message="Analysis unavailable - all options require manual evaluation",
                explanation="System unable to complete scoring calculation",
                decision_guidance=[
                    "Consult with security architecture professionals",
                    "Evaluate each option against specific organizational requirements",
                    "Consider proof-of-concept validation for preferred options",
                ],
                tradeoff_emphasis="Manual trade-off analysis required",
                numeric_score_warning="Numeric scores are unreliable due to processing error",
            ),
        )


def no_winner_message(result: NearTieDetectionResult) -> str:
    """Return the "no clear winner" statement for a tie, or an empty string."""
    if not result.is_near_tie:
        return ""

    if result.tie_type == TieType.THREE_WAY_TIE:
        return (
            "No clear winner: All three architecture options show similar suitability "
            "based on your organizational constraints."
        )
    if result.tie_type == TieType.TWO_WAY_TIE:
        names = " and ".join(a.value for a in result.tied_architectures)
        return (
            f"No clear winner: {names} architectures show similar suitability "
            "based on your organizational constraints."
        )
    return "No clear winner emerges from this analysis based on your organizational constraints."


def tradeoff_emphasis_message(result: NearTieDetectionResult) -> str:
    base = "Trade-off analysis should drive your decision rather than numeric score differences."
    if result.is_near_tie:
        return (
            f"{base} When scores are this close, qualitative factors such as organizational "
            "readiness, implementation complexity, and stakeholder alignment become the "
            "decisive factors."
        )
    return (
        f"{base} While one architecture shows a numeric advantage, carefully evaluate the "
        "trade-offs and organizational implications before making your final decision."
    )
