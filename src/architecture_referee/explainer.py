"""Explainer - Phase 5 of the Scoring Engine.

Builds the transparency layer around the numeric scores: the step-by-step
methodology trace, the trade-off analysis and the interpretation guidance.

Principles:
- Every score must be explainable
- Assumptions must be visible
- Trade-offs matter more than small numeric differences
"""

from typing import Mapping, Optional, Sequence

from .config import RefereeConfig
from .profiles import BASE_SCORES
from .schema import (
    ARCHITECTURE_ORDER,
    ArchitectureScore,
    ArchitectureType,
    ConfidenceFactor,
    ConfidenceLevel,
    ConstraintField,
    ConstraintProfile,
    Dimension,
    NearTieDetectionResult,
    PrimaryTradeoff,
    ScoringMethodology,
    ScoringStep,
    Severity,
    TieType,
    TradeoffAnalysis,
    WeightInfluence,
)


METHODOLOGY_ASSUMPTIONS = [
    "Base architecture scores represent typical implementations of each pattern",
    "Constraint weights linearly influence dimension importance",
    "All dimensions are measurable on a consistent 1-10 scale",
    "Organizational constraints accurately reflect actual priorities",
    "Architecture patterns can be meaningfully compared across dimensions",
]

TRADEOFF_DIMENSIONS = (
    Dimension.IDENTITY_VERIFICATION,
    Dimension.BEHAVIORAL_ANALYTICS,
    Dimension.USER_EXPERIENCE,
    Dimension.COMPLIANCE_AUDITABILITY,
)

TRADEOFF_DESCRIPTIONS = {
    Dimension.IDENTITY_VERIFICATION: "Strong identity controls vs. user experience friction",
    Dimension.BEHAVIORAL_ANALYTICS: "Advanced threat detection vs. operational complexity",
    Dimension.OPERATIONAL_COMPLEXITY: "System sophistication vs. management overhead",
    Dimension.USER_EXPERIENCE: "Security rigor vs. user productivity",
    Dimension.COMPLIANCE_AUDITABILITY: "Regulatory support vs. system flexibility",
    Dimension.SCALABILITY_PERFORMANCE: "Growth capability vs. infrastructure investment",
    Dimension.COST_EFFICIENCY: "Budget optimization vs. capability breadth",
}

BASE_GUIDANCE = [
    "Scores represent comparative suitability based on your organizational constraints, not absolute quality measures",
    "Consider trade-offs and organizational context beyond numeric scores when making decisions",
    "Validate results with stakeholders and subject matter experts before proceeding",
]

CLOSING_GUIDANCE = [
    "This analysis provides decision support, not decisions - human oversight is required",
    "Reassess if organizational constraints or priorities change significantly",
]


def architecture_impact(architecture: ArchitectureType, dimension: Dimension) -> str:
    """Label an architecture's base score on a dimension."""
    score = BASE_SCORES[architecture].get(dimension)
    if score >= 8:
        return "Strong advantage"
    if score >= 6:
        return "Moderate advantage"
    if score >= 4:
        return "Balanced approach"
    return "Potential limitation"


def overall_confidence(scores: Sequence[ArchitectureScore]) -> ConfidenceLevel:
    """Aggregate per-architecture confidence into one level."""
    levels = [s.confidence_level for s in scores]
    if ConfidenceLevel.LOW in levels:
        return ConfidenceLevel.LOW
    if levels.count(ConfidenceLevel.MEDIUM) >= 2:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH


class ScoringExplainer:
    """Generates the explanation structures attached to scoring results."""

    def __init__(self, config: Optional[RefereeConfig] = None):
        self.config = config or RefereeConfig()

    # =========================================================================
    # Methodology
    # =========================================================================

    def methodology(
        self,
        profile: ConstraintProfile,
        weights: Mapping[Dimension, float],
        scores: Sequence[ArchitectureScore],
    ) -> ScoringMethodology:
        ranked = ", ".join(f"{s.architecture_type.value}={s.weighted_score}" for s in scores)
        steps = [
            ScoringStep(
                step_number=1,
                description="Load base architecture scores from design matrix",
                inputs={"architectures": "3", "dimensions": "7"},
                calculation="Base scores from comparative analysis matrix",
                result="IRM-Heavy, URM-Heavy, Hybrid base scores loaded",
                rationale="Provides standardized starting point for all architectures across dimensions",
            ),
            ScoringStep(
                step_number=2,
                description="Map organizational constraints to dimension weights",
                inputs=profile.values(),
                calculation="Constraint values x dimension influence factors",
                result="Dimension-specific weight multipliers",
                rationale="Reflects organizational priorities in the scoring calculation",
            ),
            ScoringStep(
                step_number=3,
                description="Calculate weighted scores for each architecture",
                inputs={"base_scores": "matrix", "weights": "calculated"},
                calculation="sum(dimension_score * dimension_weight) / sum(dimension_weight)",
                result=f"Weighted scores: {ranked}",
                rationale="Produces organization-specific comparative scores",
            ),
            ScoringStep(
                step_number=4,
                description="Determine confidence levels and rank results",
                inputs={"input_completeness": str(profile.input_completeness).lower()},
                calculation="Confidence factors analysis + score ranking",
                result="Final ranked results with confidence indicators",
                rationale="Provides transparency about result reliability and relative performance",
            ),
        ]

        return ScoringMethodology(
            calculation_steps=steps,
            weight_influence=self._weight_influence(profile),
            assumptions=list(METHODOLOGY_ASSUMPTIONS),
            confidence_factors=self._confidence_factors(profile),
            dimension_weights=dict(weights),
        )

    def _weight_influence(self, profile: ConstraintProfile) -> list[WeightInfluence]:
        rt = profile.risk_tolerance
        cs = profile.compliance_strictness
        ux = profile.user_experience_priority
        om = profile.operational_maturity

        def high_low(value: int, high_when_at_least: int, low_when_at_most: int) -> Severity:
            if value >= high_when_at_least:
                return Severity.HIGH
            if value <= low_when_at_most:
                return Severity.LOW
            return Severity.MEDIUM

        if rt <= 3:
            rt_magnitude = Severity.HIGH
        elif rt >= 7:
            rt_magnitude = Severity.LOW
        else:
            rt_magnitude = Severity.MEDIUM

        return [
            WeightInfluence(
                constraint=ConstraintField.RISK_TOLERANCE,
                weight=rt,
                affected_dimensions=[Dimension.IDENTITY_VERIFICATION, Dimension.COMPLIANCE_AUDITABILITY],
                influence="Lower risk tolerance increases emphasis on strong identity controls and audit capabilities",
                impact_magnitude=rt_magnitude,
            ),
            WeightInfluence(
                constraint=ConstraintField.COMPLIANCE_STRICTNESS,
                weight=cs,
                affected_dimensions=[Dimension.COMPLIANCE_AUDITABILITY, Dimension.IDENTITY_VERIFICATION],
                influence="Higher compliance requirements prioritize auditability and traditional identity controls",
                impact_magnitude=high_low(cs, 8, 3),
            ),
            WeightInfluence(
                constraint=ConstraintField.USER_EXPERIENCE_PRIORITY,
                weight=ux,
                affected_dimensions=[Dimension.USER_EXPERIENCE, Dimension.BEHAVIORAL_ANALYTICS],
                influence="Higher UX priority favors low-friction approaches and adaptive behavioral controls",
                impact_magnitude=high_low(ux, 8, 3),
            ),
            WeightInfluence(
                constraint=ConstraintField.OPERATIONAL_MATURITY,
                weight=om,
                affected_dimensions=[
                    Dimension.OPERATIONAL_COMPLEXITY,
                    Dimension.BEHAVIORAL_ANALYTICS,
                    Dimension.SCALABILITY_PERFORMANCE,
                ],
                influence="Higher maturity enables handling of complex systems and advanced analytics",
                impact_magnitude=Severity.HIGH if abs(om - 5) >= 3 else Severity.MEDIUM,
            ),
        ]

    def _confidence_factors(self, profile: ConstraintProfile) -> list[ConfidenceFactor]:
        factors = []

        if profile.input_completeness:
            factors.append(ConfidenceFactor(
                factor="Complete constraint inputs provided",
                impact="increases",
                magnitude=Severity.MEDIUM,
                explanation="All organizational constraints specified, reducing need for assumptions",
            ))
        else:
            factors.append(ConfidenceFactor(
                factor="Missing constraint inputs",
                impact="decreases",
                magnitude=Severity.MEDIUM,
                explanation="Default assumptions used for missing inputs may not reflect actual priorities",
            ))

        if len(profile.assumptions) > 3:
            factors.append(ConfidenceFactor(
                factor="Multiple assumptions required",
                impact="decreases",
                magnitude=Severity.HIGH,
                explanation="Significant assumptions about organizational context may affect accuracy",
            ))

        return factors

    # =========================================================================
    # Trade-offs
    # =========================================================================

    def tradeoff_analysis(
        self,
        profile: ConstraintProfile,
        near_tie: NearTieDetectionResult,
    ) -> TradeoffAnalysis:
        return TradeoffAnalysis(
            key_decision_factors=self._key_decision_factors(profile, near_tie),
            primary_tradeoffs=[
                PrimaryTradeoff(
                    dimension=dimension,
                    description=TRADEOFF_DESCRIPTIONS[dimension],
                    architecture_impacts={
                        arch: architecture_impact(arch, dimension) for arch in ARCHITECTURE_ORDER
                    },
                )
                for dimension in TRADEOFF_DIMENSIONS
            ],
            is_near_tie=near_tie.is_near_tie,
            near_tie_threshold=near_tie.threshold_used,
        )

    @staticmethod
    def _key_decision_factors(profile: ConstraintProfile, near_tie: NearTieDetectionResult) -> list[str]:
        factors = []

        if near_tie.is_near_tie:
            factors.append(near_tie.messaging.primary_message)
            factors.append("Qualitative trade-offs should drive decision over numeric scores")

        if profile.compliance_strictness >= 8:
            factors.append("Regulatory compliance requirements are critical")
        if profile.user_experience_priority >= 8:
            factors.append("User experience is a top priority")
        if profile.cost_sensitivity >= 8:
            factors.append("Cost optimization is essential")
        if profile.risk_tolerance <= 3:
            factors.append("Low risk tolerance requires strong security controls")

        if near_tie.tie_type == TieType.THREE_WAY_TIE:
            factors.append("All architectures show similar quantitative suitability")
        elif near_tie.tie_type == TieType.TWO_WAY_TIE:
            names = " and ".join(a.value for a in near_tie.tied_architectures)
            factors.append(f"{names} show similar quantitative suitability")

        return factors

    # =========================================================================
    # Interpretation guidance
    # =========================================================================

    def interpretation_guidance(
        self,
        scores: Sequence[ArchitectureScore],
        near_tie: NearTieDetectionResult,
    ) -> list[str]:
        guidance = list(BASE_GUIDANCE)

        if near_tie.is_near_tie:
            guidance.append(near_tie.messaging.explanation)
            guidance.append(near_tie.messaging.tradeoff_emphasis)
            guidance.append(near_tie.messaging.numeric_score_warning)
            guidance.extend(near_tie.messaging.decision_guidance)
        elif len(scores) >= 2:
            top = scores[0]
            difference = round(top.weighted_score - scores[1].weighted_score, 2)
            if difference >= self.config.near_tie.meaningful_difference_threshold:
                guidance.append(
                    f"{top.architecture_type.value} shows meaningful advantage based on your constraints"
                )
                guidance.append("Review the specific strengths and weaknesses before making final decisions")
            else:
                guidance.append("Score differences are modest - carefully evaluate trade-offs")
                guidance.append("Consider organizational change management capabilities when choosing")

        guidance.extend(CLOSING_GUIDANCE)
        return guidance

    # =========================================================================
    # Fallback
    # =========================================================================

    @staticmethod
    def fallback_methodology() -> ScoringMethodology:
        return ScoringMethodology(
            calculation_steps=[ScoringStep(
                step_number=1,
                description="Fallback scoring using base architecture profiles",
                inputs={"method": "simplified"},
                calculation="Average of dimension scores",
                result="Basic comparative scores",
                rationale="Full weighted calculation unavailable due to processing error",
            )],
            assumptions=[
                "Using base architecture profiles without constraint weighting",
                "Scores are simplified averages, not weighted calculations",
                "Results have reduced accuracy due to processing limitations",
            ],
            confidence_factors=[ConfidenceFactor(
                factor="Processing error fallback",
                impact="decreases",
                magnitude=Severity.HIGH,
                explanation="Simplified calculation method reduces result accuracy",
            )],
        )

    def fallback_tradeoff_analysis(self) -> TradeoffAnalysis:
        # Uncertain results are presented as a tie
        return TradeoffAnalysis(
            key_decision_factors=[
                "Full analysis unavailable - manual evaluation recommended",
                "Consider organizational constraints manually",
                "Consult with security architecture experts",
            ],
            is_near_tie=True,
            near_tie_threshold=self.config.near_tie.near_tie_threshold,
        )

    @staticmethod
    def fallback_guidance() -> list[str]:
        return [
            "Analysis results are limited due to processing error",
            "Manual evaluation by security professionals is strongly recommended",
            "Consider retrying analysis after addressing system issues",
            "Use qualitative comparison of architecture patterns instead of numeric scores",
        ]
