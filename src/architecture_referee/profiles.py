"""Architecture Score Matrix.

Static base scores for the three architecture patterns across the seven
quality dimensions, plus the explanatory material attached to them.
Read-only reference data: nothing here is computed from user input.
"""

from dataclasses import dataclass

from .schema import (
    ARCHITECTURE_ORDER,
    DIMENSION_ORDER,
    ArchitectureType,
    Dimension,
    DimensionScores,
)


BASE_SCORES: dict[ArchitectureType, DimensionScores] = {
    ArchitectureType.IRM_HEAVY: DimensionScores(
        identity_verification=9,
        behavioral_analytics=3,
        operational_complexity=7,
        user_experience=6,
        compliance_auditability=9,
        scalability_performance=6,
        cost_efficiency=5,
    ),
    ArchitectureType.URM_HEAVY: DimensionScores(
        identity_verification=4,
        behavioral_analytics=9,
        operational_complexity=8,
        user_experience=3,
        compliance_auditability=5,
        scalability_performance=7,
        cost_efficiency=4,
    ),
    ArchitectureType.HYBRID: DimensionScores(
        identity_verification=7,
        behavioral_analytics=6,
        operational_complexity=8,
        user_experience=5,
        compliance_auditability=7,
        scalability_performance=6,
        cost_efficiency=5,
    ),
}


_STRENGTHS = {
    ArchitectureType.IRM_HEAVY: (
        "Strong compliance support",
        "Clear audit trails",
        "Established security patterns",
        "Predictable behavior",
    ),
    ArchitectureType.URM_HEAVY: (
        "Superior user experience",
        "Advanced threat detection",
        "Adaptive security controls",
        "Scalable analytics",
    ),
    ArchitectureType.HYBRID: (
        "Balanced approach",
        "Flexibility to emphasize different aspects",
        "Comprehensive coverage",
    ),
}

_WEAKNESSES = {
    ArchitectureType.IRM_HEAVY: (
        "Limited behavioral threat detection",
        "Higher user friction",
        "Less adaptive to new threats",
    ),
    ArchitectureType.URM_HEAVY: (
        "Complex operational requirements",
        "Algorithmic decision opacity",
        "Privacy considerations",
    ),
    ArchitectureType.HYBRID: (
        "Increased complexity",
        "Potential integration challenges",
        "Requires expertise in both approaches",
    ),
}

_RISKS = {
    ArchitectureType.IRM_HEAVY: (
        "May miss sophisticated insider threats",
        "User experience friction could drive shadow IT",
    ),
    ArchitectureType.URM_HEAVY: (
        "False positive management",
        "Specialized skill requirements",
        "Regulatory interpretation challenges",
    ),
    ArchitectureType.HYBRID: (
        "Jack-of-all-trades syndrome",
        "Higher operational overhead",
        "Decision complexity",
    ),
}

_SCORING_RATIONALE: dict[ArchitectureType, dict[Dimension, str]] = {
    ArchitectureType.IRM_HEAVY: {
        Dimension.IDENTITY_VERIFICATION: "IRM emphasizes strong authentication and identity controls, providing high confidence in user verification",
        Dimension.BEHAVIORAL_ANALYTICS: "Traditional IRM approaches rely less on behavioral patterns, focusing on established identity controls",
        Dimension.OPERATIONAL_COMPLEXITY: "Well-established patterns with predictable operational requirements, though still requires skilled teams",
        Dimension.USER_EXPERIENCE: "Strong verification requirements introduce some user friction but maintain security rigor",
        Dimension.COMPLIANCE_AUDITABILITY: "Excellent audit trails and clear control frameworks support regulatory compliance",
        Dimension.SCALABILITY_PERFORMANCE: "Predictable scaling patterns but may have limitations with dynamic user behavior",
        Dimension.COST_EFFICIENCY: "Moderate costs with established infrastructure patterns and predictable operational overhead",
    },
    ArchitectureType.URM_HEAVY: {
        Dimension.IDENTITY_VERIFICATION: "Relies more on behavioral patterns than traditional strong authentication mechanisms",
        Dimension.BEHAVIORAL_ANALYTICS: "Specializes in sophisticated user behavior analysis and adaptive threat detection",
        Dimension.OPERATIONAL_COMPLEXITY: "Requires advanced analytics capabilities and machine learning expertise",
        Dimension.USER_EXPERIENCE: "Minimizes user friction through adaptive controls and behavioral-based decisions",
        Dimension.COMPLIANCE_AUDITABILITY: "Algorithmic decisions may be harder to audit and explain to regulators",
        Dimension.SCALABILITY_PERFORMANCE: "Analytics platforms handle dynamic scaling well with cloud-native architectures",
        Dimension.COST_EFFICIENCY: "Significant infrastructure investment required for analytics and machine learning capabilities",
    },
    ArchitectureType.HYBRID: {
        Dimension.IDENTITY_VERIFICATION: "Balances strong authentication with behavioral insights for comprehensive verification",
        Dimension.BEHAVIORAL_ANALYTICS: "Incorporates behavioral analysis while maintaining traditional control frameworks",
        Dimension.OPERATIONAL_COMPLEXITY: "Requires expertise in both traditional security and advanced analytics approaches",
        Dimension.USER_EXPERIENCE: "Moderate friction through balanced approach between security rigor and usability",
        Dimension.COMPLIANCE_AUDITABILITY: "Good audit support through traditional controls supplemented by behavioral insights",
        Dimension.SCALABILITY_PERFORMANCE: "Flexible scaling approach adapting to both predictable and dynamic patterns",
        Dimension.COST_EFFICIENCY: "Balanced investment across traditional and advanced security capabilities",
    },
}

# why it matters, trade-offs, over-optimization risks
DIMENSION_EXPLANATIONS: dict[Dimension, tuple[str, str, str]] = {
    Dimension.IDENTITY_VERIFICATION: (
        "Determines confidence in user authentication and authorization decisions",
        "Stronger verification increases security but reduces user experience and increases complexity",
        "Excessive verification can drive shadow IT adoption and reduce productivity",
    ),
    Dimension.BEHAVIORAL_ANALYTICS: (
        "Enables detection of anomalous behavior and insider threats through pattern analysis",
        "Advanced analytics improve threat detection but require significant infrastructure and privacy considerations",
        "Complex analytics can generate false positives and require specialized expertise",
    ),
    Dimension.OPERATIONAL_COMPLEXITY: (
        "Affects team capability requirements, maintenance overhead, and system reliability",
        "Simple systems are easier to manage but may lack advanced security capabilities",
        "Over-simplification can leave security gaps; over-complexity can cause operational failures",
    ),
    Dimension.USER_EXPERIENCE: (
        "Influences user adoption, productivity, and shadow IT risk",
        "Low friction improves business enablement but may reduce security control effectiveness",
        "Excessive focus on UX can compromise security; excessive friction drives workarounds",
    ),
    Dimension.COMPLIANCE_AUDITABILITY: (
        "Supports regulatory requirements and reduces audit costs and risks",
        "High auditability requires extensive logging and controls but increases operational overhead",
        "Excessive compliance focus can impede business agility and innovation",
    ),
    Dimension.SCALABILITY_PERFORMANCE: (
        "Determines system ability to handle growth and peak loads without degradation",
        "High scalability requires architectural investment but supports business growth",
        "Over-engineering for scale can increase costs; under-engineering limits growth",
    ),
    Dimension.COST_EFFICIENCY: (
        "Affects budget allocation and ROI on security investments",
        "Lower costs may require capability compromises or increased operational risk",
        "Excessive cost focus can compromise security; ignoring costs limits adoption",
    ),
}


@dataclass(frozen=True)
class ArchitectureProfile:
    """Base scores and explanatory metadata for one architecture."""
    architecture_type: ArchitectureType
    base_scores: DimensionScores
    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...]
    risks: tuple[str, ...]
    scoring_rationale: dict[Dimension, str]


@dataclass(frozen=True)
class DimensionAnalysis:
    """Why a dimension matters and how each architecture performs on it."""
    dimension: Dimension
    why_it_matters: str
    tradeoffs: str
    over_optimization_risks: str
    architecture_comparison: dict[ArchitectureType, tuple[int, str]]


def get_architecture_profile(architecture_type: ArchitectureType) -> ArchitectureProfile:
    """Look up the static profile for an architecture.

    Raises:
        ValueError: If the architecture type is unknown.
    """
    architecture_type = ArchitectureType(architecture_type)
    return ArchitectureProfile(
        architecture_type=architecture_type,
        base_scores=BASE_SCORES[architecture_type],
        strengths=_STRENGTHS[architecture_type],
        weaknesses=_WEAKNESSES[architecture_type],
        risks=_RISKS[architecture_type],
        scoring_rationale=dict(_SCORING_RATIONALE[architecture_type]),
    )


def get_all_architecture_profiles() -> list[ArchitectureProfile]:
    return [get_architecture_profile(t) for t in ARCHITECTURE_ORDER]


def get_dimension_analysis(dimension: Dimension) -> DimensionAnalysis:
    why, tradeoffs, risks = DIMENSION_EXPLANATIONS[dimension]
    return DimensionAnalysis(
        dimension=dimension,
        why_it_matters=why,
        tradeoffs=tradeoffs,
        over_optimization_risks=risks,
        architecture_comparison={
            t: (BASE_SCORES[t].get(dimension), _SCORING_RATIONALE[t][dimension])
            for t in ARCHITECTURE_ORDER
        },
    )


def get_all_dimension_analyses() -> list[DimensionAnalysis]:
    return [get_dimension_analysis(d) for d in DIMENSION_ORDER]


def validate_architecture_profile(profile: ArchitectureProfile) -> bool:
    """Check a profile is complete and its scores are in range."""
    if not (profile.strengths and profile.weaknesses and profile.risks):
        return False

    if any(score < 1 or score > 10 for score in profile.base_scores.as_dict().values()):
        return False

    return all(profile.scoring_rationale.get(d) for d in DIMENSION_ORDER)
