"""Pydantic models for the Architecture Referee.

Input and output schemas for constraint profiles, architecture scores,
conflicts, near-tie detection and the aggregate analysis result.
All models are immutable once constructed.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field


ENGINE_VERSION = "1.0.0"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Enums
# =============================================================================


class ArchitectureType(str, Enum):
    """The three architecture patterns being compared."""
    IRM_HEAVY = "IRM-Heavy"  # Identity-centric
    URM_HEAVY = "URM-Heavy"  # Behavior/risk-centric
    HYBRID = "Hybrid"


# Declaration order doubles as the secondary sort key for equal scores
ARCHITECTURE_ORDER: tuple[ArchitectureType, ...] = (
    ArchitectureType.IRM_HEAVY,
    ArchitectureType.URM_HEAVY,
    ArchitectureType.HYBRID,
)


class Dimension(str, Enum):
    """Quality axes on which every architecture is scored."""
    IDENTITY_VERIFICATION = "identity_verification"
    BEHAVIORAL_ANALYTICS = "behavioral_analytics"
    OPERATIONAL_COMPLEXITY = "operational_complexity"
    USER_EXPERIENCE = "user_experience"
    COMPLIANCE_AUDITABILITY = "compliance_auditability"
    SCALABILITY_PERFORMANCE = "scalability_performance"
    COST_EFFICIENCY = "cost_efficiency"


DIMENSION_ORDER: tuple[Dimension, ...] = tuple(Dimension)


class ConstraintField(str, Enum):
    """The six organizational constraints (1-10 scale)."""
    RISK_TOLERANCE = "risk_tolerance"
    COMPLIANCE_STRICTNESS = "compliance_strictness"
    COST_SENSITIVITY = "cost_sensitivity"
    USER_EXPERIENCE_PRIORITY = "user_experience_priority"
    OPERATIONAL_MATURITY = "operational_maturity"
    BUSINESS_AGILITY = "business_agility"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def from_key(cls, key: str) -> Optional["ConstraintField"]:
        """Resolve a snake_case or camelCase key to a constraint field."""
        normalized = "".join(ch for ch in key.lower() if ch.isalnum())
        for member in cls:
            if member.value.replace("_", "") == normalized:
                return member
        return None


CONSTRAINT_FIELDS: tuple[ConstraintField, ...] = tuple(ConstraintField)


class ConfidenceLevel(str, Enum):
    """Confidence tier for scoring results."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TieType(str, Enum):
    """Near-tie classification."""
    NO_TIE = "no-tie"
    TWO_WAY_TIE = "two-way-tie"
    THREE_WAY_TIE = "three-way-tie"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AssumptionCategory(str, Enum):
    INPUT = "input"
    CALCULATION = "calculation"
    INTERPRETATION = "interpretation"


class ProcessingStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class ImpactMagnitude(str, Enum):
    NEGLIGIBLE = "negligible"
    MINOR = "minor"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    MAJOR = "major"


class FrozenModel(BaseModel):
    """Base for value objects that never change after construction."""
    model_config = ConfigDict(frozen=True)


# =============================================================================
# Fallback information
# =============================================================================


class FallbackInfo(FrozenModel):
    """Why a component degraded to a fallback result."""
    component: str
    reason: str
    error_id: str
    message: str
    technical_details: str
    recoverable: bool = True
    recovery_actions: list[str] = Field(default_factory=list)
    available_functionality: list[str] = Field(default_factory=list)
    unavailable_functionality: list[str] = Field(default_factory=list)
    occurred_at: datetime = Field(default_factory=_utcnow)


# =============================================================================
# Constraint Profile
# =============================================================================


ConstraintValue = Annotated[int, Field(ge=1, le=10, strict=True)]


class ConstraintProfile(FrozenModel):
    """Organizational constraint profile (each value on a 1-10 scale).

    Every field is always present, either explicitly supplied or defaulted.
    Use ``with_value`` to derive a modified copy.
    """
    # Inverse scale: 1 = high tolerance, 10 = very low tolerance
    risk_tolerance: ConstraintValue
    compliance_strictness: ConstraintValue
    cost_sensitivity: ConstraintValue
    user_experience_priority: ConstraintValue
    operational_maturity: ConstraintValue
    business_agility: ConstraintValue

    input_completeness: bool = True
    assumptions: tuple[str, ...] = ()

    def value_of(self, field: ConstraintField) -> int:
        return getattr(self, field.value)

    def values(self) -> dict[str, int]:
        """The six constraint values keyed by field name, in declaration order."""
        return {f.value: self.value_of(f) for f in CONSTRAINT_FIELDS}

    def with_value(self, field: ConstraintField, value: int) -> "ConstraintProfile":
        """Return a new profile with one constraint replaced (re-validated).

        An explicit value is no longer a default, so the field's
        "was not provided" assumption is dropped.
        """
        data = self.model_dump()
        data[field.value] = value
        assumptions = tuple(
            a for a in self.assumptions
            if not a.startswith(f"{field.value} was not provided")
        )
        data["assumptions"] = assumptions
        data["input_completeness"] = self.input_completeness or not assumptions
        return ConstraintProfile.model_validate(data)

    def cache_key(self) -> str:
        """Canonical serialization of everything that affects scoring."""
        values = ",".join(f"{name}={value}" for name, value in self.values().items())
        return f"{values};complete={self.input_completeness};assumptions={len(self.assumptions)}"


class ValidationIssue(FrozenModel):
    """Field-scoped validation error."""
    field: str
    message: str
    provided_value: Any = None
    expected_format: str
    error_code: str
    severity: Severity = Severity.HIGH
    resolution_steps: list[str] = Field(default_factory=list)
    blocking: bool = True


class ValidationWarning(FrozenModel):
    """Advisory warning for valid but potentially problematic input."""
    field: str
    message: str
    provided_value: Any = None
    suggestion: str


class ValidationResult(FrozenModel):
    is_valid: bool
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)


class AssumptionDisclosure(FrozenModel):
    """A recorded assumption, disclosed for transparency."""
    category: AssumptionCategory
    description: str
    impact: Severity
    recommendation: str


class DetectedContradiction(FrozenModel):
    contradiction_id: str
    conflicting_constraints: list[str]
    conflicting_values: dict[str, int]
    explanation: str
    business_impact: str
    severity: Severity


class StakeholderAlignmentSuggestion(FrozenModel):
    stakeholder_group: str
    discussion_topics: list[str]
    questions_to_resolve: list[str]
    expected_outcomes: list[str]
    priority: Severity


class ContradictionAnalysis(FrozenModel):
    has_contradictions: bool = False
    contradictions: list[DetectedContradiction] = Field(default_factory=list)
    alignment_suggestions: list[StakeholderAlignmentSuggestion] = Field(default_factory=list)
    reliability_impact: Severity = Severity.LOW


class ConstraintProcessingResult(FrozenModel):
    """Output of the constraint validator."""
    profile: ConstraintProfile
    validation: ValidationResult
    assumptions: list[AssumptionDisclosure] = Field(default_factory=list)
    contradictions: ContradictionAnalysis = Field(default_factory=ContradictionAnalysis)
    processing_status: ProcessingStatus = ProcessingStatus.SUCCESS
    recovery_actions: list[str] = Field(default_factory=list)
    is_fallback: bool = False
    fallback_info: Optional[FallbackInfo] = None


# =============================================================================
# Scores
# =============================================================================


class DimensionScores(FrozenModel):
    """Comparative quality per dimension (1-10 scale)."""
    identity_verification: int
    behavioral_analytics: int
    operational_complexity: int
    user_experience: int
    compliance_auditability: int
    scalability_performance: int
    cost_efficiency: int

    def get(self, dimension: Dimension) -> int:
        return getattr(self, dimension.value)

    def as_dict(self) -> dict[Dimension, int]:
        return {d: self.get(d) for d in DIMENSION_ORDER}


class ArchitectureScore(FrozenModel):
    architecture_type: ArchitectureType
    dimension_scores: DimensionScores
    weighted_score: float
    confidence_level: ConfidenceLevel


def ranking_key(score: ArchitectureScore) -> tuple[float, int]:
    """Sort key: highest score first, declaration order among equal scores."""
    return (-score.weighted_score, ARCHITECTURE_ORDER.index(score.architecture_type))


class ScoringStep(FrozenModel):
    step_number: int
    description: str
    inputs: dict[str, Any] = Field(default_factory=dict)
    calculation: str
    result: str
    rationale: str


class WeightInfluence(FrozenModel):
    constraint: ConstraintField
    weight: int
    affected_dimensions: list[Dimension]
    influence: str
    impact_magnitude: Severity


class ConfidenceFactor(FrozenModel):
    factor: str
    impact: str  # increases / decreases
    magnitude: Severity
    explanation: str


class ScoringMethodology(FrozenModel):
    """Step-by-step trace of how the scores were produced."""
    calculation_steps: list[ScoringStep] = Field(default_factory=list)
    weight_influence: list[WeightInfluence] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)
    confidence_factors: list[ConfidenceFactor] = Field(default_factory=list)
    dimension_weights: dict[Dimension, float] = Field(default_factory=dict)


class PrimaryTradeoff(FrozenModel):
    dimension: Dimension
    description: str
    architecture_impacts: dict[ArchitectureType, str]


class TradeoffAnalysis(FrozenModel):
    key_decision_factors: list[str] = Field(default_factory=list)
    primary_tradeoffs: list[PrimaryTradeoff] = Field(default_factory=list)
    is_near_tie: bool = False
    near_tie_threshold: float


class NearTieMessaging(FrozenModel):
    primary_message: str
    explanation: str
    decision_guidance: list[str]
    tradeoff_emphasis: str
    numeric_score_warning: str


class NearTieDetectionResult(FrozenModel):
    is_near_tie: bool
    tie_type: TieType
    tied_architectures: list[ArchitectureType] = Field(default_factory=list)
    score_difference: float
    threshold_used: float
    clear_winner: Optional[ArchitectureType] = None
    detection_confidence: ConfidenceLevel
    messaging: NearTieMessaging


class ScoringResults(FrozenModel):
    """Complete output of the weighted scoring engine."""
    architecture_scores: list[ArchitectureScore]
    methodology: ScoringMethodology
    tradeoff_analysis: TradeoffAnalysis
    near_tie_detection: NearTieDetectionResult
    overall_confidence: ConfidenceLevel
    interpretation_guidance: list[str] = Field(default_factory=list)
    is_fallback: bool = False
    fallback_info: Optional[FallbackInfo] = None

    def score_for(self, architecture: ArchitectureType) -> ArchitectureScore:
        for score in self.architecture_scores:
            if score.architecture_type == architecture:
                return score
        raise KeyError(architecture)


# =============================================================================
# Conflicts
# =============================================================================


class ConflictWarning(FrozenModel):
    conflict_id: str
    title: str
    description: str
    implications: list[str]
    resolution_suggestions: list[str]
    triggering_constraints: dict[str, int]


class ConflictDetectionResult(FrozenModel):
    conflicts: list[ConflictWarning] = Field(default_factory=list)
    has_conflicts: bool = False
    conflict_summary: list[str] = Field(default_factory=list)
    is_fallback: bool = False
    fallback_info: Optional[FallbackInfo] = None

    @property
    def conflict_ids(self) -> list[str]:
        return [c.conflict_id for c in self.conflicts]


# =============================================================================
# Interactive modification sessions
# =============================================================================


class SessionOperation(str, Enum):
    MODIFY = "modify"
    REVERT = "revert"
    RESET = "reset"
    COMPARE = "compare"


class ConstraintModification(FrozenModel):
    """One entry in a session's audit trail.

    ``constraint_field`` and the values are only set for MODIFY operations.
    """
    operation: SessionOperation = SessionOperation.MODIFY
    constraint_field: Optional[ConstraintField] = None
    previous_value: Optional[int] = None
    new_value: Optional[int] = None
    reason: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class ScoreChange(FrozenModel):
    architecture: ArchitectureType
    previous_score: float
    new_score: float
    absolute_change: float
    percentage_change: float
    impact_magnitude: ImpactMagnitude


class RankingChange(FrozenModel):
    architecture: ArchitectureType
    previous_rank: int  # 1-based
    new_rank: int
    direction: str  # up / down


class NearTieChange(FrozenModel):
    previous_near_tie: bool
    new_near_tie: bool
    previous_tie_type: TieType
    new_tie_type: TieType
    tie_type_change: str
    impact_description: str


class ConflictChange(FrozenModel):
    resolved_conflicts: list[str] = Field(default_factory=list)
    new_conflicts: list[str] = Field(default_factory=list)
    persisting_conflicts: list[str] = Field(default_factory=list)


class ConfidenceChange(FrozenModel):
    previous_confidence: ConfidenceLevel
    new_confidence: ConfidenceLevel
    change_reason: str


class ImpactAnalysis(FrozenModel):
    """Before/after comparison produced by every session mutation."""
    modification: ConstraintModification
    before_profile: ConstraintProfile
    after_profile: ConstraintProfile
    before_analysis: ScoringResults
    after_analysis: ScoringResults
    score_changes: dict[ArchitectureType, ScoreChange] = Field(default_factory=dict)
    ranking_changes: list[RankingChange] = Field(default_factory=list)
    near_tie_change: NearTieChange
    conflict_changes: ConflictChange = Field(default_factory=ConflictChange)
    confidence_changes: dict[ArchitectureType, ConfidenceChange] = Field(default_factory=dict)
    change_summary: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class ModificationSession(BaseModel):
    """Mutable state of one interactive session, held in memory only."""
    session_id: str
    initial_constraints: ConstraintProfile
    current_constraints: ConstraintProfile
    modification_history: list[ConstraintModification] = Field(default_factory=list)
    impact_history: list[ImpactAnalysis] = Field(default_factory=list)
    start_time: datetime = Field(default_factory=_utcnow)
    last_modified: datetime = Field(default_factory=_utcnow)


# =============================================================================
# Aggregate
# =============================================================================


class AnalysisResult(FrozenModel):
    """Aggregate root returned by a top-level analysis."""
    constraint_profile: ConstraintProfile
    validation: ValidationResult
    contradictions: ContradictionAnalysis = Field(default_factory=ContradictionAnalysis)
    architecture_scores: list[ArchitectureScore]
    detected_conflicts: list[ConflictWarning] = Field(default_factory=list)
    tradeoff_summary: TradeoffAnalysis
    near_tie_detection: NearTieDetectionResult
    overall_confidence: ConfidenceLevel
    assumptions: list[AssumptionDisclosure] = Field(default_factory=list)
    interpretation_guidance: list[str] = Field(default_factory=list)
    is_fallback: bool = False
    fallback_details: list[FallbackInfo] = Field(default_factory=list)
    analysis_timestamp: datetime = Field(default_factory=_utcnow)
    engine_version: str = ENGINE_VERSION
