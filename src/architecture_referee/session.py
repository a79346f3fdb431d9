"""Interactive constraint modification.

Lets a caller adjust one constraint at a time and see how the scores,
ranking, near-tie status, conflicts and confidence move. Every mutation
returns an ImpactAnalysis and is appended to an in-memory audit trail.

Scoring results are memoized per session, keyed by the constraint values.
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Union

from .conflicts import ConflictDetector
from .exceptions import InvalidModificationError, SessionNotStartedError
from .scorer import WeightedScorer
from .schema import (
    CONSTRAINT_FIELDS,
    ArchitectureType,
    ConfidenceChange,
    ConfidenceLevel,
    ConflictChange,
    ConstraintField,
    ConstraintModification,
    ConstraintProfile,
    ImpactAnalysis,
    ImpactMagnitude,
    ModificationSession,
    NearTieChange,
    RankingChange,
    ScoreChange,
    ScoringResults,
    SessionOperation,
)
from .validator import check_constraint_value

logger = logging.getLogger(__name__)


FieldRef = Union[ConstraintField, str]


def impact_magnitude(absolute_change: float) -> ImpactMagnitude:
    if absolute_change < 0.1:
        return ImpactMagnitude.NEGLIGIBLE
    if absolute_change < 0.5:
        return ImpactMagnitude.MINOR
    if absolute_change < 1.0:
        return ImpactMagnitude.MODERATE
    if absolute_change < 2.0:
        return ImpactMagnitude.SIGNIFICANT
    return ImpactMagnitude.MAJOR


def constraint_similarity(a: ConstraintProfile, b: ConstraintProfile) -> float:
    """Similarity of two profiles as a percentage (100 = identical)."""
    total_difference = sum(abs(a.value_of(f) - b.value_of(f)) for f in CONSTRAINT_FIELDS)
    max_difference = len(CONSTRAINT_FIELDS) * 9
    similarity = (max_difference - total_difference) / max_difference * 100
    return max(0.0, min(100.0, similarity))


def _resolve_field(field: FieldRef) -> ConstraintField:
    if isinstance(field, ConstraintField):
        return field
    resolved = ConstraintField.from_key(str(field))
    if resolved is None:
        raise InvalidModificationError(f"Unknown constraint field: {field}", field=str(field))
    return resolved


def _check_value(field: ConstraintField, value: Any) -> int:
    issue = check_constraint_value(field, value)
    if issue:
        raise InvalidModificationError(issue.message, field=field.value, value=value)
    return int(value)


class InteractiveConstraintModifier:
    """Runs one modification session at a time.

    Invalid API usage raises: modifying with a bad value raises
    InvalidModificationError and leaves the session untouched, and any
    session operation before start_session() raises SessionNotStartedError.
    """

    def __init__(
        self,
        scorer: Optional[WeightedScorer] = None,
        conflict_detector: Optional[ConflictDetector] = None,
    ):
        self.scorer = scorer or WeightedScorer()
        self.conflict_detector = conflict_detector or ConflictDetector()
        self._session: Optional[ModificationSession] = None
        self._cache: dict[str, ScoringResults] = {}

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    def start_session(self, initial: ConstraintProfile) -> ModificationSession:
        """Start a new session, replacing any active one."""
        self._cache.clear()
        self._session = ModificationSession(
            session_id=f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}",
            initial_constraints=initial,
            current_constraints=initial,
        )
        self.analysis_for(initial)
        logger.debug("Started modification session %s", self._session.session_id)
        return self.current_session()

    def end_session(self) -> Optional[ModificationSession]:
        """End the active session and clear the cache. Returns the final state."""
        session = self._session
        self._session = None
        self._cache.clear()
        return session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def _require_session(self) -> ModificationSession:
        if self._session is None:
            raise SessionNotStartedError("No active modification session. Call start_session() first.")
        return self._session

    def current_session(self) -> ModificationSession:
        """Snapshot of the active session."""
        return self._require_session().model_copy(deep=True)

    @property
    def current_constraints(self) -> ConstraintProfile:
        return self._require_session().current_constraints

    @property
    def modification_history(self) -> list[ConstraintModification]:
        return list(self._require_session().modification_history)

    def current_analysis(self) -> ScoringResults:
        return self.analysis_for(self._require_session().current_constraints)

    def analysis_for(self, profile: ConstraintProfile) -> ScoringResults:
        """Score ``profile``, reusing a cached result for identical values."""
        key = profile.cache_key()
        if key not in self._cache:
            self._cache[key] = self.scorer.score(profile)
        return self._cache[key]

    # =========================================================================
    # Mutations
    # =========================================================================

    def modify_constraint(
        self,
        field: FieldRef,
        new_value: Any,
        reason: Optional[str] = None,
    ) -> ImpactAnalysis:
        """Change one constraint and report the impact.

        Raises:
            SessionNotStartedError: If no session is active.
            InvalidModificationError: If the field is unknown or the value is
                not an integer in [1, 10]. Session state is unchanged.
        """
        session = self._require_session()
        constraint = _resolve_field(field)
        value = _check_value(constraint, new_value)
        return self._apply(session, constraint, value, reason)

    def batch_modify_constraints(
        self,
        modifications: Iterable[tuple],
    ) -> list[ImpactAnalysis]:
        """Apply ``(field, value)`` or ``(field, value, reason)`` entries in order.

        Every entry is validated before any is applied, so a bad entry
        leaves the session unchanged.
        """
        session = self._require_session()

        checked = []
        for entry in modifications:
            if not isinstance(entry, (tuple, list)) or len(entry) not in (2, 3):
                raise InvalidModificationError(
                    f"Expected (field, value) or (field, value, reason), got: {entry!r}",
                    value=entry,
                )
            field, value, *rest = entry
            constraint = _resolve_field(field)
            checked.append((constraint, _check_value(constraint, value), rest[0] if rest else None))

        return [self._apply(session, c, v, r) for c, v, r in checked]

    def _apply(
        self,
        session: ModificationSession,
        field: ConstraintField,
        value: int,
        reason: Optional[str],
    ) -> ImpactAnalysis:
        before = session.current_constraints
        after = before.with_value(field, value)
        modification = ConstraintModification(
            constraint_field=field,
            previous_value=before.value_of(field),
            new_value=value,
            reason=reason,
        )
        impact = self._impact(modification, before, after)

        session.current_constraints = after
        session.modification_history.append(modification)
        session.impact_history.append(impact)
        session.last_modified = datetime.now(timezone.utc)
        logger.debug("Modified %s: %s -> %s", field.value, modification.previous_value, value)
        return impact

    def revert_to_step(self, step_index: int) -> ImpactAnalysis:
        """Keep only the first ``step_index + 1`` modifications.

        The profile is rebuilt by replaying those modifications from the
        initial constraints.
        """
        session = self._require_session()
        if step_index < 0 or step_index >= len(session.modification_history):
            raise InvalidModificationError(f"Invalid step index: {step_index}", value=step_index)

        reverted = session.initial_constraints
        for modification in session.modification_history[:step_index + 1]:
            reverted = reverted.with_value(modification.constraint_field, modification.new_value)

        impact = self._impact(
            ConstraintModification(
                operation=SessionOperation.REVERT,
                reason=f"Reverted to step {step_index}",
            ),
            session.current_constraints,
            reverted,
        )

        session.current_constraints = reverted
        session.modification_history = session.modification_history[:step_index + 1]
        session.impact_history = session.impact_history[:step_index + 1]
        session.last_modified = datetime.now(timezone.utc)
        return impact

    def reset_to_initial(self) -> ImpactAnalysis:
        """Discard all modifications."""
        session = self._require_session()
        impact = self._impact(
            ConstraintModification(
                operation=SessionOperation.RESET,
                reason="Reset to initial constraints",
            ),
            session.current_constraints,
            session.initial_constraints,
        )

        session.current_constraints = session.initial_constraints
        session.modification_history = []
        session.impact_history = []
        session.last_modified = datetime.now(timezone.utc)
        return impact

    def compare_with_initial(self) -> ImpactAnalysis:
        """Impact of all modifications so far, without changing the session."""
        session = self._require_session()
        return self._impact(
            ConstraintModification(
                operation=SessionOperation.COMPARE,
                reason="Comparison with initial state",
            ),
            session.initial_constraints,
            session.current_constraints,
        )

    # =========================================================================
    # Impact analysis
    # =========================================================================

    def _impact(
        self,
        modification: ConstraintModification,
        before_profile: ConstraintProfile,
        after_profile: ConstraintProfile,
    ) -> ImpactAnalysis:
        before = self.analysis_for(before_profile)
        after = self.analysis_for(after_profile)

        score_changes = self._score_changes(before, after)
        ranking_changes = self._ranking_changes(before, after)
        near_tie_change = self._near_tie_change(before, after)
        conflict_changes = self._conflict_changes(before_profile, after_profile)
        confidence_changes = self._confidence_changes(before, after)

        return ImpactAnalysis(
            modification=modification,
            before_profile=before_profile,
            after_profile=after_profile,
            before_analysis=before,
            after_analysis=after,
            score_changes=score_changes,
            ranking_changes=ranking_changes,
            near_tie_change=near_tie_change,
            conflict_changes=conflict_changes,
            confidence_changes=confidence_changes,
            change_summary=self._change_summary(
                score_changes, ranking_changes, near_tie_change, conflict_changes, confidence_changes,
            ),
            recommendations=self._recommendations(
                score_changes, ranking_changes, near_tie_change, conflict_changes, confidence_changes,
            ),
        )

    @staticmethod
    def _score_changes(before: ScoringResults, after: ScoringResults) -> dict[ArchitectureType, ScoreChange]:
        changes = {}
        for old in before.architecture_scores:
            new = after.score_for(old.architecture_type)
            absolute = round(new.weighted_score - old.weighted_score, 2)
            percentage = round(absolute / old.weighted_score * 100, 2) if old.weighted_score else 0.0
            changes[old.architecture_type] = ScoreChange(
                architecture=old.architecture_type,
                previous_score=old.weighted_score,
                new_score=new.weighted_score,
                absolute_change=absolute,
                percentage_change=percentage,
                impact_magnitude=impact_magnitude(abs(absolute)),
            )
        return changes

    @staticmethod
    def _ranking_changes(before: ScoringResults, after: ScoringResults) -> list[RankingChange]:
        old_ranks = {s.architecture_type: i + 1 for i, s in enumerate(before.architecture_scores)}
        new_ranks = {s.architecture_type: i + 1 for i, s in enumerate(after.architecture_scores)}
        return [
            RankingChange(
                architecture=arch,
                previous_rank=rank,
                new_rank=new_ranks[arch],
                direction="up" if new_ranks[arch] < rank else "down",
            )
            for arch, rank in old_ranks.items()
            if new_ranks[arch] != rank
        ]

    @staticmethod
    def _near_tie_change(before: ScoringResults, after: ScoringResults) -> NearTieChange:
        was_tie = before.near_tie_detection.is_near_tie
        is_tie = after.near_tie_detection.is_near_tie

        if was_tie == is_tie:
            tie_type_change = "No change in tie status"
            description = "Near-tie status remained unchanged"
        elif is_tie:
            tie_type_change = "Changed from clear differentiation to near-tie"
            description = "Constraint modification resulted in architectures becoming more similar in suitability"
        else:
            tie_type_change = "Changed from near-tie to clear differentiation"
            description = "Constraint modification resulted in clearer architectural preference"

        return NearTieChange(
            previous_near_tie=was_tie,
            new_near_tie=is_tie,
            previous_tie_type=before.near_tie_detection.tie_type,
            new_tie_type=after.near_tie_detection.tie_type,
            tie_type_change=tie_type_change,
            impact_description=description,
        )

    def _conflict_changes(self, before: ConstraintProfile, after: ConstraintProfile) -> ConflictChange:
        old_ids = self.conflict_detector.detect(before).conflict_ids
        new_ids = self.conflict_detector.detect(after).conflict_ids
        return ConflictChange(
            resolved_conflicts=[c for c in old_ids if c not in new_ids],
            new_conflicts=[c for c in new_ids if c not in old_ids],
            persisting_conflicts=[c for c in new_ids if c in old_ids],
        )

    @staticmethod
    def _confidence_changes(
        before: ScoringResults,
        after: ScoringResults,
    ) -> dict[ArchitectureType, ConfidenceChange]:
        changes = {}
        for old in before.architecture_scores:
            new = after.score_for(old.architecture_type)
            if old.confidence_level != new.confidence_level:
                changes[old.architecture_type] = ConfidenceChange(
                    previous_confidence=old.confidence_level,
                    new_confidence=new.confidence_level,
                    change_reason="Constraint modification affected confidence calculation",
                )
        return changes

    @staticmethod
    def _change_summary(
        score_changes: dict[ArchitectureType, ScoreChange],
        ranking_changes: list[RankingChange],
        near_tie_change: NearTieChange,
        conflict_changes: ConflictChange,
        confidence_changes: dict[ArchitectureType, ConfidenceChange],
    ) -> list[str]:
        summary = []

        changed = [c for c in score_changes.values() if c.impact_magnitude != ImpactMagnitude.NEGLIGIBLE]
        if changed:
            summary.append(f"{len(changed)} architecture(s) experienced significant score changes")

        if ranking_changes:
            summary.append(f"{len(ranking_changes)} architecture(s) changed ranking position")

        if near_tie_change.previous_near_tie != near_tie_change.new_near_tie:
            summary.append(near_tie_change.impact_description)

        if conflict_changes.resolved_conflicts:
            summary.append(f"{len(conflict_changes.resolved_conflicts)} constraint conflict(s) resolved")
        if conflict_changes.new_conflicts:
            summary.append(f"{len(conflict_changes.new_conflicts)} new constraint conflict(s) detected")

        if confidence_changes:
            summary.append(f"{len(confidence_changes)} architecture(s) experienced confidence level changes")

        if not summary:
            summary.append("Constraint modification had minimal impact on analysis results")
        return summary

    @staticmethod
    def _recommendations(
        score_changes: dict[ArchitectureType, ScoreChange],
        ranking_changes: list[RankingChange],
        near_tie_change: NearTieChange,
        conflict_changes: ConflictChange,
        confidence_changes: dict[ArchitectureType, ConfidenceChange],
    ) -> list[str]:
        recommendations = []

        large = (ImpactMagnitude.SIGNIFICANT, ImpactMagnitude.MAJOR)
        if any(c.impact_magnitude in large for c in score_changes.values()):
            recommendations.append(
                "Review the significant score changes to ensure they align with organizational priorities"
            )

        if ranking_changes:
            recommendations.append("Consider the implications of architecture ranking changes on decision-making")

        if near_tie_change.previous_near_tie != near_tie_change.new_near_tie:
            if near_tie_change.new_near_tie:
                recommendations.append(
                    "With architectures now showing similar suitability, focus on qualitative trade-offs"
                )
            else:
                recommendations.append(
                    "Clear architectural preference has emerged - validate this aligns with expectations"
                )

        if conflict_changes.new_conflicts:
            recommendations.append("Review newly detected constraint conflicts with the affected stakeholders")

        decreased = [
            c for c in confidence_changes.values()
            if (c.previous_confidence == ConfidenceLevel.HIGH and c.new_confidence != ConfidenceLevel.HIGH)
            or (c.previous_confidence == ConfidenceLevel.MEDIUM and c.new_confidence == ConfidenceLevel.LOW)
        ]
        if decreased:
            recommendations.append("Confidence levels decreased - consider validating constraint assumptions")

        if not recommendations:
            recommendations.append(
                "Changes appear reasonable - continue with analysis or make additional modifications as needed"
            )
        return recommendations
