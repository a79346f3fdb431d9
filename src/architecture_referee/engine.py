"""Architecture Referee Engine.

Orchestrates the scoring pipeline:
1. Validate constraints and build the profile
2. Derive dimension weights
3. Score and rank the architectures
4. Detect near-ties
5. Explain the results
6. Detect constraint conflicts

The engine never raises for business input. Component failures come back
as fallback results and are collected on the AnalysisResult.
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .config import RefereeConfig, resolve_config
from .conflicts import ConflictDetector
from .exceptions import InvalidInputError
from .scorer import WeightedScorer
from .schema import (
    AnalysisResult,
    AssumptionCategory,
    AssumptionDisclosure,
    ConflictDetectionResult,
    ConstraintProcessingResult,
    ConstraintProfile,
    ModificationSession,
    ScoringResults,
    Severity,
)
from .session import InteractiveConstraintModifier, constraint_similarity
from .validator import ConstraintValidator

logger = logging.getLogger(__name__)


class RefereeEngine:
    """Main entry point for architecture comparison.

    All collaborators are built from one configuration and can be replaced
    individually.
    """

    def __init__(
        self,
        config: Optional[RefereeConfig] = None,
        validator: Optional[ConstraintValidator] = None,
        scorer: Optional[WeightedScorer] = None,
        conflict_detector: Optional[ConflictDetector] = None,
    ):
        self.config = config or RefereeConfig()
        self.validator = validator or ConstraintValidator(self.config)
        self.scorer = scorer or WeightedScorer(self.config)
        self.conflict_detector = conflict_detector or ConflictDetector()

    @classmethod
    def from_config_file(cls, path: Optional[Union[str, Path]] = None) -> "RefereeEngine":
        """Build an engine from a YAML config file, or the discovered one."""
        return cls(resolve_config(Path(path) if path else None))

    def validate_and_build_profile(self, raw: Optional[Mapping[str, Any]]) -> ConstraintProcessingResult:
        return self.validator.validate_and_build_profile(raw)

    def score_architectures(self, profile: ConstraintProfile) -> ScoringResults:
        return self.scorer.score(profile)

    def detect_conflicts(self, profile: ConstraintProfile) -> ConflictDetectionResult:
        return self.conflict_detector.detect(profile)

    def analyze(self, raw: Optional[Mapping[str, Any]]) -> AnalysisResult:
        """Run the complete analysis on raw constraint input.

        Args:
            raw: Partial mapping of constraint values (snake_case or camelCase).

        Returns:
            AnalysisResult with scores, conflicts, near-tie detection and
            every assumption made along the way.
        """
        try:
            processing = self.validate_and_build_profile(raw)
        except InvalidInputError as e:
            logger.warning("No constraint input supplied, analysing default profile: %s", e)
            processing = self.validator.validate_and_build_profile({})

        profile = processing.profile
        scoring = self.score_architectures(profile)
        conflicts = self.detect_conflicts(profile)

        fallbacks = [
            info for info in (processing.fallback_info, scoring.fallback_info, conflicts.fallback_info)
            if info is not None
        ]
        if fallbacks:
            logger.info("Analysis completed with %d component fallback(s)", len(fallbacks))

        assumptions = list(processing.assumptions)
        assumptions.extend(
            AssumptionDisclosure(
                category=AssumptionCategory.CALCULATION,
                description=text,
                impact=Severity.LOW,
                recommendation="Review the scoring methodology before relying on the numeric results",
            )
            for text in scoring.methodology.assumptions
        )

        return AnalysisResult(
            constraint_profile=profile,
            validation=processing.validation,
            contradictions=processing.contradictions,
            architecture_scores=scoring.architecture_scores,
            detected_conflicts=conflicts.conflicts,
            tradeoff_summary=scoring.tradeoff_analysis,
            near_tie_detection=scoring.near_tie_detection,
            overall_confidence=scoring.overall_confidence,
            assumptions=assumptions,
            interpretation_guidance=scoring.interpretation_guidance,
            is_fallback=bool(fallbacks) or processing.is_fallback,
            fallback_details=fallbacks,
        )

    def start_session(self, profile: ConstraintProfile) -> InteractiveConstraintModifier:
        """Start an interactive modification session on ``profile``."""
        modifier = InteractiveConstraintModifier(self.scorer, self.conflict_detector)
        modifier.start_session(profile)
        return modifier


def analyze(raw: Optional[Mapping[str, Any]], config: Optional[RefereeConfig] = None) -> AnalysisResult:
    """Analyze raw constraint input with a one-off engine."""
    return RefereeEngine(config).analyze(raw)


def session_summary(session: ModificationSession) -> dict[str, Any]:
    """Compact description of a session for display."""
    return {
        "session_id": session.session_id,
        "modifications": len(session.modification_history),
        "initial": session.initial_constraints.values(),
        "current": session.current_constraints.values(),
        "similarity": round(constraint_similarity(session.initial_constraints, session.current_constraints), 1),
    }
