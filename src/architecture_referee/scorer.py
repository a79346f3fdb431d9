"""Scorer - Phase 3 of the Scoring Engine.

Combines the static base score matrix with the derived dimension weights
into one weighted score per architecture, assigns a confidence level and
ranks the results.

If the calculation fails internally, the scorer degrades to a simple
average of base scores with Low confidence and marks the result as a
fallback. It never hides the failure.
"""

import logging
import math
from typing import Mapping, Optional

from .config import ConfidenceConfig, RefereeConfig
from .explainer import ScoringExplainer, overall_confidence
from .fallback import scoring_fallback
from .near_tie import NearTieDetector
from .profiles import BASE_SCORES
from .schema import (
    ARCHITECTURE_ORDER,
    DIMENSION_ORDER,
    ArchitectureScore,
    ConfidenceLevel,
    ConstraintProfile,
    Dimension,
    DimensionScores,
    ScoringResults,
    ranking_key,
)
from .weights import DimensionWeightDeriver

logger = logging.getLogger(__name__)


def round_half_away(value: float, places: int = 2) -> float:
    """Round half away from zero (the builtin round() is half-to-even)."""
    factor = 10 ** places
    rounded = math.floor(abs(value) * factor + 0.5) / factor
    return math.copysign(rounded, value)


def weighted_average(scores: DimensionScores, weights: Mapping[Dimension, float]) -> float:
    """sum(score * weight) / sum(weight) over the seven dimensions, in order."""
    total_weighted = 0.0
    total_weight = 0.0
    for dimension in DIMENSION_ORDER:
        weight = weights[dimension]
        total_weighted += scores.get(dimension) * weight
        total_weight += weight
    return total_weighted / total_weight


def simple_average(scores: DimensionScores) -> float:
    values = list(scores.as_dict().values())
    return round_half_away(sum(values) / len(values))


def confidence_points(profile: ConstraintProfile, config: ConfidenceConfig) -> int:
    """Deduction-based confidence points for a profile."""
    points = config.starting_points

    if not profile.input_completeness:
        points -= config.incomplete_input_penalty

    extremes = sum(
        1 for v in profile.values().values()
        if v <= config.extreme_low or v >= config.extreme_high
    )
    points -= extremes * config.extreme_value_penalty
    points -= len(profile.assumptions) * config.assumption_penalty
    return points


def confidence_level(profile: ConstraintProfile, config: ConfidenceConfig) -> ConfidenceLevel:
    points = confidence_points(profile, config)
    if points >= config.high_threshold:
        return ConfidenceLevel.HIGH
    if points >= config.medium_threshold:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def _rank(scores: list[ArchitectureScore]) -> list[ArchitectureScore]:
    return sorted(scores, key=ranking_key)


class WeightedScorer:
    """Scores the three architectures against a constraint profile.

    Collaborators are injected so tests can swap them; defaults are built
    from the given configuration.
    """

    def __init__(
        self,
        config: Optional[RefereeConfig] = None,
        weight_deriver: Optional[DimensionWeightDeriver] = None,
        near_tie_detector: Optional[NearTieDetector] = None,
        explainer: Optional[ScoringExplainer] = None,
    ):
        self.config = config or RefereeConfig()
        self.weight_deriver = weight_deriver or DimensionWeightDeriver()
        self.near_tie_detector = near_tie_detector or NearTieDetector(self.config)
        self.explainer = explainer or ScoringExplainer(self.config)

    def score(self, profile: ConstraintProfile) -> ScoringResults:
        """Score all architectures, falling back to simple averages on failure."""
        try:
            return self._score(profile)
        except Exception as e:
            logger.warning("Weighted scoring failed, using simplified fallback: %s", e)
            return self._fallback_results(e)

    def _score(self, profile: ConstraintProfile) -> ScoringResults:
        weights = self.weight_deriver.derive(profile)
        level = confidence_level(profile, self.config.confidence)

        scores = []
        for architecture in ARCHITECTURE_ORDER:
            base = BASE_SCORES[architecture]
            scores.append(ArchitectureScore(
                architecture_type=architecture,
                dimension_scores=base,
                weighted_score=round_half_away(weighted_average(base, weights)),
                confidence_level=level,
            ))
        ranked = _rank(scores)
        logger.debug(
            "Weighted scores: %s",
            {s.architecture_type.value: s.weighted_score for s in ranked},
        )

        near_tie = self.near_tie_detector.detect(ranked)
        return ScoringResults(
            architecture_scores=ranked,
            methodology=self.explainer.methodology(profile, weights, ranked),
            tradeoff_analysis=self.explainer.tradeoff_analysis(profile, near_tie),
            near_tie_detection=near_tie,
            overall_confidence=overall_confidence(ranked),
            interpretation_guidance=self.explainer.interpretation_guidance(ranked, near_tie),
        )

    def _fallback_results(self, error: Exception) -> ScoringResults:
        ranked = _rank([
            ArchitectureScore(
                architecture_type=architecture,
                dimension_scores=BASE_SCORES[architecture],
                weighted_score=simple_average(BASE_SCORES[architecture]),
                confidence_level=ConfidenceLevel.LOW,
            )
            for architecture in ARCHITECTURE_ORDER
        ])
        return ScoringResults(
            architecture_scores=ranked,
            methodology=self.explainer.fallback_methodology(),
            tradeoff_analysis=self.explainer.fallback_tradeoff_analysis(),
            near_tie_detection=self.near_tie_detector.manual_evaluation_result(),
            overall_confidence=ConfidenceLevel.LOW,
            interpretation_guidance=self.explainer.fallback_guidance(),
            is_fallback=True,
            fallback_info=scoring_fallback(error),
        )


def score_architectures(profile: ConstraintProfile) -> ScoringResults:
    """Score a profile with the default configuration."""
    return WeightedScorer().score(profile)