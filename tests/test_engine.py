"""End-to-end tests for the referee engine facade."""

from unittest.mock import MagicMock

import pytest

from architecture_referee.config import RefereeConfig
from architecture_referee.engine import RefereeEngine, analyze, session_summary
from architecture_referee.exceptions import InvalidConfigError
from architecture_referee.schema import (
    ArchitectureType,
    AssumptionCategory,
    ConfidenceLevel,
    TieType,
)
from architecture_referee.scorer import WeightedScorer


COMPLETE_NEUTRAL = {
    "risk_tolerance": 5,
    "compliance_strictness": 5,
    "cost_sensitivity": 5,
    "user_experience_priority": 5,
    "operational_maturity": 5,
    "business_agility": 5,
}


def input_assumptions(result):
    return [a for a in result.assumptions if a.category == AssumptionCategory.INPUT]


class TestAnalyze:
    """Full pipeline from raw input to AnalysisResult."""

    def test_complete_input(self):
        """Complete neutral input gives a two-way tie with High confidence."""
        result = analyze(COMPLETE_NEUTRAL)

        assert result.validation.is_valid
        assert input_assumptions(result) == []
        assert [s.architecture_type for s in result.architecture_scores] == [
            ArchitectureType.IRM_HEAVY,
            ArchitectureType.HYBRID,
            ArchitectureType.URM_HEAVY,
        ]
        assert result.near_tie_detection.tie_type == TieType.TWO_WAY_TIE
        assert result.overall_confidence == ConfidenceLevel.HIGH
        assert result.detected_conflicts == []
        assert not result.is_fallback
        assert result.engine_version == "1.0.0"

    def test_methodology_assumptions_are_disclosed(self):
        """Methodology assumptions are tagged as calculation assumptions."""
        result = analyze(COMPLETE_NEUTRAL)

        calculation = [a for a in result.assumptions if a.category == AssumptionCategory.CALCULATION]
        assert len(calculation) == 5

    def test_empty_input_is_disclosed(self):
        """Empty input defaults every field and lowers confidence."""
        result = analyze({})

        assert len(input_assumptions(result)) == 6
        assert not result.constraint_profile.input_completeness
        assert result.overall_confidence == ConfidenceLevel.MEDIUM

    def test_none_input_does_not_raise(self):
        """None is analysed as an empty profile."""
        result = analyze(None)

        assert len(input_assumptions(result)) == 6

    def test_invalid_input_is_reported_not_raised(self):
        """Invalid values are reported and the defaults are scored."""
        result = analyze({**COMPLETE_NEUTRAL, "risk_tolerance": "very low"})

        assert not result.validation.is_valid
        assert result.validation.errors[0].error_code == "INVALID_TYPE"
        assert result.constraint_profile.risk_tolerance == 5
        assert len(result.architecture_scores) == 3

    def test_conflicts_and_contradictions(self):
        """Explicit conflicting values produce conflicts and contradictions."""
        result = analyze({**COMPLETE_NEUTRAL, "compliance_strictness": 9, "cost_sensitivity": 9})

        assert [c.conflict_id for c in result.detected_conflicts] == ["compliance-cost-conflict"]
        assert result.contradictions.has_contradictions
        assert input_assumptions(result) == []

    def test_configured_threshold(self):
        """A tighter threshold turns the neutral tie into a clear winner."""
        config = RefereeConfig.model_validate({"near_tie": {"near_tie_threshold": 0.1}})
        result = RefereeEngine(config).analyze(COMPLETE_NEUTRAL)

        assert result.near_tie_detection.tie_type == TieType.NO_TIE
        assert result.near_tie_detection.clear_winner == ArchitectureType.IRM_HEAVY
        assert result.tradeoff_summary.near_tie_threshold == 0.1

    def test_result_serializes_to_json(self):
        """The result serializes to JSON with enum values."""
        result = analyze(COMPLETE_NEUTRAL)

        assert '"IRM-Heavy"' in result.model_dump_json()


class TestEngineFallbacks:
    """Component failures surface as fallback details."""

    def test_scoring_failure(self):
        """A failing weight deriver yields a fallback result with no winner."""
        deriver = MagicMock()
        deriver.derive.side_effect = ValueError("division by zero")
        engine = RefereeEngine(scorer=WeightedScorer(weight_deriver=deriver))

        result = engine.analyze(COMPLETE_NEUTRAL)

        assert result.is_fallback
        assert [f.component for f in result.fallback_details] == ["scoring-engine"]
        assert result.overall_confidence == ConfidenceLevel.LOW
        assert result.near_tie_detection.clear_winner is None


class TestEngineSessions:
    """Sessions started from the engine share its components."""

    def test_start_session(self):
        """Sessions reuse the engine's scorer and summarize their changes."""
        engine = RefereeEngine()
        profile = engine.validate_and_build_profile(COMPLETE_NEUTRAL).profile

        modifier = engine.start_session(profile)
        modifier.modify_constraint("cost_sensitivity", 9)
        summary = session_summary(modifier.end_session())

        assert modifier.scorer is engine.scorer
        assert summary["modifications"] == 1
        assert summary["initial"]["cost_sensitivity"] == 5
        assert summary["current"]["cost_sensitivity"] == 9
        assert summary["similarity"] == pytest.approx(92.6)

    def test_from_config_file(self, tmp_path):
        """A config file configures the near-tie detector."""
        path = tmp_path / "referee-config.yaml"
        path.write_text("near_tie:\n  near_tie_threshold: 0.2\n", encoding="utf-8")

        engine = RefereeEngine.from_config_file(path)

        assert engine.config.near_tie.near_tie_threshold == 0.2
        assert engine.scorer.near_tie_detector.threshold == 0.2

    def test_from_invalid_config_file(self, tmp_path):
        """Inconsistent near-tie thresholds raise instead of building an engine."""
        path = tmp_path / "referee-config.yaml"
        path.write_text("near_tie:\n  meaningful_difference_threshold: 0.3\n", encoding="utf-8")

        with pytest.raises(InvalidConfigError):
            RefereeEngine.from_config_file(path)
