"""Tests for constraint conflict detection."""

from unittest.mock import MagicMock

import pytest

from architecture_referee.conflicts import (
    CONFLICT_RULES,
    MANUAL_REVIEW_CONFLICT_ID,
    ConflictDetector,
    ThresholdCondition,
    detect_conflicts,
)
from architecture_referee.schema import ConstraintField, ConstraintProfile


def profile_of(**overrides) -> ConstraintProfile:
    values = {f.value: 5 for f in ConstraintField}
    values.update(overrides)
    return ConstraintProfile(**values)


class TestConflictRules:
    """The rule table itself."""

    def test_rule_order(self):
        """Rules are evaluated in a fixed order."""
        assert [r.conflict_id for r in CONFLICT_RULES] == [
            "compliance-cost-conflict",
            "risk-ux-conflict",
            "agility-maturity-conflict",
            "compliance-agility-conflict",
        ]

    def test_threshold_condition_is_inclusive(self):
        """Threshold conditions match at the boundary value."""
        at_least = ThresholdCondition(ConstraintField.COST_SENSITIVITY, ">=", 8)
        at_most = ThresholdCondition(ConstraintField.RISK_TOLERANCE, "<=", 3)

        assert at_least.matches(8) and not at_least.matches(7)
        assert at_most.matches(3) and not at_most.matches(4)

    def test_missing_field_never_matches(self):
        """A rule never fires when one of its fields is absent."""
        rule = CONFLICT_RULES[0]
        assert not rule.matches_values({ConstraintField.COMPLIANCE_STRICTNESS: 10})


class TestConflictDetector:
    """Rule evaluation against complete profiles."""

    def test_neutral_profile_has_no_conflicts(self):
        """A neutral profile has no conflicts."""
        result = detect_conflicts(profile_of())

        assert not result.has_conflicts
        assert result.conflicts == []
        assert not result.is_fallback

    @pytest.mark.parametrize("overrides,expected", [
        ({"compliance_strictness": 8, "cost_sensitivity": 8}, "compliance-cost-conflict"),
        ({"risk_tolerance": 3, "user_experience_priority": 8}, "risk-ux-conflict"),
        ({"business_agility": 8, "operational_maturity": 4}, "agility-maturity-conflict"),
        ({"compliance_strictness": 8, "business_agility": 8}, "compliance-agility-conflict"),
    ])
    def test_each_rule_fires_at_threshold(self, overrides, expected):
        """Each rule fires when its values sit exactly on the thresholds."""
        result = detect_conflicts(profile_of(**overrides))

        assert result.conflict_ids == [expected]

    def test_just_below_threshold(self):
        """One point short of a threshold does not fire."""
        result = detect_conflicts(profile_of(compliance_strictness=8, cost_sensitivity=7))

        assert not result.has_conflicts

    def test_multiple_conflicts_follow_rule_order(self):
        """Several conflicts are reported in rule order."""
        result = detect_conflicts(profile_of(
            compliance_strictness=9,
            cost_sensitivity=9,
            business_agility=9,
            operational_maturity=2,
        ))

        assert result.conflict_ids == [
            "compliance-cost-conflict",
            "agility-maturity-conflict",
            "compliance-agility-conflict",
        ]
        assert len(result.conflict_summary) == 3

    def test_warning_contents(self):
        """A warning carries its values, severity and resolution options."""
        warning = detect_conflicts(profile_of(compliance_strictness=9, cost_sensitivity=10)).conflicts[0]

        assert warning.title == "High Compliance Requirements vs Cost Sensitivity"
        assert warning.triggering_constraints == {"compliance_strictness": 9, "cost_sensitivity": 10}
        assert len(warning.implications) == 4
        assert len(warning.resolution_suggestions) == 5

    def test_specific_conflict_lookup(self):
        """Conflicts can be looked up and explained by id."""
        detector = ConflictDetector()
        profile = profile_of(risk_tolerance=2, user_experience_priority=9)

        assert detector.has_specific_conflict(profile, "risk-ux-conflict")
        assert not detector.has_specific_conflict(profile, "compliance-cost-conflict")
        assert not detector.has_specific_conflict(profile, "no-such-conflict")
        assert detector.get_conflict_explanation(profile, "risk-ux-conflict").conflict_id == "risk-ux-conflict"
        assert detector.get_conflict_explanation(profile, "compliance-cost-conflict") is None

    def test_available_conflict_types(self):
        """All four conflict types are listed."""
        assert len(ConflictDetector().available_conflict_types()) == 4


class TestConflictFallback:
    """Internal failures fall back to a manual-review heuristic."""

    @staticmethod
    def broken_detector() -> ConflictDetector:
        rule = MagicMock()
        rule.matches.side_effect = RuntimeError("rule table corrupted")
        return ConflictDetector(rules=[rule])

    def test_fallback_flags_extreme_pairs(self):
        """The heuristic fallback flags extreme value pairs."""
        result = self.broken_detector().detect(profile_of(compliance_strictness=9, cost_sensitivity=9))

        assert result.is_fallback
        assert result.fallback_info is not None
        assert result.conflict_ids == [MANUAL_REVIEW_CONFLICT_ID]

    def test_fallback_without_extremes(self):
        """The fallback reports nothing when no value is extreme."""
        result = self.broken_detector().detect(profile_of())

        assert result.is_fallback
        assert not result.has_conflicts
