"""Tests for constraint validation and profile building."""

from decimal import Decimal
from unittest.mock import patch

import pytest

from architecture_referee.config import RefereeConfig
from architecture_referee.exceptions import InvalidInputError
from architecture_referee.schema import (
    AssumptionCategory,
    ConstraintField,
    ConstraintProfile,
    ProcessingStatus,
    Severity,
)
from architecture_referee.validator import (
    ConstraintValidator,
    check_constraint_value,
    check_profile_consistency,
    validate_and_build_profile,
)


COMPLETE_INPUT = {
    "risk_tolerance": 7,
    "compliance_strictness": 6,
    "cost_sensitivity": 4,
    "user_experience_priority": 6,
    "operational_maturity": 5,
    "business_agility": 5,
}


def profile_of(**overrides) -> ConstraintProfile:
    values = {f.value: 5 for f in ConstraintField}
    values.update(overrides)
    return ConstraintProfile(**values)


class TestCheckConstraintValue:
    """Single-value checks: type, range, integrality."""

    def test_accepts_integer_in_range(self):
        """Boundary integers are accepted."""
        assert check_constraint_value(ConstraintField.RISK_TOLERANCE, 1) is None
        assert check_constraint_value(ConstraintField.RISK_TOLERANCE, 10) is None

    def test_accepts_integral_float(self):
        """Whole-number floats are accepted."""
        assert check_constraint_value(ConstraintField.COST_SENSITIVITY, 7.0) is None

    def test_decimal_values(self):
        """Decimal values are checked like other numbers."""
        assert check_constraint_value(ConstraintField.COST_SENSITIVITY, Decimal("7")) is None
        assert check_constraint_value(ConstraintField.COST_SENSITIVITY, Decimal("7.5")).error_code == "NOT_INTEGER"
        assert check_constraint_value(ConstraintField.COST_SENSITIVITY, Decimal("12")).error_code == "OUT_OF_RANGE"

    @pytest.mark.parametrize("value", [float("nan"), Decimal("NaN")])
    def test_nan_is_out_of_range(self, value):
        """NaN is reported as out of range."""
        assert check_constraint_value(ConstraintField.COST_SENSITIVITY, value).error_code == "OUT_OF_RANGE"

    @pytest.mark.parametrize("value", ["high", None, [5], True])
    def test_rejects_non_numbers(self, value):
        """Non-numeric values and booleans are INVALID_TYPE."""
        issue = check_constraint_value(ConstraintField.RISK_TOLERANCE, value)
        assert issue.error_code == "INVALID_TYPE"
        assert issue.blocking

    @pytest.mark.parametrize("value", [0, 11, -3, 10.5])
    def test_rejects_out_of_range(self, value):
        """Values outside 1-10 are OUT_OF_RANGE."""
        issue = check_constraint_value(ConstraintField.RISK_TOLERANCE, value)
        assert issue.error_code == "OUT_OF_RANGE"
        assert issue.field == "risk_tolerance"
        assert issue.provided_value == value

    def test_fractional_value_is_non_blocking(self):
        """Fractional values are a non-blocking NOT_INTEGER error."""
        issue = check_constraint_value(ConstraintField.BUSINESS_AGILITY, 5.5)
        assert issue.error_code == "NOT_INTEGER"
        assert issue.severity == Severity.MEDIUM
        assert not issue.blocking


class TestValidateAndBuildProfile:
    """Profile materialization from partial input."""

    def test_complete_input_has_no_assumptions(self):
        """Complete input records no assumptions."""
        result = validate_and_build_profile(COMPLETE_INPUT)

        assert result.validation.is_valid
        assert result.profile.values() == COMPLETE_INPUT
        assert result.profile.input_completeness
        assert result.profile.assumptions == ()
        assert result.assumptions == []
        assert result.processing_status == ProcessingStatus.SUCCESS
        assert not result.is_fallback

    def test_empty_input_defaults_everything(self):
        """Empty input defaults and discloses every field."""
        result = validate_and_build_profile({})

        assert result.validation.is_valid
        assert all(v == 5 for v in result.profile.values().values())
        assert not result.profile.input_completeness
        assert len(result.assumptions) == 6
        assert len(result.profile.assumptions) == 6
        assert all(a.category == AssumptionCategory.INPUT for a in result.assumptions)
        assert result.assumptions[0].description == (
            "risk_tolerance was not provided, defaulted to 5 (moderate risk tolerance)"
        )

    def test_missing_critical_fields_are_warned(self):
        """Missing risk tolerance and compliance strictness are warned."""
        result = validate_and_build_profile({"cost_sensitivity": 4})

        warned = {w.field for w in result.validation.warnings}
        assert {"risk_tolerance", "compliance_strictness"} <= warned
        assert len(result.assumptions) == 5

    def test_none_value_counts_as_missing(self):
        """A None value is treated as not provided."""
        result = validate_and_build_profile({**COMPLETE_INPUT, "risk_tolerance": None})

        assert result.validation.is_valid
        assert result.profile.risk_tolerance == 5
        assert len(result.assumptions) == 1

    def test_camel_case_keys(self):
        """camelCase keys are accepted."""
        result = validate_and_build_profile({"riskTolerance": 8, "userExperiencePriority": 3})

        assert result.profile.risk_tolerance == 8
        assert result.profile.user_experience_priority == 3

    def test_unknown_key_is_warned_and_ignored(self):
        """Unknown keys are warned about and ignored."""
        result = validate_and_build_profile({**COMPLETE_INPUT, "budget": 3})

        assert result.validation.is_valid
        assert any(w.field == "budget" for w in result.validation.warnings)
        assert result.profile.input_completeness

    def test_integral_float_becomes_int(self):
        """Whole-number floats are stored as int."""
        result = validate_and_build_profile({**COMPLETE_INPUT, "cost_sensitivity": 7.0})

        assert result.profile.cost_sensitivity == 7
        assert isinstance(result.profile.cost_sensitivity, int)

    def test_decimal_becomes_int(self):
        """Whole-number Decimals are stored as int."""
        result = validate_and_build_profile({**COMPLETE_INPUT, "cost_sensitivity": Decimal("7")})

        assert result.validation.is_valid
        assert result.profile.cost_sensitivity == 7
        assert isinstance(result.profile.cost_sensitivity, int)

    def test_invalid_value_defaults_whole_profile(self):
        """One invalid value defaults the whole profile."""
        result = validate_and_build_profile({**COMPLETE_INPUT, "risk_tolerance": 11})

        assert not result.validation.is_valid
        assert [e.error_code for e in result.validation.errors] == ["OUT_OF_RANGE"]
        assert all(v == 5 for v in result.profile.values().values())
        assert result.processing_status == ProcessingStatus.FAILED
        assert len(result.assumptions) == 6

    def test_every_invalid_field_is_reported(self):
        """Every invalid field gets its own error."""
        result = validate_and_build_profile({"risk_tolerance": "low", "cost_sensitivity": 0})

        assert {e.field for e in result.validation.errors} == {"risk_tolerance", "cost_sensitivity"}

    def test_fractional_value_gives_partial_status(self):
        """A fractional value gives partial status."""
        result = validate_and_build_profile({**COMPLETE_INPUT, "business_agility": 5.5})

        assert not result.validation.is_valid
        assert result.processing_status == ProcessingStatus.PARTIAL
        assert result.profile.business_agility == 5

    def test_extreme_values_are_warned(self):
        """Extreme values are warned about."""
        result = validate_and_build_profile({**COMPLETE_INPUT, "risk_tolerance": 10, "cost_sensitivity": 1})

        messages = [w.message for w in result.validation.warnings]
        assert any("maximum value (10)" in m for m in messages)
        assert any("minimum value (1)" in m for m in messages)

    def test_none_input_raises(self):
        """None as the whole input raises InvalidInputError."""
        with pytest.raises(InvalidInputError):
            validate_and_build_profile(None)

    def test_custom_defaults_from_config(self):
        """Defaults come from the configuration."""
        config = RefereeConfig.model_validate({"defaults": {"operational_maturity": 3}})
        result = ConstraintValidator(config).validate_and_build_profile({})

        assert result.profile.operational_maturity == 3
        assert "defaulted to 3" in result.assumptions[4].description


class TestContradictions:
    """Contradiction scan over explicitly supplied values."""

    def test_compliance_cost_contradiction(self):
        """High compliance with high cost sensitivity is a contradiction."""
        result = validate_and_build_profile({**COMPLETE_INPUT, "compliance_strictness": 9, "cost_sensitivity": 9})

        analysis = result.contradictions
        assert analysis.has_contradictions
        assert [c.contradiction_id for c in analysis.contradictions] == ["compliance-cost-conflict"]
        assert analysis.contradictions[0].conflicting_values == {
            "compliance_strictness": 9,
            "cost_sensitivity": 9,
        }
        assert analysis.reliability_impact == Severity.HIGH
        assert len(analysis.alignment_suggestions) == 1
        assert result.processing_status == ProcessingStatus.PARTIAL

    def test_contradictions_are_not_assumptions(self):
        """Contradictions are not recorded as assumptions."""
        result = validate_and_build_profile({**COMPLETE_INPUT, "compliance_strictness": 9, "cost_sensitivity": 9})

        assert result.assumptions == []
        assert result.profile.assumptions == ()

    def test_defaulted_fields_never_contradict(self):
        """Defaulted values never raise contradictions."""
        config = RefereeConfig.model_validate({"defaults": {"cost_sensitivity": 9}})
        result = ConstraintValidator(config).validate_and_build_profile({"compliance_strictness": 9})

        assert result.profile.cost_sensitivity == 9
        assert not result.contradictions.has_contradictions

    def test_check_profile_consistency(self):
        """Consistency checks flag tension patterns on a built profile."""
        warnings = check_profile_consistency(profile_of(compliance_strictness=9, business_agility=9))

        assert [w.field for w in warnings] == ["compliance_strictness/business_agility"]
        assert check_profile_consistency(profile_of()) == []


class TestValidationFallback:
    """Internal failures degrade to a disclosed default profile."""

    def test_internal_error_returns_fallback(self):
        """An internal error returns an all-defaults fallback result."""
        validator = ConstraintValidator()
        with patch.object(ConstraintValidator, "_build_profile", side_effect=RuntimeError("boom")):
            result = validator.validate_and_build_profile(COMPLETE_INPUT)

        assert result.is_fallback
        assert result.fallback_info is not None
        assert result.processing_status == ProcessingStatus.FAILED
        assert result.validation.errors[0].error_code == "SYSTEM_ERROR"
        assert not result.profile.input_completeness
        assert all(v == 5 for v in result.profile.values().values())
