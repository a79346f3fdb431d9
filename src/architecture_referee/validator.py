"""Constraint Validator - Phase 1 of the Scoring Engine.

Turns a raw, partial mapping of constraint values into a fully
materialized ConstraintProfile.

Malformed business input never raises. Invalid fields are reported as
field-scoped issues and the caller receives an all-defaults profile;
missing fields are defaulted and disclosed as assumptions.
"""

import logging
import numbers
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from .config import RefereeConfig
from .conflicts import CONFLICT_RULES, ConflictRule
from .exceptions import InvalidInputError
from .fallback import validation_fallback
from .schema import (
    CONSTRAINT_FIELDS,
    AssumptionCategory,
    AssumptionDisclosure,
    ConstraintField,
    ConstraintProcessingResult,
    ConstraintProfile,
    ContradictionAnalysis,
    DetectedContradiction,
    ProcessingStatus,
    Severity,
    StakeholderAlignmentSuggestion,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
)

logger = logging.getLogger(__name__)


MIN_VALUE = 1
MAX_VALUE = 10

# Missing values for these are called out even though they are defaulted
CRITICAL_FIELDS = (ConstraintField.RISK_TOLERANCE, ConstraintField.COMPLIANCE_STRICTNESS)

DEFAULT_DESCRIPTIONS = {
    ConstraintField.RISK_TOLERANCE: "moderate risk tolerance",
    ConstraintField.COMPLIANCE_STRICTNESS: "moderate compliance requirements",
    ConstraintField.COST_SENSITIVITY: "moderate cost sensitivity",
    ConstraintField.USER_EXPERIENCE_PRIORITY: "balanced UX priority",
    ConstraintField.OPERATIONAL_MATURITY: "moderate operational capabilities",
    ConstraintField.BUSINESS_AGILITY: "moderate agility requirements",
}


def check_constraint_value(field: ConstraintField, value: Any) -> Optional[ValidationIssue]:
    """Validate a single supplied value: type, then range, then integrality.

    Returns None when the value is acceptable.
    """
    name = field.display_name

    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        return ValidationIssue(
            field=field.value,
            message=f"{name} must be a number between 1 and 10",
            provided_value=value,
            expected_format="number between 1 and 10",
            error_code="INVALID_TYPE",
            severity=Severity.HIGH,
            resolution_steps=[
                f"Provide a numeric value for {name}",
                "Ensure the value is between 1 and 10",
                "Remove any non-numeric characters or formatting",
            ],
            blocking=True,
        )

    if not MIN_VALUE <= float(value) <= MAX_VALUE:
        return ValidationIssue(
            field=field.value,
            message=f"{name} must be between 1 and 10 (provided: {value})",
            provided_value=value,
            expected_format="integer between 1 and 10",
            error_code="OUT_OF_RANGE",
            severity=Severity.HIGH,
            resolution_steps=[
                f"Adjust {name} to a value between 1 and 10",
                "Use 1 for lowest priority/tolerance and 10 for highest priority/tolerance",
                "Consider organizational context when selecting appropriate values",
            ],
            blocking=True,
        )

    if not isinstance(value, numbers.Integral) and not float(value).is_integer():
        return ValidationIssue(
            field=field.value,
            message=f"{name} must be a whole number (provided: {value})",
            provided_value=value,
            expected_format="integer between 1 and 10",
            error_code="NOT_INTEGER",
            severity=Severity.MEDIUM,
            resolution_steps=[
                f"Round {name} to the nearest whole number",
                "Use integer values only (1, 2, 3, etc.)",
                "Consider whether to round up or down based on organizational priorities",
            ],
            blocking=False,
        )

    return None


def _pair_warning(rule: ConflictRule, values: Mapping[ConstraintField, int]) -> ValidationWarning:
    return ValidationWarning(
        field="/".join(f.value for f in rule.fields),
        message=rule.consistency_message,
        provided_value={f.value: values[f] for f in rule.fields},
        suggestion=rule.consistency_suggestion,
    )


def check_profile_consistency(
    profile: ConstraintProfile,
    rules: Sequence[ConflictRule] = CONFLICT_RULES,
) -> list[ValidationWarning]:
    """Flag known tension patterns on an already materialized profile."""
    values = {f: profile.value_of(f) for f in CONSTRAINT_FIELDS}
    return [_pair_warning(rule, values) for rule in rules if rule.matches_values(values)]


class ConstraintValidator:
    """Validates raw constraint input and builds a complete profile."""

    def __init__(
        self,
        config: Optional[RefereeConfig] = None,
        rules: Optional[Sequence[ConflictRule]] = None,
    ):
        self.config = config or RefereeConfig()
        self.rules = tuple(CONFLICT_RULES if rules is None else rules)

    def default_value(self, field: ConstraintField) -> int:
        return getattr(self.config.defaults, field.value)

    def validate_and_build_profile(self, raw: Optional[Mapping[str, Any]]) -> ConstraintProcessingResult:
        """Validate ``raw`` and return the materialized profile with disclosures.

        Keys may be snake_case or camelCase. A value of None counts as missing.

        Raises:
            InvalidInputError: If the whole input is None.
        """
        if raw is None:
            raise InvalidInputError("Constraint input is required")

        try:
            return self._process(raw)
        except Exception as e:
            logger.warning("Constraint processing failed, using defaults: %s", e)
            return self._fallback_result(raw, e)

    def _process(self, raw: Mapping[str, Any]) -> ConstraintProcessingResult:
        supplied: dict[ConstraintField, Any] = {}
        warnings: list[ValidationWarning] = []

        for key, value in raw.items():
            field = ConstraintField.from_key(str(key))
            if field is None:
                warnings.append(ValidationWarning(
                    field=str(key),
                    message=f"Unknown constraint '{key}' ignored",
                    provided_value=value,
                    suggestion="Use one of: " + ", ".join(f.value for f in CONSTRAINT_FIELDS),
                ))
                continue
            if value is not None:
                supplied[field] = value

        errors: list[ValidationIssue] = []
        accepted: dict[ConstraintField, int] = {}
        for field in CONSTRAINT_FIELDS:
            if field not in supplied:
                continue
            issue = check_constraint_value(field, supplied[field])
            if issue:
                errors.append(issue)
            else:
                accepted[field] = int(supplied[field])

        warnings.extend(self._extreme_value_warnings(accepted))
        warnings.extend(self._missing_critical_warnings(supplied))

        # Contradictions only consider values the caller actually gave us
        fired = [rule for rule in self.rules if rule.matches_values(accepted)]
        warnings.extend(_pair_warning(rule, accepted) for rule in fired)
        contradictions = self._contradiction_analysis(fired, accepted)

        is_valid = not errors
        profile, assumptions = self._build_profile(accepted if is_valid else {})
        if errors:
            logger.debug("Constraint input rejected: %s", [e.field for e in errors])

        status, recovery_actions = self._processing_status(errors, contradictions)

        return ConstraintProcessingResult(
            profile=profile,
            validation=ValidationResult(is_valid=is_valid, errors=errors, warnings=warnings),
            assumptions=assumptions,
            contradictions=contradictions,
            processing_status=status,
            recovery_actions=recovery_actions,
        )

    def _build_profile(
        self,
        values: Mapping[ConstraintField, int],
    ) -> tuple[ConstraintProfile, list[AssumptionDisclosure]]:
        """Materialize a profile, defaulting every field absent from ``values``."""
        data: dict[str, Any] = {}
        assumptions = []

        for field in CONSTRAINT_FIELDS:
            if field in values:
                data[field.value] = values[field]
                continue
            default = self.default_value(field)
            data[field.value] = default
            assumptions.append(AssumptionDisclosure(
                category=AssumptionCategory.INPUT,
                description=(
                    f"{field.value} was not provided, defaulted to {default} "
                    f"({DEFAULT_DESCRIPTIONS[field]})"
                ),
                impact=Severity.MEDIUM,
                recommendation=(
                    f"Consider providing explicit {field.value} value based on organizational assessment"
                ),
            ))

        data["input_completeness"] = not assumptions
        data["assumptions"] = tuple(a.description for a in assumptions)
        return ConstraintProfile.model_validate(data), assumptions

    def _extreme_value_warnings(self, accepted: Mapping[ConstraintField, int]) -> list[ValidationWarning]:
        warnings = []
        for field, value in accepted.items():
            if value == MIN_VALUE:
                warnings.append(ValidationWarning(
                    field=field.value,
                    message=(
                        f"{field.display_name} is set to minimum value (1) - "
                        "confirm this reflects organizational reality"
                    ),
                    provided_value=value,
                    suggestion="Consider whether this extremely low priority/tolerance is accurate for your organization",
                ))
            elif value == MAX_VALUE:
                warnings.append(ValidationWarning(
                    field=field.value,
                    message=(
                        f"{field.display_name} is set to maximum value (10) - "
                        "confirm this reflects organizational reality"
                    ),
                    provided_value=value,
                    suggestion="Consider whether this extremely high priority/tolerance is accurate for your organization",
                ))
        return warnings

    def _missing_critical_warnings(self, supplied: Mapping[ConstraintField, Any]) -> list[ValidationWarning]:
        return [
            ValidationWarning(
                field=field.value,
                message=f"{field.display_name} not provided - using default assumption",
                provided_value=None,
                suggestion=(
                    f"Consider providing explicit {field.display_name} value based on organizational assessment"
                ),
            )
            for field in CRITICAL_FIELDS
            if field not in supplied
        ]

    def _contradiction_analysis(
        self,
        fired: Sequence[ConflictRule],
        values: Mapping[ConstraintField, int],
    ) -> ContradictionAnalysis:
        contradictions = [
            DetectedContradiction(
                contradiction_id=rule.conflict_id,
                conflicting_constraints=[f.value for f in rule.fields],
                conflicting_values={f.value: values[f] for f in rule.fields},
                explanation=rule.contradiction_explanation,
                business_impact=rule.business_impact,
                severity=rule.severity,
            )
            for rule in fired
        ]
        suggestions = [
            StakeholderAlignmentSuggestion(
                stakeholder_group=rule.alignment.stakeholder_group,
                discussion_topics=list(rule.alignment.discussion_topics),
                questions_to_resolve=list(rule.alignment.questions_to_resolve),
                expected_outcomes=list(rule.alignment.expected_outcomes),
                priority=rule.severity,
            )
            for rule in fired
        ]

        if any(c.severity in (Severity.CRITICAL, Severity.HIGH) for c in contradictions):
            reliability = Severity.HIGH
        elif contradictions:
            reliability = Severity.MEDIUM
        else:
            reliability = Severity.LOW

        return ContradictionAnalysis(
            has_contradictions=bool(contradictions),
            contradictions=contradictions,
            alignment_suggestions=suggestions,
            reliability_impact=reliability,
        )

    @staticmethod
    def _processing_status(
        errors: Sequence[ValidationIssue],
        contradictions: ContradictionAnalysis,
    ) -> tuple[ProcessingStatus, list[str]]:
        if any(e.blocking for e in errors):
            return ProcessingStatus.FAILED, ["Correct blocking validation errors before proceeding"]

        actions = []
        if errors:
            actions.append("Review and address validation warnings")
        if contradictions.has_contradictions:
            actions.append("Resolve constraint contradictions through stakeholder alignment")
        status = ProcessingStatus.PARTIAL if actions else ProcessingStatus.SUCCESS
        return status, actions

    def _fallback_result(self, raw: Any, error: Exception) -> ConstraintProcessingResult:
        info = validation_fallback(error)
        values = {f.value: self.default_value(f) for f in CONSTRAINT_FIELDS}
        profile = ConstraintProfile(
            **values,
            input_completeness=False,
            assumptions=(
                "All constraint values defaulted due to processing error",
                "Manual evaluation recommended for accurate analysis",
            ),
        )
        return ConstraintProcessingResult(
            profile=profile,
            validation=ValidationResult(
                is_valid=False,
                errors=[ValidationIssue(
                    field="system",
                    message="System error during constraint processing - using fallback defaults",
                    provided_value=repr(raw),
                    expected_format="valid constraint profile input",
                    error_code="SYSTEM_ERROR",
                    severity=Severity.CRITICAL,
                    resolution_steps=[
                        "Check input format and data types",
                        "Retry with simplified input",
                        "Contact system administrator if error persists",
                    ],
                    blocking=True,
                )],
            ),
            assumptions=[AssumptionDisclosure(
                category=AssumptionCategory.CALCULATION,
                description="Constraint processing encountered an error, using default values for all constraints",
                impact=Severity.HIGH,
                recommendation="Review input format and try again, or proceed with manual constraint evaluation",
            )],
            contradictions=ContradictionAnalysis(reliability_impact=Severity.HIGH),
            processing_status=ProcessingStatus.FAILED,
            recovery_actions=list(info.recovery_actions),
            is_fallback=True,
            fallback_info=info,
        )


def validate_and_build_profile(raw: Optional[Mapping[str, Any]]) -> ConstraintProcessingResult:
    """Validate ``raw`` with the default configuration."""
    return ConstraintValidator().validate_and_build_profile(raw)
