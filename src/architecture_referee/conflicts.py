"""Conflict and trade-off synthesis.

Runs a fixed, ordered table of two-field threshold rules over a constraint
profile and reports every rule that fires. The same table drives the
validator's contradiction scan, so the two never disagree on thresholds.
"""

import logging
import operator
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from .fallback import conflict_fallback
from .schema import (
    ConflictDetectionResult,
    ConflictWarning,
    ConstraintField,
    ConstraintProfile,
    Severity,
)

logger = logging.getLogger(__name__)


_COMPARATORS: dict[str, Callable[[int, int], bool]] = {
    ">=": operator.ge,
    "<=": operator.le,
}


@dataclass(frozen=True)
class ThresholdCondition:
    """One side of a rule: ``field <comparison> threshold``."""
    field: ConstraintField
    comparison: str
    threshold: int

    def matches(self, value: int) -> bool:
        return _COMPARATORS[self.comparison](value, self.threshold)


@dataclass(frozen=True)
class StakeholderAlignment:
    stakeholder_group: str
    discussion_topics: tuple[str, ...]
    questions_to_resolve: tuple[str, ...]
    expected_outcomes: tuple[str, ...]


@dataclass(frozen=True)
class ConflictRule:
    """A known tension between two organizational priorities."""
    conflict_id: str
    title: str
    conditions: tuple[ThresholdCondition, ThresholdCondition]
    description: str
    implications: tuple[str, ...]
    resolution_suggestions: tuple[str, ...]
    # Used by the validator when the pair is flagged at input time
    contradiction_explanation: str
    business_impact: str
    severity: Severity
    alignment: StakeholderAlignment
    consistency_message: str
    consistency_suggestion: str

    @property
    def fields(self) -> tuple[ConstraintField, ...]:
        return tuple(c.field for c in self.conditions)

    def matches_values(self, values: Mapping[ConstraintField, int]) -> bool:
        """True if every condition holds; missing fields never match."""
        for condition in self.conditions:
            if condition.field not in values:
                return False
            if not condition.matches(values[condition.field]):
                return False
        return True

    def matches(self, profile: ConstraintProfile) -> bool:
        return all(c.matches(profile.value_of(c.field)) for c in self.conditions)

    def triggering_values(self, profile: ConstraintProfile) -> dict[str, int]:
        return {f.value: profile.value_of(f) for f in self.fields}

    def to_warning(self, profile: ConstraintProfile) -> ConflictWarning:
        return ConflictWarning(
            conflict_id=self.conflict_id,
            title=self.title,
            description=self.description,
            implications=list(self.implications),
            resolution_suggestions=list(self.resolution_suggestions),
            triggering_constraints=self.triggering_values(profile),
        )


CONFLICT_RULES: tuple[ConflictRule, ...] = (
    ConflictRule(
        conflict_id="compliance-cost-conflict",
        title="High Compliance Requirements vs Cost Sensitivity",
        conditions=(
            ThresholdCondition(ConstraintField.COMPLIANCE_STRICTNESS, ">=", 8),
            ThresholdCondition(ConstraintField.COST_SENSITIVITY, ">=", 8),
        ),
        description=(
            "Comprehensive compliance controls typically require significant security "
            "infrastructure investment, which may conflict with cost optimization objectives."
        ),
        implications=(
            "Compliance requirements may drive higher infrastructure and operational costs",
            "Cost constraints may limit available compliance control options",
            "Budget allocation decisions will need to balance regulatory requirements with financial constraints",
            "May require phased implementation to spread costs over time",
        ),
        resolution_suggestions=(
            "Conduct cost-benefit analysis of compliance requirements to identify high-impact, cost-effective controls",
            "Explore shared services or cloud-based compliance solutions to reduce infrastructure costs",
            "Consider phased compliance implementation to distribute costs across budget cycles",
            "Engage stakeholders to align on compliance priorities and acceptable cost levels",
            "Investigate automation opportunities to reduce ongoing operational compliance costs",
        ),
        contradiction_explanation=(
            "High compliance requirements typically require significant infrastructure "
            "investment, creating tension with cost optimization goals"
        ),
        business_impact="May result in budget overruns, delayed implementation, or compromised compliance posture",
        severity=Severity.HIGH,
        alignment=StakeholderAlignment(
            stakeholder_group="Executive Leadership & Compliance Team",
            discussion_topics=(
                "Budget allocation for compliance infrastructure",
                "Risk tolerance for compliance gaps vs cost overruns",
                "Phased implementation approach to manage costs",
            ),
            questions_to_resolve=(
                "What is the acceptable budget range for compliance infrastructure?",
                "Which compliance requirements are non-negotiable vs nice-to-have?",
                "Can compliance implementation be phased to spread costs over time?",
            ),
            expected_outcomes=(
                "Clear budget allocation for compliance requirements",
                "Prioritized list of compliance controls",
                "Implementation timeline that balances cost and compliance needs",
            ),
        ),
        consistency_message="High compliance requirements conflict with high cost sensitivity",
        consistency_suggestion="Review budget allocation for compliance infrastructure requirements",
    ),
    ConflictRule(
        conflict_id="risk-ux-conflict",
        title="Low Risk Tolerance vs High User Experience Priority",
        conditions=(
            ThresholdCondition(ConstraintField.RISK_TOLERANCE, "<=", 3),
            ThresholdCondition(ConstraintField.USER_EXPERIENCE_PRIORITY, ">=", 8),
        ),
        description=(
            "Strong security controls may introduce user interaction and verification steps, "
            "potentially creating tension between seamless user experience goals and "
            "comprehensive security requirements."
        ),
        implications=(
            "Security controls may introduce friction that impacts user productivity and satisfaction",
            "User experience optimization may reduce the effectiveness of security controls",
            "May drive users toward shadow IT solutions that bypass security controls",
            "Requires careful balance between security effectiveness and user adoption",
        ),
        resolution_suggestions=(
            "Consider implementing risk-based authentication that applies stronger controls only when needed",
            "Consider investing in user experience design for security controls to minimize friction",
            "Consider single sign-on and passwordless authentication technologies",
            "Engage users in security control design to identify acceptable friction levels",
            "Implement adaptive security that adjusts controls based on context and risk",
        ),
        contradiction_explanation=(
            "Low risk tolerance requires strong security controls that inherently create "
            "user friction, conflicting with seamless user experience goals"
        ),
        business_impact="May lead to user resistance, shadow IT adoption, or security control bypassing",
        severity=Severity.HIGH,
        alignment=StakeholderAlignment(
            stakeholder_group="Security Team & Business Units",
            discussion_topics=(
                "Acceptable level of user friction for security controls",
                "Risk mitigation strategies that minimize user impact",
                "User training and change management approaches",
            ),
            questions_to_resolve=(
                "What security controls are non-negotiable regardless of user impact?",
                "Where can user experience be improved without compromising security?",
                "How will user adoption and compliance be measured and enforced?",
            ),
            expected_outcomes=(
                "Balanced approach to security controls and user experience",
                "Clear guidelines for when security takes precedence over UX",
                "User training and support plan for security requirements",
            ),
        ),
        consistency_message="Low risk tolerance conflicts with high user experience priority",
        consistency_suggestion="Consider stakeholder alignment on security vs usability priorities",
    ),
    ConflictRule(
        conflict_id="agility-maturity-conflict",
        title="High Business Agility vs Low Operational Maturity",
        conditions=(
            ThresholdCondition(ConstraintField.BUSINESS_AGILITY, ">=", 8),
            ThresholdCondition(ConstraintField.OPERATIONAL_MATURITY, "<=", 4),
        ),
        description=(
            "Rapid business changes require sophisticated, flexible security architectures "
            "that may exceed current operational team capacity for managing adaptive "
            "security systems."
        ),
        implications=(
            "Current operational capabilities may not support rapid security architecture changes",
            "Business agility goals may be constrained by security operational limitations",
            "May require significant investment in team skills and tooling",
            "Risk of security gaps during rapid business changes",
        ),
        resolution_suggestions=(
            "Develop operational maturity roadmap aligned with business agility goals",
            "Consider investing in automation and orchestration tools to reduce manual operational overhead",
            "Consider managed security services to supplement internal capabilities",
            "Implement gradual capability building while supporting immediate business needs",
            "Establish clear operational readiness criteria for new security capabilities",
        ),
        contradiction_explanation=(
            "High business agility requirements demand sophisticated, adaptive security "
            "architectures that may exceed current operational team capabilities"
        ),
        business_impact=(
            "May result in implementation failures, operational incidents, or inability "
            "to support business requirements"
        ),
        severity=Severity.MEDIUM,
        alignment=StakeholderAlignment(
            stakeholder_group="Operations Team & Business Leadership",
            discussion_topics=(
                "Current operational team capabilities and skill gaps",
                "Training and hiring plans to support agility requirements",
                "Interim solutions while building operational maturity",
            ),
            questions_to_resolve=(
                "What operational capabilities need to be developed or acquired?",
                "What is the timeline for building required operational maturity?",
                "Can business agility requirements be phased to match operational readiness?",
            ),
            expected_outcomes=(
                "Operational capability development plan",
                "Phased approach to implementing agility requirements",
                "Clear success metrics for operational maturity improvement",
            ),
        ),
        consistency_message="High agility requirements may exceed current operational maturity",
        consistency_suggestion="Consider operational capability development to support agility goals",
    ),
    ConflictRule(
        conflict_id="compliance-agility-conflict",
        title="High Compliance Requirements vs High Business Agility",
        conditions=(
            ThresholdCondition(ConstraintField.COMPLIANCE_STRICTNESS, ">=", 8),
            ThresholdCondition(ConstraintField.BUSINESS_AGILITY, ">=", 8),
        ),
        description=(
            "Regulatory requirements often impose process constraints and approval workflows "
            "that can slow business process adaptation and innovation cycles."
        ),
        implications=(
            "Compliance approval processes may slow business change implementation",
            "Regulatory constraints may limit architectural flexibility and innovation",
            "May require additional governance overhead for business changes",
            "Risk of compliance gaps during rapid business evolution",
        ),
        resolution_suggestions=(
            "Implement compliance-by-design principles in business processes",
            "Establish pre-approved architectural patterns that support both compliance and agility",
            "Create streamlined compliance review processes for low-risk changes",
            "Engage compliance teams early in business change planning",
            "Consider regulatory sandboxes or innovation frameworks where available",
        ),
        contradiction_explanation=(
            "Strict compliance requirements often impose process constraints and approval "
            "workflows that can slow business adaptation and innovation"
        ),
        business_impact=(
            "May create delays in business initiatives, reduce competitive responsiveness, "
            "or lead to compliance workarounds"
        ),
        severity=Severity.MEDIUM,
        alignment=StakeholderAlignment(
            stakeholder_group="Compliance Team & Business Units",
            discussion_topics=(
                "Streamlining compliance processes for business agility",
                "Risk-based compliance approaches for different business activities",
                "Automated compliance controls to reduce process overhead",
            ),
            questions_to_resolve=(
                "Which compliance processes can be streamlined or automated?",
                "How can compliance be integrated into agile business processes?",
                "What compliance risks are acceptable to maintain business agility?",
            ),
            expected_outcomes=(
                "Streamlined compliance processes for routine business activities",
                "Risk-based compliance framework that supports agility",
                "Clear escalation paths for compliance decisions in agile environments",
            ),
        ),
        consistency_message="Strict compliance requirements may limit business agility",
        consistency_suggestion="Balance regulatory requirements with business flexibility needs",
    ),
)


MANUAL_REVIEW_CONFLICT_ID = "fallback-manual-review"


class ConflictDetector:
    """Evaluates the conflict rule table against a constraint profile.

    Rules are independent: several may fire for the same profile, and
    output order follows rule declaration order.
    """

    def __init__(self, rules: Optional[Sequence[ConflictRule]] = None):
        self.rules = tuple(CONFLICT_RULES if rules is None else rules)

    def detect(self, profile: ConstraintProfile) -> ConflictDetectionResult:
        """Detect all conflicts, falling back to a heuristic on internal failure."""
        try:
            return self._detect(profile)
        except Exception as e:
            logger.warning("Conflict detection failed, using heuristic fallback: %s", e)
            return self._fallback_result(profile, e)

    def _detect(self, profile: ConstraintProfile) -> ConflictDetectionResult:
        conflicts = [rule.to_warning(profile) for rule in self.rules if rule.matches(profile)]
        logger.debug("Conflict rules fired: %s", [c.conflict_id for c in conflicts])
        return ConflictDetectionResult(
            conflicts=conflicts,
            has_conflicts=bool(conflicts),
            conflict_summary=[c.title for c in conflicts],
        )

    def _fallback_result(self, profile: ConstraintProfile, error: Exception) -> ConflictDetectionResult:
        conflicts = []

        # Simple extreme-value heuristic over the four most commonly opposed fields
        flagged = (
            (profile.compliance_strictness >= 8 and profile.cost_sensitivity >= 8)
            or (profile.risk_tolerance <= 3 and profile.user_experience_priority >= 8)
        )
        if flagged:
            conflicts.append(ConflictWarning(
                conflict_id=MANUAL_REVIEW_CONFLICT_ID,
                title="Manual Conflict Review Required",
                description=(
                    "Automated conflict detection unavailable - manual review recommended "
                    "for potential constraint conflicts"
                ),
                implications=[
                    "Constraint combinations may create implementation challenges",
                    "Stakeholder alignment may be needed to resolve competing priorities",
                    "Professional consultation recommended for conflict resolution",
                ],
                resolution_suggestions=[
                    "Conduct manual review of constraint combinations",
                    "Engage stakeholders to discuss competing priorities",
                    "Consider professional consultation for conflict resolution",
                    "Retry automated analysis after addressing system issues",
                ],
                triggering_constraints={
                    "compliance_strictness": profile.compliance_strictness,
                    "cost_sensitivity": profile.cost_sensitivity,
                    "risk_tolerance": profile.risk_tolerance,
                    "user_experience_priority": profile.user_experience_priority,
                },
            ))

        return ConflictDetectionResult(
            conflicts=conflicts,
            has_conflicts=bool(conflicts),
            conflict_summary=[c.title for c in conflicts],
            is_fallback=True,
            fallback_info=conflict_fallback(error),
        )

    def _find_rule(self, conflict_id: str) -> Optional[ConflictRule]:
        return next((r for r in self.rules if r.conflict_id == conflict_id), None)

    def has_specific_conflict(self, profile: ConstraintProfile, conflict_id: str) -> bool:
        rule = self._find_rule(conflict_id)
        return rule is not None and rule.matches(profile)

    def get_conflict_explanation(
        self,
        profile: ConstraintProfile,
        conflict_id: str,
    ) -> Optional[ConflictWarning]:
        """Return the warning for ``conflict_id`` if that rule fires, else None."""
        rule = self._find_rule(conflict_id)
        if rule is None or not rule.matches(profile):
            return None
        return rule.to_warning(profile)

    def available_conflict_types(self) -> list[str]:
        return [r.conflict_id for r in self.rules]


def detect_conflicts(profile: ConstraintProfile) -> ConflictDetectionResult:
    """Detect conflicts using the built-in rule table."""
    return ConflictDetector().detect(profile)
