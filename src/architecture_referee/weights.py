"""Weight Deriver - Phase 2 of the Scoring Engine.

Maps the six organizational constraints onto the seven quality dimensions.
Each dimension weight is a fixed linear combination of two or three terms
whose coefficients sum to 1.0. The coefficient table is data, so it can be
inspected and tested on its own.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from .schema import (
    DIMENSION_ORDER,
    ConstraintField,
    ConstraintProfile,
    Dimension,
)


# Constant term used where a dimension carries baseline importance
BASE_IMPORTANCE = 5

SCALE_MAX = 10


@dataclass(frozen=True)
class WeightTerm:
    """One term of a dimension formula.

    ``field`` is None for the constant base-importance term. ``inverted``
    terms contribute ``10 - value`` instead of ``value``.
    """
    coefficient: float
    field: Optional[ConstraintField] = None
    inverted: bool = False

    def evaluate(self, profile: ConstraintProfile) -> float:
        if self.field is None:
            value = BASE_IMPORTANCE
        else:
            value = profile.value_of(self.field)
            if self.inverted:
                value = SCALE_MAX - value
        return value * self.coefficient

    def describe(self) -> str:
        if self.field is None:
            operand = f"{BASE_IMPORTANCE} (base)"
        elif self.inverted:
            operand = f"(10 - {self.field.value})"
        else:
            operand = self.field.value
        return f"{operand} * {self.coefficient}"


_RT = ConstraintField.RISK_TOLERANCE
_CS = ConstraintField.COMPLIANCE_STRICTNESS
_COST = ConstraintField.COST_SENSITIVITY
_UX = ConstraintField.USER_EXPERIENCE_PRIORITY
_OM = ConstraintField.OPERATIONAL_MATURITY
_BA = ConstraintField.BUSINESS_AGILITY


# risk_tolerance is already an inverse scale (10 = very low tolerance), so a
# direct term means "less tolerance, more weight".
WEIGHT_FORMULAS: dict[Dimension, tuple[WeightTerm, ...]] = {
    Dimension.IDENTITY_VERIFICATION: (
        WeightTerm(0.4, _RT),
        WeightTerm(0.3, _CS),
        WeightTerm(0.3),
    ),
    Dimension.BEHAVIORAL_ANALYTICS: (
        WeightTerm(0.3, _RT, inverted=True),
        WeightTerm(0.4, _OM),
        WeightTerm(0.3, _BA),
    ),
    Dimension.OPERATIONAL_COMPLEXITY: (
        WeightTerm(0.5, _OM),
        WeightTerm(0.3, _COST, inverted=True),
        WeightTerm(0.2),
    ),
    Dimension.USER_EXPERIENCE: (
        WeightTerm(0.6, _UX),
        WeightTerm(0.2, _BA),
        WeightTerm(0.2, _RT, inverted=True),
    ),
    Dimension.COMPLIANCE_AUDITABILITY: (
        WeightTerm(0.7, _CS),
        WeightTerm(0.3, _RT),
    ),
    Dimension.SCALABILITY_PERFORMANCE: (
        WeightTerm(0.4, _BA),
        WeightTerm(0.3, _OM),
        WeightTerm(0.3, _COST, inverted=True),
    ),
    Dimension.COST_EFFICIENCY: (
        WeightTerm(0.8, _COST),
        WeightTerm(0.2, _OM, inverted=True),
    ),
}


class DimensionWeightDeriver:
    """Computes one weight per dimension from a constraint profile.

    Pure and deterministic: terms are summed left to right in table order.
    """

    def __init__(self, formulas: Optional[Mapping[Dimension, tuple[WeightTerm, ...]]] = None):
        self.formulas = dict(WEIGHT_FORMULAS if formulas is None else formulas)

    def derive(self, profile: ConstraintProfile) -> dict[Dimension, float]:
        weights = {}
        for dimension in DIMENSION_ORDER:
            total = 0.0
            for term in self.formulas[dimension]:
                total += term.evaluate(profile)
            weights[dimension] = total
        return weights

    def describe(self, dimension: Dimension) -> str:
        """Human-readable formula for one dimension."""
        return " + ".join(term.describe() for term in self.formulas[dimension])


def derive_dimension_weights(profile: ConstraintProfile) -> dict[Dimension, float]:
    """Derive dimension weights using the built-in coefficient table."""
    return DimensionWeightDeriver().derive(profile)
