"""Fallback descriptors for component-internal failures.

Each component boundary converts an unexpected exception into a typed
result with ``is_fallback=True`` and one of these descriptors attached.
"""

import uuid

from .schema import FallbackInfo


def _error_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def scoring_fallback(error: Exception) -> FallbackInfo:
    """Describe a weighted scoring failure."""
    return FallbackInfo(
        component="scoring-engine",
        reason="Scoring calculation failure - using simplified analysis",
        error_id=_error_id("scoring-failure"),
        message="Unable to complete full scoring analysis due to calculation error",
        technical_details=f"{type(error).__name__}: {error}",
        recovery_actions=[
            "Attempting simplified scoring methodology",
            "Using base architecture profiles without complex weighting",
            "Providing qualitative comparison instead of numeric scores",
        ],
        available_functionality=[
            "Basic architecture comparison",
            "Constraint conflict detection",
            "Assumption tracking",
            "Qualitative trade-off analysis",
        ],
        unavailable_functionality=[
            "Weighted scoring calculations",
            "Precise numeric comparisons",
            "Advanced near-tie detection",
            "Detailed scoring methodology explanation",
        ],
    )


def conflict_fallback(error: Exception) -> FallbackInfo:
    """Describe a conflict detection failure."""
    return FallbackInfo(
        component="conflict-detector",
        reason="Conflict detection failure - manual review recommended",
        error_id=_error_id("conflict-detection-failure"),
        message="Unable to complete automated conflict detection",
        technical_details=f"{type(error).__name__}: {error}",
        recovery_actions=[
            "Proceeding with manual conflict identification",
            "Providing general stakeholder alignment guidance",
            "Recommending manual constraint review",
        ],
        available_functionality=[
            "Basic architecture scoring",
            "General stakeholder guidance",
            "Assumption tracking",
        ],
        unavailable_functionality=[
            "Automated conflict detection",
            "Specific contradiction analysis",
            "Targeted stakeholder alignment suggestions",
        ],
    )


def validation_fallback(error: Exception) -> FallbackInfo:
    """Describe a constraint processing failure."""
    return FallbackInfo(
        component="constraint-validator",
        reason="Constraint processing failure - using default values for all constraints",
        error_id=_error_id("constraint-processing-failure"),
        message="Unexpected error during constraint processing",
        technical_details=f"{type(error).__name__}: {error}",
        recovery_actions=[
            "Review input format and correct any issues",
            "Use manual constraint evaluation if system errors persist",
        ],
        available_functionality=[
            "Default-profile architecture comparison",
            "General architecture guidance",
        ],
        unavailable_functionality=[
            "Organization-specific constraint weighting",
            "Contradiction analysis",
        ],
    )
