"""Configuration management for the architecture referee.

The thresholds and penalties below are fixed constants of the scoring
engine. They are exposed here so they can be tuned, but the defaults must
stay as they are: behavioral tests depend on them.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from .exceptions import InvalidConfigError


class NearTieConfig(BaseModel):
    """Thresholds for near-tie detection (points on the 10-point scale)."""
    near_tie_threshold: float = Field(
        0.5,
        description="Score gap at or below which two architectures are considered tied"
    )
    meaningful_difference_threshold: float = Field(
        1.0,
        description="Score gap at or above which the leader has a meaningful advantage"
    )
    minimum_difference_threshold: float = Field(
        0.1,
        description="Score gap below which scores are indistinguishable"
    )


class ConfidenceConfig(BaseModel):
    """Deduction-based confidence scoring.

    Confidence starts at ``starting_points`` and loses points for missing
    inputs, extreme constraint values and recorded assumptions.
    """
    starting_points: int = Field(100, description="Initial confidence points")
    incomplete_input_penalty: int = Field(
        20,
        description="Deducted when any constraint was defaulted"
    )
    extreme_value_penalty: int = Field(
        5,
        description="Deducted per constraint at or beyond the extreme bounds"
    )
    assumption_penalty: int = Field(3, description="Deducted per recorded assumption")
    extreme_low: int = Field(2, description="Values at or below this are extreme")
    extreme_high: int = Field(9, description="Values at or above this are extreme")
    high_threshold: int = Field(80, description="Minimum points for High confidence")
    medium_threshold: int = Field(60, description="Minimum points for Medium confidence")


class DefaultConstraintsConfig(BaseModel):
    """Values substituted for constraints that were not supplied."""
    risk_tolerance: int = Field(5, ge=1, le=10)
    compliance_strictness: int = Field(5, ge=1, le=10)
    cost_sensitivity: int = Field(5, ge=1, le=10)
    user_experience_priority: int = Field(5, ge=1, le=10)
    operational_maturity: int = Field(5, ge=1, le=10)
    business_agility: int = Field(5, ge=1, le=10)


class RefereeConfig(BaseModel):
    """Complete configuration for the architecture referee."""
    near_tie: NearTieConfig = Field(default_factory=NearTieConfig)
    confidence: ConfidenceConfig = Field(default_factory=ConfidenceConfig)
    defaults: DefaultConstraintsConfig = Field(default_factory=DefaultConstraintsConfig)


def load_config(path: Path) -> RefereeConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The loaded RefereeConfig. Missing sections keep their defaults.

    Raises:
        InvalidConfigError: If the near-tie thresholds are inconsistent.
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    config = RefereeConfig.model_validate(data or {})
    errors = validate_near_tie_config(config.near_tie)
    if errors:
        raise InvalidConfigError(f"{path}: " + "; ".join(errors))
    return config


def find_config_file() -> Optional[Path]:
    """Find a referee configuration file.

    Looks in (order of priority):
    1. ARCHITECTURE_REFEREE_CONFIG environment variable
    2. ./referee-config.yaml
    3. ./referee-config.yml
    4. ~/.config/architecture-referee/config.yaml
    """
    env_path = os.environ.get("ARCHITECTURE_REFEREE_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    for name in ["referee-config.yaml", "referee-config.yml"]:
        path = Path(name)
        if path.exists():
            return path

    user_config = Path.home() / ".config" / "architecture-referee" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def resolve_config(path: Optional[Path] = None) -> RefereeConfig:
    """Load the config at ``path``, or the discovered one, or defaults."""
    if path is None:
        path = find_config_file()
    if path is None:
        return RefereeConfig()
    return load_config(path)


def validate_near_tie_config(config: NearTieConfig) -> list[str]:
    """Return a list of problems with a near-tie configuration (empty if valid)."""
    errors = []

    if config.near_tie_threshold <= 0:
        errors.append("Near-tie threshold must be positive")

    if config.meaningful_difference_threshold <= config.near_tie_threshold:
        errors.append("Meaningful difference threshold must be greater than near-tie threshold")

    if config.minimum_difference_threshold <= 0:
        errors.append("Minimum difference threshold must be positive")

    return errors


def save_default_config(path: Path) -> None:
    """Save the default configuration to a YAML file.

    Args:
        path: Path where to save the configuration.
    """
    data = RefereeConfig().model_dump()

    yaml_content = """# Architecture Referee Configuration
# ==================================
#
# Near-tie thresholds, confidence penalties and default constraint values.
# The shipped values are the engine's reference constants; change them only
# if you understand how they shift tie classification and confidence tiers.
#
# Copy this file to one of these locations:
#   - ./referee-config.yaml (current directory)
#   - ~/.config/architecture-referee/config.yaml (user config)
#
# Or set the ARCHITECTURE_REFEREE_CONFIG environment variable.

"""
    yaml_content += yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(yaml_content)
