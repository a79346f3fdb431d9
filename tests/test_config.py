"""Tests for configuration loading and discovery."""

import pytest
import yaml
from pydantic import ValidationError

from architecture_referee.config import (
    NearTieConfig,
    RefereeConfig,
    find_config_file,
    load_config,
    resolve_config,
    save_default_config,
    validate_near_tie_config,
)
from architecture_referee.exceptions import InvalidConfigError


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with no config in cwd, home or the environment."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("ARCHITECTURE_REFEREE_CONFIG", raising=False)
    return tmp_path


class TestRefereeConfig:
    """Default values and validation."""

    def test_defaults(self):
        """Default thresholds and constraint defaults."""
        config = RefereeConfig()

        assert config.near_tie.near_tie_threshold == 0.5
        assert config.near_tie.meaningful_difference_threshold == 1.0
        assert config.confidence.high_threshold == 80
        assert config.confidence.medium_threshold == 60
        assert config.defaults.risk_tolerance == 5

    def test_default_values_must_be_on_scale(self):
        """Default constraint values outside 1-10 are rejected."""
        with pytest.raises(ValidationError):
            RefereeConfig.model_validate({"defaults": {"cost_sensitivity": 11}})

    def test_validate_near_tie_config(self):
        """Each inconsistent threshold is reported."""
        assert validate_near_tie_config(NearTieConfig()) == []

        errors = validate_near_tie_config(NearTieConfig(
            near_tie_threshold=1.0,
            meaningful_difference_threshold=0.5,
            minimum_difference_threshold=0,
        ))
        assert len(errors) == 2


class TestLoadConfig:
    """YAML loading and the default config file."""

    def test_partial_file_keeps_defaults(self, tmp_path):
        """Sections missing from the file keep their defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("confidence:\n  assumption_penalty: 4\n", encoding="utf-8")

        config = load_config(path)

        assert config.confidence.assumption_penalty == 4
        assert config.confidence.starting_points == 100
        assert config.near_tie.near_tie_threshold == 0.5

    def test_empty_file(self, tmp_path):
        """An empty file loads as the default configuration."""
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        assert load_config(path) == RefereeConfig()

    @pytest.mark.parametrize("near_tie", [
        "near_tie_threshold: -1",
        "near_tie_threshold: 1.5",
        "minimum_difference_threshold: 0",
    ])
    def test_inconsistent_near_tie_thresholds_are_rejected(self, tmp_path, near_tie):
        """A file whose near-tie thresholds fail validation is not loaded."""
        path = tmp_path / "config.yaml"
        path.write_text(f"near_tie:\n  {near_tie}\n", encoding="utf-8")

        with pytest.raises(InvalidConfigError):
            load_config(path)
        with pytest.raises(InvalidConfigError):
            resolve_config(path)

    def test_saved_default_config_round_trips(self, tmp_path):
        """The saved default file loads back unchanged."""
        path = tmp_path / "nested" / "referee-config.yaml"

        save_default_config(path)

        assert path.read_text(encoding="utf-8").startswith("# Architecture Referee Configuration")
        assert yaml.safe_load(path.read_text(encoding="utf-8"))["near_tie"]["near_tie_threshold"] == 0.5
        assert load_config(path) == RefereeConfig()


class TestFindConfigFile:
    """Config discovery order."""

    def test_nothing_found(self, isolated):
        """Without any config file the defaults are used."""
        assert find_config_file() is None
        assert resolve_config() == RefereeConfig()

    def test_current_directory(self, isolated):
        """referee-config.yml in the current directory is found."""
        (isolated / "referee-config.yml").write_text("near_tie:\n  near_tie_threshold: 0.3\n", encoding="utf-8")

        assert find_config_file().name == "referee-config.yml"
        assert resolve_config().near_tie.near_tie_threshold == 0.3

    def test_environment_variable_wins(self, isolated, monkeypatch):
        """ARCHITECTURE_REFEREE_CONFIG takes priority over the current directory."""
        (isolated / "referee-config.yaml").write_text("", encoding="utf-8")
        env_path = isolated / "custom.yaml"
        env_path.write_text("", encoding="utf-8")
        monkeypatch.setenv("ARCHITECTURE_REFEREE_CONFIG", str(env_path))

        assert find_config_file() == env_path

    def test_user_config(self, isolated):
        """The user config directory is searched last."""
        user_config = isolated / "home" / ".config" / "architecture-referee" / "config.yaml"
        user_config.parent.mkdir(parents=True)
        user_config.write_text("", encoding="utf-8")

        assert find_config_file() == user_config

    def test_explicit_path(self, isolated):
        """An explicit path skips discovery."""
        path = isolated / "elsewhere.yaml"
        path.write_text("defaults:\n  business_agility: 8\n", encoding="utf-8")

        assert resolve_config(path).defaults.business_agility == 8
