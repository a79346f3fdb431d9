"""Tests for the architecture-referee CLI."""

import json

import pytest
from click.testing import CliRunner

from architecture_referee.cli import collect_constraints, main


NEUTRAL_ARGS = ["-r", "5", "-c", "5", "-s", "5", "-u", "5", "-m", "5", "-b", "5"]
STRICT_ARGS = ["-r", "10", "-c", "10", "-s", "1", "-u", "1", "-m", "5", "-b", "1"]


@pytest.fixture
def runner(tmp_path, monkeypatch):
    # Keep config discovery away from the developer's own files
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("ARCHITECTURE_REFEREE_CONFIG", raising=False)
    return CliRunner()


class TestCollectConstraints:
    """Merging option values with an input file."""

    def test_options_override_file(self, tmp_path):
        """Command-line options override values read from the input file."""
        path = tmp_path / "constraints.json"
        path.write_text(json.dumps({"risk_tolerance": 3, "costSensitivity": 6}), encoding="utf-8")

        raw = collect_constraints(str(path), risk_tolerance=8.0, business_agility=None)

        assert raw == {"risk_tolerance": 8, "costSensitivity": 6}
        assert isinstance(raw["risk_tolerance"], int)

    def test_fractional_values_are_kept(self):
        """Fractional option values pass through for the validator to report."""
        assert collect_constraints(None, cost_sensitivity=5.5) == {"cost_sensitivity": 5.5}


class TestAnalyzeCommand:
    """The 'analyze' command."""

    def test_help(self, runner):
        """Help text should describe the analyze command."""
        result = runner.invoke(main, ["analyze", "--help"])
        assert result.exit_code == 0
        assert "Score the three architectures" in result.output

    def test_json_output(self, runner):
        """JSON output should carry the ranked scores and tie type."""
        result = runner.invoke(main, ["analyze", *NEUTRAL_ARGS, "--json-output"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["architecture_scores"][0]["architecture_type"] == "IRM-Heavy"
        assert data["architecture_scores"][0]["weighted_score"] == 6.43
        assert data["near_tie_detection"]["tie_type"] == "two-way-tie"

    def test_formatted_output_with_clear_leader(self, runner):
        """A strict profile should show IRM-Heavy as the clear leader."""
        result = runner.invoke(main, ["analyze", *STRICT_ARGS])

        assert result.exit_code == 0
        assert "Clear leader: IRM-Heavy" in result.output
        assert "7.55" in result.output

    def test_missing_values_are_listed_as_assumptions(self, runner):
        """Defaulted constraints are listed under Assumptions."""
        result = runner.invoke(main, ["analyze", "-r", "7"])

        assert result.exit_code == 0
        assert "Assumptions:" in result.output

    def test_invalid_value_is_reported(self, runner):
        """Out-of-range values are reported in the result, not as a CLI error."""
        result = runner.invoke(main, ["analyze", *NEUTRAL_ARGS[:-2], "-b", "11", "-j"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["validation"]["is_valid"] is False
        assert data["validation"]["errors"][0]["error_code"] == "OUT_OF_RANGE"

    def test_input_file_and_out(self, runner, tmp_path):
        """Constraints from --input are analysed and written to --out."""
        source = tmp_path / "constraints.json"
        source.write_text(json.dumps({"compliance_strictness": 9, "cost_sensitivity": 9}), encoding="utf-8")
        out = tmp_path / "result.json"

        result = runner.invoke(main, ["analyze", "--input", str(source), "--out", str(out)])

        assert result.exit_code == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["detected_conflicts"][0]["conflict_id"] == "compliance-cost-conflict"

    def test_config_option(self, runner, tmp_path):
        """--config should change the near-tie threshold."""
        config = tmp_path / "strict-ties.yaml"
        config.write_text("near_tie:\n  near_tie_threshold: 0.1\n", encoding="utf-8")

        result = runner.invoke(main, ["--config", str(config), "analyze", *NEUTRAL_ARGS, "-j"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["near_tie_detection"]["tie_type"] == "no-tie"

    def test_inconsistent_config_is_rejected(self, runner, tmp_path):
        """A config with a negative near-tie threshold stops the command."""
        config = tmp_path / "broken.yaml"
        config.write_text("near_tie:\n  near_tie_threshold: -1\n", encoding="utf-8")

        result = runner.invoke(main, ["--config", str(config), "analyze", *NEUTRAL_ARGS])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestConflictsCommand:
    """The 'conflicts' command."""

    def test_no_conflicts(self, runner):
        """A neutral profile reports no conflicts."""
        result = runner.invoke(main, ["conflicts", *NEUTRAL_ARGS])

        assert result.exit_code == 0
        assert "No constraint conflicts detected" in result.output

    def test_conflicts_found(self, runner):
        """Every firing rule should be listed."""
        result = runner.invoke(main, ["conflicts", "-c", "9", "-s", "9", "-b", "9"])

        assert result.exit_code == 0
        assert "Constraint Conflicts (2)" in result.output

    def test_json_output(self, runner):
        """JSON output lists conflict ids."""
        result = runner.invoke(main, ["conflicts", "-r", "2", "-u", "9", "-j"])

        data = json.loads(result.stdout)
        assert [c["conflict_id"] for c in data["conflicts"]] == ["risk-ux-conflict"]


class TestProfilesCommand:
    """The 'profiles' command."""

    def test_matrix(self, runner):
        """With no options the score matrix is shown."""
        result = runner.invoke(main, ["profiles"])

        assert result.exit_code == 0
        assert "Architecture Score Matrix" in result.output
        assert "identity_verification" in result.output

    def test_single_architecture(self, runner):
        """Architecture names are matched case-insensitively."""
        result = runner.invoke(main, ["profiles", "--architecture", "urm-heavy"])

        assert result.exit_code == 0
        assert "URM-Heavy" in result.output
        assert "Strengths" in result.output

    def test_dimensions(self, runner):
        """--dimensions lists every quality dimension."""
        result = runner.invoke(main, ["profiles", "--dimensions"])

        assert result.exit_code == 0
        assert "cost_efficiency" in result.output


class TestExploreCommand:
    """The 'explore' command."""

    def test_resolving_a_conflict(self, runner):
        """Lowering cost sensitivity should resolve the compliance-cost conflict."""
        result = runner.invoke(main, ["explore", "-c", "9", "-s", "9", "--set", "cost_sensitivity=5"])

        assert result.exit_code == 0
        assert "resolved" in result.output
        assert "1 modification(s)" in result.output

    def test_revert(self, runner):
        """--revert-to keeps only the changes up to that step."""
        result = runner.invoke(main, [
            "explore", *NEUTRAL_ARGS,
            "--set", "risk_tolerance=9",
            "--set", "compliance_strictness=9",
            "--revert-to", "0",
        ])

        assert result.exit_code == 0
        assert "1 modification(s)" in result.output

    def test_invalid_value(self, runner):
        """An out-of-range change exits with an error message."""
        result = runner.invoke(main, ["explore", "--set", "risk_tolerance=11"])

        assert result.exit_code == 1
        assert "Invalid modification" in result.output

    def test_malformed_change(self, runner):
        """A change without '=' is a usage error."""
        result = runner.invoke(main, ["explore", "--set", "risk_tolerance"])

        assert result.exit_code == 2


class TestInitConfigCommand:
    """The 'init-config' command."""

    def test_creates_file(self, runner, tmp_path):
        """init-config writes the file and explains the search order."""
        out = tmp_path / "referee-config.yaml"

        result = runner.invoke(main, ["init-config", "--out", str(out)])

        assert result.exit_code == 0
        assert out.exists()
        assert "ARCHITECTURE_REFEREE_CONFIG" in result.output

    def test_refuses_to_overwrite(self, runner, tmp_path):
        """An existing file is only replaced with --force."""
        out = tmp_path / "referee-config.yaml"
        out.write_text("", encoding="utf-8")

        result = runner.invoke(main, ["init-config", "--out", str(out)])
        assert result.exit_code == 1
        assert "already exists" in result.output

        result = runner.invoke(main, ["init-config", "--out", str(out), "--force"])
        assert result.exit_code == 0
