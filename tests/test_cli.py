"""CLI tests for the query commands."""

import json

import pytest
from click.testing import CliRunner

from csnav.main import cli


@pytest.fixture
def runner():
    """Create Click test runner."""
    return CliRunner()


class TestCLI:
    """Command wiring, JSON output and error envelopes."""

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("find-callers", "get-hierarchy", "list-feature-scenarios", "check-overridable"):
            assert command in result.output

    def test_find_callers_json(self, runner, sample_solution):
        result = runner.invoke(cli, ["find-callers", "-s", str(sample_solution), "--symbol", "Calculator.Add"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["symbol"] == "Calculator.Add"
        assert payload["totalCount"] == 4
        assert {"callerClass", "callerMethod", "filePath", "line", "contextCode"} == set(payload["callers"][0])

    def test_get_hierarchy_json(self, runner, sample_solution):
        result = runner.invoke(cli, ["get-hierarchy", "-s", str(sample_solution), "--class", "ScientificCalculator"])

        assert result.exit_code == 0
        assert json.loads(result.output)["baseTypes"] == ["Calculator", "object"]

    def test_find_by_attribute_with_pattern(self, runner, sample_solution):
        result = runner.invoke(
            cli, ["find-by-attribute", "-s", str(sample_solution), "-a", "Obsolete", "-p", "step"]
        )

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["pattern"] == "step"
        assert [match["name"] for match in payload["matches"]] == ["NotAStep"]

    def test_list_feature_scenarios(self, runner, sample_solution):
        features = sample_solution.parent / "SampleProject" / "Features"

        result = runner.invoke(cli, ["list-feature-scenarios", "--path", str(features)])

        assert result.exit_code == 0
        assert json.loads(result.output)["summary"] == {"totalFeatures": 2, "totalScenarios": 4}

    def test_not_found_envelope(self, runner, sample_solution):
        result = runner.invoke(cli, ["find-callers", "-s", str(sample_solution), "--symbol", "Calculator.Nope"])

        assert result.exit_code == 1
        assert json.loads(result.output) == {
            "success": False,
            "error": {
                "code": "find_callers_error",
                "message": "Method 'Calculator.Nope' not found in solution",
            },
        }

    def test_blank_argument_envelope(self, runner, sample_solution):
        result = runner.invoke(cli, ["get-hierarchy", "-s", str(sample_solution), "--class", "  "])

        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["message"] == "Class name is required"

    def test_missing_solution_envelope(self, runner, tmp_path):
        result = runner.invoke(cli, ["list-classes", "-s", str(tmp_path / "none.sln"), "--namespace", "App"])

        assert result.exit_code == 1
        assert json.loads(result.output)["error"]["code"] == "list_classes_error"

    def test_required_option(self, runner):
        result = runner.invoke(cli, ["find-usages", "--symbol", "Calculator.Add"])

        assert result.exit_code != 0
        assert "Missing option" in result.output
