"""
Unit tests for cli.py module.

Tests command-line interface using Click's testing utilities.
"""

import json

import pytest
from click.testing import CliRunner

from savopt.cli import HOUSEHOLD_TEMPLATES, __version__, main
from savopt.config import HouseholdInput


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def runner():
    """Create Click test runner."""
    return CliRunner()


@pytest.fixture
def invalid_household(tmp_path):
    """Household file with a negative income."""
    path = tmp_path / "invalid.json"
    path.write_text(json.dumps({"income": -5}))
    return path


@pytest.fixture
def evaluation_file(tmp_path, family):
    """Family household carrying a monthly budget."""
    path = tmp_path / "evaluation.json"
    path.write_text(json.dumps({**family.model_dump(by_alias=True), "monthlyBudget": 3000}))
    return path


# ============================================================================
# MAIN GROUP TESTS
# ============================================================================

class TestMainGroup:
    """Test main CLI group."""

    def test_main_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "SavOpt" in result.output
        assert "plan" in result.output

    def test_main_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_info(self, runner):
        result = runner.invoke(main, ["info"])
        assert result.exit_code == 0
        assert "SavOpt Version" in result.output


# ============================================================================
# PLAN COMMAND TESTS
# ============================================================================

class TestPlanCommand:
    """Test plan command."""

    def test_plan_requires_input(self, runner):
        result = runner.invoke(main, ["plan"])
        assert result.exit_code != 0

    def test_plan_basic(self, runner, household_file):
        result = runner.invoke(main, ["plan", "-i", str(household_file)])
        assert result.exit_code == 0
        assert "Savings Plan" in result.output
        assert "Minimum budget" in result.output

    def test_plan_with_output(self, runner, household_file, tmp_path):
        output = tmp_path / "plan.json"
        result = runner.invoke(main, ["plan", "-i", str(household_file), "-o", str(output)])
        assert result.exit_code == 0
        assert output.exists()
        assert "Plan saved" in result.output

        with open(output) as f:
            payload = json.load(f)
        assert "schema_version" in payload
        assert payload["minimumMonthly"] > 0
        assert payload["feasible"] is True

    def test_plan_quiet(self, runner, household_file, tmp_path):
        output = tmp_path / "plan.json"
        result = runner.invoke(main, ["--quiet", "plan", "-i", str(household_file), "-o", str(output)])
        assert result.exit_code == 0
        assert output.exists()
        assert "Plan saved" not in result.output

    def test_plan_guarded(self, runner, household_file):
        result = runner.invoke(main, ["plan", "-i", str(household_file), "--strategy", "guarded"])
        assert result.exit_code == 0

    def test_plan_with_plot(self, runner, household_file, tmp_path):
        chart = tmp_path / "timeline.png"
        result = runner.invoke(main, ["plan", "-i", str(household_file), "--plot", str(chart)])
        assert result.exit_code == 0
        assert chart.exists()

    def test_plan_optimizer_variant(self, runner, evaluation_file, tmp_path):
        output = tmp_path / "plan.json"
        result = runner.invoke(main, [
            "plan", "-i", str(evaluation_file), "--variant", "optimizer", "-o", str(output),
        ])
        assert result.exit_code == 0
        assert "Your budget" in result.output
        with open(output) as f:
            assert "firstAlloc" in json.load(f)

    def test_plan_optimizer_requires_budget(self, runner, household_file):
        result = runner.invoke(main, ["plan", "-i", str(household_file), "--variant", "optimizer"])
        assert result.exit_code == 1

    def test_plan_invalid_household(self, runner, invalid_household):
        result = runner.invoke(main, ["plan", "-i", str(invalid_household)])
        assert result.exit_code == 1


# ============================================================================
# EVALUATE COMMAND TESTS
# ============================================================================

class TestEvaluateCommand:
    """Test evaluate command."""

    def test_evaluate(self, runner, household_file, tmp_path):
        output = tmp_path / "evaluation.json"
        result = runner.invoke(main, [
            "evaluate", "-i", str(household_file), "-b", "3000", "-o", str(output),
        ])
        assert result.exit_code == 0
        assert "Budget Evaluation" in result.output
        with open(output) as f:
            payload = json.load(f)
        assert payload["budgetDiff"] == pytest.approx(3_000 - payload["optimalBudget"], abs=1)
        assert "allGoalsMet" in payload

    def test_evaluate_requires_budget(self, runner, household_file):
        result = runner.invoke(main, ["evaluate", "-i", str(household_file)])
        assert result.exit_code != 0

    def test_evaluate_rejects_negative_budget(self, runner, household_file):
        result = runner.invoke(main, ["evaluate", "-i", str(household_file), "-b", "-5"])
        assert result.exit_code != 0


# ============================================================================
# SWEEP COMMAND TESTS
# ============================================================================

class TestSweepCommand:
    """Test sweep command."""

    def test_sweep_csv(self, runner, household_file, tmp_path):
        output = tmp_path / "sweep.csv"
        result = runner.invoke(main, [
            "sweep", "-i", str(household_file), "--points", "5", "-o", str(output),
        ])
        assert result.exit_code == 0
        lines = output.read_text().strip().splitlines()
        assert len(lines) == 6
        assert lines[0].startswith("budget,success")

    def test_sweep_plot(self, runner, household_file, tmp_path):
        chart = tmp_path / "sweep.png"
        result = runner.invoke(main, [
            "sweep", "-i", str(household_file), "-n", "3", "--plot", str(chart),
        ])
        assert result.exit_code == 0
        assert chart.exists()

    def test_sweep_inverted_range(self, runner, household_file):
        result = runner.invoke(main, [
            "sweep", "-i", str(household_file), "--min-budget", "500", "--max-budget", "100",
        ])
        assert result.exit_code == 1

    def test_sweep_requires_two_points(self, runner, household_file):
        result = runner.invoke(main, ["sweep", "-i", str(household_file), "--points", "1"])
        assert result.exit_code != 0


# ============================================================================
# CONFIG COMMAND TESTS
# ============================================================================

class TestConfigCommand:
    """Test config command group."""

    def test_config_help(self, runner):
        result = runner.invoke(main, ["config", "--help"])
        assert result.exit_code == 0
        assert "show" in result.output

    @pytest.mark.parametrize("variant,iterations", [("goals", 60), ("optimizer", 40)])
    def test_config_show_json(self, runner, variant, iterations):
        result = runner.invoke(main, ["config", "show", "--variant", variant, "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["search"]["max_iterations"] == iterations
        assert "retirement_threshold" in data["engine"]

    def test_config_show_table(self, runner):
        result = runner.invoke(main, ["config", "show"])
        assert result.exit_code == 0
        assert "retirement_threshold" in result.output

    def test_config_validate_valid(self, runner, household_file):
        result = runner.invoke(main, ["config", "validate", str(household_file)])
        assert result.exit_code == 0
        assert "Household Valid" in result.output

    def test_config_validate_invalid(self, runner, invalid_household):
        result = runner.invoke(main, ["config", "validate", str(invalid_household)])
        assert result.exit_code == 1

    def test_config_validate_missing_path(self, runner):
        result = runner.invoke(main, ["config", "validate", "/nonexistent/household.json"])
        assert result.exit_code != 0

    @pytest.mark.parametrize("template", sorted(HOUSEHOLD_TEMPLATES))
    def test_config_create(self, runner, tmp_path, template):
        output = tmp_path / "nested" / f"{template}.json"
        result = runner.invoke(main, ["config", "create", str(output), "--template", template])
        assert result.exit_code == 0
        with open(output) as f:
            household = HouseholdInput.model_validate(json.load(f))
        assert household.income > 0
