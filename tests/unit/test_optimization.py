"""
Unit tests for optimization.py module.

Tests OptimizationResult, search_bracket, BudgetOptimizer (binary and
guarded strategies) and sweep_budgets.
"""

import logging

import numpy as np
import pandas as pd
import pytest

from savopt.config import EngineConfig, HouseholdInput, OptimizationConfig
from savopt.exceptions import InfeasibleError, OptimizationError, SavOptError, ValidationError
from savopt.goals import derive_goals
from savopt.optimization import (
    BudgetOptimizer,
    OptimizationResult,
    search_bracket,
    sweep_budgets,
)
from savopt.simulation import CashFlowSimulator


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def zero_target_simulator():
    """No income and no debts: every goal is met by any budget."""
    goals = derive_goals(HouseholdInput(income=0.0))
    return CashFlowSimulator(goals, start_year=2025)


@pytest.fixture
def optimum(retirement_simulator, search_config):
    return BudgetOptimizer(retirement_simulator, search_config).optimize()


MULTI_GOAL_HOUSEHOLDS = {
    "young_saver": {
        "income": 85000, "currentAge": 30, "retireAge": 62,
        "ccBal": 8000, "ccApr": 24, "slBal": 30000, "slApr": 6,
        "has401k": True, "hasKids": True, "numKids": 1, "kidAges": [2],
    },
    "late_starter": {
        "income": 60000, "currentAge": 50, "retireAge": 67,
        "autoBal": 15000, "retirementBal": 50000, "has401k": True,
        "hasKids": True, "numKids": 2, "kidAges": [15, 12],
        "useFinancialAid": True, "aidPercent": 40,
    },
    "high_earner": {
        "income": 220000, "married": True, "currentAge": 42, "retireAge": 60,
        "ccBal": 3000, "autoBal": 40000, "autoApr": 4.5, "retirementBal": 300000,
        "has401k": True, "matchPercent": 100, "matchUpTo": 5,
        "hasKids": True, "numKids": 3, "kidAges": [10, 7, 1], "collegeBal": 30000,
    },
}


@pytest.fixture(params=sorted(MULTI_GOAL_HOUSEHOLDS))
def multi_goal_household(request):
    return HouseholdInput.model_validate(MULTI_GOAL_HOUSEHOLDS[request.param])


@pytest.fixture(params=["goals", "optimizer"])
def engine(request):
    if request.param == "goals":
        return EngineConfig.goals_planner()
    return EngineConfig.savings_optimizer()


# ============================================================================
# OptimizationResult
# ============================================================================

class TestOptimizationResult:
    """Test OptimizationResult container."""

    def test_summary(self, optimum):
        text = optimum.summary()
        assert "Feasible" in text
        assert "binary" in text
        assert "/month" in text

    def test_require_feasible_returns_self(self, optimum):
        assert optimum.require_feasible() is optimum

    def test_require_feasible_raises(self, retirement_simulator):
        failed = retirement_simulator.simulate(0)
        result = OptimizationResult(
            budget=0.0, feasible=False, simulation=failed,
            lower=100.0, upper=200.0, iterations=3, strategy="binary", solve_time=0.01,
        )
        with pytest.raises(InfeasibleError, match="No budget"):
            result.require_feasible()

    def test_infeasible_error_hierarchy(self):
        assert issubclass(InfeasibleError, OptimizationError)
        assert issubclass(OptimizationError, SavOptError)

    def test_rejects_negative_budget(self, retirement_simulator):
        sim = retirement_simulator.simulate(0)
        with pytest.raises(ValueError, match="non-negative"):
            OptimizationResult(
                budget=-1.0, feasible=False, simulation=sim,
                lower=0.0, upper=1.0, iterations=0, strategy="binary", solve_time=0.0,
            )

    def test_rejects_inverted_bracket(self, retirement_simulator):
        sim = retirement_simulator.simulate(0)
        with pytest.raises(ValueError, match="lower"):
            OptimizationResult(
                budget=1.0, feasible=False, simulation=sim,
                lower=10.0, upper=1.0, iterations=0, strategy="binary", solve_time=0.0,
            )


# ============================================================================
# Bracket
# ============================================================================

class TestSearchBracket:
    """Test search_bracket()."""

    def test_bracket(self, retirement_simulator):
        goals = retirement_simulator.goals
        lo, hi = search_bracket(retirement_simulator)
        assert lo == pytest.approx(max(100, goals.naive_total_monthly * 0.3))
        assert hi == pytest.approx(max(goals.after_tax_monthly * 0.95, goals.naive_total_monthly * 2))
        assert lo < hi

    def test_degenerate_bracket(self, zero_target_simulator):
        assert search_bracket(zero_target_simulator) == (100, 100)

    def test_savings_optimizer_naive_floor(self):
        engine = EngineConfig.savings_optimizer()
        simulator = CashFlowSimulator(derive_goals(HouseholdInput(income=0.0), engine), engine)
        assert simulator.goals.naive_total_monthly == 100
        assert search_bracket(simulator) == (100, 200)


# ============================================================================
# BudgetOptimizer
# ============================================================================

class TestBudgetOptimizer:
    """Test the minimum-budget search."""

    def test_requires_simulator(self):
        with pytest.raises(TypeError, match="CashFlowSimulator"):
            BudgetOptimizer("not a simulator")

    def test_default_config(self, retirement_simulator):
        assert BudgetOptimizer(retirement_simulator).config == OptimizationConfig()

    def test_retirement_only_scenario(self, optimum, retirement_simulator):
        """Positive budget that meets the retirement target at age 65."""
        goals = retirement_simulator.goals
        assert optimum.feasible is True
        assert optimum.budget > 0
        assert optimum.lower <= optimum.budget <= optimum.upper
        sim = optimum.simulation
        assert sim.success is True
        assert sim.months_simulated == goals.retirement.months_to_retire
        assert sim.final_state.retirement >= 0.90 * goals.retirement.target

    def test_closure(self, family_simulator, search_config):
        result = BudgetOptimizer(family_simulator, search_config).optimize()
        assert result.feasible is True
        assert family_simulator.simulate(result.budget).success is True

    def test_closure_savings_optimizer(self, family):
        engine = EngineConfig.savings_optimizer()
        sim = CashFlowSimulator(derive_goals(family, engine), engine, start_year=2025)
        result = BudgetOptimizer(sim, OptimizationConfig.savings_optimizer()).optimize()
        assert result.feasible is True
        assert sim.simulate(result.budget).success is True

    def test_iteration_cap(self, family_simulator):
        result = BudgetOptimizer(family_simulator, OptimizationConfig(max_iterations=3)).optimize()
        assert result.iterations <= 3

    def test_tolerance_stops_search(self, family_simulator):
        coarse = BudgetOptimizer(family_simulator, OptimizationConfig(tolerance=500)).optimize()
        fine = BudgetOptimizer(family_simulator, OptimizationConfig(tolerance=1)).optimize()
        assert coarse.iterations < fine.iterations

    def test_degenerate_bracket(self, zero_target_simulator):
        result = BudgetOptimizer(zero_target_simulator).optimize()
        assert result.budget == 100
        assert result.feasible is True
        assert result.iterations == 1

    def test_guarded_never_worse(self, family_simulator):
        binary = BudgetOptimizer(family_simulator, OptimizationConfig(search_strategy="binary")).optimize()
        guarded = BudgetOptimizer(
            family_simulator, OptimizationConfig(search_strategy="guarded", probe_points=8)
        ).optimize()
        assert guarded.strategy == "guarded"
        assert guarded.feasible is True
        assert guarded.budget <= binary.budget
        assert guarded.iterations >= binary.iterations

    def test_logs_result(self, retirement_simulator, caplog):
        caplog.set_level(logging.DEBUG, logger="savopt.optimization")
        BudgetOptimizer(retirement_simulator).optimize()
        messages = [r.getMessage() for r in caplog.records if r.name == "savopt.optimization"]
        assert any(m.startswith("Optimal budget") for m in messages)
        assert any(m.startswith("[Iter 1]") for m in messages)


# ============================================================================
# sweep_budgets
# ============================================================================

class TestSweepBudgets:
    """Test budget sweeps."""

    def test_columns(self, retirement_simulator):
        df = sweep_budgets(retirement_simulator, [0, 1_000, 5_000])
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == [
            "budget", "success", "emergency_met", "debts_met", "retirement_met",
            "college_met", "goals_met", "retirement_shortfall", "college_shortfall",
            "months_simulated",
        ]
        assert len(df) == 3

    def test_outcomes(self, retirement_simulator):
        df = sweep_budgets(retirement_simulator, [0, 5_000])
        assert not df["success"].iloc[0]
        assert df["success"].iloc[1]

    def test_soft_monotonicity(self, retirement_simulator):
        """More budget never lowers the number of goals met."""
        df = sweep_budgets(retirement_simulator, np.linspace(0, 4_000, 17))
        assert df["goals_met"].is_monotonic_increasing

    def test_multi_goal_monotonicity(self, multi_goal_household, engine):
        """goals_met never drops as the budget grows across the whole bracket."""
        simulator = CashFlowSimulator(derive_goals(multi_goal_household, engine), engine, start_year=2025)
        _, hi = search_bracket(simulator)
        df = sweep_budgets(simulator, np.linspace(0, hi, 60))
        assert df["goals_met"].is_monotonic_increasing
        assert not df["success"].iloc[0]

    def test_zero_budget_fails_family(self, family_simulator):
        assert family_simulator.simulate(0).success is False

    def test_family_extremes(self, family_simulator):
        df = sweep_budgets(family_simulator, np.linspace(0, 8_000, 9))
        assert df["goals_met"].iloc[0] < 4
        assert df["goals_met"].iloc[-1] >= df["goals_met"].iloc[0]

    def test_rejects_negative_budget(self, retirement_simulator):
        with pytest.raises(ValidationError, match="non-negative"):
            sweep_budgets(retirement_simulator, [100, -1])

    def test_rejects_2d(self, retirement_simulator):
        with pytest.raises(ValidationError, match="1-D"):
            sweep_budgets(retirement_simulator, [[100, 200]])

    def test_rejects_empty(self, retirement_simulator):
        with pytest.raises(ValidationError, match="at least one"):
            sweep_budgets(retirement_simulator, [])
