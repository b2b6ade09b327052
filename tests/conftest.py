"""
Pytest configuration and fixtures for SavOpt test suite.

This module provides reusable fixtures for testing all SavOpt components.
Fixtures follow the principle of "arrange-act-assert" with clear separation.
"""

import json

import matplotlib
import pytest

matplotlib.use("Agg")

from savopt.config import EngineConfig, EvaluationInput, HouseholdInput, OptimizationConfig
from savopt.goals import derive_goals
from savopt.simulation import CashFlowSimulator


# ---------------------------------------------------------------------------
# Calendar Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def start_year() -> int:
    """Calendar year of simulation month 0."""
    return 2025


# ---------------------------------------------------------------------------
# Household Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def retirement_only() -> HouseholdInput:
    """
    Single earner saving only for retirement.

    Income: 120,000/year, age 35 retiring at 65, no debts, no children,
    emergency fund already funded.
    """
    return HouseholdInput(
        income=120_000.0,
        current_age=35,
        retire_age=65,
        life_expectancy=90,
        emergency_bal=100_000.0,
    )


@pytest.fixture
def credit_card_only() -> HouseholdInput:
    """
    A 10,000 credit card at 22% over 2 years and nothing else.

    Zero income means zero emergency and retirement targets.
    """
    return HouseholdInput(income=0.0, cc_bal=10_000.0, cc_apr=22.0, cc_payoff_years=2.0)


@pytest.fixture
def family() -> HouseholdInput:
    """Married household with three debts, a 401k match and two children."""
    return HouseholdInput.model_validate({
        "income": 140000,
        "married": True,
        "currentAge": 38,
        "retireAge": 67,
        "emergencyBal": 12000,
        "emergencyMonths": 6,
        "ccBal": 6000,
        "ccApr": 21,
        "autoBal": 18000,
        "autoApr": 6.9,
        "slBal": 22000,
        "slApr": 5.5,
        "retirementBal": 160000,
        "has401k": True,
        "matchPercent": 100,
        "matchUpTo": 4,
        "hasKids": True,
        "numKids": 2,
        "kidAges": [6, 3],
        "collegeCostYear": 35000,
        "collegeBal": 15000,
        "useFinancialAid": True,
        "aidPercent": 20,
        "brokerageBal": 10000,
    })


@pytest.fixture
def family_evaluation(family) -> EvaluationInput:
    """Family household with a 3,000/month budget to evaluate."""
    return EvaluationInput.model_validate({**family.model_dump(), "monthly_budget": 3_000.0})


# ---------------------------------------------------------------------------
# Engine Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def planner_engine() -> EngineConfig:
    """Goals planner preset."""
    return EngineConfig.goals_planner()


@pytest.fixture
def optimizer_engine() -> EngineConfig:
    """Savings optimizer preset."""
    return EngineConfig.savings_optimizer()


@pytest.fixture
def search_config() -> OptimizationConfig:
    """Goals planner search settings."""
    return OptimizationConfig.goals_planner()


@pytest.fixture
def family_simulator(family, planner_engine, start_year) -> CashFlowSimulator:
    """Goals planner simulator for the family household."""
    return CashFlowSimulator(derive_goals(family, planner_engine), planner_engine, start_year=start_year)


@pytest.fixture
def retirement_simulator(retirement_only, start_year) -> CashFlowSimulator:
    """Retirement-only simulator without the public benefit offset."""
    engine = EngineConfig(include_benefit_offset=False)
    return CashFlowSimulator(derive_goals(retirement_only, engine), engine, start_year=start_year)


# ---------------------------------------------------------------------------
# File Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def household_file(tmp_path, family):
    """Family household written as camelCase JSON."""
    path = tmp_path / "household.json"
    with open(path, "w") as f:
        json.dump(family.model_dump(by_alias=True), f)
    return path
