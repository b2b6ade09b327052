"""
Serialization module for SavOpt results.

Purpose
-------
Assembles the JSON response payloads of both product variants from a
GoalSet and the simulator/optimizer output, and provides persistence
helpers for households and results.

Supports serialization of:
- Debt, CollegeGoal, TimelineEntry and MonthlyAllocation records
- Goals planner responses (minimum budget + goal breakdown)
- Savings optimizer responses (evaluated budget versus optimum)
- Timelines as pandas DataFrames
- Households and results as JSON files

Design Principles
-----------------
- Wire-compatible: payload keys are the camelCase names of the HTTP API
- Plain JSON: every value is a Python float/int/bool/str/list/dict
- No arithmetic faults: rates over a zero income are reported as 0
- Versioned: persisted results carry a schema version

Example
-------
>>> from pathlib import Path
>>> from savopt.serialization import assemble_goals_response, save_result
>>>
>>> payload = assemble_goals_response(goals, result)
>>> save_result(payload, Path("plan.json"))
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, Type, TypeVar, TYPE_CHECKING
from pathlib import Path
import json
import warnings

import pandas as pd

from .config import HouseholdInput
from .utils import round_half_up, safe_ratio

if TYPE_CHECKING:
    from .goals import CollegeGoal, Debt, GoalSet
    from .optimization import OptimizationResult
    from .simulation import MonthlyAllocation, SimulationResult, TimelineEntry
    from .types import (
        AllocationDict,
        CollegeGoalDict,
        DebtDict,
        EvaluationResponseDict,
        GoalsResponseDict,
        TimelineEntryDict,
    )

__all__ = [
    "SCHEMA_VERSION",
    "debt_to_dict",
    "college_goal_to_dict",
    "timeline_entry_to_dict",
    "allocation_to_dict",
    "goal_breakdown",
    "assemble_goals_response",
    "assemble_evaluation_response",
    "timeline_to_frame",
    "save_result",
    "load_result",
    "load_household",
]

H = TypeVar("H", bound=HouseholdInput)


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Record Serialization
# ---------------------------------------------------------------------------

def debt_to_dict(debt: Debt) -> DebtDict:
    """
    Convert Debt to dictionary representation.

    Parameters
    ----------
    debt : Debt
        Debt instance to serialize

    Returns
    -------
    dict
        Dictionary with wire-named debt fields
    """
    return {
        "name": debt.name,
        "balance": debt.balance,
        "apr": debt.apr,
        "years": debt.years,
        "months": debt.months,
        "monthlyPmt": debt.monthly_payment,
        "totalInterest": debt.total_interest,
    }


def college_goal_to_dict(goal: CollegeGoal) -> CollegeGoalDict:
    """Convert CollegeGoal to dictionary representation."""
    return {
        "childNum": goal.child_num,
        "age": goal.age,
        "yearsUntil": goal.years_until,
        "monthsUntil": goal.months_until,
        "ror": goal.growth_rate,
        "target": goal.target,
        "futureCost": goal.future_cost,
        "currentSaved": goal.current_saved,
        "fvSaved": goal.fv_saved,
        "gap": goal.gap,
        "monthly": goal.monthly,
    }


def timeline_entry_to_dict(entry: TimelineEntry) -> TimelineEntryDict:
    return {
        "month": entry.month,
        "year": entry.year,
        "age": entry.age,
        "emergency": entry.emergency,
        "totalDebt": entry.total_debt,
        "retirement": entry.retirement,
        "college": entry.college,
        "brokerage": entry.brokerage,
        "netWorth": entry.net_worth,
    }


def allocation_to_dict(allocation: MonthlyAllocation) -> AllocationDict:
    return {
        "emergency": allocation.emergency,
        "debts": dict(allocation.debts),
        "match401k": allocation.match_contribution,
        "matchBonus": allocation.match_bonus,
        "college": allocation.college,
        "retirement": allocation.retirement,
        "brokerage": allocation.brokerage,
    }


# ---------------------------------------------------------------------------
# Response Assembly
# ---------------------------------------------------------------------------

def goal_breakdown(goals: GoalSet) -> Dict[str, Any]:
    """
    Goal figures shared by both response variants.

    Everything here is a function of the GoalSet alone; the timeline is
    added by the variant-specific assemblers.
    """
    emergency = goals.emergency
    retirement = goals.retirement
    return {
        "afterTaxMonthly": goals.after_tax_monthly,
        "emergencyTarget": emergency.target,
        "emergencyGap": emergency.gap,
        "emergencyMonthlyContrib": emergency.monthly_contribution,
        "debts": [debt_to_dict(d) for d in goals.debts],
        "totalDebt": goals.total_debt,
        "totalDebtPmt": goals.total_debt_payment,
        "totalDebtInterest": goals.total_debt_interest,
        "retireTarget": retirement.target,
        "retireGap": retirement.gap,
        "retireMonthlyNeeded": retirement.monthly_needed,
        "retireFVofCurrent": retirement.fv_of_current,
        "accumulationROR": retirement.growth_rate,
        "yearsToRetire": retirement.years_to_retire,
        "monthsToRetire": retirement.months_to_retire,
        "retireIncomeAnnual": retirement.income_annual,
        "ssBenefit": retirement.benefit_monthly,
        "ssAnnual": retirement.benefit_annual,
        "incomeNeededAnnual": retirement.income_needed_annual,
        "monthlyMatchableContrib": retirement.matchable_contribution,
        "monthlyMatchReceived": retirement.match_received,
        "collegeGoals": [college_goal_to_dict(c) for c in goals.colleges],
        "totalCollegeMonthly": goals.total_college_monthly,
        "totalAssets": goals.total_assets,
        "netWorth": goals.net_worth,
    }


def assemble_goals_response(goals: GoalSet, result: OptimizationResult) -> GoalsResponseDict:
    """
    Build the goals planner payload.

    Parameters
    ----------
    goals : GoalSet
        Derived goals.
    result : OptimizationResult
        Minimum-budget search output; its final simulation supplies the
        timeline.

    Returns
    -------
    dict
        Minimum budget, savings rate, efficiency versus the naive sum,
        feasibility and the goal breakdown.
    """
    budget = result.budget
    naive = goals.naive_total_monthly
    payload = {
        "minimumMonthly": round_half_up(budget),
        "savingsRate": safe_ratio(budget, goals.after_tax_monthly) * 100,
        "naiveTotalMonthly": naive,
        "efficiencySavings": max(0.0, naive - budget),
        "feasible": result.feasible,
        "timeline": [timeline_entry_to_dict(e) for e in result.simulation.timeline],
    }
    payload.update(goal_breakdown(goals))
    return payload


def assemble_evaluation_response(
    goals: GoalSet,
    evaluation: SimulationResult,
    optimum: OptimizationResult,
) -> EvaluationResponseDict:
    """
    Build the savings optimizer payload.

    Parameters
    ----------
    goals : GoalSet
        Derived goals.
    evaluation : SimulationResult
        Simulation of the caller's budget (supplies timeline, first
        allocation and goal flags).
    optimum : OptimizationResult
        Minimum-budget search output for comparison.
    """
    budget = evaluation.budget
    payload = {
        "optimalBudget": round_half_up(optimum.budget),
        "optimalFeasible": optimum.feasible,
        "budgetDiff": budget - optimum.budget,
        "savingsRate": safe_ratio(budget, goals.after_tax_monthly) * 100,
        "timeline": [timeline_entry_to_dict(e) for e in evaluation.timeline],
        "firstAlloc": allocation_to_dict(evaluation.first_allocation),
        "allGoalsMet": evaluation.success,
        "emergencyMet": evaluation.emergency_met,
        "debtsMet": evaluation.debts_met,
        "retireMet": evaluation.retirement_met,
        "collegeMet": evaluation.college_met,
        "retirementShortfall": evaluation.retirement_shortfall,
        "collegeShortfall": evaluation.college_shortfall,
    }
    payload.update(goal_breakdown(goals))
    return payload


def timeline_to_frame(timeline: Iterable[TimelineEntry]) -> pd.DataFrame:
    """
    Tabulate yearly snapshots.

    Returns
    -------
    pd.DataFrame
        Indexed by ``year`` with columns ``month``, ``age``, ``emergency``,
        ``total_debt``, ``retirement``, ``college``, ``brokerage`` and
        ``net_worth``.
    """
    columns = [
        "year", "month", "age", "emergency", "total_debt",
        "retirement", "college", "brokerage", "net_worth",
    ]
    rows = [{c: getattr(e, c) for c in columns} for e in timeline]
    return pd.DataFrame(rows, columns=columns).set_index("year")


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

def save_result(payload: Dict[str, Any], path: Path) -> None:
    """
    Save a response payload to a JSON file.

    Examples
    --------
    >>> save_result(assemble_goals_response(goals, result), Path("plan.json"))
    """
    document = {"schema_version": SCHEMA_VERSION, **payload}
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(document, f, indent=2)


def load_result(path: Path) -> Dict[str, Any]:
    """
    Load a payload written by ``save_result``.

    Warns (UserWarning) when the stored schema version differs from the
    current one.
    """
    with open(path, "r") as f:
        document = json.load(f)

    schema_version = document.pop("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"Result schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )
    return document


def load_household(path: Path, model: Type[H] = HouseholdInput) -> H:
    """
    Load and validate a household JSON file.

    Parameters
    ----------
    path : Path
        JSON file with camelCase (or snake_case) household fields.
    model : type, default HouseholdInput
        Request model to validate against (``EvaluationInput`` when the file
        also carries ``monthlyBudget``).

    Raises
    ------
    pydantic.ValidationError
        If the file content does not validate.
    """
    with open(path, "r") as f:
        data = json.load(f)
    return model.model_validate(data)
