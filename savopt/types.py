"""
Type definitions for SavOpt.

Purpose
-------
Provides TypedDict definitions for the JSON payloads SavOpt produces.
Response dictionaries use the camelCase wire names of the HTTP API, so
the same shapes serve the API, the CLI ``--output`` files and the
persisted results.

Usage
-----
>>> from savopt.types import TimelineEntryDict
>>>
>>> entry: TimelineEntryDict = {
...     "month": 0, "year": 2025, "age": 35, "emergency": 0, "totalDebt": 10_000,
...     "retirement": 0, "college": 0, "brokerage": 0, "netWorth": -10_000,
... }

Type Definitions
----------------
DebtDict
    One amortizing debt: {"name", "balance", "apr", "monthlyPmt", ...}

CollegeGoalDict
    One child's college goal: {"childNum", "target", "monthly", ...}

TimelineEntryDict
    Yearly balance snapshot: {"month", "year", "netWorth", ...}

AllocationDict
    Split of one month's budget: {"emergency", "debts", "match401k", ...}

GoalsResponseDict
    Goals planner response (minimum budget plus goal breakdown)

EvaluationResponseDict
    Savings optimizer response (evaluated budget versus optimum)
"""

from typing import Dict, List
from typing_extensions import TypedDict

__all__ = [
    "DebtDict",
    "CollegeGoalDict",
    "TimelineEntryDict",
    "AllocationDict",
    "GoalsResponseDict",
    "EvaluationResponseDict",
    "ErrorDict",
]


class DebtDict(TypedDict):
    """
    Amortizing debt as reported to clients.

    Attributes
    ----------
    name : str
        "Credit Card", "Auto Loan" or "Student Loan".
    balance : float
        Principal at month 0.
    apr : float
        Annual rate as a fraction (0.22 for 22%).
    years : float
        Payoff horizon in years.
    months : int
        Payoff horizon in months.
    monthlyPmt : float
        Level payment that clears the balance over ``months``.
    totalInterest : float
        ``monthlyPmt × months - balance``.
    """

    name: str
    balance: float
    apr: float
    years: float
    months: int
    monthlyPmt: float
    totalInterest: float


class CollegeGoalDict(TypedDict):
    """Per-child college goal; ``ror`` is the tiered growth rate."""

    childNum: int
    age: float
    yearsUntil: float
    monthsUntil: int
    ror: float
    target: float
    futureCost: float
    currentSaved: float
    fvSaved: float
    gap: float
    monthly: float


class TimelineEntryDict(TypedDict):
    """Yearly snapshot; balances rounded to whole currency units."""

    month: int
    year: int
    age: float
    emergency: int
    totalDebt: int
    retirement: int
    college: int
    brokerage: int
    netWorth: int


class AllocationDict(TypedDict):
    """
    Split of one month's budget.

    ``debts`` maps debt name to the total paid that month (scheduled payment
    plus any extra avalanche payment). ``matchBonus`` is the employer's
    contribution and is not part of the budget.
    """

    emergency: float
    debts: Dict[str, float]
    match401k: float
    matchBonus: float
    college: float
    retirement: float
    brokerage: float


class _GoalBreakdownDict(TypedDict):
    afterTaxMonthly: float
    timeline: List[TimelineEntryDict]
    emergencyTarget: float
    emergencyGap: float
    emergencyMonthlyContrib: float
    debts: List[DebtDict]
    totalDebt: float
    totalDebtPmt: float
    totalDebtInterest: float
    retireTarget: float
    retireGap: float
    retireMonthlyNeeded: float
    retireFVofCurrent: float
    accumulationROR: float
    yearsToRetire: float
    monthsToRetire: int
    retireIncomeAnnual: float
    ssBenefit: float
    ssAnnual: float
    incomeNeededAnnual: float
    monthlyMatchableContrib: float
    monthlyMatchReceived: float
    collegeGoals: List[CollegeGoalDict]
    totalCollegeMonthly: float
    totalAssets: float
    netWorth: float


class GoalsResponseDict(_GoalBreakdownDict):
    """
    Goals planner response.

    Attributes
    ----------
    minimumMonthly : int
        Optimal budget rounded to whole currency units.
    savingsRate : float
        Optimal budget as a percentage of after-tax income.
    naiveTotalMonthly : float
        Sum of each goal's standalone monthly requirement.
    efficiencySavings : float
        ``max(0, naiveTotalMonthly - optimal budget)``.
    feasible : bool
        Whether the optimal budget meets every goal.
    """

    minimumMonthly: int
    savingsRate: float
    naiveTotalMonthly: float
    efficiencySavings: float
    feasible: bool


class EvaluationResponseDict(_GoalBreakdownDict):
    """
    Savings optimizer response.

    ``timeline``, ``firstAlloc``, ``savingsRate`` and the goal flags describe
    the caller's budget; ``optimalBudget`` and ``budgetDiff`` compare it with
    the minimum budget found by the search.
    """

    optimalBudget: int
    budgetDiff: float
    savingsRate: float
    firstAlloc: AllocationDict
    allGoalsMet: bool
    emergencyMet: bool
    debtsMet: bool
    retireMet: bool
    collegeMet: bool
    retirementShortfall: float
    collegeShortfall: float
    optimalFeasible: bool


class ErrorDict(TypedDict):
    """Error body returned by the HTTP API."""

    error: str
