"""
Cash-flow simulator for SavOpt.

Purpose
-------
Advances a virtual household month by month under a fixed monthly
budget, applying growth and a priority allocation waterfall, and reports
whether every goal is met by its deadline together with a yearly
net-worth timeline.

Monthly Step
------------
1. Growth (skipped at month 0)
   - debts compound at apr/12 while a balance remains
   - retirement compounds at its tiered rate until the retirement month
   - each college fund compounds at its tiered rate until enrollment
   - brokerage compounds at 7%/12
2. Waterfall: each bucket claims at most what is still available
   a. emergency fund, paced at max(100, gap/6) and clamped to the gap
   b. scheduled debt payments, highest APR first
   c. employer-match contribution (match bonus is free money)
   d. optional extra avalanche pass on remaining debt
   e. college, fixed amounts or a capped proportional split
   f. remaining budget into retirement until the retirement month
   g. anything left into brokerage
3. Yearly snapshot every 12 months (month 0 included)
4. Goal check; stop early once every goal holds at or past retirement

Design Principles
-----------------
- Pure: simulate() depends only on (budget, goals, config)
- Owned state: every call builds and discards its own SimulationState
- Immutable outputs: TimelineEntry and SimulationResult are frozen

Example
-------
>>> from savopt.config import HouseholdInput, EngineConfig
>>> from savopt.goals import derive_goals
>>> goals = derive_goals(HouseholdInput(income=120_000))
>>> sim = CashFlowSimulator(goals, EngineConfig.goals_planner(), start_year=2025)
>>> result = sim.simulate(2_000)
>>> result.timeline[0].year
2025
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging
import math

from .config import EngineConfig
from .constants import (
    BROKERAGE_RATE,
    DEBT_PAID_THRESHOLD,
    EMERGENCY_MIN_CONTRIBUTION,
    EMERGENCY_SMOOTHING_MONTHS,
    MONTHS_PER_YEAR,
)
from .exceptions import ValidationError
from .goals import GoalSet
from .utils import resolve_start_year, round_half_up

__all__ = [
    "SimulationState",
    "TimelineEntry",
    "MonthlyAllocation",
    "SimulationResult",
    "CashFlowSimulator",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# State and Records
# ---------------------------------------------------------------------------

@dataclass
class SimulationState:
    """
    Mutable balances of one simulation run.

    Built from the goal set's starting balances by ``initial`` and owned
    by a single ``simulate`` call. ``debts`` and ``college`` follow the
    order of ``GoalSet.debts`` and ``GoalSet.colleges``.
    """
    month: int
    emergency: float
    debts: List[float]
    retirement: float
    college: List[float]
    brokerage: float

    @classmethod
    def initial(cls, goals: GoalSet) -> "SimulationState":
        return cls(
            month=0,
            emergency=goals.emergency.balance,
            debts=[d.balance for d in goals.debts],
            retirement=goals.retirement.current_balance,
            college=[c.current_saved for c in goals.colleges],
            brokerage=goals.brokerage_balance,
        )

    @property
    def total_debt(self) -> float:
        return sum(self.debts)

    @property
    def total_college(self) -> float:
        return sum(self.college)

    @property
    def total_assets(self) -> float:
        return self.emergency + self.retirement + self.total_college + self.brokerage

    @property
    def net_worth(self) -> float:
        return self.total_assets - self.total_debt


@dataclass(frozen=True)
class TimelineEntry:
    """Yearly snapshot of rounded balances."""
    month: int
    year: int
    age: float
    emergency: int
    total_debt: int
    retirement: int
    college: int
    brokerage: int
    net_worth: int

    @classmethod
    def capture(cls, state: SimulationState, start_year: int, current_age: float) -> "TimelineEntry":
        years = state.month // MONTHS_PER_YEAR
        return cls(
            month=state.month,
            year=start_year + years,
            age=current_age + years,
            emergency=round_half_up(state.emergency),
            total_debt=round_half_up(state.total_debt),
            retirement=round_half_up(state.retirement),
            college=round_half_up(state.total_college),
            brokerage=round_half_up(state.brokerage),
            net_worth=round_half_up(state.net_worth),
        )


@dataclass
class MonthlyAllocation:
    """How one month's budget was split across the waterfall buckets."""
    month: int
    emergency: float = 0.0
    debts: Dict[str, float] = field(default_factory=dict)
    match_contribution: float = 0.0
    match_bonus: float = 0.0
    college: float = 0.0
    retirement: float = 0.0
    brokerage: float = 0.0

    @property
    def total(self) -> float:
        """Budget consumed (the match bonus is not part of the budget)."""
        return (
            self.emergency
            + sum(self.debts.values())
            + self.match_contribution
            + self.college
            + self.retirement
            + self.brokerage
        )

    def add_debt(self, name: str, amount: float) -> None:
        self.debts[name] = self.debts.get(name, 0.0) + amount


@dataclass(frozen=True)
class SimulationResult:
    """
    Outcome of one simulate() call.

    Attributes
    ----------
    budget : float
        Monthly budget simulated.
    success : bool
        All four goals met by their deadlines.
    timeline : tuple of TimelineEntry
        Yearly snapshots up to the last simulated month.
    final_state : SimulationState
        Balances when the run stopped.
    emergency_met, debts_met, retirement_met, college_met : bool
        Per-goal outcome.
    retirement_shortfall, college_shortfall : float
        Amount missing from the retirement target and from every college
        fund below its threshold (zero on success).
    first_allocation : MonthlyAllocation
        Split of the month-0 budget.
    months_simulated : int
        Last month index executed.
    allocations : tuple of MonthlyAllocation
        Every month's split, only when recording was requested.
    """
    budget: float
    success: bool
    timeline: Tuple[TimelineEntry, ...]
    final_state: SimulationState
    emergency_met: bool
    debts_met: bool
    retirement_met: bool
    college_met: bool
    retirement_shortfall: float
    college_shortfall: float
    first_allocation: MonthlyAllocation
    months_simulated: int
    allocations: Tuple[MonthlyAllocation, ...] = ()

    @property
    def goals_met(self) -> int:
        """Number of the four goals satisfied."""
        return sum((self.emergency_met, self.debts_met, self.retirement_met, self.college_met))


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------

class CashFlowSimulator:
    """
    Month-stepping simulator of the allocation waterfall.

    Parameters
    ----------
    goals : GoalSet
        Derived goals with starting balances.
    config : EngineConfig, optional
        Variant switches; defaults to the goals planner.
    start_year : int, optional
        Calendar year of month 0 (current year by default).

    Examples
    --------
    >>> sim = CashFlowSimulator(goals, EngineConfig.savings_optimizer())
    >>> sim.simulate(0).success
    False
    """

    def __init__(
        self,
        goals: GoalSet,
        config: Optional[EngineConfig] = None,
        start_year: Optional[int] = None,
    ):
        self.goals = goals
        self.config = config or EngineConfig.goals_planner()
        self.start_year = resolve_start_year(start_year)

    def simulate(self, monthly_budget: float, record_allocations: bool = False) -> SimulationResult:
        """
        Replay the household under a fixed *monthly_budget*.

        Parameters
        ----------
        monthly_budget : float
            Amount distributed through the waterfall every month (≥ 0).
        record_allocations : bool, default False
            Keep every month's MonthlyAllocation in the result.

        Returns
        -------
        SimulationResult

        Raises
        ------
        ValidationError
            If the budget is negative or not finite.
        """
        if not math.isfinite(monthly_budget) or monthly_budget < 0:
            raise ValidationError(
                f"monthly_budget must be a non-negative number, got {monthly_budget}"
            )

        goals = self.goals
        months_to_retire = goals.retirement.months_to_retire
        state = SimulationState.initial(goals)
        timeline: List[TimelineEntry] = []
        allocations: List[MonthlyAllocation] = []
        first_allocation: Optional[MonthlyAllocation] = None

        for month in range(goals.horizon_months + 1):
            state.month = month
            if month > 0:
                self._grow(state)

            allocation = self._allocate(state, monthly_budget)
            if first_allocation is None:
                first_allocation = allocation
            if record_allocations:
                allocations.append(allocation)

            if month % MONTHS_PER_YEAR == 0:
                timeline.append(TimelineEntry.capture(state, self.start_year, goals.current_age))

            e_met, d_met, r_met, c_met = self._goal_status(state)
            if e_met and d_met and r_met and c_met and month >= months_to_retire:
                return SimulationResult(
                    budget=monthly_budget,
                    success=True,
                    timeline=tuple(timeline),
                    final_state=state,
                    emergency_met=True,
                    debts_met=True,
                    retirement_met=True,
                    college_met=True,
                    retirement_shortfall=0.0,
                    college_shortfall=0.0,
                    first_allocation=first_allocation,
                    months_simulated=month,
                    allocations=tuple(allocations),
                )

        return self._final_result(
            monthly_budget, state, timeline, first_allocation, allocations
        )

    # -------------------- Monthly phases --------------------

    def _grow(self, state: SimulationState) -> None:
        goals = self.goals
        for i, debt in enumerate(goals.debts):
            if state.debts[i] > 0:
                state.debts[i] *= 1 + debt.monthly_rate
        if state.month <= goals.retirement.months_to_retire:
            state.retirement *= 1 + goals.retirement.growth_rate / MONTHS_PER_YEAR
        for i, college in enumerate(goals.colleges):
            if state.month < college.months_until:
                state.college[i] *= 1 + college.growth_rate / MONTHS_PER_YEAR
        state.brokerage *= 1 + BROKERAGE_RATE / MONTHS_PER_YEAR

    def _allocate(self, state: SimulationState, budget: float) -> MonthlyAllocation:
        goals = self.goals
        retirement = goals.retirement
        month = state.month
        before_retirement = month < retirement.months_to_retire
        alloc = MonthlyAllocation(month=month)
        available = budget

        # a. emergency fund
        gap = goals.emergency.target - state.emergency
        if gap > 0 and available > 0:
            pace = max(EMERGENCY_MIN_CONTRIBUTION, gap / EMERGENCY_SMOOTHING_MONTHS)
            amount = min(available, gap, pace)
            state.emergency += amount
            available -= amount
            alloc.emergency = amount

        # b. scheduled debt payments, avalanche order
        for i, debt in enumerate(goals.debts):
            balance = state.debts[i]
            if balance > 0 and available > 0:
                payment = min(available, debt.monthly_payment, balance)
                state.debts[i] = max(0.0, balance - payment)
                available -= payment
                alloc.add_debt(debt.name, payment)

        # c. employer match
        if retirement.has_match and available > 0 and before_retirement:
            contribution = min(available, retirement.matchable_contribution)
            bonus = contribution * retirement.match_rate
            state.retirement += contribution + bonus
            available -= contribution
            alloc.match_contribution = contribution
            alloc.match_bonus = bonus

        # d. extra avalanche pass
        if self.config.extra_debt_pass:
            for i, debt in enumerate(goals.debts):
                balance = state.debts[i]
                if balance > 0 and available > 0:
                    extra = min(available, balance)
                    state.debts[i] = max(0.0, balance - extra)
                    available -= extra
                    alloc.add_debt(debt.name, extra)

        # e. college
        available = self._allocate_college(state, available, alloc)

        # f. remaining budget into retirement
        if available > 0 and before_retirement:
            state.retirement += available
            alloc.retirement = available
            available = 0.0

        # g. brokerage overflow
        if available > 0:
            state.brokerage += available
            alloc.brokerage = available

        return alloc

    def _allocate_college(
        self,
        state: SimulationState,
        available: float,
        alloc: MonthlyAllocation,
    ) -> float:
        active = [
            i for i, c in enumerate(self.goals.colleges) if state.month < c.months_until
        ]
        if not active or available <= 0:
            return available

        if self.config.college_allocation == "fixed":
            for i in active:
                if available <= 0:
                    break
                amount = min(available, self.goals.colleges[i].monthly)
                state.college[i] += amount
                available -= amount
                alloc.college += amount
            return available

        share = available / len(active)
        cap = self.config.college_cap_multiplier
        for i in active:
            amount = min(share, self.goals.colleges[i].monthly * cap)
            state.college[i] += amount
            available -= amount
            alloc.college += amount
        return max(0.0, available)

    # -------------------- Goal checks --------------------

    def _goal_status(self, state: SimulationState) -> Tuple[bool, bool, bool, bool]:
        goals = self.goals
        cfg = self.config
        emergency_met = state.emergency >= goals.emergency.target * cfg.emergency_threshold
        debts_met = all(b < DEBT_PAID_THRESHOLD for b in state.debts)
        retirement_met = (
            state.month >= goals.retirement.months_to_retire
            and state.retirement >= goals.retirement.target * cfg.retirement_threshold
        )
        college_met = all(
            state.college[i] >= c.target * cfg.college_threshold
            for i, c in enumerate(goals.colleges)
            if state.month >= c.months_until
        )
        return emergency_met, debts_met, retirement_met, college_met

    def _final_result(
        self,
        budget: float,
        state: SimulationState,
        timeline: List[TimelineEntry],
        first_allocation: MonthlyAllocation,
        allocations: List[MonthlyAllocation],
    ) -> SimulationResult:
        """Evaluate the goals on the state left at the end of the horizon."""
        goals = self.goals
        cfg = self.config
        college_shortfall = 0.0
        for i, c in enumerate(goals.colleges):
            if state.college[i] < c.target * cfg.college_threshold:
                college_shortfall += c.target - state.college[i]

        emergency_met = state.emergency >= goals.emergency.target * cfg.emergency_threshold
        debts_met = all(b < DEBT_PAID_THRESHOLD for b in state.debts)
        retirement_met = state.retirement >= goals.retirement.target * cfg.retirement_threshold
        college_met = college_shortfall == 0

        logger.debug(
            "budget=%.2f exhausted horizon: emergency=%s debts=%s retirement=%s college=%s",
            budget, emergency_met, debts_met, retirement_met, college_met,
        )
        return SimulationResult(
            budget=budget,
            success=emergency_met and debts_met and retirement_met and college_met,
            timeline=tuple(timeline),
            final_state=state,
            emergency_met=emergency_met,
            debts_met=debts_met,
            retirement_met=retirement_met,
            college_met=college_met,
            retirement_shortfall=max(0.0, goals.retirement.target - state.retirement),
            college_shortfall=college_shortfall,
            first_allocation=first_allocation,
            months_simulated=state.month,
            allocations=tuple(allocations),
        )
