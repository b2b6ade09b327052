# savopt/goals.py
"""
Goal derivation module: household parameters to a static goal set.

Purpose
-------
Converts a HouseholdInput into the immutable targets the cash-flow
simulator chases: an emergency fund, amortizing debts, a retirement
balance and one college fund per child. Every amount is computed once
with the formula library; nothing here changes during a simulation.

Goal Targets
------------
Emergency:
    target = after_tax_monthly × emergency_months
Debt (per loan, avalanche order):
    payment = LoanPMT(balance, apr, payoff_months)
Retirement:
    target = PVAnnuity(income_needed / 12, 4%, months_drawn)
    (income_needed net of the public benefit when the offset is enabled)
College (per child):
    target = PVAnnuity(FV(cost, 5%, months_until) / 12, 4%, college_years × 12)

Design Principles
-----------------
- Immutable specifications: goals are frozen dataclasses
- Single derivation: runs once per request, before any simulation
- Variant-aware: EngineConfig toggles benefit offset and financial aid

Example
-------
>>> from savopt.config import HouseholdInput, EngineConfig
>>> household = HouseholdInput(income=120_000, cc_bal=10_000)
>>> goals = derive_goals(household, EngineConfig.goals_planner())
>>> goals.debts[0].name
'Credit Card'
>>> goals.horizon_months
480
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

from .benefits import social_security_benefit
from .config import EngineConfig, HouseholdInput
from .constants import (
    COLLEGE_INFLATION,
    COLLEGE_START_AGE,
    EMERGENCY_MIN_CONTRIBUTION,
    EMERGENCY_SMOOTHING_MONTHS,
    MIN_HORIZON_MONTHS,
    MONTHS_PER_YEAR,
    RETIRE_DRAWDOWN_RATE,
    SS_EARLY_RETIREMENT_AGE,
    TAX_RATE,
)
from .formulas import (
    future_value,
    loan_payment,
    payment_for_future_value,
    present_value_annuity,
    tiered_growth_rate,
)
from .utils import check_non_negative

__all__ = [
    "Debt",
    "EmergencyGoal",
    "RetirementGoal",
    "CollegeGoal",
    "GoalSet",
    "derive_goals",
]


def _years_to_months(years: float) -> int:
    return int(round(years * MONTHS_PER_YEAR))


# ---------------------------------------------------------------------------
# Goal Specifications
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Debt:
    """
    Amortizing debt paid down by the avalanche method.

    Parameters
    ----------
    name : str
        Display name ("Credit Card", "Auto Loan", "Student Loan").
    balance : float
        Starting principal (currency units, > 0).
    apr : float
        Annual percentage rate as a fraction (0.22 for 22%).
    years : float
        Payoff horizon in years.
    months : int
        Payoff horizon in months.
    monthly_payment : float
        Level payment that amortizes ``balance`` over ``months``.
    total_interest : float
        ``monthly_payment × months - balance``.
    """
    name: str
    balance: float
    apr: float
    years: float
    months: int
    monthly_payment: float
    total_interest: float

    def __post_init__(self):
        check_non_negative("balance", self.balance)
        check_non_negative("apr", self.apr)
        if self.months < 0:
            raise ValueError(f"months must be ≥ 0, got {self.months}")

    @classmethod
    def from_terms(cls, name: str, balance: float, apr_percent: float, years: float) -> "Debt":
        """Build a debt from its balance, APR in percent and payoff years."""
        apr = apr_percent / 100
        months = _years_to_months(years)
        payment = loan_payment(balance, apr, months)
        return cls(
            name=name,
            balance=float(balance),
            apr=apr,
            years=float(years),
            months=months,
            monthly_payment=payment,
            total_interest=payment * months - balance,
        )

    @property
    def monthly_rate(self) -> float:
        return self.apr / MONTHS_PER_YEAR


@dataclass(frozen=True)
class EmergencyGoal:
    """Emergency fund sized in months of after-tax income."""
    target: float
    balance: float

    @property
    def gap(self) -> float:
        return max(0.0, self.target - self.balance)

    @property
    def monthly_contribution(self) -> float:
        """Paced top-up: at least 100 and about one sixth of the gap."""
        if self.gap <= 0:
            return 0.0
        return max(EMERGENCY_MIN_CONTRIBUTION, self.gap / EMERGENCY_SMOOTHING_MONTHS)


@dataclass(frozen=True)
class RetirementGoal:
    """
    Retirement balance needed at the retirement month.

    Attributes
    ----------
    current_balance : float
        Balance today.
    growth_rate : float
        Tiered accumulation rate fixed for the whole horizon.
    target : float
        Balance needed at retirement.
    years_to_retire : float
        Accumulation horizon in years (at least one).
    months_to_retire : int
        The same horizon rounded to whole months.
    months_in_retirement : int
        Drawdown horizon (at least one year).
    income_annual : float
        Desired retirement income (income × retire_income_pct).
    benefit_monthly, benefit_annual : float
        Estimated public benefit (zero without the offset).
    income_needed_annual : float
        Desired income net of the benefit.
    fv_of_current : float
        Current balance grown to the retirement month.
    gap, monthly_needed : float
        Shortfall at retirement and the steady deposit that closes it.
    has_match : bool
        Whether an employer match applies.
    match_rate : float
        Employer match per unit contributed (0.5 for 50%).
    matchable_contribution, match_received : float
        Monthly contribution that earns the full match, and that match.
    """
    current_balance: float
    growth_rate: float
    target: float
    years_to_retire: float
    months_to_retire: int
    months_in_retirement: int
    income_annual: float
    benefit_monthly: float
    benefit_annual: float
    income_needed_annual: float
    fv_of_current: float
    gap: float
    monthly_needed: float
    has_match: bool
    match_rate: float
    matchable_contribution: float
    match_received: float


@dataclass(frozen=True)
class CollegeGoal:
    """
    College fund for one child.

    Attributes
    ----------
    child_num : int
        1-based child number.
    age : float
        Child's age today.
    years_until : float
        Years until enrollment (at least one).
    months_until : int
        The same wait rounded to whole months.
    growth_rate : float
        Tiered rate for ``years_until``.
    future_cost : float
        Yearly cost at enrollment.
    target : float
        Present value at enrollment of the whole college period.
    current_saved : float
        This child's share of current college savings.
    fv_saved : float
        ``current_saved`` grown to enrollment.
    gap, monthly : float
        Shortfall at enrollment and the steady deposit that closes it.
    """
    child_num: int
    age: float
    years_until: float
    months_until: int
    growth_rate: float
    future_cost: float
    target: float
    current_saved: float
    fv_saved: float
    gap: float
    monthly: float


# ---------------------------------------------------------------------------
# Goal Collection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GoalSet:
    """
    Immutable collection of every goal derived for one household.

    Debts are stored in avalanche order (highest APR first, ties keep the
    credit card, auto loan, student loan order). ``horizon_months`` and
    ``naive_total_monthly`` feed the simulator and the search bracket.
    """
    after_tax_monthly: float
    current_age: float
    emergency: EmergencyGoal
    debts: Tuple[Debt, ...]
    retirement: RetirementGoal
    colleges: Tuple[CollegeGoal, ...]
    college_balance: float
    brokerage_balance: float
    naive_floor: float = 0.0

    @property
    def total_debt(self) -> float:
        return sum(d.balance for d in self.debts)

    @property
    def total_debt_payment(self) -> float:
        return sum(d.monthly_payment for d in self.debts)

    @property
    def total_debt_interest(self) -> float:
        return sum(d.total_interest for d in self.debts)

    @property
    def total_college_monthly(self) -> float:
        return sum(c.monthly for c in self.colleges)

    @property
    def total_assets(self) -> float:
        return (
            self.emergency.balance
            + self.retirement.current_balance
            + self.college_balance
            + self.brokerage_balance
        )

    @property
    def net_worth(self) -> float:
        return self.total_assets - self.total_debt

    @property
    def horizon_months(self) -> int:
        """Months to simulate: the latest deadline, never less than 480."""
        return max(
            self.retirement.months_to_retire,
            *(d.months for d in self.debts),
            *(c.months_until for c in self.colleges),
            MIN_HORIZON_MONTHS,
        )

    @property
    def naive_total_monthly(self) -> float:
        """
        Sum of every goal's standalone monthly requirement.

        Ignores the benefit of overflow between buckets, so it overstates
        the budget actually needed; the search bracket is built around it.
        Never below ``naive_floor``.
        """
        r = self.retirement
        retire_beyond_match = max(
            0.0, r.monthly_needed - r.matchable_contribution - r.match_received
        )
        return max(
            self.naive_floor,
            self.emergency.monthly_contribution
            + self.total_debt_payment
            + r.matchable_contribution
            + self.total_college_monthly
            + retire_beyond_match,
        )

    def __repr__(self) -> str:
        return (
            f"GoalSet(debts={len(self.debts)}, children={len(self.colleges)}, "
            f"retire_target={self.retirement.target:,.0f}, "
            f"horizon={self.horizon_months} months)"
        )


# ---------------------------------------------------------------------------
# Derivation
# ---------------------------------------------------------------------------

def _derive_debts(household: HouseholdInput) -> Tuple[Debt, ...]:
    terms = [
        ("Credit Card", household.cc_bal, household.cc_apr, household.cc_payoff_years),
        ("Auto Loan", household.auto_bal, household.auto_apr, household.auto_payoff_years),
        ("Student Loan", household.sl_bal, household.sl_apr, household.sl_payoff_years),
    ]
    debts = [Debt.from_terms(*t) for t in terms if t[1] > 0]
    # sorted() is stable, so equal APRs keep insertion order
    return tuple(sorted(debts, key=lambda d: -d.apr))


def _retirement_target(
    household: HouseholdInput,
    income_annual: float,
    include_benefit_offset: bool,
) -> Tuple[float, float, float]:
    """Return (target, monthly benefit, income needed per year)."""
    if not include_benefit_offset:
        months_in_retirement = _years_to_months(max(1, household.life_expectancy - household.retire_age))
        target = present_value_annuity(
            income_annual / MONTHS_PER_YEAR, RETIRE_DRAWDOWN_RATE, months_in_retirement
        )
        return target, 0.0, income_annual

    claim_age = max(household.retire_age, SS_EARLY_RETIREMENT_AGE)
    benefit = social_security_benefit(household.income, household.married, claim_age)
    needed_annual = max(0.0, income_annual - benefit * MONTHS_PER_YEAR)
    months_with_benefit = _years_to_months(household.life_expectancy - claim_age)
    target = present_value_annuity(
        needed_annual / MONTHS_PER_YEAR, RETIRE_DRAWDOWN_RATE, months_with_benefit
    )
    if household.retire_age < SS_EARLY_RETIREMENT_AGE:
        # bridge years before benefits can be claimed are funded in full
        bridge_months = _years_to_months(SS_EARLY_RETIREMENT_AGE - household.retire_age)
        target += present_value_annuity(
            income_annual / MONTHS_PER_YEAR, RETIRE_DRAWDOWN_RATE, bridge_months
        )
    return target, benefit, needed_annual


def _derive_retirement(household: HouseholdInput, config: EngineConfig) -> RetirementGoal:
    years_to_retire = max(1, household.retire_age - household.current_age)
    months_to_retire = _years_to_months(years_to_retire)
    months_in_retirement = _years_to_months(max(1, household.life_expectancy - household.retire_age))
    growth_rate = tiered_growth_rate(years_to_retire)
    income_annual = household.income * household.retire_income_pct / 100

    target, benefit, needed_annual = _retirement_target(
        household, income_annual, config.include_benefit_offset
    )
    fv_current = future_value(household.retirement_bal, growth_rate, months_to_retire)
    gap = max(0.0, target - fv_current)

    if household.has_401k:
        matchable = household.income * household.match_up_to / 100 / MONTHS_PER_YEAR
        match_rate = household.match_percent / 100
    else:
        matchable = 0.0
        match_rate = 0.0

    return RetirementGoal(
        current_balance=household.retirement_bal,
        growth_rate=growth_rate,
        target=target,
        years_to_retire=years_to_retire,
        months_to_retire=months_to_retire,
        months_in_retirement=months_in_retirement,
        income_annual=income_annual,
        benefit_monthly=benefit,
        benefit_annual=benefit * MONTHS_PER_YEAR,
        income_needed_annual=needed_annual,
        fv_of_current=fv_current,
        gap=gap,
        monthly_needed=payment_for_future_value(gap, growth_rate, months_to_retire),
        has_match=household.has_401k,
        match_rate=match_rate,
        matchable_contribution=matchable,
        match_received=matchable * match_rate,
    )


def _derive_colleges(household: HouseholdInput, config: EngineConfig) -> Tuple[CollegeGoal, ...]:
    ages = household.child_ages
    if not ages:
        return ()

    cost = household.college_cost_year
    if config.allow_financial_aid and household.use_financial_aid:
        cost *= max(0.0, 1 - household.aid_percent / 100)
    per_child_saved = household.college_bal / len(ages)

    colleges = []
    for i, age in enumerate(ages):
        years_until = max(1, COLLEGE_START_AGE - age)
        months_until = _years_to_months(years_until)
        growth_rate = tiered_growth_rate(years_until)
        future_cost = future_value(cost, COLLEGE_INFLATION, months_until)
        target = present_value_annuity(
            future_cost / MONTHS_PER_YEAR,
            RETIRE_DRAWDOWN_RATE,
            _years_to_months(household.college_years),
        )
        fv_saved = future_value(per_child_saved, growth_rate, months_until)
        gap = max(0.0, target - fv_saved)
        colleges.append(CollegeGoal(
            child_num=i + 1,
            age=age,
            years_until=years_until,
            months_until=months_until,
            growth_rate=growth_rate,
            future_cost=future_cost,
            target=target,
            current_saved=per_child_saved,
            fv_saved=fv_saved,
            gap=gap,
            monthly=payment_for_future_value(gap, growth_rate, months_until),
        ))
    return tuple(colleges)


def derive_goals(household: HouseholdInput, config: Optional[EngineConfig] = None) -> GoalSet:
    """
    Derive the full goal set for *household*.

    Parameters
    ----------
    household : HouseholdInput
        Validated household parameters.
    config : EngineConfig, optional
        Variant switches; defaults to the goals planner.

    Returns
    -------
    GoalSet
        Immutable goals consumed by CashFlowSimulator and BudgetOptimizer.
    """
    config = config or EngineConfig.goals_planner()
    after_tax_monthly = household.income / MONTHS_PER_YEAR * (1 - TAX_RATE)

    return GoalSet(
        after_tax_monthly=after_tax_monthly,
        current_age=household.current_age,
        emergency=EmergencyGoal(
            target=after_tax_monthly * household.emergency_months,
            balance=household.emergency_bal,
        ),
        debts=_derive_debts(household),
        retirement=_derive_retirement(household, config),
        colleges=_derive_colleges(household, config),
        college_balance=household.college_bal,
        brokerage_balance=household.brokerage_bal,
        naive_floor=config.naive_total_floor,
    )
