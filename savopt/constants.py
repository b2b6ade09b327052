"""
Global constants for SavOpt.

Purpose
-------
Centralizes policy figures and magic numbers used by the goal deriver,
the cash-flow simulator and the budget optimizer, so the waterfall rules
read the same everywhere.

Usage
-----
>>> from savopt.constants import TAX_RATE, MIN_HORIZON_MONTHS
>>>
>>> after_tax_monthly = income / 12 * (1 - TAX_RATE)

Categories
----------
- Household: tax, drawdown and inflation assumptions
- Growth: tiered rate-of-return schedule, brokerage growth
- Waterfall: emergency pacing, debt/goal satisfaction thresholds
- Optimization: search bracket factors, iteration caps, tolerances
- Social Security: 2025 PIA bend points and claiming adjustments
"""

from typing import Tuple

__all__ = [
    # Household
    "TAX_RATE",
    "RETIRE_DRAWDOWN_RATE",
    "COLLEGE_INFLATION",
    "COLLEGE_START_AGE",
    "MONTHS_PER_YEAR",
    # Growth
    "GROWTH_TIERS",
    "SHORT_HORIZON_RATE",
    "BROKERAGE_RATE",
    # Waterfall
    "MIN_HORIZON_MONTHS",
    "EMERGENCY_MIN_CONTRIBUTION",
    "EMERGENCY_SMOOTHING_MONTHS",
    "DEBT_PAID_THRESHOLD",
    "DEFAULT_EMERGENCY_THRESHOLD",
    "DEFAULT_COLLEGE_THRESHOLD",
    "DEFAULT_COLLEGE_CAP_MULTIPLIER",
    # Optimization
    "MIN_SEARCH_BUDGET",
    "LOWER_BRACKET_FACTOR",
    "UPPER_INCOME_FACTOR",
    "UPPER_NAIVE_FACTOR",
    "DEFAULT_MAX_ITERS",
    "DEFAULT_TOLERANCE",
    "DEFAULT_SEARCH_STEP",
    "DEFAULT_PROBE_POINTS",
    # Social Security
    "SS_BEND_POINT_1",
    "SS_BEND_POINT_2",
    "SS_RATES",
    "SS_MAX_BENEFIT_FRA",
    "SS_FULL_RETIREMENT_AGE",
    "SS_EARLY_RETIREMENT_AGE",
    "SS_MAX_CLAIM_AGE",
    "SS_DELAY_CREDIT",
    "SS_SPOUSAL_MULTIPLIER",
]


# =============================================================================
# Household Assumptions
# =============================================================================

TAX_RATE: float = 0.28
"""Flat effective tax rate applied to gross income."""

RETIRE_DRAWDOWN_RATE: float = 0.04
"""Discount rate for annuity present values (retirement and college drawdown)."""

COLLEGE_INFLATION: float = 0.05
"""Annual college cost inflation."""

COLLEGE_START_AGE: int = 18
"""Age at which a child enrolls in college."""

MONTHS_PER_YEAR: int = 12
"""Number of months in a year."""


# =============================================================================
# Growth
# =============================================================================

GROWTH_TIERS: Tuple[Tuple[float, float], ...] = ((10, 0.07), (5, 0.05))
"""(years threshold, rate) pairs: horizon strictly above threshold earns rate.

Horizons of 5 years or less fall back to 3%.
"""

SHORT_HORIZON_RATE: float = 0.03
"""Growth rate for horizons that do not exceed any tier threshold."""

BROKERAGE_RATE: float = 0.07
"""Nominal annual growth of the brokerage overflow account."""


# =============================================================================
# Waterfall
# =============================================================================

MIN_HORIZON_MONTHS: int = 480
"""Floor of the simulated horizon (40 years)."""

EMERGENCY_MIN_CONTRIBUTION: float = 100.0
"""Minimum monthly emergency top-up while a gap remains."""

EMERGENCY_SMOOTHING_MONTHS: int = 6
"""The emergency gap is refilled at roughly 1/6 of the gap per month."""

DEBT_PAID_THRESHOLD: float = 1.0
"""A debt balance below this amount counts as paid off."""

DEFAULT_EMERGENCY_THRESHOLD: float = 0.95
"""Fraction of the emergency target that counts as met."""

DEFAULT_COLLEGE_THRESHOLD: float = 0.90
"""Fraction of each child's college target that counts as met."""

DEFAULT_COLLEGE_CAP_MULTIPLIER: float = 1.5
"""Per-child cap on proportional college contributions, as a multiple of the
required monthly amount."""


# =============================================================================
# Optimization
# =============================================================================

MIN_SEARCH_BUDGET: float = 100.0
"""Lowest budget the search bracket ever starts from."""

LOWER_BRACKET_FACTOR: float = 0.3
"""lo = max(MIN_SEARCH_BUDGET, naive_total * LOWER_BRACKET_FACTOR)."""

UPPER_INCOME_FACTOR: float = 0.95
"""hi >= after_tax_monthly * UPPER_INCOME_FACTOR."""

UPPER_NAIVE_FACTOR: float = 2.0
"""hi >= naive_total * UPPER_NAIVE_FACTOR."""

DEFAULT_MAX_ITERS: int = 60
"""Default iteration cap of the budget search."""

DEFAULT_TOLERANCE: float = 5.0
"""Search stops once the bracket is narrower than this many currency units."""

DEFAULT_SEARCH_STEP: float = 1.0
"""Bracket bounds move one currency unit past a tested midpoint."""

DEFAULT_PROBE_POINTS: int = 16
"""Grid size used by the guarded search to look for non-monotonic pockets."""


# =============================================================================
# Social Security (2025 PIA formula)
# =============================================================================

SS_BEND_POINT_1: float = 1226.0
"""First PIA bend point (monthly)."""

SS_BEND_POINT_2: float = 7391.0
"""Second PIA bend point (monthly)."""

SS_RATES: Tuple[float, float, float] = (0.90, 0.32, 0.15)
"""Replacement rates below, between and above the bend points."""

SS_MAX_BENEFIT_FRA: float = 4018.0
"""Maximum monthly benefit at full retirement age."""

SS_FULL_RETIREMENT_AGE: int = 67
SS_EARLY_RETIREMENT_AGE: int = 62
SS_MAX_CLAIM_AGE: int = 70

SS_DELAY_CREDIT: float = 0.08
"""Annual delayed retirement credit past full retirement age."""

SS_SPOUSAL_MULTIPLIER: float = 1.5
"""Household benefit multiplier for married filers."""
