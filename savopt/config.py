"""
Configuration management module for SavOpt.

Purpose
-------
Centralized configuration using Pydantic models for type-safe parameter
management, validation, and serialization. Covers the household request
payload, the engine switches that distinguish the two product variants,
the budget search parameters and process-wide settings read from the
environment.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Wire-compatible: Request models accept camelCase JSON field names
- Environment-aware: AppSettings reads SAVOPT_* variables and .env files

Example
-------
>>> from savopt.config import HouseholdInput, EngineConfig, OptimizationConfig
>>> household = HouseholdInput.model_validate({"income": 120_000, "currentAge": 35})
>>> engine = EngineConfig.goals_planner()
>>> search = OptimizationConfig.goals_planner()
>>>
>>> # Serialize to dict/JSON using wire names
>>> payload = household.model_dump(by_alias=True)
>>> loaded = HouseholdInput.model_validate(payload)
"""

from __future__ import annotations
from typing import Optional, Literal, List, Tuple

from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .constants import (
    DEFAULT_COLLEGE_CAP_MULTIPLIER,
    DEFAULT_COLLEGE_THRESHOLD,
    DEFAULT_EMERGENCY_THRESHOLD,
    DEFAULT_MAX_ITERS,
    DEFAULT_PROBE_POINTS,
    DEFAULT_SEARCH_STEP,
    DEFAULT_TOLERANCE,
    MIN_SEARCH_BUDGET,
)

__all__ = [
    "HouseholdInput",
    "EvaluationInput",
    "EngineConfig",
    "OptimizationConfig",
    "AppSettings",
    "Variant",
    "variant_configs",
]


Variant = Literal["goals", "optimizer"]


# ---------------------------------------------------------------------------
# Household Request
# ---------------------------------------------------------------------------

class HouseholdInput(BaseModel):
    """
    Household parameters for goal derivation.

    Every field except ``income`` is optional and falls back to the default
    below. JSON payloads use camelCase names (``emergencyBal``, ``kidAges``,
    ``has401k``); Python callers may use either form.

    Attributes
    ----------
    income : float
        Gross annual income. Must be a non-negative number (strings and
        booleans are rejected).
    married : bool
        Married filers receive the spousal benefit multiplier.
    emergency_bal, emergency_months : float
        Current emergency savings and target in months of after-tax income.
    cc_bal, cc_apr, cc_payoff_years : float
        Credit card balance, APR in percent and payoff horizon in years.
        The same triple exists for the student loan (``sl_*``) and the auto
        loan (``auto_*``).
    current_age, retire_age, life_expectancy : float
        Ages in years; fractional ages are allowed.
    retire_income_pct : float
        Desired retirement income as a percentage of current income.
    retirement_bal : float
        Current retirement savings.
    has_401k, match_percent, match_up_to : bool, float, float
        Employer match: ``match_percent``% of contributions up to
        ``match_up_to``% of income.
    has_kids, num_kids, kid_ages : bool, int, list of float
        Children to fund. Missing ages count as newborns.
    college_cost_year, college_years, college_bal : float
        Yearly college cost in today's money, years of college per child and
        current college savings (split evenly across children).
    use_financial_aid, aid_percent : bool, float
        Expected aid as a percentage of college cost.
    brokerage_bal : float
        Current taxable brokerage balance.

    Examples
    --------
    >>> household = HouseholdInput(income=90_000, has_kids=True, num_kids=2, kid_ages=[4])
    >>> household.child_ages
    [4.0, 0.0]
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    income: float = Field(ge=0, strict=True, description="Gross annual income")
    married: bool = Field(default=False, description="Married filing jointly")

    emergency_bal: float = Field(default=0.0, ge=0, description="Emergency fund balance")
    emergency_months: float = Field(default=3.0, ge=0, description="Emergency target in months")

    cc_bal: float = Field(default=0.0, ge=0, description="Credit card balance")
    cc_apr: float = Field(default=22.0, ge=0, description="Credit card APR (%)")
    cc_payoff_years: float = Field(default=2.0, ge=0, description="Credit card payoff years")
    sl_bal: float = Field(default=0.0, ge=0, description="Student loan balance")
    sl_apr: float = Field(default=6.5, ge=0, description="Student loan APR (%)")
    sl_payoff_years: float = Field(default=10.0, ge=0, description="Student loan payoff years")
    auto_bal: float = Field(default=0.0, ge=0, description="Auto loan balance")
    auto_apr: float = Field(default=7.5, ge=0, description="Auto loan APR (%)")
    auto_payoff_years: float = Field(default=4.0, ge=0, description="Auto loan payoff years")

    current_age: float = Field(default=35.0, ge=0, description="Current age")
    retire_age: float = Field(default=65.0, ge=0, description="Retirement age")
    retire_income_pct: float = Field(default=80.0, ge=0, description="Retirement income (% of income)")
    life_expectancy: float = Field(default=90.0, ge=0, description="Life expectancy")
    retirement_bal: float = Field(default=0.0, ge=0, description="Retirement balance")
    has_401k: bool = Field(default=False, alias="has401k", description="Employer match available")
    match_percent: float = Field(default=50.0, ge=0, description="Employer match (%)")
    match_up_to: float = Field(default=6.0, ge=0, description="Matchable contribution (% of income)")

    has_kids: bool = Field(default=False, description="Fund college for children")
    num_kids: int = Field(default=0, ge=0, description="Number of children")
    kid_ages: List[float] = Field(default_factory=list, description="Children's ages")
    college_cost_year: float = Field(default=40_000.0, ge=0, description="Yearly college cost today")
    college_years: float = Field(default=4.0, ge=0, description="Years of college")
    college_bal: float = Field(default=0.0, ge=0, description="College savings balance")
    use_financial_aid: bool = Field(default=False, description="Expect financial aid")
    aid_percent: float = Field(default=25.0, ge=0, description="Financial aid (% of cost)")

    brokerage_bal: float = Field(default=0.0, ge=0, description="Brokerage balance")

    @field_validator("kid_ages")
    @classmethod
    def validate_kid_ages(cls, v):
        """Ensure ages are non-negative."""
        if any(age < 0 for age in v):
            raise ValueError("kid ages must be non-negative")
        return v

    @property
    def child_ages(self) -> List[float]:
        """Ages for each funded child, zero-padded to ``num_kids``."""
        if not self.has_kids or self.num_kids <= 0:
            return []
        ages = list(self.kid_ages[: self.num_kids])
        return ages + [0.0] * (self.num_kids - len(ages))


class EvaluationInput(HouseholdInput):
    """
    Household parameters plus a monthly budget to evaluate.

    Used by the savings optimizer variant, which simulates the caller's own
    budget and compares it against the optimal one.
    """

    monthly_budget: float = Field(ge=0, strict=True, description="Monthly savings budget to evaluate")


# ---------------------------------------------------------------------------
# Engine Configuration
# ---------------------------------------------------------------------------

class EngineConfig(BaseModel):
    """
    Switches of the unified goal deriver and cash-flow simulator.

    Attributes
    ----------
    include_benefit_offset : bool
        Reduce the retirement target by the estimated Social Security benefit.
    allow_financial_aid : bool
        Honour ``use_financial_aid`` when pricing college.
    college_allocation : {"fixed", "proportional"}
        ``fixed`` gives each active child its required monthly amount in
        order; ``proportional`` splits the remaining budget evenly, capped at
        ``college_cap_multiplier`` times each child's required amount.
    college_cap_multiplier : float
        Cap used by the proportional strategy.
    extra_debt_pass : bool
        After the employer match, throw leftover budget at debts in avalanche
        order.
    naive_total_floor : float
        Lower bound on the naive monthly total that seeds the search bracket.
    emergency_threshold, retirement_threshold, college_threshold : float
        Fraction of each target that counts as met.
    evaluate_fixed_budget : float, optional
        Monthly budget to simulate as-is in addition to the optimum.

    Examples
    --------
    >>> EngineConfig.goals_planner().retirement_threshold
    0.9
    >>> EngineConfig.savings_optimizer().college_allocation
    'proportional'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    include_benefit_offset: bool = Field(
        default=True,
        description="Offset the retirement target by the public benefit"
    )
    allow_financial_aid: bool = Field(
        default=True,
        description="Apply expected financial aid to college cost"
    )
    college_allocation: Literal["fixed", "proportional"] = Field(
        default="fixed",
        description="College bucket strategy"
    )
    college_cap_multiplier: float = Field(
        default=DEFAULT_COLLEGE_CAP_MULTIPLIER,
        ge=1.0,
        le=10.0,
        description="Proportional strategy cap (multiple of required monthly)"
    )
    extra_debt_pass: bool = Field(
        default=False,
        description="Second avalanche pass after the employer match"
    )
    naive_total_floor: float = Field(
        default=0.0,
        ge=0,
        description="Floor on the naive monthly total"
    )
    emergency_threshold: float = Field(
        default=DEFAULT_EMERGENCY_THRESHOLD,
        gt=0,
        le=1,
        description="Fraction of emergency target that counts as met"
    )
    retirement_threshold: float = Field(
        default=0.90,
        gt=0,
        le=1,
        description="Fraction of retirement target that counts as met"
    )
    college_threshold: float = Field(
        default=DEFAULT_COLLEGE_THRESHOLD,
        gt=0,
        le=1,
        description="Fraction of each college target that counts as met"
    )
    evaluate_fixed_budget: Optional[float] = Field(
        default=None,
        ge=0,
        description="Caller-supplied budget to simulate"
    )

    @classmethod
    def goals_planner(cls) -> "EngineConfig":
        """Benefit offset, financial aid, fixed college amounts, 90% retirement."""
        return cls()

    @classmethod
    def savings_optimizer(cls, monthly_budget: Optional[float] = None) -> "EngineConfig":
        """No benefit offset, proportional college, extra debt pass, 95% retirement.

        The naive monthly total is floored at MIN_SEARCH_BUDGET.
        """
        return cls(
            include_benefit_offset=False,
            allow_financial_aid=False,
            college_allocation="proportional",
            extra_debt_pass=True,
            naive_total_floor=MIN_SEARCH_BUDGET,
            retirement_threshold=0.95,
            evaluate_fixed_budget=monthly_budget,
        )


# ---------------------------------------------------------------------------
# Optimization Configuration
# ---------------------------------------------------------------------------

class OptimizationConfig(BaseModel):
    """
    Budget search parameters.

    Attributes
    ----------
    max_iterations : int
        Iteration cap of the binary search.
    tolerance : float
        Stop once the bracket is narrower than this (currency units).
    step : float
        Bounds move this far past a tested midpoint.
    search_strategy : {"binary", "guarded"}
        ``binary`` assumes success is monotonic in the budget. ``guarded``
        additionally probes a grid below the binary optimum and refines into
        any lower successful pocket.
    probe_points : int
        Grid size for the guarded strategy.

    Examples
    --------
    >>> OptimizationConfig(search_strategy="guarded", probe_points=32).probe_points
    32
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_iterations: int = Field(
        default=DEFAULT_MAX_ITERS,
        ge=1,
        le=500,
        description="Maximum search iterations"
    )
    tolerance: float = Field(
        default=DEFAULT_TOLERANCE,
        gt=0,
        le=1_000,
        description="Bracket width at which the search stops"
    )
    step: float = Field(
        default=DEFAULT_SEARCH_STEP,
        ge=0,
        le=100,
        description="Distance bounds move past a tested midpoint"
    )
    search_strategy: Literal["binary", "guarded"] = Field(
        default="binary",
        description="Budget search strategy"
    )
    probe_points: int = Field(
        default=DEFAULT_PROBE_POINTS,
        ge=2,
        le=1_000,
        description="Grid size for the guarded search"
    )

    @classmethod
    def goals_planner(cls, **overrides) -> "OptimizationConfig":
        """Search settings of the goals planner (60 iterations)."""
        return cls(**{"max_iterations": 60, **overrides})

    @classmethod
    def savings_optimizer(cls, **overrides) -> "OptimizationConfig":
        """Search settings of the savings optimizer (40 iterations)."""
        return cls(**{"max_iterations": 40, **overrides})


def variant_configs(
    variant: Variant,
    monthly_budget: Optional[float] = None,
    **search_overrides,
) -> Tuple[EngineConfig, OptimizationConfig]:
    """
    Return the (engine, search) configuration pair of a product variant.

    Parameters
    ----------
    variant : {"goals", "optimizer"}
        Product variant.
    monthly_budget : float, optional
        Budget to evaluate (optimizer variant only).
    **search_overrides
        Fields forwarded to OptimizationConfig.
    """
    if variant == "goals":
        return EngineConfig.goals_planner(), OptimizationConfig.goals_planner(**search_overrides)
    if variant == "optimizer":
        return (
            EngineConfig.savings_optimizer(monthly_budget),
            OptimizationConfig.savings_optimizer(**search_overrides),
        )
    raise ConfigurationError(f"Unknown variant: {variant!r}")


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Supports .env files for local development. Environment variables
    are prefixed with SAVOPT_ (e.g., SAVOPT_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Enable debug mode (forces DEBUG logging).
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR".
    host, port : str, int
        Bind address for ``savopt serve``.
    start_year : int, optional
        Calendar year of simulation month 0. Defaults to the current year.

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.port
    8000
    """

    model_config = SettingsConfigDict(
        env_prefix="SAVOPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )
    host: str = Field(
        default="127.0.0.1",
        description="HTTP bind host"
    )
    port: int = Field(
        default=8000,
        ge=1,
        le=65_535,
        description="HTTP bind port"
    )
    start_year: Optional[int] = Field(
        default=None,
        ge=1900,
        le=3000,
        description="Calendar year of simulation month 0"
    )
