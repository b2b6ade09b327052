"""
Custom exceptions for SavOpt.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all SavOpt modules. All exceptions inherit from SavOptError,
enabling catch-all handling at the HTTP and CLI boundaries.

Exception Hierarchy
-------------------
SavOptError (base)
├── ConfigurationError - Unknown engine variant
├── ValidationError - Household data validation failures
└── OptimizationError - Parent of budget search failures
    └── InfeasibleError - No budget in the search bracket meets every goal

Usage
-----
>>> from savopt.exceptions import InfeasibleError
>>>
>>> try:
...     result = optimizer.optimize().require_feasible()
... except InfeasibleError as e:
...     logger.warning("No feasible budget: %s", e)
"""


class SavOptError(Exception):
    """
    Base exception for all SavOpt errors.

    Examples
    --------
    >>> try:
    ...     goals = derive_goals(household, config)
    ... except SavOptError as e:
    ...     logger.error("Goal derivation failed: %s", e)
    """
    pass


class ConfigurationError(SavOptError):
    """
    Unknown configuration variant.

    Raised by ``variant_configs`` when the variant name is neither
    ``"goals"`` nor ``"optimizer"``. Field-level checks on EngineConfig and
    OptimizationConfig raise pydantic's ValidationError instead.

    Examples
    --------
    >>> variant_configs("linear")
    Traceback (most recent call last):
    ...
    savopt.exceptions.ConfigurationError: Unknown variant: 'linear'
    """
    pass


class ValidationError(SavOptError):
    """
    Household data validation failures.

    Raised when derived or supplied data fails validation checks, such as:
    - A negative monthly budget handed to the simulator
    - A budget grid that is empty or not finite

    Examples
    --------
    >>> raise ValidationError(
    ...     f"monthly_budget must be non-negative, got {budget}"
    ... )
    """
    pass


class OptimizationError(SavOptError):
    """
    Parent class for budget search failures.

    Not raised directly; catch it to handle InfeasibleError and any future
    search failure together.
    """
    pass


class InfeasibleError(OptimizationError):
    """
    No feasible budget exists.

    Raised when every budget inside the search bracket fails at least one
    goal, for example when the retirement target exceeds what the whole
    after-tax income can fund.

    Examples
    --------
    >>> raise InfeasibleError(
    ...     f"No budget in [{lo:,.0f}, {hi:,.0f}] meets all goals. "
    ...     f"Consider: (1) a later retirement age, (2) a lower income "
    ...     f"replacement target, (3) longer debt payoff horizons."
    ... )
    """
    pass
