"""
Budget optimization module for SavOpt.

Purpose
-------
Finds the minimum monthly budget for which CashFlowSimulator reports
every goal as met, by numeric search over a continuous budget.

Search Problem
--------------
    min B ∈ [lo, hi]  s.t.  simulate(B).success

    lo = max(100, naive × 0.3)
    hi = max(after_tax_monthly × 0.95, naive × 2)

where ``naive`` is the sum of each goal's standalone monthly requirement.

Strategies
----------
- "binary": bisection on the success predicate. Assumes monotonicity: if
  B succeeds then every B' > B succeeds. Bounds step one currency unit
  past each midpoint; stops after ``max_iterations`` or once the bracket
  is narrower than ``tolerance``.
- "guarded": binary search, then an evenly spaced probe grid below the
  binary optimum. The waterfall's bucket caps (emergency pacing, the 1.5×
  college cap) mean success is not provably monotonic in B; if a lower
  grid budget succeeds, bisection is repeated inside that pocket.

Key Components
--------------
- OptimizationResult: optimum budget, feasibility, final simulation, diagnostics
- BudgetOptimizer: bracket construction and search strategies
- sweep_budgets: goal outcomes over a grid of budgets (pandas DataFrame)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging
import time

import numpy as np
import pandas as pd

from .config import OptimizationConfig
from .constants import (
    LOWER_BRACKET_FACTOR,
    MIN_SEARCH_BUDGET,
    UPPER_INCOME_FACTOR,
    UPPER_NAIVE_FACTOR,
)
from .exceptions import InfeasibleError, ValidationError
from .simulation import CashFlowSimulator, SimulationResult
from .utils import ensure_1d

__all__ = [
    "OptimizationResult",
    "BudgetOptimizer",
    "search_bracket",
    "sweep_budgets",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Optimization Result Container
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OptimizationResult:
    """
    Container for budget search output.

    Attributes
    ----------
    budget : float
        Lowest successful budget found, or the bracket's upper bound when
        no tested budget succeeded.
    feasible : bool
        Whether ``simulation`` (the replay at ``budget``) succeeded.
    simulation : SimulationResult
        Final simulate() call at ``budget``; supplies the timeline.
    lower, upper : float
        Initial search bracket.
    iterations : int
        Number of simulate() calls made by the search (final replay excluded).
    strategy : str
        "binary" or "guarded".
    solve_time : float
        Wall-clock seconds spent searching.

    Examples
    --------
    >>> result = BudgetOptimizer(simulator).optimize()
    >>> print(result.summary())
    OptimizationResult(
      Status: ✓ Feasible
      Budget: $1,234/month
      Bracket: [$370, $7,125]
      Iterations: 11 (binary)
      Solve time: 0.081s
    )
    """
    budget: float
    feasible: bool
    simulation: SimulationResult
    lower: float
    upper: float
    iterations: int
    strategy: str
    solve_time: float

    def __post_init__(self):
        """Validate result structure at construction."""
        if self.budget < 0:
            raise ValueError(f"budget must be non-negative, got {self.budget}")
        if self.lower > self.upper:
            raise ValueError(f"lower={self.lower} > upper={self.upper}")
        if not isinstance(self.feasible, bool):
            raise TypeError(f"feasible must be bool, got {type(self.feasible)}")

    def summary(self) -> str:
        """Human-readable optimization summary."""
        status = "✓ Feasible" if self.feasible else "✗ Infeasible"
        lines = [
            "OptimizationResult(",
            f"  Status: {status}",
            f"  Budget: ${self.budget:,.0f}/month",
            f"  Bracket: [${self.lower:,.0f}, ${self.upper:,.0f}]",
            f"  Iterations: {self.iterations} ({self.strategy})",
            f"  Solve time: {self.solve_time:.3f}s",
            ")",
        ]
        return "\n".join(lines)

    def require_feasible(self) -> "OptimizationResult":
        """Return self, or raise InfeasibleError if no budget met every goal."""
        if not self.feasible:
            sim = self.simulation
            raise InfeasibleError(
                f"No budget in [${self.lower:,.0f}, ${self.upper:,.0f}] meets all goals "
                f"(emergency={sim.emergency_met}, debts={sim.debts_met}, "
                f"retirement={sim.retirement_met}, college={sim.college_met}). "
                f"Consider: (1) a later retirement age, (2) a lower income "
                f"replacement target, (3) longer debt payoff horizons."
            )
        return self


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

def search_bracket(simulator: CashFlowSimulator) -> Tuple[float, float]:
    """Initial (lo, hi) budget bracket for *simulator*'s goals."""
    goals = simulator.goals
    naive = goals.naive_total_monthly
    lo = max(MIN_SEARCH_BUDGET, naive * LOWER_BRACKET_FACTOR)
    hi = max(goals.after_tax_monthly * UPPER_INCOME_FACTOR, naive * UPPER_NAIVE_FACTOR)
    return lo, max(lo, hi)


class BudgetOptimizer:
    """
    Minimum-budget search driving a CashFlowSimulator.

    Parameters
    ----------
    simulator : CashFlowSimulator
        Simulator bound to the household's goals and engine config.
    config : OptimizationConfig, optional
        Search parameters (iteration cap, tolerance, strategy).

    Examples
    --------
    >>> optimizer = BudgetOptimizer(simulator, OptimizationConfig(search_strategy="guarded"))
    >>> result = optimizer.optimize()
    >>> simulator.simulate(result.budget).success == result.feasible
    True
    """

    def __init__(
        self,
        simulator: CashFlowSimulator,
        config: Optional[OptimizationConfig] = None,
    ):
        if not isinstance(simulator, CashFlowSimulator):
            raise TypeError(
                f"simulator must be CashFlowSimulator, got {type(simulator)}"
            )
        self.simulator = simulator
        self.config = config or OptimizationConfig()

    def optimize(self) -> OptimizationResult:
        """
        Find the minimum monthly budget that meets every goal.

        Returns
        -------
        OptimizationResult
            Never raises for infeasibility; check ``feasible`` or call
            ``require_feasible()``.
        """
        started = time.perf_counter()
        lo, hi = search_bracket(self.simulator)
        logger.debug(
            "%s search over [%.2f, %.2f] for %r",
            self.config.search_strategy, lo, hi, self.simulator.goals,
        )

        best, iterations = self._binary_search(lo, hi)
        if self.config.search_strategy == "guarded":
            best, probes = self._guarded_refine(lo, best)
            iterations += probes

        final = self.simulator.simulate(best)
        elapsed = time.perf_counter() - started
        logger.info(
            "Optimal budget %.2f (%s, %d iterations, %.3fs)",
            best, "feasible" if final.success else "infeasible", iterations, elapsed,
        )
        return OptimizationResult(
            budget=best,
            feasible=final.success,
            simulation=final,
            lower=lo,
            upper=hi,
            iterations=iterations,
            strategy=self.config.search_strategy,
            solve_time=elapsed,
        )

    def _binary_search(self, lo: float, hi: float) -> Tuple[float, int]:
        """
        Bisection for the lowest successful budget in [lo, hi].

        Algorithm
        ---------
        1. best = hi
        2. Repeat up to max_iterations:
           a. mid = (lo + hi) / 2
           b. success: best = mid, hi = mid - step
           c. failure: lo = mid + step
           d. stop once hi - lo < tolerance
        3. Return best
        """
        cfg = self.config
        best = hi
        iteration = 0
        while iteration < cfg.max_iterations:
            iteration += 1
            mid = (lo + hi) / 2
            success = self.simulator.simulate(mid).success
            logger.debug(
                "[Iter %d] budget=%.2f range=[%.2f, %.2f] %s",
                iteration, mid, lo, hi, "✓" if success else "✗",
            )
            if success:
                best = mid
                hi = mid - cfg.step
            else:
                lo = mid + cfg.step
            if hi - lo < cfg.tolerance:
                break
        return best, iteration

    def _guarded_refine(self, lo: float, best: float) -> Tuple[float, int]:
        """Probe a grid below *best*; bisect into the first lower success."""
        grid = np.linspace(lo, best, self.config.probe_points + 1)[:-1]
        probes = 0
        previous = lo
        for candidate in grid:
            probes += 1
            if self.simulator.simulate(float(candidate)).success:
                refined, n = self._binary_search(previous, float(candidate))
                probes += n
                if refined < best:
                    logger.info(
                        "Guarded search found lower budget %.2f below binary optimum %.2f",
                        refined, best,
                    )
                    best = refined
                break
            previous = float(candidate)
        return best, probes


# ---------------------------------------------------------------------------
# Budget Sweep
# ---------------------------------------------------------------------------

def sweep_budgets(
    simulator: CashFlowSimulator,
    budgets: Sequence[float] | np.ndarray,
) -> pd.DataFrame:
    """
    Simulate every budget in *budgets* and tabulate the goal outcomes.

    Parameters
    ----------
    simulator : CashFlowSimulator
        Simulator bound to a goal set.
    budgets : array-like of float
        Non-negative monthly budgets.

    Returns
    -------
    pd.DataFrame
        One row per budget with columns ``budget``, ``success``,
        ``emergency_met``, ``debts_met``, ``retirement_met``, ``college_met``,
        ``goals_met``, ``retirement_shortfall``, ``college_shortfall`` and
        ``months_simulated``.

    Examples
    --------
    >>> df = sweep_budgets(simulator, np.linspace(0, 5_000, 11))
    >>> df["goals_met"].is_monotonic_increasing
    True
    """
    try:
        grid = ensure_1d(budgets, name="budgets")
    except ValueError as e:
        raise ValidationError(str(e)) from e
    if grid.size == 0:
        raise ValidationError("budgets must contain at least one value")
    if np.any(grid < 0):
        raise ValidationError("budgets must be non-negative")

    rows = []
    for budget in grid:
        result = simulator.simulate(float(budget))
        rows.append({
            "budget": float(budget),
            "success": result.success,
            "emergency_met": result.emergency_met,
            "debts_met": result.debts_met,
            "retirement_met": result.retirement_met,
            "college_met": result.college_met,
            "goals_met": result.goals_met,
            "retirement_shortfall": result.retirement_shortfall,
            "college_shortfall": result.college_shortfall,
            "months_simulated": result.months_simulated,
        })
    return pd.DataFrame(rows)
