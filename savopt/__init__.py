"""
SavOpt — Household Savings Optimizer

Finds the minimum monthly savings budget that meets an emergency fund,
debt payoff, retirement and college goals by simulating a priority
allocation waterfall month by month.

Modules
-------
- formulas     : Closed-form time-value-of-money formulas
- benefits     : Public retirement benefit estimate
- goals        : Household parameters to goal targets
- simulation   : Month-by-month cash-flow simulator
- optimization : Minimum-budget search and budget sweeps
- planner      : End-to-end workflow shared by the API and CLI
- serialization: Response payloads and JSON persistence
- api / cli    : HTTP and command-line surfaces

"""

from .config import HouseholdInput, EvaluationInput, EngineConfig, OptimizationConfig
from .goals import GoalSet, derive_goals
from .simulation import CashFlowSimulator, SimulationResult
from .optimization import BudgetOptimizer, OptimizationResult, sweep_budgets
from .planner import Plan, build_plan
from . import utils
