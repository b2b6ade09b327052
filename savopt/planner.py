"""
End-to-end planning workflow.

Wires the pipeline shared by the HTTP API and the CLI:

    HouseholdInput -> derive_goals -> BudgetOptimizer (drives CashFlowSimulator)
                   -> optional fixed-budget evaluation -> response payload

Example
-------
>>> from savopt.config import HouseholdInput
>>> plan = build_plan(HouseholdInput(income=120_000), variant="goals")
>>> plan.payload["minimumMonthly"] > 0
True
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from .config import (
    EngineConfig,
    EvaluationInput,
    HouseholdInput,
    OptimizationConfig,
    Variant,
    variant_configs,
)
from .exceptions import ValidationError
from .goals import GoalSet, derive_goals
from .optimization import BudgetOptimizer, OptimizationResult
from .serialization import assemble_evaluation_response, assemble_goals_response
from .simulation import CashFlowSimulator, SimulationResult

__all__ = ["Plan", "build_plan"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Plan:
    """
    Everything computed for one household.

    Attributes
    ----------
    variant : {"goals", "optimizer"}
    goals : GoalSet
    engine : EngineConfig
    optimum : OptimizationResult
        Minimum-budget search output.
    evaluation : SimulationResult or None
        Simulation of the caller's budget (optimizer variant only).
    payload : dict
        Response dictionary with camelCase keys.
    """
    variant: str
    goals: GoalSet
    engine: EngineConfig
    optimum: OptimizationResult
    evaluation: Optional[SimulationResult]
    payload: Dict[str, Any]

    @property
    def displayed(self) -> SimulationResult:
        """Simulation whose timeline the payload reports."""
        return self.evaluation if self.evaluation is not None else self.optimum.simulation


def build_plan(
    household: HouseholdInput,
    variant: Variant = "goals",
    optimization_config: Optional[OptimizationConfig] = None,
    start_year: Optional[int] = None,
) -> Plan:
    """
    Run the full pipeline for *household*.

    Parameters
    ----------
    household : HouseholdInput
        Request model. The optimizer variant requires an EvaluationInput
        (it carries ``monthly_budget``).
    variant : {"goals", "optimizer"}, default "goals"
        Product variant selecting the engine preset.
    optimization_config : OptimizationConfig, optional
        Overrides the variant's search settings.
    start_year : int, optional
        Calendar year of simulation month 0.

    Raises
    ------
    ValidationError
        If the optimizer variant is requested without a monthly budget.
    """
    monthly_budget = None
    if variant == "optimizer":
        if not isinstance(household, EvaluationInput):
            raise ValidationError("optimizer variant requires a monthly_budget")
        monthly_budget = household.monthly_budget

    engine, search = variant_configs(variant, monthly_budget)
    if optimization_config is not None:
        search = optimization_config

    goals = derive_goals(household, engine)
    logger.debug("Derived %r", goals)
    simulator = CashFlowSimulator(goals, engine, start_year=start_year)
    optimum = BudgetOptimizer(simulator, search).optimize()

    evaluation = None
    if engine.evaluate_fixed_budget is not None:
        evaluation = simulator.simulate(engine.evaluate_fixed_budget)
        payload = assemble_evaluation_response(goals, evaluation, optimum)
    else:
        payload = assemble_goals_response(goals, optimum)

    return Plan(
        variant=variant,
        goals=goals,
        engine=engine,
        optimum=optimum,
        evaluation=evaluation,
        payload=payload,
    )
