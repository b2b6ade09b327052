"""
Command-Line Interface for SavOpt.

Purpose
-------
Runs the savings planner on household JSON files, evaluates fixed
budgets, sweeps budget grids and serves the HTTP API without writing
Python code.

Commands
--------
- plan: Minimum monthly budget meeting every goal
- evaluate: Simulate a fixed monthly budget and compare it to the optimum
- sweep: Goal outcomes across a grid of budgets
- serve: Run the HTTP API
- config: Show engine presets, validate and create household files
- info: Package and dependency versions

Example Usage
-------------
    # Minimum budget for a household
    $ savopt plan -i household.json -o plan.json --plot timeline.png

    # Evaluate a 2,500/month budget
    $ savopt evaluate -i household.json -b 2500

    # Create a starter household file
    $ savopt config create household.json --template family

    # Show version
    $ savopt --version
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click
import numpy as np
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import (
    AppSettings,
    EvaluationInput,
    HouseholdInput,
    OptimizationConfig,
    variant_configs,
)
from .exceptions import SavOptError
from .utils import configure_logging, format_currency

# Version
__version__ = "0.1.0"

HOUSEHOLD_TEMPLATES = {
    "basic": {
        "income": 85000,
        "currentAge": 32,
        "retireAge": 65,
        "emergencyBal": 4000,
        "emergencyMonths": 3,
        "ccBal": 3500,
        "ccApr": 22,
        "ccPayoffYears": 2,
        "retirementBal": 25000,
        "has401k": True,
        "matchPercent": 50,
        "matchUpTo": 6,
    },
    "family": {
        "income": 140000,
        "married": True,
        "currentAge": 38,
        "retireAge": 67,
        "retireIncomePct": 75,
        "lifeExpectancy": 92,
        "emergencyBal": 12000,
        "emergencyMonths": 6,
        "ccBal": 6000,
        "ccApr": 21,
        "ccPayoffYears": 2,
        "autoBal": 18000,
        "autoApr": 6.9,
        "autoPayoffYears": 4,
        "slBal": 22000,
        "slApr": 5.5,
        "slPayoffYears": 10,
        "retirementBal": 160000,
        "has401k": True,
        "matchPercent": 100,
        "matchUpTo": 4,
        "hasKids": True,
        "numKids": 2,
        "kidAges": [6, 3],
        "collegeCostYear": 35000,
        "collegeYears": 4,
        "collegeBal": 15000,
        "useFinancialAid": True,
        "aidPercent": 20,
        "brokerageBal": 10000,
    },
}


def _load(path: Path, model=HouseholdInput):
    from .serialization import load_household

    try:
        return load_household(path, model)
    except (OSError, ValueError) as e:
        click.echo(f"Error loading household file: {e}", err=True)
        sys.exit(1)


def _search_config(variant: str, strategy: str) -> OptimizationConfig:
    _, search = variant_configs(variant, search_strategy=strategy)
    return search


def _goal_flag(met: bool) -> str:
    return "[green]✓[/green]" if met else "[red]✗[/red]"


@click.group()
@click.version_option(version=__version__, prog_name="savopt")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def main(ctx: click.Context, quiet: bool) -> None:
    """
    SavOpt - Household Savings Optimizer.

    Finds the minimum monthly savings budget that funds an emergency
    reserve, pays off debt, reaches retirement and covers college by
    simulating a priority allocation waterfall month by month.

    Use 'savopt COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    if quiet and not settings.debug:
        settings = settings.model_copy(update={"log_level": "WARNING"})
    configure_logging(settings)

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["console"] = Console()
    ctx.obj["settings"] = settings


@main.command()
@click.option(
    "--input", "-i", "input_file",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to household file (JSON)"
)
@click.option(
    "--variant",
    type=click.Choice(["goals", "optimizer"]),
    default="goals",
    help="Engine preset (default: goals)"
)
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file for the plan (JSON)"
)
@click.option(
    "--plot",
    type=click.Path(path_type=Path),
    default=None,
    help="Save a timeline chart (PNG)"
)
@click.option(
    "--strategy",
    type=click.Choice(["binary", "guarded"]),
    default="binary",
    help="Budget search strategy (default: binary)"
)
@click.pass_context
def plan(
    ctx: click.Context,
    input_file: Path,
    variant: str,
    output: Optional[Path],
    plot: Optional[Path],
    strategy: str,
) -> None:
    """
    Find the minimum monthly budget.

    The optimizer variant also evaluates the file's monthlyBudget.

    Example:
        savopt plan -i household.json --strategy guarded -o plan.json
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    settings = ctx.obj["settings"]

    from .planner import build_plan

    model = EvaluationInput if variant == "optimizer" else HouseholdInput
    household = _load(input_file, model)

    if not quiet:
        console.print(f"[bold blue]Optimizing budget ({variant}, {strategy})...[/bold blue]")

    try:
        result = build_plan(
            household,
            variant,
            optimization_config=_search_config(variant, strategy),
            start_year=settings.start_year,
        )
    except SavOptError as e:
        click.echo(f"Error during optimization: {e}", err=True)
        sys.exit(1)

    optimum = result.optimum
    goals = result.goals

    table = Table(title="Savings Plan", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("After-tax income", f"{format_currency(goals.after_tax_monthly)}/month")
    table.add_row("Minimum budget", f"{format_currency(optimum.budget)}/month")
    table.add_row("Naive total", f"{format_currency(goals.naive_total_monthly)}/month")
    table.add_row("Feasible", "Yes" if optimum.feasible else "No")
    table.add_row("Iterations", f"{optimum.iterations}")
    if result.evaluation is not None:
        evaluation = result.evaluation
        table.add_row("", "")
        table.add_row("Your budget", f"{format_currency(evaluation.budget)}/month")
        table.add_row("All goals met", "Yes" if evaluation.success else "No")
    console.print(table)

    if output:
        from .serialization import save_result

        save_result(result.payload, output)
        if not quiet:
            click.echo(f"Plan saved to {output}")

    if plot:
        from matplotlib import pyplot as plt
        from .plotting import plot_timeline

        shown = result.displayed
        fig, _ = plot_timeline(
            shown.timeline,
            budget=shown.budget,
            title="Savings Timeline",
            save_path=str(plot),
            return_fig_ax=True,
        )
        plt.close(fig)
        if not quiet:
            click.echo(f"Timeline chart saved to {plot}")


@main.command()
@click.option(
    "--input", "-i", "input_file",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to household file (JSON)"
)
@click.option(
    "--budget", "-b",
    type=click.FloatRange(min=0),
    required=True,
    help="Monthly budget to evaluate"
)
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file for the evaluation (JSON)"
)
@click.pass_context
def evaluate(
    ctx: click.Context,
    input_file: Path,
    budget: float,
    output: Optional[Path],
) -> None:
    """
    Evaluate a fixed monthly budget against the optimum.

    Example:
        savopt evaluate -i household.json -b 2500
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    settings = ctx.obj["settings"]

    from .planner import build_plan

    household = _load(input_file)
    request = EvaluationInput.model_validate(
        {**household.model_dump(), "monthly_budget": budget}
    )

    try:
        result = build_plan(request, "optimizer", start_year=settings.start_year)
    except SavOptError as e:
        click.echo(f"Error during evaluation: {e}", err=True)
        sys.exit(1)

    evaluation = result.evaluation
    payload = result.payload

    table = Table(title="Budget Evaluation", show_header=True)
    table.add_column("Goal", style="cyan")
    table.add_column("Met", justify="center")
    table.add_row("Emergency fund", _goal_flag(evaluation.emergency_met))
    table.add_row("Debt payoff", _goal_flag(evaluation.debts_met))
    table.add_row("Retirement", _goal_flag(evaluation.retirement_met))
    table.add_row("College", _goal_flag(evaluation.college_met))
    console.print(table)

    diff = payload["budgetDiff"]
    lines = [
        f"Your budget: {format_currency(budget)}/month ({payload['savingsRate']:.1f}% of after-tax income)",
        f"Optimal budget: {format_currency(result.optimum.budget)}/month",
        f"Difference: {format_currency(diff)}",
        f"Retirement shortfall: {format_currency(evaluation.retirement_shortfall)}",
        f"College shortfall: {format_currency(evaluation.college_shortfall)}",
    ]
    border = "green" if evaluation.success else "red"
    console.print(Panel("\n".join(lines), title="Summary", border_style=border))

    if output:
        from .serialization import save_result

        save_result(payload, output)
        if not quiet:
            click.echo(f"Evaluation saved to {output}")


@main.command()
@click.option(
    "--input", "-i", "input_file",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to household file (JSON)"
)
@click.option(
    "--variant",
    type=click.Choice(["goals", "optimizer"]),
    default="goals",
    help="Engine preset (default: goals)"
)
@click.option("--points", "-n", type=click.IntRange(min=2), default=21, help="Grid size (default: 21)")
@click.option("--min-budget", type=click.FloatRange(min=0), default=0.0, help="Lowest budget (default: 0)")
@click.option("--max-budget", type=click.FloatRange(min=0), default=None,
              help="Highest budget (default: upper search bracket)")
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file for the sweep table (CSV)"
)
@click.option(
    "--plot",
    type=click.Path(path_type=Path),
    default=None,
    help="Save a sweep chart (PNG)"
)
@click.pass_context
def sweep(
    ctx: click.Context,
    input_file: Path,
    variant: str,
    points: int,
    min_budget: float,
    max_budget: Optional[float],
    output: Optional[Path],
    plot: Optional[Path],
) -> None:
    """
    Tabulate goal outcomes over a grid of budgets.

    Example:
        savopt sweep -i household.json --points 41 -o sweep.csv
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]
    settings = ctx.obj["settings"]

    from .goals import derive_goals
    from .optimization import search_bracket, sweep_budgets
    from .simulation import CashFlowSimulator

    household = _load(input_file)
    engine, _ = variant_configs(variant)
    goals = derive_goals(household, engine)
    simulator = CashFlowSimulator(goals, engine, start_year=settings.start_year)

    if max_budget is None:
        _, max_budget = search_bracket(simulator)
    if max_budget <= min_budget:
        click.echo("Error: --max-budget must exceed --min-budget", err=True)
        sys.exit(1)

    frame = sweep_budgets(simulator, np.linspace(min_budget, max_budget, points))

    table = Table(title="Budget Sweep", show_header=True)
    table.add_column("Budget", justify="right")
    table.add_column("Goals met", justify="center")
    table.add_column("Success", justify="center")
    table.add_column("Retirement shortfall", justify="right")
    table.add_column("College shortfall", justify="right")
    for row in frame.itertuples(index=False):
        table.add_row(
            format_currency(row.budget),
            f"{row.goals_met}/4",
            _goal_flag(bool(row.success)),
            format_currency(row.retirement_shortfall),
            format_currency(row.college_shortfall),
        )
    console.print(table)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output, index=False)
        if not quiet:
            click.echo(f"Sweep saved to {output}")

    if plot:
        from matplotlib import pyplot as plt
        from .plotting import plot_budget_sweep

        fig, _ = plot_budget_sweep(frame, title="Budget Sweep", save_path=str(plot), return_fig_ax=True)
        plt.close(fig)
        if not quiet:
            click.echo(f"Sweep chart saved to {plot}")


@main.command()
@click.option("--host", default=None, help="Bind host (default: SAVOPT_HOST or 127.0.0.1)")
@click.option("--port", type=int, default=None, help="Bind port (default: SAVOPT_PORT or 8000)")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """
    Run the HTTP API.

    Example:
        savopt serve --host 0.0.0.0 --port 8080
    """
    import uvicorn
    from .api import create_app

    settings = ctx.obj["settings"]
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@main.group()
def config() -> None:
    """
    Configuration management commands.

    Show engine presets, validate and create household files.
    """
    pass


@config.command("show")
@click.option(
    "--variant",
    type=click.Choice(["goals", "optimizer"]),
    default="goals",
    help="Engine preset (default: goals)"
)
@click.option("--format", "-f", type=click.Choice(["json", "table"]), default="table")
@click.pass_context
def config_show(ctx: click.Context, variant: str, format: str) -> None:
    """
    Display the engine and search configuration of a variant.

    Example:
        savopt config show --variant optimizer --format json
    """
    console = ctx.obj["console"]
    settings = ctx.obj["settings"]
    engine, search = variant_configs(variant)

    data = {
        "engine": engine.model_dump(),
        "search": search.model_dump(),
        "settings": settings.model_dump(),
    }
    if format == "json":
        click.echo(json.dumps(data, indent=2))
        return

    for section, values in data.items():
        table = Table(title=f"{section.capitalize()} ({variant})" if section != "settings" else "Settings")
        table.add_column("Field", style="cyan")
        table.add_column("Value", justify="right")
        for key, value in values.items():
            table.add_row(key, str(value))
        console.print(table)


@config.command("validate")
@click.argument("household_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def config_validate(ctx: click.Context, household_file: Path) -> None:
    """
    Validate a household file.

    Example:
        savopt config validate household.json
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]

    household = _load(household_file)

    if quiet:
        return
    info = (
        "[bold]Household Valid[/bold]\n\n"
        f"[cyan]Income:[/cyan] {format_currency(household.income)}/year\n"
        f"[cyan]Ages:[/cyan] {household.current_age:g} now, retiring at {household.retire_age:g}\n"
        f"[cyan]Debt:[/cyan] {format_currency(household.cc_bal + household.auto_bal + household.sl_bal)}\n"
        f"[cyan]Children:[/cyan] {len(household.child_ages)}"
    )
    console.print(Panel(info, title="Household Summary", border_style="green"))


@config.command("create")
@click.argument("output_file", type=click.Path(path_type=Path))
@click.option("--template", "-t", type=click.Choice(sorted(HOUSEHOLD_TEMPLATES)), default="basic")
@click.pass_context
def config_create(ctx: click.Context, output_file: Path, template: str) -> None:
    """
    Create a starter household file from a template.

    Example:
        savopt config create household.json --template family
    """
    console = ctx.obj["console"]
    quiet = ctx.obj["quiet"]

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "w") as f:
        json.dump(HOUSEHOLD_TEMPLATES[template], f, indent=2)

    if not quiet:
        console.print(f"[green]Created household file: {output_file}[/green]")


@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display system and package information.

    Shows version numbers of the package and its dependencies.
    """
    from importlib.metadata import PackageNotFoundError, version

    console = ctx.obj["console"]

    info_lines = [
        f"SavOpt Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
    ]
    for name in ("numpy", "pandas", "pydantic", "fastapi", "matplotlib", "rich", "click"):
        try:
            info_lines.append(f"{name}: {version(name)}")
        except PackageNotFoundError:
            info_lines.append(f"{name}: not installed")

    console.print(Panel("\n".join(info_lines), title="System Information"))


if __name__ == "__main__":
    main()
