"""
Plotting utilities for SavOpt results.

Purpose
-------
Charts for the yearly balance timeline of a simulation and for budget
sweeps. Functions draw on a fresh matplotlib figure, optionally save it,
and return ``(fig, axes)`` on request.

Available Charts
----------------
- plot_timeline: stacked asset balances, outstanding debt and net worth
- plot_budget_sweep: goals met and shortfalls across a budget grid
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Optional, Tuple

import numpy as np

from .serialization import timeline_to_frame

if TYPE_CHECKING:
    import pandas as pd
    from .simulation import TimelineEntry

__all__ = ["plot_timeline", "plot_budget_sweep"]


ACCOUNT_COLORS: Dict[str, str] = {
    "emergency": "#2e7d32",
    "retirement": "#1565c0",
    "college": "#6a1b9a",
    "brokerage": "#ef6c00",
}
DEBT_COLOR = "#c62828"


def _currency_formatter():
    from matplotlib.ticker import FuncFormatter

    def fmt(x, pos):
        if abs(x) >= 1e6:
            return f"${x / 1e6:.1f}M"
        if abs(x) >= 1e3:
            return f"${x / 1e3:.0f}K"
        return f"${x:.0f}"

    return FuncFormatter(fmt)


def plot_timeline(
    timeline: Iterable[TimelineEntry],
    *,
    budget: Optional[float] = None,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (12, 8),
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """
    Plot the yearly balance timeline of one simulation.

    Parameters
    ----------
    timeline : iterable of TimelineEntry
        Yearly snapshots (``SimulationResult.timeline``).
    budget : float, optional
        Monthly budget simulated; shown in the footer.
    title : str, optional
        Figure title.
    figsize : tuple, default (12, 8)
        Figure size in inches.
    save_path : str, optional
        Save the figure here (PNG at 150 dpi).
    return_fig_ax : bool, default False
        Return ``(fig, {"balances": ax, "net_worth": ax})``.

    Raises
    ------
    ValueError
        If the timeline is empty.

    Examples
    --------
    >>> result = simulator.simulate(2_000)
    >>> plot_timeline(result.timeline, budget=2_000, save_path="timeline.png")
    """
    from matplotlib import pyplot as plt

    df = timeline_to_frame(timeline)
    if df.empty:
        raise ValueError("timeline is empty; nothing to plot")

    years = df.index.to_numpy()
    fig, (ax_balances, ax_net) = plt.subplots(
        2, 1, figsize=figsize, sharex=True, gridspec_kw={"height_ratios": [3, 2]}
    )

    # ========== Panel 1: Asset balances (stacked) and debt ==========
    columns = list(ACCOUNT_COLORS)
    ax_balances.stackplot(
        years,
        *[df[c].to_numpy() for c in columns],
        labels=[c.capitalize() for c in columns],
        colors=[ACCOUNT_COLORS[c] for c in columns],
        alpha=0.8,
    )
    ax_balances.plot(
        years, df["total_debt"].to_numpy(),
        color=DEBT_COLOR, linewidth=2, linestyle="--", label="Debt",
    )
    ax_balances.set_ylabel("Balance", fontsize=10)
    ax_balances.set_title("Balances by Goal", fontsize=11, fontweight="bold")
    ax_balances.yaxis.set_major_formatter(_currency_formatter())
    ax_balances.grid(True, alpha=0.3)
    ax_balances.legend(loc="upper left", fontsize=8, framealpha=0.9)

    # ========== Panel 2: Net worth ==========
    net = df["net_worth"].to_numpy()
    ax_net.plot(years, net, color="black", linewidth=2, label="Net worth")
    ax_net.fill_between(years, net, 0, where=net >= 0, color="#2e7d32", alpha=0.2)
    ax_net.fill_between(years, net, 0, where=net < 0, color=DEBT_COLOR, alpha=0.2)
    ax_net.axhline(0, color="black", linestyle=":", linewidth=1, alpha=0.5)
    ax_net.set_xlabel("Year", fontsize=10)
    ax_net.set_ylabel("Net worth", fontsize=10)
    ax_net.yaxis.set_major_formatter(_currency_formatter())
    ax_net.grid(True, alpha=0.3)

    if title:
        fig.suptitle(title, fontsize=13, fontweight="bold")

    footer = f"Final net worth: ${net[-1]:,.0f}  |  Age {df['age'].iloc[-1]}"
    if budget is not None:
        footer = f"Monthly budget: ${budget:,.0f}  |  " + footer
    fig.tight_layout(rect=[0, 0.03, 1, 0.97 if title else 0.99])
    fig.text(0.01, 0.008, footer, ha="left", va="bottom", fontsize=8, alpha=0.85)

    if save_path:
        fig.savefig(save_path, bbox_inches="tight", dpi=150)

    if return_fig_ax:
        return fig, {"balances": ax_balances, "net_worth": ax_net}


def plot_budget_sweep(
    sweep: pd.DataFrame,
    *,
    optimum: Optional[float] = None,
    title: Optional[str] = None,
    figsize: Tuple[float, float] = (12, 5),
    save_path: Optional[str] = None,
    return_fig_ax: bool = False,
):
    """
    Plot goals met and shortfalls over a budget grid.

    Parameters
    ----------
    sweep : pd.DataFrame
        Output of ``savopt.optimization.sweep_budgets``.
    optimum : float, optional
        Optimal budget to mark with a vertical line.
    """
    from matplotlib import pyplot as plt

    if sweep.empty:
        raise ValueError("sweep is empty; nothing to plot")

    budgets = sweep["budget"].to_numpy()
    fig, (ax_goals, ax_short) = plt.subplots(1, 2, figsize=figsize)

    ax_goals.step(budgets, sweep["goals_met"].to_numpy(), where="post", color="#1565c0")
    success = sweep["success"].to_numpy(dtype=bool)
    ax_goals.scatter(budgets[success], np.full(success.sum(), 4), color="#2e7d32", zorder=3, s=15)
    ax_goals.set_ylim(-0.2, 4.2)
    ax_goals.set_yticks(range(5))
    ax_goals.set_xlabel("Monthly budget", fontsize=10)
    ax_goals.set_ylabel("Goals met", fontsize=10)
    ax_goals.set_title("Goals Met by Budget", fontsize=11, fontweight="bold")
    ax_goals.xaxis.set_major_formatter(_currency_formatter())
    ax_goals.grid(True, alpha=0.3)

    ax_short.plot(budgets, sweep["retirement_shortfall"].to_numpy(),
                  color=ACCOUNT_COLORS["retirement"], label="Retirement")
    ax_short.plot(budgets, sweep["college_shortfall"].to_numpy(),
                  color=ACCOUNT_COLORS["college"], label="College")
    ax_short.set_xlabel("Monthly budget", fontsize=10)
    ax_short.set_ylabel("Shortfall", fontsize=10)
    ax_short.set_title("Shortfall by Budget", fontsize=11, fontweight="bold")
    ax_short.xaxis.set_major_formatter(_currency_formatter())
    ax_short.yaxis.set_major_formatter(_currency_formatter())
    ax_short.grid(True, alpha=0.3)
    ax_short.legend(loc="upper right", fontsize=8)

    if optimum is not None:
        for ax in (ax_goals, ax_short):
            ax.axvline(optimum, color="black", linestyle="--", linewidth=1, alpha=0.7)

    if title:
        fig.suptitle(title, fontsize=13, fontweight="bold")
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, bbox_inches="tight", dpi=150)

    if return_fig_ax:
        return fig, {"goals": ax_goals, "shortfall": ax_short}
