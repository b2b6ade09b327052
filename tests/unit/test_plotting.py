"""
Unit tests for plotting.py module.

Tests plot_timeline() and plot_budget_sweep() figure structure and
file output.
"""

import pandas as pd
import pytest

# Use non-interactive backend for testing
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from savopt.optimization import sweep_budgets
from savopt.plotting import plot_budget_sweep, plot_timeline


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def timeline(family_simulator):
    return family_simulator.simulate(3_000).timeline


@pytest.fixture
def sweep(retirement_simulator):
    return sweep_budgets(retirement_simulator, [0, 1_000, 2_000, 3_000])


# ============================================================================
# TIMELINE
# ============================================================================

class TestPlotTimeline:
    """Test plot_timeline()."""

    def test_returns_fig_and_axes(self, timeline):
        fig, axes = plot_timeline(timeline, budget=3_000, title="Family", return_fig_ax=True)
        assert set(axes) == {"balances", "net_worth"}
        assert fig._suptitle.get_text() == "Family"

        labels = [t.get_text() for t in axes["balances"].get_legend().get_texts()]
        assert "Retirement" in labels
        assert "Debt" in labels

    def test_net_worth_line(self, timeline):
        _, axes = plot_timeline(timeline, return_fig_ax=True)
        ydata = axes["net_worth"].get_lines()[0].get_ydata()
        assert list(ydata) == [e.net_worth for e in timeline]

    def test_returns_none_by_default(self, timeline):
        assert plot_timeline(timeline) is None

    def test_save(self, timeline, tmp_path):
        path = tmp_path / "timeline.png"
        plot_timeline(timeline, save_path=str(path))
        assert path.exists()
        assert path.stat().st_size > 0

    def test_empty_timeline(self):
        with pytest.raises(ValueError, match="empty"):
            plot_timeline(())


# ============================================================================
# BUDGET SWEEP
# ============================================================================

class TestPlotBudgetSweep:
    """Test plot_budget_sweep()."""

    def test_returns_fig_and_axes(self, sweep):
        fig, axes = plot_budget_sweep(sweep, return_fig_ax=True)
        assert set(axes) == {"goals", "shortfall"}
        assert axes["goals"].get_ylabel() == "Goals met"

    def test_optimum_marker(self, sweep):
        _, axes = plot_budget_sweep(sweep, optimum=1_500, return_fig_ax=True)
        for ax in axes.values():
            xs = [line.get_xdata()[0] for line in ax.get_lines()]
            assert 1_500 in xs

    def test_save(self, sweep, tmp_path):
        path = tmp_path / "sweep.png"
        plot_budget_sweep(sweep, title="Sweep", save_path=str(path))
        assert path.exists()

    def test_empty_sweep(self):
        with pytest.raises(ValueError, match="empty"):
            plot_budget_sweep(pd.DataFrame())
