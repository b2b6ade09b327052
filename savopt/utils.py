"""General utilities for SavOpt

Contents
--------
- Validation helpers
- Array helpers (ensure_1d)
- Ratio / rounding helpers that never divide by zero
- Calendar helpers (start year of a simulation)
- Reporting helpers (format_currency)
- Logging setup driven by AppSettings
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    from .config import AppSettings

__all__ = [
    # Validation
    "check_non_negative",
    # Arrays
    "ensure_1d",
    # Arithmetic
    "safe_ratio",
    "round_half_up",
    # Calendar
    "resolve_start_year",
    # Reporting
    "format_currency",
    # Logging
    "configure_logging",
]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_non_negative(name: str, value: float) -> None:
    """Raise if *value* is negative or not a finite number."""
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite (got {value}).")
    if value < 0:
        raise ValueError(f"{name} must be non-negative (got {value}).")


# ---------------------------------------------------------------------------
# Array helpers
# ---------------------------------------------------------------------------

def ensure_1d(a: Sequence[float] | np.ndarray, *, name: str = "array") -> np.ndarray:
    """Convert input to a 1-D float NumPy array with helpful error messages."""
    arr = np.asarray(a, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1-D, got shape {arr.shape}.")
    if not np.isfinite(arr).all():
        raise ValueError(f"{name} must contain only finite values.")
    return arr


# ---------------------------------------------------------------------------
# Arithmetic helpers
# ---------------------------------------------------------------------------

def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Return numerator / denominator, or *default* when the denominator is 0."""
    if denominator == 0:
        return default
    return float(numerator / denominator)


def round_half_up(x: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(x + 0.5))


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------

def resolve_start_year(start_year: Optional[int] = None) -> int:
    """Calendar year of simulation month 0 (current year when not given)."""
    if start_year is None:
        return date.today().year
    return int(start_year)


# ---------------------------------------------------------------------------
# Reporting helpers
# ---------------------------------------------------------------------------

def format_currency(x: float, decimals: int = 0) -> str:
    """Format *x* as ``$12,345`` (negative values as ``-$12,345``)."""
    sign = "-" if x < 0 else ""
    return f"{sign}${abs(x):,.{decimals}f}"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """Configure the root logger from *settings* (``SAVOPT_LOG_LEVEL``)."""
    if settings is None:
        from .config import AppSettings
        settings = AppSettings()
    level = "DEBUG" if settings.debug else settings.log_level
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("savopt").setLevel(level)
