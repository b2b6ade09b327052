"""Time-value-of-money formulas for SavOpt

Contents
--------
- Future value of a present sum and of an annuity
- Payment required to reach a future value
- Present value of an annuity (drawdown targets)
- Loan amortization payment
- Horizon-tiered growth rate

All rates are nominal annual fractions compounded monthly (``r / 12``);
all horizons are expressed in months. Degenerate inputs never raise: a
zero-length horizon or zero principal resolves to a defined value (the
principal itself for growth, zero for payments and annuities), and a zero
rate falls back to straight-line arithmetic.
"""

from __future__ import annotations

from .constants import GROWTH_TIERS, MONTHS_PER_YEAR, SHORT_HORIZON_RATE

__all__ = [
    "future_value",
    "payment_for_future_value",
    "present_value_annuity",
    "future_value_annuity",
    "loan_payment",
    "tiered_growth_rate",
]


def future_value(pv: float, annual_rate: float, months: float) -> float:
    """Grow *pv* for *months* at ``annual_rate / 12`` per month.

    FV = PV * (1 + r/12) ** n. Returns *pv* unchanged for n <= 0 or pv == 0.
    """
    if months <= 0 or pv == 0:
        return float(pv)
    return float(pv * (1.0 + annual_rate / MONTHS_PER_YEAR) ** months)


def payment_for_future_value(fv: float, annual_rate: float, months: float) -> float:
    """Level monthly deposit that accumulates to *fv* after *months*.

    PMT = FV * (r/12) / ((1 + r/12) ** n - 1)
    """
    if months <= 0 or fv <= 0:
        return 0.0
    if annual_rate == 0:
        return float(fv / months)
    r = annual_rate / MONTHS_PER_YEAR
    return float(fv * r / ((1.0 + r) ** months - 1.0))


def present_value_annuity(pmt: float, annual_rate: float, months: float) -> float:
    """Lump sum that funds *months* withdrawals of *pmt*.

    PV = PMT * (1 - (1 + r/12) ** -n) / (r/12)
    """
    if months <= 0 or pmt == 0:
        return 0.0
    if annual_rate == 0:
        return float(pmt * months)
    r = annual_rate / MONTHS_PER_YEAR
    return float(pmt * (1.0 - (1.0 + r) ** (-months)) / r)


def future_value_annuity(pmt: float, annual_rate: float, months: float) -> float:
    """Balance reached by depositing *pmt* every month for *months*."""
    if months <= 0 or pmt == 0:
        return 0.0
    if annual_rate == 0:
        return float(pmt * months)
    r = annual_rate / MONTHS_PER_YEAR
    return float(pmt * ((1.0 + r) ** months - 1.0) / r)


def loan_payment(principal: float, annual_rate: float, months: float) -> float:
    """Return the level monthly payment that amortizes *principal*.

    The formula is:

        payment = P * i / (1 - (1 + i) ** -n)

    where ``P`` is the principal, ``i`` the monthly rate and ``n`` the number
    of payments. A zero rate simplifies to ``P / n``; a non-positive principal
    or horizon needs no payment at all.
    """
    if months <= 0 or principal <= 0:
        return 0.0
    if annual_rate == 0:
        return float(principal / months)
    r = annual_rate / MONTHS_PER_YEAR
    return float(principal * r / (1.0 - (1.0 + r) ** (-months)))


def tiered_growth_rate(years: float) -> float:
    """Expected annual return for a goal *years* away.

    7% above 10 years, 5% above 5 years, 3% otherwise. The rate is chosen
    once per goal and is not re-tiered as the horizon shrinks.
    """
    for threshold, rate in GROWTH_TIERS:
        if years > threshold:
            return rate
    return SHORT_HORIZON_RATE
