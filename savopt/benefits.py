"""
Public retirement benefit estimate (Social Security PIA).

The Primary Insurance Amount is a tiered replacement of average monthly
earnings: 90% up to the first bend point, 32% up to the second, 15% above,
capped at the maximum benefit at full retirement age. Married households
receive the spousal multiplier. Claiming between 62 and 67 applies the
early-claiming reduction (5/9% per month for the first 36 months, 5/12%
per month after); claiming after 67 earns an 8% delayed credit per year
for up to 3 years.

Example
-------
>>> round(primary_insurance_amount(60_000), 2)
2311.08
>>> round(social_security_benefit(60_000, married=False, claim_age=67), 2)
2311.08
"""

from __future__ import annotations

from .constants import (
    MONTHS_PER_YEAR,
    SS_BEND_POINT_1,
    SS_BEND_POINT_2,
    SS_DELAY_CREDIT,
    SS_EARLY_RETIREMENT_AGE,
    SS_FULL_RETIREMENT_AGE,
    SS_MAX_BENEFIT_FRA,
    SS_MAX_CLAIM_AGE,
    SS_RATES,
    SS_SPOUSAL_MULTIPLIER,
)

__all__ = [
    "primary_insurance_amount",
    "claiming_adjustment",
    "social_security_benefit",
]


def primary_insurance_amount(annual_income: float) -> float:
    """Monthly PIA for *annual_income*, capped at the FRA maximum."""
    monthly = annual_income / MONTHS_PER_YEAR
    r1, r2, r3 = SS_RATES
    if monthly <= SS_BEND_POINT_1:
        pia = r1 * monthly
    elif monthly <= SS_BEND_POINT_2:
        pia = r1 * SS_BEND_POINT_1 + r2 * (monthly - SS_BEND_POINT_1)
    else:
        pia = (
            r1 * SS_BEND_POINT_1
            + r2 * (SS_BEND_POINT_2 - SS_BEND_POINT_1)
            + r3 * (monthly - SS_BEND_POINT_2)
        )
    return float(min(pia, SS_MAX_BENEFIT_FRA))


def claiming_adjustment(claim_age: float) -> float:
    """Multiplier applied to the benefit when claiming at *claim_age*."""
    if SS_EARLY_RETIREMENT_AGE <= claim_age < SS_FULL_RETIREMENT_AGE:
        months_early = (SS_FULL_RETIREMENT_AGE - claim_age) * MONTHS_PER_YEAR
        if months_early <= 36:
            reduction = months_early * (5 / 9) / 100
        else:
            reduction = 36 * (5 / 9) / 100 + (months_early - 36) * (5 / 12) / 100
        return 1.0 - reduction
    if SS_FULL_RETIREMENT_AGE < claim_age <= SS_MAX_CLAIM_AGE:
        years_late = min(claim_age - SS_FULL_RETIREMENT_AGE, 3)
        return float((1.0 + SS_DELAY_CREDIT) ** years_late)
    return 1.0


def social_security_benefit(annual_income: float, married: bool, claim_age: float) -> float:
    """Estimated monthly household benefit when claiming at *claim_age*."""
    benefit = primary_insurance_amount(annual_income)
    if married:
        benefit *= SS_SPOUSAL_MULTIPLIER
    return float(benefit * claiming_adjustment(claim_age))
