"""
Unit tests for formulas.py and benefits.py modules.

Tests time-value-of-money formulas, the tiered growth rate and the
public retirement benefit estimate.
"""

import pytest

from savopt.formulas import (
    future_value,
    payment_for_future_value,
    present_value_annuity,
    future_value_annuity,
    loan_payment,
    tiered_growth_rate,
)
from savopt.benefits import (
    primary_insurance_amount,
    claiming_adjustment,
    social_security_benefit,
)


# ============================================================================
# FUTURE / PRESENT VALUE
# ============================================================================

class TestFutureValue:
    """Test future_value()."""

    def test_compounds_monthly(self):
        """1000 at 12% for 12 months grows by (1.01)^12."""
        assert future_value(1_000, 0.12, 12) == pytest.approx(1_000 * 1.01 ** 12)

    def test_zero_months_returns_principal(self):
        assert future_value(2_500, 0.07, 0) == 2_500

    def test_negative_months_returns_principal(self):
        assert future_value(2_500, 0.07, -3) == 2_500

    def test_zero_principal(self):
        assert future_value(0, 0.07, 120) == 0

    def test_zero_rate(self):
        assert future_value(1_000, 0.0, 60) == pytest.approx(1_000)


class TestAnnuities:
    """Test payment_for_future_value(), future_value_annuity(), present_value_annuity()."""

    def test_payment_accumulates_to_target(self):
        """Depositing the computed payment reaches the target."""
        pmt = payment_for_future_value(500_000, 0.07, 360)
        assert future_value_annuity(pmt, 0.07, 360) == pytest.approx(500_000)

    def test_payment_degenerate_inputs(self):
        assert payment_for_future_value(0, 0.07, 120) == 0
        assert payment_for_future_value(-10, 0.07, 120) == 0
        assert payment_for_future_value(10_000, 0.07, 0) == 0

    def test_payment_zero_rate_is_straight_line(self):
        assert payment_for_future_value(12_000, 0.0, 12) == pytest.approx(1_000)

    def test_present_value_known_value(self):
        """PV of 1000/month for 12 months at 12% (1% per month)."""
        expected = 1_000 * (1 - 1.01 ** -12) / 0.01
        assert present_value_annuity(1_000, 0.12, 12) == pytest.approx(expected)

    def test_present_value_zero_rate(self):
        assert present_value_annuity(1_000, 0.0, 24) == pytest.approx(24_000)

    def test_present_value_degenerate(self):
        assert present_value_annuity(1_000, 0.04, 0) == 0
        assert present_value_annuity(0, 0.04, 120) == 0

    def test_present_value_below_undiscounted_sum(self):
        assert present_value_annuity(1_000, 0.04, 300) < 300_000


class TestLoanPayment:
    """Test loan_payment()."""

    def test_amortizes_balance(self):
        """Grown balance equals grown payments: the loan is exactly repaid."""
        pmt = loan_payment(10_000, 0.22, 24)
        assert future_value(10_000, 0.22, 24) == pytest.approx(future_value_annuity(pmt, 0.22, 24))

    def test_closed_form(self):
        r = 0.065 / 12
        expected = 25_000 * r / (1 - (1 + r) ** -120)
        assert loan_payment(25_000, 0.065, 120) == pytest.approx(expected)

    def test_zero_rate(self):
        assert loan_payment(12_000, 0.0, 24) == pytest.approx(500)

    @pytest.mark.parametrize("principal,months", [(0, 24), (-100, 24), (10_000, 0)])
    def test_degenerate_returns_zero(self, principal, months):
        assert loan_payment(principal, 0.1, months) == 0

    def test_payment_exceeds_interest(self):
        pmt = loan_payment(10_000, 0.22, 24)
        assert pmt > 10_000 * 0.22 / 12


class TestTieredGrowthRate:
    """Test tiered_growth_rate()."""

    @pytest.mark.parametrize("years,expected", [
        (30, 0.07),
        (11, 0.07),
        (10, 0.05),
        (6, 0.05),
        (5, 0.03),
        (1, 0.03),
    ])
    def test_tiers(self, years, expected):
        assert tiered_growth_rate(years) == expected


# ============================================================================
# PUBLIC BENEFIT
# ============================================================================

class TestPrimaryInsuranceAmount:
    """Test primary_insurance_amount()."""

    def test_below_first_bend_point(self):
        """12,000/year = 1,000/month, all replaced at 90%."""
        assert primary_insurance_amount(12_000) == pytest.approx(900)

    def test_between_bend_points(self):
        assert primary_insurance_amount(60_000) == pytest.approx(2_311.08)

    def test_above_second_bend_point(self):
        expected = 0.9 * 1226 + 0.32 * (7391 - 1226) + 0.15 * (10_000 - 7391)
        assert primary_insurance_amount(120_000) == pytest.approx(expected)

    def test_capped_at_maximum(self):
        assert primary_insurance_amount(5_000_000) == 4018

    def test_zero_income(self):
        assert primary_insurance_amount(0) == 0


class TestClaimingAdjustment:
    """Test claiming_adjustment()."""

    def test_full_retirement_age(self):
        assert claiming_adjustment(67) == 1.0

    def test_earliest_claim(self):
        """60 months early: 36 at 5/9% plus 24 at 5/12% = 30% reduction."""
        assert claiming_adjustment(62) == pytest.approx(0.70)

    def test_two_years_early(self):
        assert claiming_adjustment(65) == pytest.approx(1 - 24 * (5 / 9) / 100)

    def test_delayed_credit(self):
        assert claiming_adjustment(70) == pytest.approx(1.08 ** 3)

    def test_beyond_max_claim_age(self):
        assert claiming_adjustment(75) == 1.0


class TestSocialSecurityBenefit:
    """Test social_security_benefit()."""

    def test_single_at_fra(self):
        assert social_security_benefit(60_000, married=False, claim_age=67) == pytest.approx(2_311.08)

    def test_spousal_multiplier(self):
        single = social_security_benefit(60_000, married=False, claim_age=67)
        married = social_security_benefit(60_000, married=True, claim_age=67)
        assert married == pytest.approx(single * 1.5)

    def test_early_claim_reduces_benefit(self):
        assert (
            social_security_benefit(80_000, False, 62)
            < social_security_benefit(80_000, False, 67)
            < social_security_benefit(80_000, False, 70)
        )
