"""Tests for core loan definitions and installment formulas."""

from datetime import date

import pytest

from src.errors import ValidationError
from src.mortgage import (
    InstallmentType,
    InterestRateChange,
    LoanTerm,
    MortgageInput,
    calculate_decreasing_installment,
    calculate_equal_installment,
)


def make_mortgage(**overrides):
    values = dict(
        loan_amount=300000,
        interest_rate=7.5,
        loan_term=LoanTerm(years=25),
        installment_type=InstallmentType.EQUAL,
        start_date=date(2024, 1, 1),
    )
    values.update(overrides)
    return MortgageInput(**values)


class TestLoanTerm:
    """Tests for LoanTerm."""

    def test_total_months(self):
        assert LoanTerm(years=25).total_months == 300
        assert LoanTerm(years=2, months=6).total_months == 30

    def test_from_months(self):
        """Test that months are split into years and a remainder."""
        term = LoanTerm.from_months(27)
        assert term.years == 2
        assert term.months == 3


class TestMortgageInput:
    """Tests for MortgageInput."""

    def test_monthly_payment_calculation(self):
        """Test standard annuity formula."""
        # 300,000 at 6.5% for 30 years
        mortgage = make_mortgage(interest_rate=6.5, loan_term=LoanTerm(years=30))

        # Expected: ~1,896.20
        assert abs(mortgage.monthly_payment - 1896.20) < 0.10

    def test_monthly_payment_zero_rate(self):
        """Test edge case of 0% interest."""
        mortgage = make_mortgage(loan_amount=120000, interest_rate=0.0, loan_term=LoanTerm(years=10))

        assert mortgage.monthly_payment == 1000.0

    def test_decreasing_first_installment(self):
        """First decreasing installment is fixed principal plus a full month of interest."""
        mortgage = make_mortgage(installment_type=InstallmentType.DECREASING)

        assert mortgage.monthly_payment == pytest.approx(1000 + 300000 * 0.075 / 12)

    def test_monthly_rate_is_decimal(self):
        mortgage = make_mortgage(interest_rate=6.0)
        assert mortgage.monthly_rate == pytest.approx(0.005)

    def test_valid_input_passes(self):
        make_mortgage().validate()

    @pytest.mark.parametrize("amount", [0, -1000, float("nan")])
    def test_invalid_loan_amount(self, amount):
        with pytest.raises(ValidationError, match="Loan amount"):
            make_mortgage(loan_amount=amount).validate()

    @pytest.mark.parametrize("rate", [-0.1, 100.5, float("nan")])
    def test_invalid_interest_rate(self, rate):
        with pytest.raises(ValidationError, match="Interest rate"):
            make_mortgage(interest_rate=rate).validate()

    def test_term_too_long(self):
        with pytest.raises(ValidationError, match="Loan term"):
            make_mortgage(loan_term=LoanTerm(years=36)).validate()

    def test_term_months_out_of_range(self):
        with pytest.raises(ValidationError, match="Loan term"):
            make_mortgage(loan_term=LoanTerm(years=10, months=12)).validate()

    def test_zero_term(self):
        with pytest.raises(ValidationError, match="longer than zero"):
            make_mortgage(loan_term=LoanTerm(years=0, months=0)).validate()

    def test_invalid_rate_change(self):
        mortgage = make_mortgage(
            interest_rate_changes=[InterestRateChange(date=date(2025, 1, 1), new_rate=120.0)]
        )
        with pytest.raises(ValidationError, match="Changed interest rate"):
            mortgage.validate()

    def test_error_carries_context(self):
        """Test that the offending value is attached to the error."""
        with pytest.raises(ValidationError) as exc_info:
            make_mortgage(loan_amount=-5).validate()

        assert exc_info.value.context == {"loan_amount": -5}
        assert "loan_amount=-5" in str(exc_info.value)


class TestInstallmentFormulas:
    """Tests for standalone installment functions."""

    def test_equal_matches_mortgage(self):
        """Test that standalone function matches the property."""
        mortgage = make_mortgage()
        standalone = calculate_equal_installment(300000, 0.075 / 12, 300)

        assert standalone == pytest.approx(mortgage.monthly_payment)

    def test_equal_installment_repays_loan(self):
        """Discounting all installments at the monthly rate gives back the principal."""
        r = 0.005
        payment = calculate_equal_installment(100000, r, 120)
        present_value = sum(payment / (1 + r) ** k for k in range(1, 121))

        assert abs(present_value - 100000) < 0.01

    def test_decreasing_installment(self):
        assert calculate_decreasing_installment(120000, 0.01, 120) == pytest.approx(1000 + 1200)

    @pytest.mark.parametrize("months", [0, -12])
    def test_non_positive_months(self, months):
        with pytest.raises(ValidationError):
            calculate_equal_installment(100000, 0.005, months)
        with pytest.raises(ValidationError):
            calculate_decreasing_installment(100000, 0.005, months)
