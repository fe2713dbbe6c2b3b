"""Tests for overpayment definitions and expansion."""

from datetime import date

import pytest

from src.errors import ValidationError
from src.overpayments import (
    CyclicOverpayment,
    Overpayment,
    OverpaymentEffect,
    OverpaymentFrequency,
    expand_overpayments,
    generate_cyclic_overpayments,
    is_cyclic_overpayment_month,
)

LOAN_START = date(2024, 1, 1)


class TestGenerateCyclicOverpayments:
    """Tests for expanding a cyclic overpayment into dated payments."""

    def test_monthly_covers_whole_loan(self):
        payments = generate_cyclic_overpayments(CyclicOverpayment(amount=500), LOAN_START, 24)

        assert len(payments) == 24
        assert payments[0].date == LOAN_START
        assert payments[-1].date == date(2025, 12, 1)
        assert all(p.amount == 500 for p in payments)

    def test_quarterly(self):
        cyclic = CyclicOverpayment(amount=1000, frequency=OverpaymentFrequency.QUARTERLY)
        payments = generate_cyclic_overpayments(cyclic, LOAN_START, 12)

        assert [p.date for p in payments] == [
            date(2024, 1, 1), date(2024, 4, 1), date(2024, 7, 1), date(2024, 10, 1),
        ]

    def test_end_date_is_inclusive(self):
        cyclic = CyclicOverpayment(
            amount=1000,
            frequency=OverpaymentFrequency.QUARTERLY,
            end_date=date(2024, 4, 1),
        )
        payments = generate_cyclic_overpayments(cyclic, LOAN_START, 60)

        assert [p.date for p in payments] == [date(2024, 1, 1), date(2024, 4, 1)]

    def test_start_date_before_loan_is_skipped(self):
        cyclic = CyclicOverpayment(amount=100, start_date=date(2023, 11, 1))
        payments = generate_cyclic_overpayments(cyclic, LOAN_START, 3)

        assert [p.date for p in payments] == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]

    def test_month_end_start_does_not_drift(self):
        """Test that each date is derived from the first, so Feb clamping is not carried over."""
        start = date(2024, 1, 31)
        cyclic = CyclicOverpayment(amount=100, start_date=start)
        payments = generate_cyclic_overpayments(cyclic, start, 3)

        assert [p.date for p in payments] == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31)]

    def test_annual_frequency_months(self):
        assert OverpaymentFrequency.ANNUALLY.months == 12
        assert OverpaymentFrequency.SEMIANNUALLY.months == 6


class TestExpandOverpayments:
    """Tests for combining one-time and cyclic overpayments."""

    def test_sorted_by_date(self):
        one_time = [Overpayment(date=date(2024, 6, 15), amount=5000)]
        cyclic = CyclicOverpayment(amount=1000, frequency=OverpaymentFrequency.SEMIANNUALLY)

        expanded = expand_overpayments(one_time, cyclic, LOAN_START, 12)

        assert [op.date for op in expanded] == [date(2024, 1, 1), date(2024, 6, 15), date(2024, 7, 1)]

    def test_drops_one_time_outside_loan(self):
        """Only one-time overpayments within [start, end) of the loan are kept."""
        start = date(2024, 1, 15)
        one_time = [
            Overpayment(date=date(2024, 1, 1), amount=10000),
            Overpayment(date=date(2024, 1, 15), amount=1000),
            Overpayment(date=date(2025, 1, 15), amount=2000),
        ]

        expanded = expand_overpayments(one_time, None, start, 12)

        assert expanded == [Overpayment(date=date(2024, 1, 15), amount=1000)]

    def test_progressive_leaves_cyclic_unexpanded(self):
        one_time = [Overpayment(date=date(2024, 6, 1), amount=5000)]
        cyclic = CyclicOverpayment(amount=1000)

        expanded = expand_overpayments(
            one_time, cyclic, LOAN_START, 12, OverpaymentEffect.PROGRESSIVE_OVERPAYMENT
        )

        assert expanded == one_time


class TestIsCyclicOverpaymentMonth:
    """Tests for progressive due-month detection."""

    def test_quarterly_from_loan_start(self):
        cyclic = CyclicOverpayment(amount=100, frequency=OverpaymentFrequency.QUARTERLY)

        assert is_cyclic_overpayment_month(date(2024, 4, 1), cyclic, LOAN_START)
        assert not is_cyclic_overpayment_month(date(2024, 5, 1), cyclic, LOAN_START)

    def test_outside_window(self):
        cyclic = CyclicOverpayment(amount=100, start_date=date(2024, 3, 1), end_date=date(2024, 6, 1))

        assert not is_cyclic_overpayment_month(date(2024, 2, 1), cyclic, LOAN_START)
        assert is_cyclic_overpayment_month(date(2024, 3, 1), cyclic, LOAN_START)
        assert not is_cyclic_overpayment_month(date(2024, 7, 1), cyclic, LOAN_START)


class TestValidation:
    """Tests for overpayment validation."""

    @pytest.mark.parametrize("amount", [0, -100])
    def test_one_time_amount(self, amount):
        with pytest.raises(ValidationError):
            Overpayment(date=LOAN_START, amount=amount).validate()

    def test_cyclic_amount(self):
        with pytest.raises(ValidationError):
            CyclicOverpayment(amount=0).validate()

    def test_cyclic_end_before_start(self):
        cyclic = CyclicOverpayment(amount=100, start_date=date(2025, 1, 1), end_date=date(2024, 1, 1))
        with pytest.raises(ValidationError, match="end date"):
            cyclic.validate()
