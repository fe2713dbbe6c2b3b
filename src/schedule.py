"""Payment schedules for a single loan definition (refinance variants).

Two interest conventions are supported and intentionally kept distinct:

- ``AVERAGE_MONTH``: every month accrues ``annual_rate / 12``.
- ``EXACT_DAY``: interest accrues at ``annual_rate / 365`` per calendar day
  between anchored payment dates, so totals differ slightly from the
  average-month figures for the same loan.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional

from .config import DEFAULT_ROUNDING_TOLERANCE
from .dates import add_calendar_months, anchored_payment_date
from .errors import ValidationError
from .mortgage import (
    InstallmentType,
    calculate_decreasing_installment,
    calculate_equal_installment,
)


class InterestConvention(Enum):
    AVERAGE_MONTH = "monthly"
    EXACT_DAY = "daily"


@dataclass(frozen=True)
class RefinanceInstallment:
    """One row of a refinance schedule."""

    date: date
    installment_number: int
    amount: float
    principal: float
    interest: float
    remaining_balance: float
    days_in_period: Optional[int] = None


@dataclass(frozen=True)
class LoanSchedule:
    """A generated schedule with its aggregates."""

    installments: List[RefinanceInstallment]
    monthly_installment: float  # equal: the annuity; decreasing: the first installment
    total_amount: float
    total_interest: float

    @property
    def term_months(self) -> int:
        return len(self.installments)


def generate_schedule(
    loan_amount: float,
    annual_rate: float,
    total_months: int,
    installment_type: InstallmentType,
    start_date: date,
    day_of_month: Optional[int] = None,
    convention: InterestConvention = InterestConvention.AVERAGE_MONTH,
    rounding_tolerance: float = DEFAULT_ROUNDING_TOLERANCE,
) -> LoanSchedule:
    """Generate the full payment schedule of a loan.

    Args:
        loan_amount: Amount borrowed
        annual_rate: Nominal annual rate in percent
        total_months: Number of monthly installments
        installment_type: Equal or decreasing installments
        start_date: Disbursement date; the first payment is one month later
        day_of_month: Payment day for the exact-day convention. Defaults to
            the day of ``start_date``.
        convention: Interest convention
        rounding_tolerance: Largest final residual folded into the last
            principal payment (average-month convention)

    Returns:
        LoanSchedule
    """
    if loan_amount <= 0:
        raise ValidationError("Loan amount must be greater than zero", context={"loan_amount": loan_amount})
    if total_months <= 0:
        raise ValidationError("Loan term must be longer than zero months", context={"total_months": total_months})
    if annual_rate < 0:
        raise ValidationError("Interest rate cannot be negative", context={"annual_rate": annual_rate})

    if convention == InterestConvention.EXACT_DAY:
        day = day_of_month or start_date.day
        if not 1 <= day <= 31:
            raise ValidationError("Payment day must be between 1 and 31", context={"day_of_month": day})
        installments = _exact_day_installments(
            loan_amount, annual_rate, total_months, installment_type, start_date, day
        )
    else:
        installments = _average_month_installments(
            loan_amount, annual_rate, total_months, installment_type, start_date, rounding_tolerance
        )

    monthly_rate = annual_rate / 100 / 12
    if installment_type == InstallmentType.EQUAL:
        monthly_installment = calculate_equal_installment(loan_amount, monthly_rate, total_months)
    else:
        monthly_installment = calculate_decreasing_installment(loan_amount, monthly_rate, total_months)

    return LoanSchedule(
        installments=installments,
        monthly_installment=monthly_installment,
        total_amount=sum(i.amount for i in installments),
        total_interest=sum(i.interest for i in installments),
    )


def _average_month_installments(
    loan_amount: float,
    annual_rate: float,
    total_months: int,
    installment_type: InstallmentType,
    start_date: date,
    rounding_tolerance: float,
) -> List[RefinanceInstallment]:
    monthly_rate = annual_rate / 100 / 12
    payment = calculate_equal_installment(loan_amount, monthly_rate, total_months)
    fixed_principal = loan_amount / total_months

    schedule = []
    balance = loan_amount

    for month in range(1, total_months + 1):
        interest = balance * monthly_rate

        if installment_type == InstallmentType.EQUAL:
            principal_paid = payment - interest
        else:
            principal_paid = fixed_principal

        balance -= principal_paid

        # Fold rounding residue into the final installment
        if month == total_months and abs(balance) < rounding_tolerance:
            principal_paid += balance
            balance = 0.0

        schedule.append(RefinanceInstallment(
            date=add_calendar_months(start_date, month),
            installment_number=month,
            amount=principal_paid + interest,
            principal=principal_paid,
            interest=interest,
            remaining_balance=max(0.0, balance),
        ))

    return schedule


def _exact_day_installments(
    loan_amount: float,
    annual_rate: float,
    total_months: int,
    installment_type: InstallmentType,
    start_date: date,
    day_of_month: int,
) -> List[RefinanceInstallment]:
    daily_rate = annual_rate / 100 / 365
    # The installment itself is still sized on the average month (365/12 days)
    payment = calculate_equal_installment(loan_amount, daily_rate * 365 / 12, total_months)
    fixed_principal = loan_amount / total_months

    schedule = []
    balance = loan_amount
    previous_date = start_date

    for month in range(1, total_months + 1):
        payment_date = anchored_payment_date(start_date, month, day_of_month)
        days = (payment_date - previous_date).days
        interest = balance * daily_rate * days

        # Day counts drift from the average month, so the last payment
        # settles whatever balance is left
        if month == total_months:
            principal_paid = balance
        elif installment_type == InstallmentType.EQUAL:
            principal_paid = min(max(payment - interest, 0.0), balance)
        else:
            principal_paid = min(fixed_principal, balance)

        balance -= principal_paid

        schedule.append(RefinanceInstallment(
            date=payment_date,
            installment_number=month,
            amount=principal_paid + interest,
            principal=principal_paid,
            interest=interest,
            remaining_balance=max(0.0, balance),
            days_in_period=days,
        ))

        previous_date = payment_date
        if balance <= 0:
            break

    return schedule
