"""Core loan definitions and installment formulas."""

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List

from .errors import ValidationError

MAX_TERM_YEARS = 35


class InstallmentType(Enum):
    EQUAL = "equal"
    DECREASING = "decreasing"


@dataclass(frozen=True)
class LoanTerm:
    """Loan duration as years plus months."""

    years: int
    months: int = 0

    @property
    def total_months(self) -> int:
        return self.years * 12 + self.months

    @classmethod
    def from_months(cls, total_months: int) -> "LoanTerm":
        return cls(years=total_months // 12, months=total_months % 12)


@dataclass(frozen=True)
class InterestRateChange:
    """A scheduled change of the nominal rate, effective from ``date``."""

    date: date
    new_rate: float  # percent


@dataclass(frozen=True)
class MortgageInput:
    """Represents a mortgage as entered by the user."""

    loan_amount: float
    interest_rate: float  # nominal annual rate in percent, e.g. 7.5
    loan_term: LoanTerm
    installment_type: InstallmentType
    start_date: date
    interest_rate_changes: List[InterestRateChange] = field(default_factory=list)

    @property
    def total_months(self) -> int:
        return self.loan_term.total_months

    @property
    def monthly_rate(self) -> float:
        """Nominal monthly rate as a decimal."""
        return self.interest_rate / 100 / 12

    @property
    def monthly_payment(self) -> float:
        """First nominal installment before any overpayment."""
        if self.installment_type == InstallmentType.EQUAL:
            return calculate_equal_installment(self.loan_amount, self.monthly_rate, self.total_months)
        return calculate_decreasing_installment(self.loan_amount, self.monthly_rate, self.total_months)

    def validate(self) -> None:
        """Raise ValidationError unless amount, rate and term are usable."""
        if _is_nan(self.loan_amount) or self.loan_amount <= 0:
            raise ValidationError(
                "Loan amount must be greater than zero",
                context={"loan_amount": self.loan_amount},
            )
        if _is_nan(self.interest_rate) or not 0 <= self.interest_rate <= 100:
            raise ValidationError(
                "Interest rate must be between 0 and 100 percent",
                context={"interest_rate": self.interest_rate},
            )
        term = self.loan_term
        if not 0 <= term.years <= MAX_TERM_YEARS or not 0 <= term.months <= 11:
            raise ValidationError(
                f"Loan term must be 0-{MAX_TERM_YEARS} years and 0-11 months",
                context={"years": term.years, "months": term.months},
            )
        if term.total_months <= 0:
            raise ValidationError(
                "Loan term must be longer than zero months",
                context={"years": term.years, "months": term.months},
            )
        for change in self.interest_rate_changes:
            if _is_nan(change.new_rate) or not 0 <= change.new_rate <= 100:
                raise ValidationError(
                    "Changed interest rate must be between 0 and 100 percent",
                    context={"date": change.date, "new_rate": change.new_rate},
                )


def calculate_equal_installment(principal: float, monthly_rate: float, months: int) -> float:
    """Equal (annuity) installment.

    M = P * [r(1+r)^n] / [(1+r)^n - 1]

    A zero rate degenerates to P / n.
    """
    if months <= 0:
        raise ValidationError("Number of installments must be positive", context={"months": months})
    if monthly_rate == 0:
        return principal / months

    growth = (1 + monthly_rate) ** months
    return principal * monthly_rate * growth / (growth - 1)


def calculate_decreasing_installment(principal: float, monthly_rate: float, months: int) -> float:
    """First installment of a decreasing schedule: fixed principal plus full interest."""
    if months <= 0:
        raise ValidationError("Number of installments must be positive", context={"months": months})
    return principal / months + principal * monthly_rate


def _is_nan(value: float) -> bool:
    return isinstance(value, float) and math.isnan(value)
