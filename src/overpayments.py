"""Overpayment definitions and expansion into dated payments."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional

from .dates import add_calendar_months, months_between
from .errors import ValidationError


class OverpaymentFrequency(Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUALLY = "semiannually"
    ANNUALLY = "annually"

    @property
    def months(self) -> int:
        """Step between two cyclic overpayments."""
        return _FREQUENCY_MONTHS[self]


_FREQUENCY_MONTHS = {
    OverpaymentFrequency.MONTHLY: 1,
    OverpaymentFrequency.QUARTERLY: 3,
    OverpaymentFrequency.SEMIANNUALLY: 6,
    OverpaymentFrequency.ANNUALLY: 12,
}


class OverpaymentEffect(Enum):
    """What an overpayment does to the rest of the schedule."""

    REDUCE_PERIOD = "reduce_period"
    REDUCE_INSTALLMENT = "reduce_installment"
    PROGRESSIVE_OVERPAYMENT = "progressive_overpayment"


@dataclass(frozen=True)
class Overpayment:
    """A one-time extra payment."""

    date: date
    amount: float

    def validate(self) -> None:
        if not self.amount > 0:
            raise ValidationError(
                "Overpayment amount must be greater than zero",
                context={"date": self.date, "amount": self.amount},
            )


@dataclass(frozen=True)
class CyclicOverpayment:
    """A recurring extra payment."""

    amount: float
    frequency: OverpaymentFrequency = OverpaymentFrequency.MONTHLY
    start_date: Optional[date] = None  # defaults to the loan start
    end_date: Optional[date] = None

    def validate(self) -> None:
        if not self.amount > 0:
            raise ValidationError(
                "Cyclic overpayment amount must be greater than zero",
                context={"amount": self.amount},
            )
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError(
                "Cyclic overpayment end date is before its start date",
                context={"start_date": self.start_date, "end_date": self.end_date},
            )


def generate_cyclic_overpayments(
    cyclic: CyclicOverpayment,
    loan_start: date,
    total_months: int,
) -> List[Overpayment]:
    """Expand a cyclic overpayment into dated one-time payments.

    Generation starts at the cyclic start date (inclusive) and stops once the
    end date is passed or the loan end date is reached.
    """
    first = cyclic.start_date or loan_start
    loan_end = add_calendar_months(loan_start, total_months)
    step = cyclic.frequency.months

    overpayments = []
    i = 0
    while True:
        current = add_calendar_months(first, i * step)
        i += 1
        if current >= loan_end:
            break
        if cyclic.end_date and current > cyclic.end_date:
            break
        if current < loan_start:
            continue
        overpayments.append(Overpayment(date=current, amount=cyclic.amount))

    return overpayments


def expand_overpayments(
    one_time: Iterable[Overpayment],
    cyclic: Optional[CyclicOverpayment],
    loan_start: date,
    total_months: int,
    effect: OverpaymentEffect = OverpaymentEffect.REDUCE_PERIOD,
) -> List[Overpayment]:
    """Combine one-time and cyclic overpayments into one date-sorted list.

    Progressive overpayments depend on the installment of each period, so the
    cyclic definition is left unexpanded in that mode and evaluated per period by
    the amortization engine instead.

    One-time overpayments dated before the loan start or on/after the loan end
    are dropped.
    """
    loan_end = add_calendar_months(loan_start, total_months)
    overpayments = [op for op in one_time if loan_start <= op.date < loan_end]

    if cyclic and effect != OverpaymentEffect.PROGRESSIVE_OVERPAYMENT:
        overpayments.extend(generate_cyclic_overpayments(cyclic, loan_start, total_months))

    return sorted(overpayments, key=lambda op: op.date)


def is_cyclic_overpayment_month(
    current: date,
    cyclic: CyclicOverpayment,
    loan_start: date,
) -> bool:
    """Whether ``current`` is a period in which the cyclic overpayment is due."""
    if cyclic.start_date and current < cyclic.start_date:
        return False
    if cyclic.end_date and current > cyclic.end_date:
        return False

    since_start = months_between(cyclic.start_date or loan_start, current)
    return since_start % cyclic.frequency.months == 0
