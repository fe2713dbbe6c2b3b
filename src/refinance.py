"""Refinance comparison: status quo versus two refinancing structures.

- Variant A keeps the current loan unchanged.
- Variant B takes the new loan at its nominal term (lower installment).
- Variant C takes the new loan at the shortest term whose installment stays
  within a tolerance of the current installment.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional

from .config import EngineSettings
from .dates import DateLike, months_between, parse_date
from .errors import Result, ValidationError
from .logging_config import get_logger
from .mortgage import InstallmentType, LoanTerm
from .schedule import InterestConvention, LoanSchedule, RefinanceInstallment, generate_schedule
from .term_search import shortest_term_within_limit

_logger = get_logger("refinance")


class CommissionType(Enum):
    AMOUNT = "amount"
    PERCENTAGE = "percentage"


@dataclass(frozen=True)
class Commission:
    """A fee given either as a flat amount or as a percentage of a base."""

    type: CommissionType = CommissionType.AMOUNT
    value: float = 0.0

    def resolve(self, base: float) -> float:
        if self.type == CommissionType.PERCENTAGE:
            return base * self.value / 100
        return self.value


@dataclass(frozen=True)
class RefinanceBasicInput:
    """State of the current loan and the offered rate."""

    current_loan_balance: float
    current_remaining_period: LoanTerm
    current_interest_rate: float  # percent
    new_interest_rate: float  # percent


@dataclass(frozen=True)
class RefinanceAdvancedInput:
    """New loan structure, fees and optional original-loan details."""

    refinance_date: DateLike
    new_loan_amount: float
    new_loan_term: LoanTerm
    current_installment_type: InstallmentType = InstallmentType.EQUAL
    new_installment_type: InstallmentType = InstallmentType.EQUAL
    new_loan_commission: Commission = Commission()
    early_repayment_fee: Commission = Commission()
    other_costs: float = 0.0

    # Needed for the proportional refund of the original commission
    original_loan_amount: Optional[float] = None
    start_date: Optional[DateLike] = None
    original_commission: Optional[Commission] = None

    installment_day_of_month: Optional[int] = None
    interest_convention: InterestConvention = InterestConvention.AVERAGE_MONTH


@dataclass(frozen=True)
class RefinanceInput:
    basic: RefinanceBasicInput
    advanced: RefinanceAdvancedInput


@dataclass(frozen=True)
class RefinanceComparison:
    monthly_installment: float
    loan_term_months: int
    total_amount: float
    total_interest: float
    commission_refund: Optional[float] = None
    refinancing_costs: Optional[float] = None
    total_benefit: Optional[float] = None
    payback_period_months: Optional[int] = None


@dataclass(frozen=True)
class RefinanceVariant:
    comparison: RefinanceComparison
    schedule: List[RefinanceInstallment]


@dataclass(frozen=True)
class RefinanceResult:
    variant_a: RefinanceVariant
    variant_b: RefinanceVariant
    variant_c: RefinanceVariant
    calculation_method: str = InterestConvention.AVERAGE_MONTH.value


def calculate_refinancing_costs(advanced: RefinanceAdvancedInput, current_balance: float) -> float:
    """New-loan commission + early repayment fee + other costs.

    The commission is a percentage of the new loan; the early repayment fee
    is a percentage of the balance being repaid.
    """
    new_loan_commission = advanced.new_loan_commission.resolve(advanced.new_loan_amount)
    early_repayment_fee = advanced.early_repayment_fee.resolve(current_balance)
    return new_loan_commission + early_repayment_fee + (advanced.other_costs or 0.0)


def calculate_commission_refund(refinance_input: RefinanceInput, refinance_date: date) -> float:
    """Refund of the original commission, proportional to the unused term.

    Zero when the original commission, loan amount or start date is unknown.
    """
    advanced = refinance_input.advanced
    if not advanced.original_commission or not advanced.start_date or not advanced.original_loan_amount:
        return 0.0

    commission = advanced.original_commission.resolve(advanced.original_loan_amount)
    remaining_months = refinance_input.basic.current_remaining_period.total_months
    elapsed_months = max(0, months_between(parse_date(advanced.start_date, "start_date"), refinance_date))
    original_total_months = elapsed_months + remaining_months

    if original_total_months <= 0:
        return 0.0

    return commission * remaining_months / original_total_months


def calculate_payback_period(net_cost: float, monthly_savings: float) -> Optional[int]:
    """Months of installment savings needed to recover the net refinancing cost.

    None when the new installment is not lower; 0 when nothing needs recovering.
    """
    if monthly_savings <= 0:
        return None
    if net_cost <= 0:
        return 0
    return math.ceil(net_cost / monthly_savings)


def validate_refinance_input(refinance_input: RefinanceInput) -> date:
    """Check the inputs and return the parsed refinance date."""
    basic = refinance_input.basic
    advanced = refinance_input.advanced

    _require_positive(basic.current_loan_balance, "Current loan balance", "current_loan_balance")
    _require_positive(
        basic.current_remaining_period.total_months,
        "Remaining period of the current loan",
        "current_remaining_period",
    )
    _require_positive(basic.current_interest_rate, "Current interest rate", "current_interest_rate")
    _require_positive(basic.new_interest_rate, "New interest rate", "new_interest_rate")
    _require_positive(advanced.new_loan_amount, "New loan amount", "new_loan_amount")
    _require_positive(advanced.new_loan_term.total_months, "New loan term", "new_loan_term")

    day = advanced.installment_day_of_month
    if day is not None and not 1 <= day <= 31:
        raise ValidationError(
            "Installment day must be between 1 and 31",
            context={"installment_day_of_month": day},
        )

    refinance_date = parse_date(advanced.refinance_date, "refinance_date")
    if advanced.start_date:
        start_date = parse_date(advanced.start_date, "start_date")
        if start_date > refinance_date:
            raise ValidationError(
                "Original loan start date must not be after the refinance date",
                context={"start_date": start_date, "refinance_date": refinance_date},
            )

    return refinance_date


def _require_positive(value, label: str, field: str) -> None:
    if value is None or (isinstance(value, float) and math.isnan(value)) or value <= 0:
        raise ValidationError(f"{label} must be a number greater than zero", context={field: value})


def _comparison(schedule: LoanSchedule, **extra) -> RefinanceComparison:
    return RefinanceComparison(
        monthly_installment=schedule.monthly_installment,
        loan_term_months=schedule.term_months,
        total_amount=schedule.total_amount,
        total_interest=schedule.total_interest,
        **extra,
    )


def _refinanced_comparison(
    schedule: LoanSchedule,
    variant_a: RefinanceVariant,
    refinancing_costs: float,
    commission_refund: float,
) -> RefinanceComparison:
    """Comparison of a refinanced loan against the status quo."""
    total_benefit = variant_a.comparison.total_amount - (
        schedule.total_amount + refinancing_costs - commission_refund
    )
    monthly_savings = variant_a.comparison.monthly_installment - schedule.monthly_installment
    return _comparison(
        schedule,
        commission_refund=commission_refund,
        refinancing_costs=refinancing_costs,
        total_benefit=total_benefit,
        payback_period_months=calculate_payback_period(
            refinancing_costs - commission_refund, monthly_savings
        ),
    )


def compute_refinance(
    refinance_input: RefinanceInput,
    settings: Optional[EngineSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> RefinanceResult:
    """Compare keeping the current loan with two refinancing variants.

    Args:
        refinance_input: Current loan state and the new loan offer
        settings: Engine settings (Variant C tolerance and minimum term)
        logger: Logger to report to; defaults to the module logger

    Returns:
        RefinanceResult with variants A, B and C

    Raises:
        ValidationError: if any required input is missing or not positive
    """
    settings = settings or EngineSettings()
    logger = logger or _logger
    refinance_date = validate_refinance_input(refinance_input)

    basic = refinance_input.basic
    advanced = refinance_input.advanced
    convention = advanced.interest_convention
    new_term_months = advanced.new_loan_term.total_months

    def schedule_for(amount, rate, months, installment_type) -> LoanSchedule:
        return generate_schedule(
            amount,
            rate,
            months,
            installment_type,
            refinance_date,
            day_of_month=advanced.installment_day_of_month,
            convention=convention,
            rounding_tolerance=settings.rounding_tolerance,
        )

    current = schedule_for(
        basic.current_loan_balance,
        basic.current_interest_rate,
        basic.current_remaining_period.total_months,
        advanced.current_installment_type,
    )
    variant_a = RefinanceVariant(comparison=_comparison(current), schedule=current.installments)

    refinancing_costs = calculate_refinancing_costs(advanced, basic.current_loan_balance)
    commission_refund = calculate_commission_refund(refinance_input, refinance_date)

    lower_installment = schedule_for(
        advanced.new_loan_amount,
        basic.new_interest_rate,
        new_term_months,
        advanced.new_installment_type,
    )
    variant_b = RefinanceVariant(
        comparison=_refinanced_comparison(lower_installment, variant_a, refinancing_costs, commission_refund),
        schedule=lower_installment.installments,
    )

    max_allowed = variant_a.comparison.monthly_installment + settings.installment_tolerance
    try:
        term = shortest_term_within_limit(
            advanced.new_loan_amount,
            basic.new_interest_rate,
            advanced.new_installment_type,
            max_allowed,
            min_term=settings.min_term_months,
            max_term=new_term_months,
        )
        if term is None:
            logger.info(
                "No shorter term within the installment limit, using the nominal term",
                extra={"max_installment": max_allowed, "term_months": new_term_months},
            )
            term = new_term_months
        else:
            logger.info(
                "Shortest term within the installment limit found",
                extra={"max_installment": max_allowed, "term_months": term},
            )

        shorter = schedule_for(
            advanced.new_loan_amount,
            basic.new_interest_rate,
            term,
            advanced.new_installment_type,
        )
        variant_c = RefinanceVariant(
            comparison=_refinanced_comparison(shorter, variant_a, refinancing_costs, commission_refund),
            schedule=shorter.installments,
        )
    except Exception:
        # Variant C must never fail the whole comparison
        logger.warning("Shorter-term search failed, falling back to the nominal term", exc_info=True)
        variant_c = RefinanceVariant(
            comparison=_comparison(
                lower_installment,
                commission_refund=commission_refund,
                refinancing_costs=refinancing_costs,
                total_benefit=0.0,
                payback_period_months=0,
            ),
            schedule=lower_installment.installments,
        )

    return RefinanceResult(
        variant_a=variant_a,
        variant_b=variant_b,
        variant_c=variant_c,
        calculation_method=convention.value,
    )


def try_compute_refinance(
    refinance_input: RefinanceInput,
    settings: Optional[EngineSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> Result[RefinanceResult]:
    """Like ``compute_refinance`` but returns validation failures as a Result."""
    try:
        return Result(value=compute_refinance(refinance_input, settings=settings, logger=logger))
    except ValidationError as e:
        return Result(error=e)
