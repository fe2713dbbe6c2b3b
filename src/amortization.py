"""Month-by-month amortization with overpayment strategies.

Each calculation runs two scenarios over the same loan: a baseline without
overpayments and one with them. Interest accrues on calendar days
(``rate / 365 * days in month``) while installments use the nominal monthly
rate (``rate / 12``), so 31-day months cost more interest than 30-day ones.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from .config import EngineSettings
from .dates import add_calendar_months, days_in_month
from .errors import Result, ValidationError
from .logging_config import get_logger
from .mortgage import (
    InstallmentType,
    LoanTerm,
    MortgageInput,
    calculate_equal_installment,
)
from .overpayments import (
    CyclicOverpayment,
    Overpayment,
    OverpaymentEffect,
    expand_overpayments,
    is_cyclic_overpayment_month,
)

_logger = get_logger("amortization")

_RECALCULATING_EFFECTS = (
    OverpaymentEffect.REDUCE_INSTALLMENT,
    OverpaymentEffect.PROGRESSIVE_OVERPAYMENT,
)


@dataclass(frozen=True)
class CalculationParams:
    """Everything needed to run both scenarios."""

    mortgage_input: MortgageInput
    overpayments: List[Overpayment] = field(default_factory=list)
    cyclic_overpayment: Optional[CyclicOverpayment] = None
    overpayment_effect: OverpaymentEffect = OverpaymentEffect.REDUCE_PERIOD

    def validate(self) -> None:
        self.mortgage_input.validate()
        for overpayment in self.overpayments:
            overpayment.validate()
        if self.cyclic_overpayment is not None:
            self.cyclic_overpayment.validate()


@dataclass(frozen=True)
class InstallmentDetails:
    """One period of a schedule. ``total_amount`` excludes the overpayment."""

    installment_number: int
    date: date
    total_amount: float
    principal_amount: float
    interest_amount: float
    overpayment_amount: float
    remaining_debt: float
    one_time_overpayment: float = 0.0
    progressive_overpayment: float = 0.0


@dataclass(frozen=True)
class ScenarioSummary:
    total_payment: float
    total_interest: float
    loan_term: LoanTerm


@dataclass(frozen=True)
class ScenarioResult:
    installments: List[InstallmentDetails]
    summary: ScenarioSummary


@dataclass(frozen=True)
class Savings:
    total_amount: float
    interest_amount: float
    time_reduction: Optional[LoanTerm] = None


@dataclass(frozen=True)
class CalculationResult:
    base_scenario: ScenarioResult
    overpayment_scenario: ScenarioResult
    savings: Savings


def compute_scenario(
    params: CalculationParams,
    include_overpayments: bool,
    settings: Optional[EngineSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> ScenarioResult:
    """Simulate the loan period by period.

    Args:
        params: Loan, overpayments and overpayment effect
        include_overpayments: False for the baseline scenario
        settings: Engine settings (iteration guard)
        logger: Logger to report to; defaults to the module logger

    Returns:
        ScenarioResult with one InstallmentDetails per paid period
    """
    settings = settings or EngineSettings()
    logger = logger or _logger
    params.validate()

    mortgage = params.mortgage_input
    effect = params.overpayment_effect
    cyclic = params.cyclic_overpayment
    loan_amount = mortgage.loan_amount
    total_months = mortgage.total_months

    rate_changes = sorted(mortgage.interest_rate_changes, key=lambda c: c.date)
    next_change = 0
    current_rate = mortgage.interest_rate

    overpayments_by_month: Dict[Tuple[int, int], float] = defaultdict(float)
    if include_overpayments:
        expanded = expand_overpayments(
            params.overpayments, cyclic, mortgage.start_date, total_months, effect
        )
        for op in expanded:
            overpayments_by_month[(op.date.year, op.date.month)] += op.amount

    recalculate = include_overpayments and effect in _RECALCULATING_EFFECTS
    progressive = (
        include_overpayments
        and effect == OverpaymentEffect.PROGRESSIVE_OVERPAYMENT
        and cyclic is not None
    )

    # Installment the borrower was originally going to pay; progressive mode
    # redirects any reduction below it into extra principal.
    base_installment = mortgage.monthly_payment

    # The installment is derived from this balance and number of months. In
    # recalculating modes it follows the remaining debt and months from the
    # first overpayment on.
    basis_principal = loan_amount
    basis_months = total_months
    rebasing = False

    installments = []
    remaining_debt = loan_amount
    months_remaining = total_months
    total_payment = 0.0
    total_interest = 0.0
    installment_number = 1
    current_date = mortgage.start_date
    max_iterations = total_months + settings.iteration_margin

    while remaining_debt > 0 and months_remaining > 0:
        if installment_number > max_iterations:
            logger.warning(
                "Iteration limit reached, stopping schedule",
                extra={"iterations": max_iterations, "remaining_debt": remaining_debt},
            )
            break

        while next_change < len(rate_changes) and rate_changes[next_change].date <= current_date:
            current_rate = rate_changes[next_change].new_rate
            next_change += 1

        interest = remaining_debt * (current_rate / 100 / 365) * days_in_month(current_date)
        monthly_rate = current_rate / 100 / 12

        if mortgage.installment_type == InstallmentType.EQUAL:
            nominal_installment = calculate_equal_installment(basis_principal, monthly_rate, basis_months)
            principal = min(nominal_installment - interest, remaining_debt)
        else:
            principal = min(basis_principal / basis_months, remaining_debt)
            nominal_installment = principal + interest

        # Interest above the installment is not capitalised
        principal = max(principal, 0.0)

        # Last scheduled month settles what daily accrual left over
        if months_remaining == 1:
            principal = remaining_debt

        one_time = 0.0
        progressive_amount = 0.0
        if include_overpayments:
            one_time = overpayments_by_month.get((current_date.year, current_date.month), 0.0)
            if progressive and is_cyclic_overpayment_month(current_date, cyclic, mortgage.start_date):
                progressive_amount = cyclic.amount + max(0.0, base_installment - nominal_installment)

        overpayment = one_time + progressive_amount
        if overpayment >= remaining_debt - principal:
            # Payoff period: the overpayment goes first and the regular
            # principal shrinks to whatever is left, so the sum never
            # exceeds the debt.
            overpayment = min(overpayment, remaining_debt)
            principal = remaining_debt - overpayment
            remaining_debt = 0.0
        else:
            remaining_debt = max(0.0, remaining_debt - (principal + overpayment))

        total_amount = principal + interest
        installments.append(InstallmentDetails(
            installment_number=installment_number,
            date=current_date,
            total_amount=total_amount,
            principal_amount=principal,
            interest_amount=interest,
            overpayment_amount=overpayment,
            remaining_debt=remaining_debt,
            one_time_overpayment=one_time,
            progressive_overpayment=progressive_amount,
        ))

        total_payment += total_amount + overpayment
        total_interest += interest

        if overpayment > 0:
            logger.debug(
                "Overpayment applied",
                extra={
                    "installment_number": installment_number,
                    "one_time": one_time,
                    "progressive": progressive_amount,
                    "applied": overpayment,
                },
            )

        months_remaining -= 1
        rebasing = rebasing or (recalculate and overpayment > 0)
        if rebasing and months_remaining > 0:
            basis_principal = remaining_debt
            basis_months = months_remaining

        current_date = add_calendar_months(mortgage.start_date, installment_number)
        installment_number += 1

    return ScenarioResult(
        installments=installments,
        summary=ScenarioSummary(
            total_payment=total_payment,
            total_interest=total_interest,
            loan_term=LoanTerm.from_months(len(installments)),
        ),
    )


def compute_amortization(
    params: CalculationParams,
    settings: Optional[EngineSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> CalculationResult:
    """Run the baseline and overpayment scenarios and derive the savings.

    Raises:
        ValidationError: if the loan or overpayments are invalid
    """
    logger = logger or _logger
    params.validate()

    effect = params.overpayment_effect
    logger.info(
        "Computing amortization",
        extra={
            "loan_amount": params.mortgage_input.loan_amount,
            "term_months": params.mortgage_input.total_months,
            "effect": effect.value,
        },
    )

    base = compute_scenario(params, False, settings=settings, logger=logger)
    with_overpayments = compute_scenario(params, True, settings=settings, logger=logger)

    time_reduction = None
    if effect in (OverpaymentEffect.REDUCE_PERIOD, OverpaymentEffect.PROGRESSIVE_OVERPAYMENT):
        months_saved = len(base.installments) - len(with_overpayments.installments)
        time_reduction = LoanTerm.from_months(months_saved)

    savings = Savings(
        total_amount=base.summary.total_payment - with_overpayments.summary.total_payment,
        interest_amount=base.summary.total_interest - with_overpayments.summary.total_interest,
        time_reduction=time_reduction,
    )

    return CalculationResult(
        base_scenario=base,
        overpayment_scenario=with_overpayments,
        savings=savings,
    )


def try_compute_amortization(
    params: CalculationParams,
    settings: Optional[EngineSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> Result[CalculationResult]:
    """Like ``compute_amortization`` but returns validation failures as a Result."""
    try:
        return Result(value=compute_amortization(params, settings=settings, logger=logger))
    except ValidationError as e:
        return Result(error=e)
