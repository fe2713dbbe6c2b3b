"""Search for the shortest loan term whose installment fits a limit."""

from typing import Optional

import numpy as np

from .errors import ComputationError
from .mortgage import (
    InstallmentType,
    calculate_decreasing_installment,
    calculate_equal_installment,
)


def installment_for_term(
    loan_amount: float,
    annual_rate: float,
    installment_type: InstallmentType,
    months: int,
) -> float:
    """Installment of a loan repaid over ``months`` (average-month convention).

    For decreasing installments this is the first, largest installment.
    """
    monthly_rate = annual_rate / 100 / 12
    if installment_type == InstallmentType.EQUAL:
        return calculate_equal_installment(loan_amount, monthly_rate, months)
    return calculate_decreasing_installment(loan_amount, monthly_rate, months)


def installments_for_terms(
    loan_amount: float,
    annual_rate: float,
    installment_type: InstallmentType,
    terms: np.ndarray,
) -> np.ndarray:
    """Vectorized ``installment_for_term`` over an array of terms in months."""
    terms = np.asarray(terms, dtype=float)
    monthly_rate = annual_rate / 100 / 12

    if installment_type == InstallmentType.DECREASING:
        return loan_amount / terms + loan_amount * monthly_rate

    if monthly_rate == 0:
        return loan_amount / terms

    growth = (1 + monthly_rate) ** terms
    return loan_amount * monthly_rate * growth / (growth - 1)


def shortest_term_within_limit(
    loan_amount: float,
    annual_rate: float,
    installment_type: InstallmentType,
    max_installment: float,
    min_term: int = 12,
    max_term: int = 420,
) -> Optional[int]:
    """Find the shortest term (in months) whose installment is <= ``max_installment``.

    Shorter terms mean higher installments, so the first candidate from
    ``min_term`` upward that fits is the shortest term.

    Returns:
        The term in months, or None if even ``max_term`` exceeds the limit.

    Raises:
        ComputationError: if an installment is not a finite number
    """
    terms = np.arange(max(min_term, 1), max_term + 1)
    if terms.size == 0:
        return None

    installments = installments_for_terms(loan_amount, annual_rate, installment_type, terms)
    if not np.all(np.isfinite(installments)):
        raise ComputationError(
            "Installment search produced a non-finite installment",
            context={"loan_amount": loan_amount, "annual_rate": annual_rate},
        )

    fits = np.flatnonzero(installments <= max_installment)
    if fits.size == 0:
        return None
    return int(terms[fits[0]])
