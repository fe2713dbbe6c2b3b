"""Tests for the shortest-term search."""

import numpy as np
import pytest

from src.errors import ComputationError
from src.mortgage import InstallmentType
from src.term_search import installment_for_term, installments_for_terms, shortest_term_within_limit


class TestInstallmentsForTerms:
    """Tests for the vectorized installment calculation."""

    @pytest.mark.parametrize("installment_type", list(InstallmentType))
    @pytest.mark.parametrize("rate", [0.0, 4.5, 9.0])
    def test_matches_scalar(self, installment_type, rate):
        terms = np.array([12, 60, 180, 360])
        vectorized = installments_for_terms(250000, rate, installment_type, terms)

        for term, value in zip(terms, vectorized):
            assert value == pytest.approx(installment_for_term(250000, rate, installment_type, int(term)))

    def test_shorter_terms_cost_more(self):
        values = installments_for_terms(250000, 6.0, InstallmentType.EQUAL, np.arange(12, 361))
        assert np.all(np.diff(values) < 0)


class TestShortestTermWithinLimit:
    """Tests for shortest_term_within_limit."""

    def test_finds_exact_term(self):
        limit = installment_for_term(200000, 6.0, InstallmentType.EQUAL, 180) + 0.01

        assert shortest_term_within_limit(200000, 6.0, InstallmentType.EQUAL, limit) == 180

    def test_matches_linear_scan(self):
        limit = 2500.0
        expected = next(
            term for term in range(12, 421)
            if installment_for_term(300000, 5.0, InstallmentType.DECREASING, term) <= limit
        )

        assert shortest_term_within_limit(300000, 5.0, InstallmentType.DECREASING, limit) == expected

    def test_zero_rate(self):
        assert shortest_term_within_limit(120000, 0.0, InstallmentType.EQUAL, 1000.0) == 120

    def test_min_term_floor(self):
        """A generous limit still returns no less than the minimum term."""
        assert shortest_term_within_limit(10000, 5.0, InstallmentType.EQUAL, 1e9, min_term=12) == 12

    def test_no_term_fits(self):
        assert shortest_term_within_limit(300000, 6.0, InstallmentType.EQUAL, 100.0) is None

    def test_non_finite_installment(self):
        with pytest.raises(ComputationError):
            shortest_term_within_limit(float("inf"), 6.0, InstallmentType.EQUAL, 1000.0)

    def test_empty_range(self):
        assert shortest_term_within_limit(300000, 6.0, InstallmentType.EQUAL, 1e9, min_term=24, max_term=12) is None
