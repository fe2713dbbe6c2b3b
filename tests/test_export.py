"""Tests for JSON export/import and DataFrame views."""

import json
from datetime import date

import pandas as pd
import pytest

from src.amortization import CalculationParams, compute_amortization
from src.mortgage import InstallmentType, InterestRateChange, LoanTerm, MortgageInput
from src.overpayments import CyclicOverpayment, Overpayment, OverpaymentEffect, OverpaymentFrequency
from src.refinance import (
    Commission,
    CommissionType,
    RefinanceAdvancedInput,
    RefinanceBasicInput,
    RefinanceInput,
    compute_refinance,
)
from src.export import (
    Scenario,
    calculation_result_to_dict,
    dict_to_params,
    dict_to_refinance_input,
    export_scenario,
    import_scenario,
    installments_to_dataframe,
    list_scenarios,
    params_to_dict,
    refinance_input_to_dict,
    refinance_result_to_dict,
    refinance_schedule_to_dataframe,
)


@pytest.fixture
def params():
    return CalculationParams(
        mortgage_input=MortgageInput(
            loan_amount=300000,
            interest_rate=7.5,
            loan_term=LoanTerm(years=25),
            installment_type=InstallmentType.EQUAL,
            start_date=date(2024, 1, 1),
            interest_rate_changes=[InterestRateChange(date=date(2026, 1, 1), new_rate=6.5)],
        ),
        overpayments=[Overpayment(date=date(2024, 6, 1), amount=50000)],
        cyclic_overpayment=CyclicOverpayment(
            amount=1000,
            frequency=OverpaymentFrequency.QUARTERLY,
            end_date=date(2030, 1, 1),
        ),
        overpayment_effect=OverpaymentEffect.REDUCE_INSTALLMENT,
    )


@pytest.fixture
def refinance_input():
    return RefinanceInput(
        basic=RefinanceBasicInput(
            current_loan_balance=250000,
            current_remaining_period=LoanTerm(years=20, months=3),
            current_interest_rate=7.5,
            new_interest_rate=6.0,
        ),
        advanced=RefinanceAdvancedInput(
            refinance_date="2024-01-01",
            new_loan_amount=255000,
            new_loan_term=LoanTerm(years=20),
            new_loan_commission=Commission(CommissionType.PERCENTAGE, 1.5),
            original_loan_amount=300000,
            start_date="2019-01-01",
            original_commission=Commission(CommissionType.AMOUNT, 3000),
        ),
    )


class TestParamsSerialization:
    """Tests for calculation input conversion."""

    def test_restores_params(self, params):
        data = params_to_dict(params)

        assert data['mortgage_input']['start_date'] == '2024-01-01'
        assert data['overpayment_effect'] == 'reduce_installment'
        assert dict_to_params(json.loads(json.dumps(data))) == params

    def test_defaults_for_missing_fields(self):
        data = {
            'mortgage_input': {
                'loan_amount': 100000,
                'interest_rate': 5.0,
                'loan_term': {'years': 10},
                'start_date': '2024-01',
            },
        }
        restored = dict_to_params(data)

        assert restored.mortgage_input.installment_type == InstallmentType.EQUAL
        assert restored.mortgage_input.start_date == date(2024, 1, 1)
        assert restored.overpayments == []
        assert restored.cyclic_overpayment is None
        assert restored.overpayment_effect == OverpaymentEffect.REDUCE_PERIOD


class TestRefinanceSerialization:
    """Tests for refinance input conversion."""

    def test_restores_input(self, refinance_input):
        data = refinance_input_to_dict(refinance_input)
        restored = dict_to_refinance_input(json.loads(json.dumps(data)))

        assert refinance_input_to_dict(restored) == data
        assert restored.advanced.new_loan_commission == Commission(CommissionType.PERCENTAGE, 1.5)


class TestResultSerialization:
    """Tests for result conversion."""

    def test_calculation_result_is_json(self, params):
        data = calculation_result_to_dict(compute_amortization(params))
        encoded = json.loads(json.dumps(data))

        assert encoded['savings']['time_reduction'] is None
        assert encoded['overpayment_scenario']['installments'][5]['one_time_overpayment'] == 50000
        assert encoded['base_scenario']['summary']['loan_term'] == {'years': 25, 'months': 0}

    def test_refinance_result_is_json(self, refinance_input):
        data = refinance_result_to_dict(compute_refinance(refinance_input))
        encoded = json.loads(json.dumps(data))

        assert set(encoded) == {'variant_a', 'variant_b', 'variant_c', 'calculation_method'}
        assert encoded['variant_b']['comparison']['commission_refund'] > 0
        assert encoded['variant_a']['schedule'][0]['date'] == '2024-02-01'


class TestDataFrames:
    """Tests for DataFrame views."""

    def test_installments_to_dataframe(self, params):
        result = compute_amortization(params)
        df = installments_to_dataframe(result.overpayment_scenario.installments)

        assert len(df) == len(result.overpayment_scenario.installments)
        assert pd.api.types.is_datetime64_any_dtype(df['date'])
        assert df['cumulative_interest'].iloc[-1] == pytest.approx(
            result.overpayment_scenario.summary.total_interest
        )
        assert df['cumulative_principal'].iloc[-1] == pytest.approx(300000)

    def test_empty_installments(self):
        assert installments_to_dataframe([]).empty

    def test_refinance_schedule_to_dataframe(self, refinance_input):
        result = compute_refinance(refinance_input)
        df = refinance_schedule_to_dataframe(result.variant_a.schedule)

        assert len(df) == 243
        assert df['cumulative_interest'].iloc[-1] == pytest.approx(result.variant_a.comparison.total_interest)


class TestScenarioFiles:
    """Tests for scenario import/export."""

    def test_export_and_import(self, tmp_path, params, refinance_input):
        scenario = Scenario(
            name='Test',
            description='Overpay and refinance',
            calculation=params_to_dict(params),
            refinance=refinance_input_to_dict(refinance_input),
        )
        filepath = tmp_path / 'test.json'

        export_scenario(scenario, str(filepath))
        loaded = import_scenario(str(filepath))

        assert loaded.name == 'Test'
        assert loaded.created_at == scenario.created_at
        assert dict_to_params(loaded.calculation) == params
        assert loaded.refinance == scenario.refinance

    def test_from_dict_defaults(self):
        scenario = Scenario.from_dict({'name': 'Bare'})

        assert scenario.description == ''
        assert scenario.calculation is None
        assert scenario.version == '1.0'
        assert scenario.updated_at == scenario.created_at

    def test_list_scenarios(self, tmp_path):
        for name in ('b', 'a'):
            export_scenario(Scenario(name=name), str(tmp_path / f'{name}.json'))
        (tmp_path / 'notes.txt').write_text('ignored')

        assert list_scenarios(str(tmp_path)) == ['a', 'b']
        assert list_scenarios(str(tmp_path / 'missing')) == []
