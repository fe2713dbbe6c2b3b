"""JSON export/import of calculation inputs and results, and DataFrame views."""

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .amortization import CalculationParams, CalculationResult, InstallmentDetails, ScenarioResult
from .dates import parse_date
from .mortgage import InstallmentType, InterestRateChange, LoanTerm, MortgageInput
from .overpayments import CyclicOverpayment, Overpayment, OverpaymentEffect, OverpaymentFrequency
from .refinance import (
    Commission,
    CommissionType,
    RefinanceAdvancedInput,
    RefinanceBasicInput,
    RefinanceComparison,
    RefinanceInput,
    RefinanceResult,
    RefinanceVariant,
)
from .schedule import InterestConvention, RefinanceInstallment

SCENARIO_VERSION = '1.0'


def _iso(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def loan_term_to_dict(term: LoanTerm) -> dict:
    return {'years': term.years, 'months': term.months}


def dict_to_loan_term(data: dict) -> LoanTerm:
    return LoanTerm(years=int(data.get('years', 0)), months=int(data.get('months', 0)))


def mortgage_to_dict(mortgage: MortgageInput) -> dict:
    """Convert MortgageInput to serializable dictionary."""
    return {
        'loan_amount': mortgage.loan_amount,
        'interest_rate': mortgage.interest_rate,
        'loan_term': loan_term_to_dict(mortgage.loan_term),
        'installment_type': mortgage.installment_type.value,
        'start_date': _iso(mortgage.start_date),
        'interest_rate_changes': [
            {'date': _iso(c.date), 'new_rate': c.new_rate}
            for c in mortgage.interest_rate_changes
        ],
    }


def dict_to_mortgage(data: dict) -> MortgageInput:
    """Convert dictionary to MortgageInput."""
    return MortgageInput(
        loan_amount=data['loan_amount'],
        interest_rate=data['interest_rate'],
        loan_term=dict_to_loan_term(data['loan_term']),
        installment_type=InstallmentType(data.get('installment_type', 'equal')),
        start_date=parse_date(data['start_date'], 'start_date'),
        interest_rate_changes=[
            InterestRateChange(date=parse_date(c['date']), new_rate=c['new_rate'])
            for c in data.get('interest_rate_changes', [])
        ],
    )


def cyclic_overpayment_to_dict(cyclic: CyclicOverpayment) -> dict:
    return {
        'amount': cyclic.amount,
        'frequency': cyclic.frequency.value,
        'start_date': _iso(cyclic.start_date),
        'end_date': _iso(cyclic.end_date),
    }


def dict_to_cyclic_overpayment(data: dict) -> CyclicOverpayment:
    return CyclicOverpayment(
        amount=data['amount'],
        frequency=OverpaymentFrequency(data.get('frequency', 'monthly')),
        start_date=parse_date(data['start_date']) if data.get('start_date') else None,
        end_date=parse_date(data['end_date']) if data.get('end_date') else None,
    )


def params_to_dict(params: CalculationParams) -> dict:
    """Convert CalculationParams to serializable dictionary."""
    return {
        'mortgage_input': mortgage_to_dict(params.mortgage_input),
        'overpayments': [
            {'date': _iso(op.date), 'amount': op.amount} for op in params.overpayments
        ],
        'cyclic_overpayment': (
            cyclic_overpayment_to_dict(params.cyclic_overpayment)
            if params.cyclic_overpayment else None
        ),
        'overpayment_effect': params.overpayment_effect.value,
    }


def dict_to_params(data: dict) -> CalculationParams:
    """Convert dictionary to CalculationParams."""
    cyclic = data.get('cyclic_overpayment')
    return CalculationParams(
        mortgage_input=dict_to_mortgage(data['mortgage_input']),
        overpayments=[
            Overpayment(date=parse_date(op['date']), amount=op['amount'])
            for op in data.get('overpayments', [])
        ],
        cyclic_overpayment=dict_to_cyclic_overpayment(cyclic) if cyclic else None,
        overpayment_effect=OverpaymentEffect(data.get('overpayment_effect', 'reduce_period')),
    )


def _commission_to_dict(commission: Optional[Commission]) -> Optional[dict]:
    if commission is None:
        return None
    return {'type': commission.type.value, 'value': commission.value}


def _dict_to_commission(data: Optional[dict]) -> Optional[Commission]:
    if not data:
        return None
    return Commission(type=CommissionType(data.get('type', 'amount')), value=data.get('value', 0.0))


def refinance_input_to_dict(refinance_input: RefinanceInput) -> dict:
    """Convert RefinanceInput to serializable dictionary."""
    basic = refinance_input.basic
    advanced = refinance_input.advanced
    return {
        'basic': {
            'current_loan_balance': basic.current_loan_balance,
            'current_remaining_period': loan_term_to_dict(basic.current_remaining_period),
            'current_interest_rate': basic.current_interest_rate,
            'new_interest_rate': basic.new_interest_rate,
        },
        'advanced': {
            'refinance_date': _iso(advanced.refinance_date),
            'new_loan_amount': advanced.new_loan_amount,
            'new_loan_term': loan_term_to_dict(advanced.new_loan_term),
            'current_installment_type': advanced.current_installment_type.value,
            'new_installment_type': advanced.new_installment_type.value,
            'new_loan_commission': _commission_to_dict(advanced.new_loan_commission),
            'early_repayment_fee': _commission_to_dict(advanced.early_repayment_fee),
            'other_costs': advanced.other_costs,
            'original_loan_amount': advanced.original_loan_amount,
            'start_date': _iso(advanced.start_date),
            'original_commission': _commission_to_dict(advanced.original_commission),
            'installment_day_of_month': advanced.installment_day_of_month,
            'interest_convention': advanced.interest_convention.value,
        },
    }


def dict_to_refinance_input(data: dict) -> RefinanceInput:
    """Convert dictionary to RefinanceInput."""
    basic = data['basic']
    advanced = data['advanced']
    return RefinanceInput(
        basic=RefinanceBasicInput(
            current_loan_balance=basic['current_loan_balance'],
            current_remaining_period=dict_to_loan_term(basic['current_remaining_period']),
            current_interest_rate=basic['current_interest_rate'],
            new_interest_rate=basic['new_interest_rate'],
        ),
        advanced=RefinanceAdvancedInput(
            refinance_date=advanced['refinance_date'],
            new_loan_amount=advanced['new_loan_amount'],
            new_loan_term=dict_to_loan_term(advanced['new_loan_term']),
            current_installment_type=InstallmentType(advanced.get('current_installment_type', 'equal')),
            new_installment_type=InstallmentType(advanced.get('new_installment_type', 'equal')),
            new_loan_commission=_dict_to_commission(advanced.get('new_loan_commission')) or Commission(),
            early_repayment_fee=_dict_to_commission(advanced.get('early_repayment_fee')) or Commission(),
            other_costs=advanced.get('other_costs') or 0.0,
            original_loan_amount=advanced.get('original_loan_amount'),
            start_date=advanced.get('start_date'),
            original_commission=_dict_to_commission(advanced.get('original_commission')),
            installment_day_of_month=advanced.get('installment_day_of_month'),
            interest_convention=InterestConvention(advanced.get('interest_convention', 'monthly')),
        ),
    )


def _installment_to_dict(installment: InstallmentDetails) -> dict:
    return {
        'installment_number': installment.installment_number,
        'date': _iso(installment.date),
        'total_amount': installment.total_amount,
        'principal_amount': installment.principal_amount,
        'interest_amount': installment.interest_amount,
        'overpayment_amount': installment.overpayment_amount,
        'remaining_debt': installment.remaining_debt,
        'one_time_overpayment': installment.one_time_overpayment,
        'progressive_overpayment': installment.progressive_overpayment,
    }


def _scenario_to_dict(scenario: ScenarioResult) -> dict:
    return {
        'installments': [_installment_to_dict(i) for i in scenario.installments],
        'summary': {
            'total_payment': scenario.summary.total_payment,
            'total_interest': scenario.summary.total_interest,
            'loan_term': loan_term_to_dict(scenario.summary.loan_term),
        },
    }


def calculation_result_to_dict(result: CalculationResult) -> dict:
    """Convert CalculationResult to serializable dictionary."""
    savings = result.savings
    return {
        'base_scenario': _scenario_to_dict(result.base_scenario),
        'overpayment_scenario': _scenario_to_dict(result.overpayment_scenario),
        'savings': {
            'total_amount': savings.total_amount,
            'interest_amount': savings.interest_amount,
            'time_reduction': (
                loan_term_to_dict(savings.time_reduction) if savings.time_reduction else None
            ),
        },
    }


def _comparison_to_dict(comparison: RefinanceComparison) -> dict:
    return {
        'monthly_installment': comparison.monthly_installment,
        'loan_term_months': comparison.loan_term_months,
        'total_amount': comparison.total_amount,
        'total_interest': comparison.total_interest,
        'commission_refund': comparison.commission_refund,
        'refinancing_costs': comparison.refinancing_costs,
        'total_benefit': comparison.total_benefit,
        'payback_period_months': comparison.payback_period_months,
    }


def _refinance_installment_to_dict(installment: RefinanceInstallment) -> dict:
    return {
        'date': _iso(installment.date),
        'installment_number': installment.installment_number,
        'amount': installment.amount,
        'principal': installment.principal,
        'interest': installment.interest,
        'remaining_balance': installment.remaining_balance,
        'days_in_period': installment.days_in_period,
    }


def _variant_to_dict(variant: RefinanceVariant) -> dict:
    return {
        'comparison': _comparison_to_dict(variant.comparison),
        'schedule': [_refinance_installment_to_dict(i) for i in variant.schedule],
    }


def refinance_result_to_dict(result: RefinanceResult) -> dict:
    """Convert RefinanceResult to serializable dictionary."""
    return {
        'variant_a': _variant_to_dict(result.variant_a),
        'variant_b': _variant_to_dict(result.variant_b),
        'variant_c': _variant_to_dict(result.variant_c),
        'calculation_method': result.calculation_method,
    }


def installments_to_dataframe(installments: List[InstallmentDetails]) -> pd.DataFrame:
    """Amortization installments as a DataFrame, one row per period.

    Adds cumulative interest and principal columns for charting.
    """
    df = pd.DataFrame([_installment_to_dict(i) for i in installments])
    if df.empty:
        return df
    df['date'] = pd.to_datetime(df['date'])
    df['cumulative_interest'] = df['interest_amount'].cumsum()
    df['cumulative_principal'] = (df['principal_amount'] + df['overpayment_amount']).cumsum()
    return df


def refinance_schedule_to_dataframe(schedule: List[RefinanceInstallment]) -> pd.DataFrame:
    """Refinance schedule as a DataFrame, one row per installment."""
    df = pd.DataFrame([_refinance_installment_to_dict(i) for i in schedule])
    if df.empty:
        return df
    df['date'] = pd.to_datetime(df['date'])
    df['cumulative_interest'] = df['interest'].cumsum()
    return df


@dataclass
class Scenario:
    """Saved inputs of a planning session."""

    name: str
    description: str = ''
    calculation: Optional[Dict[str, Any]] = None
    refinance: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    version: str = field(default=SCENARIO_VERSION)

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.now().isoformat()
        if self.updated_at is None:
            self.updated_at = self.created_at

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'description': self.description,
            'calculation': self.calculation,
            'refinance': self.refinance,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'version': self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Scenario':
        return cls(
            name=data['name'],
            description=data.get('description', ''),
            calculation=data.get('calculation'),
            refinance=data.get('refinance'),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
            version=data.get('version', SCENARIO_VERSION),
        )


def export_scenario(scenario: Scenario, filepath: str) -> None:
    """Export scenario to JSON file."""
    data = scenario.to_dict()
    data['updated_at'] = datetime.now().isoformat()

    with open(filepath, 'w') as f:
        json.dump(data, f, indent=2)


def import_scenario(filepath: str) -> Scenario:
    """Import scenario from JSON file."""
    with open(filepath, 'r') as f:
        data = json.load(f)

    return Scenario.from_dict(data)


def list_scenarios(directory: str) -> List[str]:
    """List scenario files (by stem) in a directory."""
    path = Path(directory)
    if not path.exists():
        return []
    return sorted(f.stem for f in path.glob('*.json'))
