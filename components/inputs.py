"""Streamlit input components for mortgage and refinance parameters."""

import datetime
from typing import List, Optional, Tuple

import pandas as pd
import streamlit as st

from src.mortgage import MAX_TERM_YEARS, InstallmentType, InterestRateChange, LoanTerm, MortgageInput
from src.overpayments import CyclicOverpayment, Overpayment, OverpaymentEffect, OverpaymentFrequency
from src.refinance import (
    Commission,
    CommissionType,
    RefinanceAdvancedInput,
    RefinanceBasicInput,
    RefinanceInput,
)
from src.schedule import InterestConvention

INSTALLMENT_TYPE_LABELS = {
    "Equal installments": InstallmentType.EQUAL,
    "Decreasing installments": InstallmentType.DECREASING,
}

EFFECT_LABELS = {
    "Shorten the loan term": OverpaymentEffect.REDUCE_PERIOD,
    "Lower the installment": OverpaymentEffect.REDUCE_INSTALLMENT,
    "Progressive overpayment": OverpaymentEffect.PROGRESSIVE_OVERPAYMENT,
}

FREQUENCY_LABELS = {
    "Monthly": OverpaymentFrequency.MONTHLY,
    "Quarterly": OverpaymentFrequency.QUARTERLY,
    "Semi-annually": OverpaymentFrequency.SEMIANNUALLY,
    "Annually": OverpaymentFrequency.ANNUALLY,
}


def _loan_term_input(label: str, key_prefix: str, default_years: int) -> LoanTerm:
    col1, col2 = st.columns(2)
    with col1:
        years = st.number_input(
            f"{label} (years)",
            min_value=0,
            max_value=MAX_TERM_YEARS,
            value=default_years,
            step=1,
            key=f"{key_prefix}_years",
        )
    with col2:
        months = st.number_input(
            f"{label} (months)",
            min_value=0,
            max_value=11,
            value=0,
            step=1,
            key=f"{key_prefix}_months",
        )
    return LoanTerm(years=int(years), months=int(months))


def _commission_input(label: str, key_prefix: str, help_text: str = None) -> Commission:
    col1, col2 = st.columns([1, 2])
    with col1:
        kind = st.selectbox(
            f"{label} type",
            options=["Amount", "Percentage"],
            key=f"{key_prefix}_type",
        )
    with col2:
        value = st.number_input(
            f"{label} ({'%' if kind == 'Percentage' else 'amount'})",
            min_value=0.0,
            value=0.0,
            step=0.1 if kind == "Percentage" else 100.0,
            format="%.2f",
            key=f"{key_prefix}_value",
            help=help_text,
        )
    commission_type = CommissionType.PERCENTAGE if kind == "Percentage" else CommissionType.AMOUNT
    return Commission(type=commission_type, value=value)


def mortgage_input_form(key_prefix: str = "mortgage") -> Optional[MortgageInput]:
    """Create input form for mortgage parameters.

    Returns MortgageInput object or None if inputs are invalid.
    """
    col1, col2 = st.columns(2)

    with col1:
        loan_amount = st.number_input(
            "Loan Amount",
            min_value=1000.0,
            max_value=10000000.0,
            value=300000.0,
            step=5000.0,
            format="%.2f",
            key=f"{key_prefix}_amount",
            help="The total amount borrowed",
        )

        interest_rate = st.number_input(
            "Interest Rate (%)",
            min_value=0.0,
            max_value=100.0,
            value=7.5,
            step=0.05,
            format="%.3f",
            key=f"{key_prefix}_rate",
            help="Annual interest rate as a percentage",
        )

    with col2:
        installment_label = st.selectbox(
            "Installment Type",
            options=list(INSTALLMENT_TYPE_LABELS),
            index=0,
            key=f"{key_prefix}_installment_type",
        )

        start_date = st.date_input(
            "Start Date",
            value=datetime.date(2024, 1, 1),
            key=f"{key_prefix}_start",
            help="Date of the first installment",
        )

    loan_term = _loan_term_input("Loan Term", f"{key_prefix}_term", default_years=25)

    with st.expander("Interest rate changes"):
        rate_changes = rate_change_editor(key_prefix=f"{key_prefix}_rate_changes")

    if loan_amount > 0 and loan_term.total_months > 0:
        return MortgageInput(
            loan_amount=loan_amount,
            interest_rate=interest_rate,
            loan_term=loan_term,
            installment_type=INSTALLMENT_TYPE_LABELS[installment_label],
            start_date=start_date,
            interest_rate_changes=rate_changes,
        )

    return None


def rate_change_editor(key_prefix: str = "rate_changes") -> List[InterestRateChange]:
    """Editable table of interest rate changes."""
    edited = st.data_editor(
        pd.DataFrame({"date": pd.Series(dtype="datetime64[ns]"), "new_rate": pd.Series(dtype="float")}),
        num_rows="dynamic",
        column_config={
            "date": st.column_config.DateColumn("Effective From"),
            "new_rate": st.column_config.NumberColumn("New Rate (%)", min_value=0.0, max_value=100.0,
                                                      format="%.3f"),
        },
        key=key_prefix,
        use_container_width=True,
    )

    changes = []
    for row in edited.dropna().itertuples():
        changes.append(InterestRateChange(date=pd.Timestamp(row.date).date(), new_rate=float(row.new_rate)))
    return changes


def overpayment_input(
    key_prefix: str = "overpayment",
) -> Tuple[List[Overpayment], Optional[CyclicOverpayment], OverpaymentEffect]:
    """Create input widgets for one-time and cyclic overpayments.

    Returns (one-time overpayments, cyclic overpayment or None, effect).
    """
    st.subheader("Overpayment Effect")

    effect_label = st.radio(
        "Apply overpayments to",
        options=list(EFFECT_LABELS),
        index=0,
        key=f"{key_prefix}_effect",
        help="Progressive overpayment keeps paying the original installment and adds the "
             "difference to the cyclic overpayment",
    )
    effect = EFFECT_LABELS[effect_label]

    st.subheader("Cyclic Overpayment")

    cyclic = None
    cyclic_enabled = st.checkbox(
        "Add recurring overpayment",
        key=f"{key_prefix}_cyclic_enabled",
    )

    if cyclic_enabled:
        col1, col2 = st.columns(2)

        with col1:
            amount = st.number_input(
                "Overpayment Amount",
                min_value=0.0,
                max_value=100000.0,
                value=500.0,
                step=50.0,
                format="%.2f",
                key=f"{key_prefix}_cyclic_amount",
            )
            start_date = st.date_input(
                "First Overpayment",
                value=None,
                key=f"{key_prefix}_cyclic_start",
                help="Defaults to the loan start date",
            )

        with col2:
            frequency = st.selectbox(
                "Frequency",
                options=list(FREQUENCY_LABELS),
                index=0,
                key=f"{key_prefix}_cyclic_frequency",
            )
            end_date = st.date_input(
                "Last Overpayment",
                value=None,
                key=f"{key_prefix}_cyclic_end",
                help="Defaults to the end of the loan",
            )

        if amount > 0:
            cyclic = CyclicOverpayment(
                amount=amount,
                frequency=FREQUENCY_LABELS[frequency],
                start_date=start_date,
                end_date=end_date,
            )

    st.subheader("One-time Overpayments")

    edited = st.data_editor(
        pd.DataFrame({"date": pd.Series(dtype="datetime64[ns]"), "amount": pd.Series(dtype="float")}),
        num_rows="dynamic",
        column_config={
            "date": st.column_config.DateColumn("Date"),
            "amount": st.column_config.NumberColumn("Amount", min_value=0.0, format="%.2f"),
        },
        key=f"{key_prefix}_one_time",
        use_container_width=True,
    )

    one_time = [
        Overpayment(date=pd.Timestamp(row.date).date(), amount=float(row.amount))
        for row in edited.dropna().itertuples()
        if row.amount > 0
    ]

    return one_time, cyclic, effect


def refinance_input_form(key_prefix: str = "refi") -> Optional[RefinanceInput]:
    """Create input form for the current loan and the refinance offer.

    Returns RefinanceInput object or None if inputs are invalid.
    """
    st.subheader("Current Loan")

    col1, col2 = st.columns(2)

    with col1:
        current_balance = st.number_input(
            "Remaining Balance",
            min_value=0.0,
            max_value=10000000.0,
            value=250000.0,
            step=5000.0,
            format="%.2f",
            key=f"{key_prefix}_balance",
        )
        current_installment_label = st.selectbox(
            "Current Installment Type",
            options=list(INSTALLMENT_TYPE_LABELS),
            key=f"{key_prefix}_current_type",
        )

    with col2:
        current_rate = st.number_input(
            "Current Interest Rate (%)",
            min_value=0.0,
            max_value=100.0,
            value=7.5,
            step=0.05,
            format="%.3f",
            key=f"{key_prefix}_current_rate",
        )
        refinance_date = st.date_input(
            "Refinance Date",
            value=datetime.date.today(),
            key=f"{key_prefix}_date",
        )

    remaining_period = _loan_term_input("Remaining Period", f"{key_prefix}_remaining", default_years=20)

    st.subheader("New Loan")

    col1, col2 = st.columns(2)

    with col1:
        new_amount = st.number_input(
            "New Loan Amount",
            min_value=0.0,
            max_value=10000000.0,
            value=current_balance,
            step=5000.0,
            format="%.2f",
            key=f"{key_prefix}_new_amount",
        )
        new_installment_label = st.selectbox(
            "New Installment Type",
            options=list(INSTALLMENT_TYPE_LABELS),
            key=f"{key_prefix}_new_type",
        )

    with col2:
        new_rate = st.number_input(
            "New Interest Rate (%)",
            min_value=0.0,
            max_value=100.0,
            value=6.0,
            step=0.05,
            format="%.3f",
            key=f"{key_prefix}_new_rate",
        )

    new_term = _loan_term_input("New Loan Term", f"{key_prefix}_new_term", default_years=remaining_period.years)

    st.subheader("Costs")

    new_loan_commission = _commission_input(
        "New loan commission", f"{key_prefix}_commission",
        help_text="Percentage is taken of the new loan amount",
    )
    early_repayment_fee = _commission_input(
        "Early repayment fee", f"{key_prefix}_early_fee",
        help_text="Percentage is taken of the remaining balance",
    )
    other_costs = st.number_input(
        "Other Costs",
        min_value=0.0,
        value=0.0,
        step=100.0,
        format="%.2f",
        key=f"{key_prefix}_other_costs",
        help="Valuation, notary, insurance and similar one-off costs",
    )

    original_loan_amount = None
    start_date = None
    original_commission = None
    installment_day = None
    convention = InterestConvention.AVERAGE_MONTH

    with st.expander("Advanced: Commission refund and exact-day interest"):
        refund_enabled = st.checkbox(
            "Include refund of the original commission",
            key=f"{key_prefix}_refund_enabled",
        )
        if refund_enabled:
            original_loan_amount = st.number_input(
                "Original Loan Amount",
                min_value=0.0,
                value=300000.0,
                step=5000.0,
                format="%.2f",
                key=f"{key_prefix}_original_amount",
            )
            start_date = st.date_input(
                "Original Loan Start Date",
                value=datetime.date(2020, 1, 1),
                key=f"{key_prefix}_original_start",
            )
            original_commission = _commission_input("Original commission", f"{key_prefix}_original_commission")

        exact_day = st.checkbox(
            "Calculate interest for the exact number of days",
            key=f"{key_prefix}_exact_day",
        )
        if exact_day:
            convention = InterestConvention.EXACT_DAY
            installment_day = int(st.number_input(
                "Installment Day of Month",
                min_value=1,
                max_value=31,
                value=refinance_date.day,
                step=1,
                key=f"{key_prefix}_day_of_month",
            ))

    if current_balance <= 0 or new_amount <= 0:
        return None

    return RefinanceInput(
        basic=RefinanceBasicInput(
            current_loan_balance=current_balance,
            current_remaining_period=remaining_period,
            current_interest_rate=current_rate,
            new_interest_rate=new_rate,
        ),
        advanced=RefinanceAdvancedInput(
            refinance_date=refinance_date,
            new_loan_amount=new_amount,
            new_loan_term=new_term,
            current_installment_type=INSTALLMENT_TYPE_LABELS[current_installment_label],
            new_installment_type=INSTALLMENT_TYPE_LABELS[new_installment_label],
            new_loan_commission=new_loan_commission,
            early_repayment_fee=early_repayment_fee,
            other_costs=other_costs,
            original_loan_amount=original_loan_amount,
            start_date=start_date,
            original_commission=original_commission,
            installment_day_of_month=installment_day,
            interest_convention=convention,
        ),
    )
