"""Streamlit table display components."""


import pandas as pd
import streamlit as st


def display_amortization_table(
    schedule: pd.DataFrame,
    title: str = "Amortization Schedule",
    max_rows: int = 60,
) -> None:
    """Display an amortization schedule with a yearly or monthly view.

    Args:
        schedule: DataFrame from ``installments_to_dataframe``
        title: Table title
        max_rows: Maximum rows to display at once in the monthly view
    """
    st.subheader(title)

    view_type = st.radio(
        "View",
        options=["Yearly Summary", "Monthly Detail"],
        horizontal=True,
        key=f"table_view_{title}",
    )

    if view_type == "Yearly Summary":
        schedule_copy = schedule.copy()
        schedule_copy['year'] = ((schedule_copy['installment_number'] - 1) // 12) + 1

        yearly = schedule_copy.groupby('year').agg({
            'total_amount': 'sum',
            'principal_amount': 'sum',
            'interest_amount': 'sum',
            'overpayment_amount': 'sum',
            'remaining_debt': 'last',
        }).reset_index()

        yearly.columns = ['Year', 'Installments', 'Principal', 'Interest', 'Overpayments', 'End Debt']

        display_df = yearly.copy()
        for col in ['Installments', 'Principal', 'Interest', 'Overpayments', 'End Debt']:
            display_df[col] = display_df[col].apply(lambda x: f"{x:,.2f}")

        st.dataframe(display_df, use_container_width=True, hide_index=True)

    else:
        total_rows = len(schedule)

        if total_rows > max_rows:
            col1, col2 = st.columns([3, 1])
            with col1:
                start = st.slider(
                    "Start from installment",
                    min_value=1,
                    max_value=total_rows - max_rows + 1,
                    value=1,
                    key=f"month_slider_{title}",
                )
            with col2:
                st.write(f"Showing {max_rows} of {total_rows} installments")

            display_slice = schedule.iloc[start - 1:start - 1 + max_rows].copy()
        else:
            display_slice = schedule.copy()

        display_df = display_slice.rename(columns={
            'installment_number': 'No.',
            'date': 'Date',
            'total_amount': 'Installment',
            'principal_amount': 'Principal',
            'interest_amount': 'Interest',
            'overpayment_amount': 'Overpayment',
            'remaining_debt': 'Remaining Debt',
        })

        cols_to_show = ['No.', 'Date', 'Installment', 'Principal', 'Interest', 'Overpayment', 'Remaining Debt']
        display_df = display_df[cols_to_show]
        display_df['Date'] = display_df['Date'].dt.strftime('%Y-%m-%d')

        for col in cols_to_show[2:]:
            display_df[col] = display_df[col].apply(lambda x: f"{x:,.2f}")

        st.dataframe(display_df, use_container_width=True, hide_index=True)


def display_savings_summary(savings: dict) -> None:
    """Display savings of the overpayment scenario as metrics."""
    col1, col2, col3 = st.columns(3)

    with col1:
        st.metric("Total Saved", f"{savings['total_amount']:,.2f}")

    with col2:
        st.metric("Interest Saved", f"{savings['interest_amount']:,.2f}")

    with col3:
        reduction = savings.get('time_reduction')
        if reduction:
            st.metric("Term Shortened By", f"{reduction['years']}y {reduction['months']}m")
        else:
            st.metric("Term Shortened By", "-", help="The installment is reduced instead of the term")


def refinance_comparison_frame(result: dict) -> pd.DataFrame:
    """One row per refinance variant with the comparison figures."""
    labels = {
        'variant_a': 'A: Current Loan',
        'variant_b': 'B: Lower Installment',
        'variant_c': 'C: Shorter Term',
    }
    rows = []
    for key, label in labels.items():
        row = {'variant': label}
        row.update(result[key]['comparison'])
        rows.append(row)
    return pd.DataFrame(rows)


def display_refinance_summary(comparisons: pd.DataFrame) -> None:
    """Display the refinance variants side by side."""
    st.subheader("Refinance Analysis Summary")

    columns = st.columns(len(comparisons))
    for col, (_, row) in zip(columns, comparisons.iterrows()):
        with col:
            st.markdown(f"**{row['variant']}**")
            st.metric("Monthly Installment", f"{row['monthly_installment']:,.2f}")
            st.metric("Term", f"{row['loan_term_months']} months")
            st.metric("Total Interest", f"{row['total_interest']:,.2f}")
            if pd.notna(row.get('total_benefit')):
                st.metric(
                    "Total Benefit",
                    f"{row['total_benefit']:,.2f}",
                    delta="gain" if row['total_benefit'] > 0 else "loss",
                )
                payback = row.get('payback_period_months')
                st.metric("Payback", f"{payback:.0f} months" if pd.notna(payback) else "Never")

    display_df = comparisons.rename(columns={
        'variant': 'Variant',
        'monthly_installment': 'Installment',
        'loan_term_months': 'Term (Months)',
        'total_amount': 'Total Paid',
        'total_interest': 'Total Interest',
        'commission_refund': 'Commission Refund',
        'refinancing_costs': 'Refinancing Costs',
        'total_benefit': 'Total Benefit',
        'payback_period_months': 'Payback (Months)',
    })

    for col in ['Installment', 'Total Paid', 'Total Interest', 'Commission Refund',
                'Refinancing Costs', 'Total Benefit']:
        display_df[col] = display_df[col].apply(lambda x: f"{x:,.2f}" if pd.notna(x) else "-")
    display_df['Payback (Months)'] = display_df['Payback (Months)'].apply(
        lambda x: f"{x:.0f}" if pd.notna(x) else "N/A"
    )

    st.dataframe(display_df, use_container_width=True, hide_index=True)
