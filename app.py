"""Mortgage Overpayment & Refinance Planner - Streamlit Application."""

import json

import streamlit as st

from components.charts import (
    create_amortization_chart,
    create_payment_breakdown_chart,
    create_payoff_comparison_chart,
    create_refinance_balance_chart,
    create_refinance_cost_chart,
)
from components.inputs import mortgage_input_form, overpayment_input, refinance_input_form
from components.tables import (
    display_amortization_table,
    display_refinance_summary,
    display_savings_summary,
    refinance_comparison_frame,
)
from src.amortization import CalculationParams, try_compute_amortization
from src.config import EngineSettings
from src.errors import ValidationError
from src.export import (
    Scenario,
    calculation_result_to_dict,
    dict_to_params,
    dict_to_refinance_input,
    installments_to_dataframe,
    params_to_dict,
    refinance_input_to_dict,
    refinance_result_to_dict,
    refinance_schedule_to_dataframe,
)
from src.logging_config import configure_logging, get_logger
from src.refinance import try_compute_refinance

configure_logging()
logger = get_logger("app")

# Page configuration
st.set_page_config(
    page_title="Mortgage Overpayment Planner",
    page_icon="🏠",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS
st.markdown("""
<style>
    .stMetric {
        background-color: #f0f2f6;
        padding: 10px;
        border-radius: 5px;
    }
    .stMetric label, .stMetric [data-testid="stMetricValue"], .stMetric [data-testid="stMetricDelta"] {
        color: #262730 !important;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def _settings() -> EngineSettings:
    try:
        return EngineSettings.from_env()
    except ValidationError as e:
        logger.error("Invalid engine settings in environment, using defaults", extra=e.context)
        return EngineSettings()


def main():
    """Main application entry point."""
    st.title("🏠 Mortgage Overpayment & Refinance Planner")
    st.markdown("*Educational tool for understanding overpayment and refinancing decisions*")

    # Sidebar navigation
    st.sidebar.title("Navigation")
    page = st.sidebar.radio(
        "Select Tool",
        options=[
            "Overpayment Calculator",
            "Refinance Comparison",
            "Data Management",
        ],
    )

    st.sidebar.divider()

    # Quick Reference - Expandable sections
    st.sidebar.markdown("### Quick Reference")
    with st.sidebar.expander("Interest"):
        st.markdown("""
        **Interest accrues daily.**

        Each installment's interest is the outstanding debt times the annual rate, divided by 365 and
        multiplied by the number of days in that month.
        """)
    with st.sidebar.expander("Overpayment effects"):
        st.markdown("""
        - **Shorten the loan term**: the installment stays the same, the loan ends earlier
        - **Lower the installment**: the term stays the same, the installment is recalculated
        - **Progressive overpayment**: keep paying the original installment and overpay the difference
        """)
    with st.sidebar.expander("Refinance variants"):
        st.markdown("""
        - **A**: keep the current loan
        - **B**: new loan at its nominal term (lowest installment)
        - **C**: new loan at the shortest term whose installment stays close to the current one
        """)
    with st.sidebar.expander("Payback"):
        st.markdown("""
        **Months until installment savings cover the net cost.**

        Net cost is commission, early repayment fee and other costs, less the refund of the original
        commission.
        """)

    # Route to appropriate page
    if page == "Overpayment Calculator":
        overpayment_calculator_page()
    elif page == "Refinance Comparison":
        refinance_page()
    elif page == "Data Management":
        data_management_page()


def overpayment_calculator_page():
    """Amortization with and without overpayments."""
    st.header("Overpayment Calculator")

    st.markdown("""
    Compare the schedule of your mortgage with and without one-time and recurring overpayments.
    """)

    col1, col2 = st.columns([1, 2])

    with col1:
        st.subheader("Loan Parameters")
        mortgage = mortgage_input_form()

        st.divider()
        one_time, cyclic, effect = overpayment_input()

    if mortgage is None:
        return

    params = CalculationParams(
        mortgage_input=mortgage,
        overpayments=one_time,
        cyclic_overpayment=cyclic,
        overpayment_effect=effect,
    )
    outcome = try_compute_amortization(params, settings=_settings())

    if not outcome.ok:
        col2.error(outcome.error.message)
        return

    result = outcome.value
    st.session_state['current_params'] = params

    with col1:
        st.divider()
        st.subheader("Summary")
        st.metric("Installment", f"{mortgage.monthly_payment:,.2f}")
        st.metric("Total Interest", f"{result.overpayment_scenario.summary.total_interest:,.2f}")
        st.metric("Total Cost", f"{result.overpayment_scenario.summary.total_payment:,.2f}")

    with col2:
        display_savings_summary(calculation_result_to_dict(result)['savings'])

        base_df = installments_to_dataframe(result.base_scenario.installments)
        overpayment_df = installments_to_dataframe(result.overpayment_scenario.installments)

        tab1, tab2, tab3, tab4 = st.tabs(["Comparison", "Balance Chart", "Payment Breakdown", "Schedule"])

        with tab1:
            fig = create_payoff_comparison_chart(base_df, overpayment_df)
            st.plotly_chart(fig, use_container_width=True)

        with tab2:
            fig = create_amortization_chart(overpayment_df)
            st.plotly_chart(fig, use_container_width=True)

        with tab3:
            fig = create_payment_breakdown_chart(overpayment_df)
            st.plotly_chart(fig, use_container_width=True)

        with tab4:
            display_amortization_table(overpayment_df)

        # Download button
        csv = overpayment_df.to_csv(index=False)
        st.download_button(
            "Download Schedule (CSV)",
            csv,
            "amortization_schedule.csv",
            "text/csv",
        )


def refinance_page():
    """Compare the current loan against refinancing."""
    st.header("Refinance Comparison")

    st.markdown("""
    Compare keeping your current loan with taking a new one, including fees and the refund of the
    original commission.
    """)

    refinance_input = refinance_input_form()
    if refinance_input is None:
        return

    outcome = try_compute_refinance(refinance_input, settings=_settings())
    if not outcome.ok:
        st.error(outcome.error.message)
        return

    st.session_state['current_refinance'] = refinance_input

    result = refinance_result_to_dict(outcome.value)
    comparisons = refinance_comparison_frame(result)

    st.divider()
    display_refinance_summary(comparisons)

    if result['calculation_method'] == 'daily':
        st.info("Interest calculated for the exact number of days between installments.")

    schedules = {
        'A: Current Loan': refinance_schedule_to_dataframe(outcome.value.variant_a.schedule),
        'B: Lower Installment': refinance_schedule_to_dataframe(outcome.value.variant_b.schedule),
        'C: Shorter Term': refinance_schedule_to_dataframe(outcome.value.variant_c.schedule),
    }

    tab1, tab2 = st.tabs(["Balance", "Total Cost"])

    with tab1:
        st.plotly_chart(create_refinance_balance_chart(schedules), use_container_width=True)

    with tab2:
        st.plotly_chart(create_refinance_cost_chart(comparisons), use_container_width=True)

    st.download_button(
        "Download Comparison (JSON)",
        json.dumps(result, indent=2),
        "refinance_comparison.json",
        "application/json",
    )


def data_management_page():
    """Import/export scenarios."""
    st.header("Data Management")

    tab1, tab2 = st.tabs(["Export Scenario", "Import Scenario"])

    with tab1:
        st.subheader("Export Current Scenario")

        name = st.text_input("Scenario Name", value="My Mortgage Scenario")
        description = st.text_area("Description", value="")

        if st.button("Export to JSON"):
            scenario = Scenario(
                name=name,
                description=description,
            )

            if 'current_params' in st.session_state:
                scenario.calculation = params_to_dict(st.session_state['current_params'])
            if 'current_refinance' in st.session_state:
                scenario.refinance = refinance_input_to_dict(st.session_state['current_refinance'])

            st.download_button(
                "Download JSON",
                json.dumps(scenario.to_dict(), indent=2),
                f"{name.lower().replace(' ', '_')}.json",
                "application/json",
            )

    with tab2:
        st.subheader("Import Scenario")

        uploaded_file = st.file_uploader("Choose a JSON file", type="json")

        if uploaded_file is not None:
            try:
                scenario = Scenario.from_dict(json.load(uploaded_file))
            except (ValueError, KeyError) as e:
                st.error(f"Could not read scenario: {e}")
                return

            st.success(f"Loaded scenario: {scenario.name}")
            st.json(scenario.to_dict())

            if st.button("Apply Scenario"):
                try:
                    if scenario.calculation:
                        st.session_state['current_params'] = dict_to_params(scenario.calculation)
                    if scenario.refinance:
                        st.session_state['current_refinance'] = dict_to_refinance_input(scenario.refinance)
                except (ValueError, KeyError) as e:
                    st.error(f"Could not apply scenario: {e}")
                    return
                st.success("Scenario applied!")


if __name__ == "__main__":
    main()
