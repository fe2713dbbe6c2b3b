"""Plotly chart components for schedule visualization."""

import plotly.graph_objects as go
import pandas as pd


def create_amortization_chart(schedule: pd.DataFrame) -> go.Figure:
    """Create interactive amortization chart showing balance, principal, and interest over time."""
    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=schedule['installment_number'],
        y=schedule['remaining_debt'],
        name='Remaining Debt',
        line=dict(color='#1f77b4', width=2),
        hovertemplate='Installment %{x}<br>Debt: %{y:,.0f}<extra></extra>',
    ))

    fig.add_trace(go.Scatter(
        x=schedule['installment_number'],
        y=schedule['cumulative_principal'],
        name='Principal Repaid',
        fill='tozeroy',
        line=dict(color='#2ca02c', width=1),
        fillcolor='rgba(44, 160, 44, 0.3)',
        hovertemplate='Installment %{x}<br>Principal Repaid: %{y:,.0f}<extra></extra>',
    ))

    fig.add_trace(go.Scatter(
        x=schedule['installment_number'],
        y=schedule['cumulative_interest'],
        name='Interest Paid',
        line=dict(color='#d62728', width=2, dash='dash'),
        hovertemplate='Installment %{x}<br>Interest Paid: %{y:,.0f}<extra></extra>',
    ))

    fig.update_layout(
        title='Loan Amortization Over Time',
        xaxis_title='Installment',
        yaxis_title='Amount',
        hovermode='x unified',
        legend=dict(yanchor='top', y=0.99, xanchor='right', x=0.99),
        yaxis=dict(tickformat=',.0f'),
    )

    return fig


def create_payment_breakdown_chart(schedule: pd.DataFrame) -> go.Figure:
    """Stacked bars of principal, interest and overpayment per installment."""
    # Sample for readability on long schedules
    step = max(1, len(schedule) // 60)
    sampled = schedule.iloc[::step]

    fig = go.Figure()

    for column, name, color in (
        ('principal_amount', 'Principal', '#2ca02c'),
        ('interest_amount', 'Interest', '#d62728'),
        ('overpayment_amount', 'Overpayment', '#ff7f0e'),
    ):
        fig.add_trace(go.Bar(
            x=sampled['installment_number'],
            y=sampled[column],
            name=name,
            marker_color=color,
            hovertemplate=f'Installment %{{x}}<br>{name}: %{{y:,.2f}}<extra></extra>',
        ))

    fig.update_layout(
        title='Payment Breakdown',
        xaxis_title='Installment',
        yaxis_title='Amount',
        barmode='stack',
        hovermode='x unified',
        yaxis=dict(tickformat=',.0f'),
    )

    return fig


def create_payoff_comparison_chart(
    base_schedule: pd.DataFrame,
    overpayment_schedule: pd.DataFrame,
    labels: tuple = ('Without Overpayments', 'With Overpayments'),
) -> go.Figure:
    """Compare the remaining debt of both scenarios."""
    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=base_schedule['installment_number'],
        y=base_schedule['remaining_debt'],
        name=labels[0],
        line=dict(color='#1f77b4', width=2),
        hovertemplate='Installment %{x}<br>Debt: %{y:,.0f}<extra></extra>',
    ))

    fig.add_trace(go.Scatter(
        x=overpayment_schedule['installment_number'],
        y=overpayment_schedule['remaining_debt'],
        name=labels[1],
        line=dict(color='#2ca02c', width=2),
        hovertemplate='Installment %{x}<br>Debt: %{y:,.0f}<extra></extra>',
    ))

    base_payoff = int(base_schedule['installment_number'].iloc[-1])
    overpayment_payoff = int(overpayment_schedule['installment_number'].iloc[-1])

    fig.add_vline(x=base_payoff, line_dash='dot', line_color='#1f77b4', opacity=0.5)
    fig.add_vline(x=overpayment_payoff, line_dash='dot', line_color='#2ca02c', opacity=0.5)

    months_saved = base_payoff - overpayment_payoff
    if months_saved > 0:
        fig.add_annotation(
            x=(base_payoff + overpayment_payoff) / 2,
            y=base_schedule['remaining_debt'].max() * 0.5,
            text=f'{months_saved} months saved',
            showarrow=False,
            font=dict(size=14),
        )

    fig.update_layout(
        title='Debt Payoff Comparison',
        xaxis_title='Installment',
        yaxis_title='Remaining Debt',
        hovermode='x unified',
        yaxis=dict(tickformat=',.0f'),
    )

    return fig


def create_refinance_balance_chart(schedules: dict) -> go.Figure:
    """Remaining balance of each refinance variant.

    Args:
        schedules: Mapping of variant label to schedule DataFrame
    """
    colors = ['#1f77b4', '#2ca02c', '#ff7f0e']
    fig = go.Figure()

    for color, (label, schedule) in zip(colors, schedules.items()):
        fig.add_trace(go.Scatter(
            x=schedule['installment_number'],
            y=schedule['remaining_balance'],
            name=label,
            line=dict(color=color, width=2),
            hovertemplate='Installment %{x}<br>Balance: %{y:,.0f}<extra></extra>',
        ))

    fig.update_layout(
        title='Remaining Balance by Variant',
        xaxis_title='Installment',
        yaxis_title='Remaining Balance',
        hovermode='x unified',
        yaxis=dict(tickformat=',.0f'),
    )

    return fig


def create_refinance_cost_chart(comparisons: pd.DataFrame) -> go.Figure:
    """Stacked bars of principal, interest and net refinancing cost per variant."""
    principal = comparisons['total_amount'] - comparisons['total_interest']
    net_costs = comparisons['refinancing_costs'].fillna(0) - comparisons['commission_refund'].fillna(0)

    fig = go.Figure()
    fig.add_trace(go.Bar(x=comparisons['variant'], y=principal, name='Principal', marker_color='#2ca02c'))
    fig.add_trace(go.Bar(x=comparisons['variant'], y=comparisons['total_interest'], name='Interest',
                         marker_color='#d62728'))
    fig.add_trace(go.Bar(x=comparisons['variant'], y=net_costs, name='Net Refinancing Costs',
                         marker_color='#9467bd'))

    fig.update_layout(
        title='Total Cost by Variant',
        yaxis_title='Amount',
        barmode='stack',
        yaxis=dict(tickformat=',.0f'),
    )

    return fig
