"""Visualization utilities for simulated trade history."""

import plotly.graph_objects as go
import pandas as pd


def create_price_chart(history: pd.DataFrame, title: str = "Spot Price by Trade"):
    """Create line chart of the post-trade spot price, buys and sells marked."""
    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=history['timestamp'],
        y=history['spot_price'],
        mode='lines',
        name='Spot price',
        line=dict(color='#607D8B', width=1)
    ))

    for side, color in (('buy', '#4CAF50'), ('sell', '#F44336')):
        trades = history[history['side'] == side]
        fig.add_trace(go.Scatter(
            x=trades['timestamp'],
            y=trades['spot_price'],
            mode='markers',
            name=side.capitalize(),
            marker=dict(size=5, color=color)
        ))

    fig.update_layout(
        title=title,
        xaxis_title='Trade',
        yaxis_title='Price (lamports per token)',
        hovermode='x unified',
        template='plotly_white',
        height=400
    )

    return fig


def create_reserves_chart(history: pd.DataFrame):
    """Create chart of effective reserves on two axes over the trade sequence."""
    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=history['timestamp'],
        y=history['virtual_sol_reserves'],
        mode='lines',
        name='Quote reserves',
        line=dict(color='#FF9800', width=2)
    ))

    fig.add_trace(go.Scatter(
        x=history['timestamp'],
        y=history['virtual_token_reserves'],
        mode='lines',
        name='Token reserves',
        yaxis='y2',
        line=dict(color='#2196F3', width=2)
    ))

    fig.update_layout(
        title='Effective Reserves',
        xaxis_title='Trade',
        yaxis=dict(title='Lamports'),
        yaxis2=dict(title='Tokens', overlaying='y', side='right'),
        template='plotly_white',
        height=400
    )

    return fig
