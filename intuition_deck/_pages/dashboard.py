"""dashboard.py

Landing page: headline balance card, top holdings and recent orders.
"""

from __future__ import annotations

import streamlit as st

from intuition_deck.presentation import holdings_frame, orders_frame, portfolio_card
from intuition_deck.services import api
from intuition_deck.services.errors import ExchangeAPIError

from ._helpers import get_session, section_ready, show_card


def render() -> None:  # noqa: D401
    """Draw the **Dashboard** page."""
    st.title("Dashboard")
    session = get_session()

    if section_ready(session.balances, "balances", "dash_balances"):
        valuation = session.valuation
        c1, _ = st.columns([1, 2])
        show_card(c1, portfolio_card(valuation.totals))
        section_ready(session.price_table, "prices", "dash_prices")

        st.subheader("Your assets")
        st.dataframe(
            holdings_frame(valuation, compact=True),
            hide_index=True,
            use_container_width=True,
            column_config={
                "symbol": st.column_config.TextColumn("Asset"),
                "name": st.column_config.TextColumn("Name"),
                "balance": st.column_config.TextColumn("Balance"),
                "value": st.column_config.TextColumn("Value (USD)"),
                "change": st.column_config.TextColumn("24h"),
            },
        )

    st.subheader("Recent orders")
    try:
        orders = api.get_orders(limit=10)
    except ExchangeAPIError as exc:
        st.warning(f"Could not load orders: {exc}")
        return
    if not orders:
        st.info("No orders yet.")
        return
    st.dataframe(orders_frame(orders), hide_index=True, use_container_width=True)
