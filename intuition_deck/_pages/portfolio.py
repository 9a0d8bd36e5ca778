"""portfolio.py

Streamlit page that visualises the **current portfolio** of the account.

Main features
-------------
* Total / crypto / cash summary cards.
* Interactive **donut-pie chart** grouping assets below 1 % into a
  single *Other* slice so the legend stays readable.
* Full holdings table (required assets always listed, biggest value first).
* Deposit and withdrawal forms; after a deposit the balances are polled
  until the cash arrives.
* Learner accounts record a portfolio snapshot for the growth chart once
  per session.
"""

# Standard library -------------------------------------------------------------
from __future__ import annotations

# Third-party ------------------------------------------------------------------
import plotly.express as px
import streamlit as st

# First-party / project --------------------------------------------------------
from intuition_deck.presentation import (
    allocation_frame,
    cash_card,
    crypto_card,
    holdings_frame,
    portfolio_card,
)
from intuition_deck.services import api, funds
from intuition_deck.services.errors import ExchangeAPIError, FormValidationError

from ._helpers import get_session, section_ready, show_card

# -----------------------------------------------------------------------------
# Fund forms
# -----------------------------------------------------------------------------

def _deposit_form(session) -> None:
    with st.form("deposit_form", clear_on_submit=True):
        amount = st.number_input(
            "Amount (USD)",
            min_value=0.0,
            value=None,
            step=10.0,
            placeholder=f"Minimum ${session.settings['MIN_FIAT_AMOUNT']:,.0f}",
        )
        submitted = st.form_submit_button("Deposit")
    if not submitted:
        return
    try:
        intent = funds.request_deposit(amount)
    except FormValidationError as exc:
        st.error(str(exc))
    except ExchangeAPIError as exc:
        st.toast(f"Failed to create payment intent: {exc}", icon="❌")
    else:
        st.success(f"Payment started (reference {intent.transaction_id}). Complete it in the checkout window.")


def _withdraw_form(session) -> None:
    cash = session.valuation.cash
    available = next(
        (b.available_balance for b in session.balances.balances if b.asset == session.settings["CASH_ASSET"]),
        0.0,
    )
    st.caption(f"Available: ${available:,.2f}" if cash else "No cash balance")
    try:
        accounts = api.get_bank_accounts()
    except ExchangeAPIError as exc:
        st.warning(f"Failed to load bank accounts: {exc}")
        return
    if not accounts:
        st.info("Add a bank account to withdraw funds.")
        return

    labels = {a.id: f"{a.account_name} ••••{a.last4}" for a in accounts}
    with st.form("withdraw_form", clear_on_submit=True):
        account_id = st.selectbox("Bank account", list(labels), format_func=labels.get)
        amount = st.number_input("Amount (USD)", min_value=0.0, value=None, step=10.0)
        submitted = st.form_submit_button("Withdraw")
    if not submitted:
        return
    try:
        funds.request_withdrawal(account_id, amount, available)
    except FormValidationError as exc:
        st.error(str(exc))
    except ExchangeAPIError as exc:
        st.toast(f"Failed to create withdrawal: {exc}", icon="❌")
    else:
        st.toast("Withdrawal request submitted successfully", icon="✅")
        session.balances.refresh()

# -----------------------------------------------------------------------------
# Page renderer
# -----------------------------------------------------------------------------

def render() -> None:  # noqa: D401 – imperative mood is fine
    """Entry-point for Streamlit – draw the **Portfolio** page."""
    st.title("Portfolio")
    session = get_session()

    deposit = session.deposit
    if deposit is not None:
        if deposit.confirmed:
            st.success("Deposit received – your balance has been updated.")
        elif deposit.running:
            st.info("Waiting for your deposit to arrive…")

    if not section_ready(session.balances, "balances", "pf_balances"):
        return
    section_ready(session.price_table, "prices", "pf_prices")
    session.record_portfolio_snapshot()

    valuation = session.valuation

    # ------------------------------------------------------------------
    # 1) Summary cards
    # ------------------------------------------------------------------
    c1, c2, c3 = st.columns(3)
    show_card(c1, portfolio_card(valuation.totals))
    show_card(c2, crypto_card(valuation.totals))
    show_card(c3, cash_card(valuation.totals))

    # ------------------------------------------------------------------
    # 2) Donut pie chart (group assets < 1 % into "Other")
    # ------------------------------------------------------------------
    pie_df = allocation_frame(valuation)
    if not pie_df.empty:
        fig = px.pie(pie_df, names="asset", values="value", hole=0.4)
        fig.update_layout(autosize=True, height=500, margin=dict(t=40, b=40, l=40, r=40))
        st.plotly_chart(fig, use_container_width=True)

    # ------------------------------------------------------------------
    # 3) Holdings table
    # ------------------------------------------------------------------
    df_disp = holdings_frame(valuation)
    # ~35 px per row, capped at 800 px.
    height_calc = min(35 * (1 + len(df_disp)) + 5, 800)
    st.dataframe(
        df_disp,
        hide_index=True,
        use_container_width=True,
        height=height_calc,
        column_config={
            "symbol": st.column_config.TextColumn("Asset"),
            "name": st.column_config.TextColumn("Name"),
            "balance": st.column_config.TextColumn("Total"),
            "available": st.column_config.TextColumn("Available"),
            "locked": st.column_config.TextColumn("In orders"),
            "price": st.column_config.TextColumn("Price (USD)"),
            "value": st.column_config.TextColumn("Value (USD)"),
            "change": st.column_config.TextColumn("24h"),
            "share": st.column_config.TextColumn("Share (%)"),
        },
    )

    # ------------------------------------------------------------------
    # 4) Funds
    # ------------------------------------------------------------------
    dep_col, wd_col = st.columns(2)
    with dep_col:
        st.subheader("Deposit")
        _deposit_form(session)
    with wd_col:
        st.subheader("Withdraw")
        _withdraw_form(session)
