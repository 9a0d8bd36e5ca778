"""main.py

Streamlit **entry-point** for the InTuition Exchange deck.

Responsibilities
----------------
* Define global page layout (wide view, expanded sidebar, title).
* Implement a simple **navigation radio** – Dashboard / Portfolio /
  Watchlist – kept in sync with the ``?page=`` query-param.
* Handle the payment redirect ``?deposit=success``: sync the latest
  deposit and poll balances until the cash arrives.
* Trigger an **auto-refresh** every *PRICE_POLL_SECONDS*; each rerun
  refreshes whatever prices or balances are due, so polling stops with
  the tab.
* Tear the session down on logout.

Run with ``streamlit run intuition_deck/main.py``.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Third-party imports
# -----------------------------------------------------------------------------
import logging
import os
from datetime import datetime, timezone

import streamlit as st
from streamlit_autorefresh import st_autorefresh

from intuition_deck import APP_ICON, APP_NAME, VERSION

# -----------------------------------------------------------------------------
# 0) Global page configuration – must run before any other Streamlit call
# -----------------------------------------------------------------------------
st.set_page_config(
    page_title="InTuition Exchange",
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded",
)

# -----------------------------------------------------------------------------
# Local imports (after Streamlit initialisation)
# -----------------------------------------------------------------------------
from intuition_deck.config import configure_logging, settings
from intuition_deck._pages import registry
from intuition_deck._pages._helpers import (
    convert_to_local_time,
    end_session,
    get_session,
    update_page,
)
from intuition_deck.services import funds
from intuition_deck.services.errors import ExchangeAPIError

configure_logging()
logger = logging.getLogger(__name__)

APP_TITLE = os.getenv("APP_TITLE", "InTuition Exchange")

# -----------------------------------------------------------------------------
# 1) Session & payment redirect – ?deposit=success
# -----------------------------------------------------------------------------
# Handled before the radio exists so the page selection can still change.
st.sidebar.title(APP_TITLE)
params = st.query_params
pages = list(registry)

session = get_session()
session.refresh_due()

if params.get("deposit") == "success":
    del st.query_params["deposit"]
    try:
        latest = funds.sync_latest_deposit()
    except ExchangeAPIError as exc:
        logger.warning("Failed to sync payment status: %s", exc)
        latest = None
    if latest is not None:
        st.toast(f"Deposit of ${latest.amount:,.2f} received", icon="✅")
    session.confirm_deposit()
    update_page("Portfolio")
    st.session_state.pop("sidebar_page", None)

initial_page = params.get("page", pages[0])
if initial_page not in registry:
    initial_page = pages[0]

# -----------------------------------------------------------------------------
# 2) Sidebar – navigation radio & logout
# -----------------------------------------------------------------------------

page = st.sidebar.radio(
    "Navigate",
    pages,
    index=pages.index(initial_page),
    key="sidebar_page",
    on_change=update_page,
)

if st.sidebar.button("Logout"):
    end_session()
    st.info("Logged out. Reload the page to start a new session.")
    st.stop()

# -----------------------------------------------------------------------------
# 3) Auto-refresh – keeps data up-to-date without F5
# -----------------------------------------------------------------------------
st_autorefresh(interval=int(settings()["PRICE_POLL_SECONDS"] * 1000), key="refresh")

# -----------------------------------------------------------------------------
# 4) Routing
# -----------------------------------------------------------------------------
registry[page]()

st.sidebar.markdown("---")
st.sidebar.metric(
    label="🕒 Last refresh:",
    value=convert_to_local_time(datetime.now(timezone.utc)),
    delta=f"{APP_NAME} v{VERSION}",
    delta_color="off",
)
