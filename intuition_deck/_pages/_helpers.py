"""_helpers.py

Utility helpers shared by multiple Streamlit pages.

1. **Navigation** – keep the ``?page=...`` query-param in sync with the
   sidebar radio.
2. **Session access** – fetch the per-user ``ExchangeSession`` stored in
   ``st.session_state``.
3. **Section status** – uniform loading / stale / retry affordances for
   a data section, so one failing endpoint never blanks the whole page.
4. **Cards & notifications** – render presentation cards and toast the
   ``(level, message)`` tuples returned by the presentation adapter.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import streamlit as st

from intuition_deck.presentation import Notification
from intuition_deck.services import ExchangeSession
from intuition_deck.services._snapshot import RefreshableSnapshot

LOCAL_TZ = ZoneInfo(os.getenv("LOCAL_TZ", "UTC"))  # e.g. "Europe/Berlin"
TS_FMT = "%d/%m %H:%M:%S"  # Timestamp format for human-readable dates
SESSION_KEY = "exchange_session"
_W = "⚠️"  # warning icon – reused inline for brevity

# -----------------------------------------------------------------------------
# 1) Navigation
# -----------------------------------------------------------------------------

def update_page(page: None | str = None) -> None:
    """Update the ?page=... query-parameter in the URL.

    Parameters
    ----------
    page : None | str
        The new page value to set or None to use the sidebar selection.
    """
    if page is None:
        st.query_params.update(page=st.session_state.sidebar_page)
    else:
        st.query_params.update(page=page)

# -----------------------------------------------------------------------------
# 2) Session access
# -----------------------------------------------------------------------------

def get_session() -> ExchangeSession:
    """Return the user's session, starting one on first access."""
    session = st.session_state.get(SESSION_KEY)
    if session is None:
        session = ExchangeSession.from_settings().init()
        st.session_state[SESSION_KEY] = session
    return session


def end_session() -> None:
    session = st.session_state.pop(SESSION_KEY, None)
    if session is not None:
        session.teardown()

# -----------------------------------------------------------------------------
# 3) Section status
# -----------------------------------------------------------------------------

def convert_to_local_time(ts: datetime | None, fmt: str = TS_FMT) -> str:
    if ts is None:
        return "--"
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(LOCAL_TZ).strftime(fmt)


def section_ready(source: RefreshableSnapshot, label: str, key: str) -> bool:
    """Render the status of *source*; return ``True`` when data can be shown.

    * never loaded + error → inline error with a retry button
    * never loaded         → loading placeholder
    * loaded + error       → stale warning, data still shown
    """
    if not source.loaded:
        if source.error is not None:
            st.error(f"Could not load {label}: {source.error}")
            if st.button(f"Retry {label}", key=f"retry_{key}"):
                source.refresh()
                st.rerun()
        else:
            st.info(f"Loading {label}…")
        return False

    if source.error is not None:
        st.warning(
            f"{_W} Showing {label} from {convert_to_local_time(source.updated_at)}; "
            f"latest refresh failed: {source.error}"
        )
    return True

# -----------------------------------------------------------------------------
# 4) Cards & notifications
# -----------------------------------------------------------------------------

def show_card(column, card: dict[str, str]) -> None:
    with column:
        st.metric(card["title"], card["value"])
        st.caption(card["subtitle"])


def notify(notification: Notification) -> None:
    level, message = notification
    st.toast(message, icon="✅" if level == "success" else "❌")
