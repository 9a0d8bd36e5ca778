"""watchlist.py

Streamlit page listing every USD-quoted token with a star toggle and a
buy shortcut. Stars update optimistically; the server answer wins.
"""

from __future__ import annotations

import streamlit as st

from intuition_deck.presentation import buy_shortcut, toggle_watchlist, watchlist_frame

from ._helpers import get_session, notify, section_ready


def render() -> None:  # noqa: D401
    """Draw the **Watchlist** page."""
    st.title("Watchlist")
    session = get_session()
    pending_toast = st.session_state.pop("_watchlist_toast", None)
    if pending_toast:
        notify(pending_toast)

    if session.watchlist.error is not None:
        st.warning(f"Failed to load watchlist: {session.watchlist.error}")
        if st.button("Retry watchlist", key="retry_watchlist"):
            session.watchlist.refresh()
            st.rerun()
    if not section_ready(session.price_table, "prices", "wl_prices"):
        return

    query = st.text_input("Search tokens", key="watchlist_query")
    members = session.watchlist.members
    st.caption(f"{len(members)} tokens in your watchlist")

    df = watchlist_frame(session.price_table.pairs, members, query)
    if df.empty:
        st.info("No tokens match your search.")
        return

    for row in df.itertuples(index=False):
        c_star, c_name, c_price, c_change, c_buy = st.columns([1, 4, 3, 2, 2])
        star = "★" if row.watched else "☆"
        if c_star.button(star, key=f"star_{row.asset}"):
            # Toast after the rerun so the star already shows the new state
            st.session_state["_watchlist_toast"] = toggle_watchlist(session.watchlist, row.asset)
            st.rerun()
        c_name.markdown(f"**{row.asset}** · {row.name}")
        c_price.write(row.price)
        c_change.write(row.change)
        c_buy.link_button("Buy", buy_shortcut(row.asset, session.settings["TRADE_URL"]))
