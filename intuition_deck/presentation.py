"""presentation.py

View-specific shapes built from a :class:`Valuation`, plus translation of
user intents into service calls.

Nothing here imports Streamlit: the page modules hand these DataFrames
and dicts straight to ``st.metric`` / ``st.dataframe`` / ``px.pie``.
The adapter never mutates the balance or price snapshots; it only asks
the services to act and lets the next refresh flow back.
"""

from __future__ import annotations

import logging
from typing import Iterable, Literal

import pandas as pd

from intuition_deck.services.errors import ExchangeAPIError
from intuition_deck.services.formatting import fmt_percent, fmt_significant, fmt_usd
from intuition_deck.services.model import USD, Order, PortfolioTotals, TradingPair, Valuation
from intuition_deck.services.watchlist import Watchlist

logger = logging.getLogger(__name__)

Notification = tuple[Literal["success", "error"], str]

HOLDINGS_COLUMNS = [
    "symbol",
    "name",
    "balance",
    "available",
    "locked",
    "price",
    "value",
    "change",
    "share",
]
COMPACT_COLUMNS = ["symbol", "name", "balance", "value", "change"]

# -----------------------------------------------------------------------------
# 1) Summary cards
# -----------------------------------------------------------------------------

def portfolio_card(totals: PortfolioTotals) -> dict[str, str]:
    return {
        "title": "Total Balance",
        "value": fmt_usd(totals.total_value),
        "subtitle": f"Crypto: {fmt_usd(totals.crypto_value)} • Cash: {fmt_usd(totals.cash_value)}",
    }


def crypto_card(totals: PortfolioTotals) -> dict[str, str]:
    return {
        "title": "Crypto Assets",
        "value": fmt_usd(totals.crypto_value),
        "subtitle": f"{totals.crypto_count} assets • Cash: {fmt_usd(totals.cash_value)}",
    }


def cash_card(totals: PortfolioTotals) -> dict[str, str]:
    return {"title": "Cash Balance", "value": fmt_usd(totals.cash_value), "subtitle": USD}

# -----------------------------------------------------------------------------
# 2) Tables
# -----------------------------------------------------------------------------

def holdings_frame(valuation: Valuation, *, compact: bool = False, limit: int = 5) -> pd.DataFrame:
    """Display rows of the portfolio, biggest position first.

    The compact variant (dashboard card) keeps the crypto rows only,
    truncated to *limit*; the full table also lists cash and shares.
    """
    rows = list(valuation.assets[:limit]) if compact else valuation.rows
    total = valuation.totals.total_value
    records = [
        {
            "symbol": r.symbol,
            "name": r.name,
            "balance": r.balance_display,
            "available": r.available_display,
            "locked": r.locked_display,
            "price": fmt_significant(r.price, USD),
            "value": r.value_display,
            "change": fmt_percent(r.change_percent),
            "share": f"{r.usd_value / total:.2%}" if total > 0 else "0.00%",
        }
        for r in rows
    ]
    return pd.DataFrame(records, columns=COMPACT_COLUMNS if compact else HOLDINGS_COLUMNS)


def allocation_frame(valuation: Valuation, min_share: float = 0.01) -> pd.DataFrame:
    """Donut-chart slices; positions below *min_share* fold into ``Other``."""
    df = pd.DataFrame(
        [{"asset": r.symbol, "value": r.usd_value} for r in valuation.rows],
        columns=["asset", "value"],
    )
    df = df[df["value"] > 0].copy()
    if df.empty:
        return df.reset_index(drop=True)

    df["share"] = df["value"] / df["value"].sum()
    major = df.loc[df["share"] >= min_share, ["asset", "value"]].reset_index(drop=True)
    other = df.loc[df["share"] < min_share, "value"].sum()
    if other > 0:
        major = pd.concat(
            [major, pd.DataFrame([{"asset": "Other", "value": other}])], ignore_index=True
        )
    return major


def watchlist_frame(
    pairs: Iterable[TradingPair],
    watched: Iterable[str],
    query: str = "",
) -> pd.DataFrame:
    """One row per USD-quoted token, sorted by name, flagged with membership."""
    watched = set(watched)
    unique: dict[str, TradingPair] = {}
    for pair in pairs:
        if pair.quote == USD and pair.base_currency not in unique:
            unique[pair.base_currency] = pair

    tokens = sorted(unique.values(), key=lambda p: (p.name or p.base_currency).lower())
    q = query.strip().lower()
    if q:
        tokens = [p for p in tokens if q in p.base_currency.lower() or q in (p.name or "").lower()]

    return pd.DataFrame(
        [
            {
                "watched": p.base_currency in watched,
                "asset": p.base_currency,
                "name": p.name or p.base_currency,
                "price": fmt_significant(p.price, USD),
                "change": fmt_percent(p.change),
                "icon": p.icon_url,
            }
            for p in tokens
        ],
        columns=["watched", "asset", "name", "price", "change", "icon"],
    )


def orders_frame(orders: Iterable[Order]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "date": o.created_at.strftime("%Y-%m-%d") if o.created_at else "",
                "pair": o.pair,
                "side": {"BUY": "↗ BUY", "SELL": "↘ SELL"}[o.side],
                "amount": f"{o.amount:.8f} {o.asset}",
                "price": f"${o.price:,.2f}",
                "total": f"${o.total:,.2f}",
                "status": o.status,
            }
            for o in orders
        ],
        columns=["date", "pair", "side", "amount", "price", "total", "status"],
    )

# -----------------------------------------------------------------------------
# 3) User intents
# -----------------------------------------------------------------------------

def buy_shortcut(asset: str, trade_url: str) -> str:
    """Link opening the exchange trade screen on *asset*/USD."""
    return f"{trade_url}?pair={asset}-{USD}"


def toggle_watchlist(watchlist: Watchlist, asset: str) -> Notification:
    """Star/unstar *asset* and describe the outcome for a toast."""
    try:
        added = watchlist.toggle(asset)
    except ExchangeAPIError as exc:
        logger.warning("watchlist toggle %s failed: %s", asset, exc)
        return "error", "Failed to update watchlist"
    if added:
        return "success", f"{asset} added to watchlist"
    return "success", f"{asset} removed from watchlist"
