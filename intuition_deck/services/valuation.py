"""valuation.py

The **portfolio valuation aggregator**.

``aggregate()`` is a pure function of the balance snapshot, the price
snapshot and the list of always-shown assets. It performs no I/O and
keeps no state, so pages may call it on every rerun.

Ordering of the crypto rows
---------------------------
1. Descending USD value.
2. Equal values: two required assets keep the required-list order, a
   required asset goes before an "other" one, two other assets keep the
   order in which the balances arrived (``sorted`` is stable).

The cash asset (USD by default) is not a crypto row: it is valued at 1,
reported as ``cash_value`` and appended after the sorted rows. It is
listed when held, or at zero when it appears among the required assets.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .formatting import fmt_quantity, fmt_usd
from .model import (
    USD,
    AssetBalance,
    PortfolioTotals,
    TradingPair,
    Valuation,
    ValuedAsset,
)

PRIMARY_COLOR = "#6366F1"
ICON_URL = "https://assets.coincap.io/assets/icons/{symbol}@2x.png"

# symbol → (display name, colour, has coincap icon)
ASSET_INFO: dict[str, tuple[str, str, bool]] = {
    "BTC": ("Bitcoin", "#F7931A", True),
    "ETH": ("Ethereum", "#627EEA", True),
    "USDT": ("Tether", "#26A17B", True),
    "TUIT": ("Tuition Token", PRIMARY_COLOR, False),
    USD: ("US Dollar", "#4CAF50", False),
}


def usd_prices(pairs: Iterable[TradingPair]) -> dict[str, TradingPair]:
    """Map base currency → its USD-quoted pair (first listed wins)."""
    out: dict[str, TradingPair] = {}
    for pair in pairs:
        if pair.quote == USD and pair.base_currency not in out:
            out[pair.base_currency] = pair
    return out


def portfolio_prices(pairs: Iterable[TradingPair]) -> dict[str, float]:
    """USD price per base currency, as sent with portfolio snapshots."""
    return {base: pair.price for base, pair in usd_prices(pairs).items()}


def _value_row(
    balance: AssetBalance,
    pair: TradingPair | None,
    *,
    required: bool,
    price: float | None = None,
) -> ValuedAsset:
    if price is None:
        price = pair.price if pair else 0.0
    usd_value = balance.balance * price
    name, color, has_icon = ASSET_INFO.get(balance.asset, (balance.asset, PRIMARY_COLOR, True))
    return ValuedAsset(
        symbol=balance.asset,
        name=name,
        balance=balance.balance,
        balance_display=fmt_quantity(balance.balance),
        available_display=fmt_quantity(balance.available_balance),
        locked_display=fmt_quantity(balance.locked_balance),
        price=price,
        usd_value=usd_value,
        value_display=fmt_usd(usd_value) if usd_value > 0 else "$0.00",
        change_percent=pair.change if pair else 0.0,
        color=color,
        icon_url=ICON_URL.format(symbol=balance.asset.lower()) if has_icon else None,
        required=required,
    )


def aggregate(
    balances: Sequence[AssetBalance],
    pairs: Sequence[TradingPair],
    required_assets: Sequence[str],
    cash_asset: str = USD,
) -> Valuation:
    """Combine balances and prices into sorted USD-valued rows plus totals.

    Parameters
    ----------
    balances : Sequence[AssetBalance]
        Current balance snapshot.
    pairs : Sequence[TradingPair]
        Current ticker snapshot; only ``quote == "USD"`` pairs are used.
    required_assets : Sequence[str]
        Symbols listed even at zero balance, in display order.
    cash_asset : str, default "USD"
        Symbol reported as cash instead of as a crypto row.
    """
    by_asset: dict[str, AssetBalance] = {}
    for row in balances:
        by_asset.setdefault(row.asset, row)
    prices = usd_prices(pairs)
    cash_required = cash_asset in required_assets
    required = [a for a in dict.fromkeys(required_assets) if a != cash_asset]
    rank = {symbol: i for i, symbol in enumerate(required)}

    rows = [
        _value_row(
            by_asset.get(symbol) or AssetBalance(asset=symbol),
            prices.get(symbol),
            required=True,
        )
        for symbol in required
    ]
    rows += [
        _value_row(row, prices.get(row.asset), required=False)
        for row in by_asset.values()
        if row.asset not in rank and row.asset != cash_asset and row.balance != 0
    ]

    # Non-required rows share the lowest rank; stability keeps their input order.
    assets = sorted(rows, key=lambda r: (-r.usd_value, rank.get(r.symbol, len(rank))))

    cash = None
    if cash_asset in by_asset or cash_required:
        cash = _value_row(
            by_asset.get(cash_asset) or AssetBalance(asset=cash_asset),
            None,
            required=cash_required,
            price=1.0,
        )

    crypto_value = sum(r.usd_value for r in assets)
    cash_value = cash.usd_value if cash else 0.0
    totals = PortfolioTotals(
        total_value=crypto_value + cash_value,
        crypto_value=crypto_value,
        cash_value=cash_value,
        crypto_count=len(assets),
    )
    return Valuation(assets=tuple(assets), cash=cash, totals=totals)
