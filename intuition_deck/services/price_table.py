"""price_table.py

Latest price/change per trading pair, refreshed by polling `/tickers/`.
"""

from __future__ import annotations

from typing import Callable, Sequence

from . import api
from ._snapshot import RefreshableSnapshot
from .model import USD, TradingPair


class PriceTableCache(RefreshableSnapshot[TradingPair]):
    """Flat snapshot of every pair, replaced wholesale on each refresh."""

    label = "price table"

    def __init__(self, fetch: Callable[[], Sequence[TradingPair]] = api.get_pairs):
        super().__init__(fetch)

    @property
    def pairs(self) -> tuple[TradingPair, ...]:
        return self._items

    def usd_price(self, symbol: str) -> float | None:
        """Price of one *symbol* unit in USD, ``None`` when no USD pair is listed."""
        for pair in self._items:
            if pair.base_currency == symbol and pair.quote == USD:
                return pair.price
        return None
