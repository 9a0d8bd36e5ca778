"""balances.py

Per-asset balances of the authenticated account.

Refreshed on page mount and after every balance-mutating action
(deposit, withdrawal, order fill). No deltas: each refresh replaces the
whole snapshot.
"""

from __future__ import annotations

from typing import Callable, Sequence

from . import api
from ._snapshot import RefreshableSnapshot
from .model import AssetBalance


class BalanceSnapshot(RefreshableSnapshot[AssetBalance]):
    label = "balances"

    def __init__(self, fetch: Callable[[], Sequence[AssetBalance]] = api.get_balances):
        super().__init__(fetch)

    @property
    def balances(self) -> tuple[AssetBalance, ...]:
        return self._items

    def quantity(self, asset: str) -> float:
        """Total balance of *asset*, ``0.0`` when the account does not hold it."""
        for row in self._items:
            if row.asset == asset:
                return row.balance
        return 0.0
