"""session.py

Explicit per-user context object.

``ExchangeSession`` owns the price table, the balance snapshot, the
watchlist and the deposit-confirmation task started on behalf of the
user. Pages receive it from the entry point instead of reaching for
globals.

Lifecycle: ``init()`` on session start, ``refresh_due()`` on every page
rerun, ``teardown()`` on logout. Price refreshes ride on the reruns of the
open page, so a closed browser tab stops fetching by itself; the only
background thread is the bounded deposit confirmation.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Sequence

from intuition_deck.config import settings as app_settings

from . import api
from .balances import BalanceSnapshot
from .errors import ExchangeAPIError
from .funds import DepositConfirmation
from .model import AssetBalance, TradingPair, Valuation
from .price_table import PriceTableCache
from .valuation import aggregate, portfolio_prices
from .watchlist import Watchlist

logger = logging.getLogger(__name__)

Aggregator = Callable[[Sequence[AssetBalance], Sequence[TradingPair], Sequence[str], str], Valuation]
ValuationListener = Callable[[Valuation], None]


class ExchangeSession:
    def __init__(
        self,
        settings: dict,
        *,
        price_table: PriceTableCache,
        balances: BalanceSnapshot,
        watchlist: Watchlist,
        aggregate_fn: Aggregator = aggregate,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.price_table = price_table
        self.balances = balances
        self.watchlist = watchlist
        self._aggregate = aggregate_fn
        self._clock = clock
        self._lock = threading.Lock()
        self._valuation = Valuation()
        self._listeners: list[ValuationListener] = []
        self._unsubscribers: list[Callable[[], None]] = []
        self._last_refresh: dict[str, float] = {}  # source label → clock() of last attempt
        self._snapshot_recorded = False
        self.deposit: Optional[DepositConfirmation] = None
        self.active = False

    @classmethod
    def from_settings(cls, settings: dict | None = None) -> "ExchangeSession":
        """Default wiring against the live REST API."""
        return cls(
            settings or app_settings(),
            price_table=PriceTableCache(),
            balances=BalanceSnapshot(),
            watchlist=Watchlist(),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def init(self) -> "ExchangeSession":
        if self.active:
            return self
        self.active = True
        self._unsubscribers = [
            self.price_table.subscribe(self.recompute),
            self.balances.subscribe(self.recompute),
        ]
        now = self._clock()
        self.price_table.refresh()
        self.balances.refresh()
        self.watchlist.refresh()
        self._last_refresh = {"prices": now, "balances": now}
        self.recompute()
        logger.info("Exchange session started")
        return self

    def refresh_due(self) -> list[str]:
        """Refresh every snapshot whose interval has elapsed since its last attempt.

        Called once per page rerun; returns the labels that were refreshed.
        Failed attempts count too, so an unreachable API is retried at the
        polling cadence rather than on every rerun.
        """
        if not self.active:
            return []
        now = self._clock()
        schedule = (
            ("prices", self.price_table, self.settings["PRICE_POLL_SECONDS"]),
            ("balances", self.balances, self.settings["REFRESH_SECONDS"]),
        )
        refreshed = []
        for label, source, interval in schedule:
            last = self._last_refresh.get(label)
            if last is not None and now - last < interval:
                continue
            self._last_refresh[label] = now
            source.refresh()
            refreshed.append(label)
        return refreshed

    def teardown(self) -> None:
        """Stop the deposit poller and forget all per-user state. Safe to call twice."""
        was_active = self.active
        # Flip first so a late refresh cannot repopulate the valuation.
        self.active = False
        if self.deposit is not None:
            self.deposit.cancel()
            if self.deposit.task is not None:
                self.deposit.task.join(timeout=self.settings["API_TIMEOUT"])
            self.deposit = None
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._listeners.clear()
        self._last_refresh.clear()
        self._snapshot_recorded = False
        self.price_table.clear()
        self.balances.clear()
        self.watchlist.clear()
        with self._lock:
            self._valuation = Valuation()
        if was_active:
            logger.info("Exchange session closed")

    # ------------------------------------------------------------------
    # Derived valuation
    # ------------------------------------------------------------------
    @property
    def valuation(self) -> Valuation:
        return self._valuation

    def recompute(self) -> Valuation:
        """Rebuild the valuation from whatever snapshots are resident now."""
        if not self.active:
            return self._valuation
        with self._lock:
            valuation = self._aggregate(
                self.balances.balances,
                self.price_table.pairs,
                self.settings["REQUIRED_ASSETS"],
                self.settings["CASH_ASSET"],
            )
            self._valuation = valuation
        for listener in list(self._listeners):
            listener(valuation)
        return valuation

    def subscribe(self, listener: ValuationListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Growth-chart snapshot
    # ------------------------------------------------------------------
    def record_portfolio_snapshot(self) -> bool:
        """Send current USD prices so the server can store today's portfolio value.

        Learner accounts only, once per session, and only once both balances
        and prices are loaded. A failure is logged and retried on the next call.
        """
        if (
            not self.active
            or self._snapshot_recorded
            or self.settings["APP_MODE"] != "learner"
            or not self.balances.balances
            or not self.price_table.pairs
        ):
            return False
        try:
            api.create_portfolio_snapshot(portfolio_prices(self.price_table.pairs))
        except ExchangeAPIError as exc:
            logger.warning("Failed to create portfolio snapshot: %s", exc)
            return False
        self._snapshot_recorded = True
        return True

    # ------------------------------------------------------------------
    # Balance-mutating actions
    # ------------------------------------------------------------------
    def confirm_deposit(self) -> DepositConfirmation:
        """Start bounded balance polling after a deposit redirect."""
        if self.deposit is not None:
            self.deposit.cancel()
        self.deposit = DepositConfirmation(
            self.balances,
            cash_asset=self.settings["CASH_ASSET"],
            attempts=self.settings["DEPOSIT_POLL_ATTEMPTS"],
            interval=self.settings["DEPOSIT_POLL_SECONDS"],
        ).start()
        return self.deposit
