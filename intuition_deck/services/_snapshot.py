"""_snapshot.py

Shared plumbing for the server-backed snapshots (prices, balances).

A snapshot is **replaced wholesale** on every successful ``refresh()``.
Failures never escape the refresh boundary: the previous data stays
resident, ``error`` records what went wrong and ``refresh()`` returns
``False`` so the page can render a stale/retry state instead of crashing.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Generic, Sequence, TypeVar

from .errors import ExchangeAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Listener = Callable[[], None]


class RefreshableSnapshot(Generic[T]):
    """Holds the last successfully fetched tuple of *T* and notifies listeners."""

    label = "snapshot"

    def __init__(self, fetch: Callable[[], Sequence[T]]):
        self._fetch = fetch
        self._items: tuple[T, ...] = ()
        self._listeners: list[Listener] = []
        self.loaded = False
        self.error: Exception | None = None
        self.updated_at: datetime | None = None

    # ------------------------------------------------------------------
    # Refresh boundary
    # ------------------------------------------------------------------
    def refresh(self) -> bool:
        try:
            items = tuple(self._fetch())
        except (ExchangeAPIError, ValueError) as exc:
            # ValueError covers pydantic validation of a malformed row.
            self.error = exc
            logger.warning("%s refresh failed, keeping previous data: %s", self.label, exc)
            return False

        self._items = items
        self.loaded = True
        self.error = None
        self.updated_at = datetime.now(timezone.utc)
        logger.debug("%s refreshed: %d rows", self.label, len(items))
        self._notify()
        return True

    @property
    def stale(self) -> bool:
        """Data is on screen but the latest refresh failed."""
        return self.loaded and self.error is not None

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; the returned callable unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def clear(self) -> None:
        """Forget data and listeners (session teardown)."""
        self._items = ()
        self._listeners.clear()
        self.loaded = False
        self.error = None
        self.updated_at = None

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
