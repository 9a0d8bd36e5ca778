"""watchlist.py

User watchlist with an **optimistic overlay**.

``toggle()`` flips the membership locally before the request is sent so
the star reacts immediately. Whatever the server answers overwrites the
local guess; a failed request drops the guess. ``refresh()`` replaces
the confirmed set and discards every pending guess (server wins).
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from . import api
from .errors import ExchangeAPIError
from .model import WatchlistItem

logger = logging.getLogger(__name__)


class Watchlist:
    def __init__(
        self,
        fetch: Callable[[], Sequence[WatchlistItem]] = api.get_watchlist,
        toggle: Callable[[str], bool] = api.toggle_watchlist,
    ):
        self._fetch = fetch
        self._toggle = toggle
        self._confirmed: set[str] = set()
        self._pending: dict[str, bool] = {}  # asset → optimistic membership
        self.loaded = False
        self.error: Exception | None = None

    # ------------------------------------------------------------------
    def refresh(self) -> bool:
        try:
            items = self._fetch()
        except (ExchangeAPIError, ValueError) as exc:
            self.error = exc
            logger.warning("watchlist refresh failed, keeping previous data: %s", exc)
            return False
        self._confirmed = {item.asset for item in items}
        self._pending.clear()
        self.loaded = True
        self.error = None
        return True

    @property
    def members(self) -> frozenset[str]:
        out = set(self._confirmed)
        for asset, watched in self._pending.items():
            if watched:
                out.add(asset)
            else:
                out.discard(asset)
        return frozenset(out)

    @property
    def confirmed(self) -> frozenset[str]:
        return frozenset(self._confirmed)

    def is_watched(self, asset: str) -> bool:
        return asset in self.members

    def is_pending(self, asset: str) -> bool:
        return asset in self._pending

    # ------------------------------------------------------------------
    def toggle(self, asset: str) -> bool:
        """Flip *asset*; return the server-confirmed membership.

        Raises
        ------
        ExchangeAPIError
            The request failed; the optimistic flip has been rolled back.
        """
        self._pending[asset] = not self.is_watched(asset)
        logger.info("watchlist toggle %s (optimistic: %s)", asset, self._pending[asset])
        try:
            added = self._toggle(asset)
        except ExchangeAPIError:
            self._pending.pop(asset, None)
            raise

        self._pending.pop(asset, None)
        if added:
            self._confirmed.add(asset)
        else:
            self._confirmed.discard(asset)
        return added

    def clear(self) -> None:
        self._confirmed.clear()
        self._pending.clear()
        self.loaded = False
        self.error = None
