"""Registry of Streamlit pages so main.py can route dynamically."""
from typing import Callable

from . import dashboard, portfolio, watchlist

Page = Callable[[], None]

registry: dict[str, Page] = {
    "Dashboard": dashboard.render,
    "Portfolio": portfolio.render,
    "Watchlist": watchlist.render,
}

__all__ = ["registry"]
