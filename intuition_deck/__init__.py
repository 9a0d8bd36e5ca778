"""InTuition Exchange deck: portfolio valuation dashboard on top of the exchange API."""
from __future__ import annotations

APP_NAME = "intuition-deck"
APP_ICON = "📊"
VERSION = "0.1.0"
