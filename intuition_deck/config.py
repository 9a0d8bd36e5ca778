# config.py
import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")


def _csv(raw: str) -> list[str]:
    return [part.strip().upper() for part in raw.split(",") if part.strip()]


@lru_cache
def settings():
    return {
        "API_URL": os.getenv("API_URL", "http://localhost:8000/api").rstrip("/"),
        "API_TOKEN": os.getenv("API_TOKEN", ""),
        "TRADE_URL": os.getenv("TRADE_URL", "http://localhost:3000/trade"),
        "API_TIMEOUT": float(os.getenv("API_TIMEOUT", "5")),
        # Reruns refresh prices and balances once these intervals have elapsed
        "REFRESH_SECONDS": int(os.getenv("REFRESH_SECONDS", "60")),
        "PRICE_POLL_SECONDS": float(os.getenv("PRICE_POLL_SECONDS", "10")),
        # "learner" accounts record a daily portfolio snapshot for the growth chart
        "APP_MODE": os.getenv("APP_MODE", "learner").lower(),
        # Which asset is cash and which assets are always listed
        "CASH_ASSET": os.getenv("CASH_ASSET", "USD").upper(),
        "REQUIRED_ASSETS": _csv(os.getenv("REQUIRED_ASSETS", "BTC,ETH,USDT,TUIT")),
        # Deposit confirmation polling after a payment redirect
        "DEPOSIT_POLL_ATTEMPTS": int(os.getenv("DEPOSIT_POLL_ATTEMPTS", "5")),
        "DEPOSIT_POLL_SECONDS": float(os.getenv("DEPOSIT_POLL_SECONDS", "2")),
        "MIN_FIAT_AMOUNT": float(os.getenv("MIN_FIAT_AMOUNT", "10")),
        "MAX_DEPOSIT_AMOUNT": float(os.getenv("MAX_DEPOSIT_AMOUNT", "10000")),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
    }


def configure_logging() -> None:
    """Apply ``LOG_LEVEL`` to the root logger (no-op if handlers already exist)."""
    logging.basicConfig(
        level=settings()["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
