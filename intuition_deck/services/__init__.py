"""Public service API."""
from .balances import BalanceSnapshot
from .errors import (
    BusinessRuleError,
    ExchangeAPIError,
    FormValidationError,
    PayloadShapeError,
    TransportError,
)
from .model import AssetBalance, PortfolioTotals, TradingPair, Valuation, ValuedAsset
from .price_table import PriceTableCache
from .session import ExchangeSession
from .valuation import aggregate
from .watchlist import Watchlist

__all__ = [
    "aggregate",
    "AssetBalance",
    "BalanceSnapshot",
    "BusinessRuleError",
    "ExchangeAPIError",
    "ExchangeSession",
    "FormValidationError",
    "PayloadShapeError",
    "PortfolioTotals",
    "PriceTableCache",
    "TradingPair",
    "TransportError",
    "Valuation",
    "ValuedAsset",
    "Watchlist",
]
