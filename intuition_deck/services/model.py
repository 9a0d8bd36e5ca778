"""model.py

Pydantic **domain models** shared across UI layers.

The wire models mirror the JSON payloads of the InTuition Exchange API
(camelCase on the wire, snake_case in Python). The derived models
(``ValuedAsset``, ``PortfolioTotals``, ``Valuation``) are frozen: they are
rebuilt from the balance and price snapshots, never patched in place.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from datetime import datetime
from typing import Literal, Optional

# Third-party
from pydantic import BaseModel, ConfigDict, Field, model_validator

USD = "USD"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# -----------------------------------------------------------------------------
# Source snapshots
# -----------------------------------------------------------------------------

class AssetBalance(_WireModel):
    """Single row of `/balances`."""

    asset: str                                                   # e.g. "BTC"
    balance: float = 0.0                                         # available + locked
    available_balance: float = Field(0.0, alias="availableBalance")
    locked_balance: float = Field(0.0, alias="lockedBalance")    # frozen on open orders

    @model_validator(mode="before")
    @classmethod
    def _derive_total(cls, data):
        # Older payloads only carry the split; the server guarantees the sum.
        if isinstance(data, dict) and data.get("balance") is None:
            available = data.get("availableBalance", data.get("available_balance")) or 0
            locked = data.get("lockedBalance", data.get("locked_balance")) or 0
            data = {**data, "balance": float(available) + float(locked)}
        return data


class TradingPair(_WireModel):
    """One base/quote entry of the ticker table."""

    base_currency: str = Field(..., alias="baseCurrency")
    quote: str
    price: float = 0.0
    change: float = 0.0                  # % over the reference window
    name: str = ""
    icon_url: Optional[str] = Field(None, alias="iconUrl")

    @property
    def symbol(self) -> str:
        return f"{self.base_currency}-{self.quote}"


# -----------------------------------------------------------------------------
# Derived valuation
# -----------------------------------------------------------------------------

class ValuedAsset(BaseModel):
    """Display-ready row of the portfolio breakdown."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    balance: float                       # raw quantity, used for filtering
    balance_display: str
    available_display: str
    locked_display: str
    price: float                         # USD price used for the valuation
    usd_value: float
    value_display: str
    change_percent: float = 0.0
    color: str
    icon_url: Optional[str] = None
    required: bool = False


class PortfolioTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_value: float = 0.0
    crypto_value: float = 0.0
    cash_value: float = 0.0
    crypto_count: int = 0


class Valuation(BaseModel):
    """Output of the aggregator: sorted crypto rows, the cash row and totals."""

    model_config = ConfigDict(frozen=True)

    assets: tuple[ValuedAsset, ...] = ()
    cash: Optional[ValuedAsset] = None
    totals: PortfolioTotals = Field(default_factory=PortfolioTotals)

    @property
    def rows(self) -> list[ValuedAsset]:
        return [*self.assets, *([self.cash] if self.cash else [])]


# -----------------------------------------------------------------------------
# Watchlist, orders & fiat payloads
# -----------------------------------------------------------------------------

class WatchlistItem(_WireModel):
    asset: str
    added_at: Optional[datetime] = Field(None, alias="addedAt")


class Order(_WireModel):
    """Flat representation of an order row from `/orders`."""

    id: str
    pair: str                                 # e.g. "BTC-USD"
    side: Literal["BUY", "SELL"]
    type: str = "MARKET"
    amount: float = 0.0                       # base quantity
    price: float = 0.0                        # average execution price
    total: float = 0.0                        # quote notional
    status: str = "PENDING"
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    @property
    def asset(self) -> str:
        return self.pair.split("-")[0]


class FiatTransaction(_WireModel):
    id: str
    type: Literal["DEPOSIT", "WITHDRAWAL"]
    method: str = ""
    amount: float
    status: str
    reference: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class DepositIntent(_WireModel):
    client_secret: str = Field(..., alias="clientSecret")
    transaction_id: str = Field(..., alias="transactionId")


class Withdrawal(_WireModel):
    transaction_id: str = Field(..., alias="transactionId")
    payout_id: Optional[str] = Field(None, alias="payoutId")


class BankAccount(_WireModel):
    id: str
    account_name: str = Field(..., alias="accountName")
    account_type: str = Field("", alias="accountType")
    last4: str = ""
    is_verified: bool = Field(False, alias="isVerified")
