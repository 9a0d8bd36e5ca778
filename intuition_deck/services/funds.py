"""funds.py

Fiat deposit / withdrawal glue.

Form rules are checked synchronously and raise ``FormValidationError``
before any request leaves the process. After a successful card payment
the balances are polled a bounded number of times until the cash
balance grows.
"""

from __future__ import annotations

import logging
from typing import Optional

from intuition_deck.config import settings

from . import api
from .balances import BalanceSnapshot
from .errors import FormValidationError
from .model import USD, DepositIntent, FiatTransaction, Withdrawal
from .polling import PollingTask, start_polling

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Form-level rules
# -----------------------------------------------------------------------------

def validate_deposit_amount(
    amount: float | None,
    *,
    minimum: float | None = None,
    maximum: float | None = None,
) -> float:
    minimum = settings()["MIN_FIAT_AMOUNT"] if minimum is None else minimum
    maximum = settings()["MAX_DEPOSIT_AMOUNT"] if maximum is None else maximum
    if amount is None:
        raise FormValidationError("Please enter an amount")
    if amount < minimum:
        raise FormValidationError(f"Minimum deposit is ${minimum:,.0f}")
    if amount > maximum:
        raise FormValidationError(f"Maximum deposit is ${maximum:,.0f}")
    return float(amount)


def validate_withdrawal_amount(
    amount: float | None,
    available: float,
    *,
    minimum: float | None = None,
) -> float:
    minimum = settings()["MIN_FIAT_AMOUNT"] if minimum is None else minimum
    if amount is None:
        raise FormValidationError("Please enter an amount")
    if amount < minimum:
        raise FormValidationError(f"Minimum withdrawal is ${minimum:,.0f}")
    if amount > available:
        raise FormValidationError("Amount exceeds available balance")
    return float(amount)


def request_deposit(amount: float | None) -> DepositIntent:
    amount = validate_deposit_amount(amount)
    logger.info("Creating deposit intent for %.2f", amount)
    return api.create_deposit_intent(amount)


def request_withdrawal(bank_account_id: str | None, amount: float | None, available: float) -> Withdrawal:
    if not bank_account_id:
        raise FormValidationError("Please select a bank account")
    amount = validate_withdrawal_amount(amount, available)
    logger.info("Creating withdrawal of %.2f", amount)
    return api.create_withdrawal(bank_account_id, amount)


def sync_latest_deposit() -> Optional[FiatTransaction]:
    """Re-sync the newest deposit with the payment processor when it completed.

    Fallback for a late payment webhook; returns the transaction (or
    ``None`` when the account never deposited).
    """
    transactions, _ = api.get_fiat_transactions(tx_type="DEPOSIT", limit=1)
    if not transactions:
        return None
    latest = transactions[0]
    if latest.status == "COMPLETED":
        api.sync_payment_status(latest.id)
    return latest


# -----------------------------------------------------------------------------
# Deposit confirmation polling
# -----------------------------------------------------------------------------

class DepositConfirmation:
    """Poll balances until the cash balance grows or attempts run out."""

    def __init__(
        self,
        balances: BalanceSnapshot,
        *,
        cash_asset: str = USD,
        attempts: int = 5,
        interval: float = 2.0,
    ):
        self.balances = balances
        self.cash_asset = cash_asset
        self.attempts = attempts
        self.interval = interval
        self.baseline = balances.quantity(cash_asset)
        self.task: Optional[PollingTask] = None

    @property
    def confirmed(self) -> bool:
        return self.balances.quantity(self.cash_asset) > self.baseline

    def start(self) -> "DepositConfirmation":
        self.balances.refresh()
        if self.confirmed:
            logger.info("Deposit visible on first refresh")
            return self
        self.task = start_polling(
            self.balances.refresh,
            self.interval,
            max_attempts=self.attempts,
            stop_when=lambda: self.confirmed,
            name="deposit-confirmation",
        )
        return self

    def cancel(self) -> None:
        if self.task is not None:
            self.task.cancel()

    @property
    def running(self) -> bool:
        return self.task is not None and self.task.running
