import logging
from unittest.mock import MagicMock

import pytest
from faker import Faker

from intuition_deck.services import api, funds
from intuition_deck.services.balances import BalanceSnapshot
from intuition_deck.services.errors import ExchangeAPIError, FormValidationError
from intuition_deck.services.funds import (
    DepositConfirmation,
    validate_deposit_amount,
    validate_withdrawal_amount,
)
from intuition_deck.services.model import DepositIntent, FiatTransaction, Withdrawal
from tests.helpers.object_mothers import AssetBalanceObjectMother

logger = logging.getLogger(__name__)


@pytest.mark.parametrize(
    "amount,message",
    [
        (None, "Please enter an amount"),
        (9.99, "Minimum deposit is $10"),
        (10_000.01, "Maximum deposit is $10,000"),
    ],
)
def should_reject_deposit_amount_outside_limits(amount: float | None, message: str) -> None:
    with pytest.raises(FormValidationError, match=message.replace("$", r"\$")):
        validate_deposit_amount(amount)


def should_accept_deposit_amount_on_the_limits() -> None:
    assert validate_deposit_amount(10) == 10.0
    assert validate_deposit_amount(10_000) == 10_000.0


def should_reject_withdrawal_above_available_balance() -> None:
    with pytest.raises(FormValidationError, match="Amount exceeds available balance"):
        validate_withdrawal_amount(150, available=100)
    with pytest.raises(FormValidationError, match=r"Minimum withdrawal is \$10"):
        validate_withdrawal_amount(5, available=100)

    assert validate_withdrawal_amount(100, available=100) == 100.0


def should_not_call_api_when_deposit_form_is_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    create = MagicMock()
    monkeypatch.setattr(api, "create_deposit_intent", create)

    with pytest.raises(FormValidationError):
        funds.request_deposit(1)

    create.assert_not_called()


def should_create_deposit_intent_for_valid_amount(faker: Faker, monkeypatch: pytest.MonkeyPatch) -> None:
    intent = DepositIntent(client_secret=faker.sha256(), transaction_id=faker.uuid4())
    create = MagicMock(return_value=intent)
    monkeypatch.setattr(api, "create_deposit_intent", create)

    assert funds.request_deposit(250) == intent
    create.assert_called_once_with(250.0)


def should_require_bank_account_for_withdrawal(faker: Faker, monkeypatch: pytest.MonkeyPatch) -> None:
    withdrawal = Withdrawal(transaction_id=faker.uuid4())
    create = MagicMock(return_value=withdrawal)
    monkeypatch.setattr(api, "create_withdrawal", create)

    with pytest.raises(FormValidationError, match="Please select a bank account"):
        funds.request_withdrawal(None, 50, available=100)
    assert funds.request_withdrawal("ba_1", 50, available=100) == withdrawal
    create.assert_called_once_with("ba_1", 50.0)


def should_sync_latest_completed_deposit(faker: Faker, monkeypatch: pytest.MonkeyPatch) -> None:
    latest = FiatTransaction(id=faker.uuid4(), type="DEPOSIT", amount=100, status="COMPLETED")
    list_transactions = MagicMock(return_value=([latest], 1))
    sync = MagicMock(return_value=True)
    monkeypatch.setattr(api, "get_fiat_transactions", list_transactions)
    monkeypatch.setattr(api, "sync_payment_status", sync)

    assert funds.sync_latest_deposit() == latest

    list_transactions.assert_called_once_with(tx_type="DEPOSIT", limit=1)
    sync.assert_called_once_with(latest.id)


def should_not_sync_pending_or_missing_deposit(faker: Faker, monkeypatch: pytest.MonkeyPatch) -> None:
    pending = FiatTransaction(id=faker.uuid4(), type="DEPOSIT", amount=100, status="PENDING")
    sync = MagicMock()
    monkeypatch.setattr(api, "sync_payment_status", sync)

    monkeypatch.setattr(api, "get_fiat_transactions", MagicMock(return_value=([pending], 1)))
    assert funds.sync_latest_deposit() == pending
    monkeypatch.setattr(api, "get_fiat_transactions", MagicMock(return_value=([], 0)))
    assert funds.sync_latest_deposit() is None

    sync.assert_not_called()


def _cash(amount: float):
    return [AssetBalanceObjectMother.create(asset="USD", available=amount, locked=0)]


def should_poll_balances_until_cash_grows() -> None:
    fetch = MagicMock(side_effect=[_cash(100), _cash(100), _cash(100), _cash(150), _cash(150)])
    balances = BalanceSnapshot(fetch=fetch)
    balances.refresh()

    confirmation = DepositConfirmation(balances, attempts=5, interval=0.01).start()
    confirmation.task.join(timeout=2)

    assert confirmation.baseline == 100
    assert confirmation.confirmed is True
    assert confirmation.task.stopped_reason == "condition_met"
    assert fetch.call_count == 4


def should_skip_polling_when_first_refresh_already_shows_deposit() -> None:
    fetch = MagicMock(side_effect=[_cash(0), _cash(25)])
    balances = BalanceSnapshot(fetch=fetch)
    balances.refresh()

    confirmation = DepositConfirmation(balances, attempts=5, interval=0.01).start()

    assert confirmation.confirmed is True
    assert confirmation.task is None
    assert confirmation.running is False


def should_give_up_after_bounded_attempts() -> None:
    fetch = MagicMock(return_value=_cash(40))
    balances = BalanceSnapshot(fetch=fetch)
    balances.refresh()

    confirmation = DepositConfirmation(balances, attempts=3, interval=0.01).start()
    confirmation.task.join(timeout=2)

    assert confirmation.confirmed is False
    assert confirmation.task.stopped_reason == "max_attempts"
    # initial refresh + one immediate refresh + three polls
    assert fetch.call_count == 5


def should_tolerate_balance_errors_while_polling() -> None:
    fetch = MagicMock(side_effect=[_cash(0), ExchangeAPIError("down"), ExchangeAPIError("down"), _cash(10)])
    balances = BalanceSnapshot(fetch=fetch)
    balances.refresh()

    confirmation = DepositConfirmation(balances, attempts=5, interval=0.01).start()
    confirmation.task.join(timeout=2)

    assert confirmation.confirmed is True
    assert balances.error is None
