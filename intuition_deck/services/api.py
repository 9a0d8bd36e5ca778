"""api.py

Thin synchronous REST wrapper around the InTuition Exchange back-end.

* Centralises **base-URL** + **bearer-token** handling so the caches and
  pages can simply call `get_pairs()`, `get_balances()` … without
  repeating boilerplate.
* Normalises the varying shapes returned by `/tickers/` and `/balances`
  into lists of pydantic models.
* Maps transport failures and non-2xx answers onto the exceptions of
  :mod:`intuition_deck.services.errors` so callers only catch one family.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library & 3rd-party imports
# -----------------------------------------------------------------------------
import functools
import logging

import requests

# Project settings helper – returns a dict of env-based config values
from intuition_deck.config import settings

from .errors import BusinessRuleError, PayloadShapeError, TransportError
from .model import (
    AssetBalance,
    BankAccount,
    DepositIntent,
    FiatTransaction,
    Order,
    TradingPair,
    WatchlistItem,
    Withdrawal,
)

logger = logging.getLogger(__name__)

ICON_URL = "https://assets.coincap.io/assets/icons/{symbol}@2x.png"

# -----------------------------------------------------------------------------
# Internal convenience helpers (prefixed with underscore)
# -----------------------------------------------------------------------------

def _headers() -> dict[str, str]:
    token = settings()["API_TOKEN"]
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _error_messages(response: requests.Response) -> list[str]:
    """Pull human-readable messages out of an error body.

    The back-end answers either ``{"errors": ["...", ...]}`` or
    ``{"message": "..." | [...]}``; anything else yields an empty list.
    """
    try:
        body = response.json()
    except ValueError:
        return []
    if not isinstance(body, dict):
        return []
    if body.get("errors"):
        return [str(e) for e in body["errors"]]
    message = body.get("message")
    if isinstance(message, list):
        return [str(m) for m in message]
    return [str(message)] if message else []


def _request(method: str, path: str, **kwargs):
    """Perform *method* on *API_URL + path* with auth header and timeout.

    Raises ``TransportError`` when the server cannot be reached or the
    body is not JSON, and ``BusinessRuleError`` on non-2xx responses.
    """
    url = f"{settings()['API_URL']}{path}"
    try:
        r = requests.request(
            method, url, headers=_headers(), timeout=settings()["API_TIMEOUT"], **kwargs
        )
    except requests.RequestException as exc:
        raise TransportError(f"{method} {path} failed: {exc}") from exc

    if not r.ok:
        messages = _error_messages(r)
        logger.warning("%s %s -> %s %s", method, path, r.status_code, messages)
        raise BusinessRuleError(r.status_code, messages)

    try:
        return r.json()
    except ValueError as exc:
        raise TransportError(f"{method} {path} returned a non-JSON body") from exc


def _get(path: str, params: dict | None = None):
    return _request("GET", path, params=params)


def _post(path: str, body: dict | None = None):
    return _request("POST", path, json=body)


def _payload_errors(func):
    """Re-raise parsing failures of a decoded body as ``PayloadShapeError``.

    Pydantic validation errors and the ``TypeError``/``AttributeError`` of a
    row holding the wrong JSON type all mean the same thing to callers: the
    server sent a shape we cannot read.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (TypeError, AttributeError, KeyError, ValueError) as exc:
            raise PayloadShapeError(f"{func.__name__}: malformed payload ({exc})") from exc

    return wrapper


def _pct_change(price: float, open_day: float | None) -> float:
    if not open_day:
        return 0.0
    return (price - open_day) / open_day * 100


def _pairs_from_map(raw: dict) -> list[TradingPair]:
    """Read the ``{base: {quote: {price, openDay, pair}}}`` ticker map."""
    pairs: list[TradingPair] = []
    for base, quotes in raw.items():
        if not isinstance(quotes, dict):
            raise PayloadShapeError(f"Ticker entry for {base!r} is not a mapping")
        for quote, info in quotes.items():
            if not isinstance(info, dict):
                raise PayloadShapeError(f"Ticker {base}/{quote} is not a mapping")
            # Aggregator feeds use upper-case keys (PRICE, OPENDAY)
            price = float(info.get("price", info.get("PRICE")) or 0)
            open_day = info.get("openDay", info.get("OPENDAY"))
            pairs.append(
                TradingPair(
                    base_currency=base,
                    quote=quote,
                    price=price,
                    change=_pct_change(price, float(open_day) if open_day else None),
                    name=info.get("name", base),
                    icon_url=info.get("IMAGEURL") or ICON_URL.format(symbol=base.lower()),
                )
            )
    return pairs


def _pairs_from_rows(raw: list) -> list[TradingPair]:
    """Read a flat list of product rows (``symbol``/``baseCurrency``/``quote``)."""
    pairs: list[TradingPair] = []
    for row in raw:
        if not isinstance(row, dict):
            raise PayloadShapeError("Ticker list entries must be objects")
        symbol = row.get("symbol") or row.get("pair") or ""
        base, _, quote = symbol.partition("-")
        base = row.get("baseCurrency", base)
        quote = row.get("quote") or row.get("quoteCurrency") or quote
        if not base or not quote:
            logger.debug("Skipping ticker row without base/quote: %s", row)
            continue
        pairs.append(
            TradingPair(
                base_currency=base,
                quote=quote,
                price=float(row.get("price") or 0),
                change=float(row.get("change") or 0),
                name=row.get("name") or base,
                icon_url=row.get("iconUrl") or ICON_URL.format(symbol=base.lower()),
            )
        )
    return pairs


def _extract_balances(raw):  # noqa: D401 – helper, not user-facing
    """Normalise the `/balances` response shapes into *list[dict]*.

    Accepts a bare list, a list stored under ``balances``/``data``/``assets``
    or a ``{"BTC": {...}, ...}`` mapping; raises ``PayloadShapeError``
    otherwise so bugs surface fast.
    """
    if isinstance(raw, list):
        return raw

    if isinstance(raw, dict):
        for key in ("balances", "data", "assets"):
            if key in raw and isinstance(raw[key], list):
                return raw[key]

        if raw and all(isinstance(v, dict) for v in raw.values()):
            return [{"asset": k, **v} for k, v in raw.items()]
        if not raw:
            return []

    raise PayloadShapeError("Unrecognised `/balances` payload shape")

# -----------------------------------------------------------------------------
# Public API helpers (called by the caches and the Streamlit pages)
# -----------------------------------------------------------------------------

@_payload_errors
def get_pairs() -> list[TradingPair]:
    """Return the full ticker table as a flat list of pairs."""
    raw = _get("/tickers/")
    if isinstance(raw, dict):
        return _pairs_from_map(raw)
    if isinstance(raw, list):
        return _pairs_from_rows(raw)
    raise PayloadShapeError(f"Unexpected ticker payload type: {type(raw)}")


@_payload_errors
def get_balances() -> list[AssetBalance]:
    """Fetch `/balances` for the authenticated account."""
    return [AssetBalance.model_validate(row) for row in _extract_balances(_get("/balances"))]


@_payload_errors
def get_watchlist() -> list[WatchlistItem]:
    rows = _get("/watchlist")
    if not isinstance(rows, list):
        raise PayloadShapeError(f"Expected list from /watchlist, got {type(rows)}")
    return [WatchlistItem.model_validate(row) for row in rows]


@_payload_errors
def toggle_watchlist(asset: str) -> bool:
    """Flip *asset* on the server watchlist; return ``True`` when it was added."""
    res = _post(f"/watchlist/{asset}/toggle")
    if not isinstance(res, dict) or "added" not in res:
        raise PayloadShapeError("Watchlist toggle answer lacks an 'added' flag")
    return bool(res["added"])


@_payload_errors
def get_orders(status: str | None = None, limit: int | None = 50) -> list[Order]:
    """Return the most recent orders.

    Parameters
    ----------
    status : str | None
        Optional filter – e.g. "FILLED", "PENDING". ``None`` → all.
    limit : int | None, default 50
        How many most-recent rows to pull.
    """
    params: dict[str, str | int] = {}
    if status:
        params["status"] = status
    if limit:
        params["limit"] = limit
    rows = _get("/orders", params=params or None)
    if isinstance(rows, dict):
        rows = rows.get("orders", [])
    if not isinstance(rows, list):
        raise PayloadShapeError(f"Expected list of orders, got {type(rows)}")
    return [Order.model_validate(row) for row in rows]


@_payload_errors
def create_deposit_intent(amount: float) -> DepositIntent:
    return DepositIntent.model_validate(_post("/fiat/deposit", {"amount": amount}))


@_payload_errors
def create_withdrawal(bank_account_id: str, amount: float) -> Withdrawal:
    return Withdrawal.model_validate(
        _post("/fiat/withdraw", {"bankAccountId": bank_account_id, "amount": amount})
    )


@_payload_errors
def get_fiat_transactions(
    tx_type: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> tuple[list[FiatTransaction], int]:
    """Return ``(transactions, total)`` from `/fiat/transactions`."""
    params = {k: v for k, v in {"type": tx_type, "limit": limit, "offset": offset}.items() if v}
    raw = _get("/fiat/transactions", params=params or None)
    if not isinstance(raw, dict):
        raise PayloadShapeError(f"Expected dict from /fiat/transactions, got {type(raw)}")
    transactions = [FiatTransaction.model_validate(t) for t in raw.get("transactions", [])]
    return transactions, int(raw.get("total", len(transactions)))


@_payload_errors
def sync_payment_status(transaction_id: str) -> bool:
    """Ask the server to re-check a payment (fallback when the webhook is late)."""
    res = _post("/fiat/sync-payment", {"transactionId": transaction_id})
    return bool(isinstance(res, dict) and res.get("success"))


@_payload_errors
def get_bank_accounts() -> list[BankAccount]:
    return [BankAccount.model_validate(row) for row in _get("/fiat/bank-accounts")]


@_payload_errors
def create_portfolio_snapshot(crypto_prices: dict[str, float]) -> bool:
    """Record today's portfolio value server-side (feeds the growth chart).

    *crypto_prices* maps each base currency to its USD price, as produced by
    :func:`intuition_deck.services.valuation.portfolio_prices`.
    """
    res = _post("/learner/snapshot", {"cryptoPrices": crypto_prices})
    return bool(isinstance(res, dict) and res.get("success"))
