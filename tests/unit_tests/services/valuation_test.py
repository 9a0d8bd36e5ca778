import logging

import pytest
from faker import Faker

from intuition_deck.services.model import AssetBalance, TradingPair
from intuition_deck.services.valuation import aggregate, portfolio_prices, usd_prices
from tests.helpers.constants import MOCK_OTHER_ASSETS, REQUIRED_ASSETS
from tests.helpers.object_mothers import AssetBalanceObjectMother, TradingPairObjectMother

logger = logging.getLogger(__name__)


def _pair(base: str, price: float, quote: str = "USD") -> TradingPair:
    return TradingPairObjectMother.create(base=base, quote=quote, price=price)


def _balance(asset: str, amount: float) -> AssetBalance:
    return AssetBalanceObjectMother.create(asset=asset, available=amount, locked=0.0)


def should_split_totals_into_crypto_and_cash(faker: Faker) -> None:
    symbols = faker.random_elements(MOCK_OTHER_ASSETS, length=3, unique=True)
    balances = [AssetBalanceObjectMother.create(asset=s) for s in [*symbols, "BTC"]]
    balances.append(_balance("USD", 1_250.5))
    pairs = [TradingPairObjectMother.create(base=s) for s in [*symbols, "BTC"]]

    valuation = aggregate(balances, pairs, REQUIRED_ASSETS)

    totals = valuation.totals
    assert totals.crypto_value == pytest.approx(sum(r.usd_value for r in valuation.assets))
    assert totals.cash_value == pytest.approx(1_250.5)
    assert totals.total_value == pytest.approx(totals.crypto_value + totals.cash_value)
    assert totals.crypto_count == len(valuation.assets)


def should_always_list_required_assets_even_when_not_held() -> None:
    valuation = aggregate([], [], REQUIRED_ASSETS)

    assert [r.symbol for r in valuation.assets] == REQUIRED_ASSETS
    for row in valuation.assets:
        assert row.required is True
        assert row.balance == 0
        assert row.usd_value == 0
        assert row.balance_display == "0.00"
        assert row.value_display == "$0.00"
    assert valuation.cash is None
    assert valuation.totals.total_value == 0


def should_sort_rows_by_descending_usd_value() -> None:
    balances = [_balance("BTC", 1), _balance("ETH", 10), _balance("SOL", 2)]
    pairs = [_pair("BTC", 100), _pair("ETH", 50), _pair("SOL", 1_000)]

    valuation = aggregate(balances, pairs, REQUIRED_ASSETS)

    assert [r.symbol for r in valuation.assets] == ["SOL", "ETH", "BTC", "USDT", "TUIT"]
    values = [r.usd_value for r in valuation.assets]
    assert values == sorted(values, reverse=True)


def should_break_value_ties_by_required_order_then_input_order() -> None:
    # Everything is worth zero: required list order first, then others as received
    balances = [_balance("XRP", 3), _balance("TUIT", 0), _balance("ADA", 7)]

    valuation = aggregate(balances, [], REQUIRED_ASSETS)

    assert [r.symbol for r in valuation.assets] == ["BTC", "ETH", "USDT", "TUIT", "XRP", "ADA"]


def should_value_asset_without_usd_pair_at_zero_but_keep_it_listed() -> None:
    balances = [_balance("BTC", 2), _balance("DOT", 4)]
    pairs = [_pair("BTC", 90, quote="EUR"), _pair("ETH", 2_000)]

    valuation = aggregate(balances, pairs, REQUIRED_ASSETS)

    by_symbol = {r.symbol: r for r in valuation.assets}
    assert by_symbol["BTC"].price == 0
    assert by_symbol["BTC"].usd_value == 0
    assert by_symbol["BTC"].balance_display == "2.00"
    assert by_symbol["DOT"].usd_value == 0
    assert valuation.totals.crypto_value == 0


def should_skip_other_assets_with_zero_balance() -> None:
    balances = [_balance("SOL", 0), _balance("ADA", 1.5)]
    pairs = [_pair("SOL", 150), _pair("ADA", 0.4)]

    valuation = aggregate(balances, pairs, REQUIRED_ASSETS)

    symbols = [r.symbol for r in valuation.assets]
    assert "SOL" not in symbols
    assert "ADA" in symbols
    assert valuation.totals.crypto_count == len(REQUIRED_ASSETS) + 1


def should_report_cash_separately_from_crypto_rows() -> None:
    balances = [_balance("USD", 500), _balance("BTC", 0.5)]
    pairs = [_pair("BTC", 30_000), _pair("USD", 3)]

    valuation = aggregate(balances, pairs, [*REQUIRED_ASSETS, "USD"])

    assert "USD" not in [r.symbol for r in valuation.assets]
    assert valuation.cash is not None
    assert valuation.cash.symbol == "USD"
    assert valuation.cash.price == 1.0
    assert valuation.cash.name == "US Dollar"
    assert valuation.totals.cash_value == pytest.approx(500)
    assert valuation.totals.crypto_value == pytest.approx(15_000)
    assert valuation.rows[-1] == valuation.cash


def should_keep_first_row_when_asset_is_listed_twice() -> None:
    balances = [_balance("ETH", 1), _balance("ETH", 99)]

    valuation = aggregate(balances, [_pair("ETH", 10)], REQUIRED_ASSETS)

    eth = next(r for r in valuation.assets if r.symbol == "ETH")
    assert eth.usd_value == pytest.approx(10)


def should_produce_same_valuation_for_same_inputs(faker: Faker) -> None:
    symbols = faker.random_elements(MOCK_OTHER_ASSETS, length=4, unique=True)
    balances = [AssetBalanceObjectMother.create(asset=s) for s in symbols]
    pairs = [TradingPairObjectMother.create(base=s) for s in symbols]

    first = aggregate(balances, pairs, REQUIRED_ASSETS)
    second = aggregate(balances, pairs, REQUIRED_ASSETS)

    assert first == second


def should_decorate_rows_with_asset_metadata() -> None:
    valuation = aggregate([_balance("SOL", 1)], [_pair("SOL", 20)], REQUIRED_ASSETS)

    by_symbol = {r.symbol: r for r in valuation.assets}
    assert by_symbol["BTC"].name == "Bitcoin"
    assert by_symbol["BTC"].color == "#F7931A"
    assert by_symbol["BTC"].icon_url == "https://assets.coincap.io/assets/icons/btc@2x.png"
    assert by_symbol["TUIT"].name == "Tuition Token"
    assert by_symbol["TUIT"].icon_url is None
    assert by_symbol["SOL"].name == "SOL"
    assert by_symbol["SOL"].required is False
    assert by_symbol["SOL"].value_display == "$20.00"


def should_use_first_usd_pair_per_base_currency() -> None:
    pairs = [_pair("BTC", 100, quote="EUR"), _pair("BTC", 110), _pair("BTC", 120)]

    assert usd_prices(pairs)["BTC"].price == 110
    assert portfolio_prices(pairs) == {"BTC": 110}


def should_order_btc_eth_example_with_zero_group_in_required_order() -> None:
    balances = [_balance("BTC", 1), _balance("ETH", 1), _balance("DOGE", 0)]
    pairs = [_pair("BTC", 50_000), _pair("ETH", 3_000)]

    valuation = aggregate(balances, pairs, REQUIRED_ASSETS)

    assert [(r.symbol, r.usd_value) for r in valuation.assets] == [
        ("BTC", 50_000),
        ("ETH", 3_000),
        ("USDT", 0),
        ("TUIT", 0),
    ]


def should_list_required_cash_at_zero_when_not_held() -> None:
    valuation = aggregate([_balance("BTC", 1)], [_pair("BTC", 100)], [*REQUIRED_ASSETS, "USD"])

    assert valuation.cash is not None
    assert valuation.cash.symbol == "USD"
    assert valuation.cash.required is True
    assert valuation.cash.usd_value == 0
    assert valuation.cash.balance_display == "0.00"
    assert valuation.totals.cash_value == 0
    assert valuation.totals.total_value == pytest.approx(100)


def should_omit_cash_row_when_neither_held_nor_required() -> None:
    valuation = aggregate([_balance("BTC", 1)], [_pair("BTC", 100)], REQUIRED_ASSETS)

    assert valuation.cash is None
    assert valuation.rows == list(valuation.assets)
