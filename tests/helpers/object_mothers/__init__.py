from tests.helpers.object_mothers.asset_balance_object_mother import AssetBalanceObjectMother
from tests.helpers.object_mothers.trading_pair_object_mother import TradingPairObjectMother

__all__ = [
    "AssetBalanceObjectMother",
    "TradingPairObjectMother",
]
