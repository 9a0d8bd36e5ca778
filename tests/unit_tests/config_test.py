import pytest

from intuition_deck.config import settings


def should_parse_required_assets_and_strip_api_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REQUIRED_ASSETS", " btc, eth ,,tuit ")
    monkeypatch.setenv("API_URL", "https://exchange.test/api/")
    monkeypatch.setenv("CASH_ASSET", "usd")
    settings.cache_clear()

    config = settings()

    assert config["REQUIRED_ASSETS"] == ["BTC", "ETH", "TUIT"]
    assert config["API_URL"] == "https://exchange.test/api"
    assert config["CASH_ASSET"] == "USD"


def should_cache_settings_until_cleared(monkeypatch: pytest.MonkeyPatch) -> None:
    first = settings()
    monkeypatch.setenv("DEPOSIT_POLL_ATTEMPTS", "9")

    assert settings() is first
    settings.cache_clear()
    assert settings()["DEPOSIT_POLL_ATTEMPTS"] == 9
