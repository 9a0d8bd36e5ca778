from collections.abc import Generator

import pytest
from faker import Faker
from pytest_httpserver import HTTPServer

from intuition_deck.config import settings


@pytest.fixture(scope="session", autouse=True)
def faker() -> Faker:
    return Faker()


@pytest.fixture(autouse=True)
def defaults_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    # Keep whatever a developer has in their .env out of the tests
    monkeypatch.setenv("API_URL", "http://localhost:9/api")
    monkeypatch.setenv("API_TOKEN", "")
    monkeypatch.setenv("API_TIMEOUT", "2")
    monkeypatch.setenv("CASH_ASSET", "USD")
    monkeypatch.setenv("REQUIRED_ASSETS", "BTC,ETH,USDT,TUIT")
    monkeypatch.setenv("MIN_FIAT_AMOUNT", "10")
    monkeypatch.setenv("MAX_DEPOSIT_AMOUNT", "10000")
    monkeypatch.setenv("DEPOSIT_POLL_ATTEMPTS", "5")
    monkeypatch.setenv("DEPOSIT_POLL_SECONDS", "0.01")
    monkeypatch.setenv("PRICE_POLL_SECONDS", "0.01")
    monkeypatch.setenv("APP_MODE", "learner")
    settings.cache_clear()
    yield
    settings.cache_clear()


@pytest.fixture
def api_env(httpserver: HTTPServer, monkeypatch: pytest.MonkeyPatch, faker: Faker) -> Generator[tuple[HTTPServer, str]]:
    """Point the REST wrapper at the local HTTP server; yields ``(httpserver, token)``."""
    token = faker.sha256()
    monkeypatch.setenv("API_URL", httpserver.url_for("/api"))
    monkeypatch.setenv("API_TOKEN", token)
    settings.cache_clear()
    yield httpserver, token
