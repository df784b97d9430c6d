import pytest
import requests

from portal_service.app.main import app
from portal_service.app.services.crypto_price_service import (
    STALE_CACHE_NOTE,
    TOKENS,
    CryptoPriceProxy,
    PriceCache,
    get_price_proxy,
    summarize_series,
)

HNT, XNET = TOKENS


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, series):
        # coin id -> list of prices or an HTTP status to fail with
        self.series = series
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        coin_id = url.split("/coins/")[1].split("/")[0]
        self.calls.append(coin_id)
        series = self.series[coin_id]
        if isinstance(series, int):
            return FakeResponse({}, status_code=series)
        return FakeResponse({"prices": [[i * 86_400_000, p] for i, p in enumerate(series)]})


@pytest.fixture
def clock():
    return FakeClock()


def _proxy(clock, series):
    session = FakeSession(series)
    return CryptoPriceProxy(cache=PriceCache(300, clock=clock), session=session), session


def test_summarize_series():
    card = summarize_series(HNT, [[0, 4.0], [1, 6.0], [2, 5.0]])
    assert card["currentPrice"] == 5.0
    assert card["price24hAgo"] == 6.0
    assert card["change24h"] == -1.0
    assert card["change24hPercent"] == pytest.approx(-100 / 6)
    assert card["avg30d"] == 5.0
    assert card["high30d"] == 6.0
    assert card["low30d"] == 4.0


def test_single_point_series_has_no_change():
    card = summarize_series(XNET, [[0, 0.25]])
    assert card["price24hAgo"] == 0.25
    assert card["change24h"] == 0
    assert card["change24hPercent"] == 0


def test_zero_prior_price_gives_zero_percent():
    card = summarize_series(XNET, [[0, 0.0], [1, 0.5]])
    assert card["change24h"] == 0.5
    assert card["change24hPercent"] == 0


def test_cache_hit_returns_same_payload(clock):
    proxy, session = _proxy(clock, {"helium": [1, 2], "xnet-mobile-2": [0.1, 0.2]})
    first = proxy.get_prices()
    clock.now += 299
    second = proxy.get_prices()
    assert second is first
    assert len(session.calls) == 2


def test_cache_expires(clock):
    proxy, session = _proxy(clock, {"helium": [1, 2], "xnet-mobile-2": [0.1, 0.2]})
    proxy.get_prices()
    clock.now += 300
    proxy.get_prices()
    assert len(session.calls) == 4


def test_force_refresh_bypasses_cache(clock):
    proxy, session = _proxy(clock, {"helium": [1, 2], "xnet-mobile-2": [0.1, 0.2]})
    proxy.get_prices()
    proxy.get_prices(force_refresh=True)
    assert len(session.calls) == 4


def test_one_token_outage_keeps_the_other(clock):
    proxy, _ = _proxy(clock, {"helium": 503, "xnet-mobile-2": [0.1, 0.2]})
    payload = proxy.get_prices()
    assert payload["success"] is True
    assert payload["data"]["HNT"]["currentPrice"] == 0
    assert payload["data"]["XNET"]["currentPrice"] == 0.2


class RawBodySession(FakeSession):
    def __init__(self, body):
        super().__init__({})
        self.body = body

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append(url)
        return FakeResponse(self.body)


def test_non_object_body_gives_placeholders(clock):
    session = RawBodySession(["unexpected"])
    proxy = CryptoPriceProxy(cache=PriceCache(300, clock=clock), session=session)
    payload = proxy.get_prices()
    assert payload["success"] is True
    assert payload["data"]["HNT"]["currentPrice"] == 0
    assert payload["data"]["XNET"]["currentPrice"] == 0
    assert len(session.calls) == 2


def test_fan_out_failure_serves_stale_cache(clock, monkeypatch):
    proxy, _ = _proxy(clock, {"helium": [1, 2], "xnet-mobile-2": [0.1, 0.2]})
    fresh = proxy.get_prices()
    clock.now += 600

    def broken():
        raise RuntimeError("executor shut down")

    monkeypatch.setattr(proxy, "_fan_out", broken)
    stale = proxy.get_prices()
    assert stale["error"] == STALE_CACHE_NOTE
    assert stale["data"] == fresh["data"]


def test_prices_endpoint(clock, portal_client):
    proxy, session = _proxy(clock, {"helium": [3, 4], "xnet-mobile-2": [0.1, 0.2]})
    app.dependency_overrides[get_price_proxy] = lambda: proxy
    try:
        resp = portal_client.get("/api/crypto-prices")
        assert resp.status_code == 200
        assert resp.json()["data"]["HNT"]["symbol"] == "HNT"

        portal_client.post("/api/crypto-prices")
        assert len(session.calls) == 4

        simple = portal_client.get("/api/crypto-prices/simple").json()
        assert simple["hnt_current"] == 4
        assert simple["xnet_30d_high"] == 0.2
    finally:
        app.dependency_overrides.clear()


def test_endpoint_without_any_cache_fails(clock, portal_client, monkeypatch):
    proxy, _ = _proxy(clock, {})

    def broken():
        raise RuntimeError("executor shut down")

    monkeypatch.setattr(proxy, "_fan_out", broken)
    app.dependency_overrides[get_price_proxy] = lambda: proxy
    try:
        resp = portal_client.get("/api/crypto-prices")
        assert resp.status_code == 500
        assert "CoinGecko" in resp.json()["error"]
    finally:
        app.dependency_overrides.clear()
