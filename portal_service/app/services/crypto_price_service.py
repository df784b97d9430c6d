"""HNT / XNET market data from CoinGecko behind a short-lived in-memory cache."""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

import requests

from shared.core.config import settings
from shared.utils.errors import UpstreamError

logger = logging.getLogger(__name__)

STALE_CACHE_NOTE = "Using cached data - API temporarily unavailable"


@dataclass(frozen=True)
class Token:
    symbol: str
    coin_id: str
    name: str


TOKENS = (
    Token("HNT", "helium", "Helium"),
    Token("XNET", "xnet-mobile-2", "XNET Mobile"),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def empty_price(token: Token) -> dict:
    return {
        "symbol": token.symbol,
        "name": token.name,
        "currentPrice": 0,
        "price24hAgo": 0,
        "change24h": 0,
        "change24hPercent": 0,
        "avg30d": 0,
        "high30d": 0,
        "low30d": 0,
        "lastUpdated": _now_iso(),
    }


def summarize_series(token: Token, prices: List[List[float]]) -> dict:
    """Reshape a CoinGecko `[[ms, price], ...]` series into the price card payload."""
    if not prices:
        return empty_price(token)

    values = [float(p[1]) for p in prices]
    current = values[-1]
    previous = values[-2] if len(values) > 1 else current
    change = current - previous
    return {
        "symbol": token.symbol,
        "name": token.name,
        "currentPrice": current,
        "price24hAgo": previous,
        "change24h": change,
        "change24hPercent": (change / previous) * 100 if previous > 0 else 0,
        "avg30d": sum(values) / len(values),
        "high30d": max(values),
        "low30d": min(values),
        "lastUpdated": _now_iso(),
    }


class PriceCache:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # (payload, stored_at); replaced as a whole so readers never see half an update
        self._entry = None

    def get(self) -> Optional[dict]:
        entry = self._entry
        if entry is None:
            return None
        value, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            return None
        return value

    def peek(self) -> Optional[dict]:
        entry = self._entry
        return entry[0] if entry else None

    def set(self, value: dict) -> None:
        self._entry = (value, self._clock())

    def clear(self) -> None:
        self._entry = None


class CryptoPriceProxy:
    def __init__(self, cache: Optional[PriceCache] = None, session: Optional[requests.Session] = None):
        self.cache = cache or PriceCache(settings.PRICE_CACHE_SECONDS)
        self.session = session or requests.Session()

    def fetch_series(self, token: Token) -> List[List[float]]:
        headers = {"Accept": "application/json"}
        if settings.COINGECKO_API_KEY:
            headers["x-cg-demo-api-key"] = settings.COINGECKO_API_KEY
        response = self.session.get(
            f"{settings.COINGECKO_API_URL}/coins/{token.coin_id}/market_chart",
            params={"vs_currency": "usd", "days": 30, "interval": "daily"},
            headers=headers,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise ValueError(f"Unexpected CoinGecko body for {token.coin_id}")
        return body.get("prices") or []

    def token_price(self, token: Token) -> dict:
        try:
            return summarize_series(token, self.fetch_series(token))
        except (requests.RequestException, ValueError, KeyError, TypeError, IndexError) as e:
            # one bad token must not blank the other
            logger.warning("CoinGecko fetch failed for %s: %s", token.symbol, e)
            return empty_price(token)

    def _fan_out(self) -> List[dict]:
        with ThreadPoolExecutor(max_workers=len(TOKENS)) as pool:
            return list(pool.map(self.token_price, TOKENS))

    def get_prices(self, force_refresh: bool = False) -> dict:
        if force_refresh:
            self.cache.clear()

        cached = self.cache.get()
        if cached is not None:
            return cached

        try:
            results = self._fan_out()
        except Exception as e:
            logger.exception("Price fan-out failed")
            previous = self.cache.peek()
            if previous is not None:
                return {**previous, "error": STALE_CACHE_NOTE}
            raise UpstreamError("CoinGecko", "Failed to fetch price data") from e

        payload = {
            "success": True,
            "data": {token.symbol: result for token, result in zip(TOKENS, results)},
            "timestamp": _now_iso(),
        }
        self.cache.set(payload)
        return payload

    def simple_snapshot(self) -> dict:
        """Flat daily row used by the earnings spreadsheets."""
        prices = self.get_prices()["data"]
        hnt, xnet = prices["HNT"], prices["XNET"]
        now = datetime.now(timezone.utc)
        return {
            "date": now.date().isoformat(),
            "hnt_current": hnt["currentPrice"],
            "hnt_30d_avg": hnt["avg30d"],
            "hnt_30d_high": hnt["high30d"],
            "hnt_30d_low": hnt["low30d"],
            "xnet_current": xnet["currentPrice"],
            "xnet_30d_avg": xnet["avg30d"],
            "xnet_30d_high": xnet["high30d"],
            "xnet_30d_low": xnet["low30d"],
            "timestamp": now.isoformat(),
        }


_proxy: Optional[CryptoPriceProxy] = None


def get_price_proxy() -> CryptoPriceProxy:
    global _proxy
    if _proxy is None:
        _proxy = CryptoPriceProxy()
    return _proxy
