# app/router/crypto_prices_router.py
from fastapi import APIRouter, Depends

from ..services.crypto_price_service import CryptoPriceProxy, get_price_proxy

router = APIRouter(prefix="/api/crypto-prices", tags=["Crypto Prices"])


@router.get("")
def get_prices(proxy: CryptoPriceProxy = Depends(get_price_proxy)):
    return proxy.get_prices()


# forced refresh, skips the cache
@router.post("")
def refresh_prices(proxy: CryptoPriceProxy = Depends(get_price_proxy)):
    return proxy.get_prices(force_refresh=True)


@router.get("/simple")
def get_simple_prices(proxy: CryptoPriceProxy = Depends(get_price_proxy)):
    return proxy.simple_snapshot()
