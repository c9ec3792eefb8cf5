"""Coin prices with a short-lived cache and a long-lived backup."""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Protocol

from .entities import CoinPrice
from .errors import InvalidDependenciesError

PRICES_CACHE = "prices:all"
PRICES_CACHE_BACKUP = "prices:all:backup"

PRICE_CACHE_EXPIRE = timedelta(seconds=180)
PRICE_BACKUP_CACHE_EXPIRE = timedelta(days=1)


class Cache(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, data: bytes, expiration: timedelta) -> None: ...


class PriceProvider(Protocol):
    def get_denominations_prices(self) -> list[CoinPrice]: ...


class PricesService:
    """Serves prices from cache, the provider, or the backup copy, in that order."""

    def __init__(self, cache: Cache, data_provider: PriceProvider, logger: logging.Logger) -> None:
        if data_provider is None or cache is None or logger is None:
            raise InvalidDependenciesError("NewPricesService")
        self.cache = cache
        self.data_provider = data_provider
        self.logger = logger

    def get_prices(self) -> list[CoinPrice]:
        cached = self._from_cache(PRICES_CACHE)
        if cached is not None:
            return cached

        prices = self._from_provider()
        if not prices:
            return self._from_cache(PRICES_CACHE_BACKUP) or []

        self._store(prices)
        return prices

    def _store(self, prices: list[CoinPrice]) -> None:
        encoded = json.dumps([p.to_dict() for p in prices]).encode()
        for key, ttl in ((PRICES_CACHE, PRICE_CACHE_EXPIRE), (PRICES_CACHE_BACKUP, PRICE_BACKUP_CACHE_EXPIRE)):
            try:
                self.cache.set(key, encoded, ttl)
            except Exception as err:
                self.logger.error("failed to cache prices under %s: %s", key, err)

    def _from_cache(self, key: str) -> list[CoinPrice] | None:
        try:
            raw = self.cache.get(key)
        except Exception as err:
            self.logger.error("failed to get prices from cache: %s", err)
            return None
        if raw is None:
            return None
        try:
            return [CoinPrice.from_dict(item) for item in json.loads(raw)]
        except (ValueError, TypeError, AttributeError) as err:
            self.logger.error("failed to unmarshal prices from cache: %s", err)
            return None

    def _from_provider(self) -> list[CoinPrice] | None:
        try:
            return self.data_provider.get_denominations_prices()
        except Exception as err:
            self.logger.error("failed to get prices from provider: %s", err)
            return None