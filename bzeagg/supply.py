"""Total and circulating supply of a denomination."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Protocol

from .errors import InvalidDependenciesError
from .registry import Asset, AssetDenom

TOTAL_SUPPLY_CACHE_KEY = "supply:total_supply"
CIRCULATING_SUPPLY_CACHE_KEY = "supply:circulating_supply"
CACHE_EXPIRE = timedelta(seconds=600)


class SupplyError(LookupError):
    """Raised when a denomination cannot be resolved in the registry."""


class Cache(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, data: bytes, expiration: timedelta) -> None: ...


class SupplyDataProvider(Protocol):
    def get_total_supply(self, denom: str) -> int: ...

    def get_community_pool_total(self, denom: str) -> float: ...


class AssetRegistry(Protocol):
    def get_asset_details(self, denom: str) -> Asset | None: ...


class SupplyService:
    """Computes supply figures in display units, cached for ten minutes."""

    def __init__(
        self,
        logger: logging.Logger,
        cache: Cache,
        provider: SupplyDataProvider,
        registry: AssetRegistry,
    ) -> None:
        if logger is None or cache is None or provider is None or registry is None:
            raise InvalidDependenciesError("NewSupplyService")
        self.logger = logger
        self.cache = cache
        self.provider = provider
        self.registry = registry

    def _display_denom(self, denom: str) -> AssetDenom:
        try:
            details = self.registry.get_asset_details(denom)
        except Exception as err:
            raise SupplyError(f"denom {denom} not found in registry") from err
        if details is None:
            raise SupplyError(f"denom {denom} not found in registry")
        display = details.display_denom_unit()
        if display is None:
            raise SupplyError(f"{denom} has no display denomination")
        return display

    def _cached(self, key: str) -> str | None:
        try:
            raw = self.cache.get(key)
        except Exception as err:
            self.logger.error("failed to read %s from cache: %s", key, err)
            return None
        return raw.decode() if raw is not None else None

    def _store(self, key: str, value: str) -> None:
        try:
            self.cache.set(key, value.encode(), CACHE_EXPIRE)
        except Exception as err:
            self.logger.error("failed to set %s to cache: %s", key, err)

    def get_total_supply(self, denom: str) -> str:
        display = self._display_denom(denom)
        key = f"{TOTAL_SUPPLY_CACHE_KEY}:{denom}"
        cached = self._cached(key)
        if cached is not None:
            return cached

        try:
            micro_total = self.provider.get_total_supply(denom)
        except Exception as err:
            self.logger.error("failed to get total supply from data provider: %s", err)
            return "0"

        result = f"{float(micro_total) / 10.0 ** display.exponent:.2f}"
        self._store(key, result)
        return result

    def get_circulating_supply(self, denom: str) -> str:
        display = self._display_denom(denom)
        if not display.is_bze():
            return self.get_total_supply(denom)

        key = f"{CIRCULATING_SUPPLY_CACHE_KEY}:{denom}"
        cached = self._cached(key)
        if cached is not None:
            return cached

        total = float(self.get_total_supply(denom))
        try:
            pool = self.provider.get_community_pool_total(denom)
        except Exception as err:
            self.logger.error("failed to get community pool funds: %s", err)
            return "0"

        result = f"{total - pool / 10.0 ** display.exponent:.2f}"
        self._store(key, result)
        return result