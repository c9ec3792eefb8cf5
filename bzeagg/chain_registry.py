"""Chain registry asset list client and its cached lookup."""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Protocol

import requests

from .errors import InvalidDependenciesError
from .registry import Asset, AssetList

CACHE_TTL = timedelta(minutes=30)


class RegistryError(RuntimeError):
    """Raised when the asset list cannot be fetched or decoded."""


class Cache(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, data: bytes, expiration: timedelta) -> None: ...


class AssetListStore(Protocol):
    def get_asset_list(self) -> AssetList | None: ...


class ChainRegistryClient:
    """Downloads the chain's asset list from a JSON document."""

    def __init__(
        self, url: str, session: requests.Session | None = None, timeout: float = 30.0
    ) -> None:
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def get_asset_list(self) -> AssetList:
        try:
            response = self.session.get(self.url, timeout=self.timeout)
        except requests.RequestException as err:
            raise RegistryError(f"failed to fetch JSON: {err}") from err
        if response.status_code != 200:
            raise RegistryError(f"failed to fetch JSON: received status {response.status_code}")
        try:
            data = response.json()
        except ValueError as err:
            raise RegistryError(f"failed to decode JSON: {err}") from err
        if not isinstance(data, dict):
            raise RegistryError("failed to decode JSON: expected an object")
        try:
            return AssetList.from_dict(data)
        except (TypeError, ValueError, AttributeError) as err:
            raise RegistryError(f"failed to decode JSON: {err}") from err


class ChainRegistry:
    """Looks up asset details, caching the whole asset list by base denom."""

    def __init__(self, logger: logging.Logger, cache: Cache, store: AssetListStore) -> None:
        if cache is None or store is None or logger is None:
            raise InvalidDependenciesError("NewChainRegistry")
        self.logger = logger
        self.cache = cache
        self.store = store

    def get_asset_details(self, denom: str) -> Asset | None:
        """Return the asset whose base is ``denom``, or None if the registry lacks it."""
        cached = self._from_cache(denom)
        if cached is not None:
            return cached

        asset_list = self.store.get_asset_list()
        if asset_list is None:
            raise RegistryError("no chain registry assets found")

        for asset in asset_list.assets:
            try:
                self.cache.set(asset.base, json.dumps(asset.to_dict()).encode(), CACHE_TTL)
            except Exception as err:
                self.logger.error("error caching asset %s: %s", asset.base, err)

        return self._from_cache(denom)

    def _from_cache(self, denom: str) -> Asset | None:
        try:
            raw = self.cache.get(denom)
        except Exception as err:
            self.logger.warning("error reading asset %s from cache: %s", denom, err)
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("cached asset is not an object")
            return Asset.from_dict(data)
        except (ValueError, TypeError, AttributeError) as err:
            self.logger.warning("error decoding cached asset %s: %s", denom, err)
            return None