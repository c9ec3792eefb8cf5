"""Command handlers that sync one market or every market of the chain."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, TypeVar

from .amounts import get_market_id
from .conversion import ChainMarket
from .errors import InvalidDependenciesError

T = TypeVar("T")


class HandlerError(LookupError):
    """Raised when the requested market cannot be found on the chain."""


class MarketProvider(Protocol):
    def get_all_markets(self) -> list[ChainMarket]: ...


class HistoryStorage(Protocol):
    def sync_history(self, market: ChainMarket, batch_size: int) -> None: ...


class IntervalStorage(Protocol):
    def sync_intervals(self, market: ChainMarket) -> None: ...


class MarketStorage(Protocol):
    def sync_markets(self) -> None: ...


class OrderStorage(Protocol):
    def sync_market(self, market: ChainMarket) -> None: ...


def _get_markets(provider: MarketProvider, logger: logging.Logger) -> list[ChainMarket]:
    try:
        return list(provider.get_all_markets() or [])
    except Exception as err:
        logger.error("could not get markets: %s", err)
        return []


def sync_one(
    market_id: str,
    provider: MarketProvider,
    logger: logging.Logger,
    sync_func: Callable[[ChainMarket], T],
) -> T:
    """Run ``sync_func`` on the chain market whose id is ``market_id``."""
    markets = _get_markets(provider, logger)
    if not markets:
        raise HandlerError("no markets found")
    for market in markets:
        if get_market_id(market.base, market.quote) == market_id:
            return sync_func(market)
    raise HandlerError(f"market {market_id} not found")


def sync_all(
    provider: MarketProvider,
    logger: logging.Logger,
    sync_func: Callable[[ChainMarket], object],
) -> None:
    """Run ``sync_func`` on every chain market, logging failures and carrying on."""
    markets = _get_markets(provider, logger)
    if not markets:
        logger.error("could not fetch markets to use in sync_all")
        return
    for market in markets:
        try:
            sync_func(market)
        except Exception as err:
            logger.error(
                "could not sync market %s: %s", get_market_id(market.base, market.quote), err
            )


class MarketHistorySyncHandler:
    """Syncs trade history of one or all markets."""

    def __init__(
        self, logger: logging.Logger, provider: MarketProvider, storage: HistoryStorage
    ) -> None:
        if logger is None or provider is None or storage is None:
            raise InvalidDependenciesError("NewMarketHistorySync")
        self.logger = logger
        self.provider = provider
        self.storage = storage

    def _sync(self, market: ChainMarket) -> None:
        self.storage.sync_history(market, 0)

    def sync_history(self, market_id: str) -> None:
        sync_one(market_id, self.provider, self.logger, self._sync)

    def sync_all(self) -> None:
        sync_all(self.provider, self.logger, self._sync)


class MarketIntervalSyncHandler:
    """Syncs candles of one or all markets."""

    def __init__(
        self, logger: logging.Logger, provider: MarketProvider, storage: IntervalStorage
    ) -> None:
        if logger is None or provider is None or storage is None:
            raise InvalidDependenciesError("NewMarketIntervalSync")
        self.logger = logger
        self.provider = provider
        self.storage = storage

    def _sync(self, market: ChainMarket) -> None:
        self.storage.sync_intervals(market)

    def sync_intervals(self, market_id: str) -> None:
        sync_one(market_id, self.provider, self.logger, self._sync)

    def sync_all(self) -> None:
        sync_all(self.provider, self.logger, self._sync)


class MarketsSyncHandler:
    """Syncs the list of markets."""

    def __init__(self, logger: logging.Logger, storage: MarketStorage) -> None:
        if logger is None or storage is None:
            raise InvalidDependenciesError("NewMarketsSyncHandler")
        self.logger = logger
        self.storage = storage

    def sync_markets(self) -> bool:
        """Sync markets; return whether it succeeded (failures are logged)."""
        try:
            self.storage.sync_markets()
        except Exception as err:
            self.logger.error("could not save markets: %s", err)
            return False
        self.logger.info("markets sync finished")
        return True


class MarketOrderSyncHandler:
    """Syncs the order book of one or all markets."""

    def __init__(
        self, logger: logging.Logger, provider: MarketProvider, storage: OrderStorage
    ) -> None:
        if provider is None or logger is None or storage is None:
            raise InvalidDependenciesError("NewMarketOrderSyncHandler")
        self.logger = logger
        self.provider = provider
        self.storage = storage

    def _sync(self, market: ChainMarket) -> None:
        self.logger.info(
            "preparing to sync market %s", get_market_id(market.base, market.quote)
        )
        self.storage.sync_market(market)

    def sync_market_orders(self, market_id: str) -> None:
        sync_one(market_id, self.provider, self.logger, self._sync)

    def sync_all(self) -> None:
        sync_all(self.provider, self.logger, self._sync)