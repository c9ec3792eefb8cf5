"""Synchronisation of markets, trade history, candles and order books into storage."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Protocol

from .amounts import get_market_id, split_batches
from .conversion import (
    AggregatedOrder,
    ChainHistoryOrder,
    ChainMarket,
    TypesConverter,
    new_market_entity,
)
from .entities import Market, MarketHistory, MarketHistoryInterval, MarketOrder
from .errors import InvalidDependenciesError
from .intervals import IntervalsMap, get_biggest_duration, get_timestamp_interval
from .registry import Asset

REQUESTED_HISTORY_LENGTH = 5000
SAVE_BATCH_SIZE = 1000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SyncError(RuntimeError):
    """Raised when a synchronisation step cannot be completed."""


def interval_lock_key(market_id: str) -> str:
    return f"sync:interval:{market_id}"


def history_lock_key(market_id: str) -> str:
    return f"sync:history:{market_id}"


def order_lock_key(market_id: str) -> str:
    return f"sync:order:{market_id}"


def _unix(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // timedelta(seconds=1)


class Locker(Protocol):
    def lock(self, key: str) -> None: ...

    def unlock(self, key: str) -> None: ...


class AssetProvider(Protocol):
    def get_asset_details(self, denom: str) -> Asset | None: ...


class HistoryProvider(Protocol):
    def get_market_history(
        self, market_id: str, limit: int, key: str
    ) -> tuple[list[ChainHistoryOrder], str]: ...


class HistoryStorage(Protocol):
    def get_last_history_order(self, market_id: str) -> MarketHistory | None: ...

    def save_market_history_orders(
        self, market_id: str, orders: list[MarketHistory], clear_executed_at: list[datetime]
    ) -> None: ...


class IntervalHistoryStorage(Protocol):
    def get_by_executed_at(self, market_id: str, executed_at: datetime) -> list[MarketHistory]: ...

    def get_oldest_not_added_to_interval(self, market_id: str) -> MarketHistory | None: ...

    def mark_as_added_to_interval(self, ids: list[int]) -> None: ...


class IntervalStorage(Protocol):
    def save(self, items: list[MarketHistoryInterval]) -> None: ...


class MarketProvider(Protocol):
    def get_all_markets(self) -> list[ChainMarket]: ...


class MarketStorage(Protocol):
    def save_if_not_exists(self, items: list[Market]) -> None: ...


class FirstOrderLookup(Protocol):
    def get_first_market_order(self, market_id: str) -> MarketHistory | None: ...


class OrderDataProvider(Protocol):
    def get_active_buy_orders(self, market_id: str) -> list[AggregatedOrder]: ...

    def get_active_sell_orders(self, market_id: str) -> list[AggregatedOrder]: ...


class OrderStorage(Protocol):
    def upsert(self, items: list[MarketOrder], market_ids: list[str]) -> None: ...


class _Held:
    """Holds one key of a lock/unlock style locker for the duration of a block."""

    def __init__(self, locker: Locker, key: str) -> None:
        self._locker = locker
        self._key = key

    def __enter__(self) -> None:
        self._locker.lock(self._key)

    def __exit__(self, *exc: object) -> None:
        self._locker.unlock(self._key)


class HistorySync:
    """Copies executed trades from the chain, resuming from the newest stored one."""

    def __init__(
        self,
        logger: logging.Logger,
        data_provider: HistoryProvider,
        storage: HistoryStorage,
        asset_provider: AssetProvider,
        locker: Locker,
    ) -> None:
        if any(d is None for d in (logger, data_provider, storage, asset_provider, locker)):
            raise InvalidDependenciesError("NewHistorySync")
        self.logger = logger
        self.data_provider = data_provider
        self.storage = storage
        self.asset_provider = asset_provider
        self.locker = locker

    def sync_history(self, market: ChainMarket, batch_size: int = 0) -> None:
        """Sync the market's history; a batch size of 0 uses the default page length."""
        market_id = get_market_id(market.base, market.quote)
        with _Held(self.locker, history_lock_key(market_id)):
            limit = batch_size if batch_size > 0 else REQUESTED_HISTORY_LENGTH
            self.logger.info("preparing to sync history of %s", market_id)
            converter = TypesConverter(self.asset_provider, market)

            last = self.storage.get_last_history_order(market_id)
            if last is None:
                self.logger.info("no last order found, syncing the entire history of %s", market_id)

            key = ""
            while True:
                orders, next_key = self.data_provider.get_market_history(market_id, limit, key)
                if not orders:
                    self.logger.info("no history found on the blockchain (key=%r)", key)
                    break
                done = self._sync_list(market_id, orders, last, converter)
                if done or not next_key:
                    self.logger.info("finished syncing history of %s", market_id)
                    break
                key = next_key

    def _sync_list(
        self,
        market_id: str,
        orders: Sequence[ChainHistoryOrder],
        last: MarketHistory | None,
        converter: TypesConverter,
    ) -> bool:
        finished = False
        to_save: list[MarketHistory] = []
        for order in orders:
            if last is not None and _unix(last.executed_at) > order.executed_at:
                finished = True
                break
            to_save.append(converter.history_order_to_entity(order))

        if not to_save:
            self.logger.info("history orders of %s were already processed", market_id)
            return finished

        self.storage.save_market_history_orders(
            market_id, to_save, [entity.executed_at for entity in to_save]
        )
        self.logger.info("synced %d history orders of %s", len(to_save), market_id)
        return finished


class IntervalSync:
    """Rebuilds candles from stored trades that were not yet added to intervals."""

    def __init__(
        self,
        logger: logging.Logger,
        history_storage: IntervalHistoryStorage,
        locker: Locker,
        interval_storage: IntervalStorage,
    ) -> None:
        if any(d is None for d in (logger, history_storage, locker, interval_storage)):
            raise InvalidDependenciesError("NewIntervalSync")
        self.logger = logger
        self.history_storage = history_storage
        self.locker = locker
        self.interval_storage = interval_storage

    def sync_intervals(self, market: ChainMarket) -> None:
        market_id = get_market_id(market.base, market.quote)
        with _Held(self.locker, interval_lock_key(market_id)):
            self.logger.info("preparing to sync intervals of %s", market_id)
            try:
                oldest = self.history_storage.get_oldest_not_added_to_interval(market_id)
            except Exception as err:
                raise SyncError(f"error getting oldest not-added to interval: {err}") from err
            if oldest is None:
                raise SyncError("no orders found to add to intervals")

            since, _ = get_timestamp_interval(_unix(oldest.executed_at), get_biggest_duration())
            try:
                orders = self.history_storage.get_by_executed_at(market_id, since)
            except Exception as err:
                raise SyncError(f"error getting orders from history: {err}") from err

            intervals = IntervalsMap(market_id)
            added: list[int] = []
            for order in orders:
                intervals.add_order(order)
                added.append(order.id)

            to_save = intervals.to_entities()
            if not to_save:
                raise SyncError("we had orders to save but nothing found in the intervals map")

            for batch in split_batches(to_save, SAVE_BATCH_SIZE):
                try:
                    self.interval_storage.save(list(batch))
                except Exception as err:
                    self.logger.error("could not save intervals batch: %s", err)

            for batch in split_batches(added, SAVE_BATCH_SIZE):
                try:
                    self.history_storage.mark_as_added_to_interval(list(batch))
                except Exception as err:
                    self.logger.error("could not mark history orders as added: %s", err)


class MarketSync:
    """Stores every market of the chain, dated by its first trade when known."""

    def __init__(
        self,
        logger: logging.Logger,
        storage: MarketStorage,
        provider: MarketProvider,
        history: FirstOrderLookup,
    ) -> None:
        if any(d is None for d in (logger, storage, provider, history)):
            raise InvalidDependenciesError("NewMarketSync")
        self.logger = logger
        self.storage = storage
        self.provider = provider
        self.history = history

    def sync_markets(self) -> None:
        markets = self.provider.get_all_markets()
        self.logger.info("saving %d markets", len(markets))

        entities: list[Market] = []
        for source in markets:
            entity = new_market_entity(source)
            first = self.history.get_first_market_order(entity.market_id)
            if first is not None:
                entity.created_at = first.executed_at
            entities.append(entity)

        self.storage.save_if_not_exists(entities)


class OrderSync:
    """Replaces the stored order book of a market with the chain's current one."""

    def __init__(
        self,
        logger: logging.Logger,
        data_provider: OrderDataProvider,
        storage: OrderStorage,
        asset_provider: AssetProvider,
        locker: Locker,
    ) -> None:
        if any(d is None for d in (logger, data_provider, storage, asset_provider, locker)):
            raise InvalidDependenciesError("NewOrderSync")
        self.logger = logger
        self.data_provider = data_provider
        self.storage = storage
        self.asset_provider = asset_provider
        self.locker = locker

    def sync_market(self, market: ChainMarket) -> None:
        market_id = get_market_id(market.base, market.quote)
        with _Held(self.locker, order_lock_key(market_id)):
            buys = self.data_provider.get_active_buy_orders(market_id)
            try:
                sells = self.data_provider.get_active_sell_orders(market_id)
            except Exception as err:
                self.logger.error("error getting sell orders of %s: %s", market_id, err)
                raise
            try:
                self._sync_list([*buys, *sells], market, market_id)
            except Exception as err:
                self.logger.error("error syncing orders of %s: %s", market_id, err)
                raise

    def _sync_list(
        self, source: list[AggregatedOrder], market: ChainMarket, market_id: str
    ) -> None:
        if not source:
            self.logger.info("no active orders found")
            return

        converter = TypesConverter(self.asset_provider, market)
        entities: list[MarketOrder] = []
        for order in source:
            try:
                entities.append(converter.aggregated_order_to_entity(order))
            except Exception as err:
                self.logger.error("error converting order to entity: %s", err)

        if not entities:
            self.logger.info("no converted orders found")
            return

        self.storage.upsert(entities, [market_id])