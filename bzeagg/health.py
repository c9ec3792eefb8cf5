"""Health checks of markets, the aggregator and the chain nodes."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Protocol

from .entities import (
    AggregatorHealth,
    HistoryOrder,
    MarketHealth,
    MarketHistory,
    NodesHealth,
)
from .errors import InvalidDependenciesError
from .params import HistoryParams

MARKET_HEALTH_CACHE_KEY = "health:mh"
AGG_HEALTH_CACHE_KEY = "health:agg"
HEALTH_CACHE_TTL = timedelta(minutes=10)
NODES_ALLOWED_HEIGHT_DIFF = 2

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _unix_millis(dt: datetime) -> int:
    return (_as_utc(dt) - _EPOCH) // timedelta(milliseconds=1)


class Cache(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, data: bytes, expiration: timedelta) -> None: ...


class MarketHistoryProvider(Protocol):
    def get_market_history(self, market_id: str, limit: int) -> list[HistoryOrder]: ...


class InternalHistoryProvider(Protocol):
    def get_history_by(self, params: HistoryParams) -> list[MarketHistory]: ...


class NodeStatus(Protocol):
    latest_block_height: int


class NodeInfoClient(Protocol):
    def get_status(self) -> NodeStatus | None: ...


class HealthService:
    """Answers whether markets trade, the aggregator syncs and nodes agree on height."""

    def __init__(
        self,
        logger: logging.Logger,
        cache: Cache,
        provider: MarketHistoryProvider,
        internal_history_provider: InternalHistoryProvider,
        nodes: Mapping[str, NodeInfoClient] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if logger is None or cache is None or provider is None or internal_history_provider is None:
            raise InvalidDependenciesError("NewHealthService")
        self.logger = logger
        self.cache = cache
        self.provider = provider
        self.internal_history_provider = internal_history_provider
        self.nodes = dict(nodes or {})
        self._clock = clock

    def _min_date(self, minutes_ago: int) -> datetime:
        return _as_utc(self._clock()) - timedelta(minutes=minutes_ago)

    def _read_cache(self, key: str) -> dict | None:
        try:
            raw = self.cache.get(key)
        except Exception as err:
            self.logger.error("error getting cached health %s: %s", key, err)
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError as err:
            self.logger.error("error unmarshalling cached health %s: %s", key, err)
            return None
        return data if isinstance(data, dict) else None

    def _write_cache(self, key: str, data: dict) -> None:
        try:
            encoded = json.dumps(data).encode()
        except (TypeError, ValueError) as err:
            self.logger.error("error marshalling health: %s", err)
            return
        try:
            self.cache.set(key, encoded, HEALTH_CACHE_TTL)
        except Exception as err:
            self.logger.error("error caching health: %s", err)

    def get_market_health(self, market_id: str, minutes_ago: int) -> MarketHealth:
        key = f"{MARKET_HEALTH_CACHE_KEY}:{market_id}"
        min_date = self._min_date(minutes_ago)

        cached = self._read_cache(key)
        if cached is not None:
            try:
                health = MarketHealth.from_dict(cached)
            except (ValueError, TypeError, KeyError) as err:
                self.logger.error("error decoding cached market health: %s", err)
            else:
                if min_date < _as_utc(health.last_trade):
                    health.is_healthy = True
                    return health

        result = MarketHealth()
        try:
            history = self.provider.get_market_history(market_id, 1)
        except Exception as err:
            self.logger.error("error getting market history: %s", err)
            return result
        if not history:
            return result

        last = _as_utc(history[0].executed_at)
        result.is_healthy = min_date < last
        result.last_trade = last
        self._write_cache(key, result.to_dict())
        return result

    def get_aggregator_health(self, minutes_ago: int) -> AggregatorHealth:
        now = _as_utc(self._clock())
        min_date = now - timedelta(minutes=minutes_ago)

        cached = self._read_cache(AGG_HEALTH_CACHE_KEY)
        if cached is not None:
            try:
                health = AggregatorHealth.from_dict(cached)
            except (ValueError, TypeError, KeyError) as err:
                self.logger.error("error decoding cached aggregator health: %s", err)
            else:
                if min_date < _as_utc(health.last_sync):
                    health.is_healthy = True
                    return health

        params = HistoryParams(
            limit=1, start_time=_unix_millis(min_date), end_time=_unix_millis(now)
        )
        result = AggregatorHealth()
        try:
            history = self.internal_history_provider.get_history_by(params)
        except Exception as err:
            self.logger.error("error getting internal market history: %s", err)
            return result
        if not history:
            return result

        result.is_healthy = min_date < _as_utc(history[0].executed_at)
        result.last_sync = history[0].created_at
        self._write_cache(AGG_HEALTH_CACHE_KEY, result.to_dict())
        return result

    def get_nodes_health(self) -> NodesHealth:
        if not self.nodes:
            return NodesHealth()

        errors: list[str] = []

        def query(item: tuple[str, NodeInfoClient]):
            name, client = item
            try:
                return name, client.get_status(), None
            except Exception as err:
                return name, None, err

        statuses: dict[str, NodeStatus | None] = {}
        with ThreadPoolExecutor(max_workers=len(self.nodes)) as pool:
            for name, status, err in pool.map(query, self.nodes.items()):
                if err is not None:
                    errors.append(f"failed to query: {name};")
                    self.logger.error("failed to get latest block of %s: %s", name, err)
                    continue
                statuses[name] = status

        for name, status in statuses.items():
            if status is None:
                errors.append(f"no info found for: {name};")
                continue
            for other, other_status in statuses.items():
                if other_status is None or other == name:
                    continue
                height = status.latest_block_height
                other_height = other_status.latest_block_height
                if height - other_height > NODES_ALLOWED_HEIGHT_DIFF:
                    errors.append(
                        f"{other} is behind {name}. Expected height {height}, found {other_height}"
                    )

        text = "".join(errors)
        return NodesHealth(is_healthy=text == "", errors=text)