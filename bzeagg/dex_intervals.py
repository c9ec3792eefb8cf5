"""Candle intervals served by the DEX endpoints, with gaps filled by empty candles."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Protocol, TypeVar

from .dex import MarketLookup, MarketNotFoundError
from .entities import Market, MarketHistoryInterval, TradingViewInterval
from .errors import InvalidDependenciesError
from .intervals import get_timestamp_interval
from .responses import IntervalsParams

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

E = TypeVar("E", MarketHistoryInterval, TradingViewInterval)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _unix(dt: datetime) -> int:
    return (_as_utc(dt) - _EPOCH) // timedelta(seconds=1)


class IntervalStore(Protocol):
    def get_intervals_by(self, params: IntervalsParams) -> Mapping[int, MarketHistoryInterval]: ...

    def get_trading_view_intervals_by(
        self, params: IntervalsParams
    ) -> Mapping[int, TradingViewInterval]: ...


class IntervalsService:
    """Reads stored intervals of a market and fills the missing ones with zeros."""

    def __init__(
        self,
        intervals_repo: IntervalStore,
        logger: logging.Logger,
        markets_repo: MarketLookup,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if intervals_repo is None or logger is None or markets_repo is None:
            raise InvalidDependenciesError("NewIntervalsService")
        self.intervals_repo = intervals_repo
        self.logger = logger
        self.markets_repo = markets_repo
        self._clock = clock

    def query_params(self, market: Market, length: int, limit: int) -> IntervalsParams:
        """Build the filter that covers only the intervals needed."""
        created_at = _as_utc(market.created_at)
        if limit > 0:
            start_at = _as_utc(self._clock()) - limit * timedelta(minutes=length)
        else:
            start_at = created_at
        if start_at < created_at:
            start_at = created_at
        return IntervalsParams(
            market_id=market.market_id, length=length, limit=limit, start_at=start_at
        )

    def _find_market(self, market_id: str) -> Market:
        market = self.markets_repo.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(f"market not found: {market_id}")
        return market

    def _collect(
        self,
        entries: Mapping[int, E],
        params: IntervalsParams,
        length: int,
        limit: int,
        make_empty: Callable[[datetime, datetime], E],
    ) -> list[E]:
        if len(entries) == limit:
            return sorted(entries.values(), key=lambda e: _unix(e.start_at))

        step = timedelta(minutes=length)
        lower = _as_utc(params.start_at)
        start, end = get_timestamp_interval(_unix(self._clock()), length)
        result: list[E] = []
        while not start < lower:
            entry = entries.get(_unix(start))
            result.append(entry if entry is not None else make_empty(start, end))
            start, end = get_timestamp_interval(_unix(start - step), length)
        result.sort(key=lambda e: _unix(e.start_at))
        return result

    def get_intervals(
        self, market_id: str, length: int, limit: int
    ) -> list[MarketHistoryInterval]:
        market = self._find_market(market_id)
        params = self.query_params(market, length, limit)
        try:
            entries = self.intervals_repo.get_intervals_by(params)
        except Exception as err:
            self.logger.error("failed to get intervals from repo: %s", err)
            raise RuntimeError("failed to get intervals") from err

        def empty(start: datetime, end: datetime) -> MarketHistoryInterval:
            return MarketHistoryInterval(
                market_id=market_id,
                length=length,
                start_at=start,
                end_at=end,
                lowest_price="0",
                open_price="0",
                average_price="0",
                highest_price="0",
                close_price="0",
                base_volume="0",
                quote_volume="0",
            )

        return self._collect(entries, params, length, limit, empty)

    def get_trading_view_intervals(
        self, market_id: str, length: int, limit: int
    ) -> list[TradingViewInterval]:
        market = self._find_market(market_id)
        params = self.query_params(market, length, limit)
        try:
            entries = self.intervals_repo.get_trading_view_intervals_by(params)
        except Exception as err:
            self.logger.error("failed to get intervals from repo: %s", err)
            raise RuntimeError("failed to get intervals") from err

        def empty(start: datetime, _end: datetime) -> TradingViewInterval:
            return TradingViewInterval(start_at=start)

        return self._collect(entries, params, length, limit, empty)