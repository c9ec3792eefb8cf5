"""DEX services: trade history, order book and tickers."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Protocol

from .amounts import calculate_price_change, dec_to_float32_rounded
from .entities import (
    ORDER_TYPE_BUY,
    ORDER_TYPE_SELL,
    Market,
    MarketHistory,
    MarketHistoryInterval,
    MarketOrder,
    MarketWithLastPrice,
)
from .errors import InvalidDependenciesError
from .params import HistoryParams
from .responses import (
    CoingeckoHistory,
    CoingeckoHistoryTrade,
    CoingeckoOrders,
    CoingeckoTicker,
    HistoryTrade,
    Orders,
    Ticker,
    TickerStats,
)

INTERVAL_LENGTH = 5
TICKERS_HOURS = 24

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_DEC_RE = re.compile(r"^-?(\d+\.?\d*|\.\d+)$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _unix_millis(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // timedelta(milliseconds=1)


def _unix(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - _EPOCH) // timedelta(seconds=1)


def _dec(text: str) -> Decimal:
    if not _DEC_RE.match(text):
        raise ValueError(f"invalid decimal string: {text!r}")
    return Decimal(text)


class MarketNotFoundError(LookupError):
    """Raised when a requested market is not stored."""


class HistoryRepository(Protocol):
    def get_history_by(self, params: HistoryParams) -> list[MarketHistory]: ...


class OrdersRepository(Protocol):
    def get_market_orders_with_depth(
        self, market_id: str, order_type: str, limit: int
    ) -> list[MarketOrder]: ...


class MarketLookup(Protocol):
    def get_market(self, market_id: str) -> Market | None: ...


class MarketsRepository(Protocol):
    def get_markets_with_last_executed(self, hours: int) -> list[MarketWithLastPrice]: ...


class IntervalsRepository(Protocol):
    def get_intervals_by_executed_at(
        self, market_id: str, executed_at: datetime, length: int
    ) -> list[MarketHistoryInterval]: ...


class TickerOrdersRepository(Protocol):
    def get_highest_buy(self, market_id: str) -> MarketOrder | None: ...

    def get_lowest_sell(self, market_id: str) -> MarketOrder | None: ...


class HistoryService:
    """Serves executed trades from storage."""

    def __init__(self, logger: logging.Logger, history_repo: HistoryRepository) -> None:
        if logger is None or history_repo is None:
            raise InvalidDependenciesError("NewHistoryService")
        self.logger = logger
        self.history_repo = history_repo

    def get_history(self, params: HistoryParams) -> list[HistoryTrade]:
        return [
            HistoryTrade(
                order_id=order.id,
                price=order.price,
                base_volume=order.amount,
                quote_volume=order.quote_amount,
                executed_at=str(_unix_millis(order.executed_at)),
                order_type=order.order_type,
            )
            for order in self.history_repo.get_history_by(params)
        ]

    def get_coingecko_history(self, params: HistoryParams) -> CoingeckoHistory:
        result = CoingeckoHistory()
        for order in self.history_repo.get_history_by(params):
            trade = CoingeckoHistoryTrade(
                order_id=order.id,
                price=order.price,
                base_volume=order.amount,
                quote_volume=order.quote_amount,
                executed_at=str(_unix_millis(order.executed_at)),
                order_type=order.order_type,
            )
            if order.order_type == ORDER_TYPE_BUY:
                result.buy.append(trade)
            else:
                result.sell.append(trade)
        return result


class OrdersService:
    """Serves the order book of a market."""

    def __init__(
        self,
        logger: logging.Logger,
        orders_repo: OrdersRepository,
        markets_repo: MarketLookup,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if logger is None or orders_repo is None or markets_repo is None:
            raise InvalidDependenciesError("NewOrdersService")
        self.logger = logger
        self.orders_repo = orders_repo
        self.markets_repo = markets_repo
        self._clock = clock

    def _find_market(self, market_id: str) -> Market:
        market = self.markets_repo.get_market(market_id)
        if market is None:
            raise MarketNotFoundError("market not found")
        return market

    def _book(self, market_id: str, depth: int) -> tuple[list[MarketOrder], list[MarketOrder]]:
        limit = depth // 2 if depth >= 0 else -((-depth) // 2)
        buys = self.orders_repo.get_market_orders_with_depth(market_id, ORDER_TYPE_BUY, limit)
        sells = self.orders_repo.get_market_orders_with_depth(market_id, ORDER_TYPE_SELL, limit)
        return buys, sells

    @staticmethod
    def _fill(result: Orders | CoingeckoOrders, buys, sells) -> None:
        for buy in buys:
            result.add_bid(buy.price, buy.amount)
        for sell in sells:
            result.add_ask(sell.price, sell.amount)

    def get_market_orders(self, market_id: str, depth: int) -> Orders:
        self._find_market(market_id)
        buys, sells = self._book(market_id, depth)
        result = Orders(market_id=market_id, timestamp=str(_unix(self._clock())))
        self._fill(result, buys, sells)
        return result

    def get_coingecko_market_orders(self, market_id: str, depth: int) -> CoingeckoOrders:
        market = self._find_market(market_id)
        buys, sells = self._book(market_id, depth)
        result = CoingeckoOrders(
            ticker_id=f"{market.base}_{market.quote}",
            timestamp=str(_unix(self._clock())),
        )
        self._fill(result, buys, sells)
        return result


class TickersService:
    """Builds 24h tickers for every stored market."""

    def __init__(
        self,
        logger: logging.Logger,
        markets_repo: MarketsRepository,
        intervals_repo: IntervalsRepository,
        orders_repo: TickerOrdersRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if logger is None or markets_repo is None or intervals_repo is None or orders_repo is None:
            raise InvalidDependenciesError("NewTickersService")
        self.logger = logger
        self.markets_repo = markets_repo
        self.intervals_repo = intervals_repo
        self.orders_repo = orders_repo
        self._clock = clock

    def build_stats(self, market: MarketWithLastPrice) -> TickerStats:
        stats = TickerStats(base=market.base, quote=market.quote, market_id=market.market_id)

        buy = self.orders_repo.get_highest_buy(market.market_id)
        if buy is not None:
            stats.bid = float(_dec(buy.price))

        sell = self.orders_repo.get_lowest_sell(market.market_id)
        if sell is not None:
            stats.ask = float(_dec(sell.price))

        since = self._clock() - timedelta(hours=TICKERS_HOURS)
        intervals = self.intervals_repo.get_intervals_by_executed_at(
            market.market_id, since, INTERVAL_LENGTH
        )

        open_price = Decimal(0)
        if intervals:
            open_price = _dec(intervals[0].open_price)
            stats.open_price = float(open_price)

        high = low = base_volume = quote_volume = Decimal(0)
        for interval in intervals:
            base_volume += _dec(interval.base_volume)
            quote_volume += _dec(interval.quote_volume)
            interval_high = _dec(interval.highest_price)
            interval_low = _dec(interval.lowest_price)
            if interval_high > high:
                high = interval_high
            if interval_low < low or low.is_zero():
                low = interval_low

        stats.quote_volume = float(quote_volume)
        stats.base_volume = float(base_volume)
        stats.high = float(high)
        stats.low = float(low)
        stats.last_price = 0.0

        change = Decimal(0)
        if market.last_price is not None:
            last_price = _dec(market.last_price)
            stats.last_price = float(last_price)
            change = calculate_price_change(open_price, last_price)

        stats.change = dec_to_float32_rounded(change)
        return stats

    def _all_stats(self) -> list[TickerStats]:
        markets = self.markets_repo.get_markets_with_last_executed(TICKERS_HOURS)
        return [self.build_stats(market) for market in markets]

    def get_tickers(self) -> list[Ticker]:
        return [Ticker.from_stats(stats) for stats in self._all_stats()]

    def get_coingecko_tickers(self) -> list[CoingeckoTicker]:
        return [CoingeckoTicker.from_stats(stats) for stats in self._all_stats()]