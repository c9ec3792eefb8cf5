"""Response bodies of the DEX endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .entities import ZERO_TIME


@dataclass
class HistoryTrade:
    """One executed trade in the default history format."""

    order_id: int = 0
    price: str = ""
    base_volume: str = ""
    quote_volume: str = ""
    executed_at: str = ""
    order_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "price": self.price,
            "base_volume": self.base_volume,
            "quote_volume": self.quote_volume,
            "executed_at": self.executed_at,
            "order_type": self.order_type,
        }


@dataclass
class CoingeckoHistoryTrade:
    """One executed trade in the CoinGecko history format."""

    order_id: int = 0
    price: str = ""
    base_volume: str = ""
    quote_volume: str = ""
    executed_at: str = ""
    order_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "trade_id": self.order_id,
            "price": self.price,
            "base_volume": self.base_volume,
            "target_volume": self.quote_volume,
            "trade_timestamp": self.executed_at,
            "type": self.order_type,
        }


@dataclass
class CoingeckoHistory:
    """Trades split into buys and sells; empty sides are left out."""

    buy: list[CoingeckoHistoryTrade] = field(default_factory=list)
    sell: list[CoingeckoHistoryTrade] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.buy:
            result["buy"] = [t.to_dict() for t in self.buy]
        if self.sell:
            result["sell"] = [t.to_dict() for t in self.sell]
        return result


@dataclass
class Orders:
    """Order book in the default format."""

    market_id: str = ""
    timestamp: str = ""
    bids: list[tuple[str, str]] = field(default_factory=list)
    asks: list[tuple[str, str]] = field(default_factory=list)

    def add_bid(self, price: str, volume: str) -> None:
        self.bids.append((price, volume))

    def add_ask(self, price: str, volume: str) -> None:
        self.asks.append((price, volume))

    def to_dict(self) -> dict[str, Any]:
        def side(levels: list[tuple[str, str]]) -> list[dict[str, str]] | None:
            if not levels:
                return None
            return [{"price": p, "volume": v} for p, v in levels]

        return {
            "market_id": self.market_id,
            "timestamp": self.timestamp,
            "bids": side(self.bids),
            "asks": side(self.asks),
        }


@dataclass
class CoingeckoOrders:
    """Order book in the CoinGecko format."""

    ticker_id: str = ""
    timestamp: str = ""
    bids: list[tuple[str, str]] = field(default_factory=list)
    asks: list[tuple[str, str]] = field(default_factory=list)

    def add_bid(self, price: str, volume: str) -> None:
        self.bids.append((price, volume))

    def add_ask(self, price: str, volume: str) -> None:
        self.asks.append((price, volume))

    def to_dict(self) -> dict[str, Any]:
        def side(levels: list[tuple[str, str]]) -> list[list[str]] | None:
            if not levels:
                return None
            return [[p, v] for p, v in levels]

        return {
            "ticker_id": self.ticker_id,
            "timestamp": self.timestamp,
            "bids": side(self.bids),
            "asks": side(self.asks),
        }


@dataclass
class TickerStats:
    """Market figures from which either ticker format is built."""

    base: str = ""
    quote: str = ""
    market_id: str = ""
    last_price: float = 0.0
    base_volume: float = 0.0
    quote_volume: float = 0.0
    bid: float = 0.0
    ask: float = 0.0
    high: float = 0.0
    low: float = 0.0
    open_price: float = 0.0
    change: float = 0.0


@dataclass
class Ticker:
    base: str = ""
    quote: str = ""
    market_id: str = ""
    last_price: float = 0.0
    base_volume: float = 0.0
    quote_volume: float = 0.0
    bid: float = 0.0
    ask: float = 0.0
    high: float = 0.0
    low: float = 0.0
    open_price: float = 0.0
    change: float = 0.0

    @classmethod
    def from_stats(cls, stats: TickerStats) -> Ticker:
        return cls(
            base=stats.base,
            quote=stats.quote,
            market_id=stats.market_id,
            last_price=stats.last_price,
            base_volume=stats.base_volume,
            quote_volume=stats.quote_volume,
            bid=stats.bid,
            ask=stats.ask,
            high=stats.high,
            low=stats.low,
            open_price=stats.open_price,
            change=stats.change,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "base": self.base,
            "quote": self.quote,
            "market_id": self.market_id,
            "last_price": self.last_price,
            "base_volume": self.base_volume,
            "quote_volume": self.quote_volume,
            "bid": self.bid,
            "ask": self.ask,
            "high": self.high,
            "low": self.low,
            "open_price": self.open_price,
            "change": self.change,
        }


@dataclass
class CoingeckoTicker:
    ticker_id: str = ""
    base: str = ""
    quote: str = ""
    market_id: str = ""
    last_price: float = 0.0
    base_volume: float = 0.0
    quote_volume: float = 0.0
    bid: float = 0.0
    ask: float = 0.0
    high: float = 0.0
    low: float = 0.0

    @classmethod
    def from_stats(cls, stats: TickerStats) -> CoingeckoTicker:
        return cls(
            ticker_id=f"{stats.base}_{stats.quote}",
            base=stats.base,
            quote=stats.quote,
            market_id=stats.market_id,
            last_price=stats.last_price,
            base_volume=stats.base_volume,
            quote_volume=stats.quote_volume,
            bid=stats.bid,
            ask=stats.ask,
            high=stats.high,
            low=stats.low,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticker_id": self.ticker_id,
            "base_currency": self.base,
            "target_currency": self.quote,
            "pool_id": self.market_id,
            "last_price": self.last_price,
            "base_volume": self.base_volume,
            "target_volume": self.quote_volume,
            "bid": self.bid,
            "ask": self.ask,
            "high": self.high,
            "low": self.low,
        }


@dataclass
class IntervalsParams:
    """Filter for stored intervals; a zero start_at means no lower bound."""

    market_id: str = ""
    length: int = 0
    limit: int = 0
    start_at: datetime = ZERO_TIME