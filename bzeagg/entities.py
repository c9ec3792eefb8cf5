"""Stored entities and simple data objects."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

ORDER_TYPE_BUY = "buy"
ORDER_TYPE_SELL = "sell"

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIME_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(\.\d+)?(Z|[+-]\d{2}:\d{2})$"
)


def _as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _unix(dt: datetime) -> int:
    return math.floor((_as_utc(dt) - datetime(1970, 1, 1, tzinfo=timezone.utc)).total_seconds())


def _format_time(dt: datetime) -> str:
    dt = _as_utc(dt)
    text = (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )
    if dt.microsecond:
        text += "." + f"{dt.microsecond:06d}".rstrip("0")
    offset = dt.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_time(value: str) -> datetime:
    match = _TIME_RE.match(value)
    if match is None:
        raise ValueError(f"invalid time: {value!r}")
    year, month, day, hour, minute, second, frac, zone = match.groups()
    micro = int((frac[1:] + "000000")[:6]) if frac else 0
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )


@dataclass
class Market:
    id: int = 0
    market_id: str = ""
    base: str = ""
    quote: str = ""
    created_by: str = ""
    created_at: datetime = ZERO_TIME


@dataclass
class MarketWithLastPrice(Market):
    last_price: str | None = None


@dataclass
class MarketHistory:
    id: int = 0
    market_id: str = ""
    order_type: str = ""
    amount: str = ""
    price: str = ""
    executed_at: datetime = ZERO_TIME
    maker: str = ""
    taker: str = ""
    quote_amount: str = ""
    created_at: datetime = ZERO_TIME
    added_to_interval: bool = False


@dataclass
class MarketHistoryInterval:
    id: int = 0
    market_id: str = ""
    length: int = 0
    start_at: datetime = ZERO_TIME
    end_at: datetime = ZERO_TIME
    lowest_price: str = ""
    open_price: str = ""
    average_price: str = ""
    highest_price: str = ""
    close_price: str = ""
    base_volume: str = ""
    quote_volume: str = ""
    created_at: datetime = ZERO_TIME
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "market_id": self.market_id,
            "minutes": self.length,
            "start_at": _format_time(self.start_at),
            "end_at": _format_time(self.end_at),
            "lowest_price": self.lowest_price,
            "open_price": self.open_price,
            "average_price": self.average_price,
            "highest_price": self.highest_price,
            "close_price": self.close_price,
            "base_volume": self.base_volume,
            "quote_volume": self.quote_volume,
        }


@dataclass
class TradingViewInterval:
    start_at: datetime = ZERO_TIME
    lowest_price: float = 0.0
    open_price: float = 0.0
    highest_price: float = 0.0
    close_price: float = 0.0
    base_volume: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": _unix(self.start_at),
            "low": self.lowest_price,
            "open": self.open_price,
            "high": self.highest_price,
            "close": self.close_price,
            "value": self.base_volume,
        }


@dataclass
class MarketOrder:
    id: int = 0
    market_id: str = ""
    order_type: str = ""
    amount: str = ""
    price: str = ""
    price_dec: float = 0.0
    quote_amount: str = ""
    created_at: datetime = ZERO_TIME


@dataclass
class Coin:
    denom: str = ""
    amount: str = ""


@dataclass
class CoinPrice:
    denom: str = ""
    price: float = 0.0
    price_denom: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"denom": self.denom, "price": self.price, "price_denom": self.price_denom}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CoinPrice:
        return cls(
            denom=data.get("denom", ""),
            price=float(data.get("price", 0.0)),
            price_denom=data.get("price_denom", ""),
        )


@dataclass
class MarketHealth:
    is_healthy: bool = False
    last_trade: datetime = ZERO_TIME

    def to_dict(self) -> dict[str, Any]:
        return {"is_healthy": self.is_healthy, "last_trade": _format_time(self.last_trade)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MarketHealth:
        raw = data.get("last_trade")
        return cls(
            is_healthy=bool(data.get("is_healthy", False)),
            last_trade=_parse_time(raw) if raw else ZERO_TIME,
        )


@dataclass
class AggregatorHealth:
    is_healthy: bool = False
    last_sync: datetime = ZERO_TIME

    def to_dict(self) -> dict[str, Any]:
        return {"is_healthy": self.is_healthy, "last_sync": _format_time(self.last_sync)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AggregatorHealth:
        raw = data.get("last_sync")
        return cls(
            is_healthy=bool(data.get("is_healthy", False)),
            last_sync=_parse_time(raw) if raw else ZERO_TIME,
        )


@dataclass
class NodesHealth:
    is_healthy: bool = False
    errors: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"is_healthy": self.is_healthy, "errors": self.errors}


@dataclass
class HistoryOrder:
    market_id: str = ""
    executed_at: datetime = ZERO_TIME

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryOrder:
        """Build from chain JSON, where executed_at is a unix timestamp string."""
        raw = data.get("executed_at", "")
        if not isinstance(raw, str):
            raise ValueError(f"executed_at must be a string, got {raw!r}")
        timestamp = int(raw)
        return cls(
            market_id=data.get("market_id", ""),
            executed_at=datetime.fromtimestamp(timestamp, tz=timezone.utc),
        )


@dataclass
class Article:
    title: str = ""
    url: str = ""
    picture_url: str = ""
    description: str = ""
    publish_date: datetime = ZERO_TIME
    author_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "picture_url": self.picture_url,
            "description": self.description,
            "publish_date": _format_time(self.publish_date),
            "author_name": self.author_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Article:
        raw = data.get("publish_date")
        return cls(
            title=data.get("title", ""),
            url=data.get("url", ""),
            picture_url=data.get("picture_url", ""),
            description=data.get("description", ""),
            publish_date=_parse_time(raw) if raw else ZERO_TIME,
            author_name=data.get("author_name", ""),
        )