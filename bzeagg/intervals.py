"""Price candles (intervals) aggregated from executed trades."""

from __future__ import annotations

import math
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_EVEN, Context, Decimal
from enum import IntEnum

from .amounts import format_dec, trim_amount_trailing_zeros
from .entities import MarketHistory, MarketHistoryInterval

_QUANTUM = Decimal(1).scaleb(-18)
_CTX = Context(prec=120)
_DEC_RE = re.compile(r"^-?(\d+\.?\d*|\.\d+)$")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Length(IntEnum):
    """Supported interval lengths, in minutes."""

    FIVE_MINUTES = 5
    QUARTER_HOUR = 15
    ONE_HOUR = 60
    FOUR_HOURS = 240
    ONE_DAY = 1440


def _chop(value: Decimal) -> Decimal:
    result = value.quantize(_QUANTUM, rounding=ROUND_HALF_EVEN, context=_CTX)
    return abs(result) if result.is_zero() else result


def _dec(text: str) -> Decimal:
    if not _DEC_RE.match(text):
        raise ValueError(f"invalid decimal string: {text!r}")
    return _chop(Decimal(text))


_ZERO = _chop(Decimal(0))


def _unix(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return math.floor((dt - _EPOCH).total_seconds())


def _from_unix(seconds: int) -> datetime:
    return _EPOCH + timedelta(seconds=seconds)


def get_biggest_duration() -> Length:
    return Length.ONE_DAY


def get_timestamp_interval(timestamp: int, duration: int) -> tuple[datetime, datetime]:
    """Return the (start, end) of the interval of ``duration`` minutes holding ``timestamp``."""
    seconds = int(duration) * 60
    if seconds <= 0:
        raise ValueError("interval duration must be positive")
    quotient = abs(timestamp) // seconds
    if timestamp < 0:
        quotient = -quotient
    rounded = quotient * seconds
    return _from_unix(rounded), _from_unix(rounded + seconds)


@dataclass(eq=False)
class Interval:
    """One candle: open, close, extremes, average price and volumes."""

    duration: int
    start: datetime
    end: datetime
    lowest_price: Decimal = _ZERO
    open_price: Decimal = _ZERO
    average_price: Decimal = _ZERO
    highest_price: Decimal = _ZERO
    close_price: Decimal = _ZERO
    base_volume: Decimal = _ZERO
    quote_volume: Decimal = _ZERO
    _first_at: datetime | None = field(default=None, init=False, repr=False)
    _last_at: datetime | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def add_order(self, order: MarketHistory) -> None:
        with self._lock:
            price = _dec(order.price)
            executed = order.executed_at

            if self._first_at is None or self._first_at > executed:
                self._first_at = executed
                self.open_price = price

            if self._last_at is None or self._last_at < executed:
                self._last_at = executed
                self.close_price = price

            if self.lowest_price.is_zero() or price < self.lowest_price:
                self.lowest_price = price
            if self.highest_price.is_zero() or price > self.highest_price:
                self.highest_price = price

            base = _dec(order.amount)
            quote = _dec(order.quote_amount)
            if self.average_price.is_zero():
                self.average_price = price
                self.base_volume = base
                self.quote_volume = quote
                return

            new_base = _chop(base + self.base_volume)
            new_quote = _chop(quote + self.quote_volume)
            if self.highest_price == self.lowest_price:
                self.average_price = price
            else:
                self.average_price = _chop(_CTX.divide(new_quote, new_base))
            self.base_volume = new_base
            self.quote_volume = new_quote


class DurationGroup:
    """All intervals of one length, keyed by their start."""

    def __init__(self, duration: int) -> None:
        self.duration = duration
        self._by_start: dict[datetime, Interval] = {}
        self._lock = threading.Lock()

    def add_order(self, order: MarketHistory) -> None:
        self._interval_for(order).add_order(order)

    def _interval_for(self, order: MarketHistory) -> Interval:
        with self._lock:
            start, end = get_timestamp_interval(_unix(order.executed_at), self.duration)
            interval = self._by_start.get(start)
            if interval is None:
                interval = Interval(self.duration, start, end)
                self._by_start[start] = interval
            return interval

    def intervals(self) -> list[Interval]:
        return list(self._by_start.values())


class IntervalsMap:
    """Groups of intervals for every supported length of one market."""

    def __init__(self, market_id: str) -> None:
        self.market_id = market_id
        self.collection: dict[Length, DurationGroup] = {
            length: DurationGroup(length) for length in Length
        }

    def add_order(self, order: MarketHistory) -> None:
        for group in self.collection.values():
            group.add_order(order)

    def intervals(self) -> list[Interval]:
        return [i for group in self.collection.values() for i in group.intervals()]

    def to_entities(self) -> list[MarketHistoryInterval]:
        def text(value: Decimal) -> str:
            return trim_amount_trailing_zeros(format_dec(value))

        return [
            MarketHistoryInterval(
                market_id=self.market_id,
                length=int(i.duration),
                start_at=i.start,
                end_at=i.end,
                lowest_price=text(i.lowest_price),
                highest_price=text(i.highest_price),
                open_price=text(i.open_price),
                close_price=text(i.close_price),
                average_price=text(i.average_price),
                base_volume=text(i.base_volume),
                quote_volume=text(i.quote_volume),
            )
            for i in self.intervals()
        ]