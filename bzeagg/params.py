"""HTTP query parameters of the API endpoints."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .registry import DENOM_UBZE

FORMAT_COINGECKO = "coingecko"
FORMAT_TRADING_VIEW = "tv"

DEFAULT_HISTORY_LIMIT = 500
MAX_HISTORY_LIMIT = 1000

INTERVAL_MINUTES = (5, 15, 60, 240, 1440)
INTERVAL_DAY = 1440
DEFAULT_INTERVALS_LIMIT = 500
MAX_INTERVALS_LIMIT = 5000

DEFAULT_HEALTH_MINUTES = 10
MAX_HEALTH_MINUTES = 60 * 12

DEFAULT_SUPPLY_DENOM = DENOM_UBZE

_INT_RE = re.compile(r"^[+-]?\d+$")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

Query = Mapping[str, Any]


class ParamsError(ValueError):
    """Raised when query parameters cannot be bound."""


class ValidationError(ValueError):
    """Raised when bound parameters are not acceptable."""


@dataclass
class ErrResponse:
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message}


def unknown_error_response() -> ErrResponse:
    return ErrResponse("Unknown error! Please report this issue to the administrators at [email]")


def _text(query: Query, key: str) -> str:
    raw = query.get(key)
    if raw is None:
        return ""
    if isinstance(raw, (list, tuple)):
        return str(raw[0]) if raw else ""
    return str(raw)


def _int(query: Query, key: str) -> int:
    text = _text(query, key)
    if text == "":
        return 0
    if not _INT_RE.match(text):
        raise ParamsError(f"invalid integer for {key}: {text!r}")
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ParamsError(f"integer out of range for {key}: {text!r}")
    return number


def _allowed_format(value: str) -> str:
    return value if value == FORMAT_COINGECKO else ""


def _long_enough(value: str) -> bool:
    return len(value.encode()) > 1


def _resolve_market_id(market_id: str, ticker_id: str) -> str:
    return market_id if market_id else ticker_id.replace("_", "/")


def _require_market(market_id: str, ticker_id: str) -> None:
    if not (_long_enough(market_id) or _long_enough(ticker_id)):
        raise ValidationError("please provide market_id or ticker_id")


@dataclass
class HistoryParams:
    format: str = ""
    market_id: str = ""
    ticker_id: str = ""
    order_type: str = ""
    limit: int = 0
    start_time: int = 0
    end_time: int = 0
    address: str = ""

    @classmethod
    def from_query(cls, query: Query) -> HistoryParams:
        params = cls(
            format=_allowed_format(_text(query, "format")),
            market_id=_text(query, "market_id"),
            ticker_id=_text(query, "ticker_id"),
            order_type=_text(query, "type"),
            limit=_int(query, "limit"),
            start_time=_int(query, "start_time"),
            end_time=_int(query, "end_time"),
            address=_text(query, "address"),
        )
        if params.limit <= 0:
            params.limit = DEFAULT_HISTORY_LIMIT
        elif params.limit > MAX_HISTORY_LIMIT:
            params.limit = MAX_HISTORY_LIMIT
        return params

    def validate(self) -> None:
        if self.address:
            return
        _require_market(self.market_id, self.ticker_id)

    def is_coingecko_format(self) -> bool:
        return self.format == FORMAT_COINGECKO

    def resolved_market_id(self) -> str:
        return _resolve_market_id(self.market_id, self.ticker_id)


@dataclass
class DexIntervalParams:
    market_id: str = ""
    ticker_id: str = ""
    minutes: int = 0
    limit: int = 0
    format: str = ""

    @classmethod
    def from_query(cls, query: Query) -> DexIntervalParams:
        return cls(
            market_id=_text(query, "market_id"),
            ticker_id=_text(query, "ticker_id"),
            minutes=_int(query, "minutes"),
            limit=_int(query, "limit"),
            format=_text(query, "format"),
        )

    def validate(self) -> None:
        """Check the parameters; a missing limit is set to its default."""
        if self.minutes not in INTERVAL_MINUTES:
            expected = ", ".join(str(m) for m in INTERVAL_MINUTES)
            raise ValidationError(f"invalid minutes. expected: {expected}")
        if self.limit <= 0:
            self.limit = DEFAULT_INTERVALS_LIMIT
        elif self.minutes != INTERVAL_DAY and self.limit > MAX_INTERVALS_LIMIT:
            raise ValidationError(f"limit can not be greater than {MAX_INTERVALS_LIMIT}")
        _require_market(self.market_id, self.ticker_id)

    def is_trading_view_format(self) -> bool:
        return self.format == FORMAT_TRADING_VIEW

    def resolved_market_id(self) -> str:
        return _resolve_market_id(self.market_id, self.ticker_id)


@dataclass
class OrdersParams:
    format: str = ""
    market_id: str = ""
    ticker_id: str = ""
    depth: int = 0

    @classmethod
    def from_query(cls, query: Query) -> OrdersParams:
        return cls(
            format=_allowed_format(_text(query, "format")),
            market_id=_text(query, "market_id"),
            ticker_id=_text(query, "ticker_id"),
            depth=_int(query, "depth"),
        )

    def validate(self) -> None:
        if self.depth < 0:
            raise ValidationError("depth must be a positive number")
        _require_market(self.market_id, self.ticker_id)

    def is_coingecko_format(self) -> bool:
        return self.format == FORMAT_COINGECKO

    def resolved_market_id(self) -> str:
        return _resolve_market_id(self.market_id, self.ticker_id)


@dataclass
class TickersParams:
    format: str = ""

    @classmethod
    def from_query(cls, query: Query) -> TickersParams:
        return cls(format=_allowed_format(_text(query, "format")))

    def is_coingecko_format(self) -> bool:
        return self.format == FORMAT_COINGECKO


@dataclass
class MarketHealthParams:
    market_id: str = ""
    minutes: int = 0

    @classmethod
    def from_query(cls, query: Query) -> MarketHealthParams:
        params = cls(market_id=_text(query, "market_id"), minutes=_int(query, "minutes"))
        if params.minutes <= 0:
            params.minutes = DEFAULT_HEALTH_MINUTES
        return params

    def validate(self) -> None:
        if not self.market_id:
            raise ValidationError("market_id is required")
        if self.minutes <= 0:
            raise ValidationError("invalid minutes")


@dataclass
class AggregatorHealthParams:
    minutes: int = 0

    @classmethod
    def from_query(cls, query: Query) -> AggregatorHealthParams:
        minutes = _int(query, "minutes")
        if minutes <= 0:
            minutes = DEFAULT_HEALTH_MINUTES
        elif minutes > MAX_HEALTH_MINUTES:
            minutes = MAX_HEALTH_MINUTES
        return cls(minutes=minutes)


@dataclass
class SupplyParams:
    denom: str = ""

    @classmethod
    def from_query(cls, query: Query) -> SupplyParams:
        return cls(denom=_text(query, "denom") or DEFAULT_SUPPLY_DENOM)