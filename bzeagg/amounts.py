"""Decimal amount, price and time helpers."""

from __future__ import annotations

import math
import re
import struct
from datetime import datetime, timedelta, timezone
from decimal import ROUND_DOWN, ROUND_HALF_EVEN, Context, Decimal
from typing import Sequence, TypeVar

from .entities import ZERO_TIME
from .registry import Asset

T = TypeVar("T")

_PRECISION = 18
_QUANTUM = Decimal(1).scaleb(-_PRECISION)
_CTX = Context(prec=120)
_DEC_RE = re.compile(r"^-?(\d+\.?\d*|\.\d+)$")
_DEFAULT_MAX_DECIMALS = 6


def _chop(value: Decimal) -> Decimal:
    result = value.quantize(_QUANTUM, rounding=ROUND_HALF_EVEN, context=_CTX)
    return abs(result) if result.is_zero() else result


def _parse_dec(value: str) -> Decimal:
    if not _DEC_RE.match(value):
        raise ValueError(f"invalid decimal string: {value!r}")
    if "." in value and len(value.split(".", 1)[1]) > _PRECISION:
        raise ValueError(f"too many decimal places: {value!r}")
    return _chop(Decimal(value))


def _mul(a: Decimal, b: Decimal) -> Decimal:
    return _chop(_CTX.multiply(a, b))


def _quo(a: Decimal, b: Decimal) -> Decimal:
    return _chop(_CTX.divide(a, b))


def format_dec(value: Decimal) -> str:
    """Render a decimal with exactly 18 fractional digits."""
    return f"{_chop(Decimal(value)):f}"


def trim_amount_trailing_zeros(amount: str) -> str:
    """Drop trailing fractional zeros and a dangling decimal point."""
    if "." not in amount:
        return amount
    result = amount.rstrip("0")
    return result[:-1] if result.endswith(".") else result


def _display_exponent(asset: Asset, role: str) -> int:
    unit = asset.display_denom_unit()
    if unit is None:
        raise ValueError(f"no display denom for {role}")
    return unit.exponent


def uprice_to_price(base: Asset, quote: Asset, price: str) -> tuple[str, float]:
    """Convert a price in micro units into display units: (text, float)."""
    base_exp = _display_exponent(base, "base asset")
    quote_exp = _display_exponent(quote, "quote asset")
    price_dec = _parse_dec(price)
    if base_exp == quote_exp:
        return trim_amount_trailing_zeros(price), float(price_dec)
    power = 10.0 ** (base_exp - quote_exp)
    multiplier = _parse_dec(f"{power:.2f}")
    price_dec = _mul(price_dec, multiplier)
    return trim_amount_trailing_zeros(format_dec(price_dec)), float(price_dec)


def uamount_to_amount(asset: Asset, amount: str) -> str:
    """Convert an integer amount in micro units into display units."""
    exponent = _display_exponent(asset, "asset")
    try:
        integer = int(amount, 10)
    except ValueError:
        raise ValueError(f"invalid integer amount: {amount!r}") from None
    return trim_amount_trailing_zeros(format_dec(Decimal(integer).scaleb(-exponent)))


def dec_to_float32_rounded(value: Decimal) -> float:
    """Round to two decimals (half away from zero) at single precision."""
    scaled = float(value) * 100
    rounded = math.copysign(math.floor(abs(scaled) + 0.5), scaled) / 100
    return struct.unpack("f", struct.pack("f", rounded))[0]


def get_market_id(base: str, quote: str) -> str:
    return f"{base}/{quote}"


def get_quote_amount(base_amount: str, price: str, quote_asset: Asset) -> str:
    """Multiply amount by price, truncated to the quote asset's decimals."""
    unit = quote_asset.display_denom_unit()
    max_decimals = unit.exponent if unit is not None else _DEFAULT_MAX_DECIMALS
    scale = Decimal(10**max_decimals)
    total = _mul(_mul(_parse_dec(base_amount), _parse_dec(price)), scale)
    total = total.to_integral_value(rounding=ROUND_DOWN)
    return trim_amount_trailing_zeros(format_dec(_quo(total, scale)))


def milliseconds_to_time(milliseconds: int) -> datetime:
    """Convert Unix milliseconds to a UTC datetime; non-positive gives the zero time."""
    if milliseconds <= 0:
        return ZERO_TIME
    seconds, millis = divmod(milliseconds, 1000)
    return datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(milliseconds=millis)


def split_batches(data: Sequence[T], batch_size: int) -> list[list[T]]:
    """Split a sequence into consecutive batches of at most batch_size items."""
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    return [list(data[start:start + batch_size]) for start in range(0, len(data), batch_size)]


def calculate_price_change(opening_price: Decimal, last_price: Decimal) -> Decimal:
    """Percentage change from the opening price to the last price."""
    opening = Decimal(opening_price)
    if opening <= 0:
        return _chop(Decimal(0))
    change = _quo(_chop(Decimal(last_price) - opening), opening)
    return _mul(change, Decimal(100))