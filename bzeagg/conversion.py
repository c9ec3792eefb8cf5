"""Conversion of chain data into stored entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from .amounts import get_market_id, get_quote_amount, uamount_to_amount, uprice_to_price
from .entities import Market, MarketHistory, MarketOrder
from .registry import Asset


@dataclass
class ChainMarket:
    """A market as the chain reports it."""

    base: str = ""
    quote: str = ""
    creator: str = ""


@dataclass
class ChainHistoryOrder:
    """An executed order as the chain reports it; amounts in micro units."""

    market_id: str = ""
    order_type: str = ""
    amount: str = ""
    price: str = ""
    executed_at: int = 0
    maker: str = ""
    taker: str = ""


@dataclass
class AggregatedOrder:
    """An aggregated order book level as the chain reports it."""

    market_id: str = ""
    order_type: str = ""
    amount: str = ""
    price: str = ""


class AssetProvider(Protocol):
    def get_asset_details(self, denom: str) -> Asset | None: ...


def new_market_entity(source: ChainMarket) -> Market:
    return Market(
        market_id=get_market_id(source.base, source.quote),
        base=source.base,
        quote=source.quote,
        created_by=source.creator,
        created_at=datetime.now(timezone.utc),
    )


def new_market_order_entity(source: AggregatedOrder) -> MarketOrder:
    return MarketOrder(
        market_id=source.market_id,
        order_type=source.order_type,
        price=source.price,
    )


def new_market_history_entity(source: ChainHistoryOrder) -> MarketHistory:
    return MarketHistory(
        market_id=source.market_id,
        order_type=source.order_type,
        price=source.price,
        executed_at=datetime.fromtimestamp(source.executed_at, tz=timezone.utc),
        maker=source.maker,
        taker=source.taker,
    )


class TypesConverter:
    """Converts a market's chain orders into display-unit entities."""

    def __init__(self, provider: AssetProvider, market: ChainMarket) -> None:
        base = provider.get_asset_details(market.base)
        if base is None:
            raise LookupError("base asset not found")
        quote = provider.get_asset_details(market.quote)
        if quote is None:
            raise LookupError("quote asset not found")
        self.base = base
        self.quote = quote

    def history_order_to_entity(self, source: ChainHistoryOrder) -> MarketHistory:
        entity = new_market_history_entity(source)
        entity.price, _ = uprice_to_price(self.base, self.quote, source.price)
        entity.amount = uamount_to_amount(self.base, source.amount)
        entity.quote_amount = get_quote_amount(entity.amount, entity.price, self.quote)
        return entity

    def aggregated_order_to_entity(self, source: AggregatedOrder) -> MarketOrder:
        entity = new_market_order_entity(source)
        entity.price, entity.price_dec = uprice_to_price(self.base, self.quote, entity.price)
        entity.amount = uamount_to_amount(self.base, source.amount)
        entity.quote_amount = get_quote_amount(entity.amount, entity.price, self.quote)
        return entity