import logging
from datetime import datetime, timedelta, timezone

import pytest

from bzeagg.dex import MarketNotFoundError
from bzeagg.dex_intervals import IntervalsService
from bzeagg.entities import Market, MarketHistoryInterval, TradingViewInterval
from bzeagg.errors import InvalidDependenciesError

NOW = datetime(2024, 1, 1, 12, 7, 30, tzinfo=timezone.utc)
CREATED = datetime(2023, 1, 1, tzinfo=timezone.utc)
MARKET_ID = "ubze/uvdl"


def ts(dt):
    return int(dt.timestamp())


class FakeMarkets:
    def __init__(self, markets):
        self.markets = markets

    def get_market(self, market_id):
        return self.markets.get(market_id)


class FakeIntervals:
    def __init__(self, entries=None, tv_entries=None, error=None):
        self.entries = entries or {}
        self.tv_entries = tv_entries or {}
        self.error = error
        self.calls = []

    def get_intervals_by(self, params):
        self.calls.append(params)
        if self.error:
            raise self.error
        return dict(self.entries)

    def get_trading_view_intervals_by(self, params):
        self.calls.append(params)
        if self.error:
            raise self.error
        return dict(self.tv_entries)


def market(created_at=CREATED):
    return Market(market_id=MARKET_ID, base="ubze", quote="uvdl", created_at=created_at)


def make_service(repo, markets=None):
    if markets is None:
        markets = {MARKET_ID: market()}
    return IntervalsService(repo, logging.getLogger("test"), FakeMarkets(markets), clock=lambda: NOW)


def test_missing_dependencies_rejected():
    with pytest.raises(InvalidDependenciesError):
        IntervalsService(None, logging.getLogger("test"), FakeMarkets({}))


def test_query_params_uses_limit_window():
    svc = make_service(FakeIntervals())
    params = svc.query_params(market(), 5, 3)
    assert params.start_at == NOW - timedelta(minutes=15)
    assert (params.market_id, params.length, params.limit) == (MARKET_ID, 5, 3)


def test_query_params_not_before_market_creation():
    svc = make_service(FakeIntervals())
    created = NOW - timedelta(minutes=1)
    assert svc.query_params(market(created), 5, 3).start_at == created
    assert svc.query_params(market(), 5, 0).start_at == CREATED


def test_missing_intervals_filled_with_zeros():
    svc = make_service(FakeIntervals())
    result = svc.get_intervals(MARKET_ID, 5, 3)
    assert len(result) == 3
    starts = [r.start_at for r in result]
    assert starts == sorted(starts)
    assert all(ts(s) % 300 == 0 for s in starts)
    assert all(b - a == timedelta(minutes=5) for a, b in zip(starts, starts[1:]))
    assert starts[-1] <= NOW < result[-1].end_at
    assert starts[-1] == datetime(2024, 1, 1, 12, 5, tzinfo=timezone.utc)
    assert all(r.open_price == "0" and r.base_volume == "0" for r in result)
    assert all(r.market_id == MARKET_ID and r.length == 5 for r in result)


def test_existing_interval_kept_among_fillers():
    start = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    existing = MarketHistoryInterval(
        market_id=MARKET_ID, length=5, start_at=start, end_at=start + timedelta(minutes=5),
        open_price="1.5",
    )
    svc = make_service(FakeIntervals(entries={ts(start): existing}))
    result = svc.get_intervals(MARKET_ID, 5, 3)
    assert len(result) == 3
    assert existing in result
    assert sum(1 for r in result if r.open_price == "0") == 2


def test_complete_result_returned_sorted():
    first = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    second = first + timedelta(minutes=5)
    entries = {
        ts(second): MarketHistoryInterval(market_id=MARKET_ID, start_at=second),
        ts(first): MarketHistoryInterval(market_id=MARKET_ID, start_at=first),
    }
    repo = FakeIntervals(entries=entries)
    result = make_service(repo).get_intervals(MARKET_ID, 5, 2)
    assert [r.start_at for r in result] == [first, second]
    assert repo.calls[0].limit == 2


def test_trading_view_intervals_filled():
    start = datetime(2024, 1, 1, 12, 5, tzinfo=timezone.utc)
    existing = TradingViewInterval(start_at=start, close_price=2.0)
    svc = make_service(FakeIntervals(tv_entries={ts(start): existing}))
    result = svc.get_trading_view_intervals(MARKET_ID, 5, 3)
    assert len(result) == 3
    assert result[-1] is existing
    assert all(r.close_price == 0.0 for r in result[:-1])


def test_unknown_market_raises():
    svc = make_service(FakeIntervals(), markets={})
    with pytest.raises(MarketNotFoundError):
        svc.get_intervals("x/y", 5, 3)
    with pytest.raises(MarketNotFoundError):
        svc.get_trading_view_intervals("x/y", 5, 3)


def test_repository_failure_raises():
    svc = make_service(FakeIntervals(error=RuntimeError("db down")))
    with pytest.raises(RuntimeError, match="failed to get intervals"):
        svc.get_intervals(MARKET_ID, 5, 3)