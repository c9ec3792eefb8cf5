import logging
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from bzeagg.cache import InMemoryCache
from bzeagg.entities import HistoryOrder, MarketHistory
from bzeagg.errors import InvalidDependenciesError
from bzeagg.health import HealthService

LOGGER = logging.getLogger("test-health")
NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class ChainHistory:
    def __init__(self, orders=None, error=None):
        self.orders = orders or []
        self.error = error
        self.calls = []

    def get_market_history(self, market_id, limit):
        self.calls.append((market_id, limit))
        if self.error:
            raise self.error
        return self.orders


class InternalHistory:
    def __init__(self, orders=None, error=None):
        self.orders = orders or []
        self.error = error
        self.params = []

    def get_history_by(self, params):
        self.params.append(params)
        if self.error:
            raise self.error
        return self.orders


class Node:
    def __init__(self, height=None, error=None):
        self.height = height
        self.error = error

    def get_status(self):
        if self.error:
            raise self.error
        return SimpleNamespace(latest_block_height=self.height)


def make_service(chain=None, internal=None, nodes=None):
    return HealthService(
        LOGGER,
        InMemoryCache(),
        chain or ChainHistory(),
        internal or InternalHistory(),
        nodes,
        clock=lambda: NOW,
    )


def trade(minutes_ago):
    return HistoryOrder(market_id="uvdl/ubze", executed_at=NOW - timedelta(minutes=minutes_ago))


def test_market_recent_trade_is_healthy():
    recent = trade(5)
    chain = ChainHistory([recent])
    health = make_service(chain=chain).get_market_health("uvdl/ubze", 10)
    assert health.is_healthy is True
    assert health.last_trade == recent.executed_at
    assert chain.calls == [("uvdl/ubze", 1)]


def test_market_old_trade_is_unhealthy():
    old = trade(20)
    health = make_service(chain=ChainHistory([old])).get_market_health("uvdl/ubze", 10)
    assert health.is_healthy is False
    assert health.last_trade == old.executed_at


def test_market_health_served_from_cache():
    recent = trade(5)
    chain = ChainHistory([recent])
    service = make_service(chain=chain)
    service.get_market_health("uvdl/ubze", 10)
    chain.error = RuntimeError("down")
    again = service.get_market_health("uvdl/ubze", 10)
    assert again.is_healthy is True
    assert again.last_trade == recent.executed_at
    assert len(chain.calls) == 1


def test_market_health_provider_error_is_unhealthy():
    health = make_service(chain=ChainHistory(error=RuntimeError("x"))).get_market_health("a/b", 10)
    assert health.is_healthy is False


def test_market_health_no_trades_is_unhealthy():
    assert make_service().get_market_health("a/b", 10).is_healthy is False


def test_aggregator_recent_sync_is_healthy_and_queries_window():
    created = NOW - timedelta(minutes=1)
    internal = InternalHistory(
        [MarketHistory(id=1, executed_at=NOW - timedelta(minutes=2), created_at=created)]
    )
    health = make_service(internal=internal).get_aggregator_health(10)
    assert health.is_healthy is True
    assert health.last_sync == created
    params = internal.params[0]
    assert params.limit == 1
    assert params.end_time - params.start_time == 10 * 60 * 1000


def test_aggregator_old_trade_is_unhealthy():
    internal = InternalHistory(
        [MarketHistory(id=1, executed_at=NOW - timedelta(minutes=30), created_at=NOW)]
    )
    assert make_service(internal=internal).get_aggregator_health(10).is_healthy is False


def test_aggregator_error_is_unhealthy():
    internal = InternalHistory(error=RuntimeError("db"))
    assert make_service(internal=internal).get_aggregator_health(10).is_healthy is False


def test_nodes_without_pool_unhealthy_and_no_errors():
    health = make_service().get_nodes_health()
    assert health.is_healthy is False
    assert health.errors == ""


def test_nodes_in_sync_are_healthy():
    health = make_service(nodes={"a": Node(100), "b": Node(99)}).get_nodes_health()
    assert health.is_healthy is True
    assert health.errors == ""


def test_node_behind_is_reported():
    health = make_service(nodes={"a": Node(100), "b": Node(90)}).get_nodes_health()
    assert health.is_healthy is False
    assert "b is behind a. Expected height 100, found 90" in health.errors
    assert "a is behind b" not in health.errors


def test_failing_node_is_reported():
    health = make_service(
        nodes={"a": Node(100), "b": Node(error=RuntimeError("x"))}
    ).get_nodes_health()
    assert health.is_healthy is False
    assert "failed to query: b;" in health.errors


def test_missing_dependencies_raise():
    with pytest.raises(InvalidDependenciesError):
        HealthService(LOGGER, None, ChainHistory(), InternalHistory())