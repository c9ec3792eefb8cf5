import logging

import pytest

from bzeagg.cache import InMemoryCache
from bzeagg.errors import InvalidDependenciesError
from bzeagg.registry import Asset, AssetDenom
from bzeagg.supply import SupplyError, SupplyService

ASSETS = {
    "ubze": Asset(
        denom_units=[AssetDenom("ubze", 0), AssetDenom("bze", 6)], base="ubze", display="bze"
    ),
    "uvdl": Asset(
        denom_units=[AssetDenom("uvdl", 0), AssetDenom("vdl", 6)], base="uvdl", display="vdl"
    ),
    "unodisplay": Asset(denom_units=[AssetDenom("unodisplay", 0)], base="unodisplay", display="x"),
}


class FakeRegistry:
    def __init__(self, error=None):
        self.error = error

    def get_asset_details(self, denom):
        if self.error:
            raise self.error
        return ASSETS.get(denom)


class FakeProvider:
    def __init__(self, total=0, pool=0.0, total_error=None, pool_error=None):
        self.total, self.pool = total, pool
        self.total_error, self.pool_error = total_error, pool_error
        self.total_calls = 0

    def get_total_supply(self, denom):
        self.total_calls += 1
        if self.total_error:
            raise self.total_error
        return self.total

    def get_community_pool_total(self, denom):
        if self.pool_error:
            raise self.pool_error
        return self.pool


def make(provider, registry=None):
    return SupplyService(
        logging.getLogger("test"), InMemoryCache(), provider, registry or FakeRegistry()
    )


def test_missing_dependencies_rejected():
    with pytest.raises(InvalidDependenciesError):
        SupplyService(logging.getLogger("test"), None, FakeProvider(), FakeRegistry())


def test_total_supply_in_display_units_and_cached():
    provider = FakeProvider(total=5_000_000)
    svc = make(provider)
    assert svc.get_total_supply("ubze") == "5.00"
    provider.total = 1
    assert svc.get_total_supply("ubze") == "5.00"
    assert provider.total_calls == 1


def test_total_supply_provider_failure_gives_zero():
    svc = make(FakeProvider(total_error=RuntimeError("down")))
    assert svc.get_total_supply("ubze") == "0"


def test_unknown_denom_raises():
    svc = make(FakeProvider())
    with pytest.raises(SupplyError, match="not found in registry"):
        svc.get_total_supply("unknown")


def test_registry_failure_raises():
    svc = make(FakeProvider(), FakeRegistry(error=RuntimeError("down")))
    with pytest.raises(SupplyError):
        svc.get_circulating_supply("ubze")


def test_denom_without_display_unit_raises():
    svc = make(FakeProvider())
    with pytest.raises(SupplyError, match="no display denomination"):
        svc.get_total_supply("unodisplay")


def test_circulating_equals_total_for_other_assets():
    svc = make(FakeProvider(total=3_000_000, pool=1_000_000.0))
    assert svc.get_circulating_supply("uvdl") == svc.get_total_supply("uvdl")


def test_circulating_subtracts_community_pool():
    svc = make(FakeProvider(total=10_000_000, pool=2_500_000.0))
    assert svc.get_circulating_supply("ubze") == "7.50"


def test_circulating_pool_failure_gives_zero():
    svc = make(FakeProvider(total=10_000_000, pool_error=RuntimeError("down")))
    assert svc.get_circulating_supply("ubze") == "0"