import pytest

from bzeagg.params import (
    AggregatorHealthParams,
    DexIntervalParams,
    ErrResponse,
    HistoryParams,
    MarketHealthParams,
    OrdersParams,
    ParamsError,
    SupplyParams,
    TickersParams,
    ValidationError,
    unknown_error_response,
)


def _error_of(params):
    try:
        params.validate()
    except ValidationError as exc:
        return str(exc)
    return ""


def test_err_response_to_dict():
    assert ErrResponse("invalid request").to_dict() == {"message": "invalid request"}


def test_unknown_error_response():
    assert unknown_error_response().message.startswith("Unknown error!")


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 500), ("", 500), ("0", 500), ("-3", 500), ("20", 20), ("1000", 1000), ("5000", 1000)],
)
def test_history_limit_bounds(raw, expected):
    query = {} if raw is None else {"limit": raw}
    assert HistoryParams.from_query(query).limit == expected


def test_history_binds_fields():
    params = HistoryParams.from_query(
        {"market_id": "ubze/uvdl", "type": "buy", "start_time": "10", "end_time": "20",
         "address": "trader-address", "limit": ["20"]}
    )
    assert params.market_id == "ubze/uvdl"
    assert params.order_type == "buy"
    assert (params.start_time, params.end_time) == (10, 20)
    assert params.address == "trader-address"
    assert params.limit == 20


@pytest.mark.parametrize("fmt, expected", [("coingecko", True), ("tv", False), ("", False)])
def test_history_format_restricted(fmt, expected):
    params = HistoryParams.from_query({"format": fmt})
    assert params.is_coingecko_format() is expected
    assert params.format == (fmt if expected else "")


@pytest.mark.parametrize("raw", ["abc", "1.5", " 5", "99999999999999999999"])
def test_history_invalid_integer(raw):
    with pytest.raises(ParamsError):
        HistoryParams.from_query({"limit": raw})


@pytest.mark.parametrize(
    "query, error",
    [
        ({}, "please provide market_id or ticker_id"),
        ({"market_id": "u"}, "please provide market_id or ticker_id"),
        ({"address": "trader-address"}, ""),
        ({"market_id": "ubze/uvdl"}, ""),
        ({"ticker_id": "ubze_uvdl"}, ""),
    ],
)
def test_history_validate(query, error):
    assert _error_of(HistoryParams.from_query(query)) == error


def test_resolved_market_id_from_ticker():
    assert HistoryParams(ticker_id="ubze_uvdl").resolved_market_id() == "ubze/uvdl"
    assert OrdersParams(ticker_id="ubze_uvdl").resolved_market_id() == "ubze/uvdl"
    assert DexIntervalParams(market_id="ubze/uvdl", ticker_id="x_y").resolved_market_id() == "ubze/uvdl"


def test_interval_invalid_minutes():
    params = DexIntervalParams.from_query({"minutes": "7", "market_id": "ubze/uvdl"})
    assert _error_of(params) == "invalid minutes. expected: 5, 15, 60, 240, 1440"


def test_interval_limit_too_big():
    params = DexIntervalParams.from_query({"minutes": "5", "limit": "6000", "market_id": "ubze/uvdl"})
    assert _error_of(params) == "limit can not be greater than 5000"


def test_interval_day_allows_big_limit():
    params = DexIntervalParams.from_query({"minutes": "1440", "limit": "6000", "market_id": "ubze/uvdl"})
    assert _error_of(params) == ""
    assert params.limit == 6000


def test_interval_default_limit_and_format():
    params = DexIntervalParams.from_query({"minutes": "60", "ticker_id": "ubze_uvdl", "format": "tv"})
    assert _error_of(params) == ""
    assert params.limit == 500
    assert params.is_trading_view_format() is True
    assert DexIntervalParams(format="coingecko").is_trading_view_format() is False


def test_interval_requires_market():
    params = DexIntervalParams.from_query({"minutes": "15"})
    assert _error_of(params) == "please provide market_id or ticker_id"


@pytest.mark.parametrize(
    "query, error",
    [
        ({"depth": "-1", "market_id": "ubze/uvdl"}, "depth must be a positive number"),
        ({"depth": "10"}, "please provide market_id or ticker_id"),
        ({"depth": "10", "ticker_id": "ubze_uvdl"}, ""),
    ],
)
def test_orders_validate(query, error):
    assert _error_of(OrdersParams.from_query(query)) == error


def test_orders_format():
    assert OrdersParams.from_query({"format": "coingecko"}).is_coingecko_format() is True
    assert OrdersParams.from_query({"format": "other"}).format == ""


def test_tickers_format():
    assert TickersParams.from_query({"format": "coingecko"}).is_coingecko_format() is True
    assert TickersParams.from_query({"format": "tv"}).format == ""


def test_market_health_defaults_and_validation():
    params = MarketHealthParams.from_query({})
    assert params.minutes == 10
    assert _error_of(params) == "market_id is required"
    assert _error_of(MarketHealthParams(market_id="ubze/uvdl", minutes=0)) == "invalid minutes"
    assert _error_of(MarketHealthParams.from_query({"market_id": "ubze/uvdl", "minutes": "30"})) == ""


@pytest.mark.parametrize("raw, expected", [(None, 10), ("0", 10), ("30", 30), ("1000", 720)])
def test_aggregator_health_minutes(raw, expected):
    query = {} if raw is None else {"minutes": raw}
    assert AggregatorHealthParams.from_query(query).minutes == expected


def test_aggregator_health_invalid():
    with pytest.raises(ParamsError):
        AggregatorHealthParams.from_query({"minutes": "ten"})


def test_supply_default_denom():
    assert SupplyParams.from_query({}).denom == "ubze"
    assert SupplyParams.from_query({"denom": "uvdl"}).denom == "uvdl"