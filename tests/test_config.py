import logging

import pytest

from bzeagg.config import (
    AppConfig,
    ConfigError,
    LoggingConfig,
    load_config,
    new_logger,
    parse_health_nodes,
)

REQUIRED = {
    "BLOCKCHAIN_RPC_HOST": "http://localhost:26657",
    "BLOCKCHAIN_REST_HOST": "http://localhost:1317",
    "BLOCKCHAIN_GRPC_HOST": "localhost:9090",
    "COINGECKO_HOST": "https://api.example.com",
}


def write_env(tmp_path, values):
    path = tmp_path / ".env"
    path.write_text("".join(f"{k}={v}\n" for k, v in values.items()))
    return path


def test_full_config(tmp_path):
    path = write_env(
        tmp_path,
        {**REQUIRED, "HTTP_PORT": "9001", "LOG_LEVEL": "debug", "COINGECKO_PRICE_IDS": "bzedge"},
    )
    cfg = load_config(path)
    assert cfg.server.port == "9001"
    assert cfg.logging.level == "debug"
    assert cfg.prices.denominations == "bzedge"
    assert cfg.blockchain.rpc_host == REQUIRED["BLOCKCHAIN_RPC_HOST"]
    assert cfg.blockchain.rest_host == REQUIRED["BLOCKCHAIN_REST_HOST"]
    assert cfg.blockchain.grpc_host == REQUIRED["BLOCKCHAIN_GRPC_HOST"]
    assert cfg.coingecko.host == REQUIRED["COINGECKO_HOST"]
    assert cfg.blockchain.health_nodes == {}


def test_defaults(tmp_path):
    cfg = load_config(write_env(tmp_path, REQUIRED))
    assert cfg.server.port == "8000"
    assert cfg.logging.level == "info"
    assert cfg.prices.denominations == ""


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="BLOCKCHAIN_RPC_HOST"):
        load_config(tmp_path / "missing.env")


@pytest.mark.parametrize("key", sorted(REQUIRED))
def test_missing_required_key(tmp_path, key):
    values = {k: v for k, v in REQUIRED.items() if k != key}
    with pytest.raises(ConfigError, match=key):
        load_config(write_env(tmp_path, values))


def test_health_nodes_from_file(tmp_path):
    path = write_env(tmp_path, {**REQUIRED, "HEALTH_NODES": "a=http://a.example.com,b=http://b"})
    assert load_config(path).blockchain.health_nodes == {
        "a": "http://a.example.com",
        "b": "http://b",
    }


@pytest.mark.parametrize("value", ["", "a", "a=", "=b", "a=b=c", "a=b,"])
def test_health_nodes_bad_format(value):
    with pytest.raises(ConfigError, match="HEALTH_NODES contains an unknown format"):
        parse_health_nodes(value)


@pytest.mark.parametrize(
    "level,expected",
    [("debug", logging.DEBUG), ("WARN", logging.WARNING), ("error", logging.ERROR)],
)
def test_new_logger_level(level, expected):
    logger = new_logger(AppConfig(logging=LoggingConfig(level=level)))
    assert logger.level == expected


def test_new_logger_invalid_level():
    with pytest.raises(ConfigError):
        new_logger(AppConfig(logging=LoggingConfig(level="loud")))