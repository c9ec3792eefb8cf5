"""Application configuration loaded from a dotenv file."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

DEFAULT_PORT = "8000"
DEFAULT_LOGGING_LEVEL = "info"

_LOG_LEVELS = {
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}


class ConfigError(Exception):
    """Raised when the configuration is missing or malformed."""


@dataclass
class ServerConfig:
    port: str = DEFAULT_PORT


@dataclass
class LoggingConfig:
    level: str = DEFAULT_LOGGING_LEVEL


@dataclass
class BlockchainConfig:
    rest_host: str = ""
    rpc_host: str = ""
    grpc_host: str = ""
    health_nodes: dict[str, str] = field(default_factory=dict)


@dataclass
class PricesConfig:
    denominations: str = ""


@dataclass
class CoingeckoConfig:
    host: str = ""


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    blockchain: BlockchainConfig = field(default_factory=BlockchainConfig)
    prices: PricesConfig = field(default_factory=PricesConfig)
    coingecko: CoingeckoConfig = field(default_factory=CoingeckoConfig)


def parse_health_nodes(value: str) -> dict[str, str]:
    """Parse a "name=host,name=host" list."""
    nodes: dict[str, str] = {}
    for node in value.split(","):
        parts = node.split("=")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ConfigError("HEALTH_NODES contains an unknown format")
        nodes[parts[0]] = parts[1]
    return nodes


def _read_env(path: Path) -> dict[str, str] | None:
    if not path.is_file():
        return None
    return {key: value or "" for key, value in dotenv_values(path).items()}


def _require(env: dict[str, str], key: str) -> str:
    try:
        return env[key]
    except KeyError:
        raise ConfigError(f"{key} not found in .env") from None


def load_config(env_path: str | Path = ".env") -> AppConfig:
    """Load the application configuration from a dotenv file."""
    env = _read_env(Path(env_path))
    cfg = AppConfig()
    if env is not None:
        cfg.server.port = env.get("HTTP_PORT", DEFAULT_PORT)
        cfg.logging.level = env.get("LOG_LEVEL", DEFAULT_LOGGING_LEVEL)
        cfg.prices.denominations = env.get("COINGECKO_PRICE_IDS", "")
    env = env or {}

    rpc = _require(env, "BLOCKCHAIN_RPC_HOST")
    rest = _require(env, "BLOCKCHAIN_REST_HOST")
    grpc = _require(env, "BLOCKCHAIN_GRPC_HOST")
    coingecko = _require(env, "COINGECKO_HOST")

    health_nodes = parse_health_nodes(env["HEALTH_NODES"]) if "HEALTH_NODES" in env else {}

    cfg.blockchain = BlockchainConfig(
        rest_host=rest, rpc_host=rpc, grpc_host=grpc, health_nodes=health_nodes
    )
    cfg.coingecko = CoingeckoConfig(host=coingecko)
    return cfg


def new_logger(config: AppConfig) -> logging.Logger:
    """Return the application logger set to the configured level."""
    level = _LOG_LEVELS.get(config.logging.level.lower())
    if level is None:
        raise ConfigError(f"error on parsing logging level: {config.logging.level!r}")
    logger = logging.getLogger("bzeagg")
    logger.setLevel(level)
    return logger