[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bzeagg"
version = "0.1.0"
description = "Aggregation services for a decentralised exchange: markets, order books, trade history, candle intervals, prices, supply and health checks."
requires-python = ">=3.10"
keywords = [
    "dex",
    "exchange",
    "aggregator",
    "ohlc",
    "candles",
    "order-book",
    "coingecko",
    "tradingview",
    "blockchain",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = [
    "python-dotenv",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["bzeagg"]

[tool.hatch.build.targets.sdist]
include = [
    "bzeagg",
    "tests",
    "pyproject.toml",
    "README.md",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
