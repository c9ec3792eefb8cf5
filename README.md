# bzeagg

Building blocks for an aggregator that sits next to a decentralised
exchange and turns raw on-chain trading data into something clients can
consume: market lists, order books, trade history, OHLC candles, tickers
in plain and CoinGecko shapes, coin prices, token supply and health
checks.

The package is a library. Each service takes its collaborators
(repositories, chain data providers, caches, lockers) as constructor
arguments, so any object with the expected methods will do. A service
built with a missing collaborator raises `InvalidDependenciesError`.

## What is inside

| Module | Purpose |
| --- | --- |
| `bzeagg.config` | `load_config` reads a `.env` file into an `AppConfig`; `new_logger` returns the `bzeagg` logger set to the configured level; `parse_health_nodes` parses `name=host,name=host` lists. |
| `bzeagg.registry` | Chain-registry asset descriptions: `Asset`, `AssetDenom`, `AssetList`. |
| `bzeagg.chain_registry` | `ChainRegistryClient` downloads an asset list from a JSON URL you give it; `ChainRegistry` caches the list by base denomination and looks up asset details. |
| `bzeagg.entities` | Stored records such as `Market`, `MarketWithLastPrice`, `MarketHistory`, `MarketOrder`, `MarketHistoryInterval`, `TradingViewInterval`, plus `Coin`, `CoinPrice`, `HistoryOrder`, `Article` and the health records `MarketHealth`, `AggregatorHealth`, `NodesHealth`. |
| `bzeagg.amounts` | Decimal helpers: `uprice_to_price`, `uamount_to_amount`, `get_quote_amount`, `trim_amount_trailing_zeros`, `format_dec`, `calculate_price_change`, `dec_to_float32_rounded`, `milliseconds_to_time`, `split_batches`, `get_market_id`. |
| `bzeagg.intervals` | Candle building: `Interval`, `DurationGroup`, `IntervalsMap`, `Length`, `get_timestamp_interval`. Five-minute, quarter-hour, hourly, four-hour and daily candles are kept together. |
| `bzeagg.conversion` | `TypesConverter` turns chain orders (`ChainHistoryOrder`, `AggregatedOrder`) into stored entities, scaling prices and amounts to display units; `ChainMarket` describes a chain market. |
| `bzeagg.params` | Query-string parsing and validation for each endpoint: `HistoryParams`, `OrdersParams`, `DexIntervalParams`, `TickersParams`, `MarketHealthParams`, `AggregatorHealthParams`, `SupplyParams`; `ErrResponse` and `unknown_error_response` for error bodies. |
| `bzeagg.responses` | Response bodies: `Orders`, `CoingeckoOrders`, `HistoryTrade`, `CoingeckoHistory`, `Ticker`, `CoingeckoTicker`, and the `IntervalsParams` filter. |
| `bzeagg.dex` | `HistoryService`, `OrdersService`, `TickersService`. |
| `bzeagg.dex_intervals` | `IntervalsService` returns candles, filling gaps with empty ones, in plain or TradingView form. |
| `bzeagg.prices` | `PricesService` with a three-minute cache and a day-long fallback copy. |
| `bzeagg.coingecko` | `CoingeckoClient` fetches USD prices from the simple price endpoint. |
| `bzeagg.supply` | `SupplyService` for total and circulating supply. |
| `bzeagg.health` | `HealthService` for market, aggregator and node health. |
| `bzeagg.sync` | `HistorySync`, `IntervalSync`, `MarketSync`, `OrderSync` keep a store up to date from the chain. |
| `bzeagg.handlers` | Sync entry points per market or for all markets: `MarketsSyncHandler`, `MarketOrderSyncHandler`, `MarketHistorySyncHandler`, `MarketIntervalSyncHandler`, and the `sync_one` / `sync_all` helpers. |
| `bzeagg.cache` | `InMemoryCache`, a thread-safe byte cache with per-key expiry. |

## Configuration

`load_config(env_path=".env")` reads these keys from a dotenv file:

- `BLOCKCHAIN_RPC_HOST`, `BLOCKCHAIN_REST_HOST`, `BLOCKCHAIN_GRPC_HOST`,
  `COINGECKO_HOST` — required; a missing one raises `ConfigError`.
- `HTTP_PORT` — defaults to `8000`.
- `LOG_LEVEL` — defaults to `info`; `new_logger` raises `ConfigError` for
  an unknown level.
- `COINGECKO_PRICE_IDS` — comma-separated CoinGecko ids.
- `HEALTH_NODES` — optional `name=host` pairs separated by commas; a
  malformed list raises `ConfigError`.

## A few examples

Market ids and amounts:

```python
from bzeagg.amounts import get_market_id, trim_amount_trailing_zeros

get_market_id("ubze", "uvdl")            # "ubze/uvdl"
trim_amount_trailing_zeros("12.3400")    # "12.34"
trim_amount_trailing_zeros("5.000")      # "5"
```

Building candles from trade history:

```python
from bzeagg.intervals import IntervalsMap

candles = IntervalsMap("ubze/uvdl")
for trade in trades:          # MarketHistory records
    candles.add_order(trade)

records = candles.to_entities()   # MarketHistoryInterval records, ready to store
```

Validating a request:

```python
from bzeagg.params import OrdersParams, ValidationError

params = OrdersParams.from_query({"ticker_id": "ubze_uvdl", "depth": "20"})
params.validate()
params.resolved_market_id()   # "ubze/uvdl"
```

Caching:

```python
from datetime import timedelta
from bzeagg.cache import InMemoryCache

cache = InMemoryCache()
cache.set("prices:all", b"[]", timedelta(minutes=3))
cache.get("prices:all")       # b"[]" until the entry expires, then None
```

## Errors

Errors are raised as exceptions: unparseable query values raise
`ParamsError` and unacceptable ones `ValidationError`; missing
collaborators raise `InvalidDependenciesError`; unknown markets raise
`MarketNotFoundError` in the DEX services and `HandlerError` in the sync
handlers. `SyncError`, `SupplyError`, `RegistryError`, `CoingeckoError`
and `ConfigError` cover their own modules.

## What the package does not do

- It has no storage. The SQL repositories that the services and sync
  classes read from and write to are yours to provide.
- It has no chain client. Market lists, trade history, aggregated orders,
  node status and REST history must come from objects you supply.
- It has no HTTP server and no command-line commands; the request
  parameters and response bodies are there for you to wire into a web
  framework of your choice.
- It has no locker. The sync classes need an object with `lock(key)` and
  `unlock(key)` methods, for example a dictionary of `threading.Lock`s.
- It does not fetch or parse article feeds; `Article` is only a record.
- It does not listen to chain events to trigger syncs.