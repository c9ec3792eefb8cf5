"""Aggregation services for decentralised-exchange market data: candles, order books, history, tickers, prices, supply and health."""

__version__ = "0.1.0"