"""Client for the CoinGecko simple price endpoint."""

from __future__ import annotations

import requests

from .entities import CoinPrice
from .errors import InvalidDependenciesError

DEFAULT_PRICES_DENOMINATION = "bzedge"
AGAINST_CURRENCY = "usd"
PRICES_PATH = "/api/v3/simple/price"


class CoingeckoError(RuntimeError):
    """Raised when prices cannot be fetched or decoded."""


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class CoingeckoClient:
    """Fetches USD prices for a comma separated list of coin ids."""

    def __init__(
        self,
        host: str,
        ids: str = "",
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not host:
            raise InvalidDependenciesError("NewCoingeckoClient")
        self.host = host
        self.ids = ids or DEFAULT_PRICES_DENOMINATION
        self.session = session or requests.Session()
        self.timeout = timeout

    def get_denominations_prices(self) -> list[CoinPrice]:
        url = f"{self.host}{PRICES_PATH}?ids={self.ids}&vs_currencies={AGAINST_CURRENCY}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as err:
            raise CoingeckoError(f"error making request to coingecko: {err}") from err
        if response.status_code != 200:
            raise CoingeckoError(
                f"received non-OK status code from coingecko: {response.status_code}"
            )
        try:
            data = response.json()
        except ValueError as err:
            raise CoingeckoError(f"error unmarshalling response data from coingecko: {err}") from err

        if data is None:
            return []
        if not isinstance(data, dict):
            raise CoingeckoError("error unmarshalling response data from coingecko: expected an object")

        prices: list[CoinPrice] = []
        for coin_id, quotes in data.items():
            if quotes is None:
                continue
            if not isinstance(quotes, dict) or not all(
                v is None or _is_number(v) for v in quotes.values()
            ):
                raise CoingeckoError(
                    f"error unmarshalling response data from coingecko: bad prices for {coin_id}"
                )
            price = quotes.get(AGAINST_CURRENCY)
            if AGAINST_CURRENCY not in quotes:
                continue
            prices.append(
                CoinPrice(denom=coin_id, price=float(price or 0.0), price_denom=AGAINST_CURRENCY)
            )
        return prices