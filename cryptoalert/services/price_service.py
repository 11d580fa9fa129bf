"""
Coin Price Service

Fetches USD quotes from the CoinGecko public API:
- get_prices: one batched /simple/price request for many coins
- get_price: single coin, None when CoinGecko does not know the id
- get_coins: supported coin list

Prices are parsed as Decimal so threshold comparisons are exact.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import requests

from cryptoalert.utils.logger import create_logger

logger = create_logger(__name__)


class PriceFetchError(Exception):
    """Raised when CoinGecko cannot be reached or returns an unusable response."""


class CoinPriceService:
    """Service for fetching coin prices from CoinGecko."""

    VS_CURRENCY = "usd"

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        """
        Initialize price service.

        Args:
            base_url: CoinGecko API base URL
            timeout: Request timeout in seconds
            session: Optional requests session (one is created if omitted)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def get_prices(self, coin_ids: Iterable[str]) -> Dict[str, Dict]:
        """
        Get current prices for several coins in one request.

        Args:
            coin_ids: CoinGecko coin ids

        Returns:
            dict: Price data for every id CoinGecko recognises
            {
                "bitcoin": {"price": Decimal("50000.12"), "change24h": Decimal("-1.4")},
                ...
            }
            Unknown ids are simply absent.

        Raises:
            PriceFetchError: On network errors, non-200 responses or bad payloads
        """
        ids = sorted(set(coin_ids))
        if not ids:
            return {}

        data = self._get(
            "/simple/price",
            params={
                "ids": ",".join(ids),
                "vs_currencies": self.VS_CURRENCY,
                "include_24hr_change": "true",
            },
        )

        if not isinstance(data, dict):
            raise PriceFetchError("Unexpected /simple/price payload")

        prices = {}
        for coin_id in ids:
            quote = data.get(coin_id)
            if not isinstance(quote, dict) or quote.get(self.VS_CURRENCY) is None:
                continue
            prices[coin_id] = {
                "price": _to_decimal(quote[self.VS_CURRENCY]),
                "change24h": _to_decimal(quote.get(f"{self.VS_CURRENCY}_24h_change")),
            }

        missing = [coin_id for coin_id in ids if coin_id not in prices]
        if missing:
            logger.warning(f"No price returned for: {', '.join(missing)}")

        logger.info(f"Fetched prices for {len(prices)}/{len(ids)} coin(s)")
        return prices

    def get_price(self, coin_id: str) -> Optional[Dict]:
        """
        Get current price for one coin.

        Args:
            coin_id: CoinGecko coin id

        Returns:
            dict: {"price": Decimal, "change24h": Decimal | None}, or None if
                the coin is unknown

        Raises:
            PriceFetchError: On transport or provider failure
        """
        return self.get_prices([coin_id]).get(coin_id)

    def get_coins(self, limit: Optional[int] = None) -> List[Dict]:
        """
        Get supported coins.

        Args:
            limit: Return at most this many coins

        Returns:
            list: [{"id": "bitcoin", "symbol": "BTC", "name": "Bitcoin"}, ...]
        """
        data = self._get("/coins/list")
        if not isinstance(data, list):
            raise PriceFetchError("Unexpected /coins/list payload")

        coins = [
            {
                "id": coin["id"],
                "symbol": (coin.get("symbol") or "").upper(),
                "name": coin.get("name") or coin["id"],
            }
            for coin in data
            if isinstance(coin, dict) and coin.get("id")
        ]
        return coins[:limit] if limit else coins

    def ping(self) -> bool:
        """Check that CoinGecko is reachable."""
        try:
            self._get("/ping")
            return True
        except PriceFetchError as e:
            logger.warning(f"CoinGecko health check failed: {e}")
            return False

    def close(self):
        self.session.close()

    def _get(self, path: str, params: Optional[Dict] = None):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"CoinGecko request failed for {path}: {e}")
            raise PriceFetchError(f"Request to {path} failed: {e}") from e

        if response.status_code != 200:
            logger.warning(f"CoinGecko returned status {response.status_code} for {path}")
            raise PriceFetchError(f"CoinGecko returned status {response.status_code} for {path}")

        try:
            return response.json(parse_float=Decimal)
        except ValueError as e:
            raise PriceFetchError(f"Invalid JSON from {path}: {e}") from e


def _to_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
