"""Exchange rates from foreign currencies to EUR.

``ExchangeBuro`` memoizes rates per date for the lifetime of the object.
The caller builds one buro and threads it through aggregation.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from datetime import date
from typing import Any, Protocol

import httpx

from shinypenny.domain.errors import RateUnavailable
from shinypenny.domain.expense import EUR
from shinypenny.runtime.config import DEFAULT_RATES_TIMEOUT, DEFAULT_RATES_URL
from shinypenny.runtime.logging import get_logger

logger = get_logger(__name__)


class RateSource(Protocol):
    """Quotes of foreign units per one unit of ``base`` for a given day."""

    def lookup(self, when: date, base: str = EUR) -> Mapping[str, float]: ...


class FrankfurterRateSource:
    """Daily ECB reference rates from a Frankfurter compatible HTTP API."""

    def __init__(
        self,
        base_url: str = DEFAULT_RATES_URL,
        timeout: float = DEFAULT_RATES_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _get(self, url: str, params: dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, params=params, timeout=self.timeout)
        return httpx.get(url, params=params, timeout=self.timeout)

    def lookup(self, when: date, base: str = EUR) -> Mapping[str, float]:
        when_str = when.strftime("%Y-%m-%d")
        url = f"{self.base_url}/{when_str}"
        logger.debug("Querying exchange rates for %s", when_str)
        try:
            response = self._get(url, {"from": base})
            response.raise_for_status()
            payload: Any = response.json()
        except httpx.HTTPError as exc:
            raise RateUnavailable(f"exchange rate request failed: {exc}", field="date", value=when_str) from exc
        except ValueError as exc:
            raise RateUnavailable("exchange rate response is not JSON", field="date", value=when_str) from exc

        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict):
            raise RateUnavailable("exchange rate response lacks rates", field="date", value=when_str)
        logger.debug("Received exchange rates: %s", rates)
        quotes: dict[str, float] = {}
        for code, rate in rates.items():
            # bool is an int subclass but never a quote
            if isinstance(rate, bool) or not isinstance(rate, (int, float)):
                raise RateUnavailable(f"malformed exchange rate {rate!r}", field="currency", value=str(code))
            quotes[str(code)] = float(rate)
        return quotes


class ExchangeBuro:
    """Exchange rates from currency to EUR, cached per date.

    Lookups for a date happen while holding the lock, so concurrent callers
    never query the source twice for the same day.
    """

    def __init__(self, source: RateSource) -> None:
        self.source = source
        self._cache: dict[date, dict[str, float]] = {}
        self._lock = threading.Lock()

    def _quotes(self, when: date) -> dict[str, float]:
        with self._lock:
            quotes = self._cache.get(when)
            if quotes is None:
                quotes = dict(self.source.lookup(when, EUR))
                self._cache[when] = quotes
            return quotes

    def rate(self, when: date, currency: str) -> float:
        """EUR per one unit of ``currency`` on ``when``."""
        if currency == EUR:
            return 1.0
        quote = self._quotes(when).get(currency)
        if quote is None:
            raise RateUnavailable(
                f"currency is not supported on {when.isoformat()}", field="currency", value=currency
            )
        if quote <= 0.0:
            raise RateUnavailable(f"non-positive quote {quote!r}", field="currency", value=currency)
        return 1.0 / quote

    def cached_dates(self) -> list[date]:
        with self._lock:
            return sorted(self._cache)
