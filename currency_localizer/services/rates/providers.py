from __future__ import annotations

"""Concrete rate providers and factory.

'exchangerate-api' talks to ExchangeRate-API v6, which needs an API key and
answers with the whole rate table for one pivot currency. 'static' serves a
fixed USD-anchored table for offline use and demos.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from currency_localizer.core.config import Settings
from currency_localizer.core.errors import (
    InvalidApiKey,
    RateLimited,
    RateProviderFailure,
    UnsupportedCurrency,
)
from currency_localizer.services.http_client import HttpError, get_json
from .base import RateProvider

logger = logging.getLogger("currency_localizer.rates")

# Units per 1 USD
_STATIC_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 149.5,
    "CAD": 1.36,
    "AUD": 1.54,
    "INR": 83.2,
    "SGD": 1.34,
    "MYR": 4.7,
    "KWD": 0.308,
}


class StaticRateProvider(RateProvider):
    def __init__(self, rates: Optional[Dict[str, float]] = None):
        self._rates = dict(rates or _STATIC_RATES)

    async def fetch_rates(self, base_currency: str, api_key: str) -> Dict[str, float]:  # type: ignore[override]
        pivot = self._rates.get(base_currency)
        if not pivot:
            raise UnsupportedCurrency(base_currency)
        return {code: value / pivot for code, value in self._rates.items()}


class ExchangeRateApiProvider(RateProvider):
    """ExchangeRate-API v6 ``/{key}/latest/{base}`` endpoint."""

    _KEY_ERRORS = {"invalid-key", "inactive-account"}

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = "https://v6.exchangerate-api.com/v6",
        *,
        timeout: float = 5.0,
        retries: int = 1,
        backoff: float = 0.5,
    ):
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff

    def _url(self, base_currency: str, api_key: str) -> str:
        return f"{self._base_url}/{api_key}/latest/{base_currency}"

    async def fetch_rates(self, base_currency: str, api_key: str) -> Dict[str, float]:  # type: ignore[override]
        try:
            data = await get_json(
                self._client,
                self._url(base_currency, api_key),
                timeout=self._timeout,
                retries=self._retries,
                backoff=self._backoff,
            )
        except HttpError as e:
            raise self._map_http_error(e, base_currency) from e
        if not isinstance(data, dict):
            raise RateProviderFailure("rate provider returned a non-object body")
        if data.get("result") == "error":
            raise self._map_error_type(data.get("error-type"), base_currency)
        rates = data.get("conversion_rates")
        if not isinstance(rates, dict):
            raise RateProviderFailure("rate provider response lacks conversion_rates")
        return {str(code).upper(): value for code, value in rates.items()}

    def _map_http_error(self, err: HttpError, base_currency: str) -> Exception:
        if err.status_code == 429:
            return RateLimited(retry_after=err.retry_after, cause=err)
        payload = err.payload
        if isinstance(payload, dict) and payload.get("result") == "error":
            mapped = self._map_error_type(payload.get("error-type"), base_currency)
            mapped.cause = err
            if isinstance(mapped, RateLimited) and mapped.retry_after is None:
                mapped.retry_after = err.retry_after
            return mapped
        # Log status only; the URL embeds the API key
        logger.warning("rate provider request failed with status %s", err.status_code)
        return RateProviderFailure(
            f"rate provider request failed (status {err.status_code})", cause=err
        )

    def _map_error_type(self, error_type: Any, base_currency: str):
        if error_type == "quota-reached":
            return RateLimited()
        if error_type in self._KEY_ERRORS:
            return InvalidApiKey(f"rate provider rejected the API key ({error_type})")
        if error_type == "unsupported-code":
            return UnsupportedCurrency(base_currency)
        return RateProviderFailure(f"rate provider error: {error_type or 'unknown'}")


def make_rate_provider(settings: Settings, client: httpx.AsyncClient) -> RateProvider:
    kind = settings.exchange_rate_provider
    if kind == "static":
        return StaticRateProvider()
    if kind == "exchangerate-api":
        return ExchangeRateApiProvider(
            client,
            settings.exchange_api_base_url,
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
            backoff=settings.http_backoff_seconds,
        )
    raise ValueError(f"Unknown rate provider kind '{kind}'")
