from __future__ import annotations

"""Concrete geolocation providers and factory.

'ipapi' queries ipapi.co, which geolocates the requesting network address
without authentication. 'static' answers with a configured currency and is
meant for offline use.
"""
import logging
from typing import Any, Optional

import httpx

from currency_localizer.core.config import Settings
from currency_localizer.core.errors import GeolocationFailure
from currency_localizer.services.http_client import HttpError, get_json
from .base import GeoLookup, GeolocationProvider

logger = logging.getLogger("currency_localizer.location")


class StaticGeolocationProvider(GeolocationProvider):
    def __init__(self, currency: str = "USD", country_code: Optional[str] = None):
        self._currency = currency
        self._country_code = country_code

    async def lookup(self) -> GeoLookup:  # type: ignore[override]
        return GeoLookup(currency=self._currency, country_code=self._country_code)


class IpApiGeolocationProvider(GeolocationProvider):
    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str = "https://ipapi.co/json/",
        *,
        timeout: float = 5.0,
        retries: int = 1,
        backoff: float = 0.5,
    ):
        self._client = client
        self._url = url
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff

    async def lookup(self) -> GeoLookup:  # type: ignore[override]
        try:
            data = await get_json(
                self._client,
                self._url,
                timeout=self._timeout,
                retries=self._retries,
                backoff=self._backoff,
            )
        except HttpError as e:
            logger.warning("geolocation lookup failed: %s", e)
            raise GeolocationFailure(f"geolocation lookup failed: {e}", cause=e) from e
        return self._parse(data)

    @staticmethod
    def _parse(data: Any) -> GeoLookup:
        if not isinstance(data, dict):
            raise GeolocationFailure("geolocation response is not an object")
        # ipapi.co reports throttling and reserved addresses with 200 + error flag
        if data.get("error"):
            reason = data.get("reason") or data.get("message") or "unknown error"
            raise GeolocationFailure(f"geolocation provider error: {reason}")
        currency = data.get("currency")
        if not isinstance(currency, str) or not currency.strip():
            raise GeolocationFailure("geolocation response has no currency field")
        country = data.get("country_code")
        return GeoLookup(
            currency=currency, country_code=country if isinstance(country, str) else None
        )


def make_geolocation_provider(
    settings: Settings, client: httpx.AsyncClient
) -> GeolocationProvider:
    kind = settings.geolocation_provider
    if kind == "static":
        return StaticGeolocationProvider(settings.static_location_currency)
    if kind == "ipapi":
        return IpApiGeolocationProvider(
            client,
            settings.geolocation_url,
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
            backoff=settings.http_backoff_seconds,
        )
    raise ValueError(f"Unknown geolocation provider kind '{kind}'")
