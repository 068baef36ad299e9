from __future__ import annotations

"""Location resolver with a persistent, long-TTL cache.

Only successful lookups are stored; a failed lookup leaves the previous
(expired or absent) entry untouched so the next call tries the network again.
"""
import logging
from typing import Optional

from currency_localizer.core.errors import GeolocationFailure, MalformedCurrencyCode
from currency_localizer.models import LocationRecord
from currency_localizer.services.cache import Clock, PersistentRecordCache, utc_now
from currency_localizer.services.validation import normalize_currency_code
from .base import GeolocationProvider

logger = logging.getLogger("currency_localizer.location")


class LocationResolver:
    def __init__(
        self,
        provider: GeolocationProvider,
        cache: PersistentRecordCache[LocationRecord],
        storage_key: str,
        clock: Optional[Clock] = None,
    ):
        self._provider = provider
        self._cache = cache
        self._storage_key = storage_key
        self._clock = clock or utc_now

    @property
    def cache(self) -> PersistentRecordCache[LocationRecord]:
        return self._cache

    def cached(self) -> Optional[LocationRecord]:
        return self._cache.get(self._storage_key)

    async def resolve_location(self) -> LocationRecord:
        record = self.cached()
        if record is not None:
            logger.debug("location cache hit: %s", record.currency_code)
            return record

        lookup = await self._provider.lookup()
        try:
            currency = normalize_currency_code(lookup.currency)
        except MalformedCurrencyCode as e:
            raise GeolocationFailure(
                f"geolocation returned unusable currency {lookup.currency!r}", cause=e
            ) from e
        record = LocationRecord(
            currency_code=currency,
            resolved_at=self._clock(),
            country_code=lookup.country_code,
        )
        self._cache.put(self._storage_key, record)
        logger.debug("location resolved to %s", currency)
        return record

    def invalidate(self) -> None:
        self._cache.invalidate(self._storage_key)
