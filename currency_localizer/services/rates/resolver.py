from __future__ import annotations

"""Rate resolver with an in-memory, short-TTL cache.

Entries are keyed by the ordered (base, target) pair: a cached USD->EUR
record says nothing about EUR->USD. Identity pairs never touch the cache or
the network.
"""
import logging
import math
from numbers import Real
from typing import Optional

from currency_localizer.core.errors import RateProviderFailure, UnsupportedCurrency
from currency_localizer.models import RateRecord
from currency_localizer.services.cache import Clock, MemoryRecordCache, utc_now
from .base import RateProvider

logger = logging.getLogger("currency_localizer.rates")


def rate_cache_key(base: str, target: str) -> str:
    return f"rate:{base}:{target}"


class RateResolver:
    def __init__(
        self,
        provider: RateProvider,
        cache: MemoryRecordCache[RateRecord],
        clock: Optional[Clock] = None,
    ):
        self._provider = provider
        self._cache = cache
        self._clock = clock or utc_now

    @property
    def cache(self) -> MemoryRecordCache[RateRecord]:
        return self._cache

    def cached(self, base: str, target: str) -> Optional[RateRecord]:
        if base == target:
            return self._identity(base)
        return self._cache.get(rate_cache_key(base, target))

    def _identity(self, currency: str) -> RateRecord:
        return RateRecord(
            base_currency=currency,
            target_currency=currency,
            rate=1.0,
            resolved_at=self._clock(),
        )

    async def resolve_rate(self, base: str, target: str, api_key: str) -> RateRecord:
        record = self.cached(base, target)
        if record is not None:
            return record

        logger.debug("rate cache miss for %s->%s", base, target)
        rates = await self._provider.fetch_rates(base, api_key)
        if target not in rates:
            raise UnsupportedCurrency(target)
        value = rates[target]
        if (
            isinstance(value, bool)
            or not isinstance(value, Real)
            or not math.isfinite(value)
            or value <= 0
        ):
            raise RateProviderFailure(f"provider returned invalid rate {value!r} for {target}")
        record = RateRecord(
            base_currency=base,
            target_currency=target,
            rate=float(value),
            resolved_at=self._clock(),
        )
        self._cache.put(rate_cache_key(base, target), record)
        return record
