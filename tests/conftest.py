from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import pytest

from currency_localizer.models import LocationRecord, RateRecord
from currency_localizer.services.cache import MemoryRecordCache, PersistentRecordCache
from currency_localizer.services.coordinator import RequestCoordinator
from currency_localizer.services.location.base import GeoLookup, GeolocationProvider
from currency_localizer.services.location.resolver import LocationResolver
from currency_localizer.services.rates.base import RateProvider
from currency_localizer.services.rates.resolver import RateResolver
from currency_localizer.services.storage import MemoryKeyValueStore

VALID_KEY = "a1b2c3d4e5f6a7b8c9d0e1f2"
LOCATION_KEY = "test.location"


class FakeClock:
    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeGeoProvider(GeolocationProvider):
    def __init__(self, currency: str = "EUR", error: Optional[Exception] = None):
        self.currency = currency
        self.error = error
        self.calls = 0
        self.gate: Optional[asyncio.Event] = None

    async def lookup(self) -> GeoLookup:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return GeoLookup(currency=self.currency, country_code="DE")


class FakeRateProvider(RateProvider):
    def __init__(self, tables: Optional[Dict[str, Dict[str, float]]] = None):
        self.tables = tables or {
            "USD": {"USD": 1.0, "EUR": 0.92, "GBP": 0.79, "JPY": 149.5},
            "EUR": {"EUR": 1.0, "USD": 1.087},
        }
        self.error: Optional[Exception] = None
        self.calls = 0
        self.gate: Optional[asyncio.Event] = None

    async def fetch_rates(self, base_currency: str, api_key: str) -> Dict[str, float]:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return dict(self.tables[base_currency])


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def geo() -> FakeGeoProvider:
    return FakeGeoProvider()


@pytest.fixture
def rates() -> FakeRateProvider:
    return FakeRateProvider()


@pytest.fixture
def location_resolver(geo, store, clock) -> LocationResolver:
    cache: PersistentRecordCache[LocationRecord] = PersistentRecordCache(
        store, LocationRecord, timedelta(hours=24), clock
    )
    return LocationResolver(geo, cache, LOCATION_KEY, clock)


@pytest.fixture
def rate_resolver(rates, clock) -> RateResolver:
    cache: MemoryRecordCache[RateRecord] = MemoryRecordCache(timedelta(hours=1), clock)
    return RateResolver(rates, cache, clock)


@pytest.fixture
def coordinator(location_resolver, rate_resolver) -> RequestCoordinator:
    return RequestCoordinator(location_resolver, rate_resolver)


async def settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)
