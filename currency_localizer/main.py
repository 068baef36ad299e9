from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

import httpx

from .core.config import Settings, get_settings
from .core.logging import init_logging
from .models import LocationRecord, RateRecord
from .services.cache import Clock, MemoryRecordCache, PersistentRecordCache
from .services.coordinator import RequestCoordinator
from .services.location.providers import make_geolocation_provider
from .services.location.resolver import LocationResolver
from .services.rates.providers import make_rate_provider
from .services.rates.resolver import RateResolver
from .services.storage import KeyValueStore, SqliteKeyValueStore


def create_coordinator(
    settings_override: Settings | None = None,
    *,
    client: httpx.AsyncClient,
    store: Optional[KeyValueStore] = None,
    clock: Optional[Clock] = None,
) -> RequestCoordinator:
    """Coordinator factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp data dir). Falls back to cached
    get_settings(). ``store`` replaces the sqlite-backed location storage.
    """
    settings = settings_override or get_settings()
    if settings.configure_logging:
        init_logging(debug=settings.debug)

    if store is None:
        if settings.db_path is None:
            settings.init_post_load()
        store = SqliteKeyValueStore(settings.db_path)  # type: ignore[arg-type]

    location_cache: PersistentRecordCache[LocationRecord] = PersistentRecordCache(
        store,
        LocationRecord,
        timedelta(seconds=settings.location_cache_ttl_seconds),
        clock,
    )
    rate_cache: MemoryRecordCache[RateRecord] = MemoryRecordCache(
        timedelta(seconds=settings.rates_cache_ttl_seconds), clock
    )
    return RequestCoordinator(
        LocationResolver(
            make_geolocation_provider(settings, client),
            location_cache,
            settings.location_storage_key,
            clock,
        ),
        RateResolver(make_rate_provider(settings, client), rate_cache, clock),
    )


@asynccontextmanager
async def open_coordinator(
    settings_override: Settings | None = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    store: Optional[KeyValueStore] = None,
    clock: Optional[Clock] = None,
) -> AsyncIterator[RequestCoordinator]:
    """Yield a coordinator, closing the HTTP client afterwards if we created it."""
    owned = client is None
    http = client or httpx.AsyncClient()
    try:
        yield create_coordinator(settings_override, client=http, store=store, clock=clock)
    finally:
        if owned:
            await http.aclose()
