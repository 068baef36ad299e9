from __future__ import annotations

"""Request coordinator: validation, location, rate, result.

Each ``convert`` call walks the stages

    IDLE -> VALIDATING_INPUT -> RESOLVING_LOCATION -> RESOLVING_RATE -> SUCCEEDED | FAILED

and skips RESOLVING_LOCATION when a manual currency is supplied. Validation
failures end the run before any network access. Remote lookups go through a
shared SingleFlight so identical concurrent requests do the work once; typed
errors become a FAILED outcome, anything else propagates.
"""
import hashlib
import logging
from typing import Callable, Optional

from currency_localizer.core.errors import CurrencyLocalizerError
from currency_localizer.models import (
    ConversionOutcome,
    ConversionRequest,
    ConversionStage,
    LocationRecord,
    RateRecord,
)
from currency_localizer.models.constants import LOCATION_LOOKUP_KEY
from currency_localizer.services.location.resolver import LocationResolver
from currency_localizer.services.rates.conversion import compute_conversion
from currency_localizer.services.rates.resolver import RateResolver, rate_cache_key
from currency_localizer.services.single_flight import SingleFlight
from currency_localizer.services.validation import (
    normalize_currency_code,
    normalize_optional_currency,
    validate_api_key,
    validate_price,
)

logger = logging.getLogger("currency_localizer.coordinator")

StageObserver = Callable[[ConversionStage], None]


def rate_flight_key(base: str, target: str, api_key: str) -> str:
    # Callers with different keys must not share each other's failures
    fingerprint = hashlib.sha256(api_key.encode("utf-8")).hexdigest()[:12]
    return f"{rate_cache_key(base, target)}:{fingerprint}"


class RequestCoordinator:
    def __init__(
        self,
        location_resolver: LocationResolver,
        rate_resolver: RateResolver,
        single_flight: Optional[SingleFlight] = None,
    ):
        self._location = location_resolver
        self._rates = rate_resolver
        self._flight = single_flight or SingleFlight()

    @property
    def in_flight(self) -> int:
        return len(self._flight)

    async def convert(
        self, request: ConversionRequest, observer: Optional[StageObserver] = None
    ) -> ConversionOutcome:
        def enter(stage: ConversionStage) -> None:
            if observer is not None:
                observer(stage)

        enter(ConversionStage.VALIDATING_INPUT)
        try:
            base = normalize_currency_code(request.base_currency)
            manual = normalize_optional_currency(request.manual_currency)
            validate_api_key(request.api_key).raise_for_error()
            price = validate_price(request.base_price)
        except CurrencyLocalizerError as e:
            logger.debug("request rejected: %s", e.kind)
            enter(ConversionStage.FAILED)
            return ConversionOutcome.failure(e)
        api_key = request.api_key.strip()  # type: ignore[union-attr]

        try:
            if manual is None:
                enter(ConversionStage.RESOLVING_LOCATION)
                target = (await self._resolve_location()).currency_code
            else:
                target = manual
            enter(ConversionStage.RESOLVING_RATE)
            rate = await self._resolve_rate(base, target, api_key)
            result = compute_conversion(price, rate)
        except CurrencyLocalizerError as e:
            logger.debug("conversion failed: %s", e.kind)
            enter(ConversionStage.FAILED)
            return ConversionOutcome.failure(e)

        outcome = ConversionOutcome.success(result)
        enter(ConversionStage.SUCCEEDED)
        return outcome

    async def _resolve_location(self) -> LocationRecord:
        cached = self._location.cached()
        if cached is not None:
            return cached
        return await self._flight.run(LOCATION_LOOKUP_KEY, self._location.resolve_location)

    async def _resolve_rate(self, base: str, target: str, api_key: str) -> RateRecord:
        cached = self._rates.cached(base, target)
        if cached is not None:
            return cached
        return await self._flight.run(
            rate_flight_key(base, target, api_key),
            lambda: self._rates.resolve_rate(base, target, api_key),
        )

    def clear_caches(self) -> None:
        self._location.invalidate()
        self._rates.cache.clear()
