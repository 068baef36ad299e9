"""Public interface for the currency_localizer package.

Typical use from async code::

    async with open_coordinator() as coordinator:
        facade = ConversionFacade(coordinator)
        facade.update(base_price=29.99, base_currency="usd", api_key=key)
        outcome = await facade.wait()
"""

from __future__ import annotations

from .core.config import Settings, get_settings
from .core.errors import (
    CurrencyLocalizerError,
    GeolocationFailure,
    InvalidApiKey,
    InvalidPrice,
    MalformedApiKey,
    MalformedCurrencyCode,
    MissingApiKey,
    RateLimited,
    RateProviderFailure,
    UnsupportedCurrency,
)
from .main import create_coordinator, open_coordinator
from .models import (
    ConversionOutcome,
    ConversionRequest,
    ConversionResult,
    ConversionStage,
    LocationRecord,
    RateRecord,
)
from .services.coordinator import RequestCoordinator
from .services.facade import ConversionFacade, ConversionState
from .services.validation import normalize_currency_code, validate_api_key

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "create_coordinator",
    "open_coordinator",
    "RequestCoordinator",
    "ConversionFacade",
    "ConversionState",
    "ConversionOutcome",
    "ConversionRequest",
    "ConversionResult",
    "ConversionStage",
    "LocationRecord",
    "RateRecord",
    "normalize_currency_code",
    "validate_api_key",
    "CurrencyLocalizerError",
    "GeolocationFailure",
    "InvalidApiKey",
    "InvalidPrice",
    "MalformedApiKey",
    "MalformedCurrencyCode",
    "MissingApiKey",
    "RateLimited",
    "RateProviderFailure",
    "UnsupportedCurrency",
]

__version__ = "0.1.0"
