"""Pre-flight input checks.

Everything here is pure and runs before any network call, so an input that
cannot possibly succeed never spends provider quota.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from numbers import Real
from typing import Any, Optional

from currency_localizer.core.errors import (
    CurrencyLocalizerError,
    InvalidPrice,
    MalformedApiKey,
    MalformedCurrencyCode,
    MissingApiKey,
)
from currency_localizer.models.constants import API_KEY_PATTERN, CURRENCY_CODE_PATTERN


def normalize_currency_code(code: Any) -> str:
    """Return the canonical uppercase form of a currency code.

    ``"usd"``, ``" USD "`` and ``"Usd"`` all collapse to ``"USD"``.
    """
    if not isinstance(code, str):
        raise MalformedCurrencyCode(code)
    canonical = code.strip().upper()
    if not CURRENCY_CODE_PATTERN.match(canonical):
        raise MalformedCurrencyCode(code)
    return canonical


def normalize_optional_currency(code: Optional[str]) -> Optional[str]:
    """Blank manual currency means auto-detect."""
    if code is None or (isinstance(code, str) and not code.strip()):
        return None
    return normalize_currency_code(code)


@dataclass(frozen=True)
class ApiKeyValidation:
    valid: bool
    error: Optional[CurrencyLocalizerError] = None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


def validate_api_key(key: Optional[str]) -> ApiKeyValidation:
    if key is None or not isinstance(key, str) or not key.strip():
        return ApiKeyValidation(valid=False, error=MissingApiKey())
    if not API_KEY_PATTERN.match(key.strip()):
        return ApiKeyValidation(valid=False, error=MalformedApiKey())
    return ApiKeyValidation(valid=True)


def validate_price(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
        raise InvalidPrice(value)
    price = float(value)
    if not math.isfinite(price) or price < 0:
        raise InvalidPrice(value)
    return price
