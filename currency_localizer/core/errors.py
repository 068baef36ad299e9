"""Typed error taxonomy for the conversion pipeline.

Validation errors are raised before any network access and are never
retryable. Network errors carry the underlying ``cause`` so callers can
inspect it; none of them is ever cached as a stable result.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class CurrencyLocalizerError(Exception):
    kind: str = "currency_localizer_error"
    category: str = "internal"
    retryable: bool = False

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "detail": self.message}


class ValidationError(CurrencyLocalizerError):
    category = "validation"


class InvalidPrice(ValidationError):
    kind = "invalid_price"

    def __init__(self, value: Any):
        super().__init__(f"base price must be a finite, non-negative number, got {value!r}")
        self.value = value


class MalformedCurrencyCode(ValidationError):
    kind = "malformed_currency_code"

    def __init__(self, value: Any):
        super().__init__(f"'{value}' is not a 3-letter currency code")
        self.value = value


class MissingApiKey(ValidationError):
    kind = "missing_api_key"

    def __init__(self) -> None:
        super().__init__("an exchange rate API key is required")


class MalformedApiKey(ValidationError):
    kind = "malformed_api_key"

    def __init__(self) -> None:
        super().__init__("API key must be 24 alphanumeric characters")


class GeolocationFailure(CurrencyLocalizerError):
    kind = "geolocation_failure"
    category = "network"
    retryable = True


class UnsupportedCurrency(CurrencyLocalizerError):
    """The provider works but cannot serve this currency; use a manual override."""

    kind = "unsupported_currency"
    category = "terminal"

    def __init__(self, currency: str):
        super().__init__(f"currency '{currency}' is not supported by the rate provider")
        self.currency = currency


class RateLimited(CurrencyLocalizerError):
    kind = "rate_limited"
    category = "network"
    retryable = True

    def __init__(
        self,
        message: str = "provider quota exhausted",
        *,
        retry_after: Optional[float] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause=cause)
        self.retry_after = retry_after

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.retry_after is not None:
            payload["retry_after"] = self.retry_after
        return payload


class RateProviderFailure(CurrencyLocalizerError):
    kind = "rate_provider_failure"
    category = "network"
    retryable = True


class InvalidApiKey(RateProviderFailure):
    """Key passed the shape check but the provider rejected it."""

    kind = "invalid_api_key"
    retryable = False
