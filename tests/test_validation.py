import math
from decimal import Decimal

import pytest

from currency_localizer.core.errors import (
    InvalidPrice,
    MalformedApiKey,
    MalformedCurrencyCode,
    MissingApiKey,
)
from currency_localizer.services.validation import (
    normalize_currency_code,
    normalize_optional_currency,
    validate_api_key,
    validate_price,
)

from conftest import VALID_KEY


@pytest.mark.parametrize("raw", ["usd", "USD", "Usd", "  uSd\t"])
def test_normalize_is_case_insensitive(raw):
    assert normalize_currency_code(raw) == "USD"


def test_normalize_is_idempotent():
    once = normalize_currency_code("eur")
    assert normalize_currency_code(once) == once


@pytest.mark.parametrize("raw", ["us", "USDX", "U$D", "12A", "", None, 840])
def test_normalize_rejects_malformed(raw):
    with pytest.raises(MalformedCurrencyCode):
        normalize_currency_code(raw)


def test_blank_manual_currency_means_auto_detect():
    assert normalize_optional_currency(None) is None
    assert normalize_optional_currency("   ") is None
    assert normalize_optional_currency("gbp") == "GBP"


@pytest.mark.parametrize("key", [None, "", "   "])
def test_missing_api_key(key):
    result = validate_api_key(key)
    assert not result.valid
    assert isinstance(result.error, MissingApiKey)
    with pytest.raises(MissingApiKey):
        result.raise_for_error()


@pytest.mark.parametrize("key", ["short", VALID_KEY + "0", "a1b2c3d4e5f6a7b8c9d0e1f!"])
def test_malformed_api_key(key):
    result = validate_api_key(key)
    assert isinstance(result.error, MalformedApiKey)


def test_valid_api_key_tolerates_surrounding_whitespace():
    result = validate_api_key(f" {VALID_KEY} ")
    assert result.valid
    result.raise_for_error()


@pytest.mark.parametrize("price", [0, 29.99, 10, Decimal("5.50")])
def test_valid_prices(price):
    assert validate_price(price) == float(price)


@pytest.mark.parametrize("price", [-0.01, math.nan, math.inf, True, "9.99", None])
def test_invalid_prices(price):
    with pytest.raises(InvalidPrice):
        validate_price(price)
