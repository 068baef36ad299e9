from __future__ import annotations

import math

from currency_localizer.core.errors import InvalidPrice
from currency_localizer.models import ConversionResult, RateRecord
from currency_localizer.services.money import convert_amount

"""Converted-price computation.

Applies the rate and the target currency's rounding rule in one place and
returns an immutable result object.
"""


def compute_conversion(base_price: float, rate: RateRecord) -> ConversionResult:
    converted = convert_amount(base_price, rate.rate, rate.target_currency)
    if not math.isfinite(converted):
        # product overflowed float range
        raise InvalidPrice(base_price)
    return ConversionResult(
        converted_price=converted,
        local_currency=rate.target_currency,
        base_currency=rate.base_currency,
        exchange_rate=rate.rate,
    )
