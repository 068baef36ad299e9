"""Money / rounding helpers.

Centralized so the coordinator and any consumer use identical rounding
semantics: half-up to the target currency's ISO 4217 minor unit.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Union

from currency_localizer.models.constants import DEFAULT_MINOR_UNITS, MINOR_UNITS


def minor_units(currency: str) -> int:
    return MINOR_UNITS.get(currency.upper(), DEFAULT_MINOR_UNITS)


def round_minor(value: Union[float, Decimal], currency: str) -> float:
    places = minor_units(currency)
    amount = Decimal(str(value))
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the minor unit
        ctx.prec = max(ctx.prec, amount.adjusted() + places + 2)
        return float(amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def convert_amount(amount: float, rate: float, currency: str) -> float:
    # Multiply in Decimal so 99.99 * 0.92 does not drift before rounding
    a, r = Decimal(str(amount)), Decimal(str(rate))
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(a.as_tuple().digits) + len(r.as_tuple().digits))
        product = a * r
    return round_minor(product, currency)
