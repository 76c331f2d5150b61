"""
Decimal helpers for prices, VAT and worked hours.

All amounts are Decimal with two places, rounded half-up, so that
vat_amount + price_excluding_vat always equals the gross line total.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional


CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
DEFAULT_VAT_RATE = Decimal("23.00")


def to_decimal(value) -> Decimal:
    """Convert int / str / float / Decimal into Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation("booleans are not amounts")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize(value) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def resolve_vat_rate(explicit=None, category_rate=None, default=DEFAULT_VAT_RATE) -> Decimal:
    """Explicit rate wins, then the category's rate, then the flat default."""
    if explicit is not None:
        return quantize(explicit)
    if category_rate is not None:
        return quantize(category_rate)
    return quantize(default)


def split_vat(total_price, vat_rate) -> tuple[Decimal, Decimal]:
    """
    Split a VAT-inclusive total into (vat_amount, price_excluding_vat).

    vat_amount = total * rate / (100 + rate)
    """
    total = quantize(total_price)
    rate = to_decimal(vat_rate)
    vat_amount = quantize(total * rate / (HUNDRED + rate))
    return vat_amount, total - vat_amount


def as_json_number(value) -> Optional[float]:
    """Decimal columns are emitted as JSON numbers."""
    if value is None:
        return None
    return float(quantize(value))
