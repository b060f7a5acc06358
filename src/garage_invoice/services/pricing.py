from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Union

from garage_invoice.errors import InvalidPriceError


_NON_NUMERIC_RE = re.compile(r"[^0-9.]")


def parse_price(price: Union[int, float, str]) -> float:
    """Convert a listing price to a number.

    Numbers pass through unchanged. Text is stripped of everything except
    digits and dots ("$12,345.67" -> 12345.67); text with nothing numeric
    left, more than one dot, or too many digits to be finite raises
    ``InvalidPriceError``.
    """
    if isinstance(price, (int, float)) and not isinstance(price, bool):
        try:
            finite = math.isfinite(price)
        except OverflowError:
            finite = False
        if not finite:
            raise InvalidPriceError(f"Invalid price format: {price!r}")
        return price
    if not isinstance(price, str):
        raise InvalidPriceError(f"Invalid price format: {price!r}")
    cleaned = _NON_NUMERIC_RE.sub("", price)
    try:
        value = float(cleaned)
    except ValueError:
        raise InvalidPriceError(f"Invalid price format: {price!r}") from None
    if not math.isfinite(value):
        raise InvalidPriceError(f"Invalid price format: {price!r}")
    return value


def format_usd(amount: float) -> str:
    """Format ``amount`` like ``$12,345.67`` (negatives as ``-$5.00``)."""
    value = Decimal(str(amount))
    # default 28-digit context overflows on very large amounts
    ctx = Context(prec=max(28, value.adjusted() + 3))
    value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP, context=ctx)
    sign = "-" if value < 0 else ""
    return f"{sign}${value.copy_abs():,.2f}"
