"""
pt-BR number and currency formatting.

Prices arrive as agent-typed strings ("350.000,00", "R$ 1.200", "350000")
and areas as numbers or pt-BR decimal strings. Output matches what a browser
renders for the pt-BR locale: "." for thousands, "," for decimals and
"R$" followed by a non-breaking space for BRL.
"""
from __future__ import annotations

import logging
import math
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional, Union

log = logging.getLogger("listing.formatting")

Number = Union[int, float]

NBSP = "\u00a0"
_CURRENCY_MARK = re.compile(r"R\$\s*")
# Longest leading float literal, the way JavaScript's parseFloat reads it.
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_float_prefix(text: str) -> Optional[float]:
    """Read the leading float of `text`; trailing garbage is ignored. None if there is none."""
    m = _FLOAT_PREFIX.match(text.strip())
    if not m:
        return None
    value = float(m.group(0))
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_decimal(text: str) -> Optional[float]:
    """pt-BR decimal string ("1.200,5") to float (1200.5)."""
    return parse_float_prefix(str(text).replace(".", "").replace(",", ".", 1))


def parse_brl(value: str) -> Optional[float]:
    """
    Parse a typed price. Every "R$" marker is removed, then thousands dots,
    then the first comma becomes the decimal point.
    """
    s = _CURRENCY_MARK.sub("", str(value)).strip()
    return parse_decimal(s)


def _format_decimal(value: Number, *, min_frac: int, max_frac: int) -> str:
    d = Decimal(str(value))
    # default context holds 28 digits; widen it so 1e40 quantizes instead of raising
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, d.adjusted() + max_frac + 2)
        d = d.quantize(Decimal(1).scaleb(-max_frac), rounding=ROUND_HALF_UP)
    sign = "-" if d < 0 else ""
    int_part, _, frac = f"{d.copy_abs():f}".partition(".")
    frac = frac.rstrip("0").ljust(min_frac, "0")
    grouped = f"{int(int_part):,}".replace(",", ".")
    return sign + (f"{grouped},{frac}" if frac else grouped)


def format_number(value: Union[Number, str, None]) -> str:
    """
    pt-BR grouping, no forced decimals, at most three fraction digits.
    Unset renders as "0"; an unparseable string is returned unchanged.
    """
    if value is None or value == "":
        return "0"
    if _is_number(value):
        if math.isnan(value) or math.isinf(value):
            return str(value)
        return _format_decimal(value, min_frac=0, max_frac=3)
    parsed = parse_decimal(value)
    if parsed is None:
        return str(value)
    return _format_decimal(parsed, min_frac=0, max_frac=3)


def format_brl(value: Union[Number, str]) -> str:
    """
    "350.000,00" -> "R$ 350.000,00" (non-breaking space after R$).

    A price that cannot be read as a number is passed through unchanged so the
    description can still be produced; it is logged so it does not go unseen.
    """
    amount = float(value) if _is_number(value) else parse_brl(value)
    if amount is None or math.isnan(amount) or math.isinf(amount):
        log.warning("Price %r is not numeric; keeping it as typed", value)
        return value if isinstance(value, str) else str(value)
    body = _format_decimal(amount, min_frac=2, max_frac=2)
    if body.startswith("-"):
        return f"-R${NBSP}{body[1:]}"
    return f"R${NBSP}{body}"
