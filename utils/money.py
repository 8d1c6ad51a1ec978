"""
Money helpers: a single rounding policy and INR display formatting.

Calculations carry full float precision; rounding to the minor currency unit
happens only when totals are aggregated or amounts are displayed.
"""

from decimal import ROUND_HALF_UP, Decimal

MINOR_UNIT = Decimal("0.01")


def round_money(amount: float) -> float:
    """Round to 2 decimals, half away from zero."""
    return float(Decimal(str(amount)).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP))


def _group_indian(integer_part: str) -> str:
    # Last three digits, then groups of two (lakh/crore style).
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency(amount: float, currency: str = "₹") -> str:
    """
    Format an amount for display, e.g. 1143.38 -> "₹1,143.38",
    1234567.5 -> "₹12,34,567.50".
    """
    rounded = Decimal(str(round_money(amount))).quantize(MINOR_UNIT)
    sign = "-" if rounded < 0 else ""
    integer_part, fraction = f"{abs(rounded):.2f}".split(".")
    return f"{sign}{currency}{_group_indian(integer_part)}.{fraction}"
