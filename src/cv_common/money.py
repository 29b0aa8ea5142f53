"""Integer arithmetic for money stored in minor units (cents / kobo).

Amounts are int everywhere; Decimal is used only transiently where a
percentage has to be applied and rounded back to whole minor units.
"""

from decimal import ROUND_HALF_UP, Decimal


def cents_to_display(cents: int, currency: str = "NGN") -> str:
    """6500 -> 'NGN 65.00', -1200 -> '-NGN 12.00'."""
    sign = "-" if cents < 0 else ""
    abs_cents = abs(cents)
    return f"{sign}{currency} {abs_cents // 100:,}.{abs_cents % 100:02d}"


def percentage_of(amount_cents: int, percentage: float | Decimal) -> int:
    """amount * pct / 100, rounded half-up to whole minor units."""
    if amount_cents == 0 or percentage == 0:
        return 0
    value = Decimal(amount_cents) * Decimal(str(percentage)) / Decimal(100)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
