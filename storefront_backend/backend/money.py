# backend/money.py

from decimal import ROUND_HALF_UP, Decimal

TWOPLACES = Decimal("0.01")


def money(v) -> Decimal:
    """Round for reporting. Intermediate pricing math stays unrounded."""
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(cents) -> Decimal:
    return money(Decimal(int(cents)) / 100)
