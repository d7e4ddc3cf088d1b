from decimal import Decimal, ROUND_HALF_EVEN

CENT = Decimal("0.01")
ZERO = Decimal("0")


def D(x) -> Decimal:
    if x is None:
        return ZERO
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))


def money2(x) -> Decimal:
    """Quantize to paise with banker's rounding. Stored totals always go through here."""
    return D(x).quantize(CENT, rounding=ROUND_HALF_EVEN)
