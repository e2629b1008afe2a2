from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Coerce ``value`` to a Decimal with exactly two fractional digits."""
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, float):
        # go through str so 0.1 stays 0.1 instead of its binary expansion
        d = Decimal(str(value))
    else:
        try:
            d = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {value!r}")
    if not d.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return d.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> str:
    return str(to_money(value if value is not None else 0))
