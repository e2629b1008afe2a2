import secrets
import time
from typing import Optional


_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be >= 0")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_order_number(now_ms: Optional[int] = None, suffix_length: int = 6) -> str:
    """Human readable order number, e.g. ``ORD-LZ3K9Q2A-7F1XQ0``.

    Unique only with high probability; callers check for collisions.
    """
    ts = int(time.time() * 1000) if now_ms is None else now_ms
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(suffix_length))
    return f"ORD-{to_base36(ts)}-{suffix}"
