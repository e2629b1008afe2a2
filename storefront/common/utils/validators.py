from typing import Any, Dict, Optional

from ..errors import ValidationError


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit() or (text[:1] == "-" and text[1:].isdigit()):
            return int(text)
    return None


def ensure_positive_int(value: Any, field: str) -> int:
    number = _as_int(value)
    if number is None or number < 1:
        raise ValidationError(f"{field} must be an integer >= 1")
    return number


def ensure_non_negative_int(value: Any, field: str) -> int:
    number = _as_int(value)
    if number is None or number < 0:
        raise ValidationError(f"{field} must be >= 0")
    return number


def ensure_text(value: Any, field: str) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError(f"{field} is required")
    return text


def optional_text(value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value.strip() or None


ADDRESS_REQUIRED = ("name", "email", "street", "city", "postalCode", "country")
ADDRESS_OPTIONAL = ("phone", "state")


def normalize_shipping_address(value: Any) -> Dict[str, Optional[str]]:
    if not isinstance(value, dict):
        raise ValidationError("Shipping address and payment method are required")
    raw = dict(value)
    # storefront checkout form posts the street line as "address"
    if not raw.get("street") and raw.get("address"):
        raw["street"] = raw["address"]
    missing = [k for k in ADDRESS_REQUIRED if not isinstance(raw.get(k), str) or not raw[k].strip()]
    if missing:
        raise ValidationError(f"Shipping address is missing: {', '.join(missing)}")
    if "@" not in raw["email"]:
        raise ValidationError("Shipping address email is invalid")
    address = {k: raw[k].strip() for k in ADDRESS_REQUIRED}
    for k in ADDRESS_OPTIONAL:
        address[k] = optional_text(raw.get(k), k)
    return address
