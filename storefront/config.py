"""商店後端設定模組。"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Optional


# 可由 settings 檔覆寫的鍵；密鑰與資料庫位置只接受環境變數
FILE_OVERRIDABLE_KEYS = {"LOG_LEVEL", "TAX_RATE", "FREE_SHIPPING_THRESHOLD", "FLAT_SHIPPING_FEE"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _decimal(value: str, key: str) -> Decimal:
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"{key} must be a decimal number, got {value!r}")
    if not number.is_finite() or number < 0:
        raise ValueError(f"{key} must be >= 0, got {value!r}")
    return number


def _load_settings_file(path: Optional[Path]) -> Dict[str, str]:
    if path is None or not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return {k: v for k, v in data.items() if k in FILE_OVERRIDABLE_KEYS}


@dataclass
class StoreConfig:
    """封裝商店後端的設定值。"""

    database_url: str
    secret_key: str
    log_level: str
    tax_rate: Decimal
    free_shipping_threshold: Decimal
    flat_shipping_fee: Decimal
    host: str = "0.0.0.0"
    port: int = 3002

    @classmethod
    def load(cls, environ: Optional[Dict[str, str]] = None) -> "StoreConfig":
        """從環境變數建構設定；若有 STORE_SETTINGS_FILE，其內容優先。"""

        env = os.environ if environ is None else environ
        settings_path = env.get("STORE_SETTINGS_FILE")
        s = _load_settings_file(Path(settings_path) if settings_path else None)

        def pick(key: str, default: str) -> str:
            value = s.get(key)
            if value is None or value == "":
                value = env.get(key) or default
            return str(value)

        log_level = pick("LOG_LEVEL", "INFO").upper()
        if log_level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}, got {log_level!r}")
        tax_rate = _decimal(pick("TAX_RATE", "0.10"), "TAX_RATE")
        if tax_rate > 1:
            raise ValueError(f"TAX_RATE must be a fraction between 0 and 1, got {tax_rate}")
        port = env.get("PORT") or "3002"
        if not port.isdigit():
            raise ValueError(f"PORT must be an integer, got {port!r}")

        return cls(
            database_url=env.get("DATABASE_URL") or "sqlite:///data/storefront.db",
            secret_key=env.get("SECRET_KEY") or "dev_secret",
            log_level=log_level,
            tax_rate=tax_rate,
            free_shipping_threshold=_decimal(pick("FREE_SHIPPING_THRESHOLD", "100"), "FREE_SHIPPING_THRESHOLD"),
            flat_shipping_fee=_decimal(pick("FLAT_SHIPPING_FEE", "10"), "FLAT_SHIPPING_FEE"),
            host=env.get("HOST") or "0.0.0.0",
            port=int(port),
        )
