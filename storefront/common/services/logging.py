import json
import sys
from datetime import datetime, timezone


_LEVELS = {"debug": 10, "info": 20, "warning": 30, "error": 40, "critical": 50}
_threshold = _LEVELS["info"]


def set_level(level: str) -> None:
    global _threshold
    key = (level or "info").strip().lower()
    if key not in _LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    _threshold = _LEVELS[key]


def log_event(level: str, event: str, **fields) -> None:
    if _LEVELS.get(level.lower(), _LEVELS["info"]) < _threshold:
        return
    payload = {
        "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
        "level": level.lower(),
        "event": event,
    }
    payload.update(fields or {})
    try:
        sys.stdout.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
    except (OSError, ValueError):
        # stdout closed or unwritable; logging must never break a request
        pass
