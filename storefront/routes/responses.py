"""統一的 JSON 回應格式：{success, data?, error?, message?}。"""

from __future__ import annotations

from typing import Any, Optional

from flask import jsonify


def ok(data: Any = None, status: int = 200, message: Optional[str] = None):
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return jsonify(body), status


def fail(error: str, status: int = 400):
    return jsonify({"success": False, "error": error}), status
