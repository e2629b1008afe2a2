"""Bearer token 驗證與管理者權限檢查。"""

from __future__ import annotations

from functools import wraps

from flask import current_app, g, request

from ..common.auth import bearer_token, decode_token
from ..common.errors import Forbidden, Unauthorized
from ..common.models.user import User


def _load_user(user_id: str) -> dict:
    database = current_app.extensions["storefront_components"]["database"]
    with database.session() as session:
        user = session.get(User, user_id)
        if user is None:
            raise Unauthorized("User not found")
        return {"id": user.id, "role": user.role}


def current_user() -> dict:
    return g.current_user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token(request.headers.get("Authorization"))
        user_id = decode_token(token, current_app.config["STORE_CONFIG"].secret_key)
        g.current_user = _load_user(user_id)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    @login_required
    def wrapper(*args, **kwargs):
        if g.current_user["role"] != "admin":
            raise Forbidden("Admin access required")
        return view(*args, **kwargs)

    return wrapper
