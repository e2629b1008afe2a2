"""訂單 API 路由。"""

from __future__ import annotations

from flask import Blueprint, current_app, request

from .guards import admin_required, current_user, login_required
from .responses import ok


orders_bp = Blueprint("storefront_orders", __name__, url_prefix="/api/orders")


def _order_service():
    return current_app.extensions["storefront_components"]["order_service"]


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


@orders_bp.get("")
@login_required
def list_orders():
    user = current_user()
    data = _order_service().list_orders(
        user_id=user["id"],
        is_admin=user["role"] == "admin",
        page=_int_arg("page", 1),
        limit=_int_arg("limit", 10),
    )
    return ok(data)


@orders_bp.get("/<order_id>")
@login_required
def get_order(order_id: str):
    user = current_user()
    return ok(_order_service().get_order(order_id=order_id, user_id=user["id"], is_admin=user["role"] == "admin"))


@orders_bp.post("")
@login_required
def create_order():
    payload = request.get_json(silent=True) or {}
    order = _order_service().place_order(
        user_id=current_user()["id"],
        shipping_address=payload.get("shippingAddress"),
        payment_method=payload.get("paymentMethod"),
        notes=payload.get("notes"),
    )
    return ok(order, status=201)


@orders_bp.put("/<order_id>/status")
@admin_required
def update_order_status(order_id: str):
    payload = request.get_json(silent=True) or {}
    order = _order_service().update_status(
        order_id=order_id,
        status=payload.get("status"),
        payment_status=payload.get("paymentStatus"),
    )
    return ok(order)


@orders_bp.post("/<order_id>/cancel")
@login_required
def cancel_order(order_id: str):
    user = current_user()
    order = _order_service().cancel_order(
        order_id=order_id,
        user_id=user["id"],
        is_admin=user["role"] == "admin",
    )
    return ok(order)
