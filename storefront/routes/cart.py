"""購物車 API 路由。"""

from __future__ import annotations

from flask import Blueprint, current_app, request

from .guards import current_user, login_required
from .responses import ok


cart_bp = Blueprint("storefront_cart", __name__, url_prefix="/api/cart")


def _cart_service():
    return current_app.extensions["storefront_components"]["cart_service"]


@cart_bp.get("")
@login_required
def get_cart():
    return ok(_cart_service().get_cart(user_id=current_user()["id"]))


@cart_bp.post("/add")
@login_required
def add_to_cart():
    payload = request.get_json(silent=True) or {}
    _cart_service().add_item(
        user_id=current_user()["id"],
        product_id=payload.get("productId"),
        quantity=payload.get("quantity", 1),
    )
    return ok(message="Added to cart")


@cart_bp.put("/<item_id>")
@login_required
def update_cart_item(item_id: str):
    payload = request.get_json(silent=True) or {}
    _cart_service().update_item(
        user_id=current_user()["id"],
        item_id=item_id,
        quantity=payload.get("quantity"),
    )
    return ok(message="Cart updated")


@cart_bp.delete("/<item_id>")
@login_required
def remove_cart_item(item_id: str):
    _cart_service().remove_item(user_id=current_user()["id"], item_id=item_id)
    return ok(message="Item removed from cart")


@cart_bp.delete("")
@login_required
def clear_cart():
    _cart_service().clear_cart(user_id=current_user()["id"])
    return ok(message="Cart cleared")
