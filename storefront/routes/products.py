"""商品目錄 API 路由。"""

from __future__ import annotations

from flask import Blueprint, current_app, request

from .guards import admin_required
from .responses import ok


products_bp = Blueprint("storefront_products", __name__, url_prefix="/api/products")

EDITABLE_FIELDS = ("name", "description", "price", "thumbnail", "stock", "active")


def _catalog():
    return current_app.extensions["storefront_components"]["catalog_service"]


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


@products_bp.get("")
def list_products():
    data = _catalog().list_products(
        search=request.args.get("search") or None,
        min_price=request.args.get("minPrice"),
        max_price=request.args.get("maxPrice"),
        sort=request.args.get("sort", "newest"),
        page=_int_arg("page", 1),
        limit=_int_arg("limit", 12),
    )
    return ok(data)


@products_bp.get("/<slug_or_id>")
def get_product(slug_or_id: str):
    return ok(_catalog().get_product(slug_or_id))


@products_bp.post("")
@admin_required
def create_product():
    payload = request.get_json(silent=True) or {}
    product = _catalog().create_product(
        name=payload.get("name"),
        price=payload.get("price"),
        description=payload.get("description"),
        thumbnail=payload.get("thumbnail"),
        stock=payload.get("stock", 0),
    )
    return ok(product, status=201)


@products_bp.put("/<product_id>")
@admin_required
def update_product(product_id: str):
    payload = request.get_json(silent=True) or {}
    fields = {k: payload[k] for k in EDITABLE_FIELDS if k in payload}
    return ok(_catalog().update_product(product_id, fields))


@products_bp.delete("/<product_id>")
@admin_required
def delete_product(product_id: str):
    _catalog().delete_product(product_id)
    return ok(message="Product deleted")
