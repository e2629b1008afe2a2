from typing import Any, Dict, Iterable, Optional

from .money import format_money


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def to_product_dto(row: Any) -> Dict:
    return {
        "id": getattr(row, "id", None),
        "name": getattr(row, "name", None),
        "slug": getattr(row, "slug", None),
        "description": getattr(row, "description", None),
        "price": format_money(getattr(row, "price", 0) or 0),
        "thumbnail": getattr(row, "thumbnail", None),
        "stock": getattr(row, "stock", 0) or 0,
        "active": bool(getattr(row, "active", True)),
        "createdAt": _iso(getattr(row, "created_at", None)),
        "updatedAt": _iso(getattr(row, "updated_at", None)),
    }


def to_cart_product_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "name": row.name,
        "slug": row.slug,
        "price": format_money(row.price),
        "thumbnail": row.thumbnail,
        "stock": row.stock,
    }


def to_order_item_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "orderId": row.order_id,
        "productId": row.product_id,
        "productName": row.product_name,
        "productImage": row.product_image,
        "price": format_money(row.price),
        "quantity": row.quantity,
        "total": format_money(row.total),
    }


def to_order_dto(row: Any, items: Optional[Iterable[Any]] = None) -> Dict:
    data = {
        "id": row.id,
        "userId": row.user_id,
        "orderNumber": row.order_number,
        "status": row.status,
        "paymentStatus": row.payment_status,
        "paymentMethod": row.payment_method,
        "subtotal": format_money(row.subtotal),
        "tax": format_money(row.tax),
        "shipping": format_money(row.shipping),
        "discount": format_money(row.discount),
        "total": format_money(row.total),
        "shippingAddress": row.shipping_address,
        "notes": row.notes,
        "createdAt": _iso(row.created_at),
        "updatedAt": _iso(row.updated_at),
    }
    if items is not None:
        data["items"] = [to_order_item_dto(it) for it in items]
    return data
