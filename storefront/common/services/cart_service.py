from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from ..errors import InsufficientStock, NotFound, ValidationError
from ..models.cart_item import CartItem
from ..models.product import Product
from ..utils.dto import to_cart_product_dto
from ..utils.money import format_money
from ..utils.validators import ensure_positive_int
from .logging import log_event


def load_cart_lines(session, user_id: str) -> List[Tuple[CartItem, Optional[Product]]]:
    """Cart rows for ``user_id`` outer-joined with their current product.

    The product half of a pair is None when the row no longer exists.
    """
    rows = (
        session.query(CartItem, Product)
        .outerjoin(Product, Product.id == CartItem.product_id)
        .filter(CartItem.user_id == user_id)
        .order_by(CartItem.created_at, CartItem.id)
        .all()
    )
    return [(item, product) for item, product in rows]


def clear_cart_lines(session, user_id: str) -> int:
    return (
        session.query(CartItem)
        .filter(CartItem.user_id == user_id)
        .delete(synchronize_session=False)
    )


class CartService:
    """Cart operations backed by DB."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def get_cart(self, *, user_id: str) -> Dict:
        with self._session_factory() as session:
            items = []
            subtotal = Decimal("0")
            for it, prod in load_cart_lines(session, user_id):
                if prod is None or not prod.active:
                    continue
                subtotal += Decimal(prod.price) * it.quantity
                items.append(
                    {
                        "id": it.id,
                        "productId": it.product_id,
                        "quantity": it.quantity,
                        "product": to_cart_product_dto(prod),
                    }
                )
            return {
                "items": items,
                "subtotal": format_money(subtotal),
                "itemCount": sum(it["quantity"] for it in items),
            }

    def add_item(self, *, user_id: str, product_id, quantity=1) -> Dict:
        if product_id is None or product_id == "" or isinstance(product_id, bool):
            raise ValidationError("Product ID is required")
        product_id = str(product_id)
        qnty = ensure_positive_int(1 if quantity is None else quantity, "quantity")
        try:
            result = self._add_line(user_id, product_id, qnty)
        except IntegrityError:
            # a concurrent add inserted the same line first; merge into it
            result = self._add_line(user_id, product_id, qnty)
        log_event("debug", "cart.item_added", user_id=user_id, product_id=product_id, quantity=qnty)
        return result

    @staticmethod
    def _existing_line(session, user_id: str, product_id: str) -> Optional[CartItem]:
        return (
            session.query(CartItem)
            .filter(CartItem.user_id == user_id, CartItem.product_id == product_id)
            .first()
        )

    def _add_line(self, user_id: str, product_id: str, qnty: int) -> Dict:
        with self._session_factory() as session:
            prod = (
                session.query(Product)
                .filter(Product.id == product_id, Product.active.is_(True))
                .first()
            )
            if not prod:
                raise NotFound("Product not found")
            if qnty > prod.stock:
                raise InsufficientStock(prod.name)

            existing = self._existing_line(session, user_id, product_id)
            if existing:
                new_q = existing.quantity + qnty
                if new_q > prod.stock:
                    raise InsufficientStock(prod.name)
                existing.quantity = new_q
                item_id = existing.id
            else:
                item = CartItem(id=str(uuid4()), user_id=user_id, product_id=product_id, quantity=qnty)
                session.add(item)
                item_id = item.id
            session.flush()
            return {"status": "added", "item_id": item_id}

    def update_item(self, *, user_id: str, item_id: str, quantity) -> Dict:
        qnty = ensure_positive_int(quantity, "quantity")
        with self._session_factory() as session:
            it = (
                session.query(CartItem)
                .filter(CartItem.id == item_id, CartItem.user_id == user_id)
                .first()
            )
            if not it:
                raise NotFound("Cart item not found")
            prod = session.get(Product, it.product_id)
            if prod is not None and qnty > prod.stock:
                raise InsufficientStock(prod.name)
            it.quantity = qnty
            session.flush()
            return {"status": "updated", "item_id": item_id}

    def remove_item(self, *, user_id: str, item_id: str) -> None:
        with self._session_factory() as session:
            (
                session.query(CartItem)
                .filter(CartItem.id == item_id, CartItem.user_id == user_id)
                .delete(synchronize_session=False)
            )
        return None

    def clear_cart(self, *, user_id: str) -> None:
        with self._session_factory() as session:
            clear_cart_lines(session, user_id)
        return None
