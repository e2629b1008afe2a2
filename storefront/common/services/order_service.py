from decimal import Decimal
from typing import Callable, Dict, Iterable, Optional, Tuple
from uuid import uuid4

from sqlalchemy.orm import selectinload

from ..errors import (
    EmptyCart,
    InsufficientStock,
    InvalidState,
    NotFound,
    ProductMissing,
    StoreError,
    ValidationError,
)
from ..models.order import CANCELLABLE_STATUSES, ORDER_STATUSES, PAYMENT_STATUSES, Order
from ..models.order_item import OrderItem
from ..utils.dto import to_order_dto
from ..utils.money import to_money
from ..utils.order_number import generate_order_number
from ..utils.pagination import normalize_paging, total_pages
from ..utils.validators import normalize_shipping_address, optional_text
from .cart_service import clear_cart_lines, load_cart_lines
from .inventory import InventoryLedger
from .logging import log_event


ORDER_NUMBER_ATTEMPTS = 5

# pending -> processing -> shipped -> delivered; cancel only early; refund from anywhere
STATUS_TRANSITIONS = {
    "pending": {"processing", "cancelled", "refunded"},
    "processing": {"shipped", "cancelled", "refunded"},
    "shipped": {"delivered", "refunded"},
    "delivered": {"refunded"},
    "cancelled": {"refunded"},
    "refunded": set(),
}


class OrderService:
    """Order placement, cancellation and retrieval backed by DB.

    Placement and cancellation each run inside a single session scope, so
    every write they make (order rows, stock adjustments, cart clearing)
    commits or rolls back together.
    """

    def __init__(
        self,
        session_factory,
        *,
        tax_rate: Decimal = Decimal("0.10"),
        free_shipping_threshold: Decimal = Decimal("100"),
        flat_shipping_fee: Decimal = Decimal("10"),
        order_number_factory: Callable[[], str] = generate_order_number,
    ):
        self._session_factory = session_factory
        self.tax_rate = Decimal(tax_rate)
        self.free_shipping_threshold = to_money(free_shipping_threshold)
        self.flat_shipping_fee = to_money(flat_shipping_fee)
        self._order_number_factory = order_number_factory

    def compute_totals(self, lines: Iterable[Tuple[Decimal, int]]) -> Dict[str, Decimal]:
        """Price (unit_price, quantity) pairs into subtotal/tax/shipping/discount/total."""
        subtotal = to_money(sum((to_money(price) * qty for price, qty in lines), Decimal("0")))
        tax = to_money(subtotal * self.tax_rate)
        shipping = Decimal("0.00") if subtotal > self.free_shipping_threshold else self.flat_shipping_fee
        discount = Decimal("0.00")
        total = to_money(subtotal + tax + shipping - discount)
        return {"subtotal": subtotal, "tax": tax, "shipping": shipping, "discount": discount, "total": total}

    def _reserve_order_number(self, session) -> str:
        for _ in range(ORDER_NUMBER_ATTEMPTS):
            candidate = self._order_number_factory()
            taken = session.query(Order.id).filter(Order.order_number == candidate).first()
            if not taken:
                return candidate
        raise RuntimeError("could not allocate a unique order number")

    def place_order(
        self,
        *,
        user_id: str,
        shipping_address: Optional[dict],
        payment_method: Optional[str],
        notes: Optional[str] = None,
    ) -> Dict:
        """Turn the user's cart into a pending order."""
        if not shipping_address or not isinstance(payment_method, str) or not payment_method.strip():
            raise ValidationError("Shipping address and payment method are required")
        address = normalize_shipping_address(shipping_address)
        note = optional_text(notes, "notes")

        try:
            with self._session_factory() as session:
                lines = load_cart_lines(session, user_id)
                if not lines:
                    raise EmptyCart()

                # validate every line before the first write
                for item, product in lines:
                    if product is None or not product.active:
                        raise ProductMissing()
                    if product.stock < item.quantity:
                        raise InsufficientStock(product.name)

                totals = self.compute_totals((product.price, item.quantity) for item, product in lines)
                order = Order(
                    id=str(uuid4()),
                    user_id=user_id,
                    order_number=self._reserve_order_number(session),
                    status="pending",
                    payment_status="pending",
                    payment_method=payment_method.strip(),
                    shipping_address=address,
                    notes=note,
                    **totals,
                )
                for item, product in lines:
                    unit_price = to_money(product.price)
                    order.items.append(
                        OrderItem(
                            id=str(uuid4()),
                            product_id=product.id,
                            product_name=product.name,
                            product_image=product.thumbnail,
                            price=unit_price,
                            quantity=item.quantity,
                            total=to_money(unit_price * item.quantity),
                        )
                    )
                session.add(order)
                session.flush()

                ledger = InventoryLedger(session)
                for item, product in lines:
                    if not ledger.decrement_stock(product.id, item.quantity):
                        # another checkout took the stock after validation
                        raise InsufficientStock(product.name)

                clear_cart_lines(session, user_id)
                session.flush()
                result = to_order_dto(order, order.items)
        except StoreError as exc:
            log_event("info", "order.rejected", user_id=user_id, reason=str(exc))
            raise

        log_event(
            "info",
            "order.created",
            order_id=result["id"],
            order_number=result["orderNumber"],
            items=len(result["items"]),
            total=result["total"],
        )
        return result

    @staticmethod
    def _find(session, order_id: str, user_id: Optional[str], is_admin: bool) -> Order:
        q = session.query(Order).filter(Order.id == order_id)
        if not is_admin:
            q = q.filter(Order.user_id == user_id)
        order = q.first()
        if not order:
            raise NotFound("Order not found")
        return order

    @staticmethod
    def _cancel(session, order: Order) -> None:
        # flip the status conditionally so two concurrent cancels restock once
        flipped = (
            session.query(Order)
            .filter(Order.id == order.id, Order.status.in_(CANCELLABLE_STATUSES))
            .update({Order.status: "cancelled"}, synchronize_session=False)
        )
        if flipped != 1:
            raise InvalidState("Cannot cancel this order")
        ledger = InventoryLedger(session)
        for item in order.items:
            if item.product_id:
                ledger.increment_stock(item.product_id, item.quantity)
        session.refresh(order)

    def cancel_order(self, *, order_id: str, user_id: Optional[str], is_admin: bool = False) -> Dict:
        with self._session_factory() as session:
            order = self._find(session, order_id, user_id, is_admin)
            self._cancel(session, order)
            result = to_order_dto(order, order.items)
        log_event("info", "order.cancelled", order_id=order_id, by_admin=is_admin)
        return result

    def get_order(self, *, order_id: str, user_id: Optional[str], is_admin: bool = False) -> Dict:
        with self._session_factory() as session:
            order = self._find(session, order_id, user_id, is_admin)
            return to_order_dto(order, order.items)

    def list_orders(self, *, user_id: Optional[str], is_admin: bool = False, page: int = 1, limit: int = 10) -> Dict:
        p, lim = normalize_paging(page, limit)
        with self._session_factory() as session:
            q = session.query(Order)
            if not is_admin:
                q = q.filter(Order.user_id == user_id)
            total = q.count()
            rows = (
                q.options(selectinload(Order.items))
                .order_by(Order.created_at.desc(), Order.order_number.desc())
                .offset((p - 1) * lim)
                .limit(lim)
                .all()
            )
            return {
                "items": [to_order_dto(o, o.items) for o in rows],
                "total": total,
                "page": p,
                "limit": lim,
                "totalPages": total_pages(total, lim),
            }

    def update_status(self, *, order_id: str, status: Optional[str] = None, payment_status: Optional[str] = None) -> Dict:
        """Admin status change; moving to ``cancelled`` restores stock."""
        if not status and not payment_status:
            raise ValidationError("status or paymentStatus is required")
        if status and status not in ORDER_STATUSES:
            raise ValidationError(f"Invalid status: {status}")
        if payment_status and payment_status not in PAYMENT_STATUSES:
            raise ValidationError(f"Invalid payment status: {payment_status}")

        with self._session_factory() as session:
            order = session.get(Order, order_id)
            if not order:
                raise NotFound("Order not found")
            previous = order.status
            if status and status != order.status:
                if status not in STATUS_TRANSITIONS[order.status]:
                    raise InvalidState(f"Cannot change order status from {order.status} to {status}")
                if status == "cancelled":
                    self._cancel(session, order)
                else:
                    order.status = status
            if payment_status:
                order.payment_status = payment_status
            session.flush()
            result = to_order_dto(order, order.items)
        log_event(
            "info",
            "order.status_updated",
            order_id=order_id,
            status_from=previous,
            status_to=result["status"],
            payment_status=result["paymentStatus"],
        )
        return result
