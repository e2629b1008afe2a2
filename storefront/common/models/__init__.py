from .base import Base
from .cart_item import CartItem
from .order import CANCELLABLE_STATUSES, ORDER_STATUSES, PAYMENT_STATUSES, Order
from .order_item import OrderItem
from .product import Product
from .user import User

__all__ = [
    "Base",
    "CartItem",
    "Order",
    "OrderItem",
    "Product",
    "User",
    "ORDER_STATUSES",
    "PAYMENT_STATUSES",
    "CANCELLABLE_STATUSES",
]
