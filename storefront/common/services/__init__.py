from .cart_service import CartService
from .catalog_service import CatalogService
from .inventory import InventoryLedger
from .order_service import OrderService

__all__ = ["CartService", "CatalogService", "InventoryLedger", "OrderService"]
