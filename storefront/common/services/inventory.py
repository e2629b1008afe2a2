from sqlalchemy import func

from ..errors import ValidationError
from ..models.product import Product


class InventoryLedger:
    """Stock adjustments bound to a caller-owned transaction.

    The ledger never commits; the session's owner decides whether the
    adjustments persist together with the rest of its writes.
    """

    def __init__(self, session):
        self._session = session

    @staticmethod
    def _check_quantity(quantity: int) -> int:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("quantity must be an integer >= 1")
        return quantity

    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Take ``quantity`` units out of stock.

        Single conditional UPDATE; returns False (and changes nothing) when
        the product is gone or has fewer than ``quantity`` units at write time.
        """
        qty = self._check_quantity(quantity)
        affected = (
            self._session.query(Product)
            .filter(Product.id == product_id, Product.stock >= qty)
            .update(
                {Product.stock: Product.stock - qty, Product.updated_at: func.now()},
                synchronize_session=False,
            )
        )
        return affected == 1

    def increment_stock(self, product_id: str, quantity: int) -> bool:
        qty = self._check_quantity(quantity)
        affected = (
            self._session.query(Product)
            .filter(Product.id == product_id)
            .update(
                {Product.stock: Product.stock + qty, Product.updated_at: func.now()},
                synchronize_session=False,
            )
        )
        return affected == 1
