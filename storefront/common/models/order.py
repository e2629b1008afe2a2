from sqlalchemy import Column, DateTime, ForeignKey, JSON, Numeric, String, Text, func
from sqlalchemy.orm import relationship
from .base import Base


ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled", "refunded")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")
CANCELLABLE_STATUSES = ("pending", "processing")


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    order_number = Column(String(50), nullable=False, unique=True)
    status = Column(String(32), nullable=False, default="pending")
    payment_status = Column(String(32), nullable=False, default="pending")
    payment_method = Column(String(50), nullable=True)
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    shipping = Column(Numeric(10, 2), nullable=False, default=0)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)
    shipping_address = Column(JSON, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # 訂單明細，隨訂單一併建立與刪除
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.product_name",
    )
