"""
Shopping cart model
One cart per user with snapshotted line items
"""

from sqlalchemy import Column, String, Integer, Numeric, Uuid, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel

class Cart(BaseModel):
    """A user's cart, guarded by an optimistic version counter"""

    __tablename__ = "carts"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    version = Column(Integer, nullable=False)

    # Relationships
    user = relationship("User", back_populates="cart")
    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CartItem.created_at",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total(self):
        return sum((item.line_total for item in self.items), start=0)

class CartItem(BaseModel):
    """Cart line with a snapshot of the product at add time"""

    __tablename__ = "cart_items"

    cart_id = Column(Uuid(as_uuid=True), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    # Plain reference, the snapshot outlives a deleted product
    product_id = Column(Uuid(as_uuid=True), nullable=False)

    # Snapshot
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=False, default="")
    category = Column(String(50), nullable=True)

    quantity = Column(Integer, nullable=False, default=1)
    size = Column(String(5), nullable=False, default="M")

    # Relationships
    cart = relationship("Cart", back_populates="items")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", "size", name="uq_cart_product_size"),
        CheckConstraint("quantity > 0", name="check_positive_cart_quantity"),
    )

    @property
    def line_total(self):
        return self.price * self.quantity
