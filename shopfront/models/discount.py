"""
Discount and coupon model
Promotions are stored and managed but never applied to order totals
"""

from sqlalchemy import Column, String, Integer, Numeric, Boolean, Uuid, ForeignKey, Index, CheckConstraint, Text, DateTime, JSON
import enum

from .base import BaseModel, utcnow

class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"

class Discount(BaseModel):
    """Time-bounded, usage-capped promotion"""

    __tablename__ = "discounts"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    discount_type = Column(String(20), nullable=False, default=DiscountType.PERCENTAGE.value)
    discount_value = Column(Numeric(10, 2), nullable=False)

    # Applicability
    applicable_products = Column(JSON, default=list)
    applicable_categories = Column(JSON, default=list)
    min_purchase_amount = Column(Numeric(10, 2), default=0, nullable=False)
    max_discount_amount = Column(Numeric(10, 2), nullable=True)

    # Validity
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)

    # Usage limits, NULL usage_limit means unlimited
    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, default=0, nullable=False)
    per_user_limit = Column(Integer, default=1, nullable=False)

    coupon_code = Column(String(50), unique=True, nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)

    __table_args__ = (
        CheckConstraint("discount_value >= 0", name="check_non_negative_discount"),
        CheckConstraint(
            "usage_limit IS NULL OR usage_count <= usage_limit",
            name="check_usage_within_limit"
        ),
        Index("idx_discounts_active_window", "is_active", "start_date", "end_date"),
    )

    def is_valid(self, at=None) -> bool:
        """Active, inside its date window and under its usage cap"""
        now = at or utcnow()
        start, end = self.start_date, self.end_date
        # SQLite hands back naive datetimes
        if start is not None and start.tzinfo is None:
            now = now.replace(tzinfo=None)

        if not self.is_active:
            return False
        if start and now < start:
            return False
        if end and now > end:
            return False
        if self.usage_limit is not None and self.usage_count >= self.usage_limit:
            return False
        return True
