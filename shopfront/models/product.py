"""Product catalogue model"""

from sqlalchemy import Column, String, Text, Numeric, Integer, Boolean, Float, JSON, Uuid, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel

PRODUCT_CATEGORIES = (
    "T-Shirts", "Shirts", "Jeans", "Jackets", "Hoodies", "Basics", "Outerwear",
    "Denim", "Women", "Men", "Accessories", "Kids", "Electronics", "Sports",
    "Home", "Beauty", "Books", "Clothing", "Dresses", "Tops", "Overalls",
)
PRODUCT_GENDERS = ("Men", "Women", "Children", "Unisex")
PRODUCT_SIZES = ("XS", "S", "M", "L", "XL", "XXL")

class Product(BaseModel):
    """Catalogue product"""

    __tablename__ = "products"

    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, default=10, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    gender = Column(String(20), nullable=True)

    # Media
    image = Column(String(500), nullable=False, default="")
    images = Column(JSON, default=list)

    sizes = Column(JSON, default=lambda: list(PRODUCT_SIZES))
    material = Column(String(100), default="Premium Cotton Blend")
    tags = Column(JSON, default=list)

    featured = Column(Boolean, default=False, nullable=False, index=True)
    is_new_arrival = Column(Boolean, default=False, nullable=False)

    # Mean of all review ratings, 0 when there are none
    rating = Column(Float, default=0.0, nullable=False)

    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    reviews = relationship("Review", back_populates="product", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_product_price_non_negative"),
        CheckConstraint("stock >= 0", name="check_product_stock_non_negative"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="check_product_rating_range"),
        Index("idx_products_category_featured", "category", "featured"),
    )
