"""
Product service layer
Public catalogue queries plus the admin write operations
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select
import uuid
import logging

from shopfront.core.event_bus import AdminActionEvent, event_bus
from shopfront.core.exceptions import (
    NotFoundException,
    ValidationException,
    DuplicateResourceException,
)
from shopfront.core.security import Principal
from shopfront.models import Product, AuditAction, AuditEntity, PRODUCT_SIZES
from shopfront.utils.dependencies import RequestContext
from shopfront.utils.pagination import paginate
from shopfront.utils.validators import (
    validate_required,
    validate_category,
    validate_gender,
    validate_size,
    clean_text,
)
from .schemas import PRODUCT_SORTS, ProductResponse, product_changes

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6
DEFAULT_IMAGE = "/images/placeholder.jpg"

SORT_COLUMNS = {
    "price-asc": Product.price.asc(),
    "price-desc": Product.price.desc(),
    "newest": Product.created_at.desc(),
    "rating": Product.rating.desc(),
}

def apply_filters(
    stmt: Select,
    category: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[bool] = None
) -> Select:
    """Category 'All' means no filter, search matches name or description"""
    if category and category != "All":
        stmt = stmt.where(Product.category == category)
    if featured is not None:
        stmt = stmt.where(Product.featured == featured)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
    return stmt

class ProductService:
    """Catalogue service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_product(self, product_id: uuid.UUID) -> Product:
        product = await self.db.get(Product, product_id, populate_existing=True)
        if not product:
            raise NotFoundException("Product not found")
        return product

    async def _ensure_unique_name(self, name: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        stmt = select(Product.id).where(Product.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        if await self.db.scalar(stmt):
            raise DuplicateResourceException("Product", "name", name)

    @staticmethod
    def _check_fields(changes: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and normalise enum-like product fields in place"""
        if "category" in changes:
            checked = validate_category(changes["category"])
            if not checked:
                raise ValidationException(checked.error, field=checked.field)
        if "gender" in changes:
            checked = validate_gender(changes["gender"])
            if not checked:
                raise ValidationException(checked.error, field=checked.field)
        if "sizes" in changes:
            sizes = []
            for size in changes["sizes"]:
                checked = validate_size(size)
                if not checked:
                    raise ValidationException(checked.error, field="sizes")
                if checked.value not in sizes:
                    sizes.append(checked.value)
            changes["sizes"] = sizes
        for field in ("name", "description", "material"):
            if field in changes:
                changes[field] = clean_text(changes[field])
        return changes

    # Public catalogue

    async def list_products(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None
    ) -> List[ProductResponse]:
        """Filtered catalogue; unknown sort keys leave the default order"""
        stmt = apply_filters(select(Product), category=category, search=search)
        if sort in PRODUCT_SORTS:
            stmt = stmt.order_by(SORT_COLUMNS[sort], Product.id)
        else:
            stmt = stmt.order_by(Product.created_at.asc(), Product.id)

        result = await self.db.execute(stmt)
        return [ProductResponse.model_validate(p) for p in result.scalars().all()]

    async def featured(self) -> List[ProductResponse]:
        result = await self.db.execute(
            select(Product)
            .where(Product.featured.is_(True))
            .order_by(Product.created_at.desc())
            .limit(FEATURED_LIMIT)
        )
        return [ProductResponse.model_validate(p) for p in result.scalars().all()]

    async def get_product(self, product_id: uuid.UUID) -> ProductResponse:
        return ProductResponse.model_validate(await self._get_product(product_id))

    # Admin operations

    async def _publish(
        self,
        admin: Principal,
        action: AuditAction,
        product_id: uuid.UUID,
        changes: Dict[str, Any],
        context: Optional[RequestContext]
    ) -> None:
        context = context or RequestContext()
        await event_bus.publish(
            AdminActionEvent(
                admin_id=admin.user_id,
                action=action.value,
                entity=AuditEntity.PRODUCT.value,
                entity_id=product_id,
                changes=changes,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
            )
        )

    async def admin_list(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
        page: int = 1,
        limit: int = 10
    ) -> Dict[str, Any]:
        stmt = apply_filters(select(Product), category=category, search=search, featured=featured)
        stmt = stmt.order_by(Product.created_at.desc(), Product.id)
        result = await paginate(self.db, stmt, page, limit)
        return {
            "products": [ProductResponse.model_validate(p) for p in result["items"]],
            "pagination": result["pagination"],
        }

    async def create_product(
        self,
        admin: Principal,
        data: Dict[str, Any],
        context: Optional[RequestContext] = None
    ) -> ProductResponse:
        """
        Create a catalogue product

        Raises:
            ValidationException: If name, price or category is missing or invalid
            DuplicateResourceException: If the name is taken
        """
        changes = self._check_fields(product_changes(data))

        checked = validate_required(
            name=changes.get("name"), price=changes.get("price"), category=changes.get("category")
        )
        if not checked:
            raise ValidationException("Please provide name, price, and category", field=checked.field)

        await self._ensure_unique_name(changes["name"])

        changes.setdefault("image", DEFAULT_IMAGE)
        changes.setdefault("images", [changes["image"]])
        changes.setdefault("stock", 10)
        changes.setdefault("sizes", list(PRODUCT_SIZES))
        changes.setdefault("description", "")

        product = Product(created_by=admin.user_id, **changes)
        self.db.add(product)
        await self.db.commit()

        logger.info(f"Product {product.id} created by {admin.user_id}")
        await self._publish(admin, AuditAction.CREATE, product.id, {"name": product.name}, context)
        return await self.get_product(product.id)

    async def update_product(
        self,
        admin: Principal,
        product_id: uuid.UUID,
        data: Dict[str, Any],
        context: Optional[RequestContext] = None
    ) -> ProductResponse:
        """Partial update, a new name must stay unique"""
        product = await self._get_product(product_id)
        changes = self._check_fields(product_changes(data))

        if changes.get("name") and changes["name"] != product.name:
            await self._ensure_unique_name(changes["name"], exclude_id=product.id)

        diff = {}
        for field, value in changes.items():
            previous = getattr(product, field)
            if previous != value:
                diff[field] = {"from": previous, "to": value}
                setattr(product, field, value)

        await self.db.commit()

        if diff:
            await self._publish(admin, AuditAction.UPDATE, product.id, diff, context)
        return await self.get_product(product.id)

    async def delete_product(
        self,
        admin: Principal,
        product_id: uuid.UUID,
        context: Optional[RequestContext] = None
    ) -> None:
        """Hard delete, cart and order snapshots keep their copies"""
        product = await self._get_product(product_id)
        name = product.name

        await self.db.delete(product)
        await self.db.commit()

        logger.info(f"Product {product_id} deleted by {admin.user_id}")
        await self._publish(admin, AuditAction.DELETE, product_id, {"name": name}, context)

    async def bulk_update(
        self,
        admin: Principal,
        updates: List[Dict[str, Any]],
        context: Optional[RequestContext] = None
    ) -> List[ProductResponse]:
        """Apply several partial updates; unknown ids are skipped"""
        if not updates:
            raise ValidationException("Provide an array of product updates", field="updates")

        touched: List[Product] = []
        diffs: Dict[str, Any] = {}
        for update in updates:
            update = dict(update)
            product_id = update.pop("id")
            product = await self.db.get(Product, product_id)
            if product is None:
                continue

            changes = self._check_fields(product_changes(update))
            if changes.get("name") and changes["name"] != product.name:
                await self._ensure_unique_name(changes["name"], exclude_id=product.id)
            for field, value in changes.items():
                setattr(product, field, value)

            touched.append(product)
            diffs[str(product.id)] = changes

        await self.db.commit()

        for product in touched:
            await self._publish(admin, AuditAction.UPDATE, product.id, diffs[str(product.id)], context)
        return [await self.get_product(product.id) for product in touched]
