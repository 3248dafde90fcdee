"""
Discount service for managing promotions
Discounts are stored and toggled by admins, checkout never applies them
"""

from typing import Any, Dict, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import uuid
import logging

from shopfront.core.event_bus import AdminActionEvent, event_bus
from shopfront.core.exceptions import NotFoundException, ValidationException, DuplicateResourceException
from shopfront.core.security import Principal
from shopfront.models import Discount, DiscountType, AuditAction, AuditEntity
from shopfront.utils.dependencies import RequestContext
from shopfront.utils.pagination import paginate
from shopfront.utils.validators import validate_discount_type, validate_required, clean_text

logger = logging.getLogger(__name__)

class DiscountService:
    """
    Service for discount CRUD
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_discount(self, discount_id: uuid.UUID) -> Discount:
        discount = await self.db.get(Discount, discount_id, populate_existing=True)
        if not discount:
            raise NotFoundException("Discount not found")
        return discount

    @staticmethod
    def _check(changes: Dict[str, Any], current: Optional[Discount] = None) -> Dict[str, Any]:
        if "discount_type" in changes:
            checked = validate_discount_type(changes["discount_type"])
            if not checked:
                raise ValidationException(checked.error, field=checked.field)
            changes["discount_type"] = checked.value.value

        discount_type = changes.get("discount_type") or (current.discount_type if current else None)
        value = changes.get("discount_value")
        if value is not None and discount_type == DiscountType.PERCENTAGE.value and value > 100:
            raise ValidationException("Percentage discount cannot exceed 100", field="discount_value")

        start = changes.get("start_date") or (current.start_date if current else None)
        end = changes.get("end_date") or (current.end_date if current else None)
        if start and end and _naive(end) <= _naive(start):
            raise ValidationException("End date must be after start date", field="end_date")

        if changes.get("coupon_code"):
            changes["coupon_code"] = changes["coupon_code"].strip().upper()
        for field in ("name", "description"):
            if changes.get(field) is not None:
                changes[field] = clean_text(changes[field])
        if changes.get("applicable_products") is not None:
            changes["applicable_products"] = [str(p) for p in changes["applicable_products"]]
        return changes

    async def _publish(
        self,
        admin: Principal,
        action: AuditAction,
        discount_id: uuid.UUID,
        changes: Dict[str, Any],
        context: Optional[RequestContext]
    ) -> None:
        context = context or RequestContext()
        await event_bus.publish(
            AdminActionEvent(
                admin_id=admin.user_id,
                action=action.value,
                entity=AuditEntity.DISCOUNT.value,
                entity_id=discount_id,
                changes=changes,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
            )
        )

    async def _commit(self, coupon_code: Optional[str]) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceException("Discount", "coupon_code", coupon_code or "")

    async def list_discounts(
        self,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 10
    ) -> Dict[str, Any]:
        stmt = select(Discount)
        if is_active is not None:
            stmt = stmt.where(Discount.is_active == is_active)
        stmt = stmt.order_by(Discount.created_at.desc())

        result = await paginate(self.db, stmt, page, limit)
        return {
            "discounts": [self.to_dict(d) for d in result["items"]],
            "pagination": result["pagination"],
        }

    @staticmethod
    def to_dict(discount: Discount) -> Dict[str, Any]:
        data = discount.to_dict()
        data["is_valid"] = discount.is_valid()
        return data

    async def create_discount(
        self,
        admin: Principal,
        data: Dict[str, Any],
        context: Optional[RequestContext] = None
    ) -> Dict[str, Any]:
        """
        Create a discount

        Raises:
            ValidationException: If required fields are missing or inconsistent
            DuplicateResourceException: If the coupon code is taken
        """
        changes = {k: v for k, v in data.items() if v is not None}
        checked = validate_required(
            name=changes.get("name"),
            discount_type=changes.get("discount_type"),
            discount_value=changes.get("discount_value"),
            start_date=changes.get("start_date"),
            end_date=changes.get("end_date"),
        )
        if not checked:
            raise ValidationException(checked.error, field=checked.field)
        changes = self._check(changes)

        if changes.get("coupon_code"):
            taken = await self.db.scalar(
                select(Discount.id).where(Discount.coupon_code == changes["coupon_code"])
            )
            if taken:
                raise DuplicateResourceException("Discount", "coupon_code", changes["coupon_code"])

        discount = Discount(created_by=admin.user_id, **changes)
        self.db.add(discount)
        await self._commit(changes.get("coupon_code"))

        logger.info(f"Discount {discount.id} created by {admin.user_id}")
        await self._publish(admin, AuditAction.DISCOUNT, discount.id, {"created": discount.name}, context)
        return self.to_dict(await self._get_discount(discount.id))

    async def update_discount(
        self,
        admin: Principal,
        discount_id: uuid.UUID,
        data: Dict[str, Any],
        context: Optional[RequestContext] = None
    ) -> Dict[str, Any]:
        discount = await self._get_discount(discount_id)
        changes = self._check({k: v for k, v in data.items() if v is not None}, current=discount)

        for field, value in changes.items():
            setattr(discount, field, value)
        await self._commit(changes.get("coupon_code"))

        await self._publish(admin, AuditAction.DISCOUNT, discount.id, {"updated": changes}, context)
        return self.to_dict(await self._get_discount(discount.id))

    async def delete_discount(
        self,
        admin: Principal,
        discount_id: uuid.UUID,
        context: Optional[RequestContext] = None
    ) -> None:
        discount = await self._get_discount(discount_id)
        name = discount.name

        await self.db.delete(discount)
        await self.db.commit()

        await self._publish(admin, AuditAction.DELETE, discount_id, {"name": name}, context)

    async def toggle_active(
        self,
        admin: Principal,
        discount_id: uuid.UUID,
        context: Optional[RequestContext] = None
    ) -> Dict[str, Any]:
        discount = await self._get_discount(discount_id)
        discount.is_active = not discount.is_active
        await self.db.commit()

        await self._publish(
            admin, AuditAction.DISCOUNT, discount.id,
            {"is_active": {"from": not discount.is_active, "to": discount.is_active}}, context
        )
        return self.to_dict(discount)

def _naive(value):
    """Compare datetimes whether or not the store kept their zone"""
    return value.replace(tzinfo=None) if value.tzinfo else value
