"""
User service layer
Profile reads and edits plus admin account management
"""

from typing import Any, Dict, Optional
from decimal import Decimal
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import uuid
import logging

from shopfront.api.auth.schemas import UserResponse
from shopfront.core.event_bus import AdminActionEvent, event_bus
from shopfront.core.exceptions import NotFoundException, ForbiddenException, ValidationException
from shopfront.core.security import Principal
from shopfront.models import User, Order, AuditAction, AuditEntity
from shopfront.utils.dependencies import RequestContext
from shopfront.utils.pagination import paginate
from shopfront.utils.validators import validate_role, clean_text
from .schemas import UserDetailResponse

logger = logging.getLogger(__name__)

class UserService:
    """Account service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_user(self, user_id: uuid.UUID) -> User:
        user = await self.db.get(User, user_id, populate_existing=True)
        if not user:
            raise NotFoundException("User not found")
        return user

    @staticmethod
    def _check_access(principal: Principal, user_id: uuid.UUID) -> None:
        if not principal.owns(user_id) and not principal.is_admin:
            raise ForbiddenException("Access denied")

    async def get_profile(self, principal: Principal, user_id: uuid.UUID) -> UserResponse:
        """Self or admin"""
        self._check_access(principal, user_id)
        return UserResponse.model_validate(await self._get_user(user_id))

    async def update_profile(
        self,
        principal: Principal,
        user_id: uuid.UUID,
        name: Optional[str] = None,
        phone: Optional[str] = None
    ) -> UserResponse:
        self._check_access(principal, user_id)
        user = await self._get_user(user_id)

        if name is not None:
            user.name = clean_text(name)
        if phone is not None:
            user.phone = phone

        await self.db.commit()
        return UserResponse.model_validate(await self._get_user(user_id))

    # Admin operations

    async def _publish(
        self,
        admin: Principal,
        user: User,
        changes: Dict[str, Any],
        context: Optional[RequestContext]
    ) -> None:
        context = context or RequestContext()
        await event_bus.publish(
            AdminActionEvent(
                admin_id=admin.user_id,
                action=AuditAction.UPDATE.value,
                entity=AuditEntity.USER.value,
                entity_id=user.id,
                changes=changes,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
            )
        )

    async def list_users(
        self,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 10
    ) -> Dict[str, Any]:
        stmt = select(User)
        if role:
            checked = validate_role(role)
            if not checked:
                raise ValidationException(checked.error, field=checked.field)
            stmt = stmt.where(User.role == checked.value)
        if is_active is not None:
            stmt = stmt.where(User.is_active == is_active)

        stmt = stmt.order_by(User.created_at.desc())
        result = await paginate(self.db, stmt, page, limit)
        return {
            "users": [UserResponse.model_validate(u) for u in result["items"]],
            "pagination": result["pagination"],
        }

    async def get_user_detail(self, user_id: uuid.UUID) -> UserDetailResponse:
        """User with order count and total spent"""
        user = await self._get_user(user_id)
        row = (await self.db.execute(
            select(func.count(Order.id), func.coalesce(func.sum(Order.total), 0))
            .where(Order.user_id == user_id)
        )).one()

        detail = UserDetailResponse.model_validate(user)
        detail.total_orders = row[0]
        detail.total_spent = Decimal(str(row[1] or 0))
        return detail

    async def change_role(
        self,
        admin: Principal,
        user_id: uuid.UUID,
        role: str,
        context: Optional[RequestContext] = None
    ) -> UserResponse:
        checked = validate_role(role)
        if not checked:
            raise ValidationException(checked.error, field=checked.field)

        user = await self._get_user(user_id)
        previous = user.role
        user.role = checked.value
        await self.db.commit()

        logger.info(f"Admin {admin.user_id} set role of {user.id} to {user.role.value}")
        await self._publish(admin, user, {"role": {"from": previous.value, "to": user.role.value}}, context)
        return UserResponse.model_validate(user)

    async def toggle_active(
        self,
        admin: Principal,
        user_id: uuid.UUID,
        context: Optional[RequestContext] = None
    ) -> UserResponse:
        user = await self._get_user(user_id)
        user.is_active = not user.is_active
        await self.db.commit()

        await self._publish(
            admin, user, {"is_active": {"from": not user.is_active, "to": user.is_active}}, context
        )
        return UserResponse.model_validate(user)
