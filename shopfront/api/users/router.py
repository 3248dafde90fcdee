"""User profile routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from shopfront.core.database import get_db
from shopfront.core.security import Principal, get_current_principal
from shopfront.schemas.base import success_response
from .schemas import UserUpdate
from .services import UserService

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/{user_id}")
async def get_user(
    user_id: uuid.UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get user profile"""
    user = await UserService(db).get_profile(principal, user_id)
    return success_response(user, "User retrieved")

@router.put("/{user_id}")
async def update_user(
    user_id: uuid.UUID,
    update_data: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Update user profile"""
    user = await UserService(db).update_profile(
        principal, user_id, name=update_data.name, phone=update_data.phone
    )
    return success_response(user, "Profile updated")
