"""
Authentication API routes
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shopfront.core.database import get_db
from shopfront.core.security import Principal, get_current_principal
from shopfront.schemas.base import success_response
from .schemas import SignupRequest, LoginRequest, RefreshTokenRequest, UpdatePasswordRequest
from .services import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest,
    db: AsyncSession = Depends(get_db)
):
    """Register a new customer account"""
    result = await AuthService(db).signup(
        name=request.name,
        email=request.email,
        password=request.password,
        password_confirm=request.password_confirm
    )
    return success_response(result, "User registered successfully")

@router.post("/login")
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Login with email and password"""
    result = await AuthService(db).login(request.email, request.password)
    return success_response(result, "Login successful")

@router.post("/refresh-token")
async def refresh_token(
    request: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """Refresh access token"""
    tokens = await AuthService(db).refresh_tokens(request.refresh_token)
    return success_response(tokens, "Token refreshed successfully")

@router.get("/me")
async def get_me(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Get current user information"""
    user = await AuthService(db).me(principal)
    return success_response(user, "User retrieved")

@router.put("/update-password")
async def update_password(
    request: UpdatePasswordRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    tokens = await AuthService(db).update_password(
        principal, request.current_password, request.new_password
    )
    return success_response(tokens, "Password updated successfully")
