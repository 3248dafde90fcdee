"""
Authentication service layer
Handles signup, login and token refresh
"""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from shopfront.core.exceptions import (
    ValidationException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    DuplicateResourceException,
)
from shopfront.core.security import Principal, SecurityUtils, REFRESH_TOKEN
from shopfront.models import User, UserRole
from shopfront.models.base import utcnow
from shopfront.utils.validators import validate_password
from .schemas import AuthResponse, TokenResponse, UserResponse

logger = logging.getLogger(__name__)

class AuthService:
    """Authentication service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def generate_tokens(user: User) -> TokenResponse:
        return TokenResponse(**SecurityUtils.create_token_pair(user.id, user.role.value, user.email))

    def _auth_response(self, user: User) -> AuthResponse:
        return AuthResponse(user=UserResponse.model_validate(user), tokens=self.generate_tokens(user))

    async def _find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def signup(
        self,
        name: str,
        email: str,
        password: str,
        password_confirm: Optional[str] = None
    ) -> AuthResponse:
        """
        Register a customer account

        Raises:
            ValidationException: If the password is too short or unconfirmed
            DuplicateResourceException: If the email is registered
        """
        checked = validate_password(password)
        if not checked:
            raise ValidationException(checked.error, field=checked.field)
        if password_confirm is not None and password_confirm != password:
            raise ValidationException("Passwords don't match", field="password_confirm")

        if await self._find_by_email(email):
            raise DuplicateResourceException("User", "email", email)

        user = User(
            name=name,
            email=email,
            password_hash=SecurityUtils.hash_password(password),
            role=UserRole.CUSTOMER,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceException("User", "email", email)

        logger.info(f"New user registered: {user.id}")
        return self._auth_response(user)

    async def login(self, email: str, password: str) -> AuthResponse:
        """
        Raises:
            UnauthorizedException: If the credentials are wrong
            ForbiddenException: If the account is deactivated
        """
        user = await self._find_by_email(email)
        if not user:
            raise UnauthorizedException("Invalid email or password", error_code="INVALID_CREDENTIALS")

        if not user.is_active:
            raise ForbiddenException("Your account has been deactivated", error_code="ACCOUNT_INACTIVE")

        if not SecurityUtils.verify_password(password, user.password_hash):
            raise UnauthorizedException("Invalid email or password", error_code="INVALID_CREDENTIALS")

        user.last_login = utcnow()
        await self.db.commit()

        logger.info(f"User logged in: {user.id}")
        return self._auth_response(user)

    async def refresh_tokens(self, refresh_token: Optional[str]) -> TokenResponse:
        """Exchange a refresh token for a new pair"""
        if not refresh_token:
            raise UnauthorizedException("Refresh token is required")

        payload = SecurityUtils.decode_token(refresh_token, expected_type=REFRESH_TOKEN)
        principal = SecurityUtils.principal_from_payload(payload)

        user = await self.db.get(User, principal.user_id)
        if not user or not user.is_active:
            raise UnauthorizedException("User not found or account inactive")

        return self.generate_tokens(user)

    async def me(self, principal: Principal) -> UserResponse:
        user = await self.db.get(User, principal.user_id)
        if not user:
            raise NotFoundException("User not found")
        return UserResponse.model_validate(user)

    async def update_password(
        self,
        principal: Principal,
        current_password: str,
        new_password: str
    ) -> TokenResponse:
        """Change the caller's password and issue a fresh token pair"""
        user = await self.db.get(User, principal.user_id)
        if not user:
            raise NotFoundException("User not found")

        if not SecurityUtils.verify_password(current_password, user.password_hash):
            raise UnauthorizedException("Incorrect current password", error_code="INVALID_CREDENTIALS")

        checked = validate_password(new_password)
        if not checked:
            raise ValidationException(checked.error, field="new_password")

        user.password_hash = SecurityUtils.hash_password(new_password)
        await self.db.commit()

        logger.info(f"Password updated for user: {user.id}")
        return self.generate_tokens(user)
