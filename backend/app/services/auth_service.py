"""
Authentication Service
Login, token refresh and password change shared by the web and mobile routers
"""

from datetime import datetime
from typing import Dict

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError, AuthorizationError, InvalidCredentialsError
from app.core.logging_config import logger
from app.core.security import create_token_pair, decode_token, get_password_hash, verify_password
from app.models.user import User


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def authenticate(self, email: str, password: str) -> User:
        result = await self.db.execute(select(User).where(func.lower(User.email) == email.lower()))
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.hashed_password):
            logger.log_auth_event("login", success=False, user_email=email, reason="invalid_credentials")
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.log_auth_event("login", success=False, user_email=email, reason="inactive")
            raise AuthorizationError("User account is inactive")

        user.last_login = datetime.utcnow()
        await self.db.commit()

        logger.log_auth_event("login", success=True, user_email=user.email)
        return user

    async def login(self, email: str, password: str) -> Dict[str, object]:
        user = await self.authenticate(email, password)
        return {**create_token_pair(user), "user": user}

    async def refresh(self, refresh_token: str) -> Dict[str, object]:
        payload = decode_token(refresh_token)
        if payload.get("type") != "refresh":
            raise AuthenticationError("Invalid token type")

        user = await self.db.get(User, payload.get("sub"))
        if not user:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthorizationError("User account is inactive")

        return {**create_token_pair(user), "user": user}

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.hashed_password):
            logger.log_auth_event("password_change", success=False, user_email=user.email)
            raise AuthenticationError("Current password is incorrect")

        user.hashed_password = get_password_hash(new_password)
        await self.db.commit()
        logger.log_auth_event("password_change", success=True, user_email=user.email)


def get_auth_service(db: AsyncSession) -> AuthService:
    return AuthService(db)
