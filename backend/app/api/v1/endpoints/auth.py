from fastapi import APIRouter, Depends, status, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.rate_limiter import auth_rate_limit
from app.models.user import User
from app.schemas.auth import (
    UserLogin,
    RefreshRequest,
    PasswordChange,
    LoginResponse,
    UserResponse,
)
from app.modules.auth.dependencies import get_current_user
from app.services.auth_service import AuthService


router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@auth_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login with email and password (rate limited: 5/min)"""
    return await AuthService(db).login(credentials.email, credentials.password)


@router.post("/refresh", response_model=LoginResponse)
async def refresh_token(
    data: RefreshRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange a refresh token for a new token pair"""
    return await AuthService(db).refresh(data.refresh_token)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user"""
    return current_user


@router.post("/change-password", status_code=status.HTTP_200_OK)
async def change_password(
    data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change the current user's password"""
    await AuthService(db).change_password(current_user, data.current_password, data.new_password)
    return {"success": True, "message": "Password changed successfully"}
