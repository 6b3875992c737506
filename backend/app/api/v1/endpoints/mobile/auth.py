"""
Mobile authentication: login with device registration, biometric re-login
and device logout.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.rate_limiter import auth_rate_limit
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.auth import LoginResponse, PasswordChange, RefreshRequest
from app.schemas.mobile import (
    BiometricVerify,
    DeviceLogout,
    DeviceRegistration,
    MobileLogin,
    MobileLoginResponse,
)
from app.services.auth_service import AuthService
from app.services.mobile_service import MobileService, serialize_device


router = APIRouter()


@router.post("/login", response_model=MobileLoginResponse)
@auth_rate_limit()
async def mobile_login(
    request: Request,
    credentials: MobileLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login from the mobile app, registering the device when provided (rate limited: 5/min)"""
    result = await AuthService(db).login(credentials.email, credentials.password)
    device = None
    if credentials.device:
        device = await MobileService(db).register_device(result["user"], credentials.device.model_dump())
    return {**result, "device": serialize_device(device) if device else None}


@router.post("/refresh", response_model=LoginResponse)
async def mobile_refresh(
    data: RefreshRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange a refresh token for a new token pair"""
    return await AuthService(db).refresh(data.refresh_token)


@router.post("/logout")
async def mobile_logout(
    data: DeviceLogout,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Deactivate the device and drop its push token"""
    await MobileService(db).deactivate_device(current_user, data.device_id)
    return {"success": True, "message": "Logged out"}


@router.post("/register-device", status_code=status.HTTP_201_CREATED)
async def register_device(
    data: DeviceRegistration,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Register a device for push notifications and biometric login"""
    device = await MobileService(db).register_device(current_user, data.model_dump())
    return serialize_device(device)


@router.post("/verify-biometric", response_model=LoginResponse)
@auth_rate_limit()
async def verify_biometric(
    request: Request,
    data: BiometricVerify,
    db: AsyncSession = Depends(get_db)
):
    """Issue tokens for a device enrolled in biometric login"""
    return await MobileService(db).verify_biometric(data.user_id, data.device_id)


@router.post("/change-password")
async def change_password(
    data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Change the current user's password"""
    await AuthService(db).change_password(current_user, data.current_password, data.new_password)
    return {"success": True, "message": "Password changed successfully"}
