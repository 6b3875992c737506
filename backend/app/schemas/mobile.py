"""
Mobile Schemas - device registration and mobile login
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any

from app.schemas.auth import LoginResponse


class DeviceRegistration(BaseModel):
    device_id: str = Field(..., min_length=4, max_length=128)
    platform: str = Field(..., pattern=r'^(ios|android)$')
    device_name: Optional[str] = Field(None, max_length=100)
    app_version: Optional[str] = Field(None, max_length=20)
    push_token: Optional[str] = Field(None, max_length=500)
    biometric_enabled: bool = False


class MobileLogin(BaseModel):
    email: EmailStr
    password: str
    device: Optional[DeviceRegistration] = None


class DeviceLogout(BaseModel):
    device_id: str = Field(..., min_length=4, max_length=128)


class BiometricVerify(BaseModel):
    user_id: str
    device_id: str = Field(..., min_length=4, max_length=128)


class MobileLoginResponse(LoginResponse):
    device: Optional[Dict[str, Any]] = None
