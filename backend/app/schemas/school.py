"""
School Schemas - tenant administration
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any, List
from datetime import datetime

from app.models.school import SchoolType, SchoolStatus, SubscriptionPlan


class SchoolCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    code: str = Field(..., min_length=2, max_length=50, pattern=r'^[A-Za-z0-9_-]+$')
    type: SchoolType = SchoolType.K12
    status: SchoolStatus = SchoolStatus.ACTIVE
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    principal_name: Optional[str] = None
    subscription_plan: SubscriptionPlan = SubscriptionPlan.BASIC
    max_students: int = Field(default=1000, ge=1)
    max_staff: int = Field(default=100, ge=1)
    settings: Dict[str, Any] = Field(default_factory=dict)


class SchoolUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    code: Optional[str] = Field(None, min_length=2, max_length=50, pattern=r'^[A-Za-z0-9_-]+$')
    type: Optional[SchoolType] = None
    status: Optional[SchoolStatus] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    principal_name: Optional[str] = None
    subscription_plan: Optional[SubscriptionPlan] = None
    max_students: Optional[int] = Field(None, ge=1)
    max_staff: Optional[int] = Field(None, ge=1)
    settings: Optional[Dict[str, Any]] = None


class SchoolResponse(BaseModel):
    id: str
    name: str
    code: str
    type: SchoolType
    status: SchoolStatus
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    principal_name: Optional[str] = None
    subscription_plan: SubscriptionPlan
    max_students: int
    max_staff: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SchoolListResponse(BaseModel):
    items: List[SchoolResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class SchoolStatistics(BaseModel):
    school_id: str
    total_students: int
    active_students: int
    total_staff: int
    active_staff: int
    total_departments: int
    student_capacity_utilization: float
    staff_capacity_utilization: float


class SchoolAdminCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=2, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
