"""
Staff Schemas
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import date, datetime

from app.models.staff import StaffType, StaffStatus, EmploymentType


class StaffCreate(BaseModel):
    """Create a staff member; a password also creates their login account"""
    employee_id: str = Field(..., min_length=1, max_length=20)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)
    staff_type: StaffType = StaffType.TEACHING
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    designation: Optional[str] = Field(None, max_length=100)
    joining_date: Optional[date] = None
    basic_salary: Optional[float] = Field(None, ge=0)
    password: Optional[str] = Field(None, min_length=8)
    is_school_admin: bool = False


class StaffStatusUpdate(BaseModel):
    status: StaffStatus


class StaffResponse(BaseModel):
    id: str
    school_id: str
    user_id: Optional[str] = None
    employee_id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    staff_type: StaffType
    employment_type: EmploymentType
    status: StaffStatus
    designation: Optional[str] = None
    joining_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StaffDetailResponse(StaffResponse):
    departments: List[str] = []


class StaffListResponse(BaseModel):
    items: List[StaffResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool
