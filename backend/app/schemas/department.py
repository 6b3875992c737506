"""
Department Schemas - Pydantic models for department management
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime

from app.models.staff import DepartmentType, StaffType, StaffStatus


class DepartmentCreate(BaseModel):
    type: DepartmentType
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)


class DepartmentUpdate(BaseModel):
    type: Optional[DepartmentType] = None
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)


class DepartmentStaffMember(BaseModel):
    id: str
    employee_id: str
    first_name: str
    last_name: str
    email: str
    staff_type: StaffType
    status: StaffStatus
    designation: Optional[str] = None

    class Config:
        from_attributes = True


class DepartmentResponse(BaseModel):
    id: str
    school_id: str
    type: DepartmentType
    name: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DepartmentWithStaffResponse(DepartmentResponse):
    staff_members: List[DepartmentStaffMember] = []


class DepartmentStaffCount(BaseModel):
    department_id: str
    department_name: str
    staff_count: int


class DepartmentStatistics(BaseModel):
    total_departments: int
    departments_by_type: Dict[str, int]
    average_staff_per_department: float
    departments_with_most_staff: List[DepartmentStaffCount]
