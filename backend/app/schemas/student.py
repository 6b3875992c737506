"""
Student Schemas - enrollment administration and parent links
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any
from datetime import date, datetime

from app.models.student import Gender, StudentStatus, TransferType, TransferReason, TransferStatus


class EmergencyContact(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    relationship: Optional[str] = None
    phone: str = Field(..., max_length=20)


class StudentCreate(BaseModel):
    """Enroll a student; a password also creates the student's login (email required)"""
    admission_number: str = Field(..., min_length=1, max_length=30)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    grade_level: str = Field(..., min_length=1, max_length=20)
    section: Optional[str] = Field(None, max_length=10)
    roll_number: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    blood_group: Optional[str] = Field(None, max_length=5)
    medical_info: Dict[str, Any] = Field(default_factory=dict)
    emergency_contact: Optional[EmergencyContact] = None
    enrollment_date: Optional[date] = None
    password: Optional[str] = Field(None, min_length=8)


class StudentUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    grade_level: Optional[str] = Field(None, min_length=1, max_length=20)
    section: Optional[str] = Field(None, max_length=10)
    roll_number: Optional[str] = Field(None, max_length=20)
    status: Optional[StudentStatus] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    blood_group: Optional[str] = Field(None, max_length=5)
    medical_info: Optional[Dict[str, Any]] = None
    emergency_contact: Optional[EmergencyContact] = None


class StudentResponse(BaseModel):
    id: str
    school_id: str
    user_id: Optional[str] = None
    admission_number: str
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    grade_level: str
    section: Optional[str] = None
    roll_number: Optional[str] = None
    status: StudentStatus
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    blood_group: Optional[str] = None
    medical_info: Optional[Dict[str, Any]] = None
    emergency_contact: Optional[Dict[str, Any]] = None
    enrollment_date: Optional[date] = None
    graduation_year: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StudentListResponse(BaseModel):
    items: List[StudentResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class ParentLinkCreate(BaseModel):
    """Link a parent account; the account is created when the email is new"""
    email: EmailStr
    full_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    password: Optional[str] = Field(None, min_length=8)
    relationship_type: str = Field(default="guardian", max_length=30)
    is_primary: bool = False


class ParentLinkResponse(BaseModel):
    id: str
    parent_user_id: str
    student_id: str
    relationship_type: str
    is_primary: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PromotionRequest(BaseModel):
    """Move active students of one grade up; the target defaults to the next numbered grade"""
    grade_level: str = Field(..., min_length=1, max_length=20)
    section: Optional[str] = Field(None, max_length=10)
    student_ids: Optional[List[str]] = Field(None, min_length=1)
    target_grade_level: Optional[str] = Field(None, min_length=1, max_length=20)
    target_section: Optional[str] = Field(None, max_length=10)


class PromotionResult(BaseModel):
    from_grade: str
    to_grade: str
    promoted: int
    student_ids: List[str]


class GraduationRequest(BaseModel):
    """Graduate the listed students, or every active student of the final grade"""
    student_ids: Optional[List[str]] = Field(None, min_length=1)
    graduation_year: Optional[int] = Field(None, ge=1900, le=3000)


class LifecycleError(BaseModel):
    student_id: str
    reason: str


class GraduationResult(BaseModel):
    graduated: int
    student_ids: List[str]
    errors: List[LifecycleError]


class TransferCreate(BaseModel):
    transfer_type: TransferType = TransferType.INTER_SCHOOL
    reason: TransferReason
    reason_details: Optional[str] = Field(None, max_length=2000)
    to_school_name: str = Field(..., min_length=1, max_length=255)
    transfer_date: Optional[date] = None


class TransferReview(BaseModel):
    status: TransferStatus
    notes: Optional[str] = Field(None, max_length=1000)


class TransferResponse(BaseModel):
    id: str
    student_id: str
    transfer_type: TransferType
    reason: TransferReason
    reason_details: Optional[str] = None
    to_school_name: str
    from_grade: str
    from_section: Optional[str] = None
    transfer_date: Optional[date] = None
    status: TransferStatus
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
