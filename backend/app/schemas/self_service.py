"""
Self-Service Schemas - student profile edits, leave, documents, service requests
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import date

from app.models.self_service import LeaveType, RequestStatus, DocumentType
from app.schemas.student import EmergencyContact


class StudentProfileUpdate(BaseModel):
    """Contact details a student may change themself"""
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=1000)
    emergency_contact: Optional[EmergencyContact] = None


class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=3, max_length=2000)
    attachments: List[str] = Field(default_factory=list)


class LeaveReview(BaseModel):
    status: RequestStatus
    comments: Optional[str] = Field(None, max_length=1000)


class DocumentRequestCreate(BaseModel):
    document_type: DocumentType
    purpose: str = Field(..., min_length=3, max_length=255)
    copies: int = Field(default=1, ge=1, le=10)
    delivery_method: str = Field(default="pickup", pattern=r'^(pickup|email|post)$')


class ServiceRequestCreate(BaseModel):
    category: str = Field(..., pattern=r'^(it_support|facilities|hostel|transport|other)$')
    subject: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=3, max_length=5000)
    priority: str = Field(default="normal", pattern=r'^(low|normal|high|urgent)$')
