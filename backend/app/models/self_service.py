"""
Student Self-Service Models
- Leave requests, document requests (certificates, transcripts), general service requests
"""

from sqlalchemy import Column, String, DateTime, Date, Enum as SQLEnum, Integer, Text, ForeignKey, JSON
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class LeaveType(str, enum.Enum):
    SICK = "sick"
    PERSONAL = "personal"
    FAMILY = "family"
    MEDICAL = "medical"
    OTHER = "other"


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class DocumentType(str, enum.Enum):
    BONAFIDE_CERTIFICATE = "bonafide_certificate"
    TRANSCRIPT = "transcript"
    TRANSFER_CERTIFICATE = "transfer_certificate"
    CHARACTER_CERTIFICATE = "character_certificate"
    ID_CARD = "id_card"
    REPORT_CARD = "report_card"


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type = Column(SQLEnum(LeaveType), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)
    attachments = Column(JSON, default=list)
    status = Column(SQLEnum(RequestStatus), default=RequestStatus.PENDING, nullable=False)
    reviewed_by = Column(GUID, nullable=True)
    review_comments = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    reviewed_at = Column(DateTime, nullable=True)

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1


class DocumentRequest(Base):
    __tablename__ = "document_requests"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    document_type = Column(SQLEnum(DocumentType), nullable=False)
    purpose = Column(String(255), nullable=False)
    copies = Column(Integer, default=1, nullable=False)
    delivery_method = Column(String(30), default="pickup")  # pickup, email, post
    status = Column(SQLEnum(RequestStatus), default=RequestStatus.PENDING, nullable=False)
    reference_number = Column(String(20), unique=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)


class ServiceRequest(Base):
    __tablename__ = "service_requests"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String(50), nullable=False)  # it_support, facilities, hostel, transport, other
    subject = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(String(20), default="normal")
    status = Column(SQLEnum(RequestStatus), default=RequestStatus.PENDING, nullable=False)
    reference_number = Column(String(20), unique=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
