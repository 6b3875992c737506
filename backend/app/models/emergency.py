"""
Emergency Models
- Emergency reports with routing (department, priority) and a status timeline
- Student safety check-ins
"""

from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Text, ForeignKey, JSON
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class EmergencyType(str, enum.Enum):
    MEDICAL = "medical"
    SAFETY = "safety"
    HARASSMENT = "harassment"
    BULLYING = "bullying"
    ACCIDENT = "accident"
    FIRE = "fire"
    SECURITY = "security"
    MENTAL_HEALTH = "mental_health"
    TRANSPORT = "transport"
    OTHER = "other"


class EmergencySeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EmergencyStatus(str, enum.Enum):
    REPORTED = "reported"
    ACKNOWLEDGED = "acknowledged"
    RESPONDING = "responding"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class SafetyStatus(str, enum.Enum):
    SAFE = "safe"
    NEED_ASSISTANCE = "need_assistance"
    INJURED = "injured"
    UNKNOWN = "unknown"


class EmergencyReport(Base):
    __tablename__ = "emergency_reports"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    reported_by_user_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    tracking_number = Column(String(20), unique=True, nullable=False, index=True)
    emergency_type = Column(SQLEnum(EmergencyType), nullable=False)
    severity = Column(SQLEnum(EmergencySeverity), default=EmergencySeverity.MEDIUM, nullable=False)
    priority = Column(String(20), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(255), nullable=True)
    contact_number = Column(String(20), nullable=True)
    witnesses = Column(JSON, default=list)
    injured_parties = Column(JSON, default=list)
    immediate_actions = Column(Text, nullable=True)
    attachments = Column(JSON, default=list)

    assigned_department = Column(String(100), nullable=False)
    primary_contact = Column(String(100), nullable=False)
    estimated_response_time = Column(String(30), nullable=False)
    status = Column(SQLEnum(EmergencyStatus), default=EmergencyStatus.REPORTED, nullable=False, index=True)
    timeline = Column(JSON, default=list)  # [{status, at, note, by}]

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    resolved_at = Column(DateTime, nullable=True)


class SafetyCheck(Base):
    __tablename__ = "safety_checks"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SQLEnum(SafetyStatus), nullable=False)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    needs = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
