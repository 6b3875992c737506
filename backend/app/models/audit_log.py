from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON, Enum as SQLEnum
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class AuditSeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AuditAction(str, enum.Enum):
    DATA_CREATED = "data_created"
    DATA_UPDATED = "data_updated"
    DATA_DELETED = "data_deleted"
    ACCESS_GRANTED = "access_granted"
    STATUS_CHANGED = "status_changed"


class AuditLog(Base):
    """Audit trail for state-changing admin operations"""
    __tablename__ = "audit_logs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=True, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    action = Column(SQLEnum(AuditAction), nullable=False)
    resource = Column(String(50), nullable=False)  # e.g. 'department', 'staff', 'student'
    resource_id = Column(GUID, nullable=True)
    severity = Column(SQLEnum(AuditSeverity), default=AuditSeverity.LOW, nullable=False)

    # Sanitized snapshot of the change (sensitive keys redacted)
    details = Column(JSON, nullable=True)

    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog {self.action.value} {self.resource} by {self.user_id}>"
