from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, JSON
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class Notification(Base):
    """In-app notification for a single user (student, parent or staff)"""
    __tablename__ = "notifications"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=True, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String(30), nullable=False, default="general")  # transport, academic, fee, library, emergency
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, default=dict)
    is_read = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    read_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<Notification {self.category}: {self.title}>"
