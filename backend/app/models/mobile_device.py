from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class MobileDevice(Base):
    """Device registered by the mobile apps for push and biometric login"""
    __tablename__ = "mobile_devices"
    __table_args__ = (
        UniqueConstraint("user_id", "device_id", name="uq_mobile_device_user_device"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    device_id = Column(String(128), nullable=False)
    platform = Column(String(20), nullable=False)  # ios, android
    device_name = Column(String(100), nullable=True)
    app_version = Column(String(20), nullable=True)
    push_token = Column(String(500), nullable=True)
    biometric_enabled = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)

    registered_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_seen_at = Column(DateTime, default=datetime.utcnow, nullable=False)
