"""
School (tenant) model
"""

from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, JSON
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class SchoolType(str, enum.Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    HIGHER_SECONDARY = "higher_secondary"
    K12 = "k12"
    INTERNATIONAL = "international"


class SchoolStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING = "pending"


class SubscriptionPlan(str, enum.Enum):
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"
    ENTERPRISE = "enterprise"


class School(Base):
    """A tenant: every other domain row hangs off a school"""
    __tablename__ = "schools"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    code = Column(String(50), unique=True, nullable=False, index=True)
    type = Column(SQLEnum(SchoolType), default=SchoolType.K12, nullable=False)
    status = Column(SQLEnum(SchoolStatus), default=SchoolStatus.ACTIVE, nullable=False)

    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)
    principal_name = Column(String(255), nullable=True)

    subscription_plan = Column(SQLEnum(SubscriptionPlan), default=SubscriptionPlan.BASIC, nullable=False)
    max_students = Column(Integer, default=1000, nullable=False)
    max_staff = Column(Integer, default=100, nullable=False)

    # Emergency numbers, timezone, grading overrides...
    settings = Column(JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<School {self.code}: {self.name}>"
