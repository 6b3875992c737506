"""
Student Wellness Models
- Daily check-ins (mood, stress, energy, sleep)
- Personal wellness goals
- Counseling requests (wellness and career)
"""

from sqlalchemy import Column, String, DateTime, Date, Enum as SQLEnum, Integer, Text, ForeignKey, Float, JSON
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class MoodLevel(str, enum.Enum):
    VERY_HAPPY = "very_happy"
    HAPPY = "happy"
    NEUTRAL = "neutral"
    SAD = "sad"
    VERY_SAD = "very_sad"
    ANXIOUS = "anxious"
    STRESSED = "stressed"
    ANGRY = "angry"


class WellnessStatus(str, enum.Enum):
    GOOD = "good"
    FAIR = "fair"
    CONCERNING = "concerning"


class PhysicalActivity(str, enum.Enum):
    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    INTENSE = "intense"


class GoalStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class CounselingCategory(str, enum.Enum):
    WELLNESS = "wellness"
    CAREER = "career"


class CounselingStatus(str, enum.Enum):
    REQUESTED = "requested"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WellnessRecord(Base):
    """One daily check-in. Scores are 1..10; stress is 'higher is worse'."""
    __tablename__ = "wellness_records"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    record_date = Column(Date, nullable=False, index=True)
    mood_level = Column(SQLEnum(MoodLevel), nullable=False)
    mood_score = Column(Integer, nullable=False)
    stress_level = Column(Integer, nullable=False)
    energy_level = Column(Integer, nullable=False)
    sleep_quality = Column(Integer, nullable=True)
    sleep_hours = Column(Float, nullable=True)
    physical_activity = Column(SQLEnum(PhysicalActivity), nullable=True)
    physical_activity_hours = Column(Float, default=0.0)
    notes = Column(Text, nullable=True)
    triggers = Column(JSON, default=list)
    overall_status = Column(SQLEnum(WellnessStatus), nullable=False)

    recorded_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)


class WellnessGoal(Base):
    __tablename__ = "wellness_goals"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    category = Column(String(50), nullable=False)  # sleep, stress, activity, mood, nutrition
    target_value = Column(Float, nullable=True)
    current_value = Column(Float, default=0.0)
    unit = Column(String(30), nullable=True)
    target_date = Column(Date, nullable=True)
    status = Column(SQLEnum(GoalStatus), default=GoalStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CounselingRequest(Base):
    """Student request for a counselor, from the wellness or career portal"""
    __tablename__ = "counseling_requests"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    school_id = Column(GUID, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(SQLEnum(CounselingCategory), nullable=False)
    topic = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    urgency = Column(String(20), default="normal")  # low, normal, high, urgent
    preferred_times = Column(JSON, default=list)
    session_type = Column(String(30), default="in_person")  # in_person, virtual, phone
    status = Column(SQLEnum(CounselingStatus), default=CounselingStatus.REQUESTED, nullable=False)
    counselor_name = Column(String(200), nullable=True)
    scheduled_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
