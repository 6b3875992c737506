"""
Activity Tracking Models
Track student portal activity (wellness check-ins, career actions, library use)
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON, Enum as SQLEnum
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class ActivityType(str, enum.Enum):
    """Types of trackable portal activities"""
    LOGIN = "login"
    WELLNESS_CHECKIN = "wellness_checkin"
    COUNSELING_REQUEST = "counseling_request"
    CAREER_PROFILE = "career_profile"
    CAREER_ASSESSMENT = "career_assessment"
    CAREER_GOAL = "career_goal"
    CAREER_RESOURCE = "career_resource"
    COLLEGE_FAVORITE = "college_favorite"
    OPPORTUNITY_APPLICATION = "opportunity_application"
    ASSIGNMENT_SUBMIT = "assignment_submit"
    FEE_PAYMENT = "fee_payment"
    LIBRARY = "library"
    EMERGENCY = "emergency"
    SELF_SERVICE = "self_service"


class StudentActivity(Base):
    """Student activity tracking"""
    __tablename__ = "student_activities"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    activity_type = Column(SQLEnum(ActivityType), nullable=False, index=True)
    description = Column(Text, nullable=False)

    resource_type = Column(String(50), nullable=True)
    resource_id = Column(String(50), nullable=True)
    details = Column(JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<StudentActivity {self.activity_type.value} {self.student_id}>"
